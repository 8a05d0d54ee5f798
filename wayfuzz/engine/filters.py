"""Filter chain turning archive records into collectable items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..config import FilterConfig
from .normalizer import DomainNormalizer


@dataclass(slots=True)
class FilterChain:
    """Apply normalisation, exclusion, status and segment rules to a URL.

    The chain holds only the shared, frozen :class:`FilterConfig`, so one
    instance can be used from every worker thread.
    """

    config: FilterConfig

    def apply(
        self,
        url: str,
        normalizer: Callable[[str], str] | str,
        status_code: int | None = None,
    ) -> list[str]:
        """Return the items produced by ``url``; an empty list means dropped.

        ``normalizer`` is either a :class:`DomainNormalizer` or the bare
        domain it should be built for.
        """

        if isinstance(normalizer, str):
            normalizer = DomainNormalizer(normalizer)
        candidate = normalizer(url)
        if not candidate:
            return []
        if self.config.exclude is not None and self.config.exclude.search(candidate):
            return []
        if not self.accepts_status(status_code):
            return []
        if self.config.separate_slash:
            return [piece.strip() for piece in candidate.split("/") if piece.strip()]
        candidate = candidate.strip()
        return [candidate] if candidate else []

    def accepts_status(self, status_code: int | None) -> bool:
        allowed = self.config.status_codes
        if allowed is None:
            return True
        return status_code in allowed


__all__ = ["FilterChain"]
