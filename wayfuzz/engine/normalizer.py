"""Strip scheme, subdomains, domain and port from archived URLs."""

from __future__ import annotations

import re
from functools import lru_cache

_PREFIX_TEMPLATE = r"^https?://([a-zA-Z0-9_-]+\.)*{domain}(:\d+)?"


@lru_cache(maxsize=1024)
def _prefix_pattern(domain: str) -> re.Pattern[str]:
    return re.compile(
        _PREFIX_TEMPLATE.format(domain=re.escape(domain.lower())), re.IGNORECASE
    )


class DomainNormalizer:
    """Normalizer bound to one domain; the prefix pattern is compiled once."""

    __slots__ = ("domain", "_pattern")

    def __init__(self, domain: str) -> None:
        self.domain = domain
        self._pattern = _prefix_pattern(domain)

    def __call__(self, url: str) -> str:
        # Hosts that do not belong to the domain pass through untouched.
        return self._pattern.sub("", url, count=1)


def normalize(url: str, domain: str) -> str:
    """Return ``url`` without its ``scheme://[sub.]domain[:port]`` prefix.

    >>> normalize("https://www.Example.com:8080/foo/bar", "example.com")
    '/foo/bar'
    >>> normalize("http://other.net/x", "example.com")
    'http://other.net/x'
    """

    return DomainNormalizer(domain)(url)


__all__ = ["DomainNormalizer", "normalize"]
