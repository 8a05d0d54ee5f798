"""Deduplicating result collector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .fetcher import TEXT_ERRORS


@dataclass
class CollectResult:
    added: int
    duplicates: int


class ResultCollector:
    """Accumulate batches into a set and emit them in deterministic order.

    Owned by a single consuming thread; no locking.
    """

    def __init__(self) -> None:
        self._items: set[str] = set()
        self.received = 0

    def add(self, batch: Iterable[str]) -> CollectResult:
        added = duplicates = 0
        for item in batch:
            cleaned = item.strip()
            if not cleaned:
                continue
            self.received += 1
            if cleaned in self._items:
                duplicates += 1
            else:
                self._items.add(cleaned)
                added += 1
        return CollectResult(added, duplicates)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def sorted(self) -> list[str]:
        # Byte order of the original input, escaped bytes included.
        return sorted(self._items, key=_byte_key)


def _byte_key(item: str) -> bytes:
    return item.encode("utf-8", TEXT_ERRORS)


__all__ = ["CollectResult", "ResultCollector"]
