"""Exporter Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable


class BaseExporter(ABC):
    """Uniform exporter contract for the final, sorted output."""

    @abstractmethod
    def export(self, item: str) -> None:
        """Write a single output item."""

    def export_many(self, items: Iterable[str]) -> None:
        for item in items:
            self.export(item)

    @abstractmethod
    def flush(self) -> None:
        """Flush buffered data to destination."""

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""

    def __enter__(self) -> "BaseExporter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["BaseExporter"]
