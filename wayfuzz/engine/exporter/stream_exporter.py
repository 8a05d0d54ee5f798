"""Line or JSON output to stdout or a file."""

from __future__ import annotations

import io
import json
import sys
from pathlib import Path
from typing import TextIO

from ..fetcher import TEXT_ERRORS
from .base import BaseExporter

SUPPORTED_FORMATS = ("txt", "json")


class StreamExporter(BaseExporter):
    """Write items one per line (``txt``) or as a JSON array (``json``)."""

    def __init__(self, stream: TextIO, fmt: str = "txt", owns_stream: bool = False) -> None:
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported output format: {fmt}")
        self.stream = stream
        self.format = fmt
        self._owns_stream = owns_stream
        self._count = 0
        self._closed = False

    @classmethod
    def open(cls, path: Path | None = None, fmt: str = "txt") -> "StreamExporter":
        """Exporter for ``path``, or for the current stdout when ``path`` is None."""

        if path is None:
            stream = sys.stdout
            if isinstance(stream, io.TextIOWrapper):
                stream.reconfigure(encoding="utf-8", errors=TEXT_ERRORS)
            return cls(stream, fmt)
        path.parent.mkdir(parents=True, exist_ok=True)
        handle = path.open("w", encoding="utf-8", errors=TEXT_ERRORS, newline="\n")
        return cls(handle, fmt, owns_stream=True)

    @property
    def count(self) -> int:
        return self._count

    def export(self, item: str) -> None:
        if self.format == "json":
            prefix = "[\n  " if self._count == 0 else ",\n  "
            self.stream.write(prefix + json.dumps(item, ensure_ascii=False))
        else:
            self.stream.write(item + "\n")
        self._count += 1

    def flush(self) -> None:
        self.stream.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.format == "json":
            self.stream.write("\n]\n" if self._count else "[]\n")
        self.flush()
        if self._owns_stream:
            self.stream.close()


__all__ = ["SUPPORTED_FORMATS", "StreamExporter"]
