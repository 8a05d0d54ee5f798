"""Pydantic models describing a wayfuzz run."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Literal

from pydantic import BaseModel, Field, field_validator

from ..exceptions import ConfigError

CDX_ENDPOINT = "http://web.archive.org/cdx/search/cdx"


def parse_status_codes(value: Any) -> list[int] | None:
    """Coerce ``"200,301"`` or an iterable of codes into a sorted list.

    Empty input means "no status filtering" and yields ``None``.
    """

    if value is None:
        return None
    if isinstance(value, str):
        parts: Iterable[Any] = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, int):
        parts = [value]
    else:
        parts = value
    codes: set[int] = set()
    for part in parts:
        try:
            code = int(part)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid status code: {part!r}") from exc
        if not 100 <= code <= 599:
            raise ValueError(f"Status code out of range: {code}")
        codes.add(code)
    return sorted(codes) or None


def compile_exclude(pattern: str | None) -> re.Pattern[str] | None:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"Invalid exclude pattern {pattern!r}: {exc}") from exc


@dataclass(frozen=True, slots=True)
class FilterConfig:
    """Read-only filter settings shared by every worker."""

    exclude: re.Pattern[str] | None = None
    status_codes: frozenset[int] | None = None
    separate_slash: bool = False

    @classmethod
    def build(
        cls,
        exclude_pattern: str | None = None,
        status_codes: Iterable[int] | str | None = None,
        separate_slash: bool = False,
    ) -> "FilterConfig":
        try:
            exclude = compile_exclude(exclude_pattern)
            codes = parse_status_codes(status_codes)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        return cls(
            exclude=exclude,
            status_codes=frozenset(codes) if codes else None,
            separate_slash=separate_slash,
        )


class Settings(BaseModel):
    """Everything a run needs, loaded from file and/or command line."""

    concurrency: int = Field(default=10, ge=1)
    exclude_pattern: str | None = None
    separate_slash: bool = False
    status_codes: list[int] | None = None
    endpoint: str = CDX_ENDPOINT
    timeout: float | None = Field(default=30.0, gt=0)
    deadline: float | None = Field(default=None, gt=0)
    results_queue_size: int | None = Field(default=None, ge=1)
    skip_blank_lines: bool = False
    user_agent: str | None = None
    output_format: Literal["txt", "json"] = "txt"

    @field_validator("exclude_pattern", mode="before")
    @classmethod
    def _validate_pattern(cls, value: Any) -> str | None:
        return value if compile_exclude(value) else None

    @field_validator("status_codes", mode="before")
    @classmethod
    def _coerce_status_codes(cls, value: Any) -> list[int] | None:
        return parse_status_codes(value)

    @property
    def queue_size(self) -> int:
        """Capacity of the bounded results queue."""

        return self.results_queue_size or self.concurrency * 2

    def filter_config(self) -> FilterConfig:
        return FilterConfig.build(self.exclude_pattern, self.status_codes, self.separate_slash)


__all__ = ["CDX_ENDPOINT", "FilterConfig", "Settings", "compile_exclude", "parse_status_codes"]
