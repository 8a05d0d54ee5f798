"""Shared fixtures: canned CDX bodies, fake fetchers and settings builders."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator

import httpx
import pytest

from wayfuzz.config import Settings
from wayfuzz.engine import ArchiveRecord
from wayfuzz.logging_conf import configure_logging


def cdx_line(url: str, status: str | int = 200) -> str:
    """Render one line in the archive index's default text layout."""

    return f"com,example)/ 20200101000000 {url} text/html {status} DIGEST 1234"


class FakeFetcher:
    """Stand-in for ArchiveFetcher returning canned records per domain."""

    def __init__(self, responses: dict[str, Iterable[tuple[str, int]] | BaseException]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, frozenset[int] | None]] = []
        self.closed = False

    def fetch(self, domain: str, status_codes: Iterable[int] | None = None) -> list[ArchiveRecord]:
        self.calls.append((domain, frozenset(status_codes) if status_codes else None))
        outcome = self.responses.get(domain, [])
        if isinstance(outcome, BaseException):
            raise outcome
        return [ArchiveRecord(url=url, status_code=status) for url, status in outcome]

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _fresh_logging() -> None:
    configure_logging()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def _builder(**overrides: Any) -> Settings:
        base: dict[str, Any] = {"concurrency": 4}
        base.update(overrides)
        return Settings(**base)

    return _builder


@pytest.fixture
def fake_fetcher() -> Callable[..., FakeFetcher]:
    return FakeFetcher


@pytest.fixture
def mock_client() -> Iterator[Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]]:
    clients: list[httpx.Client] = []

    def _builder(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _builder
    for client in clients:
        client.close()


@pytest.fixture
def cdx_body() -> Callable[..., str]:
    def _builder(*rows: tuple[str, str | int] | str) -> str:
        lines = []
        for row in rows:
            lines.append(row if isinstance(row, str) else cdx_line(*row))
        return "\n".join(lines) + "\n"

    return _builder
