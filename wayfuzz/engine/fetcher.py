"""Archive index (CDX) querying over httpx."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Iterable, Iterator
from urllib.parse import quote_plus, urlencode

import httpx
import structlog

from ..config import CDX_ENDPOINT, Settings
from ..exceptions import NetworkError, ProtocolError

_URL_FIELD = 2
_STATUS_FIELD = 4
_DECIMAL = re.compile(r"[+-]?[0-9]+")
# Bytes that are not valid UTF-8 survive as lone surrogates and are written
# back out unchanged.
TEXT_ERRORS = "surrogateescape"


def iter_text_lines(chunks: Iterable[bytes]) -> Iterator[str]:
    """Split a byte stream on ``\\n`` only, dropping one trailing ``\\r`` per line."""

    pending = b""
    for chunk in chunks:
        pending += chunk
        *complete, pending = pending.split(b"\n")
        for raw in complete:
            yield _decode_line(raw)
    if pending:
        yield _decode_line(pending)


def _decode_line(raw: bytes) -> str:
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode("utf-8", TEXT_ERRORS)


@dataclass(frozen=True, slots=True)
class ArchiveRecord:
    """One CDX line reduced to the fields wayfuzz uses."""

    url: str
    status_code: int = 0


def parse_cdx_line(line: str) -> ArchiveRecord | None:
    """Parse a whitespace separated CDX line; short lines yield ``None``.

    A missing or non-decimal status field (``-`` on revisit records) becomes 0.
    """

    fields = line.split()
    if len(fields) <= _URL_FIELD:
        return None
    status = 0
    if len(fields) > _STATUS_FIELD and _DECIMAL.fullmatch(fields[_STATUS_FIELD]):
        status = int(fields[_STATUS_FIELD])
    return ArchiveRecord(url=fields[_URL_FIELD], status_code=status)


def build_query(domain: str, status_codes: Iterable[int] | None = None) -> dict[str, str]:
    """Query parameters selecting every subdomain of ``domain``, collapsed by URL key."""

    params = {"url": f"*.{domain}", "collapse": "urlkey"}
    codes = sorted(set(status_codes or ()))
    if codes:
        params["filter"] = "statuscode:(" + "|".join(str(code) for code in codes) + ")"
    return params


class ArchiveFetcher:
    """Fetch historical URLs of a domain from the archive index.

    The underlying :class:`httpx.Client` is shared by all worker threads.
    """

    def __init__(
        self,
        endpoint: str = CDX_ENDPOINT,
        timeout: float | None = 30.0,
        deadline: float | None = None,
        user_agent: str | None = None,
        max_connections: int = 10,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.deadline = deadline
        self.logger = logger or structlog.get_logger("wayfuzz.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=timeout,
            headers={"User-Agent": user_agent} if user_agent else None,
            limits=httpx.Limits(max_connections=max(max_connections, 1)),
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "ArchiveFetcher":
        return cls(
            endpoint=settings.endpoint,
            timeout=settings.timeout,
            deadline=settings.deadline,
            user_agent=settings.user_agent,
            max_connections=settings.concurrency,
            **kwargs,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "ArchiveFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch(
        self, domain: str, status_codes: Iterable[int] | None = None
    ) -> list[ArchiveRecord]:
        """Return every record for ``domain``; the whole body is read first.

        Raises:
            NetworkError: Connection, read or timeout failure, or the deadline
                expired before the body was fully read.
            ProtocolError: Malformed HTTP, undecodable body or non-2xx status.
        """

        query = urlencode(
            build_query(domain, status_codes), quote_via=quote_plus, errors=TEXT_ERRORS
        )
        started = time.monotonic()
        records: list[ArchiveRecord] = []
        try:
            with self._client.stream("GET", f"{self.endpoint}?{query}") as response:
                response.raise_for_status()
                for line in iter_text_lines(response.iter_bytes()):
                    self._check_deadline(domain, started)
                    record = parse_cdx_line(line)
                    if record is not None:
                        records.append(record)
        except httpx.HTTPStatusError as exc:
            raise ProtocolError(
                f"archive index answered HTTP {exc.response.status_code}", domain=domain
            ) from exc
        except (
            httpx.RemoteProtocolError,
            httpx.LocalProtocolError,
            httpx.DecodingError,
            httpx.TooManyRedirects,
        ) as exc:
            raise ProtocolError(str(exc) or type(exc).__name__, domain=domain) from exc
        except httpx.TransportError as exc:
            raise NetworkError(str(exc) or type(exc).__name__, domain=domain) from exc
        self.logger.debug(
            "archive_query_complete",
            domain=domain,
            records=len(records),
            elapsed=round(time.monotonic() - started, 3),
        )
        return records

    def _check_deadline(self, domain: str, started: float) -> None:
        if self.deadline is None:
            return
        if time.monotonic() - started > self.deadline:
            raise NetworkError(
                f"fetch exceeded deadline of {self.deadline:g}s", domain=domain
            )


__all__ = [
    "TEXT_ERRORS",
    "ArchiveFetcher",
    "ArchiveRecord",
    "build_query",
    "iter_text_lines",
    "parse_cdx_line",
]
