"""Pipeline wiring domain input, worker pool, filter chain, collector and exporter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Protocol

import structlog

from .config import FilterConfig, Settings
from .engine import (
    ArchiveRecord,
    DomainNormalizer,
    FilterChain,
    ResultCollector,
    WorkerPool,
)
from .engine.exporter import BaseExporter
from .exceptions import WayfuzzError

ErrorReporter = Callable[[str, BaseException], None]


class RecordSource(Protocol):
    def fetch(
        self, domain: str, status_codes: Iterable[int] | None = None
    ) -> list[ArchiveRecord]: ...


def format_fetch_error(domain: str, error: BaseException) -> str:
    return f"Error fetching URLs for domain {domain}: {error}"


@dataclass(slots=True)
class DomainBatch:
    """Everything one worker produced for one domain."""

    domain: str
    items: list[str] = field(default_factory=list)
    records: int = 0
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class RunSummary:
    domains: int = 0
    failed: list[str] = field(default_factory=list)
    records: int = 0
    collected: int = 0
    unique: int = 0
    urls: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.domains - len(self.failed)


class Pipeline:
    """Run the fetch → filter → collect flow for a stream of domains."""

    def __init__(
        self,
        settings: Settings,
        fetcher: RecordSource,
        reporter: ErrorReporter | None = None,
        filter_config: FilterConfig | None = None,
    ) -> None:
        self.settings = settings
        self.fetcher = fetcher
        self.reporter = reporter
        # Built once, before any worker starts, and never mutated afterwards.
        self.filter_config = filter_config or settings.filter_config()
        self.chain = FilterChain(self.filter_config)
        self.logger = structlog.get_logger("wayfuzz").bind(component="pipeline")

    # ------------------------------------------------------------------
    def iter_domains(self, lines: Iterable[str]) -> Iterator[str]:
        """Yield one domain per input line.

        Blank lines are passed on as domains unless ``skip_blank_lines`` is set.
        """

        for line in lines:
            domain = line.removesuffix("\n").removesuffix("\r")
            if self.settings.skip_blank_lines and not domain.strip():
                continue
            yield domain

    def process_domain(self, domain: str) -> DomainBatch:
        """Fetch and filter one domain; failures yield an empty, failed batch."""

        try:
            records = self.fetcher.fetch(domain, self.filter_config.status_codes)
            normalizer = DomainNormalizer(domain)
            items: list[str] = []
            for record in records:
                items.extend(self.chain.apply(record.url, normalizer, record.status_code))
        except WayfuzzError as exc:
            self.logger.warning("domain_fetch_failed", domain=domain, error=str(exc))
            return self._failed(domain, exc)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("domain_processing_error", domain=domain, exc_info=True)
            return self._failed(domain, exc)
        self.logger.info("domain_fetched", domain=domain, records=len(records), items=len(items))
        return DomainBatch(domain=domain, items=items, records=len(records))

    def run(self, lines: Iterable[str]) -> RunSummary:
        """Process every domain and return the sorted, deduplicated result."""

        pool: WorkerPool[DomainBatch] = WorkerPool(
            self.settings.concurrency, self.settings.queue_size
        )
        collector = ResultCollector()
        summary = RunSummary()
        for batch in pool.run(self.iter_domains(lines), self.process_domain):
            summary.domains += 1
            if batch.failed:
                summary.failed.append(batch.domain)
                continue
            summary.records += batch.records
            collector.add(batch.items)
        summary.collected = collector.received
        summary.unique = len(collector)
        summary.urls = collector.sorted()
        summary.failed.sort()
        self.logger.info(
            "pipeline_finished",
            domains=summary.domains,
            failed=len(summary.failed),
            unique=summary.unique,
        )
        return summary

    def _failed(self, domain: str, error: BaseException) -> DomainBatch:
        if self.reporter is not None:
            self.reporter(domain, error)
        return DomainBatch(domain=domain, error=str(error))


def emit(urls: Iterable[str], exporter: BaseExporter) -> int:
    """Write ``urls`` through ``exporter`` and close it; returns the item count."""

    count = 0
    with exporter:
        for url in urls:
            exporter.export(url)
            count += 1
    return count


__all__ = [
    "DomainBatch",
    "ErrorReporter",
    "Pipeline",
    "RecordSource",
    "RunSummary",
    "emit",
    "format_fetch_error",
]
