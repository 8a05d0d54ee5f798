"""Engine components: fetch → normalise/filter → pool → collect → export."""

from .collector import CollectResult, ResultCollector
from .fetcher import (
    TEXT_ERRORS,
    ArchiveFetcher,
    ArchiveRecord,
    build_query,
    iter_text_lines,
    parse_cdx_line,
)
from .filters import FilterChain
from .normalizer import DomainNormalizer, normalize
from .thread_pool import WorkerPool

__all__ = [
    "TEXT_ERRORS",
    "ArchiveFetcher",
    "ArchiveRecord",
    "CollectResult",
    "DomainNormalizer",
    "FilterChain",
    "ResultCollector",
    "WorkerPool",
    "build_query",
    "iter_text_lines",
    "normalize",
    "parse_cdx_line",
]
