"""Exception hierarchy shared across wayfuzz.

Hierarchy::

    WayfuzzError
    ├── FetchError            (domain)
    │   ├── NetworkError
    │   └── ProtocolError
    └── ConfigError
"""

from __future__ import annotations


class WayfuzzError(Exception):
    """Base class for all wayfuzz exceptions."""


class FetchError(WayfuzzError):
    """Raised when the archive index could not be queried for a domain.

    Args:
        message: Human-readable description of the failure.
        domain: Domain whose fetch failed.
    """

    def __init__(self, message: str, domain: str | None = None) -> None:
        super().__init__(message)
        self.domain = domain


class NetworkError(FetchError):
    """Connection or transport failure while talking to the archive index."""


class ProtocolError(FetchError):
    """The archive index answered with a malformed or unusable response."""


class ConfigError(WayfuzzError):
    """Invalid exclusion pattern, status-code list or settings file."""


__all__ = ["ConfigError", "FetchError", "NetworkError", "ProtocolError", "WayfuzzError"]
