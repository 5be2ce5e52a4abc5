"""
Exporter Error Types

Errors raised inside the gather pipeline. They are caught at the scrape
cycle boundary and never reach the metrics sink.
"""

from enum import Enum
from typing import Optional


class ExporterError(Exception):
    """Base class for exporter errors."""
    pass


class ConfigError(ExporterError):
    """Invalid or missing configuration."""
    pass


class FetchErrorKind(Enum):
    """Why a fetch failed."""
    TRANSPORT = "transport"
    STATUS = "status"
    DECODE = "decode"


class FetchError(ExporterError):
    """A single endpoint could not be fetched for this cycle."""

    def __init__(self, kind: FetchErrorKind, endpoint: str,
                 url: Optional[str] = None, message: str = ""):
        self.kind = kind
        self.endpoint = endpoint
        self.url = url
        self.message = message
        super().__init__(f"{kind.value} error fetching {endpoint} ({url}): {message}")
