"""
Rancher exporter package initialization.
"""

from .errors import (
    ExporterError,
    ConfigError,
    FetchError,
    FetchErrorKind
)

from .api import (
    RawRecord,
    ResourceFetcher,
    HttpResourceFetcher,
    FileResourceFetcher,
    FetcherFactory,
    set_endpoint
)

from .metrics import (
    ReferenceCache,
    Observation,
    Endpoint,
    Router,
    Exporter,
    ScrapeResult,
    RancherCollector,
    allowed_labels
)

from .scheduler import CollectionScheduler

__version__ = '0.1.0'

__all__ = [
    'ExporterError',
    'ConfigError',
    'FetchError',
    'FetchErrorKind',
    'RawRecord',
    'ResourceFetcher',
    'HttpResourceFetcher',
    'FileResourceFetcher',
    'FetcherFactory',
    'set_endpoint',
    'ReferenceCache',
    'Observation',
    'Endpoint',
    'Router',
    'Exporter',
    'ScrapeResult',
    'RancherCollector',
    'allowed_labels',
    'CollectionScheduler'
]
