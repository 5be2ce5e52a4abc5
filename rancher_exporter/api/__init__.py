"""
API module initialization.
"""

from .client import (
    MountPoint,
    HostInfo,
    LaunchConfig,
    Condition,
    ComponentStatus,
    RawRecord,
    decode_collection,
    set_endpoint,
    ResourceFetcher,
    HttpResourceFetcher,
    FileResourceFetcher,
    FetcherFactory
)

__all__ = [
    'MountPoint',
    'HostInfo',
    'LaunchConfig',
    'Condition',
    'ComponentStatus',
    'RawRecord',
    'decode_collection',
    'set_endpoint',
    'ResourceFetcher',
    'HttpResourceFetcher',
    'FileResourceFetcher',
    'FetcherFactory'
]
