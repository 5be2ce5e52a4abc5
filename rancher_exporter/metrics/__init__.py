"""
Metrics module initialization.
"""

from .refs import ReferenceCache, UNKNOWN
from .labels import allowed_labels, compile_label_filter, sanitize_label_name
from .emitters import (
    Observation,
    METRIC_HELP,
    emit_host,
    emit_stack,
    emit_service,
    emit_cluster,
    emit_node
)
from .router import (
    Endpoint,
    ResourceKind,
    Router,
    classify,
    order_endpoints,
    default_endpoints,
    parse_endpoints
)
from .collector import (
    ScrapeResult,
    Exporter,
    RancherCollector,
    build_families
)

__all__ = [
    'ReferenceCache',
    'UNKNOWN',
    'allowed_labels',
    'compile_label_filter',
    'sanitize_label_name',
    'Observation',
    'METRIC_HELP',
    'emit_host',
    'emit_stack',
    'emit_service',
    'emit_cluster',
    'emit_node',
    'Endpoint',
    'ResourceKind',
    'Router',
    'classify',
    'order_endpoints',
    'default_endpoints',
    'parse_endpoints',
    'ScrapeResult',
    'Exporter',
    'RancherCollector',
    'build_families'
]
