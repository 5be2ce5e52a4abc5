"""
Record Classifier & Router Module

Classifies each fetched record, drops system-owned and unexpected records,
resolves parent names through the reference cache and dispatches to the
endpoint's emitter.
"""

from enum import Enum
from typing import Dict, Iterable, List, Pattern
import logging

from ..api.client import RawRecord
from .emitters import (
    Observation,
    emit_host,
    emit_stack,
    emit_service,
    emit_cluster,
    emit_node
)
from .labels import allowed_labels
from .refs import ReferenceCache, UNKNOWN

logger = logging.getLogger(__name__)


class Endpoint(Enum):
    """Resource collections exposed by the Rancher API."""
    HOSTS = "hosts"
    STACKS = "stacks"
    SERVICES = "services"
    CLUSTERS = "clusters"
    NODES = "nodes"


class ResourceKind(Enum):
    """What a record is, as far as metric emission is concerned."""
    HOST = "host"
    STACK = "stack"
    SERVICE = "service"
    CLUSTER = "cluster"
    NODE = "node"
    SKIP = "skip"


# Raw type strings accepted per endpoint. Anything else, such as a sidecar
# listed under services, is skipped.
ENDPOINT_TYPES: Dict[Endpoint, Dict[str, ResourceKind]] = {
    Endpoint.HOSTS: {"host": ResourceKind.HOST},
    Endpoint.STACKS: {"stack": ResourceKind.STACK},
    Endpoint.SERVICES: {"service": ResourceKind.SERVICE},
    Endpoint.CLUSTERS: {"cluster": ResourceKind.CLUSTER},
    Endpoint.NODES: {"node": ResourceKind.NODE},
}

# Endpoints whose records populate the reference cache, mapped to the
# endpoints that read it.
DEPENDENCIES: Dict[Endpoint, Endpoint] = {
    Endpoint.SERVICES: Endpoint.STACKS,
    Endpoint.NODES: Endpoint.CLUSTERS,
}


def classify(endpoint: Endpoint, raw_type: str) -> ResourceKind:
    """Map a raw type string to a resource kind for this endpoint."""
    return ENDPOINT_TYPES.get(endpoint, {}).get(raw_type, ResourceKind.SKIP)


def order_endpoints(endpoints: Iterable[Endpoint]) -> List[Endpoint]:
    """
    Return endpoints with every cache writer ahead of its readers.

    Stacks come before services and clusters before nodes; otherwise the
    configured order is kept.
    """
    ordered: List[Endpoint] = []
    for endpoint in endpoints:
        if endpoint in ordered:
            continue
        ordered.append(endpoint)

    for reader, writer in DEPENDENCIES.items():
        if reader in ordered and writer in ordered:
            reader_pos = ordered.index(reader)
            writer_pos = ordered.index(writer)
            if writer_pos > reader_pos:
                ordered.remove(writer)
                ordered.insert(reader_pos, writer)
    return ordered


def default_endpoints(base_url: str) -> List[Endpoint]:
    """Endpoints to scrape for an API URL: v3 exposes clusters and nodes."""
    if "/v3" in base_url:
        return [Endpoint.CLUSTERS, Endpoint.NODES]
    return [Endpoint.STACKS, Endpoint.SERVICES, Endpoint.HOSTS]


def parse_endpoints(names: Iterable[str]) -> List[Endpoint]:
    """Convert configured endpoint names, raising ValueError for unknown ones."""
    return [Endpoint(name.strip()) for name in names if name and name.strip()]


class Router:
    """Translates the records of one endpoint into observations."""

    def __init__(self, cache: ReferenceCache, label_pattern: Pattern, hide_system: bool = True):
        self.cache = cache
        self.label_pattern = label_pattern
        self.hide_system = hide_system

    def route(self, records: Iterable[RawRecord], endpoint: Endpoint) -> List[Observation]:
        """Classify and translate every record of an endpoint collection."""
        observations: List[Observation] = []
        for record in records:
            if self.hide_system and record.system:
                continue

            kind = classify(endpoint, record.effective_type)
            if kind is ResourceKind.SKIP:
                logger.debug(f"Skipping {record.effective_type or 'untyped'} record "
                             f"{record.id} on {endpoint.value}")
                continue

            logger.debug(f"Processing metrics for {endpoint.value}")
            observations.extend(self._dispatch(kind, record))
        return observations

    def _dispatch(self, kind: ResourceKind, record: RawRecord) -> List[Observation]:
        if kind is ResourceKind.HOST:
            return emit_host(
                record.display_name, record.state, record.agent_state,
                info=record.info,
                labels=allowed_labels(record.labels, self.label_pattern)
            )

        if kind is ResourceKind.STACK:
            self.cache.store_stack_ref(record.id, record.name)
            return emit_stack(record.name, record.state, record.health_state,
                              str(record.system).lower())

        if kind is ResourceKind.SERVICE:
            stack_name = self.cache.retrieve_stack_ref(record.stack_id)
            if stack_name == UNKNOWN:
                logger.warning(f"Failed to obtain stack_name for {record.name} from the API")
            launch_labels = record.launch_config.labels if record.launch_config else {}
            return emit_service(
                record.name, stack_name, record.state, record.health_state, record.scale,
                labels=allowed_labels(launch_labels, self.label_pattern)
            )

        if kind is ResourceKind.CLUSTER:
            self.cache.store_cluster_ref(record.id, record.name)
            return emit_cluster(record.name, record.state, record.component_statuses)

        if kind is ResourceKind.NODE:
            node_name = record.node_name or record.display_name
            cluster_name = self.cache.retrieve_cluster_ref(record.cluster_id)
            if cluster_name == UNKNOWN:
                logger.warning(f"Failed to obtain cluster_name for {node_name} from the API")
            return emit_node(node_name, record.state, cluster_name)

        return []
