"""
Reference Cache Module

Maps stack and cluster identifiers to their names so that services and
nodes can be labelled with their parent's name. Entries are upserted as
the stacks and clusters endpoints are scraped and are never evicted; the
maps grow with the number of distinct ids seen during the process lifetime.
"""

from typing import Dict, Tuple
import logging
import threading

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


class ReferenceCache:
    """Process-wide id -> name lookups for stacks and clusters."""

    def __init__(self):
        self._stacks: Dict[str, str] = {}
        self._clusters: Dict[str, str] = {}
        self._lock = threading.Lock()

    def store_stack_ref(self, stack_id: str, stack_name: str) -> None:
        """Store the stack name for a stack id, replacing any previous name."""
        with self._lock:
            self._stacks[stack_id] = stack_name

    def retrieve_stack_ref(self, stack_id: str) -> str:
        """Return the stack name for a stack id, or "unknown"."""
        return self._retrieve(self._stacks, stack_id, "StackRef")

    def store_cluster_ref(self, cluster_id: str, cluster_name: str) -> None:
        """Store the cluster name for a cluster id, replacing any previous name."""
        with self._lock:
            self._clusters[cluster_id] = cluster_name

    def retrieve_cluster_ref(self, cluster_id: str) -> str:
        """Return the cluster name for a cluster id, or "unknown"."""
        return self._retrieve(self._clusters, cluster_id, "ClusterRef")

    def _retrieve(self, refs: Dict[str, str], key: str, kind: str) -> str:
        if not key:
            return UNKNOWN
        with self._lock:
            value = refs.get(key)
        if value is None:
            return UNKNOWN
        logger.debug(f"{kind} - key {key} resolved to {value}")
        return value

    def sizes(self) -> Tuple[int, int]:
        """Number of (stack, cluster) references held."""
        with self._lock:
            return len(self._stacks), len(self._clusters)
