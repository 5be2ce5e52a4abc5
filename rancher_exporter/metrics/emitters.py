"""
Metric Emitters Module

One emitter per endpoint type. Each turns resolved record fields into
metric observations and never fails: optional payloads that are missing
only suppress the metrics derived from them.

State gauges are exported as one series per known state, with value 1 for
the current state and 0 for every other.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..api.client import HostInfo, ComponentStatus
from .labels import sanitize_label_name

HEALTH_STATES = [
    "healthy", "unhealthy", "initializing", "degraded", "started-once"
]

AGENT_STATES = [
    "activating", "active", "reconnecting", "disconnected", "disconnecting",
    "finishing-reconnect", "reconnected"
]

HOST_STATES = [
    "activating", "active", "deactivating", "error", "erroring", "inactive",
    "provisioned", "purging", "registering", "removed", "removing",
    "requested", "restoring", "updating-active", "updating-inactive"
]

STACK_STATES = [
    "activating", "active", "canceled-upgrade", "canceling-upgrade", "error",
    "erroring", "finishing-upgrade", "removed", "removing", "requested",
    "restarting", "rolling-back", "updating-active", "upgraded", "upgrading"
]

SERVICE_STATES = [
    "activating", "active", "canceled-upgrade", "canceling-upgrade",
    "deactivating", "finishing-upgrade", "inactive", "registering", "removed",
    "removing", "requested", "restarting", "rolling-back", "updating-active",
    "updating-inactive", "upgraded", "upgrading"
]

CLUSTER_STATES = [
    "active", "provisioning", "updating", "unavailable", "removing", "error"
]

NODE_STATES = [
    "active", "cordoned", "draining", "drained", "provisioning",
    "registering", "unavailable", "removing", "error"
]

METRIC_HELP = {
    "rancher_host_state": "State of defined host as reported by the Rancher API",
    "rancher_host_agent_state": "State of defined host agent as reported by the Rancher API",
    "rancher_host_cpu_count": "Number of CPUs of defined host",
    "rancher_host_memory_total_mib": "Total memory of defined host in MiB",
    "rancher_host_memory_free_mib": "Free memory of defined host in MiB",
    "rancher_host_disk_total_mib": "Total size of a host mount point in MiB",
    "rancher_host_disk_used_mib": "Used size of a host mount point in MiB",
    "rancher_stack_state": "State of defined stack as reported by the Rancher API",
    "rancher_stack_health_status": "HealthState of defined stack as reported by the Rancher API",
    "rancher_service_state": "State of defined service as reported by the Rancher API",
    "rancher_service_health_status": "HealthState of defined service as reported by the Rancher API",
    "rancher_service_scale": "Scale of defined service as reported by the Rancher API",
    "rancher_cluster_state": "State of defined cluster as reported by the Rancher API",
    "rancher_cluster_component_status": "Condition status of a cluster component",
    "rancher_node_state": "State of defined node as reported by the Rancher API",
}


@dataclass(frozen=True)
class Observation:
    """A single metric sample handed to the metrics sink."""
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    value: float = 0.0


def _operator_labels(labels: Dict[str, str]) -> Dict[str, str]:
    return {sanitize_label_name(k): v for k, v in labels.items()}


def _state_gauges(name: str, state_label: str, current: str, known: Sequence[str],
                  labels: Dict[str, str]) -> List[Observation]:
    """One series per known state; the current state is 1."""
    states = list(known)
    if current and current not in states:
        states.append(current)
    return [
        Observation(name, {**labels, state_label: state}, 1.0 if state == current else 0.0)
        for state in states
    ]


def emit_host(name: str, state: str, agent_state: str, info: Optional[HostInfo] = None,
              labels: Optional[Dict[str, str]] = None) -> List[Observation]:
    base = {"name": name, **_operator_labels(labels or {})}
    observations = _state_gauges("rancher_host_state", "state", state, HOST_STATES, base)
    observations += _state_gauges("rancher_host_agent_state", "state", agent_state,
                                  AGENT_STATES, base)

    if info is not None:
        observations.append(Observation("rancher_host_cpu_count", dict(base), float(info.cpu_count)))
        observations.append(Observation("rancher_host_memory_total_mib", dict(base),
                                        float(info.mem_total)))
        observations.append(Observation("rancher_host_memory_free_mib", dict(base),
                                        float(info.mem_free)))
        for path, mount in sorted(info.mount_points.items()):
            disk_labels = {**base, "mount_point": path}
            observations.append(Observation("rancher_host_disk_total_mib", disk_labels,
                                            float(mount.total)))
            observations.append(Observation("rancher_host_disk_used_mib", dict(disk_labels),
                                            float(mount.used)))
    return observations


def emit_stack(name: str, state: str, health_state: str, system: str) -> List[Observation]:
    base = {"name": name, "system": system}
    observations = _state_gauges("rancher_stack_state", "state", state, STACK_STATES, base)
    observations += _state_gauges("rancher_stack_health_status", "health_state", health_state,
                                  HEALTH_STATES, base)
    return observations


def emit_service(name: str, stack_name: str, state: str, health_state: str, scale: int,
                 labels: Optional[Dict[str, str]] = None) -> List[Observation]:
    base = {"name": name, "stack_name": stack_name, **_operator_labels(labels or {})}
    observations = _state_gauges("rancher_service_state", "state", state, SERVICE_STATES, base)
    observations += _state_gauges("rancher_service_health_status", "health_state", health_state,
                                  HEALTH_STATES, base)
    observations.append(Observation("rancher_service_scale", dict(base), float(scale)))
    return observations


def emit_cluster(name: str, state: str,
                 component_statuses: List[ComponentStatus]) -> List[Observation]:
    observations = _state_gauges("rancher_cluster_state", "state", state, CLUSTER_STATES,
                                 {"name": name})
    for component in component_statuses or []:
        for condition in component.conditions:
            observations.append(Observation(
                "rancher_cluster_component_status",
                {"name": name, "component": component.name, "status": condition.status},
                1.0
            ))
    return observations


def emit_node(name: str, state: str, cluster_name: str) -> List[Observation]:
    return _state_gauges("rancher_node_state", "state", state, NODE_STATES,
                         {"name": name, "cluster_name": cluster_name})
