"""
Rancher API Client Module

This module fetches resource collections from the Rancher API and decodes
them into read-only records. Fetchers are pluggable: the HTTP fetcher talks
to a live API, the file fetcher replays saved JSON collections.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
import json
import logging
import os

import requests

from ..errors import FetchError, FetchErrorKind
from ..measure import measured

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MountPoint:
    """Disk usage of a single host mount point."""
    total: int = 0
    used: int = 0


@dataclass(frozen=True)
class HostInfo:
    """Hardware information reported for a host."""
    cpu_count: int = 0
    mem_total: int = 0
    mem_free: int = 0
    mount_points: Dict[str, MountPoint] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HostInfo':
        cpu = data.get('cpuInfo') or {}
        memory = data.get('memoryInfo') or {}
        disk = data.get('diskInfo') or {}
        mount_points = {}
        for path, usage in (disk.get('mountPoints') or {}).items():
            usage = usage or {}
            mount_points[path] = MountPoint(
                total=_as_int(usage.get('total')),
                used=_as_int(usage.get('used'))
            )
        return cls(
            cpu_count=_as_int(cpu.get('count')),
            mem_total=_as_int(memory.get('memTotal')),
            mem_free=_as_int(memory.get('memFree')),
            mount_points=mount_points
        )


@dataclass(frozen=True)
class LaunchConfig:
    """Launch configuration of a service; only its labels are used."""
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Condition:
    """A single condition of a cluster component."""
    status: str = ""
    type: str = ""
    message: str = ""


@dataclass(frozen=True)
class ComponentStatus:
    """Health of a cluster component such as etcd or the scheduler."""
    name: str
    conditions: List[Condition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComponentStatus':
        conditions = [
            Condition(
                status=_as_str(c.get('status')),
                type=_as_str(c.get('type')),
                message=_as_str(c.get('message'))
            )
            for c in (data.get('conditions') or []) if c
        ]
        return cls(name=_as_str(data.get('name')), conditions=conditions)


@dataclass(frozen=True)
class RawRecord:
    """One element of an endpoint's "data" array.

    Fields are the union across all endpoint types; most are empty for
    any given record.
    """
    id: str = ""
    name: str = ""
    hostname: str = ""
    node_name: str = ""
    base_type: str = ""
    type: str = ""
    system: bool = False
    state: str = ""
    health_state: str = ""
    agent_state: str = ""
    scale: int = 0
    labels: Dict[str, str] = field(default_factory=dict)
    stack_id: str = ""
    environment_id: str = ""
    cluster_id: str = ""
    info: Optional[HostInfo] = None
    launch_config: Optional[LaunchConfig] = None
    component_statuses: List[ComponentStatus] = field(default_factory=list)

    @property
    def effective_type(self) -> str:
        """The basetype when present, otherwise the type."""
        return self.base_type or self.type

    @property
    def display_name(self) -> str:
        """The name when present, otherwise the hostname."""
        return self.name or self.hostname

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawRecord':
        info = data.get('info')
        launch_config = data.get('launchConfig')
        return cls(
            id=_as_str(data.get('id')),
            name=_as_str(data.get('name')),
            hostname=_as_str(data.get('hostname')),
            node_name=_as_str(data.get('nodeName')),
            base_type=_as_str(data.get('basetype')),
            type=_as_str(data.get('type')),
            system=_as_bool(data.get('system')),
            state=_as_str(data.get('state')),
            health_state=_as_str(data.get('healthState')),
            agent_state=_as_str(data.get('agentState')),
            scale=_as_int(data.get('scale')),
            labels=_as_labels(data.get('labels')),
            stack_id=_as_str(data.get('stackId')),
            environment_id=_as_str(data.get('environmentId')),
            cluster_id=_as_str(data.get('clusterId')),
            info=HostInfo.from_dict(info) if isinstance(info, dict) else None,
            launch_config=LaunchConfig(labels=_as_labels(launch_config.get('labels')))
            if isinstance(launch_config, dict) else None,
            component_statuses=[
                ComponentStatus.from_dict(c)
                for c in (data.get('componentStatuses') or []) if c
            ]
        )


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return value is True


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_labels(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): _as_str(v) for k, v in value.items()}


def decode_collection(payload: Any, endpoint: str, url: Optional[str] = None) -> List[RawRecord]:
    """Decode the {"data": [...]} envelope into records."""
    if not isinstance(payload, dict) or not isinstance(payload.get('data', []), list):
        raise FetchError(FetchErrorKind.DECODE, endpoint, url, "data is not an array")
    try:
        return [RawRecord.from_dict(item) for item in payload.get('data', []) if isinstance(item, dict)]
    except (AttributeError, TypeError, ValueError) as e:
        raise FetchError(FetchErrorKind.DECODE, endpoint, url, f"malformed record: {e}")


def set_endpoint(base_url: str, endpoint: str, limit: str) -> str:
    """
    Build the collection URL for an endpoint.

    The first "v1" is rewritten to "v2-beta" so that legacy API URLs keep
    working against the current API layout.
    """
    url = f"{base_url}/{endpoint}/?limit={limit}"
    return url.replace("v1", "v2-beta", 1)


class ResourceFetcher(ABC):
    """Abstract base class for resource collection fetchers."""

    @abstractmethod
    def fetch(self, endpoint: str) -> List[RawRecord]:
        """Fetch one endpoint's collection. Raises FetchError on failure."""
        pass


class HttpResourceFetcher(ResourceFetcher):
    """Fetcher that issues one authenticated GET per endpoint."""

    def __init__(self, base_url: str, access_key: str = "", secret_key: str = "",
                 limit: str = "100", timeout: float = 30):
        self.base_url = base_url.rstrip('/')
        self.access_key = access_key
        self.secret_key = secret_key
        self.limit = str(limit)
        self.timeout = timeout

    def fetch(self, endpoint: str) -> List[RawRecord]:
        url = set_endpoint(self.base_url, endpoint, self.limit)
        payload = self.get_json(url, endpoint)
        logger.debug(f"JSON fetched for {endpoint}: {payload}")
        return decode_collection(payload, endpoint, url)

    def get_json(self, url: str, endpoint: str) -> Any:
        """GET a URL with basic auth and return the decoded JSON body."""
        with measured('api', 'get_json'):
            logger.info(f"Scraping: {url}")
            auth = (self.access_key, self.secret_key) if self.access_key or self.secret_key else None
            try:
                response = requests.get(url, auth=auth, timeout=self.timeout)
            except requests.RequestException as e:
                logger.error(f"Error collecting JSON from API for {endpoint}: {e}")
                raise FetchError(FetchErrorKind.TRANSPORT, endpoint, url, str(e)) from e

            if response.status_code != 200:
                logger.error(f"Error collecting JSON from API for {endpoint}: "
                             f"HTTP {response.status_code}")
                raise FetchError(FetchErrorKind.STATUS, endpoint, url,
                                 f"HTTP {response.status_code}")

            try:
                return response.json()
            except ValueError as e:
                logger.error(f"Error decoding JSON from API for {endpoint}: {e}")
                raise FetchError(FetchErrorKind.DECODE, endpoint, url, str(e)) from e


class FileResourceFetcher(ResourceFetcher):
    """Fetcher that reads <directory>/<endpoint>.json collections from disk."""

    def __init__(self, directory: str):
        self.directory = directory

    def fetch(self, endpoint: str) -> List[RawRecord]:
        file_path = os.path.join(self.directory, f"{endpoint}.json")
        if not os.path.exists(file_path):
            raise FetchError(FetchErrorKind.TRANSPORT, endpoint, file_path, "file not found")

        with open(file_path, 'r', encoding='utf-8') as f:
            try:
                payload = json.load(f)
            except json.JSONDecodeError as e:
                raise FetchError(FetchErrorKind.DECODE, endpoint, file_path, str(e)) from e

        return decode_collection(payload, endpoint, file_path)


class FetcherFactory:
    """Factory class for creating resource fetchers."""

    @staticmethod
    def create(fetcher_type: str, config: Dict[str, Any]) -> ResourceFetcher:
        """Create a fetcher based on type and configuration."""
        if fetcher_type == 'http':
            return HttpResourceFetcher(
                base_url=config.get('url', ''),
                access_key=config.get('access_key', ''),
                secret_key=config.get('secret_key', ''),
                limit=str(config.get('limit', '100')),
                timeout=float(config.get('timeout_seconds', 30))
            )
        elif fetcher_type == 'file':
            return FileResourceFetcher(config.get('directory', 'data'))
        else:
            raise ValueError(f"Unknown fetcher type: {fetcher_type}")
