"""
Settings Module

Loads exporter settings from a YAML file merged over defaults, applies
environment variable overrides and wires the scrape pipeline together.
"""

from copy import deepcopy
from typing import Any, Dict, Mapping, Optional, Tuple
import logging
import os

import yaml

from .api import FetcherFactory
from .errors import ConfigError
from .metrics import (
    Exporter,
    ReferenceCache,
    Router,
    compile_label_filter,
    default_endpoints,
    parse_endpoints
)

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    'app': {'name': 'RancherExporter', 'log_level': 'info'},
    'rancher': {
        'fetcher': 'http',
        'url': '',
        'access_key': '',
        'secret_key': '',
        'limit': '100',
        'timeout_seconds': 30,
        'directory': 'data',
        'endpoints': []
    },
    'metrics': {'hide_system': True, 'labels_filter': '^io.prometheus'},
    'collection': {'interval_seconds': 0},
    'web': {'listen_address': '0.0.0.0:9173', 'metrics_path': '/metrics'}
}


def parse_bool(value: Any) -> bool:
    """Accept real booleans and the strings 1, true and yes."""
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes')
    return value is True


# Environment variable -> (section, key, converter)
ENV_OVERRIDES = {
    'CATTLE_URL': ('rancher', 'url', str),
    'CATTLE_ACCESS_KEY': ('rancher', 'access_key', str),
    'CATTLE_SECRET_KEY': ('rancher', 'secret_key', str),
    'API_LIMIT': ('rancher', 'limit', str),
    'HIDE_SYS': ('metrics', 'hide_system', parse_bool),
    'LABELS_FILTER': ('metrics', 'labels_filter', str),
    'METRICS_PATH': ('web', 'metrics_path', str),
    'LISTEN_ADDRESS': ('web', 'listen_address', str),
    'LOG_LEVEL': ('app', 'log_level', str),
    'SCRAPE_INTERVAL': ('collection', 'interval_seconds', int),
}


def load_settings(config_path: str = 'config/settings.yaml',
                  environ: Optional[Mapping[str, str]] = None) -> Dict[str, Dict[str, Any]]:
    """Load settings from YAML, fill in defaults and apply environment overrides."""
    settings = deepcopy(DEFAULT_SETTINGS)

    if not os.path.exists(config_path):
        logger.warning(f"Settings file not found: {config_path}, using defaults")
    else:
        with open(config_path, 'r', encoding='utf-8') as f:
            try:
                loaded = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Failed to parse settings file {config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ConfigError(f"Settings file {config_path} must contain a mapping")

        for section, values in loaded.items():
            if isinstance(values, dict) and section in settings:
                settings[section].update(values)
            else:
                settings[section] = values

    environ = os.environ if environ is None else environ
    for variable, (section, key, convert) in ENV_OVERRIDES.items():
        if environ.get(variable):
            try:
                settings[section][key] = convert(environ[variable])
            except ValueError as e:
                raise ConfigError(f"Invalid value for {variable}: {e}") from e

    return settings


def split_listen_address(address: str) -> Tuple[str, int]:
    """Split "host:port" (host optional) into its parts."""
    host, _, port = address.rpartition(':')
    try:
        return host or '0.0.0.0', int(port)
    except ValueError as e:
        raise ConfigError(f"Invalid listen address {address!r}") from e


def build_exporter(settings: Dict[str, Dict[str, Any]],
                   cache: Optional[ReferenceCache] = None) -> Exporter:
    """Create the fetcher, reference cache, router and exporter from settings."""
    rancher = settings['rancher']
    fetcher_type = rancher.get('fetcher', 'http')
    if fetcher_type == 'http' and not rancher.get('url'):
        raise ConfigError("Rancher API URL is not set (rancher.url or CATTLE_URL)")

    try:
        fetcher = FetcherFactory.create(fetcher_type, rancher)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    try:
        endpoints = parse_endpoints(rancher.get('endpoints') or [])
    except ValueError as e:
        raise ConfigError(f"Unknown endpoint in settings: {e}") from e
    if not endpoints:
        endpoints = default_endpoints(rancher.get('url', ''))

    metrics = settings['metrics']
    router = Router(
        cache=cache if cache is not None else ReferenceCache(),
        label_pattern=compile_label_filter(metrics.get('labels_filter', '')),
        hide_system=parse_bool(metrics.get('hide_system', True))
    )

    exporter = Exporter(fetcher, endpoints, router)
    logger.info(f"Exporter configured for endpoints: "
                f"{', '.join(e.value for e in exporter.endpoints)}")
    return exporter
