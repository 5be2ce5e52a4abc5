"""
Scrape Cycle Module

This module runs a full scrape cycle (fetch every endpoint, route its
records, collect the observations) and exposes the result to
prometheus_client through a custom collector.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List
import logging
import threading
import time

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from ..api.client import ResourceFetcher
from ..errors import FetchError, FetchErrorKind
from ..measure import FETCH_ERRORS
from .emitters import Observation, METRIC_HELP
from .router import Endpoint, Router, order_endpoints

logger = logging.getLogger(__name__)


@dataclass
class ScrapeResult:
    """Outcome of one scrape cycle."""
    observations: List[Observation] = field(default_factory=list)
    endpoints: List[str] = field(default_factory=list)
    errors: Dict[str, FetchErrorKind] = field(default_factory=dict)
    started: str = ""
    duration: float = 0.0

    @property
    def failed(self) -> bool:
        """True when endpoints were scraped and every one of them failed."""
        return bool(self.endpoints) and all(e in self.errors for e in self.endpoints)

    def to_dict(self) -> Dict:
        return {
            'started': self.started,
            'duration_seconds': round(self.duration, 4),
            'observations': len(self.observations),
            'endpoints': list(self.endpoints),
            'errors': {endpoint: kind.value for endpoint, kind in self.errors.items()}
        }


class Exporter:
    """Runs scrape cycles over the configured endpoints."""

    def __init__(self, fetcher: ResourceFetcher, endpoints: List[Endpoint], router: Router):
        self.fetcher = fetcher
        self.endpoints = order_endpoints(endpoints)
        self.router = router
        self._lock = threading.Lock()

    def gather(self) -> ScrapeResult:
        """
        Run one scrape cycle.

        Endpoints are processed sequentially in dependency order. A failing
        endpoint is logged and skipped; the cycle itself never raises.
        Concurrent callers are serialised so that cache writes and reads of
        different cycles cannot interleave.
        """
        with self._lock:
            result = ScrapeResult(started=datetime.utcnow().isoformat())
            start = time.perf_counter()

            for endpoint in self.endpoints:
                result.endpoints.append(endpoint.value)
                try:
                    records = self.fetcher.fetch(endpoint.value)
                except FetchError as e:
                    logger.error(f"Error getting JSON from endpoint {endpoint.value}: {e}")
                    FETCH_ERRORS.labels(endpoint=endpoint.value, kind=e.kind.value).inc()
                    result.errors[endpoint.value] = e.kind
                    continue

                observations = self.router.route(records, endpoint)
                logger.debug(f"{endpoint.value}: {len(records)} records, "
                             f"{len(observations)} observations")
                result.observations.extend(observations)

            result.duration = time.perf_counter() - start
            logger.info(f"Scrape cycle completed: {len(result.observations)} observations, "
                        f"{len(result.errors)} failed endpoints")
            return result


class RancherCollector(Collector):
    """prometheus_client collector exposing the observations of a scrape result."""

    def __init__(self, source: Callable[[], ScrapeResult]):
        self.source = source

    def describe(self):
        # Registration must not trigger a scrape of the API.
        return []

    def collect(self):
        result = self.source()
        for family in build_families(result.observations):
            yield family


def build_families(observations: List[Observation]) -> List[GaugeMetricFamily]:
    """Group observations by metric name into gauge families."""
    grouped: Dict[str, List[Observation]] = {}
    for observation in observations:
        grouped.setdefault(observation.name, []).append(observation)

    families = []
    for name, samples in grouped.items():
        label_names: List[str] = []
        for sample in samples:
            for key in sample.labels:
                if key not in label_names:
                    label_names.append(key)

        family = GaugeMetricFamily(name, METRIC_HELP.get(name, name), labels=label_names)
        for sample in samples:
            family.add_metric([sample.labels.get(key, "") for key in label_names], sample.value)
        families.append(family)
    return families
