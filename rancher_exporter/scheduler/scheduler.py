"""
Scheduler Module

This module runs scrape cycles periodically in the background and keeps the
latest result, so that Prometheus scrapes are served from a snapshot instead
of hitting the Rancher API on every request.
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from typing import List, Callable, Optional
import logging
import threading

from ..metrics.collector import Exporter, ScrapeResult

logger = logging.getLogger(__name__)


class CollectionScheduler:
    """Scheduler for periodic scrape cycles."""

    def __init__(self, exporter: Exporter, interval_seconds: int = 60):
        self.exporter = exporter
        self.interval_seconds = interval_seconds

        self._scheduler = BackgroundScheduler()
        self._running = False
        self._callbacks: List[Callable[[ScrapeResult], None]] = []
        self._latest: Optional[ScrapeResult] = None
        self._lock = threading.Lock()

    def add_collection_callback(self, callback: Callable[[ScrapeResult], None]) -> None:
        """Add a callback to be called with the result of each collection cycle."""
        self._callbacks.append(callback)

    def start(self) -> None:
        """Start the collection scheduler."""
        if self._running:
            return

        self._scheduler.add_job(
            self._collection_cycle,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id='rancher_scrape',
            name='Rancher Scrape Job',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        self._scheduler.start()
        self._running = True
        logger.info(f"Collection scheduler started with interval of {self.interval_seconds} seconds")

        # Run initial collection
        self._collection_cycle()

    def stop(self) -> None:
        """Stop the collection scheduler."""
        if not self._running:
            return

        self._scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Collection scheduler stopped")

    def is_running(self) -> bool:
        """Check if the scheduler is running."""
        return self._running

    def trigger_collection(self) -> ScrapeResult:
        """Manually trigger a collection cycle."""
        return self._collection_cycle()

    def latest(self) -> ScrapeResult:
        """The result of the last completed cycle, empty before the first one."""
        with self._lock:
            return self._latest if self._latest is not None else ScrapeResult()

    def _collection_cycle(self) -> ScrapeResult:
        """Execute a single scrape cycle and publish its result."""
        logger.info("Starting scrape cycle")
        result = self.exporter.gather()

        with self._lock:
            self._latest = result

        for callback in self._callbacks:
            try:
                callback(result)
            except Exception as e:
                logger.error(f"Callback execution failed: {e}")

        return result
