"""
Rancher Exporter Entry Point

This is the main entry point for the Rancher Prometheus exporter. It loads
settings, wires the scrape pipeline and serves the metrics endpoint.
"""

import sys
import logging
import argparse

from prometheus_client import REGISTRY, CollectorRegistry

from rancher_exporter.errors import ConfigError
from rancher_exporter.metrics import RancherCollector
from rancher_exporter.scheduler import CollectionScheduler
from rancher_exporter.settings import load_settings, build_exporter, split_listen_address
from rancher_exporter.web import create_app

logger = logging.getLogger(__name__)


def setup_logging(level: str = 'info') -> None:
    """Configure root logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_registry(settings: dict, registry: CollectorRegistry = REGISTRY):
    """
    Register the Rancher collector.

    With a positive collection interval the API is polled in the background
    and scrapes are served from the latest snapshot; otherwise every scrape
    runs a live cycle.

    Returns the scheduler, or None in live mode.
    """
    exporter = build_exporter(settings)
    interval = int(settings['collection'].get('interval_seconds', 0))

    if interval > 0:
        scheduler = CollectionScheduler(exporter=exporter, interval_seconds=interval)
        registry.register(RancherCollector(scheduler.latest))
        return scheduler

    registry.register(RancherCollector(exporter.gather))
    return None


def main():
    """Main application entry point."""
    parser = argparse.ArgumentParser(description='Prometheus exporter for the Rancher API')
    parser.add_argument('--config', '-c', default='config/settings.yaml',
                        help='Path to settings file')
    parser.add_argument('--listen-address', default=None,
                        help='Address to listen on, host:port')
    parser.add_argument('--metrics-path', default=None,
                        help='Path under which to expose metrics')
    parser.add_argument('--interval', type=int, default=None,
                        help='Poll the API every N seconds instead of on every scrape')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    args = parser.parse_args()

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        setup_logging()
        logger.error(str(e))
        return 1

    if args.listen_address:
        settings['web']['listen_address'] = args.listen_address
    if args.metrics_path:
        settings['web']['metrics_path'] = args.metrics_path
    if args.interval is not None:
        settings['collection']['interval_seconds'] = args.interval

    setup_logging('debug' if args.debug else settings['app']['log_level'])
    logger.info(f"Starting {settings['app']['name']}")
    logger.info(f"Configuration loaded from: {args.config}")

    try:
        scheduler = build_registry(settings)
        host, port = split_listen_address(settings['web']['listen_address'])
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if scheduler:
        scheduler.start()

    metrics_path = settings['web']['metrics_path']
    app = create_app(registry=REGISTRY, scheduler=scheduler, metrics_path=metrics_path)

    logger.info(f"Starting web server on http://{host}:{port}{metrics_path}")

    try:
        app.run(host=host, port=port, debug=False, use_reloader=False)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    finally:
        if scheduler:
            scheduler.stop()
        logger.info("Exporter stopped")

    return 0


if __name__ == '__main__':
    sys.exit(main())
