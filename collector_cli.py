"""
One-shot Scrape CLI

Runs a single scrape cycle against the Rancher API (or a directory of saved
JSON collections) and prints the result, without starting a web server.

Usage:
    python collector_cli.py --config config/settings.yaml
    python collector_cli.py --url http://rancher:8080/v2-beta --stdout
    python collector_cli.py --directory tests/fixtures/cattle --stdout
"""

import sys
import json
import argparse
import logging
from typing import Any, Dict, List

from prometheus_client import CollectorRegistry, generate_latest

from rancher_exporter.errors import ConfigError
from rancher_exporter.metrics import Exporter, Observation, RancherCollector, ScrapeResult
from rancher_exporter.settings import load_settings, build_exporter


# =============================================================================
# Logging Setup
# =============================================================================

def setup_logging(verbose: bool = False) -> logging.Logger:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    return logging.getLogger(__name__)


# =============================================================================
# Output Functions
# =============================================================================

def observations_to_json(observations: List[Observation]) -> List[Dict[str, Any]]:
    """Convert observations to JSON-serialisable dicts."""
    return [
        {'name': o.name, 'labels': o.labels, 'value': o.value}
        for o in observations
    ]


def render_exposition(result: ScrapeResult) -> str:
    """Render a scrape result in the Prometheus text format."""
    registry = CollectorRegistry()
    registry.register(RancherCollector(lambda: result))
    return generate_latest(registry).decode('utf-8')


def run_once(exporter: Exporter, logger: logging.Logger) -> ScrapeResult:
    """Run one scrape cycle and log a summary."""
    logger.info(f"Scraping endpoints: {', '.join(e.value for e in exporter.endpoints)}")
    result = exporter.gather()
    for endpoint, kind in result.errors.items():
        logger.error(f"  {endpoint}: {kind.value} error")
    logger.info(f"Collected {len(result.observations)} observations "
                f"in {result.duration:.3f}s")
    return result


# =============================================================================
# Main Entry Point
# =============================================================================

def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Run a single Rancher scrape cycle and print the metrics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape the API configured in the settings file
  %(prog)s --config config/settings.yaml

  # Scrape a Rancher 1.x API and print observations as JSON
  %(prog)s --url http://rancher:8080/v1 --access-key KEY --secret-key SECRET --stdout

  # Replay saved collections from <directory>/<endpoint>.json
  %(prog)s --directory data/cattle --endpoints stacks,services,hosts
        """
    )

    parser.add_argument('--config', '-c', default='config/settings.yaml',
                        help='Path to settings file')
    parser.add_argument('--url', default=None,
                        help='Rancher API URL (overrides settings)')
    parser.add_argument('--access-key', default=None,
                        help='Rancher API access key')
    parser.add_argument('--secret-key', default=None,
                        help='Rancher API secret key')
    parser.add_argument('--directory', '-d', default=None,
                        help='Read <endpoint>.json collections from this directory instead of the API')
    parser.add_argument('--endpoints', default=None,
                        help='Comma separated endpoints to scrape')
    parser.add_argument('--show-system', action='store_true',
                        help='Include system stacks and services')
    parser.add_argument('--stdout', action='store_true',
                        help='Print observations as JSON instead of the Prometheus text format')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose output')

    args = parser.parse_args(argv)

    logger = setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        logger.error(str(e))
        return 1

    rancher = settings['rancher']
    if args.url:
        rancher['url'] = args.url
    if args.access_key:
        rancher['access_key'] = args.access_key
    if args.secret_key:
        rancher['secret_key'] = args.secret_key
    if args.directory:
        rancher['fetcher'] = 'file'
        rancher['directory'] = args.directory
    if args.endpoints:
        rancher['endpoints'] = args.endpoints.split(',')
    if args.show_system:
        settings['metrics']['hide_system'] = False

    try:
        exporter = build_exporter(settings)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    result = run_once(exporter, logger)

    if args.stdout:
        print(json.dumps(observations_to_json(result.observations), indent=2, ensure_ascii=False))
    else:
        sys.stdout.write(render_exposition(result))

    return 1 if result.failed else 0


if __name__ == '__main__':
    sys.exit(main())
