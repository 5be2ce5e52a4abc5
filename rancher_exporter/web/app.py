"""
Web Application Module

This module provides the Flask application serving the Prometheus metrics
endpoint, a landing page and a health check.
"""

from flask import Flask, Response, jsonify
from typing import Optional

from prometheus_client import CollectorRegistry, CONTENT_TYPE_LATEST, generate_latest

from ..scheduler import CollectionScheduler

LANDING_PAGE = """<html>
<head><title>Rancher Exporter</title></head>
<body>
<h1>Rancher Exporter</h1>
<p><a href="{metrics_path}">Metrics</a></p>
</body>
</html>
"""


def create_app(registry: CollectorRegistry,
               scheduler: Optional[CollectionScheduler] = None,
               metrics_path: str = '/metrics') -> Flask:
    """Create and configure the Flask application."""

    app = Flask(__name__)

    @app.route('/')
    def index():
        """Render the landing page."""
        return LANDING_PAGE.format(metrics_path=metrics_path)

    @app.route(metrics_path)
    def metrics():
        """Expose all registered metrics in the Prometheus text format."""
        return Response(generate_latest(registry), content_type=CONTENT_TYPE_LATEST)

    @app.route('/health')
    def health():
        """Report exporter health and, when polling in the background, the last cycle."""
        if scheduler is None:
            return jsonify({'status': 'ok', 'mode': 'live'})

        result = scheduler.latest()
        status = 'unhealthy' if result.failed else 'ok'
        body = {
            'status': status,
            'mode': 'scheduled',
            'running': scheduler.is_running(),
            'last_cycle': result.to_dict()
        }
        return jsonify(body), 503 if result.failed else 200

    return app
