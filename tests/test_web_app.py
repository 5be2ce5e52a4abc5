import re

from prometheus_client import CollectorRegistry

from rancher_exporter.api.client import FileResourceFetcher
from rancher_exporter.metrics import Endpoint, Exporter, RancherCollector, ReferenceCache, Router
from rancher_exporter.scheduler import CollectionScheduler
from rancher_exporter.web.app import create_app


def _exporter(directory, endpoints):
    router = Router(ReferenceCache(), re.compile("^io.prometheus"), hide_system=True)
    return Exporter(FileResourceFetcher(directory), endpoints, router)


def test_metrics_endpoint_serves_exposition(cattle_dir):
    exporter = _exporter(cattle_dir, [Endpoint.STACKS, Endpoint.SERVICES, Endpoint.HOSTS])
    registry = CollectorRegistry()
    registry.register(RancherCollector(exporter.gather))
    client = create_app(registry).test_client()

    response = client.get('/metrics')

    assert response.status_code == 200
    assert response.content_type.startswith('text/plain')
    body = response.get_data(as_text=True)
    assert '# TYPE rancher_service_scale gauge' in body
    assert 'stack_name="prod"' in body
    assert 'label_io_prometheus_team="platform"' in body


def test_custom_metrics_path_and_landing_page(cattle_dir):
    registry = CollectorRegistry()
    client = create_app(registry, metrics_path='/custom').test_client()

    assert client.get('/custom').status_code == 200
    assert client.get('/metrics').status_code == 404
    assert 'href="/custom"' in client.get('/').get_data(as_text=True)


def test_health_live_mode():
    client = create_app(CollectorRegistry()).test_client()

    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok', 'mode': 'live'}


def test_health_reports_last_cycle(v3_dir):
    scheduler = CollectionScheduler(_exporter(v3_dir, [Endpoint.CLUSTERS, Endpoint.NODES]),
                                    interval_seconds=60)
    scheduler.trigger_collection()
    client = create_app(CollectorRegistry(), scheduler=scheduler).test_client()

    response = client.get('/health')

    body = response.get_json()
    assert response.status_code == 200
    assert body['status'] == 'ok'
    assert body['last_cycle']['endpoints'] == ['clusters', 'nodes']
    assert body['last_cycle']['errors'] == {}


def test_health_unhealthy_when_every_endpoint_fails(tmp_path):
    scheduler = CollectionScheduler(_exporter(str(tmp_path), [Endpoint.HOSTS]), interval_seconds=60)
    scheduler.trigger_collection()
    client = create_app(CollectorRegistry(), scheduler=scheduler).test_client()

    response = client.get('/health')

    assert response.status_code == 503
    assert response.get_json()['last_cycle']['errors'] == {'hosts': 'transport'}
