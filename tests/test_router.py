"""
Unit tests for record classification and routing.
"""
import logging
import re

import pytest

from rancher_exporter.api.client import RawRecord
from rancher_exporter.metrics.refs import ReferenceCache
from rancher_exporter.metrics.router import (
    Endpoint,
    ResourceKind,
    Router,
    classify,
    order_endpoints,
    default_endpoints,
    parse_endpoints
)


def _records(*items):
    return [RawRecord.from_dict(item) for item in items]


@pytest.fixture
def cache():
    return ReferenceCache()


@pytest.fixture
def router(cache):
    return Router(cache=cache, label_pattern=re.compile("^io.prometheus"), hide_system=True)


class TestClassify:

    def test_expected_types(self):
        assert classify(Endpoint.HOSTS, "host") is ResourceKind.HOST
        assert classify(Endpoint.STACKS, "stack") is ResourceKind.STACK
        assert classify(Endpoint.SERVICES, "service") is ResourceKind.SERVICE
        assert classify(Endpoint.CLUSTERS, "cluster") is ResourceKind.CLUSTER
        assert classify(Endpoint.NODES, "node") is ResourceKind.NODE

    def test_unexpected_types_are_skipped(self):
        assert classify(Endpoint.SERVICES, "container") is ResourceKind.SKIP
        assert classify(Endpoint.SERVICES, "host") is ResourceKind.SKIP
        assert classify(Endpoint.HOSTS, "") is ResourceKind.SKIP


class TestRoute:

    def test_system_records_are_hidden(self, router, cache):
        records = _records({"id": "1st6", "basetype": "stack", "name": "healthcheck", "system": True})

        assert router.route(records, Endpoint.STACKS) == []
        assert cache.retrieve_stack_ref("1st6") == "unknown"

    def test_system_records_shown_when_not_hidden(self, cache):
        router = Router(cache=cache, label_pattern=re.compile("^io.prometheus"), hide_system=False)
        records = _records({"id": "1st6", "basetype": "stack", "name": "healthcheck",
                            "state": "active", "system": True})

        observations = router.route(records, Endpoint.STACKS)

        assert observations
        assert all(o.labels["system"] == "true" for o in observations)
        assert cache.retrieve_stack_ref("1st6") == "healthcheck"

    def test_unexpected_subtype_is_skipped(self, router):
        records = _records({"type": "container", "name": "sidekick", "state": "running"})
        assert router.route(records, Endpoint.SERVICES) == []

    def test_basetype_is_preferred_over_type(self, router):
        records = _records({"type": "loadBalancerService", "basetype": "service", "name": "lb",
                            "state": "active"})
        observations = router.route(records, Endpoint.SERVICES)
        assert {o.labels["name"] for o in observations} == {"lb"}

    def test_host_prefers_name_over_hostname(self, router):
        records = _records(
            {"basetype": "host", "name": "node-a", "hostname": "node-a.example.com", "state": "active"},
            {"basetype": "host", "name": "", "hostname": "node-b.example.com", "state": "active"},
        )
        names = {o.labels["name"] for o in router.route(records, Endpoint.HOSTS)}
        assert names == {"node-a", "node-b.example.com"}

    def test_host_labels_are_filtered(self, router):
        records = _records({"basetype": "host", "name": "node-a", "state": "active",
                            "labels": {"io.prometheus.rack": "r1", "io.rancher.host.os": "linux"}})
        observation = router.route(records, Endpoint.HOSTS)[0]
        assert observation.labels["label_io_prometheus_rack"] == "r1"
        assert "label_io_rancher_host_os" not in observation.labels

    def test_stacks_populate_cache_and_services_resolve(self, router):
        router.route(_records({"id": "s1", "basetype": "stack", "name": "prod"}), Endpoint.STACKS)
        observations = router.route(
            _records({"basetype": "service", "stackId": "s1", "name": "web", "state": "active"}),
            Endpoint.SERVICES
        )

        assert observations
        assert all(o.labels["stack_name"] == "prod" for o in observations)

    def test_unresolved_stack_warns_and_uses_unknown(self, router, caplog):
        with caplog.at_level(logging.WARNING):
            observations = router.route(
                _records({"basetype": "service", "stackId": "s404", "name": "web"}),
                Endpoint.SERVICES
            )

        assert all(o.labels["stack_name"] == "unknown" for o in observations)
        assert "Failed to obtain stack_name for web" in caplog.text

    def test_service_labels_do_not_leak_between_records(self, router):
        records = _records(
            {"basetype": "service", "name": "web", "state": "active",
             "launchConfig": {"labels": {"io.prometheus.team": "platform"}}},
            {"basetype": "service", "name": "lb", "state": "active", "launchConfig": None},
        )
        observations = router.route(records, Endpoint.SERVICES)

        lb = [o for o in observations if o.labels["name"] == "lb"]
        web = [o for o in observations if o.labels["name"] == "web"]
        assert lb and web
        assert all("label_io_prometheus_team" not in o.labels for o in lb)
        assert all(o.labels["label_io_prometheus_team"] == "platform" for o in web)

    def test_host_labels_do_not_leak_into_services(self, router):
        router.route(_records({"basetype": "host", "name": "node-a",
                               "labels": {"io.prometheus.rack": "r1"}}), Endpoint.HOSTS)
        observations = router.route(_records({"basetype": "service", "name": "web"}),
                                    Endpoint.SERVICES)
        assert all("label_io_prometheus_rack" not in o.labels for o in observations)

    def test_clusters_populate_cache_and_nodes_resolve(self, router):
        router.route(_records({"id": "c-1", "type": "cluster", "name": "production",
                               "state": "active"}), Endpoint.CLUSTERS)
        observations = router.route(
            _records({"type": "node", "nodeName": "worker-1", "clusterId": "c-1", "state": "active"}),
            Endpoint.NODES
        )

        assert all(o.labels["cluster_name"] == "production" for o in observations)
        assert all(o.labels["name"] == "worker-1" for o in observations)

    def test_unresolved_cluster_warns(self, router, caplog):
        with caplog.at_level(logging.WARNING):
            observations = router.route(
                _records({"type": "node", "nodeName": "orphan-1", "clusterId": "c-404"}),
                Endpoint.NODES
            )

        assert all(o.labels["cluster_name"] == "unknown" for o in observations)
        assert "Failed to obtain cluster_name for orphan-1" in caplog.text


class TestEndpointOrdering:

    def test_stacks_moved_before_services(self):
        ordered = order_endpoints([Endpoint.SERVICES, Endpoint.HOSTS, Endpoint.STACKS])
        assert ordered == [Endpoint.STACKS, Endpoint.SERVICES, Endpoint.HOSTS]

    def test_clusters_moved_before_nodes(self):
        ordered = order_endpoints([Endpoint.NODES, Endpoint.CLUSTERS])
        assert ordered == [Endpoint.CLUSTERS, Endpoint.NODES]

    def test_already_ordered_is_unchanged(self):
        endpoints = [Endpoint.STACKS, Endpoint.SERVICES, Endpoint.HOSTS]
        assert order_endpoints(endpoints) == endpoints

    def test_duplicates_are_dropped(self):
        assert order_endpoints([Endpoint.HOSTS, Endpoint.HOSTS]) == [Endpoint.HOSTS]

    def test_reader_without_writer_is_kept(self):
        assert order_endpoints([Endpoint.SERVICES]) == [Endpoint.SERVICES]

    def test_default_endpoints(self):
        assert default_endpoints("https://rancher/v3") == [Endpoint.CLUSTERS, Endpoint.NODES]
        assert default_endpoints("http://rancher:8080/v1") == [
            Endpoint.STACKS, Endpoint.SERVICES, Endpoint.HOSTS
        ]

    def test_parse_endpoints(self):
        assert parse_endpoints(["stacks", " hosts", ""]) == [Endpoint.STACKS, Endpoint.HOSTS]
        with pytest.raises(ValueError):
            parse_endpoints(["containers"])
