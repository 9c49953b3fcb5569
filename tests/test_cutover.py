import pytest

from fakes import FakeCluster, ingress_route, namespace, proxy_manifest, service
from kube_migrator.core.cutover import (
    CutoverController,
    ProxyConfiguration,
    decommission_routes,
    deploy_proxy,
    resolve_entrypoint,
)
from kube_migrator.core.errors import EntrypointUnresolvedError, ProxyDeployError
from kube_migrator.core.snapshot import load_snapshot
from kube_migrator.models.kinds import CONFIG_MAP, DEPLOYMENT, INGRESS_ROUTE, NAMESPACE, SERVICE
from kube_migrator.models.outcome import OutcomeStatus
from kube_migrator.models.resource import KubeResource


def services(*raws):
    return [KubeResource(SERVICE, raw) for raw in raws]


def routes(*raws):
    return [KubeResource(INGRESS_ROUTE, raw) for raw in raws]


class TestResolveEntrypoint:
    def test_skips_services_without_external_address(self):
        found = resolve_entrypoint(services(
            service("svc-a", "default"),
            service("svc-b", "default", ip="203.0.113.5"),
        ))
        assert found == "203.0.113.5"

    def test_first_load_balanced_service_wins(self):
        found = resolve_entrypoint(services(
            service("one", "x", ip="198.51.100.1"),
            service("two", "x", ip="198.51.100.2"),
        ))
        assert found == "198.51.100.1"

    def test_hostname_used_when_no_ip(self):
        found = resolve_entrypoint(services(service("lb", "x", hostname="lb.example.net")))
        assert found == "lb.example.net"

    def test_no_external_address_is_fatal(self):
        with pytest.raises(EntrypointUnresolvedError):
            resolve_entrypoint(services(service("svc-a", "default")))

    def test_empty_inventory_is_fatal(self):
        with pytest.raises(EntrypointUnresolvedError):
            resolve_entrypoint([])


class TestDeployProxy:
    def test_creates_namespace_config_and_manifest_resources(self):
        cluster = FakeCluster("src")
        proxy = ProxyConfiguration("203.0.113.5", 9090)

        result = deploy_proxy(cluster, proxy, proxy_manifest())

        assert [o.kind for o in result.created] == [
            "Namespace", "ConfigMap", "Deployment", "Service", "IngressRoute",
        ]
        config = cluster.stored(CONFIG_MAP, "proxy:http-proxy-config")
        assert config["data"] == {"TARGET_URL": "203.0.113.5", "PORT": "9090"}
        route = cluster.stored(INGRESS_ROUTE, "proxy:http-proxy")
        assert route["spec"]["routes"][0]["services"][0]["port"] == 9090

    def test_existing_proxy_namespace_is_reused(self):
        cluster = FakeCluster("src", {NAMESPACE: [namespace("proxy")]})
        result = deploy_proxy(cluster, ProxyConfiguration("203.0.113.5", 9090), proxy_manifest())
        assert result.outcomes[0].status == OutcomeStatus.SKIPPED
        assert not result.has_failures

    def test_creation_failure_is_fatal(self):
        cluster = FakeCluster("src")
        cluster.fail_create.add(("Service", "proxy:http-proxy"))
        with pytest.raises(ProxyDeployError):
            deploy_proxy(cluster, ProxyConfiguration("203.0.113.5", 9090), proxy_manifest())
        assert cluster.stored(INGRESS_ROUTE, "proxy:http-proxy") is None

    def test_invalid_manifest_creates_nothing(self):
        cluster = FakeCluster("src")
        docs = proxy_manifest() + [{"apiVersion": "v1", "kind": "Pod", "metadata": {"name": "p"}}]
        with pytest.raises(ProxyDeployError):
            deploy_proxy(cluster, ProxyConfiguration("203.0.113.5", 9090), docs)
        assert cluster.verbs("create") == []

    def test_manifest_without_proxy_route_creates_nothing(self):
        cluster = FakeCluster("src")
        docs = [d for d in proxy_manifest() if d["kind"] != "IngressRoute"]
        with pytest.raises(ProxyDeployError, match="no IngressRoute"):
            deploy_proxy(cluster, ProxyConfiguration("203.0.113.5", 9090), docs)
        assert cluster.verbs("create") == []

    def test_route_outside_proxy_namespace_does_not_count(self):
        cluster = FakeCluster("src")
        docs = proxy_manifest()
        docs[2]["metadata"]["namespace"] = "web"
        with pytest.raises(ProxyDeployError):
            deploy_proxy(cluster, ProxyConfiguration("203.0.113.5", 9090), docs)
        assert cluster.verbs("create") == []


class TestDecommission:
    def test_deletes_all_but_proxy_routes(self):
        cluster = FakeCluster("src", {INGRESS_ROUTE: [
            ingress_route("shop", "web"),
            ingress_route("http-proxy", "proxy"),
            ingress_route("blog", "cms"),
        ]})
        result = decommission_routes(cluster, load_snapshot(cluster).items(INGRESS_ROUTE), "proxy")

        assert cluster.names(INGRESS_ROUTE) == ["proxy:http-proxy"]
        assert {o.name: o.status for o in result.outcomes} == {
            "http-proxy": OutcomeStatus.RETAINED,
            "shop": OutcomeStatus.DELETED,
            "blog": OutcomeStatus.DELETED,
        }

    def test_one_stuck_route_does_not_block_the_rest(self):
        cluster = FakeCluster("src", {INGRESS_ROUTE: [
            ingress_route("shop", "web"), ingress_route("blog", "cms"), ingress_route("docs", "cms"),
        ]})
        cluster.fail_delete.add(("IngressRoute", "cms:blog"))

        result = decommission_routes(cluster, routes(*cluster.store["IngressRoute"].values()), "proxy")

        assert cluster.names(INGRESS_ROUTE) == ["cms:blog"]
        assert [o.name for o in result.failed] == ["blog"]

    def test_already_deleted_route_is_skipped(self):
        cluster = FakeCluster("src")
        result = decommission_routes(cluster, routes(ingress_route("gone", "web")), "proxy")
        assert result.outcomes[0].status == OutcomeStatus.SKIPPED


class TestCutoverController:
    @pytest.fixture
    def clusters(self):
        source = FakeCluster("src", {INGRESS_ROUTE: [
            ingress_route("shop", "web"), ingress_route("blog", "cms"),
        ]})
        target = FakeCluster("dst", {SERVICE: [
            service("svc-a", "default"),
            service("traefik", "kube-system", ip="203.0.113.5"),
        ]})
        return source, target

    def _controller(self, config, fetched=None):
        def fetch(locator):
            if fetched is not None:
                fetched.append(locator)
            return proxy_manifest()
        return CutoverController(config, fetch=fetch)

    def test_full_cutover(self, clusters, config):
        source, target = clusters
        fetched = []
        result = self._controller(config, fetched).run(source, load_snapshot(source), load_snapshot(target))

        assert result.entrypoint == "203.0.113.5"
        assert fetched == [config.proxy_manifest_url]
        assert cluster_routes(source) == ["proxy:http-proxy"]
        assert source.stored(DEPLOYMENT, "proxy:http-proxy") is not None
        assert len(result.decommission.deleted) == 2

    def test_proxy_is_live_before_any_route_is_deleted(self, clusters, config):
        source, target = clusters
        self._controller(config).run(source, load_snapshot(source), load_snapshot(target))

        verbs = [verb for verb, _, _ in source.calls if verb in ("create", "delete")]
        last_create = max(i for i, v in enumerate(verbs) if v == "create")
        first_delete = min(i for i, v in enumerate(verbs) if v == "delete")
        assert last_create < first_delete

    def test_failed_decommission_leaves_working_proxy_route(self, clusters, config):
        source, target = clusters
        source.fail_delete.update({("IngressRoute", "web:shop"), ("IngressRoute", "cms:blog")})

        result = self._controller(config).run(source, load_snapshot(source), load_snapshot(target))

        assert len(result.decommission.failed) == 2
        route = source.stored(INGRESS_ROUTE, "proxy:http-proxy")
        assert route["spec"]["routes"][0]["services"] == [{"name": "http-proxy", "port": 9090}]
        proxy_service = source.stored(SERVICE, "proxy:http-proxy")
        assert proxy_service["spec"]["ports"] == [{"port": 9090, "targetPort": 9090}]
        config_map = source.stored(CONFIG_MAP, "proxy:http-proxy-config")
        assert config_map["data"]["TARGET_URL"] == "203.0.113.5"

    def test_unresolved_entrypoint_touches_nothing(self, clusters, config):
        source, _ = clusters
        bare_target = FakeCluster("dst", {SERVICE: [service("svc-a", "default")]})

        with pytest.raises(EntrypointUnresolvedError):
            self._controller(config).run(source, load_snapshot(source), load_snapshot(bare_target))
        assert source.verbs("create") == []
        assert source.verbs("delete") == []

    def test_proxy_failure_aborts_before_deletion(self, clusters, config):
        source, target = clusters
        source.fail_create.add(("Deployment", "proxy:http-proxy"))

        with pytest.raises(ProxyDeployError):
            self._controller(config).run(source, load_snapshot(source), load_snapshot(target))
        assert source.verbs("delete") == []
        assert sorted(cluster_routes(source)) == ["cms:blog", "web:shop"]


def cluster_routes(cluster):
    return cluster.names(INGRESS_ROUTE)


def test_manifest_without_route_keeps_every_source_route(config):
    source = FakeCluster("src", {INGRESS_ROUTE: [ingress_route("shop", "web"), ingress_route("blog", "cms")]})
    target = FakeCluster("dst", {SERVICE: [service("traefik", "kube-system", ip="203.0.113.5")]})
    docs = [d for d in proxy_manifest() if d["kind"] != "IngressRoute"]
    controller = CutoverController(config, fetch=lambda locator: docs)

    with pytest.raises(ProxyDeployError):
        controller.run(source, load_snapshot(source), load_snapshot(target))

    assert source.verbs("delete") == []
    assert sorted(cluster_routes(source)) == ["cms:blog", "web:shop"]
