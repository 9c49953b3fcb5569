import copy

from fakes import config_map, deployment, ingress_route, namespace, secret
from kube_migrator.core.sanitizer import sanitize
from kube_migrator.models.kinds import CONFIG_MAP, DEPLOYMENT, INGRESS_ROUTE, NAMESPACE, SECRET
from kube_migrator.models.resource import KubeResource


class TestCustomResources:
    def test_removes_server_assigned_metadata(self):
        route = KubeResource(INGRESS_ROUTE, ingress_route("shop", "web"))
        clean = sanitize(route)
        assert "resourceVersion" not in clean.metadata
        assert "uid" not in clean.metadata

    def test_preserves_identity_and_spec(self):
        raw = ingress_route("shop", "web")
        raw["metadata"]["labels"] = {"team": "checkout"}
        raw["metadata"]["annotations"] = {"note": "keep me"}
        clean = sanitize(KubeResource(INGRESS_ROUTE, raw))
        assert clean.name == "shop"
        assert clean.namespace == "web"
        assert clean.labels == {"team": "checkout"}
        assert clean.annotations == {"note": "keep me"}
        assert clean.spec == raw["spec"]

    def test_drops_status(self):
        raw = ingress_route("shop", "web")
        raw["status"] = {"observed": True}
        assert "status" not in sanitize(KubeResource(INGRESS_ROUTE, raw)).raw

    def test_noop_on_clean_resource(self):
        raw = ingress_route("shop", "web")
        del raw["metadata"]["uid"]
        del raw["metadata"]["resourceVersion"]
        assert sanitize(KubeResource(INGRESS_ROUTE, raw)).raw == raw

    def test_does_not_mutate_input(self):
        raw = ingress_route("shop", "web")
        before = copy.deepcopy(raw)
        sanitize(KubeResource(INGRESS_ROUTE, raw))
        assert raw == before


class TestTypedResources:
    def test_deployment_keeps_metadata_subset_and_spec(self):
        raw = deployment("api", "shop")
        clean = sanitize(KubeResource(DEPLOYMENT, raw)).raw
        assert clean["apiVersion"] == "apps/v1"
        assert clean["kind"] == "Deployment"
        assert clean["metadata"] == {
            "name": "api",
            "namespace": "shop",
            "labels": {"app": "api"},
            "annotations": {"deployment.kubernetes.io/revision": "3"},
        }
        assert clean["spec"] == raw["spec"]
        assert "status" not in clean

    def test_config_map_keeps_data(self):
        clean = sanitize(KubeResource(CONFIG_MAP, config_map("cfg", "ns", {"a": "1"}))).raw
        assert clean["data"] == {"a": "1"}
        assert "creationTimestamp" not in clean["metadata"]

    def test_secret_keeps_type_and_data(self):
        clean = sanitize(KubeResource(SECRET, secret("db", "ns"))).raw
        assert clean["type"] == "Opaque"
        assert clean["data"] == {"password": "aHVudGVyMg=="}

    def test_namespace_is_cluster_scoped(self):
        raw = namespace("team-a")
        raw["metadata"]["namespace"] = "bogus"
        clean = sanitize(KubeResource(NAMESPACE, raw)).raw
        assert clean["metadata"] == {"name": "team-a", "labels": {"kubernetes.io/metadata.name": "team-a"}}
        assert clean["apiVersion"] == "v1"
        assert clean["spec"] == {"finalizers": ["kubernetes"]}

    def test_idempotent(self):
        once = sanitize(KubeResource(DEPLOYMENT, deployment("api", "shop")))
        assert sanitize(once).raw == once.raw

    def test_does_not_mutate_input(self):
        raw = deployment("api", "shop")
        before = copy.deepcopy(raw)
        sanitize(KubeResource(DEPLOYMENT, raw))
        assert raw == before
