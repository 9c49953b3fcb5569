"""Redirect traffic from the source cluster to the target through a proxy."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError

from kube_migrator.config.settings import Settings, settings as default_settings
from kube_migrator.core.errors import EntrypointUnresolvedError, MigrationError, ProxyDeployError
from kube_migrator.core.materializer import Overrides, materialize
from kube_migrator.core.replicator import create_if_absent
from kube_migrator.core.snapshot import ClusterSnapshot
from kube_migrator.models.kinds import CONFIG_MAP, INGRESS_ROUTE, NAMESPACE, SERVICE
from kube_migrator.models.outcome import BatchResult, ItemOutcome, OutcomeStatus
from kube_migrator.models.resource import KubeResource
from kube_migrator.utils.manifest_parser import fetch_manifest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProxyConfiguration:
    target_address: str
    port: int
    namespace: str = "proxy"
    config_name: str = "http-proxy-config"

    @property
    def config_data(self) -> dict[str, str]:
        return {"TARGET_URL": self.target_address, "PORT": str(self.port)}

    def namespace_resource(self) -> KubeResource:
        return KubeResource(NAMESPACE, {
            "apiVersion": NAMESPACE.api_version,
            "kind": NAMESPACE.name,
            "metadata": {"name": self.namespace},
        })

    def config_map_resource(self) -> KubeResource:
        return KubeResource(CONFIG_MAP, {
            "apiVersion": CONFIG_MAP.api_version,
            "kind": CONFIG_MAP.name,
            "metadata": {"name": self.config_name, "namespace": self.namespace},
            "data": self.config_data,
        })


@dataclass
class CutoverResult:
    entrypoint: str
    deploy: BatchResult
    decommission: BatchResult


def _external_address(service: KubeResource) -> str | None:
    ingress = ((service.status.get("loadBalancer") or {}).get("ingress")) or []
    if not ingress:
        return None
    first = ingress[0] or {}
    return first.get("ip") or first.get("hostname") or None


def resolve_entrypoint(services: Iterable[KubeResource]) -> str:
    """Return the external address of the first load-balanced service."""
    for service in services:
        address = _external_address(service)
        if address:
            logger.info("Service %s exposes entrypoint %s", service.display_name(), address)
            return address
    raise EntrypointUnresolvedError(
        "No service in the target cluster has an external load-balancer address"
    )


def deploy_proxy(
    k8s, proxy: ProxyConfiguration, manifest_docs: Sequence[Mapping[str, Any]],
) -> BatchResult:
    """Create the proxy namespace, its configuration and the manifest resources.

    Every resource is materialized before the first creation, and the manifest
    must route traffic to the proxy through an IngressRoute in the proxy
    namespace. Any failure is raised as ProxyDeployError.
    """
    overrides = Overrides(port=proxy.port, default_namespace=proxy.namespace)
    try:
        resources = [proxy.namespace_resource(), proxy.config_map_resource()]
        resources.extend(materialize(doc, overrides) for doc in manifest_docs)
    except MigrationError as e:
        raise ProxyDeployError(f"Invalid proxy manifest: {e}") from e
    if not any(r.kind == INGRESS_ROUTE and r.namespace == proxy.namespace for r in resources):
        raise ProxyDeployError(
            f"Proxy manifest declares no IngressRoute in namespace '{proxy.namespace}'"
        )

    result = BatchResult(operation="deploy-proxy", kind="proxy")
    for resource in resources:
        try:
            result.outcomes.append(create_if_absent(k8s, resource))
        except ApiException as e:
            logger.error("Failed to create proxy %s %s: %s %s", resource.kind, resource.identity, e.status, e.reason)
            raise ProxyDeployError(
                f"Could not create proxy {resource.kind} {resource.identity}: {e.status} {e.reason}"
            ) from e
        except HTTPError as e:
            raise ProxyDeployError(
                f"Could not create proxy {resource.kind} {resource.identity}: {e}"
            ) from e
    logger.info("Proxy deployed in '%s' forwarding to %s:%d", k8s.name, proxy.target_address, proxy.port)
    return result


def _delete_route(k8s, route: KubeResource) -> ItemOutcome:
    try:
        deleted = k8s.delete(INGRESS_ROUTE, route.namespace, route.name)
    except ApiException as e:
        logger.error("Error deleting IngressRoute %s: %s %s", route.identity, e.status, e.reason)
        return ItemOutcome.for_resource(route, OutcomeStatus.FAILED, f"{e.status} {e.reason}")
    except Exception as e:
        logger.error("Error deleting IngressRoute %s: %s", route.identity, e, exc_info=True)
        return ItemOutcome.for_resource(route, OutcomeStatus.FAILED, str(e))
    if not deleted:
        return ItemOutcome.for_resource(route, OutcomeStatus.SKIPPED, "already gone")
    logger.info("Deleted IngressRoute %s", route.identity)
    return ItemOutcome.for_resource(route, OutcomeStatus.DELETED)


def decommission_routes(
    k8s, routes: Iterable[KubeResource], proxy_namespace: str, max_workers: int | None = None,
) -> BatchResult:
    """Delete every routing rule outside the proxy namespace, each independently."""
    result = BatchResult(operation="decommission", kind=INGRESS_ROUTE.name)
    doomed: list[KubeResource] = []
    for route in routes:
        if route.namespace == proxy_namespace:
            result.outcomes.append(ItemOutcome.for_resource(route, OutcomeStatus.RETAINED, "proxy route"))
        else:
            doomed.append(route)
    if not doomed:
        return result
    workers = min(max_workers or default_settings.max_workers, len(doomed))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="delete-routes") as pool:
        result.outcomes.extend(pool.map(lambda r: _delete_route(k8s, r), doomed))
    return result


class CutoverController:
    """Point the source cluster's traffic at the target cluster.

    The proxy is fully deployed before any old route is touched, so there is
    never a moment without a route to serve traffic.
    """

    def __init__(
        self,
        config: Settings | None = None,
        fetch: Callable[[str], list[dict]] = fetch_manifest,
    ):
        self.config = config or default_settings
        self.fetch = fetch

    def run(
        self, source_client, source: ClusterSnapshot, target: ClusterSnapshot,
    ) -> CutoverResult:
        address = resolve_entrypoint(target.items(SERVICE))
        proxy = ProxyConfiguration(
            target_address=address,
            port=self.config.proxy_port,
            namespace=self.config.proxy_namespace,
            config_name=self.config.proxy_config_name,
        )
        docs = self.fetch(self.config.proxy_manifest_url)
        deploy = deploy_proxy(source_client, proxy, docs)

        # deploy_proxy has returned: the proxy route exists before any deletion starts
        decommission = decommission_routes(
            source_client,
            source.items(INGRESS_ROUTE),
            proxy.namespace,
            max_workers=self.config.max_workers,
        )
        if decommission.has_failures:
            logger.warning(
                "%d old IngressRoute(s) could not be deleted from '%s'",
                len(decommission.failed), source_client.name,
            )
        return CutoverResult(entrypoint=address, deploy=deploy, decommission=decommission)
