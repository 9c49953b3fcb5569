"""Turn parsed manifest documents into resources ready for creation."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from kube_migrator.core.errors import ManifestError, MissingIdentityError, UnsupportedKindError
from kube_migrator.models.kinds import (
    CONFIG_MAP,
    DEPLOYMENT,
    INGRESS,
    INGRESS_ROUTE,
    MIDDLEWARE,
    NAMESPACE,
    SECRET,
    SERVICE,
    ResourceKind,
)
from kube_migrator.models.resource import KubeResource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Overrides:
    """Field rewrites applied while materializing a manifest.

    port: every declared container/service port is rewritten to this value.
    default_namespace: used for documents that do not name a namespace.
    """

    port: int | None = None
    default_namespace: str | None = None


def _list_at(obj: Any, path: tuple[str, ...], kind: str, required: bool) -> list:
    current = obj
    for key in path:
        if not isinstance(current, dict) or current.get(key) is None:
            if required:
                raise ManifestError(f"{kind} manifest has no {'.'.join(path)}")
            return []
        current = current[key]
    if not isinstance(current, list):
        raise ManifestError(f"{kind} manifest field {'.'.join(path)} is not a list")
    return current


def _deployment(doc: dict, overrides: Overrides) -> None:
    containers = _list_at(doc, ("spec", "template", "spec", "containers"), "Deployment", True)
    if overrides.port is None:
        return
    for container in containers:
        for port in container.get("ports") or []:
            port["containerPort"] = overrides.port


def _service(doc: dict, overrides: Overrides) -> None:
    ports = _list_at(doc, ("spec", "ports"), "Service", True)
    if overrides.port is None:
        return
    for port in ports:
        port["port"] = overrides.port
        port["targetPort"] = overrides.port


def _ingress(doc: dict, overrides: Overrides) -> None:
    if overrides.port is None:
        return
    for rule in _list_at(doc, ("spec", "rules"), "Ingress", False):
        for path in _list_at(rule, ("http", "paths"), "Ingress", False):
            service = (path.get("backend") or {}).get("service")
            if isinstance(service, dict):
                service["port"] = {"number": overrides.port}


def _ingress_route(doc: dict, overrides: Overrides) -> None:
    routes = _list_at(doc, ("spec", "routes"), "IngressRoute", True)
    if overrides.port is None:
        return
    for route in routes:
        for service in route.get("services") or []:
            service["port"] = overrides.port


def _no_overrides(doc: dict, overrides: Overrides) -> None:
    pass


_CONVERTERS: dict[str, tuple[ResourceKind, Callable[[dict, Overrides], None]]] = {
    NAMESPACE.name: (NAMESPACE, _no_overrides),
    CONFIG_MAP.name: (CONFIG_MAP, _no_overrides),
    SECRET.name: (SECRET, _no_overrides),
    DEPLOYMENT.name: (DEPLOYMENT, _deployment),
    SERVICE.name: (SERVICE, _service),
    INGRESS.name: (INGRESS, _ingress),
    MIDDLEWARE.name: (MIDDLEWARE, _no_overrides),
    INGRESS_ROUTE.name: (INGRESS_ROUTE, _ingress_route),
}


def materialize(doc: Mapping[str, Any], overrides: Overrides | None = None) -> KubeResource:
    """Convert one manifest document into a resource of its declared kind.

    Raises UnsupportedKindError for kinds without a converter and
    ManifestError for documents missing the fields their kind needs.
    """
    overrides = overrides or Overrides()
    kind_name = doc.get("kind")
    if not kind_name:
        raise ManifestError("Manifest document has no kind")
    entry = _CONVERTERS.get(kind_name)
    if entry is None:
        raise UnsupportedKindError(f"Unsupported resource kind in manifest: {kind_name!r}")
    kind, convert = entry

    body = copy.deepcopy(dict(doc))
    body["apiVersion"] = kind.api_version
    body["kind"] = kind.name
    body.pop("status", None)
    metadata = body.setdefault("metadata", {})
    if not isinstance(metadata, dict):
        raise ManifestError(f"{kind} manifest metadata is not a mapping")
    if kind.cluster_scoped:
        metadata.pop("namespace", None)
    elif not metadata.get("namespace") and overrides.default_namespace:
        metadata["namespace"] = overrides.default_namespace

    convert(body, overrides)

    resource = KubeResource(kind, body)
    try:
        identity = resource.identity
    except MissingIdentityError as e:
        raise ManifestError(str(e)) from e
    logger.debug("Materialized %s %s", kind, identity)
    return resource
