"""Kubernetes API wrapper, one instance per cluster."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import yaml
from kubernetes import client, config
from kubernetes.client import ApiException

from kube_migrator.config.settings import settings
from kube_migrator.core.errors import CredentialError
from kube_migrator.models.kinds import ResourceKind

logger = logging.getLogger(__name__)

# kind -> (API attribute on ClusterClient, snake-case stem of the generated method names)
_TYPED_METHODS: dict[str, tuple[str, str]] = {
    "Namespace": ("core_v1", "namespace"),
    "ConfigMap": ("core_v1", "config_map"),
    "Secret": ("core_v1", "secret"),
    "Service": ("core_v1", "service"),
    "Deployment": ("apps_v1", "deployment"),
    "Ingress": ("networking_v1", "ingress"),
}


@dataclass(frozen=True)
class ClusterCredentials:
    """Where to find the credentials for one cluster."""

    kubeconfig: Path | None = None
    context: str | None = None

    @property
    def label(self) -> str:
        if self.context:
            return self.context
        if self.kubeconfig:
            return Path(self.kubeconfig).stem
        return "in-cluster"


class ClusterClient:
    """Thin wrapper around the Kubernetes Python client for a single cluster.

    Each instance owns its own ApiClient, so two clusters can be used side
    by side without touching the client library's global configuration.
    """

    def __init__(self, credentials: ClusterCredentials | None = None, name: str | None = None):
        self.credentials = credentials or ClusterCredentials()
        self.name = name or self.credentials.label
        self._core_v1: client.CoreV1Api | None = None
        self._apps_v1: client.AppsV1Api | None = None
        self._networking_v1: client.NetworkingV1Api | None = None
        self._custom: client.CustomObjectsApi | None = None
        self._api_client: client.ApiClient | None = None

    def __repr__(self) -> str:
        return f"ClusterClient(name={self.name!r})"

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        kubeconfig = self.credentials.kubeconfig
        cfg = client.Configuration()
        try:
            if kubeconfig is None:
                try:
                    config.load_kube_config(context=self.credentials.context, client_configuration=cfg)
                except config.ConfigException:
                    config.load_incluster_config(client_configuration=cfg)
            else:
                config.load_kube_config(
                    config_file=str(kubeconfig),
                    context=self.credentials.context,
                    client_configuration=cfg,
                )
        except (config.ConfigException, yaml.YAMLError, OSError, ValueError, TypeError) as e:
            raise CredentialError(f"Could not load credentials for cluster '{self.name}': {e}") from e
        # Fail fast on unreachable clusters; retrying is the caller's business
        cfg.retries = 1
        if not cfg.connection_pool_maxsize:
            cfg.connection_pool_maxsize = max(4, settings.max_workers)
        self._api_client = client.ApiClient(configuration=cfg)
        logger.debug("Loaded credentials for cluster '%s' (%s)", self.name, cfg.host)
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(api_client=self._load_config())
        return self._core_v1

    @property
    def apps_v1(self) -> client.AppsV1Api:
        if self._apps_v1 is None:
            self._apps_v1 = client.AppsV1Api(api_client=self._load_config())
        return self._apps_v1

    @property
    def networking_v1(self) -> client.NetworkingV1Api:
        if self._networking_v1 is None:
            self._networking_v1 = client.NetworkingV1Api(api_client=self._load_config())
        return self._networking_v1

    @property
    def custom(self) -> client.CustomObjectsApi:
        if self._custom is None:
            self._custom = client.CustomObjectsApi(api_client=self._load_config())
        return self._custom

    def _typed_method(self, kind: ResourceKind, verb: str) -> Callable[..., Any]:
        api_attr, stem = _TYPED_METHODS[kind.name]
        api = getattr(self, api_attr)
        if kind.cluster_scoped:
            method = f"{verb}_{stem}"
        elif verb == "list":
            method = f"list_{stem}_for_all_namespaces"
        else:
            method = f"{verb}_namespaced_{stem}"
        return getattr(api, method)

    def _to_dict(self, kind: ResourceKind, obj: Any) -> dict:
        data = self._load_config().sanitize_for_serialization(obj)
        # List items come back without their type header
        data.setdefault("apiVersion", kind.api_version)
        data.setdefault("kind", kind.name)
        return data

    def list(self, kind: ResourceKind) -> list[dict]:
        """List every resource of a kind across all namespaces, in API order."""
        if kind.is_custom:
            result = self.custom.list_cluster_custom_object(
                group=kind.group,
                version=kind.version,
                plural=kind.plural,
                _request_timeout=settings.request_timeout,
            )
            return list(result.get("items", []))
        result = self._typed_method(kind, "list")(_request_timeout=settings.request_timeout)
        return [self._to_dict(kind, item) for item in result.items]

    def get(self, kind: ResourceKind, namespace: str, name: str) -> dict | None:
        """Read a single resource; None when it does not exist."""
        try:
            if kind.is_custom:
                return self.custom.get_namespaced_custom_object(
                    group=kind.group,
                    version=kind.version,
                    namespace=namespace,
                    plural=kind.plural,
                    name=name,
                    _request_timeout=settings.request_timeout,
                )
            read = self._typed_method(kind, "read")
            if kind.cluster_scoped:
                result = read(name=name, _request_timeout=settings.request_timeout)
            else:
                result = read(name=name, namespace=namespace, _request_timeout=settings.request_timeout)
            return self._to_dict(kind, result) if result else None
        except ApiException as e:
            if e.status == 404:
                return None
            raise

    def create(self, kind: ResourceKind, namespace: str, body: dict) -> dict:
        """Create a resource. Raises ApiException (409 when it already exists)."""
        if kind.is_custom:
            return self.custom.create_namespaced_custom_object(
                group=kind.group,
                version=kind.version,
                namespace=namespace,
                plural=kind.plural,
                body=body,
                _request_timeout=settings.request_timeout,
            )
        create = self._typed_method(kind, "create")
        if kind.cluster_scoped:
            result = create(body=body, _request_timeout=settings.request_timeout)
        else:
            result = create(namespace=namespace, body=body, _request_timeout=settings.request_timeout)
        return self._to_dict(kind, result)

    def delete(self, kind: ResourceKind, namespace: str, name: str) -> bool:
        """Delete a resource. Returns False if it was already gone."""
        try:
            if kind.is_custom:
                self.custom.delete_namespaced_custom_object(
                    group=kind.group,
                    version=kind.version,
                    namespace=namespace,
                    plural=kind.plural,
                    name=name,
                    _request_timeout=settings.request_timeout,
                )
                return True
            delete = self._typed_method(kind, "delete")
            if kind.cluster_scoped:
                delete(name=name, _request_timeout=settings.request_timeout)
            else:
                delete(name=name, namespace=namespace, _request_timeout=settings.request_timeout)
            return True
        except ApiException as e:
            if e.status == 404:
                return False
            raise
