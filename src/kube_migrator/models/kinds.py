"""Registry of the resource kinds a migration knows how to move."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from kube_migrator.core.errors import UnsupportedKindError


class ResourceFamily(enum.Enum):
    TYPED = "typed"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ResourceKind:
    name: str
    api_version: str
    plural: str
    family: ResourceFamily
    cluster_scoped: bool = False
    # Top-level fields replayed on creation besides metadata
    payload_fields: tuple[str, ...] = ("spec",)

    @property
    def group(self) -> str:
        if "/" not in self.api_version:
            return ""
        return self.api_version.rsplit("/", 1)[0]

    @property
    def version(self) -> str:
        return self.api_version.rsplit("/", 1)[-1]

    @property
    def is_custom(self) -> bool:
        return self.family is ResourceFamily.CUSTOM

    def __str__(self) -> str:
        return self.name


TRAEFIK_API_VERSION = "traefik.containo.us/v1alpha1"

NAMESPACE = ResourceKind("Namespace", "v1", "namespaces", ResourceFamily.TYPED, cluster_scoped=True)
CONFIG_MAP = ResourceKind(
    "ConfigMap", "v1", "configmaps", ResourceFamily.TYPED,
    payload_fields=("data", "binaryData", "immutable"),
)
SECRET = ResourceKind(
    "Secret", "v1", "secrets", ResourceFamily.TYPED,
    payload_fields=("type", "data", "stringData", "immutable"),
)
DEPLOYMENT = ResourceKind("Deployment", "apps/v1", "deployments", ResourceFamily.TYPED)
SERVICE = ResourceKind("Service", "v1", "services", ResourceFamily.TYPED)
INGRESS = ResourceKind("Ingress", "networking.k8s.io/v1", "ingresses", ResourceFamily.TYPED)
MIDDLEWARE = ResourceKind("Middleware", TRAEFIK_API_VERSION, "middlewares", ResourceFamily.CUSTOM)
INGRESS_ROUTE = ResourceKind("IngressRoute", TRAEFIK_API_VERSION, "ingressroutes", ResourceFamily.CUSTOM)

# Namespaces first, config before the workloads mounting it, workloads before routing.
MIGRATION_ORDER: tuple[ResourceKind, ...] = (
    NAMESPACE,
    CONFIG_MAP,
    SECRET,
    DEPLOYMENT,
    SERVICE,
    INGRESS,
    MIDDLEWARE,
    INGRESS_ROUTE,
)

KINDS_BY_NAME: dict[str, ResourceKind] = {k.name: k for k in MIGRATION_ORDER}


def kind_for(name: str) -> ResourceKind:
    """Look up a registered kind by name, case-insensitively."""
    kind = KINDS_BY_NAME.get(name)
    if kind is not None:
        return kind
    for candidate in MIGRATION_ORDER:
        if candidate.name.lower() == name.lower() or candidate.plural == name.lower():
            return candidate
    raise UnsupportedKindError(f"Unsupported resource kind: {name!r}")
