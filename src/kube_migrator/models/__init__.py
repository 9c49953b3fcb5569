"""Data models for kube-migrator."""

from __future__ import annotations

from kube_migrator.models.kinds import (
    CONFIG_MAP,
    DEPLOYMENT,
    INGRESS,
    INGRESS_ROUTE,
    MIDDLEWARE,
    MIGRATION_ORDER,
    NAMESPACE,
    SECRET,
    SERVICE,
    ResourceFamily,
    ResourceKind,
    kind_for,
)
from kube_migrator.models.resource import KubeResource

__all__ = [
    "CONFIG_MAP",
    "DEPLOYMENT",
    "INGRESS",
    "INGRESS_ROUTE",
    "MIDDLEWARE",
    "MIGRATION_ORDER",
    "NAMESPACE",
    "SECRET",
    "SERVICE",
    "KubeResource",
    "ResourceFamily",
    "ResourceKind",
    "kind_for",
]
