"""Strip cluster-assigned fields so a resource can be recreated elsewhere."""

from __future__ import annotations

import copy
from typing import Any

from kube_migrator.models.resource import KubeResource

# Metadata assigned by the API server that must never be replayed
SERVER_ASSIGNED_METADATA = ("resourceVersion", "uid")

# The only metadata a typed resource carries over
TYPED_METADATA_FIELDS = ("name", "namespace", "labels", "annotations")


def _sanitize_typed(resource: KubeResource) -> dict[str, Any]:
    kind = resource.kind
    source_meta = resource.raw.get("metadata") or {}
    metadata = {
        key: copy.deepcopy(source_meta[key])
        for key in TYPED_METADATA_FIELDS
        if source_meta.get(key) is not None
    }
    if kind.cluster_scoped:
        metadata.pop("namespace", None)

    clean: dict[str, Any] = {
        "apiVersion": kind.api_version,
        "kind": kind.name,
        "metadata": metadata,
    }
    for key in kind.payload_fields:
        if resource.raw.get(key) is not None:
            clean[key] = copy.deepcopy(resource.raw[key])
    return clean


def _sanitize_custom(resource: KubeResource) -> dict[str, Any]:
    clean = copy.deepcopy(resource.raw)
    clean.pop("status", None)
    clean["apiVersion"] = resource.kind.api_version
    clean["kind"] = resource.kind.name
    metadata = clean.get("metadata")
    if isinstance(metadata, dict):
        for key in SERVER_ASSIGNED_METADATA:
            metadata.pop(key, None)
    return clean


def sanitize(resource: KubeResource) -> KubeResource:
    """Return a copy of resource that is safe to create in another cluster.

    Typed kinds keep only name, namespace, labels and annotations from their
    metadata plus the kind's payload fields; custom kinds keep everything but
    status and the server-assigned metadata. The input is never modified.
    """
    if resource.kind.is_custom:
        clean = _sanitize_custom(resource)
    else:
        clean = _sanitize_typed(resource)
    return KubeResource(resource.kind, clean)
