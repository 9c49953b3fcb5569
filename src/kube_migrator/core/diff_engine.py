"""Compute which source resources are missing from the target cluster."""

from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

from deepdiff import DeepDiff

from kube_migrator.core.sanitizer import sanitize
from kube_migrator.core.snapshot import ClusterSnapshot
from kube_migrator.models.diff import PlanResult, PlanStatus, ResourceDiff
from kube_migrator.models.kinds import MIGRATION_ORDER, ResourceKind
from kube_migrator.models.resource import KubeResource

logger = logging.getLogger(__name__)

# Fields the target cluster assigns or rewrites on its own, as DeepDiff paths
IGNORED_PATHS = {
    "root['metadata']['creationTimestamp']",
    "root['metadata']['generation']",
    "root['metadata']['managedFields']",
    "root['metadata']['selfLink']",
    "root['metadata']['annotations']['kubectl.kubernetes.io/last-applied-configuration']",
    "root['metadata']['annotations']['deployment.kubernetes.io/revision']",
    "root['spec']['clusterIP']",
    "root['spec']['clusterIPs']",
}

_PATH_STEP = re.compile(r"\['((?:[^'\\]|\\.)*)'\]|\[(\d+)\]")


def resource_identity(resource: KubeResource) -> str:
    """`namespace:name`, or just `name` for cluster-scoped kinds.

    Raises MissingIdentityError when the record lacks either field.
    """
    return resource.identity


def diff(
    source: Sequence[KubeResource], target: Iterable[KubeResource],
) -> list[KubeResource]:
    """Return the source resources whose identity is absent from target.

    Source order is preserved; neither input is modified.
    """
    present = {resource_identity(r) for r in target}
    return [r for r in source if resource_identity(r) not in present]


def diff_snapshots(
    kind: ResourceKind, source: ClusterSnapshot, target: ClusterSnapshot,
) -> list[KubeResource]:
    missing = diff(source.items(kind), target.items(kind))
    logger.info(
        "%s: %d of %d missing in cluster '%s'",
        kind, len(missing), len(source.items(kind)), target.cluster,
    )
    for resource in missing:
        logger.debug("  missing %s %s", kind, resource.identity)
    return missing


def plan_kind(
    kind: ResourceKind, source: ClusterSnapshot, target: ClusterSnapshot,
) -> list[ResourceDiff]:
    """Classify each source resource as missing, in sync, or diverged in the target."""
    by_identity = {resource_identity(r): r for r in target.items(kind)}
    diffs: list[ResourceDiff] = []

    for resource in source.items(kind):
        counterpart = by_identity.get(resource_identity(resource))
        if counterpart is None:
            diffs.append(ResourceDiff(
                kind=kind.name,
                name=resource.name,
                namespace=resource.namespace,
                status=PlanStatus.MISSING,
                details=["Will be created in target"],
            ))
            continue

        delta = DeepDiff(
            sanitize(resource).raw,
            sanitize(counterpart).raw,
            ignore_order=True,
            exclude_paths=IGNORED_PATHS,
            verbose_level=2,
        )
        if delta:
            diffs.append(ResourceDiff(
                kind=kind.name,
                name=resource.name,
                namespace=resource.namespace,
                status=PlanStatus.DIVERGED,
                details=_describe_delta(delta) + ["Exists in target; will be skipped"],
            ))
        else:
            diffs.append(ResourceDiff(
                kind=kind.name,
                name=resource.name,
                namespace=resource.namespace,
                status=PlanStatus.IN_SYNC,
            ))
    return diffs


def plan_migration(
    source: ClusterSnapshot,
    target: ClusterSnapshot,
    kinds: Iterable[ResourceKind] = MIGRATION_ORDER,
) -> PlanResult:
    result = PlanResult(source=source.cluster, target=target.cluster)
    for kind in kinds:
        result.diffs.extend(plan_kind(kind, source, target))
    return result


def _field_path(path: str) -> str:
    """root['spec']['ports'][0]['port'] -> spec.ports[0].port"""
    out = ""
    for key, index in _PATH_STEP.findall(path):
        if index:
            out += f"[{index}]"
        else:
            out += f".{key}" if out else key
    return out or path


# DeepDiff report type -> how a field-level change reads from the source's side
_ONE_SIDED = (
    ("dictionary_item_removed", "not set in target"),
    ("dictionary_item_added", "only set in target"),
    ("iterable_item_removed", "item missing in target"),
    ("iterable_item_added", "extra item in target"),
)


def _describe_delta(delta: DeepDiff) -> list[str]:
    lines: list[str] = []
    for change_type in ("values_changed", "type_changes"):
        for path, change in delta.get(change_type, {}).items():
            lines.append(
                f"{_field_path(path)}: source={change.get('old_value')!r} "
                f"target={change.get('new_value')!r}"
            )
    for change_type, wording in _ONE_SIDED:
        for path in delta.get(change_type, {}):
            lines.append(f"{_field_path(path)}: {wording}")
    return lines or ["Payloads differ"]
