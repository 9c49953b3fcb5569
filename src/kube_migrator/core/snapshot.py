"""Point-in-time inventory of a cluster's migratable resources."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError

from kube_migrator.core.errors import SnapshotLoadError
from kube_migrator.models.kinds import MIGRATION_ORDER, ResourceKind
from kube_migrator.models.resource import KubeResource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterSnapshot:
    """Resources of one cluster grouped by kind, in the order the API listed them."""

    cluster: str
    resources: Mapping[str, tuple[KubeResource, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {kind: tuple(items) for kind, items in self.resources.items()}
        object.__setattr__(self, "resources", MappingProxyType(frozen))

    def items(self, kind: ResourceKind) -> tuple[KubeResource, ...]:
        return self.resources.get(kind.name, ())

    def __getitem__(self, kind: ResourceKind) -> tuple[KubeResource, ...]:
        return self.items(kind)

    @property
    def counts(self) -> dict[str, int]:
        return {kind: len(items) for kind, items in self.resources.items()}

    @classmethod
    def from_raw(
        cls, cluster: str, raw: Mapping[ResourceKind, Iterable[dict]],
    ) -> ClusterSnapshot:
        return cls(
            cluster=cluster,
            resources={
                kind.name: tuple(KubeResource(kind, item) for item in items)
                for kind, items in raw.items()
            },
        )


def load_snapshot(
    k8s, kinds: Iterable[ResourceKind] = MIGRATION_ORDER,
) -> ClusterSnapshot:
    """Bulk-list every kind from a live cluster.

    Any listing failure is fatal: without a complete inventory the diff
    against the other cluster would be wrong.
    """
    raw: dict[ResourceKind, list[dict]] = {}
    for kind in kinds:
        try:
            raw[kind] = k8s.list(kind)
        except ApiException as e:
            logger.error("Error listing %s in cluster '%s': %s", kind, k8s.name, e.reason)
            raise SnapshotLoadError(k8s.name, kind.name, f"{e.status} {e.reason}") from e
        except HTTPError as e:
            logger.error("Cluster '%s' unreachable while listing %s", k8s.name, kind)
            raise SnapshotLoadError(k8s.name, kind.name, str(e)) from e
        logger.info("Loaded %d %s from cluster '%s'", len(raw[kind]), kind.plural, k8s.name)
    return ClusterSnapshot.from_raw(k8s.name, raw)


def load_snapshots(
    source, target, kinds: Iterable[ResourceKind] = MIGRATION_ORDER,
) -> tuple[ClusterSnapshot, ClusterSnapshot]:
    """Load the source and target snapshots in parallel."""
    kinds = tuple(kinds)
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="snapshot") as pool:
        source_future = pool.submit(load_snapshot, source, kinds)
        target_future = pool.submit(load_snapshot, target, kinds)
        # .result() re-raises the loader's exception in this thread
        return source_future.result(), target_future.result()
