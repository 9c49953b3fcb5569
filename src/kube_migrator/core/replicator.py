"""Create the resources a target cluster is missing."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from kubernetes.client import ApiException

from kube_migrator.config.settings import settings
from kube_migrator.core.diff_engine import diff_snapshots
from kube_migrator.core.sanitizer import sanitize
from kube_migrator.core.snapshot import ClusterSnapshot
from kube_migrator.models.kinds import ResourceKind
from kube_migrator.models.outcome import BatchResult, ItemOutcome, OutcomeStatus
from kube_migrator.models.resource import KubeResource

logger = logging.getLogger(__name__)


def _create_one(k8s, resource: KubeResource) -> ItemOutcome:
    """Sanitize and create a single resource; failures become outcomes."""
    kind = resource.kind
    clean = sanitize(resource)
    try:
        k8s.create(kind, clean.namespace, clean.raw)
    except ApiException as e:
        if e.status == 409:
            logger.info("%s %s already exists in '%s'. Skipping.", kind, clean.identity, k8s.name)
            return ItemOutcome.for_resource(clean, OutcomeStatus.SKIPPED, "already exists")
        logger.error("Error creating %s %s in '%s': %s %s", kind, clean.identity, k8s.name, e.status, e.reason)
        return ItemOutcome.for_resource(clean, OutcomeStatus.FAILED, f"{e.status} {e.reason}")
    except Exception as e:
        logger.error("Error creating %s %s in '%s': %s", kind, clean.identity, k8s.name, e, exc_info=True)
        return ItemOutcome.for_resource(clean, OutcomeStatus.FAILED, str(e))
    logger.info("%s %s created in '%s'", kind, clean.identity, k8s.name)
    return ItemOutcome.for_resource(clean, OutcomeStatus.CREATED)


def replicate_resources(
    k8s, kind: ResourceKind, resources: Iterable[KubeResource], max_workers: int | None = None,
) -> BatchResult:
    """Create each resource independently; one failure never stops the others."""
    resources = list(resources)
    result = BatchResult(operation="replicate", kind=kind.name)
    if not resources:
        return result
    workers = min(max_workers or settings.max_workers, len(resources))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"create-{kind.plural}") as pool:
        # map() keeps the outcomes in diff order
        result.outcomes.extend(pool.map(lambda r: _create_one(k8s, r), resources))
    return result


def replicate_kind(
    kind: ResourceKind,
    source: ClusterSnapshot,
    target: ClusterSnapshot,
    target_client,
    max_workers: int | None = None,
) -> BatchResult:
    """Diff one kind between two snapshots and create what the target lacks."""
    missing = diff_snapshots(kind, source, target)
    result = replicate_resources(target_client, kind, missing, max_workers=max_workers)
    if result.has_failures:
        logger.warning("%s: %d of %d creations failed", kind, len(result.failed), len(missing))
    return result


def create_if_absent(k8s, resource: KubeResource) -> ItemOutcome:
    """Create a single named resource unless it already exists.

    An existence check failing for any reason other than not-found is
    raised to the caller, as is a failed creation.
    """
    kind = resource.kind
    namespace = resource.namespace
    if k8s.get(kind, namespace, resource.name) is not None:
        logger.info("%s %s already exists in '%s'. Skipping creation.", kind, resource.identity, k8s.name)
        return ItemOutcome.for_resource(resource, OutcomeStatus.SKIPPED, "already exists")
    try:
        k8s.create(kind, namespace, resource.raw)
    except ApiException as e:
        # Lost a race with another run creating the same resource
        if e.status == 409:
            logger.info("%s %s was created concurrently. Skipping.", kind, resource.identity)
            return ItemOutcome.for_resource(resource, OutcomeStatus.SKIPPED, "already exists")
        raise
    logger.info("%s %s created in '%s'", kind, resource.identity, k8s.name)
    return ItemOutcome.for_resource(resource, OutcomeStatus.CREATED)
