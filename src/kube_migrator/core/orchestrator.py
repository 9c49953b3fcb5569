"""Run a full migration: snapshots, replication in dependency order, cutover."""

from __future__ import annotations

import enum
import logging

from kube_migrator.config.settings import Settings, settings as default_settings
from kube_migrator.core.cutover import CutoverController
from kube_migrator.core.errors import ConfigurationError, MigrationError
from kube_migrator.core.k8s_client import ClusterClient, ClusterCredentials
from kube_migrator.core.replicator import replicate_kind
from kube_migrator.core.snapshot import ClusterSnapshot, load_snapshots
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
from kube_migrator.models.outcome import MigrationReport

logger = logging.getLogger(__name__)


class Stage(enum.Enum):
    LOAD_SNAPSHOTS = "load_snapshots"
    REPLICATE_NAMESPACES = "replicate_namespaces"
    REPLICATE_CONFIG_MAPS = "replicate_config_maps"
    REPLICATE_SECRETS = "replicate_secrets"
    REPLICATE_DEPLOYMENTS = "replicate_deployments"
    REPLICATE_SERVICES = "replicate_services"
    REPLICATE_INGRESSES = "replicate_ingresses"
    REPLICATE_MIDDLEWARE = "replicate_middleware"
    REPLICATE_ROUTING_RULES = "replicate_routing_rules"
    CUTOVER = "cutover"
    DONE = "done"


REPLICATION_STAGES: tuple[tuple[Stage, ResourceKind], ...] = (
    (Stage.REPLICATE_NAMESPACES, NAMESPACE),
    (Stage.REPLICATE_CONFIG_MAPS, CONFIG_MAP),
    (Stage.REPLICATE_SECRETS, SECRET),
    (Stage.REPLICATE_DEPLOYMENTS, DEPLOYMENT),
    (Stage.REPLICATE_SERVICES, SERVICE),
    (Stage.REPLICATE_INGRESSES, INGRESS),
    (Stage.REPLICATE_MIDDLEWARE, MIDDLEWARE),
    (Stage.REPLICATE_ROUTING_RULES, INGRESS_ROUTE),
)


class MigrationOrchestrator:
    """Linear migration pipeline between two clusters.

    Snapshot loading is all-or-nothing and happens before any mutation.
    Replication stages are best-effort per resource and always advance.
    A cutover error is raised as the run's terminal error; the report
    (``self.report``) still holds every replication outcome.
    """

    def __init__(
        self,
        source,
        target,
        config: Settings | None = None,
        cutover: CutoverController | None = None,
        skip_cutover: bool = False,
    ):
        self.source = source
        self.target = target
        self.config = config or default_settings
        self.cutover = cutover or CutoverController(self.config)
        self.skip_cutover = skip_cutover
        self.report = MigrationReport(source=source.name, target=target.name)
        self.stage: Stage | None = None

    def _enter(self, stage: Stage) -> None:
        self.stage = stage
        self.report.last_stage = stage.value
        logger.debug("Entering stage %s", stage.value)

    def replicate(self, source: ClusterSnapshot, target: ClusterSnapshot) -> None:
        for stage, kind in REPLICATION_STAGES:
            self._enter(stage)
            result = replicate_kind(kind, source, target, self.target, max_workers=self.config.max_workers)
            self.report.stages.append(result)
            logger.info("%s replicated: %s", kind.plural, result.summary or "nothing to do")

    def run(self) -> MigrationReport:
        try:
            if not self.skip_cutover and not self.config.proxy_manifest_url:
                raise ConfigurationError(
                    "No proxy manifest configured: set KMIG_PROXY_MANIFEST_URL or pass --proxy-manifest"
                )
            self._enter(Stage.LOAD_SNAPSHOTS)
            source, target = load_snapshots(self.source, self.target)

            self.replicate(source, target)

            if self.skip_cutover:
                logger.info("Cutover skipped")
            else:
                self._enter(Stage.CUTOVER)
                result = self.cutover.run(self.source, source, target)
                self.report.entrypoint = result.entrypoint
                self.report.stages.extend([result.deploy, result.decommission])
                logger.info("Traffic from '%s' now routed to %s", self.source.name, result.entrypoint)
        except MigrationError as e:
            self.report.error = str(e)
            e.report = self.report
            logger.error("Migration aborted during %s: %s", self.stage.value if self.stage else "startup", e)
            raise

        self._enter(Stage.DONE)
        return self.report


def run_migration(
    source: ClusterCredentials,
    target: ClusterCredentials,
    config: Settings | None = None,
    skip_cutover: bool = False,
) -> MigrationReport:
    """Migrate everything from the source cluster to the target cluster.

    A MigrationError raised from here carries the partial report as ``report``.
    """
    source_client = ClusterClient(source, name=f"source:{source.label}")
    target_client = ClusterClient(target, name=f"target:{target.label}")
    orchestrator = MigrationOrchestrator(
        source_client, target_client, config=config, skip_cutover=skip_cutover,
    )
    return orchestrator.run()
