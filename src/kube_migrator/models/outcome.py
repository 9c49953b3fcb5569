"""Per-item outcomes of batch operations."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from kube_migrator.models.resource import KubeResource


class OutcomeStatus(enum.Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"
    DELETED = "deleted"
    RETAINED = "retained"


@dataclass
class ItemOutcome:
    kind: str
    name: str
    namespace: str
    status: OutcomeStatus
    detail: str = ""

    @classmethod
    def for_resource(
        cls, resource: KubeResource, status: OutcomeStatus, detail: str = "",
    ) -> ItemOutcome:
        meta = resource.raw.get("metadata") or {}
        return cls(
            kind=resource.kind.name,
            name=meta.get("name", ""),
            namespace=meta.get("namespace", "") or "",
            status=status,
            detail=detail,
        )

    @property
    def ok(self) -> bool:
        return self.status != OutcomeStatus.FAILED


@dataclass
class BatchResult:
    operation: str
    kind: str
    outcomes: list[ItemOutcome] = field(default_factory=list)

    def _with(self, status: OutcomeStatus) -> list[ItemOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def created(self) -> list[ItemOutcome]:
        return self._with(OutcomeStatus.CREATED)

    @property
    def failed(self) -> list[ItemOutcome]:
        return self._with(OutcomeStatus.FAILED)

    @property
    def deleted(self) -> list[ItemOutcome]:
        return self._with(OutcomeStatus.DELETED)

    @property
    def has_failures(self) -> bool:
        return any(not o.ok for o in self.outcomes)

    @property
    def summary(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for o in self.outcomes:
            key = o.status.value
            counts[key] = counts.get(key, 0) + 1
        return counts


@dataclass
class MigrationReport:
    source: str
    target: str
    stages: list[BatchResult] = field(default_factory=list)
    entrypoint: str = ""
    last_stage: str = ""
    error: str = ""

    @property
    def completed(self) -> bool:
        return self.last_stage == "done" and not self.error

    @property
    def has_failures(self) -> bool:
        return any(s.has_failures for s in self.stages)

    @property
    def summary(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for stage in self.stages:
            for key, value in stage.summary.items():
                counts[key] = counts.get(key, 0) + value
        return counts
