"""Dry-run plan models."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class PlanStatus(enum.Enum):
    MISSING = "missing"
    IN_SYNC = "in_sync"
    DIVERGED = "diverged"


@dataclass
class ResourceDiff:
    kind: str
    name: str
    namespace: str
    status: PlanStatus
    details: list[str] = field(default_factory=list)

    @property
    def will_create(self) -> bool:
        return self.status == PlanStatus.MISSING


@dataclass
class PlanResult:
    source: str
    target: str
    diffs: list[ResourceDiff] = field(default_factory=list)

    @property
    def pending(self) -> list[ResourceDiff]:
        return [d for d in self.diffs if d.will_create]

    @property
    def summary(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for d in self.diffs:
            key = d.status.value
            counts[key] = counts.get(key, 0) + 1
        return counts
