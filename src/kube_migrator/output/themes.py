"""Outcome and plan status color maps."""

from kube_migrator.models.diff import PlanStatus
from kube_migrator.models.outcome import OutcomeStatus

OUTCOME_COLORS: dict[OutcomeStatus, str] = {
    OutcomeStatus.CREATED: "green",
    OutcomeStatus.SKIPPED: "dim",
    OutcomeStatus.FAILED: "red bold",
    OutcomeStatus.DELETED: "yellow",
    OutcomeStatus.RETAINED: "cyan",
}

PLAN_COLORS: dict[PlanStatus, str] = {
    PlanStatus.MISSING: "green",
    PlanStatus.IN_SYNC: "dim",
    PlanStatus.DIVERGED: "yellow",
}


def styled_outcome(status: OutcomeStatus) -> str:
    color = OUTCOME_COLORS.get(status, "white")
    return f"[{color}]{status.value}[/{color}]"


def styled_plan_status(status: PlanStatus) -> str:
    color = PLAN_COLORS.get(status, "white")
    return f"[{color}]{status.value}[/{color}]"
