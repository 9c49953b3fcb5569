"""Rich table builders for each command."""

from __future__ import annotations

from rich.table import Table

from kube_migrator.models.diff import PlanResult
from kube_migrator.models.outcome import MigrationReport, OutcomeStatus
from kube_migrator.output.themes import styled_outcome, styled_plan_status


def report_table(report: MigrationReport, show_all: bool = False) -> Table:
    """One row per item outcome; skipped items only when show_all is set."""
    table = Table(title=f"Migration: {report.source} -> {report.target}", expand=True)
    table.add_column("Operation", style="dim", no_wrap=True)
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Namespace", style="blue", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Result", no_wrap=True)
    table.add_column("Detail", max_width=50)

    for stage in report.stages:
        for o in stage.outcomes:
            if not show_all and o.status == OutcomeStatus.SKIPPED:
                continue
            table.add_row(
                stage.operation,
                o.kind,
                o.namespace or "-",
                o.name,
                styled_outcome(o.status),
                o.detail,
            )
    return table


def stage_summary_table(report: MigrationReport) -> Table:
    table = Table(title="Stages", expand=False)
    table.add_column("Operation", style="dim")
    table.add_column("Kind", style="cyan")
    for status in ("created", "skipped", "failed", "deleted", "retained"):
        table.add_column(status.capitalize(), justify="right")

    for stage in report.stages:
        summary = stage.summary
        table.add_row(
            stage.operation,
            stage.kind,
            *(str(summary.get(s, 0)) for s in ("created", "skipped", "failed", "deleted", "retained")),
        )
    return table


def plan_table(plan: PlanResult) -> Table:
    table = Table(title=f"Plan: {plan.source} -> {plan.target}", expand=True)
    table.add_column("Kind", style="cyan")
    table.add_column("Namespace", style="blue")
    table.add_column("Name", style="bold")
    table.add_column("Status", no_wrap=True)
    table.add_column("Details", max_width=60)

    for d in plan.diffs:
        detail = "\n".join(d.details[:3])
        if len(d.details) > 3:
            detail += f"\n... +{len(d.details) - 3} more"
        table.add_row(d.kind, d.namespace or "-", d.name, styled_plan_status(d.status), detail)
    return table


def inventory_table(cluster: str, counts: dict[str, int]) -> Table:
    table = Table(title=f"Resources in {cluster}", expand=False)
    table.add_column("Kind", style="cyan")
    table.add_column("Count", justify="right", style="bold")
    for kind, count in counts.items():
        table.add_row(kind, str(count))
    return table
