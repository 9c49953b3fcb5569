"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from kube_migrator.models.diff import PlanResult
from kube_migrator.models.outcome import BatchResult, MigrationReport

console = Console()


def _batch_to_dict(batch: BatchResult) -> dict[str, Any]:
    return {
        "operation": batch.operation,
        "kind": batch.kind,
        "summary": batch.summary,
        "items": [
            {
                "kind": o.kind,
                "name": o.name,
                "namespace": o.namespace,
                "status": o.status.value,
                "detail": o.detail,
            }
            for o in batch.outcomes
        ],
    }


def report_to_dict(report: MigrationReport) -> dict[str, Any]:
    return {
        "source": report.source,
        "target": report.target,
        "completed": report.completed,
        "last_stage": report.last_stage,
        "entrypoint": report.entrypoint,
        "error": report.error,
        "summary": report.summary,
        "stages": [_batch_to_dict(s) for s in report.stages],
    }


def plan_to_dict(plan: PlanResult) -> dict[str, Any]:
    return {
        "source": plan.source,
        "target": plan.target,
        "summary": plan.summary,
        "resources": [
            {
                "kind": d.kind,
                "name": d.name,
                "namespace": d.namespace,
                "status": d.status.value,
                "details": d.details,
            }
            for d in plan.diffs
        ],
    }


def _dump(data: Any, fmt: str) -> bool:
    if fmt == "json":
        console.print_json(json.dumps(data, indent=2))
        return True
    if fmt == "yaml":
        console.print(yaml.dump(data, default_flow_style=False, sort_keys=False))
        return True
    return False


def output_report(report: MigrationReport, fmt: str, show_all: bool = False) -> None:
    if _dump(report_to_dict(report), fmt):
        return
    from kube_migrator.output.tables import report_table, stage_summary_table
    console.print(report_table(report, show_all=show_all))
    console.print(stage_summary_table(report))
    if report.entrypoint:
        console.print(f"\nTraffic redirected to [bold]{report.entrypoint}[/bold]")
    if report.has_failures:
        console.print("[yellow]Some resources failed; see the log for details.[/yellow]")


def output_plan(plan: PlanResult, fmt: str) -> None:
    if _dump(plan_to_dict(plan), fmt):
        return
    from kube_migrator.output.tables import plan_table
    console.print(plan_table(plan))
    console.print(f"\n{len(plan.pending)} resource(s) would be created: {plan.summary}")


def output_inventory(cluster: str, counts: dict[str, int], fmt: str) -> None:
    if _dump({"cluster": cluster, "counts": counts}, fmt):
        return
    from kube_migrator.output.tables import inventory_table
    console.print(inventory_table(cluster, counts))
