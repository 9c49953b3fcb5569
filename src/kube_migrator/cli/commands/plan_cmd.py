"""kmig plan <source> <target> - Dry-run a migration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from kube_migrator.cli.options import OutputOption, SourceContextOption, TargetContextOption
from kube_migrator.core.diff_engine import plan_migration
from kube_migrator.core.errors import MigrationError
from kube_migrator.core.k8s_client import ClusterClient, ClusterCredentials
from kube_migrator.core.snapshot import load_snapshots
from kube_migrator.models.kinds import MIGRATION_ORDER, kind_for
from kube_migrator.output.formatters import output_plan

app = typer.Typer()


@app.callback(invoke_without_command=True)
def plan(
    source: Path = typer.Argument(help="Kube-config of the cluster to migrate from"),
    target: Path = typer.Argument(help="Kube-config of the cluster to migrate to"),
    output: str = OutputOption,
    source_context: Optional[str] = SourceContextOption,
    target_context: Optional[str] = TargetContextOption,
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="Only plan this kind"),
) -> None:
    """Compare both clusters without changing either of them."""
    try:
        kinds = (kind_for(kind),) if kind else MIGRATION_ORDER
        source_snap, target_snap = load_snapshots(
            ClusterClient(ClusterCredentials(source, source_context), name="source"),
            ClusterClient(ClusterCredentials(target, target_context), name="target"),
            kinds=kinds,
        )
        result = plan_migration(source_snap, target_snap, kinds=kinds)
    except MigrationError as e:
        typer.echo(f"Plan failed: {e}", err=True)
        raise typer.Exit(code=1)

    output_plan(result, output)
