"""kmig snapshot <kubeconfig> - Inventory one cluster."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from kube_migrator.cli.options import OutputOption
from kube_migrator.core.errors import MigrationError
from kube_migrator.core.k8s_client import ClusterClient, ClusterCredentials
from kube_migrator.core.snapshot import load_snapshot
from kube_migrator.output.formatters import output_inventory

app = typer.Typer()


@app.callback(invoke_without_command=True)
def snapshot(
    kubeconfig: Path = typer.Argument(help="Kube-config of the cluster"),
    output: str = OutputOption,
    context: Optional[str] = typer.Option(None, "--context", help="Kubernetes context name"),
) -> None:
    """Count the migratable resources of each kind in a cluster."""
    credentials = ClusterCredentials(kubeconfig, context)
    try:
        snap = load_snapshot(ClusterClient(credentials))
    except MigrationError as e:
        typer.echo(f"Snapshot failed: {e}", err=True)
        raise typer.Exit(code=1)

    output_inventory(snap.cluster, snap.counts, output)
