"""kmig migrate <source> <target> - Run a full migration."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer

from kube_migrator.cli.options import OutputOption, SourceContextOption, TargetContextOption
from kube_migrator.config.settings import settings
from kube_migrator.core.errors import MigrationError
from kube_migrator.core.k8s_client import ClusterCredentials
from kube_migrator.core.orchestrator import run_migration
from kube_migrator.output.formatters import output_report

app = typer.Typer()


@app.callback(invoke_without_command=True)
def migrate(
    source: Path = typer.Argument(help="Kube-config of the cluster to migrate from"),
    target: Path = typer.Argument(help="Kube-config of the cluster to migrate to"),
    output: str = OutputOption,
    source_context: Optional[str] = SourceContextOption,
    target_context: Optional[str] = TargetContextOption,
    proxy_manifest: Optional[str] = typer.Option(
        None, "--proxy-manifest", help="URL or path of the proxy manifest",
    ),
    proxy_port: Optional[int] = typer.Option(None, "--proxy-port", min=1, max=65535, help="Proxy forwarding port"),
    skip_cutover: bool = typer.Option(False, "--skip-cutover", help="Replicate resources only"),
    show_all: bool = typer.Option(False, "--all", "-a", help="Also list skipped resources"),
) -> None:
    """Copy missing resources to the target cluster, then redirect traffic to it."""
    config = replace(
        settings,
        proxy_manifest_url=proxy_manifest or settings.proxy_manifest_url,
        proxy_port=proxy_port or settings.proxy_port,
    )
    try:
        report = run_migration(
            ClusterCredentials(source, source_context),
            ClusterCredentials(target, target_context),
            config=config,
            skip_cutover=skip_cutover,
        )
    except MigrationError as e:
        if e.report is not None and e.report.stages:
            output_report(e.report, output, show_all=show_all)
        typer.echo(f"Migration failed: {e}", err=True)
        raise typer.Exit(code=1)

    output_report(report, output, show_all=show_all)
