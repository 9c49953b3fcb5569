"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="kmig",
    help="kube-migrator - Move workloads between clusters and cut traffic over.",
    no_args_is_help=True,
)


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # The kubernetes client logs every request at DEBUG
    logging.getLogger("kubernetes").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _register_commands() -> None:
    from kube_migrator.cli.commands.migrate_cmd import app as migrate_app
    from kube_migrator.cli.commands.plan_cmd import app as plan_app
    from kube_migrator.cli.commands.snapshot_cmd import app as snapshot_app

    app.add_typer(migrate_app, name="migrate", help="Migrate resources and cut traffic over")
    app.add_typer(plan_app, name="plan", help="Show what a migration would create")
    app.add_typer(snapshot_app, name="snapshot", help="Count migratable resources in a cluster")


_register_commands()


def main() -> None:
    app()
