"""Shared CLI options."""

from __future__ import annotations

import typer

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
SourceContextOption = typer.Option(None, "--source-context", help="Context in the source kube-config")
TargetContextOption = typer.Option(None, "--target-context", help="Context in the target kube-config")
