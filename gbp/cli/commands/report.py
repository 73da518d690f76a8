"""Report command - one fetch pass, printed as a table or JSON."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from gbp.cli.context import build_context
from gbp.output.console import Style
from gbp.output.render import render_snapshot
from gbp.progress.report import snapshot_to_dict

DEFAULT_CONFIG = Path("config.json")


def report(
    go_version: str = typer.Argument(..., help="Target Go version, e.g. 1.22.1"),
    config: Path = typer.Option(
        DEFAULT_CONFIG, "--config", "-c", help="Config file (JSON or TOML)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Show how far a Go version has propagated through releases and tiles."""
    ctx = build_context(config, verbose=verbose)
    snapshot = ctx.cache().get(go_version)

    if as_json:
        ctx.console.raw(json.dumps(snapshot_to_dict(snapshot), indent=2))
        return

    ctx.console.render(render_snapshot(snapshot))
    if snapshot.all_bumped:
        ctx.console.success(f"Go {go_version} reached every tile")
    else:
        pending = [row.name for row in snapshot.rows if not row.all_bumped]
        ctx.console.print(f"pending: {', '.join(pending)}", Style.DIM)
