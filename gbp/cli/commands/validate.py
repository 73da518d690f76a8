"""validate-config command - load the config and list what it tracks."""

from __future__ import annotations

from pathlib import Path

import typer

from gbp.cli.context import load_or_exit
from gbp.output.console import RichConsole, Style
from gbp.progress.model import Tile


def validate_config(
    config: Path = typer.Option(Path("config.json"), "--config", "-c", help="Config file"),
) -> None:
    """Check that the config file loads and summarize it."""
    console = RichConsole()
    cfg = load_or_exit(config, console)

    console.header(f"{len(cfg.releases)} releases")
    for release in cfg.releases:
        if release.only_develop:
            console.print(f"{release.name}: {release.slug} (develop only)", Style.DIM)
            continue
        tiles = [
            f"{tile.label}={component}"
            for tile in Tile
            if (component := tile.component_for(release))
        ]
        if not tiles:
            console.warning(
                f"{release.name}: {release.slug} ships in no tile, only its release is tracked"
            )
            continue
        console.print(f"{release.name}: {release.slug} ({', '.join(tiles)})")

    console.header("Tiles")
    console.print(f"repo: {cfg.tiles.repo_url or '(not set)'} @ {cfg.tiles.ref}")
    console.print(f"refresh interval: {cfg.cache.refresh_interval_seconds}s", Style.DIM)
    console.success(f"{config} is valid")
