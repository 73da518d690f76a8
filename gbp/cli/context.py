from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from gbp.core.config import Config, load_config
from gbp.core.errors import ErrorCode
from gbp.core.log import setup_logging
from gbp.core.result import Err
from gbp.output.console import ConsoleProtocol, RichConsole
from gbp.progress.cache import ReportCache
from gbp.progress.contracts import ReleaseSourceFetcher, TileVersionFetcher
from gbp.sources.github import GitHubReleaseSource
from gbp.sources.http import RealHttpClient
from gbp.sources.tiles import GitTileVersions

GITHUB_TOKEN_ENV = "GITHUB_TOKEN"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    source: ReleaseSourceFetcher
    tiles: TileVersionFetcher

    def cache(self) -> ReportCache:
        return ReportCache(self.config, self.source, self.tiles)


def load_or_exit(config_path: Path, console: ConsoleProtocol) -> Config:
    """Load config; a ConfigError ends the process with USER_ERROR."""
    result = load_config(config_path)
    if isinstance(result, Err):
        console.error(str(result.error))
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return result.value


def build_context(config_path: Path, *, verbose: bool = False) -> CLIContext:
    setup_logging(verbose=verbose)
    console = RichConsole()
    config = load_or_exit(config_path, console)
    return CLIContext(
        config=config,
        console=console,
        source=GitHubReleaseSource(RealHttpClient(token=os.environ.get(GITHUB_TOKEN_ENV))),
        tiles=GitTileVersions(config.tiles),
    )
