"""Tile versions read from Kilnfile-style lock files in a git repository.

Each tile has one lock file listing the releases it bundles:

    releases:
      - name: routing
        version: 0.280.0
      - name: diego
        version: 2.90.0

``refresh`` syncs the repository and rebuilds the whole index; on failure
the previous index stays in place.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

import yaml

from gbp.core.config import TilesConfig
from gbp.core.errors import FetchError
from gbp.core.log import get_logger
from gbp.core.result import Err, Ok, Result
from gbp.core.structured import as_str_dict, get_list, get_str
from gbp.progress.model import Tile
from gbp.sources.git import Checkout

__all__ = ["GitTileVersions", "StaticTileVersions", "parse_lockfile"]

log = get_logger(__name__)

TileIndex = Mapping[Tile, Mapping[str, str]]


def parse_lockfile(text: str) -> Result[dict[str, str], str]:
    """Map release name to version from a lock file's ``releases`` list."""
    try:
        data_obj: object = yaml.safe_load(text)
    except yaml.YAMLError as e:
        return Err(f"invalid YAML: {e}")

    data = as_str_dict(data_obj)
    if data is None:
        return Err("lock file root must be a mapping")

    versions: dict[str, str] = {}
    for item in get_list(data, "releases") or []:
        entry = as_str_dict(item)
        if entry is None:
            continue
        name = get_str(entry, "name")
        raw_version = entry.get("version")
        # Unquoted YAML versions such as 1.2 load as floats.
        version = str(raw_version).strip() if raw_version is not None else ""
        if name and version:
            versions[name] = version
    return Ok(versions)


def _lockfile_path(config: TilesConfig, tile: Tile) -> str:
    match tile:
        case Tile.TAS:
            return config.tas_lockfile
        case Tile.TASW:
            return config.tasw_lockfile
        case Tile.IST:
            return config.ist_lockfile


class GitTileVersions:
    """TileVersionFetcher backed by a local clone of the tiles repository."""

    def __init__(self, config: TilesConfig, *, checkout: Checkout | None = None) -> None:
        self._config = config
        self._checkout = checkout or Checkout(Path(config.cache_dir), config.repo_url)
        self._index: TileIndex = MappingProxyType({})

    def refresh(self, ref: str) -> Result[None, FetchError]:
        if not self._config.repo_url and not self._checkout.exists():
            return Err(FetchError("tiles", "no tiles repository configured"))

        synced = self._checkout.sync(ref)
        if isinstance(synced, Err):
            return Err(FetchError("git", synced.error.message, f"{self._checkout.remote}@{ref}"))

        index: dict[Tile, Mapping[str, str]] = {}
        for tile in Tile:
            path = self._checkout.path / _lockfile_path(self._config, tile)
            try:
                text = path.read_text(encoding="utf-8")
            except OSError as e:
                log.warning("%s: cannot read %s: %s", tile.label, path, e)
                index[tile] = self._index.get(tile, {})
                continue

            match parse_lockfile(text):
                case Err(message):
                    log.warning("%s: cannot parse %s: %s", tile.label, path, message)
                    index[tile] = self._index.get(tile, {})
                case Ok(versions):
                    index[tile] = MappingProxyType(versions)

        self._index = MappingProxyType(index)
        log.debug("tile index refreshed at %s", synced.value)
        return Ok(None)

    def component_version(self, tile: Tile, component: str) -> tuple[str, bool]:
        versions = self._index.get(tile, {})
        version = versions.get(component)
        if version is None:
            return ("", False)
        return (version, True)


class StaticTileVersions:
    """TileVersionFetcher over a fixed in-memory index (tests, offline runs)."""

    def __init__(self, versions: Mapping[Tile, Mapping[str, str]] | None = None) -> None:
        self._versions = dict(versions or {})
        self.refreshed: list[str] = []
        self.refresh_error: FetchError | None = None

    def refresh(self, ref: str) -> Result[None, FetchError]:
        self.refreshed.append(ref)
        if self.refresh_error is not None:
            return Err(self.refresh_error)
        return Ok(None)

    def component_version(self, tile: Tile, component: str) -> tuple[str, bool]:
        version = self._versions.get(tile, {}).get(component)
        if version is None:
            return ("", False)
        return (version, True)
