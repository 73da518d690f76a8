"""Interfaces the report pass needs from its data sources.

Both are Protocols so tests can pass plain fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from gbp.core.config import ReleaseConfig
from gbp.core.errors import FetchError
from gbp.core.result import Result
from gbp.progress.model import Tile, VersionPair

__all__ = ["ReleaseSourceFetcher", "TileVersionFetcher"]


@runtime_checkable
class ReleaseSourceFetcher(Protocol):
    """Reads versions from a release's source repository."""

    def develop_version(self, release: ReleaseConfig) -> Result[str, FetchError]:
        """Toolchain version currently on the development branch."""
        ...

    def released_version(self, release: ReleaseConfig) -> Result[str, FetchError]:
        """Latest generally available release version."""
        ...

    def first_release_carrying(
        self,
        release: ReleaseConfig,
        released_version: str,
    ) -> Result[VersionPair, FetchError]:
        """Earliest release that ships the toolchain found in ``released_version``."""
        ...


@runtime_checkable
class TileVersionFetcher(Protocol):
    """Reads component versions deployed in each tile."""

    def refresh(self, ref: str) -> Result[None, FetchError]:
        """Pull the latest tile metadata at ``ref``."""
        ...

    def component_version(self, tile: Tile, component: str) -> tuple[str, bool]:
        """Return (version, found) for ``component`` in ``tile``."""
        ...
