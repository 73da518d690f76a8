"""Report data model.

Everything here is immutable: a snapshot is built once by a report pass
and then only read.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from gbp.core.config import ReleaseConfig

__all__ = [
    "BumpResult",
    "ReleaseRow",
    "ReportSnapshot",
    "Tile",
    "TileStatus",
    "TileStatusKind",
    "VersionPair",
]


class Tile(Enum):
    """Downstream bundles that may embed a release."""

    TAS = "tas"
    TASW = "tasw"
    IST = "ist"

    @property
    def label(self) -> str:
        return self.name

    def component_for(self, release: ReleaseConfig) -> str | None:
        """Name of the release's component in this tile, if it ships there."""
        match self:
            case Tile.TAS:
                return release.tas_release_name
            case Tile.TASW:
                return release.tasw_release_name
            case Tile.IST:
                return release.ist_release_name


class TileStatusKind(Enum):
    NOT_APPLICABLE = "not-applicable"
    NOT_YET = "not-yet"
    CONFIRMED = "confirmed"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class TileStatus:
    """Bump status of one release in one tile.

    ``version`` is the tile's observed component version when known.
    """

    kind: TileStatusKind
    version: str = ""

    @classmethod
    def not_applicable(cls) -> TileStatus:
        return cls(TileStatusKind.NOT_APPLICABLE)

    @classmethod
    def not_yet(cls, version: str = "") -> TileStatus:
        return cls(TileStatusKind.NOT_YET, version)

    @classmethod
    def confirmed(cls, version: str) -> TileStatus:
        return cls(TileStatusKind.CONFIRMED, version)

    @classmethod
    def unknown(cls) -> TileStatus:
        return cls(TileStatusKind.UNKNOWN)

    @property
    def satisfied(self) -> bool:
        return self.kind in (TileStatusKind.NOT_APPLICABLE, TileStatusKind.CONFIRMED)

    @property
    def label(self) -> str:
        """Short display text: "n/a", "no", "no (v1.2.0)", "yes (v1.3.0)" or ""."""
        match self.kind:
            case TileStatusKind.NOT_APPLICABLE:
                return "n/a"
            case TileStatusKind.NOT_YET:
                return f"no ({self.version})" if self.version else "no"
            case TileStatusKind.CONFIRMED:
                return f"yes ({self.version})"
            case TileStatusKind.UNKNOWN:
                return ""


@dataclass(frozen=True, slots=True)
class VersionPair:
    """Earliest (toolchain, release) versions at which a release shipped a
    toolchain version. Empty strings mean unknown."""

    toolchain_version: str = ""
    release_version: str = ""


@dataclass(frozen=True, slots=True)
class BumpResult:
    tas: TileStatus
    tasw: TileStatus
    ist: TileStatus
    all_bumped: bool

    def status(self, tile: Tile) -> TileStatus:
        match tile:
            case Tile.TAS:
                return self.tas
            case Tile.TASW:
                return self.tasw
            case Tile.IST:
                return self.ist


@dataclass(frozen=True, slots=True)
class ReleaseRow:
    """One line of the report."""

    name: str
    url: str
    ci_url: str
    ci_badge_url: str
    develop_version: str
    released_version: str
    first_released: VersionPair
    tas: TileStatus
    tasw: TileStatus
    ist: TileStatus
    all_bumped: bool
    only_develop: bool = False

    def status(self, tile: Tile) -> TileStatus:
        match tile:
            case Tile.TAS:
                return self.tas
            case Tile.TASW:
                return self.tasw
            case Tile.IST:
                return self.ist


@dataclass(frozen=True, slots=True)
class ReportSnapshot:
    """All rows for one target toolchain version, in configured order."""

    target_version: str
    rows: tuple[ReleaseRow, ...]
    created_at: datetime

    @property
    def all_bumped(self) -> bool:
        return all(row.all_bumped for row in self.rows)

    @property
    def bumped_count(self) -> int:
        return sum(1 for row in self.rows if row.all_bumped)
