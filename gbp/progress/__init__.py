"""Bump evaluation, report assembly and caching."""

from .cache import ReportCache
from .contracts import ReleaseSourceFetcher, TileVersionFetcher
from .evaluator import evaluate
from .model import (
    BumpResult,
    ReleaseRow,
    ReportSnapshot,
    Tile,
    TileStatus,
    TileStatusKind,
    VersionPair,
)
from .report import build_report, snapshot_to_dict

__all__ = [
    "BumpResult",
    "ReleaseRow",
    "ReleaseSourceFetcher",
    "ReportCache",
    "ReportSnapshot",
    "Tile",
    "TileStatus",
    "TileStatusKind",
    "TileVersionFetcher",
    "VersionPair",
    "build_report",
    "evaluate",
    "snapshot_to_dict",
]
