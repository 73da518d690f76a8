"""Interval-gated cache around the report pass.

The cache is an explicit object owned by the caller. It holds at most one
snapshot; a refresh builds a complete new snapshot and swaps it in with a
single assignment, so readers never see a partial report.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from gbp.core.config import Config
from gbp.core.log import get_logger
from gbp.progress.contracts import ReleaseSourceFetcher, TileVersionFetcher
from gbp.progress.model import ReportSnapshot
from gbp.progress.report import build_report

__all__ = ["ReportCache"]

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Entry:
    snapshot: ReportSnapshot
    fetched_at: float


class ReportCache:
    """Serve report snapshots, rebuilding at most once per interval.

    By default freshness is the only key: asking for a different target
    version while the snapshot is fresh returns the snapshot built for the
    earlier target (and logs a warning). With ``key_by_target`` a different
    target is treated as a miss.

    Concurrent ``get`` calls that find the cache stale are serialized; the
    first one rebuilds and the others return its result.
    """

    def __init__(
        self,
        config: Config,
        source: ReleaseSourceFetcher,
        tiles: TileVersionFetcher,
        *,
        refresh_interval: float | None = None,
        key_by_target: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            config: Loaded configuration (releases, tile ref, cache settings)
            source: Release source fetcher
            tiles: Tile version fetcher
            refresh_interval: Seconds a snapshot stays fresh (defaults to config)
            key_by_target: Treat a different target as a miss (defaults to config)
            clock: Monotonic seconds source, injectable for tests
        """
        self._config = config
        self._source = source
        self._tiles = tiles
        self.refresh_interval = (
            float(config.cache.refresh_interval_seconds)
            if refresh_interval is None
            else refresh_interval
        )
        self.key_by_target = (
            config.cache.key_by_target if key_by_target is None else key_by_target
        )
        self._clock = clock
        self._lock = threading.Lock()
        self._entry: _Entry | None = None
        self.passes = 0

    def get(self, target_version: str) -> ReportSnapshot:
        """Return the current snapshot, rebuilding it if stale."""
        entry = self._entry
        if entry is not None and self._is_fresh(entry, target_version):
            return self._serve(entry, target_version)

        with self._lock:
            # Another caller may have refreshed while we waited.
            entry = self._entry
            if entry is not None and self._is_fresh(entry, target_version):
                return self._serve(entry, target_version)

            started = self._clock()
            snapshot = build_report(self._config, self._source, self._tiles, target_version)
            self._entry = _Entry(snapshot=snapshot, fetched_at=started)
            self.passes += 1
            return snapshot

    def peek(self) -> ReportSnapshot | None:
        """Return the stored snapshot without refreshing."""
        entry = self._entry
        return entry.snapshot if entry is not None else None

    def invalidate(self) -> None:
        """Drop the stored snapshot so the next ``get`` rebuilds."""
        with self._lock:
            self._entry = None

    def _is_fresh(self, entry: _Entry, target_version: str) -> bool:
        if self._clock() - entry.fetched_at > self.refresh_interval:
            return False
        if self.key_by_target and entry.snapshot.target_version != target_version:
            return False
        return True

    def _serve(self, entry: _Entry, target_version: str) -> ReportSnapshot:
        if entry.snapshot.target_version != target_version:
            log.warning(
                "serving cached report for Go %s (requested %s) until it expires",
                entry.snapshot.target_version,
                target_version,
            )
        return entry.snapshot
