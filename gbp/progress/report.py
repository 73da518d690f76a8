"""One fetch pass over every configured release.

A failed fetch only blanks the fields that depend on it; every configured
release still gets a row, in configured order.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from typing import Any

from gbp.core.config import Config, ReleaseConfig
from gbp.core.log import get_logger
from gbp.core.result import Err, Ok
from gbp.progress.contracts import ReleaseSourceFetcher, TileVersionFetcher
from gbp.progress.evaluator import evaluate
from gbp.progress.model import ReleaseRow, ReportSnapshot, VersionPair
from gbp.versions.semver import ParsedVersion, parse_version

__all__ = ["build_report", "build_row", "snapshot_to_dict"]

log = get_logger(__name__)

# Served in place of the live pipeline badge.
CI_BADGE_ICON = "/images/concourse-icon.png"


def build_report(
    config: Config,
    source: ReleaseSourceFetcher,
    tiles: TileVersionFetcher,
    target_version: str,
    *,
    now: Callable[[], datetime] | None = None,
) -> ReportSnapshot:
    """Fetch everything and assemble a snapshot.

    Per-release work runs in a thread pool when ``config.cache.max_workers``
    is above 1; row order follows ``config.releases`` either way.
    """
    log.info("Fetching release data for Go %s", target_version)

    refreshed = tiles.refresh(config.tiles.ref)
    if isinstance(refreshed, Err):
        log.warning("failed to refresh tile versions: %s", refreshed.error)

    target: ParsedVersion | None = None
    parsed = parse_version(target_version)
    if isinstance(parsed, Err):
        log.warning("failed to parse target Go version: %s", parsed.error)
    else:
        target = parsed.value

    def row_for(release: ReleaseConfig) -> ReleaseRow:
        return build_row(config, release, source, tiles, target)

    workers = min(config.cache.max_workers, len(config.releases))
    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gbp-fetch") as pool:
            rows = tuple(pool.map(row_for, config.releases))
    else:
        rows = tuple(row_for(release) for release in config.releases)

    clock = now or (lambda: datetime.now(UTC))
    snapshot = ReportSnapshot(target_version=target_version, rows=rows, created_at=clock())
    log.info("Fetched %d releases (%d fully bumped)", len(rows), snapshot.bumped_count)
    return snapshot


def build_row(
    config: Config,
    release: ReleaseConfig,
    source: ReleaseSourceFetcher,
    tiles: TileVersionFetcher,
    target: ParsedVersion | None,
) -> ReleaseRow:
    """Fetch and evaluate a single release."""
    develop_version = ""
    match source.develop_version(release):
        case Err(error):
            log.warning("failed to get develop version for %s: %s", release.name, error)
        case Ok(value):
            develop_version = value

    released_version = ""
    pair: VersionPair | None = None
    if not release.only_develop:
        match source.released_version(release):
            case Err(error):
                log.warning("failed to get released version for %s: %s", release.name, error)
            case Ok(value):
                released_version = value

        if released_version:
            match source.first_release_carrying(release, released_version):
                case Err(error):
                    log.warning(
                        "failed to get first released version for %s: %s", release.name, error
                    )
                case Ok(value):
                    pair = value

    bump = evaluate(release, pair, target, tiles)
    first = pair or VersionPair()

    return ReleaseRow(
        name=release.name,
        url=release.url,
        ci_url=config.ci_url(release),
        ci_badge_url=CI_BADGE_ICON,
        develop_version=develop_version,
        released_version=released_version,
        first_released=first,
        tas=bump.tas,
        tasw=bump.tasw,
        ist=bump.ist,
        all_bumped=bump.all_bumped,
        only_develop=release.only_develop,
    )


def snapshot_to_dict(snapshot: ReportSnapshot) -> dict[str, Any]:
    """Plain JSON-serializable form of a snapshot."""
    return {
        "golang_version": snapshot.target_version,
        "created_at": snapshot.created_at.isoformat(),
        "all_bumped": snapshot.all_bumped,
        "releases": [
            {
                "name": row.name,
                "url": row.url,
                "ci_url": row.ci_url,
                "ci_badge_url": row.ci_badge_url,
                "version_on_develop": row.develop_version,
                "released_version": row.released_version,
                "first_released_golang_version": row.first_released.toolchain_version,
                "first_released_release_version": row.first_released.release_version,
                "bumped_in_tas": row.tas.label,
                "bumped_in_tasw": row.tasw.label,
                "bumped_in_ist": row.ist.label,
                "tiles": {
                    "tas": {"status": row.tas.kind.value, "version": row.tas.version},
                    "tasw": {"status": row.tasw.kind.value, "version": row.tasw.version},
                    "ist": {"status": row.ist.kind.value, "version": row.ist.version},
                },
                "all_bumped": row.all_bumped,
            }
            for row in snapshot.rows
        ],
    }
