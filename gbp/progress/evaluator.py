"""Decide whether a target Go version has reached each tile of a release."""

from __future__ import annotations

from gbp.core.config import ReleaseConfig
from gbp.core.log import get_logger
from gbp.core.result import Err
from gbp.progress.contracts import TileVersionFetcher
from gbp.progress.model import BumpResult, Tile, TileStatus, VersionPair
from gbp.versions.semver import ParsedVersion, parse_version

__all__ = ["evaluate", "tile_status"]

log = get_logger(__name__)

_DEVELOP_ONLY = BumpResult(
    tas=TileStatus.not_applicable(),
    tasw=TileStatus.not_applicable(),
    ist=TileStatus.not_applicable(),
    all_bumped=True,
)

_UNKNOWN = BumpResult(
    tas=TileStatus.unknown(),
    tasw=TileStatus.unknown(),
    ist=TileStatus.unknown(),
    all_bumped=False,
)


def evaluate(
    release: ReleaseConfig,
    target_pair: VersionPair | None,
    target_version: str | ParsedVersion | None,
    tiles: TileVersionFetcher,
) -> BumpResult:
    """Compute the three tile statuses and the overall flag for one release.

    Args:
        release: The release being evaluated
        target_pair: First (toolchain, release) versions carrying the current
            toolchain, or None if it could not be fetched
        target_version: Target Go version, raw or already parsed; None or an
            unparseable string counts as "not released"
        tiles: Source of deployed component versions

    Returns:
        BumpResult; never raises for bad inputs
    """
    if release.only_develop:
        return _DEVELOP_ONLY

    if target_pair is None:
        return _UNKNOWN

    first_release = parse_version(target_pair.release_version)
    if isinstance(first_release, Err):
        log.warning("%s: cannot parse first release version: %s", release.name, first_release.error)
        return _UNKNOWN

    first_toolchain = parse_version(target_pair.toolchain_version)
    if isinstance(first_toolchain, Err):
        log.warning(
            "%s: cannot parse first released Go version: %s", release.name, first_toolchain.error
        )
        return _UNKNOWN

    target = _as_parsed(release, target_version)
    is_target_released = target is not None and not target > first_toolchain.value

    statuses = {
        tile: tile_status(
            tiles,
            tile,
            tile.component_for(release),
            first_release.value,
            is_target_released,
        )
        for tile in Tile
    }
    all_bumped = is_target_released and all(s.satisfied for s in statuses.values())

    return BumpResult(
        tas=statuses[Tile.TAS],
        tasw=statuses[Tile.TASW],
        ist=statuses[Tile.IST],
        all_bumped=all_bumped,
    )


def tile_status(
    tiles: TileVersionFetcher,
    tile: Tile,
    component: str | None,
    first_release: ParsedVersion,
    is_target_released: bool,
) -> TileStatus:
    """Status of one tile; a tile version equal to ``first_release`` counts."""
    if not component:
        return TileStatus.not_applicable()
    if not is_target_released:
        return TileStatus.not_yet()

    raw, found = tiles.component_version(tile, component)
    if not found:
        log.warning("%s: no version found for %s", tile.label, component)
        return TileStatus.unknown()

    parsed = parse_version(raw)
    if isinstance(parsed, Err):
        log.warning("%s: cannot parse version of %s: %s", tile.label, component, parsed.error)
        return TileStatus.unknown()

    if first_release > parsed.value:
        return TileStatus.not_yet(str(parsed.value))
    return TileStatus.confirmed(str(parsed.value))


def _as_parsed(
    release: ReleaseConfig, target_version: str | ParsedVersion | None
) -> ParsedVersion | None:
    if target_version is None or isinstance(target_version, ParsedVersion):
        return target_version
    result = parse_version(target_version)
    if isinstance(result, Err):
        log.warning("%s: cannot parse target Go version: %s", release.name, result.error)
        return None
    return result.value
