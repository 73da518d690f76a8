"""Rich table rendering of a report snapshot."""

from __future__ import annotations

from rich.table import Table
from rich.text import Text

from gbp.progress.model import ReleaseRow, ReportSnapshot, Tile, TileStatus, TileStatusKind

__all__ = ["render_snapshot"]

_TILE_STYLES = {
    TileStatusKind.NOT_APPLICABLE: "dim",
    TileStatusKind.NOT_YET: "yellow",
    TileStatusKind.CONFIRMED: "green",
    TileStatusKind.UNKNOWN: "red",
}


def _tile_cell(status: TileStatus) -> Text:
    label = status.label or "?"
    return Text(label, style=_TILE_STYLES[status.kind])


def _first_released(row: ReleaseRow) -> str:
    pair = row.first_released
    if not pair.release_version:
        return ""
    return f"{pair.release_version} (go {pair.toolchain_version})"


def render_snapshot(snapshot: ReportSnapshot) -> Table:
    """Build a table with one row per release, in snapshot order."""
    table = Table(
        title=f"Go {snapshot.target_version} bump progress",
        caption=(
            f"{snapshot.bumped_count}/{len(snapshot.rows)} fully bumped, "
            f"fetched {snapshot.created_at:%Y-%m-%d %H:%M:%S %Z}"
        ),
        title_justify="left",
    )
    table.add_column("Release", style="bold")
    table.add_column("Develop")
    table.add_column("Released")
    table.add_column("First with Go")
    for tile in Tile:
        table.add_column(tile.label, justify="center")
    table.add_column("Done", justify="center")

    for row in snapshot.rows:
        done = Text("yes", style="green bold") if row.all_bumped else Text("no", style="red")
        table.add_row(
            Text(row.name, style=f"link {row.url}") if row.url else row.name,
            row.develop_version or Text("?", style="red"),
            row.released_version or ("-" if row.only_develop else Text("?", style="red")),
            _first_released(row),
            *(_tile_cell(row.status(tile)) for tile in Tile),
            done,
        )

    return table
