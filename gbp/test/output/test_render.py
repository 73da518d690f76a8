"""Tests for output/render.py - snapshot table."""

from __future__ import annotations

from datetime import UTC, datetime

from gbp.output.console import MockConsole
from gbp.output.render import render_snapshot
from gbp.progress.model import ReleaseRow, ReportSnapshot, TileStatus, VersionPair

CREATED = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def _row(name: str, **overrides: object) -> ReleaseRow:
    fields: dict[str, object] = {
        "name": name,
        "url": f"https://github.com/acme/{name}",
        "ci_url": "",
        "ci_badge_url": "",
        "develop_version": "1.22.1",
        "released_version": "v1.0.0",
        "first_released": VersionPair("1.22.0", "v0.9.0"),
        "tas": TileStatus.confirmed("1.0.0"),
        "tasw": TileStatus.not_applicable(),
        "ist": TileStatus.not_yet("0.8.0"),
        "all_bumped": False,
    }
    fields.update(overrides)
    return ReleaseRow(**fields)  # type: ignore[arg-type]


def _text(snapshot: ReportSnapshot) -> str:
    console = MockConsole()
    console.render(render_snapshot(snapshot))
    return console.text


def test_columns_and_cells() -> None:
    snapshot = ReportSnapshot("1.22", (_row("routing"),), CREATED)

    text = _text(snapshot)

    for column in ("Release", "Develop", "Released", "First with Go", "TAS", "TASW", "IST"):
        assert column in text
    assert "v0.9.0 (go 1.22.0)" in text
    assert "yes (1.0.0)" in text
    assert "no (0.8.0)" in text
    assert "n/a" in text
    assert "0/1 fully bumped" in text


def test_rows_keep_snapshot_order() -> None:
    snapshot = ReportSnapshot(
        "1.22",
        (_row("zeta", all_bumped=True), _row("alpha"), _row("mid")),
        CREATED,
    )

    text = _text(snapshot)

    assert text.index("zeta") < text.index("alpha") < text.index("mid")
    assert "1/3 fully bumped" in text


def test_missing_versions() -> None:
    row = _row(
        "cli",
        released_version="",
        first_released=VersionPair(),
        only_develop=True,
        tas=TileStatus.not_applicable(),
        ist=TileStatus.not_applicable(),
        all_bumped=True,
    )

    text = _text(ReportSnapshot("1.22", (row,), CREATED))

    assert "cli" in text
    assert "(go" not in text
