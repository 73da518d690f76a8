"""Tests for progress/report.py - one fetch pass across all releases."""

from __future__ import annotations

import http.client
import json
import urllib.request
from datetime import UTC, datetime

import pytest

from gbp.core.config import CacheConfig, Config, ReleaseConfig, TilesConfig
from gbp.core.errors import FetchError
from gbp.core.result import Err, Ok, Result
from gbp.progress.cache import ReportCache
from gbp.progress.model import Tile, TileStatus, TileStatusKind, VersionPair
from gbp.progress.report import build_report, snapshot_to_dict
from gbp.sources.github import GitHubReleaseSource
from gbp.sources.http import RealHttpClient
from gbp.sources.tiles import StaticTileVersions

FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


class FakeSource:
    """ReleaseSourceFetcher with per-release canned answers."""

    def __init__(
        self,
        develop: dict[str, str] | None = None,
        released: dict[str, str] | None = None,
        pairs: dict[str, VersionPair] | None = None,
    ) -> None:
        self.develop = develop or {}
        self.released = released or {}
        self.pairs = pairs or {}
        self.calls: list[tuple[str, str]] = []

    def develop_version(self, release: ReleaseConfig) -> Result[str, FetchError]:
        self.calls.append(("develop", release.name))
        if release.name in self.develop:
            return Ok(self.develop[release.name])
        return Err(FetchError("fake", "develop unavailable", release.name))

    def released_version(self, release: ReleaseConfig) -> Result[str, FetchError]:
        self.calls.append(("released", release.name))
        if release.name in self.released:
            return Ok(self.released[release.name])
        return Err(FetchError("fake", "released unavailable", release.name))

    def first_release_carrying(
        self, release: ReleaseConfig, released_version: str
    ) -> Result[VersionPair, FetchError]:
        self.calls.append(("first", release.name))
        if release.name in self.pairs:
            return Ok(self.pairs[release.name])
        return Err(FetchError("fake", "pair unavailable", release.name))


def _release(name: str, **overrides: object) -> ReleaseConfig:
    fields: dict[str, object] = {
        "name": name,
        "url": f"https://github.com/acme/{name}",
        "owner": "acme",
        "repo": name,
        "tas_release_name": name,
        "ci_team": "team",
        "ci_pipeline": name,
    }
    fields.update(overrides)
    return ReleaseConfig(**fields)  # type: ignore[arg-type]


def _config(*releases: ReleaseConfig, max_workers: int = 1) -> Config:
    return Config(
        ci_base_url="https://ci.example.com",
        releases=releases,
        tiles=TilesConfig(ref="main"),
        cache=CacheConfig(max_workers=max_workers),
    )


class TestBuildReport:
    def test_happy_path_row(self) -> None:
        config = _config(_release("routing", ist_release_name="routing"))
        source = FakeSource(
            develop={"routing": "1.22.1"},
            released={"routing": "v0.290.0"},
            pairs={"routing": VersionPair("1.22.0", "v0.285.0")},
        )
        tiles = StaticTileVersions(
            {Tile.TAS: {"routing": "0.290.0"}, Tile.IST: {"routing": "0.285.0"}}
        )

        snapshot = build_report(config, source, tiles, "1.22", now=lambda: FIXED_NOW)

        assert snapshot.target_version == "1.22"
        assert snapshot.created_at == FIXED_NOW
        (row,) = snapshot.rows
        assert row.develop_version == "1.22.1"
        assert row.released_version == "v0.290.0"
        assert row.first_released == VersionPair("1.22.0", "v0.285.0")
        assert row.tas == TileStatus.confirmed("0.290.0")
        assert row.tasw == TileStatus.not_applicable()
        assert row.ist == TileStatus.confirmed("0.285.0")
        assert row.all_bumped is True
        assert row.ci_url == "https://ci.example.com/teams/team/pipelines/routing"
        assert snapshot.all_bumped is True

    def test_refreshes_tiles_once_with_configured_ref(self) -> None:
        config = _config(_release("a"), _release("b"), _release("c"))
        tiles = StaticTileVersions()

        build_report(config, FakeSource(), tiles, "1.22")

        assert tiles.refreshed == ["main"]

    def test_refresh_failure_does_not_abort(self) -> None:
        config = _config(_release("a"))
        tiles = StaticTileVersions({Tile.TAS: {"a": "v1.0.0"}})
        tiles.refresh_error = FetchError("git", "network down")
        source = FakeSource(released={"a": "v1.0.0"}, pairs={"a": VersionPair("1.22.0", "v1.0.0")})

        snapshot = build_report(config, source, tiles, "1.22")

        assert snapshot.rows[0].tas == TileStatus.confirmed("v1.0.0")

    def test_every_call_failing_keeps_all_rows_in_order(self) -> None:
        names = ["zeta", "alpha", "mid", "beta"]
        config = _config(*(_release(n, tasw_release_name=n) for n in names))
        tiles = StaticTileVersions()
        tiles.refresh_error = FetchError("git", "unreachable")

        snapshot = build_report(config, FakeSource(), tiles, "not-a-version")

        assert [row.name for row in snapshot.rows] == names
        for row in snapshot.rows:
            assert row.develop_version == ""
            assert row.released_version == ""
            assert row.first_released == VersionPair()
            assert row.tas.kind is TileStatusKind.UNKNOWN
            assert row.all_bumped is False

    def test_released_failure_skips_pair_lookup(self) -> None:
        config = _config(_release("a"))
        source = FakeSource(develop={"a": "1.22.0"})

        snapshot = build_report(config, source, StaticTileVersions(), "1.22")

        assert ("first", "a") not in source.calls
        assert snapshot.rows[0].develop_version == "1.22.0"

    def test_develop_only_release(self) -> None:
        config = _config(_release("tools", only_develop=True))
        source = FakeSource(develop={"tools": "1.22.2"})

        snapshot = build_report(config, source, StaticTileVersions(), "1.22")

        row = snapshot.rows[0]
        assert row.all_bumped is True
        assert row.only_develop is True
        assert row.develop_version == "1.22.2"
        assert all(row.status(t) == TileStatus.not_applicable() for t in Tile)
        assert source.calls == [("develop", "tools")]

    @pytest.mark.parametrize("workers", [1, 4])
    def test_thread_pool_preserves_order(self, workers: int) -> None:
        names = [f"r{i}" for i in range(10)]
        config = _config(*(_release(n) for n in names), max_workers=workers)
        source = FakeSource(
            released={n: "v1.0.0" for n in names},
            pairs={n: VersionPair("1.22.0", "v1.0.0") for n in names},
        )
        tiles = StaticTileVersions({Tile.TAS: {n: "v1.0.0" for n in names}})

        snapshot = build_report(config, source, tiles, "1.22")

        assert [row.name for row in snapshot.rows] == names
        assert snapshot.bumped_count == len(names)

    def test_empty_config(self) -> None:
        snapshot = build_report(_config(), FakeSource(), StaticTileVersions(), "1.22")
        assert snapshot.rows == ()


class TestSnapshotToDict:
    def test_serializes_labels_and_status(self) -> None:
        config = _config(_release("a", ist_release_name="a"))
        source = FakeSource(released={"a": "v2.0.0"}, pairs={"a": VersionPair("1.22.0", "v2.0.0")})
        tiles = StaticTileVersions({Tile.TAS: {"a": "v2.0.0"}, Tile.IST: {"a": "v1.9.0"}})
        snapshot = build_report(config, source, tiles, "1.22", now=lambda: FIXED_NOW)

        data = snapshot_to_dict(snapshot)

        assert data["golang_version"] == "1.22"
        assert data["created_at"] == "2024-03-01T12:00:00+00:00"
        release = data["releases"][0]
        assert release["bumped_in_tas"] == "yes (v2.0.0)"
        assert release["bumped_in_tasw"] == "n/a"
        assert release["bumped_in_ist"] == "no (v1.9.0)"
        assert release["tiles"]["ist"] == {"status": "not-yet", "version": "v1.9.0"}
        assert release["all_bumped"] is False
        json.dumps(data)


class _TruncatedResponse:
    def __enter__(self) -> _TruncatedResponse:
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def read(self) -> bytes:
        raise http.client.IncompleteRead(b"partial", 100)


def test_truncated_github_responses_degrade_the_row(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(urllib.request, "urlopen", lambda *_, **__: _TruncatedResponse())
    config = _config(_release("routing"))
    source = GitHubReleaseSource(RealHttpClient())

    snapshot = ReportCache(config, source, StaticTileVersions()).get("1.22")

    (row,) = snapshot.rows
    assert row.name == "routing"
    assert row.develop_version == ""
    assert row.released_version == ""
    assert row.tas.kind is TileStatusKind.UNKNOWN
    assert row.all_bumped is False
