"""Tests for gbp.core.config module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gbp.core.config import (
    FETCH_INTERVAL_SECONDS,
    CacheConfig,
    Config,
    ConfigError,
    ReleaseConfig,
    TilesConfig,
    load_config,
    split_repo_url,
)
from gbp.core.result import Err, Ok

SAMPLE = {
    "ci_url": "https://ci.example.com/",
    "releases": [
        {
            "name": "routing",
            "url": "https://github.com/cloudfoundry/routing-release",
            "platform": "linux",
            "tas_release_name": "routing",
            "tasw_release_name": "",
            "ist_release_name": "routing",
            "ci_team": "networking",
            "ci_pipeline": "routing",
        },
        {
            "name": "cli",
            "url": "https://github.com/cloudfoundry/cli.git",
            "only_develop": True,
        },
    ],
    "tiles": {"repo_url": "https://github.com/acme/tiles", "ref": "release"},
    "cache": {"refresh_interval_seconds": 60, "key_by_target": True, "max_workers": 4},
}


def _write_json(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestSplitRepoUrl:
    def test_github_url(self) -> None:
        assert split_repo_url("https://github.com/acme/thing") == ("acme", "thing")

    def test_strips_git_suffix_and_extra_segments(self) -> None:
        assert split_repo_url("https://github.com/acme/thing.git") == ("acme", "thing")
        assert split_repo_url("https://github.com/acme/thing/tree/main") == ("acme", "thing")

    @pytest.mark.parametrize("url", ["https://github.com/", "https://github.com/acme", "nope"])
    def test_rejects_short_paths(self, url: str) -> None:
        with pytest.raises(ValueError, match="owner/repo"):
            split_repo_url(url)


class TestConfigFromDict:
    def test_full_document(self) -> None:
        config = Config.from_dict(SAMPLE)

        assert config.ci_base_url == "https://ci.example.com"
        assert [r.name for r in config.releases] == ["routing", "cli"]

        routing = config.releases[0]
        assert (routing.owner, routing.repo) == ("cloudfoundry", "routing-release")
        assert routing.tas_release_name == "routing"
        assert routing.tasw_release_name is None
        assert routing.only_develop is False
        assert routing.develop_branch == "develop"
        assert routing.go_mod_path == "go.mod"

        cli = config.releases[1]
        assert cli.only_develop is True
        assert cli.repo == "cli"

        assert config.tiles.ref == "release"
        assert config.tiles.tas_lockfile == "tas/Kilnfile.lock"
        assert config.cache == CacheConfig(
            refresh_interval_seconds=60, key_by_target=True, max_workers=4
        )

    def test_defaults(self) -> None:
        config = Config.from_dict({})
        assert config.releases == ()
        assert config.tiles == TilesConfig()
        assert config.cache.refresh_interval_seconds == FETCH_INTERVAL_SECONDS
        assert config.cache.key_by_target is False

    def test_ci_urls(self) -> None:
        config = Config.from_dict(SAMPLE)
        routing = config.releases[0]
        assert config.ci_url(routing) == "https://ci.example.com/teams/networking/pipelines/routing"
        assert (
            config.ci_badge_url(routing)
            == "https://ci.example.com/api/v1/teams/networking/pipelines/routing/badge"
        )

    @pytest.mark.parametrize(
        ("data", "match"),
        [
            ({"releases": "nope"}, "must be a list"),
            ({"releases": ["nope"]}, "must be a table"),
            ({"releases": [{"url": "https://github.com/a/b"}]}, "missing 'name'"),
            ({"releases": [{"name": "x"}]}, "missing 'url'"),
            ({"releases": [{"name": "x", "url": "https://github.com/a"}]}, "owner/repo"),
            (
                {
                    "releases": [
                        {"name": "x", "url": "https://github.com/a/b", "only_develop": "yes"}
                    ]
                },
                "boolean",
            ),
            (
                {
                    "releases": [
                        {"name": "x", "url": "https://github.com/a/b"},
                        {"name": "x", "url": "https://github.com/a/c"},
                    ]
                },
                "duplicate",
            ),
            ({"cache": {"max_workers": 0}}, "max_workers"),
            ({"cache": {"refresh_interval_seconds": -1}}, "negative"),
        ],
    )
    def test_invalid(self, data: dict[str, object], match: str) -> None:
        with pytest.raises(ValueError, match=match):
            Config.from_dict(data)

    def test_release_is_frozen(self) -> None:
        release = ReleaseConfig(name="a", url="u", owner="o", repo="r")
        with pytest.raises(AttributeError):
            release.name = "b"  # type: ignore[misc]
        assert release.slug == "o/r"


class TestLoadConfig:
    def test_load_json(self, tmp_path: Path) -> None:
        result = load_config(_write_json(tmp_path, SAMPLE))
        assert isinstance(result, Ok)
        assert len(result.value.releases) == 2

    def test_load_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            'ci_url = "https://ci.example.com"\n'
            "\n"
            "[[releases]]\n"
            'name = "diego"\n'
            'url = "https://github.com/cloudfoundry/diego-release"\n'
            'tas_release_name = "diego"\n'
            "\n"
            "[cache]\n"
            "refresh_interval_seconds = 30\n",
            encoding="utf-8",
        )

        result = load_config(path)

        assert isinstance(result, Ok)
        assert result.value.releases[0].repo == "diego-release"
        assert result.value.cache.refresh_interval_seconds == 30

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / "missing.json")
        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigError)
        assert "not found" in result.error.message

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid JSON" in result.error.message

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("releases = [", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "Invalid TOML" in result.error.message

    def test_root_must_be_object(self, tmp_path: Path) -> None:
        result = load_config(_write_json(tmp_path, [1, 2]))
        assert isinstance(result, Err)
        assert "must be an object" in result.error.message

    def test_bad_release_url_is_config_error(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path, {"releases": [{"name": "x", "url": "https://github.com"}]})
        result = load_config(path)
        assert isinstance(result, Err)
        assert result.error.path == path
        assert "Invalid config structure" in result.error.message
        assert str(path) in str(result.error)
