"""Typed configuration loading.

The config file lists the releases to track (in display order), the CI
base URL used for pipeline links, where tile metadata lives, and cache
settings. JSON and TOML are both accepted, chosen by file suffix.

Example (JSON):
    {
      "ci_url": "https://ci.example.com",
      "releases": [
        {"name": "routing", "url": "https://github.com/acme/routing-release",
         "tas_release_name": "routing", "ci_team": "net", "ci_pipeline": "routing"}
      ],
      "tiles": {"repo_url": "https://github.com/acme/tiles", "ref": "main"},
      "cache": {"refresh_interval_seconds": 300}
    }
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_int, get_list, get_str, get_table

__all__ = [
    "CacheConfig",
    "Config",
    "ConfigError",
    "ReleaseConfig",
    "TilesConfig",
    "load_config",
    "FETCH_INTERVAL_SECONDS",
    "DEFAULT_TILES_REF",
]

FETCH_INTERVAL_SECONDS = 5 * 60
DEFAULT_TILES_REF = "main"
DEFAULT_DEVELOP_BRANCH = "develop"
DEFAULT_GO_MOD_PATH = "go.mod"
DEFAULT_TAS_LOCKFILE = "tas/Kilnfile.lock"
DEFAULT_TASW_LOCKFILE = "tasw/Kilnfile.lock"
DEFAULT_IST_LOCKFILE = "ist/Kilnfile.lock"
DEFAULT_TILES_CACHE_DIR = ".gbp-cache/tiles"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """One tracked release.

    Tile component names are None when the release does not ship in that
    tile. ``owner`` and ``repo`` are derived from ``url``.
    """

    name: str
    url: str
    owner: str
    repo: str
    platform: str = ""
    tas_release_name: str | None = None
    tasw_release_name: str | None = None
    ist_release_name: str | None = None
    ci_team: str = ""
    ci_pipeline: str = ""
    only_develop: bool = False
    develop_branch: str = DEFAULT_DEVELOP_BRANCH
    go_mod_path: str = DEFAULT_GO_MOD_PATH

    @property
    def slug(self) -> str:
        """Repository in "owner/repo" form."""
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        name = get_str(data, "name")
        if name is None:
            raise ValueError("release is missing 'name'")
        url = get_str(data, "url")
        if url is None:
            raise ValueError(f"release {name!r} is missing 'url'")
        owner, repo = split_repo_url(url)

        only_develop = data.get("only_develop", False)
        if not isinstance(only_develop, bool):
            raise ValueError(f"release {name!r}: 'only_develop' must be a boolean")

        return cls(
            name=name,
            url=url,
            owner=owner,
            repo=repo,
            platform=get_str(data, "platform") or "",
            tas_release_name=get_str(data, "tas_release_name"),
            tasw_release_name=get_str(data, "tasw_release_name"),
            ist_release_name=get_str(data, "ist_release_name"),
            ci_team=get_str(data, "ci_team") or "",
            ci_pipeline=get_str(data, "ci_pipeline") or "",
            only_develop=only_develop,
            develop_branch=get_str(data, "develop_branch") or DEFAULT_DEVELOP_BRANCH,
            go_mod_path=get_str(data, "go_mod_path") or DEFAULT_GO_MOD_PATH,
        )


@dataclass(frozen=True, slots=True)
class TilesConfig:
    """Where tile lock files are read from."""

    repo_url: str = ""
    ref: str = DEFAULT_TILES_REF
    cache_dir: str = DEFAULT_TILES_CACHE_DIR
    tas_lockfile: str = DEFAULT_TAS_LOCKFILE
    tasw_lockfile: str = DEFAULT_TASW_LOCKFILE
    ist_lockfile: str = DEFAULT_IST_LOCKFILE


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Report cache settings."""

    refresh_interval_seconds: int = FETCH_INTERVAL_SECONDS
    key_by_target: bool = False
    max_workers: int = 1


def _empty_releases() -> tuple[ReleaseConfig, ...]:
    return ()


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    ci_base_url: str = ""
    releases: tuple[ReleaseConfig, ...] = field(default_factory=_empty_releases)
    tiles: TilesConfig = field(default_factory=TilesConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    def ci_url(self, release: ReleaseConfig) -> str:
        return f"{self.ci_base_url}/teams/{release.ci_team}/pipelines/{release.ci_pipeline}"

    def ci_badge_url(self, release: ReleaseConfig) -> str:
        return (
            f"{self.ci_base_url}/api/v1/teams/{release.ci_team}"
            f"/pipelines/{release.ci_pipeline}/badge"
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a parsed document.

        Raises:
            ValueError: On a malformed release entry or setting.
        """
        if "releases" in data and get_list(data, "releases") is None:
            raise ValueError("'releases' must be a list")

        releases: list[ReleaseConfig] = []
        seen: set[str] = set()
        for index, item in enumerate(get_list(data, "releases") or []):
            entry = as_str_dict(item)
            if entry is None:
                raise ValueError(f"releases[{index}] must be a table")
            release = ReleaseConfig.from_dict(entry)
            if release.name in seen:
                raise ValueError(f"duplicate release name: {release.name!r}")
            seen.add(release.name)
            releases.append(release)

        tiles: StrDict = get_table(data, "tiles") or {}
        cache: StrDict = get_table(data, "cache") or {}

        interval = get_int(cache, "refresh_interval_seconds")
        if interval is not None and interval < 0:
            raise ValueError("'cache.refresh_interval_seconds' must not be negative")
        workers = get_int(cache, "max_workers")
        if workers is not None and workers < 1:
            raise ValueError("'cache.max_workers' must be at least 1")

        return cls(
            ci_base_url=(get_str(data, "ci_url") or "").rstrip("/"),
            releases=tuple(releases),
            tiles=TilesConfig(
                repo_url=get_str(tiles, "repo_url") or "",
                ref=get_str(tiles, "ref") or DEFAULT_TILES_REF,
                cache_dir=get_str(tiles, "cache_dir") or DEFAULT_TILES_CACHE_DIR,
                tas_lockfile=get_str(tiles, "tas_lockfile") or DEFAULT_TAS_LOCKFILE,
                tasw_lockfile=get_str(tiles, "tasw_lockfile") or DEFAULT_TASW_LOCKFILE,
                ist_lockfile=get_str(tiles, "ist_lockfile") or DEFAULT_IST_LOCKFILE,
            ),
            cache=CacheConfig(
                refresh_interval_seconds=(
                    FETCH_INTERVAL_SECONDS if interval is None else interval
                ),
                key_by_target=get_bool(cache, "key_by_target") or False,
                max_workers=workers or 1,
            ),
        )


def split_repo_url(url: str) -> tuple[str, str]:
    """Return (owner, repo) from a repository URL such as
    ``https://github.com/owner/repo``.

    Raises:
        ValueError: If the path has fewer than two segments.
    """
    parsed = urlparse(url)
    parts = [p for p in parsed.path.strip("/").split("/") if p]
    if len(parts) < 2:
        raise ValueError(f"cannot determine owner/repo from url: {url!r}")
    repo = parts[1].removesuffix(".git")
    return parts[0], repo


def _parse_document(path: Path) -> Result[StrDict, ConfigError]:
    """Read a JSON or TOML file into a string-keyed dict."""
    import tomllib

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Cannot read config: {e}", path=path))

    try:
        if path.suffix == ".toml":
            data_obj: object = tomllib.loads(content)
        else:
            data_obj = json.loads(content)
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except json.JSONDecodeError as e:
        return Err(ConfigError(f"Invalid JSON syntax: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be an object", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration.

    Args:
        path: Path to a ``.json`` or ``.toml`` config file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_document(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
