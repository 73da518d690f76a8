"""Release source backed by GitHub.

- develop version: Go version declared in the release's go.mod on its
  development branch
- released version: tag of the latest GitHub release
- first release carrying: walks back from the released tag through older
  stable releases while they still ship the same Go toolchain version
"""

from __future__ import annotations

import re
from urllib.parse import quote

from gbp.core.config import ReleaseConfig
from gbp.core.errors import FetchError
from gbp.core.log import get_logger
from gbp.core.result import Err, Ok, Result
from gbp.core.structured import as_obj_list, as_str_dict, get_bool, get_str
from gbp.progress.model import VersionPair
from gbp.sources.http import HttpClient
from gbp.versions.semver import ParsedVersion, parse_version

__all__ = ["GitHubReleaseSource", "parse_go_mod"]

log = get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"
RELEASES_PER_PAGE = 100

_TOOLCHAIN_RE = re.compile(r"^\s*toolchain\s+go(\S+)\s*$", re.MULTILINE)
_GO_DIRECTIVE_RE = re.compile(r"^\s*go\s+(\d+(?:\.\d+){0,2}\S*)\s*$", re.MULTILINE)


def parse_go_mod(text: str) -> str | None:
    """Return the Go version a go.mod builds with.

    The ``toolchain`` directive wins over the ``go`` directive.
    """
    m = _TOOLCHAIN_RE.search(text)
    if m is not None:
        return m.group(1)
    m = _GO_DIRECTIVE_RE.search(text)
    if m is not None:
        return m.group(1)
    return None


class GitHubReleaseSource:
    """ReleaseSourceFetcher reading GitHub releases and go.mod files."""

    def __init__(
        self,
        http: HttpClient,
        *,
        api_url: str = GITHUB_API_URL,
        raw_url: str = GITHUB_RAW_URL,
    ) -> None:
        self._http = http
        self._api_url = api_url.rstrip("/")
        self._raw_url = raw_url.rstrip("/")

    def develop_version(self, release: ReleaseConfig) -> Result[str, FetchError]:
        return self.go_version_at(release, release.develop_branch)

    def released_version(self, release: ReleaseConfig) -> Result[str, FetchError]:
        url = f"{self._api_url}/repos/{release.slug}/releases/latest"
        result = self._http.get_json(url)
        if isinstance(result, Err):
            return Err(FetchError("github", result.error.message, url))

        data = as_str_dict(result.value)
        tag = get_str(data, "tag_name") if data is not None else None
        if tag is None:
            return Err(FetchError("github", "missing tag_name in latest release", url))
        return Ok(tag)

    def first_release_carrying(
        self,
        release: ReleaseConfig,
        released_version: str,
    ) -> Result[VersionPair, FetchError]:
        go_result = self.go_version_at(release, released_version)
        if isinstance(go_result, Err):
            return go_result

        first = VersionPair(toolchain_version=go_result.value, release_version=released_version)
        go_parsed = parse_version(go_result.value)
        released_parsed = parse_version(released_version)
        if isinstance(go_parsed, Err) or isinstance(released_parsed, Err):
            # Nothing to compare older releases against.
            return Ok(first)

        tags = self.stable_tags(release)
        if isinstance(tags, Err):
            log.warning(
                "%s: cannot list releases, using %s: %s", release.name, released_version, tags.error
            )
            return Ok(first)

        for tag, parsed in tags.value:
            if not parsed < released_parsed.value:
                continue
            older = self.go_version_at(release, tag)
            if isinstance(older, Err):
                log.debug("%s: stop search at %s: %s", release.name, tag, older.error)
                break
            older_go = parse_version(older.value)
            if isinstance(older_go, Err) or older_go.value != go_parsed.value:
                break
            first = VersionPair(toolchain_version=older.value, release_version=tag)

        return Ok(first)

    def go_version_at(self, release: ReleaseConfig, ref: str) -> Result[str, FetchError]:
        """Go version from the release's go.mod at ``ref`` (branch or tag)."""
        url = f"{self._raw_url}/{release.slug}/{quote(ref)}/{release.go_mod_path}"
        result = self._http.get_text(url)
        if isinstance(result, Err):
            return Err(FetchError("github", result.error.message, url))

        version = parse_go_mod(result.value)
        if version is None:
            return Err(FetchError("github", "no go or toolchain directive", url))
        return Ok(version)

    def stable_tags(
        self, release: ReleaseConfig
    ) -> Result[list[tuple[str, ParsedVersion]], FetchError]:
        """Published, non-prerelease tags, newest first."""
        url = f"{self._api_url}/repos/{release.slug}/releases?per_page={RELEASES_PER_PAGE}"
        result = self._http.get_json(url)
        if isinstance(result, Err):
            return Err(FetchError("github", result.error.message, url))

        items = as_obj_list(result.value)
        if items is None:
            return Err(FetchError("github", "expected a list of releases", url))

        tags: list[tuple[str, ParsedVersion]] = []
        for item in items:
            entry = as_str_dict(item)
            if entry is None or get_bool(entry, "draft") or get_bool(entry, "prerelease"):
                continue
            tag = get_str(entry, "tag_name")
            if tag is None:
                continue
            parsed = parse_version(tag)
            if isinstance(parsed, Ok) and not parsed.value.is_prerelease:
                tags.append((tag, parsed.value))

        tags.sort(key=lambda t: t[1], reverse=True)
        return Ok(tags)
