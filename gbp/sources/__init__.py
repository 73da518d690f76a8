"""Concrete data sources: GitHub releases and tile lock files."""

from .github import GitHubReleaseSource, parse_go_mod
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from .tiles import GitTileVersions, StaticTileVersions, parse_lockfile

__all__ = [
    "GitHubReleaseSource",
    "GitTileVersions",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "StaticTileVersions",
    "parse_go_mod",
    "parse_lockfile",
]
