"""Version parsing and ordering."""

from .semver import Ordering, ParsedVersion, compare_versions, parse_version

__all__ = ["Ordering", "ParsedVersion", "compare_versions", "parse_version"]
