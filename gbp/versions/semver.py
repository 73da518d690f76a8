"""Semantic version parsing and precedence.

Accepts release tags (``v2.3.0``), Go toolchain strings (``go1.21``,
``go1.21.3``, ``go1.22rc1``) and bare versions (``1.21.3``). Missing minor
or patch parts are zero. Build metadata is kept but ignored for ordering.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from functools import total_ordering

from gbp.core.errors import ParseError
from gbp.core.result import Err, Ok, Result

__all__ = [
    "Ordering",
    "ParsedVersion",
    "compare_versions",
    "parse_version",
]

_IDENT = r"[0-9A-Za-z-]+"
_NUM = r"(?:0|[1-9]\d*)"
_VERSION_RE = re.compile(
    r"^(?:v|go)?"
    rf"(?P<major>{_NUM})"
    rf"(?:\.(?P<minor>{_NUM}))?"
    rf"(?:\.(?P<patch>{_NUM}))?"
    rf"(?:-(?P<pre>{_IDENT}(?:\.{_IDENT})*)|(?P<gopre>[A-Za-z][0-9A-Za-z]*))?"
    rf"(?:\+(?P<build>{_IDENT}(?:\.{_IDENT})*))?$"
)


class Ordering(IntEnum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


@total_ordering
@dataclass(frozen=True, slots=True)
class ParsedVersion:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = field(default="", compare=False)
    original: str = field(default="", compare=False)

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ParsedVersion):
            return NotImplemented
        return compare_versions(self, other) is Ordering.LESS

    def __str__(self) -> str:
        if self.original:
            return self.original
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


def parse_version(value: str) -> Result[ParsedVersion, ParseError]:
    """Parse a version string.

    Returns:
        Ok(ParsedVersion), or Err(ParseError) carrying the offending string
    """
    text = value.strip()
    if not text:
        return Err(ParseError(value=value, message="empty version"))

    m = _VERSION_RE.match(text)
    if m is None:
        return Err(ParseError(value=value, message="invalid semantic version"))

    pre = m.group("pre") or m.group("gopre")
    prerelease = tuple(pre.split(".")) if pre else ()
    if any(_has_leading_zero(p) for p in prerelease):
        return Err(
            ParseError(value=value, message="numeric pre-release identifier has leading zero")
        )

    return Ok(
        ParsedVersion(
            major=int(m.group("major")),
            minor=int(m.group("minor") or 0),
            patch=int(m.group("patch") or 0),
            prerelease=prerelease,
            build=m.group("build") or "",
            original=text,
        )
    )


def compare_versions(a: ParsedVersion, b: ParsedVersion) -> Ordering:
    """Compare by semantic-version precedence."""
    core_a = (a.major, a.minor, a.patch)
    core_b = (b.major, b.minor, b.patch)
    if core_a != core_b:
        return Ordering.LESS if core_a < core_b else Ordering.GREATER

    # A release outranks any of its pre-releases.
    if not a.prerelease and not b.prerelease:
        return Ordering.EQUAL
    if not a.prerelease:
        return Ordering.GREATER
    if not b.prerelease:
        return Ordering.LESS

    for x, y in zip(a.prerelease, b.prerelease):
        order = _compare_identifier(x, y)
        if order is not Ordering.EQUAL:
            return order

    if len(a.prerelease) == len(b.prerelease):
        return Ordering.EQUAL
    return Ordering.LESS if len(a.prerelease) < len(b.prerelease) else Ordering.GREATER


def _compare_identifier(x: str, y: str) -> Ordering:
    x_num, y_num = x.isdigit(), y.isdigit()
    if x_num and y_num:
        xi, yi = int(x), int(y)
        if xi == yi:
            return Ordering.EQUAL
        return Ordering.LESS if xi < yi else Ordering.GREATER
    # Numeric identifiers have lower precedence than alphanumeric ones.
    if x_num:
        return Ordering.LESS
    if y_num:
        return Ordering.GREATER
    if x == y:
        return Ordering.EQUAL
    return Ordering.LESS if x < y else Ordering.GREATER


def _has_leading_zero(identifier: str) -> bool:
    return identifier.isdigit() and len(identifier) > 1 and identifier.startswith("0")
