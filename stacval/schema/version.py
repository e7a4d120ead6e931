"""Semantic version parsing and precedence for stac_version values.

Versions follow SemVer 2.0.0. Pre-release identifiers matter here: the
STAC schema layout changed at 1.0.0-beta.1 and again at 1.0.0-rc.2.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass

from stacval.errors import VersionParseError

# SemVer 2.0.0 grammar (no leading zeros in numeric identifiers)
SEMVER_PATTERN = re.compile(
    r"(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?",
    re.ASCII,
)


@functools.total_ordering
@dataclass(frozen=True)
class SemVer:
    """A parsed semantic version.

    Ordering follows SemVer precedence: build metadata is ignored, a
    pre-release sorts before its release, numeric identifiers compare
    numerically and sort before alphanumeric ones.

    Attributes:
        major: Major version.
        minor: Minor version.
        patch: Patch version.
        prerelease: Dot-separated pre-release identifiers.
        build: Build metadata, or None.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str | None = None

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build is not None:
            text += "+" + self.build
        return text

    def _key(self) -> tuple[int, int, int, int, tuple[tuple[int, int, str], ...]]:
        # A release sorts after every pre-release of the same core version
        is_release = 0 if self.prerelease else 1
        identifiers = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part) for part in self.prerelease
        )
        return (self.major, self.minor, self.patch, is_release, identifiers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: SemVer) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())


def parse_version(text: str) -> SemVer:
    """Parse a semantic version string.

    Args:
        text: Version such as "1.0.0", "1.0.0-rc.2" or "0.9.0".

    Returns:
        Parsed SemVer.

    Raises:
        VersionParseError: If ``text`` is not a valid semantic version.
    """
    match = SEMVER_PATTERN.fullmatch(text) if isinstance(text, str) else None
    if match is None:
        raise VersionParseError(str(text))
    prerelease = match.group("prerelease")
    return SemVer(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=match.group("build"),
    )
