"""
advisory/versions.py -- Integer-or-semver version numbers.

CSAF version strings are either integer versioning (a plain non-negative
integer without leading zeros) or semantic versioning 2.0.0. Integer
versioning is tried first. The two schemes are never comparable with each
other: equality across schemes is False and ordering raises TypeError.
"""

import re
from functools import total_ordering
from typing import Optional, Union

import semver

from core.models import ValidationError

INTVER_RE = re.compile(r"^(0|[1-9][0-9]*)$")


class VersionNumberError(ValueError):
    def __init__(self, raw: str) -> None:
        self.raw = raw
        self.message = (
            f"Failed to parse version number '{raw}': "
            "Version could not be parsed as integer versioning or semantic versioning"
        )
        super().__init__(self.message)

    def to_validation_error(self, instance_path: str) -> ValidationError:
        return ValidationError(message=self.message, instance_path=instance_path)


@total_ordering
class IntVer:
    __slots__ = ("value",)

    def __init__(self, value: int) -> None:
        self.value = value

    @property
    def major(self) -> int:
        return self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntVer):
            return NotImplemented if not isinstance(other, SemVer) else False
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, IntVer):
            return NotImplemented
        return self.value < other.value

    def __hash__(self) -> int:
        return hash(("intver", self.value))

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"IntVer({self.value})"


@total_ordering
class SemVer:
    """Semantic version. Precedence follows semver 2.0.0, build metadata breaks ties."""

    __slots__ = ("version",)

    def __init__(self, version: semver.Version) -> None:
        self.version = version

    @property
    def major(self) -> int:
        return self.version.major

    @property
    def minor(self) -> int:
        return self.version.minor

    @property
    def patch(self) -> int:
        return self.version.patch

    @property
    def prerelease(self) -> Optional[str]:
        return self.version.prerelease

    @property
    def build(self) -> Optional[str]:
        return self.version.build

    def same_release(self, other: "SemVer", *, include_prerelease: bool = True) -> bool:
        """Compare major/minor/patch (and optionally pre-release), ignoring build metadata."""
        if (self.major, self.minor, self.patch) != (other.major, other.minor, other.patch):
            return False
        return not include_prerelease or self.prerelease == other.prerelease

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented if not isinstance(other, IntVer) else False
        return self.version.compare(other.version) == 0 and self.build == other.build

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemVer):
            return NotImplemented
        cmp = self.version.compare(other.version)
        if cmp != 0:
            return cmp < 0
        return (self.build or "") < (other.build or "")

    def __hash__(self) -> int:
        return hash(("semver", self.major, self.minor, self.patch, self.prerelease, self.build))

    def __str__(self) -> str:
        return str(self.version)

    def __repr__(self) -> str:
        return f"SemVer('{self.version}')"


VersionNumber = Union[IntVer, SemVer]


def parse_version(raw: str) -> VersionNumber:
    """Parse a CSAF version string, raising VersionNumberError on failure."""
    if INTVER_RE.fullmatch(raw):
        return IntVer(int(raw))
    try:
        return SemVer(semver.Version.parse(raw))
    except (ValueError, TypeError):
        raise VersionNumberError(raw) from None
