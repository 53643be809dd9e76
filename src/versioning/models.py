"""Data models for package versions, version ranges and identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, order=True)
class Version:
    """A dotted numeric version with optional textual tags (``1.2.3-beta``)."""
    branch: Tuple[int, ...]
    tags: Tuple[str, ...] = ()

    @classmethod
    def null(cls) -> "Version":
        """The empty version, used where no real version is known."""
        return cls(())

    def is_null(self) -> bool:
        """True for the empty version."""
        return not self.branch and not self.tags

    def __str__(self) -> str:
        text = ".".join(str(part) for part in self.branch)
        return text + "".join(f"-{tag}" for tag in self.tags)


@dataclass(frozen=True, order=True)
class PackageIdentifier:
    """Source-level package identity: name plus version."""
    name: str
    version: Version

    def __str__(self) -> str:
        if self.version.is_null():
            return self.name
        return f"{self.name}-{self.version}"


class VersionRange:
    """Base class for version range expressions.

    Ranges are immutable trees. ``intersect`` never simplifies beyond
    dropping ``AnyVersion``, so the result reads back like the inputs.
    """

    def contains(self, version: Version) -> bool:
        """Return True if ``version`` satisfies this range."""
        raise NotImplementedError

    def intersect(self, other: "VersionRange") -> "VersionRange":
        """Return the range of versions satisfying both ranges."""
        if isinstance(other, AnyVersion):
            return self
        return IntersectVersionRanges(self, other)

    def union(self, other: "VersionRange") -> "VersionRange":
        """Return the range of versions satisfying either range."""
        return UnionVersionRanges(self, other)


@dataclass(frozen=True)
class AnyVersion(VersionRange):
    """Matches every version."""

    def contains(self, version: Version) -> bool:
        return True

    def intersect(self, other: VersionRange) -> VersionRange:
        return other

    def __str__(self) -> str:
        return "-any"


@dataclass(frozen=True)
class ThisVersion(VersionRange):
    """``==v``"""
    version: Version

    def contains(self, version: Version) -> bool:
        return version == self.version

    def __str__(self) -> str:
        return f"=={self.version}"


@dataclass(frozen=True)
class LaterVersion(VersionRange):
    """``>v``"""
    version: Version

    def contains(self, version: Version) -> bool:
        return version > self.version

    def __str__(self) -> str:
        return f">{self.version}"


@dataclass(frozen=True)
class EarlierVersion(VersionRange):
    """``<v``"""
    version: Version

    def contains(self, version: Version) -> bool:
        return version < self.version

    def __str__(self) -> str:
        return f"<{self.version}"


@dataclass(frozen=True)
class OrLaterVersion(VersionRange):
    """``>=v``"""
    version: Version

    def contains(self, version: Version) -> bool:
        return version >= self.version

    def __str__(self) -> str:
        return f">={self.version}"


@dataclass(frozen=True)
class OrEarlierVersion(VersionRange):
    """``<=v``"""
    version: Version

    def contains(self, version: Version) -> bool:
        return version <= self.version

    def __str__(self) -> str:
        return f"<={self.version}"


@dataclass(frozen=True)
class WildcardVersion(VersionRange):
    """``==1.2.*``: any version whose branch starts with the given prefix."""
    version: Version

    def contains(self, version: Version) -> bool:
        prefix = self.version.branch
        return version.branch[:len(prefix)] == prefix

    def __str__(self) -> str:
        return f"=={self.version}.*"


@dataclass(frozen=True)
class UnionVersionRanges(VersionRange):
    """``a || b``"""
    left: VersionRange
    right: VersionRange

    def contains(self, version: Version) -> bool:
        return self.left.contains(version) or self.right.contains(version)

    def __str__(self) -> str:
        return f"{self.left} || {self.right}"


@dataclass(frozen=True)
class IntersectVersionRanges(VersionRange):
    """``a && b``"""
    left: VersionRange
    right: VersionRange

    def contains(self, version: Version) -> bool:
        return self.left.contains(version) and self.right.contains(version)

    def __str__(self) -> str:
        return f"{_bracket(self.left)} && {_bracket(self.right)}"


def _bracket(vr: VersionRange) -> str:
    # && binds tighter than ||
    if isinstance(vr, UnionVersionRanges):
        return f"({vr})"
    return str(vr)


@dataclass(frozen=True)
class Dependency:
    """A package name with a version range constraint."""
    name: str
    version_range: VersionRange = AnyVersion()

    def matches(self, package_id: PackageIdentifier) -> bool:
        """True if ``package_id`` has this name and a version in range."""
        return package_id.name == self.name and self.version_range.contains(package_id.version)

    def __str__(self) -> str:
        if isinstance(self.version_range, AnyVersion):
            return self.name
        return f"{self.name} {self.version_range}"
