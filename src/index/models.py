"""Data models for repositories and the packages read from them."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional, Union

from constants import Constants
from versioning.models import PackageIdentifier, VersionRange

if TYPE_CHECKING:
    from .description import PackageDescription
    from .package_index import PackageIndex


@dataclass(frozen=True)
class RemoteRepo:
    """A repository mirrored from a remote server."""
    name: str
    uri: str = ""


@dataclass(frozen=True)
class LocalRepo:
    """A repository that only exists on local disk."""


@dataclass(frozen=True)
class Repository:
    """A package repository and the local directory holding its index."""
    local_dir: str
    kind: Union[RemoteRepo, LocalRepo]

    @property
    def index_file(self) -> str:
        """Path of the repository's ``00-index.tar``."""
        return os.path.join(self.local_dir, Constants.INDEX_FILE_NAME)

    @property
    def is_remote(self) -> bool:
        return isinstance(self.kind, RemoteRepo)

    @property
    def display_name(self) -> str:
        """Remote name, or the directory for local repositories."""
        if isinstance(self.kind, RemoteRepo):
            return self.kind.name
        return self.local_dir


@dataclass(frozen=True)
class PackageSource:
    """Where a source package came from.

    ``content`` optionally caches the raw description bytes so callers can
    re-read the entry without opening the archive again.
    """
    repo: Optional[Repository]
    entry_path: str
    content: Optional[bytes] = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class SourcePackage:
    """A package description read from a repository index."""
    package_id: PackageIdentifier
    description: "PackageDescription" = field(compare=False)
    source: PackageSource = field(compare=False)

    @property
    def name(self) -> str:
        return self.package_id.name


@dataclass(frozen=True)
class SourcePackageDb:
    """Aggregate of every configured repository's packages and preferences."""
    package_index: "PackageIndex[SourcePackage]"
    package_preferences: Dict[str, VersionRange] = field(default_factory=dict)
