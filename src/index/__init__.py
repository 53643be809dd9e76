"""Package index construction.

This package builds queryable package indexes from repository archives:
- tarball.py: streaming traversal of ``00-index.tar`` (optionally gzipped)
- description.py: ``.cabal`` description parsing
- builder.py: archive-to-index extraction and the standalone file loader
- preferences.py: ``preferred-versions`` extraction and merging
- installed.py: installed package graph resolution
- staleness.py: index age warnings
- service.py: multi-repository loading into a ``SourcePackageDb``
"""

from .builder import build_index, parse_repo_index, read_package_index_file  # noqa: F401
from .errors import (  # noqa: F401
    ArchiveStreamError,
    DescriptionParseError,
    InstalledPackageParseError,
    PackageIndexError,
    RepositoryIndexError,
)
from .installed import broken_package_id, parse_installed_dump, resolve_installed  # noqa: F401
from .models import LocalRepo, RemoteRepo, Repository, SourcePackage, SourcePackageDb  # noqa: F401
from .package_index import PackageIndex  # noqa: F401
from .preferences import merge_preferences  # noqa: F401
from .service import get_source_packages, read_repo_index  # noqa: F401

__all__ = [
    "build_index",
    "parse_repo_index",
    "read_package_index_file",
    "get_source_packages",
    "read_repo_index",
    "merge_preferences",
    "resolve_installed",
    "broken_package_id",
    "parse_installed_dump",
    "PackageIndex",
    "Repository",
    "RemoteRepo",
    "LocalRepo",
    "SourcePackage",
    "SourcePackageDb",
    "PackageIndexError",
    "ArchiveStreamError",
    "DescriptionParseError",
    "RepositoryIndexError",
    "InstalledPackageParseError",
]
