"""Build package indexes from ``00-index.tar`` archives.

An archive holds one description per package version at
``<name>/<version>/<name>.cabal``. Entries with any other shape, or whose
version component does not parse, are skipped. A description that matches
the naming convention but fails to parse aborts the whole build: the archive
is considered corrupt.
"""

from __future__ import annotations

import logging
import os
import posixpath
from typing import Callable, Iterable, List, NamedTuple, Optional, TypeVar

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from versioning.models import PackageIdentifier
from versioning.parser import parse_version

from .description import PackageDescription, parse_package_description
from .errors import DescriptionParseError
from .models import PackageSource, Repository, SourcePackage
from .package_index import PackageIndex
from .tarball import EntryKind, TarEntry, fold_tarball, maybe_decompress

logger = logging.getLogger(__name__)

P = TypeVar("P")


class ExtractedPackage(NamedTuple):
    """A description pulled out of one archive entry."""
    package_id: PackageIdentifier
    description: PackageDescription
    entry_path: str
    content: bytes


def split_entry_path(path: str) -> List[str]:
    """Normalise an archive path and split it into components."""
    normalised = posixpath.normpath(path)
    return [part for part in normalised.split("/") if part not in ("", ".")]


def extract_package(entry: TarEntry) -> Optional[ExtractedPackage]:
    """Return the package described by ``entry``, or None if it is not a description.

    Raises:
        DescriptionParseError: the entry is named like a description but
            its content does not parse.
    """
    if entry.kind is not EntryKind.NORMAL_FILE:
        return None
    if os.path.splitext(entry.path)[1] != Constants.DESCRIPTION_FILE_EXT:
        return None
    parts = split_entry_path(entry.path)
    if len(parts) != 3:
        return None
    name, version_text, _ = parts
    version = parse_version(version_text)
    if version is None:
        return None

    content = entry.content or b""
    try:
        description = parse_package_description(content)
    except DescriptionParseError as exc:
        raise DescriptionParseError(f"Couldn't read cabal file {entry.path!r}: {exc}") from exc
    return ExtractedPackage(PackageIdentifier(name, version), description, entry.path, content)


def _collect(acc: List[ExtractedPackage], entry: TarEntry) -> List[ExtractedPackage]:
    pkg = extract_package(entry)
    if pkg is not None:
        acc.append(pkg)
    return acc


def parse_repo_index(data: bytes) -> List[ExtractedPackage]:
    """Extract every package description from an uncompressed archive, in archive order."""
    return fold_tarball(_collect, [], data)


def to_source_packages(
    extracted: Iterable[ExtractedPackage],
    repo: Optional[Repository],
    keep_content: bool = False,
) -> List[SourcePackage]:
    """Tag extracted descriptions with the repository they came from."""
    return [
        SourcePackage(
            pkg.package_id,
            pkg.description,
            PackageSource(repo, pkg.entry_path, pkg.content if keep_content else None),
        )
        for pkg in extracted
    ]


def build_index(
    data: bytes,
    repo: Optional[Repository] = None,
    keep_content: bool = False,
) -> PackageIndex[SourcePackage]:
    """Build a source package index from archive bytes, compressed or not.

    For a (name, version) listed more than once, the earliest entry in the
    archive wins. ``keep_content`` caches each description's raw bytes on
    its ``PackageSource``.

    Raises:
        ArchiveStreamError: the archive could not be decoded.
        DescriptionParseError: a description entry is corrupt.
    """
    with Timer() as t:
        extracted = parse_repo_index(maybe_decompress(data))
        index = PackageIndex.from_list(to_source_packages(extracted, repo, keep_content))
    if is_debug_enabled(logger):
        logger.debug(
            "Index built",
            extra=extra_context(
                event="index_built",
                component="index_builder",
                repo=repo.display_name if repo else None,
                entries=len(extracted),
                packages=len(index),
                duration_ms=t.duration_ms(),
            ),
        )
    return index


def read_package_index_file(
    make_package: Callable[[PackageIdentifier, PackageDescription], P],
    index_file: str,
    key: Optional[Callable[[P], PackageIdentifier]] = None,
) -> PackageIndex[P]:
    """Read one ``00-index.tar`` or ``00-index.tar.gz`` straight into an index.

    ``make_package`` maps each identifier and description to the record
    stored in the index; ``lambda pkgid, descr: descr`` is enough for simple
    uses. Records need a ``package_id`` attribute unless ``key`` is given.
    """
    with open(index_file, "rb") as fh:
        data = fh.read()
    packages = [
        make_package(pkg.package_id, pkg.description)
        for pkg in parse_repo_index(maybe_decompress(data))
    ]
    if key is None:
        return PackageIndex.from_list(packages)
    return PackageIndex.from_list(packages, key)
