"""Resolve installed packages back to source-level package identifiers.

Installed package records name their dependencies by opaque installation
ids. Each id is looked up once, when the ``InstalledPackage`` is built; ids
with no matching record resolve to a made-up ``<id>-broken`` package with
the null version, i.e. a dependency on a package that does not exist.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from constants import Constants
from versioning.models import PackageIdentifier, Version
from versioning.parser import parse_version

from .description import parse_fields
from .errors import DescriptionParseError, InstalledPackageParseError
from .package_index import PackageIndex

logger = logging.getLogger(__name__)

DUMP_RECORD_SEPARATOR = "---"


@dataclass(frozen=True)
class InstalledPackageInfo:
    """One installed instance of a package, as enumerated by the toolchain."""
    installed_id: str
    package_id: PackageIdentifier
    depends: Tuple[str, ...] = ()
    scope: str = ""


@dataclass(frozen=True)
class ResolvedDependency:
    """A dependency id that names an installed package."""
    installed_id: str
    package_id: PackageIdentifier
    broken = False


@dataclass(frozen=True)
class BrokenDependency:
    """A dependency id with no installed record, carrying its placeholder id."""
    installed_id: str
    package_id: PackageIdentifier
    broken = True


DependencyResolution = Union[ResolvedDependency, BrokenDependency]


@dataclass(frozen=True)
class InstalledPackage:
    """An installed package with its dependencies resolved to source ids."""
    info: InstalledPackageInfo
    dependencies: Tuple[DependencyResolution, ...] = ()

    @property
    def package_id(self) -> PackageIdentifier:
        return self.info.package_id

    @property
    def source_dependencies(self) -> List[PackageIdentifier]:
        return [dep.package_id for dep in self.dependencies]

    @property
    def broken_dependencies(self) -> List[BrokenDependency]:
        return [dep for dep in self.dependencies if dep.broken]


def broken_package_id(installed_id: str) -> PackageIdentifier:
    """The placeholder identifier for an unresolvable installation id."""
    return PackageIdentifier(installed_id + Constants.BROKEN_PACKAGE_SUFFIX, Version.null())


def resolve_dependencies(
    info: InstalledPackageInfo,
    installed_by_id: Mapping[str, InstalledPackageInfo],
) -> Tuple[DependencyResolution, ...]:
    """Resolve each declared dependency id of ``info``, in declaration order."""
    resolved: List[DependencyResolution] = []
    for dep_id in info.depends:
        dep = installed_by_id.get(dep_id)
        if dep is None:
            logger.debug("%s depends on missing installed package %s", info.installed_id, dep_id)
            resolved.append(BrokenDependency(dep_id, broken_package_id(dep_id)))
        else:
            resolved.append(ResolvedDependency(dep_id, dep.package_id))
    return tuple(resolved)


def _scope_rank(scope_preference: Sequence[str]):
    ranks = {scope: i for i, scope in enumerate(scope_preference)}
    return lambda info: ranks.get(info.scope, len(ranks))


def resolve_installed(
    installed: Union[Mapping[str, InstalledPackageInfo], Iterable[InstalledPackageInfo]],
    scope_preference: Sequence[str] = tuple(Constants.DEFAULT_SCOPE_PREFERENCE),
) -> PackageIndex[InstalledPackage]:
    """Convert installed records into an index keyed by source package id.

    The same (name, version) may be installed in several scopes, e.g. a
    shared global database and a per-user one. Exactly one instance is kept:
    the one whose scope comes first in ``scope_preference``. Scopes missing
    from that list rank last; ties keep input order.
    """
    if isinstance(installed, Mapping):
        installed_by_id: Dict[str, InstalledPackageInfo] = dict(installed)
    else:
        installed_by_id = OrderedDict((info.installed_id, info) for info in installed)

    rank = _scope_rank(scope_preference)
    # sorted() is stable, so equal ranks keep input order
    candidates = sorted(installed_by_id.values(), key=rank)

    packages = [
        InstalledPackage(info, resolve_dependencies(info, installed_by_id))
        for info in candidates
    ]
    index = PackageIndex.from_list(packages)
    logger.debug(
        "Resolved %d installed records into %d packages", len(installed_by_id), len(index)
    )
    return index


def parse_installed_dump(content: Union[bytes, str], scope: str = "") -> List[InstalledPackageInfo]:
    """Parse ``ghc-pkg dump`` output into installed package records.

    Records are separated by ``---`` lines; ``id``, ``name`` and ``version``
    are required, ``depends`` is a whitespace-separated list of ids.

    Raises:
        InstalledPackageParseError: a record is malformed.
    """
    text = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content
    chunks: List[List[str]] = [[]]
    for line in text.splitlines():
        if line.strip() == DUMP_RECORD_SEPARATOR:
            chunks.append([])
        else:
            chunks[-1].append(line)

    records: List[InstalledPackageInfo] = []
    for number, chunk in enumerate(chunks, start=1):
        if not any(line.strip() for line in chunk):
            continue
        try:
            fields = parse_fields("\n".join(chunk).encode("utf-8"))
        except DescriptionParseError as exc:
            raise InstalledPackageParseError(f"record {number}: {exc}") from exc
        values = {}
        for f in fields:
            values.setdefault(f.name, f.value)
        for required in ("id", "name", "version"):
            if not values.get(required, "").strip():
                raise InstalledPackageParseError(f"record {number}: missing field {required!r}")
        version = parse_version(values["version"])
        if version is None:
            raise InstalledPackageParseError(
                f"record {number}: invalid version {values['version']!r}"
            )
        records.append(InstalledPackageInfo(
            installed_id=values["id"].strip(),
            package_id=PackageIdentifier(values["name"].strip(), version),
            depends=tuple(values.get("depends", "").split()),
            scope=scope,
        ))
    return records
