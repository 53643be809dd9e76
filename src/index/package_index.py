"""A read-only index of packages keyed by name and version."""

from __future__ import annotations

from typing import Callable, Dict, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from versioning.models import Dependency, PackageIdentifier, Version

T = TypeVar("T")


def _default_key(item) -> PackageIdentifier:
    return item.package_id


class PackageIndex(Generic[T]):
    """Packages grouped by name, at most one entry per (name, version).

    Items must expose a ``package_id`` unless a ``key`` function is given.
    Build it once with ``from_list``; it is not mutated afterwards.
    """

    def __init__(
        self,
        buckets: Optional[Dict[str, Dict[Version, T]]] = None,
        key: Callable[[T], PackageIdentifier] = _default_key,
    ):
        self._buckets: Dict[str, Dict[Version, T]] = buckets or {}
        self._key = key

    @classmethod
    def from_list(
        cls,
        items: Iterable[T],
        key: Callable[[T], PackageIdentifier] = _default_key,
    ) -> "PackageIndex[T]":
        """Build an index; for a repeated (name, version) the first item wins."""
        buckets: Dict[str, Dict[Version, T]] = {}
        for item in items:
            pkgid = key(item)
            bucket = buckets.setdefault(pkgid.name, {})
            if pkgid.version not in bucket:
                bucket[pkgid.version] = item
        return cls(buckets, key)

    def merge(self, other: "PackageIndex[T]") -> "PackageIndex[T]":
        """Combine two indexes; entries already in ``self`` win."""
        return PackageIndex.from_list(
            [*self.all_packages(), *other.all_packages()], self._key
        )

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def __iter__(self) -> Iterator[T]:
        return iter(self.all_packages())

    def __contains__(self, pkgid: object) -> bool:
        if not isinstance(pkgid, PackageIdentifier):
            return False
        return pkgid.version in self._buckets.get(pkgid.name, {})

    def package_names(self) -> List[str]:
        return sorted(self._buckets)

    def lookup_name(self, name: str) -> List[T]:
        """All versions of ``name``, oldest first."""
        bucket = self._buckets.get(name, {})
        return [bucket[v] for v in sorted(bucket)]

    def lookup_package_id(self, pkgid: PackageIdentifier) -> Optional[T]:
        return self._buckets.get(pkgid.name, {}).get(pkgid.version)

    def lookup_dependency(self, dep: Dependency) -> List[T]:
        """Versions of ``dep.name`` inside its version range, oldest first."""
        return [
            item for item in self.lookup_name(dep.name)
            if dep.version_range.contains(self._key(item).version)
        ]

    def search(self, text: str) -> List[Tuple[str, List[T]]]:
        """Case-insensitive substring search over package names."""
        needle = text.lower()
        return [
            (name, self.lookup_name(name))
            for name in self.package_names()
            if needle in name.lower()
        ]

    def all_packages(self) -> List[T]:
        """Every item, ordered by name then version."""
        return [item for name in self.package_names() for item in self.lookup_name(name)]

    def all_packages_by_name(self) -> List[List[T]]:
        return [self.lookup_name(name) for name in self.package_names()]
