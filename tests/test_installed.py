"""Tests for installed package graph resolution."""

from dataclasses import fields

import pytest

from index.errors import InstalledPackageParseError
from index.installed import (
    BrokenDependency,
    InstalledPackageInfo,
    ResolvedDependency,
    broken_package_id,
    parse_installed_dump,
    resolve_installed,
)
from versioning.models import PackageIdentifier, Version
from versioning.parser import parse_version


def pid(name, version):
    return PackageIdentifier(name, parse_version(version))


def info(installed_id, name, version, depends=(), scope="global"):
    return InstalledPackageInfo(installed_id, pid(name, version), tuple(depends), scope)


def test_broken_package_id():
    broken = broken_package_id("foo-1.0-abc123")
    assert broken.name == "foo-1.0-abc123-broken"
    assert broken.version == Version.null()


def test_dependencies_resolve_to_source_ids():
    index = resolve_installed([
        info("base-4-aaa", "base", "4"),
        info("text-1-bbb", "text", "1", ["base-4-aaa"]),
    ])
    text = index.lookup_package_id(pid("text", "1"))
    assert text.source_dependencies == [pid("base", "4")]
    assert text.dependencies == (ResolvedDependency("base-4-aaa", pid("base", "4")),)
    assert text.broken_dependencies == []


def test_missing_dependency_becomes_broken_sentinel():
    index = resolve_installed([info("app-1-ccc", "app", "1", ["gone-2-zzz", "app-1-ccc"])])
    app = index.lookup_package_id(pid("app", "1"))
    assert app.source_dependencies == [
        PackageIdentifier("gone-2-zzz-broken", Version.null()),
        pid("app", "1"),
    ]
    assert app.broken_dependencies == [
        BrokenDependency("gone-2-zzz", PackageIdentifier("gone-2-zzz-broken", Version.null())),
    ]


def test_broken_dependency_stores_its_placeholder_id():
    index = resolve_installed([info("app-1-ccc", "app", "1", ["gone-2-zzz"])])
    (broken,) = index.lookup_package_id(pid("app", "1")).broken_dependencies
    assert "package_id" in {f.name for f in fields(broken)}
    assert broken.package_id is broken.package_id
    assert broken.package_id == broken_package_id("gone-2-zzz")


def test_accepts_mapping_keyed_by_installed_id():
    records = {"base-4-aaa": info("base-4-aaa", "base", "4")}
    assert len(resolve_installed(records)) == 1


def test_scope_preference_picks_one_instance():
    user = info("foo-1-user", "foo", "1", scope="user")
    shared = info("foo-1-global", "foo", "1", scope="global")
    other_version = info("foo-2-global", "foo", "2", scope="global")
    records = [shared, other_version, user]

    index = resolve_installed(records, scope_preference=["user", "global"])
    assert [p.info.installed_id for p in index.lookup_name("foo")] == ["foo-1-user", "foo-2-global"]

    index = resolve_installed(records, scope_preference=["global", "user"])
    assert [p.info.installed_id for p in index.lookup_name("foo")] == ["foo-1-global", "foo-2-global"]


def test_unknown_scope_ranks_last_and_ties_keep_input_order():
    first = info("foo-1-a", "foo", "1", scope="sandbox")
    second = info("foo-1-b", "foo", "1", scope="sandbox")
    known = info("foo-1-c", "foo", "1", scope="global")

    assert resolve_installed([first, second], ["global"]).lookup_name("foo")[0].info == first
    assert resolve_installed([first, known], ["global"]).lookup_name("foo")[0].info == known


def test_dependency_on_non_canonical_instance_still_resolves():
    user = info("foo-1-user", "foo", "1", scope="user")
    shared = info("foo-1-global", "foo", "1", scope="global")
    app = info("app-1-x", "app", "1", ["foo-1-global"], scope="user")
    index = resolve_installed([user, shared, app], ["user", "global"])
    assert index.lookup_package_id(pid("app", "1")).source_dependencies == [pid("foo", "1")]


DUMP = """\
name: base
version: 4.12.0.0
id: base-4.12.0.0
depends:
    ghc-prim-0.5.3 integer-gmp-1.0.2.0
---
name: text
version: 1.2.3.1
id: text-1.2.3.1-abc
exposed: True
depends: base-4.12.0.0
---
"""


def test_parse_installed_dump():
    records = parse_installed_dump(DUMP, scope="global")
    assert [r.installed_id for r in records] == ["base-4.12.0.0", "text-1.2.3.1-abc"]
    assert records[0].depends == ("ghc-prim-0.5.3", "integer-gmp-1.0.2.0")
    assert records[1].package_id == pid("text", "1.2.3.1")
    assert all(r.scope == "global" for r in records)


def test_dump_round_trips_through_resolution():
    index = resolve_installed(parse_installed_dump(DUMP.encode("utf-8"), "global"))
    base = index.lookup_package_id(pid("base", "4.12.0.0"))
    assert [str(d) for d in base.source_dependencies] == [
        "ghc-prim-0.5.3-broken",
        "integer-gmp-1.0.2.0-broken",
    ]


@pytest.mark.parametrize("text", [
    "name: foo\nversion: 1.0\n",
    "id: foo-1\nversion: 1.0\n",
    "id: foo-1\nname: foo\nversion: x.y\n",
    "id: foo-1\nname: foo\nversion: 1.0\nlibrary\n",
])
def test_parse_installed_dump_errors(text):
    with pytest.raises(InstalledPackageParseError):
        parse_installed_dump(text)
