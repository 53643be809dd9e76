"""Tests for preferred-version extraction and merging."""

from index.preferences import extract_preferences, merge_preferences
from index.tarball import EntryKind, TarEntry
from versioning.parser import parse_dependency, parse_version

PREFS_FILE = b"-- preferred versions\nfoo <2\nbar ==1.*\n"


def deps(*texts):
    return [parse_dependency(t) for t in texts]


def test_intersection_across_repositories():
    merged = merge_preferences([deps("A >=1.0"), deps("A <2.0")])
    assert str(merged["A"]) == ">=1.0 && <2.0"
    assert merged["A"].contains(parse_version("1.5"))
    assert not merged["A"].contains(parse_version("2.0"))


def test_absent_names_have_no_entry():
    merged = merge_preferences([deps("A >=1.0"), []])
    assert "B" not in merged
    assert merge_preferences([]) == {}


def test_single_occurrence_is_kept_as_is():
    merged = merge_preferences([deps("A >=1.0", "B <3")])
    assert str(merged["B"]) == "<3"


def test_repository_order_does_not_change_membership():
    lists = [deps("A >=1.0"), deps("A <2.0"), deps("A >1.2")]
    forward = merge_preferences(lists)["A"]
    backward = merge_preferences(list(reversed(lists)))["A"]
    for text in ["1.0", "1.2", "1.3", "1.99", "2.0"]:
        version = parse_version(text)
        assert forward.contains(version) == backward.contains(version)


def test_extract_disabled_by_default():
    entry = TarEntry("preferred-versions", EntryKind.NORMAL_FILE, PREFS_FILE)
    assert extract_preferences(entry) is None


def test_extract_when_enabled():
    entry = TarEntry("preferred-versions", EntryKind.NORMAL_FILE, PREFS_FILE)
    found = extract_preferences(entry, enabled=True)
    assert [d.name for d in found] == ["foo", "bar"]


def test_extract_only_top_level_file():
    nested = TarEntry("foo/preferred-versions", EntryKind.NORMAL_FILE, PREFS_FILE)
    directory = TarEntry("preferred-versions", EntryKind.DIRECTORY)
    assert extract_preferences(nested, enabled=True) is None
    assert extract_preferences(directory, enabled=True) is None
