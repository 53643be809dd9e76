"""Tests for index age warnings."""

import logging
import os
import time

from index.models import LocalRepo, RemoteRepo, Repository
from index.staleness import check_index_age

DAY = 24 * 60 * 60


def _index_aged(tmp_path, days):
    path = tmp_path / "00-index.tar"
    path.write_bytes(b"")
    now = time.time()
    stamp = now - days * DAY - 60
    os.utime(path, (stamp, stamp))
    return str(path), now


def test_old_remote_index_warns(tmp_path, caplog):
    path, now = _index_aged(tmp_path, 20)
    repo = Repository(str(tmp_path), RemoteRepo("hackage.haskell.org"))
    with caplog.at_level(logging.WARNING):
        assert check_index_age(path, repo, 15, now=now) == 20
    assert len(caplog.records) == 1
    message = caplog.records[0].getMessage()
    assert "hackage.haskell.org" in message
    assert "20 days old" in message
    assert "Run 'hackport update' to get the latest list" in message


def test_threshold_is_inclusive(tmp_path, caplog):
    path, now = _index_aged(tmp_path, 15)
    repo = Repository(str(tmp_path), RemoteRepo("mirror"))
    with caplog.at_level(logging.WARNING):
        check_index_age(path, repo, 15, now=now)
    assert len(caplog.records) == 1


def test_fresh_index_is_quiet(tmp_path, caplog):
    path, now = _index_aged(tmp_path, 3)
    repo = Repository(str(tmp_path), RemoteRepo("mirror"))
    with caplog.at_level(logging.WARNING):
        assert check_index_age(path, repo, 15, now=now) == 3
    assert caplog.records == []


def test_old_local_index_is_quiet(tmp_path, caplog):
    path, now = _index_aged(tmp_path, 100)
    repo = Repository(str(tmp_path), LocalRepo())
    with caplog.at_level(logging.WARNING):
        assert check_index_age(path, repo, 15, now=now) == 100
    assert caplog.records == []


def test_threshold_is_configurable(tmp_path, caplog):
    path, now = _index_aged(tmp_path, 2)
    repo = Repository(str(tmp_path), RemoteRepo("mirror"))
    with caplog.at_level(logging.WARNING):
        check_index_age(path, repo, threshold_days=1, now=now)
    assert len(caplog.records) == 1


def test_missing_file_is_advisory_only(tmp_path, caplog):
    repo = Repository(str(tmp_path), RemoteRepo("mirror"))
    with caplog.at_level(logging.WARNING):
        assert check_index_age(str(tmp_path / "nope.tar"), repo) is None
    assert caplog.records == []
