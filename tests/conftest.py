"""Shared fixtures: in-memory index archives and package descriptions."""

import gzip
import io
import tarfile

import pytest


def cabal(name, version, extra=""):
    """Bytes of a minimal .cabal description."""
    return f"name: {name}\nversion: {version}\n{extra}".encode("utf-8")


def make_tarball(entries, compress=False):
    """Build tar bytes from (path, content) pairs; content None adds a directory."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for path, content in entries:
            info = tarfile.TarInfo(path)
            if content is None:
                info.type = tarfile.DIRTYPE
                tar.addfile(info)
            else:
                info.size = len(content)
                tar.addfile(info, io.BytesIO(content))
    data = buf.getvalue()
    return gzip.compress(data) if compress else data


@pytest.fixture
def tarball():
    """Factory fixture building archive bytes."""
    return make_tarball


@pytest.fixture
def write_index(tmp_path):
    """Write a 00-index.tar built from entries into a fresh repository directory."""
    def _write(dirname, entries, compress=False):
        repo_dir = tmp_path / dirname
        repo_dir.mkdir(parents=True, exist_ok=True)
        (repo_dir / "00-index.tar").write_bytes(make_tarball(entries, compress))
        return repo_dir
    return _write
