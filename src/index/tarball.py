"""Streaming access to tar-formatted repository index archives."""

from __future__ import annotations

import gzip
import io
import logging
import tarfile
import zlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional, TypeVar

from common.logging_utils import extra_context, is_debug_enabled

from .errors import ArchiveStreamError

logger = logging.getLogger(__name__)

A = TypeVar("A")

GZIP_MAGIC = b"\x1f\x8b"


class EntryKind(Enum):
    """Kinds of archive entries the index cares about."""
    NORMAL_FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class TarEntry:
    """One archive member; only normal files carry content."""
    path: str
    kind: EntryKind
    content: Optional[bytes] = field(default=None, repr=False)


def maybe_decompress(data: bytes) -> bytes:
    """Gunzip ``data`` if it carries the gzip magic bytes, else return it as is."""
    if not data.startswith(GZIP_MAGIC):
        return data
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise ArchiveStreamError(f"Invalid gzip data: {exc}") from exc


def _entry_kind(member: tarfile.TarInfo) -> EntryKind:
    if member.isreg():
        return EntryKind.NORMAL_FILE
    if member.isdir():
        return EntryKind.DIRECTORY
    return EntryKind.OTHER


def read_entries(data: bytes) -> Iterator[TarEntry]:
    """Lazily yield the entries of an uncompressed tar archive.

    Any decoding failure raises ``ArchiveStreamError`` and ends the stream.
    Only zero padding may follow the last member.
    """
    if not data:
        return
    count = 0
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r|") as tar:
            for member in tar:
                kind = _entry_kind(member)
                content = None
                if kind is EntryKind.NORMAL_FILE:
                    fobj = tar.extractfile(member)
                    content = fobj.read() if fobj is not None else b""
                count += 1
                yield TarEntry(member.name, kind, content)
            # tarfile stops quietly on a bad header past the first member
            if data[tar.offset:].strip(b"\0"):
                raise ArchiveStreamError(
                    f"Error reading index archive after {count} entries: "
                    f"invalid header at offset {tar.offset}"
                )
    except (tarfile.TarError, EOFError) as exc:
        raise ArchiveStreamError(f"Error reading index archive after {count} entries: {exc}") from exc
    if is_debug_enabled(logger):
        logger.debug(
            "Archive traversed",
            extra=extra_context(
                event="archive_read", component="tarball", outcome="success", count=count
            ),
        )


def fold_tarball(func: Callable[[A, TarEntry], A], initial: A, data: bytes) -> A:
    """Fold ``func`` over the archive entries, left to right.

    A stream failure propagates; no partial accumulator is returned.
    """
    acc = initial
    for entry in read_entries(data):
        acc = func(acc, entry)
    return acc
