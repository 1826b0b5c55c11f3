"""Content hasher --- deterministic SHA-256 over files and directory trees.

A single file's digest is the plain SHA-256 of its bytes, streamed in
fixed-size chunks. Directories are walked recursively: symbolic links are
skipped (not followed), the remaining entries are sorted, and each entry
is fed into the hash as a framed record. The digest therefore changes on
any insertion, deletion, rename, or content change anywhere in the tree.

Entry framing
-------------
Every record starts with a one-byte type tag and the length of the
entry's name, so names and contents can never run into each other::

    file       b"F" <name length> <name> <content length> <content>
    directory  b"D" <name length> <name> <entries...> b"E"

Lengths are 8-byte big-endian unsigned integers. A folder artifact is
itself wrapped as ``b"D" <entries...> b"E"`` (no name). The stream is
prefix-free: each position inside a directory holds exactly one of the
three tags, so two different trees cannot produce the same bytes.

Canonical file names
--------------------
Names are fed as UTF-8 of their Unicode NFC normal form, so a tree checked
out on a platform that stores decomposed names (NFD) hashes identically.
Names that are not valid Unicode (undecodable bytes on POSIX) are fed as
their raw on-disk bytes. Entries are ordered by these canonical bytes,
which is independent of the host locale. Distinct names with the same
canonical form (NFC and NFD spellings side by side) are ordered by their
raw on-disk bytes.

Hard links are hashed as ordinary files. Entries that are neither regular
files nor directories (sockets, FIFOs, devices) are skipped like links.
"""

from __future__ import annotations

import hashlib
import logging
import os
import struct
import unicodedata
from pathlib import Path
from typing import IO, Any

from trustchain.core.artifacts.models import ArtifactId
from trustchain.exceptions import (
    ArtifactFolderReadError,
    ArtifactNotFoundError,
    ArtifactReadError,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE: int = 65536

FILE_TAG: bytes = b"F"
DIR_TAG: bytes = b"D"
END_TAG: bytes = b"E"


def canonical_name(name: str) -> bytes:
    """Return the byte form of a file name that is fed into the hash."""
    try:
        return unicodedata.normalize("NFC", name).encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates from undecodable bytes: use the on-disk bytes.
        return os.fsencode(name)


def entry_sort_key(name: str) -> tuple[bytes, bytes]:
    """Order directory entries by canonical name, then by on-disk bytes."""
    return canonical_name(name), os.fsencode(name)


def _length(value: int) -> bytes:
    return struct.pack(">Q", value)


def _open_artifact(path: Path) -> IO[bytes]:
    try:
        return open(path, "rb")
    except FileNotFoundError as exc:
        raise ArtifactNotFoundError(
            f"artifact not found at '{path}'", subject=path, cause=exc
        ) from exc
    except OSError as exc:
        raise ArtifactReadError(
            f"cannot open artifact '{path}'", subject=path, cause=exc
        ) from exc


def _stream(handle: IO[bytes], path: Path, context: Any) -> int:
    total = 0
    while True:
        try:
            chunk = handle.read(CHUNK_SIZE)
        except InterruptedError:
            continue
        except OSError as exc:
            raise ArtifactReadError(
                f"error reading artifact '{path}'", subject=path, cause=exc
            ) from exc
        if not chunk:
            return total
        context.update(chunk)
        total += len(chunk)


def hash_file(path: Path, context: Any | None = None) -> Any:
    """Stream a file's bytes into a SHA-256 context.

    Args:
        path: File to hash.
        context: A ``hashlib`` hash object to update. A fresh SHA-256
            context is created when None.

    Returns:
        The updated hash context.

    Raises:
        ArtifactNotFoundError: If ``path`` does not exist.
        ArtifactReadError: On any other I/O failure.
    """
    if context is None:
        context = hashlib.sha256()
    logger.debug("hashing file %s", path)
    with _open_artifact(path) as handle:
        _stream(handle, path, context)
    return context


def _hash_sized_file(path: Path, context: Any) -> None:
    """Feed a file as ``<content length> <content>``."""
    logger.debug("hashing file %s", path)
    with _open_artifact(path) as handle:
        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            raise ArtifactReadError(
                f"cannot stat artifact '{path}'", subject=path, cause=exc
            ) from exc
        context.update(_length(size))
        streamed = _stream(handle, path, context)
    if streamed != size:
        raise ArtifactReadError(
            f"artifact '{path}' changed while it was being hashed",
            subject=path,
        )


def hash_folder(path: Path, context: Any | None = None) -> Any:
    """Recursively hash the entries of a directory into a SHA-256 context.

    Only the framed entry records are fed; the enclosing directory's own
    tags are written by the caller.

    Args:
        path: Directory to hash.
        context: A ``hashlib`` hash object to update. A fresh SHA-256
            context is created when None.

    Returns:
        The updated hash context.

    Raises:
        ArtifactNotFoundError: If ``path`` does not exist.
        ArtifactFolderReadError: If a directory cannot be listed.
        ArtifactReadError: If a file in the tree cannot be read.
    """
    if context is None:
        context = hashlib.sha256()
    logger.debug("hashing folder %s", path)

    try:
        with os.scandir(path) as it:
            entries = list(it)
    except FileNotFoundError as exc:
        raise ArtifactNotFoundError(
            f"artifact folder not found at '{path}'", subject=path, cause=exc
        ) from exc
    except OSError as exc:
        raise ArtifactFolderReadError(
            f"cannot read artifact folder '{path}'", subject=path, cause=exc
        ) from exc

    for entry in sorted(entries, key=lambda e: entry_sort_key(e.name)):
        try:
            if entry.is_symlink():
                logger.debug("skipping link %s", entry.path)
                continue
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
        except OSError as exc:
            raise ArtifactFolderReadError(
                f"cannot read artifact folder entry '{entry.path}'",
                subject=entry.path,
                cause=exc,
            ) from exc

        if not (is_dir or is_file):
            logger.debug("skipping special file %s", entry.path)
            continue

        name_bytes = canonical_name(entry.name)
        tag = DIR_TAG if is_dir else FILE_TAG
        context.update(tag + _length(len(name_bytes)) + name_bytes)
        if is_dir:
            hash_folder(Path(entry.path), context)
            context.update(END_TAG)
        else:
            _hash_sized_file(Path(entry.path), context)

    return context


def hash_path(path: Path) -> ArtifactId:
    """Compute the ``ArtifactId`` of a file or directory tree.

    A file hashes to the plain SHA-256 of its content. A directory hashes
    to its framed entry stream wrapped in directory tags. A path that is a
    symbolic link is resolved once here; links found inside a directory
    tree are skipped.
    """
    if path.is_dir():
        context = hashlib.sha256(DIR_TAG)
        hash_folder(path, context)
        context.update(END_TAG)
    else:
        context = hash_file(path)
    return ArtifactId(context.digest())
