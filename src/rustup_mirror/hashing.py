"""Content hashing used to decide whether a local file is stale."""

from __future__ import annotations

import hashlib
from pathlib import Path

_CHUNK_SIZE = 1 << 16


def compute_sha256(path: str | Path) -> str | None:
    """
    Return the lowercase hex SHA256 digest of the whole file at path,
    or None when the file does not exist.
    """
    path = Path(path)
    if not path.is_file():
        return None
    sha256 = hashlib.sha256()
    with open(path, "rb") as fp:
        while chunk := fp.read(_CHUNK_SIZE):
            sha256.update(chunk)
    return sha256.hexdigest()


def sha256_bytes(data: bytes) -> str:
    """Return the lowercase hex SHA256 digest of data."""
    return hashlib.sha256(data).hexdigest()
