"""Tracking of the local paths still referenced by freshly written manifests."""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path


def normalize_path(path: str | Path) -> str:
    """
    Return an absolute path with `.` and `..` segments collapsed.

    This is a purely lexical operation: the filesystem is never consulted,
    so paths that do not exist (yet, or anymore) normalize the same way.
    """
    return os.path.normpath(os.path.abspath(os.fspath(path)))


class ReferenceSet:
    """
    Append-only set of normalized local paths referenced by a run.

    Channels add to it while they sync; once every channel is done,
    call freeze() and hand the resulting snapshot to the collector.
    """

    def __init__(self) -> None:
        self._paths: set[str] = set()
        self._frozen = False

    def add(self, path: str | Path) -> None:
        if self._frozen:
            raise RuntimeError("cannot add references after freeze()")
        self._paths.add(normalize_path(path))

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return normalize_path(path) in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def freeze(self) -> ReferenceSnapshot:
        """Stop accepting references and return an immutable snapshot."""
        self._frozen = True
        return ReferenceSnapshot(paths=frozenset(self._paths))


@dataclass(frozen=True)
class ReferenceSnapshot:
    """Immutable view of a completed ReferenceSet."""

    paths: frozenset[str]

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return normalize_path(path) in self.paths

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.paths))

    def __len__(self) -> int:
        return len(self.paths)
