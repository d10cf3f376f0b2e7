"""Local filesystem helpers for writing into the mirror tree."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from tempfile import TemporaryDirectory


def write_atomic(path: Path, data: bytes) -> None:
    """Write data to path, creating parents, replacing any previous file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    # Stage inside the destination directory so `os.replace()` never
    # crosses a filesystem boundary.
    with TemporaryDirectory(dir=path.parent) as tmp_dir:
        tmp_file = Path(tmp_dir) / path.name
        tmp_file.write_bytes(data)
        os.replace(tmp_file, path)


def copy_atomic(src: Path, dst: Path) -> None:
    """Copy src over dst, creating parents, replacing any previous file atomically."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    with TemporaryDirectory(dir=dst.parent) as tmp_dir:
        tmp_file = Path(tmp_dir) / dst.name
        shutil.copyfile(src, tmp_file)
        os.replace(tmp_file, dst)
