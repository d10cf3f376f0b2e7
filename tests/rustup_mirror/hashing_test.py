"""Tests for the rustup_mirror.hashing module."""

import hashlib
from pathlib import Path

from rustup_mirror.hashing import compute_sha256, sha256_bytes


class TestComputeSha256:
    """Tests for compute_sha256."""

    def test_missing_file_returns_none(self, tmp_path: Path):
        assert compute_sha256(tmp_path / "missing.tar.xz") is None

    def test_directory_returns_none(self, tmp_path: Path):
        assert compute_sha256(tmp_path) is None

    def test_hashes_whole_file(self, tmp_path: Path):
        content = b"x" * (1 << 17) + b"tail"
        path = tmp_path / "artifact.tar.gz"
        path.write_bytes(content)
        assert compute_sha256(path) == hashlib.sha256(content).hexdigest()

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "empty"
        path.write_bytes(b"")
        assert compute_sha256(path) == hashlib.sha256(b"").hexdigest()

    def test_accepts_string_paths(self, tmp_path: Path):
        path = tmp_path / "artifact"
        path.write_bytes(b"abc")
        assert compute_sha256(str(path)) == sha256_bytes(b"abc")


class TestSha256Bytes:
    """Tests for sha256_bytes."""

    def test_lowercase_hex(self):
        digest = sha256_bytes(b"rustup")
        assert digest == hashlib.sha256(b"rustup").hexdigest()
        assert digest == digest.lower()
        assert len(digest) == 64
