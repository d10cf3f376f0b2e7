"""Tests for the rustup_mirror.cli.status module."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from rustup_mirror.channel import ChannelSyncOrchestrator
from rustup_mirror.cli import cli
from rustup_mirror.references import ReferenceSet

_MIRROR_URL = "http://mirror.example.com"
_DATE = "2024-05-02"
_LINUX = "x86_64-unknown-linux-gnu"
_GZ = f"dist/{_DATE}/rustc-1.78.0-{_LINUX}.tar.gz"
_XZ = f"dist/{_DATE}/rustc-1.78.0-{_LINUX}.tar.xz"


@pytest.fixture
def mirrored(upstream, orig_dir: Path, mirror_dir: Path) -> Path:
    """Mirror a stable channel with a single target."""
    upstream.publish_channel("stable", _DATE, {"rustc": {_LINUX: b"rustc"}})
    ChannelSyncOrchestrator(
        orig_dir=orig_dir,
        mirror_dir=mirror_dir,
        mirror_url=_MIRROR_URL,
        upstream=upstream.client(),
        references=ReferenceSet(),
    ).sync("stable")
    return mirror_dir


def _status(mirror_dir: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(
        cli,
        ["status", "-m", str(mirror_dir), "-u", _MIRROR_URL, "-c", "stable", *args],
    )


class TestStatusMatching:
    """Matching artifacts are hidden unless --all is given."""

    def test_no_output(self, mirrored: Path):
        result = _status(mirrored)
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == ""

    def test_shown_with_all(self, mirrored: Path):
        result = _status(mirrored, "--all")
        assert result.exit_code == 0, result.output
        assert _GZ in result.stdout
        assert _XZ in result.stdout


class TestStatusDifferences:
    """Missing and modified artifacts are listed."""

    def test_missing_prints_d(self, mirrored: Path):
        (mirrored / _GZ).unlink()
        result = _status(mirrored)
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == f"D stable {_GZ}"

    def test_modified_prints_m(self, mirrored: Path):
        (mirrored / _XZ).write_bytes(b"tampered")
        result = _status(mirrored)
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == f"M stable {_XZ}"


class TestStatusFailure:
    """A corrupt mirrored manifest exits with status 1."""

    def test_corrupt_manifest(self, mirror_dir: Path):
        path = mirror_dir / "dist" / "channel-rust-stable.toml"
        path.parent.mkdir(parents=True)
        path.write_text("not toml at all [\n")
        result = _status(mirror_dir)
        assert result.exit_code == 1
