"""Shared pytest fixtures for rustup-mirror tests."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import tomli_w

from rustup_mirror.transport import UpstreamClient

UPSTREAM_URL = "https://static.rust-lang.org"
MIRROR_URL = "http://mirror.example.com"


def _fake_response(content: bytes | None) -> MagicMock:
    """Create a mock response that yields content in one chunk, or a 404."""
    resp = MagicMock()
    if content is None:
        resp.status_code = 404
        resp.headers = {}
        resp.iter_content = MagicMock(return_value=iter([]))
        return resp
    resp.status_code = 200
    resp.headers = {"Content-Length": str(len(content))}
    resp.iter_content = MagicMock(return_value=iter([content]))
    return resp


class FakeUpstream:
    """In-memory distribution server behind a mocked requests.Session."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.requested: list[str] = []
        self.session = MagicMock()
        self.session.get.side_effect = self._get

    def _get(self, url: str, **kwargs: Any) -> MagicMock:
        self.requested.append(url)
        return _fake_response(self.files.get(url.removeprefix(UPSTREAM_URL + "/")))

    def add(self, path: str, content: bytes) -> None:
        self.files[path.lstrip("/")] = content

    def client(self) -> UpstreamClient:
        return UpstreamClient(UPSTREAM_URL + "/", session=self.session, progress=False)

    def requested_paths(self) -> list[str]:
        return [url.removeprefix(UPSTREAM_URL + "/") for url in self.requested]

    def publish_channel(
        self,
        channel: str,
        date: str,
        packages: dict[str, dict[str, bytes | None]],
        *,
        extra: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Publish a channel manifest and its artifacts.

        packages maps package -> target -> content, where None publishes
        an unavailable target. Returns the manifest document.
        """
        version = "1.78.0" if channel == "stable" else channel
        pkg_doc: dict[str, Any] = {}
        for package, targets in packages.items():
            target_doc: dict[str, Any] = {}
            for target, content in targets.items():
                if content is None:
                    target_doc[target] = {"available": False}
                    continue
                name = f"{package}-{version}-{target}" if target != "*" else f"{package}-{version}"
                gz_path = f"dist/{date}/{name}.tar.gz"
                xz_path = f"dist/{date}/{name}.tar.xz"
                xz_content = content + b".xz"
                self.add(gz_path, content)
                self.add(xz_path, xz_content)
                target_doc[target] = {
                    "available": True,
                    "url": f"{UPSTREAM_URL}/{gz_path}",
                    "hash": sha256(content),
                    "xz_url": f"{UPSTREAM_URL}/{xz_path}",
                    "xz_hash": sha256(xz_content),
                }
            pkg_doc[package] = {"version": version, "target": target_doc}
        document: dict[str, Any] = {"manifest-version": "2", "date": date, "pkg": pkg_doc}
        document.update(extra or {})
        self.publish_manifest(channel, tomli_w.dumps(document).encode())
        return document

    def publish_manifest(self, channel: str, data: bytes) -> None:
        name = f"channel-rust-{channel}.toml"
        self.add(f"dist/{name}", data)
        self.add(f"dist/{name}.sha256", f"{sha256(data)}  {name}\n".encode())

    def publish_self_update(self, version: str, installers: dict[str, bytes]) -> None:
        """Publish the self-update manifest; installers maps an archive path suffix to content."""
        self.add(
            "rustup/release-stable.toml",
            f'schema-version = "1"\nversion = "{version}"\n'.encode(),
        )
        for suffix, content in installers.items():
            self.add(f"rustup/archive/{version}/{suffix}", content)


def sha256(content: bytes) -> str:
    """Compute SHA256 hex digest for test data."""
    return hashlib.sha256(content).hexdigest()


@pytest.fixture
def upstream() -> FakeUpstream:
    """Return an empty fake upstream server."""
    return FakeUpstream()


@pytest.fixture
def mirror_dir(tmp_path: Path) -> Path:
    """Return the mirror root used by a test."""
    return tmp_path / "mirror"


@pytest.fixture
def orig_dir(tmp_path: Path) -> Path:
    """Return the directory holding the original manifests."""
    return tmp_path / "orig"
