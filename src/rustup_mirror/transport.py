"""Fetching files from the upstream distribution server."""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from tempfile import TemporaryDirectory

import requests
from tqdm import tqdm

from .errors import IntegrityError, TransferError

log = logging.getLogger("rustup_mirror/transport")

DEFAULT_UPSTREAM_URL = "https://static.rust-lang.org/"

_CHUNK_SIZE = 8192


@dataclass(frozen=True, kw_only=True)
class DownloadResult:
    """Outcome of a completed download."""

    path: Path
    sha256: str
    size: int


class UpstreamClient:
    """
    Download files from an upstream base URL.

    Files are streamed into a temporary directory beside the destination
    and moved into place with `os.replace()` only once complete, so a
    failed transfer never leaves a truncated file behind.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_UPSTREAM_URL,
        *,
        session: requests.Session | None = None,
        progress: bool = True,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.progress = progress

    def url_for(self, remote_path: str) -> str:
        """Return the upstream URL for a path relative to the base URL."""
        return f"{self.base_url}/{remote_path.lstrip('/')}"

    def download(
        self,
        remote_path: str,
        dest: Path,
        *,
        expected_sha256: str | None = None,
    ) -> DownloadResult:
        """
        Download remote_path into dest, creating parent directories.

        Raises:
            TransferError: on network failure, non-200 status, missing
                Content-Length or a truncated body.
            IntegrityError: if expected_sha256 is given and the received
                content does not match it. dest is left untouched.
        """
        url = self.url_for(remote_path)
        dest.parent.mkdir(parents=True, exist_ok=True)
        log.info("fetching %s... start", url)
        with TemporaryDirectory(dir=dest.parent) as tmp_dir:
            tmp_file = Path(tmp_dir) / dest.name
            sha256, size = self._fetch_into(url, tmp_file)
            if expected_sha256 is not None and sha256 != expected_sha256:
                raise IntegrityError(
                    f"SHA256 mismatch for {url}: expected {expected_sha256}, got {sha256}"
                )
            os.replace(tmp_file, dest)
        log.info("fetching %s... ok", url)
        return DownloadResult(path=dest, sha256=sha256, size=size)

    def _fetch_into(self, url: str, tmp_file: Path) -> tuple[str, int]:
        sha256 = hashlib.sha256()
        received = 0
        try:
            resp = self.session.get(url, stream=True)
        except requests.RequestException as exc:
            raise TransferError(f"GET {url}: {exc}") from exc
        try:
            if resp.status_code != 200:
                raise TransferError(f"GET {url}: unexpected status {resp.status_code}")
            total = _content_length(url, resp.headers.get("Content-Length"))
            with (
                open(tmp_file, "wb") as fp,
                tqdm(
                    total=total,
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    desc=tmp_file.name,
                    leave=False,
                    disable=not self.progress,
                ) as pbar,
            ):
                for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
                    fp.write(chunk)
                    sha256.update(chunk)
                    received += len(chunk)
                    pbar.update(len(chunk))
        except requests.RequestException as exc:
            raise TransferError(f"GET {url}: {exc}") from exc
        finally:
            resp.close()
        if received < total:
            raise TransferError(f"GET {url}: received {received} of {total} bytes")
        return sha256.hexdigest(), received


def _content_length(url: str, value: str | None) -> int:
    if value is None:
        raise TransferError(f"GET {url}: missing Content-Length")
    try:
        return int(value)
    except ValueError as exc:
        raise TransferError(f"GET {url}: invalid Content-Length: {value!r}") from exc
