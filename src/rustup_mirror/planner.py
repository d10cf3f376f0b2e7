"""Per-artifact synchronization: decide whether to fetch and rewrite the URL."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

from .errors import IntegrityError, SchemaError
from .hashing import compute_sha256
from .references import ReferenceSet, normalize_path
from .transport import UpstreamClient

log = logging.getLogger("rustup_mirror/planner")

SIDECAR_SUFFIX = ".sha256"


def sidecar_path(path: Path) -> Path:
    """Return the `<path>.sha256` file that caches the digest of path."""
    return path.with_name(path.name + SIDECAR_SUFFIX)


@dataclass(frozen=True, kw_only=True)
class ArtifactRef:
    """
    Where an artifact lives, upstream and locally.

    Attributes:
        url_path: the URL path as written upstream, e.g. `/dist/2024-05-02/x.tar.xz`
        local_path: the decoded path of the artifact under the mirror root
        sidecar_path: the `<local_path>.sha256` digest cache
        expected_sha256: the digest declared by the manifest
    """

    url_path: str
    local_path: Path
    sidecar_path: Path
    expected_sha256: str

    @classmethod
    def from_url(cls, url: str, *, mirror_dir: Path, expected_sha256: str) -> ArtifactRef:
        """
        Resolve the local paths for an artifact URL.

        Raises:
            SchemaError: if the URL has no path or the path would
                resolve outside of mirror_dir.
        """
        url_path = urlsplit(url).path
        local_path = local_path_for(url_path, mirror_dir=mirror_dir)
        return cls(
            url_path=url_path,
            local_path=local_path,
            sidecar_path=sidecar_path(local_path),
            expected_sha256=expected_sha256,
        )


def local_path_for(url_path: str, *, mirror_dir: Path) -> Path:
    """Map a URL path onto a file under mirror_dir, decoding `%20` into spaces."""
    relative = url_path.replace("%20", " ").lstrip("/")
    if not relative:
        raise SchemaError(f"artifact URL has an empty path: {url_path!r}")
    root = normalize_path(mirror_dir)
    local = normalize_path(Path(root) / relative)
    if local == root or os.path.commonpath([root, local]) != root:
        raise SchemaError(f"artifact path escapes the mirror root: {url_path}")
    return mirror_dir / relative


@dataclass(frozen=True, kw_only=True)
class ArtifactSyncResult:
    """What happened while syncing one artifact."""

    ref: ArtifactRef
    fetched: bool
    sidecar_written: bool
    mirror_url: str


def read_sidecar(path: Path) -> str | None:
    """Return the digest cached in a sidecar file, or None if unreadable."""
    try:
        content = path.read_text().strip()
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("cannot read %s, ignoring it: %s", path, exc)
        return None
    return content or None


class ArtifactSyncPlanner:
    """
    Bring local artifacts in line with the digests a manifest declares.

    Every artifact passed to sync() is recorded in the reference set, even
    when nothing needs downloading, since the manifest still points to it.
    """

    def __init__(
        self,
        *,
        mirror_dir: Path,
        mirror_url: str,
        upstream: UpstreamClient,
        references: ReferenceSet,
    ) -> None:
        self.mirror_dir = mirror_dir
        self.mirror_url = mirror_url.rstrip("/")
        self.upstream = upstream
        self.references = references

    def sync(self, url: str, upstream_sha256: str) -> ArtifactSyncResult:
        """
        Make sure the artifact at url exists locally with upstream_sha256.

        Returns the result, whose mirror_url is the URL the rewritten
        manifest should point to.

        Raises:
            SchemaError: if the URL cannot be mapped under the mirror root.
            TransferError: if the download fails.
            IntegrityError: if the downloaded content does not match.
        """
        ref = ArtifactRef.from_url(url, mirror_dir=self.mirror_dir, expected_sha256=upstream_sha256)
        self.references.add(ref.local_path)

        cached_sha256 = read_sidecar(ref.sidecar_path)
        sidecar_missing = cached_sha256 is None
        if cached_sha256 is None:
            cached_sha256 = compute_sha256(ref.local_path)

        need_download = cached_sha256 is None or cached_sha256 != upstream_sha256
        if need_download:
            result = self.upstream.download(
                ref.url_path,
                ref.local_path,
                expected_sha256=upstream_sha256,
            )
            cached_sha256 = result.sha256
            if cached_sha256 != upstream_sha256:
                raise IntegrityError(
                    f"SHA256 mismatch for {ref.url_path}: "
                    f"expected {upstream_sha256}, got {cached_sha256}"
                )
        else:
            log.info("file %s already downloaded, skipping", ref.url_path)

        if need_download or sidecar_missing:
            ref.sidecar_path.write_text(cached_sha256)
            log.debug("writing checksum for file %s", ref.url_path)

        return ArtifactSyncResult(
            ref=ref,
            fetched=need_download,
            sidecar_written=need_download or sidecar_missing,
            mirror_url=f"{self.mirror_url}{ref.url_path}",
        )
