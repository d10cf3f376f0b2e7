"""Mirroring of a single release channel."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .classify import WILDCARD_TARGET
from .errors import IntegrityError
from .hashing import sha256_bytes
from .manifest import VARIANTS, ChannelManifest, load_channel_manifest, serialize_channel_manifest
from .planner import ArtifactSyncPlanner, sidecar_path
from .references import ReferenceSet
from .storage import copy_atomic, write_atomic
from .transport import UpstreamClient

log = logging.getLogger("rustup_mirror/channel")

_DIGEST_LENGTH = 64


def channel_manifest_name(channel: str) -> str:
    """Return the file name of a channel manifest, e.g. `channel-rust-stable.toml`."""
    return f"channel-rust-{channel}.toml"


def channel_manifest_path(channel: str) -> str:
    """Return the canonical manifest path relative to the mirror root."""
    return f"dist/{channel_manifest_name(channel)}"


def dated_manifest_path(channel: str, release_date: str) -> str:
    """Return the dated snapshot manifest path relative to the mirror root."""
    return f"dist/{release_date}/{channel_manifest_name(channel)}"


@dataclass(frozen=True, kw_only=True)
class ChannelSyncResult:
    """Summary of a channel sync."""

    channel: str
    date: str
    available_targets: frozenset[str]
    fetched: int
    skipped: int
    disabled: int


class ChannelSyncOrchestrator:
    """
    Mirror one channel end to end.

    The steps always run in this order and any failure aborts the channel:

    1. fetch the manifest and its `.sha256` into orig_dir;
    2. verify the manifest digest;
    3. parse the manifest;
    4. sync every available (package, target) artifact, rewriting URLs;
    5. serialize the rewritten manifest;
    6. write it to `dist/channel-rust-<channel>.toml`;
    7. copy it to `dist/<date>/channel-rust-<channel>.toml`;
    8. write the `.sha256` sidecars of both copies.

    Targets outside target_allowlist are marked unavailable rather than
    removed, so consumers still find every target key they expect.
    """

    def __init__(
        self,
        *,
        orig_dir: Path,
        mirror_dir: Path,
        mirror_url: str,
        upstream: UpstreamClient,
        references: ReferenceSet,
        target_allowlist: frozenset[str] | None = None,
    ) -> None:
        self.orig_dir = orig_dir
        self.mirror_dir = mirror_dir
        self.upstream = upstream
        self.references = references
        self.target_allowlist = target_allowlist
        self.planner = ArtifactSyncPlanner(
            mirror_dir=mirror_dir,
            mirror_url=mirror_url,
            upstream=upstream,
            references=references,
        )

    def sync(self, channel: str) -> ChannelSyncResult:
        """
        Mirror the given channel.

        Raises:
            TransferError, ParseError, SchemaError, IntegrityError.
        """
        log.info("syncing channel %s... start", channel)
        data = self._fetch_manifest(channel)
        manifest = load_channel_manifest(data)
        log.info("channel %s date %s", channel, manifest.date)

        result = self._sync_targets(channel, manifest)

        output = serialize_channel_manifest(manifest)
        canonical = self._persist_canonical(channel, output)
        dated = self._persist_dated_snapshot(channel, manifest.date, canonical)
        self._persist_sidecars(channel, output, canonical, dated)

        log.info(
            "syncing channel %s... ok (fetched=%d skipped=%d disabled=%d)",
            channel,
            result.fetched,
            result.skipped,
            result.disabled,
        )
        return result

    def _fetch_manifest(self, channel: str) -> bytes:
        remote_path = channel_manifest_path(channel)
        manifest_file = self.upstream.download(remote_path, self.orig_dir / remote_path).path
        checksum_file = self.upstream.download(
            remote_path + ".sha256",
            sidecar_path(self.orig_dir / remote_path),
        ).path
        data = manifest_file.read_bytes()
        _verify_manifest_checksum(remote_path, data, checksum_file.read_bytes())
        return data

    def _target_allowed(self, target: str) -> bool:
        if self.target_allowlist is None or target == WILDCARD_TARGET:
            return True
        return target in self.target_allowlist

    def _sync_targets(self, channel: str, manifest: ChannelManifest) -> ChannelSyncResult:
        available: set[str] = set()
        fetched = skipped = disabled = 0
        for slot in manifest.targets():
            entry = slot.entry()
            if not entry.available:
                continue
            if not self._target_allowed(slot.target):
                log.debug("target %s not selected, marking it unavailable", slot)
                slot.disable()
                disabled += 1
                continue
            available.add(slot.target)
            for variant in VARIANTS:
                url, sha256 = entry.artifact(variant)
                outcome = self.planner.sync(url, sha256)
                slot.set_url(variant, outcome.mirror_url)
                if outcome.fetched:
                    fetched += 1
                else:
                    skipped += 1
        return ChannelSyncResult(
            channel=channel,
            date=manifest.date,
            available_targets=frozenset(available),
            fetched=fetched,
            skipped=skipped,
            disabled=disabled,
        )

    def _persist_canonical(self, channel: str, output: bytes) -> Path:
        path = self.mirror_dir / channel_manifest_path(channel)
        write_atomic(path, output)
        log.info("producing /%s", channel_manifest_path(channel))
        return path

    def _persist_dated_snapshot(self, channel: str, release_date: str, canonical: Path) -> Path:
        path = self.mirror_dir / dated_manifest_path(channel, release_date)
        copy_atomic(canonical, path)
        self.references.add(path)
        log.info("producing /%s", dated_manifest_path(channel, release_date))
        return path

    def _persist_sidecars(self, channel: str, output: bytes, canonical: Path, dated: Path) -> None:
        content = f"{sha256_bytes(output)}  {channel_manifest_name(channel)}".encode()
        write_atomic(sidecar_path(canonical), content)
        copy_atomic(sidecar_path(canonical), sidecar_path(dated))
        log.debug("producing checksums for %s", channel_manifest_name(channel))


def _verify_manifest_checksum(name: str, data: bytes, checksum: bytes) -> None:
    """
    Check data against the first 64 hex characters of its `.sha256` file.

    Raises:
        IntegrityError: on mismatch.
    """
    declared = checksum[:_DIGEST_LENGTH].decode("ascii", errors="replace").lower()
    actual = sha256_bytes(data)
    if declared != actual:
        raise IntegrityError(f"SHA256 mismatch for {name}: expected {declared}, got {actual}")
