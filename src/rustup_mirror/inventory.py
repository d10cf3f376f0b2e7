"""Read-only view of the manifests and artifacts already in a mirror."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .channel import channel_manifest_name, channel_manifest_path, dated_manifest_path
from .errors import ConfigError
from .hashing import compute_sha256
from .manifest import VARIANTS, ChannelManifest, load_channel_manifest
from .planner import local_path_for
from .references import ReferenceSet

log = logging.getLogger("rustup_mirror/inventory")


class ArtifactState(str, Enum):
    """State of a mirrored artifact compared with its manifest."""

    MISSING = "missing"
    MISMATCH = "mismatch"
    MATCHING = "matching"


@dataclass(frozen=True, kw_only=True)
class MirroredArtifact:
    """An artifact that a mirrored manifest points to."""

    channel: str
    package: str
    target: str
    url: str
    path: Path
    expected_sha256: str


@dataclass(frozen=True, kw_only=True)
class StatusEntry:
    """Single entry of a mirror status listing."""

    artifact: MirroredArtifact
    local_sha256: str | None
    state: ArtifactState


def load_mirrored_manifest(mirror_dir: Path, channel: str) -> ChannelManifest | None:
    """Load the canonical manifest of a channel from the mirror, if present."""
    path = mirror_dir / channel_manifest_path(channel)
    if not path.exists():
        return None
    return load_channel_manifest(path.read_bytes())


def mirrored_channels(mirror_dir: Path) -> list[str]:
    """Return the channels that have a canonical manifest in the mirror."""
    dist_dir = mirror_dir / "dist"
    if not dist_dir.is_dir():
        return []
    pattern = channel_manifest_name("*")
    head, tail = pattern.split("*")
    return sorted(
        path.name[len(head) : -len(tail)]
        for path in dist_dir.glob(pattern)
        if path.is_file()
    )


def _url_path(url: str, mirror_url: str) -> str:
    base = mirror_url.rstrip("/")
    if not url.startswith(base + "/"):
        raise ConfigError(
            f"{url} is not served under {base}, "
            "pass the mirror URL the manifest was written with"
        )
    return url[len(base) :]


def iter_mirrored_artifacts(
    mirror_dir: Path,
    mirror_url: str,
    channel: str,
    manifest: ChannelManifest,
) -> Iterator[MirroredArtifact]:
    """
    Yield every artifact an available target of the manifest points to.

    Raises:
        ConfigError: if an artifact URL is not under mirror_url.
    """
    for slot in manifest.targets():
        entry = slot.entry()
        if not entry.available:
            continue
        for variant in VARIANTS:
            url, sha256 = entry.artifact(variant)
            yield MirroredArtifact(
                channel=channel,
                package=slot.package,
                target=slot.target,
                url=url,
                path=local_path_for(_url_path(url, mirror_url), mirror_dir=mirror_dir),
                expected_sha256=sha256,
            )


def collect_references(
    mirror_dir: Path,
    mirror_url: str,
    channels: Iterable[str],
    *,
    references: ReferenceSet | None = None,
) -> tuple[ReferenceSet, list[str]]:
    """
    Rebuild the reference set from the canonical manifests in the mirror.

    Paths are added to references when given, to a new set otherwise.
    Returns the reference set and the channels whose manifest was found.

    Raises:
        ConfigError: if a manifest URL is not under mirror_url.
        ParseError, SchemaError: if a mirrored manifest is invalid.
    """
    references = references if references is not None else ReferenceSet()
    found: list[str] = []
    for channel in channels:
        manifest = load_mirrored_manifest(mirror_dir, channel)
        if manifest is None:
            log.warning("no mirrored manifest for channel %s", channel)
            continue
        found.append(channel)
        references.add(mirror_dir / dated_manifest_path(channel, manifest.date))
        for artifact in iter_mirrored_artifacts(mirror_dir, mirror_url, channel, manifest):
            references.add(artifact.path)
    return references, found


def mirror_status(
    mirror_dir: Path,
    mirror_url: str,
    channels: Iterable[str],
) -> Iterator[StatusEntry]:
    """Compare every mirrored artifact with the digest its manifest declares."""
    for channel in channels:
        manifest = load_mirrored_manifest(mirror_dir, channel)
        if manifest is None:
            continue
        for artifact in iter_mirrored_artifacts(mirror_dir, mirror_url, channel, manifest):
            local_sha256 = compute_sha256(artifact.path)
            if local_sha256 is None:
                state = ArtifactState.MISSING
            elif local_sha256 != artifact.expected_sha256:
                state = ArtifactState.MISMATCH
            else:
                state = ArtifactState.MATCHING
            yield StatusEntry(artifact=artifact, local_sha256=local_sha256, state=state)
