"""Whole mirror runs: every channel, the self-update files, then collection."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from filelock import FileLock

from .channel import ChannelSyncOrchestrator, ChannelSyncResult
from .config import MirrorConfig
from .errors import ConfigError
from .gc import CollectionReport, RetentionGarbageCollector, RetentionPolicy
from .inventory import collect_references, mirrored_channels
from .references import ReferenceSet, ReferenceSnapshot
from .selfupdate import SelfUpdateSyncOrchestrator, SelfUpdateSyncResult
from .transport import UpstreamClient

log = logging.getLogger("rustup_mirror/mirror")

LOCK_FILENAME = ".lock"


@dataclass(kw_only=True)
class MirrorReport:
    """Summary of a complete mirror run."""

    channels: list[ChannelSyncResult] = field(default_factory=list)
    self_update: SelfUpdateSyncResult | None = None
    collection: CollectionReport | None = None

    @property
    def available_targets(self) -> frozenset[str]:
        targets: set[str] = set()
        for result in self.channels:
            targets |= result.available_targets
        return frozenset(targets)


def mirror_lock(mirror_dir: Path) -> FileLock:
    """Return the lock serializing runs that modify mirror_dir."""
    mirror_dir.mkdir(parents=True, exist_ok=True)
    return FileLock(mirror_dir / LOCK_FILENAME)


def sync_mirror(
    config: MirrorConfig,
    *,
    upstream: UpstreamClient | None = None,
    today: date | None = None,
) -> MirrorReport:
    """
    Mirror every configured channel and the self-update files, then
    garbage collect `dist/` unless config.gc is False.

    Collection only starts once every channel has been mirrored, and
    never runs if any of them failed. Channels left out of config.channels
    whose manifest is still in the mirror keep their artifacts.

    Raises:
        MirrorError subclasses on fatal failures.
    """
    upstream = upstream if upstream is not None else UpstreamClient(config.upstream_url)
    report = MirrorReport()
    with mirror_lock(config.mirror_path):
        references = ReferenceSet()
        orchestrator = ChannelSyncOrchestrator(
            orig_dir=config.orig_path,
            mirror_dir=config.mirror_path,
            mirror_url=config.mirror_url,
            upstream=upstream,
            references=references,
            target_allowlist=config.target_allowlist,
        )
        for channel in config.channels:
            report.channels.append(orchestrator.sync(channel))

        self_update = SelfUpdateSyncOrchestrator(
            orig_dir=config.orig_path,
            mirror_dir=config.mirror_path,
            upstream=upstream,
        )
        report.self_update = self_update.sync(report.available_targets)

        if config.gc:
            _retain_unsynced_channels(config, references)
            report.collection = _collect(config, references.freeze(), today=today)
    return report


def collect_garbage(config: MirrorConfig, *, today: date | None = None) -> CollectionReport:
    """
    Garbage collect `dist/` using the manifests already in the mirror.

    Every channel with a canonical manifest in the mirror keeps its
    artifacts, whether it is configured or not.

    Raises:
        ConfigError: if no channel has a mirrored manifest, if a manifest
            URL is not under config.mirror_url, or if none of the
            referenced artifacts exists on disk.
        ParseError, SchemaError: if a mirrored manifest is invalid.
    """
    with mirror_lock(config.mirror_path):
        channels = list(config.channels)
        channels += [c for c in mirrored_channels(config.mirror_path) if c not in channels]
        references, found = collect_references(config.mirror_path, config.mirror_url, channels)
        if not found:
            raise ConfigError(
                f"no mirrored manifest found in {config.mirror_path} "
                f"for channels: {', '.join(channels)}"
            )
        snapshot = references.freeze()
        _ensure_artifacts_present(config, snapshot)
        return _collect(config, snapshot, today=today)


def _retain_unsynced_channels(config: MirrorConfig, references: ReferenceSet) -> None:
    """Reference the artifacts of mirrored channels this run did not sync."""
    unsynced = [c for c in mirrored_channels(config.mirror_path) if c not in config.channels]
    if not unsynced:
        return
    log.info("keeping the artifacts of unsynced channels: %s", ", ".join(unsynced))
    collect_references(config.mirror_path, config.mirror_url, unsynced, references=references)


def _ensure_artifacts_present(config: MirrorConfig, snapshot: ReferenceSnapshot) -> None:
    # Dated manifests exist whenever their canonical copy does, so only
    # artifact paths tell whether the references match the tree.
    artifacts = [path for path in snapshot if not path.endswith(".toml")]
    if artifacts and not any(os.path.exists(path) for path in artifacts):
        raise ConfigError(
            f"none of the {len(artifacts)} artifacts referenced by the mirrored "
            f"manifests exists under {config.mirror_path}, refusing to collect"
        )


def _collect(
    config: MirrorConfig,
    snapshot: ReferenceSnapshot,
    *,
    today: date | None,
) -> CollectionReport:
    log.info("garbage collection with %d referenced paths... start", len(snapshot))
    collector = RetentionGarbageCollector(
        dist_dir=config.mirror_path / "dist",
        references=snapshot,
        policy=RetentionPolicy.from_days(config.gc_days, today=today),
    )
    return collector.collect()
