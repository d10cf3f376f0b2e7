"""Mirroring of the rustup self-update manifest and installers."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .classify import WILDCARD_TARGET, TargetTriple
from .errors import TransferError
from .manifest import load_self_update_manifest
from .storage import copy_atomic
from .transport import UpstreamClient

log = logging.getLogger("rustup_mirror/selfupdate")

SELF_UPDATE_MANIFEST_PATH: Final[str] = "rustup/release-stable.toml"


def installer_path(version: str, target: str) -> str:
    """Return the installer path for a target, relative to the mirror root."""
    triple = TargetTriple.parse(target)
    return f"rustup/archive/{version}/{target}/rustup-init{triple.executable_suffix}"


@dataclass(kw_only=True)
class SelfUpdateSyncResult:
    """Summary of a self-update sync."""

    version: str
    fetched: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class SelfUpdateSyncOrchestrator:
    """
    Mirror `rustup/release-stable.toml` and a `rustup-init` per target.

    Unlike channel artifacts, an installer that cannot be fetched is
    logged and skipped: not every target ships one.
    """

    def __init__(
        self,
        *,
        orig_dir: Path,
        mirror_dir: Path,
        upstream: UpstreamClient,
    ) -> None:
        self.orig_dir = orig_dir
        self.mirror_dir = mirror_dir
        self.upstream = upstream

    def sync(self, targets: Iterable[str]) -> SelfUpdateSyncResult:
        """
        Mirror the self-update manifest and the installers of the given targets.

        Raises:
            TransferError: if the manifest itself cannot be fetched.
            ParseError, SchemaError: if the manifest is invalid.
        """
        log.info("syncing self-update manifest... start")
        manifest_file = self.upstream.download(
            SELF_UPDATE_MANIFEST_PATH,
            self.orig_dir / SELF_UPDATE_MANIFEST_PATH,
        ).path
        manifest = load_self_update_manifest(manifest_file.read_bytes())
        log.info("self-update version %s", manifest.version)

        result = SelfUpdateSyncResult(version=manifest.version)
        for target in sorted(set(targets) - {WILDCARD_TARGET}):
            if "/" in target or target.startswith("."):
                log.warning("invalid target name %r, ignored", target)
                result.failed.append(target)
                continue
            path = installer_path(manifest.version, target)
            try:
                self.upstream.download(path, self.mirror_dir / path)
            except TransferError as exc:
                log.warning("failed to fetch rustup-init for target %s, ignored: %s", target, exc)
                result.failed.append(target)
                continue
            result.fetched.append(target)

        copy_atomic(manifest_file, self.mirror_dir / SELF_UPDATE_MANIFEST_PATH)
        log.info(
            "syncing self-update manifest... ok (fetched=%d failed=%d)",
            len(result.fetched),
            len(result.failed),
        )
        return result
