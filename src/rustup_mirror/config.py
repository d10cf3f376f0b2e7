"""
Mirror configuration.

Configuration comes from an optional YAML file whose keys match the
fields of MirrorConfig, e.g.:

    orig_dir: /srv/rustup/orig
    mirror_dir: /srv/rustup/mirror
    mirror_url: https://mirrors.example.org/rustup
    gc_days: 30
    channels: [stable, nightly]
    targets: [x86_64-unknown-linux-gnu, x86_64-pc-windows-msvc]

Command line flags override the values read from the file.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final
from urllib.parse import urlsplit

import yaml
from dacite import Config, DaciteError, from_dict

from .errors import ConfigError
from .transport import DEFAULT_UPSTREAM_URL

DEFAULT_CHANNELS: Final[tuple[str, ...]] = ("stable", "beta", "nightly")


@dataclass(frozen=True, kw_only=True)
class MirrorConfig:
    """
    Settings for a mirror run.

    Attributes:
        orig_dir: where to keep the manifests as fetched from upstream
        mirror_dir: root of the mirror tree being served
        mirror_url: public URL the mirror tree is served from
        upstream_url: URL of the distribution server to mirror
        gc_days: days of nightly artifacts to keep, None to keep them all
        gc: whether to run garbage collection after syncing
        channels: channels to mirror, in order
        targets: target triples to mirror, None for all of them
    """

    orig_dir: str = "./orig"
    mirror_dir: str = "./mirror"
    mirror_url: str = "http://127.0.0.1:8000"
    upstream_url: str = DEFAULT_UPSTREAM_URL
    gc_days: int | None = None
    gc: bool = True
    channels: tuple[str, ...] = DEFAULT_CHANNELS
    targets: tuple[str, ...] | None = None

    def __post_init__(self):
        if self.gc_days is not None and self.gc_days < 0:
            raise ConfigError(f"gc_days must be >= 0, got {self.gc_days}")
        if not self.channels:
            raise ConfigError("at least one channel is required")
        for channel in self.channels:
            if not channel or "/" in channel or channel.startswith("."):
                raise ConfigError(f"invalid channel name: {channel!r}")
        for name in ("mirror_url", "upstream_url"):
            value = getattr(self, name)
            parsed = urlsplit(value)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ConfigError(f"{name} must be an http(s) URL, got: {value!r}")

    @property
    def orig_path(self) -> Path:
        return Path(self.orig_dir)

    @property
    def mirror_path(self) -> Path:
        return Path(self.mirror_dir)

    @property
    def target_allowlist(self) -> frozenset[str] | None:
        return None if self.targets is None else frozenset(self.targets)

    def with_overrides(self, **overrides: Any) -> MirrorConfig:
        """Return a copy where every non-None override replaces the current value."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes)


def load_config(path: str | Path) -> MirrorConfig:
    """
    Load a MirrorConfig from a YAML file.

    Raises:
        ConfigError: if the file cannot be read, is not valid YAML,
            or contains unknown or mistyped keys.
    """
    path = Path(path)
    try:
        content = path.read_text()
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    try:
        return from_dict(MirrorConfig, data, config=Config(strict=True, cast=[tuple]))
    except DaciteError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
