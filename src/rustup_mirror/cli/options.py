"""Options shared by several rustup-mirror commands."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import click

from ..config import MirrorConfig, load_config

config_file_option = click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML configuration file (flags override its values)",
)
mirror_dir_option = click.option(
    "-m",
    "--mirror",
    "mirror_dir",
    default=None,
    help="Where to store mirror files (default: ./mirror)",
)
mirror_url_option = click.option(
    "-u",
    "--url",
    "mirror_url",
    default=None,
    help="Where the mirror is served (default: http://127.0.0.1:8000)",
)
gc_days_option = click.option(
    "-g",
    "--gc-days",
    type=click.IntRange(min=0),
    default=None,
    help="Keep this many days of nightly artifacts (default: keep them all)",
)
channels_option = click.option(
    "-c",
    "--channel",
    "channels",
    multiple=True,
    help="Channel to mirror, repeatable (default: stable, beta, nightly)",
)
verbose_option = click.option("-v", "--verbose", is_flag=True, help="Run in verbose mode")


def common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Apply the options every command reading a mirror accepts."""
    for option in (
        verbose_option,
        channels_option,
        mirror_url_option,
        mirror_dir_option,
        config_file_option,
    ):
        func = option(func)
    return func


def resolve_config(config_file: str | None, **overrides: Any) -> MirrorConfig:
    """
    Build the configuration from an optional file plus command line flags.

    Empty tuples (repeatable flags not given) count as unset.

    Raises:
        ConfigError: if the file or the resulting configuration is invalid.
    """
    base = load_config(config_file) if config_file is not None else MirrorConfig()
    cleaned = {
        key: (value or None) if isinstance(value, tuple) else value
        for key, value in overrides.items()
    }
    return base.with_overrides(**cleaned)
