"""Status command."""

import click
from rich.console import Console

from ..errors import MirrorError
from ..inventory import ArtifactState, mirror_status
from . import cli
from .logger import configure_logging, log
from .options import common_options, resolve_config

_STATE_CHARS: dict[ArtifactState, tuple[str, str]] = {
    ArtifactState.MISSING: ("D", "red"),
    ArtifactState.MISMATCH: ("M", "yellow"),
    ArtifactState.MATCHING: (" ", "dim"),
}


@cli.command()
@common_options
@click.option("-a", "--all", "show_all", is_flag=True, help="Include matching artifacts")
def status(
    config_file: str | None,
    mirror_dir: str | None,
    mirror_url: str | None,
    channels: tuple[str, ...],
    verbose: bool,
    show_all: bool,
) -> None:
    """Show the mirrored artifacts that differ from their manifest.

    Each artifact path is prefixed with a status letter:

    \b
      'D'  needs download (in a mirrored manifest, not on disk)
      'M'  modified (on disk, hash differs from the manifest)

    Use `-a, --all` to see matching artifacts as well, which are
    printed using the ' ' status letter.
    """
    configure_logging(verbose)
    console = Console()
    try:
        config = resolve_config(
            config_file,
            mirror_dir=mirror_dir,
            mirror_url=mirror_url,
            channels=channels,
        )
        for entry in mirror_status(config.mirror_path, config.mirror_url, config.channels):
            if entry.state == ArtifactState.MATCHING and not show_all:
                continue
            char, color = _STATE_CHARS[entry.state]
            rel = entry.artifact.path.relative_to(config.mirror_path).as_posix()
            console.print(
                f"[{color}]{char}[/] {entry.artifact.channel} {rel}",
                highlight=False,
                soft_wrap=True,
            )
    except (MirrorError, OSError) as exc:
        log.error("status failure: %s", exc)
        raise SystemExit(1) from exc
