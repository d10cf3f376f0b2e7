"""Garbage collection command."""

import click

from ..errors import MirrorError
from ..mirror import collect_garbage
from . import cli
from .logger import configure_logging, log
from .options import common_options, gc_days_option, resolve_config


@cli.command()
@common_options
@gc_days_option
def gc(
    config_file: str | None,
    mirror_dir: str | None,
    mirror_url: str | None,
    channels: tuple[str, ...],
    verbose: bool,
    gc_days: int | None,
) -> None:
    """Remove artifacts no mirrored manifest points to, without syncing.

    The references are rebuilt from the channel manifests already in the
    mirror, so pass the same `--url` and `--channel` values used to sync.
    """
    configure_logging(verbose)
    try:
        config = resolve_config(
            config_file,
            mirror_dir=mirror_dir,
            mirror_url=mirror_url,
            channels=channels,
            gc_days=gc_days,
        )
        report = collect_garbage(config)
    except (MirrorError, OSError) as exc:
        log.error("gc failure: %s", exc)
        raise SystemExit(1) from exc

    for path in report.deleted_files:
        log.debug("removed %s", path)
    click.echo(
        f"Removed {len(report.deleted_files)} file(s) and "
        f"{len(report.deleted_dirs)} directory(ies), kept {report.kept_files} file(s)."
    )
