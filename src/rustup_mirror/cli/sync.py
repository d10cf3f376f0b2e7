"""Sync command."""

import click

from ..errors import MirrorError
from ..mirror import sync_mirror
from . import cli
from .logger import configure_logging, log
from .options import common_options, gc_days_option, resolve_config


@cli.command()
@common_options
@gc_days_option
@click.option(
    "-o",
    "--orig",
    "orig_dir",
    default=None,
    help="Where to store the original manifests (default: ./orig)",
)
@click.option(
    "--upstream",
    "upstream_url",
    default=None,
    help="Distribution server to mirror (default: https://static.rust-lang.org/)",
)
@click.option(
    "-t",
    "--target",
    "targets",
    multiple=True,
    help="Target triple to mirror, repeatable (default: all targets)",
)
@click.option(
    "--gc/--no-gc",
    "gc",
    default=None,
    help="Garbage collect unreferenced artifacts after syncing (default: --gc)",
)
def sync(
    config_file: str | None,
    mirror_dir: str | None,
    mirror_url: str | None,
    channels: tuple[str, ...],
    verbose: bool,
    gc_days: int | None,
    orig_dir: str | None,
    upstream_url: str | None,
    targets: tuple[str, ...],
    gc: bool | None,
) -> None:
    """Mirror the channels, the self-update files, then collect garbage.

    Every channel manifest is fetched and verified, the artifacts whose
    local copy is missing or stale are downloaded, and the manifest is
    rewritten to point at the mirror URL.

    Unreferenced stable and beta artifacts are removed right away, while
    unreferenced nightly artifacts are removed only once they are older
    than `--gc-days`.
    """
    configure_logging(verbose)
    try:
        config = resolve_config(
            config_file,
            orig_dir=orig_dir,
            mirror_dir=mirror_dir,
            mirror_url=mirror_url,
            upstream_url=upstream_url,
            gc_days=gc_days,
            gc=gc,
            channels=channels,
            targets=targets,
        )
        report = sync_mirror(config)
    except (MirrorError, OSError) as exc:
        log.error("sync failure: %s", exc)
        raise SystemExit(1) from exc

    for result in report.channels:
        click.echo(
            f"{result.channel} {result.date}: fetched {result.fetched}, "
            f"up to date {result.skipped}, disabled {result.disabled}"
        )
    if report.self_update is not None:
        click.echo(
            f"rustup {report.self_update.version}: "
            f"{len(report.self_update.fetched)} installer(s), "
            f"{len(report.self_update.failed)} unavailable"
        )
    if report.collection is not None:
        click.echo(
            f"Removed {len(report.collection.deleted_files)} file(s) and "
            f"{len(report.collection.deleted_dirs)} directory(ies)."
        )
