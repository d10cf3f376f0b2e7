"""rustup-mirror command-line interface."""

import click

from .. import __version__


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, message="%(version)s")
def cli() -> None:
    """Mirror rustup release channels and their artifacts."""


@cli.command(hidden=True)
def help() -> None:
    """Show usage information."""
    click.echo('Use "rustup-mirror --help" for usage information.')
    click.echo('Use "rustup-mirror <command> --help" for help on a specific command.')


@cli.command("version")
def version_cmd() -> None:
    """Print the version number."""
    click.echo(__version__)


# Register subcommands (must be after cli is defined)
from . import gc as _gc  # noqa: E402, F401
from . import status as _status  # noqa: E402, F401
from . import sync as _sync  # noqa: E402, F401
