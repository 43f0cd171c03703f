"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer

from hostsync import __version__
from hostsync.cli.commands import apply, baseline, capture, config, status
from hostsync.utils.logging import configure_logging

app = typer.Typer(
    name="hostsync",
    help="Declarative reconciliation for a single managed host.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"hostsync version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log planning and command details."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only log errors."),
    ] = False,
) -> None:
    """hostsync - Declarative reconciliation for a single managed host.

    System and user manifests describe the desired state of Flatpak apps,
    desktop extensions, settings, system packages, shims and Homebrew
    formulae. hostsync shows the drift, applies the manifests, and
    captures untracked state back into them.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    configure_logging(level=level)


app.add_typer(status.app, name="status")
app.add_typer(apply.app, name="apply")
app.add_typer(capture.app, name="capture")
app.add_typer(baseline.app, name="baseline")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
