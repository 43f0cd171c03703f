"""CLI package for hostsync.

This package contains the Typer application and all subcommands.
"""

from hostsync.cli.main import app

__all__ = ["app"]
