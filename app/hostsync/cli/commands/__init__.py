"""CLI commands for hostsync.

This package contains all subcommand implementations.
"""

from hostsync.cli.commands import apply, baseline, capture, config, status

__all__ = ["apply", "baseline", "capture", "config", "status"]
