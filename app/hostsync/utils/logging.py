"""Logging setup for the hostsync CLI."""

from __future__ import annotations

import logging
import sys


def configure_logging(*, level: int = logging.WARNING, force: bool = False) -> None:
    """Initialise the root logger once, writing to stderr.

    Command output goes to stdout through rich; log records stay on
    stderr so JSON output remains parseable. Pass ``force=True`` to
    reconfigure during tests.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=force,
    )
