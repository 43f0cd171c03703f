"""Path shim scanner.

Lists the shim scripts this tool generated in the shim directory. Files
without the managed marker belong to someone else and are ignored.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

from hostsync.core.paths import get_shim_dir
from hostsync.models.shim import HOST_COMMAND_PREFIX, MANAGED_MARKER, Shim
from hostsync.scanners.base import Scanner, ScanError

logger = logging.getLogger(__name__)


class ShimScanner(Scanner[Shim]):
    """Scanner for generated shim scripts."""

    command = "shims"

    def __init__(self, shim_dir: Path | None = None) -> None:
        self.shim_dir = shim_dir if shim_dir is not None else get_shim_dir()

    def is_available(self) -> bool:
        """Shims are plain files; scanning needs no external tool."""
        return True

    def scan(self) -> Iterator[Shim]:
        """Scan managed shim scripts.

        Yields:
            Shim for each managed script, with the host command it runs.

        Raises:
            ScanError: If the shim directory cannot be read.
        """
        if not self.shim_dir.is_dir():
            logger.debug("Shim directory %s does not exist", self.shim_dir)
            return

        try:
            paths = sorted(path for path in self.shim_dir.iterdir() if path.is_file())
            for path in paths:
                shim = parse_shim(path)
                if shim is not None:
                    yield shim
        except OSError as e:
            msg = f"Failed to read shims in {self.shim_dir}: {e}"
            raise ScanError(msg) from e


def parse_shim(path: Path) -> Shim | None:
    """Read a shim script, returning None if it is not managed.

    Raises:
        OSError: If the file cannot be read.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return None
    if MANAGED_MARKER not in content:
        return None

    host = None
    for line in content.splitlines():
        if line.startswith(HOST_COMMAND_PREFIX):
            host = line.removeprefix(HOST_COMMAND_PREFIX).strip() or None
            break
    if host == path.name:
        host = None
    return Shim(name=path.name, host=host)
