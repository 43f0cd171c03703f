"""Path shim operator.

Writes and removes shim scripts. Everything happens on the filesystem;
results are still reported as CommandResult so shim plans fail per item
like every other subsystem.
"""

import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile

from hostsync.core.paths import get_shim_dir
from hostsync.models.shim import Shim
from hostsync.operators.base import Operator
from hostsync.scanners.shim import parse_shim
from hostsync.utils.shell import CommandResult

logger = logging.getLogger(__name__)

SHIM_MODE = 0o755


class ShimOperator(Operator):
    """Operator for shim scripts."""

    command = "shims"

    def __init__(self, shim_dir: Path | None = None) -> None:
        self.shim_dir = shim_dir if shim_dir is not None else get_shim_dir()

    def is_available(self) -> bool:
        return True

    def path_for(self, shim: Shim) -> Path:
        """Location of a shim script."""
        return self.shim_dir / shim.name

    def create(self, shim: Shim) -> CommandResult:
        """Write (or rewrite) a shim script atomically."""
        path = self.path_for(shim)
        logger.info("Writing shim %s -> host %s", path, shim.host_cmd)

        tmp_path: Path | None = None
        try:
            self.shim_dir.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                mode="w", encoding="utf-8", dir=self.shim_dir, delete=False, suffix=".tmp"
            ) as f:
                tmp_path = Path(f.name)
                f.write(shim.render())
            tmp_path.chmod(SHIM_MODE)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            return CommandResult(stdout="", stderr=str(e), returncode=1)
        return CommandResult(stdout=str(path), stderr="", returncode=0)

    def delete(self, shim: Shim) -> CommandResult:
        """Remove a managed shim script.

        The file is checked again right before removal: a file that is
        already gone is a no-op, and a file that is no longer managed is
        left alone and reported as a failure.
        """
        path = self.path_for(shim)
        try:
            if not path.is_file():
                logger.debug("Shim %s already removed", path)
                return CommandResult(stdout="already absent", stderr="", returncode=0)
            if parse_shim(path) is None:
                return CommandResult(
                    stdout="", stderr=f"{path} is not a managed shim", returncode=1
                )
            logger.info("Removing shim %s", path)
            path.unlink()
        except OSError as e:
            return CommandResult(stdout="", stderr=str(e), returncode=1)
        return CommandResult(stdout=str(path), stderr="", returncode=0)
