"""Desktop extension operator.

Installs extensions through the GNOME Shell D-Bus interface and toggles
them with the gnome-extensions CLI.
"""

import logging

from hostsync.operators.base import Operator
from hostsync.utils.shell import CommandResult

logger = logging.getLogger(__name__)

_SHELL_DEST = "org.gnome.Shell.Extensions"
_SHELL_PATH = "/org/gnome/Shell/Extensions"


class ExtensionOperator(Operator):
    """Operator for GNOME Shell extensions."""

    command = "gnome-extensions"

    def install(self, uuid: str) -> CommandResult:
        """Install an extension from extensions.gnome.org.

        The shell asks the user to confirm the download.
        """
        logger.info("Installing extension %s", uuid)
        return self.run(
            [
                "gdbus",
                "call",
                "--session",
                "--dest",
                _SHELL_DEST,
                "--object-path",
                _SHELL_PATH,
                "--method",
                f"{_SHELL_DEST}.InstallRemoteExtension",
                uuid,
            ]
        )

    def enable(self, uuid: str) -> CommandResult:
        """Enable an installed extension."""
        logger.info("Enabling extension %s", uuid)
        return self.run(["gnome-extensions", "enable", uuid], timeout=30.0)

    def disable(self, uuid: str) -> CommandResult:
        """Disable an installed extension."""
        logger.info("Disabling extension %s", uuid)
        return self.run(["gnome-extensions", "disable", uuid], timeout=30.0)
