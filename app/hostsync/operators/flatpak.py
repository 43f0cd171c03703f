"""Flatpak operator.

Installs applications and adds remotes using the flatpak CLI.
"""

import logging

from hostsync.models.flatpak import FlatpakApp, FlatpakRemote
from hostsync.operators.base import Operator
from hostsync.utils.shell import CommandResult

logger = logging.getLogger(__name__)


class FlatpakOperator(Operator):
    """Operator for Flatpak applications."""

    command = "flatpak"

    def install(self, app: FlatpakApp) -> CommandResult:
        """Install an application from its declared remote into its scope."""
        logger.info("Installing Flatpak %s from %s", app.id, app.remote)
        return self.run(
            [
                "flatpak",
                "install",
                "-y",
                "--noninteractive",
                f"--{app.scope.value}",
                app.remote,
                app.id,
            ]
        )

    def reinstall(self, app: FlatpakApp) -> CommandResult:
        """Reinstall an application so it matches the declared remote and scope."""
        logger.info("Reinstalling Flatpak %s from %s", app.id, app.remote)
        return self.run(
            [
                "flatpak",
                "install",
                "-y",
                "--noninteractive",
                "--reinstall",
                f"--{app.scope.value}",
                app.remote,
                app.id,
            ]
        )

    def add_remote(self, remote: FlatpakRemote) -> CommandResult:
        """Add a remote if it is not configured yet."""
        logger.info("Adding Flatpak remote %s", remote.name)
        return self.run(
            [
                "flatpak",
                "remote-add",
                "--if-not-exists",
                f"--{remote.scope.value}",
                remote.name,
                remote.url,
            ],
            timeout=60.0,
        )
