"""Flatpak application scanner.

Scans installed Flatpak applications and configured remotes using the
flatpak CLI.
"""

import logging
from collections.abc import Iterator

from hostsync.models.flatpak import FlatpakApp, FlatpakRemote, FlatpakScope
from hostsync.scanners.base import Scanner

logger = logging.getLogger(__name__)


class FlatpakScanner(Scanner[FlatpakApp]):
    """Scanner for Flatpak applications.

    Only applications are reported; runtimes are dependencies and are
    never declared in a manifest.
    """

    command = "flatpak"

    def scan(self) -> Iterator[FlatpakApp]:
        """Scan all installed Flatpak applications.

        Yields:
            FlatpakApp for each installed application.

        Raises:
            ScanError: If flatpak list fails.
        """
        output = self._query(
            ["flatpak", "list", "--app", "--columns=application,origin,installation"]
        )
        for line in output.splitlines():
            app = self._parse_app_line(line)
            if app is not None:
                yield app

    def list_remotes(self) -> list[FlatpakRemote]:
        """List configured remotes across installations.

        Raises:
            ScanError: If flatpak remotes fails.
        """
        output = self._query(["flatpak", "remotes", "--columns=name,url,options"])
        remotes: list[FlatpakRemote] = []
        for line in output.splitlines():
            parts = [part.strip() for part in line.split("\t")]
            if len(parts) < 2 or not parts[0]:
                continue
            options = parts[2] if len(parts) > 2 else ""
            scope = FlatpakScope.USER if "user" in options.split(",") else FlatpakScope.SYSTEM
            remotes.append(FlatpakRemote(name=parts[0], url=parts[1], scope=scope))
        return remotes

    def _parse_app_line(self, line: str) -> FlatpakApp | None:
        """Parse a single tab-separated line of flatpak list output.

        Args:
            line: Line with application, origin and installation columns.

        Returns:
            FlatpakApp if parsing succeeds, None otherwise.
        """
        parts = [part.strip() for part in line.split("\t")]
        if len(parts) < 2 or not parts[0]:
            return None

        remote = parts[1] or "flathub"
        installation = parts[2] if len(parts) > 2 else ""
        # Custom installations are reported by name; treat them as system-wide
        scope = FlatpakScope.USER if installation == "user" else FlatpakScope.SYSTEM
        return FlatpakApp(id=parts[0], remote=remote, scope=scope)
