"""Desktop extension scanner.

Lists installed extensions and their enabled state with the
gnome-extensions CLI.
"""

from collections.abc import Iterator

from hostsync.models.extension import ExtensionItem
from hostsync.scanners.base import Scanner


class ExtensionScanner(Scanner[ExtensionItem]):
    """Scanner for GNOME Shell extensions."""

    command = "gnome-extensions"

    def scan(self) -> Iterator[ExtensionItem]:
        """Scan installed extensions.

        Yields:
            ExtensionItem for each installed extension.

        Raises:
            ScanError: If gnome-extensions fails.
        """
        installed = _parse_uuids(self._query(["gnome-extensions", "list"]))
        enabled = set(_parse_uuids(self._query(["gnome-extensions", "list", "--enabled"])))

        for uuid in installed:
            yield ExtensionItem(uuid=uuid, enabled=uuid in enabled)


def _parse_uuids(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]
