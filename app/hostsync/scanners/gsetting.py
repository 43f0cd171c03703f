"""Configuration key scanner.

Reads GSettings values with the gsettings CLI. Output lines of
``gsettings list-recursively`` have the form ``<schema> <key> <value>``.
"""

import logging
from collections.abc import Iterable, Iterator

from hostsync.models.gsetting import GSetting
from hostsync.scanners.base import Scanner, ScanError

logger = logging.getLogger(__name__)


class GSettingScanner(Scanner[GSetting]):
    """Scanner for GSettings keys."""

    command = "gsettings"

    def scan(self) -> Iterator[GSetting]:
        """Scan every key of every installed schema.

        Yields:
            GSetting for each key.

        Raises:
            ScanError: If gsettings fails.
        """
        yield from _parse_settings(self._query(["gsettings", "list-recursively"]))

    def list_schemas(self) -> list[str]:
        """List installed (non-relocatable) schemas.

        Raises:
            ScanError: If gsettings fails.
        """
        output = self._query(["gsettings", "list-schemas"])
        return sorted(line.strip() for line in output.splitlines() if line.strip())

    def scan_schemas(self, schemas: Iterable[str]) -> list[GSetting]:
        """Scan the keys of the given schemas.

        Schemas that are not installed are skipped, so their declared keys
        show up as missing.

        Args:
            schemas: Exact schema names.

        Returns:
            Settings of every installed schema requested.

        Raises:
            ScanError: If gsettings is unavailable or fails.
        """
        wanted = sorted(set(schemas))
        if not wanted:
            return []
        if not self.is_available():
            msg = "gsettings is not available on this system"
            raise ScanError(msg)

        installed = set(self.list_schemas())
        settings: list[GSetting] = []
        for schema in wanted:
            if schema not in installed:
                logger.debug("Schema %s is not installed", schema)
                continue
            settings.extend(_parse_settings(self._query(["gsettings", "list-recursively", schema])))
        return settings

    def values(self) -> dict[str, str]:
        """Snapshot every key as a ``schema.key`` to value mapping.

        Raises:
            ScanError: If gsettings is unavailable or fails.
        """
        return {setting.id: setting.value for setting in self.scan_all()}


def _parse_settings(output: str) -> Iterator[GSetting]:
    for line in output.splitlines():
        parts = line.strip().split(" ", 2)
        if len(parts) < 3:
            continue
        schema, key, value = parts
        yield GSetting(schema=schema, key=key, value=value)
