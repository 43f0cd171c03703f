"""Homebrew formula scanner."""

import logging
from collections.abc import Iterator

from hostsync.models.homebrew import BrewFormula
from hostsync.scanners.base import Scanner

logger = logging.getLogger(__name__)


class HomebrewScanner(Scanner[BrewFormula]):
    """Scanner for formulae installed on request.

    Dependencies pulled in by other formulae are not reported.
    """

    command = "brew"

    def scan(self) -> Iterator[BrewFormula]:
        """Scan formulae the user installed explicitly.

        Raises:
            ScanError: If brew fails.
        """
        output = self._query(["brew", "list", "--formula", "-1", "--installed-on-request"])
        for line in output.splitlines():
            name = line.strip()
            if name:
                yield BrewFormula(name=name)

    def list_taps(self) -> list[str]:
        """List configured taps.

        Raises:
            ScanError: If brew fails.
        """
        output = self._query(["brew", "tap"])
        return [line.strip() for line in output.splitlines() if line.strip()]
