"""Homebrew operator."""

import logging

from hostsync.models.homebrew import BrewFormula
from hostsync.operators.base import Operator
from hostsync.utils.shell import CommandResult

logger = logging.getLogger(__name__)


class HomebrewOperator(Operator):
    """Operator for Homebrew taps and formulae."""

    command = "brew"
    timeout = 900.0

    def tap(self, name: str) -> CommandResult:
        """Add a tap."""
        logger.info("Adding tap %s", name)
        return self.run(["brew", "tap", name], timeout=120.0)

    def install(self, formula: BrewFormula) -> CommandResult:
        """Install a formula, qualified by its tap when it has one."""
        logger.info("Installing formula %s", formula.install_name)
        return self.run(["brew", "install", formula.install_name])
