"""System package operator.

Installs packages through the configured backend. Groups and COPR
repositories always go through dnf.
"""

import logging

from hostsync.core.config import SystemBackend
from hostsync.models.system import GroupItem, PackageItem, RepoItem
from hostsync.operators.base import Operator
from hostsync.utils.shell import CommandResult

logger = logging.getLogger(__name__)


class SystemOperator(Operator):
    """Operator for system packages."""

    timeout = 1800.0

    def __init__(self, backend: SystemBackend = "rpm-ostree") -> None:
        self.backend = backend
        self.command = backend

    def install_package(self, package: PackageItem) -> CommandResult:
        """Layer (rpm-ostree) or install (dnf) a package."""
        logger.info("Installing package %s with %s", package.name, self.backend)
        if self.backend == "rpm-ostree":
            return self.run(["rpm-ostree", "install", "--idempotent", package.name])
        return self.run(["dnf", "install", "-y", package.name])

    def install_group(self, group: GroupItem) -> CommandResult:
        """Install a package group with dnf."""
        logger.info("Installing group %s", group.name)
        return self.run(["dnf", "group", "install", "-y", group.name])

    def enable_copr(self, repo: RepoItem) -> CommandResult:
        """Enable a COPR repository with dnf."""
        logger.info("Enabling COPR repository %s", repo.name)
        return self.run(["dnf", "copr", "enable", "-y", repo.name], timeout=120.0)
