"""System packages subsystem."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from hostsync.components.base import Component, expect_success
from hostsync.core.drift import DriftReport, compute_drift
from hostsync.core.plan import Operation, OperationPlan, PlanWarning, Verb
from hostsync.models.system import (
    GroupItem,
    PackageItem,
    RepoItem,
    SystemItem,
    SystemManifest,
)
from hostsync.operators.system import SystemOperator
from hostsync.scanners.system import SystemScanner

logger = logging.getLogger(__name__)

# Repositories must exist before groups and packages are installed from them
_KIND_ORDER = {RepoItem: 0, GroupItem: 1, PackageItem: 2}


class SystemSyncPlan(OperationPlan[SystemItem]):
    """Enables repositories, then installs groups, then packages."""

    title = "System packages sync"

    def __init__(
        self,
        steps: Sequence[tuple[Operation, SystemItem]],
        operator: SystemOperator,
        warnings: Sequence[PlanWarning] = (),
    ) -> None:
        super().__init__(steps, warnings)
        self._operator = operator

    def apply(self, operation: Operation, item: SystemItem) -> str | None:
        match operation.verb, item:
            case Verb.CONFIGURE, RepoItem():
                return expect_success(self._operator.enable_copr(item), f"enable {item.name}")
            case Verb.INSTALL, GroupItem():
                return expect_success(
                    self._operator.install_group(item), f"install group {item.name}"
                )
            case Verb.INSTALL, PackageItem():
                return expect_success(self._operator.install_package(item), f"install {item.name}")
            case _:
                msg = f"Unsupported system operation: {operation.verb.value} {item.id}"
                raise ValueError(msg)


class SystemComponent(Component[SystemItem, SystemManifest]):
    """Packages, groups and COPR repositories, compared by identity.

    The package backend comes from the ``[system]`` settings. rpm-ostree
    cannot install groups, so declared groups are skipped there.
    """

    id = "system"
    name = "System Packages"
    manifest_file = "system-packages.json"
    manifest_model = SystemManifest

    scanner: SystemScanner
    operator: SystemOperator

    @property
    def backend(self) -> str:
        return self.ctx.settings.system.backend

    def default_scanner(self) -> SystemScanner:
        return SystemScanner(backend=self.ctx.settings.system.backend)

    def default_operator(self) -> SystemOperator:
        return SystemOperator(backend=self.ctx.settings.system.backend)

    def _supports_groups(self) -> bool:
        return self.backend == "dnf"

    def manifest_items(self, manifest: SystemManifest) -> list[SystemItem]:
        """Desired items the backend can manage."""
        items = manifest.items()
        if self._supports_groups():
            return items
        return [item for item in items if not isinstance(item, GroupItem)]

    def diff(
        self, system_items: Sequence[SystemItem], manifest: SystemManifest
    ) -> DriftReport[SystemItem]:
        """Compare by identity, counting a declared package as present if installed.

        The scan lists only requested packages, which is what untracked
        detection needs. Declared packages it misses (baked into the image,
        installed as a dependency) are looked up in the rpm database.
        """
        desired = self.manifest_items(manifest)
        scanned = {item.id for item in system_items}
        unseen = [
            item.name
            for item in desired
            if isinstance(item, PackageItem) and item.id not in scanned
        ]
        present = self.scanner.installed_packages(unseen)
        if present:
            logger.debug("system: %d declared package(s) found by rpm", len(present))
        live = [*system_items, *(PackageItem(name=name) for name in sorted(present))]
        return compute_drift(live, desired)

    def capture(
        self, system_items: Sequence[SystemItem], capture_filter: Any = None
    ) -> SystemManifest:
        """Express live packages as a manifest.

        Groups and repositories are declared by hand; excluded packages are
        never recorded.
        """
        excluded = set(self.load_manifest().excluded)
        packages = [
            item
            for item in system_items
            if isinstance(item, PackageItem) and item.name not in excluded
        ]
        return SystemManifest.from_items(packages)

    def build_sync_plan(
        self, report: DriftReport[SystemItem], manifest: SystemManifest
    ) -> SystemSyncPlan:
        steps: list[tuple[Operation, SystemItem]] = []
        warnings: list[PlanWarning] = []

        for item in sorted(report.to_install, key=lambda i: _KIND_ORDER[type(i)]):
            match item:
                case RepoItem():
                    details = "gpg check" if item.gpg_check else "no gpg check"
                    steps.append((Operation(Verb.CONFIGURE, self.target(item), details), item))
                case GroupItem():
                    steps.append((Operation(Verb.INSTALL, self.target(item), "dnf group"), item))
                case PackageItem():
                    steps.append((Operation(Verb.INSTALL, self.target(item), self.backend), item))

        if not self._supports_groups():
            for group in manifest.items():
                if not isinstance(group, GroupItem):
                    continue
                target = self.target(group)
                steps.append((Operation(Verb.SKIP, target, "groups need dnf"), group))
                warnings.append(
                    PlanWarning(target, f"package groups are not supported by {self.backend}")
                )

        return SystemSyncPlan(steps, self.operator, warnings)
