"""Flatpak applications subsystem."""

from __future__ import annotations

import logging
import operator
from collections.abc import Sequence
from typing import Any

from hostsync.components.base import Component, expect_success
from hostsync.core.drift import DriftReport, compute_stateful_drift
from hostsync.core.plan import Operation, OperationPlan, PlanWarning, Verb
from hostsync.models.flatpak import FlatpakApp, FlatpakManifest, FlatpakRemote
from hostsync.operators.flatpak import FlatpakOperator
from hostsync.scanners.flatpak import FlatpakScanner

logger = logging.getLogger(__name__)


class FlatpakSyncPlan(OperationPlan[Any]):
    """Adds missing remotes, then installs or reinstalls applications."""

    title = "Flatpak sync"

    def __init__(
        self,
        steps: Sequence[tuple[Operation, Any]],
        operator: FlatpakOperator,
        warnings: Sequence[PlanWarning] = (),
    ) -> None:
        super().__init__(steps, warnings)
        self._operator = operator

    def apply(self, operation: Operation, item: Any) -> str | None:
        match operation.verb:
            case Verb.CONFIGURE:
                return expect_success(self._operator.add_remote(item), f"add remote {item.name}")
            case Verb.INSTALL:
                return expect_success(self._operator.install(item), f"install {item.id}")
            case Verb.UPDATE:
                return expect_success(self._operator.reinstall(item), f"reinstall {item.id}")
            case _:
                msg = f"Unsupported Flatpak operation: {operation.verb.value}"
                raise ValueError(msg)


class FlatpakComponent(Component[FlatpakApp, FlatpakManifest]):
    """Flatpak applications, compared on remote and scope as well as ID."""

    id = "flatpak"
    name = "Flatpak Apps"
    manifest_file = "flatpak-apps.json"
    manifest_model = FlatpakManifest

    scanner: FlatpakScanner
    operator: FlatpakOperator

    def default_scanner(self) -> FlatpakScanner:
        return FlatpakScanner()

    def default_operator(self) -> FlatpakOperator:
        return FlatpakOperator()

    def diff(
        self, system_items: Sequence[FlatpakApp], manifest: FlatpakManifest
    ) -> DriftReport[FlatpakApp]:
        """Compare apps by ID, flagging remote or scope mismatches for update."""
        return compute_stateful_drift(system_items, self.manifest_items(manifest), operator.ne)

    def build_sync_plan(
        self, report: DriftReport[FlatpakApp], manifest: FlatpakManifest
    ) -> FlatpakSyncPlan:
        steps: list[tuple[Operation, Any]] = []

        wanted_remotes = self._missing_remotes(manifest.remote_items(), report)
        for remote in wanted_remotes:
            target = f"{self.id}:remote:{remote.name}"
            steps.append((Operation(Verb.CONFIGURE, target, remote.url), remote))

        for app in report.to_install:
            details = f"{app.remote}, {app.scope.value}"
            steps.append((Operation(Verb.INSTALL, self.target(app), details), app))

        for current, desired in report.to_update:
            details = (
                f"{current.remote}/{current.scope.value} -> "
                f"{desired.remote}/{desired.scope.value}"
            )
            steps.append((Operation(Verb.UPDATE, self.target(desired), details), desired))

        return FlatpakSyncPlan(steps, self.operator)

    def _missing_remotes(
        self, declared: list[FlatpakRemote], report: DriftReport[FlatpakApp]
    ) -> list[FlatpakRemote]:
        """Declared remotes not configured on the host.

        Only queried when there are applications to install or update.
        """
        if not declared or not (report.to_install or report.to_update):
            return []
        configured = {remote.name for remote in self.scanner.list_remotes()}
        return [remote for remote in declared if remote.name not in configured]
