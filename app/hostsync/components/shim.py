"""Path shims subsystem.

Shims are derived state: the manifest fully determines the shim
directory, so nothing is ever captured back.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from hostsync.components.base import Component, expect_success
from hostsync.core.drift import DriftReport, compute_stateful_drift
from hostsync.core.plan import Operation, OperationPlan, PlanWarning, Verb
from hostsync.models.shim import Shim, ShimManifest
from hostsync.operators.shim import ShimOperator
from hostsync.scanners.shim import ShimScanner

logger = logging.getLogger(__name__)


def _host_differs(current: Shim, desired: Shim) -> bool:
    return current.host_cmd != desired.host_cmd


class ShimSyncPlan(OperationPlan[Shim]):
    """Regenerates shim scripts and removes stale ones."""

    title = "Shims sync"

    def __init__(
        self,
        steps: Sequence[tuple[Operation, Shim]],
        operator: ShimOperator,
        warnings: Sequence[PlanWarning] = (),
    ) -> None:
        super().__init__(steps, warnings)
        self._operator = operator

    def apply(self, operation: Operation, item: Shim) -> str | None:
        match operation.verb:
            case Verb.CREATE:
                return expect_success(self._operator.create(item), f"write shim {item.name}")
            case Verb.DELETE:
                return expect_success(self._operator.delete(item), f"remove shim {item.name}")
            case _:
                msg = f"Unsupported shim operation: {operation.verb.value}"
                raise ValueError(msg)


class ShimComponent(Component[Shim, ShimManifest]):
    """Shim scripts under the toolbox shim directory."""

    id = "shim"
    name = "Host Shims"
    manifest_file = "host-shims.json"
    manifest_model = ShimManifest

    scanner: ShimScanner
    operator: ShimOperator

    def default_scanner(self) -> ShimScanner:
        return ShimScanner()

    def default_operator(self) -> ShimOperator:
        return ShimOperator()

    def diff(self, system_items: Sequence[Shim], manifest: ShimManifest) -> DriftReport[Shim]:
        """Compare shims by name, flagging a changed host command."""
        return compute_stateful_drift(system_items, self.manifest_items(manifest), _host_differs)

    def supports_capture(self) -> bool:
        return False

    def capture(self, system_items: Sequence[Shim], capture_filter: Any = None) -> None:
        return None

    def build_sync_plan(self, report: DriftReport[Shim], manifest: ShimManifest) -> ShimSyncPlan:
        """Write missing and changed shims, keep synced ones, delete stale ones."""
        pending = {shim.name for shim in report.to_install}
        pending.update(desired.name for _current, desired in report.to_update)

        steps: list[tuple[Operation, Shim]] = []
        for shim in self.manifest_items(manifest):
            target = self.target(shim)
            if shim.name in pending:
                steps.append((Operation(Verb.CREATE, target, f"host: {shim.host_cmd}"), shim))
                pending.discard(shim.name)
            else:
                steps.append((Operation(Verb.SKIP, target, "up to date"), shim))

        for stale in report.untracked:
            steps.append((Operation(Verb.DELETE, self.target(stale), "not in manifest"), stale))

        return ShimSyncPlan(steps, self.operator)
