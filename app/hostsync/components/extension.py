"""Desktop extensions subsystem."""

from __future__ import annotations

import operator
from collections.abc import Sequence

from hostsync.components.base import Component, expect_success
from hostsync.core.drift import DriftReport, compute_stateful_drift
from hostsync.core.plan import Operation, OperationPlan, PlanWarning, Verb
from hostsync.models.extension import ExtensionItem, ExtensionManifest
from hostsync.operators.extension import ExtensionOperator
from hostsync.scanners.extension import ExtensionScanner


class ExtensionSyncPlan(OperationPlan[ExtensionItem]):
    """Installs missing extensions and sets the declared enabled state."""

    title = "Extension sync"

    def __init__(
        self,
        steps: Sequence[tuple[Operation, ExtensionItem]],
        operator: ExtensionOperator,
        warnings: Sequence[PlanWarning] = (),
    ) -> None:
        super().__init__(steps, warnings)
        self._operator = operator

    def apply(self, operation: Operation, item: ExtensionItem) -> str | None:
        match operation.verb:
            case Verb.INSTALL:
                return expect_success(self._operator.install(item.uuid), f"install {item.uuid}")
            case Verb.ENABLE:
                return expect_success(self._operator.enable(item.uuid), f"enable {item.uuid}")
            case Verb.DISABLE:
                return expect_success(self._operator.disable(item.uuid), f"disable {item.uuid}")
            case _:
                msg = f"Unsupported extension operation: {operation.verb.value}"
                raise ValueError(msg)


class ExtensionComponent(Component[ExtensionItem, ExtensionManifest]):
    """GNOME Shell extensions, compared on enabled state as well as UUID."""

    id = "extension"
    name = "GNOME Extensions"
    manifest_file = "gnome-extensions.json"
    manifest_model = ExtensionManifest

    operator: ExtensionOperator

    def default_scanner(self) -> ExtensionScanner:
        return ExtensionScanner()

    def default_operator(self) -> ExtensionOperator:
        return ExtensionOperator()

    def diff(
        self, system_items: Sequence[ExtensionItem], manifest: ExtensionManifest
    ) -> DriftReport[ExtensionItem]:
        """Compare extensions by UUID, flagging enabled-state mismatches."""
        return compute_stateful_drift(system_items, self.manifest_items(manifest), operator.ne)

    def build_sync_plan(
        self, report: DriftReport[ExtensionItem], manifest: ExtensionManifest
    ) -> ExtensionSyncPlan:
        steps: list[tuple[Operation, ExtensionItem]] = []

        for item in report.to_install:
            steps.append((Operation(Verb.INSTALL, self.target(item)), item))
            steps.append((self._toggle(item), item))

        for _current, desired in report.to_update:
            steps.append((self._toggle(desired), desired))

        return ExtensionSyncPlan(steps, self.operator)

    def _toggle(self, item: ExtensionItem) -> Operation:
        verb = Verb.ENABLE if item.enabled else Verb.DISABLE
        return Operation(verb, self.target(item))
