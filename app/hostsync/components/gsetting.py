"""Configuration keys subsystem.

Besides manifest sync, this subsystem hosts the baseline flow: a snapshot
of every key taken once, and later diffs of live values against it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from hostsync.components.base import Component, expect_success
from hostsync.core.baseline import (
    BaselineDiff,
    BaselineSnapshot,
    IgnoreRules,
    compute_baseline_diff,
    load_snapshot,
    save_snapshot,
)
from hostsync.core.drift import DriftReport, compute_stateful_drift
from hostsync.core.plan import Operation, OperationPlan, PlanWarning, Verb
from hostsync.models.gsetting import GSetting, GSettingFilter, GSettingManifest, untyped_value
from hostsync.operators.gsetting import GSettingOperator
from hostsync.scanners.gsetting import GSettingScanner

logger = logging.getLogger(__name__)


def _value_differs(current: GSetting, desired: GSetting) -> bool:
    return untyped_value(current.value) != untyped_value(desired.value)


class GSettingSyncPlan(OperationPlan[GSetting]):
    """Sets every key whose value differs from the manifest."""

    title = "GSettings sync"

    def __init__(
        self,
        steps: Sequence[tuple[Operation, GSetting]],
        operator: GSettingOperator,
        warnings: Sequence[PlanWarning] = (),
    ) -> None:
        super().__init__(steps, warnings)
        self._operator = operator

    def apply(self, operation: Operation, item: GSetting) -> str | None:
        return expect_success(self._operator.set(item), f"set {item.id}")


class GSettingComponent(Component[GSetting, GSettingManifest]):
    """GSettings keys, compared on value.

    Only schemas referenced by the manifest are scanned, so untracked keys
    are the undeclared keys of managed schemas.
    """

    id = "gsetting"
    name = "GSettings"
    manifest_file = "gsettings.json"
    manifest_model = GSettingManifest

    scanner: GSettingScanner
    operator: GSettingOperator

    def default_scanner(self) -> GSettingScanner:
        return GSettingScanner()

    def default_operator(self) -> GSettingOperator:
        return GSettingOperator()

    def scan_system(self) -> list[GSetting]:
        """Scan the live values of every schema the manifest references.

        Raises:
            ScanError: If gsettings fails.
            ManifestError: If the manifest is invalid.
        """
        schemas = {item.schema for item in self.manifest_items(self.load_manifest())}
        return self.scanner.scan_schemas(schemas)

    def diff(
        self, system_items: Sequence[GSetting], manifest: GSettingManifest
    ) -> DriftReport[GSetting]:
        """Compare keys by ``schema.key``, flagging value changes."""
        return compute_stateful_drift(system_items, self.manifest_items(manifest), _value_differs)

    def capture(
        self, system_items: Sequence[GSetting], capture_filter: Any = None
    ) -> GSettingManifest:
        """Express the live keys of the selected schemas as a manifest.

        Raises:
            ValueError: If no schema filter is given.
        """
        selected = _require_filter(capture_filter)
        return GSettingManifest.from_items(
            [item for item in system_items if selected.matches(item.schema)]
        )

    def scan_for_capture(self, capture_filter: Any = None) -> list[GSetting]:
        """Scan only the schemas selected by the filter.

        Raises:
            ValueError: If no schema filter is given.
            ScanError: If gsettings fails.
        """
        selected = _require_filter(capture_filter)
        schemas = [schema for schema in self.scanner.list_schemas() if selected.matches(schema)]
        return self.scanner.scan_schemas(schemas)

    def build_sync_plan(
        self, report: DriftReport[GSetting], manifest: GSettingManifest
    ) -> GSettingSyncPlan:
        steps: list[tuple[Operation, GSetting]] = []

        for item in report.to_install:
            steps.append((Operation(Verb.SET, self.target(item), item.value), item))

        for current, desired in report.to_update:
            details = f"{current.value} -> {desired.value}"
            steps.append((Operation(Verb.SET, self.target(desired), details), desired))

        return GSettingSyncPlan(steps, self.operator)

    # -- baseline --------------------------------------------------------

    def capture_baseline(self, path: Path | None = None) -> tuple[Path, int]:
        """Snapshot every live key as the new baseline.

        Returns:
            Tuple of (snapshot path, number of keys recorded).

        Raises:
            ScanError: If gsettings fails.
            BaselineError: If the snapshot cannot be written.
        """
        values = self.scanner.values()
        saved = save_snapshot(BaselineSnapshot.take(values), path)
        logger.info("Captured baseline of %d keys to %s", len(values), saved)
        return saved, len(values)

    def diff_baseline(self, rules: IgnoreRules, path: Path | None = None) -> BaselineDiff:
        """Compare live keys against the stored baseline.

        Raises:
            BaselineError: If no valid baseline exists.
            ScanError: If gsettings fails.
        """
        snapshot = load_snapshot(path)
        return compute_baseline_diff(snapshot.values, self.scanner.values(), rules)


def _require_filter(capture_filter: Any) -> GSettingFilter:
    if not isinstance(capture_filter, GSettingFilter):
        msg = "Capturing settings requires a schema filter"
        raise ValueError(msg)
    return capture_filter.require()
