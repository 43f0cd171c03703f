"""Component abstraction shared by every subsystem.

A component ties together one subsystem's scanner, manifest layers and
operator, and exposes them through a uniform scan / load / diff / capture
contract so the drift engine and the plan core never need to know which
subsystem they are working on.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, ClassVar, Generic, TypeVar

from hostsync.core.drift import DriftReport, compute_drift
from hostsync.core.manifest import (
    ItemManifest,
    ManifestError,
    ManifestLayers,
    load_layer,
    load_layers,
    save_document,
)
from hostsync.core.plan import (
    ExecuteContext,
    ExecutionFailure,
    ExecutionReport,
    FatalExecutionError,
    Operation,
    OperationResult,
    Plan,
    PlanConsumedError,
    PlanContext,
    PlanSummary,
    Verb,
)
from hostsync.core.resource import Resource
from hostsync.core.status import ComponentStatus
from hostsync.scanners.base import Scanner
from hostsync.utils.shell import CommandResult

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=Resource)
ManifestT = TypeVar("ManifestT", bound=ItemManifest)


def expect_success(result: CommandResult, action: str) -> str:
    """Convert a command result into a success message or a failure.

    Args:
        result: Result returned by an operator.
        action: Short description of what was attempted.

    Returns:
        Success message.

    Raises:
        ExecutionFailure: If the command failed.
    """
    if not result.success:
        raise ExecutionFailure(f"{action} failed: {result.error_message}")
    return f"{action} completed"


class CapturePlan(Plan, Generic[ItemT]):
    """Plan that records untracked items into the user manifest layer.

    The user layer is read, extended and written back once, after which
    every captured item is reported. A failed write is fatal: nothing was
    captured and no item is reported as succeeded.
    """

    def __init__(
        self,
        title: str,
        subsystem: str,
        items: Sequence[ItemT],
        record: Callable[[Sequence[ItemT]], Path],
    ) -> None:
        """Initialize the capture plan.

        Args:
            title: Display title (e.g., 'Flatpak Apps capture').
            subsystem: Subsystem identifier used to qualify targets.
            items: Items to add to the user layer.
            record: Writes the items to the user layer and returns its path.
        """
        self.title = title
        self.subsystem = subsystem
        self.items: tuple[ItemT, ...] = tuple(items)
        self._record = record
        self._consumed = False

    @property
    def operations(self) -> tuple[Operation, ...]:
        """One capture operation per item."""
        return tuple(Operation(Verb.CAPTURE, f"{self.subsystem}:{item.id}") for item in self.items)

    def describe(self) -> PlanSummary:
        """Describe the items that would be captured."""
        summary = PlanSummary(summary=f"{self.title}: {len(self.items)} to capture")
        summary.add_operations(self.operations)
        return summary

    def is_empty(self) -> bool:
        """Check if there is nothing to capture."""
        return not self.items

    def execute(self, ctx: ExecuteContext) -> ExecutionReport:
        """Write all items to the user layer in a single update."""
        if self._consumed:
            msg = f"{self.title} has already been executed; plan again"
            raise PlanConsumedError(msg)
        self._consumed = True

        report = ExecutionReport()
        operations = self.operations
        if not operations:
            return report
        if ctx.total_ops == 0:
            ctx.total_ops = len(operations)

        try:
            path = self._record(self.items)
        except FatalExecutionError as e:
            logger.error("%s failed: %s", self.title, e)
            result = OperationResult.failure(operations[0], str(e), fatal=True)
            report.record(result)
            ctx.notify_progress(result)
            report.aborted.extend(operations[1:])
            return report

        for operation in operations:
            result = OperationResult.succeeded(operation, f"recorded in {path}")
            report.record(result)
            ctx.notify_progress(result)
        return report


class Component(ABC, Generic[ItemT, ManifestT]):
    """One subsystem plugged into the drift/plan pipeline.

    Subclasses declare their identifier, display name, manifest file and
    document model, provide default adapters, and build their sync plan.
    Everything else has a default: identity-set diffing, full-scan capture
    and status from the drift report.
    """

    #: Stable identifier (e.g., 'flatpak')
    id: ClassVar[str]
    #: Human-readable name (e.g., 'Flatpak Apps')
    name: ClassVar[str]
    #: File name of the manifest in both layers
    manifest_file: ClassVar[str]
    #: Document model of the manifest
    manifest_model: ClassVar[type[ItemManifest]]

    def __init__(
        self,
        ctx: PlanContext,
        scanner: Scanner[ItemT] | None = None,
        operator: Any = None,
    ) -> None:
        """Initialize the component.

        Args:
            ctx: Planning context providing manifest locations and settings.
            scanner: Scanner override. Defaults to the subsystem's scanner.
            operator: Operator override. Defaults to the subsystem's operator.
        """
        self.ctx = ctx
        self.scanner: Scanner[ItemT] = scanner if scanner is not None else self.default_scanner()
        self.operator = operator if operator is not None else self.default_operator()

    @abstractmethod
    def default_scanner(self) -> Scanner[ItemT]:
        """Create the scanner used when none is injected."""

    @abstractmethod
    def default_operator(self) -> Any:
        """Create the operator used when none is injected."""

    # -- paths and manifests ---------------------------------------------

    @property
    def system_manifest_path(self) -> Path:
        """Location of the system layer."""
        return self.ctx.system_manifest_path(self.manifest_file)

    @property
    def user_manifest_path(self) -> Path:
        """Location of the user layer."""
        return self.ctx.user_manifest_path(self.manifest_file)

    def target(self, item: ItemT) -> str:
        """Qualified operation target for an item."""
        return f"{self.id}:{item.id}"

    def scan_system(self) -> list[ItemT]:
        """Scan the live state of this subsystem.

        Raises:
            ScanError: If the scan fails.
        """
        items = self.scanner.scan_all()
        logger.debug("%s: scanned %d item(s)", self.id, len(items))
        return items

    def load_layers(self) -> ManifestLayers[Any]:
        """Load the system and user layers.

        Raises:
            ManifestError: If a layer exists but is invalid.
        """
        return load_layers(self.system_manifest_path, self.user_manifest_path, self.manifest_model)

    def load_manifest(self) -> ManifestT:
        """Load both layers and return their merged view.

        Raises:
            ManifestError: If a layer exists but is invalid.
        """
        layers = self.load_layers()
        merged: ManifestT = self.manifest_model.merged(layers.system, layers.user)  # type: ignore[assignment]
        return merged

    def manifest_items(self, manifest: ManifestT) -> list[ItemT]:
        """Return the items a manifest declares as desired."""
        return manifest.items()

    # -- drift -----------------------------------------------------------

    def diff(self, system_items: Sequence[ItemT], manifest: ManifestT) -> DriftReport[ItemT]:
        """Compare live items against the manifest by identity.

        Subsystems with state beyond identity override this to populate
        ``to_update``.
        """
        return compute_drift(system_items, self.manifest_items(manifest))

    def status(self) -> ComponentStatus:
        """Scan, load and diff, reducing the drift report to counts.

        Raises:
            ScanError: If the scan fails.
            ManifestError: If the manifest is invalid.
        """
        report = self.diff(self.scan_system(), self.load_manifest())
        return ComponentStatus.from_report(self.id, self.name, report)

    # -- capture ---------------------------------------------------------

    def supports_capture(self) -> bool:
        """Check if live state can be recorded back into the manifest."""
        return True

    def capture(
        self, system_items: Sequence[ItemT], capture_filter: Any = None
    ) -> ManifestT | None:
        """Express live items as a manifest document.

        Args:
            system_items: Items from a scan.
            capture_filter: Subsystem-specific filter. Ignored by default.

        Returns:
            Document declaring the captured items, or None if this
            subsystem does not support capture.
        """
        if not self.supports_capture():
            return None
        captured: ManifestT = self.manifest_model.from_items(list(system_items))  # type: ignore[assignment]
        return captured

    def scan_for_capture(self, capture_filter: Any = None) -> list[ItemT]:
        """Scan the items capture should consider. Defaults to a full scan."""
        return self.scan_system()

    def record_captured(self, items: Sequence[ItemT]) -> Path:
        """Add items to the user layer and write it back atomically.

        Raises:
            FatalExecutionError: If the user layer cannot be read or written.
        """
        path = self.user_manifest_path
        try:
            user = load_layer(path, self.manifest_model)
            return save_document(user.with_items(items), path)
        except ManifestError as e:
            raise FatalExecutionError(str(e)) from e

    def plan_capture(self, capture_filter: Any = None) -> Plan | None:
        """Plan recording untracked live items into the user layer.

        Args:
            capture_filter: Subsystem-specific filter.

        Returns:
            CapturePlan, or None if this subsystem does not support capture.

        Raises:
            ScanError: If the scan fails.
            ManifestError: If the manifest is invalid.
        """
        if not self.supports_capture():
            return None

        system_items = self.scan_for_capture(capture_filter)
        captured = self.capture(system_items, capture_filter)
        if captured is None:
            return None

        report = self.diff(system_items, self.load_manifest())
        untracked = {item.id for item in report.untracked}
        items = [item for item in self.manifest_items(captured) if item.id in untracked]
        return CapturePlan(f"{self.name} capture", self.id, items, self.record_captured)

    # -- sync ------------------------------------------------------------

    @abstractmethod
    def build_sync_plan(self, report: DriftReport[ItemT], manifest: ManifestT) -> Plan:
        """Turn a drift report into this subsystem's sync plan."""

    def plan_sync(self) -> Plan:
        """Scan, load, diff and build the sync plan.

        Raises:
            ScanError: If the scan fails.
            ManifestError: If the manifest is invalid.
        """
        manifest = self.load_manifest()
        report = self.diff(self.scan_system(), manifest)
        logger.debug(
            "%s: %d to install, %d to update, %d untracked, %d synced",
            self.id,
            len(report.to_install),
            len(report.to_update),
            len(report.untracked),
            report.synced_count,
        )
        return self.build_sync_plan(report, manifest)
