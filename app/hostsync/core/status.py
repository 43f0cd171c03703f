"""Per-subsystem status derived from drift reports."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from hostsync.core.drift import DriftReport
from hostsync.core.manifest import ManifestError
from hostsync.scanners.base import ScanError

if TYPE_CHECKING:
    from hostsync.components.base import Component

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ComponentStatus:
    """Drift counts for one subsystem.

    Attributes:
        subsystem: Subsystem identifier (e.g., 'flatpak').
        name: Human-readable subsystem name.
        total: Number of items declared by the manifest.
        synced: Declared items present and in the desired state.
        to_install: Declared items missing from the host.
        to_update: Declared items present with differing state.
        untracked: Items on the host not declared by the manifest.
    """

    subsystem: str
    name: str
    total: int
    synced: int
    to_install: int
    to_update: int
    untracked: int

    @classmethod
    def from_report(cls, subsystem: str, name: str, report: DriftReport[Any]) -> ComponentStatus:
        """Build a status purely from a drift report."""
        to_install = len(report.to_install)
        to_update = len(report.to_update)
        return cls(
            subsystem=subsystem,
            name=name,
            total=report.synced_count + to_install + to_update,
            synced=report.synced_count,
            to_install=to_install,
            to_update=to_update,
            untracked=len(report.untracked),
        )

    @property
    def pending(self) -> int:
        """Items needing action (install or update)."""
        return self.to_install + self.to_update

    @property
    def is_synced(self) -> bool:
        """Check if nothing is pending."""
        return self.pending == 0

    @property
    def has_drift(self) -> bool:
        """Check if anything is pending or untracked."""
        return self.pending > 0 or self.untracked > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "subsystem": self.subsystem,
            "name": self.name,
            "total": self.total,
            "synced": self.synced,
            "pending": self.pending,
            "to_install": self.to_install,
            "to_update": self.to_update,
            "untracked": self.untracked,
        }


@dataclass(frozen=True, slots=True)
class StatusFailure:
    """A subsystem whose status could not be determined.

    Attributes:
        subsystem: Subsystem identifier.
        name: Human-readable subsystem name.
        reason: Why scanning or loading failed.
    """

    subsystem: str
    name: str
    reason: str


@dataclass(frozen=True, slots=True)
class StatusReport:
    """Status of every requested subsystem.

    Attributes:
        statuses: Subsystems that were evaluated, in canonical order.
        failures: Subsystems that failed, in canonical order.
    """

    statuses: tuple[ComponentStatus, ...]
    failures: tuple[StatusFailure, ...]

    @property
    def is_synced(self) -> bool:
        """Check if every evaluated subsystem is synced and none failed."""
        return not self.failures and all(s.is_synced for s in self.statuses)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "in_sync": self.is_synced,
            "subsystems": [s.to_dict() for s in self.statuses],
            "errors": [
                {"subsystem": f.subsystem, "name": f.name, "error": f.reason}
                for f in self.failures
            ],
        }


def collect_status(components: Iterable[Component[Any, Any]]) -> StatusReport:
    """Compute the status of each component.

    A scan or manifest failure in one subsystem is recorded and does not
    prevent the others from being reported.

    Args:
        components: Components in canonical order.

    Returns:
        StatusReport with one entry per component.
    """
    statuses: list[ComponentStatus] = []
    failures: list[StatusFailure] = []

    for component in components:
        try:
            statuses.append(component.status())
        except (ScanError, ManifestError) as e:
            logger.warning("Status of %s unavailable: %s", component.id, e)
            failures.append(StatusFailure(component.id, component.name, str(e)))

    return StatusReport(statuses=tuple(statuses), failures=tuple(failures))
