"""Drift engine for comparing live system state with a manifest.

This module provides the DriftReport value object and the pure functions
that classify every resource identity from both sides into exactly one
category: to install, untracked, to update, or synced.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from hostsync.core.resource import Resource

T = TypeVar("T", bound=Resource)


@dataclass(frozen=True, slots=True)
class DriftReport(Generic[T]):
    """Result of diffing system state against a manifest.

    Attributes:
        to_install: Items in the manifest but absent from the system.
        untracked: Items on the system but absent from the manifest.
        to_update: Items present on both sides with differing state,
            held as ``(current, desired)`` pairs.
        synced_count: Number of items present on both sides and equal.
    """

    to_install: tuple[T, ...] = field(default=())
    untracked: tuple[T, ...] = field(default=())
    to_update: tuple[tuple[T, T], ...] = field(default=())
    synced_count: int = 0

    @property
    def is_synced(self) -> bool:
        """Check if there are no pending changes.

        Untracked items do not affect sync status; they are candidates
        for capture, not for apply.
        """
        return not (self.to_install or self.to_update)

    @property
    def has_untracked(self) -> bool:
        """Check if there are untracked items that could be captured."""
        return bool(self.untracked)

    @property
    def pending_count(self) -> int:
        """Total number of items that need action (install or update)."""
        return len(self.to_install) + len(self.to_update)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "in_sync": self.is_synced,
            "summary": {
                "to_install": len(self.to_install),
                "to_update": len(self.to_update),
                "untracked": len(self.untracked),
                "synced": self.synced_count,
            },
            "to_install": [item.id for item in self.to_install],
            "to_update": [current.id for current, _desired in self.to_update],
            "untracked": [item.id for item in self.untracked],
        }


def compute_drift(system: Sequence[T], manifest_items: Sequence[T]) -> DriftReport[T]:
    """Compute presence drift between system items and manifest items.

    Builds an identity set for each side. Items are classified purely by
    presence, so ``to_update`` is always empty. Input order is preserved
    in every output category.

    Args:
        system: Items discovered on the live system.
        manifest_items: Items declared by the merged manifest.

    Returns:
        DriftReport for the two item sets.
    """
    system_ids = {item.id for item in system}
    manifest_ids = {item.id for item in manifest_items}

    return DriftReport(
        to_install=tuple(_unique(i for i in manifest_items if i.id not in system_ids)),
        untracked=tuple(_unique(i for i in system if i.id not in manifest_ids)),
        to_update=(),
        synced_count=len(manifest_ids & system_ids),
    )


def compute_stateful_drift(
    system: Sequence[T],
    manifest_items: Sequence[T],
    differs: Callable[[T, T], bool],
) -> DriftReport[T]:
    """Compute drift including non-identity state.

    Identities present on both sides are compared with ``differs``; those
    that differ land in ``to_update`` as ``(current, desired)`` pairs
    instead of being counted as synced.

    The live side may hold one identity more than once (a Flatpak app
    installed in both the user and system installation). Such an item is
    synced if any of its live copies matches the desired state; otherwise
    the first copy is reported as current.

    Args:
        system: Items discovered on the live system.
        manifest_items: Items declared by the merged manifest.
        differs: Predicate returning True when ``(current, desired)``
            carry different state.

    Returns:
        DriftReport with ``to_update`` populated.
    """
    system_by_id: dict[str, list[T]] = {}
    for item in system:
        system_by_id.setdefault(item.id, []).append(item)
    manifest_ids = {item.id for item in manifest_items}

    to_install: list[T] = []
    to_update: list[tuple[T, T]] = []
    synced = 0

    for desired in _unique(manifest_items):
        copies = system_by_id.get(desired.id)
        if not copies:
            to_install.append(desired)
        elif all(differs(current, desired) for current in copies):
            to_update.append((copies[0], desired))
        else:
            synced += 1

    return DriftReport(
        to_install=tuple(to_install),
        untracked=tuple(_unique(i for i in system if i.id not in manifest_ids)),
        to_update=tuple(to_update),
        synced_count=synced,
    )


def _unique(items: Any) -> list[Any]:
    """Drop repeated identities, keeping the first occurrence.

    Applied to both sides of a diff, so an identity is installed, updated
    or reported untracked at most once.
    """
    seen: set[str] = set()
    result: list[Any] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        result.append(item)
    return result
