"""Resource identity and merge contract.

A resource is a single managed item of a subsystem (a Flatpak app, a
desktop extension, a configuration key, ...). Resources are compared
across a live scan and a manifest entry by their identity alone; the
remaining fields carry subsystem-specific state.
"""

from __future__ import annotations

from abc import ABC
from collections.abc import Callable, Iterable
from typing import TypeVar

R = TypeVar("R", bound="Resource")

# Signature of a custom conflict-resolution rule: (system, user) -> merged
MergeFunc = Callable[[R, R], R]


class Resource(ABC):
    """Base contract for every managed item.

    Two resources with equal identity are the same logical item,
    regardless of any other field. Subclasses are expected to be frozen
    dataclasses so that plain equality compares the full state, and to
    provide ``id`` either as a field or as a property.
    """

    __slots__ = ()

    # Identity, unique within the subsystem
    id: str

    def merge(self: R, other: R) -> R:
        """Resolve a conflict between two resources with the same identity.

        ``self`` is the system-layer resource and ``other`` the user-layer
        resource. The default rule is that the user layer wins outright.

        Args:
            other: Resource from the overriding (user) layer.

        Returns:
            The resource to keep in the merged view.
        """
        return other


def identity(resource: Resource) -> str:
    """Return the identity of a resource."""
    return resource.id


def merge_by_identity(
    system: Iterable[R],
    user: Iterable[R],
    merge: MergeFunc[R] | None = None,
) -> list[R]:
    """Merge two resource layers by identity.

    Ordering is deterministic: system resources keep their position,
    user-only resources are appended in their own order. Duplicate
    identities inside a single layer collapse onto the last occurrence.

    Args:
        system: Resources from the system (baseline) layer.
        user: Resources from the user layer.
        merge: Optional conflict-resolution rule. Defaults to
            ``Resource.merge`` of the system resource.

    Returns:
        Merged list with at most one resource per identity.
    """
    merged: dict[str, R] = {}

    for resource in system:
        merged[resource.id] = resource

    for resource in user:
        existing = merged.get(resource.id)
        if existing is None:
            merged[resource.id] = resource
        elif merge is not None:
            merged[resource.id] = merge(existing, resource)
        else:
            merged[resource.id] = existing.merge(resource)

    return list(merged.values())


def union_by_identity(*layers: Iterable[R]) -> list[R]:
    """Union resource layers, keeping the first occurrence of each identity.

    Used for collections such as repository or tap lists, which are
    combined rather than overridden.

    Args:
        *layers: Resource layers in precedence order.

    Returns:
        Deduplicated list preserving first-seen order.
    """
    seen: dict[str, R] = {}
    for layer in layers:
        for resource in layer:
            seen.setdefault(resource.id, resource)
    return list(seen.values())
