"""Desktop extension models.

The gnome-extensions.json manifest lists extensions either as plain UUID
strings (installed and enabled) or as objects carrying an explicit
enabled state:

    {"extensions": ["appindicatorsupport@rgcjonas.gmail.com",
                    {"id": "dash-to-dock@micxgx.gmail.com", "enabled": false}]}
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field

from hostsync.core.manifest import ItemManifest
from hostsync.core.resource import Resource, merge_by_identity


@dataclass(frozen=True, slots=True)
class ExtensionItem(Resource):
    """An installed or declared desktop extension.

    Attributes:
        uuid: Extension UUID (e.g., 'dash-to-dock@micxgx.gmail.com').
        enabled: Whether the extension is enabled.
    """

    uuid: str
    enabled: bool = True

    def __post_init__(self) -> None:
        """Validate extension data after initialization."""
        if not self.uuid:
            msg = "Extension UUID cannot be empty"
            raise ValueError(msg)

    @property
    def id(self) -> str:
        return self.uuid


class ExtensionEntry(BaseModel):
    """Object form of a manifest entry."""

    model_config = ConfigDict(extra="forbid")

    id: Annotated[str, Field(min_length=1, description="Extension UUID")]
    enabled: Annotated[bool, Field(description="Whether the extension is enabled")] = True


def _entry_to_item(entry: str | ExtensionEntry) -> ExtensionItem:
    if isinstance(entry, str):
        return ExtensionItem(uuid=entry)
    return ExtensionItem(uuid=entry.id, enabled=entry.enabled)


def _item_to_entry(item: ExtensionItem) -> str | ExtensionEntry:
    """Enabled extensions are written in the short string form."""
    if item.enabled:
        return item.uuid
    return ExtensionEntry(id=item.uuid, enabled=False)


class ExtensionManifest(ItemManifest):
    """The gnome-extensions.json manifest."""

    extensions: Annotated[
        list[str | ExtensionEntry],
        Field(default_factory=list, description="Extensions to install"),
    ]

    def items(self) -> list[ExtensionItem]:
        """Return the declared extensions."""
        return [_entry_to_item(entry) for entry in self.extensions]

    @classmethod
    def merged(cls, system: Self, user: Self) -> Self:
        """Union both layers; the user layer decides the enabled state."""
        merged = merge_by_identity(system.items(), user.items())
        return cls(extensions=[_item_to_entry(item) for item in merged])

    def with_items(self, items: Sequence[ExtensionItem]) -> Self:
        """Return a copy with extensions added."""
        known = {item.uuid for item in self.items()}
        added = [_item_to_entry(item) for item in items if item.uuid not in known]
        return self.model_copy(update={"extensions": [*self.extensions, *added]})

    def normalized(self) -> Self:
        """Sort by UUID, keeping the last entry for each UUID."""
        by_uuid = {item.uuid: item for item in self.items()}
        return self.model_copy(
            update={"extensions": [_item_to_entry(by_uuid[key]) for key in sorted(by_uuid)]}
        )
