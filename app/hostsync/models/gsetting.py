"""Configuration key (GSettings) models.

The gsettings.json manifest declares individual keys with GVariant
values:

    {"settings": [{"schema": "org.gnome.desktop.interface",
                   "key": "color-scheme", "value": "'prefer-dark'"}]}
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field

from hostsync.core.manifest import ItemManifest
from hostsync.core.resource import Resource, merge_by_identity

# Type keywords gsettings prefixes to values whose literal alone is ambiguous
_TYPE_KEYWORDS = frozenset(
    {
        "boolean",
        "byte",
        "int16",
        "uint16",
        "int32",
        "uint32",
        "int64",
        "uint64",
        "handle",
        "double",
        "string",
        "objectpath",
        "signature",
    }
)


def untyped_value(value: str) -> str:
    """Drop a leading GVariant type annotation from a value.

    ``gsettings`` prints ``uint32 300`` or ``@as []`` where the plain
    literal would not carry the key's type. Both forms set the same value.

    Example:
        >>> untyped_value("uint32 300")
        '300'
    """
    value = value.strip()
    head, sep, rest = value.partition(" ")
    if sep and (head in _TYPE_KEYWORDS or head.startswith("@")):
        return rest.strip()
    return value


@dataclass(frozen=True, slots=True)
class GSetting(Resource):
    """A configuration key and its value.

    Attributes:
        schema: Schema name (e.g., 'org.gnome.desktop.interface').
        key: Key name (e.g., 'color-scheme').
        value: Value as a GVariant string (e.g., "'prefer-dark'" or '0').
        comment: Optional note explaining the setting; not compared.
    """

    schema: str
    key: str
    value: str
    comment: str | None = field(default=None, compare=False)

    @property
    def id(self) -> str:
        return f"{self.schema}.{self.key}"


@dataclass(frozen=True, slots=True)
class GSettingFilter:
    """Selects the schemas a capture may record.

    Attributes:
        schemas: Schema names or dotted prefixes (e.g., 'org.gnome.desktop').
    """

    schemas: tuple[str, ...] = ()

    def require(self) -> GSettingFilter:
        """Return self, refusing a filter that would capture everything.

        Raises:
            ValueError: If no schema is given.
        """
        if not any(schema.strip() for schema in self.schemas):
            msg = "Capturing settings requires at least one schema"
            raise ValueError(msg)
        return self

    def matches(self, schema: str) -> bool:
        """Check if a schema is selected by this filter."""
        return any(schema == prefix or schema.startswith(prefix + ".") for prefix in self.schemas)


class GSettingEntry(BaseModel):
    """Manifest entry for one key."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    schema_name: Annotated[str, Field(alias="schema", min_length=1, description="Schema name")]
    key: Annotated[str, Field(min_length=1, description="Key name")]
    value: Annotated[str, Field(description="GVariant value")]
    comment: Annotated[str | None, Field(description="Why this value is set")] = None

    def to_item(self) -> GSetting:
        """Convert to a GSetting."""
        return GSetting(
            schema=self.schema_name, key=self.key, value=self.value, comment=self.comment
        )

    @classmethod
    def from_item(cls, setting: GSetting) -> GSettingEntry:
        """Create an entry from a GSetting."""
        return cls(
            schema_name=setting.schema,
            key=setting.key,
            value=setting.value,
            comment=setting.comment,
        )


class GSettingManifest(ItemManifest):
    """The gsettings.json manifest."""

    settings: Annotated[
        list[GSettingEntry],
        Field(default_factory=list, description="Keys to set"),
    ]

    def items(self) -> list[GSetting]:
        """Return the declared keys."""
        return [entry.to_item() for entry in self.settings]

    @classmethod
    def merged(cls, system: Self, user: Self) -> Self:
        """Merge layers by ``schema.key``; the user value wins."""
        merged = merge_by_identity(system.items(), user.items())
        return cls(settings=[GSettingEntry.from_item(item) for item in merged])

    def with_items(self, items: Sequence[GSetting]) -> Self:
        """Return a copy with keys added."""
        known = {item.id for item in self.items()}
        added = [GSettingEntry.from_item(item) for item in items if item.id not in known]
        return self.model_copy(update={"settings": [*self.settings, *added]})

    def normalized(self) -> Self:
        """Sort by ``schema.key``, keeping the last entry for each key."""
        by_id = {item.id: item for item in self.items()}
        return self.model_copy(
            update={"settings": [GSettingEntry.from_item(by_id[key]) for key in sorted(by_id)]}
        )
