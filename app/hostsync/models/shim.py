"""Path shim models.

A shim is a small script in the toolbox shim directory that runs the
same-named (or an explicitly named) command on the host. The
host-shims.json manifest lists them:

    {"shims": [{"name": "podman"}, {"name": "docker", "host": "podman"}]}
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field

from hostsync.core.manifest import ItemManifest
from hostsync.core.resource import Resource, merge_by_identity

# Marker identifying shim files this tool owns
MANAGED_MARKER = "# Managed by: hostsync"
HOST_COMMAND_PREFIX = "# Host command: "


@dataclass(frozen=True, slots=True)
class Shim(Resource):
    """A shim forwarding a command to the host.

    Attributes:
        name: Command name inside the container.
        host: Command run on the host; defaults to ``name``.
    """

    name: str
    host: str | None = None

    def __post_init__(self) -> None:
        """Validate the shim name after initialization."""
        if not self.name or "/" in self.name:
            msg = f"Invalid shim name: {self.name!r}"
            raise ValueError(msg)

    @property
    def id(self) -> str:
        return self.name

    @property
    def host_cmd(self) -> str:
        """The command executed on the host."""
        return self.host or self.name

    def render(self) -> str:
        """Render the shim script."""
        return (
            "#!/bin/bash\n"
            "# Auto-generated shim - delegates to host command\n"
            f"{MANAGED_MARKER}\n"
            f"{HOST_COMMAND_PREFIX}{self.host_cmd}\n"
            f'exec flatpak-spawn --host {shlex.quote(self.host_cmd)} "$@"\n'
        )


class ShimEntry(BaseModel):
    """Manifest entry for one shim."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, pattern=r"^[^/]+$", description="Command name")]
    host: Annotated[str | None, Field(description="Host command, if different")] = None

    def to_item(self) -> Shim:
        """Convert to a Shim."""
        return Shim(name=self.name, host=self.host)

    @classmethod
    def from_item(cls, shim: Shim) -> ShimEntry:
        """Create an entry, omitting a host equal to the name."""
        host = shim.host if shim.host and shim.host != shim.name else None
        return cls(name=shim.name, host=host)


class ShimManifest(ItemManifest):
    """The host-shims.json manifest."""

    shims: Annotated[
        list[ShimEntry],
        Field(default_factory=list, description="Shims to generate"),
    ]

    def items(self) -> list[Shim]:
        """Return the declared shims."""
        return [entry.to_item() for entry in self.shims]

    @classmethod
    def merged(cls, system: Self, user: Self) -> Self:
        """Merge layers by name; a user entry replaces the system entry."""
        merged = merge_by_identity(system.items(), user.items())
        return cls(shims=[ShimEntry.from_item(shim) for shim in merged])

    def with_items(self, items: Sequence[Shim]) -> Self:
        """Return a copy with shims added."""
        known = {entry.name for entry in self.shims}
        added = [ShimEntry.from_item(shim) for shim in items if shim.name not in known]
        return self.model_copy(update={"shims": [*self.shims, *added]})

    def normalized(self) -> Self:
        """Sort by name, keeping the last entry for each name."""
        by_name = {entry.name: entry for entry in self.shims}
        return self.model_copy(update={"shims": [by_name[key] for key in sorted(by_name)]})
