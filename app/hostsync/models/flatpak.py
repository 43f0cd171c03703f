"""Flatpak application models.

The flatpak-apps.json manifest declares applications and the remotes
they come from:

    {
      "apps": [{"id": "org.gnome.Boxes", "remote": "flathub", "scope": "system"}],
      "remotes": [{"name": "flathub", "url": "https://dl.flathub.org/repo/flathub.flatpakrepo"}]
    }
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field

from hostsync.core.manifest import ItemManifest
from hostsync.core.resource import Resource, merge_by_identity, union_by_identity


class FlatpakScope(str, Enum):
    """Flatpak installation scope."""

    SYSTEM = "system"
    USER = "user"


@dataclass(frozen=True, slots=True)
class FlatpakApp(Resource):
    """An installed or declared Flatpak application.

    Attributes:
        id: Application ID (e.g., 'org.gnome.Boxes').
        remote: Remote the application is installed from.
        scope: Installation the application lives in.
    """

    id: str
    remote: str = "flathub"
    scope: FlatpakScope = FlatpakScope.SYSTEM

    def __post_init__(self) -> None:
        """Validate application data after initialization."""
        if not self.id:
            msg = "Flatpak application ID cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class FlatpakRemote(Resource):
    """A configured or declared Flatpak remote."""

    name: str
    url: str
    scope: FlatpakScope = FlatpakScope.SYSTEM

    @property
    def id(self) -> str:
        return self.name


class FlatpakAppEntry(BaseModel):
    """Manifest entry for one application."""

    model_config = ConfigDict(extra="forbid")

    id: Annotated[str, Field(min_length=1, description="Application ID")]
    remote: Annotated[str, Field(description="Remote to install from")] = "flathub"
    scope: Annotated[FlatpakScope, Field(description="Installation scope")] = FlatpakScope.SYSTEM

    def to_item(self) -> FlatpakApp:
        """Convert to a FlatpakApp."""
        return FlatpakApp(id=self.id, remote=self.remote, scope=self.scope)

    @classmethod
    def from_item(cls, app: FlatpakApp) -> FlatpakAppEntry:
        """Create an entry from a FlatpakApp."""
        return cls(id=app.id, remote=app.remote, scope=app.scope)


class FlatpakRemoteEntry(BaseModel):
    """Manifest entry for one remote."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Remote name")]
    url: Annotated[str, Field(description="Remote URL or .flatpakrepo location")]
    scope: Annotated[FlatpakScope, Field(description="Installation scope")] = FlatpakScope.SYSTEM

    def to_item(self) -> FlatpakRemote:
        """Convert to a FlatpakRemote."""
        return FlatpakRemote(name=self.name, url=self.url, scope=self.scope)

    @classmethod
    def from_item(cls, remote: FlatpakRemote) -> FlatpakRemoteEntry:
        """Create an entry from a FlatpakRemote."""
        return cls(name=remote.name, url=remote.url, scope=remote.scope)


class FlatpakManifest(ItemManifest):
    """The flatpak-apps.json manifest."""

    apps: Annotated[
        list[FlatpakAppEntry],
        Field(default_factory=list, description="Applications to install"),
    ]
    remotes: Annotated[
        list[FlatpakRemoteEntry],
        Field(default_factory=list, description="Remotes applications come from"),
    ]

    def items(self) -> list[FlatpakApp]:
        """Return the declared applications."""
        return [entry.to_item() for entry in self.apps]

    def remote_items(self) -> list[FlatpakRemote]:
        """Return the declared remotes."""
        return [entry.to_item() for entry in self.remotes]

    @classmethod
    def merged(cls, system: Self, user: Self) -> Self:
        """Merge layers: apps by ID with the user winning, remotes unioned."""
        apps = merge_by_identity(system.items(), user.items())
        remotes = union_by_identity(system.remote_items(), user.remote_items())
        return cls(
            apps=[FlatpakAppEntry.from_item(app) for app in apps],
            remotes=[FlatpakRemoteEntry.from_item(remote) for remote in remotes],
        )

    def with_items(self, items: Sequence[FlatpakApp]) -> Self:
        """Return a copy with applications added."""
        known = {entry.id for entry in self.apps}
        added = [FlatpakAppEntry.from_item(app) for app in items if app.id not in known]
        return self.model_copy(update={"apps": [*self.apps, *added]})

    def normalized(self) -> Self:
        """Sort apps by ID and remotes by name, dropping duplicates."""
        apps = {entry.id: entry for entry in self.apps}
        remotes = {entry.name: entry for entry in self.remotes}
        return self.model_copy(
            update={
                "apps": [apps[key] for key in sorted(apps)],
                "remotes": [remotes[key] for key in sorted(remotes)],
            }
        )
