"""System package models.

The system-packages.json manifest declares layered packages, package
groups, packages that must never be recorded, and COPR repositories:

    {
      "packages": ["htop", "virt-manager"],
      "groups": ["development-tools"],
      "excluded": ["gnome-tour"],
      "copr_repos": [{"name": "atim/starship", "enabled": true, "gpg_check": true}]
    }

Packages, groups and repositories share one subsystem, so their
identities carry a kind prefix (``package:htop``, ``group:...``,
``repo:...``).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field

from hostsync.core.manifest import ItemManifest, sorted_unique
from hostsync.core.resource import Resource


@dataclass(frozen=True, slots=True)
class PackageItem(Resource):
    """A layered or user-installed package."""

    name: str

    @property
    def id(self) -> str:
        return f"package:{self.name}"


@dataclass(frozen=True, slots=True)
class GroupItem(Resource):
    """An installed or declared package group."""

    name: str

    @property
    def id(self) -> str:
        return f"group:{self.name}"


@dataclass(frozen=True, slots=True)
class RepoItem(Resource):
    """An enabled or declared COPR repository.

    Attributes:
        name: Repository in ``owner/project`` form.
        gpg_check: Whether packages from it are signature-checked.
    """

    name: str
    gpg_check: bool = True

    def __post_init__(self) -> None:
        """Validate repository name after initialization."""
        if "/" not in self.name:
            msg = f"COPR repository must be 'owner/project', got {self.name!r}"
            raise ValueError(msg)

    @property
    def id(self) -> str:
        return f"repo:{self.name}"


SystemItem = PackageItem | GroupItem | RepoItem


class CoprRepoEntry(BaseModel):
    """Manifest entry for one COPR repository."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[
        str, Field(pattern=r"^[^/\s]+/[^/\s]+$", description="Repository as owner/project")
    ]
    enabled: Annotated[bool, Field(description="Whether the repository is enabled")] = True
    gpg_check: Annotated[bool, Field(description="Check package signatures")] = True


class SystemManifest(ItemManifest):
    """The system-packages.json manifest."""

    packages: Annotated[
        list[str],
        Field(default_factory=list, description="Packages to layer or install"),
    ]
    groups: Annotated[
        list[str],
        Field(default_factory=list, description="Package groups to install"),
    ]
    excluded: Annotated[
        list[str],
        Field(default_factory=list, description="Packages never declared or captured"),
    ]
    copr_repos: Annotated[
        list[CoprRepoEntry],
        Field(default_factory=list, description="COPR repositories"),
    ]

    def items(self) -> list[SystemItem]:
        """Return the desired items: enabled repositories, groups, packages.

        Excluded packages are never desired, even if also listed.
        """
        excluded = set(self.excluded)
        repos: list[SystemItem] = [
            RepoItem(name=repo.name, gpg_check=repo.gpg_check)
            for repo in self.copr_repos
            if repo.enabled
        ]
        groups: list[SystemItem] = [GroupItem(name=name) for name in self.groups]
        packages: list[SystemItem] = [
            PackageItem(name=name) for name in self.packages if name not in excluded
        ]
        return [*repos, *groups, *packages]

    @classmethod
    def merged(cls, system: Self, user: Self) -> Self:
        """Union both layers.

        String lists are sorted and deduplicated. Repositories are matched
        by name; a system entry is kept as is and the user layer only adds
        repositories the system layer lacks.
        """
        repos = {repo.name: repo for repo in system.copr_repos}
        for repo in user.copr_repos:
            repos.setdefault(repo.name, repo)
        return cls(
            packages=sorted_unique([*system.packages, *user.packages]),
            groups=sorted_unique([*system.groups, *user.groups]),
            excluded=sorted_unique([*system.excluded, *user.excluded]),
            copr_repos=list(repos.values()),
        )

    def with_items(self, items: Sequence[SystemItem]) -> Self:
        """Return a copy with items added to their section.

        Excluded packages are skipped.
        """
        packages = list(self.packages)
        groups = list(self.groups)
        repos = list(self.copr_repos)
        known_repos = {repo.name for repo in repos}
        excluded = set(self.excluded)

        for item in items:
            match item:
                case PackageItem(name=name) if name not in excluded and name not in packages:
                    packages.append(name)
                case GroupItem(name=name) if name not in groups:
                    groups.append(name)
                case RepoItem(name=name, gpg_check=gpg_check) if name not in known_repos:
                    repos.append(CoprRepoEntry(name=name, gpg_check=gpg_check))
                    known_repos.add(name)

        return self.model_copy(
            update={"packages": packages, "groups": groups, "copr_repos": repos}
        )

    def normalized(self) -> Self:
        """Sort every section, keeping the first repository entry per name."""
        repos: dict[str, CoprRepoEntry] = {}
        for repo in self.copr_repos:
            repos.setdefault(repo.name, repo)
        return self.model_copy(
            update={
                "packages": sorted_unique(self.packages),
                "groups": sorted_unique(self.groups),
                "excluded": sorted_unique(self.excluded),
                "copr_repos": [repos[name] for name in sorted(repos)],
            }
        )
