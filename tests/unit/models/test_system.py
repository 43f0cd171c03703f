"""Unit tests for system package models."""

import pytest
from hostsync.models.system import (
    CoprRepoEntry,
    GroupItem,
    PackageItem,
    RepoItem,
    SystemManifest,
)
from pydantic import ValidationError


class TestSystemItems:
    """Tests for item identities."""

    def test_kind_prefixed_ids(self) -> None:
        """Identities carry a kind prefix."""
        assert PackageItem(name="htop").id == "package:htop"
        assert GroupItem(name="development-tools").id == "group:development-tools"
        assert RepoItem(name="atim/starship").id == "repo:atim/starship"

    def test_repo_requires_owner(self) -> None:
        """A repository name without an owner is rejected."""
        with pytest.raises(ValueError, match="owner/project"):
            RepoItem(name="starship")

    def test_copr_entry_pattern(self) -> None:
        """Manifest repositories must be owner/project."""
        with pytest.raises(ValidationError):
            CoprRepoEntry(name="a/b/c")


class TestSystemManifest:
    """Tests for SystemManifest."""

    def test_items_order_and_exclusion(self) -> None:
        """Repos come first, then groups, then non-excluded packages."""
        manifest = SystemManifest.model_validate(
            {
                "packages": ["htop", "gnome-tour"],
                "groups": ["development-tools"],
                "excluded": ["gnome-tour"],
                "copr_repos": [
                    {"name": "atim/starship", "gpg_check": False},
                    {"name": "off/repo", "enabled": False},
                ],
            }
        )

        assert manifest.items() == [
            RepoItem(name="atim/starship", gpg_check=False),
            GroupItem(name="development-tools"),
            PackageItem(name="htop"),
        ]

    def test_merge_unions_lists(self) -> None:
        """Lists from both layers are sorted and deduplicated."""
        system = SystemManifest(packages=["vim", "htop"], excluded=["gnome-tour"])
        user = SystemManifest(packages=["htop", "btop"], excluded=["yelp"])

        merged = SystemManifest.merged(system, user)

        assert merged.packages == ["btop", "htop", "vim"]
        assert merged.excluded == ["gnome-tour", "yelp"]

    def test_user_exclusion_hides_system_package(self) -> None:
        """A user exclusion removes a system-declared package."""
        system = SystemManifest(packages=["gnome-tour", "htop"])
        user = SystemManifest(excluded=["gnome-tour"])

        items = SystemManifest.merged(system, user).items()

        assert items == [PackageItem(name="htop")]

    def test_merge_keeps_system_repo(self) -> None:
        """A system repository entry is not overridden by the user layer."""
        system = SystemManifest(copr_repos=[CoprRepoEntry(name="a/b", gpg_check=True)])
        user = SystemManifest(
            copr_repos=[CoprRepoEntry(name="a/b", gpg_check=False), CoprRepoEntry(name="c/d")]
        )

        repos = SystemManifest.merged(system, user).copr_repos

        assert [(r.name, r.gpg_check) for r in repos] == [("a/b", True), ("c/d", True)]

    def test_with_items_skips_excluded(self) -> None:
        """Excluded packages are never added."""
        manifest = SystemManifest(packages=["htop"], excluded=["gnome-tour"])

        updated = manifest.with_items(
            [PackageItem(name="gnome-tour"), PackageItem(name="btop"), RepoItem(name="a/b")]
        )

        assert updated.packages == ["htop", "btop"]
        assert [r.name for r in updated.copr_repos] == ["a/b"]

    def test_normalized(self) -> None:
        """Every section is sorted."""
        manifest = SystemManifest(packages=["b", "a", "a"], groups=["z", "y"])

        normalized = manifest.normalized()

        assert normalized.packages == ["a", "b"]
        assert normalized.groups == ["y", "z"]
