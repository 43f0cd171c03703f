"""Unit tests for Flatpak models."""

import pytest
from hostsync.models.flatpak import (
    FlatpakApp,
    FlatpakManifest,
    FlatpakRemote,
    FlatpakScope,
)


class TestFlatpakApp:
    """Tests for FlatpakApp."""

    def test_defaults(self) -> None:
        """Apps default to flathub and the system installation."""
        app = FlatpakApp(id="org.gnome.Boxes")

        assert app.remote == "flathub"
        assert app.scope == FlatpakScope.SYSTEM

    def test_empty_id_rejected(self) -> None:
        """An empty ID raises ValueError."""
        with pytest.raises(ValueError, match="cannot be empty"):
            FlatpakApp(id="")


class TestFlatpakManifest:
    """Tests for FlatpakManifest."""

    def test_merge_user_wins(self) -> None:
        """The user layer overrides remote and scope of a system app."""
        system = FlatpakManifest.model_validate(
            {"apps": [{"id": "org.gnome.Boxes"}, {"id": "org.gnome.Maps"}]}
        )
        user = FlatpakManifest.model_validate(
            {"apps": [{"id": "org.gnome.Boxes", "remote": "fedora", "scope": "user"}]}
        )

        merged = FlatpakManifest.merged(system, user)

        assert merged.items() == [
            FlatpakApp(id="org.gnome.Boxes", remote="fedora", scope=FlatpakScope.USER),
            FlatpakApp(id="org.gnome.Maps"),
        ]

    def test_merge_unions_remotes(self) -> None:
        """Remotes from both layers are kept, first occurrence wins."""
        system = FlatpakManifest.model_validate(
            {"remotes": [{"name": "flathub", "url": "https://a"}]}
        )
        user = FlatpakManifest.model_validate(
            {
                "remotes": [
                    {"name": "flathub", "url": "https://b"},
                    {"name": "gnome-nightly", "url": "https://c"},
                ]
            }
        )

        remotes = FlatpakManifest.merged(system, user).remote_items()

        assert remotes == [
            FlatpakRemote(name="flathub", url="https://a"),
            FlatpakRemote(name="gnome-nightly", url="https://c"),
        ]

    def test_with_items_skips_known(self) -> None:
        """Declared apps are not added twice."""
        manifest = FlatpakManifest.from_items([FlatpakApp(id="a.A")])

        updated = manifest.with_items([FlatpakApp(id="a.A", remote="x"), FlatpakApp(id="b.B")])

        assert [app.id for app in updated.items()] == ["a.A", "b.B"]
        assert updated.items()[0].remote == "flathub"

    def test_normalized_sorts(self) -> None:
        """Normalization sorts apps by ID."""
        manifest = FlatpakManifest.from_items([FlatpakApp(id="z.Z"), FlatpakApp(id="a.A")])

        assert [app.id for app in manifest.normalized().items()] == ["a.A", "z.Z"]
