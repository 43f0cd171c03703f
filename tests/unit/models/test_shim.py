"""Unit tests for path shim models."""

import pytest
from hostsync.models.shim import MANAGED_MARKER, Shim, ShimEntry, ShimManifest


class TestShim:
    """Tests for Shim."""

    def test_host_defaults_to_name(self) -> None:
        """Without a host command the name is used."""
        assert Shim(name="podman").host_cmd == "podman"
        assert Shim(name="docker", host="podman").host_cmd == "podman"

    @pytest.mark.parametrize("name", ["", "bin/podman"])
    def test_invalid_name(self, name: str) -> None:
        """Empty names and paths are rejected."""
        with pytest.raises(ValueError, match="Invalid shim name"):
            Shim(name=name)

    def test_render(self) -> None:
        """The script carries the marker and forwards arguments."""
        script = Shim(name="docker", host="podman").render()

        assert script.startswith("#!/bin/bash\n")
        assert MANAGED_MARKER in script
        assert "# Host command: podman" in script
        assert script.endswith('exec flatpak-spawn --host podman "$@"\n')

    def test_render_quotes_host(self) -> None:
        """Host commands are shell-quoted."""
        assert "'my tool'" in Shim(name="tool", host="my tool").render()


class TestShimManifest:
    """Tests for ShimManifest."""

    def test_entry_omits_redundant_host(self) -> None:
        """A host equal to the name is not written."""
        assert ShimEntry.from_item(Shim(name="podman", host="podman")).host is None

    def test_user_entry_replaces_system(self) -> None:
        """A user entry replaces the system entry of the same name."""
        system = ShimManifest(shims=[ShimEntry(name="docker")])
        user = ShimManifest(shims=[ShimEntry(name="docker", host="podman")])

        assert ShimManifest.merged(system, user).items() == [Shim(name="docker", host="podman")]
