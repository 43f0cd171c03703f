"""Unit tests for SystemScanner."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from hostsync.models.system import GroupItem, PackageItem, RepoItem
from hostsync.scanners.base import ScanError
from hostsync.scanners.system import COPR_FILE_PREFIX, SystemScanner
from hostsync.utils.shell import CommandResult

RPM_OSTREE_STATUS = {
    "deployments": [
        {"booted": False, "requested-packages": ["old"]},
        {"booted": True, "requested-packages": ["virt-manager", "htop"]},
    ]
}

GROUP_LIST = """\
ID                   Name                Installed
development-tools    Development Tools   yes
c-development        C Development Tools yes
"""


def write_repo(repo_dir: Path, owner: str, project: str, body: str) -> Path:
    """Write a dnf copr repository file."""
    path = repo_dir / f"{COPR_FILE_PREFIX}{owner}:{project}.repo"
    path.write_text(body, encoding="utf-8")
    return path


class TestSystemScanner:
    """Tests for SystemScanner class."""

    def test_command_follows_backend(self) -> None:
        """Availability is checked against the backend tool."""
        assert SystemScanner(backend="dnf").command == "dnf"
        assert SystemScanner().command == "rpm-ostree"

    def test_rpm_ostree_packages(self, tmp_path: Path) -> None:
        """Requested packages of the booted deployment are reported."""
        with patch("hostsync.scanners.base.run_command") as mock_run:
            mock_run.return_value = CommandResult(
                stdout=json.dumps(RPM_OSTREE_STATUS), stderr="", returncode=0
            )

            items = list(SystemScanner(repo_dir=tmp_path).scan())

        assert items == [PackageItem(name="htop"), PackageItem(name="virt-manager")]

    def test_rpm_ostree_invalid_json(self) -> None:
        """Invalid status output raises ScanError."""
        with patch("hostsync.scanners.base.run_command") as mock_run:
            mock_run.return_value = CommandResult(stdout="{", stderr="", returncode=0)

            with pytest.raises(ScanError, match="invalid JSON"):
                SystemScanner().scan_packages()

    def test_dnf_scan(self, tmp_path: Path) -> None:
        """dnf hosts report repositories, groups and packages in that order."""
        write_repo(tmp_path, "atim", "starship", "[copr]\nenabled=1\ngpgcheck=0\n")

        def fake_run(args: list[str], **kwargs: object) -> CommandResult:
            if args[1] == "group":
                return CommandResult(stdout=GROUP_LIST, stderr="", returncode=0)
            return CommandResult(stdout="htop\nbtop\nhtop\n", stderr="", returncode=0)

        with patch("hostsync.scanners.base.run_command", side_effect=fake_run):
            items = list(SystemScanner(backend="dnf", repo_dir=tmp_path).scan())

        assert items == [
            RepoItem(name="atim/starship", gpg_check=False),
            GroupItem(name="development-tools"),
            GroupItem(name="c-development"),
            PackageItem(name="btop"),
            PackageItem(name="htop"),
        ]


class TestScanRepos:
    """Tests for COPR repository discovery."""

    def test_disabled_repo_skipped(self, tmp_path: Path) -> None:
        """Disabled repository files are not reported."""
        write_repo(tmp_path, "a", "off", "[copr]\nenabled=0\n")
        write_repo(tmp_path, "a", "on", "[copr]\nenabled = 1\n")
        (tmp_path / "fedora.repo").write_text("[fedora]\nenabled=1\n", encoding="utf-8")

        repos = SystemScanner(repo_dir=tmp_path).scan_repos()

        assert repos == [RepoItem(name="a/on")]

    def test_missing_repo_dir(self, tmp_path: Path) -> None:
        """A missing repository directory yields nothing."""
        assert SystemScanner(repo_dir=tmp_path / "missing").scan_repos() == []


class TestInstalledPackages:
    """Tests for the rpm presence check."""

    def test_batched_query(self) -> None:
        """All names go to one rpm call; missing ones are left out."""
        output = "htop\npackage virt-manager is not installed\n"
        with patch("hostsync.scanners.base.run_command") as mock_run:
            mock_run.return_value = CommandResult(stdout=output, stderr="", returncode=1)

            present = SystemScanner().installed_packages(["virt-manager", "htop", "htop"])

        assert present == {"htop"}
        mock_run.assert_called_once()
        args = mock_run.call_args.args[0]
        assert args == ["rpm", "-q", "--qf", "%{NAME}\n", "htop", "virt-manager"]

    def test_nothing_to_check(self) -> None:
        """An empty query runs nothing."""
        with patch("hostsync.scanners.base.run_command") as mock_run:
            assert SystemScanner().installed_packages([]) == set()

        mock_run.assert_not_called()

    def test_rpm_failure(self) -> None:
        """A non-zero exit without missing-package lines raises ScanError."""
        with patch("hostsync.scanners.base.run_command") as mock_run:
            mock_run.return_value = CommandResult(
                stdout="", stderr="error: rpmdb open failed", returncode=1
            )

            with pytest.raises(ScanError, match="rpmdb open failed"):
                SystemScanner().installed_packages(["htop"])
