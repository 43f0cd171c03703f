"""System package scanner.

Reads explicitly requested packages from rpm-ostree (image-based hosts)
or dnf (package-based hosts), installed groups from dnf, and enabled COPR
repositories from the repository directory. Presence of any other
package is checked directly against the rpm database.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from hostsync.core.config import SystemBackend
from hostsync.models.system import GroupItem, PackageItem, RepoItem, SystemItem
from hostsync.scanners.base import Scanner, ScanError

logger = logging.getLogger(__name__)

DEFAULT_REPO_DIR = Path("/etc/yum.repos.d")

# dnf copr writes one file per repository, named after the hub and project
COPR_FILE_PREFIX = "_copr:copr.fedorainfracloud.org:"

# rpm -q prints "package <name> is not installed" for each missing name
RPM_NOT_INSTALLED = "is not installed"


class SystemScanner(Scanner[SystemItem]):
    """Scanner for packages, groups and COPR repositories.

    Only packages the user asked for are reported: layered packages on
    rpm-ostree, user-installed packages on dnf. Dependencies never appear.
    """

    def __init__(
        self,
        backend: SystemBackend = "rpm-ostree",
        repo_dir: Path = DEFAULT_REPO_DIR,
    ) -> None:
        self.backend = backend
        self.command = backend
        self.repo_dir = repo_dir

    def scan(self) -> Iterator[SystemItem]:
        """Scan repositories, then groups, then packages.

        Raises:
            ScanError: If the package tool fails.
        """
        yield from self.scan_repos()
        if self.backend == "dnf":
            yield from self.scan_groups()
        yield from self.scan_packages()

    def scan_packages(self) -> list[PackageItem]:
        """List explicitly requested packages.

        Raises:
            ScanError: If the package tool fails or its output is invalid.
        """
        if self.backend == "rpm-ostree":
            names = self._requested_packages()
        else:
            output = self._query(["dnf", "repoquery", "--userinstalled", "--qf", "%{name}\n"])
            names = [line.strip() for line in output.splitlines() if line.strip()]
        return [PackageItem(name=name) for name in sorted(set(names))]

    def installed_packages(self, names: Iterable[str]) -> set[str]:
        """Check which of the given packages are installed at all.

        Unlike ``scan_packages``, this also finds packages that are part
        of the base image or were pulled in as dependencies. All names are
        checked with a single ``rpm -q`` call.

        Args:
            names: Package names to look up.

        Returns:
            The subset of names that are installed.

        Raises:
            ScanError: If rpm fails for a reason other than missing packages.
        """
        wanted = sorted(set(names))
        if not wanted:
            return set()

        result = self._run(["rpm", "-q", "--qf", "%{NAME}\n", *wanted])
        lines = [line.strip() for line in result.stdout.splitlines()]
        # rpm exits non-zero whenever at least one package is missing
        if not result.success and not any(line.endswith(RPM_NOT_INSTALLED) for line in lines):
            msg = f"rpm -q failed: {result.error_message}"
            raise ScanError(msg)
        return set(wanted).intersection(lines)

    def scan_groups(self) -> list[GroupItem]:
        """List installed package groups by ID.

        Raises:
            ScanError: If dnf fails.
        """
        output = self._query(["dnf", "group", "list", "--installed"])
        groups: list[GroupItem] = []
        for line in output.splitlines():
            parts = line.split()
            # Table header and metadata lines
            if not parts or parts[0] == "ID" or parts[0].endswith(":"):
                continue
            groups.append(GroupItem(name=parts[0]))
        return groups

    def scan_repos(self) -> list[RepoItem]:
        """List enabled COPR repositories from their repository files.

        Raises:
            ScanError: If the repository directory cannot be read.
        """
        if not self.repo_dir.is_dir():
            return []

        repos: list[RepoItem] = []
        try:
            for path in sorted(self.repo_dir.glob(f"{COPR_FILE_PREFIX}*.repo")):
                repo = _parse_copr_file(path)
                if repo is not None:
                    repos.append(repo)
        except OSError as e:
            msg = f"Failed to read repositories in {self.repo_dir}: {e}"
            raise ScanError(msg) from e
        return repos

    def _requested_packages(self) -> list[str]:
        output = self._query(["rpm-ostree", "status", "--json"])
        try:
            status = json.loads(output)
        except json.JSONDecodeError as e:
            msg = f"rpm-ostree status returned invalid JSON: {e}"
            raise ScanError(msg) from e

        for deployment in status.get("deployments", []):
            if deployment.get("booted"):
                return list(deployment.get("requested-packages", []))
        logger.debug("No booted deployment in rpm-ostree status")
        return []


def _parse_copr_file(path: Path) -> RepoItem | None:
    """Read one dnf copr repository file.

    The file name encodes the project as ``<prefix>owner:project.repo``.
    Returns None for disabled or unparseable files.
    """
    stem = path.name.removeprefix(COPR_FILE_PREFIX).removesuffix(".repo")
    owner, _, project = stem.partition(":")
    if not owner or not project:
        return None

    enabled = False
    gpg_check = True
    for line in path.read_text(encoding="utf-8").splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        match key.strip():
            case "enabled":
                enabled = value.strip() == "1"
            case "gpgcheck":
                gpg_check = value.strip() == "1"
    if not enabled:
        return None
    return RepoItem(name=f"{owner}/{project}", gpg_check=gpg_check)
