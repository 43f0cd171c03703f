"""Item and manifest models for every subsystem.

Items are frozen dataclasses compared across scans and manifests;
manifests are Pydantic documents persisted as JSON.
"""

from hostsync.models.extension import ExtensionItem, ExtensionManifest
from hostsync.models.flatpak import FlatpakApp, FlatpakManifest, FlatpakRemote, FlatpakScope
from hostsync.models.gsetting import GSetting, GSettingFilter, GSettingManifest
from hostsync.models.homebrew import BrewFormula, HomebrewManifest
from hostsync.models.shim import Shim, ShimManifest
from hostsync.models.system import (
    GroupItem,
    PackageItem,
    RepoItem,
    SystemItem,
    SystemManifest,
)

__all__ = [
    "BrewFormula",
    "ExtensionItem",
    "ExtensionManifest",
    "FlatpakApp",
    "FlatpakManifest",
    "FlatpakRemote",
    "FlatpakScope",
    "GSetting",
    "GSettingFilter",
    "GSettingManifest",
    "GroupItem",
    "HomebrewManifest",
    "PackageItem",
    "RepoItem",
    "Shim",
    "ShimManifest",
    "SystemItem",
    "SystemManifest",
]
