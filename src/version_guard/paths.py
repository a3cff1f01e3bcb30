"""Resolve the protected application's install location from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


class VersionGuardError(Exception):
    """Base error for version guard."""


class InstallPathError(VersionGuardError):
    """The install location cannot be derived from the environment."""


@dataclass(frozen=True)
class InstallPaths:
    """Install root (vendor folder) and the apps folder holding version directories."""

    install_root: Path
    apps_root: Path

    @property
    def config_file(self) -> Path:
        return self.apps_root / "configure.ini"

    @classmethod
    def from_install_root(cls, install_root: Path, apps_folder: str = "Apps") -> InstallPaths:
        return cls(install_root=install_root, apps_root=install_root / apps_folder)


def resolve_install_paths(
    env_var: str,
    vendor_folder: str,
    apps_folder: str,
    environ: Mapping[str, str] | None = None,
) -> InstallPaths:
    """Build install paths from a per-user application-data variable.

    Args:
        env_var: Environment variable naming the application-data directory.
        vendor_folder: Vendor folder below it (the install root).
        apps_folder: Folder below the install root holding version directories.
        environ: Environment mapping. Uses os.environ if None.

    Returns:
        Resolved install paths. Existence is not checked.

    Raises:
        InstallPathError: If the variable is unset or empty.

    """
    if environ is None:
        environ = os.environ

    base = environ.get(env_var, "")
    if not base:
        raise InstallPathError(f"Failed to get {env_var}: environment variable is not set")

    return InstallPaths.from_install_root(Path(base) / vendor_folder, apps_folder)
