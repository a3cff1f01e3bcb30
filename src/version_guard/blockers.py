"""Read-only placeholders that stop the auto-updater from writing."""

from __future__ import annotations

import logging
from pathlib import Path

from .readonly import install_readonly_placeholder

PRODUCT_INFO_NAME = "ProductInfo.xml"
DOWNLOAD_DIR_PARTS = ("User Data", "Download")
UPDATER_NAME = "update.exe"


def blocker_paths(install_root: Path, apps_root: Path) -> list[Path]:
    """Placeholder locations in install order."""
    return [
        apps_root / PRODUCT_INFO_NAME,
        install_root.joinpath(*DOWNLOAD_DIR_PARTS) / UPDATER_NAME,
    ]


class UpdateBlockerInstaller:
    """Installs the updater blockers."""

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger

    def install_all(self, install_root: Path, apps_root: Path) -> list[Path]:
        """Install every blocker, in order.

        ProductInfo.xml first, then the download directory, then the
        update.exe placeholder inside it.

        Args:
            install_root: Vendor folder of the application.
            apps_root: Folder holding the version directories.

        Returns:
            Placeholder paths in install order.

        Raises:
            OSError: If any step fails. Earlier placeholders stay in place.

        """
        product_info, update_exe = blocker_paths(install_root, apps_root)

        install_readonly_placeholder(product_info)
        self.logger.info("Blocked metadata file: %s", product_info)

        update_exe.parent.mkdir(parents=True, exist_ok=True)

        install_readonly_placeholder(update_exe)
        self.logger.info("Blocked updater download: %s", update_exe)

        return [product_info, update_exe]
