"""Enumerate installed version directories in natural version order."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from natsort import natsort_keygen

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024

# Digit runs compare numerically, so "3.2.0" < "10.0.0".
natural_key = natsort_keygen()


@dataclass(frozen=True)
class VersionEntry:
    """One installed version directory."""

    name: str
    path: Path
    size_bytes: int

    @property
    def size_mb(self) -> float:
        return self.size_bytes / BYTES_PER_MB

    def __str__(self) -> str:
        return f"VersionEntry({self.name}, {self.size_mb:.1f} MB)"


def directory_size(path: Path) -> int:
    """Sum the sizes of all regular files below path.

    Unreadable entries count as zero. Symlinks are not followed, so a
    symlinked directory measures zero.
    """
    if os.path.islink(path):
        return 0
    total = 0
    for dirpath, _dirnames, filenames in os.walk(path):
        for name in filenames:
            file_path = os.path.join(dirpath, name)
            try:
                if not os.path.islink(file_path):
                    total += os.path.getsize(file_path)
            except OSError:
                logger.debug("Cannot stat %s", file_path)
    return total


def sort_versions(entries: list[VersionEntry]) -> list[VersionEntry]:
    """Sort entries ascending by natural order of their names."""
    return sorted(entries, key=lambda entry: natural_key(entry.name))


class VersionScanner:
    """Lists version directories below an apps folder."""

    def scan(self, install_root: Path) -> list[VersionEntry]:
        """Scan immediate sub-directories of install_root.

        A fresh list is built on every call; nothing is cached.

        Args:
            install_root: Folder whose sub-directories are versions.

        Returns:
            Entries sorted oldest first. Empty if the folder is missing or
            cannot be read.

        """
        if not install_root.is_dir():
            return []

        entries: list[VersionEntry] = []
        try:
            for child in install_root.iterdir():
                if not child.is_dir():
                    continue
                entries.append(
                    VersionEntry(
                        name=child.name,
                        path=child.absolute(),
                        size_bytes=directory_size(child),
                    )
                )
        except OSError as e:
            logger.warning("Cannot read %s: %s", install_root, e)
            return []

        return sort_versions(entries)
