"""Read-only attribute handling and read-only placeholder files."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path

logger = logging.getLogger(__name__)

_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


def is_readonly(path: Path) -> bool:
    """Check whether no write bit is set on a path (symlinks not followed)."""
    return not path.lstat().st_mode & _WRITE_BITS


def set_readonly(path: Path) -> None:
    """Clear every write bit on a path.

    On Windows this sets the read-only file attribute.
    """
    mode = stat.S_IMODE(path.stat().st_mode)
    os.chmod(path, mode & ~_WRITE_BITS)


def _clear_one(path: Path) -> None:
    try:
        st = path.lstat()
        if stat.S_ISLNK(st.st_mode) or st.st_mode & _WRITE_BITS:
            return
        os.chmod(path, stat.S_IMODE(st.st_mode) | stat.S_IWUSR)
    except OSError as e:
        logger.debug("Could not clear read-only on %s: %s", path, e)


def clear_readonly_recursive(root: Path) -> None:
    """Make root and everything below it writable by the owner.

    Best effort: entries that cannot be inspected or changed are skipped.
    Symlinks are neither followed nor modified.
    """
    _clear_one(root)
    if root.is_symlink() or not root.is_dir():
        return

    def _on_error(error: OSError) -> None:
        logger.debug("Could not walk %s: %s", error.filename, error)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        for name in dirnames + filenames:
            _clear_one(Path(dirpath) / name)


def install_readonly_placeholder(path: Path) -> None:
    """Replace whatever sits at path with an empty read-only file.

    Args:
        path: Target path. Its parent directory must exist.

    Raises:
        OSError: If the old entry cannot be removed or the new file cannot be
            written or marked read-only.

    """
    if path.exists() or path.is_symlink():
        clear_readonly_recursive(path)
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()

    path.write_bytes(b"")
    set_readonly(path)
    logger.debug("Installed read-only placeholder: %s", path)
