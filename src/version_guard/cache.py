"""Best-effort removal of the application's regenerable cache directories."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .readonly import clear_readonly_recursive


@dataclass
class CacheCleanResult:
    """Outcome of a cache cleaning pass."""

    removed: list[Path] = field(default_factory=list)
    missing: list[Path] = field(default_factory=list)
    errors: dict[Path, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.errors


class CacheCleaner:
    """Deletes configured cache directories below the install root."""

    def __init__(self, cache_directories: list[str], logger: logging.Logger) -> None:
        """Initialize the cleaner.

        Args:
            cache_directories: Directories relative to the install root.
            logger: Logger instance.

        """
        self.cache_directories = list(cache_directories)
        self.logger = logger

    def _resolve(self, install_root: Path, relative: str) -> Path | None:
        target = (install_root / relative).resolve()
        root = install_root.resolve()
        if target == root or not target.is_relative_to(root):
            self.logger.warning("Skipping cache entry outside install root: %s", relative)
            return None
        return install_root / relative

    def clean(self, install_root: Path) -> CacheCleanResult:
        """Remove every configured cache directory that exists.

        Never raises; failures are collected in the result.
        """
        result = CacheCleanResult()

        for relative in self.cache_directories:
            target = self._resolve(install_root, relative)
            if target is None:
                continue

            if not target.exists():
                result.missing.append(target)
                continue

            try:
                clear_readonly_recursive(target)
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                else:
                    target.unlink()
            except OSError as e:
                self.logger.warning("Could not remove cache %s: %s", target, e)
                result.errors[target] = str(e)
                continue

            self.logger.info("Removed cache: %s", target)
            result.removed.append(target)

        return result
