"""Tests for cache directory cleaning."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from version_guard.cache import CacheCleaner, CacheCleanResult


@pytest.fixture
def logger() -> logging.Logger:
    """Create test logger."""
    return logging.getLogger("test-cache")


class TestCacheCleanResult:
    """Tests for CacheCleanResult."""

    def test_success_without_errors(self) -> None:
        """Test that an empty result counts as success."""
        assert CacheCleanResult().success

    def test_errors_mean_failure(self, tmp_path: Path) -> None:
        """Test that recorded errors flip success."""
        result = CacheCleanResult(errors={tmp_path: "denied"})
        assert not result.success


class TestCacheCleaner:
    """Tests for CacheCleaner.clean."""

    def test_removes_existing_directories(self, tmp_path: Path, logger: logging.Logger) -> None:
        """Test removal including read-only content."""
        cache = tmp_path / "User Data" / "Cache"
        cache.mkdir(parents=True)
        blob = cache / "blob.bin"
        blob.write_bytes(b"x" * 10)
        os.chmod(blob, 0o444)

        result = CacheCleaner(["User Data/Cache", "User Data/Log"], logger).clean(tmp_path)

        assert result.removed == [cache]
        assert result.missing == [tmp_path / "User Data" / "Log"]
        assert result.success
        assert not cache.exists()
        assert (tmp_path / "User Data").exists()

    def test_errors_are_collected(self, tmp_path: Path, logger: logging.Logger) -> None:
        """Test that a failing removal does not raise."""
        cache = tmp_path / "User Data" / "Cache"
        cache.mkdir(parents=True)

        with patch.object(shutil, "rmtree", side_effect=PermissionError("in use")):
            result = CacheCleaner(["User Data/Cache"], logger).clean(tmp_path)

        assert not result.success
        assert "in use" in result.errors[cache]
        assert cache.exists()

    @pytest.mark.parametrize("relative", ["..", "../outside", ".", ""])
    def test_entries_outside_root_are_skipped(self, tmp_path: Path, logger: logging.Logger, relative: str) -> None:
        """Test that the cleaner never leaves the install root or removes it."""
        root = tmp_path / "CapCut"
        root.mkdir()
        (tmp_path / "outside").mkdir()

        result = CacheCleaner([relative], logger).clean(root)

        assert result.removed == []
        assert root.exists()
        assert (tmp_path / "outside").exists()
