"""Tests for configure.ini locking."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from version_guard.config_lock import (
    LOCKED_VERSION_LINE,
    lock_configuration,
    read_config_lines,
    rewrite_lines,
    split_lines,
)


class TestRewriteLines:
    """Tests for the pure line rewrite."""

    def test_replaces_in_place(self) -> None:
        """Test that unrelated lines keep content and order."""
        lines = ["foo=1", "last_version=0.0.0.1", "bar=2"]
        assert rewrite_lines(lines) == ["foo=1", "last_version=1.0.0.0", "bar=2"]

    def test_appends_when_missing(self) -> None:
        """Test the append case."""
        assert rewrite_lines(["foo=1"]) == ["foo=1", "last_version=1.0.0.0"]

    def test_empty_input(self) -> None:
        """Test that an empty document gets the single line."""
        assert rewrite_lines([]) == [LOCKED_VERSION_LINE]

    def test_every_matching_line_is_replaced(self) -> None:
        """Test that duplicates are rewritten individually, not merged."""
        lines = ["last_version=3.2.0", "a=b", "last_version=4.0.0"]
        assert rewrite_lines(lines) == [LOCKED_VERSION_LINE, "a=b", LOCKED_VERSION_LINE]

    def test_indented_key_matches(self) -> None:
        """Test that leading whitespace is ignored when matching."""
        assert rewrite_lines(["   last_version = 5.0"]) == [LOCKED_VERSION_LINE]

    def test_other_lines_untouched(self) -> None:
        """Test that whitespace in unrelated lines survives."""
        lines = ["  indented=1", "", "# comment"]
        assert rewrite_lines(lines) == ["  indented=1", "", "# comment", LOCKED_VERSION_LINE]

    def test_idempotent(self) -> None:
        """Test that a second rewrite changes nothing."""
        once = rewrite_lines(["foo=1", "last_version=2.9.0"])
        assert rewrite_lines(once) == once


class TestReadConfigLines:
    """Tests for best-effort reading."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file reads as empty."""
        assert read_config_lines(tmp_path / "configure.ini") == []

    def test_undecodable_file(self, tmp_path: Path) -> None:
        """Test that garbage bytes read as empty."""
        path = tmp_path / "configure.ini"
        path.write_bytes(b"\xff\xfe\xfa\x00bad")
        assert read_config_lines(path) == []

    def test_crlf_lines(self, tmp_path: Path) -> None:
        """Test that Windows line endings are split cleanly."""
        path = tmp_path / "configure.ini"
        path.write_bytes(b"foo=1\r\nlast_version=3.2.0\r\n")
        assert read_config_lines(path) == ["foo=1", "last_version=3.2.0"]

    def test_form_feed_stays_in_line(self, tmp_path: Path) -> None:
        """Test that only newline characters split lines."""
        path = tmp_path / "configure.ini"
        path.write_bytes(b"a=1\x0cb=2\nlast_version=0\n")
        assert read_config_lines(path) == ["a=1\x0cb=2", "last_version=0"]


class TestSplitLines:
    """Tests for the newline-only splitter."""

    def test_empty(self) -> None:
        """Test that empty content has no lines."""
        assert split_lines("") == []

    def test_single_trailing_newline_dropped(self) -> None:
        """Test that one trailing newline does not add an empty line."""
        assert split_lines("a\n") == ["a"]
        assert split_lines("\n") == [""]
        assert split_lines("a\n\n") == ["a", ""]

    def test_no_trailing_newline(self) -> None:
        """Test content without a final newline."""
        assert split_lines("a\nb") == ["a", "b"]

    def test_lone_carriage_return_kept(self) -> None:
        """Test that a bare \\r is part of the line, only \\r\\n is a break."""
        assert split_lines("a=1\rb=2\r\nc=3") == ["a=1\rb=2", "c=3"]

    def test_unicode_separators_kept(self) -> None:
        """Test that vertical tab and unicode separators do not split."""
        content = "a\x0bb\x1cc\x85d\u2028e"
        assert split_lines(content) == [content]


class TestLockConfiguration:
    """Tests for the file-level rewrite."""

    def test_creates_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing configure.ini is created."""
        path = tmp_path / "configure.ini"

        lock_configuration(path)

        assert path.read_text() == LOCKED_VERSION_LINE

    def test_rewrites_existing_file(self, tmp_path: Path) -> None:
        """Test joining by newline without a trailing newline."""
        path = tmp_path / "configure.ini"
        path.write_text("foo=1\nlast_version=0.0.0.1\nbar=2\n")

        lines = lock_configuration(path)

        assert lines == ["foo=1", LOCKED_VERSION_LINE, "bar=2"]
        assert path.read_text() == "foo=1\nlast_version=1.0.0.0\nbar=2"

    def test_form_feed_line_written_back_intact(self, tmp_path: Path) -> None:
        """Test that a line containing a form feed is not broken in two."""
        path = tmp_path / "configure.ini"
        path.write_bytes(b"a=1\x0cb=2\nlast_version=0\n")

        lock_configuration(path)

        assert path.read_bytes() == b"a=1\x0cb=2\nlast_version=1.0.0.0"

    def test_lone_carriage_return_preserved(self, tmp_path: Path) -> None:
        """Test that a bare \\r inside a line reaches the output unchanged."""
        path = tmp_path / "configure.ini"
        path.write_bytes(b"a=1\rb=2\nlast_version=0")

        lock_configuration(path)

        assert path.read_bytes() == b"a=1\rb=2\nlast_version=1.0.0.0"

    def test_idempotent_on_disk(self, tmp_path: Path) -> None:
        """Test that locking twice yields byte-identical output."""
        path = tmp_path / "configure.ini"
        path.write_text("foo=1\nlast_version=3.9.0\n")

        lock_configuration(path)
        first = path.read_bytes()
        lock_configuration(path)

        assert path.read_bytes() == first

    def test_readonly_file_is_rewritten(self, tmp_path: Path) -> None:
        """Test that a read-only config does not block the rewrite."""
        path = tmp_path / "configure.ini"
        path.write_text("last_version=4.0.0")
        os.chmod(path, 0o444)

        lock_configuration(path)

        assert path.read_text() == LOCKED_VERSION_LINE

    def test_missing_parent_raises(self, tmp_path: Path) -> None:
        """Test that the write failure surfaces."""
        with pytest.raises(OSError):
            lock_configuration(tmp_path / "Apps" / "configure.ini")

    def test_write_failure_raises(self, tmp_path: Path) -> None:
        """Test that write errors propagate to the caller."""
        path = tmp_path / "configure.ini"
        with (
            patch.object(Path, "open", side_effect=PermissionError("denied")),
            pytest.raises(PermissionError),
        ):
            lock_configuration(path)
