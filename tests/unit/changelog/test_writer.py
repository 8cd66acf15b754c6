"""Tests for loggit.changelog.writer."""

import os
import stat
from pathlib import Path
from unittest import mock

import pytest

import loggit.changelog.writer as writer
from loggit.changelog.writer import (
    atomic_replace,
    atomic_write,
    branch_changelog_path,
    prepend_to_changelog,
    read_changelog,
    render_section,
    write_branch_changelog_file,
)
from loggit.shared.errors import ChangelogWriteError

HEADER = "# Version 1.0.0 - 2024-01-01"


def _leftover_temp_files(directory: Path):
    return [p.name for p in directory.iterdir() if p.name.startswith('.loggit-')]


@pytest.mark.unit
class TestRenderSection:
    """Tests for render_section()."""

    def test_header_entries_blank_line(self):
        assert render_section(HEADER, ["A", "B"]) == f"{HEADER}\n* A\n* B\n\n"

    def test_no_entries(self):
        assert render_section(HEADER, []) == f"{HEADER}\n\n"


@pytest.mark.unit
class TestPrependToChangelog:
    """Tests for prepend_to_changelog()."""

    def test_prepends_before_old_content(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        cl.write_text("old stuff\n", encoding="utf-8")

        prepend_to_changelog(cl, HEADER, ["A", "B"])

        assert cl.read_text(encoding="utf-8") == f"{HEADER}\n* A\n* B\n\nold stuff\n"

    def test_creates_missing_changelog(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        prepend_to_changelog(cl, HEADER, ["A"])
        assert cl.read_text(encoding="utf-8") == f"{HEADER}\n* A\n\n"

    @pytest.mark.parametrize("old", [
        "",
        "no trailing newline",
        "# Version 0.9.0 - 2023-12-01\n* Older\n\n",
        "windows\r\nline endings\r\n",
        "unicode: café ✓\n",
    ])
    def test_old_content_kept_byte_for_byte(self, tmp_path, old):
        cl = tmp_path / "CHANGELOG.md"
        cl.write_bytes(old.encode("utf-8"))

        prepend_to_changelog(cl, HEADER, ["A", "B"])

        expected = render_section(HEADER, ["A", "B"]) + old
        assert cl.read_bytes() == expected.encode("utf-8")

    def test_sections_accumulate_newest_first(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        prepend_to_changelog(cl, "# Version 1.0.0 - 2024-01-01", ["first"])
        prepend_to_changelog(cl, "# Version 1.1.0 - 2024-02-01", ["second"])

        assert cl.read_text(encoding="utf-8") == (
            "# Version 1.1.0 - 2024-02-01\n* second\n\n"
            "# Version 1.0.0 - 2024-01-01\n* first\n\n"
        )

    def test_no_temp_file_left_behind(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        prepend_to_changelog(cl, HEADER, ["A"])
        assert _leftover_temp_files(tmp_path) == []

    def test_missing_directory_is_fatal(self, tmp_path):
        with pytest.raises(ChangelogWriteError):
            prepend_to_changelog(tmp_path / "docs" / "CHANGELOG.md", HEADER, ["A"])

    def test_non_utf8_content_kept_byte_for_byte(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        cl.write_bytes(b"caf\xe9\n")

        prepend_to_changelog(cl, HEADER, ["A"])

        assert cl.read_bytes() == render_section(HEADER, ["A"]).encode("utf-8") + b"caf\xe9\n"

    def test_escaped_entry_written_as_original_byte(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        prepend_to_changelog(cl, HEADER, ["caf\udce9"])
        assert cl.read_bytes() == f"{HEADER}\n* caf".encode("utf-8") + b"\xe9\n\n"


@pytest.mark.unit
class TestAtomicReplace:
    """Tests for atomic_replace() and atomic_write()."""

    def test_rename_failure_leaves_original(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        cl.write_text("original\n", encoding="utf-8")

        with mock.patch.object(writer.os, "replace", side_effect=OSError("disk full")):
            with pytest.raises(ChangelogWriteError, match="disk full"):
                atomic_write(cl, "new content\n")

        assert cl.read_text(encoding="utf-8") == "original\n"
        assert _leftover_temp_files(tmp_path) == []

    def test_failure_inside_block_leaves_original(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        cl.write_text("original\n", encoding="utf-8")

        with pytest.raises(ChangelogWriteError):
            with atomic_replace(cl) as f:
                f.write("partial")
                raise OSError("write failed")

        assert cl.read_text(encoding="utf-8") == "original\n"
        assert _leftover_temp_files(tmp_path) == []

    def test_non_os_error_propagates_and_cleans_up(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"

        with pytest.raises(ValueError):
            with atomic_replace(cl) as f:
                f.write("partial")
                raise ValueError("boom")

        assert not cl.exists()
        assert _leftover_temp_files(tmp_path) == []

    def test_fsyncs_before_rename(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        order = []
        real_fsync, real_replace = os.fsync, os.replace

        def fsync(fd):
            order.append("fsync")
            real_fsync(fd)

        def replace(src, dst):
            order.append("replace")
            real_replace(src, dst)

        with mock.patch.object(writer.os, "fsync", side_effect=fsync), \
                mock.patch.object(writer.os, "replace", side_effect=replace):
            atomic_write(cl, "content\n")

        assert order == ["fsync", "replace"]

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
    def test_keeps_existing_permissions(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        cl.write_text("old\n", encoding="utf-8")
        os.chmod(cl, 0o664)

        atomic_write(cl, "new\n")

        assert stat.S_IMODE(cl.stat().st_mode) == 0o664

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
    def test_new_file_is_world_readable(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        atomic_write(cl, "new\n")
        assert stat.S_IMODE(cl.stat().st_mode) == 0o644


@pytest.mark.unit
class TestReadChangelog:
    """Tests for read_changelog()."""

    def test_missing_file_is_empty(self, tmp_path):
        assert read_changelog(tmp_path / "CHANGELOG.md") == ""

    def test_directory_is_fatal(self, tmp_path):
        with pytest.raises(ChangelogWriteError):
            read_changelog(tmp_path)

    def test_non_utf8_bytes_are_escaped(self, tmp_path):
        cl = tmp_path / "CHANGELOG.md"
        cl.write_bytes(b"caf\xe9\n")
        assert read_changelog(cl) == "caf\udce9\n"


@pytest.mark.unit
class TestBranchChangelog:
    """Tests for branch_changelog_path() and write_branch_changelog_file()."""

    def test_branch_prefix(self):
        assert branch_changelog_path("CHANGELOG.md", "feature") == Path("feature-CHANGELOG.md")

    def test_uses_file_name_only(self):
        assert branch_changelog_path("docs/HISTORY.md", "fix") == Path("fix-HISTORY.md")

    def test_slashes_in_branch_name(self):
        assert branch_changelog_path("CHANGELOG.md", "feature/login") == Path("feature-login-CHANGELOG.md")

    def test_empty_path_falls_back_to_default_name(self):
        assert branch_changelog_path("", "feature") == Path("feature-CHANGELOG.md")

    def test_writes_bullets(self, tmp_path):
        path = tmp_path / "feature-CHANGELOG.md"
        lines = write_branch_changelog_file(path, ["A", "B"])
        assert lines == ["* A\n", "* B\n"]
        assert path.read_text(encoding="utf-8") == "* A\n* B\n"

    def test_replaces_previous_branch_log(self, tmp_path):
        path = tmp_path / "feature-CHANGELOG.md"
        path.write_text("* stale\n", encoding="utf-8")
        write_branch_changelog_file(path, ["fresh"])
        assert path.read_text(encoding="utf-8") == "* fresh\n"
