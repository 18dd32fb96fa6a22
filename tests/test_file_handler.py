"""Tests for file_handler module: encoding-aware reads, comparison, symlinks, backups."""

import os

from notes_worktree.file_handler import (
    backup_path,
    create_relative_symlink,
    files_identical,
    is_dangling,
    link_points_to,
    move_file,
    read_file_with_encoding,
    relative_link_target,
)

# =============================================================================
# read_file_with_encoding
# =============================================================================


class TestReadFileWithEncoding:
    """Tests for read_file_with_encoding(path)."""

    def test_utf8_file(self, tmp_path):
        f = tmp_path / "utf8.md"
        f.write_text("# Notes\n\nRésumé of the café meeting, naïve approach.\n", encoding="utf-8")
        content, encoding = read_file_with_encoding(f)
        assert "Résumé of the café" in content
        assert encoding in ("utf_8", "utf-8")

    def test_ascii_reported_as_utf8(self, tmp_path):
        f = tmp_path / "ascii.md"
        f.write_bytes(b"plain text\n")
        content, encoding = read_file_with_encoding(f)
        assert content == "plain text\n"
        assert encoding in ("utf_8", "utf-8")

    def test_empty_file(self, tmp_path):
        f = tmp_path / "empty.md"
        f.write_bytes(b"")
        assert read_file_with_encoding(f) == ("", "utf-8")


# =============================================================================
# Comparison
# =============================================================================


def test_files_identical(tmp_path):
    a = tmp_path / "a.md"
    b = tmp_path / "b.md"
    c = tmp_path / "c.md"
    a.write_text("same")
    b.write_text("same")
    c.write_text("different")
    assert files_identical(a, b) is True
    assert files_identical(a, c) is False


# =============================================================================
# Symlinks
# =============================================================================


class TestSymlinks:
    def test_relative_target(self, tmp_path):
        target = tmp_path / "notes" / "docs" / "a.md"
        link = tmp_path / "docs" / "a.md"
        assert relative_link_target(target, link) == "../notes/docs/a.md"

    def test_create_makes_parents(self, tmp_path):
        target = tmp_path / "notes" / "deep" / "x" / "a.md"
        target.parent.mkdir(parents=True)
        target.write_text("body")
        link = tmp_path / "deep" / "x" / "a.md"

        rel = create_relative_symlink(target, link)

        assert rel == "../../notes/deep/x/a.md"
        assert os.readlink(link) == rel
        assert link.read_text() == "body"

    def test_link_points_to(self, tmp_path):
        target = tmp_path / "notes" / "a.md"
        link = tmp_path / "a.md"
        create_relative_symlink(target, link)

        assert link_points_to(link, target) is True
        assert link_points_to(link, tmp_path / "notes" / "b.md") is False
        assert link_points_to(tmp_path / "missing.md", target) is False

    def test_is_dangling(self, tmp_path):
        target = tmp_path / "notes" / "a.md"
        link = tmp_path / "a.md"
        create_relative_symlink(target, link)
        assert is_dangling(link) is True

        target.parent.mkdir(parents=True)
        target.write_text("now exists")
        assert is_dangling(link) is False

    def test_regular_file_not_dangling(self, tmp_path):
        f = tmp_path / "a.md"
        f.write_text("x")
        assert is_dangling(f) is False


# =============================================================================
# Move / backup
# =============================================================================


def test_move_file_creates_parents(tmp_path):
    src = tmp_path / "a.md"
    src.write_text("content")
    dest = tmp_path / "notes" / "sub" / "a.md"

    move_file(src, dest)

    assert not src.exists()
    assert dest.read_text() == "content"


class TestBackupPath:
    def test_first_backup(self, tmp_path):
        assert backup_path(tmp_path / "README.md") == tmp_path / "README.md.bak"

    def test_numbered_when_taken(self, tmp_path):
        (tmp_path / "README.md.bak").write_text("old")
        (tmp_path / "README.md.bak.1").write_text("older")
        assert backup_path(tmp_path / "README.md") == tmp_path / "README.md.bak.2"

    def test_custom_suffix(self, tmp_path):
        assert backup_path(tmp_path / "a.md", ".notes.bak") == (
            tmp_path / "a.md.notes.bak"
        )
