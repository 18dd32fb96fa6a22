"""Managed block inside an ignore-style file.

The block is delimited by two literal marker lines and owned entirely by
this tool; everything outside it is preserved verbatim.  The file is
treated as a list of lines and all rewriting is done by pure functions:

- ``find_managed_block`` -- locate the marker pair.
- ``splice_managed_block`` -- drop the old block, append a new one at EOF
  (used by the reconciler, which regenerates the block on every run).
- ``replace_block_in_place`` -- swap block content without moving it
  (used by the cleanup auditor when dropping stale lines).
- ``build_managed_block`` -- generate block content for a config, with
  literal paths quoted by ``escape_path``.
- ``stale_entries`` -- literal entries whose path no longer exists.

``ExclusionLedger`` wraps these around actual file I/O.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path

from notes_worktree.config_schema import NotesConfig

logger = logging.getLogger(__name__)

BEGIN_MARKER = "# >>> sync-notes managed entries >>>"
END_MARKER = "# <<< sync-notes managed entries <<<"

_GLOB_CHARS = frozenset("*?[")


# ---------------------------------------------------------------------------
# Pure line functions
# ---------------------------------------------------------------------------


def find_managed_block(lines: list[str]) -> tuple[int, int] | None:
    """Return ``(begin, end)`` indices of the marker lines, or ``None``.

    A begin marker without an end marker extends to the last line, the way
    a ``sed '/begin/,/end/d'`` range does.
    """
    try:
        begin = lines.index(BEGIN_MARKER)
    except ValueError:
        return None
    try:
        end = lines.index(END_MARKER, begin + 1)
    except ValueError:
        end = len(lines) - 1
    return begin, end


def managed_lines(lines: list[str]) -> list[str]:
    """Return the lines strictly between the markers (empty if no block)."""
    span = find_managed_block(lines)
    if span is None:
        return []
    begin, end = span
    if end < len(lines) and lines[end] == END_MARKER:
        return lines[begin + 1 : end]
    return lines[begin + 1 : end + 1]


def splice_managed_block(lines: list[str], block: list[str]) -> list[str]:
    """Remove any existing managed block and append *block* at the end.

    *block* is the content between the markers; the markers are added here.
    The blank separator line written before a block is removed together
    with it, so repeated splicing does not accumulate blank lines.

    Args:
        lines: Current file content, one entry per line (no newlines).
        block: New block content lines.

    Returns:
        The new file content as a list of lines.
    """
    span = find_managed_block(lines)
    if span is None:
        kept = list(lines)
    else:
        begin, end = span
        prefix = lines[:begin]
        if prefix and prefix[-1] == "":
            prefix = prefix[:-1]
        kept = prefix + lines[end + 1 :]

    if kept and kept[-1] != "":
        kept.append("")
    return kept + [BEGIN_MARKER, *block, END_MARKER]


def replace_block_in_place(lines: list[str], block: list[str]) -> list[str]:
    """Replace the content between the markers, keeping its position.

    Returns *lines* unchanged (as a copy) when no block exists.
    """
    span = find_managed_block(lines)
    if span is None:
        return list(lines)
    begin, end = span
    return lines[:begin] + [BEGIN_MARKER, *block, END_MARKER] + lines[end + 1 :]


def escape_path(rel_path: str) -> str:
    """Quote *rel_path* so git matches it literally.

    Backslashes and glob characters are backslash-escaped, as is a leading
    ``#`` or ``!`` (which would otherwise start a comment or a negation).
    """
    escaped = "".join(
        "\\" + ch if ch == "\\" or ch in _GLOB_CHARS else ch for ch in rel_path
    )
    if escaped.startswith(("#", "!")):
        escaped = "\\" + escaped
    return escaped


def literal_path(entry: str) -> str | None:
    """Return the path a literal entry names, or ``None`` for a pattern.

    Inverse of ``escape_path``: escaped characters are taken verbatim and
    any unescaped glob character makes the entry a pattern.
    """
    chars: list[str] = []
    escaped = False
    for ch in entry:
        if escaped:
            chars.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch in _GLOB_CHARS:
            return None
        else:
            chars.append(ch)
    if escaped:
        return None
    return "".join(chars)


def is_structural(entry: str, worktree: str) -> bool:
    """Return ``True`` for block lines that are never stale.

    Comments, blank lines, the worktree mount entry, negations and glob
    patterns describe structure rather than a single existing path.
    """
    stripped = entry.strip()
    if not stripped or stripped.startswith(("#", "!")):
        return True
    if stripped.strip("/") == worktree.strip("/"):
        return True
    return literal_path(stripped) is None


def stale_entries(
    lines: list[str], project_root: Path, worktree: str
) -> list[str]:
    """Return literal managed entries with no link or file in the main tree.

    Args:
        lines: Full exclusion file content.
        project_root: Main tree root the entries are relative to.
        worktree: Worktree directory (its mount entry is structural).

    Returns:
        Stale entries in file order.
    """
    stale: list[str] = []
    for entry in managed_lines(lines):
        if is_structural(entry, worktree):
            continue
        path = project_root / literal_path(entry.strip()).lstrip("/")
        if not path.is_symlink() and not path.is_file():
            stale.append(entry)
    return stale


def build_managed_block(
    config: NotesConfig, managed_paths: list[str]
) -> list[str]:
    """Generate the managed block content for *config*.

    ``exclude`` method: the worktree mount plus every managed path.
    ``gitignore`` method: the worktree mount, a catch-all markdown glob,
    a negation keeping the root README tracked, and one negation per
    configured exclusion pattern.
    """
    block = [
        "# Notes worktree (tracked in notes branch)",
        f"/{config.worktree}/",
        "",
        "# Documentation symlinks",
    ]
    if config.exclusion_method == "gitignore":
        block.append("**/*.md")
        if config.exclude_root_readme:
            block += ["", "# Exception: keep root README in main branch", "!/README.md"]
        if config.patterns:
            block += ["", "# Exception: files excluded from sync stay tracked"]
            block += [f"!**/{pattern}" for pattern in config.patterns]
    else:
        block.extend(escape_path(path) for path in sorted(set(managed_paths)))
    return block


# ---------------------------------------------------------------------------
# File wrapper
# ---------------------------------------------------------------------------


class ExclusionLedger:
    """Read and rewrite the managed block of one ignore-style file.

    Args:
        path: The ``.gitignore`` or ``info/exclude`` file.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def read_lines(self) -> list[str]:
        """Return file lines, or ``[]`` if the file does not exist."""
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()

    def entries(self) -> list[str]:
        """Return the current managed block content."""
        return managed_lines(self.read_lines())

    def rewrite(self, block: list[str], dry_run: bool = False) -> list[str]:
        """Regenerate the managed block with *block* content.

        Creates the file (and its parent directory) when missing.

        Returns:
            The resulting file lines (also in dry-run, where nothing is
            written).
        """
        new_lines = splice_managed_block(self.read_lines(), block)
        if dry_run:
            logger.info("[DRY-RUN] Would update exclusions in %s", self.path)
            return new_lines
        self._write(new_lines)
        logger.info("Updated exclusions in %s", self.path)
        return new_lines

    def remove_entries(self, entries: list[str], dry_run: bool = False) -> int:
        """Drop *entries* from the managed block, keeping everything else.

        Returns:
            Number of lines removed (or that would be removed).
        """
        lines = self.read_lines()
        current = managed_lines(lines)
        doomed = set(entries)
        kept = [line for line in current if line not in doomed]
        removed = len(current) - len(kept)
        if removed and not dry_run:
            self._write(replace_block_in_place(lines, kept))
        return removed

    def _write(self, lines: list[str]) -> None:
        """Write *lines* atomically via a temp file and ``os.replace()``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write("\n".join(lines) + "\n")
            if self.path.exists():
                shutil.copymode(self.path, tmp_path)
            else:
                os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
