"""Document discovery for both trees.

Enumerates the markdown files the reconciler considers, applying the same
rules the shell ``find`` invocations used:

1. **Skipped directories** -- ``.git``, dependency caches (``node_modules``
   and friends) and, in the main tree, the notes worktree itself.
2. **Root overview file** -- ``README.md`` at the root of either tree is
   never synced (the main one stays in the main branch, the notes one
   describes the notes branch).
3. **Exclusion patterns** -- basename ``fnmatch`` against the configured
   ``exclude_patterns``, applied identically in both passes.

Directory symlinks are never followed.  Symlinked (including dangling)
``*.md`` entries are reported like regular files; the caller decides what
a link means.
"""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path, PurePosixPath

from notes_worktree.config import NotesContext

ROOT_OVERVIEW = "README.md"
MARKDOWN_SUFFIX = ".md"


class DocumentScanner:
    """Enumerate candidate documents in the main and notes trees.

    Args:
        ctx: The run context (roots, config, skip directories).
    """

    def __init__(self, ctx: NotesContext) -> None:
        self._ctx = ctx
        self._patterns = ctx.config.patterns

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def is_excluded(self, rel_path: str) -> bool:
        """Return ``True`` if the basename matches an exclusion pattern."""
        name = PurePosixPath(rel_path).name
        return any(fnmatch.fnmatch(name, p) for p in self._patterns)

    @staticmethod
    def is_markdown(name: str) -> bool:
        return name.endswith(MARKDOWN_SUFFIX)

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def main_documents(self) -> list[str]:
        """Return main-tree candidates for the forward pass.

        Returns:
            Sorted list of POSIX-style paths relative to the project root.
        """
        worktree = PurePosixPath(self._ctx.worktree_dir)
        result: list[str] = []
        for rel in self._walk(self._ctx.project_root, skip_rel=worktree):
            if rel == ROOT_OVERVIEW or self.is_excluded(rel):
                continue
            result.append(rel)
        return result

    def side_documents(self) -> list[str]:
        """Return notes-tree candidates for the reverse pass.

        Returns:
            Sorted list of POSIX-style paths relative to the notes root.
        """
        result: list[str] = []
        for rel in self._walk(self._ctx.notes_root):
            if rel == ROOT_OVERVIEW or self.is_excluded(rel):
                continue
            result.append(rel)
        return result

    def main_symlinks(self) -> list[str]:
        """Return every ``*.md`` symlink in the main tree (outside notes).

        Exclusion patterns and the root README rule do not apply here: the
        cleanup auditor inspects every markdown link.
        """
        worktree = PurePosixPath(self._ctx.worktree_dir)
        root = self._ctx.project_root
        return [
            rel
            for rel in self._walk(root, skip_rel=worktree)
            if (root / rel).is_symlink()
        ]

    def _walk(
        self, root: Path, skip_rel: PurePosixPath | None = None
    ) -> list[str]:
        """Collect ``*.md`` file entries under *root* in sorted order."""
        if not root.is_dir():
            return []

        skip_dirs = self._ctx.skip_dirs | {".git"}
        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            rel_dir = PurePosixPath(Path(dirpath).relative_to(root).as_posix())
            kept = []
            for d in dirnames:
                if d in skip_dirs:
                    continue
                child = rel_dir / d if str(rel_dir) != "." else PurePosixPath(d)
                if skip_rel is not None and child == skip_rel:
                    continue
                kept.append(d)
            dirnames[:] = sorted(kept)

            for name in filenames:
                if not self.is_markdown(name):
                    continue
                rel = name if str(rel_dir) == "." else f"{rel_dir}/{name}"
                found.append(rel)
        return sorted(found)
