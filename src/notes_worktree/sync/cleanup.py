"""Cleanup auditor: repair drift without a full reconciliation.

Two kinds of drift are detected:

- **Dangling links** -- markdown symlinks in the main tree whose target is
  not a regular file.  Repair deletes the link.
- **Stale ledger entries** -- literal paths in the managed block with no
  link or file behind them.  Repair drops the line and leaves the rest of
  the block and the file untouched.

Dangling links are handled first so that entries for links removed in the
same run are reported as stale too.
"""

from __future__ import annotations

import logging

from notes_worktree.config import NotesContext
from notes_worktree.file_handler import is_dangling
from notes_worktree.sync.ledger import ExclusionLedger, stale_entries
from notes_worktree.sync.models import CleanupReport
from notes_worktree.sync.scanner import DocumentScanner

logger = logging.getLogger(__name__)


class CleanupAuditor:
    """Find and optionally repair dangling links and stale entries.

    Args:
        ctx: The run context.
    """

    def __init__(self, ctx: NotesContext) -> None:
        self.ctx = ctx
        self.scanner = DocumentScanner(ctx)
        self.ledger = ExclusionLedger(ctx.exclusion_file)

    def run(
        self, dangling: bool = True, stale: bool = True, dry_run: bool = False
    ) -> CleanupReport:
        """Audit the selected scopes.

        Args:
            dangling: Check for dangling symlinks.
            stale: Check the managed block for stale entries.
            dry_run: Report only; change nothing.

        Returns:
            A ``CleanupReport`` listing findings and failed repairs.
        """
        failed: list[str] = []
        found_dangling: list[str] = []
        found_stale: list[str] = []
        missing = False

        if dangling:
            found_dangling = self.find_dangling()
            if not dry_run:
                failed += self._remove_links(found_dangling)

        if stale:
            if not self.ledger.exists():
                logger.info("No exclusion file at %s", self.ctx.exclusion_file)
                missing = True
            else:
                found_stale = self.find_stale()
                if found_stale and not dry_run:
                    try:
                        removed = self.ledger.remove_entries(found_stale)
                        logger.info(
                            "Removed %d stale entries from %s",
                            removed,
                            self.ctx.exclusion_file,
                        )
                    except OSError as exc:
                        logger.warning(
                            "Cannot update %s: %s", self.ctx.exclusion_file, exc
                        )
                        failed.append(str(self.ctx.exclusion_file))

        return CleanupReport(
            dry_run=dry_run,
            dangling=found_dangling,
            stale=found_stale,
            failed=failed,
            checked_dangling=dangling,
            checked_stale=stale,
            exclusion_file_missing=missing,
        )

    def find_dangling(self) -> list[str]:
        """Return main-tree markdown symlinks whose target is missing."""
        root = self.ctx.project_root
        return [
            rel for rel in self.scanner.main_symlinks() if is_dangling(root / rel)
        ]

    def find_stale(self) -> list[str]:
        """Return stale literal entries in the managed block."""
        return stale_entries(
            self.ledger.read_lines(), self.ctx.project_root, self.ctx.worktree_dir
        )

    def _remove_links(self, paths: list[str]) -> list[str]:
        failed: list[str] = []
        for rel in paths:
            link = self.ctx.project_root / rel
            try:
                link.unlink()
                logger.info("Removed dangling symlink: %s", rel)
            except OSError as exc:
                logger.warning("Cannot remove %s: %s", rel, exc)
                failed.append(rel)
        return failed
