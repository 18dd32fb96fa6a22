"""Reconciliation engine that converges both trees to the linked state.

The ``Reconciler`` ties together the scanner, resolver, ledger and cleanup
auditor into a complete sync run.  It:

1. Verifies the notes worktree is checked out (before any mutation).
2. Optionally runs the cleanup auditor.
3. Forward pass: moves main-tree documents into the notes tree and leaves
   relative symlinks behind.
4. Reverse pass: links notes documents that have no symlink in main yet
   and repairs links with a wrong target.
5. Regenerates the managed block of the exclusion file.
6. Refreshes the notes tree ``.gitignore``.
7. Builds and returns a ``SyncReport``.

Error handling is per-document: a filesystem error on one document is
recorded and logged, and the pass continues with the next one.
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path

from notes_worktree.config import NotesContext, verify_notes_worktree
from notes_worktree.core.git import VcsClient
from notes_worktree.file_handler import (
    backup_path,
    create_relative_symlink,
    files_identical,
    link_points_to,
    move_file,
    read_file_with_encoding,
)
from notes_worktree.sync.cleanup import CleanupAuditor
from notes_worktree.sync.ledger import ExclusionLedger, build_managed_block
from notes_worktree.sync.models import (
    ConflictInfo,
    Resolution,
    SyncAction,
    SyncReport,
    SyncResult,
)
from notes_worktree.sync.resolver import BackupResolver, ConflictResolver
from notes_worktree.sync.scanner import DocumentScanner

logger = logging.getLogger(__name__)

FORWARD = "forward"
REVERSE = "reverse"

SIDE_GITIGNORE_LINES = [
    "# Negate exclusions so files are tracked in notes branch",
    "!**/*.md",
    "",
    "# Ignore system files",
    ".DS_Store",
    "*.bak",
]


class Reconciler:
    """Run forward and reverse passes for one project.

    Args:
        ctx: The run context.
        vcs: Version-control client (used for the precondition check).
        resolver: Conflict resolver; defaults to ``BackupResolver``.
    """

    def __init__(
        self,
        ctx: NotesContext,
        vcs: VcsClient,
        resolver: ConflictResolver | None = None,
    ) -> None:
        self.ctx = ctx
        self.vcs = vcs
        self.resolver = resolver or BackupResolver()
        self.scanner = DocumentScanner(ctx)
        self.ledger = ExclusionLedger(ctx.exclusion_file)

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def run(
        self,
        dry_run: bool = False,
        cleanup: bool = False,
        forward: bool = True,
        reverse: bool = True,
    ) -> SyncReport:
        """Execute a full reconciliation.

        Args:
            dry_run: If ``True``, report actions without performing them.
            cleanup: Run the cleanup auditor before the forward pass.
            forward: Run the forward (main -> notes) pass.
            reverse: Run the reverse (notes -> main) pass.

        Returns:
            A ``SyncReport`` summarising what was (or would be) done.

        Raises:
            PreconditionError: If the notes worktree is not checked out.
            ConflictAborted: If an interactive prompt ran out of input.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        verify_notes_worktree(self.ctx, self.vcs)

        cleanup_report = None
        # Links a dry-run cleanup would have removed count as already gone
        gone: frozenset[str] = frozenset()
        if cleanup:
            logger.info("Running cleanup before sync")
            cleanup_report = CleanupAuditor(self.ctx).run(dry_run=dry_run)
            if dry_run:
                gone = frozenset(cleanup_report.dangling)

        results: list[SyncResult] = []
        managed: set[str] = set()

        if forward:
            logger.info("Forward pass: main -> %s", self.ctx.worktree_dir)
            results += self._forward_pass(managed, dry_run, gone)
        if reverse:
            logger.info("Reverse pass: %s -> main", self.ctx.worktree_dir)
            results += self._reverse_pass(
                managed, dry_run, forward_ran=forward, gone=gone
            )

        managed_paths = sorted(managed)
        results += self._update_exclusions(managed_paths, dry_run)
        self.write_side_gitignore(dry_run)

        completed_at = datetime.now(timezone.utc).isoformat()
        return SyncReport(
            dry_run=dry_run,
            results=results,
            managed_paths=managed_paths,
            exclusion_file=str(self.ctx.exclusion_file),
            started_at=started_at,
            completed_at=completed_at,
            cleanup=cleanup_report,
        )

    # ------------------------------------------------------------------
    # Forward pass
    # ------------------------------------------------------------------

    def _forward_pass(
        self, managed: set[str], dry_run: bool, gone: frozenset[str] = frozenset()
    ) -> list[SyncResult]:
        results: list[SyncResult] = []
        for rel in self.scanner.main_documents():
            if rel in gone:
                continue
            managed.add(rel)
            try:
                results.append(self._forward_one(rel, dry_run))
            except OSError as exc:
                logger.warning("Error syncing %s: %s", rel, exc)
                results.append(
                    SyncResult(
                        path=rel,
                        direction=FORWARD,
                        action=SyncAction.SKIP,
                        success=False,
                        error=str(exc),
                    )
                )
        return results

    def _forward_one(self, rel: str, dry_run: bool) -> SyncResult:
        main = self.ctx.project_root / rel
        side = self.ctx.notes_root / rel

        if main.is_symlink():
            logger.debug("Already linked: %s", rel)
            return SyncResult(path=rel, direction=FORWARD, action=SyncAction.SKIP)

        if not side.exists() and not side.is_symlink():
            if dry_run:
                logger.info("[DRY-RUN] Would move: %s", rel)
            else:
                move_file(main, side)
                create_relative_symlink(side, main)
                logger.info("Moved to notes: %s", rel)
            return SyncResult(path=rel, direction=FORWARD, action=SyncAction.MOVE)

        if files_identical(main, side):
            if dry_run:
                logger.info("[DRY-RUN] Would use existing notes version: %s", rel)
            else:
                main.unlink()
                create_relative_symlink(side, main)
                logger.info("Using existing notes version (identical): %s", rel)
            return SyncResult(path=rel, direction=FORWARD, action=SyncAction.DEDUPE)

        if dry_run:
            # Preview shows the non-interactive disposition without prompting
            logger.info("[DRY-RUN] Would back up main copy of: %s", rel)
            return SyncResult(
                path=rel,
                direction=FORWARD,
                action=SyncAction.CONFLICT,
                resolution=Resolution.BACKUP_MAIN,
            )

        resolution = self.resolver.resolve(self._conflict_info(rel, main, side))
        self._apply_resolution(resolution, main, side)
        return SyncResult(
            path=rel,
            direction=FORWARD,
            action=SyncAction.CONFLICT,
            resolution=resolution,
        )

    @staticmethod
    def _conflict_info(rel: str, main: Path, side: Path) -> ConflictInfo:
        main_content, _ = read_file_with_encoding(main)
        side_content, _ = read_file_with_encoding(side)
        return ConflictInfo(
            rel_path=rel, main_content=main_content, side_content=side_content
        )

    @staticmethod
    def _apply_resolution(resolution: Resolution, main: Path, side: Path) -> None:
        """Perform the filesystem operations for *resolution*."""
        if resolution == Resolution.SKIP:
            logger.info("Skipped conflict, both copies kept: %s", main)
            return

        if resolution == Resolution.BACKUP_MAIN:
            backup = backup_path(main)
            main.rename(backup)
            logger.info("Backed up main copy to %s", backup.name)
        elif resolution == Resolution.KEEP_MAIN:
            shutil.copy2(main, side)
            main.unlink()
        elif resolution == Resolution.KEEP_SIDE:
            main.unlink()
        elif resolution == Resolution.BACKUP_BOTH:
            main_backup = backup_path(main, ".main.bak")
            side_backup = backup_path(side, ".notes.bak")
            shutil.copy2(main, main_backup)
            shutil.copy2(side, side_backup)
            main.unlink()
            logger.info(
                "Backed up both copies to %s and %s",
                main_backup.name,
                side_backup.name,
            )

        create_relative_symlink(side, main)

    # ------------------------------------------------------------------
    # Reverse pass
    # ------------------------------------------------------------------

    def _reverse_pass(
        self,
        managed: set[str],
        dry_run: bool,
        forward_ran: bool,
        gone: frozenset[str] = frozenset(),
    ) -> list[SyncResult]:
        results: list[SyncResult] = []
        for rel in self.scanner.side_documents():
            managed.add(rel)
            try:
                result = self._reverse_one(rel, dry_run, forward_ran, rel in gone)
            except OSError as exc:
                logger.warning("Error linking %s: %s", rel, exc)
                result = SyncResult(
                    path=rel,
                    direction=REVERSE,
                    action=SyncAction.SKIP,
                    success=False,
                    error=str(exc),
                )
            if result is not None:
                results.append(result)
        return results

    def _reverse_one(
        self, rel: str, dry_run: bool, forward_ran: bool, link_gone: bool = False
    ) -> SyncResult | None:
        main = self.ctx.project_root / rel
        side = self.ctx.notes_root / rel

        if main.is_symlink() and not link_gone:
            if link_points_to(main, side):
                return None
            if dry_run:
                logger.info("[DRY-RUN] Would fix symlink: %s", rel)
            else:
                main.unlink()
                create_relative_symlink(side, main)
                logger.info("Fixed symlink: %s", rel)
            return SyncResult(path=rel, direction=REVERSE, action=SyncAction.RELINK)

        if main.exists():
            if forward_ran:
                return None
            logger.warning("Regular file in main not linked to notes: %s", rel)
            return SyncResult(
                path=rel, direction=REVERSE, action=SyncAction.UNEXPECTED
            )

        if dry_run:
            logger.info("[DRY-RUN] Would create symlink: %s", rel)
        else:
            create_relative_symlink(side, main)
            logger.info("Created symlink: %s", rel)
        return SyncResult(path=rel, direction=REVERSE, action=SyncAction.LINK)

    # ------------------------------------------------------------------
    # Exclusions
    # ------------------------------------------------------------------

    def _update_exclusions(
        self, managed_paths: list[str], dry_run: bool
    ) -> list[SyncResult]:
        block = build_managed_block(self.ctx.config, managed_paths)
        try:
            self.ledger.rewrite(block, dry_run=dry_run)
        except OSError as exc:
            logger.warning("Cannot update %s: %s", self.ctx.exclusion_file, exc)
            return [
                SyncResult(
                    path=str(self.ctx.exclusion_file),
                    direction="ledger",
                    action=SyncAction.SKIP,
                    success=False,
                    error=str(exc),
                )
            ]
        return []

    def write_side_gitignore(self, dry_run: bool = False) -> bool:
        """Rewrite the notes tree ``.gitignore`` when its content differs.

        Returns:
            ``True`` if the file was (or would be) written.
        """
        path = self.ctx.notes_root / ".gitignore"
        content = "\n".join(SIDE_GITIGNORE_LINES) + "\n"
        if path.is_file() and path.read_text(encoding="utf-8") == content:
            return False
        if dry_run:
            logger.info("[DRY-RUN] Would update %s", path)
            return True
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot update %s: %s", path, exc)
            return False
        logger.info("Updated %s", path)
        return True
