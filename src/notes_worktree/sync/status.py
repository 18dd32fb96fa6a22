"""Read-only status collection for the ``status`` command."""

from __future__ import annotations

import logging

from notes_worktree.config import NotesContext, verify_notes_worktree
from notes_worktree.core.git import GitCommandError, VcsClient
from notes_worktree.file_handler import is_dangling
from notes_worktree.sync.ledger import ExclusionLedger, stale_entries
from notes_worktree.sync.models import StatusReport
from notes_worktree.sync.scanner import DocumentScanner

logger = logging.getLogger(__name__)


def collect_status(ctx: NotesContext, vcs: VcsClient) -> StatusReport:
    """Inspect both trees, the exclusion file and the notes branch.

    Nothing is modified.

    Raises:
        PreconditionError: If the notes worktree is not checked out.
    """
    verify_notes_worktree(ctx, vcs)
    scanner = DocumentScanner(ctx)
    root = ctx.project_root

    synced: list[str] = []
    dangling: list[str] = []
    for rel in scanner.main_symlinks():
        (dangling if is_dangling(root / rel) else synced).append(rel)

    unlinked = [
        rel for rel in scanner.side_documents() if not (root / rel).is_symlink()
    ]

    ledger = ExclusionLedger(ctx.exclusion_file)
    lines = ledger.read_lines()
    entries = [
        line
        for line in ledger.entries()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    stale = stale_entries(lines, root, ctx.worktree_dir)

    try:
        uncommitted = len(vcs.status(ctx.notes_root))
        unpushed = vcs.unpushed_count(ctx.notes_root)
        branch_exists = vcs.branch_exists(root, ctx.config.branch)
    except GitCommandError as exc:
        logger.warning("Cannot read notes branch state: %s", exc)
        uncommitted = unpushed = 0
        branch_exists = False

    return StatusReport(
        branch=ctx.config.branch,
        worktree=ctx.worktree_dir,
        exclusion_method=ctx.config.exclusion_method,
        branch_exists=branch_exists,
        synced=synced,
        dangling=dangling,
        unlinked=unlinked,
        managed_entries=len(entries),
        stale=stale,
        uncommitted=uncommitted,
        unpushed=unpushed,
    )
