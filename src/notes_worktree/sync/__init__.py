"""Documentation sync engine.

Public API for moving markdown documentation into the notes worktree and
keeping relative symlinks to it in the main tree.

Architecture
------------
Reconciliation is stateless: every run recomputes the placement of each
document from the filesystem alone.  The forward pass moves documents from
the main tree into the notes tree, the reverse pass links notes documents
back, and the managed block of the exclusion file is regenerated from the
paths both passes recorded.

Modules:

- ``engine``    -- ``Reconciler``: forward pass, reverse pass, ledger update.
- ``scanner``   -- ``DocumentScanner``: candidate enumeration in both trees.
- ``resolver``  -- Conflict resolution (non-interactive backup, interactive
  prompt state machine).
- ``ledger``    -- Managed-block splicing and ``ExclusionLedger``.
- ``cleanup``   -- ``CleanupAuditor``: dangling links and stale entries.
- ``status``    -- ``collect_status``: read-only overview.
- ``patterns``  -- Exclusion-pattern management in ``.notesrc``.
- ``watch``     -- Rerun the reconciler on filesystem changes.
- ``models``    -- ``SyncAction``, ``Resolution``, ``SyncResult``,
  ``SyncReport`` and friends: core data contracts.
- ``reporter``  -- Human-readable report formatting.

Usage example
-------------
::

    from pathlib import Path
    from notes_worktree.config import build_context
    from notes_worktree.core import GitClient
    from notes_worktree.sync import Reconciler, format_sync_report

    vcs = GitClient()
    ctx = build_context(vcs, Path.cwd())
    reconciler = Reconciler(ctx, vcs)

    # Dry-run first to preview changes
    preview = reconciler.run(dry_run=True)
    print(format_dry_run_preview(preview))

    report = reconciler.run()
    print(format_sync_report(report))
"""

from .cleanup import CleanupAuditor
from .engine import Reconciler
from .ledger import ExclusionLedger
from .models import (
    CleanupReport,
    ConflictInfo,
    PatternChange,
    Resolution,
    StatusReport,
    SyncAction,
    SyncReport,
    SyncResult,
)
from .reporter import (
    format_cleanup_report,
    format_dry_run_preview,
    format_status_report,
    format_sync_report,
)
from .resolver import BackupResolver, InteractiveResolver, create_resolver
from .scanner import DocumentScanner
from .status import collect_status

__all__ = [
    "BackupResolver",
    "CleanupAuditor",
    "CleanupReport",
    "ConflictInfo",
    "DocumentScanner",
    "ExclusionLedger",
    "InteractiveResolver",
    "PatternChange",
    "Reconciler",
    "Resolution",
    "StatusReport",
    "SyncAction",
    "SyncReport",
    "SyncResult",
    "collect_status",
    "create_resolver",
    "format_cleanup_report",
    "format_dry_run_preview",
    "format_status_report",
    "format_sync_report",
]
