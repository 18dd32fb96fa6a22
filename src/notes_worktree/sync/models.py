"""Pydantic models for the sync engine.

Defines the data contracts shared by the sync modules:

- ``SyncAction``: What happened to one document in one pass.
- ``Resolution``: Outcome chosen for a diverging document.
- ``ConflictInfo``: Both copies of a diverging document.
- ``SyncResult``: Outcome of processing one document.
- ``SyncReport``: Aggregate results for a full reconciliation run.
- ``CleanupReport``: Drift found (and repaired) by the cleanup auditor.
- ``StatusReport``: Read-only snapshot for the ``status`` command.
- ``PatternChange``: Outcome of an exclusion-pattern update.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class SyncAction(str, Enum):
    """Possible outcomes for one document in one pass."""

    SKIP = "skip"
    MOVE = "move"
    DEDUPE = "dedupe"
    CONFLICT = "conflict"
    LINK = "link"
    RELINK = "relink"
    UNEXPECTED = "unexpected"


class Resolution(str, Enum):
    """Ways a diverging document can be resolved."""

    BACKUP_MAIN = "backup_main"
    KEEP_MAIN = "keep_main"
    KEEP_SIDE = "keep_side"
    BACKUP_BOTH = "backup_both"
    SKIP = "skip"


class ConflictInfo(BaseModel):
    """Both copies of a document that differs between the trees.

    Attributes:
        rel_path: Path relative to both tree roots.
        main_content: Decoded content of the main-tree file.
        side_content: Decoded content of the notes-tree file.
    """

    rel_path: str
    main_content: str
    side_content: str

    model_config = {"frozen": True}


class SyncResult(BaseModel):
    """Result of processing one document.

    Attributes:
        path: Path relative to the tree roots.
        direction: ``"forward"`` (main -> notes) or ``"reverse"``.
        action: What was (or, in dry-run, would be) done.
        success: False when a filesystem error stopped the action.
        resolution: Conflict outcome, for ``CONFLICT`` results.
        error: Error message if the operation failed.
    """

    path: str
    direction: str
    action: SyncAction
    success: bool = True
    resolution: Resolution | None = None
    error: str | None = None

    model_config = {"frozen": True}

    @property
    def creates_link(self) -> bool:
        """Whether this result (re)creates a symlink in the main tree."""
        if not self.success:
            return False
        if self.action == SyncAction.CONFLICT:
            return self.resolution not in (None, Resolution.SKIP)
        return self.action in (
            SyncAction.MOVE,
            SyncAction.DEDUPE,
            SyncAction.LINK,
            SyncAction.RELINK,
        )


class CleanupReport(BaseModel):
    """Drift detected by the cleanup auditor.

    Attributes:
        dry_run: Whether repairs were only reported.
        dangling: Dangling symlink paths (relative to the project root).
        stale: Stale literal entries found in the managed block.
        failed: Paths whose repair raised an error.
        checked_dangling: Whether the dangling scope ran.
        checked_stale: Whether the stale scope ran.
        exclusion_file_missing: The stale scope found no exclusion file.
    """

    dry_run: bool = False
    dangling: list[str] = []
    stale: list[str] = []
    failed: list[str] = []
    checked_dangling: bool = True
    checked_stale: bool = True
    exclusion_file_missing: bool = False

    model_config = {"frozen": True}

    @property
    def total(self) -> int:
        """Total issues found (dangling links plus stale entries)."""
        return len(self.dangling) + len(self.stale)


class SyncReport(BaseModel):
    """Aggregate report for a full reconciliation run.

    Attributes:
        dry_run: Whether this was a dry-run (no changes applied).
        results: Individual per-document results.
        managed_paths: Every path recorded for the exclusion ledger.
        exclusion_file: Ignore-style file that received the managed block.
        started_at: ISO 8601 timestamp when the run started.
        completed_at: ISO 8601 timestamp when the run completed.
        cleanup: Report from the optional cleanup pre-step.
    """

    dry_run: bool = False
    results: list[SyncResult] = []
    managed_paths: list[str] = []
    exclusion_file: str = ""
    started_at: str
    completed_at: str | None = None
    cleanup: CleanupReport | None = None

    model_config = {"frozen": True}

    @property
    def processed(self) -> int:
        """Number of documents recorded in the managed set."""
        return len(self.managed_paths)

    @property
    def created(self) -> list[SyncResult]:
        """Documents moved into the notes worktree."""
        return [
            r
            for r in self.results
            if r.action == SyncAction.MOVE and r.success
        ]

    @property
    def linked(self) -> list[SyncResult]:
        """Results that created or fixed a symlink."""
        return [r for r in self.results if r.creates_link]

    @property
    def skipped(self) -> list[SyncResult]:
        """Results that left the document as it was."""
        return [
            r
            for r in self.results
            if r.success
            and (
                r.action in (SyncAction.SKIP, SyncAction.UNEXPECTED)
                or r.resolution == Resolution.SKIP
            )
        ]

    @property
    def conflicts(self) -> list[SyncResult]:
        """Results where both trees held different content."""
        return [
            r for r in self.results if r.action == SyncAction.CONFLICT
        ]

    @property
    def unresolved(self) -> list[SyncResult]:
        """Conflicts left divergent (resolution ``skip``)."""
        return [
            r for r in self.conflicts if r.resolution == Resolution.SKIP
        ]

    @property
    def unexpected(self) -> list[SyncResult]:
        """Regular files in main found by a reverse-only run."""
        return [
            r for r in self.results if r.action == SyncAction.UNEXPECTED
        ]

    @property
    def errors(self) -> list[SyncResult]:
        """Results where success is False."""
        return [r for r in self.results if not r.success]

    @property
    def mutations(self) -> int:
        """Number of filesystem changes made (or planned) by this run."""
        return len(self.linked)

    def summary(self) -> str:
        """Format a compact, human-readable summary of the run.

        Returns:
            Multi-line summary string with counts by category.
        """
        lines = [
            "Sync summary" + (" (dry run)" if self.dry_run else ""),
            f"  Processed:  {self.processed}",
            f"  Created:    {len(self.created)}",
            f"  Linked:     {len(self.linked)}",
            f"  Skipped:    {len(self.skipped)}",
            f"  Conflicts:  {len(self.conflicts)}"
            f" ({len(self.unresolved)} unresolved)",
            f"  Errors:     {len(self.errors)}",
        ]
        return "\n".join(lines)


class StatusReport(BaseModel):
    """Snapshot of the notes worktree setup.

    Attributes:
        branch: Notes branch name from ``.notesrc``.
        worktree: Worktree directory.
        exclusion_method: Configured exclusion method.
        branch_exists: Whether the notes branch exists locally.
        synced: Main-tree symlinks resolving to a file.
        dangling: Main-tree symlinks whose target is missing.
        unlinked: Notes documents without a symlink in the main tree.
        managed_entries: Non-comment lines in the managed block.
        stale: Stale literal entries in the managed block.
        uncommitted: Uncommitted change count in the notes worktree.
        unpushed: Commits on the notes branch not yet pushed.
    """

    branch: str
    worktree: str
    exclusion_method: str
    branch_exists: bool = True
    synced: list[str] = []
    dangling: list[str] = []
    unlinked: list[str] = []
    managed_entries: int = 0
    stale: list[str] = []
    uncommitted: int = 0
    unpushed: int = 0

    model_config = {"frozen": True}

    @property
    def has_issues(self) -> bool:
        return bool(self.dangling or self.stale)


class PatternChange(BaseModel):
    """Result of an ``excludes add`` or ``excludes remove`` command.

    Attributes:
        changed: Patterns actually added or removed.
        unchanged: Requested patterns that needed no change.
        patterns: The full pattern list after the update.
        committed: Whether ``.notesrc`` was committed on the notes branch.
    """

    changed: list[str] = []
    unchanged: list[str] = []
    patterns: list[str] = []
    committed: bool = False

    model_config = {"frozen": True}
