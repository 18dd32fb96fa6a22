"""Report formatting functions.

Provides human-readable output for sync, cleanup and status runs:

- ``format_sync_report`` -- full post-sync summary.
- ``format_dry_run_preview`` -- dry-run preview grouped by action.
- ``format_conflict_diff`` -- unified diff for interactive conflict review.
- ``format_cleanup_report`` -- cleanup findings and repairs.
- ``format_status_report`` -- status overview.
"""

from __future__ import annotations

import difflib
from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import CleanupReport, ConflictInfo, StatusReport, SyncReport

from .models import Resolution, SyncAction

_RULE = "=" * 42

_ACTION_LABELS: dict[SyncAction, str] = {
    SyncAction.MOVE: "Moved to notes",
    SyncAction.DEDUPE: "Using existing notes version (identical)",
    SyncAction.CONFLICT: "Conflicts",
    SyncAction.LINK: "Symlinks created",
    SyncAction.RELINK: "Symlinks fixed",
    SyncAction.UNEXPECTED: "Unexpected regular files in main",
}

# ------------------------------------------------------------------
# Sync report
# ------------------------------------------------------------------


def format_sync_report(report: SyncReport, verbose: bool = False) -> str:
    """Format a complete sync report as human-readable text.

    Sections are only included when they contain at least one result.
    Already-linked documents are summarised by count unless *verbose*.

    Args:
        report: The completed sync report.
        verbose: List skipped documents individually.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = [_RULE]
    lines.append(
        "  Notes Worktree Sync" + (" (DRY RUN)" if report.dry_run else "")
    )
    lines.append(_RULE)

    if report.cleanup is not None:
        lines.append(
            f"Cleanup: {len(report.cleanup.dangling)} dangling, "
            f"{len(report.cleanup.stale)} stale"
        )
        lines.append("")

    groups: dict[SyncAction, list] = defaultdict(list)
    for r in report.results:
        groups[r.action].append(r)

    for action, label in _ACTION_LABELS.items():
        results = groups.get(action)
        if not results:
            continue
        lines.append(f"{label}:")
        for r in results:
            suffix = ""
            if r.resolution is not None:
                suffix = f" [{r.resolution.value}]"
            if not r.success:
                suffix += f" FAILED: {r.error}"
            lines.append(f"  {r.path}{suffix}")
        lines.append("")

    if report.errors:
        lines.append("Errors:")
        for r in report.errors:
            lines.append(f"  {r.path}: {r.error}")
        lines.append("")

    skips = [r for r in groups.get(SyncAction.SKIP, []) if r.success]
    if skips:
        if verbose:
            lines.append("Already linked:")
            lines.extend(f"  {r.path}" for r in skips)
        else:
            lines.append(f"Already linked: {len(skips)} files")
        lines.append("")

    lines.append(report.summary())
    if report.exclusion_file:
        lines.append(f"  Exclusions: {report.exclusion_file}")
    if report.unresolved:
        lines.append("")
        lines.append(
            "Unresolved conflicts keep both copies; rerun sync to decide."
        )

    return "\n".join(lines).rstrip()


def format_sync_quiet(report: SyncReport) -> str:
    """One-line summary for ``--quiet``."""
    prefix = "would_" if report.dry_run else ""
    return (
        f"{prefix}processed: {report.processed} "
        f"created: {len(report.created)} "
        f"linked: {len(report.linked)} "
        f"skipped: {len(report.skipped)} "
        f"errors: {len(report.errors)}"
    )


# ------------------------------------------------------------------
# Dry-run preview
# ------------------------------------------------------------------


def format_dry_run_preview(report: SyncReport) -> str:
    """Format a dry-run preview grouped by action type.

    Each proposed action is shown as ``[ACTION] path``.

    Args:
        report: A dry-run sync report (``dry_run=True``).

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = ["DRY RUN -- No changes will be made", ""]

    groups: dict[SyncAction, list[str]] = defaultdict(list)
    for r in report.results:
        label = r.action.value.upper()
        if r.action == SyncAction.CONFLICT and r.resolution is not None:
            label += f" ({r.resolution.value})"
        groups[r.action].append(f"  [{label}] {r.path}")

    display_order = [
        SyncAction.MOVE,
        SyncAction.DEDUPE,
        SyncAction.CONFLICT,
        SyncAction.LINK,
        SyncAction.RELINK,
        SyncAction.UNEXPECTED,
    ]
    for action in display_order:
        lines.extend(groups.get(action, []))

    if not any(a != SyncAction.SKIP for a in groups):
        lines.append("No changes needed.")

    skip_count = len(groups.get(SyncAction.SKIP, []))
    if skip_count:
        lines.append("")
        lines.append(f"Skipped: {skip_count} files (already linked)")

    lines.append("")
    lines.append(f"Managed exclusion entries: {report.processed}")
    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# Conflict diff
# ------------------------------------------------------------------


def format_conflict_diff(conflict: ConflictInfo) -> str:
    """Format a single conflict for interactive review.

    Args:
        conflict: The conflict details.

    Returns:
        Unified diff from the main copy to the notes copy.
    """
    diff = difflib.unified_diff(
        conflict.main_content.splitlines(keepends=True),
        conflict.side_content.splitlines(keepends=True),
        fromfile=f"main: {conflict.rel_path}",
        tofile=f"notes: {conflict.rel_path}",
    )
    diff_text = "".join(diff)
    if not diff_text:
        return "(no textual differences)"
    return diff_text.rstrip()


# ------------------------------------------------------------------
# Cleanup
# ------------------------------------------------------------------


def format_cleanup_report(report: CleanupReport, verbose: bool = False) -> str:
    """Format cleanup findings.

    Args:
        report: The cleanup report.
        verbose: Accepted for symmetry with the other formatters; every
            finding is already listed.

    Returns:
        Multi-line formatted string.
    """
    verb = "Would remove" if report.dry_run else "Removed"
    lines: list[str] = [_RULE]
    lines.append("  Notes Cleanup" + (" (DRY RUN)" if report.dry_run else ""))
    lines.append(_RULE)

    if report.checked_dangling:
        lines.append("Dangling symlinks:")
        if report.dangling:
            lines.extend(f"  {path}" for path in report.dangling)
            lines.append(f"  {verb} {len(report.dangling)} dangling symlinks")
        else:
            lines.append("  No dangling symlinks found")
        lines.append("")

    if report.checked_stale:
        lines.append("Stale exclusion entries:")
        if report.exclusion_file_missing:
            lines.append("  No exclusion file found")
        elif report.stale:
            lines.extend(f"  {entry}" for entry in report.stale)
            lines.append(f"  {verb} {len(report.stale)} stale entries")
        else:
            lines.append("  No stale exclusion entries found")
        lines.append("")

    if report.failed:
        lines.append("Failed to repair:")
        lines.extend(f"  {path}" for path in report.failed)
        lines.append("")

    if report.total == 0:
        lines.append("No issues found")
    elif report.dry_run:
        lines.append(f"Would fix {report.total} issues")
        lines.append("Run without --dry-run to apply changes")
    else:
        lines.append(f"Fixed {report.total - len(report.failed)} issues")
    return "\n".join(lines).rstrip()


def format_cleanup_quiet(report: CleanupReport) -> str:
    """One-line summary for ``--quiet``."""
    if report.dry_run:
        return f"would_fix: {report.total}"
    return f"fixed: {report.total - len(report.failed)}"


# ------------------------------------------------------------------
# Status
# ------------------------------------------------------------------


def format_status_report(
    report: StatusReport, verbose: bool = False, quiet: bool = False
) -> str:
    """Format the status overview.

    Args:
        report: The status snapshot.
        verbose: List synced and unlinked files individually.
        quiet: Emit ``key: value`` lines only.

    Returns:
        Multi-line formatted string.
    """
    if quiet:
        pairs = [
            ("synced", len(report.synced)),
            ("dangling", len(report.dangling)),
            ("unlinked", len(report.unlinked)),
            ("exclusions", report.managed_entries),
            ("stale", len(report.stale)),
            ("uncommitted", report.uncommitted),
            ("unpushed", report.unpushed),
        ]
        return "\n".join(f"{key}: {value}" for key, value in pairs if value)

    lines: list[str] = [_RULE, "  Notes Worktree Status", _RULE]
    lines.append(f"Branch: {report.branch}")
    if not report.branch_exists:
        lines.append(f"  branch '{report.branch}' does not exist locally")
    lines.append(f"Worktree: ./{report.worktree}")
    lines.append("")

    lines.append("Files:")
    if report.synced:
        lines.append(f"  {len(report.synced)} synced (symlink -> notes file)")
        if verbose:
            lines.extend(f"      {p}" for p in report.synced)
    if report.dangling:
        lines.append(f"  {len(report.dangling)} dangling symlinks (target missing)")
        lines.extend(f"      {p}" for p in report.dangling)
    if report.unlinked:
        lines.append(f"  {len(report.unlinked)} in notes without symlink")
        if verbose:
            lines.extend(f"      {p}" for p in report.unlinked)
    if not (report.synced or report.dangling or report.unlinked):
        lines.append("  (no documentation files found)")
    lines.append("")

    lines.append(f"Exclusions ({report.exclusion_method}):")
    if report.managed_entries == 0:
        lines.append("  (no managed entries)")
    elif report.stale:
        lines.append(
            f"  {report.managed_entries} entries ({len(report.stale)} stale)"
        )
        lines.extend(f"      {e} (stale)" for e in report.stale)
    else:
        lines.append(f"  {report.managed_entries} entries (all valid)")
    lines.append("")

    lines.append("Notes branch:")
    if report.uncommitted:
        lines.append(f"  {report.uncommitted} uncommitted changes")
    else:
        lines.append("  Working tree clean")
    if report.unpushed:
        lines.append(f"  {report.unpushed} unpushed commits")

    if report.has_issues:
        lines.append("")
        lines.append("Recommendations:")
        lines.append("  Run: notes-worktree sync --cleanup to fix issues")
    if report.unlinked:
        lines.append("")
        lines.append("Note: Files in notes without symlinks may be intentional.")
        lines.append("  Run: notes-worktree sync to create missing symlinks")

    return "\n".join(lines).rstrip()


def describe_resolution(resolution: Resolution) -> str:
    """Short human description of a conflict resolution."""
    return {
        Resolution.BACKUP_MAIN: "main copy backed up, notes copy kept",
        Resolution.KEEP_MAIN: "main copy kept",
        Resolution.KEEP_SIDE: "notes copy kept",
        Resolution.BACKUP_BOTH: "both copies backed up, notes copy kept",
        Resolution.SKIP: "skipped, both copies left in place",
    }[resolution]
