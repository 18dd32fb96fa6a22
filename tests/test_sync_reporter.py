"""Tests for sync report formatting functions."""

from __future__ import annotations

from notes_worktree.sync.models import (
    CleanupReport,
    ConflictInfo,
    Resolution,
    StatusReport,
    SyncAction,
    SyncReport,
    SyncResult,
)
from notes_worktree.sync.reporter import (
    describe_resolution,
    format_cleanup_quiet,
    format_cleanup_report,
    format_conflict_diff,
    format_dry_run_preview,
    format_status_report,
    format_sync_quiet,
    format_sync_report,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_result(
    path: str = "docs/a.md",
    action: SyncAction = SyncAction.MOVE,
    success: bool = True,
    resolution: Resolution | None = None,
    error: str | None = None,
    direction: str = "forward",
) -> SyncResult:
    return SyncResult(
        path=path,
        direction=direction,
        action=action,
        success=success,
        resolution=resolution,
        error=error,
    )


def _make_report(
    results: list[SyncResult] | None = None,
    dry_run: bool = False,
    managed: list[str] | None = None,
) -> SyncReport:
    results = results or []
    return SyncReport(
        dry_run=dry_run,
        results=results,
        managed_paths=managed if managed is not None else [r.path for r in results],
        exclusion_file="/repo/.git/info/exclude",
        started_at="2026-01-01T00:00:00+00:00",
        completed_at="2026-01-01T00:00:01+00:00",
    )


# ---------------------------------------------------------------------------
# Sync report
# ---------------------------------------------------------------------------


class TestFormatSyncReport:
    def test_dry_run_indicator_in_header(self):
        assert "(DRY RUN)" in format_sync_report(_make_report(dry_run=True))
        assert "(DRY RUN)" not in format_sync_report(_make_report())

    def test_sections_only_when_non_empty(self):
        text = format_sync_report(_make_report([_make_result()]))
        assert "Moved to notes:" in text
        assert "  docs/a.md" in text
        assert "Symlinks created:" not in text

    def test_summary_counts(self):
        report = _make_report(
            [
                _make_result("a.md", SyncAction.MOVE),
                _make_result("b.md", SyncAction.LINK, direction="reverse"),
                _make_result("c.md", SyncAction.SKIP),
                _make_result(
                    "d.md", SyncAction.CONFLICT, resolution=Resolution.SKIP
                ),
            ]
        )
        text = format_sync_report(report)
        assert "Processed:  4" in text
        assert "Created:    1" in text
        assert "Linked:     2" in text
        assert "Skipped:    2" in text
        assert "Conflicts:  1 (1 unresolved)" in text
        assert "rerun sync" in text

    def test_conflict_resolution_and_errors_shown(self):
        report = _make_report(
            [
                _make_result(
                    "x.md", SyncAction.CONFLICT, resolution=Resolution.BACKUP_MAIN
                ),
                _make_result(
                    "y.md", SyncAction.SKIP, success=False, error="Permission denied"
                ),
            ]
        )
        text = format_sync_report(report)
        assert "x.md [backup_main]" in text
        assert "Errors:\n  y.md: Permission denied" in text
        assert "Already linked" not in text
        assert "Errors:     1" in text

    def test_skipped_shows_count_only(self):
        report = _make_report([_make_result(f"{i}.md", SyncAction.SKIP) for i in range(3)])
        assert "Already linked: 3 files" in format_sync_report(report)
        verbose = format_sync_report(report, verbose=True)
        assert "  0.md" in verbose

    def test_cleanup_line(self):
        report = _make_report().model_copy(
            update={"cleanup": CleanupReport(dangling=["a.md"], stale=[])}
        )
        assert "Cleanup: 1 dangling, 0 stale" in format_sync_report(report)

    def test_quiet(self):
        report = _make_report([_make_result()], dry_run=True)
        assert format_sync_quiet(report) == (
            "would_processed: 1 created: 1 linked: 1 skipped: 0 errors: 0"
        )


# ---------------------------------------------------------------------------
# Dry-run preview
# ---------------------------------------------------------------------------


class TestFormatDryRunPreview:
    def test_header(self):
        assert format_dry_run_preview(_make_report(dry_run=True)).startswith(
            "DRY RUN"
        )

    def test_groups_by_action(self):
        report = _make_report(
            [
                _make_result("l.md", SyncAction.LINK, direction="reverse"),
                _make_result("m.md", SyncAction.MOVE),
                _make_result(
                    "c.md", SyncAction.CONFLICT, resolution=Resolution.BACKUP_MAIN
                ),
            ],
            dry_run=True,
        )
        text = format_dry_run_preview(report)
        assert text.index("[MOVE] m.md") < text.index("[CONFLICT (backup_main)] c.md")
        assert text.index("[CONFLICT (backup_main)] c.md") < text.index("[LINK] l.md")

    def test_no_changes_needed(self):
        report = _make_report([_make_result(action=SyncAction.SKIP)], dry_run=True)
        text = format_dry_run_preview(report)
        assert "No changes needed." in text
        assert "Skipped: 1 files (already linked)" in text


# ---------------------------------------------------------------------------
# Conflict diff
# ---------------------------------------------------------------------------


class TestFormatConflictDiff:
    def test_unified_diff(self):
        conflict = ConflictInfo(
            rel_path="a.md", main_content="one\ntwo\n", side_content="one\nTWO\n"
        )
        text = format_conflict_diff(conflict)
        assert "--- main: a.md" in text
        assert "+++ notes: a.md" in text
        assert "-two" in text
        assert "+TWO" in text

    def test_identical_content(self):
        conflict = ConflictInfo(rel_path="a.md", main_content="x", side_content="x")
        assert format_conflict_diff(conflict) == "(no textual differences)"


# ---------------------------------------------------------------------------
# Cleanup / status
# ---------------------------------------------------------------------------


class TestFormatCleanupReport:
    def test_no_issues(self):
        assert "No issues found" in format_cleanup_report(CleanupReport())

    def test_dry_run_would_fix(self):
        report = CleanupReport(dry_run=True, dangling=["a.md"], stale=["z/ghost.md"])
        text = format_cleanup_report(report)
        assert "Would remove 1 dangling symlinks" in text
        assert "Would fix 2 issues" in text
        assert format_cleanup_quiet(report) == "would_fix: 2"

    def test_failed_repairs_listed(self):
        report = CleanupReport(dangling=["a.md", "b.md"], failed=["b.md"])
        text = format_cleanup_report(report)
        assert "Failed to repair:" in text
        assert "Fixed 1 issues" in text

    def test_missing_exclusion_file(self):
        report = CleanupReport(checked_dangling=False, exclusion_file_missing=True)
        text = format_cleanup_report(report)
        assert "No exclusion file found" in text
        assert "Dangling symlinks:" not in text


class TestFormatStatusReport:
    def _report(self, **overrides) -> StatusReport:
        data = {"branch": "notes", "worktree": "notes", "exclusion_method": "exclude"}
        data.update(overrides)
        return StatusReport(**data)

    def test_quiet_key_values(self):
        report = self._report(synced=["a.md", "b.md"], dangling=["c.md"], unpushed=2)
        assert format_status_report(report, quiet=True).splitlines() == [
            "synced: 2",
            "dangling: 1",
            "unpushed: 2",
        ]

    def test_recommendation_when_issues(self):
        text = format_status_report(self._report(stale=["z.md"], managed_entries=2))
        assert "2 entries (1 stale)" in text
        assert "sync --cleanup" in text

    def test_verbose_lists_synced(self):
        report = self._report(synced=["docs/a.md"])
        assert "docs/a.md" not in format_status_report(report)
        assert "docs/a.md" in format_status_report(report, verbose=True)

    def test_empty(self):
        text = format_status_report(self._report())
        assert "(no documentation files found)" in text
        assert "Working tree clean" in text


def test_describe_resolution_covers_all():
    for resolution in Resolution:
        assert describe_resolution(resolution)
