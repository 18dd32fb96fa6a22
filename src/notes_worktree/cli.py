"""Command-line interface for notes-worktree.

Subcommands:

- ``sync``      -- reconcile the main tree with the notes worktree.
- ``cleanup``   -- remove dangling symlinks and stale exclusion entries.
- ``status``    -- show links, exclusions and notes branch state.
- ``excludes``  -- list, add or remove exclusion patterns.

Reports go to stdout; log records and errors go to stderr.
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from . import __version__
from .config import NotesContext, build_context, verify_notes_worktree
from .config_loader import load_hierarchical_config
from .config_schema import ToolSettings, build_settings, join_patterns
from .core.git import GitClient, GitCommandError, VcsClient
from .errors import ConfigError, ConflictAborted, NotesWorktreeError
from .logger import setup_logging
from .sync.cleanup import CleanupAuditor
from .sync.engine import Reconciler
from .sync.models import SyncReport
from .sync.patterns import add_patterns, list_patterns, remove_patterns
from .sync.reporter import (
    format_cleanup_quiet,
    format_cleanup_report,
    format_dry_run_preview,
    format_status_report,
    format_sync_quiet,
    format_sync_report,
)
from .sync.resolver import create_resolver
from .sync.status import collect_status
from .sync.watch import watch

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_verbosity(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-v", "--verbose", action="store_true", help="Show per-file detail"
    )
    group.add_argument(
        "-q", "--quiet", action="store_true", help="Show only errors and counts"
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="notes-worktree",
        description="Keep markdown documentation in a notes worktree, "
        "linked back into the main tree.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview what a sync would do
  notes-worktree sync --dry-run

  # Sync, fixing dangling links and stale exclusions first
  notes-worktree sync --cleanup

  # Keep syncing as files change
  notes-worktree sync --watch --no-interactive

  # Keep CHANGELOG.md and SKILL.md in the main branch
  notes-worktree excludes add "CHANGELOG.md,SKILL.md"
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"notes-worktree version {__version__}",
    )
    parser.add_argument(
        "--log-file", help="Also append log records to this file"
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        help="Log record format (default: text, or settings value)",
    )

    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    sync = sub.add_parser("sync", help="Move docs to notes and create symlinks")
    sync.add_argument(
        "--dry-run", action="store_true", help="Show what would be done"
    )
    sync.add_argument(
        "--cleanup",
        action="store_true",
        help="Remove dangling symlinks and stale exclusions first",
    )
    _add_verbosity(sync)
    sync.add_argument(
        "--watch", action="store_true", help="Keep running and sync on changes"
    )
    sync.add_argument(
        "--no-interactive",
        action="store_true",
        help="Never prompt; back up the main copy on conflicts",
    )
    sync.set_defaults(handler=cmd_sync)

    cleanup = sub.add_parser(
        "cleanup", help="Remove dangling symlinks and stale exclusion entries"
    )
    cleanup.add_argument(
        "--dangling", action="store_true", help="Only remove dangling symlinks"
    )
    cleanup.add_argument(
        "--stale", action="store_true", help="Only remove stale exclusion entries"
    )
    cleanup.add_argument(
        "--all", action="store_true", help="Fix all issues (default)"
    )
    cleanup.add_argument(
        "--dry-run", action="store_true", help="Show what would be removed"
    )
    _add_verbosity(cleanup)
    cleanup.set_defaults(handler=cmd_cleanup)

    status = sub.add_parser("status", help="Show notes worktree status")
    _add_verbosity(status)
    status.set_defaults(handler=cmd_status)

    excludes = sub.add_parser(
        "excludes", help="Manage patterns for files kept in the main tree"
    )
    excludes.add_argument("action", choices=["list", "add", "remove"])
    excludes.add_argument(
        "patterns",
        nargs="*",
        help="Patterns, comma-separated or as separate arguments",
    )
    excludes.add_argument(
        "--no-commit",
        action="store_true",
        help="Don't commit .notesrc changes to the notes branch",
    )
    excludes.add_argument(
        "-q", "--quiet", action="store_true", help="Minimal output"
    )
    excludes.set_defaults(handler=cmd_excludes, verbose=False)

    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _sync_output(args: argparse.Namespace, report: SyncReport) -> str:
    if args.quiet:
        return format_sync_quiet(report)
    if report.dry_run:
        return format_dry_run_preview(report)
    return format_sync_report(report, verbose=args.verbose)


def cmd_sync(
    args: argparse.Namespace,
    ctx: NotesContext,
    vcs: VcsClient,
    settings: ToolSettings,
) -> int:
    interactive = (
        settings.sync.interactive
        and not args.no_interactive
        and not args.watch
        and sys.stdin.isatty()
    )
    reconciler = Reconciler(ctx, vcs, create_resolver(interactive))

    if args.watch:
        watch(
            reconciler,
            lambda report: print(_sync_output(args, report)),
            cleanup=args.cleanup,
        )
        return EXIT_OK

    report = reconciler.run(dry_run=args.dry_run, cleanup=args.cleanup)
    print(_sync_output(args, report))
    return EXIT_OK


def cmd_cleanup(
    args: argparse.Namespace,
    ctx: NotesContext,
    vcs: VcsClient,
    settings: ToolSettings,
) -> int:
    scoped = args.dangling or args.stale
    dangling = args.all or not scoped or args.dangling
    stale = args.all or not scoped or args.stale

    verify_notes_worktree(ctx, vcs)
    report = CleanupAuditor(ctx).run(
        dangling=dangling, stale=stale, dry_run=args.dry_run
    )
    if args.quiet:
        print(format_cleanup_quiet(report))
    else:
        print(format_cleanup_report(report, verbose=args.verbose))
    return EXIT_FAILURE if report.failed else EXIT_OK


def cmd_status(
    args: argparse.Namespace,
    ctx: NotesContext,
    vcs: VcsClient,
    settings: ToolSettings,
) -> int:
    report = collect_status(ctx, vcs)
    output = format_status_report(report, verbose=args.verbose, quiet=args.quiet)
    if output:
        print(output)
    return EXIT_FAILURE if report.dangling else EXIT_OK


def cmd_excludes(
    args: argparse.Namespace,
    ctx: NotesContext,
    vcs: VcsClient,
    settings: ToolSettings,
) -> int:
    verify_notes_worktree(ctx, vcs)

    if args.action == "list":
        patterns = list_patterns(ctx)
        if args.quiet:
            if patterns:
                print(join_patterns(patterns))
        elif not patterns:
            print("No exclusion patterns configured.")
            print()
            print('Add patterns with: notes-worktree excludes add "pattern1,pattern2"')
        else:
            print("Current exclusion patterns:")
            print()
            for pattern in patterns:
                print(f"  - {pattern}")
        return EXIT_OK

    if args.action == "add":
        change = add_patterns(ctx, vcs, args.patterns, no_commit=args.no_commit)
        verb = "Added"
    else:
        change = remove_patterns(ctx, vcs, args.patterns, no_commit=args.no_commit)
        verb = "Removed"

    if not args.quiet:
        if change.changed:
            print(f"{verb}: {', '.join(change.changed)}")
        else:
            print("No changes made.")
        print(f"Patterns: {join_patterns(change.patterns) or '(none)'}")
        if change.committed:
            print("Committed .notesrc changes to notes branch")
    return EXIT_OK


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _print_error(exc: NotesWorktreeError) -> None:
    print(f"ERROR: {exc}", file=sys.stderr)
    if exc.hint:
        print(exc.hint, file=sys.stderr)


def _load_settings() -> ToolSettings:
    try:
        return build_settings(load_hierarchical_config())
    except ValidationError as exc:
        raise ConfigError(f"Invalid tool settings: {exc}") from exc


def main(argv: list[str] | None = None, vcs: VcsClient | None = None) -> int:
    """Run the CLI and return the process exit status.

    Args:
        argv: Arguments (default: ``sys.argv[1:]``).
        vcs: Version-control client (default: ``GitClient``).
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "sync" and args.watch and args.dry_run:
        parser.error("--watch cannot be combined with --dry-run")

    load_dotenv()

    try:
        settings = _load_settings()
        setup_logging(
            verbose=args.verbose,
            quiet=args.quiet,
            level=settings.logging.level,
            log_file=args.log_file or settings.logging.file,
            log_format=args.log_format or settings.logging.format,
        )
        vcs = vcs or GitClient()
        ctx = build_context(
            vcs,
            Path.cwd(),
            worktree=settings.sync.worktree,
            skip_dirs=settings.sync.skip_dirs,
        )
        return args.handler(args, ctx, vcs, settings)
    except ConflictAborted as exc:
        _print_error(exc)
        return EXIT_INTERRUPTED
    except NotesWorktreeError as exc:
        _print_error(exc)
        return EXIT_FAILURE
    except GitCommandError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
