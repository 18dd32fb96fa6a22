"""Exclusion-pattern management for ``.notesrc``.

Patterns are basename globs for documents that stay in the main tree and
are never moved into the notes worktree.  They are stored sorted and
de-duplicated as a comma-separated string.  ``add`` and ``remove`` rewrite
``.notesrc`` and commit it on the notes branch unless told not to.
"""

from __future__ import annotations

import logging

from notes_worktree.config import NOTESRC, NotesContext, save_notes_config
from notes_worktree.config_schema import join_patterns, parse_patterns
from notes_worktree.core.git import VcsClient
from notes_worktree.errors import ConfigError
from notes_worktree.sync.models import PatternChange
from notes_worktree.validators import validate_pattern

logger = logging.getLogger(__name__)

COMMIT_MESSAGE = "Update exclude_patterns in .notesrc"


def split_patterns(args: list[str]) -> list[str]:
    """Normalise patterns given as several arguments and/or comma lists.

    Raises:
        ConfigError: If no pattern is given or one is invalid.
    """
    patterns = parse_patterns(",".join(args))
    if not patterns:
        raise ConfigError("No patterns specified")
    for pattern in patterns:
        ok, reason = validate_pattern(pattern)
        if not ok:
            raise ConfigError(reason)
    return patterns


def list_patterns(ctx: NotesContext) -> list[str]:
    """Return the configured exclusion patterns."""
    return ctx.config.patterns


def add_patterns(
    ctx: NotesContext, vcs: VcsClient, args: list[str], no_commit: bool = False
) -> PatternChange:
    """Add patterns to ``.notesrc``.

    Args:
        ctx: The run context.
        vcs: Used to commit the change on the notes branch.
        args: Patterns, as separate items and/or comma-separated.
        no_commit: Leave the change uncommitted.
    """
    requested = split_patterns(args)
    current = ctx.config.patterns
    added = [p for p in requested if p not in current]
    unchanged = [p for p in requested if p in current]
    for pattern in unchanged:
        logger.info("Pattern already exists: %s", pattern)
    return _apply(ctx, vcs, current + added, added, unchanged, no_commit)


def remove_patterns(
    ctx: NotesContext, vcs: VcsClient, args: list[str], no_commit: bool = False
) -> PatternChange:
    """Remove patterns from ``.notesrc``.

    Arguments mirror ``add_patterns``.
    """
    requested = split_patterns(args)
    current = ctx.config.patterns
    removed = [p for p in requested if p in current]
    unchanged = [p for p in requested if p not in current]
    for pattern in unchanged:
        logger.info("Pattern not found: %s", pattern)
    kept = [p for p in current if p not in removed]
    return _apply(ctx, vcs, kept, removed, unchanged, no_commit)


def _apply(
    ctx: NotesContext,
    vcs: VcsClient,
    patterns: list[str],
    changed: list[str],
    unchanged: list[str],
    no_commit: bool,
) -> PatternChange:
    path = ctx.config_path
    if not path.is_file():
        raise ConfigError(
            f"Config file not found: {path}",
            hint="Create it by running the notes worktree setup first",
        )

    final = parse_patterns(join_patterns(patterns))
    if not changed:
        return PatternChange(unchanged=unchanged, patterns=final)

    config = ctx.config.model_copy(update={"exclude_patterns": join_patterns(final)})
    save_notes_config(path, config)
    logger.info("Updated %s: %s", NOTESRC, join_patterns(final) or "(none)")

    committed = False
    if not no_commit and vcs.status(ctx.notes_root, NOTESRC):
        vcs.commit(ctx.notes_root, [NOTESRC], COMMIT_MESSAGE)
        committed = True

    return PatternChange(
        changed=changed, unchanged=unchanged, patterns=final, committed=committed
    )
