"""Exception hierarchy for notes-worktree.

Fatal conditions raise a subclass of ``NotesWorktreeError``; the CLI layer
turns them into an ``ERROR:`` line on stderr and a non-zero exit status.
Per-file I/O problems are *not* raised through this hierarchy: the sync
engine records them as failed results and keeps going.
"""

from __future__ import annotations


class NotesWorktreeError(Exception):
    """Base class for all notes-worktree errors.

    Attributes:
        hint: Optional follow-up suggestion shown after the error message.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class PreconditionError(NotesWorktreeError):
    """A required precondition is missing (no git repo, no notes worktree)."""


class ConfigError(NotesWorktreeError):
    """``.notesrc`` or tool settings are missing, unreadable, or invalid."""


class ConflictAborted(NotesWorktreeError):
    """The interactive conflict prompt ran out of input before a choice."""
