"""Conflict resolution strategies for the sync engine.

A conflict is a document that exists as a regular file in both trees with
different bytes.  Resolvers only *decide*; the engine performs the
filesystem operations for the returned ``Resolution``.

- ``BackupResolver``: Non-interactive.  Always backs up the main-tree copy
  and adopts the notes copy.  Never blocks.
- ``InteractiveResolver``: Prompts until the user picks one of: keep main,
  keep notes, skip, back up both.  Showing the diff loops back to the
  prompt.  Implemented as an explicit state machine so the transition
  logic is testable without a terminal.

The ``create_resolver()`` factory maps the CLI mode to a resolver.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Protocol

from notes_worktree.errors import ConflictAborted
from notes_worktree.sync.models import ConflictInfo, Resolution
from notes_worktree.sync.reporter import format_conflict_diff

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class ConflictResolver(Protocol):
    """Protocol that all conflict resolvers must satisfy."""

    def resolve(self, conflict: ConflictInfo) -> Resolution:
        """Decide what to do with a diverging document.

        Args:
            conflict: Both copies of the document.

        Returns:
            The chosen ``Resolution``.
        """
        ...  # pragma: no cover


# ---------------------------------------------------------------------------
# Non-interactive resolver
# ---------------------------------------------------------------------------


class BackupResolver:
    """Back up the main copy and keep the notes copy as canonical."""

    def resolve(self, conflict: ConflictInfo) -> Resolution:
        """Always return ``Resolution.BACKUP_MAIN``."""
        logger.warning(
            "Files differ! Backing up main copy of %s", conflict.rel_path
        )
        return Resolution.BACKUP_MAIN


# ---------------------------------------------------------------------------
# Interactive resolver
# ---------------------------------------------------------------------------


class ResolverState(str, Enum):
    """States of the interactive prompt."""

    AWAIT_CHOICE = "await_choice"
    SHOW_DIFF = "show_diff"
    RESOLVED = "resolved"
    SKIPPED = "skipped"


CHOICES: dict[str, Resolution | None] = {
    "d": None,
    "m": Resolution.KEEP_MAIN,
    "n": Resolution.KEEP_SIDE,
    "s": Resolution.SKIP,
    "b": Resolution.BACKUP_BOTH,
}

PROMPT = (
    "  [d] show diff  [m] keep main  [n] keep notes  "
    "[s] skip  [b] back up both\n  Choice: "
)


def transition(
    state: ResolverState, raw: str | None
) -> tuple[ResolverState, Resolution | None]:
    """Compute the next state for one step of the prompt loop.

    Args:
        state: Current state.
        raw: User input for ``AWAIT_CHOICE``; ignored in other states.

    Returns:
        ``(next_state, resolution)``.  *resolution* is set only when the
        next state is terminal.  Invalid input keeps ``AWAIT_CHOICE``.
    """
    if state in (ResolverState.RESOLVED, ResolverState.SKIPPED):
        raise ValueError(f"No transition out of terminal state {state.value}")

    if state == ResolverState.SHOW_DIFF:
        return ResolverState.AWAIT_CHOICE, None

    key = (raw or "").strip().lower()
    if key not in CHOICES:
        return ResolverState.AWAIT_CHOICE, None

    resolution = CHOICES[key]
    if resolution is None:
        return ResolverState.SHOW_DIFF, None
    if resolution == Resolution.SKIP:
        return ResolverState.SKIPPED, resolution
    return ResolverState.RESOLVED, resolution


class InteractiveResolver:
    """Ask the user how to resolve each conflict.

    Args:
        prompt: Reads one line of input given a prompt string.
        output: Writes one message to the user.
    """

    def __init__(
        self,
        prompt: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        self._prompt = prompt
        self._output = output

    def resolve(self, conflict: ConflictInfo) -> Resolution:
        """Run the prompt loop until a terminal choice is made.

        Raises:
            ConflictAborted: If input ends before a choice is made.
        """
        self._output(f"Conflict: {conflict.rel_path} differs between main and notes")
        state = ResolverState.AWAIT_CHOICE

        while True:
            if state == ResolverState.SHOW_DIFF:
                self._output(format_conflict_diff(conflict))
                state, resolution = transition(state, None)
                continue

            try:
                raw = self._prompt(PROMPT)
            except EOFError as exc:
                raise ConflictAborted(
                    f"No choice made for conflict on {conflict.rel_path}"
                ) from exc

            state, resolution = transition(state, raw)
            if resolution is not None:
                logger.info(
                    "Conflict on %s resolved: %s",
                    conflict.rel_path,
                    resolution.value,
                )
                return resolution
            if state == ResolverState.AWAIT_CHOICE:
                self._output(f"  Invalid choice: {raw!r}")


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_resolver(
    interactive: bool,
    prompt: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
) -> ConflictResolver:
    """Create the resolver for the requested mode.

    Args:
        interactive: Prompt the user (``True``) or back up silently.
        prompt: Input function for the interactive resolver.
        output: Output function for the interactive resolver.
    """
    if interactive:
        return InteractiveResolver(prompt=prompt, output=output)
    return BackupResolver()
