"""Configuration schema for notes-worktree.

Defines Pydantic models for the two configuration sources:

- ``NotesConfig``: the ``.notesrc`` JSON document that lives in the notes
  branch.  Written once at setup, afterwards changed only by the
  exclusion-pattern commands.
- ``ToolSettings``: optional YAML tool settings (logging, sync defaults)
  discovered by ``config_loader``.

Usage:
    from notes_worktree.config_loader import load_hierarchical_config
    from notes_worktree.config_schema import build_settings

    settings = build_settings(load_hierarchical_config())
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .validators import (
    validate_branch_name,
    validate_pattern,
    validate_worktree_path,
)

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS: tuple[str, ...] = (
    "node_modules",
    ".venv",
    "venv",
    "__pycache__",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
)


def parse_patterns(raw: str) -> list[str]:
    """Split a comma-separated pattern string into a sorted unique list.

    Whitespace around each item is stripped and empty items are dropped.
    """
    items = {part.strip() for part in raw.split(",")}
    items.discard("")
    return sorted(items)


def join_patterns(patterns: list[str]) -> str:
    """Inverse of ``parse_patterns`` (sorted, de-duplicated, comma-joined)."""
    return ",".join(sorted(set(patterns)))


# ---------------------------------------------------------------------------
# .notesrc
# ---------------------------------------------------------------------------


class NotesConfig(BaseModel):
    """Contents of ``.notesrc`` in the notes branch.

    Attributes:
        branch: Name of the orphan documentation branch.
        worktree: Worktree location relative to the project root.
        exclusion_method: ``"exclude"`` writes literal paths to
            ``.git/info/exclude`` (untracked); ``"gitignore"`` writes glob
            patterns to the tracked ``.gitignore``.
        exclude_root_readme: Keep the root ``README.md`` tracked in the
            main branch (adds a negation in ``gitignore`` mode).
        exclude_patterns: Comma-separated basename globs that stay in the
            main tree and are never moved to the notes worktree.
    """

    branch: str = Field(default="notes", description="Notes branch name")
    worktree: str = Field(
        default="notes", description="Worktree path relative to project root"
    )
    exclusion_method: Literal["gitignore", "exclude"] = Field(
        default="exclude", description="Where managed exclusions are written"
    )
    exclude_root_readme: bool = Field(
        default=True, description="Keep root README.md in the main branch"
    )
    exclude_patterns: str = Field(
        default="", description="Comma-separated filename globs kept in main"
    )

    model_config = {"frozen": True}

    @field_validator("branch")
    @classmethod
    def _check_branch(cls, value: str) -> str:
        ok, reason = validate_branch_name(value)
        if not ok:
            raise ValueError(reason)
        return value

    @field_validator("worktree")
    @classmethod
    def _normalise_worktree(cls, value: str) -> str:
        value = value.strip().removeprefix("./").rstrip("/")
        ok, reason = validate_worktree_path(value)
        if not ok:
            raise ValueError(reason)
        return value

    @field_validator("exclude_patterns")
    @classmethod
    def _normalise_patterns(cls, value: str) -> str:
        patterns = parse_patterns(value)
        for pattern in patterns:
            ok, reason = validate_pattern(pattern)
            if not ok:
                raise ValueError(reason)
        return join_patterns(patterns)

    @property
    def patterns(self) -> list[str]:
        """Configured exclusion patterns as a sorted list."""
        return parse_patterns(self.exclude_patterns)


# ---------------------------------------------------------------------------
# Tool settings (YAML)
# ---------------------------------------------------------------------------


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
        format: ``"text"`` or ``"json"``.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(
        default="text", description="Log record format"
    )

    model_config = {"frozen": True}


class SyncSettings(BaseModel):
    """Defaults for sync runs.

    Attributes:
        worktree: Where to look for ``.notesrc`` when locating the notes
            worktree (the config itself lives inside the worktree).
        interactive: Prompt on conflicts when stdin is a terminal.
        skip_dirs: Directory names never descended into.
    """

    worktree: str = Field(default="notes", description="Default worktree path")
    interactive: bool = Field(
        default=True, description="Prompt on conflicts when attached to a TTY"
    )
    skip_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SKIP_DIRS),
        description="Dependency/cache directory names to skip",
    )

    model_config = {"frozen": True}


class ToolSettings(BaseModel):
    """Top-level tool settings.

    Every section has sensible defaults, so ``ToolSettings()`` (zero-config)
    is always valid.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sync: SyncSettings = Field(default_factory=SyncSettings)

    model_config = {"frozen": True}


def build_settings(raw_data: dict) -> ToolSettings:
    """Construct ``ToolSettings`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Unknown top-level sections are ignored with a warning.
    """
    if not raw_data:
        return ToolSettings()

    known = set(ToolSettings.model_fields)
    unknown = sorted(set(raw_data) - known)
    if unknown:
        logger.warning(
            "Ignoring unknown settings sections: %s", ", ".join(unknown)
        )
    return ToolSettings(**{k: v for k, v in raw_data.items() if k in known})
