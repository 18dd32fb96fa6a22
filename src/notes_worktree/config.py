"""Load and save ``.notesrc`` and build the per-invocation run context.

The configuration lives inside the notes worktree, so locating it needs a
starting guess for the worktree directory (``notes`` unless tool settings
say otherwise).  When no ``.notesrc`` exists the built-in defaults apply.

Every component receives a ``NotesContext`` built once per invocation
instead of reading shared module state.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from .config_schema import DEFAULT_SKIP_DIRS, NotesConfig
from .core.git import VcsClient
from .errors import ConfigError, PreconditionError

logger = logging.getLogger(__name__)

NOTESRC = ".notesrc"


@dataclass
class NotesContext:
    """Resolved locations and configuration for one invocation.

    Attributes:
        project_root: Main worktree root (the main tree, M).
        notes_root: Notes worktree root (the side tree, S).
        config: Parsed ``.notesrc``.
        exclusion_file: Ignore-style file holding the managed block.
        skip_dirs: Directory names never descended into.
    """

    project_root: Path
    notes_root: Path
    config: NotesConfig
    exclusion_file: Path
    skip_dirs: frozenset[str] = field(
        default_factory=lambda: frozenset(DEFAULT_SKIP_DIRS)
    )

    @property
    def worktree_dir(self) -> str:
        return self.config.worktree

    @property
    def config_path(self) -> Path:
        return self.notes_root / NOTESRC


def notesrc_path(project_root: Path, worktree: str = "notes") -> Path:
    """Return the expected ``.notesrc`` location for *worktree*."""
    return project_root / worktree / NOTESRC


def load_notes_config(project_root: Path, worktree: str = "notes") -> NotesConfig:
    """Load ``.notesrc`` from ``<project_root>/<worktree>``.

    Args:
        project_root: Main worktree root.
        worktree: Worktree directory to look in first.

    Returns:
        The parsed config, or defaults (with *worktree*) when the file does
        not exist.

    Raises:
        ConfigError: If the file exists but is not valid JSON or fails
            validation.
    """
    path = notesrc_path(project_root, worktree)
    if not path.exists():
        logger.debug("No %s at %s, using defaults", NOTESRC, path)
        return NotesConfig(worktree=worktree)

    try:
        return NotesConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise ConfigError(f"Invalid {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc


def save_notes_config(path: Path, config: NotesConfig) -> None:
    """Write *config* to *path* as indented JSON.

    Keys not modelled by ``NotesConfig`` that already exist in the file are
    preserved so hand-added fields survive a rewrite.
    """
    data: dict = {}
    if path.exists():
        try:
            existing = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read {path}: {exc}") from exc
        if isinstance(existing, dict):
            data.update(existing)

    data.update(config.model_dump())
    data["worktree"] = f"./{config.worktree}"
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    logger.debug("Wrote %s", path)


def resolve_exclusion_file(
    project_root: Path, config: NotesConfig, vcs: VcsClient
) -> Path:
    """Return the ignore-style file used for the configured method."""
    if config.exclusion_method == "gitignore":
        return project_root / ".gitignore"
    return vcs.common_dir(project_root) / "info" / "exclude"


def build_context(
    vcs: VcsClient,
    start: Path,
    worktree: str = "notes",
    skip_dirs: list[str] | None = None,
) -> NotesContext:
    """Resolve the project root from *start* and load the run context.

    Raises:
        PreconditionError: If *start* is not inside a git repository.
        ConfigError: If ``.notesrc`` is invalid.
    """
    project_root = vcs.toplevel(start)
    config = load_notes_config(project_root, worktree)
    if config.worktree != worktree:
        logger.debug(
            "%s points to worktree '%s'", NOTESRC, config.worktree
        )

    return NotesContext(
        project_root=project_root,
        notes_root=project_root / config.worktree,
        config=config,
        exclusion_file=resolve_exclusion_file(project_root, config, vcs),
        skip_dirs=frozenset(skip_dirs if skip_dirs is not None else DEFAULT_SKIP_DIRS),
    )


def verify_notes_worktree(ctx: NotesContext, vcs: VcsClient) -> None:
    """Fail unless the notes worktree is checked out.

    Raises:
        PreconditionError: If ``<project>/<worktree>`` is not a worktree.
    """
    if not vcs.worktree_exists(ctx.notes_root):
        raise PreconditionError(
            f"Notes worktree not found at ./{ctx.worktree_dir}",
            hint=f"Run: git worktree add ./{ctx.worktree_dir} {ctx.config.branch}",
        )
