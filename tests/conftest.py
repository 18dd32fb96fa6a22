"""Shared pytest fixtures for notes-worktree tests."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from notes_worktree.config import NotesContext, build_context, save_notes_config
from notes_worktree.config_schema import NotesConfig
from notes_worktree.errors import PreconditionError


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "git: mark test as requiring the git executable"
    )


def pytest_collection_modifyitems(config, items):
    """Skip git tests when git is not installed."""
    if shutil.which("git"):
        return
    skip_git = pytest.mark.skip(reason="git executable not found")
    for item in items:
        if "git" in item.keywords:
            item.add_marker(skip_git)


# ---------------------------------------------------------------------------
# Fake version control
# ---------------------------------------------------------------------------


class FakeVcsClient:
    """In-memory ``VcsClient`` for tests.

    Worktree detection looks at the real filesystem (a ``.git`` file or
    directory); everything else is canned.
    """

    def __init__(self, root: Path | None) -> None:
        self.root = root
        self.branches: set[str] = {"notes"}
        self.status_lines: list[str] = []
        self.unpushed = 0
        self.commits: list[tuple[Path, list[str], str]] = []

    def toplevel(self, path: Path) -> Path:
        if self.root is None:
            raise PreconditionError(
                "Not a git repository. Please run from within a git project."
            )
        return self.root

    def common_dir(self, root: Path) -> Path:
        return root / ".git"

    def worktree_exists(self, path: Path) -> bool:
        marker = path / ".git"
        return marker.is_file() or marker.is_dir()

    def branch_exists(self, root: Path, branch: str) -> bool:
        return branch in self.branches

    def status(self, repo: Path, *pathspecs: str) -> list[str]:
        return list(self.status_lines)

    def unpushed_count(self, repo: Path) -> int:
        return self.unpushed

    def commit(self, repo: Path, paths: list[str], message: str) -> None:
        self.commits.append((repo, list(paths), message))
        self.status_lines = []


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def write(path: Path, text: str) -> Path:
    """Create *path* (and parents) with *text*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A main tree with a ``.git`` directory and a checked-out ``notes`` worktree."""
    root = tmp_path / "repo"
    (root / ".git" / "info").mkdir(parents=True)
    notes = root / "notes"
    notes.mkdir()
    (notes / ".git").write_text(
        f"gitdir: {root}/.git/worktrees/notes\n", encoding="utf-8"
    )
    return root


@pytest.fixture
def fake_vcs(project: Path) -> FakeVcsClient:
    return FakeVcsClient(project)


@pytest.fixture
def make_ctx(project: Path, fake_vcs: FakeVcsClient):
    """Factory fixture: write ``.notesrc`` from overrides and build a context."""

    def _make(**config_overrides) -> NotesContext:
        if config_overrides:
            config = NotesConfig(**config_overrides)
            save_notes_config(project / config.worktree / ".notesrc", config)
        return build_context(fake_vcs, project)

    return _make


@pytest.fixture
def ctx(make_ctx) -> NotesContext:
    """Context with default configuration (``exclude`` method)."""
    return make_ctx()
