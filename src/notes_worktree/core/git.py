"""Narrow git capability interface for the sync engine.

The reconciler, cleanup auditor and status collector never shell out to
git directly; they receive a ``VcsClient``.  ``GitClient`` implements it
with ``git`` subprocess calls, and tests substitute an in-memory fake.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

from ..errors import PreconditionError

logger = logging.getLogger(__name__)

_GIT_TIMEOUT = 30


class GitCommandError(RuntimeError):
    """A git subprocess exited non-zero.

    Attributes:
        args_: The git arguments that were run.
        stderr: Captured standard error.
    """

    def __init__(self, args_: list[str], returncode: int, stderr: str) -> None:
        super().__init__(
            f"git {' '.join(args_)} failed ({returncode}): {stderr.strip()}"
        )
        self.args_ = args_
        self.returncode = returncode
        self.stderr = stderr


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class VcsClient(Protocol):
    """Version-control primitives the sync engine depends on."""

    def toplevel(self, path: Path) -> Path:
        """Return the working-tree root containing *path*.

        Raises:
            PreconditionError: If *path* is not inside a repository.
        """
        ...  # pragma: no cover

    def common_dir(self, root: Path) -> Path:
        """Return the shared git directory (holds ``info/exclude``)."""
        ...  # pragma: no cover

    def worktree_exists(self, path: Path) -> bool:
        """Return ``True`` if *path* is a checked-out worktree."""
        ...  # pragma: no cover

    def branch_exists(self, root: Path, branch: str) -> bool:
        """Return ``True`` if a local branch named *branch* exists."""
        ...  # pragma: no cover

    def status(self, repo: Path, *pathspecs: str) -> list[str]:
        """Return ``git status --porcelain`` lines, optionally limited."""
        ...  # pragma: no cover

    def unpushed_count(self, repo: Path) -> int:
        """Return the number of commits not on the upstream branch."""
        ...  # pragma: no cover

    def commit(self, repo: Path, paths: list[str], message: str) -> None:
        """Stage *paths* and commit them with *message*."""
        ...  # pragma: no cover


# ---------------------------------------------------------------------------
# Subprocess implementation
# ---------------------------------------------------------------------------


class GitClient:
    """``VcsClient`` backed by the ``git`` executable.

    Args:
        executable: Name or path of the git binary.
    """

    def __init__(self, executable: str = "git") -> None:
        self.executable = executable

    def _run(
        self, *args: str, cwd: Path, check: bool = True
    ) -> subprocess.CompletedProcess:
        cmd = [self.executable, *args]
        logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=_GIT_TIMEOUT,
            )
        except FileNotFoundError as exc:
            raise PreconditionError(
                f"git executable not found: {self.executable}"
            ) from exc
        if check and result.returncode != 0:
            raise GitCommandError(list(args), result.returncode, result.stderr)
        return result

    def toplevel(self, path: Path) -> Path:
        result = self._run("rev-parse", "--show-toplevel", cwd=path, check=False)
        if result.returncode != 0 or not result.stdout.strip():
            raise PreconditionError(
                "Not a git repository. Please run from within a git project."
            )
        return Path(result.stdout.strip()).resolve()

    def common_dir(self, root: Path) -> Path:
        out = self._run("rev-parse", "--git-common-dir", cwd=root).stdout.strip()
        path = Path(out)
        if not path.is_absolute():
            path = root / path
        return path.resolve()

    def worktree_exists(self, path: Path) -> bool:
        # A linked worktree has a .git *file*; a primary checkout a directory.
        marker = path / ".git"
        return marker.is_file() or marker.is_dir()

    def branch_exists(self, root: Path, branch: str) -> bool:
        result = self._run(
            "show-ref",
            "--verify",
            "--quiet",
            f"refs/heads/{branch}",
            cwd=root,
            check=False,
        )
        return result.returncode == 0

    def status(self, repo: Path, *pathspecs: str) -> list[str]:
        args = ["status", "--porcelain"]
        if pathspecs:
            args += ["--", *pathspecs]
        out = self._run(*args, cwd=repo).stdout
        return [line for line in out.splitlines() if line.strip()]

    def unpushed_count(self, repo: Path) -> int:
        upstream = self._run(
            "rev-parse", "--abbrev-ref", "@{upstream}", cwd=repo, check=False
        )
        if upstream.returncode == 0 and upstream.stdout.strip():
            rev_range = f"{upstream.stdout.strip()}..HEAD"
        else:
            # No upstream: every commit counts as unpushed
            rev_range = "HEAD"
        result = self._run("rev-list", "--count", rev_range, cwd=repo, check=False)
        if result.returncode != 0:
            return 0
        try:
            return int(result.stdout.strip() or 0)
        except ValueError:
            return 0

    def commit(self, repo: Path, paths: list[str], message: str) -> None:
        self._run("add", "--", *paths, cwd=repo)
        self._run("commit", "--quiet", "-m", message, "--", *paths, cwd=repo)
        logger.info("Committed %s in %s", ", ".join(paths), repo)
