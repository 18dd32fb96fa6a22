"""Version-control backend used by the sync engine."""

from .git import GitClient, GitCommandError, VcsClient

__all__ = ["GitClient", "GitCommandError", "VcsClient"]
