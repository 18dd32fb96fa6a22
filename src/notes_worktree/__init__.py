"""notes-worktree: keep markdown documentation on an orphan branch worktree.

Documentation files are moved into a secondary git worktree checked out from
an orphan branch, and relative symlinks are left at their original locations
in the main tree.  A managed block in ``.git/info/exclude`` (or
``.gitignore``) keeps the symlinks out of the main branch.
"""

__version__ = "1.2.0"
