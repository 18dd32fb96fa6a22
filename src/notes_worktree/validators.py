"""
Input validation functions for notes-worktree.

Validates branch names, worktree paths and exclusion patterns before they
are written to ``.notesrc`` or used to build filesystem paths.
"""

# Characters git refuses in branch names (see git-check-ref-format)
_BRANCH_FORBIDDEN = set(" ~^:?*[\\")

# Pattern values are stored comma-separated inside a JSON string and
# matched against basenames only.
_PATTERN_FORBIDDEN = set(",\"'/\\")


# ---------------------------------------------------------------------------
# Error message formatting helpers
# ---------------------------------------------------------------------------


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Branch name")
        reason: Description of validation failure (e.g., "cannot be empty")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def validate_branch_name(branch: str) -> tuple[bool, str]:
    """
    Validate the notes branch name.

    Args:
        branch: The branch name to validate

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Cannot contain '..' or any of: space ~ ^ : ? * [ \\
        - Cannot start with '-' or end with '/' or '.lock'
    """
    if not branch or not branch.strip():
        return (
            False,
            format_validation_error("Branch name", "cannot be empty"),
        )

    if ".." in branch:
        return (
            False,
            format_validation_error("Branch name", "cannot contain '..'"),
        )

    bad = sorted(set(branch) & _BRANCH_FORBIDDEN)
    if bad:
        return (
            False,
            format_validation_error(
                "Branch name",
                f"contains invalid characters: {''.join(bad)!r}",
            ),
        )

    if branch.startswith("-") or branch.endswith(("/", ".lock")):
        return (
            False,
            format_validation_error(
                "Branch name", "cannot start with '-' or end with '/' or '.lock'"
            ),
        )

    return (True, "")


def validate_worktree_path(path: str) -> tuple[bool, str]:
    """
    Validate the worktree location (relative to the project root).

    Args:
        path: Worktree path as stored in ``.notesrc`` (``./`` already removed)

    Returns:
        Tuple of (is_valid, error_message).

    Validation rules:
        - Cannot be empty or '.'
        - Must be relative
        - Cannot contain '..' segments (must stay inside the project)
    """
    if not path or not path.strip() or path.strip() == ".":
        return (
            False,
            format_validation_error("Worktree path", "cannot be empty"),
        )

    if path.startswith("/"):
        return (
            False,
            format_validation_error(
                "Worktree path", "must be relative to the project root"
            ),
        )

    if ".." in path.split("/"):
        return (
            False,
            format_validation_error(
                "Worktree path", "cannot contain '..' segments"
            ),
        )

    return (True, "")


def validate_pattern(pattern: str) -> tuple[bool, str]:
    """
    Validate a single filename exclusion pattern.

    Args:
        pattern: fnmatch-style glob matched against basenames

    Returns:
        Tuple of (is_valid, error_message).

    Validation rules:
        - Cannot be empty or whitespace-only
        - Cannot contain commas, quotes, or path separators
    """
    if not pattern or not pattern.strip():
        return (
            False,
            format_validation_error("Pattern", "cannot be empty"),
        )

    bad = sorted(set(pattern) & _PATTERN_FORBIDDEN)
    if bad:
        return (
            False,
            format_validation_error(
                f"Pattern '{pattern}'",
                f"cannot contain {' '.join(bad)} (patterns match file names only)",
            ),
        )

    return (True, "")
