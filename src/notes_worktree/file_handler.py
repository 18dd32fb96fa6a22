"""File handler module: encoding-aware reads, comparison, relative symlinks.

Provides the filesystem primitives used by the sync engine, the cleanup
auditor and the conflict resolver.  All functions are plain synchronous
helpers with no side effects besides file I/O.
"""

import filecmp
import os
import shutil
from pathlib import Path

from charset_normalizer import from_bytes

# =============================================================================
# File Read
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Reads raw bytes first, then uses charset-normalizer to detect encoding.
    Defaults to UTF-8 for empty files or when detection fails.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    result = from_bytes(raw).best()
    if result is None:
        encoding = "utf-8"
        content = raw.decode(encoding, errors="replace")
    else:
        encoding = result.encoding
        # ascii is a strict subset of utf-8
        if encoding == "ascii":
            encoding = "utf-8"
        content = str(result)
    return (content, encoding)


def files_identical(first: Path, second: Path) -> bool:
    """Return ``True`` if both files have exactly the same bytes."""
    return filecmp.cmp(first, second, shallow=False)


# =============================================================================
# Symlinks
# =============================================================================


def relative_link_target(target: Path, link_path: Path) -> str:
    """Return the relative path a symlink at *link_path* needs to reach *target*."""
    return os.path.relpath(target, link_path.parent)


def create_relative_symlink(target: Path, link_path: Path) -> str:
    """Create a relative symlink at *link_path* pointing to *target*.

    Parent directories of *link_path* are created as needed.

    Returns:
        The relative link text that was written.
    """
    link_path.parent.mkdir(parents=True, exist_ok=True)
    rel = relative_link_target(target, link_path)
    os.symlink(rel, link_path)
    return rel


def link_points_to(link_path: Path, target: Path) -> bool:
    """Return ``True`` if the symlink text equals the expected relative path."""
    try:
        current = os.readlink(link_path)
    except OSError:
        return False
    return current == relative_link_target(target, link_path)


def is_dangling(link_path: Path) -> bool:
    """Return ``True`` if *link_path* is a symlink whose target is not a file."""
    return link_path.is_symlink() and not link_path.is_file()


# =============================================================================
# Move / backup
# =============================================================================


def move_file(src: Path, dest: Path) -> None:
    """Move *src* to *dest*, creating parent directories as needed."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(src), str(dest))


def backup_path(path: Path, suffix: str = ".bak") -> Path:
    """Return a backup filename next to *path* that does not exist yet.

    ``README.md`` becomes ``README.md.bak``; if that is taken,
    ``README.md.bak.1``, ``README.md.bak.2`` and so on.
    """
    candidate = path.with_name(path.name + suffix)
    counter = 1
    while candidate.exists() or candidate.is_symlink():
        candidate = path.with_name(f"{path.name}{suffix}.{counter}")
        counter += 1
    return candidate
