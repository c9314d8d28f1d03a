"""Utilities for project root detection."""

from pathlib import Path

# Files or directories whose presence marks a project root
PROJECT_MARKERS = (
    ".project.py",  # Our project config file
    ".git",
    "package.json",
    "Cargo.toml",
    "pyproject.toml",
    "Makefile",
    "CMakeLists.txt",
    "go.mod",
    ".projectile",
)


def has_marker(directory: Path, markers: tuple[str, ...] = PROJECT_MARKERS) -> bool:
    """Check whether any marker exists in directory, as a file or a directory."""
    return any((directory / marker).exists() for marker in markers)


def find_project_root(
    start_path: Path | str | None = None, markers: tuple[str, ...] = PROJECT_MARKERS
) -> Path:
    """Find the project root by looking for project markers.

    Walks up the directory tree from start_path (or cwd) and stops at the first
    directory containing any of the markers.

    Args:
        start_path: File or directory to start searching from. Defaults to current
            working directory.
        markers: Marker names to look for.

    Returns:
        Path to the project root, or the current working directory if no marker is
        found up to the filesystem root.
    """
    if not start_path:
        start_path = Path.cwd()

    current = Path(start_path).expanduser().resolve()
    if current.is_file():
        current = current.parent

    # Walk up the directory tree, filesystem root included
    for parent in [current, *list(current.parents)]:
        if has_marker(parent, markers):
            return parent

    return Path.cwd().resolve()
