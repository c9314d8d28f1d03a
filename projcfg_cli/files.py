"""Project file enumeration and bulk file opening."""

import os
import subprocess
from collections.abc import Sequence
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

from .errors import EnumerationError
from .notify import Level, Notify
from .project_utils import find_project_root

_WILDCARDS = set("*?[")


def normalize_extensions(extensions: Sequence[str]) -> list[str]:
    """Strip leading dots and drop empty entries ("py", ".py" -> "py")."""
    return [ext.lstrip(".") for ext in extensions if ext and ext.lstrip(".")]


def prune_patterns(root: str, exclude_patterns: Sequence[str]) -> list[str]:
    """Translate exclude globs into ``find -path`` patterns.

    - a bare name without wildcards (``vendor``) matches that name at any depth
    - absolute patterns and patterns starting with a wildcard are used as-is
    - other relative patterns are anchored at root
    - ``dir/**`` also prunes ``dir`` itself, so the subtree is never entered
    """
    patterns: list[str] = []
    for pattern in exclude_patterns:
        if not pattern:
            continue
        pattern = pattern.rstrip("/") or "/"

        if "/" not in pattern and not _WILDCARDS & set(pattern):
            translated = f"*/{pattern}"
        elif pattern.startswith("/") or pattern[0] in _WILDCARDS:
            translated = pattern
        else:
            translated = f"{root}/{pattern}"

        patterns.append(translated)
        if translated.endswith("/**") and len(translated) > 3:
            patterns.append(translated[:-3])
    return patterns


def build_find_command(
    root: str,
    extensions: Sequence[str],
    exclude_patterns: Sequence[str] = (),
    find_command: str = "find",
) -> list[str]:
    """Build the argv for a find invocation.

    ``find ROOT ( -path P1 -o -path P2 ) -prune -o ( -name '*.e1' -o ... ) -type f -print``
    """
    argv = [find_command, root]

    prune = prune_patterns(root, exclude_patterns)
    if prune:
        argv.append("(")
        for i, pattern in enumerate(prune):
            if i:
                argv.append("-o")
            argv += ["-path", pattern]
        argv += [")", "-prune", "-o"]

    argv.append("(")
    for i, ext in enumerate(normalize_extensions(extensions)):
        if i:
            argv.append("-o")
        argv += ["-name", f"*.{ext}"]
    argv += [")", "-type", "f", "-print"]
    return argv


class FileEnumerator:
    """Lists the files of a project."""

    def list(
        self, root: str, extensions: Sequence[str], exclude_patterns: Sequence[str]
    ) -> list[str]:
        """Return paths under root with one of extensions, minus excluded subtrees.

        Raises:
            EnumerationError: If the traversal can't be started.
        """
        raise NotImplementedError


class FindEnumerator(FileEnumerator):
    """Enumerate files with an external ``find`` process.

    The process runs synchronously without a timeout. Its stdout is read line by
    line until it closes; stderr (unreadable directories and the like) is discarded.
    """

    def __init__(self, find_command: str = "find") -> None:
        self.find_command = find_command

    def list(
        self, root: str, extensions: Sequence[str], exclude_patterns: Sequence[str]
    ) -> list[str]:
        root = str(Path(root))
        argv = build_find_command(root, extensions, exclude_patterns, self.find_command)
        try:
            process = subprocess.Popen(
                argv, stdout=subprocess.PIPE, stderr=subprocess.DEVNULL, text=True
            )
        except OSError as e:
            raise EnumerationError(f"could not run {self.find_command}: {e}") from e

        with process:
            files = [line.rstrip("\n") for line in process.stdout if line.strip()]
        return files


class WalkEnumerator(FileEnumerator):
    """Enumerate files in-process with the same prune and match rules as find."""

    def list(
        self, root: str, extensions: Sequence[str], exclude_patterns: Sequence[str]
    ) -> list[str]:
        root = str(Path(root))
        if not os.path.isdir(root):
            raise EnumerationError(f"not a directory: {root}")

        prune = prune_patterns(root, exclude_patterns)
        names = [f"*.{ext}" for ext in normalize_extensions(extensions)]

        def pruned(path: str) -> bool:
            return any(fnmatchcase(path, pattern) for pattern in prune)

        if pruned(root):
            return []

        files: list[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not pruned(os.path.join(dirpath, d)))
            for filename in sorted(filenames):
                path = os.path.join(dirpath, filename)
                if pruned(path) or os.path.islink(path) or not os.path.isfile(path):
                    continue
                if any(fnmatchcase(filename, name) for name in names):
                    files.append(path)
        return files


def get_enumerator(settings) -> FileEnumerator:
    """Pick the enumerator named by settings (``find`` unless ``walk`` is requested)."""
    if settings.enumerator == "walk":
        return WalkEnumerator()
    return FindEnumerator(settings.find_command)


def open_project_files(
    config: dict[str, Any], host, enumerator: FileEnumerator, notify: Notify
) -> list[str]:
    """Register every project file matching ``file_extensions`` as a hidden buffer.

    Returns:
        The registered paths (empty when nothing was opened).
    """
    extensions = normalize_extensions(config.get("file_extensions") or [])
    exclude_patterns = config.get("exclude_patterns") or []
    root = config.get("root_dir") or str(find_project_root(host.current_path()))

    if not extensions:
        notify("No file extensions configured", Level.WARN)
        return []

    try:
        files = enumerator.list(root, extensions, exclude_patterns)
    except EnumerationError as e:
        notify(f"Failed to find project files: {e}", Level.ERROR)
        return []

    if not files:
        notify("No matching files found", Level.INFO)
        return []

    for path in files:
        host.add_buffer(path)

    notify(f"Opened {len(files)} files", Level.INFO)
    return files
