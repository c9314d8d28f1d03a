"""Indentation options and filetype detection."""

from pathlib import Path
from typing import Any

INDENT_OPTIONS = ("expandtab", "shiftwidth", "tabstop", "softtabstop")

# Extension -> filetype name, following the editor's own filetype names
FILETYPES = {
    "c": "c",
    "h": "c",
    "cc": "cpp",
    "cpp": "cpp",
    "hpp": "cpp",
    "cs": "cs",
    "css": "css",
    "go": "go",
    "html": "html",
    "java": "java",
    "js": "javascript",
    "jsx": "javascriptreact",
    "json": "json",
    "lua": "lua",
    "md": "markdown",
    "py": "python",
    "rb": "ruby",
    "rs": "rust",
    "sh": "sh",
    "toml": "toml",
    "ts": "typescript",
    "tsx": "typescriptreact",
    "vim": "vim",
    "yaml": "yaml",
    "yml": "yaml",
}

FILENAMES = {
    "Makefile": "make",
    "makefile": "make",
    "CMakeLists.txt": "cmake",
    "Dockerfile": "dockerfile",
}


def detect_filetype(path: Path | str) -> str | None:
    """Guess the filetype of path from its name or extension."""
    path = Path(path)
    if path.name in FILENAMES:
        return FILENAMES[path.name]
    return FILETYPES.get(path.suffix.lstrip(".").lower())


def resolve_indent(config: dict[str, Any], filetype: str | None = None) -> dict[str, Any]:
    """Return the indent options in force for filetype.

    Base ``indent`` settings first, then any ``indent_by_filetype[filetype]``
    override on top. Options set to None are left out.
    """
    resolved: dict[str, Any] = {}
    layers = [config.get("indent") or {}]
    if filetype:
        layers.append((config.get("indent_by_filetype") or {}).get(filetype) or {})

    for layer in layers:
        for name in INDENT_OPTIONS:
            if layer.get(name) is not None:
                resolved[name] = layer[name]
    return resolved


def apply_indent(host, config: dict[str, Any], filetype: str | None = None) -> dict[str, Any]:
    """Set the resolved indent options as buffer-local options on host."""
    resolved = resolve_indent(config, filetype)
    for name, value in resolved.items():
        host.set_local_option(name, value)
    return resolved
