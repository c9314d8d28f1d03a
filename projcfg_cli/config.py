"""Configuration, constants, and the shared console for the CLI."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import dotenv
from rich.console import Console
from rich.theme import Theme

from .errors import ProjectConfigError

# Load .env ONLY from current working directory to avoid accidental parent config inheritance
dotenv.load_dotenv(Path.cwd() / ".env")

# Color scheme
COLORS = {
    "primary": "#10b981",
    "dim": "#9ca3af",  # Lighter gray for better visibility on Windows/macOS terminals
    "error": "#ef4444",
    "warning": "#fbbf24",
    "info": "#60a5fa",
    "command": "#60a5fa",
}

# User commands exposed by the loader (shared between CLI and interactive shell)
COMMANDS = {
    "ProjectReload": "Reload project configuration",
    "ProjectBuild": "Build project",
    "ProjectDebug": "Debug project",
    "ProjectRun": "Run project",
    "ProjectOpenFiles": "Open project files",
}

DEFAULT_CONFIG_FILE = ".project.py"
DEFAULT_DEFAULTS_PATH = Path("~/.config/projcfg/defaults.json")

# Custom theme to override dim style for better visibility on Windows/macOS terminals
_theme = Theme({"dim": COLORS["dim"]})

# Rich console instance
console = Console(highlight=False, theme=_theme)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Global settings read from the environment.

    Initialized once at import time and refreshed with ``reload()``.

    Attributes:
        verbose: Print debug-level notifications
        config_file: Name of the per-project file looked up under the project root
        defaults_path: JSON file holding user-level default options
        find_command: Executable used for file enumeration
        enumerator: ``find`` (external process) or ``walk`` (in-process traversal)
        leader: Key that ``<leader>`` expands to in keymaps
    """

    verbose: bool
    config_file: str
    defaults_path: Path
    find_command: str
    enumerator: str
    leader: str

    @classmethod
    def from_environment(cls) -> "Settings":
        """Create settings from PROJCFG_* environment variables."""
        defaults_path = os.environ.get("PROJCFG_DEFAULTS")
        return cls(
            verbose=_env_flag("PROJCFG_VERBOSE"),
            config_file=os.environ.get("PROJCFG_CONFIG_FILE") or DEFAULT_CONFIG_FILE,
            defaults_path=Path(defaults_path or DEFAULT_DEFAULTS_PATH).expanduser(),
            find_command=os.environ.get("PROJCFG_FIND") or "find",
            enumerator=(os.environ.get("PROJCFG_ENUMERATOR") or "find").lower(),
            leader=os.environ.get("PROJCFG_LEADER") or "\\",
        )

    def reload(self) -> None:
        """Reload settings from current environment variables."""
        new_settings = Settings.from_environment()
        self.verbose = new_settings.verbose
        self.config_file = new_settings.config_file
        self.defaults_path = new_settings.defaults_path
        self.find_command = new_settings.find_command
        self.enumerator = new_settings.enumerator
        self.leader = new_settings.leader


def load_user_defaults(path: Path) -> dict[str, Any]:
    """Load user-level default options from a JSON file.

    Returns:
        The parsed object, or an empty dict if the file doesn't exist.

    Raises:
        ProjectConfigError: If the file is not valid JSON or isn't a JSON object.
    """
    if not path.exists():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        raise ProjectConfigError(f"Error loading {path}: {e}") from e

    if not isinstance(data, dict):
        raise ProjectConfigError(f"Error loading {path}: expected a JSON object")
    return data


# Global settings instance (initialized once)
settings = Settings.from_environment()
