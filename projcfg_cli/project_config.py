"""Per-project configuration: discovery, loading, merging and the loader lifecycle.

A project is configured by a Python file at its root (``.project.py`` by default)
that binds a module-level ``config`` dict, for example::

    config = {
        "build_cmd": "make",
        "run_cmd": "./build/app",
        "compiler": "gcc",
        "file_extensions": ["c", "h"],
        "exclude_patterns": ["**/build/**"],
        "indent": {"shiftwidth": 4},
        "indent_by_filetype": {"make": {"expandtab": False}},
        "keymaps": {"<F5>": {"cmd": "make test", "desc": "Run tests"}},
    }

The file is merged over the defaults on every load.
"""

import runpy
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, TypedDict

from .actions import ProjectActions
from .config import COMMANDS, settings
from .debugger import get_debug_backend
from .errors import ProjectConfigError
from .files import FileEnumerator, get_enumerator
from .host import BUF_ENTER, DIR_CHANGED, FILETYPE
from .indent import apply_indent
from .keymaps import setup_keymaps
from .notify import ConsoleNotifier, Level, Notify
from .project_utils import find_project_root


class IndentConfig(TypedDict, total=False):
    expandtab: bool  # Use spaces instead of tabs
    shiftwidth: int  # Indentation width
    tabstop: int  # Tab width
    softtabstop: int  # Soft tab width


class ProjectSettings(TypedDict, total=False):
    """Recognized keys of the effective configuration."""

    # Build and run configuration
    build_cmd: str | Callable[[], Any] | None
    run_cmd: str | Callable[[], Any] | None
    debug_config: dict[str, Any] | Callable[[Any], Any] | None
    build_in_terminal: bool
    compiler: str | None  # Result list format for captured build output

    # File opening configuration
    file_extensions: list[str]  # Extensions to open (e.g. ["py", "toml"])
    exclude_patterns: list[str]  # Globs to exclude (e.g. ["**/node_modules/**"])
    root_dir: str | None  # Project root (defaults to the discovered root)

    # Indentation rules
    indent: IndentConfig
    indent_by_filetype: dict[str, IndentConfig]

    # Custom keymaps (key -> command, function or {"cmd", "mode", "desc"})
    keymaps: dict[str, Any]


DEFAULTS: ProjectSettings = {
    "build_cmd": None,
    "run_cmd": None,
    "debug_config": None,
    "build_in_terminal": False,
    "compiler": None,
    "file_extensions": [],
    "exclude_patterns": [],
    "root_dir": None,
    "indent": {
        "expandtab": True,
        "shiftwidth": 2,
        "tabstop": 2,
        "softtabstop": 2,
    },
    "indent_by_filetype": {},
    "keymaps": {},
}


def copy_tree(value: Any) -> Any:
    """Copy nested dicts and lists; other values (functions included) are shared."""
    if isinstance(value, Mapping):
        return {key: copy_tree(item) for key, item in value.items()}
    if isinstance(value, list):
        return [copy_tree(item) for item in value]
    return value


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep merge override into base. Override values win.

    Nested mappings are merged key by key; any other value (lists included)
    replaces the one in base. Neither input is modified.
    """
    result = copy_tree(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy_tree(value)
    return result


def read_project_file(path: Path) -> dict[str, Any]:
    """Execute a project file and return the ``config`` dict it defines.

    Raises:
        ProjectConfigError: If the file fails to run, or ``config`` is missing or
            not a dict.
    """
    try:
        namespace = runpy.run_path(str(path), run_name="__project__")
    except (Exception, SystemExit) as e:
        raise ProjectConfigError(f"{type(e).__name__}: {e}") from e

    if "config" not in namespace:
        raise ProjectConfigError("no 'config' defined")
    project_config = namespace["config"]
    if not isinstance(project_config, Mapping):
        raise ProjectConfigError(
            f"'config' must be a dict, got {type(project_config).__name__}"
        )
    return dict(project_config)


def load_project_config(
    root: Path, notify: Notify, config_file: str | None = None
) -> dict[str, Any]:
    """Load the project file under root.

    Returns an empty dict when the file doesn't exist, or when it can't be
    loaded (after reporting the error through notify).
    """
    name = config_file or settings.config_file
    path = root / name
    if not path.is_file():
        return {}

    try:
        return read_project_file(path)
    except ProjectConfigError as e:
        notify(f"Error loading {name}: {e}", Level.ERROR)
        return {}


def resolve_config(
    start_path: Path | str | None,
    defaults: Mapping[str, Any],
    notify: Notify,
    config_file: str | None = None,
) -> dict[str, Any]:
    """Compute the effective configuration for start_path.

    Discovers the project root, loads the project file, merges it over defaults
    and fills in ``root_dir``. Depends only on the filesystem, never on a host.
    """
    root = find_project_root(start_path)
    project_config = load_project_config(root, notify, config_file)

    config = deep_merge(defaults, project_config)
    if config.get("root_dir"):
        config["root_dir"] = str((root / Path(config["root_dir"]).expanduser()).resolve())
    else:
        config["root_dir"] = str(root)
    return config


class ProjectConfigLoader:
    """Owns the effective configuration and applies it to a host.

    The configuration is replaced in full by every ``load()``; ``get()`` hands
    out a copy so callers always work with a snapshot.
    """

    def __init__(
        self,
        host,
        options: Mapping[str, Any] | None = None,
        notify: Notify | None = None,
        enumerator: FileEnumerator | None = None,
        debug_backend_factory: Callable[[Any], Any] = get_debug_backend,
        config_file: str | None = None,
        open_files_on_load: bool = True,
    ) -> None:
        self.host = host
        self.notify: Notify = notify or getattr(host, "notify", None) or ConsoleNotifier()
        self.defaults = deep_merge(DEFAULTS, options or {})
        self.config_file = config_file
        self.open_files_on_load = open_files_on_load
        self.actions = ProjectActions(
            self,
            host,
            enumerator or get_enumerator(settings),
            self.notify,
            debug_backend_factory,
        )
        self._config: dict[str, Any] = copy_tree(self.defaults)
        self._listeners: list[Callable[[dict[str, Any]], Any]] = []
        self._subscriptions: list[tuple[str, Callable[..., Any]]] = []

    def get(self) -> dict[str, Any]:
        """Return a copy of the current effective configuration."""
        return copy_tree(self._config)

    def on_context_change(self, handler: Callable[[dict[str, Any]], Any]) -> None:
        """Call handler with the new configuration after every load."""
        self._listeners.append(handler)

    def load(self, start_path: Path | str | None = None) -> dict[str, Any]:
        """Load (or reload) the configuration and apply it to the host.

        Args:
            start_path: Where root discovery starts. Defaults to the host's current
                file, or the working directory when there is none.
        """
        if start_path is None:
            start_path = self.host.current_path()

        self._config = resolve_config(start_path, self.defaults, self.notify, self.config_file)
        self.notify(f"Project root: {self._config['root_dir']}", Level.DEBUG)

        setup_keymaps(self.host, self._config, self.actions, self.notify)
        if self.open_files_on_load:
            self.actions.open_files()
        apply_indent(self.host, self._config, self.host.current_filetype())

        for listener in self._listeners:
            listener(self.get())
        return self.get()

    def reload(self) -> dict[str, Any]:
        config = self.load()
        self.notify("Project configuration reloaded", Level.INFO)
        return config

    def apply_filetype(self, filetype: str | None = None) -> dict[str, Any]:
        """Apply indent settings for filetype (the host's current one by default)."""
        return apply_indent(self.host, self._config, filetype or self.host.current_filetype())

    def register_commands(self) -> None:
        handlers = {
            "ProjectReload": self.reload,
            "ProjectBuild": self.actions.build,
            "ProjectDebug": self.actions.debug,
            "ProjectRun": self.actions.run,
            "ProjectOpenFiles": self.actions.open_files,
        }
        for name, fn in handlers.items():
            self.host.add_command(name, fn, COMMANDS[name])

    def setup(self) -> dict[str, Any]:
        """Subscribe to host events, register user commands and do the initial load."""
        # Calling setup again replaces the handlers of the previous call
        for event, handler in self._subscriptions:
            self.host.unsubscribe(event, handler)
        self._subscriptions = [
            (BUF_ENTER, lambda *_: self.load()),
            (DIR_CHANGED, lambda *_: self.load()),
            (FILETYPE, lambda filetype=None, *_: self.apply_filetype(filetype)),
        ]
        for event, handler in self._subscriptions:
            self.host.subscribe(event, handler)
        self.register_commands()
        return self.load()
