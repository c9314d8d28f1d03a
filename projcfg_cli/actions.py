"""Build, run and debug actions, and the action values that configure them."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .debugger import get_debug_backend
from .errors import DebugBackendUnavailable, ProjcfgError, ProjectConfigError
from .files import FileEnumerator, open_project_files
from .notify import Level, Notify
from .results import parse_output


@dataclass(frozen=True)
class Absent:
    """No action configured."""


@dataclass(frozen=True)
class Shell:
    """A shell command line."""

    command: str


@dataclass(frozen=True)
class Callback:
    """A Python callable from the project file."""

    fn: Callable[..., Any]


@dataclass(frozen=True)
class Structured:
    """A launch configuration handed to the debug backend."""

    config: dict[str, Any] = field(default_factory=dict)


Action = Absent | Shell | Callback | Structured


def parse_action(value: Any) -> Action:
    """Classify a configured action value.

    None and blank strings are ``Absent``.

    Raises:
        ProjectConfigError: If value is not a string, callable or mapping.
    """
    if value is None:
        return Absent()
    if isinstance(value, str):
        return Shell(value) if value.strip() else Absent()
    if callable(value):
        return Callback(value)
    if isinstance(value, Mapping):
        return Structured(dict(value))
    raise ProjectConfigError(f"Unsupported action value: {value!r}")


class ProjectActions:
    """The user-invocable actions of a loader.

    Each action reads the loader's current configuration snapshot when it runs.
    """

    def __init__(
        self,
        loader,
        host,
        enumerator: FileEnumerator,
        notify: Notify,
        debug_backend_factory: Callable[[Any], Any] = get_debug_backend,
    ) -> None:
        self.loader = loader
        self.host = host
        self.enumerator = enumerator
        self.notify = notify
        self.debug_backend_factory = debug_backend_factory

    def _action(self, config: dict[str, Any], key: str) -> Action | None:
        try:
            return parse_action(config.get(key))
        except ProjectConfigError as e:
            self.notify(f"{key}: {e}", Level.ERROR)
            return None

    def _call(self, key: str, fn: Callable[..., Any], *args: Any) -> None:
        try:
            fn(*args)
        except Exception as e:
            self.notify(f"{key} failed: {e}", Level.ERROR)

    def build(self) -> None:
        """Build the project with ``build_cmd``.

        A command string runs in a terminal when ``build_in_terminal`` is set;
        otherwise its output is captured and shown as a result list parsed with
        the ``compiler`` format.
        """
        config = self.loader.get()
        action = self._action(config, "build_cmd")
        if action is None:
            return
        if isinstance(action, Absent):
            self.notify("No build command configured for this project", Level.WARN)
            return
        if isinstance(action, Structured):
            self.notify(
                "Unsupported build_cmd value: expected a command or a function", Level.ERROR
            )
            return

        self.host.save_all()

        if isinstance(action, Callback):
            self._call("build_cmd", action.fn)
        elif isinstance(action, Shell):
            root = config.get("root_dir")
            if config.get("build_in_terminal"):
                self.host.open_terminal(action.command, cwd=root)
                return

            try:
                output = self.host.capture(action.command, cwd=root)
            except OSError as e:
                self.notify(f"Error executing command: {e}", Level.ERROR)
                return
            try:
                entries = parse_output(output, config.get("compiler"))
            except ValueError as e:
                self.notify(str(e), Level.ERROR)
                return
            self.host.show_results(entries, title=action.command)

    def run(self) -> None:
        """Run the project with ``run_cmd`` in a terminal."""
        config = self.loader.get()
        action = self._action(config, "run_cmd")
        if action is None:
            return
        if isinstance(action, Absent):
            self.notify("No run command configured for this project", Level.WARN)
            return
        if isinstance(action, Structured):
            self.notify(
                "Unsupported run_cmd value: expected a command or a function", Level.ERROR
            )
            return

        self.host.save_all()

        if isinstance(action, Callback):
            self._call("run_cmd", action.fn)
        elif isinstance(action, Shell):
            self.host.open_terminal(action.command, cwd=config.get("root_dir"))

    def debug(self) -> None:
        """Start the debugger with ``debug_config``.

        A function receives the debug backend; a mapping is passed to its ``run``.
        """
        try:
            backend = self.debug_backend_factory(self.host)
        except DebugBackendUnavailable as e:
            self.notify(f"Debug backend is not available: {e}", Level.ERROR)
            return

        config = self.loader.get()
        action = self._action(config, "debug_config")
        if action is None:
            return
        if isinstance(action, Absent):
            self.notify("No debug configuration for this project", Level.WARN)
            return
        if isinstance(action, Shell):
            self.notify(
                "Unsupported debug_config value: expected a table or a function", Level.ERROR
            )
            return

        self.host.save_all()

        if isinstance(action, Callback):
            self._call("debug_config", action.fn, backend)
        elif isinstance(action, Structured):
            try:
                backend.run(action.config)
            except ProjcfgError as e:
                self.notify(str(e), Level.ERROR)

    def open_files(self) -> list[str]:
        """Register all project files matching the configured extensions."""
        return open_project_files(self.loader.get(), self.host, self.enumerator, self.notify)
