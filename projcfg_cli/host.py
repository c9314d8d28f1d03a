"""Host interface the loader drives, and the terminal implementation of it.

The loader never talks to an editor directly. Everything it needs from one
(saving buffers, terminals, result lists, keymaps, buffer-local options,
lifecycle events and user commands) goes through a ``Host``.
"""

import os
import subprocess
from collections import defaultdict
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import COLORS, console
from .indent import detect_filetype
from .keymaps import Keymap
from .notify import ConsoleNotifier, Level, Notify

# Lifecycle events a host emits
BUF_ENTER = "buffer_enter"
DIR_CHANGED = "dir_changed"
FILETYPE = "filetype"

EVENTS = (BUF_ENTER, DIR_CHANGED, FILETYPE)


class Host:
    """Base host: event subscription and user commands, editor operations left abstract."""

    def __init__(self, notify: Notify | None = None) -> None:
        self.notify: Notify = notify or ConsoleNotifier()
        self._handlers: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self.commands: dict[str, tuple[Callable[[], Any], str]] = {}

    # Events

    def subscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """Register handler to be called whenever event is emitted."""
        if event not in EVENTS:
            raise ValueError(f"Unknown event: {event}")
        self._handlers[event].append(handler)

    def unsubscribe(self, event: str, handler: Callable[..., Any]) -> None:
        """Remove handler from event; unknown handlers are ignored."""
        if handler in self._handlers.get(event, ()):
            self._handlers[event].remove(handler)

    def clear_handlers(self) -> None:
        self._handlers.clear()

    def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers[event]):
            handler(*args)

    # User commands

    def add_command(self, name: str, fn: Callable[[], Any], desc: str = "") -> None:
        self.commands[name] = (fn, desc)

    def run_command(self, name: str) -> bool:
        """Run a registered user command.

        Returns:
            True if the command exists, False otherwise.
        """
        entry = self.commands.get(name)
        if entry is None:
            self.notify(f"Not an editor command: {name}", Level.ERROR)
            return False
        entry[0]()
        return True

    # Editor operations

    def current_path(self) -> Path | None:
        """Path of the file being edited, or None when there is no file context."""
        raise NotImplementedError

    def current_filetype(self) -> str | None:
        raise NotImplementedError

    def save_all(self) -> None:
        """Write every modified buffer."""
        raise NotImplementedError

    def open_terminal(self, command: str, cwd: str | None = None) -> int:
        """Run command interactively in a terminal and return its exit code."""
        raise NotImplementedError

    def capture(self, command: str, cwd: str | None = None) -> str:
        """Run command and return its combined stdout and stderr."""
        raise NotImplementedError

    def show_results(self, entries: list, title: str = "") -> None:
        """Replace the result list with entries and display it."""
        raise NotImplementedError

    def add_buffer(self, path: str) -> None:
        """Make path addressable as a buffer without displaying it."""
        raise NotImplementedError

    def set_keymap(self, mode: str, lhs: str, rhs: Any, desc: str | None = None) -> None:
        raise NotImplementedError

    def clear_keymaps(self) -> None:
        raise NotImplementedError

    def set_local_option(self, name: str, value: Any) -> None:
        raise NotImplementedError


class TerminalHost(Host):
    """Host that runs inside a plain terminal session.

    Buffers, keymaps and local options are kept in memory. Shell commands run
    as subprocesses that inherit the terminal.
    """

    def __init__(
        self,
        notify: Notify | None = None,
        out: Console | None = None,
        path: Path | str | None = None,
    ) -> None:
        super().__init__(notify)
        self.console = out or console
        self.buffers: list[str] = []
        self.keymaps: dict[tuple[str, str], Keymap] = {}
        self.options: dict[str, Any] = {}
        self.results: list = []
        self._path: Path | None = None
        self._filetype: str | None = None
        if path:
            self._set_path(Path(path))

    def _set_path(self, path: Path) -> None:
        path = path.expanduser().resolve()
        self._path = path
        self._filetype = detect_filetype(path) if path.is_file() or path.suffix else None

    def current_path(self) -> Path | None:
        return self._path

    def current_filetype(self) -> str | None:
        return self._filetype

    def edit(self, path: Path | str) -> None:
        """Make path the current file and fire the buffer events for it."""
        self._set_path(Path(path))
        self.add_buffer(str(self._path))
        self.emit(BUF_ENTER)
        if self._filetype:
            self.emit(FILETYPE, self._filetype)

    def change_dir(self, path: Path | str) -> None:
        os.chdir(Path(path).expanduser())
        self.emit(DIR_CHANGED)

    def save_all(self) -> None:
        # Buffers are only registered here, never modified in memory
        self.notify("No modified buffers to write", Level.DEBUG)

    def open_terminal(self, command: str, cwd: str | None = None) -> int:
        self.console.print(f"[{COLORS['command']}]$ {escape(command)}[/{COLORS['command']}]")
        try:
            result = subprocess.run(command, shell=True, check=False, cwd=cwd)
        except OSError as e:
            self.notify(f"Error executing command: {e}", Level.ERROR)
            return -1

        if result.returncode != 0:
            self.console.print(f"[dim]Exit code: {result.returncode}[/dim]")
        return result.returncode

    def capture(self, command: str, cwd: str | None = None) -> str:
        result = subprocess.run(
            command,
            shell=True,
            check=False,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
        if result.returncode != 0:
            self.notify(f"Exit code: {result.returncode}", Level.DEBUG)
        return result.stdout or ""

    def show_results(self, entries: list, title: str = "") -> None:
        self.results = list(entries)
        if not entries:
            self.console.print(f"[dim]{escape(title)}: no output[/dim]")
            return

        table = Table(title=title or None, show_header=True, header_style=COLORS["primary"])
        table.add_column("Location", style=COLORS["dim"], no_wrap=True)
        table.add_column("Message")
        for entry in entries:
            table.add_row(escape(entry.location()), escape(entry.text))
        self.console.print(table)

    def add_buffer(self, path: str) -> None:
        if path not in self.buffers:
            self.buffers.append(path)

    def set_keymap(self, mode: str, lhs: str, rhs: Any, desc: str | None = None) -> None:
        self.keymaps[(mode, lhs)] = Keymap(mode=mode, lhs=lhs, rhs=rhs, desc=desc)

    def clear_keymaps(self) -> None:
        self.keymaps.clear()

    def set_local_option(self, name: str, value: Any) -> None:
        self.options[name] = value
