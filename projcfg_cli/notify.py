"""Notification channel shared by the loader, actions and hosts."""

from collections.abc import Callable
from enum import IntEnum

from rich.console import Console
from rich.markup import escape

from .config import COLORS, console, settings


class Level(IntEnum):
    """Notification severities, ordered like the editor's log levels."""

    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4


# Anything callable as notify(message, level) can act as a notification sink
Notify = Callable[[str, Level], None]

_STYLES = {
    Level.ERROR: ("✗", COLORS["error"]),
    Level.WARN: ("!", COLORS["warning"]),
    Level.INFO: ("•", COLORS["info"]),
    Level.DEBUG: ("·", COLORS["dim"]),
}


class ConsoleNotifier:
    """Render notifications on the rich console.

    Debug messages are dropped unless ``verbose`` is set.
    """

    def __init__(self, out: Console | None = None, verbose: bool | None = None) -> None:
        self.console = out or console
        self.verbose = settings.verbose if verbose is None else verbose

    def __call__(self, message: str, level: Level = Level.INFO) -> None:
        if level == Level.DEBUG and not self.verbose:
            return
        icon, color = _STYLES[level]
        self.console.print(f"[{color}]{icon}[/{color}] {escape(message)}")
