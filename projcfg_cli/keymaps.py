"""Keymap declarations: default action keys, user keymaps and key notation."""

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import ProjectConfigError
from .notify import Level

# (key, action attribute, description), registered in normal mode on every load
DEFAULT_KEYMAPS = (
    ("<F1>", "build", "Build project"),
    ("<F2>", "debug", "Debug project"),
    ("<F3>", "run", "Run project"),
    ("<F4>", "open_files", "Open project files"),
)

_SPECIAL_KEYS = {
    "cr": "enter",
    "enter": "enter",
    "return": "enter",
    "esc": "escape",
    "tab": "tab",
    "s-tab": "s-tab",
    "bs": "backspace",
    "space": " ",
    "up": "up",
    "down": "down",
    "left": "left",
    "right": "right",
    "home": "home",
    "end": "end",
    "del": "delete",
    "pageup": "pageup",
    "pagedown": "pagedown",
    "lt": "<",
}

_TOKEN = re.compile(r"<([^<>]+)>|(.)")


@dataclass(frozen=True)
class Keymap:
    """A single key binding.

    ``rhs`` is either a command string or a callable taking no arguments.
    """

    mode: str
    lhs: str
    rhs: str | Callable[[], Any]
    desc: str | None = None


def parse_keymap(lhs: str, action: Any) -> list[Keymap]:
    """Turn one entry of the ``keymaps`` option into keymaps.

    Accepted shapes:
        ``"cmd"``: a command in normal mode
        a callable: called in normal mode
        ``{"cmd": ..., "mode": "n" | ["n", "v"], "desc": ...}``
        ``["cmd", {"mode": ..., "desc": ...}]``: command first, options after

    Raises:
        ProjectConfigError: If action has none of these shapes or lacks a command.
    """
    if isinstance(action, str) or callable(action):
        return [Keymap(mode="n", lhs=lhs, rhs=action)]

    if isinstance(action, Mapping):
        options = action
        rhs = action.get("cmd")
    elif isinstance(action, Sequence) and action:
        rhs = action[0]
        options = action[1] if len(action) > 1 and isinstance(action[1], Mapping) else {}
        rhs = options.get("cmd", rhs)
    else:
        raise ProjectConfigError(f"Invalid keymap for {lhs}: {action!r}")

    if not (isinstance(rhs, str) or callable(rhs)):
        raise ProjectConfigError(f"Keymap {lhs} has no command")

    modes = options.get("mode") or "n"
    if isinstance(modes, str):
        modes = [modes]
    return [Keymap(mode=mode, lhs=lhs, rhs=rhs, desc=options.get("desc")) for mode in modes]


def setup_keymaps(host, config: dict[str, Any], actions, notify=None) -> list[Keymap]:
    """Register the default action keys and the user keymaps on host.

    Previously registered keymaps are cleared first, so keymaps dropped from the
    project file disappear on reload. Invalid user entries are reported through
    notify (the host's by default) and skipped.
    """
    host.clear_keymaps()
    registered: list[Keymap] = []

    for lhs, name, desc in DEFAULT_KEYMAPS:
        keymap = Keymap(mode="n", lhs=lhs, rhs=getattr(actions, name), desc=desc)
        host.set_keymap(keymap.mode, keymap.lhs, keymap.rhs, keymap.desc)
        registered.append(keymap)

    for lhs, action in (config.get("keymaps") or {}).items():
        try:
            keymaps = parse_keymap(lhs, action)
        except ProjectConfigError as e:
            (notify or host.notify)(str(e), Level.ERROR)
            continue
        for keymap in keymaps:
            host.set_keymap(keymap.mode, keymap.lhs, keymap.rhs, keymap.desc)
            registered.append(keymap)

    return registered


def translate_keys(lhs: str, leader: str = "\\") -> list[str]:
    """Translate editor key notation into a prompt_toolkit key sequence.

    ``<F5>`` -> ``["f5"]``, ``<C-b>`` -> ``["c-b"]``, ``<M-x>`` -> ``["escape", "x"]``,
    ``<leader>b`` -> ``[leader, "b"]``, ``gd`` -> ``["g", "d"]``.

    Raises:
        ValueError: If lhs contains a key name that has no equivalent.
    """
    keys: list[str] = []
    for match in _TOKEN.finditer(lhs):
        name, char = match.groups()
        if char is not None:
            keys.append(char)
            continue

        lowered = name.lower()
        if lowered == "leader":
            keys.extend(translate_keys(leader, leader=""))
        elif re.fullmatch(r"(?:c-)?f\d{1,2}", lowered):
            keys.append(lowered)
        elif re.fullmatch(r"s-f\d{1,2}", lowered):
            # Terminals report shifted function keys as F13-F24
            keys.append(f"f{int(lowered[3:]) + 12}")
        elif lowered in _SPECIAL_KEYS:
            keys.append(_SPECIAL_KEYS[lowered])
        elif re.fullmatch(r"c-.", lowered):
            keys.append(lowered)
        elif re.fullmatch(r"[ma]-.", lowered):
            keys.extend(["escape", name[-1]])
        else:
            raise ValueError(f"Unsupported key: <{name}>")

    if not keys:
        raise ValueError("Empty key sequence")
    return keys
