"""Interactive session that binds the project keymaps in the terminal."""

import shlex
from collections.abc import Callable

from prompt_toolkit import PromptSession
from prompt_toolkit.application import run_in_terminal
from prompt_toolkit.key_binding import KeyBindings
from rich.markup import escape
from rich.text import Text

from .config import COLORS, COMMANDS, console, settings
from .keymaps import Keymap, translate_keys
from .notify import Level

HELP = {
    ":e PATH": "Edit PATH (loads the project config for it)",
    ":cd DIR": "Change directory",
    ":ls": "List buffers",
    ":map": "List keymaps",
    ":set": "Show buffer-local options",
    ":!CMD": "Run a shell command in the project root",
    ":q": "Quit",
}


class ProjectShell:
    """A prompt loop over a TerminalHost.

    Normal-mode keymaps are bound to keys of the prompt; lines typed at the
    prompt are editor-style commands (``:ProjectBuild``, ``:e file.py``).
    """

    def __init__(self, host, loader) -> None:
        self.host = host
        self.loader = loader
        self.running = False

    def _dispatch(self, rhs: str | Callable[[], object]) -> None:
        if callable(rhs):
            rhs()
        else:
            self.execute(rhs)

    def build_key_bindings(self) -> KeyBindings:
        """Bind every normal-mode keymap of the host to the prompt."""
        bindings = KeyBindings()

        def make_handler(keymap: Keymap):
            def handler(event):
                run_in_terminal(lambda: self._dispatch(keymap.rhs))

            return handler

        for (mode, lhs), keymap in self.host.keymaps.items():
            if mode != "n":
                continue
            try:
                keys = translate_keys(lhs, leader=settings.leader)
                # prompt_toolkit rejects key names it doesn't know, e.g. c-.
                bindings.add(*keys)(make_handler(keymap))
            except ValueError as e:
                self.host.notify(f"Keymap {lhs} skipped: {e}", Level.WARN)

        return bindings

    def execute(self, line: str) -> None:
        """Execute one command line."""
        line = line.strip()
        if line.endswith("<CR>"):
            line = line[: -len("<CR>")].rstrip()
        if not line:
            return
        if not line.startswith(":"):
            # Bare strings from keymaps are shell commands
            self.host.open_terminal(line, cwd=self.loader.get().get("root_dir"))
            return

        line = line[1:].strip()
        if line.startswith("!"):
            self.host.open_terminal(line[1:].strip(), cwd=self.loader.get().get("root_dir"))
            return

        name, _, arg = line.partition(" ")
        arg = arg.strip()
        if name in ("q", "quit", "qa"):
            self.running = False
        elif name in ("e", "edit"):
            if not arg:
                self.host.notify("Argument required", Level.ERROR)
            else:
                self.host.edit(shlex.split(arg)[0])
        elif name == "cd":
            try:
                self.host.change_dir(arg or "~")
            except OSError as e:
                self.host.notify(f"Can't change directory: {e}", Level.ERROR)
        elif name in ("ls", "buffers"):
            self.show_buffers()
        elif name == "map":
            self.show_keymaps()
        elif name == "set":
            self.show_options()
        elif name in ("h", "help"):
            self.show_help()
        else:
            self.host.run_command(name)

    def show_buffers(self) -> None:
        if not self.host.buffers:
            console.print("[dim]No buffers[/dim]")
            return
        for i, path in enumerate(self.host.buffers, 1):
            console.print(f"[dim]{i:>4}[/dim] {escape(path)}")

    def show_keymaps(self) -> None:
        for (mode, lhs), keymap in sorted(self.host.keymaps.items()):
            rhs = keymap.rhs if isinstance(keymap.rhs, str) else "<function>"
            line = Text(f"{mode}  {lhs:<12} ", style=COLORS["primary"])
            line.append(rhs)
            if keymap.desc:
                line.append(f"  {keymap.desc}", style=COLORS["dim"])
            console.print(line)

    def show_options(self) -> None:
        filetype = self.host.current_filetype() or "(none)"
        console.print(f"[dim]filetype={escape(filetype)}[/dim]")
        for name, value in sorted(self.host.options.items()):
            console.print(f"  {name}={value}")

    def show_help(self) -> None:
        console.print(Text("Commands:", style=f"bold {COLORS['primary']}"))
        for cmd, desc in {**{f":{k}": v for k, v in COMMANDS.items()}, **HELP}.items():
            console.print(f"  [{COLORS['command']}]{escape(cmd):<20}[/] [dim]{desc}[/dim]")
        console.print()
        self.show_keymaps()

    def run(self) -> None:
        """Prompt for commands until :q, Ctrl+D or Ctrl+C."""
        session: PromptSession = PromptSession()
        self.running = True
        console.print("[dim]Type :help for commands, :q to quit.[/dim]")
        while self.running:
            root = self.loader.get().get("root_dir") or ""
            try:
                line = session.prompt(
                    f"{root} > ",
                    key_bindings=self.build_key_bindings(),
                )
            except (EOFError, KeyboardInterrupt):
                break
            self.execute(line)
