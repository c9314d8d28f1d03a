"""Shared pytest fixtures and configuration."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from projcfg_cli.files import WalkEnumerator
from projcfg_cli.host import Host
from projcfg_cli.keymaps import Keymap
from projcfg_cli.notify import Level
from projcfg_cli.project_config import ProjectConfigLoader


class RecordingNotifier:
    """Notification sink that keeps every message."""

    def __init__(self):
        self.messages: list[tuple[str, Level]] = []

    def __call__(self, message, level=Level.INFO):
        self.messages.append((message, level))

    def at(self, level):
        return [message for message, lvl in self.messages if lvl == level]

    @property
    def errors(self):
        return self.at(Level.ERROR)

    @property
    def warnings(self):
        return self.at(Level.WARN)

    @property
    def infos(self):
        return self.at(Level.INFO)


class FakeHost(Host):
    """In-memory host that records what the loader asks of it."""

    def __init__(self, notify, path=None, filetype=None, output=""):
        super().__init__(notify)
        self.path = Path(path) if path else None
        self.filetype = filetype
        self.output = output
        self.saves = 0
        self.terminals: list[tuple[str, str | None]] = []
        self.captures: list[tuple[str, str | None]] = []
        self.results = None
        self.buffers: list[str] = []
        self.keymaps: dict[tuple[str, str], Keymap] = {}
        self.options: dict = {}

    def current_path(self):
        return self.path

    def current_filetype(self):
        return self.filetype

    def save_all(self):
        self.saves += 1

    def open_terminal(self, command, cwd=None):
        self.terminals.append((command, cwd))
        return 0

    def capture(self, command, cwd=None):
        self.captures.append((command, cwd))
        return self.output

    def show_results(self, entries, title=""):
        self.results = (title, list(entries))

    def add_buffer(self, path):
        if path not in self.buffers:
            self.buffers.append(path)

    def set_keymap(self, mode, lhs, rhs, desc=None):
        self.keymaps[(mode, lhs)] = Keymap(mode=mode, lhs=lhs, rhs=rhs, desc=desc)

    def clear_keymaps(self):
        self.keymaps.clear()

    def set_local_option(self, name, value):
        self.options[name] = value


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def project(tmp_path):
    """A project directory marked by .git, with a nested source directory."""
    root = tmp_path / "project"
    (root / ".git").mkdir(parents=True)
    (root / "src" / "pkg").mkdir(parents=True)
    return root


@pytest.fixture
def write_project_file(project):
    """Write .project.py at the project root."""

    def write(source: str) -> Path:
        path = project / ".project.py"
        path.write_text(source)
        return path

    return write


@pytest.fixture
def host(notifier, project):
    return FakeHost(notifier, path=project / "src" / "pkg")


@pytest.fixture
def backend():
    return MagicMock()


@pytest.fixture
def loader(host, notifier, backend):
    """Loader over the fake host; files are listed in-process."""
    return ProjectConfigLoader(
        host,
        notify=notifier,
        enumerator=WalkEnumerator(),
        debug_backend_factory=lambda _host: backend,
        config_file=".project.py",
    )
