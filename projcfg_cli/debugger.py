"""Debug backend discovery and the debugpy-backed backend."""

import importlib.util
import shlex
import sys
from collections.abc import Mapping
from typing import Any

from .errors import DebugBackendUnavailable, ProjectConfigError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5678


class DebugpyBackend:
    """Launch programs under debugpy in the host terminal.

    ``run()`` accepts a launch configuration:

        {
            "program": "app.py",        # or "module": "pkg.main"
            "args": ["--flag"],
            "cwd": "/path/to/project",
            "host": "127.0.0.1",
            "port": 5678,
            "wait_for_client": True,
        }
    """

    def __init__(self, host, python: str | None = None) -> None:
        self.host = host
        self.python = python or sys.executable

    def build_command(self, launch: Mapping[str, Any]) -> list[str]:
        """Build the debugpy command line for a launch configuration.

        Raises:
            ProjectConfigError: If the configuration names neither a program nor a module.
        """
        program = launch.get("program")
        module = launch.get("module")
        if not program and not module:
            raise ProjectConfigError("debug_config needs a 'program' or a 'module'")

        address = f"{launch.get('host', DEFAULT_HOST)}:{launch.get('port', DEFAULT_PORT)}"
        argv = [self.python, "-m", "debugpy", "--listen", address]
        if launch.get("wait_for_client", True):
            argv.append("--wait-for-client")
        argv += ["-m", str(module)] if module else [str(program)]
        argv += [str(arg) for arg in launch.get("args") or []]
        return argv

    def run(self, launch: Mapping[str, Any]) -> int:
        argv = self.build_command(launch)
        return self.host.open_terminal(shlex.join(argv), cwd=launch.get("cwd"))


def get_debug_backend(host) -> DebugpyBackend:
    """Return the debug backend for host.

    Raises:
        DebugBackendUnavailable: If debugpy is not installed.
    """
    if importlib.util.find_spec("debugpy") is None:
        raise DebugBackendUnavailable("debugpy is not installed")
    return DebugpyBackend(host)
