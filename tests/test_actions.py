"""Tests for build, run and debug dispatch."""

import pytest

from projcfg_cli.actions import Absent, Callback, Shell, Structured, parse_action
from projcfg_cli.errors import DebugBackendUnavailable, ProjectConfigError
from projcfg_cli.files import WalkEnumerator
from projcfg_cli.project_config import ProjectConfigLoader


class TestParseAction:
    """Tests for parse_action function."""

    def test_none_is_absent(self):
        assert parse_action(None) == Absent()

    def test_blank_string_is_absent(self):
        assert parse_action("   ") == Absent()

    def test_string_is_shell(self):
        assert parse_action("make -j4") == Shell("make -j4")

    def test_callable_is_callback(self):
        def build():
            pass

        assert parse_action(build) == Callback(build)

    def test_mapping_is_structured(self):
        assert parse_action({"program": "app.py"}) == Structured({"program": "app.py"})

    def test_other_values_raise(self):
        with pytest.raises(ProjectConfigError):
            parse_action(42)


class TestBuild:
    """Tests for the build action."""

    def test_missing_build_cmd_warns_once(self, loader, host, notifier):
        """Test that an unconfigured build warns once and runs nothing."""
        loader.load()
        notifier.messages.clear()

        loader.actions.build()

        assert notifier.warnings == ["No build command configured for this project"]
        assert len(notifier.messages) == 1
        assert host.captures == []
        assert host.terminals == []
        assert host.saves == 0

    def test_shell_command_captured_into_results(self, loader, host, project, write_project_file):
        write_project_file('config = {"build_cmd": "make", "compiler": "gcc"}\n')
        host.output = "src/main.c:10:5: error: expected ';'\nmake: *** [all] Error 1\n"
        loader.load()

        loader.actions.build()

        assert host.saves == 1
        assert host.captures == [("make", str(project.resolve()))]
        title, entries = host.results
        assert title == "make"
        assert entries[0].filename == "src/main.c"
        assert entries[0].lnum == 10
        assert entries[0].col == 5
        assert entries[0].type == "E"
        assert not entries[1].valid

    def test_shell_command_in_terminal(self, loader, host, project, write_project_file):
        write_project_file('config = {"build_cmd": "cargo build", "build_in_terminal": True}\n')
        loader.load()

        loader.actions.build()

        assert host.terminals == [("cargo build", str(project.resolve()))]
        assert host.captures == []
        assert host.saves == 1

    def test_callable_build(self, loader, host, project, write_project_file):
        write_project_file(
            "from pathlib import Path\n"
            "def build():\n"
            "    Path(__file__).with_name('built').touch()\n"
            "config = {'build_cmd': build}\n"
        )
        loader.load()

        loader.actions.build()

        assert (project / "built").exists()
        assert host.saves == 1
        assert host.captures == []

    def test_failing_callable_is_reported(self, loader, notifier, write_project_file):
        write_project_file(
            "def build():\n"
            "    raise RuntimeError('compiler exploded')\n"
            "config = {'build_cmd': build}\n"
        )
        loader.load()

        loader.actions.build()

        assert notifier.errors == ["build_cmd failed: compiler exploded"]

    def test_table_build_is_rejected(self, loader, host, notifier, write_project_file):
        write_project_file('config = {"build_cmd": {"cmd": "make"}}\n')
        loader.load()

        loader.actions.build()

        assert len(notifier.errors) == 1
        assert host.saves == 0

    def test_unknown_compiler_is_reported(self, loader, host, notifier, write_project_file):
        write_project_file('config = {"build_cmd": "make", "compiler": "fortran77"}\n')
        loader.load()

        loader.actions.build()

        assert notifier.errors == ["compiler not supported: fortran77"]
        assert host.results is None


class TestRun:
    """Tests for the run action."""

    def test_missing_run_cmd_warns(self, loader, host, notifier):
        loader.load()

        loader.actions.run()

        assert "No run command configured for this project" in notifier.warnings
        assert host.terminals == []

    def test_run_opens_terminal(self, loader, host, project, write_project_file):
        write_project_file('config = {"run_cmd": "python -m app"}\n')
        loader.load()

        loader.actions.run()

        assert host.terminals == [("python -m app", str(project.resolve()))]
        assert host.saves == 1


class TestDebug:
    """Tests for the debug action."""

    def test_backend_unavailable(self, host, notifier, write_project_file):
        def unavailable(_host):
            raise DebugBackendUnavailable("debugpy is not installed")

        write_project_file('config = {"debug_config": {"program": "app.py"}}\n')
        loader = ProjectConfigLoader(
            host,
            notify=notifier,
            enumerator=WalkEnumerator(),
            debug_backend_factory=unavailable,
        )
        loader.load()
        notifier.messages.clear()

        loader.actions.debug()

        assert notifier.errors == ["Debug backend is not available: debugpy is not installed"]
        assert host.saves == 0

    def test_backend_unavailable_does_not_affect_build(self, host, notifier, write_project_file):
        def unavailable(_host):
            raise DebugBackendUnavailable("debugpy is not installed")

        write_project_file('config = {"build_cmd": "make", "build_in_terminal": True}\n')
        loader = ProjectConfigLoader(
            host, notify=notifier, enumerator=WalkEnumerator(), debug_backend_factory=unavailable
        )
        loader.load()

        loader.actions.debug()
        loader.actions.build()

        assert [cmd for cmd, _ in host.terminals] == ["make"]

    def test_missing_debug_config_warns(self, loader, backend, notifier):
        loader.load()

        loader.actions.debug()

        assert "No debug configuration for this project" in notifier.warnings
        backend.run.assert_not_called()

    def test_table_passed_to_backend(self, loader, backend, host, write_project_file):
        write_project_file(
            'config = {"debug_config": {"program": "app.py", "args": ["--port", "8000"]}}\n'
        )
        loader.load()

        loader.actions.debug()

        backend.run.assert_called_once_with({"program": "app.py", "args": ["--port", "8000"]})
        assert host.saves == 1

    def test_callable_receives_backend(self, loader, backend, write_project_file):
        write_project_file(
            "def debug(dap):\n"
            "    dap.run({'module': 'app'})\n"
            "config = {'debug_config': debug}\n"
        )
        loader.load()

        loader.actions.debug()

        backend.run.assert_called_once_with({"module": "app"})

    def test_shell_debug_is_rejected(self, loader, backend, notifier, write_project_file):
        write_project_file('config = {"debug_config": "gdb ./app"}\n')
        loader.load()

        loader.actions.debug()

        assert len(notifier.errors) == 1
        backend.run.assert_not_called()
