"""Tests for the command line entry point."""

import json
from pathlib import Path

import pytest

from projcfg_cli.config import settings
from projcfg_cli.main import _printable, parse_args, run_command


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep the user's own defaults file and enumerator out of the tests."""
    monkeypatch.setattr(settings, "defaults_path", tmp_path / "defaults.json")
    monkeypatch.setattr(settings, "enumerator", "walk")
    monkeypatch.setattr(settings, "config_file", ".project.py")
    monkeypatch.setattr(settings, "verbose", False)


class TestParseArgs:
    """Tests for parse_args function."""

    def test_no_command(self):
        assert parse_args([]).command is None

    def test_global_options(self):
        args = parse_args(["--path", "src/app.py", "--verbose", "build"])

        assert args.command == "build"
        assert args.path == "src/app.py"
        assert args.verbose is True

    def test_show_filetype(self):
        assert parse_args(["show", "--filetype", "lua"]).filetype == "lua"

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            parse_args(["--version"])

        assert capsys.readouterr().out.startswith("projcfg ")


def test_printable_names_functions():
    def build():
        pass

    assert _printable({"build_cmd": build, "keymaps": {"x": [build, "y"]}}) == {
        "build_cmd": "<function build>",
        "keymaps": {"x": ["<function build>", "y"]},
    }


def test_printable_stringifies_other_values():
    assert _printable({"root": Path("/srv/app"), "tags": {"a"}, "pair": ("x", 1)}) == {
        "root": "/srv/app",
        "tags": "{'a'}",
        "pair": ["x", 1],
    }


class TestRunCommand:
    """Tests for run_command function."""

    def test_root(self, project, capsys):
        assert run_command(parse_args(["--path", str(project / "src"), "root"])) == 0

        assert capsys.readouterr().out.strip() == str(project.resolve())

    def test_show(self, project, write_project_file, capsys):
        write_project_file('config = {"build_cmd": "make", "indent": {"shiftwidth": 4}}\n')

        run_command(parse_args(["--path", str(project), "show", "--filetype", "python"]))

        output = json.loads(capsys.readouterr().out)
        assert output["build_cmd"] == "make"
        assert output["resolved_indent"]["filetype"] == "python"
        assert output["resolved_indent"]["shiftwidth"] == 4

    def test_show_with_non_json_values(self, project, write_project_file, capsys):
        write_project_file(
            "from pathlib import Path\n"
            "config = {'build_dir': Path('build'), 'tags': {'ci'}}\n"
        )

        assert run_command(parse_args(["--path", str(project), "show"])) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["build_dir"] == "build"
        assert output["tags"] == "{'ci'}"

    def test_user_defaults_layer(self, project, capsys, tmp_path):
        (tmp_path / "defaults.json").write_text(json.dumps({"compiler": "gcc"}))

        run_command(parse_args(["--path", str(project), "show"]))

        assert json.loads(capsys.readouterr().out)["compiler"] == "gcc"

    def test_invalid_user_defaults_reported(self, project, capsys, tmp_path):
        (tmp_path / "defaults.json").write_text("{broken")

        assert run_command(parse_args(["--path", str(project), "root"])) == 0

        out = capsys.readouterr().out
        assert "Error loading" in out
        assert str(project.resolve()) in out

    def test_build_runs_callable(self, project, write_project_file):
        write_project_file(
            "from pathlib import Path\n"
            "def build():\n"
            "    Path(__file__).with_name('built').touch()\n"
            "config = {'build_cmd': build}\n"
        )

        run_command(parse_args(["--path", str(project), "build"]))

        assert (project / "built").exists()

    def test_missing_run_cmd_warns(self, project, capsys):
        run_command(parse_args(["--path", str(project), "run"]))

        assert "No run command configured for this project" in capsys.readouterr().out

    def test_open_files_lists_paths(self, project, write_project_file, capsys):
        write_project_file('config = {"file_extensions": ["py"]}\n')
        (project / "src" / "pkg" / "mod.py").write_text("")

        run_command(parse_args(["--path", str(project), "open-files"]))

        out = capsys.readouterr().out
        assert str(project.resolve() / "src" / "pkg" / "mod.py") in out
        assert str(project.resolve() / ".project.py") in out
        assert "Opened 2 files" in out

    def test_reload(self, project, capsys):
        run_command(parse_args(["--path", str(project), "reload"]))

        assert "Project configuration reloaded" in capsys.readouterr().out
