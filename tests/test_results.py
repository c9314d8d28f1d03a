"""Tests for build output parsing."""

import pytest

from projcfg_cli.results import ResultEntry, parse_output


class TestParseOutput:
    """Tests for parse_output function."""

    def test_generic_is_default(self):
        entries = parse_output("app/main.py:3: error: Name 'x' is not defined\n")

        assert entries == [
            ResultEntry(
                text="Name 'x' is not defined", filename="app/main.py", lnum=3, type="E"
            )
        ]

    def test_gcc_with_column_and_plain_lines(self):
        output = "main.c: In function 'main':\nmain.c:4:9: warning: unused variable 'y'\n"

        entries = parse_output(output, "gcc")

        assert not entries[0].valid
        assert entries[0].text == "main.c: In function 'main':"
        assert entries[1].location() == "main.c:4:9"
        assert entries[1].type == "W"

    def test_python_traceback(self):
        output = (
            "Traceback (most recent call last):\n"
            '  File "app.py", line 12, in <module>\n'
            "    main()\n"
            "ZeroDivisionError: division by zero\n"
        )

        entries = parse_output(output, "python")

        assert [e.text for e in entries] == [
            "Traceback (most recent call last):",
            "<module>",
            "ZeroDivisionError: division by zero",
        ]
        assert entries[1].filename == "app.py"
        assert entries[1].lnum == 12

    def test_tsc(self):
        entries = parse_output("src/index.ts(5,10): error TS2322: Type mismatch.", "tsc")

        assert entries[0].location() == "src/index.ts:5:10"
        assert entries[0].text == "TS2322: Type mismatch."

    def test_rustc_header_and_location(self):
        output = (
            "error[E0425]: cannot find value `x` in this scope\n"
            " --> src/main.rs:2:5\n"
            "error: aborting due to previous error\n"
        )

        entries = parse_output(output, "cargo")

        assert entries[0].text == "cannot find value `x` in this scope"
        assert entries[0].location() == "src/main.rs:2:5"
        assert entries[0].type == "E"
        assert entries[1] == ResultEntry(text="error: aborting due to previous error")

    def test_blank_lines_dropped(self):
        assert parse_output("\n\n   \n") == []

    def test_unknown_compiler(self):
        with pytest.raises(ValueError, match="compiler not supported: msbuild"):
            parse_output("", "msbuild")
