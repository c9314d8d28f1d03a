"""Tests for console notifications."""

import io

from rich.console import Console

from projcfg_cli.notify import ConsoleNotifier, Level


def make_notifier(verbose):
    out = Console(file=io.StringIO(), width=200, highlight=False)
    return ConsoleNotifier(out=out, verbose=verbose), out.file


def test_levels_are_ordered():
    assert Level.DEBUG < Level.INFO < Level.WARN < Level.ERROR


def test_messages_printed_with_markup_escaped():
    notify, buffer = make_notifier(verbose=False)

    notify("Error loading [bold].project.py[/bold]", Level.ERROR)

    assert "Error loading [bold].project.py[/bold]" in buffer.getvalue()


def test_debug_hidden_unless_verbose():
    quiet, quiet_buffer = make_notifier(verbose=False)
    loud, loud_buffer = make_notifier(verbose=True)

    quiet("Project root: /p", Level.DEBUG)
    loud("Project root: /p", Level.DEBUG)

    assert quiet_buffer.getvalue() == ""
    assert "Project root: /p" in loud_buffer.getvalue()
