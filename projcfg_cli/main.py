"""Main entry point for the projcfg CLI."""

import argparse
import json
import sys

# Only import lightweight modules at top level for faster startup
from projcfg_cli.version import __version__

# Subcommand -> user command it triggers
ACTION_COMMANDS = {
    "reload": "ProjectReload",
    "build": "ProjectBuild",
    "run": "ProjectRun",
    "debug": "ProjectDebug",
    "open-files": "ProjectOpenFiles",
}


def parse_args(argv: list[str] | None = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="projcfg",
        description="Per-project build, run, debug and editor settings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("reload", help="Reload project configuration")
    subparsers.add_parser("build", help="Build project")
    subparsers.add_parser("run", help="Run project")
    subparsers.add_parser("debug", help="Debug project")
    subparsers.add_parser("open-files", help="List the project files that would be opened")
    subparsers.add_parser("root", help="Print the project root")

    show = subparsers.add_parser("show", help="Print the effective configuration as JSON")
    show.add_argument(
        "--filetype",
        help="Also print the indent options in force for this filetype",
    )

    subparsers.add_parser("shell", help="Interactive session with project keymaps bound")

    parser.add_argument(
        "--path",
        help="File or directory to start project discovery from (default: cwd)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug messages",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show the version and exit",
    )

    return parser.parse_args(argv)


def _printable(value):
    """Make a configuration value JSON-friendly (functions shown by name)."""
    if isinstance(value, dict):
        return {key: _printable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_printable(item) for item in value]
    if callable(value):
        return f"<function {getattr(value, '__name__', repr(value))}>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def run_command(args) -> int:
    """Build the host and loader for args and run the requested command."""
    from projcfg_cli.config import console, load_user_defaults, settings
    from projcfg_cli.errors import ProjectConfigError
    from projcfg_cli.host import TerminalHost
    from projcfg_cli.indent import resolve_indent
    from projcfg_cli.notify import ConsoleNotifier, Level
    from projcfg_cli.project_config import ProjectConfigLoader

    notify = ConsoleNotifier(verbose=args.verbose or settings.verbose)
    host = TerminalHost(notify=notify, path=args.path)

    try:
        options = load_user_defaults(settings.defaults_path)
    except ProjectConfigError as e:
        notify(str(e), Level.ERROR)
        options = {}

    interactive = args.command == "shell"
    loader = ProjectConfigLoader(host, options=options, open_files_on_load=interactive)

    if interactive:
        from projcfg_cli.shell import ProjectShell

        loader.setup()
        ProjectShell(host, loader).run()
        return 0

    loader.register_commands()
    if args.command == "reload":
        host.run_command(ACTION_COMMANDS["reload"])
        return 0

    config = loader.load()

    if args.command in ACTION_COMMANDS:
        host.run_command(ACTION_COMMANDS[args.command])
        if args.command == "open-files":
            for path in host.buffers:
                console.print(path, markup=False, highlight=False, soft_wrap=True)
    elif args.command == "root":
        console.print(config["root_dir"], markup=False, highlight=False, soft_wrap=True)
    elif args.command == "show":
        output = _printable(config)
        if args.filetype:
            output["resolved_indent"] = {
                "filetype": args.filetype,
                **resolve_indent(config, args.filetype),
            }
        console.print_json(json.dumps(output))
    return 0


def cli_main() -> None:
    """Entry point for console script."""
    from projcfg_cli.config import console

    try:
        args = parse_args()
        if args.command is None:
            parse_args(["--help"])
        sys.exit(run_command(args))
    except KeyboardInterrupt:
        # Clean exit on Ctrl+C - suppress ugly traceback
        console.print("\n\n[yellow]Interrupted[/yellow]")
        sys.exit(0)


if __name__ == "__main__":
    cli_main()
