"""Command-line interface for nodews: find the workspace root, list and pick packages."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from nodews import __version__
from nodews.api import ResolveResult, find_root, resolve
from nodews.core.detector import detect
from nodews.errors import EnumerationError, WorkspaceError
from nodews.log import default_level, setup_logging

ROOT_ENV = "NODEWS_ROOT"
DEFAULT_SHELL_FUNCTION = "nws"

SHELL_FUNCTION_TEMPLATE = """\
{name}() {{
    local dir
    dir="$(command nodews pick "$@")" || return
    [ -n "$dir" ] && cd "$dir"
}}
"""


def _start_directory(args: argparse.Namespace) -> Path:
    return Path(args.directory) if getattr(args, "directory", None) else Path.cwd()


def _resolve(args: argparse.Namespace) -> ResolveResult:
    return resolve(
        _start_directory(args),
        root=getattr(args, "root", None),
        timeout=getattr(args, "timeout", None),
    )


def _print_entries(result: ResolveResult) -> None:
    """Print entries as an aligned name/path table."""
    print(f"Node Workspaces - {result.manager.value} ({result.root_directory})\n")
    if not result.entries:
        print("  (no workspaces)")
        return
    width = max(len(e.name) for e in result.entries)
    for entry in result.entries:
        print(f"  {entry.name:<{width}}  {entry.path}")


def cmd_root(args: argparse.Namespace) -> int:
    """Print the workspace root directory."""
    workspace = find_root(_start_directory(args), root=args.root)
    if args.json:
        print(json.dumps(workspace.to_dict(), indent=2))
    else:
        print(workspace.root_directory)
    return 0


def cmd_detect(args: argparse.Namespace) -> int:
    """Print the package manager that governs the workspace."""
    workspace = find_root(_start_directory(args), root=args.root)
    kind = detect(workspace)
    if args.json:
        print(json.dumps({"manager": kind.value, "root": str(workspace.root_directory)}, indent=2))
    else:
        print(kind.value)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List the workspace's packages."""
    result = _resolve(args)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        _print_entries(result)
    return 0


def cmd_pick(args: argparse.Namespace) -> int:
    """Choose a package and print its directory (for `cd "$(nodews pick)"`)."""
    query = getattr(args, "query", None)
    if query:
        result = _resolve(args)
        entry = result.find(query)
        if entry is None:
            print(f"No workspace named {query!r} in {result.root_directory}", file=sys.stderr)
            return 1
        print(entry.path)
        return 0

    from nodews.tui.app import pick

    entry = pick(
        _start_directory(args),
        root=getattr(args, "root", None),
        timeout=getattr(args, "timeout", None),
    )
    if entry is None:
        return 1
    print(entry.path)
    return 0


def cmd_tui(args: argparse.Namespace) -> int:
    """Launch the interactive picker."""
    return cmd_pick(argparse.Namespace(**{**vars(args), "query": None}))


def cmd_shell_init(args: argparse.Namespace) -> int:
    """Print a shell function that cds into the picked package."""
    print(SHELL_FUNCTION_TEMPLATE.format(name=args.name), end="")
    return 0


def _report_error(error: WorkspaceError, verbose: bool) -> None:
    print(f"Error: {error}", file=sys.stderr)
    if verbose and isinstance(error, EnumerationError) and error.raw:
        print("Output was:", file=sys.stderr)
        print(error.raw, file=sys.stderr)


def _positive_float(value: str) -> float:
    """argparse type for --timeout."""
    try:
        parsed = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if not parsed > 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nodews",
        description="Find a Node.js monorepo's workspace root and jump between its packages.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-C",
        "--directory",
        metavar="PATH",
        default=None,
        help="Start searching for the workspace root here (default: current directory)",
    )
    parser.add_argument(
        "--root",
        metavar="PATH",
        default=os.environ.get(ROOT_ENV) or None,
        help=f"Use PATH as the workspace root instead of searching (env: {ROOT_ENV})",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        help="Seconds to wait for the package manager (env: NODEWS_TIMEOUT, default: 60)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output and show raw package manager output on errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # nodews root
    root_parser = subparsers.add_parser(
        "root",
        help="Print the workspace root directory",
        description="Search upward for the outermost package.json that declares workspaces.",
    )
    root_parser.add_argument("--json", action="store_true", help="Output as JSON")
    root_parser.set_defaults(func=cmd_root)

    # nodews detect
    detect_parser = subparsers.add_parser(
        "detect",
        help="Print the workspace's package manager",
        description="Detect npm, yarn, yarn-berry or pnpm from lockfiles and package.json.",
    )
    detect_parser.add_argument("--json", action="store_true", help="Output as JSON")
    detect_parser.set_defaults(func=cmd_detect)

    # nodews list
    list_parser = subparsers.add_parser(
        "list",
        help="List workspace packages",
        description="Ask the package manager for the workspace's packages and their paths.",
    )
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    list_parser.set_defaults(func=cmd_list)

    # nodews pick
    pick_parser = subparsers.add_parser(
        "pick",
        help="Pick a package and print its path",
        description=(
            "Open the picker, or select the package named QUERY directly, "
            "and print its directory on stdout."
        ),
    )
    pick_parser.add_argument(
        "query",
        nargs="?",
        help="Optional: package name to select without the picker",
    )
    pick_parser.set_defaults(func=cmd_pick)

    # nodews shell-init
    shell_parser = subparsers.add_parser(
        "shell-init",
        help="Print a shell function that cds into a picked package",
        description='Add `eval "$(nodews shell-init)"` to your shell rc file.',
    )
    shell_parser.add_argument(
        "--name",
        default=DEFAULT_SHELL_FUNCTION,
        help=f"Name of the shell function (default: {DEFAULT_SHELL_FUNCTION})",
    )
    shell_parser.set_defaults(func=cmd_shell_init)

    # nodews tui (default if no command)
    tui_parser = subparsers.add_parser(
        "tui",
        help="Launch the interactive picker",
        description="Browse workspace packages and print the chosen one's path.",
    )
    tui_parser.set_defaults(func=cmd_tui)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the nodews CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(default_level(args.verbose))

    func = getattr(args, "func", None) or cmd_tui
    try:
        return func(args)
    except WorkspaceError as e:
        _report_error(e, args.verbose)
        return 1


if __name__ == "__main__":
    sys.exit(main())
