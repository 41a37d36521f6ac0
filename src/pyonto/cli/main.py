"""CLI entry point for pyonto.

Usage::

    pyonto tell -g graph.json --create "class Person"
    pyonto tell -g graph.json "Student subClassOf Person"
    pyonto ask  -g graph.json --type instances "Person and Teacher"
    pyonto materialize -g graph.json --inferred-only
    pyonto repl [-g graph.json]
"""

from __future__ import annotations

import argparse
import logging
import sys

from pyonto._version import __version__
from pyonto.query import QueryType

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _add_output_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--json", action="store_true", help="Output as JSON (pipe-friendly)",
    )
    group.add_argument(
        "-q", "--quiet", action="store_true", help="Suppress output; rely on exit code",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the ``pyonto`` CLI."""
    parser = argparse.ArgumentParser(
        prog="pyonto",
        description="pyonto: ontology classification and class-expression queries",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log reasoning steps to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- tell ---
    tell_parser = subparsers.add_parser("tell", help="Add entities, relations or axioms")
    tell_parser.add_argument("-g", "--graph", required=True, help="Path to JSON graph file")
    tell_parser.add_argument(
        "--create", action="store_true", help="Create the graph file if missing",
    )
    tell_parser.add_argument(
        "statement", nargs="?", default=None,
        help='Statement: "class Person", "Cat subClassOf Animal", ... (use - for stdin)',
    )
    _add_output_flags(tell_parser)
    tell_parser.add_argument(
        "--batch", metavar="FILE",
        help="Read statements from FILE (use - for stdin), one per line",
    )

    # --- ask ---
    ask_parser = subparsers.add_parser("ask", help="Query a class expression")
    ask_parser.add_argument("-g", "--graph", required=True, help="Path to JSON graph file")
    ask_parser.add_argument(
        "-t", "--type", choices=[t.value for t in QueryType],
        default=QueryType.SUBCLASSES.value, help="Query type (default: subclasses)",
    )
    ask_parser.add_argument(
        "--structured", action="store_true",
        help="Parse with operator precedence and parentheses instead of textual splitting",
    )
    ask_parser.add_argument(
        "query", nargs="?", default=None,
        help='Class expression: "Person and teaches some Course" (use - for stdin)',
    )
    _add_output_flags(ask_parser)
    ask_parser.add_argument(
        "--batch", metavar="FILE",
        help="Read queries from FILE (use - for stdin), one per line",
    )

    # --- materialize ---
    mat_parser = subparsers.add_parser("materialize", help="Show inferred relations")
    mat_parser.add_argument("-g", "--graph", required=True, help="Path to JSON graph file")
    mat_parser.add_argument(
        "--inferred-only", action="store_true", help="Omit asserted relations",
    )
    _add_output_flags(mat_parser)

    # --- repl ---
    repl_parser = subparsers.add_parser("repl", help="Interactive REPL")
    repl_parser.add_argument("-g", "--graph", default=None, help="Path to JSON graph file to load")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, stream=sys.stderr)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "tell":
        from pyonto.cli.tell import run_tell
        return run_tell(args)
    elif args.command == "ask":
        from pyonto.cli.ask import run_ask
        return run_ask(args)
    elif args.command == "materialize":
        from pyonto.cli.materialize import run_materialize
        return run_materialize(args)
    elif args.command == "repl":
        from pyonto.cli.repl import run_repl
        return run_repl(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
