"""``pyonto ask`` subcommand -- run class-expression queries against a graph."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pyonto.base import OntologyGraph
from pyonto.classifier import OntologyIndex, classify
from pyonto.cli.exitcodes import EXIT_ERROR, EXIT_NO_RESULTS, EXIT_SUCCESS
from pyonto.cli.output import ask_response, emit_error, emit_json
from pyonto.query import QueryType, query
from pyonto.syntax import ParseMode

logger = logging.getLogger(__name__)


def _ask_one(
    query_str: str,
    query_type: QueryType,
    index: OntologyIndex,
    *,
    mode: ParseMode = ParseMode.TEXTUAL,
    json_mode: bool = False,
    quiet: bool = False,
) -> int:
    """Run a single query. Returns exit code."""
    query_str = query_str.strip()
    if not query_str:
        emit_error("Empty query.", json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR

    results = query(query_str, query_type, index, mode=mode)

    if json_mode:
        emit_json(ask_response(query_str, query_type.value, results, index.warnings))
    elif not quiet:
        if results:
            for entity in results:
                print(entity.label)
        else:
            print("NO RESULTS")

    return EXIT_SUCCESS if results else EXIT_NO_RESULTS


def run_ask(args: argparse.Namespace) -> int:
    """Execute the ``ask`` subcommand."""
    graph_path = Path(args.graph)
    json_mode = getattr(args, "json", False)
    quiet = getattr(args, "quiet", False)
    batch = getattr(args, "batch", None)
    query_type = QueryType(getattr(args, "type", QueryType.SUBCLASSES.value))
    mode = ParseMode.STRUCTURED if getattr(args, "structured", False) else ParseMode.TEXTUAL

    if not graph_path.exists():
        emit_error(f"Graph file {graph_path} does not exist.", json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR
    try:
        graph = OntologyGraph.from_file(graph_path)
    except (OSError, ValueError) as e:
        emit_error(str(e), json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR

    index = classify(graph.entities, graph.relations)

    # --- Batch mode ---
    if batch is not None:
        return _run_ask_batch(batch, query_type, index, mode=mode,
                              json_mode=json_mode, quiet=quiet)

    # --- Single query ---
    query_str = args.query
    if query_str is None:
        emit_error("No query provided.", json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR
    if query_str == "-":
        query_str = sys.stdin.readline().rstrip("\n")

    return _ask_one(query_str, query_type, index, mode=mode,
                    json_mode=json_mode, quiet=quiet)


def _run_ask_batch(
    batch_source: str,
    query_type: QueryType,
    index: OntologyIndex,
    *,
    mode: ParseMode = ParseMode.TEXTUAL,
    json_mode: bool = False,
    quiet: bool = False,
) -> int:
    """Process a batch file of queries, one per line."""
    if batch_source == "-":
        lines = sys.stdin.read().splitlines()
    else:
        try:
            with open(batch_source) as f:
                lines = f.read().splitlines()
        except OSError as e:
            emit_error(str(e), json_mode=json_mode, quiet=quiet)
            return EXIT_ERROR

    any_empty = False
    any_error = False

    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if not quiet and not json_mode:
            print(f"# {line}")
        rc = _ask_one(line, query_type, index, mode=mode,
                      json_mode=json_mode, quiet=quiet)
        if rc == EXIT_ERROR:
            any_error = True
        elif rc == EXIT_NO_RESULTS:
            any_empty = True

    if any_error:
        return EXIT_ERROR
    if any_empty:
        return EXIT_NO_RESULTS
    return EXIT_SUCCESS
