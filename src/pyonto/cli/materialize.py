"""``pyonto materialize`` subcommand -- print asserted and inferred relations."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pyonto.base import OntologyGraph
from pyonto.cli.exitcodes import EXIT_ERROR, EXIT_SUCCESS
from pyonto.cli.output import emit_error, emit_json, format_relation, materialize_response
from pyonto.materialize import inferred_relations, materialize_entailments

logger = logging.getLogger(__name__)


def run_materialize(args: argparse.Namespace) -> int:
    """Execute the ``materialize`` subcommand."""
    graph_path = Path(args.graph)
    json_mode = getattr(args, "json", False)
    quiet = getattr(args, "quiet", False)
    inferred_only = getattr(args, "inferred_only", False)

    if not graph_path.exists():
        emit_error(f"Graph file {graph_path} does not exist.", json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR
    try:
        graph = OntologyGraph.from_file(graph_path)
    except (OSError, ValueError) as e:
        emit_error(str(e), json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR

    if inferred_only:
        relations = inferred_relations(graph.entities, graph.relations)
    else:
        relations = materialize_entailments(graph.entities, graph.relations)

    if json_mode:
        emit_json(materialize_response(relations))
    elif not quiet:
        labels = {e.id: e.label for e in graph.entities}
        for relation in relations:
            print(format_relation(relation, labels))
        print(f"\n{sum(1 for r in relations if r.inferred)} inferred relations")

    return EXIT_SUCCESS
