"""``pyonto repl`` subcommand -- interactive REPL."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pyonto.base import OntologyGraph
from pyonto.classifier import OntologyIndex, classify
from pyonto.cli.output import format_relation
from pyonto.cli.tell import apply_tell_statement
from pyonto.materialize import inferred_relations
from pyonto.query import QueryType, query
from pyonto.syntax import ParseMode

logger = logging.getLogger(__name__)

HELP_TEXT = """\
Commands:
  tell class Person                      Declare a class
  tell individual john                   Declare an individual
  tell objectproperty teaches            Declare an object property
  tell Student subClassOf Person         Add a relation
  tell john rdf:type Student             Add a type assertion
  tell axiom Student SubClassOf Person   Add an axiom
  tell characteristic teaches Transitive Add a property characteristic
  ask Person                             Subclasses of a class expression
  ask instances Person and Teacher       Instances (also: subclasses,
                                         superclasses, equivalent)
  mode textual|structured                Expression parsing mode
  show                                   Display the current graph
  show warnings                          Display classification warnings
  materialize                            Display inferred relations
  save <file>                            Save graph to a JSON file
  load <file>                            Load graph from a JSON file
  help                                   Show this help
  quit                                   Exit the REPL
"""


def _parse_repl_ask(rest: str) -> tuple[QueryType, str]:
    """Split an optional leading query type off the query text."""
    head, _, tail = rest.strip().partition(" ")
    try:
        return QueryType(head.lower()), tail.strip()
    except ValueError:
        return QueryType.SUBCLASSES, rest.strip()


def run_repl(args: argparse.Namespace) -> int:
    """Execute the ``repl`` subcommand."""
    if args.graph and Path(args.graph).exists():
        graph = OntologyGraph.from_file(args.graph)
        print(f"Loaded graph from {args.graph}")
    else:
        graph = OntologyGraph()
        if args.graph:
            print(f"Graph file {args.graph} not found, starting with empty graph.")
        else:
            print("Starting with empty graph.")

    print("pyonto REPL. Type 'help' for commands.\n")

    mode = ParseMode.TEXTUAL
    index: OntologyIndex | None = None

    try:
        while True:
            try:
                line = input("pyonto> ").strip()
            except EOFError:
                print()
                break

            if not line:
                continue

            if line in ("quit", "exit"):
                break

            if line == "help":
                print(HELP_TEXT)
                continue

            if line == "show":
                print(f"Entities ({len(graph.entities)}):")
                for e in graph.entities:
                    print(f"  {e.label} ({e.kind.value})")
                    for axiom in e.axioms:
                        print(f"    {axiom.name} {axiom.target}")
                    if e.is_property:
                        for flag in sorted(e.characteristics):
                            print(f"    [{flag}]")
                labels = {e.id: e.label for e in graph.entities}
                print(f"Relations ({len(graph.relations)}):")
                for r in graph.relations:
                    print(f"  {format_relation(r, labels)}")
                continue

            if line == "show warnings":
                if index is None:
                    index = classify(graph.entities, graph.relations)
                if index.warnings:
                    for w in index.warnings:
                        print(f"  {w}")
                else:
                    print("No warnings.")
                continue

            if line == "materialize":
                labels = {e.id: e.label for e in graph.entities}
                inferred = inferred_relations(graph.entities, graph.relations)
                for r in inferred:
                    print(f"  {format_relation(r, labels)}")
                print(f"{len(inferred)} inferred relations")
                continue

            if line.startswith("mode "):
                val = line[5:].strip().lower()
                try:
                    mode = ParseMode(val)
                    print(f"Mode: {mode.value}")
                except ValueError:
                    print("Usage: mode textual|structured")
                continue

            if line.startswith("save "):
                filepath = line[5:].strip()
                try:
                    graph.to_file(filepath)
                    print(f"Saved to {filepath}")
                except OSError as e:
                    print(f"Error saving: {e}")
                continue

            if line.startswith("load "):
                filepath = line[5:].strip()
                try:
                    graph = OntologyGraph.from_file(filepath)
                    index = None
                    print(f"Loaded from {filepath}")
                except (OSError, ValueError) as e:
                    print(f"Error loading: {e}")
                continue

            if line.startswith("tell "):
                try:
                    _kind, msg = apply_tell_statement(line[5:], graph)
                    index = None
                    print(msg)
                except ValueError as e:
                    print(f"Error: {e}")
                continue

            if line.startswith("ask "):
                query_type, text = _parse_repl_ask(line[4:])
                if not text:
                    print("Usage: ask [subclasses|superclasses|instances|equivalent] <expression>")
                    continue
                if index is None:
                    index = classify(graph.entities, graph.relations)
                results = query(text, query_type, index, mode=mode)
                if results:
                    for entity in results:
                        print(f"  {entity.label}")
                else:
                    print("NO RESULTS")
                continue

            print(f"Unknown command: {line!r}. Type 'help' for commands.")

    except KeyboardInterrupt:
        print("\nInterrupted.")

    return 0
