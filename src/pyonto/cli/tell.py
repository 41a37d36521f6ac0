"""``pyonto tell`` subcommand -- add entities, relations and axioms to a graph."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pyonto.base import EntityKind, OntologyGraph
from pyonto.cli.exitcodes import EXIT_ERROR, EXIT_SUCCESS
from pyonto.cli.output import emit_error, emit_json, tell_response

logger = logging.getLogger(__name__)

DECLARATIONS: dict[str, EntityKind] = {
    "class": EntityKind.CLASS,
    "individual": EntityKind.NAMED_INDIVIDUAL,
    "objectproperty": EntityKind.OBJECT_PROPERTY,
    "dataproperty": EntityKind.DATA_PROPERTY,
    "datatype": EntityKind.DATATYPE,
}


def _extract_trailing_quoted(text: str) -> tuple[str, str | None]:
    """Extract an optional trailing quoted string from *text*.

    Returns (remaining_text, quoted_or_None).
    """
    for quote_char in ('"', "'"):
        idx = text.find(quote_char)
        if idx != -1:
            end_idx = text.find(quote_char, idx + 1)
            if end_idx == -1:
                quoted = text[idx + 1:].strip()
            else:
                quoted = text[idx + 1:end_idx]
            remaining = text[:idx].strip()
            return remaining, quoted if quoted else None
    return text, None


def _axiom_target(text: str) -> str:
    """Axiom target text, with one pair of surrounding quotes removed.

    A target that does not open with a quote ends at the first quote.
    """
    text = text.strip()
    if text[:1] in ('"', "'"):
        end_idx = text.find(text[0], 1)
        return (text[1:end_idx] if end_idx != -1 else text[1:]).strip()
    return _extract_trailing_quoted(text)[0]


def parse_tell_statement(statement: str) -> tuple[str, tuple[str, ...]]:
    """Parse a tell statement.

    Returns:
        ("entity", (kind, label, iri_or_empty)) for ``class Person ["iri"]``
        ("axiom", (label, axiom_kind, target)) for ``axiom Student SubClassOf Person``
        ("characteristic", (label, flag)) for ``characteristic teaches Transitive``
        ("relation", (source, label, target)) for ``Cat subClassOf Animal``
    """
    statement = statement.strip()
    words = statement.split(None, 3)
    if not words:
        raise ValueError("Empty tell statement")

    if words[0].lower() == "axiom" and len(words) == 4:
        # Free-text target: may itself be quoted.
        target = _axiom_target(words[3])
        if not target:
            raise ValueError(f"Empty axiom target: {statement!r}")
        return ("axiom", (words[1], words[2], target))

    body, iri = _extract_trailing_quoted(statement)
    parts = body.split()
    head = parts[0].lower() if parts else ""

    if head in DECLARATIONS and len(parts) == 2:
        return ("entity", (DECLARATIONS[head].value, parts[1], iri or ""))
    if head == "characteristic" and len(parts) == 3:
        return ("characteristic", (parts[1], parts[2]))
    if len(parts) == 3 and iri is None:
        return ("relation", (parts[0], parts[1], parts[2]))

    raise ValueError(
        f"Invalid tell statement: {statement!r}. Expected "
        f'"class|individual|objectproperty|dataproperty|datatype NAME", '
        f'"SOURCE LABEL TARGET", "axiom NAME KIND TARGET" '
        f'or "characteristic PROPERTY FLAG".'
    )


def _require_id(graph: OntologyGraph, name: str) -> str:
    entity = graph.find(name)
    if entity is None:
        raise ValueError(f"Unknown entity: {name!r}")
    return entity.id


def apply_tell_statement(statement: str, graph: OntologyGraph) -> tuple[str, str]:
    """Apply a tell statement to *graph*. Returns (kind, human-readable message)."""
    kind, args = parse_tell_statement(statement)

    if kind == "entity":
        entity_kind, label, iri = args
        graph.add_entity(label, entity_kind, iri=iri or None)
        msg = f"Added {entity_kind}: {label}"
        if iri:
            msg += f" <{iri}>"
        return kind, msg
    if kind == "axiom":
        label, axiom_kind, target = args
        graph.add_axiom(_require_id(graph, label), axiom_kind, target)
        return kind, f"Added axiom: {label} {axiom_kind} {target}"
    if kind == "characteristic":
        label, flag = args
        entity = graph.find(label)
        if entity is None or not entity.is_property:
            raise ValueError(f"Unknown property: {label!r}")
        graph.add_attribute(entity.id, flag)
        return kind, f"Added characteristic: {label} is {flag}"

    source, label, target = args
    graph.add_relation(_require_id(graph, source), label, _require_id(graph, target))
    return kind, f"Added relation: {source} -{label}-> {target}"


def _process_tell_statement(
    statement: str,
    graph: OntologyGraph,
    graph_path: Path,
    *,
    json_mode: bool = False,
    quiet: bool = False,
) -> int:
    """Process a single tell statement. Returns exit code."""
    try:
        kind, msg = apply_tell_statement(statement, graph)
    except ValueError as e:
        emit_error(str(e), json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR

    if json_mode:
        emit_json(tell_response(kind, statement.strip(), str(graph_path)))
    elif not quiet:
        print(msg)
    return EXIT_SUCCESS


def run_tell(args: argparse.Namespace) -> int:
    """Execute the ``tell`` subcommand."""
    graph_path = Path(args.graph)
    json_mode = getattr(args, "json", False)
    quiet = getattr(args, "quiet", False)
    batch = getattr(args, "batch", None)

    if graph_path.exists():
        try:
            graph = OntologyGraph.from_file(graph_path)
        except (OSError, ValueError) as e:
            emit_error(str(e), json_mode=json_mode, quiet=quiet)
            return EXIT_ERROR
    elif args.create:
        graph = OntologyGraph()
    else:
        msg = f"Graph file {graph_path} does not exist. Use --create to create it."
        emit_error(msg, json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR

    # --- Batch mode ---
    if batch is not None:
        return _run_tell_batch(batch, graph, graph_path, json_mode=json_mode, quiet=quiet)

    # --- Single statement ---
    statement = args.statement
    if statement is None:
        emit_error("No statement provided.", json_mode=json_mode, quiet=quiet)
        return EXIT_ERROR
    if statement == "-":
        statement = sys.stdin.readline().rstrip("\n")

    rc = _process_tell_statement(statement, graph, graph_path, json_mode=json_mode, quiet=quiet)
    if rc == EXIT_SUCCESS:
        graph.to_file(graph_path)
        logger.info("Saved graph to %s", graph_path)
    return rc


def _run_tell_batch(
    batch_source: str,
    graph: OntologyGraph,
    graph_path: Path,
    *,
    json_mode: bool = False,
    quiet: bool = False,
) -> int:
    """Process a batch file of tell statements."""
    if batch_source == "-":
        lines = sys.stdin.read().splitlines()
    else:
        try:
            with open(batch_source) as f:
                lines = f.read().splitlines()
        except OSError as e:
            emit_error(str(e), json_mode=json_mode, quiet=quiet)
            return EXIT_ERROR

    had_error = False
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        rc = _process_tell_statement(line, graph, graph_path, json_mode=json_mode, quiet=quiet)
        if rc != EXIT_SUCCESS:
            had_error = True

    graph.to_file(graph_path)
    logger.info("Saved graph to %s (batch)", graph_path)
    return EXIT_ERROR if had_error else EXIT_SUCCESS
