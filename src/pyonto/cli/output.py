"""Output helpers shared by the CLI subcommands."""

from __future__ import annotations

import json
import sys
from typing import Any

from pyonto.base import Entity, Relation


def emit_json(data: dict[str, Any]) -> None:
    """Write one JSON object per line to stdout."""
    print(json.dumps(data, sort_keys=True))


def emit_error(message: str, *, json_mode: bool = False, quiet: bool = False) -> None:
    """Report an error on stderr (or as a JSON object on stdout)."""
    if json_mode:
        emit_json({"status": "ERROR", "error": message})
    elif not quiet:
        print(f"Error: {message}", file=sys.stderr)


def entity_summary(entity: Entity) -> dict[str, str]:
    return {"id": entity.id, "label": entity.label, "kind": entity.kind.value}


def tell_response(kind: str, statement: str, graph_path: str) -> dict[str, Any]:
    return {"status": "ADDED", "kind": kind, "statement": statement, "graph": graph_path}


def ask_response(
    query: str, query_type: str, results: list[Entity], warnings: list[str]
) -> dict[str, Any]:
    resp: dict[str, Any] = {
        "status": "FOUND" if results else "NO RESULTS",
        "query": query,
        "type": query_type,
        "count": len(results),
        "results": [entity_summary(e) for e in results],
    }
    if warnings:
        resp["warnings"] = list(warnings)
    return resp


def materialize_response(relations: list[Relation]) -> dict[str, Any]:
    return {
        "status": "OK",
        "count": len(relations),
        "inferred": sum(1 for r in relations if r.inferred),
        "relations": [r.to_dict() for r in relations],
    }


def format_relation(relation: Relation, labels: dict[str, str]) -> str:
    """``Cat -rdfs:subClassOf-> LivingThing  [Transitive Subclass]``."""
    source = labels.get(relation.source, relation.source)
    target = labels.get(relation.target, relation.target)
    line = f"{source} -{relation.label}-> {target}"
    if relation.inferred:
        line += f"  [{relation.provenance}]"
    return line
