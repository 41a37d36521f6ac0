"""Query Executor -- DL-style queries over a classified index."""

from __future__ import annotations

import logging
from enum import Enum

from pyonto.base import Entity, EntityKind
from pyonto.classifier import OntologyIndex
from pyonto.resolver import resolve
from pyonto.syntax import Expression, ParseMode

logger = logging.getLogger(__name__)


class QueryType(str, Enum):
    SUBCLASSES = "subclasses"
    SUPERCLASSES = "superclasses"
    INSTANCES = "instances"
    EQUIVALENT = "equivalent"


META_QUERIES: dict[str, EntityKind] = {
    "class": EntityKind.CLASS,
    "classes": EntityKind.CLASS,
    "owl:class": EntityKind.CLASS,
    "individual": EntityKind.NAMED_INDIVIDUAL,
    "individuals": EntityKind.NAMED_INDIVIDUAL,
    "namedindividual": EntityKind.NAMED_INDIVIDUAL,
    "owl:namedindividual": EntityKind.NAMED_INDIVIDUAL,
    "objectproperty": EntityKind.OBJECT_PROPERTY,
    "object properties": EntityKind.OBJECT_PROPERTY,
    "owl:objectproperty": EntityKind.OBJECT_PROPERTY,
    "dataproperty": EntityKind.DATA_PROPERTY,
    "data properties": EntityKind.DATA_PROPERTY,
    "datatypeproperty": EntityKind.DATA_PROPERTY,
    "owl:datatypeproperty": EntityKind.DATA_PROPERTY,
    "datatype": EntityKind.DATATYPE,
    "datatypes": EntityKind.DATATYPE,
    "owl:datatype": EntityKind.DATATYPE,
}

THING_QUERIES = frozenset({"thing", "owl:thing"})


def _of_kind(index: OntologyIndex, kind: EntityKind) -> list[Entity]:
    return [e for e in index.entities.values() if e.kind is kind]


def query(
    text: str | Expression,
    query_type: QueryType | str,
    index: OntologyIndex,
    mode: ParseMode | str = ParseMode.TEXTUAL,
) -> list[Entity]:
    """Run a query and return matching entities in graph order.

    Unknown terms, malformed expressions and an unclassified index all
    give an empty list.
    """
    query_type = QueryType(query_type)
    results = _execute(text, query_type, index, mode)
    logger.info("Query [%s] %s: %d results", query_type.value, text, len(results))
    return results


def _execute(
    text: str | Expression,
    query_type: QueryType,
    index: OntologyIndex,
    mode: ParseMode | str,
) -> list[Entity]:
    key = text.strip().lower() if isinstance(text, str) else None

    if key in META_QUERIES:
        return _of_kind(index, META_QUERIES[key])

    resolved = resolve(text, index, mode)

    if resolved is None and key in THING_QUERIES:
        if query_type is QueryType.INSTANCES:
            return _of_kind(index, EntityKind.NAMED_INDIVIDUAL)
        return _of_kind(index, EntityKind.CLASS)

    if not resolved:
        return []

    result_ids: set[str] = set()
    for entity_id in resolved:
        entity = index.entities.get(entity_id)
        if entity is None:
            continue
        if query_type is QueryType.INSTANCES:
            if entity.is_individual:
                result_ids.add(entity_id)
            result_ids |= index.instances.get(entity_id, set())
        elif query_type is QueryType.SUBCLASSES:
            result_ids |= index.super_class_of.get(entity_id, set())
            if entity.is_class:
                result_ids.add(entity_id)
        elif query_type is QueryType.SUPERCLASSES:
            result_ids |= index.sub_class_of.get(entity_id, set())
            if entity.is_class:
                result_ids.add(entity_id)
        elif query_type is QueryType.EQUIVALENT:
            if entity.is_class:
                result_ids.add(entity_id)
                result_ids |= index.sub_class_of.get(entity_id, set()) & index.super_class_of.get(
                    entity_id, set()
                )

    return [e for e in index.entities.values() if e.id in result_ids]
