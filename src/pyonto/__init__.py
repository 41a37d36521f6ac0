"""pyonto -- ontology classification and class-expression query engine.

Public API::

    from pyonto import classify, query, materialize_entailments
    from pyonto import OntologyGraph, Entity, Relation, EntityKind, QueryType

    index = classify(graph.entities, graph.relations)
    query("Person and Teacher", QueryType.INSTANCES, index)
"""

from pyonto._version import __version__
from pyonto.base import (
    Attribute,
    Axiom,
    Entity,
    EntityKind,
    OntologyGraph,
    Relation,
    RelationKind,
)
from pyonto.classifier import OntologyIndex, classify
from pyonto.materialize import inferred_relations, materialize_entailments
from pyonto.query import QueryType, query
from pyonto.resolver import resolve
from pyonto.syntax import ExpressionSyntaxError, ParseMode, parse_expression

__all__ = [
    "Attribute",
    "Axiom",
    "Entity",
    "EntityKind",
    "ExpressionSyntaxError",
    "OntologyGraph",
    "OntologyIndex",
    "ParseMode",
    "QueryType",
    "Relation",
    "RelationKind",
    "__version__",
    "classify",
    "inferred_relations",
    "materialize_entailments",
    "parse_expression",
    "query",
    "resolve",
]
