"""Expression Resolver -- evaluates class expressions against an index.

``resolve`` returns the set of entity ids matching an expression, or
``None`` when the expression names nothing known. An empty set means the
terms are known but nothing matches. Resolution never raises: malformed
text degrades to a lookup of the whole string as a name.
"""

from __future__ import annotations

import logging

from pyonto.classifier import OntologyIndex
from pyonto.syntax import (
    Existential,
    Expression,
    ExpressionSyntaxError,
    Intersection,
    Name,
    ParseMode,
    Union,
    Value,
    parse_expression,
    walk,
)

logger = logging.getLogger(__name__)


def label_matches(label: str, prop: str) -> bool:
    """True if edge *label* is *prop* itself or *prop* behind a prefix."""
    return label == prop or label.endswith(f":{prop}")


def extension(ids: set[str], index: OntologyIndex) -> set[str]:
    """*ids* plus every descendant and instance of the classes among them."""
    result = set(ids)
    for entity_id in ids:
        result |= index.super_class_of.get(entity_id, set())
        result |= index.instances.get(entity_id, set())
    return result


def resolve(
    expression: str | Expression,
    index: OntologyIndex,
    mode: ParseMode | str = ParseMode.TEXTUAL,
) -> set[str] | None:
    """Resolve *expression* to matching entity ids.

    Returns None if the head term cannot be resolved to a known entity.
    """
    if isinstance(expression, str):
        if not expression.strip():
            return None
        try:
            tree = parse_expression(expression, mode)
        except ExpressionSyntaxError as e:
            logger.debug("Falling back to name lookup: %s", e)
            tree = Name(expression.strip())
    else:
        tree = expression
    return _evaluate(tree, index, ParseMode(mode))


def _evaluate(expr: Expression, index: OntologyIndex, mode: ParseMode) -> set[str] | None:
    if isinstance(expr, Name):
        entity_id = index.lookup(expr.text)
        return {entity_id} if entity_id is not None else None

    if isinstance(expr, Intersection):
        known = [
            extension(r, index)
            for r in (_evaluate(op, index, mode) for op in expr.operands)
            if r is not None
        ]
        if not known:
            return None
        return set.intersection(*known)

    if isinstance(expr, Union):
        results = [_evaluate(op, index, mode) for op in expr.operands]
        known_sets = [r for r in results if r is not None]
        if not known_sets:
            return None
        return set().union(*known_sets)

    if isinstance(expr, Existential):
        return _evaluate_existential(expr, index, mode)

    if isinstance(expr, Value):
        target_id = index.lookup(expr.target)
        if target_id is None:
            return set()
        return {
            source
            for source, edges in index.outgoing_edges.items()
            if any(label_matches(label, expr.prop) and t == target_id for label, t in edges)
        }

    raise TypeError(f"Not a class expression: {expr!r}")  # pragma: no cover


def _evaluate_existential(
    expr: Existential, index: OntologyIndex, mode: ParseMode
) -> set[str]:
    filler = _evaluate(expr.filler, index, mode)
    if filler is None:
        return set()
    filler_ext = extension(filler, index)

    result = {
        source
        for source, edges in index.outgoing_edges.items()
        if any(label_matches(label, expr.prop) and t in filler_ext for label, t in edges)
    }

    # Classes declared with a matching restriction in a SubClassOf axiom.
    for entity in index.entities.values():
        if entity.id in result:
            continue
        for target in entity.axiom_targets("SubClassOf"):
            try:
                axiom_expr = parse_expression(target, mode)
            except ExpressionSyntaxError:
                continue
            if any(
                isinstance(sub, Existential)
                and label_matches(sub.prop, expr.prop)
                and _filler_matches(sub.filler, expr.filler, filler_ext, index)
                for sub in walk(axiom_expr)
            ):
                result.add(entity.id)
                break
    return result


def _filler_matches(
    declared: Expression,
    queried: Expression,
    queried_ext: set[str],
    index: OntologyIndex,
) -> bool:
    if declared == queried:
        return True
    if isinstance(declared, Name):
        declared_id = index.lookup(declared.text)
        return declared_id is not None and declared_id in queried_ext
    return False
