"""Entailment Materializer -- inferred relations as explicit data.

Re-expresses the classifier's implicit closure as ``Relation`` objects
flagged ``inferred`` and adds the property-level entailments (domain,
range, inverse, sub-property, symmetric, transitive). Each inferred
relation carries a provenance string for display.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable

from pyonto.base import Entity, Relation, RelationKind, relation_kind
from pyonto.classifier import OntologyIndex, classify

logger = logging.getLogger(__name__)

SUBCLASS_LABEL = "rdfs:subClassOf"
TYPE_LABEL = "rdf:type"


def _canonical(label: str) -> str:
    kind = relation_kind(label)
    return label if kind is RelationKind.PROPERTY_ASSERTION else kind.value


class _Materializer:
    def __init__(self, index: OntologyIndex, asserted: list[Relation]) -> None:
        self.index = index
        self.position = {entity_id: i for i, entity_id in enumerate(index.entities)}
        self.seen: set[tuple[str, str, str]] = {
            (r.source, r.target, _canonical(r.label)) for r in asserted
        }
        self.inferred: list[Relation] = []
        self.assertions = [
            r
            for r in asserted
            if r.kind is RelationKind.PROPERTY_ASSERTION
            and r.source in index.entities
            and r.target in index.entities
        ]

    def ordered(self, ids: Iterable[str]) -> list[str]:
        return sorted(ids, key=lambda i: (self.position.get(i, len(self.position)), i))

    def property_name(self, label: str) -> str:
        prop = self.index.property_for(label)
        return prop.label if prop is not None else label

    def add(self, source: str, target: str, label: str, provenance: str) -> bool:
        if source == target:
            return False
        key = (source, target, _canonical(label))
        if key in self.seen:
            return False
        self.seen.add(key)
        self.inferred.append(
            Relation(
                source=source,
                target=target,
                label=label,
                id=f"inferred-{source}-{target}-{label}",
                inferred=True,
                provenance=provenance,
            )
        )
        return True

    def property_pool(self) -> list[Relation]:
        """Asserted plus inferred property assertions."""
        return self.assertions + [
            r for r in self.inferred if r.kind is RelationKind.PROPERTY_ASSERTION
        ]

    def has_characteristic(self, name: str, flag: str) -> bool:
        return flag in self.index.property_characteristics.get(name, set())

    # --- Rules ---

    def subclass_closure(self) -> int:
        count = 0
        for child in self.ordered(self.index.sub_class_of):
            for parent in self.ordered(self.index.sub_class_of[child]):
                count += self.add(child, parent, SUBCLASS_LABEL, "Transitive Subclass")
        return count

    def type_closure(self) -> int:
        count = 0
        for individual in self.ordered(self.index.types):
            for cls in self.ordered(self.index.types[individual]):
                count += self.add(individual, cls, TYPE_LABEL, "Class Membership")
        return count

    def domain_range(self) -> int:
        count = 0
        for r in self.assertions:
            prop = self.index.property_for(r.label)
            if prop is None:
                continue
            for target in prop.axiom_targets("Domain"):
                domain_id = self.index.lookup(target)
                if domain_id is not None:
                    count += self.add(r.source, domain_id, TYPE_LABEL, f"Domain of {prop.label}")
            for target in prop.axiom_targets("Range"):
                range_id = self.index.lookup(target)
                if range_id is not None:
                    count += self.add(r.target, range_id, TYPE_LABEL, f"Range of {prop.label}")
        return count

    def inverses(self) -> int:
        pairs: dict[str, set[str]] = {}
        for entity in self.index.entities.values():
            if not entity.is_property:
                continue
            for target in entity.axiom_targets("InverseOf"):
                other = self.property_name(target)
                pairs.setdefault(entity.label, set()).add(other)
                pairs.setdefault(other, set()).add(entity.label)
        count = 0
        for r in self.assertions:
            name = self.property_name(r.label)
            for inverse in sorted(pairs.get(name, ())):
                count += self.add(r.target, r.source, inverse, f"Inverse of {name}")
        return count

    def sub_properties(self) -> int:
        count = 0
        for r in self.assertions:
            name = self.property_name(r.label)
            for sup in sorted(self.index.sub_property_of.get(name, ())):
                count += self.add(r.source, r.target, sup, f"Sub-property of {name}")
        return count

    def symmetric(self) -> int:
        count = 0
        for r in self.property_pool():
            if self.has_characteristic(self.property_name(r.label), "Symmetric"):
                count += self.add(r.target, r.source, r.label, "Symmetric Property")
        return count

    def transitive(self) -> int:
        by_property: dict[str, dict[str, list[str]]] = {}
        for r in self.property_pool():
            name = self.property_name(r.label)
            if self.has_characteristic(name, "Transitive"):
                by_property.setdefault(name, {}).setdefault(r.source, []).append(r.target)
        count = 0
        for name in self.index.property_characteristics:
            adjacency = by_property.get(name, {})
            for start in self.ordered(adjacency):
                visited = {start}
                queue = deque(adjacency[start])
                while queue:
                    node = queue.popleft()
                    if node in visited:
                        continue
                    visited.add(node)
                    count += self.add(start, node, name, "Transitive Property")
                    queue.extend(adjacency.get(node, ()))
        return count

    def run(self) -> list[Relation]:
        for rule in (
            self.subclass_closure,
            self.type_closure,
            self.domain_range,
            self.inverses,
            self.sub_properties,
            self.symmetric,
            self.transitive,
        ):
            added = rule()
            logger.debug("Rule %s: %d inferred relations", rule.__name__, added)
        return self.inferred


def inferred_relations(
    entities: Iterable[Entity], relations: Iterable[Relation]
) -> list[Relation]:
    """Only the newly inferred relations, deduplicated against the asserted ones."""
    relations = list(relations)
    index = classify(entities, relations)
    return _Materializer(index, relations).run()


def materialize_entailments(
    entities: Iterable[Entity], relations: Iterable[Relation]
) -> list[Relation]:
    """Asserted relations followed by every inferred relation.

    Best-effort: references that do not resolve are skipped.
    """
    relations = list(relations)
    inferred = inferred_relations(entities, relations)
    logger.debug(
        "Materialized %d inferred relations over %d asserted", len(inferred), len(relations)
    )
    return relations + inferred
