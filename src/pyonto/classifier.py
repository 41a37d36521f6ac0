"""Classifier -- closes the asserted graph into an ``OntologyIndex``.

``classify`` is a pure function of its inputs: every call builds a fresh
index from scratch and nothing is cached between calls. Malformed graphs
are processed best-effort; references that do not resolve are skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from pyonto.base import Entity, Relation, RelationKind, local_name

logger = logging.getLogger(__name__)


@dataclass
class OntologyIndex:
    """Closure-computed lookup tables over one snapshot of the graph.

    Attributes:
        entities: Entity id -> Entity, in graph order.
        label_to_id: Label, local name and IRI local name -> entity id.
        sub_class_of: Class id -> all (transitive) superclass ids.
        super_class_of: Class id -> all (transitive) subclass ids.
        types: Individual id -> all class ids it belongs to.
        instances: Class id -> all individual ids belonging to it.
        sub_property_of: Property name -> all (transitive) super-property names.
        property_characteristics: Property name -> characteristic flags.
        outgoing_edges: Entity id -> raw ``(label, target)`` adjacency.
        property_labels: Property label -> property id.
        property_local_names: Property name and label local name -> property id.
        warnings: Structural problems found while classifying (cycles).
    """

    entities: dict[str, Entity] = field(default_factory=dict)
    label_to_id: dict[str, str] = field(default_factory=dict)
    sub_class_of: dict[str, set[str]] = field(default_factory=dict)
    super_class_of: dict[str, set[str]] = field(default_factory=dict)
    types: dict[str, set[str]] = field(default_factory=dict)
    instances: dict[str, set[str]] = field(default_factory=dict)
    sub_property_of: dict[str, set[str]] = field(default_factory=dict)
    property_characteristics: dict[str, set[str]] = field(default_factory=dict)
    outgoing_edges: dict[str, list[tuple[str, str]]] = field(default_factory=dict)
    property_labels: dict[str, str] = field(default_factory=dict)
    property_local_names: dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def lookup(self, name: str) -> str | None:
        """Resolve a name to an entity id: exact, then case-insensitive."""
        name = name.strip()
        if name in self.label_to_id:
            return self.label_to_id[name]
        lowered = name.lower()
        for key, entity_id in self.label_to_id.items():
            if key.lower() == lowered:
                return entity_id
        return None

    def property_for(self, label: str) -> Entity | None:
        """Find the property entity an edge label or axiom target refers to."""
        label = label.strip()
        entity_id = self.property_labels.get(label)
        if entity_id is None:
            entity_id = self.property_local_names.get(local_name(label))
        return self.entities.get(entity_id) if entity_id is not None else None

    def descendants(self, entity_id: str) -> set[str]:
        return self.super_class_of.get(entity_id, set())

    def ancestors(self, entity_id: str) -> set[str]:
        return self.sub_class_of.get(entity_id, set())


def _build_label_index(entities: Iterable[Entity]) -> dict[str, str]:
    label_to_id: dict[str, str] = {}
    entities = list(entities)
    for e in entities:
        label_to_id[e.label] = e.id
    # Local names never shadow a full label.
    for e in entities:
        label_to_id.setdefault(local_name(e.label), e.id)
        if e.iri:
            label_to_id.setdefault(e.iri, e.id)
            label_to_id.setdefault(local_name(e.iri), e.id)
    return label_to_id


def _build_property_index(entities: Iterable[Entity]) -> tuple[dict[str, str], dict[str, str]]:
    labels: dict[str, str] = {}
    local_names: dict[str, str] = {}
    for e in entities:
        if not e.is_property:
            continue
        labels.setdefault(e.label, e.id)
        local_names.setdefault(e.name, e.id)
        local_names.setdefault(local_name(e.label), e.id)
    return labels, local_names


def _close(direct: dict[str, set[str]], what: str, warnings: list[str]) -> dict[str, set[str]]:
    """Transitive, reflexive-free closure of *direct* with cycle detection.

    Each node is expanded depth-first with its own visited set, so cyclic
    input terminates. Every cycle found is logged and appended to
    *warnings* once.
    """
    closed: dict[str, set[str]] = {}
    for node in direct:
        visited: set[str] = set()
        stack = list(direct[node])
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            stack.extend(direct.get(current, ()))
        closed[node] = visited

    reported: set[frozenset[str]] = set()
    for node, reach in closed.items():
        if node not in reach:
            continue
        members = frozenset({node} | {m for m in reach if node in closed.get(m, ())})
        if members not in reported:
            reported.add(members)
            msg = f"{what} cycle detected: {', '.join(sorted(members))}"
            logger.warning(msg)
            warnings.append(msg)
        reach.discard(node)
    return closed


def classify(entities: Iterable[Entity], relations: Iterable[Relation]) -> OntologyIndex:
    """Compute the deductive closure of the asserted graph.

    Never raises on graph content. Relations whose endpoints are not
    known entities are skipped.
    """
    entity_map = {e.id: e for e in entities}
    index = OntologyIndex(entities=entity_map, label_to_id=_build_label_index(entity_map.values()))
    index.property_labels, index.property_local_names = _build_property_index(entity_map.values())

    direct_super: dict[str, set[str]] = {}
    direct_types: dict[str, set[str]] = {}
    direct_super_props: dict[str, set[str]] = {}

    for entity_id, entity in entity_map.items():
        direct_super[entity_id] = set()
        direct_types[entity_id] = set()
        index.instances[entity_id] = set()
        index.outgoing_edges[entity_id] = []
        if entity.is_property:
            direct_super_props[entity.label] = set()
            index.property_characteristics[entity.label] = set(entity.characteristics)

    # --- Asserted relations ---
    skipped = 0
    for r in relations:
        if r.source not in entity_map or r.target not in entity_map:
            skipped += 1
            continue
        index.outgoing_edges[r.source].append((r.label, r.target))
        kind = r.kind
        if kind is RelationKind.SUB_CLASS_OF:
            direct_super[r.source].add(r.target)
        elif kind is RelationKind.TYPE:
            direct_types[r.source].add(r.target)
        elif kind is RelationKind.SUB_PROPERTY_OF:
            sub, sup = entity_map[r.source], entity_map[r.target]
            direct_super_props.setdefault(sub.label, set()).add(sup.label)
    if skipped:
        logger.debug("Skipped %d relations with unknown endpoints", skipped)

    # --- Axioms as a secondary source of the same facts ---
    for entity in entity_map.values():
        for target in entity.axiom_targets("SubClassOf"):
            parent = index.label_to_id.get(target)
            if parent is None:
                logger.debug("Unresolved SubClassOf target on %s: %r", entity.label, target)
                continue
            direct_super[entity.id].add(parent)
        if entity.is_property:
            for target in entity.axiom_targets("SubPropertyOf"):
                parent_prop = index.property_for(target)
                if parent_prop is None:
                    logger.debug(
                        "Unresolved SubPropertyOf target on %s: %r", entity.label, target
                    )
                    continue
                direct_super_props[entity.label].add(parent_prop.label)

    # --- Closure ---
    index.sub_class_of = _close(direct_super, "subClassOf", index.warnings)
    index.super_class_of = {entity_id: set() for entity_id in entity_map}
    for child, parents in index.sub_class_of.items():
        for parent in parents:
            index.super_class_of[parent].add(child)

    index.sub_property_of = _close(direct_super_props, "subPropertyOf", index.warnings)

    # sub_class_of is already closed, so one pass suffices.
    for individual, classes in direct_types.items():
        inferred = set(classes)
        for cls in classes:
            inferred |= index.sub_class_of.get(cls, set())
        index.types[individual] = inferred
        for cls in inferred:
            index.instances[cls].add(individual)

    logger.debug(
        "Classified: %d entities, %d subclass pairs, %d type pairs, "
        "%d subproperty pairs, %d warnings",
        len(entity_map),
        sum(len(s) for s in index.sub_class_of.values()),
        sum(len(s) for s in index.types.values()),
        sum(len(s) for s in index.sub_property_of.values()),
        len(index.warnings),
    )
    return index
