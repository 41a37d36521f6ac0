"""Ontology Graph -- the asserted entities and relations the engine reads.

The graph is owned by the host. ``classify`` and ``materialize_entailments``
only read it, treating every ``Entity`` as an immutable snapshot for the
duration of one pass. Relations are asserted facts; inference never edits
them in place but produces a separate set of ``Relation`` objects flagged
``inferred``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    """Closed set of entity kinds."""

    CLASS = "Class"
    OBJECT_PROPERTY = "ObjectProperty"
    DATA_PROPERTY = "DataProperty"
    NAMED_INDIVIDUAL = "NamedIndividual"
    DATATYPE = "Datatype"

    @classmethod
    def parse(cls, value: str | EntityKind) -> EntityKind:
        """Accept the enum value, its name, or an ``owl_class``-style id."""
        if isinstance(value, EntityKind):
            return value
        key = value.strip().lower().replace("_", "").replace(":", "")
        if key.startswith("owl"):
            key = key[3:]
        for kind in cls:
            if key in (kind.value.lower(), kind.name.lower().replace("_", "")):
                return kind
        raise ValueError(f"Unknown entity kind: {value!r}")


class RelationKind(str, Enum):
    """Closed set of relation kinds; everything else is a property assertion."""

    SUB_CLASS_OF = "subClassOf"
    TYPE = "rdf:type"
    DISJOINT_WITH = "disjointWith"
    SUB_PROPERTY_OF = "subPropertyOf"
    PROPERTY_ASSERTION = "propertyAssertion"


_RESERVED_LABELS: dict[str, RelationKind] = {
    "subclassof": RelationKind.SUB_CLASS_OF,
    "rdfs:subclassof": RelationKind.SUB_CLASS_OF,
    "rdf:type": RelationKind.TYPE,
    "type": RelationKind.TYPE,
    "a": RelationKind.TYPE,
    "disjointwith": RelationKind.DISJOINT_WITH,
    "owl:disjointwith": RelationKind.DISJOINT_WITH,
    "subpropertyof": RelationKind.SUB_PROPERTY_OF,
    "rdfs:subpropertyof": RelationKind.SUB_PROPERTY_OF,
}


def relation_kind(label: str) -> RelationKind:
    """Classify a relation label."""
    return _RESERVED_LABELS.get(label.strip().lower(), RelationKind.PROPERTY_ASSERTION)


def local_name(name: str) -> str:
    """Return the part of *name* after its prefix, ``#`` or last ``/``.

    ``ex:Person`` -> ``Person``; ``http://x.org/onto#Person`` -> ``Person``.
    """
    for sep in ("#", "/"):
        if sep in name:
            name = name.rsplit(sep, 1)[1]
    if ":" in name:
        name = name.rsplit(":", 1)[1]
    return name


def normalize_characteristic(name: str) -> str:
    """``owl:TransitiveProperty`` and ``Transitive`` name the same flag."""
    name = local_name(name.strip())
    if name.endswith("Property") and name != "Property":
        name = name[: -len("Property")]
    return name


@dataclass(frozen=True, slots=True)
class Attribute:
    """A data-property stub on a class, or a characteristic flag on a property.

    Characteristic flags (``Functional``, ``Transitive``, ...) carry no type.
    """

    name: str
    type: str = ""


@dataclass(frozen=True, slots=True)
class Axiom:
    """An axiom attached to an entity, e.g. ``SubClassOf teaches some Course``."""

    name: str
    target: str


@dataclass(frozen=True, slots=True)
class Entity:
    """One node of the ontology graph."""

    id: str
    label: str
    kind: EntityKind
    iri: str | None = None
    attributes: tuple[Attribute, ...] = ()
    axioms: tuple[Axiom, ...] = ()

    @property
    def name(self) -> str:
        """IRI local name, falling back to the label's local name."""
        if self.iri:
            return local_name(self.iri)
        return local_name(self.label)

    @property
    def is_class(self) -> bool:
        return self.kind is EntityKind.CLASS

    @property
    def is_individual(self) -> bool:
        return self.kind is EntityKind.NAMED_INDIVIDUAL

    @property
    def is_property(self) -> bool:
        return self.kind in (EntityKind.OBJECT_PROPERTY, EntityKind.DATA_PROPERTY)

    @property
    def characteristics(self) -> frozenset[str]:
        """Characteristic flags declared as untyped attributes."""
        return frozenset(
            normalize_characteristic(a.name) for a in self.attributes if not a.type
        )

    def axiom_targets(self, kind: str) -> list[str]:
        """Targets of all axioms named *kind* (case-insensitive)."""
        kind = kind.lower()
        return [a.target.strip() for a in self.axioms if a.name.strip().lower() == kind]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "kind": self.kind.value,
            "iri": self.iri,
            "attributes": [{"name": a.name, "type": a.type} for a in self.attributes],
            "axioms": [{"name": a.name, "target": a.target} for a in self.axioms],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Entity:
        try:
            return cls(
                id=str(data["id"]),
                label=data.get("label", str(data["id"])),
                kind=EntityKind.parse(data["kind"]),
                iri=data.get("iri") or None,
                attributes=tuple(
                    Attribute(a["name"], a.get("type") or "")
                    for a in data.get("attributes", [])
                ),
                axioms=tuple(
                    Axiom(a["name"], a["target"]) for a in data.get("axioms", [])
                ),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed entity entry {data!r}: {e}") from e


@dataclass(frozen=True, slots=True)
class Relation:
    """A directed, labeled edge between two entities.

    ``inferred`` relations are produced by the materializer and carry a
    human-readable ``provenance``.
    """

    source: str
    target: str
    label: str
    id: str | None = None
    inferred: bool = False
    provenance: str | None = None

    @property
    def kind(self) -> RelationKind:
        return relation_kind(self.label)

    @property
    def key(self) -> tuple[str, str, str]:
        """Deduplication key."""
        return (self.source, self.target, self.label)

    def to_dict(self) -> dict:
        d: dict = {"source": self.source, "target": self.target, "label": self.label}
        if self.id is not None:
            d["id"] = self.id
        if self.inferred:
            d["inferred"] = True
            d["provenance"] = self.provenance
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Relation:
        try:
            return cls(
                source=str(data["source"]),
                target=str(data["target"]),
                label=data.get("label") or "",
                id=data.get("id"),
                inferred=bool(data.get("inferred", False)),
                provenance=data.get("provenance"),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed relation entry {data!r}: {e}") from e


@dataclass
class OntologyGraph:
    """Mutable container for the asserted entities and relations."""

    entities: list[Entity] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)

    def __post_init__(self) -> None:
        logger.debug(
            "OntologyGraph created: %d entities, %d relations",
            len(self.entities),
            len(self.relations),
        )

    # --- Lookup ---

    def get(self, entity_id: str) -> Entity | None:
        for e in self.entities:
            if e.id == entity_id:
                return e
        return None

    def find(self, label: str) -> Entity | None:
        """Find an entity by label, local name, then case-insensitively."""
        for e in self.entities:
            if e.label == label:
                return e
        for e in self.entities:
            if e.name == label or local_name(e.label) == label:
                return e
        lowered = label.lower()
        for e in self.entities:
            if e.label.lower() == lowered or e.name.lower() == lowered:
                return e
        return None

    def _replace(self, entity: Entity, updated: Entity) -> None:
        self.entities[self.entities.index(entity)] = updated

    # --- Mutation ---

    def add_entity(
        self,
        label: str,
        kind: str | EntityKind,
        entity_id: str | None = None,
        iri: str | None = None,
    ) -> Entity:
        """Declare an entity. Re-declaring an existing id is an error."""
        entity_id = entity_id or label
        if self.get(entity_id) is not None:
            raise ValueError(f"Entity {entity_id!r} already exists")
        entity = Entity(id=entity_id, label=label, kind=EntityKind.parse(kind), iri=iri)
        self.entities.append(entity)
        logger.debug("Added entity: %s (%s)", label, entity.kind.value)
        return entity

    def add_relation(
        self, source: str, label: str, target: str, relation_id: str | None = None
    ) -> Relation:
        """Add an asserted relation between two existing entity ids."""
        for end in (source, target):
            if self.get(end) is None:
                raise ValueError(f"Unknown entity: {end!r}")
        relation = Relation(
            source=source,
            target=target,
            label=label,
            id=relation_id or f"e{len(self.relations) + 1}",
        )
        self.relations.append(relation)
        logger.debug("Added relation: %s -%s-> %s", source, label, target)
        return relation

    def add_axiom(self, entity_id: str, name: str, target: str) -> Entity:
        entity = self._require(entity_id)
        updated = replace(entity, axioms=entity.axioms + (Axiom(name, target),))
        self._replace(entity, updated)
        logger.debug("Added axiom: %s %s %s", entity.label, name, target)
        return updated

    def add_attribute(self, entity_id: str, name: str, type: str = "") -> Entity:
        entity = self._require(entity_id)
        updated = replace(entity, attributes=entity.attributes + (Attribute(name, type),))
        self._replace(entity, updated)
        logger.debug("Added attribute: %s %s", entity.label, name)
        return updated

    def _require(self, entity_id: str) -> Entity:
        entity = self.get(entity_id)
        if entity is None:
            raise ValueError(f"Unknown entity: {entity_id!r}")
        return entity

    # --- Serialization ---

    def to_dict(self) -> dict:
        return {
            "entities": [e.to_dict() for e in self.entities],
            "relations": [r.to_dict() for r in self.relations],
        }

    @classmethod
    def from_dict(cls, data: dict) -> OntologyGraph:
        if not isinstance(data, dict):
            raise ValueError("Graph data must be a JSON object")
        return cls(
            entities=[Entity.from_dict(e) for e in data.get("entities", [])],
            relations=[Relation.from_dict(r) for r in data.get("relations", [])],
        )

    def to_file(self, path: str | Path) -> None:
        """Write the graph to a JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug("Saved graph to %s", path)

    @classmethod
    def from_file(cls, path: str | Path) -> OntologyGraph:
        """Load a graph from a JSON file."""
        with open(path) as f:
            data = json.load(f)
        logger.debug("Loaded graph from %s", path)
        return cls.from_dict(data)
