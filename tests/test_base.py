"""Tests for pyonto.base -- the ontology graph data model."""

import json

import pytest

from pyonto.base import (
    Attribute,
    Axiom,
    Entity,
    EntityKind,
    OntologyGraph,
    Relation,
    RelationKind,
    local_name,
    normalize_characteristic,
    relation_kind,
)

# -------------------------------------------------------------------
# Kinds
# -------------------------------------------------------------------


class TestEntityKind:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Class", EntityKind.CLASS),
            ("owl_class", EntityKind.CLASS),
            ("owl:Class", EntityKind.CLASS),
            ("NAMED_INDIVIDUAL", EntityKind.NAMED_INDIVIDUAL),
            ("owl_named_individual", EntityKind.NAMED_INDIVIDUAL),
            ("ObjectProperty", EntityKind.OBJECT_PROPERTY),
            ("owl_data_property", EntityKind.DATA_PROPERTY),
            ("owl_datatype", EntityKind.DATATYPE),
        ],
    )
    def test_parse(self, raw, expected):
        assert EntityKind.parse(raw) is expected

    def test_parse_passthrough(self):
        assert EntityKind.parse(EntityKind.CLASS) is EntityKind.CLASS

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown entity kind"):
            EntityKind.parse("Ontology")


class TestRelationKind:
    @pytest.mark.parametrize(
        "label, expected",
        [
            ("subClassOf", RelationKind.SUB_CLASS_OF),
            ("rdfs:subClassOf", RelationKind.SUB_CLASS_OF),
            ("rdf:type", RelationKind.TYPE),
            ("a", RelationKind.TYPE),
            ("disjointWith", RelationKind.DISJOINT_WITH),
            ("subPropertyOf", RelationKind.SUB_PROPERTY_OF),
            ("teaches", RelationKind.PROPERTY_ASSERTION),
            ("ex:teaches", RelationKind.PROPERTY_ASSERTION),
        ],
    )
    def test_relation_kind(self, label, expected):
        assert relation_kind(label) is expected

    def test_relation_key(self):
        r = Relation("a", "b", "teaches", id="e1")
        assert r.key == ("a", "b", "teaches")
        assert r.kind is RelationKind.PROPERTY_ASSERTION


# -------------------------------------------------------------------
# Names and characteristics
# -------------------------------------------------------------------


class TestNames:
    def test_local_name_prefix(self):
        assert local_name("ex:Person") == "Person"

    def test_local_name_iri_fragment(self):
        assert local_name("http://example.org/onto#Person") == "Person"

    def test_local_name_iri_path(self):
        assert local_name("http://example.org/onto/Person") == "Person"

    def test_local_name_plain(self):
        assert local_name("Person") == "Person"

    def test_entity_name_prefers_iri(self):
        e = Entity("1", "Human", EntityKind.CLASS, iri="http://x.org/o#Person")
        assert e.name == "Person"

    def test_entity_name_from_label(self):
        e = Entity("1", "ex:Person", EntityKind.CLASS)
        assert e.name == "Person"

    @pytest.mark.parametrize(
        "raw", ["Transitive", "owl:TransitiveProperty", "TransitiveProperty"]
    )
    def test_normalize_characteristic(self, raw):
        assert normalize_characteristic(raw) == "Transitive"

    def test_characteristics_ignore_typed_attributes(self):
        e = Entity(
            "p",
            "teaches",
            EntityKind.OBJECT_PROPERTY,
            attributes=(Attribute("Transitive"), Attribute("hours", "xsd:int")),
        )
        assert e.characteristics == frozenset({"Transitive"})

    def test_axiom_targets_case_insensitive(self):
        e = Entity(
            "c",
            "Student",
            EntityKind.CLASS,
            axioms=(Axiom("SubClassOf", "Person"), Axiom("subclassof", " Agent ")),
        )
        assert e.axiom_targets("SubClassOf") == ["Person", "Agent"]
        assert e.axiom_targets("Domain") == []


# -------------------------------------------------------------------
# Graph mutation and lookup
# -------------------------------------------------------------------


class TestOntologyGraph:
    def test_add_entity_defaults_id_to_label(self):
        g = OntologyGraph()
        e = g.add_entity("Person", "Class")
        assert e.id == "Person"
        assert g.get("Person") is e

    def test_duplicate_entity_rejected(self):
        g = OntologyGraph()
        g.add_entity("Person", "Class")
        with pytest.raises(ValueError, match="already exists"):
            g.add_entity("Person", "Class")

    def test_add_relation_requires_known_entities(self):
        g = OntologyGraph()
        g.add_entity("Person", "Class")
        with pytest.raises(ValueError, match="Unknown entity"):
            g.add_relation("Person", "subClassOf", "Agent")

    def test_add_relation_assigns_id(self):
        g = OntologyGraph()
        g.add_entity("Person", "Class")
        g.add_entity("Agent", "Class")
        r = g.add_relation("Person", "subClassOf", "Agent")
        assert r.id == "e1"

    def test_add_axiom_replaces_snapshot(self):
        g = OntologyGraph()
        before = g.add_entity("Student", "Class")
        after = g.add_axiom("Student", "SubClassOf", "Person")
        assert before.axioms == ()
        assert after.axioms == (Axiom("SubClassOf", "Person"),)
        assert g.get("Student") is after

    def test_add_attribute(self):
        g = OntologyGraph()
        g.add_entity("teaches", "ObjectProperty")
        g.add_attribute("teaches", "Symmetric")
        assert g.get("teaches").characteristics == frozenset({"Symmetric"})

    def test_find_by_local_name_and_case(self):
        g = OntologyGraph()
        g.add_entity("ex:Person", "Class", entity_id="1")
        assert g.find("ex:Person").id == "1"
        assert g.find("Person").id == "1"
        assert g.find("person").id == "1"
        assert g.find("Martian") is None


# -------------------------------------------------------------------
# Serialization
# -------------------------------------------------------------------


class TestSerialization:
    def _graph(self):
        g = OntologyGraph()
        g.add_entity("Person", "Class", iri="http://x.org/o#Person")
        g.add_entity("Student", "Class")
        g.add_entity("john", "NamedIndividual")
        g.add_entity("teaches", "ObjectProperty")
        g.add_attribute("teaches", "Transitive")
        g.add_axiom("Student", "SubClassOf", "Person")
        g.add_relation("john", "rdf:type", "Student")
        return g

    def test_dict_roundtrip(self):
        g = self._graph()
        restored = OntologyGraph.from_dict(g.to_dict())
        assert restored.entities == g.entities
        assert restored.relations == g.relations

    def test_file_roundtrip(self, tmp_path):
        path = tmp_path / "graph.json"
        g = self._graph()
        g.to_file(path)
        data = json.loads(path.read_text())
        assert data["entities"][0]["kind"] == "Class"
        assert OntologyGraph.from_file(path).entities == g.entities

    def test_inferred_relation_dict(self):
        r = Relation("a", "c", "teaches", inferred=True, provenance="Transitive Property")
        d = r.to_dict()
        assert d["inferred"] is True
        assert d["provenance"] == "Transitive Property"
        assert Relation.from_dict(d) == r

    def test_owl_style_kind_ids(self):
        g = OntologyGraph.from_dict({
            "entities": [{"id": "1", "label": "Person", "kind": "owl_class"}],
            "relations": [],
        })
        assert g.entities[0].kind is EntityKind.CLASS

    def test_malformed_entity(self):
        with pytest.raises(ValueError, match="Malformed entity"):
            OntologyGraph.from_dict({"entities": [{"label": "Person"}]})

    def test_malformed_relation(self):
        with pytest.raises(ValueError, match="Malformed relation"):
            OntologyGraph.from_dict({"relations": [{"source": "a"}]})

    def test_not_an_object(self):
        with pytest.raises(ValueError):
            OntologyGraph.from_dict([])
