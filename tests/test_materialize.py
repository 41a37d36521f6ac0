"""Tests for pyonto.materialize -- inferred relations with provenance."""

import pytest

from pyonto.base import OntologyGraph, Relation
from pyonto.materialize import inferred_relations, materialize_entailments


def _triples(relations):
    return {(r.source, r.label, r.target) for r in relations}


def _infer(g: OntologyGraph):
    return inferred_relations(g.entities, g.relations)


def _graph(individuals=(), classes=(), properties=()):
    g = OntologyGraph()
    for label in classes:
        g.add_entity(label, "Class")
    for label in individuals:
        g.add_entity(label, "NamedIndividual")
    for label in properties:
        g.add_entity(label, "ObjectProperty")
    return g


# -------------------------------------------------------------------
# Class-level rules
# -------------------------------------------------------------------


class TestClassRules:
    def test_transitive_subclass(self):
        g = _graph(classes=("LivingThing", "Animal", "Cat"))
        g.add_relation("Animal", "subClassOf", "LivingThing")
        g.add_relation("Cat", "subClassOf", "Animal")
        inferred = _infer(g)
        assert _triples(inferred) == {("Cat", "rdfs:subClassOf", "LivingThing")}
        assert inferred[0].provenance == "Transitive Subclass"
        assert inferred[0].inferred is True

    def test_class_membership(self):
        g = _graph(classes=("Animal", "Cat"), individuals=("tom",))
        g.add_relation("Cat", "subClassOf", "Animal")
        g.add_relation("tom", "rdf:type", "Cat")
        inferred = _infer(g)
        assert _triples(inferred) == {("tom", "rdf:type", "Animal")}
        assert inferred[0].provenance == "Class Membership"

    def test_axiom_hierarchy_materialized(self):
        g = _graph(classes=("Person", "Student"))
        g.add_axiom("Student", "SubClassOf", "Person")
        assert _triples(_infer(g)) == {("Student", "rdfs:subClassOf", "Person")}

    def test_cycle_has_no_self_loops(self):
        g = _graph(classes=("A", "B"))
        g.add_relation("A", "subClassOf", "B")
        g.add_relation("B", "subClassOf", "A")
        for r in _infer(g):
            assert r.source != r.target


# -------------------------------------------------------------------
# Property-level rules
# -------------------------------------------------------------------


class TestPropertyRules:
    def test_domain_and_range(self):
        g = _graph(classes=("Teacher", "Course"), individuals=("bob", "c1"), properties=("teaches",))
        g.add_axiom("teaches", "Domain", "Teacher")
        g.add_axiom("teaches", "Range", "Course")
        g.add_relation("bob", "teaches", "c1")
        inferred = {(r.source, r.label, r.target): r.provenance for r in _infer(g)}
        assert inferred == {
            ("bob", "rdf:type", "Teacher"): "Domain of teaches",
            ("c1", "rdf:type", "Course"): "Range of teaches",
        }

    def test_inverse_both_directions(self):
        g = _graph(individuals=("bob", "c1", "ann", "c2"), properties=("teaches", "taughtBy"))
        g.add_axiom("teaches", "InverseOf", "taughtBy")
        g.add_relation("bob", "teaches", "c1")
        g.add_relation("c2", "taughtBy", "ann")
        inferred = {(r.source, r.label, r.target): r.provenance for r in _infer(g)}
        assert inferred == {
            ("c1", "taughtBy", "bob"): "Inverse of teaches",
            ("ann", "teaches", "c2"): "Inverse of taughtBy",
        }

    def test_sub_property(self):
        g = _graph(individuals=("a", "b", "c"), properties=("hasParent", "hasAncestor"))
        g.add_relation("hasParent", "subPropertyOf", "hasAncestor")
        g.add_relation("a", "hasParent", "b")
        inferred = _infer(g)
        assert _triples(inferred) == {("a", "hasAncestor", "b")}
        assert inferred[0].provenance == "Sub-property of hasParent"

    def test_symmetric(self):
        g = _graph(individuals=("a", "b"), properties=("knows",))
        g.add_attribute("knows", "Symmetric")
        g.add_relation("a", "knows", "b")
        inferred = _infer(g)
        assert _triples(inferred) == {("b", "knows", "a")}
        assert inferred[0].provenance == "Symmetric Property"

    def test_symmetric_over_inferred_sub_property(self):
        g = _graph(individuals=("a", "b"), properties=("hasFriend", "knows"))
        g.add_axiom("hasFriend", "SubPropertyOf", "knows")
        g.add_attribute("knows", "SymmetricProperty")
        g.add_relation("a", "hasFriend", "b")
        assert _triples(_infer(g)) == {("a", "knows", "b"), ("b", "knows", "a")}

    def test_transitive(self):
        g = _graph(individuals=("A", "B", "C"), properties=("teaches",))
        g.add_attribute("teaches", "Transitive")
        g.add_relation("A", "teaches", "B")
        g.add_relation("B", "teaches", "C")
        result = materialize_entailments(g.entities, g.relations)
        inferred = [r for r in result if r.inferred]
        assert _triples(inferred) == {("A", "teaches", "C")}
        assert inferred[0].provenance == "Transitive Property"
        assert inferred[0].id == "inferred-A-C-teaches"

    def test_transitive_chain(self):
        g = _graph(individuals=("a", "b", "c", "d"), properties=("partOf",))
        g.add_attribute("partOf", "owl:TransitiveProperty")
        g.add_relation("a", "partOf", "b")
        g.add_relation("b", "partOf", "c")
        g.add_relation("c", "partOf", "d")
        assert _triples(_infer(g)) == {
            ("a", "partOf", "c"), ("a", "partOf", "d"), ("b", "partOf", "d"),
        }

    def test_transitive_cycle_terminates(self):
        g = _graph(individuals=("a", "b"), properties=("linked",))
        g.add_attribute("linked", "Transitive")
        g.add_relation("a", "linked", "b")
        g.add_relation("b", "linked", "a")
        assert _infer(g) == []

    def test_transitive_properties_kept_apart(self):
        g = _graph(individuals=("a", "b", "c", "x", "y"), properties=("partOf", "locatedIn"))
        g.add_attribute("partOf", "Transitive")
        g.add_attribute("locatedIn", "Transitive")
        g.add_relation("a", "partOf", "b")
        g.add_relation("b", "partOf", "c")
        g.add_relation("c", "locatedIn", "x")
        g.add_relation("x", "locatedIn", "y")
        inferred = _infer(g)
        assert [(r.source, r.label, r.target) for r in inferred] == [
            ("a", "partOf", "c"), ("c", "locatedIn", "y"),
        ]

    def test_transitive_prefixed_edge_labels(self):
        g = _graph(individuals=("a", "b", "c"), properties=("partOf",))
        g.add_attribute("partOf", "Transitive")
        g.add_relation("a", "ex:partOf", "b")
        g.add_relation("b", "ex:partOf", "c")
        assert _triples(_infer(g)) == {("a", "partOf", "c")}


# -------------------------------------------------------------------
# Deduplication and output shape
# -------------------------------------------------------------------


class TestOutput:
    def test_asserted_not_duplicated(self):
        g = _graph(individuals=("a", "b"), properties=("knows",))
        g.add_attribute("knows", "Symmetric")
        g.add_relation("a", "knows", "b")
        g.add_relation("b", "knows", "a")
        assert _infer(g) == []

    def test_reserved_labels_deduplicated_across_spellings(self):
        g = _graph(classes=("A", "B", "C"))
        g.add_relation("A", "subClassOf", "B")
        g.add_relation("B", "subClassOf", "C")
        g.add_relation("A", "rdfs:subClassOf", "C")
        assert _infer(g) == []

    def test_self_loop_suppressed(self):
        g = _graph(individuals=("a",), properties=("knows",))
        g.add_attribute("knows", "Symmetric")
        g.add_relation("a", "knows", "a")
        assert _infer(g) == []

    def test_asserted_first_and_untouched(self):
        g = _graph(classes=("A", "B", "C"))
        first = g.add_relation("A", "subClassOf", "B")
        second = g.add_relation("B", "subClassOf", "C")
        result = materialize_entailments(g.entities, g.relations)
        assert result[:2] == [first, second]
        assert all(not r.inferred for r in result[:2])
        assert all(r.inferred for r in result[2:])

    def test_no_duplicate_keys(self):
        g = _graph(classes=("Teacher",), individuals=("a", "b", "c"), properties=("teaches",))
        g.add_attribute("teaches", "Transitive")
        g.add_attribute("teaches", "Symmetric")
        g.add_axiom("teaches", "Domain", "Teacher")
        g.add_relation("a", "teaches", "b")
        g.add_relation("b", "teaches", "c")
        inferred = _infer(g)
        keys = [r.key for r in inferred]
        assert len(keys) == len(set(keys))

    def test_unknown_endpoints_ignored(self):
        g = _graph(classes=("A",))
        relations = [Relation("A", "Ghost", "subClassOf", id="e1")]
        assert materialize_entailments(g.entities, relations) == relations

    def test_deterministic(self):
        g = _graph(classes=("A", "B", "C"), individuals=("x",))
        g.add_relation("A", "subClassOf", "B")
        g.add_relation("B", "subClassOf", "C")
        g.add_relation("x", "rdf:type", "A")
        assert _infer(g) == _infer(g)

    def test_empty_graph(self):
        assert materialize_entailments([], []) == []


@pytest.mark.parametrize(
    "flag, expected",
    [
        ("Symmetric", {("b", "rel", "a")}),
        ("Transitive", set()),
        ("Functional", set()),
    ],
)
def test_single_assertion_by_characteristic(flag, expected):
    g = _graph(individuals=("a", "b"), properties=("rel",))
    g.add_attribute("rel", flag)
    g.add_relation("a", "rel", "b")
    assert _triples(_infer(g)) == expected
