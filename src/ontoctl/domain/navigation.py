"""Vocabulary-aware lookups shared by validation and extraction."""

from __future__ import annotations

from ontoctl.domain.store import NamespaceTable, TripleStore
from ontoctl.domain.terms import IRI, BNode, Literal, Subject, Term
from ontoctl.domain.vocabulary import ARG_TYPE, BASE_TYPE, HAS_ARGUMENT, HAS_NOUN, HAS_VERB, NAME, VALIDATOR


def _unique(nodes: list[Term]) -> list[Subject]:
    out: list[Subject] = []
    for node in nodes:
        if isinstance(node, IRI | BNode) and node not in out:
            out.append(node)
    return out


def first_literal(graph: TripleStore, node: Subject, prop: IRI) -> Literal | None:
    for value in graph.objects(node, prop):
        if isinstance(value, Literal):
            return value
    return None


def name_of(graph: TripleStore, node: Subject) -> str | None:
    literal = first_literal(graph, node, NAME)
    return literal.lexical if literal is not None else None


def display(graph: TripleStore, node: Subject, namespaces: NamespaceTable) -> str:
    """Human label for error messages: cnv:name, else a compact IRI."""
    name = name_of(graph, node)
    if name:
        return name
    if isinstance(node, BNode):
        return str(node)
    return namespaces.compact(node.value) or node.n3()


def verbs_of(graph: TripleStore, noun: Subject) -> list[Subject]:
    """Verbs linked by ``noun cnv:hasVerb v`` or ``v cnv:hasNoun noun``."""
    return _unique([*graph.objects(noun, HAS_VERB), *graph.subjects(HAS_NOUN, noun)])


def nouns_of(graph: TripleStore, verb: Subject) -> list[Subject]:
    return _unique([*graph.objects(verb, HAS_NOUN), *graph.subjects(HAS_VERB, verb)])


def arguments_of(graph: TripleStore, verb: Subject) -> list[Subject]:
    return _unique(graph.objects(verb, HAS_ARGUMENT))


def type_refs(graph: TripleStore, node: Subject) -> list[Term]:
    """``cnv:argType`` and ``cnv:baseType`` objects of *node*."""
    return [*graph.objects(node, ARG_TYPE), *graph.objects(node, BASE_TYPE)]


def validators_of(graph: TripleStore, node: Subject) -> list[Subject]:
    return _unique(graph.objects(node, VALIDATOR))
