"""Alternate storage backend on an rdflib Graph.

Queries go through rdflib's SPARQL 1.1 engine, so this backend accepts more
than the bounded in-memory engine does, including its bare vocabulary names
(``?v a Verb``). Result terms are converted back to ontoctl terms so
consumers cannot tell the backends apart.
"""

from __future__ import annotations

from collections.abc import Sequence

import rdflib
from pyparsing import ParseException

from ontoctl.domain.errors import SparqlError
from ontoctl.domain.sparql import qualify_bare_names
from ontoctl.domain.store import NamespaceTable, QueryResults, TripleStore
from ontoctl.domain.terms import IRI, BNode, Literal, Term, Triple
from ontoctl.domain.vocabulary import CNV_NS, STANDARD_PREFIXES


def to_rdflib(term: Term) -> rdflib.term.Node:
    if isinstance(term, IRI):
        return rdflib.URIRef(term.value)
    if isinstance(term, BNode):
        return rdflib.BNode(term.id)
    return rdflib.Literal(
        term.lexical,
        lang=term.language,
        datatype=rdflib.URIRef(term.datatype) if term.datatype else None,
    )


def from_rdflib(node: rdflib.term.Node) -> Term:
    if isinstance(node, rdflib.URIRef):
        return IRI(str(node))
    if isinstance(node, rdflib.BNode):
        return BNode(str(node))
    if isinstance(node, rdflib.Literal):
        datatype = str(node.datatype) if node.datatype is not None else None
        return Literal(str(node), datatype=datatype, language=node.language)
    msg = f"unsupported rdflib term {node!r}"
    raise TypeError(msg)


class RdflibBackend:
    """StorageBackend over an ``rdflib.Graph``."""

    name = "rdflib"

    def __init__(self, store: TripleStore, namespaces: NamespaceTable) -> None:
        self._triples = list(store)
        self._graph = rdflib.Graph()
        for prefix, namespace in {**STANDARD_PREFIXES, **namespaces.as_dict()}.items():
            self._graph.bind(prefix, namespace, override=True)
        for triple in self._triples:
            self._graph.add((to_rdflib(triple.subject), to_rdflib(triple.predicate), to_rdflib(triple.object)))
        self._init_ns = {**STANDARD_PREFIXES, "": CNV_NS, **namespaces.as_dict()}

    @property
    def graph(self) -> rdflib.Graph:
        return self._graph

    def load_triples(self) -> Sequence[Triple]:
        return list(self._triples)

    def query_sparql(self, text: str) -> QueryResults:
        try:
            result = self._graph.query(qualify_bare_names(text), initNs=self._init_ns)
        except ParseException as exc:
            raise SparqlError(f"invalid SPARQL: {exc}") from exc
        except Exception as exc:  # rdflib raises a variety of evaluation errors
            raise SparqlError(f"query failed: {exc}") from exc
        if result.type != "SELECT":
            raise SparqlError(f"only SELECT queries are supported, got {result.type}")
        variables = tuple(str(var) for var in result.vars or ())
        rows = []
        for binding in result:
            row = {}
            for name, value in zip(variables, binding, strict=True):
                if value is not None:
                    row[name] = from_rdflib(value)
            rows.append(row)
        return QueryResults(variables=variables, rows=rows)
