"""Default storage backend: the in-memory TripleStore plus the bounded SPARQL engine."""

from __future__ import annotations

from collections.abc import Sequence

from ontoctl.domain import sparql
from ontoctl.domain.store import NamespaceTable, QueryResults, TripleStore
from ontoctl.domain.terms import Triple


class MemoryBackend:
    """StorageBackend over an in-memory TripleStore."""

    name = "memory"

    def __init__(self, store: TripleStore, namespaces: NamespaceTable) -> None:
        self._store = store
        self._namespaces = namespaces

    def load_triples(self) -> Sequence[Triple]:
        return list(self._store)

    def query_sparql(self, text: str) -> QueryResults:
        return sparql.execute(text, self._store, self._namespaces.as_dict())
