"""In-memory triple store, namespace table, and the storage backend contract.

The store keeps triples in insertion order (so every scan is deterministic)
and maintains three composite indexes (SPO, POS, OSP); ``match`` picks the
index that binds the most leading positions of a pattern.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ontoctl.domain.terms import IRI, Subject, Term, Triple


class NamespaceTable:
    """Prefix → base IRI registry."""

    def __init__(self, prefixes: Mapping[str, str] | None = None) -> None:
        self._prefixes: dict[str, str] = dict(prefixes or {})

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._prefixes

    def __len__(self) -> int:
        return len(self._prefixes)

    def get(self, prefix: str) -> str | None:
        return self._prefixes.get(prefix)

    def bind(self, prefix: str, namespace: str) -> None:
        """Register *prefix*. Callers enforce duplicate rules."""
        self._prefixes[prefix] = namespace

    def expand(self, prefix: str, local: str) -> IRI | None:
        base = self._prefixes.get(prefix)
        return IRI(base + local) if base is not None else None

    def compact(self, iri: str) -> str | None:
        """Return ``prefix:local`` for *iri*, preferring the longest namespace."""
        best: tuple[str, str] | None = None
        for prefix, base in self._prefixes.items():
            if iri.startswith(base) and (best is None or len(base) > len(best[1])):
                best = (prefix, base)
        if best is None:
            return None
        return f"{best[0]}:{iri[len(best[1]):]}"

    def as_dict(self) -> dict[str, str]:
        return dict(self._prefixes)

    def merged(self, extra: Mapping[str, str]) -> NamespaceTable:
        """Copy with *extra* bindings added where the prefix is not already bound."""
        table = NamespaceTable(self._prefixes)
        for prefix, base in extra.items():
            if prefix not in table:
                table.bind(prefix, base)
        return table


class TripleStore:
    """Set of triples with subject/predicate/object composite indexes."""

    def __init__(self, triples: Iterable[Triple] = ()) -> None:
        self._triples: dict[Triple, None] = {}
        self._spo: dict[Subject, dict[IRI, list[Term]]] = {}
        self._pos: dict[IRI, dict[Term, list[Subject]]] = {}
        self._osp: dict[Term, dict[Subject, list[IRI]]] = {}
        for triple in triples:
            self.add(triple)

    def __len__(self) -> int:
        return len(self._triples)

    def __iter__(self) -> Iterator[Triple]:
        return iter(self._triples)

    def __contains__(self, triple: object) -> bool:
        return triple in self._triples

    def add(self, triple: Triple) -> bool:
        """Insert *triple*; returns False when it was already present."""
        if triple in self._triples:
            return False
        self._triples[triple] = None
        s, p, o = triple.subject, triple.predicate, triple.object
        self._spo.setdefault(s, {}).setdefault(p, []).append(o)
        self._pos.setdefault(p, {}).setdefault(o, []).append(s)
        self._osp.setdefault(o, {}).setdefault(s, []).append(p)
        return True

    def match(
        self,
        subject: Subject | None = None,
        predicate: IRI | None = None,
        obj: Term | None = None,
    ) -> Iterator[Triple]:
        """Yield triples matching the pattern; ``None`` is a wildcard."""
        if subject is not None:
            by_pred = self._spo.get(subject, {})
            preds = [predicate] if predicate is not None else list(by_pred)
            for p in preds:
                for o in by_pred.get(p, ()):  # type: ignore[arg-type]
                    if obj is None or o == obj:
                        yield Triple(subject, p, o)  # type: ignore[arg-type]
        elif predicate is not None:
            by_obj = self._pos.get(predicate, {})
            objs = [obj] if obj is not None else list(by_obj)
            for o in objs:
                for s in by_obj.get(o, ()):  # type: ignore[arg-type]
                    yield Triple(s, predicate, o)  # type: ignore[arg-type]
        elif obj is not None:
            for s, preds in self._osp.get(obj, {}).items():
                for p in preds:
                    yield Triple(s, p, obj)
        else:
            yield from self._triples

    def objects(self, subject: Subject, predicate: IRI) -> list[Term]:
        return list(self._spo.get(subject, {}).get(predicate, ()))

    def subjects(self, predicate: IRI, obj: Term) -> list[Subject]:
        return list(self._pos.get(predicate, {}).get(obj, ()))


# ── Backend contract ─────────────────────────────────────────────────


@dataclass(frozen=True)
class QueryResults:
    """Ordered variable-binding rows from a SELECT query."""

    variables: tuple[str, ...]
    rows: list[dict[str, Term]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


@runtime_checkable
class StorageBackend(Protocol):
    """Capability every ontology backend provides.

    ``query_sparql`` raises :class:`~ontoctl.domain.errors.SparqlError`
    for query text it cannot parse or does not support.
    """

    def load_triples(self) -> Sequence[Triple]: ...

    def query_sparql(self, text: str) -> QueryResults: ...
