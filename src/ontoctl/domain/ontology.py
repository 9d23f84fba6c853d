"""Ontology wrappers: ParsedOntology and ValidatedOntology.

The validation state is carried by the wrapper type. ``ParsedOntology`` is
what the Turtle parser produces; ``ValidatedOntology`` exists only once
:func:`ontoctl.domain.validation.validate` has accepted it, and direct
construction raises ``TypeError``. Command extraction accepts nothing else.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import cached_property

from ontoctl.domain.store import NamespaceTable, StorageBackend, TripleStore
from ontoctl.domain.terms import IRI, Subject, Triple
from ontoctl.domain.vocabulary import INDEXED_CLASSES, RDF_TYPE

type BackendFactory = Callable[[TripleStore, NamespaceTable], StorageBackend]


class CommandIndex:
    """Subjects typed with each vocabulary class, in document order."""

    def __init__(self, triples: Sequence[Triple]) -> None:
        self._by_class: dict[IRI, list[Subject]] = {cls: [] for cls in INDEXED_CLASSES}
        for triple in triples:
            if triple.predicate == RDF_TYPE and triple.object in self._by_class:
                members = self._by_class[triple.object]  # type: ignore[index]
                if triple.subject not in members:
                    members.append(triple.subject)

    def members(self, cls: IRI) -> tuple[Subject, ...]:
        return tuple(self._by_class.get(cls, ()))

    def counts(self) -> dict[str, int]:
        return {cls.value.rsplit("#", 1)[-1].lower(): len(subjects) for cls, subjects in self._by_class.items()}


class _OntologyBase:
    def __init__(
        self,
        backend: StorageBackend,
        namespaces: NamespaceTable,
        index: CommandIndex,
        *,
        content_hash: str | None = None,
    ) -> None:
        self.backend = backend
        self.namespaces = namespaces
        self.index = index
        self.content_hash = content_hash

    @cached_property
    def graph(self) -> TripleStore:
        """Indexed view over ``backend.load_triples()`` for property lookups."""
        return TripleStore(self.backend.load_triples())

    def __len__(self) -> int:
        return len(self.graph)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(triples={len(self)}, prefixes={len(self.namespaces)})"


class ParsedOntology(_OntologyBase):
    """Well-formed ontology whose semantic invariants are not yet checked."""

    @classmethod
    def build(
        cls,
        store: TripleStore,
        namespaces: NamespaceTable,
        backend_factory: BackendFactory,
        *,
        content_hash: str | None = None,
    ) -> ParsedOntology:
        backend = backend_factory(store, namespaces)
        return cls(backend, namespaces, CommandIndex(list(store)), content_hash=content_hash)


_CERTIFIED = object()


class ValidatedOntology(_OntologyBase):
    """Ontology that passed every validation check."""

    def __init__(self, parsed: ParsedOntology, *, certificate: object = None) -> None:
        if certificate is not _CERTIFIED:
            msg = "ValidatedOntology can only be produced by validate()"
            raise TypeError(msg)
        super().__init__(parsed.backend, parsed.namespaces, parsed.index, content_hash=parsed.content_hash)


def _certify(parsed: ParsedOntology) -> ValidatedOntology:
    """Promote *parsed* once validation has succeeded."""
    return ValidatedOntology(parsed, certificate=_CERTIFIED)
