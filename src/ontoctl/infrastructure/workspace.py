"""Workspace: the single dependency injected into every service.

Owns the settings-derived collaborators (source loader, ontology cache,
storage backend factory, syntax checker) and the load → parse → validate
pipeline that every operation starts with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ontoctl.domain.backend import MemoryBackend
from ontoctl.domain.ontology import BackendFactory, ValidatedOntology
from ontoctl.domain.turtle import parse_turtle
from ontoctl.domain.validation import validate
from ontoctl.infrastructure.cache import OntologyCache, content_hash
from ontoctl.infrastructure.loader import LoadedSource, SourceLoader
from ontoctl.infrastructure.syntax import PythonSyntaxChecker, SyntaxChecker

if TYPE_CHECKING:
    from ontoctl.config.settings import OntoSettings

logger = logging.getLogger(__name__)


def backend_factory_for(name: str) -> BackendFactory:
    if name == "memory":
        return MemoryBackend
    if name == "rdflib":
        from ontoctl.infrastructure.rdflib_backend import RdflibBackend

        return RdflibBackend
    msg = f"unknown storage backend {name!r}"
    raise ValueError(msg)


@dataclass(frozen=True)
class LoadedOntology:
    source: LoadedSource
    ontology: ValidatedOntology
    cached: bool


class Workspace:
    """Shared state for one CLI invocation or one MCP server process."""

    def __init__(
        self,
        settings: OntoSettings,
        *,
        loader: SourceLoader | None = None,
        checker: SyntaxChecker | None = None,
    ) -> None:
        self.settings = settings
        self.root: Path = settings.workspace_root
        self.loader = loader or SourceLoader(
            root=self.root,
            allow_remote=settings.sources.allow_remote,
            timeout=settings.sources.http_timeout,
            max_bytes=settings.sources.max_bytes,
        )
        self.checker = checker or PythonSyntaxChecker()
        self.backend_factory = backend_factory_for(settings.query.backend)
        self.cache: OntologyCache | None = (
            OntologyCache(settings.cache.max_entries) if settings.cache.enabled else None
        )

    def parse_and_validate(self, text: str, *, base_iri: str | None = None) -> ValidatedOntology:
        parsed = parse_turtle(text, base_iri=base_iri, backend_factory=self.backend_factory)
        return validate(parsed)

    def load_validated(
        self, *, text: str | None = None, path: str | None = None, url: str | None = None
    ) -> LoadedOntology:
        """Load a source and return its validated ontology, via the cache when enabled."""
        source = self.loader.load(text=text, path=path, url=url)
        if self.cache is None:
            return LoadedOntology(source, self.parse_and_validate(source.text, base_iri=source.base_iri), False)
        ontology, cached = self.cache.get_or_build(
            content_hash(source.text, source.base_iri),
            lambda: self.parse_and_validate(source.text, base_iri=source.base_iri),
        )
        if cached:
            logger.debug("Ontology cache hit for %s", source.location)
        return LoadedOntology(source, ontology, cached)
