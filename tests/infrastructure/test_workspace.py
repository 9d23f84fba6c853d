"""Tests for the Workspace load → parse → validate pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

from ontoctl.config.models import CacheConfig, QueryConfig
from ontoctl.config.settings import OntoSettings
from ontoctl.domain.backend import MemoryBackend
from ontoctl.domain.errors import DuplicateNoun, TurtleSyntaxError
from ontoctl.infrastructure.rdflib_backend import RdflibBackend
from ontoctl.infrastructure.workspace import Workspace, backend_factory_for
from tests.conftest import PREFIXES, SERVICES_TTL


class TestBackendFactory:
    def test_known_backends(self) -> None:
        assert backend_factory_for("memory") is MemoryBackend
        assert backend_factory_for("rdflib") is RdflibBackend

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError, match="unknown storage backend"):
            backend_factory_for("oxigraph")


class TestWorkspace:
    def test_collaborators_from_settings(self, workspace: Workspace, workspace_root: Path) -> None:
        assert workspace.root == workspace_root
        assert workspace.cache is not None
        assert workspace.backend_factory is MemoryBackend

    def test_load_path_then_hit_cache(self, workspace: Workspace, workspace_root: Path) -> None:
        first = workspace.load_validated(path="services.ttl")
        second = workspace.load_validated(path="services.ttl")
        assert first.cached is False
        assert second.cached is True
        assert second.ontology is first.ontology
        assert first.source.location == str(workspace_root / "services.ttl")

    def test_base_iri_is_part_of_cache_key(self, workspace: Workspace) -> None:
        workspace.load_validated(text=SERVICES_TTL)
        from_file = workspace.load_validated(path="services.ttl")
        assert from_file.cached is False

    def test_invalid_input_is_not_cached(self, workspace: Workspace) -> None:
        text = PREFIXES + 'ex:a a cnv:Noun ; cnv:name "x" .\nex:b a cnv:Noun ; cnv:name "x" .\n'
        for _ in range(2):
            with pytest.raises(DuplicateNoun):
                workspace.load_validated(text=text)
        assert workspace.cache is not None
        assert len(workspace.cache) == 0

    def test_syntax_errors_propagate(self, workspace: Workspace) -> None:
        with pytest.raises(TurtleSyntaxError):
            workspace.load_validated(text="@prefix broken")

    def test_cache_disabled(self, workspace_root: Path) -> None:
        settings = OntoSettings.from_cli(workspace_root=workspace_root, cache=CacheConfig(enabled=False))
        workspace = Workspace(settings)
        assert workspace.cache is None
        assert workspace.load_validated(path="services.ttl").cached is False
        assert workspace.load_validated(path="services.ttl").cached is False

    def test_rdflib_backend_from_settings(self, workspace_root: Path) -> None:
        settings = OntoSettings.from_cli(workspace_root=workspace_root, query=QueryConfig(backend="rdflib"))
        loaded = Workspace(settings).load_validated(path="catalog.ttl")
        assert isinstance(loaded.ontology.backend, RdflibBackend)
