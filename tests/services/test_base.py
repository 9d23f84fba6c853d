"""Tests for BaseService and pipeline-error mapping."""

from __future__ import annotations

import pytest

from ontoctl.domain.errors import CircularDependency, SourceError, TurtleSyntaxError
from ontoctl.infrastructure.workspace import Workspace
from ontoctl.services.base import BaseService, failure
from ontoctl.services.check import CheckService
from ontoctl.services.export import ExportService
from ontoctl.services.generate import GenerateService
from ontoctl.services.query import QueryService


class TestBaseService:
    def test_workspace_stored(self, workspace: Workspace) -> None:
        service = BaseService(workspace)
        assert service._workspace is workspace

    def test_subclass_pattern(self, workspace: Workspace) -> None:
        class RootService(BaseService):
            def describe(self) -> str:
                return f"workspace at {self._workspace.root}"

        assert str(workspace.root) in RootService(workspace).describe()


ALL_SERVICES = [GenerateService, QueryService, ExportService, CheckService]


class TestServiceInheritance:
    @pytest.mark.parametrize("service_cls", ALL_SERVICES, ids=lambda c: c.__name__)
    def test_inherits_base_service(self, service_cls: type) -> None:
        assert issubclass(service_cls, BaseService)

    @pytest.mark.parametrize("service_cls", ALL_SERVICES, ids=lambda c: c.__name__)
    def test_workspace_injection(self, service_cls: type, workspace: Workspace) -> None:
        assert service_cls(workspace)._workspace is workspace


# ── failure() ────────────────────────────────────────────────────────


class TestFailure:
    def test_copies_code_message_detail_hint(self) -> None:
        exc = TurtleSyntaxError(3, 7, "expected '.'")
        result = failure("check", exc)
        assert not result.ok
        assert result.op == "check"
        assert result.error is not None
        assert result.error.code == "SYNTAX_ERROR"
        assert result.error.message == "line 3, column 7: expected '.'"
        assert result.error.detail == {"line": 3, "column": 7, "reason": "expected '.'"}
        assert result.error.hint == TurtleSyntaxError.hint

    def test_list_detail(self) -> None:
        result = failure("check", CircularDependency(["A", "B", "A"]))
        assert result.error is not None
        assert result.error.detail["cycle"] == ["A", "B", "A"]

    def test_warnings_kept(self) -> None:
        result = failure("generate", SourceError("x.ttl", "file not found"), warnings=["careful"])
        assert result.warnings == ["careful"]
