"""Tests for GenerateService."""

from __future__ import annotations

from pathlib import Path

from ontoctl.config.models import GenerateConfig
from ontoctl.config.settings import OntoSettings
from ontoctl.infrastructure.workspace import Workspace
from ontoctl.services.contracts import GenerateOptions, SourceSpec
from ontoctl.services.generate import GenerateService
from tests.conftest import PREFIXES, SERVICES_TTL


class TestGenerateService:
    def test_zero_argument_verb(self, workspace: Workspace) -> None:
        result = GenerateService(workspace).generate(SourceSpec(path="services.ttl"))
        assert result.ok
        assert result.op == "generate"
        assert "def services_status() -> None:" in result.data["code"]
        assert result.data["summary"]["noun_count"] == 1
        metadata = result.data["metadata"]
        assert metadata["features"] == []
        assert metadata["warnings"] == []
        assert metadata["cached"] is False
        assert metadata["output_path"] is None
        assert len(metadata["content_hash"]) == 64
        assert "T" in metadata["generated_at"]

    def test_inline_text(self, workspace: Workspace) -> None:
        result = GenerateService(workspace).generate(SourceSpec(text=SERVICES_TTL))
        assert result.ok
        assert "@cli.group('services')" in result.data["code"]

    def test_second_run_uses_cache(self, workspace: Workspace) -> None:
        svc = GenerateService(workspace)
        first = svc.generate(SourceSpec(path="calc.ttl"))
        second = svc.generate(SourceSpec(path="calc.ttl"))
        assert first.data["metadata"]["cached"] is False
        assert second.data["metadata"]["cached"] is True
        assert first.data["code"] == second.data["code"]

    def test_async_warning_surfaces(self, workspace: Workspace) -> None:
        result = GenerateService(workspace).generate(SourceSpec(path="catalog.ttl"))
        assert result.ok
        expected = ["verb 'services restart' is async but async_handlers is disabled"]
        assert result.warnings == expected
        assert result.data["metadata"]["warnings"] == expected


class TestGenerateOptions:
    def test_explicit_features(self, workspace: Workspace) -> None:
        options = GenerateOptions(features=["completions", "async_handlers"])
        result = GenerateService(workspace).generate(SourceSpec(path="catalog.ttl"), options)
        assert result.ok
        assert result.data["metadata"]["features"] == ["async_handlers", "completions"]
        assert result.warnings == []
        assert "import asyncio" in result.data["code"]

    def test_features_from_config(self, workspace_root: Path) -> None:
        settings = OntoSettings.from_cli(workspace_root=workspace_root, generate=GenerateConfig(man_page=True))
        result = GenerateService(Workspace(settings)).generate(SourceSpec(path="calc.ttl"))
        assert result.data["metadata"]["features"] == ["man_page"]
        assert "def render_man_page() -> str:" in result.data["code"]

    def test_empty_feature_list_overrides_config(self, workspace_root: Path) -> None:
        settings = OntoSettings.from_cli(workspace_root=workspace_root, generate=GenerateConfig(man_page=True))
        result = GenerateService(Workspace(settings)).generate(SourceSpec(path="calc.ttl"), GenerateOptions(features=[]))
        assert result.data["metadata"]["features"] == []

    def test_name_and_version_override(self, workspace: Workspace) -> None:
        options = GenerateOptions(cli_name="arith", version="9.9.9")
        result = GenerateService(workspace).generate(SourceSpec(path="calc.ttl"), options)
        assert result.data["summary"]["name"] == "arith"
        assert result.data["summary"]["version"] == "9.9.9"
        assert "prog_name='arith'" in result.data["code"]

    def test_config_name_used_without_command_root(self, workspace_root: Path) -> None:
        settings = OntoSettings.from_cli(workspace_root=workspace_root, generate=GenerateConfig(cli_name="svc"))
        result = GenerateService(Workspace(settings)).generate(SourceSpec(path="services.ttl"))
        assert result.data["summary"]["name"] == "svc"

    def test_ontology_name_beats_config(self, workspace_root: Path) -> None:
        settings = OntoSettings.from_cli(workspace_root=workspace_root, generate=GenerateConfig(cli_name="svc"))
        result = GenerateService(Workspace(settings)).generate(SourceSpec(path="calc.ttl"))
        assert result.data["summary"]["name"] == "calc"

    def test_output_path(self, workspace: Workspace, workspace_root: Path) -> None:
        options = GenerateOptions(output_path="build/calc_cli.py")
        result = GenerateService(workspace).generate(SourceSpec(path="calc.ttl"), options)
        target = workspace_root / "build" / "calc_cli.py"
        assert result.ok
        assert result.data["metadata"]["output_path"] == str(target.resolve())
        assert target.read_text(encoding="utf-8") == result.data["code"]

    def test_user_template_override(self, workspace: Workspace, workspace_root: Path) -> None:
        override = workspace_root / ".ontoctl" / "templates" / "python"
        override.mkdir(parents=True)
        (override / "verb.py.j2").write_text("def broken(:\n", encoding="utf-8")
        result = GenerateService(workspace).generate(SourceSpec(path="services.ttl"))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "GENERATED_SYNTAX_INVALID"


# ── Failures ─────────────────────────────────────────────────────────


class TestGenerateFailures:
    def test_syntax_error(self, workspace: Workspace) -> None:
        result = GenerateService(workspace).generate(SourceSpec(text="@prefix cnv <https://cnv.dev/ontology#> ."))
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "SYNTAX_ERROR"
        assert result.error.detail["line"] == 1
        assert result.error.hint

    def test_missing_file(self, workspace: Workspace) -> None:
        result = GenerateService(workspace).generate(SourceSpec(path="missing.ttl"))
        assert result.error is not None
        assert result.error.code == "SOURCE_UNAVAILABLE"
        assert "file not found" in result.error.message

    def test_unresolved_reference(self, workspace: Workspace) -> None:
        text = PREFIXES + """
ex:tool a cnv:Noun ; cnv:name "tool" ; cnv:hasVerb ex:run .
ex:run a cnv:Verb ; cnv:name "run" ; cnv:hasArgument ex:arg .
ex:arg a cnv:Argument ; cnv:name "arg" ; cnv:argType ex:Missing .
"""
        result = GenerateService(workspace).generate(SourceSpec(text=text))
        assert result.error is not None
        assert result.error.code == "UNRESOLVED_REFERENCE"
        assert result.error.detail["reference"] == "https://example.org/cli#Missing"

    def test_invalid_output_path(self, workspace: Workspace, workspace_root: Path) -> None:
        options = GenerateOptions(output_path="cli.txt")
        result = GenerateService(workspace).generate(SourceSpec(path="calc.ttl"), options)
        assert result.error is not None
        assert result.error.code == "INVALID_OUTPUT_PATH"
        assert not (workspace_root / "cli.txt").exists()

    def test_feature_clash(self, workspace: Workspace) -> None:
        text = PREFIXES + 'ex:man a cnv:Noun ; cnv:name "man" .\n'
        result = GenerateService(workspace).generate(SourceSpec(text=text), GenerateOptions(features=["man_page"]))
        assert result.error is not None
        assert result.error.code == "TEMPLATE_RENDER_FAILED"
