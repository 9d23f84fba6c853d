"""Shared pytest fixtures and test helpers for ontoctl tests."""

from __future__ import annotations

import types
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from ontoctl.config.settings import OntoSettings
from ontoctl.domain.extraction import extract_commands
from ontoctl.domain.model import CommandModel
from ontoctl.domain.ontology import ValidatedOntology
from ontoctl.domain.turtle import parse_turtle
from ontoctl.domain.validation import validate
from ontoctl.infrastructure.workspace import Workspace
from ontoctl.services.telemetry import _current_span, disable_telemetry

PREFIXES = """\
@prefix cnv: <https://cnv.dev/ontology#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
@prefix ex: <https://example.org/cli#> .
"""

SERVICES_TTL = (
    PREFIXES
    + """
ex:services a cnv:Noun ;
    cnv:name "services" ;
    cnv:description "Manage services" ;
    cnv:hasVerb ex:status .

ex:status a cnv:Verb ;
    cnv:name "status" ;
    cnv:description "Show service status" .
"""
)

CALC_TTL = (
    PREFIXES
    + """
ex:program a cnv:Command ;
    cnv:name "calc" ;
    cnv:version "1.2.0" ;
    cnv:description "Arithmetic helpers" .

ex:calc a cnv:Noun ;
    cnv:name "calc" ;
    cnv:description "Arithmetic" ;
    cnv:hasVerb ex:divide .

ex:divide a cnv:Verb ;
    cnv:name "divide" ;
    cnv:description "Divide two integers" ;
    cnv:hasArgument ex:left, ex:right .

ex:left a cnv:Argument ;
    cnv:name "left" ;
    cnv:argType cnv:Integer ;
    cnv:required true ;
    cnv:position 0 .

ex:right a cnv:Argument ;
    cnv:name "right" ;
    cnv:argType cnv:Integer ;
    cnv:required true ;
    cnv:position 1 ;
    cnv:validator [ a cnv:CustomValidator ; cnv:expression "right != 0" ] .
"""
)

# Two nouns, three verbs, a custom type chain and every validator kind.
CATALOG_TTL = (
    PREFIXES
    + """
ex:Port a cnv:Type ;
    cnv:name "Port" ;
    cnv:baseType cnv:Integer ;
    cnv:validator [ a cnv:RangeValidator ; cnv:min 1 ; cnv:max 65535 ] .

ex:services a cnv:Noun ;
    cnv:name "services" ;
    cnv:description "Manage services" .

ex:status a cnv:Verb ;
    cnv:name "status" ;
    cnv:hasNoun ex:services .

ex:restart a cnv:Verb ;
    cnv:name "restart" ;
    cnv:async true ;
    cnv:hasNoun ex:services ;
    cnv:hasArgument ex:restart-port, ex:restart-mode .

ex:restart-port a cnv:Argument ;
    cnv:name "port" ;
    cnv:argType ex:Port ;
    cnv:default 8080 .

ex:restart-mode a cnv:Argument ;
    cnv:name "mode" ;
    cnv:argType cnv:String ;
    cnv:validator [ a cnv:OneOfValidator ; cnv:allowedValue "soft", "hard" ] .

ex:users a cnv:Noun ;
    cnv:name "users" ;
    cnv:hasVerb ex:create .

ex:create a cnv:Verb ;
    cnv:name "create" ;
    cnv:description "Create a user" ;
    cnv:hasArgument ex:create-name, ex:create-email, ex:create-admin .

ex:create-name a cnv:Argument ;
    cnv:name "name" ;
    cnv:required true ;
    cnv:position 0 ;
    cnv:validator [ a cnv:LengthValidator ; cnv:minLength 2 ; cnv:maxLength 32 ] .

ex:create-email a cnv:Argument ;
    cnv:name "email" ;
    cnv:position 1 ;
    cnv:validator [ a cnv:RegexValidator ; cnv:pattern "[^@]+@[^@]+" ] .

ex:create-admin a cnv:Argument ;
    cnv:name "admin" ;
    cnv:argType cnv:Boolean ;
    cnv:position 2 .
"""
)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """Switch telemetry back off after tests that pass --verbose."""
    yield
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Temporary workspace directory holding the sample ontologies."""
    (tmp_path / "services.ttl").write_text(SERVICES_TTL, encoding="utf-8")
    (tmp_path / "calc.ttl").write_text(CALC_TTL, encoding="utf-8")
    (tmp_path / "catalog.ttl").write_text(CATALOG_TTL, encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings(workspace_root: Path) -> OntoSettings:
    return OntoSettings.from_cli(workspace_root=workspace_root)


@pytest.fixture
def workspace(settings: OntoSettings) -> Workspace:
    """Workspace over the temp directory with default settings."""
    return Workspace(settings)


@pytest.fixture
def _isolated_workspace(workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp workspace so the CLI resolves relative paths there.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.delenv("ONTOCTL_CONFIG", raising=False)
    monkeypatch.chdir(workspace_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def validated(text: str) -> ValidatedOntology:
    """Parse and validate *text*, letting any pipeline error propagate."""
    return validate(parse_turtle(text))


def model_of(text: str) -> CommandModel:
    """Run *text* through parse, validate and extract."""
    return extract_commands(validated(text))


def load_generated(code: str, name: str = "generated_cli") -> types.ModuleType:
    """Execute generated source as a fresh module and return it."""
    module = types.ModuleType(name)
    exec(compile(code, f"<{name}>", "exec"), module.__dict__)
    return module
