"""End-to-end tests for verbose telemetry.

Covers the full path: ``-v`` flag -> AppContext -> enable_telemetry() ->
@traced service methods -> span tree in ServiceResult.meta -> rendered tree.
"""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from ontoctl.cli import cli


@pytest.mark.usefixtures("_isolated_workspace")
class TestVerboseTelemetry:
    def test_json_meta_has_span_tree(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "-v", "generate", "calc.ttl"])
        assert result.exit_code == 0
        telemetry = json.loads(result.stdout)["meta"]["telemetry"]
        assert telemetry["name"] == "generate"
        assert [c["name"] for c in telemetry["children"]] == ["load", "extract", "render"]
        assert telemetry["duration_ms"] >= 0

    def test_written_program_shows_tree(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "generate", "calc.ttl", "-o", "build/calc_cli.py"])
        assert result.exit_code == 0
        assert "meta:" in result.stdout
        assert "lines=" in result.stdout
        assert "path=" in result.stdout

    def test_without_verbose_no_meta(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "generate", "calc.ttl"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["meta"] is None

    def test_failure_carries_telemetry(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "-v", "query", "calc.ttl", "SELECT ?x WHERE { ?x ?p"])
        assert result.exit_code == 1
        # debug log lines precede the JSON document on stderr
        payload = json.loads(result.stderr[result.stderr.index("{\n") :])
        assert payload["error"]["code"] == "SPARQL_ERROR"
        assert payload["meta"]["telemetry"]["name"] == "query"
