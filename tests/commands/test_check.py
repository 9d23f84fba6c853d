"""Tests for the check CLI command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from ontoctl.cli import cli
from tests.conftest import PREFIXES


@pytest.mark.usefixtures("_isolated_workspace")
class TestCheckCommand:
    def test_human_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "catalog.ttl"])
        assert result.exit_code == 0
        assert result.stdout.startswith("OK")
        assert "is valid" in result.stdout
        assert "restart  async  --port --mode" in result.stdout
        assert "2 nouns, 3 verbs, 5 arguments" in result.stdout

    def test_json_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "check", "calc.ttl"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["op"] == "check"
        assert data["data"]["triple_count"] == 26
        assert data["data"]["model"]["name"] == "calc"

    def test_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "check", "calc.ttl"])
        assert result.stdout == "OK: check\n"

    def test_verbose_shows_counts_and_telemetry(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "check", "calc.ttl"])
        assert result.exit_code == 0
        assert "Instances" in result.stdout
        assert "slowest_stage=" in result.stdout
        assert "triples=" in result.stdout

    def test_duplicate_noun(self, cli_runner: CliRunner) -> None:
        text = PREFIXES + 'ex:a a cnv:Noun ; cnv:name "x" .\nex:b a cnv:Noun ; cnv:name "x" .\n'
        result = cli_runner.invoke(cli, ["--json", "check", "--text", text])
        assert result.exit_code == 1
        error = json.loads(result.stderr)["error"]
        assert error["code"] == "DUPLICATE_NOUN"
        assert error["detail"] == {"name": "x"}

    def test_verbose_error_detail(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "check", "--text", "@prefix broken"])
        assert result.exit_code == 1
        assert "detail:" in result.stderr
        assert "line: 1" in result.stderr

    def test_quiet_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "check", "missing.ttl"])
        assert result.exit_code == 1
        assert result.stderr.startswith("ERROR: check")
