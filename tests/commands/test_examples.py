"""Tests for the --examples flag on CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from ontoctl.cli import cli

# (CLI args, expected keywords in output)
EXAMPLES_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--examples"], ["ontoctl check services.ttl", "ontoctl serve"]),
    (["generate", "--examples"], ["-o build/services_cli.py", "-f completions"]),
    (["query", "--examples"], ["--format yaml"]),
    (["check", "--examples"], ["ontoctl --json check calc.ttl"]),
    (["export", "--examples"], ["--base-iri"]),
    (["serve", "--examples"], ["--transport streamable-http"]),
]


class TestExamples:
    @pytest.mark.parametrize(
        ("args", "keywords"),
        EXAMPLES_COMMANDS,
        ids=[" ".join(args) for args, _ in EXAMPLES_COMMANDS],
    )
    def test_examples_printed(self, cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert result.output.startswith("Examples for '")
        for keyword in keywords:
            assert keyword in result.output

    def test_examples_not_in_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["generate", "--help"])
        assert "--examples" in result.output
        assert "ontoctl generate services.ttl > services_cli.py" not in result.output

    @pytest.mark.parametrize("command", ["check", "generate", "query"])
    def test_source_commands_explain_source(self, cli_runner: CliRunner, command: str) -> None:
        result = cli_runner.invoke(cli, [command, "--examples"])
        assert "SOURCE is a Turtle file, an http(s) URL, or '-' for stdin." in result.output

    def test_serve_has_no_source_hint(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["serve", "--examples"])
        assert "SOURCE is" not in result.output
