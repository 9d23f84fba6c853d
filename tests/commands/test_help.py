"""Parametrized help tests for all CLI commands."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from ontoctl.cli import cli

# (CLI args, expected keywords in output)
HELP_COMMANDS: list[tuple[list[str], list[str]]] = [
    (["--help"], ["--json", "--quiet", "--verbose", "--log-json", "--config", "--examples"]),
    (["generate", "--help"], ["SOURCE", "--text", "--output", "--feature", "--no-features", "--name", "--version"]),
    (["generate", "--help"], ["async_handlers", "completions", "man_page", "colored_help"]),
    (["query", "--help"], ["SOURCE", "SPARQL", "--query-file", "--format"]),
    (["check", "--help"], ["SOURCE", "--text"]),
    (["export", "--help"], ["MODEL_FILE", "--base-iri"]),
    (["serve", "--help"], ["--transport", "--host", "--port"]),
]


class TestHelp:
    @pytest.mark.parametrize(
        ("args", "keywords"),
        HELP_COMMANDS,
        ids=[" ".join(args) for args, _ in HELP_COMMANDS],
    )
    def test_help_output(self, cli_runner: CliRunner, args: list[str], keywords: list[str]) -> None:
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        for keyword in keywords:
            assert keyword in result.output
