"""Tests for the shared click command classes."""

from __future__ import annotations

import click
import pytest
from click.testing import CliRunner

from ontoctl.commands._base import SOURCE_HELP, OntoCommand, OntoGroup


def _echo_source(mode: str) -> click.Command:
    @click.command(cls=OntoCommand, source=mode, examples="  tool run x.ttl")
    @click.argument("extra", required=False)
    def run(source: str | None, extra: str | None, **kwargs: str | None) -> None:
        click.echo(f"{source}|{extra}|{kwargs.get('text')}")

    return run


class TestOntoCommand:
    def test_source_is_first_positional(self) -> None:
        result = CliRunner().invoke(_echo_source("required"), ["a.ttl", "more"])
        assert result.exit_code == 0
        assert result.output.strip() == "a.ttl|more|None"

    def test_required_source_missing(self) -> None:
        result = CliRunner().invoke(_echo_source("required"), [])
        assert result.exit_code == 2
        assert "SOURCE" in result.output

    def test_inline_source_accepts_text(self) -> None:
        result = CliRunner().invoke(_echo_source("inline"), ["--text", "@prefix x: <y> ."])
        assert result.exit_code == 0
        assert result.output.strip() == "None|None|@prefix x: <y> ."

    def test_required_source_has_no_text_option(self) -> None:
        names = [param.name for param in _echo_source("required").params]
        assert names[0] == "source"
        assert "text" not in names

    def test_epilog_explains_source(self) -> None:
        result = CliRunner().invoke(_echo_source("inline"), ["--help"])
        assert SOURCE_HELP in result.output

    def test_plain_command_unchanged(self) -> None:
        command = OntoCommand("plain", callback=lambda: None)
        assert command.params == []
        assert command.epilog is None


class TestOntoGroup:
    def test_subcommands_use_onto_command(self) -> None:
        group = OntoGroup("root")

        @group.command(source="inline")
        def sub(source: str | None, text: str | None) -> None:
            click.echo(source or text)

        assert isinstance(sub, OntoCommand)
        result = CliRunner().invoke(group, ["sub", "x.ttl"])
        assert result.output.strip() == "x.ttl"

    @pytest.mark.parametrize("examples", [None, ""])
    def test_no_examples_flag_without_text(self, examples: str | None) -> None:
        assert OntoGroup("root", examples=examples).params == []
