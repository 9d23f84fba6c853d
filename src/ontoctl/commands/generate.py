"""Command: generate a click program from an ontology."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ontoctl.commands._base import OntoCommand
from ontoctl.commands._context import source_spec

if TYPE_CHECKING:
    from ontoctl.commands._context import AppContext

_FEATURES = ["async_handlers", "completions", "man_page", "colored_help"]


@click.command(
    cls=OntoCommand,
    source="inline",
    examples="""\
  ontoctl generate services.ttl > services_cli.py
  ontoctl generate services.ttl -o build/services_cli.py
  ontoctl generate services.ttl -f completions -f colored_help
  ontoctl generate https://example.org/calc.ttl --name calc --version 2.0.0
  cat calc.ttl | ontoctl generate -
  ontoctl --json generate calc.ttl""",
)
@click.option("-o", "--output", "output_path", default=None, help="Write the program to this .py file.")
@click.option(
    "-f",
    "--feature",
    "features",
    multiple=True,
    type=click.Choice(_FEATURES),
    help="Enable an optional fragment (repeatable). Defaults to the [generate] config.",
)
@click.option("--no-features", is_flag=True, help="Disable every optional fragment.")
@click.option("--name", "cli_name", default=None, help="Override the program name.")
@click.option("--version", "version", default=None, help="Override the program version.")
@click.pass_obj
def generate(
    app: AppContext,
    source: str | None,
    text: str | None,
    output_path: str | None,
    features: tuple[str, ...],
    no_features: bool,
    cli_name: str | None,
    version: str | None,
) -> None:
    """Generate Python/click source code from a Turtle ontology."""
    from pydantic import ValidationError

    from ontoctl.services.contracts import GenerateOptions
    from ontoctl.services.generate import GenerateService

    if features and no_features:
        msg = "--feature and --no-features are mutually exclusive."
        raise click.UsageError(msg)
    try:
        options = GenerateOptions(
            features=[] if no_features else (list(features) or None),
            cli_name=cli_name,
            version=version,
            output_path=output_path,
        )
    except ValidationError as exc:
        raise click.BadParameter(str(exc.errors()[0]["msg"]), param_hint="--name") from exc
    app.emit(GenerateService(app.workspace).generate(source_spec(source, text), options))
