"""Command: validate an ontology without generating code."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ontoctl.commands._base import OntoCommand
from ontoctl.commands._context import source_spec

if TYPE_CHECKING:
    from ontoctl.commands._context import AppContext


@click.command(
    cls=OntoCommand,
    source="inline",
    examples="""\
  ontoctl check services.ttl
  ontoctl check --text '@prefix cnv: <https://cnv.dev/ontology#> . ...'
  ontoctl --json check calc.ttl > calc-model.json""",
)
@click.pass_obj
def check(app: AppContext, source: str | None, text: str | None) -> None:
    """Parse, validate and extract an ontology; report its command tree."""
    from ontoctl.services.check import CheckService

    app.emit(CheckService(app.workspace).check(source_spec(source, text)))
