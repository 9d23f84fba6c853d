"""Command: run a SELECT query against an ontology."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ontoctl.commands._base import OntoCommand
from ontoctl.commands._context import source_spec

if TYPE_CHECKING:
    from ontoctl.commands._context import AppContext


@click.command(
    cls=OntoCommand,
    source="required",
    examples="""\
  ontoctl query services.ttl 'SELECT ?name WHERE { ?n a cnv:Noun ; cnv:name ?name }'
  ontoctl query services.ttl -e query.rq --format yaml
  ontoctl query calc.ttl 'SELECT ?v WHERE { ?v a Verb ; async true }'
  ontoctl --json query calc.ttl 'SELECT ?a ?t WHERE { ?a cnv:argType ?t }'""",
)
@click.argument("sparql", required=False)
@click.option(
    "-e",
    "--query-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read the query from a file.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "table", "yaml"]),
    default=None,
    help="Row format. Defaults to [query] default_format.",
)
@click.pass_obj
def query(app: AppContext, source: str, sparql: str | None, query_file: str | None, fmt: str | None) -> None:
    """Query an ontology with the supported SPARQL SELECT subset."""
    from pathlib import Path

    from ontoctl.services.query import QueryService

    if (sparql is None) == (query_file is None):
        msg = "Pass the query either as SPARQL or with --query-file."
        raise click.UsageError(msg)
    text = sparql if sparql is not None else Path(query_file or "").read_text(encoding="utf-8")
    chosen = fmt or app.settings.query.default_format
    app.emit(QueryService(app.workspace).query(source_spec(source, None), text, fmt=chosen))
