"""Command: export a command model back to Turtle."""

from __future__ import annotations

import json
from typing import IO, TYPE_CHECKING

import click

from ontoctl.commands._base import OntoCommand

if TYPE_CHECKING:
    from ontoctl.commands._context import AppContext


@click.command(
    cls=OntoCommand,
    examples="""\
  # Model JSON as produced by 'check --json' (the data.model field) or a bare model
  ontoctl --json check calc.ttl > calc-check.json
  ontoctl export calc-check.json > calc-roundtrip.ttl
  ontoctl export model.json --base-iri https://example.org/cli/""",
)
@click.argument("model_file", type=click.File("r", encoding="utf-8"))
@click.option("--base-iri", default=None, help="Namespace root for exported resources.")
@click.pass_obj
def export(app: AppContext, model_file: IO[str], base_iri: str | None) -> None:
    """Serialize a command model (JSON) to a Turtle ontology."""
    from pydantic import ValidationError

    from ontoctl.domain.model import CommandModel
    from ontoctl.services.export import ExportService

    try:
        payload = json.load(model_file)
    except json.JSONDecodeError as exc:
        msg = f"Model file is not valid JSON: {exc}"
        raise click.ClickException(msg) from exc
    if isinstance(payload, dict) and "data" in payload and isinstance(payload["data"], dict):
        payload = payload["data"].get("model", payload["data"])
    try:
        model = CommandModel.model_validate(payload)
    except ValidationError as exc:
        msg = f"Model file does not describe a command model:\n{exc}"
        raise click.ClickException(msg) from exc
    app.emit(ExportService(app.workspace).export(model, base_iri=base_iri))
