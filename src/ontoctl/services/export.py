"""ExportService: CommandModel back to Turtle.

The inverse of generation. The exported text is re-parsed, validated and
extracted before it is returned, so callers only ever receive an ontology
that reproduces the model's noun/verb/argument structure.
"""

from __future__ import annotations

from ontoctl.domain.errors import InvariantViolation, PipelineError
from ontoctl.domain.extraction import extract_commands
from ontoctl.domain.model import CommandModel
from ontoctl.domain.serializer import serialize_model
from ontoctl.domain.turtle import parse_turtle
from ontoctl.domain.validation import validate
from ontoctl.services.base import BaseService, failure
from ontoctl.services.contracts import ExportResultData, dump_validated
from ontoctl.services.result import ServiceResult
from ontoctl.services.telemetry import record, stage, traced


class ExportService(BaseService):
    """Serialize command models to Turtle."""

    @traced("export")
    def export(self, model: CommandModel, *, base_iri: str | None = None) -> ServiceResult:
        base = base_iri or self._workspace.settings.export.base_iri
        try:
            with stage("serialize"):
                text = serialize_model(model, base_iri=base)
                record(lines=text.count("\n"))
            with stage("verify"):
                parsed = parse_turtle(text, backend_factory=self._workspace.backend_factory)
                reparsed = extract_commands(validate(parsed), default_name=model.name, default_version=model.version)
                record(triples=len(parsed))
            if reparsed.summary() != model.summary():
                msg = "exported ontology does not reproduce the model's commands"
                raise InvariantViolation(f"model '{model.name}'", msg)
        except PipelineError as exc:
            return failure("export", exc)

        data = dump_validated(
            ExportResultData,
            {
                "ontology": text,
                "triple_count": len(parsed),
                "namespaces": parsed.namespaces.as_dict(),
            },
        )
        return ServiceResult(ok=True, op="export", data=data)
