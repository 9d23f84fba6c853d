"""CheckService: parse, validate and extract a source without generating."""

from __future__ import annotations

from ontoctl.domain.errors import PipelineError
from ontoctl.domain.extraction import extract_commands
from ontoctl.services.base import BaseService, failure
from ontoctl.services.contracts import CheckResultData, SourceSpec, dump_validated
from ontoctl.services.result import ServiceResult
from ontoctl.services.telemetry import record, stage, traced


class CheckService(BaseService):
    """Report whether a source describes a valid command structure."""

    @traced("check")
    def check(self, source: SourceSpec) -> ServiceResult:
        """Run every pipeline stage up to extraction.

        The returned ``model`` can be edited and passed to ExportService.
        """
        config = self._workspace.settings.generate
        try:
            with stage("load"):
                loaded = self._workspace.load_validated(text=source.text, path=source.path, url=source.url)
                record(triples=len(loaded.ontology), cached=loaded.cached)
            with stage("extract"):
                model = extract_commands(loaded.ontology, default_name=config.cli_name, default_version=config.version)
                record(nouns=len(model.commands))
        except PipelineError as exc:
            return failure("check", exc)

        ontology = loaded.ontology
        data = dump_validated(
            CheckResultData,
            {
                "source": loaded.source.location,
                "triple_count": len(ontology),
                "counts": ontology.index.counts(),
                "summary": model.summary(),
                "model": model.model_dump(mode="json"),
                "cached": loaded.cached,
            },
        )
        return ServiceResult(ok=True, op="check", data=data)
