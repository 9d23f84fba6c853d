"""GenerateService: Turtle source to Python/click program.

Runs the full pipeline (load, parse, validate, extract, render) and
optionally writes the program under the workspace root.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ontoctl.domain.errors import PipelineError
from ontoctl.domain.extraction import extract_commands
from ontoctl.infrastructure.codegen import FeatureMask, generate, write_generated
from ontoctl.infrastructure.templates import build_template_environment
from ontoctl.services._helpers import now_iso
from ontoctl.services.base import BaseService, failure
from ontoctl.services.contracts import GenerateOptions, GenerateResultData, SourceSpec, dump_validated
from ontoctl.services.result import ServiceResult
from ontoctl.services.telemetry import record, stage, traced

logger = logging.getLogger(__name__)


class GenerateService(BaseService):
    """Generate CLI source code from an ontology."""

    @traced("generate")
    def generate(self, source: SourceSpec, options: GenerateOptions | None = None) -> ServiceResult:
        """Generate a click program for *source*.

        Options left unset fall back to the ``[generate]`` config section.
        An explicit ``cli_name`` or ``version`` overrides what the
        ontology declares; the config values only fill in when the
        ontology declares nothing.
        """
        options = options or GenerateOptions()
        config = self._workspace.settings.generate
        feature_names = options.features if options.features is not None else config.feature_names()
        features = FeatureMask.from_names(feature_names)
        written: Path | None = None

        try:
            with stage("load"):
                loaded = self._workspace.load_validated(text=source.text, path=source.path, url=source.url)
                record(triples=len(loaded.ontology), cached=loaded.cached)
            with stage("extract"):
                model = extract_commands(
                    loaded.ontology,
                    default_name=config.cli_name,
                    default_version=config.version,
                )
                record(nouns=len(model.commands))
            overrides = {
                key: value
                for key, value in (("name", options.cli_name), ("version", options.version))
                if value is not None
            }
            if overrides:
                model = model.model_copy(update=overrides)
            with stage("render"):
                env = build_template_environment("python", workspace_root=self._workspace.root)
                generated = generate(model, features, checker=self._workspace.checker, env=env)
                record(lines=generated.line_count)
            if options.output_path:
                with stage("write"):
                    written = write_generated(generated, Path(options.output_path), root=self._workspace.root)
                    record(path=str(written))
        except PipelineError as exc:
            return failure("generate", exc)

        logger.debug("Generated %s (%d lines)", model.name, generated.line_count)
        data = dump_validated(
            GenerateResultData,
            {
                "code": generated.code,
                "summary": model.summary(),
                "metadata": {
                    "generated_at": now_iso(),
                    "content_hash": generated.content_hash,
                    "features": features.enabled(),
                    "warnings": generated.warnings,
                    "cached": loaded.cached,
                    "output_path": str(written) if written else None,
                },
            },
        )
        return ServiceResult(ok=True, op="generate", data=data, warnings=list(generated.warnings))
