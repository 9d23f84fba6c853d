"""Typed payload contracts for service and adapter boundaries.

Input models are closed (``extra="forbid"``) so a misspelled field is an
error rather than a silently ignored option. Output models validate the
payload shape before it leaves the service layer.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ontoctl.domain.model import CommandModel
from ontoctl.domain.naming import CLI_NAME

_CLOSED = ConfigDict(frozen=True, extra="forbid")

QueryFormat = Literal["json", "table", "yaml"]
FeatureName = Literal["async_handlers", "completions", "man_page", "colored_help"]


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="python")


# ── Inputs ───────────────────────────────────────────────────────────


class SourceSpec(BaseModel):
    """Where the Turtle text comes from: exactly one of text, path, url."""

    model_config = _CLOSED

    text: str | None = None
    path: str | None = None
    url: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> SourceSpec:
        given = [name for name in ("text", "path", "url") if getattr(self, name) is not None]
        if len(given) != 1:
            msg = f"exactly one of text, path or url is required (got {', '.join(given) or 'none'})"
            raise ValueError(msg)
        return self

    def describe(self) -> str:
        if self.text is not None:
            return "<inline>"
        return self.path or self.url or ""


class GenerateOptions(BaseModel):
    model_config = _CLOSED

    features: list[FeatureName] | None = None
    cli_name: str | None = Field(default=None, pattern=CLI_NAME.pattern)
    version: str | None = None
    output_path: str | None = None


class GenerateInput(BaseModel):
    model_config = _CLOSED

    source: SourceSpec
    options: GenerateOptions = Field(default_factory=GenerateOptions)


class QueryInput(BaseModel):
    model_config = _CLOSED

    source: SourceSpec
    query: str = Field(min_length=1)
    format: QueryFormat = "json"


class ExportInput(BaseModel):
    model_config = _CLOSED

    model: CommandModel
    base_iri: str | None = None


class CheckInput(BaseModel):
    model_config = _CLOSED

    source: SourceSpec


# ── Outputs ──────────────────────────────────────────────────────────


class VerbSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    is_async: bool = Field(alias="async")
    arguments: list[str]


class CommandSummary(BaseModel):
    noun: str
    verbs: list[VerbSummary]


class ModelSummary(BaseModel):
    """Noun/verb/argument structure of a command model."""

    model_config = ConfigDict(extra="allow")

    name: str
    commands: list[CommandSummary]
    noun_count: int
    verb_count: int
    argument_count: int


class GenerateMetadata(BaseModel):
    generated_at: str
    content_hash: str
    features: list[str]
    warnings: list[str]
    cached: bool
    output_path: str | None = None


class GenerateResultData(BaseModel):
    """Payload contract for ``GenerateService.generate``."""

    code: str
    summary: dict[str, Any]
    metadata: GenerateMetadata

    @model_validator(mode="after")
    def _summary_shape(self) -> GenerateResultData:
        ModelSummary.model_validate(self.summary)
        return self


class QueryResultData(BaseModel):
    """Payload contract for ``QueryService.query``."""

    variables: list[str]
    rows: list[dict[str, str | None]]
    row_count: int
    execution_ms: float
    rendered: str | None = None


class ExportResultData(BaseModel):
    """Payload contract for ``ExportService.export``."""

    ontology: str
    triple_count: int
    namespaces: dict[str, str]


class CheckResultData(BaseModel):
    """Payload contract for ``CheckService.check``."""

    source: str
    triple_count: int
    counts: dict[str, int]
    summary: dict[str, Any]
    model: dict[str, Any]
    cached: bool
