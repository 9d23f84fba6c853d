"""Pipeline error families.

Each pipeline stage raises exactly one family, so a caller can tell from
the exception type which stage rejected its input:

- ParseError: malformed Turtle text
- ValidationError: well-formed but semantically inconsistent ontology
- ExtractionError: valid ontology that does not fit the command vocabulary
- GenerationError: valid model that cannot be rendered or verified

QueryError and SourceError cover query text and source retrieval.
Every error carries a stable ``code``, structured ``detail`` and an
optional recovery ``hint``; the service layer copies all three into
ServiceError unchanged.
"""

from __future__ import annotations

from typing import Any, ClassVar


class PipelineError(Exception):
    """Base class for every error raised by the ontology pipeline."""

    code: ClassVar[str] = "PIPELINE_ERROR"
    hint: ClassVar[str | None] = None

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail

    def __getattr__(self, name: str) -> Any:
        # Expose structured context (line, column, entity, ...) as attributes.
        detail = self.__dict__.get("detail", {})
        if name in detail:
            return detail[name]
        raise AttributeError(name)


# ── Parse ────────────────────────────────────────────────────────────


class ParseError(PipelineError):
    code = "PARSE_ERROR"
    hint = "Fix the Turtle document and resubmit it."


class TurtleSyntaxError(ParseError):
    code = "SYNTAX_ERROR"

    def __init__(self, line: int, column: int, message: str) -> None:
        super().__init__(
            f"line {line}, column {column}: {message}",
            line=line,
            column=column,
            reason=message,
        )


class UndefinedPrefix(ParseError):
    code = "UNDEFINED_PREFIX"
    hint = "Declare the prefix with @prefix before using it."

    def __init__(self, prefix: str, line: int) -> None:
        super().__init__(f"line {line}: undefined prefix '{prefix}:'", prefix=prefix, line=line)


class InvalidIri(ParseError):
    code = "INVALID_IRI"

    def __init__(self, iri: str, reason: str) -> None:
        super().__init__(f"invalid IRI <{iri}>: {reason}", iri=iri, reason=reason)


class DuplicateDefinition(ParseError):
    code = "DUPLICATE_DEFINITION"
    hint = "Declare each prefix once."

    def __init__(self, uri: str, *, prefix: str | None = None, line: int | None = None) -> None:
        where = f"line {line}: " if line is not None else ""
        what = f"prefix '{prefix}:' " if prefix is not None else ""
        super().__init__(f"{where}duplicate definition of {what}<{uri}>", uri=uri, prefix=prefix, line=line)


# ── Query ────────────────────────────────────────────────────────────


class QueryError(PipelineError):
    code = "QUERY_ERROR"


class SparqlError(QueryError):
    code = "SPARQL_ERROR"
    hint = "Only SELECT with basic graph patterns, FILTER and PREFIX is supported."

    def __init__(self, message: str) -> None:
        super().__init__(message)


# ── Validation ───────────────────────────────────────────────────────


class ValidationError(PipelineError):
    code = "VALIDATION_ERROR"
    hint = "Correct the ontology so every name is unique and every reference resolves."


class DuplicateNoun(ValidationError):
    code = "DUPLICATE_NOUN"

    def __init__(self, name: str) -> None:
        super().__init__(f"noun '{name}' is defined more than once", name=name)


class DuplicateVerb(ValidationError):
    code = "DUPLICATE_VERB"

    def __init__(self, noun: str, verb: str) -> None:
        super().__init__(f"verb '{verb}' is defined more than once under noun '{noun}'", noun=noun, verb=verb)


class UnresolvedReference(ValidationError):
    code = "UNRESOLVED_REFERENCE"
    hint = "Declare the referenced type as a cnv:Type or use a primitive type."

    def __init__(self, reference: str, referrer: str) -> None:
        super().__init__(
            f"'{referrer}' references undefined type <{reference}>",
            reference=reference,
            referrer=referrer,
        )


class CircularDependency(ValidationError):
    code = "CIRCULAR_DEPENDENCY"

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"circular type dependency: {' -> '.join(cycle)}", cycle=cycle)


class InvalidArgumentType(ValidationError):
    code = "INVALID_ARGUMENT_TYPE"

    def __init__(self, argument: str, type_name: str, reason: str) -> None:
        super().__init__(
            f"argument '{argument}' has invalid type '{type_name}': {reason}",
            argument=argument,
            type=type_name,
            reason=reason,
        )


class InvariantViolation(ValidationError):
    code = "INVARIANT_VIOLATION"

    def __init__(self, entity: str, message: str) -> None:
        super().__init__(f"{entity}: {message}", entity=entity, reason=message)


# ── Extraction ───────────────────────────────────────────────────────


class ExtractionError(PipelineError):
    code = "EXTRACTION_ERROR"
    hint = "Describe nouns, verbs and arguments with the cnv: vocabulary."


class MissingProperty(ExtractionError):
    code = "MISSING_PROPERTY"

    def __init__(self, entity: str, prop: str) -> None:
        super().__init__(f"{entity} is missing required property {prop}", entity=entity, property=prop)


class InvalidStructure(ExtractionError):
    code = "INVALID_STRUCTURE"

    def __init__(self, entity: str, message: str) -> None:
        super().__init__(f"{entity}: {message}", entity=entity, reason=message)


class TypeMismatch(ExtractionError):
    code = "TYPE_MISMATCH"

    def __init__(self, entity: str, prop: str, expected: str, found: str) -> None:
        super().__init__(
            f"{entity}: {prop} must be {expected}, found {found}",
            entity=entity,
            property=prop,
            expected=expected,
            found=found,
        )


class SynthesisError(ExtractionError):
    code = "SYNTHESIS_ERROR"

    def __init__(self, entity: str, message: str) -> None:
        super().__init__(f"{entity}: {message}", entity=entity, reason=message)


# ── Generation ───────────────────────────────────────────────────────


class GenerationError(PipelineError):
    code = "GENERATION_ERROR"


class TemplateRenderFailed(GenerationError):
    code = "TEMPLATE_RENDER_FAILED"
    hint = "Check user template overrides in .ontoctl/templates/."

    def __init__(self, template: str, message: str) -> None:
        super().__init__(f"template '{template}' failed to render: {message}", template=template)


class FileWriteFailed(GenerationError):
    code = "FILE_WRITE_FAILED"

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"cannot write {path}: {message}", path=path)


class InvalidOutputPath(GenerationError):
    code = "INVALID_OUTPUT_PATH"
    hint = "Write generated code to a .py file inside the working directory."

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"invalid output path {path}: {reason}", path=path, reason=reason)


class FormattingFailed(GenerationError):
    code = "FORMATTING_FAILED"

    def __init__(self, message: str) -> None:
        super().__init__(f"formatting failed: {message}")


class GeneratedSyntaxInvalid(GenerationError):
    code = "GENERATED_SYNTAX_INVALID"
    hint = "A template override produced invalid Python; remove it or fix it."

    def __init__(self, line: int, message: str) -> None:
        super().__init__(f"generated code does not parse (line {line}): {message}", line=line)


# ── Sources ──────────────────────────────────────────────────────────


class SourceError(PipelineError):
    code = "SOURCE_UNAVAILABLE"
    hint = "Check the file path or URL and try again."

    def __init__(self, location: str, message: str) -> None:
        super().__init__(f"cannot load {location}: {message}", location=location)
