"""Command model → Turtle serialization (the inverse of extraction)."""

from __future__ import annotations

from ontoctl.domain.model import (
    Argument,
    CommandModel,
    CustomType,
    CustomValidator,
    LengthValidator,
    OneOfValidator,
    RangeValidator,
    RegexValidator,
    TypeDefinition,
)
from ontoctl.domain.terms import XSD_NS, escape_string
from ontoctl.domain.vocabulary import CNV_NS, primitive_iri

DEFAULT_BASE_IRI = "https://cnv.dev/cli/"


def _string(value: str) -> str:
    return f'"{escape_string(value)}"'


def _number(value: float) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    text = repr(value)
    return text if ("." in text or "e" in text) else f"{text}.0"


def _value(value: bool | int | float | str) -> str:
    if isinstance(value, str):
        return _string(value)
    return _number(value)


def _validator(spec: object) -> str:
    if isinstance(spec, RegexValidator):
        body = ["a cnv:RegexValidator", f"cnv:pattern {_string(spec.pattern)}"]
    elif isinstance(spec, RangeValidator):
        body = ["a cnv:RangeValidator"]
        if spec.min is not None:
            body.append(f"cnv:min {_number(spec.min)}")
        if spec.max is not None:
            body.append(f"cnv:max {_number(spec.max)}")
    elif isinstance(spec, LengthValidator):
        body = ["a cnv:LengthValidator"]
        if spec.min is not None:
            body.append(f"cnv:minLength {spec.min}")
        if spec.max is not None:
            body.append(f"cnv:maxLength {spec.max}")
    elif isinstance(spec, OneOfValidator):
        body = ["a cnv:OneOfValidator", "cnv:allowedValue " + ", ".join(_string(v) for v in spec.values)]
    elif isinstance(spec, CustomValidator):
        body = ["a cnv:CustomValidator", f"cnv:expression {_string(spec.expression)}"]
    else:
        msg = f"unknown validator {spec!r}"
        raise TypeError(msg)
    return "[ " + " ; ".join(body) + " ]"


class _Writer:
    def __init__(self) -> None:
        self.blocks: list[str] = []

    def resource(self, subject: str, cls: str, properties: list[tuple[str, str]]) -> None:
        lines = [f"{subject} a {cls}"]
        lines.extend(f"    {prop} {value}" for prop, value in properties)
        self.blocks.append(" ;\n".join(lines) + " .")

    def text(self, header: list[str]) -> str:
        return "\n".join(header) + "\n\n" + "\n\n".join(self.blocks) + "\n"


def _type_ref(arg_type: object) -> str:
    if isinstance(arg_type, CustomType):
        return f"cli:type_{arg_type.custom}"
    return f"cnv:{primitive_iri(str(arg_type)).value.removeprefix(CNV_NS)}"


def _described(properties: list[tuple[str, str]], description: str) -> list[tuple[str, str]]:
    if description:
        properties.append(("cnv:description", _string(description)))
    return properties


def serialize_model(model: CommandModel, *, base_iri: str = DEFAULT_BASE_IRI) -> str:
    """Render *model* as Turtle using the cnv: vocabulary.

    Subjects are minted under ``<base_iri><model name>#``. Argument order is
    kept with ``cnv:position``.
    """
    writer = _Writer()
    program = [("cnv:name", _string(model.name)), ("cnv:version", _string(model.version))]
    writer.resource("cli:program", "cnv:Command", _described(program, model.description))

    for definition in model.types.values():
        writer.resource(f"cli:type_{definition.name}", "cnv:Type", _type_properties(definition))

    for command in model.commands:
        noun_props = _described([("cnv:name", _string(command.noun))], command.description)
        verb_subjects = [f"cli:verb_{command.noun}.{verb.name}" for verb in command.verbs]
        if verb_subjects:
            noun_props.append(("cnv:hasVerb", ", ".join(verb_subjects)))
        writer.resource(f"cli:noun_{command.noun}", "cnv:Noun", noun_props)

        for verb, verb_subject in zip(command.verbs, verb_subjects, strict=True):
            verb_props = _described([("cnv:name", _string(verb.name))], verb.description)
            if verb.is_async:
                verb_props.append(("cnv:async", "true"))
            arg_subjects = [f"cli:arg_{command.noun}.{verb.name}.{a.name}" for a in verb.arguments]
            if arg_subjects:
                verb_props.append(("cnv:hasArgument", ", ".join(arg_subjects)))
            writer.resource(verb_subject, "cnv:Verb", verb_props)

            for position, (argument, arg_subject) in enumerate(zip(verb.arguments, arg_subjects, strict=True)):
                writer.resource(arg_subject, "cnv:Argument", _argument_properties(argument, position))

    header = [
        f"@prefix cnv: <{CNV_NS}> .",
        f"@prefix xsd: <{XSD_NS}> .",
        f"@prefix cli: <{base_iri}{model.name}#> .",
    ]
    return writer.text(header)


def _type_properties(definition: TypeDefinition) -> list[tuple[str, str]]:
    props = [("cnv:name", _string(definition.name))]
    base = CustomType(custom=definition.base) if definition.base else definition.primitive
    props.append(("cnv:baseType", _type_ref(base)))
    if definition.validator is not None:
        props.append(("cnv:validator", _validator(definition.validator)))
    return props


def _argument_properties(argument: Argument, position: int) -> list[tuple[str, str]]:
    props = _described([("cnv:name", _string(argument.name))], argument.description)
    props.append(("cnv:argType", _type_ref(argument.type)))
    if argument.required:
        props.append(("cnv:required", "true"))
    props.append(("cnv:position", str(position)))
    if argument.default is not None:
        props.append(("cnv:default", _value(argument.default)))
    if argument.validator is not None:
        props.append(("cnv:validator", _validator(argument.validator)))
    return props
