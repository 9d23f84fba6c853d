"""Command model extraction from a validated ontology.

Nouns are enumerated through the backend's SPARQL capability; property
values are read from the ontology's indexed triple view. Anything that is
valid RDF but does not fit the cnv: vocabulary raises an ExtractionError.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from ontoctl.domain.errors import InvalidStructure, MissingProperty, SynthesisError, TypeMismatch
from ontoctl.domain.model import (
    Argument,
    Command,
    CommandModel,
    CustomType,
    CustomValidator,
    LengthValidator,
    OneOfValidator,
    PrimitiveType,
    RangeValidator,
    RegexValidator,
    TypeDefinition,
    Verb,
)
from ontoctl.domain.naming import RESERVED, RESERVED_OPTIONS, group_ident, handler_ident, is_cli_name, py_ident
from ontoctl.domain.navigation import arguments_of, display, first_literal, nouns_of, validators_of, verbs_of
from ontoctl.domain.ontology import ValidatedOntology
from ontoctl.domain.terms import XSD_BOOLEAN, IRI, Literal, Subject
from ontoctl.domain.vocabulary import (
    ALLOWED_VALUE,
    ARG_TYPE,
    ASYNC,
    BASE_TYPE,
    COMMAND,
    DEFAULT,
    DESCRIPTION,
    EXPRESSION,
    MAX,
    MAX_LENGTH,
    MIN,
    MIN_LENGTH,
    NAME,
    NOUN,
    PATTERN,
    POSITION,
    PRIMITIVE_IRIS,
    RDF_TYPE,
    RDFS_LABEL,
    REQUIRED,
    TYPE,
    VALIDATOR_KINDS,
    VERB,
    VERSION,
    primitive_for,
)

logger = logging.getLogger(__name__)

NOUN_QUERY = "SELECT ?noun WHERE { ?noun a cnv:Noun }"


def extract_commands(
    ontology: ValidatedOntology,
    *,
    default_name: str = "cli",
    default_version: str = "0.1.0",
) -> CommandModel:
    """Build the CommandModel for a validated ontology.

    Raises:
        TypeError: *ontology* has not been through ``validate()``.
        ExtractionError: the ontology does not describe a command structure.
    """
    if not isinstance(ontology, ValidatedOntology):
        msg = f"extract_commands requires a ValidatedOntology, got {type(ontology).__name__}"
        raise TypeError(msg)
    model = _Extractor(ontology).run(default_name, default_version)
    logger.debug("Extracted %d commands, %d types", len(model.commands), len(model.types))
    return model


class _Extractor:
    def __init__(self, ontology: ValidatedOntology) -> None:
        self.ontology = ontology
        self.graph = ontology.graph
        self.index = ontology.index
        self.type_names: dict[Subject, str] = {}
        self._registry: dict[str, TypeDefinition] = {}

    def label(self, node: Subject) -> str:
        return display(self.graph, node, self.ontology.namespaces)

    def run(self, default_name: str, default_version: str) -> CommandModel:
        name, version, description = self._program(default_name, default_version)
        types = self._types()
        commands = [self._command(noun) for noun in self._nouns()]
        self._check_orphan_verbs()
        model = CommandModel(
            name=name,
            version=version,
            description=description,
            commands=commands,
            types=types,
        )
        _check_identifiers(model)
        return model

    # literals

    def _literal(self, node: Subject, prop: IRI) -> Literal | None:
        values = self.graph.objects(node, prop)
        if not values:
            return None
        value = values[0]
        if not isinstance(value, Literal):
            raise TypeMismatch(self.label(node), _short(prop), "a literal", "an IRI or blank node")
        return value

    def _name(self, node: Subject, kind: str) -> str:
        literal = self._literal(node, NAME)
        if literal is None or not literal.lexical.strip():
            raise MissingProperty(f"{kind} {self.label(node)}", "cnv:name")
        name = literal.lexical.strip()
        if not is_cli_name(name):
            raise InvalidStructure(
                f"{kind} {name!r}",
                "names must start with a letter and contain only letters, digits, '-' and '_'",
            )
        return name

    def _description(self, node: Subject, fallback: str) -> str:
        literal = self._literal(node, DESCRIPTION) or first_literal(self.graph, node, RDFS_LABEL)
        return literal.lexical.strip() if literal is not None else fallback

    def _flag(self, node: Subject, prop: IRI) -> bool:
        literal = self._literal(node, prop)
        if literal is None:
            return False
        text = literal.lexical.strip().lower()
        if literal.datatype not in (None, XSD_BOOLEAN) or text not in ("true", "false", "1", "0"):
            raise TypeMismatch(self.label(node), _short(prop), "a boolean", repr(literal.lexical))
        return text in ("true", "1")

    def _number(self, node: Subject, prop: IRI, *, integer: bool = False) -> int | float | None:
        literal = self._literal(node, prop)
        if literal is None:
            return None
        try:
            value = float(literal.lexical)
        except ValueError:
            raise TypeMismatch(self.label(node), _short(prop), "a number", repr(literal.lexical)) from None
        if not math.isfinite(value):
            raise TypeMismatch(self.label(node), _short(prop), "a finite number", repr(literal.lexical))
        if integer or value == int(value):
            return int(value)
        return value

    # program / nouns / verbs

    def _program(self, default_name: str, default_version: str) -> tuple[str, str, str]:
        roots = self.index.members(COMMAND)
        if len(roots) > 1:
            raise InvalidStructure("ontology", "declares more than one cnv:Command")
        if not roots:
            return default_name, default_version, ""
        root = roots[0]
        name = self._name(root, "command")
        version = self._literal(root, VERSION)
        return name, version.lexical if version is not None else default_version, self._description(root, "")

    def _nouns(self) -> list[Subject]:
        found = {row["noun"] for row in self.ontology.backend.query_sparql(NOUN_QUERY).rows if "noun" in row}
        # Document order, whatever order the backend returned rows in.
        return [noun for noun in self.index.members(NOUN) if noun in found]

    def _command(self, noun: Subject) -> Command:
        name = self._name(noun, "noun")
        verbs = []
        for verb in verbs_of(self.graph, noun):
            owners = nouns_of(self.graph, verb)
            if len(owners) > 1:
                raise InvalidStructure(f"verb {self.label(verb)}", "is attached to more than one noun")
            verbs.append(self._verb(verb))
        return Command(noun=name, description=self._description(noun, name), verbs=verbs)

    def _check_orphan_verbs(self) -> None:
        for verb in self.index.members(VERB):
            owners = [noun for noun in nouns_of(self.graph, verb) if noun in self.index.members(NOUN)]
            if not owners:
                raise InvalidStructure(f"verb {self.label(verb)}", "is not attached to any cnv:Noun")

    def _verb(self, verb: Subject) -> Verb:
        name = self._name(verb, "verb")
        arguments = sorted(
            (self._argument(node) for node in arguments_of(self.graph, verb)),
            key=lambda pair: (pair[0] is None, pair[0] or 0),
        )
        return Verb(
            name=name,
            description=self._description(verb, name),
            is_async=self._flag(verb, ASYNC),
            arguments=[argument for _, argument in arguments],
        )

    def _argument(self, node: Subject) -> tuple[int | None, Argument]:
        name = self._name(node, "argument")
        arg_type = self._arg_type(node, ARG_TYPE)
        position = self._number(node, POSITION, integer=True)
        default_literal = self._literal(node, DEFAULT)
        default = _coerce(default_literal, self._primitive(arg_type)) if default_literal is not None else None
        argument = Argument(
            name=name,
            description=self._description(node, ""),
            type=arg_type,
            required=self._flag(node, REQUIRED),
            default=default,
            validator=self._validator(node),
        )
        return position, argument  # type: ignore[return-value]

    # types

    def _types(self) -> dict[str, TypeDefinition]:
        nodes = self.index.members(TYPE)
        for node in nodes:
            self.type_names[node] = self._name(node, "type")
        pending = {node: self._arg_type(node, BASE_TYPE) for node in nodes}
        resolved: dict[str, TypeDefinition] = {}
        for node in nodes:
            name = self.type_names[node]
            base = pending[node]
            resolved[name] = TypeDefinition(
                name=name,
                primitive=self._chain_primitive(node, pending),
                base=base.custom if isinstance(base, CustomType) else None,
                validator=self._validator(node),
            )
        self._registry = resolved
        return resolved

    def _chain_primitive(self, node: Subject, pending: dict[Subject, Any]) -> PrimitiveType:
        current: Any = pending[node]
        # Validation guarantees the chain is acyclic.
        while isinstance(current, CustomType):
            owner = next(n for n, type_name in self.type_names.items() if type_name == current.custom)
            current = pending[owner]
        return current

    def _arg_type(self, node: Subject, prop: IRI) -> PrimitiveType | CustomType:
        refs = self.graph.objects(node, prop)
        if not refs:
            return PrimitiveType.STRING
        ref = refs[0]
        if isinstance(ref, Literal):
            primitive = primitive_for(ref.lexical)
            if primitive is None:
                raise TypeMismatch(self.label(node), _short(prop), "a type", repr(ref.lexical))
            return PrimitiveType(primitive)
        if ref in PRIMITIVE_IRIS:
            return PrimitiveType(PRIMITIVE_IRIS[ref])  # type: ignore[index]
        if ref in self.type_names:
            return CustomType(custom=self.type_names[ref])  # type: ignore[index]
        raise InvalidStructure(self.label(node), f"type {ref} is not a cnv:Type")

    def _primitive(self, arg_type: PrimitiveType | CustomType) -> PrimitiveType:
        if isinstance(arg_type, CustomType):
            return self._registry[arg_type.custom].primitive
        return arg_type

    # validators

    def _validator(self, node: Subject) -> Any:
        nodes = validators_of(self.graph, node)
        if not nodes:
            return None
        if len(nodes) > 1:
            raise InvalidStructure(self.label(node), "declares more than one cnv:validator")
        validator = nodes[0]
        owner = self.label(node)
        kinds = [VALIDATOR_KINDS[t] for t in self.graph.objects(validator, RDF_TYPE) if t in VALIDATOR_KINDS]
        if len(kinds) != 1:
            raise InvalidStructure(owner, "validator must have exactly one validator class")
        kind = kinds[0]
        if kind == "regex":
            pattern = self._literal(validator, PATTERN)
            if pattern is None:
                raise MissingProperty(f"{owner} validator", "cnv:pattern")
            return RegexValidator(pattern=pattern.lexical)
        if kind == "range":
            return RangeValidator(min=self._number(validator, MIN), max=self._number(validator, MAX))
        if kind == "length":
            return LengthValidator(
                min=self._number(validator, MIN_LENGTH, integer=True),  # type: ignore[arg-type]
                max=self._number(validator, MAX_LENGTH, integer=True),  # type: ignore[arg-type]
            )
        if kind == "one_of":
            values = [v.lexical for v in self.graph.objects(validator, ALLOWED_VALUE) if isinstance(v, Literal)]
            if not values:
                raise MissingProperty(f"{owner} validator", "cnv:allowedValue")
            return OneOfValidator(values=values)
        expression = self._literal(validator, EXPRESSION)
        if expression is None:
            raise MissingProperty(f"{owner} validator", "cnv:expression")
        return CustomValidator(expression=expression.lexical.strip())


def _short(prop: IRI) -> str:
    return "cnv:" + prop.value.rsplit("#", 1)[-1]


def _coerce(literal: Literal, primitive: PrimitiveType) -> bool | int | float | str:
    text = literal.lexical.strip()
    if primitive is PrimitiveType.INTEGER:
        return int(text)
    if primitive is PrimitiveType.FLOAT:
        return float(text)
    if primitive is PrimitiveType.BOOLEAN:
        return text.lower() in ("true", "1")
    return literal.lexical


def _check_identifiers(model: CommandModel) -> None:
    """Every generated Python identifier must be distinct."""
    owners: dict[str, str] = {}

    def claim(ident: str, entity: str) -> None:
        if ident in RESERVED:
            raise SynthesisError(entity, f"identifier '{ident}' is reserved in generated code")
        if ident in owners:
            raise SynthesisError(entity, f"identifier '{ident}' collides with {owners[ident]}")
        owners[ident] = entity

    for command in model.commands:
        claim(group_ident(command.noun), f"noun '{command.noun}'")
        for verb in command.verbs:
            claim(handler_ident(command.noun, verb.name), f"verb '{command.noun} {verb.name}'")
            params: dict[str, str] = {}
            for argument in verb.arguments:
                param = py_ident(argument.name)
                if argument.name in RESERVED_OPTIONS:
                    raise SynthesisError(
                        f"argument '{argument.name}'", f"option '--{argument.name}' is already defined by click"
                    )
                if param in RESERVED:
                    raise SynthesisError(
                        f"argument '{argument.name}'", f"parameter '{param}' is reserved in generated code"
                    )
                if param in params:
                    raise SynthesisError(
                        f"argument '{argument.name}'",
                        f"parameter '{param}' collides with argument '{params[param]}'",
                    )
                params[param] = argument.name
