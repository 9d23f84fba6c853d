"""Command model — the extracted Command/Verb/Argument/Type structure.

All models are frozen and closed (``extra="forbid"``) so they double as the
JSON schema accepted by the export operation.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

_CLOSED = ConfigDict(frozen=True, extra="forbid")
# Bounds and defaults are embedded as Python literals in generated code.
_FINITE = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)


class PrimitiveType(StrEnum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    PATH = "path"
    URL = "url"


class CustomType(BaseModel):
    """Reference to a registered custom type by TypeId."""

    model_config = _CLOSED

    custom: str


type ArgType = PrimitiveType | CustomType

# ── Validators ───────────────────────────────────────────────────────


class RegexValidator(BaseModel):
    model_config = _CLOSED

    kind: Literal["regex"] = "regex"
    pattern: str


class RangeValidator(BaseModel):
    model_config = _FINITE

    kind: Literal["range"] = "range"
    min: int | float | None = None
    max: int | float | None = None


class LengthValidator(BaseModel):
    model_config = _CLOSED

    kind: Literal["length"] = "length"
    min: int | None = None
    max: int | None = None


class OneOfValidator(BaseModel):
    model_config = _CLOSED

    kind: Literal["one_of"] = "one_of"
    values: list[str]


class CustomValidator(BaseModel):
    model_config = _CLOSED

    kind: Literal["custom"] = "custom"
    expression: str


ValidatorSpec = Annotated[
    RegexValidator | RangeValidator | LengthValidator | OneOfValidator | CustomValidator,
    Field(discriminator="kind"),
]

# ── Commands ─────────────────────────────────────────────────────────


class Argument(BaseModel):
    model_config = _FINITE

    name: str
    description: str = ""
    type: PrimitiveType | CustomType = PrimitiveType.STRING
    required: bool = False
    default: bool | int | float | str | None = None
    validator: ValidatorSpec | None = None


class Verb(BaseModel):
    model_config = _CLOSED

    name: str
    description: str = ""
    is_async: bool = False
    arguments: list[Argument] = Field(default_factory=list)


class Command(BaseModel):
    """A noun and the verbs grouped under it."""

    model_config = _CLOSED

    noun: str
    description: str = ""
    verbs: list[Verb] = Field(default_factory=list)


class TypeDefinition(BaseModel):
    """Registered custom type: its underlying primitive, base type, and validator."""

    model_config = _CLOSED

    name: str
    primitive: PrimitiveType
    base: str | None = None
    validator: ValidatorSpec | None = None


class CommandModel(BaseModel):
    """Root of the command model: program metadata, commands, and the type registry."""

    model_config = _CLOSED

    name: str
    version: str = "0.1.0"
    description: str = ""
    commands: list[Command] = Field(default_factory=list)
    types: dict[str, TypeDefinition] = Field(default_factory=dict)

    def primitive_of(self, arg_type: ArgType) -> PrimitiveType:
        if isinstance(arg_type, CustomType):
            return self.types[arg_type.custom].primitive
        return arg_type

    def validators_for(self, argument: Argument) -> list[Any]:
        """Validator chain for *argument*: base types first, the argument's own last."""
        chain: list[Any] = []
        if isinstance(argument.type, CustomType):
            type_name: str | None = argument.type.custom
            type_chain: list[Any] = []
            visited: set[str] = set()
            while type_name is not None and type_name not in visited:
                visited.add(type_name)
                definition = self.types[type_name]
                if definition.validator is not None:
                    type_chain.append(definition.validator)
                type_name = definition.base
            chain.extend(reversed(type_chain))
        if argument.validator is not None:
            chain.append(argument.validator)
        return chain

    def summary(self) -> dict[str, Any]:
        """Noun/verb/argument structure used to compare models."""
        commands = [
            {
                "noun": command.noun,
                "verbs": [
                    {
                        "name": verb.name,
                        "async": verb.is_async,
                        "arguments": [argument.name for argument in verb.arguments],
                    }
                    for verb in command.verbs
                ],
            }
            for command in self.commands
        ]
        verb_count = sum(len(command.verbs) for command in self.commands)
        argument_count = sum(len(verb.arguments) for command in self.commands for verb in command.verbs)
        return {
            "name": self.name,
            "version": self.version,
            "commands": commands,
            "noun_count": len(self.commands),
            "verb_count": verb_count,
            "argument_count": argument_count,
        }
