"""RDF terms and triples.

Terms are frozen, hashable value objects so triples can live in sets and
serve as index keys. A Literal without datatype or language is a plain
``xsd:string`` literal.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

XSD_NS = "http://www.w3.org/2001/XMLSchema#"
XSD_STRING = XSD_NS + "string"
XSD_BOOLEAN = XSD_NS + "boolean"
XSD_INTEGER = XSD_NS + "integer"
XSD_DECIMAL = XSD_NS + "decimal"
XSD_DOUBLE = XSD_NS + "double"

NUMERIC_DATATYPES = frozenset(
    {
        XSD_INTEGER,
        XSD_DECIMAL,
        XSD_DOUBLE,
        XSD_NS + "float",
        XSD_NS + "int",
        XSD_NS + "long",
        XSD_NS + "short",
        XSD_NS + "nonNegativeInteger",
        XSD_NS + "positiveInteger",
    }
)


@dataclass(frozen=True, slots=True)
class IRI:
    value: str

    def __str__(self) -> str:
        return self.value

    def n3(self) -> str:
        return f"<{self.value}>"


@dataclass(frozen=True, slots=True)
class BNode:
    id: str

    def __str__(self) -> str:
        return f"_:{self.id}"

    def n3(self) -> str:
        return f"_:{self.id}"


@dataclass(frozen=True, slots=True)
class Literal:
    lexical: str
    datatype: str | None = None
    language: str | None = None

    def __str__(self) -> str:
        return self.lexical

    @property
    def is_numeric(self) -> bool:
        return self.datatype in NUMERIC_DATATYPES

    def to_python(self) -> Any:
        """Convert to a native value: bool, int, float, or str."""
        if self.datatype == XSD_BOOLEAN:
            return self.lexical in ("true", "1")
        if self.datatype in NUMERIC_DATATYPES:
            return numeric_value(self.lexical)
        return self.lexical

    def n3(self) -> str:
        text = escape_string(self.lexical)
        if self.language:
            return f'"{text}"@{self.language}'
        if self.datatype and self.datatype != XSD_STRING:
            return f'"{text}"^^<{self.datatype}>'
        return f'"{text}"'


type Term = IRI | BNode | Literal
type Subject = IRI | BNode


@dataclass(frozen=True, slots=True)
class Triple:
    subject: Subject
    predicate: IRI
    object: Term


def numeric_value(lexical: str) -> int | float:
    """Parse an xsd numeric lexical form; ints stay ints."""
    try:
        return int(lexical)
    except ValueError:
        pass
    try:
        dec = Decimal(lexical)
    except InvalidOperation as exc:
        msg = f"not a number: {lexical!r}"
        raise ValueError(msg) from exc
    return float(dec)


def escape_string(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def term_to_json(term: Term | None) -> str | None:
    """Render a term for JSON payloads: IRIs as text, literals as lexical form."""
    if term is None:
        return None
    if isinstance(term, BNode):
        return str(term)
    return term.value if isinstance(term, IRI) else term.lexical
