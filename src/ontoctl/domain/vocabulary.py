"""The cnv: application vocabulary and standard namespaces."""

from __future__ import annotations

from ontoctl.domain.terms import XSD_NS, IRI

CNV_NS = "https://cnv.dev/ontology#"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDFS_NS = "http://www.w3.org/2000/01/rdf-schema#"

STANDARD_PREFIXES: dict[str, str] = {
    "cnv": CNV_NS,
    "rdf": RDF_NS,
    "rdfs": RDFS_NS,
    "xsd": XSD_NS,
}


def cnv(local: str) -> IRI:
    return IRI(CNV_NS + local)


RDF_TYPE = IRI(RDF_NS + "type")
RDFS_LABEL = IRI(RDFS_NS + "label")

# ── Classes ──────────────────────────────────────────────────────────

COMMAND = cnv("Command")
NOUN = cnv("Noun")
VERB = cnv("Verb")
ARGUMENT = cnv("Argument")
TYPE = cnv("Type")

INDEXED_CLASSES = (COMMAND, NOUN, VERB, ARGUMENT, TYPE)

# ── Properties ───────────────────────────────────────────────────────

NAME = cnv("name")
DESCRIPTION = cnv("description")
VERSION = cnv("version")
HAS_NOUN = cnv("hasNoun")
HAS_VERB = cnv("hasVerb")
HAS_ARGUMENT = cnv("hasArgument")
ASYNC = cnv("async")
ARG_TYPE = cnv("argType")
REQUIRED = cnv("required")
DEFAULT = cnv("default")
POSITION = cnv("position")
VALIDATOR = cnv("validator")
BASE_TYPE = cnv("baseType")
PATTERN = cnv("pattern")
MIN = cnv("min")
MAX = cnv("max")
MIN_LENGTH = cnv("minLength")
MAX_LENGTH = cnv("maxLength")
ALLOWED_VALUE = cnv("allowedValue")
EXPRESSION = cnv("expression")

# ── Primitive types ──────────────────────────────────────────────────

PRIMITIVE_IRIS: dict[IRI, str] = {
    cnv("String"): "string",
    cnv("Integer"): "integer",
    cnv("Float"): "float",
    cnv("Boolean"): "boolean",
    cnv("Path"): "path",
    cnv("Url"): "url",
}

# ── Validator kinds ──────────────────────────────────────────────────

VALIDATOR_KINDS: dict[IRI, str] = {
    cnv("RegexValidator"): "regex",
    cnv("RangeValidator"): "range",
    cnv("LengthValidator"): "length",
    cnv("OneOfValidator"): "one_of",
    cnv("CustomValidator"): "custom",
}


def primitive_for(value: str) -> str | None:
    """Resolve a literal type name (``"Integer"``, ``"int"``) to a primitive."""
    key = value.strip().lower()
    aliases = {"str": "string", "int": "integer", "bool": "boolean", "uri": "url"}
    key = aliases.get(key, key)
    return key if key in PRIMITIVE_IRIS.values() else None


def primitive_iri(name: str) -> IRI:
    return cnv(name.capitalize())
