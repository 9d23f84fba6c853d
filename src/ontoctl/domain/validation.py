"""Ontology validation — the one-way ParsedOntology → ValidatedOntology transition.

Checks run in a fixed order and the first violation aborts:

1. uniqueness (nouns, verbs per noun, arguments per verb, type names)
2. type-reference resolution
3. cycle detection over the type-dependency graph
4. argument-constraint sanity (validator bounds, patterns, defaults)
"""

from __future__ import annotations

import logging
import math
import re

import networkx as nx

from ontoctl.domain.errors import (
    CircularDependency,
    DuplicateNoun,
    DuplicateVerb,
    InvalidArgumentType,
    InvariantViolation,
    UnresolvedReference,
)
from ontoctl.domain.expressions import check_expression
from ontoctl.domain.naming import py_ident
from ontoctl.domain.navigation import (
    arguments_of,
    display,
    first_literal,
    name_of,
    type_refs,
    validators_of,
    verbs_of,
)
from ontoctl.domain.ontology import ParsedOntology, ValidatedOntology, _certify
from ontoctl.domain.store import NamespaceTable, TripleStore
from ontoctl.domain.terms import IRI, BNode, Literal, Subject, Term
from ontoctl.domain.vocabulary import (
    ALLOWED_VALUE,
    ARGUMENT,
    BASE_TYPE,
    DEFAULT,
    EXPRESSION,
    MAX,
    MAX_LENGTH,
    MIN,
    MIN_LENGTH,
    NOUN,
    PATTERN,
    PRIMITIVE_IRIS,
    RDF_TYPE,
    TYPE,
    VALIDATOR_KINDS,
    primitive_for,
)

logger = logging.getLogger(__name__)

_NUMERIC = {"integer", "float"}
_TEXT = {"string", "path", "url"}


def validate(ontology: ParsedOntology) -> ValidatedOntology:
    """Check every semantic invariant of *ontology* and promote it.

    Raises the first ValidationError found; nothing partial is returned.
    """
    checker = _Checker(ontology)
    checker.check_uniqueness()
    checker.check_references()
    checker.check_cycles()
    checker.check_constraints()
    logger.debug("Validated ontology with %d triples", len(ontology.graph))
    return _certify(ontology)


class _Checker:
    def __init__(self, ontology: ParsedOntology) -> None:
        self.graph: TripleStore = ontology.graph
        self.namespaces: NamespaceTable = ontology.namespaces
        self.nouns = list(ontology.index.members(NOUN))
        self.types = list(ontology.index.members(TYPE))
        arguments = list(ontology.index.members(ARGUMENT))
        for noun in self.nouns:
            for verb in verbs_of(self.graph, noun):
                for argument in arguments_of(self.graph, verb):
                    if argument not in arguments:
                        arguments.append(argument)
        self.arguments = arguments

    def label(self, node: Subject) -> str:
        return display(self.graph, node, self.namespaces)

    # 1. uniqueness

    def check_uniqueness(self) -> None:
        noun_names: set[str] = set()
        for noun in self.nouns:
            name = name_of(self.graph, noun)
            if name is None:
                continue
            if name in noun_names:
                raise DuplicateNoun(name)
            noun_names.add(name)

            verb_names: set[str] = set()
            for verb in verbs_of(self.graph, noun):
                verb_name = name_of(self.graph, verb)
                if verb_name is None:
                    continue
                if verb_name in verb_names:
                    raise DuplicateVerb(name, verb_name)
                verb_names.add(verb_name)
                self._check_argument_names(f"{name} {verb_name}", verb)

        type_names: set[str] = set()
        for type_node in self.types:
            type_name = name_of(self.graph, type_node)
            if type_name is None:
                continue
            if type_name in type_names:
                raise InvariantViolation(f"type '{type_name}'", "type name is defined more than once")
            type_names.add(type_name)

    def _check_argument_names(self, command: str, verb: Subject) -> None:
        seen: set[str] = set()
        for argument in arguments_of(self.graph, verb):
            name = name_of(self.graph, argument)
            if name is None:
                continue
            if name in seen:
                raise InvariantViolation(f"verb '{command}'", f"argument '{name}' is defined more than once")
            seen.add(name)

    # 2. reference resolution

    def check_references(self) -> None:
        for node in [*self.arguments, *self.types]:
            for ref in type_refs(self.graph, node):
                self._resolve_ref(node, ref)

    def _resolve_ref(self, node: Subject, ref: Term) -> None:
        if isinstance(ref, IRI):
            if ref in PRIMITIVE_IRIS or ref in self.types:
                return
            raise UnresolvedReference(ref.value, self.label(node))
        if isinstance(ref, Literal):
            if primitive_for(ref.lexical) is None:
                raise InvalidArgumentType(self.label(node), ref.lexical, "not a primitive type name")
            return
        raise InvalidArgumentType(self.label(node), str(ref), "a type must be an IRI or a type name")

    # 3. cycles

    def check_cycles(self) -> None:
        graph = nx.DiGraph()
        for type_node in self.types:
            graph.add_node(type_node)
            for base in self.graph.objects(type_node, BASE_TYPE):
                if base in self.types:
                    graph.add_edge(type_node, base)
        cycle = find_cycle(graph)
        if cycle:
            raise CircularDependency([self.label(node) for node in cycle])

    # 4. constraint sanity

    def check_constraints(self) -> None:
        for type_node in self.types:
            # shared by every argument of the type, so only `value` is bound
            self._check_validators(type_node, subject=None)
        for argument in self.arguments:
            self._check_validators(argument, subject=py_ident(name_of(self.graph, argument) or "value"))
            self._check_default(argument)

    def primitive(self, node: Subject) -> str:
        """Effective primitive of an argument or type, following base types."""
        seen: set[Subject] = set()
        current: Subject | None = node
        while current is not None and current not in seen:
            seen.add(current)
            refs = type_refs(self.graph, current)
            if not refs:
                return "string"
            ref = refs[0]
            if isinstance(ref, Literal):
                return primitive_for(ref.lexical) or "string"
            if ref in PRIMITIVE_IRIS:
                return PRIMITIVE_IRIS[ref]  # type: ignore[index]
            current = ref if isinstance(ref, IRI | BNode) else None
        return "string"

    def _check_validators(self, node: Subject, *, subject: str | None) -> None:
        label = self.label(node)
        primitive = self.primitive(node)
        for validator in validators_of(self.graph, node):
            kinds = [VALIDATOR_KINDS[t] for t in self.graph.objects(validator, RDF_TYPE) if t in VALIDATOR_KINDS]
            if not kinds:
                continue
            kind = kinds[0]
            if kind == "range":
                if primitive not in _NUMERIC:
                    raise InvalidArgumentType(label, primitive, "range validators require a numeric type")
                self._check_bounds(label, validator, MIN, MAX, "range", integer=False)
            elif kind == "length":
                if primitive not in _TEXT:
                    raise InvalidArgumentType(label, primitive, "length validators require a text type")
                self._check_bounds(label, validator, MIN_LENGTH, MAX_LENGTH, "length", integer=True)
            elif kind == "regex":
                if primitive not in _TEXT:
                    raise InvalidArgumentType(label, primitive, "regex validators require a text type")
                pattern = first_literal(self.graph, validator, PATTERN)
                if pattern is not None:
                    try:
                        re.compile(pattern.lexical)
                    except re.error as exc:
                        raise InvariantViolation(label, f"invalid regex {pattern.lexical!r}: {exc}") from exc
            elif kind == "one_of":
                if not self.graph.objects(validator, ALLOWED_VALUE):
                    raise InvariantViolation(label, "one-of validator lists no allowed values")
            else:
                expression = first_literal(self.graph, validator, EXPRESSION)
                if expression is not None:
                    try:
                        check_expression(expression.lexical, subject)
                    except ValueError as exc:
                        raise InvariantViolation(label, str(exc)) from exc

    def _check_bounds(
        self, label: str, validator: Subject, low_prop: IRI, high_prop: IRI, kind: str, *, integer: bool
    ) -> None:
        bounds: list[float | None] = []
        for prop in (low_prop, high_prop):
            literal = first_literal(self.graph, validator, prop)
            if literal is None:
                bounds.append(None)
                continue
            try:
                value = float(literal.lexical)
            except ValueError:
                raise InvariantViolation(label, f"{kind} bound {literal.lexical!r} is not a number") from None
            if not math.isfinite(value):
                raise InvariantViolation(label, f"{kind} bound {literal.lexical!r} must be a finite number")
            if integer and (value != int(value) or value < 0):
                raise InvariantViolation(label, f"{kind} bound {literal.lexical!r} must be a non-negative integer")
            bounds.append(value)
        low, high = bounds
        if low is not None and high is not None and low > high:
            raise InvariantViolation(label, f"{kind} minimum {low:g} exceeds maximum {high:g}")

    def _check_default(self, argument: Subject) -> None:
        default = first_literal(self.graph, argument, DEFAULT)
        if default is None:
            return
        primitive = self.primitive(argument)
        if not default_fits(default, primitive):
            raise InvalidArgumentType(
                self.label(argument), primitive, f"default {default.lexical!r} is not a valid {primitive}"
            )


def default_fits(default: Literal, primitive: str) -> bool:
    text = default.lexical.strip()
    if primitive == "integer":
        try:
            int(text)
        except ValueError:
            return False
        return True
    if primitive == "float":
        try:
            return math.isfinite(float(text))
        except ValueError:
            return False
    if primitive == "boolean":
        return text.lower() in ("true", "false", "1", "0")
    return True


def find_cycle[N](graph: nx.DiGraph) -> list[N]:
    """Depth-first tri-color search; returns the first cycle found as a closed path."""
    white, grey, black = 0, 1, 2
    color: dict[N, int] = dict.fromkeys(graph.nodes, white)
    stack: list[N] = []

    def visit(node: N) -> list[N]:
        color[node] = grey
        stack.append(node)
        for succ in graph.successors(node):
            if color[succ] == grey:
                return [*stack[stack.index(succ) :], succ]
            if color[succ] == white:
                found = visit(succ)
                if found:
                    return found
        stack.pop()
        color[node] = black
        return []

    for node in graph.nodes:
        if color[node] == white:
            cycle = visit(node)
            if cycle:
                return cycle
    return []
