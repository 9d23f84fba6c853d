"""Bounded SPARQL SELECT engine.

Supported: ``PREFIX`` declarations, ``SELECT [DISTINCT] (?vars | *)
WHERE { ... }`` with a flat group of triple patterns (``;``, ``,`` and
``a`` abbreviations) and ``FILTER`` constraints (comparisons, ``regex``,
``str``, ``bound``, ``lang``, ``&&``, ``||``, ``!``).

Evaluation order is fixed: every pattern gets its candidate bindings from an
index scan, the candidate sets are joined left to right in the order the
patterns were written, filters run last, then the projection. There is no
cost-based reordering.

Bare names (``Verb``, ``name``) and the empty prefix resolve against the
cnv: vocabulary. Anything else (OPTIONAL, UNION, nested groups, solution
modifiers, other query forms) raises :class:`SparqlError`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ontoctl.domain.errors import SparqlError
from ontoctl.domain.store import NamespaceTable, QueryResults, TripleStore
from ontoctl.domain.terms import XSD_BOOLEAN, XSD_DECIMAL, XSD_DOUBLE, XSD_INTEGER, IRI, BNode, Literal, Term
from ontoctl.domain.vocabulary import CNV_NS, RDF_TYPE, STANDARD_PREFIXES

logger = logging.getLogger(__name__)

# ── AST ──────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Var:
    name: str


type PatternTerm = Var | Term


@dataclass(frozen=True, slots=True)
class TriplePattern:
    subject: PatternTerm
    predicate: PatternTerm
    object: PatternTerm

    def variables(self) -> list[str]:
        names: list[str] = []
        for part in (self.subject, self.predicate, self.object):
            if isinstance(part, Var) and part.name not in names:
                names.append(part.name)
        return names


@dataclass(frozen=True, slots=True)
class Compare:
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Logical:
    op: str  # "&&" or "||"
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class Not:
    operand: Expr


@dataclass(frozen=True, slots=True)
class Call:
    name: str
    args: tuple[Expr, ...]
    regex: re.Pattern[str] | None = None


type Expr = Var | Term | Compare | Logical | Not | Call


@dataclass(frozen=True)
class SelectQuery:
    variables: tuple[str, ...] | None  # None means SELECT *
    distinct: bool
    patterns: tuple[TriplePattern, ...]
    filters: tuple[Expr, ...]

    def pattern_variables(self) -> list[str]:
        names: list[str] = []
        for pattern in self.patterns:
            for name in pattern.variables():
                if name not in names:
                    names.append(name)
        return names


# ── Lexer ────────────────────────────────────────────────────────────

_TOKEN = re.compile(
    r"""
    (?P<ws>\s+|\#[^\n]*)
  | (?P<var>[?$][A-Za-z_][A-Za-z0-9_]*)
  | (?P<iri><[^<>"{}|^`\\\s]*>)
  | (?P<string>"(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')
  | (?P<langtag>@[A-Za-z]+(?:-[A-Za-z0-9]+)*)
  | (?P<number>[+-]?(?:[0-9]+\.[0-9]+|\.[0-9]+|[0-9]+)(?:[eE][+-]?[0-9]+)?)
  | (?P<pname>(?:[A-Za-z][A-Za-z0-9_\-]*)?:(?:[A-Za-z0-9_](?:[A-Za-z0-9_\-.]*[A-Za-z0-9_\-])?)?)
  | (?P<word>[A-Za-z_][A-Za-z0-9_\-]*)
  | (?P<op>\^\^|&&|\|\||!=|<=|>=|[=<>!{}().;,*])
    """,
    re.VERBOSE,
)

_UNSUPPORTED = {
    "OPTIONAL",
    "UNION",
    "MINUS",
    "GRAPH",
    "BIND",
    "VALUES",
    "SERVICE",
    "ORDER",
    "GROUP",
    "HAVING",
    "LIMIT",
    "OFFSET",
    "CONSTRUCT",
    "ASK",
    "DESCRIBE",
    "INSERT",
    "DELETE",
    "LOAD",
    "CLEAR",
    "FROM",
    "BASE",
}
_FUNCTIONS = {"REGEX": (2, 3), "STR": (1, 1), "BOUND": (1, 1), "LANG": (1, 1)}
_STRING_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", '"': '"', "'": "'", "\\": "\\"}


@dataclass(frozen=True, slots=True)
class _Tok:
    kind: str
    text: str
    pos: int


def _tokenize(text: str) -> list[_Tok]:
    tokens: list[_Tok] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN.match(text, pos)
        if m is None:
            msg = f"unexpected character {text[pos]!r} at offset {pos}"
            raise SparqlError(msg)
        kind = m.lastgroup or "op"
        if kind != "ws":
            tokens.append(_Tok(kind, m.group(0), pos))
        pos = m.end()
    tokens.append(_Tok("eof", "", pos))
    return tokens


_GROUP_KEYWORDS = _UNSUPPORTED | {
    "FILTER",
    "SELECT",
    "WHERE",
    "DISTINCT",
    "REDUCED",
    "AS",
    "BY",
    "NOT",
    "EXISTS",
    "IN",
    "UNDEF",
    "SILENT",
    "PREFIX",
}


def qualify_bare_names(text: str) -> str:
    """Rewrite bare vocabulary names inside ``{ }`` as full ``cnv:`` IRIs.

    ``?v a Verb ; name ?n`` becomes ``?v a <...#Verb> ; <...#name> ?n`` so a
    standard SPARQL engine reads the same shorthand as :func:`parse_query`.
    Keywords, function calls, ``a`` and boolean literals are left alone, and
    characters outside the bounded grammar pass through unchanged.
    """
    chunks: list[tuple[str, str]] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN.match(text, pos)
        if m is None:
            chunks.append(("other", text[pos]))
            pos += 1
            continue
        chunks.append((m.lastgroup or "op", m.group(0)))
        pos = m.end()

    out: list[str] = []
    depth = 0
    for i, (kind, chunk) in enumerate(chunks):
        if kind == "op" and chunk == "{":
            depth += 1
        elif kind == "op" and chunk == "}":
            depth -= 1
        elif kind == "word" and depth > 0 and _is_bare_name(chunk, chunks[i + 1 :]):
            chunk = f"<{CNV_NS}{chunk}>"
        out.append(chunk)
    return "".join(out)


def _is_bare_name(word: str, rest: list[tuple[str, str]]) -> bool:
    if word in ("a", "true", "false") or word.upper() in _GROUP_KEYWORDS:
        return False
    following = next((chunk for kind, chunk in rest if kind != "ws"), "")
    return following != "("


def _unquote(raw: str) -> str:
    body = raw[1:-1]
    return re.sub(r"\\(.)", lambda m: _STRING_ESCAPES.get(m.group(1), m.group(1)), body)


# ── Parser ───────────────────────────────────────────────────────────


class _QueryParser:
    def __init__(self, text: str, namespaces: NamespaceTable) -> None:
        self.tokens = _tokenize(text)
        self.i = 0
        self.namespaces = namespaces

    @property
    def tok(self) -> _Tok:
        return self.tokens[self.i]

    def _take(self) -> _Tok:
        token = self.tokens[self.i]
        if token.kind != "eof":
            self.i += 1
        return token

    def _keyword(self, word: str) -> bool:
        return self.tok.kind == "word" and self.tok.text.upper() == word

    def _op(self, value: str) -> bool:
        return self.tok.kind == "op" and self.tok.text == value

    def _expect_op(self, value: str, context: str) -> None:
        if not self._op(value):
            self._fail(f"expected '{value}' {context}")
        self._take()

    def _fail(self, message: str) -> Any:
        token = self.tok
        found = "end of query" if token.kind == "eof" else repr(token.text)
        msg = f"{message}, found {found} at offset {token.pos}"
        raise SparqlError(msg)

    def _reject_unsupported(self) -> None:
        if self.tok.kind == "word" and self.tok.text.upper() in _UNSUPPORTED:
            msg = f"unsupported SPARQL feature: {self.tok.text.upper()}"
            raise SparqlError(msg)

    def parse(self) -> SelectQuery:
        while self._keyword("PREFIX"):
            self._take()
            ns = self._take()
            iri = self._take()
            if ns.kind != "pname" or not ns.text.endswith(":") or iri.kind != "iri":
                msg = f"expected 'prefix: <iri>' after PREFIX at offset {ns.pos}"
                raise SparqlError(msg)
            self.namespaces.bind(ns.text[:-1], iri.text[1:-1])
        self._reject_unsupported()
        if not self._keyword("SELECT"):
            self._fail("expected SELECT")
        self._take()
        distinct = False
        if self._keyword("DISTINCT"):
            self._take()
            distinct = True
        variables: list[str] | None
        if self._op("*"):
            self._take()
            variables = None
        else:
            variables = []
            while self.tok.kind == "var":
                variables.append(self._take().text[1:])
            if not variables:
                self._fail("expected variables or '*' after SELECT")
        self._reject_unsupported()
        if self._keyword("WHERE"):
            self._take()
        self._expect_op("{", "to open the WHERE clause")
        patterns, filters = self._group()
        self._expect_op("}", "to close the WHERE clause")
        self._reject_unsupported()
        if self.tok.kind != "eof":
            self._fail("expected end of query")
        return SelectQuery(
            variables=tuple(variables) if variables is not None else None,
            distinct=distinct,
            patterns=tuple(patterns),
            filters=tuple(filters),
        )

    def _group(self) -> tuple[list[TriplePattern], list[Expr]]:
        patterns: list[TriplePattern] = []
        filters: list[Expr] = []
        while not self._op("}"):
            if self.tok.kind == "eof":
                self._fail("expected '}'")
            if self._op("{"):
                msg = "unsupported SPARQL feature: nested group patterns"
                raise SparqlError(msg)
            self._reject_unsupported()
            if self._keyword("FILTER"):
                self._take()
                filters.append(self._bracketted_expression())
            else:
                patterns.extend(self._triples_same_subject())
            if self._op("."):
                self._take()
        return patterns, filters

    def _triples_same_subject(self) -> list[TriplePattern]:
        subject = self._term(position="subject")
        out: list[TriplePattern] = []
        while True:
            predicate = self._term(position="predicate")
            out.append(TriplePattern(subject, predicate, self._term(position="object")))
            while self._op(","):
                self._take()
                out.append(TriplePattern(subject, predicate, self._term(position="object")))
            if not self._op(";"):
                return out
            self._take()
            if self._op(".") or self._op("}"):
                return out

    def _term(self, *, position: str) -> PatternTerm:
        token = self.tok
        if token.kind == "var":
            self._take()
            return Var(token.text[1:])
        if token.kind == "iri":
            self._take()
            return IRI(token.text[1:-1])
        if token.kind == "pname":
            self._take()
            return self._expand(token.text)
        if token.kind == "word":
            word = token.text
            if word == "a" and position == "predicate":
                self._take()
                return RDF_TYPE
            if word.upper() in ("FILTER", "SELECT", "WHERE", "PREFIX", "DISTINCT"):
                self._fail(f"expected a {position}")
            self._reject_unsupported()
            self._take()
            if word in ("true", "false") and position == "object":
                return Literal(word, XSD_BOOLEAN)
            return IRI(CNV_NS + word)
        if position == "object" and token.kind in ("string", "number"):
            return self._literal()
        return self._fail(f"expected a {position}")

    def _expand(self, pname: str) -> IRI:
        prefix, _, local = pname.partition(":")
        expanded = self.namespaces.expand(prefix, local)
        if expanded is None:
            if prefix == "":
                return IRI(CNV_NS + local)
            msg = f"undefined prefix '{prefix}:'"
            raise SparqlError(msg)
        return expanded

    def _literal(self) -> Literal:
        token = self._take()
        if token.kind == "number":
            text = token.text
            if "e" in text.lower():
                return Literal(text, XSD_DOUBLE)
            return Literal(text, XSD_DECIMAL if "." in text else XSD_INTEGER)
        lexical = _unquote(token.text)
        if self.tok.kind == "langtag":
            return Literal(lexical, language=self._take().text[1:].lower())
        if self._op("^^"):
            self._take()
            datatype = self._term(position="datatype")
            if not isinstance(datatype, IRI):
                self._fail("expected a datatype IRI after '^^'")
            return Literal(lexical, datatype.value)  # type: ignore[union-attr]
        return Literal(lexical)

    # expressions

    def _bracketted_expression(self) -> Expr:
        if self.tok.kind == "word" and self.tok.text.upper() in _FUNCTIONS:
            return self._primary()
        self._expect_op("(", "after FILTER")
        expr = self._or()
        self._expect_op(")", "to close FILTER")
        return expr

    def _or(self) -> Expr:
        left = self._and()
        while self._op("||"):
            self._take()
            left = Logical("||", left, self._and())
        return left

    def _and(self) -> Expr:
        left = self._comparison()
        while self._op("&&"):
            self._take()
            left = Logical("&&", left, self._comparison())
        return left

    def _comparison(self) -> Expr:
        left = self._unary()
        if self.tok.kind == "op" and self.tok.text in ("=", "!=", "<", ">", "<=", ">="):
            op = self._take().text
            return Compare(op, left, self._unary())
        return left

    def _unary(self) -> Expr:
        if self._op("!"):
            self._take()
            return Not(self._unary())
        return self._primary()

    def _primary(self) -> Expr:
        token = self.tok
        if self._op("("):
            self._take()
            expr = self._or()
            self._expect_op(")", "to close expression")
            return expr
        if token.kind == "var":
            self._take()
            return Var(token.text[1:])
        if token.kind in ("string", "number"):
            return self._literal()
        if token.kind == "iri":
            self._take()
            return IRI(token.text[1:-1])
        if token.kind == "pname":
            self._take()
            return self._expand(token.text)
        if token.kind == "word":
            name = token.text.upper()
            if name in ("TRUE", "FALSE"):
                self._take()
                return Literal(token.text.lower(), XSD_BOOLEAN)
            if name in _FUNCTIONS:
                return self._call(name)
            msg = f"unsupported function or keyword in FILTER: {token.text}"
            raise SparqlError(msg)
        return self._fail("expected an expression")

    def _call(self, name: str) -> Call:
        self._take()
        self._expect_op("(", f"after {name}")
        args: list[Expr] = [self._or()]
        while self._op(","):
            self._take()
            args.append(self._or())
        self._expect_op(")", f"to close {name}")
        low, high = _FUNCTIONS[name]
        if not low <= len(args) <= high:
            msg = f"{name} takes {low}-{high} arguments, got {len(args)}"
            raise SparqlError(msg)
        if name == "BOUND" and not isinstance(args[0], Var):
            msg = "BOUND requires a variable"
            raise SparqlError(msg)
        compiled = None
        if name == "REGEX":
            compiled = _compile_regex(args)
        return Call(name, tuple(args), compiled)


def _compile_regex(args: list[Expr]) -> re.Pattern[str] | None:
    pattern = args[1]
    flags_arg = args[2] if len(args) == 3 else None
    if not isinstance(pattern, Literal) or (flags_arg is not None and not isinstance(flags_arg, Literal)):
        return None
    flags = 0
    for flag in flags_arg.lexical if isinstance(flags_arg, Literal) else "":
        flag_value = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}.get(flag)
        if flag_value is None:
            msg = f"unsupported regex flag {flag!r}"
            raise SparqlError(msg)
        flags |= flag_value
    try:
        return re.compile(pattern.lexical, flags)
    except re.error as exc:
        msg = f"invalid regex {pattern.lexical!r}: {exc}"
        raise SparqlError(msg) from exc


def parse_query(text: str, namespaces: Mapping[str, str] | None = None) -> SelectQuery:
    """Parse *text* with the standard prefixes plus *namespaces* pre-bound."""
    table = NamespaceTable(STANDARD_PREFIXES)
    for prefix, base in (namespaces or {}).items():
        table.bind(prefix, base)
    return _QueryParser(text, table).parse()


# ── Evaluation ───────────────────────────────────────────────────────

type Row = dict[str, Term]


class _ExprError(Exception):
    """Type error during FILTER evaluation; the row is filtered out."""


def _scan(store: TripleStore, pattern: TriplePattern) -> list[Row]:
    def const(part: PatternTerm) -> Any:
        return None if isinstance(part, Var) else part

    rows: list[Row] = []
    for triple in store.match(const(pattern.subject), const(pattern.predicate), const(pattern.object)):
        row: Row = {}
        consistent = True
        for part, value in zip(
            (pattern.subject, pattern.predicate, pattern.object),
            (triple.subject, triple.predicate, triple.object),
            strict=True,
        ):
            if isinstance(part, Var):
                bound = row.get(part.name)
                if bound is not None and bound != value:
                    consistent = False
                    break
                row[part.name] = value
        if consistent:
            rows.append(row)
    return rows


def _join(left: list[Row], right: list[Row], shared: list[str]) -> list[Row]:
    if not shared:
        return [{**lrow, **rrow} for lrow in left for rrow in right]
    buckets: dict[tuple[Term, ...], list[Row]] = {}
    for rrow in right:
        buckets.setdefault(tuple(rrow[name] for name in shared), []).append(rrow)
    joined: list[Row] = []
    for lrow in left:
        for rrow in buckets.get(tuple(lrow[name] for name in shared), ()):
            joined.append({**lrow, **rrow})
    return joined


def _value(expr: Expr, row: Row) -> Term:
    if isinstance(expr, Var):
        if expr.name not in row:
            raise _ExprError(expr.name)
        return row[expr.name]
    if isinstance(expr, IRI | BNode | Literal):
        return expr
    if isinstance(expr, Call):
        return _call(expr, row)
    return Literal("true" if _truth(expr, row) else "false", XSD_BOOLEAN)


def _call(expr: Call, row: Row) -> Term:
    if expr.name == "BOUND":
        return Literal("true" if expr.args[0].name in row else "false", XSD_BOOLEAN)  # type: ignore[union-attr]
    value = _value(expr.args[0], row)
    if expr.name == "STR":
        if isinstance(value, BNode):
            raise _ExprError("str of blank node")
        return Literal(value.value if isinstance(value, IRI) else value.lexical)
    if expr.name == "LANG":
        if not isinstance(value, Literal):
            raise _ExprError("lang of non-literal")
        return Literal(value.language or "")
    # REGEX
    if not isinstance(value, Literal):
        raise _ExprError("regex on non-literal")
    pattern = expr.regex
    if pattern is None:
        raw = _value(expr.args[1], row)
        if not isinstance(raw, Literal):
            raise _ExprError("regex pattern must be a literal")
        try:
            pattern = re.compile(raw.lexical)
        except re.error as exc:
            raise _ExprError(str(exc)) from exc
    return Literal("true" if pattern.search(value.lexical) else "false", XSD_BOOLEAN)


_ORDERING: dict[str, Callable[[Any, Any], bool]] = {
    "=": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    ">": lambda a, b: a > b,
    "<=": lambda a, b: a <= b,
    ">=": lambda a, b: a >= b,
}


def _native(literal: Literal) -> Any:
    try:
        return literal.to_python()
    except ValueError as exc:
        raise _ExprError(f"ill-typed literal {literal.lexical!r}") from exc


def _compare(op: str, left: Term, right: Term) -> bool:
    if isinstance(left, Literal) and isinstance(right, Literal):
        if left.is_numeric and right.is_numeric:
            return _ORDERING[op](_native(left), _native(right))
        if left.datatype == XSD_BOOLEAN and right.datatype == XSD_BOOLEAN:
            return _ORDERING[op](_native(left), _native(right))
        if op in ("=", "!="):
            same = left.lexical == right.lexical and left.language == right.language
            return same if op == "=" else not same
        return _ORDERING[op](left.lexical, right.lexical)
    if op in ("=", "!="):
        same = left == right
        return same if op == "=" else not same
    raise _ExprError(f"cannot order {left!r} and {right!r}")


def _truth(expr: Expr, row: Row) -> bool:
    if isinstance(expr, Logical):
        if expr.op == "&&":
            return _truth(expr.left, row) and _truth(expr.right, row)
        # SPARQL || tolerates an error on one side when the other is true.
        try:
            if _truth(expr.left, row):
                return True
        except _ExprError:
            return _truth(expr.right, row)
        return _truth(expr.right, row)
    if isinstance(expr, Not):
        return not _truth(expr.operand, row)
    if isinstance(expr, Compare):
        return _compare(expr.op, _value(expr.left, row), _value(expr.right, row))
    value = _value(expr, row)
    if isinstance(value, Literal):
        native = _native(value)
        if isinstance(native, bool | int | float):
            return bool(native)
        return bool(value.lexical)
    raise _ExprError("no effective boolean value")


def _passes(filters: tuple[Expr, ...], row: Row) -> bool:
    for expr in filters:
        try:
            if not _truth(expr, row):
                return False
        except _ExprError:
            return False
    return True


def evaluate(query: SelectQuery, store: TripleStore) -> QueryResults:
    """Evaluate a parsed query against *store*."""
    rows: list[Row] = [{}]
    seen: list[str] = []
    for pattern in query.patterns:
        candidates = _scan(store, pattern)
        shared = [name for name in pattern.variables() if name in seen]
        rows = _join(rows, candidates, shared)
        seen.extend(name for name in pattern.variables() if name not in seen)
        if not rows:
            break
    rows = [row for row in rows if _passes(query.filters, row)]

    variables = query.variables if query.variables is not None else tuple(query.pattern_variables())
    projected: list[Row] = []
    seen_rows: set[tuple[Term | None, ...]] = set()
    for row in rows:
        out = {name: row[name] for name in variables if name in row}
        if query.distinct:
            key = tuple(out.get(name) for name in variables)
            if key in seen_rows:
                continue
            seen_rows.add(key)
        projected.append(out)
    return QueryResults(variables=tuple(variables), rows=projected)


def execute(text: str, store: TripleStore, namespaces: Mapping[str, str] | None = None) -> QueryResults:
    """Parse and evaluate *text* against *store*."""
    query = parse_query(text, namespaces)
    results = evaluate(query, store)
    logger.debug("Query matched %d rows over %d patterns", len(results), len(query.patterns))
    return results
