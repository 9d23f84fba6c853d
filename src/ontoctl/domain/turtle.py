"""Single-pass Turtle parser.

Supports ``@prefix``/``@base`` and SPARQL-style ``PREFIX``/``BASE``
directives, predicate lists (``;``), object lists (``,``), blank node
property lists (``[...]``), ``a``, labeled blank nodes, short and long
string literals, language tags, ``^^`` datatypes, numbers and booleans.

There is no error recovery: the first problem raises and nothing is
returned. Prefixes must be declared before use; they are never guessed.
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass
from urllib.parse import urljoin

from ontoctl.domain.errors import DuplicateDefinition, InvalidIri, TurtleSyntaxError, UndefinedPrefix
from ontoctl.domain.ontology import BackendFactory, ParsedOntology
from ontoctl.domain.store import NamespaceTable, TripleStore
from ontoctl.domain.terms import (
    XSD_BOOLEAN,
    XSD_DECIMAL,
    XSD_DOUBLE,
    XSD_INTEGER,
    XSD_STRING,
    IRI,
    BNode,
    Literal,
    Subject,
    Term,
    Triple,
)
from ontoctl.domain.vocabulary import RDF_TYPE

logger = logging.getLogger(__name__)

# ── Lexer ────────────────────────────────────────────────────────────

_PN_CHARS = r"A-Za-z0-9_\-\u00B7\u00C0-\uFFFF"
_PNAME = re.compile(
    rf"(?P<prefix>(?:[A-Za-z\u00C0-\uFFFF](?:[{_PN_CHARS}.]*[{_PN_CHARS}])?)?):"
    rf"(?P<local>(?:[{_PN_CHARS}:%]|\\[_~.\-!$&'()*+,;=/?#@%])"
    rf"(?:(?:[{_PN_CHARS}.:%]|\\[_~.\-!$&'()*+,;=/?#@%])*(?:[{_PN_CHARS}:%]|\\[_~.\-!$&'()*+,;=/?#@%]))?)?"
)
_BNODE = re.compile(rf"_:(?P<label>[A-Za-z0-9_](?:[{_PN_CHARS}.]*[{_PN_CHARS}])?)")
_NUMBER = re.compile(
    r"(?P<double>[+-]?(?:[0-9]+\.[0-9]*[eE][+-]?[0-9]+|\.[0-9]+[eE][+-]?[0-9]+|[0-9]+[eE][+-]?[0-9]+))"
    r"|(?P<decimal>[+-]?[0-9]*\.[0-9]+)"
    r"|(?P<integer>[+-]?[0-9]+)"
)
_WORD = re.compile(r"[A-Za-z][A-Za-z0-9_\-]*")
_LANGTAG = re.compile(r"@(?P<tag>[A-Za-z]+(?:-[A-Za-z0-9]+)*)")
_IRI_FORBIDDEN = set('<>"{}|^`\\ ')
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
_ECHARS = {"t": "\t", "b": "\b", "n": "\n", "r": "\r", "f": "\f", '"': '"', "'": "'", "\\": "\\"}
_LOCAL_ESCAPE = re.compile(r"\\([_~.\-!$&'()*+,;=/?#@%])")


@dataclass(frozen=True, slots=True)
class Token:
    kind: str
    value: str
    line: int
    column: int
    extra: str = ""


class _Lexer:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1
        self.col = 1

    def error(self, message: str, line: int | None = None, column: int | None = None) -> TurtleSyntaxError:
        return TurtleSyntaxError(line or self.line, column or self.col, message)

    def _advance(self, count: int) -> None:
        chunk = self.text[self.pos : self.pos + count]
        newlines = chunk.count("\n")
        if newlines:
            self.line += newlines
            self.col = len(chunk) - chunk.rfind("\n")
        else:
            self.col += count
        self.pos += count

    def _skip_trivia(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch in " \t\r\n":
                self._advance(1)
            elif ch == "#":
                end = text.find("\n", self.pos)
                self._advance((len(text) if end == -1 else end) - self.pos)
            else:
                break

    def next_token(self) -> Token:
        self._skip_trivia()
        if self.pos >= len(self.text):
            return Token("EOF", "", self.line, self.col)
        return self._next()

    def tokens(self) -> list[Token]:
        out = [self.next_token()]
        while out[-1].kind != "EOF":
            out.append(self.next_token())
        return out

    def _next(self) -> Token:
        text, pos = self.text, self.pos
        line, col = self.line, self.col
        ch = text[pos]

        if ch == "<":
            return self._iri(line, col)
        if ch in "\"'":
            return self._string(line, col)
        if ch == "@":
            m = _LANGTAG.match(text, pos)
            if not m:
                raise self.error("expected a directive or language tag after '@'")
            self._advance(m.end() - pos)
            tag = m.group("tag")
            if tag in ("prefix", "base"):
                return Token("DIRECTIVE", tag, line, col)
            return Token("LANGTAG", tag.lower(), line, col)
        if text.startswith("^^", pos):
            self._advance(2)
            return Token("PUNCT", "^^", line, col)
        if text.startswith("_:", pos):
            m = _BNODE.match(text, pos)
            if not m:
                raise self.error("malformed blank node label")
            self._advance(m.end() - pos)
            return Token("BNODE", m.group("label"), line, col)
        if ch in "+-." or ch.isdigit():
            m = _NUMBER.match(text, pos)
            if m:
                kind = m.lastgroup or "integer"
                self._advance(m.end() - pos)
                return Token("NUMBER", m.group(0), line, col, extra=kind)
        if ch in ".;,[]()":
            self._advance(1)
            return Token("PUNCT", ch, line, col)

        m = _PNAME.match(text, pos)
        if m:
            self._advance(m.end() - pos)
            local = _LOCAL_ESCAPE.sub(r"\1", m.group("local") or "")
            return Token("PNAME", local, line, col, extra=m.group("prefix"))
        m = _WORD.match(text, pos)
        if m:
            self._advance(m.end() - pos)
            return Token("WORD", m.group(0), line, col)
        raise self.error(f"unexpected character {ch!r}")

    def _iri(self, line: int, col: int) -> Token:
        end = self.text.find(">", self.pos + 1)
        newline = self.text.find("\n", self.pos + 1)
        if end == -1 or (newline != -1 and newline < end):
            raise self.error("unterminated IRI", line, col)
        raw = self.text[self.pos + 1 : end]
        value = self._unescape(raw, line, col, allow_echar=False)
        bad = sorted({c for c in value if c in _IRI_FORBIDDEN or ord(c) <= 0x20})
        if bad:
            raise InvalidIri(value, f"contains forbidden character {bad[0]!r}")
        self._advance(end + 1 - self.pos)
        return Token("IRI", value, line, col)

    def _string(self, line: int, col: int) -> Token:
        text, pos = self.text, self.pos
        quote = text[pos]
        long_quote = quote * 3
        if text.startswith(long_quote, pos):
            end = pos + 3
            while True:
                end = text.find(long_quote, end)
                if end == -1:
                    raise self.error("unterminated long string", line, col)
                if _escaped(text, end):
                    end += 1
                    continue
                break
            # A long string may end with extra quote characters before the delimiter.
            while text.startswith(quote, end + 3):
                end += 1
            raw = text[pos + 3 : end]
            self._advance(end + 3 - pos)
        else:
            end = pos + 1
            while True:
                if end >= len(text) or text[end] in "\r\n":
                    raise self.error("unterminated string literal", line, col)
                if text[end] == "\\":
                    end += 2
                    continue
                if text[end] == quote:
                    break
                end += 1
            raw = text[pos + 1 : end]
            self._advance(end + 1 - pos)
        return Token("STRING", self._unescape(raw, line, col, allow_echar=True), line, col)

    def _unescape(self, raw: str, line: int, col: int, *, allow_echar: bool) -> str:
        if "\\" not in raw:
            return raw
        out: list[str] = []
        i = 0
        while i < len(raw):
            ch = raw[i]
            if ch != "\\":
                out.append(ch)
                i += 1
                continue
            nxt = raw[i + 1 : i + 2]
            if nxt in ("u", "U"):
                width = 4 if nxt == "u" else 8
                digits = raw[i + 2 : i + 2 + width]
                if len(digits) != width or not all(c in "0123456789abcdefABCDEF" for c in digits):
                    raise self.error(f"invalid \\{nxt} escape", line, col)
                out.append(chr(int(digits, 16)))
                i += 2 + width
            elif allow_echar and nxt in _ECHARS:
                out.append(_ECHARS[nxt])
                i += 2
            else:
                raise self.error(f"invalid escape sequence '\\{nxt}'", line, col)
        return "".join(out)


def _escaped(text: str, index: int) -> bool:
    backslashes = 0
    while index - backslashes - 1 >= 0 and text[index - backslashes - 1] == "\\":
        backslashes += 1
    return backslashes % 2 == 1


def tokenize(text: str) -> list[Token]:
    """Tokenize Turtle *text*; raises TurtleSyntaxError or InvalidIri."""
    return _Lexer(text).tokens()


# ── Parser ───────────────────────────────────────────────────────────


class _Parser:
    def __init__(self, text: str, base_iri: str | None) -> None:
        # Tokens are pulled one at a time so errors surface in document order.
        self._lexer = _Lexer(text)
        self._current = self._lexer.next_token()
        self.base = base_iri
        self.namespaces = NamespaceTable()
        self.store = TripleStore()
        self._anon = 0

    # token helpers

    @property
    def tok(self) -> Token:
        return self._current

    def _take(self) -> Token:
        token = self._current
        if token.kind != "EOF":
            self._current = self._lexer.next_token()
        return token

    def _is(self, kind: str, value: str | None = None) -> bool:
        token = self.tok
        return token.kind == kind and (value is None or token.value == value)

    def _expect_punct(self, value: str, context: str) -> Token:
        if not self._is("PUNCT", value):
            raise self._error(f"expected '{value}' {context}, found {_describe(self.tok)}")
        return self._take()

    def _error(self, message: str, token: Token | None = None) -> TurtleSyntaxError:
        token = token or self.tok
        return TurtleSyntaxError(token.line, token.column, message)

    # grammar

    def parse(self) -> None:
        while not self._is("EOF"):
            self._statement()

    def _statement(self) -> None:
        token = self.tok
        if token.kind == "DIRECTIVE":
            self._take()
            self._directive(token, sparql_style=False)
        elif token.kind == "WORD" and token.value.upper() in ("PREFIX", "BASE"):
            self._take()
            self._directive(token, sparql_style=True)
        else:
            self._triples()
            self._expect_punct(".", "at the end of a statement")

    def _directive(self, keyword: Token, *, sparql_style: bool) -> None:
        name = keyword.value.lower()
        if name == "prefix":
            ns_token = self.tok
            if ns_token.kind != "PNAME" or ns_token.value:
                raise self._error(
                    f"expected a prefix name ending in ':' after {keyword.value}, found {_describe(ns_token)}"
                )
            self._take()
            iri_token = self.tok
            if iri_token.kind != "IRI":
                raise self._error(f"expected <IRI> for prefix '{ns_token.extra}:', found {_describe(iri_token)}")
            self._take()
            namespace = self._resolve(iri_token.value)
            prefix = ns_token.extra
            if prefix in self.namespaces:
                raise DuplicateDefinition(namespace, prefix=prefix, line=ns_token.line)
            self.namespaces.bind(prefix, namespace)
        else:
            iri_token = self.tok
            if iri_token.kind != "IRI":
                raise self._error(f"expected <IRI> after {keyword.value}, found {_describe(iri_token)}")
            self._take()
            self.base = self._resolve(iri_token.value)
        if not sparql_style:
            self._expect_punct(".", f"after @{name} directive")

    def _triples(self) -> None:
        if self._is("PUNCT", "["):
            subject = self._blank_node_property_list()
            if not self._is("PUNCT", "."):
                self._predicate_object_list(subject)
            return
        subject = self._subject()
        self._predicate_object_list(subject)

    def _subject(self) -> Subject:
        token = self.tok
        if token.kind in ("IRI", "PNAME"):
            return self._iri()
        if token.kind == "BNODE":
            self._take()
            return BNode(token.value)
        if self._is("PUNCT", "("):
            raise self._error("RDF collections are not supported")
        raise self._error(f"expected a subject, found {_describe(token)}")

    def _predicate_object_list(self, subject: Subject) -> None:
        self._verb_object_list(subject)
        while self._is("PUNCT", ";"):
            self._take()
            # Repeated or trailing ';' is allowed.
            if self._is("PUNCT", ";"):
                continue
            if self._is("PUNCT", ".") or self._is("PUNCT", "]") or self._is("EOF"):
                break
            self._verb_object_list(subject)

    def _verb_object_list(self, subject: Subject) -> None:
        predicate = self._verb()
        self._add(subject, predicate, self._object())
        while self._is("PUNCT", ","):
            self._take()
            self._add(subject, predicate, self._object())

    def _verb(self) -> IRI:
        token = self.tok
        if token.kind == "WORD" and token.value == "a":
            self._take()
            return RDF_TYPE
        if token.kind in ("IRI", "PNAME"):
            return self._iri()
        raise self._error(f"expected a predicate, found {_describe(token)}")

    def _object(self) -> Term:
        token = self.tok
        if token.kind in ("IRI", "PNAME"):
            return self._iri()
        if token.kind == "BNODE":
            self._take()
            return BNode(token.value)
        if self._is("PUNCT", "["):
            return self._blank_node_property_list()
        if self._is("PUNCT", "("):
            raise self._error("RDF collections are not supported")
        if token.kind == "STRING":
            return self._string_literal()
        if token.kind == "NUMBER":
            self._take()
            datatype = {"integer": XSD_INTEGER, "decimal": XSD_DECIMAL, "double": XSD_DOUBLE}[token.extra]
            return Literal(token.value, datatype)
        if token.kind == "WORD" and token.value in ("true", "false"):
            self._take()
            return Literal(token.value, XSD_BOOLEAN)
        raise self._error(f"expected an object, found {_describe(token)}")

    def _string_literal(self) -> Literal:
        lexical = self._take().value
        if self._is("LANGTAG"):
            return Literal(lexical, language=self._take().value)
        if self._is("PUNCT", "^^"):
            self._take()
            if self.tok.kind not in ("IRI", "PNAME"):
                raise self._error(f"expected a datatype IRI after '^^', found {_describe(self.tok)}")
            datatype = self._iri().value
            return Literal(lexical, None if datatype == XSD_STRING else datatype)
        return Literal(lexical)

    def _blank_node_property_list(self) -> BNode:
        opening = self._expect_punct("[", "")
        self._anon += 1
        node = BNode(f"anon#{self._anon}")
        if not self._is("PUNCT", "]"):
            self._predicate_object_list(node)
        if not self._is("PUNCT", "]"):
            raise self._error(f"expected ']' to close the blank node opened on line {opening.line}")
        self._take()
        return node

    def _iri(self) -> IRI:
        token = self._take()
        if token.kind == "IRI":
            return IRI(self._resolve(token.value))
        expanded = self.namespaces.expand(token.extra, token.value)
        if expanded is None:
            raise UndefinedPrefix(token.extra, token.line)
        return expanded

    def _resolve(self, value: str) -> str:
        if _SCHEME.match(value):
            return value
        if self.base is None:
            raise InvalidIri(value, "relative IRI with no base IRI in scope")
        return urljoin(self.base, value)

    def _add(self, subject: Subject, predicate: IRI, obj: Term) -> None:
        self.store.add(Triple(subject, predicate, obj))


def _describe(token: Token) -> str:
    if token.kind == "EOF":
        return "end of input"
    if token.kind == "PNAME":
        return f"'{token.extra}:{token.value}'"
    if token.kind == "IRI":
        return f"<{token.value}>"
    if token.kind == "STRING":
        return "a string literal"
    return f"'{token.value}'"


def parse_turtle(
    text: str,
    *,
    base_iri: str | None = None,
    backend_factory: BackendFactory | None = None,
) -> ParsedOntology:
    """Parse Turtle *text* into a ParsedOntology.

    Raises one of TurtleSyntaxError, UndefinedPrefix, InvalidIri, or
    DuplicateDefinition on the first problem found.
    """
    if backend_factory is None:
        from ontoctl.domain.backend import MemoryBackend

        backend_factory = MemoryBackend
    parser = _Parser(text, base_iri)
    parser.parse()
    logger.debug("Parsed %d triples, %d prefixes", len(parser.store), len(parser.namespaces))
    content_hash = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return ParsedOntology.build(parser.store, parser.namespaces, backend_factory, content_hash=content_hash)
