"""Tests for RDF term value objects."""

from __future__ import annotations

import pytest

from ontoctl.domain.terms import (
    XSD_BOOLEAN,
    XSD_DECIMAL,
    XSD_INTEGER,
    XSD_STRING,
    IRI,
    BNode,
    Literal,
    Triple,
    numeric_value,
    term_to_json,
)


class TestLiteral:
    def test_plain_literal(self) -> None:
        lit = Literal("port")
        assert lit.to_python() == "port"
        assert not lit.is_numeric
        assert lit.n3() == '"port"'

    def test_explicit_string_datatype_is_plain(self) -> None:
        assert Literal("x", XSD_STRING).n3() == '"x"'

    def test_typed_n3(self) -> None:
        assert Literal("8080", XSD_INTEGER).n3() == f'"8080"^^<{XSD_INTEGER}>'

    def test_language_n3(self) -> None:
        assert Literal("bonjour", language="fr").n3() == '"bonjour"@fr'

    def test_escaping(self) -> None:
        assert Literal('say "hi"\n').n3() == '"say \\"hi\\"\\n"'

    @pytest.mark.parametrize(
        ("lexical", "datatype", "expected"),
        [
            ("42", XSD_INTEGER, 42),
            ("2.5", XSD_DECIMAL, 2.5),
            ("true", XSD_BOOLEAN, True),
            ("0", XSD_BOOLEAN, False),
        ],
    )
    def test_to_python(self, lexical: str, datatype: str, expected: object) -> None:
        value = Literal(lexical, datatype).to_python()
        assert value == expected
        assert type(value) is type(expected)


class TestValueSemantics:
    def test_equal_terms_hash_equal(self) -> None:
        a = Triple(IRI("urn:a"), IRI("urn:p"), Literal("1", XSD_INTEGER))
        b = Triple(IRI("urn:a"), IRI("urn:p"), Literal("1", XSD_INTEGER))
        assert a == b
        assert len({a, b}) == 1

    def test_datatype_distinguishes_literals(self) -> None:
        assert Literal("1") != Literal("1", XSD_INTEGER)

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            IRI("urn:a").value = "urn:b"  # type: ignore[misc]


class TestHelpers:
    def test_numeric_value(self) -> None:
        assert numeric_value("7") == 7
        assert numeric_value("1e3") == 1000.0
        with pytest.raises(ValueError, match="not a number"):
            numeric_value("seven")

    def test_term_to_json(self) -> None:
        assert term_to_json(None) is None
        assert term_to_json(IRI("urn:a")) == "urn:a"
        assert term_to_json(Literal("42", XSD_INTEGER)) == "42"
        assert term_to_json(BNode("b1")) == "_:b1"
