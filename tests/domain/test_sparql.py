"""Tests for the bounded SPARQL engine."""

from __future__ import annotations

import pytest

from ontoctl.domain.errors import SparqlError
from ontoctl.domain.sparql import TriplePattern, Var, execute, parse_query, qualify_bare_names
from ontoctl.domain.store import QueryResults
from ontoctl.domain.terms import IRI, term_to_json
from ontoctl.domain.turtle import parse_turtle
from ontoctl.domain.vocabulary import RDF_TYPE, cnv
from tests.conftest import CATALOG_TTL, PREFIXES, validated


@pytest.fixture(scope="module")
def catalog():
    return validated(CATALOG_TTL)


def _run(ontology, text: str) -> QueryResults:
    return ontology.backend.query_sparql(text)


def _column(results: QueryResults, name: str) -> list[str | None]:
    return [term_to_json(row.get(name)) for row in results.rows]


# ── Basic graph patterns ─────────────────────────────────────────────


class TestSelect:
    def test_verb_names_with_bare_vocabulary_names(self, catalog) -> None:
        results = _run(catalog, "SELECT ?name WHERE { ?v a Verb ; name ?name }")
        assert results.variables == ("name",)
        assert len(results) == 3
        assert _column(results, "name") == ["status", "restart", "create"]

    def test_prefixed_names(self, catalog) -> None:
        results = _run(catalog, "SELECT ?name WHERE { ?n a cnv:Noun . ?n cnv:name ?name . }")
        assert _column(results, "name") == ["services", "users"]

    def test_empty_prefix_maps_to_vocabulary(self, catalog) -> None:
        results = _run(catalog, "SELECT ?name WHERE { ?n a :Noun ; :name ?name }")
        assert _column(results, "name") == ["services", "users"]

    def test_document_prefixes_available(self, catalog) -> None:
        results = _run(catalog, "SELECT ?name WHERE { ex:services cnv:name ?name }")
        assert _column(results, "name") == ["services"]

    def test_query_prefix_declaration(self, catalog) -> None:
        query = "PREFIX c: <https://cnv.dev/ontology#>\nSELECT ?v WHERE { ?v a c:Type }"
        assert _column(_run(catalog, query), "v") == ["https://example.org/cli#Port"]

    def test_full_iri_terms(self, catalog) -> None:
        query = "SELECT ?v WHERE { ?v <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <https://cnv.dev/ontology#Type> }"
        assert len(_run(catalog, query)) == 1

    def test_select_star_projects_pattern_variables(self, catalog) -> None:
        results = _run(catalog, "SELECT * WHERE { ?v a Verb ; name ?name }")
        assert results.variables == ("v", "name")
        assert set(results.rows[0]) == {"v", "name"}

    def test_object_list(self, catalog) -> None:
        results = _run(catalog, 'SELECT ?v WHERE { ?v allowedValue "soft", "hard" }')
        assert len(results) == 1

    def test_literal_object(self, catalog) -> None:
        results = _run(catalog, "SELECT ?v WHERE { ?v async true }")
        assert _column(results, "v") == ["https://example.org/cli#restart"]

    def test_no_match_keeps_variables(self, catalog) -> None:
        results = _run(catalog, "SELECT ?c WHERE { ?c a Command }")
        assert results.variables == ("c",)
        assert results.rows == []

    def test_disjoint_patterns_form_cross_product(self, catalog) -> None:
        results = _run(catalog, "SELECT * WHERE { ?n a Noun . ?t a Type }")
        assert len(results) == 2

    def test_distinct(self, catalog) -> None:
        plain = _run(catalog, "SELECT ?noun WHERE { ?v hasNoun ?noun }")
        distinct = _run(catalog, "SELECT DISTINCT ?noun WHERE { ?v hasNoun ?noun }")
        assert len(plain) == 2
        assert len(distinct) == 1

    def test_repeated_variable_in_pattern(self, catalog) -> None:
        assert len(_run(catalog, "SELECT ?x WHERE { ?x name ?x }")) == 0


# ── FILTER ───────────────────────────────────────────────────────────


class TestFilter:
    def test_regex(self, catalog) -> None:
        results = _run(catalog, 'SELECT ?name WHERE { ?v a Verb ; name ?name FILTER regex(?name, "^st") }')
        assert _column(results, "name") == ["status"]

    def test_regex_flags(self, catalog) -> None:
        results = _run(catalog, 'SELECT ?name WHERE { ?v a Verb ; name ?name FILTER regex(?name, "^ST", "i") }')
        assert _column(results, "name") == ["status"]

    def test_numeric_comparison(self, catalog) -> None:
        results = _run(catalog, "SELECT ?a WHERE { ?a default ?d FILTER (?d > 1000) }")
        assert _column(results, "a") == ["https://example.org/cli#restart-port"]

    def test_logical_or(self, catalog) -> None:
        query = 'SELECT ?name WHERE { ?v a Verb ; name ?name FILTER (?name = "status" || ?name = "create") }'
        assert _column(_run(catalog, query), "name") == ["status", "create"]

    def test_negation(self, catalog) -> None:
        query = 'SELECT ?name WHERE { ?v a Verb ; name ?name FILTER (!(?name = "status")) }'
        assert _column(_run(catalog, query), "name") == ["restart", "create"]

    def test_str_of_iri(self, catalog) -> None:
        query = 'SELECT ?v WHERE { ?v a Verb FILTER regex(str(?v), "create$") }'
        assert _column(_run(catalog, query), "v") == ["https://example.org/cli#create"]

    def test_type_error_filters_row_out(self, catalog) -> None:
        # Ordering an IRI against a number is an evaluation error, not a query error.
        assert len(_run(catalog, "SELECT ?v WHERE { ?v a Verb FILTER (?v > 3) }")) == 0

    def test_ill_typed_literal_filters_row_out(self) -> None:
        graph = parse_turtle(
            PREFIXES + 'ex:a ex:weight "abc"^^xsd:integer .\nex:b ex:weight "7"^^xsd:integer .\n'
        ).graph
        results = execute("SELECT ?s WHERE { ?s <https://example.org/cli#weight> ?w FILTER (?w > 1) }", graph)
        assert _column(results, "s") == ["https://example.org/cli#b"]

    def test_ill_typed_literal_has_no_truth_value(self) -> None:
        graph = parse_turtle(PREFIXES + 'ex:a ex:weight "abc"^^xsd:integer .\n').graph
        results = execute("SELECT ?s WHERE { ?s <https://example.org/cli#weight> ?w FILTER (?w) }", graph)
        assert len(results) == 0


# ── Parsing ──────────────────────────────────────────────────────────


class TestQualifyBareNames:
    def test_rewrites_pattern_names(self) -> None:
        text = qualify_bare_names("SELECT ?n WHERE { ?v a Verb ; name ?n }")
        assert text == (
            "SELECT ?n WHERE { ?v a <https://cnv.dev/ontology#Verb> ; <https://cnv.dev/ontology#name> ?n }"
        )

    def test_leaves_keywords_functions_and_strings(self) -> None:
        text = 'SELECT ?v WHERE { ?v ?p true OPTIONAL { ?v ?q "Verb" } FILTER regex(str(?v), "x") } ORDER BY ?v'
        assert qualify_bare_names(text) == text

    def test_prefixed_names_untouched(self) -> None:
        text = "SELECT ?v WHERE { ?v a cnv:Verb ; rdfs:label ?l }"
        assert qualify_bare_names(text) == text


class TestParseQuery:
    def test_patterns_kept_in_written_order(self) -> None:
        query = parse_query("SELECT ?name WHERE { ?v name ?name . ?v a Verb }")
        assert query.patterns == (
            TriplePattern(Var("v"), cnv("name"), Var("name")),
            TriplePattern(Var("v"), RDF_TYPE, cnv("Verb")),
        )
        assert query.variables == ("name",)
        assert query.distinct is False

    def test_where_keyword_optional(self) -> None:
        assert len(parse_query("SELECT ?s { ?s ?p ?o }").patterns) == 1

    def test_select_star(self) -> None:
        assert parse_query("SELECT * WHERE { ?s ?p ?o }").variables is None

    def test_namespaces_argument(self) -> None:
        query = parse_query("SELECT ?s WHERE { ?s ex:p ?o }", {"ex": "https://example.org/"})
        assert query.patterns[0].predicate == IRI("https://example.org/p")

    @pytest.mark.parametrize(
        "text",
        [
            "SELECT ?v WHERE { ?v a Verb } LIMIT 1",
            "SELECT ?v WHERE { ?v a Verb } ORDER BY ?v",
            "SELECT ?v WHERE { OPTIONAL { ?v a Verb } }",
            "SELECT ?v WHERE { { ?v a Verb } UNION { ?v a Noun } }",
            "SELECT ?v WHERE { ?v a Verb . BIND(1 AS ?x) }",
            "ASK { ?v a Verb }",
            "CONSTRUCT { ?v a Verb } WHERE { ?v a Verb }",
            "SELECT ?v FROM <https://example.org/g> WHERE { ?v a Verb }",
        ],
    )
    def test_unsupported_features_rejected(self, text: str) -> None:
        with pytest.raises(SparqlError):
            parse_query(text)

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "garbage",
            "SELECT WHERE { ?s ?p ?o }",
            "SELECT ?s WHERE { ?s ?p ?o",
            "SELECT ?s WHERE { ?s ?p }",
            "SELECT ?s WHERE { ?s ?p ?o } trailing",
            "SELECT ?s WHERE { ?s foo:p ?o }",
            'SELECT ?s WHERE { ?s ?p ?o FILTER regex(?o, "(") }',
            "SELECT ?s WHERE { ?s ?p ?o FILTER nosuch(?o) }",
        ],
    )
    def test_malformed_queries_rejected(self, text: str) -> None:
        with pytest.raises(SparqlError):
            parse_query(text)

    def test_error_code_and_hint(self) -> None:
        with pytest.raises(SparqlError) as exc_info:
            parse_query("SELECT ?v WHERE { ?v a Verb } LIMIT 1")
        assert exc_info.value.code == "SPARQL_ERROR"
        assert "SELECT" in (exc_info.value.hint or "")


class TestExecute:
    def test_execute_against_store(self, catalog) -> None:
        results = execute("SELECT ?t WHERE { ?t a Type }", catalog.graph)
        assert _column(results, "t") == ["https://example.org/cli#Port"]
