"""QueryService: run a SELECT query against a validated ontology.

Rows are returned as plain strings (IRIs as text, literals by lexical
form). ``table`` and ``yaml`` formats additionally carry a rendered text
version of the rows.
"""

from __future__ import annotations

import io
import time
from typing import Any

from rich.console import Console
from rich.table import Table
from ruamel.yaml import YAML

from ontoctl.domain.errors import PipelineError
from ontoctl.domain.terms import term_to_json
from ontoctl.services._helpers import elapsed_ms
from ontoctl.services.base import BaseService, failure
from ontoctl.services.contracts import QueryFormat, QueryResultData, SourceSpec, dump_validated
from ontoctl.services.result import ServiceResult
from ontoctl.services.telemetry import record, stage, traced


def render_table(variables: list[str], rows: list[dict[str, str | None]]) -> str:
    """Plain-text table (no color codes) of query rows."""
    table = Table(show_header=True, header_style="bold")
    for var in variables:
        table.add_column(f"?{var}")
    for row in rows:
        table.add_row(*(row.get(var) or "" for var in variables))
    buffer = io.StringIO()
    Console(file=buffer, width=160, color_system=None, force_terminal=False).print(table)
    return buffer.getvalue()


def render_yaml(variables: list[str], rows: list[dict[str, str | None]]) -> str:
    yaml = YAML()
    yaml.default_flow_style = False
    buffer = io.StringIO()
    yaml.dump({"variables": list(variables), "rows": [dict(row) for row in rows]}, buffer)
    return buffer.getvalue()


class QueryService(BaseService):
    """Answer capability queries."""

    @traced("query")
    def query(self, source: SourceSpec, query: str, *, fmt: QueryFormat = "json") -> ServiceResult:
        try:
            with stage("load"):
                loaded = self._workspace.load_validated(text=source.text, path=source.path, url=source.url)
                record(triples=len(loaded.ontology), cached=loaded.cached)
            with stage("execute"):
                started = time.perf_counter()
                results = loaded.ontology.backend.query_sparql(query)
                execution_ms = elapsed_ms(started)
                record(rows=len(results))
        except PipelineError as exc:
            return failure("query", exc)

        variables = list(results.variables)
        rows = [{var: term_to_json(row.get(var)) for var in variables} for row in results.rows]
        payload: dict[str, Any] = {
            "variables": variables,
            "rows": rows,
            "row_count": len(rows),
            "execution_ms": execution_ms,
        }
        if fmt == "table":
            payload["rendered"] = render_table(variables, rows)
        elif fmt == "yaml":
            payload["rendered"] = render_yaml(variables, rows)
        return ServiceResult(
            ok=True,
            op="query",
            data=dump_validated(QueryResultData, payload),
            meta={"backend": getattr(loaded.ontology.backend, "name", "unknown"), "cached": loaded.cached},
        )
