"""MCP tool definitions: generation, capability query, export, and check.

Each tool has a ``*_impl`` function testable without the mcp package.
The impl functions take raw JSON-shaped arguments, check them against the
closed input contracts, and return ``{ok, op, data}`` or
``{ok: false, error: {code, message, hint}}``.
``register_tools()`` wraps them with FastMCP decorators.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ontoctl.services.base import invalid_input
from ontoctl.services.contracts import CheckInput, ExportInput, GenerateInput, QueryInput
from ontoctl.services.result import ServiceResult


def _to_mcp_response(result: ServiceResult) -> dict[str, Any]:
    """Convert a ServiceResult to an MCP-friendly dict."""
    response: dict[str, Any] = {
        "ok": result.ok,
        "op": result.op,
    }
    if result.ok:
        response["data"] = result.data
    if result.warnings:
        response["warnings"] = result.warnings
    if result.error is not None:
        response["error"] = {
            "code": result.error.code,
            "message": result.error.message,
            "hint": result.error.hint,
        }
        if result.error.detail:
            response["error"]["detail"] = result.error.detail
    return response


def generate_from_source_impl(
    workspace: Any,
    source: dict[str, Any],
    options: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Generate a click program from a Turtle source."""
    from ontoctl.services.generate import GenerateService

    try:
        payload = GenerateInput.model_validate({"source": source, "options": options or {}})
    except ValidationError as exc:
        return _to_mcp_response(invalid_input("generate", exc))
    return _to_mcp_response(GenerateService(workspace).generate(payload.source, payload.options))


def query_capabilities_impl(
    workspace: Any,
    source: dict[str, Any],
    query: str,
    *,
    format: str = "json",  # noqa: A002
) -> dict[str, Any]:
    """Run a SPARQL SELECT query against a Turtle source."""
    from ontoctl.services.query import QueryService

    try:
        payload = QueryInput.model_validate({"source": source, "query": query, "format": format})
    except ValidationError as exc:
        return _to_mcp_response(invalid_input("query", exc))
    return _to_mcp_response(QueryService(workspace).query(payload.source, payload.query, fmt=payload.format))


def export_to_source_impl(
    workspace: Any,
    model: dict[str, Any],
    *,
    base_iri: str | None = None,
) -> dict[str, Any]:
    """Serialize a command model to Turtle."""
    from ontoctl.services.export import ExportService

    try:
        payload = ExportInput.model_validate({"model": model, "base_iri": base_iri})
    except ValidationError as exc:
        return _to_mcp_response(invalid_input("export", exc))
    return _to_mcp_response(ExportService(workspace).export(payload.model, base_iri=payload.base_iri))


def check_source_impl(workspace: Any, source: dict[str, Any]) -> dict[str, Any]:
    """Validate a Turtle source and return its command model."""
    from ontoctl.services.check import CheckService

    try:
        payload = CheckInput.model_validate({"source": source})
    except ValidationError as exc:
        return _to_mcp_response(invalid_input("check", exc))
    return _to_mcp_response(CheckService(workspace).check(payload.source))


def register_tools(server: Any, workspace: Any) -> None:
    """Register the four MCP tools on the FastMCP server."""

    @server.tool()  # type: ignore[untyped-decorator]
    def generate_from_source(source: dict[str, Any], options: dict[str, Any] | None = None) -> dict[str, Any]:
        """Generate a Python/click CLI from a Turtle command ontology.

        source: exactly one of {"text": ...}, {"path": ...}, {"url": ...}.
        options: {"features": [...], "cli_name", "version", "output_path"}.
        """
        return generate_from_source_impl(workspace, source, options)

    @server.tool()  # type: ignore[untyped-decorator]
    def query_capabilities(source: dict[str, Any], query: str, format: str = "json") -> dict[str, Any]:  # noqa: A002
        """Run a SPARQL SELECT query (bounded subset) against a command ontology.

        format: "json", "table" or "yaml"; table and yaml add a rendered string.
        """
        return query_capabilities_impl(workspace, source, query, format=format)

    @server.tool()  # type: ignore[untyped-decorator]
    def export_to_source(model: dict[str, Any], base_iri: str | None = None) -> dict[str, Any]:
        """Serialize a command model (as returned by check_source) back to Turtle."""
        return export_to_source_impl(workspace, model, base_iri=base_iri)

    @server.tool()  # type: ignore[untyped-decorator]
    def check_source(source: dict[str, Any]) -> dict[str, Any]:
        """Validate a command ontology and return its summary and full model."""
        return check_source_impl(workspace, source)
