"""serve: start the MCP server (requires the ontoctl[mcp] extra)."""

from __future__ import annotations

import click

from ontoctl.commands._base import OntoCommand


@click.command(
    cls=OntoCommand,
    examples="""\
  # Start the MCP server (transport from [mcp] config, stdio by default)
  ontoctl serve

  # Streamable HTTP on custom host/port
  ontoctl serve --transport streamable-http --host 0.0.0.0 --port 9000""",
)
@click.option(
    "--transport",
    default=None,
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    help="MCP transport protocol. Defaults to [mcp] transport.",
)
@click.option("--host", default="127.0.0.1", help="Bind address (HTTP transports only).")
@click.option("--port", default=8000, type=int, help="Listen port (HTTP transports only).")
@click.pass_obj
def serve(app: object, transport: str | None, host: str, port: int) -> None:
    """Start the MCP server exposing the generation and query tools."""
    from ontoctl.mcp.server import create_server, mcp_available

    if not mcp_available:
        click.echo("MCP not installed. Install with: pip install ontoctl[mcp]", err=True)
        raise SystemExit(1)

    from ontoctl.commands._context import AppContext

    assert isinstance(app, AppContext)
    if not app.settings.mcp.enabled:
        click.echo("MCP server is disabled ([mcp] enabled = false).", err=True)
        raise SystemExit(1)
    server = create_server(workspace=app.workspace, host=host, port=port)
    server.run(transport=transport or app.settings.mcp.transport)
