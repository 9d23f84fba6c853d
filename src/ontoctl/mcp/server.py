"""FastMCP server setup.

Optional extra, guarded behind try/except ImportError.
Transport: stdio by default, SSE or streamable HTTP optional.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from ontoctl.infrastructure.workspace import Workspace

mcp_available = False
_FastMCP: Any = None

try:
    from mcp.server.fastmcp import FastMCP as _FastMCP  # type: ignore[no-redef,import-not-found]

    mcp_available = True
except ImportError:
    pass

__all__ = ["create_server", "mcp_available"]


def create_server(
    *,
    workspace: Workspace | None = None,
    workspace_root: Path | None = None,
    host: str = "127.0.0.1",
    port: int = 8000,
) -> Any:
    """Create and configure the MCP server.

    Uses *workspace* when given, otherwise builds one from settings
    discovered at *workspace_root* (or CWD). One workspace, and so one
    ontology cache, is shared by every tool call.

    Raises RuntimeError if the mcp extra is not installed.
    """
    if not mcp_available or _FastMCP is None:
        msg = "MCP extra not installed. Install with: pip install ontoctl[mcp]"
        raise RuntimeError(msg)

    from ontoctl.mcp.tools import register_tools

    if workspace is None:
        from ontoctl.config.settings import OntoSettings
        from ontoctl.infrastructure.workspace import Workspace

        workspace = Workspace(OntoSettings.from_cli(workspace_root=workspace_root))

    server = _FastMCP("ontoctl", host=host, port=port)
    register_tools(server, workspace)
    return server
