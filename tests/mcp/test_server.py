"""Tests for MCP server creation."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from ontoctl.infrastructure.workspace import Workspace
from ontoctl.mcp.server import create_server, mcp_available


class DummyFastMCP:
    def __init__(self, name: str, **kwargs: object) -> None:
        self.name = name
        self.kwargs = kwargs
        self.tools: list[str] = []

    def tool(self):
        def decorator(fn):
            self.tools.append(fn.__name__)
            return fn

        return decorator


class TestServerAvailability:
    def test_mcp_available_is_bool(self) -> None:
        assert isinstance(mcp_available, bool)

    @pytest.mark.skipif(mcp_available, reason="mcp extra is installed")
    def test_create_server_without_mcp_raises(self) -> None:
        with pytest.raises(RuntimeError, match="MCP extra not installed"):
            create_server()


class TestCreateServer:
    def test_uses_given_workspace(self, workspace: Workspace) -> None:
        with (
            patch("ontoctl.mcp.server.mcp_available", True),
            patch("ontoctl.mcp.server._FastMCP", DummyFastMCP),
            patch("ontoctl.mcp.tools.register_tools") as register,
        ):
            server = create_server(workspace=workspace, host="0.0.0.0", port=9000)
        assert server.name == "ontoctl"
        assert server.kwargs == {"host": "0.0.0.0", "port": 9000}
        register.assert_called_once_with(server, workspace)

    def test_builds_workspace_from_root(self, workspace_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ONTOCTL_CONFIG", raising=False)
        with (
            patch("ontoctl.mcp.server.mcp_available", True),
            patch("ontoctl.mcp.server._FastMCP", DummyFastMCP),
        ):
            server = create_server(workspace_root=workspace_root)
        assert sorted(server.tools) == ["check_source", "export_to_source", "generate_from_source", "query_capabilities"]

    @pytest.mark.skipif(not mcp_available, reason="mcp extra not installed")
    def test_real_server(self, workspace: Workspace) -> None:
        server = create_server(workspace=workspace)
        assert server.name == "ontoctl"
