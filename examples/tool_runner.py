"""
Shared helper for running chuk-mcp-wfs MCP tools directly from Python.

Provides a ToolRunner class that registers all MCP tools against a fresh
feature fetch orchestrator, without requiring a full MCP transport layer.
Demo scripts use this to call tools as plain async functions.

Usage:
    from tool_runner import ToolRunner

    async def main():
        runner = ToolRunner()
        result = await runner.run("wfs_list_layers")
        print(result)
        await runner.close()
"""

from __future__ import annotations

import json
from typing import Any

from chuk_mcp_wfs.core.orchestrator import FeatureFetchOrchestrator, OrchestratorConfig
from chuk_mcp_wfs.tools.discovery import register_discovery_tools
from chuk_mcp_wfs.tools.viewport import register_viewport_tools


class _MiniMCP:
    """Minimal MCP server that captures tools registered via @mcp.tool."""

    def __init__(self) -> None:
        self._tools: dict[str, Any] = {}

    def tool(self) -> Any:
        """Decorator factory matching @mcp.tool() usage."""

        def decorator(fn: Any) -> Any:
            self._tools[fn.__name__] = fn
            return fn

        return decorator

    def get_tool(self, name: str) -> Any:
        return self._tools[name]


class ToolRunner:
    """
    Run chuk-mcp-wfs MCP tools directly from Python.

    All 9 tools are registered and callable via run(tool_name, **kwargs).
    Returns parsed JSON by default. Use run_text() for human-readable output.
    Configuration comes from the WFS_* environment variables unless a
    config is passed in.
    """

    def __init__(self, config: OrchestratorConfig | None = None) -> None:
        self._mcp = _MiniMCP()
        self.orchestrator = FeatureFetchOrchestrator(config=config or OrchestratorConfig.from_env())
        register_discovery_tools(self._mcp, self.orchestrator)
        register_viewport_tools(self._mcp, self.orchestrator)

    @property
    def tool_names(self) -> list[str]:
        return list(self._mcp._tools.keys())

    async def run(self, tool_name: str, **kwargs: Any) -> dict[str, Any]:
        """Call a tool by name and return parsed JSON."""
        fn = self._mcp.get_tool(tool_name)
        raw = await fn(**kwargs)
        return json.loads(raw)

    async def run_text(self, tool_name: str, **kwargs: Any) -> str:
        """Call a tool by name with output_mode='text' and return plaintext."""
        fn = self._mcp.get_tool(tool_name)
        return await fn(output_mode="text", **kwargs)

    async def close(self) -> None:
        await self.orchestrator.close()
