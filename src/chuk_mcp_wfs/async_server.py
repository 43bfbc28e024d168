#!/usr/bin/env python3
"""
Async WFS MCP Server using chuk-mcp-server

Viewport-driven building footprint retrieval from an OGC Web Feature Service.
Viewport changes are debounced and quantized into cache keys, so panning back
and forth over the same area reuses earlier responses instead of refetching.
"""

import logging

from chuk_mcp_server import ChukMCPServer

from .core.orchestrator import FeatureFetchOrchestrator, OrchestratorConfig
from .tools.discovery import register_discovery_tools
from .tools.viewport import register_viewport_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-wfs")

# Create the feature fetch orchestrator
orchestrator = FeatureFetchOrchestrator(config=OrchestratorConfig.from_env())

# Register all tool modules
register_discovery_tools(mcp, orchestrator)
register_viewport_tools(mcp, orchestrator)

# Run the server
if __name__ == "__main__":
    logger.info("Starting WFS MCP Server...")
    logger.info(f"Endpoint: {orchestrator.config.base_url}")
    mcp.run(stdio=True)
