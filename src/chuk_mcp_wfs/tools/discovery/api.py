"""
Discovery tools: layer listing, status, capabilities.

These tools require no network I/O and return information about
known WFS layers, server configuration and cache health.
"""

import logging

from ...constants import (
    DISCOVERY_TOOLS,
    OUTPUT_MODES,
    VIEWPORT_TOOLS,
    WFS_LAYERS,
    ZOOM_THRESHOLD,
    ServerConfig,
    SuccessMessages,
)
from ...models.responses import (
    CapabilitiesResponse,
    ErrorResponse,
    LayerInfo,
    LayersResponse,
    StatusResponse,
    format_response,
)

logger = logging.getLogger(__name__)


def _layer_infos() -> list[LayerInfo]:
    return [
        LayerInfo(
            id=layer["id"],
            name=layer["name"],
            geometry=layer["geometry"],
            height_property=layer["height_property"],
            crs=layer["crs"],
            optional_properties=layer.get("optional_properties", []),
            llm_guidance=layer.get("llm_guidance"),
        )
        for layer in WFS_LAYERS.values()
    ]


def register_discovery_tools(mcp, orchestrator):
    """Register discovery tools with the MCP server."""

    @mcp.tool()
    async def wfs_list_layers(output_mode: str = "json") -> str:
        """List known WFS building layers with geometry type, height attribute and CRS.

        Args:
            output_mode: "json" for structured data, "text" for human-readable summary

        Returns:
            Known WFS layers and the server default
        """
        try:
            layers = _layer_infos()
            response = LayersResponse(
                layers=layers,
                default=orchestrator.config.layer,
                message=SuccessMessages.LAYERS_LIST.format(len(layers)),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"wfs_list_layers failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def wfs_status(output_mode: str = "json") -> str:
        """Get server status: endpoint, debounce and cache settings, cache and request counters.

        Args:
            output_mode: "json" for structured data, "text" for human-readable summary

        Returns:
            Server status information
        """
        try:
            config = orchestrator.config
            stats = orchestrator.stats()
            cache = stats["cache"]

            response = StatusResponse(
                server=ServerConfig.NAME,
                version=ServerConfig.VERSION,
                base_url=config.base_url,
                default_layer=config.layer,
                debounce_ms=config.debounce_ms,
                stale_time_ms=config.stale_time_ms,
                precision=config.precision,
                cached_viewports=cache["entries"],
                fresh_viewports=cache["fresh_entries"],
                in_flight=stats["in_flight"],
                request_count=stats["request_count"],
                cache_hits=cache["hits"],
                cache_misses=cache["misses"],
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"wfs_status failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def wfs_capabilities(output_mode: str = "json") -> str:
        """Get full server capabilities including layers, zoom threshold and output modes.

        Args:
            output_mode: "json" for structured data, "text" for human-readable summary

        Returns:
            Complete server capabilities
        """
        try:
            response = CapabilitiesResponse(
                server=ServerConfig.NAME,
                version=ServerConfig.VERSION,
                layers=_layer_infos(),
                default_layer=orchestrator.config.layer,
                zoom_threshold=ZOOM_THRESHOLD,
                output_modes=OUTPUT_MODES,
                tool_count=len(DISCOVERY_TOOLS) + len(VIEWPORT_TOOLS),
                llm_guidance=(
                    "Use wfs_set_viewport with a [west, south, east, north] bbox to load "
                    "buildings; nearby viewports reuse cached results. "
                    "Pass zoom to suspend fetching below the zoom threshold. "
                    "Use wfs_building_stats for height statistics of the loaded buildings. "
                    "Use wfs_describe_feature to inspect a single building. "
                    "Use wfs_refresh to refetch the current viewport."
                ),
                message=f"{ServerConfig.NAME} v{ServerConfig.VERSION} capabilities",
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"wfs_capabilities failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)
