"""
Viewport tools: push viewport changes, read fetch state, building statistics.

These tools drive the feature fetch orchestrator. Network I/O happens only
when a settled viewport misses the cache.
"""

import logging

from ...constants import (
    DEFAULT_HEIGHT_RANGE,
    PROPERTY_LABELS,
    ZOOM_THRESHOLD,
    ErrorMessages,
    SuccessMessages,
)
from ...core.geometry import polygon_area_m2, total_footprint_m2
from ...core.orchestrator import FeatureFetchOrchestrator, FeatureState
from ...core.quantize import validate_bbox
from ...core.stats import compute_building_stats, count_in_height_range
from ...models.responses import (
    BuildingStatsResponse,
    CacheClearResponse,
    ErrorResponse,
    FeatureDetailResponse,
    FeaturePropertyInfo,
    HistogramBinInfo,
    ViewportStateResponse,
    format_property_value,
    format_response,
)

logger = logging.getLogger(__name__)


def _state_response(
    orchestrator: FeatureFetchOrchestrator,
    state: FeatureState,
    zoom: float | None = None,
) -> ViewportStateResponse:
    bbox = list(state.bbox) if state.bbox else None
    if not state.enabled and zoom is not None and zoom < ZOOM_THRESHOLD:
        message = SuccessMessages.VIEWPORT_DISABLED.format(zoom, ZOOM_THRESHOLD)
    elif state.loading:
        message = SuccessMessages.VIEWPORT_LOADING.format(state.key)
    elif state.key is None:
        message = SuccessMessages.VIEWPORT_IDLE
    else:
        message = SuccessMessages.VIEWPORT_LOADED.format(state.feature_count, state.key)

    return ViewportStateResponse(
        layer=state.layer or orchestrator.config.layer,
        bbox=bbox,
        cache_key=state.key,
        enabled=state.enabled,
        loading=state.loading,
        feature_count=state.feature_count,
        error=str(state.error) if state.error else None,
        request_count=orchestrator.request_count,
        message=message,
    )


def register_viewport_tools(mcp, orchestrator: FeatureFetchOrchestrator):
    """Register viewport tools with the MCP server."""

    @mcp.tool()
    async def wfs_set_viewport(
        bbox: list[float] | None = None,
        layer: str | None = None,
        zoom: float | None = None,
        enabled: bool = True,
        wait: bool = True,
        output_mode: str = "json",
    ) -> str:
        """Move the map viewport. Nearby viewports share cached results; rapid
        successive calls are debounced into one request.

        Args:
            bbox: Viewport [west, south, east, north] in EPSG:4326 (None clears it)
            layer: WFS typeName (default: server default layer)
            zoom: Map zoom; below 13 fetching is suspended
            enabled: Set False to suspend fetching and keep current data
            wait: Wait for the viewport to settle and its request to finish
            output_mode: "json" or "text"

        Returns:
            Current fetch state: feature count, loading flag, error
        """
        try:
            viewport = validate_bbox(bbox) if bbox is not None else None
            fetch_enabled = enabled and (zoom is None or zoom >= ZOOM_THRESHOLD)

            orchestrator.use_feature_data(
                layer or orchestrator.config.layer, viewport, fetch_enabled
            )
            if wait:
                state = await orchestrator.wait_until_idle()
            else:
                state = orchestrator.state

            return format_response(_state_response(orchestrator, state, zoom), output_mode)

        except Exception as e:
            logger.error(f"wfs_set_viewport failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def wfs_get_state(output_mode: str = "json") -> str:
        """Get the current viewport fetch state without changing anything.

        Args:
            output_mode: "json" or "text"

        Returns:
            Current fetch state: feature count, loading flag, error
        """
        try:
            return format_response(
                _state_response(orchestrator, orchestrator.state), output_mode
            )

        except Exception as e:
            logger.error(f"wfs_get_state failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def wfs_refresh(wait: bool = True, output_mode: str = "json") -> str:
        """Refetch the current viewport even if its cached result is still fresh.

        Args:
            wait: Wait for the request to finish
            output_mode: "json" or "text"

        Returns:
            Current fetch state after the refresh
        """
        try:
            orchestrator.refresh()
            if wait:
                state = await orchestrator.wait_until_idle()
            else:
                state = orchestrator.state
            return format_response(_state_response(orchestrator, state), output_mode)

        except Exception as e:
            logger.error(f"wfs_refresh failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def wfs_building_stats(
        height_min: float = DEFAULT_HEIGHT_RANGE[0],
        height_max: float = DEFAULT_HEIGHT_RANGE[1],
        output_mode: str = "json",
    ) -> str:
        """Building height statistics for the features currently loaded.

        Args:
            height_min: Lower bound of the height filter in metres
            height_max: Upper bound of the height filter in metres
            output_mode: "json" or "text"

        Returns:
            Count, min/max/avg height, histogram, and filtered count
        """
        try:
            if height_min > height_max:
                raise ValueError(ErrorMessages.INVALID_HEIGHT_RANGE.format(height_min, height_max))

            state = orchestrator.state
            if state.data is None:
                raise ValueError(ErrorMessages.NO_DATA)

            features = state.data.get("features", [])
            stats = compute_building_stats(state.data)
            height_range = (height_min, height_max)

            if stats is None:
                histogram: list[HistogramBinInfo] = []
                summary = dict(count=0, with_height=0, no_height=0, min=0.0, max=0.0, avg=0.0)
                message = SuccessMessages.STATS_EMPTY
            else:
                histogram = [
                    HistogramBinInfo(
                        label=b.label,
                        min_m=b.min,
                        max_m=None if b.max == float("inf") else b.max,
                        count=b.count,
                        percentage=round(b.percentage, 1),
                    )
                    for b in stats.histogram
                ]
                summary = dict(
                    count=stats.count,
                    with_height=stats.with_height,
                    no_height=stats.no_height,
                    min=stats.min,
                    max=stats.max,
                    avg=stats.avg,
                )
                message = SuccessMessages.STATS.format(stats.count, stats.with_height)

            response = BuildingStatsResponse(
                layer=state.layer or orchestrator.config.layer,
                bbox=list(state.bbox) if state.bbox else None,
                count=summary["count"],
                with_height=summary["with_height"],
                no_height=summary["no_height"],
                min_height_m=round(summary["min"], 1),
                max_height_m=round(summary["max"], 1),
                avg_height_m=round(summary["avg"], 1),
                histogram=histogram,
                height_range=[height_min, height_max],
                filtered_count=count_in_height_range(features, height_range),
                footprint_area_m2=round(total_footprint_m2(features), 1),
                message=message,
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"wfs_building_stats failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def wfs_describe_feature(index: int = 0, output_mode: str = "json") -> str:
        """Show the properties of one loaded building (height, source, region, ...).

        Args:
            index: Position of the feature in the current collection
            output_mode: "json" or "text"

        Returns:
            Labelled, formatted properties and footprint area
        """
        try:
            state = orchestrator.state
            if state.data is None:
                raise ValueError(ErrorMessages.NO_DATA)

            features = state.data.get("features", [])
            if not 0 <= index < len(features):
                raise ValueError(
                    ErrorMessages.FEATURE_INDEX_OUT_OF_RANGE.format(index, max(len(features) - 1, 0))
                )

            feature = features[index]
            props = feature.get("properties") or {}
            geometry = feature.get("geometry") or {}
            feature_id = feature.get("id")

            response = FeatureDetailResponse(
                index=index,
                feature_count=len(features),
                feature_id=str(feature_id) if feature_id is not None else None,
                geometry_type=geometry.get("type"),
                footprint_area_m2=round(polygon_area_m2(geometry), 1),
                properties=[
                    FeaturePropertyInfo(
                        key=key,
                        label=PROPERTY_LABELS.get(key, key),
                        value=format_property_value(key, value),
                    )
                    for key, value in props.items()
                ],
                message=SuccessMessages.FEATURE_DESCRIBE.format(index + 1, len(features)),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"wfs_describe_feature failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)

    @mcp.tool()
    async def wfs_clear_cache(output_mode: str = "json") -> str:
        """Drop every cached viewport. The next settled viewport is fetched again.

        Args:
            output_mode: "json" or "text"

        Returns:
            Number of entries removed
        """
        try:
            cleared = orchestrator.clear_cache()
            response = CacheClearResponse(
                cleared=cleared,
                message=SuccessMessages.CACHE_CLEARED.format(cleared),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"wfs_clear_cache failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)
