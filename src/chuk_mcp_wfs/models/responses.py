"""
Response models for chuk-mcp-wfs tools.

All tool responses are Pydantic models for type safety and consistent API.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..constants import METRE_PROPERTIES


def format_response(model: BaseModel, output_mode: str = "json") -> str:
    """Format a response model as JSON or human-readable text.

    Args:
        model: Pydantic response model instance
        output_mode: "json" (default) or "text"

    Returns:
        Formatted string
    """
    if output_mode == "text" and hasattr(model, "to_text"):
        return str(model.to_text())
    return str(model.model_dump_json())


def format_property_value(key: str, value: Any) -> str:
    """Display form of a feature property: metres to one decimal, N/A when missing."""
    if value is None:
        return "N/A"
    if key in METRE_PROPERTIES:
        try:
            return f"{float(value):.1f} m"
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def _bbox_text(bbox: list[float] | None) -> str:
    if not bbox:
        return "none"
    return "[" + ", ".join(f"{b:.4f}" for b in bbox) + "]"


class ErrorResponse(BaseModel):
    """Error response model for tool failures."""

    model_config = ConfigDict(extra="forbid")

    error: str = Field(..., description="Error message describing what went wrong")

    def to_text(self) -> str:
        return f"Error: {self.error}"


class ViewportStateResponse(BaseModel):
    """Response model for the current viewport fetch state."""

    model_config = ConfigDict(extra="forbid")

    layer: str = Field(..., description="WFS layer (typeName)")
    bbox: list[float] | None = Field(None, description="Settled viewport [west, south, east, north]")
    cache_key: str | None = Field(None, description="Quantized cache key of the active viewport")
    enabled: bool = Field(..., description="Whether fetching is enabled")
    loading: bool = Field(..., description="Whether a request for the active viewport is in flight")
    feature_count: int = Field(..., description="Number of features currently displayed", ge=0)
    error: str | None = Field(None, description="Error for the active viewport, if its last fetch failed")
    request_count: int = Field(..., description="WFS requests issued this session", ge=0)
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [
            f"Layer: {self.layer}",
            f"Viewport: {_bbox_text(self.bbox)}",
            f"Features: {self.feature_count}",
            f"Status: {'loading' if self.loading else 'idle'}"
            + ("" if self.enabled else " (disabled)"),
            f"Requests issued: {self.request_count}",
        ]
        if self.cache_key:
            lines.append(f"Cache key: {self.cache_key}")
        if self.error:
            lines.append(f"ERROR: {self.error}")
        return "\n".join(lines)


class HistogramBinInfo(BaseModel):
    """One bucket of the building height histogram."""

    model_config = ConfigDict(extra="forbid")

    label: str = Field(..., description="Bucket label (e.g., 10-20m)")
    min_m: float = Field(..., description="Inclusive lower bound in metres")
    max_m: float | None = Field(None, description="Exclusive upper bound in metres (None = open)")
    count: int = Field(..., description="Buildings in this bucket", ge=0)
    percentage: float = Field(..., description="Share of buildings with height", ge=0, le=100)


class BuildingStatsResponse(BaseModel):
    """Response model for building height statistics over the current viewport."""

    model_config = ConfigDict(extra="forbid")

    layer: str = Field(..., description="WFS layer (typeName)")
    bbox: list[float] | None = Field(None, description="Settled viewport [west, south, east, north]")
    count: int = Field(..., description="Total features", ge=0)
    with_height: int = Field(..., description="Features with a positive height", ge=0)
    no_height: int = Field(..., description="Features without a usable height", ge=0)
    min_height_m: float = Field(..., description="Minimum height in metres")
    max_height_m: float = Field(..., description="Maximum height in metres")
    avg_height_m: float = Field(..., description="Mean height in metres")
    histogram: list[HistogramBinInfo] = Field(..., description="Height distribution")
    height_range: list[float] = Field(..., description="[min, max] height filter in metres")
    filtered_count: int = Field(..., description="Features inside the height filter", ge=0)
    footprint_area_m2: float = Field(..., description="Total footprint area in square metres", ge=0)
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [
            f"Buildings: {self.count} ({self.with_height} with height, {self.no_height} without)",
            f"Height: min {self.min_height_m:.1f}m, max {self.max_height_m:.1f}m, "
            f"avg {self.avg_height_m:.1f}m",
            f"In range {self.height_range[0]:.0f}-{self.height_range[1]:.0f}m: "
            f"{self.filtered_count}",
            f"Footprint area: {self.footprint_area_m2:,.0f} m²",
            "",
        ]
        for b in self.histogram:
            lines.append(f"  {b.label:>8s}  {b.count:6d}  {b.percentage:5.1f}%")
        return "\n".join(lines)


class FeaturePropertyInfo(BaseModel):
    """A single labelled feature property."""

    model_config = ConfigDict(extra="forbid")

    key: str = Field(..., description="Property name")
    label: str = Field(..., description="Display label")
    value: str = Field(..., description="Formatted value")


class FeatureDetailResponse(BaseModel):
    """Response model for a single feature's properties."""

    model_config = ConfigDict(extra="forbid")

    index: int = Field(..., description="Index of the feature in the current collection", ge=0)
    feature_count: int = Field(..., description="Features in the current collection", ge=0)
    feature_id: str | None = Field(None, description="GeoJSON feature id, if present")
    geometry_type: str | None = Field(None, description="Geometry type")
    footprint_area_m2: float = Field(..., description="Footprint area in square metres", ge=0)
    properties: list[FeaturePropertyInfo] = Field(..., description="Labelled properties")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [
            f"Building Properties ({self.index + 1}/{self.feature_count})",
            f"Geometry: {self.geometry_type or 'unknown'}",
            f"Footprint: {self.footprint_area_m2:.1f} m²",
        ]
        for p in self.properties:
            lines.append(f"  {p.label}: {p.value}")
        return "\n".join(lines)


class CacheClearResponse(BaseModel):
    """Response model for clearing the viewport cache."""

    model_config = ConfigDict(extra="forbid")

    cleared: int = Field(..., description="Number of cache entries removed", ge=0)
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        return self.message


class LayerInfo(BaseModel):
    """Summary information about a WFS layer."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., description="Layer typeName (e.g., global3D:lod1_global)")
    name: str = Field(..., description="Human-readable layer name")
    geometry: str = Field(..., description="Geometry types served")
    height_property: str = Field(..., description="Property carrying height in metres")
    crs: str = Field(..., description="Coordinate reference system requested")
    optional_properties: list[str] = Field(
        default_factory=list, description="Properties some features carry besides height"
    )
    llm_guidance: str | None = Field(None, description="LLM-friendly usage guidance for the layer")

    def to_text(self) -> str:
        return f"{self.id}: {self.name} ({self.geometry}, {self.crs})"


class LayersResponse(BaseModel):
    """Response model for listing known WFS layers."""

    model_config = ConfigDict(extra="forbid")

    layers: list[LayerInfo] = Field(..., description="Known WFS layers")
    default: str = Field(..., description="Default layer")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [self.message, f"Default: {self.default}", ""]
        for layer in self.layers:
            lines.append(f"  {layer.to_text()}")
        return "\n".join(lines)


class StatusResponse(BaseModel):
    """Response model for server status queries."""

    model_config = ConfigDict(extra="forbid")

    server: str = Field(default="chuk-mcp-wfs", description="Server name")
    version: str = Field(default="0.1.0", description="Server version")
    base_url: str = Field(..., description="WFS endpoint")
    default_layer: str = Field(..., description="Default WFS layer")
    debounce_ms: float = Field(..., description="Viewport debounce quiet period", ge=0)
    stale_time_ms: float = Field(..., description="Cache freshness window", ge=0)
    precision: int = Field(..., description="Bounding box quantization decimals", ge=0)
    cached_viewports: int = Field(default=0, description="Cache entries", ge=0)
    fresh_viewports: int = Field(default=0, description="Cache entries still fresh", ge=0)
    in_flight: int = Field(default=0, description="Requests currently in flight", ge=0)
    request_count: int = Field(default=0, description="Requests issued this session", ge=0)
    cache_hits: int = Field(default=0, description="Fresh cache hits", ge=0)
    cache_misses: int = Field(default=0, description="Cache misses or stale entries", ge=0)

    def to_text(self) -> str:
        lines = [
            f"{self.server} v{self.version}",
            f"Endpoint: {self.base_url}",
            f"Default layer: {self.default_layer}",
            f"Debounce: {self.debounce_ms:.0f}ms, stale after {self.stale_time_ms / 1000:.0f}s, "
            f"precision {self.precision}",
            f"Cache: {self.cached_viewports} viewports ({self.fresh_viewports} fresh), "
            f"{self.cache_hits} hits / {self.cache_misses} misses",
            f"Requests: {self.request_count} issued, {self.in_flight} in flight",
        ]
        return "\n".join(lines)


class CapabilitiesResponse(BaseModel):
    """Response model for server capabilities listing."""

    model_config = ConfigDict(extra="forbid")

    server: str = Field(..., description="Server name")
    version: str = Field(..., description="Server version")
    layers: list[LayerInfo] = Field(..., description="Known WFS layers")
    default_layer: str = Field(..., description="Default layer")
    zoom_threshold: float = Field(..., description="Minimum zoom at which features are fetched")
    output_modes: list[str] = Field(..., description="Supported output modes")
    tool_count: int = Field(..., description="Number of available tools", ge=0)
    llm_guidance: str = Field(..., description="LLM-friendly usage guidance for the server")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [
            f"{self.server} v{self.version}",
            f"Tools: {self.tool_count}",
            f"Default layer: {self.default_layer}",
            f"Layers: {', '.join(layer.id for layer in self.layers)}",
            f"Zoom threshold: {self.zoom_threshold:.0f}",
            f"Output modes: {', '.join(self.output_modes)}",
            f"Guidance: {self.llm_guidance}",
        ]
        return "\n".join(lines)
