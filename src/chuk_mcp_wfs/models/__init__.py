"""Response models for chuk-mcp-wfs."""

from .responses import (
    BuildingStatsResponse,
    CacheClearResponse,
    CapabilitiesResponse,
    ErrorResponse,
    FeatureDetailResponse,
    FeaturePropertyInfo,
    HistogramBinInfo,
    LayerInfo,
    LayersResponse,
    StatusResponse,
    ViewportStateResponse,
    format_property_value,
    format_response,
)

__all__ = [
    "ErrorResponse",
    "ViewportStateResponse",
    "HistogramBinInfo",
    "BuildingStatsResponse",
    "FeaturePropertyInfo",
    "FeatureDetailResponse",
    "CacheClearResponse",
    "LayerInfo",
    "LayersResponse",
    "StatusResponse",
    "CapabilitiesResponse",
    "format_property_value",
    "format_response",
]
