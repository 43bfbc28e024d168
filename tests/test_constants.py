"""Comprehensive tests for chuk_mcp_wfs.constants module."""

from chuk_mcp_wfs.constants import (
    CACHE_MAX_ENTRIES,
    DEFAULT_BBOX_PRECISION,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_HEIGHT_RANGE,
    DEFAULT_LAYER,
    DEFAULT_SRS,
    DEFAULT_STALE_TIME_MS,
    DISCOVERY_TOOLS,
    HISTOGRAM_BINS,
    KEY_SEPARATOR,
    METRE_PROPERTIES,
    OUTPUT_MODES,
    PROPERTY_LABELS,
    WFS_BASE_URL,
    WFS_LAYERS,
    ZOOM_THRESHOLD,
    EnvVar,
    ErrorMessages,
    ServerConfig,
    SuccessMessages,
    VIEWPORT_TOOLS,
    WFSLayer,
)

# ── ServerConfig ────────────────────────────────────────────────────


class TestServerConfig:
    """Tests for ServerConfig class."""

    def test_name(self):
        assert ServerConfig.NAME == "chuk-mcp-wfs"

    def test_version(self):
        assert ServerConfig.VERSION == "0.1.0"

    def test_description(self):
        assert "WFS" in ServerConfig.DESCRIPTION


# ── EnvVar ──────────────────────────────────────────────────────────


class TestEnvVar:
    def test_names_match_values(self):
        for name in (
            "WFS_BASE_URL",
            "WFS_LAYER",
            "WFS_DEBOUNCE_MS",
            "WFS_STALE_TIME_MS",
            "WFS_BBOX_PRECISION",
            "WFS_CACHE_MAX_ENTRIES",
            "WFS_REQUEST_TIMEOUT_S",
            "WFS_MAX_FEATURES",
            "MCP_STDIO",
        ):
            assert getattr(EnvVar, name) == name


# ── Layers and service ──────────────────────────────────────────────


class TestLayers:
    def test_default_layer(self):
        assert DEFAULT_LAYER == WFSLayer.LOD1_GLOBAL == "global3D:lod1_global"

    def test_default_layer_known(self):
        assert DEFAULT_LAYER in WFS_LAYERS

    def test_layer_metadata_keys(self):
        required = {"id", "name", "geometry", "height_property", "crs", "llm_guidance"}
        for layer_id, layer in WFS_LAYERS.items():
            assert required <= set(layer), layer_id
            assert layer["id"] == layer_id

    def test_service_defaults(self):
        assert WFS_BASE_URL.startswith("https://")
        assert WFS_BASE_URL.endswith("/geoserver/ows")
        assert DEFAULT_SRS == "EPSG:4326"


# ── Tunables ────────────────────────────────────────────────────────


class TestTunables:
    def test_viewport_defaults(self):
        assert DEFAULT_BBOX_PRECISION == 3
        assert DEFAULT_DEBOUNCE_MS == 500
        assert ZOOM_THRESHOLD == 13

    def test_cache_defaults(self):
        assert DEFAULT_STALE_TIME_MS == 300_000
        assert CACHE_MAX_ENTRIES == 50
        assert KEY_SEPARATOR == "|"

    def test_histogram_bins_contiguous(self):
        for (_, _, hi), (_, lo, _) in zip(HISTOGRAM_BINS, HISTOGRAM_BINS[1:]):
            assert hi == lo
        assert HISTOGRAM_BINS[0][1] == 0.0
        assert HISTOGRAM_BINS[-1][2] == float("inf")

    def test_default_height_range(self):
        lo, hi = DEFAULT_HEIGHT_RANGE
        assert lo < hi


# ── Display ─────────────────────────────────────────────────────────


class TestDisplay:
    def test_metre_properties_have_labels(self):
        for key in METRE_PROPERTIES:
            assert key in PROPERTY_LABELS

    def test_output_modes(self):
        assert OUTPUT_MODES == ["json", "text"]


# ── Messages ────────────────────────────────────────────────────────


class TestMessages:
    def test_http_error_format(self):
        assert ErrorMessages.HTTP_ERROR.format(503, "Service Unavailable") == (
            "WFS request failed: 503 Service Unavailable"
        )

    def test_index_out_of_range_format(self):
        assert "5" in ErrorMessages.FEATURE_INDEX_OUT_OF_RANGE.format(5, 3)

    def test_viewport_disabled_format(self):
        assert SuccessMessages.VIEWPORT_DISABLED.format(11.0, 13.0) == (
            "Fetching disabled (zoom 11.0 < 13)"
        )

    def test_cache_cleared_format(self):
        assert SuccessMessages.CACHE_CLEARED.format(2) == "Cleared 2 cached viewport(s)"


# ── Tool names ──────────────────────────────────────────────────────


class TestToolNames:
    def test_no_overlap(self):
        assert not set(DISCOVERY_TOOLS) & set(VIEWPORT_TOOLS)

    def test_prefixed(self):
        for name in DISCOVERY_TOOLS + VIEWPORT_TOOLS:
            assert name.startswith("wfs_")
