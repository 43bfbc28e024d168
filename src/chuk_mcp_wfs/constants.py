"""
Constants for chuk-mcp-wfs server.

All magic strings, layer metadata, and configuration values live here.
"""


class ServerConfig:
    NAME = "chuk-mcp-wfs"
    VERSION = "0.1.0"
    DESCRIPTION = "Viewport-cached WFS Building Footprint MCP Server"


class EnvVar:
    WFS_BASE_URL = "WFS_BASE_URL"
    WFS_LAYER = "WFS_LAYER"
    WFS_DEBOUNCE_MS = "WFS_DEBOUNCE_MS"
    WFS_STALE_TIME_MS = "WFS_STALE_TIME_MS"
    WFS_BBOX_PRECISION = "WFS_BBOX_PRECISION"
    WFS_CACHE_MAX_ENTRIES = "WFS_CACHE_MAX_ENTRIES"
    WFS_REQUEST_TIMEOUT_S = "WFS_REQUEST_TIMEOUT_S"
    WFS_MAX_FEATURES = "WFS_MAX_FEATURES"
    MCP_STDIO = "MCP_STDIO"


# Remote feature service
WFS_BASE_URL = "https://tubvsig-so2sat-vm1.srv.mwn.de/geoserver/ows"
WFS_SERVICE = "WFS"
WFS_VERSION = "2.0.0"
WFS_REQUEST = "GetFeature"
WFS_OUTPUT_FORMAT = "application/json"
DEFAULT_SRS = "EPSG:4326"


class WFSLayer:
    LOD1_GLOBAL = "global3D:lod1_global"


DEFAULT_LAYER = WFSLayer.LOD1_GLOBAL

WFS_LAYERS: dict[str, dict] = {
    WFSLayer.LOD1_GLOBAL: {
        "id": WFSLayer.LOD1_GLOBAL,
        "name": "Global LoD1 building footprints",
        "geometry": "Polygon/MultiPolygon",
        "height_property": "height",
        "optional_properties": ["ogc_fid", "id", "source", "region", "var"],
        "crs": DEFAULT_SRS,
        "llm_guidance": (
            "Extruded building footprints with a height attribute in metres. "
            "Only request at city scale (zoom >= 13); a viewport of a few "
            "square kilometres returns thousands of features."
        ),
    },
}

# Viewport quantization & debounce
DEFAULT_BBOX_PRECISION = 3  # ~100m at the equator
DEFAULT_DEBOUNCE_MS = 500
ZOOM_THRESHOLD = 13.0

# Cache
DEFAULT_STALE_TIME_MS = 5 * 60 * 1000
CACHE_MAX_ENTRIES = 50  # 0 disables the LRU bound
KEY_SEPARATOR = "|"

# Transport
DEFAULT_REQUEST_TIMEOUT_S = 60.0

# Building height histogram (label, min, max), max is exclusive
HISTOGRAM_BINS: list[tuple[str, float, float]] = [
    ("0-10m", 0.0, 10.0),
    ("10-20m", 10.0, 20.0),
    ("20-30m", 20.0, 30.0),
    ("30-50m", 30.0, 50.0),
    ("50-100m", 50.0, 100.0),
    ("100m+", 100.0, float("inf")),
]
DEFAULT_HEIGHT_RANGE = (0.0, 100.0)

# Area approximation
METERS_PER_DEGREE = 111320.0

# Feature property display
PROPERTY_LABELS: dict[str, str] = {
    "ogc_fid": "Feature ID",
    "id": "Building ID",
    "height": "Height",
    "source": "Data Source",
    "region": "Region",
    "var": "Height Variance",
    "variance": "Height Variance",
}
METRE_PROPERTIES = ("height", "var", "variance")

OUTPUT_MODES = ["json", "text"]

DISCOVERY_TOOLS = ("wfs_list_layers", "wfs_status", "wfs_capabilities")
VIEWPORT_TOOLS = (
    "wfs_set_viewport",
    "wfs_get_state",
    "wfs_refresh",
    "wfs_building_stats",
    "wfs_describe_feature",
    "wfs_clear_cache",
)


class ErrorMessages:
    INVALID_BBOX = "Invalid bounding box: must be [west, south, east, north]"
    INVALID_BBOX_VALUES = "Invalid bounding box values: west ({}) must be < east ({})"
    INVALID_BBOX_LAT = "Invalid bounding box values: south ({}) must be < north ({})"
    NON_FINITE_COORDINATE = "Bounding box coordinate must be finite, got {}"
    INVALID_PRECISION = "precision must be >= 0, got {}"
    HTTP_ERROR = "WFS request failed: {} {}"
    TRANSPORT_ERROR = "WFS request failed: {}"
    PARSE_ERROR = "WFS response could not be parsed: {}"
    NOT_A_FEATURE_COLLECTION = "WFS response is not a FeatureCollection (type={})"
    INVALID_HEIGHT_RANGE = "height_min ({}) must be <= height_max ({})"
    NO_DATA = "No feature data loaded. Call wfs_set_viewport first."
    FEATURE_INDEX_OUT_OF_RANGE = "Feature index {} out of range (0-{})"
    ORCHESTRATOR_CLOSED = "Feature orchestrator has been closed"


class SuccessMessages:
    VIEWPORT_LOADED = "{} features for {}"
    VIEWPORT_LOADING = "Loading features for {}"
    VIEWPORT_DISABLED = "Fetching disabled (zoom {:.1f} < {:.0f})"
    VIEWPORT_IDLE = "No viewport set"
    STATS = "{} buildings, {} with height"
    STATS_EMPTY = "No buildings in the current viewport"
    FEATURE_DESCRIBE = "Feature {} of {}"
    CACHE_CLEARED = "Cleared {} cached viewport(s)"
    LAYERS_LIST = "{} WFS layers available"
