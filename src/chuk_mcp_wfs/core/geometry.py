"""
Footprint area for GeoJSON polygons in EPSG:4326.

Uses the shoelace formula on a local equirectangular projection centred on
the ring's mean latitude. Good to a fraction of a percent at building scale.
"""

import math
from typing import Any, Sequence

import numpy as np

from ..constants import METERS_PER_DEGREE


def ring_area_m2(ring: Sequence[Sequence[float]]) -> float:
    """Area of a closed ring in square metres (0 for degenerate rings)."""
    if len(ring) < 4:
        return 0.0

    coords = np.asarray(ring, dtype=np.float64)[:, :2]
    mean_lat = float(np.mean(coords[:, 1]))
    m_per_deg_lon = METERS_PER_DEGREE * math.cos(math.radians(mean_lat))

    # Relative to the first vertex for numerical stability; drop the closing point
    rel = coords[:-1] - coords[0]
    x = rel[:, 0] * m_per_deg_lon
    y = rel[:, 1] * METERS_PER_DEGREE

    area = np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y)
    return abs(float(area)) / 2.0


def _polygon_area(rings: Sequence[Sequence[Sequence[float]]]) -> float:
    if not rings:
        return 0.0
    area = ring_area_m2(rings[0])
    for hole in rings[1:]:
        area -= ring_area_m2(hole)
    return area


def polygon_area_m2(geometry: dict[str, Any] | None) -> float:
    """Area of a Polygon or MultiPolygon geometry, holes subtracted. 0 for other types."""
    if not geometry:
        return 0.0
    geom_type = geometry.get("type")
    coords = geometry.get("coordinates") or []
    if geom_type == "Polygon":
        return _polygon_area(coords)
    if geom_type == "MultiPolygon":
        return sum(_polygon_area(polygon) for polygon in coords)
    return 0.0


def total_footprint_m2(features: Sequence[dict[str, Any]]) -> float:
    return sum(polygon_area_m2(f.get("geometry")) for f in features)
