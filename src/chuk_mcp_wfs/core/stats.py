"""
Building height statistics and filtering for a feature collection.

Pure functions over GeoJSON dicts; nothing here touches the network or the
cache. Heights come from the ``height`` property in metres.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Iterable

import numpy as np

from ..constants import HISTOGRAM_BINS


@dataclass
class HistogramBin:
    """One height bucket; ``max`` is exclusive."""

    label: str
    min: float
    max: float
    count: int
    percentage: float


@dataclass
class HeightStats:
    """Summary of building heights in a feature collection."""

    count: int
    with_height: int
    no_height: int
    min: float
    max: float
    avg: float
    histogram: list[HistogramBin] = field(default_factory=list)


def feature_height(feature: dict[str, Any]) -> float:
    """Return a feature's height, or NaN if absent or not numeric."""
    props = feature.get("properties") or {}
    value = props.get("height")
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def compute_building_stats(feature_collection: dict[str, Any] | None) -> HeightStats | None:
    """
    Compute height statistics for a feature collection.

    Heights that are missing, non-numeric or <= 0 count as "no height" and
    are excluded from min/max/avg and the histogram.

    Returns:
        HeightStats, or None when there is no data or no features
    """
    if not feature_collection or not feature_collection.get("features"):
        return None

    features = feature_collection["features"]
    raw = np.array([feature_height(f) for f in features], dtype=np.float64)
    heights = raw[~np.isnan(raw)]
    heights = heights[heights > 0]
    no_height = len(features) - len(heights)

    if len(heights) == 0:
        return HeightStats(
            count=len(features),
            with_height=0,
            no_height=no_height,
            min=0.0,
            max=0.0,
            avg=0.0,
            histogram=[
                HistogramBin(label=label, min=lo, max=hi, count=0, percentage=0.0)
                for label, lo, hi in HISTOGRAM_BINS
            ],
        )

    lower_edges = np.array([lo for _, lo, _ in HISTOGRAM_BINS])
    bin_index = np.searchsorted(lower_edges, heights, side="right") - 1
    counts = np.bincount(bin_index, minlength=len(HISTOGRAM_BINS))

    histogram = [
        HistogramBin(
            label=label,
            min=lo,
            max=hi,
            count=int(counts[i]),
            percentage=float(counts[i]) / len(heights) * 100.0,
        )
        for i, (label, lo, hi) in enumerate(HISTOGRAM_BINS)
    ]

    return HeightStats(
        count=len(features),
        with_height=len(heights),
        no_height=no_height,
        min=float(np.min(heights)),
        max=float(np.max(heights)),
        avg=float(np.mean(heights)),
        histogram=histogram,
    )


def _in_range(feature: dict[str, Any], height_range: tuple[float, float]) -> bool:
    height = feature_height(feature)
    if math.isnan(height):
        height = 0.0
    return height_range[0] <= height <= height_range[1]


def filter_by_height(
    feature_collection: dict[str, Any],
    height_range: tuple[float, float],
) -> dict[str, Any]:
    """Return a new collection keeping features whose height lies in the inclusive range.

    Features without a height are treated as 0 m.
    """
    return {
        **feature_collection,
        "features": [f for f in feature_collection.get("features", []) if _in_range(f, height_range)],
    }


def count_in_height_range(
    features: Iterable[dict[str, Any]],
    height_range: tuple[float, float],
) -> int:
    """Count features in the inclusive height range without building a new list."""
    return sum(1 for f in features if _in_range(f, height_range))
