"""
Viewport quantization.

Snaps a continuous bounding box to a decimal grid so that near-identical
viewports share a cache key. Key equality is the only notion of identity
the cache and request tracker use; geometric overlap is irrelevant.
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ..constants import DEFAULT_BBOX_PRECISION, KEY_SEPARATOR, ErrorMessages

BoundingBox = tuple[float, float, float, float]


def round_half_away(value: float, precision: int = DEFAULT_BBOX_PRECISION) -> str:
    """Round a coordinate to ``precision`` decimals, ties away from zero.

    The shortest decimal representation of the float is rounded, so
    ``0.0005`` becomes ``"0.001"`` rather than falling foul of its binary
    approximation.

    Raises:
        ValueError: if the value is NaN or infinite
    """
    if not math.isfinite(value):
        raise ValueError(ErrorMessages.NON_FINITE_COORDINATE.format(value))
    if precision < 0:
        raise ValueError(ErrorMessages.INVALID_PRECISION.format(precision))

    step = Decimal(1).scaleb(-precision)
    quantized = Decimal(repr(float(value))).quantize(step, rounding=ROUND_HALF_UP)
    if quantized.is_zero():
        quantized = abs(quantized)
    return f"{quantized:f}"


def quantize_bbox(bbox: Sequence[float], precision: int = DEFAULT_BBOX_PRECISION) -> str:
    """Quantize a [west, south, east, north] box into a comma-joined string."""
    return ",".join(round_half_away(v, precision) for v in bbox)


def make_cache_key(
    layer: str,
    bbox: Sequence[float],
    precision: int = DEFAULT_BBOX_PRECISION,
) -> str:
    """Build the cache/request identity for a layer and viewport."""
    return f"{layer}{KEY_SEPARATOR}{quantize_bbox(bbox, precision)}"


def validate_bbox(bbox: Sequence[float]) -> BoundingBox:
    """Validate a user-supplied bounding box and return it as a tuple.

    The core trusts map viewports; this is for tool inputs only.
    """
    if len(bbox) != 4:
        raise ValueError(ErrorMessages.INVALID_BBOX)
    west, south, east, north = (float(v) for v in bbox)
    for v in (west, south, east, north):
        if not math.isfinite(v):
            raise ValueError(ErrorMessages.NON_FINITE_COORDINATE.format(v))
    if west >= east:
        raise ValueError(ErrorMessages.INVALID_BBOX_VALUES.format(west, east))
    if south >= north:
        raise ValueError(ErrorMessages.INVALID_BBOX_LAT.format(south, north))
    return (west, south, east, north)
