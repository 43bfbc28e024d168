"""Tests for chuk_mcp_wfs.core.geometry: footprint areas."""

import math

import pytest

from chuk_mcp_wfs.core.geometry import polygon_area_m2, ring_area_m2, total_footprint_m2

from conftest import building, square

M = 111320.0


def expected_square_area(size: float, lat: float) -> float:
    return (size * M * math.cos(math.radians(lat))) * (size * M)


class TestRingArea:
    def test_square_at_equator(self):
        ring = square(0.0, 0.0, 0.001)["coordinates"][0]
        assert ring_area_m2(ring) == pytest.approx((0.001 * M) ** 2, rel=1e-6)

    def test_square_in_munich(self):
        ring = square(11.575, 48.135, 0.0001)["coordinates"][0]
        assert ring_area_m2(ring) == pytest.approx(expected_square_area(0.0001, 48.135), rel=1e-4)

    def test_orientation_independent(self):
        ring = square(11.575, 48.135, 0.0001)["coordinates"][0]
        assert ring_area_m2(list(reversed(ring))) == pytest.approx(ring_area_m2(ring))

    def test_degenerate_ring(self):
        assert ring_area_m2([[0, 0], [1, 1], [0, 0]]) == 0.0

    def test_ignores_z(self):
        ring = [[x, y, 30.0] for x, y in square(0.0, 0.0, 0.001)["coordinates"][0]]
        assert ring_area_m2(ring) == pytest.approx((0.001 * M) ** 2, rel=1e-6)


class TestPolygonArea:
    def test_polygon(self):
        geometry = square(0.0, 0.0, 0.001)
        assert polygon_area_m2(geometry) == pytest.approx((0.001 * M) ** 2, rel=1e-6)

    def test_hole_subtracted(self):
        outer = square(0.0, 0.0, 0.002)["coordinates"][0]
        hole = square(0.0005, 0.0005, 0.001)["coordinates"][0]
        geometry = {"type": "Polygon", "coordinates": [outer, hole]}
        assert polygon_area_m2(geometry) == pytest.approx(3 * (0.001 * M) ** 2, rel=1e-3)

    def test_multipolygon(self):
        geometry = {
            "type": "MultiPolygon",
            "coordinates": [
                square(0.0, 0.0, 0.001)["coordinates"],
                square(0.01, 0.0, 0.001)["coordinates"],
            ],
        }
        assert polygon_area_m2(geometry) == pytest.approx(2 * (0.001 * M) ** 2, rel=1e-6)

    def test_other_geometry_types(self):
        assert polygon_area_m2({"type": "Point", "coordinates": [11.5, 48.1]}) == 0.0

    def test_missing_geometry(self):
        assert polygon_area_m2(None) == 0.0
        assert polygon_area_m2({}) == 0.0

    def test_empty_coordinates(self):
        assert polygon_area_m2({"type": "Polygon", "coordinates": []}) == 0.0


class TestTotalFootprint:
    def test_sums_features(self):
        features = [building(10.0), building(20.0), {"type": "Feature", "geometry": None}]
        single = polygon_area_m2(features[0]["geometry"])
        assert total_footprint_m2(features) == pytest.approx(2 * single)

    def test_empty(self):
        assert total_footprint_m2([]) == 0.0
