"""
Tests for rectangle and radius bounding regions.
"""

import math

import pytest
import s2sphere

from geoindex.exceptions import InvalidInputError
from geoindex.model.point import GeoPoint
from geoindex.s2.regions import (
    EARTH_RADIUS_METERS,
    bounding_rect_for_radius,
    meters_per_degree,
    rect_from_corners,
)

METERS_PER_DEGREE = EARTH_RADIUS_METERS * math.pi / 180.0


class TestRectFromCorners:
    """Tests for rectangle regions."""

    def test_rectangle_bounds(self):
        """Test the rectangle spans the corners."""
        rect = rect_from_corners(GeoPoint(51.0, -1.0), GeoPoint(52.0, 0.5))
        assert rect.lat_lo().degrees == pytest.approx(51.0)
        assert rect.lat_hi().degrees == pytest.approx(52.0)
        assert rect.lng_lo().degrees == pytest.approx(-1.0)
        assert rect.lng_hi().degrees == pytest.approx(0.5)

    def test_contains_inner_point(self):
        """Test a point inside the rectangle."""
        rect = rect_from_corners(GeoPoint(51.0, -1.0), GeoPoint(52.0, 0.5))
        assert rect.contains(s2sphere.LatLng.from_degrees(51.51, -0.13))
        assert not rect.contains(s2sphere.LatLng.from_degrees(48.8566, 2.3522))

    def test_missing_corner(self):
        """Test a missing corner yields no region."""
        assert rect_from_corners(None, GeoPoint(1, 1)) is None
        assert rect_from_corners(GeoPoint(1, 1), None) is None

    def test_inverted_latitude(self):
        """Test the south edge may not be north of the north edge."""
        with pytest.raises(InvalidInputError, match="latitude"):
            rect_from_corners(GeoPoint(52.0, 0.0), GeoPoint(51.0, 1.0))

    def test_antimeridian(self):
        """Test a west edge east of the east edge wraps."""
        rect = rect_from_corners(GeoPoint(-1.0, 179.0), GeoPoint(1.0, -179.0))
        assert rect.lng().is_inverted()
        assert rect.contains(s2sphere.LatLng.from_degrees(0.0, 179.5))
        assert rect.contains(s2sphere.LatLng.from_degrees(0.0, -179.5))
        assert not rect.contains(s2sphere.LatLng.from_degrees(0.0, 0.0))


class TestMetersPerDegree:
    """Tests for the local degree length."""

    def test_latitude_degree(self):
        """Test one degree of latitude on the sphere."""
        lat_meters, _ = meters_per_degree(GeoPoint(52.0, 0.1))
        assert lat_meters == pytest.approx(METERS_PER_DEGREE, rel=1e-9)

    def test_longitude_degree_shrinks(self):
        """Test degrees of longitude shrink away from the equator."""
        _, equator = meters_per_degree(GeoPoint(0.0, 10.0))
        _, north = meters_per_degree(GeoPoint(60.0, 10.0))
        assert equator == pytest.approx(METERS_PER_DEGREE, rel=1e-9)
        assert north < equator / 1.9


class TestBoundingRectForRadius:
    """Tests for radius regions."""

    def test_latitude_extent(self):
        """Test the latitude half extent."""
        rect = bounding_rect_for_radius(GeoPoint(52.0, 0.1), 1000)
        extent = 1000 / METERS_PER_DEGREE
        assert rect.lat_lo().degrees == pytest.approx(52.0 - extent, rel=1e-6)
        assert rect.lat_hi().degrees == pytest.approx(52.0 + extent, rel=1e-6)

    def test_contains_center(self):
        """Test the rectangle contains its center."""
        rect = bounding_rect_for_radius(GeoPoint(52.22573, 0.149593), 100000)
        assert rect.contains(s2sphere.LatLng.from_degrees(52.22573, 0.149593))
        assert rect.contains(s2sphere.LatLng.from_degrees(51.51, -0.13))

    def test_pole(self):
        """Test a circle reaching a pole covers all longitudes."""
        rect = bounding_rect_for_radius(GeoPoint(89.9, 0.0), 50000)
        assert rect.lat_hi().degrees == pytest.approx(90.0)
        assert rect.lng().is_full()

    def test_south_pole(self):
        """Test the south pole is clamped as well."""
        rect = bounding_rect_for_radius(GeoPoint(-89.95, 45.0), 20000)
        assert rect.lat_lo().degrees == pytest.approx(-90.0)
        assert rect.lng().is_full()

    def test_antimeridian(self):
        """Test a circle crossing the antimeridian wraps."""
        rect = bounding_rect_for_radius(GeoPoint(0.0, 179.99), 10000)
        assert rect.lng().is_inverted()
        assert rect.contains(s2sphere.LatLng.from_degrees(0.0, -179.99))

    @pytest.mark.parametrize("radius", [0, -5, None])
    def test_invalid_radius(self, radius):
        """Test the radius must be positive."""
        with pytest.raises(InvalidInputError, match="radius"):
            bounding_rect_for_radius(GeoPoint(52.0, 0.1), radius)

    def test_missing_center(self):
        """Test the center is required."""
        with pytest.raises(InvalidInputError, match="center"):
            bounding_rect_for_radius(None, 1000)
