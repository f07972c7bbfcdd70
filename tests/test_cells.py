"""
Tests for S2 cell ids and partition keys.
"""

import pytest
import s2sphere

from geoindex.exceptions import InvalidInputError
from geoindex.model.point import GeoPoint
from geoindex.s2.cells import (
    INT64_MAX,
    INT64_MIN,
    cell_id,
    cell_range,
    partition_key,
    to_signed,
    to_unsigned,
)


# ==============================================================================
# GeoPoint Tests
# ==============================================================================


class TestGeoPoint:
    """Tests for GeoPoint validation."""

    def test_valid_point(self):
        """Test construction within bounds."""
        point = GeoPoint(51.51, -0.13)
        assert point.latitude == 51.51
        assert point.longitude == -0.13

    def test_bounds_are_inclusive(self):
        """Test poles and antimeridian are accepted."""
        GeoPoint(90, 180)
        GeoPoint(-90, -180)

    @pytest.mark.parametrize(
        "latitude,longitude",
        [(90.1, 0), (-91, 0), (0, 180.5), (0, -181), (float("nan"), 0), (0, float("inf"))],
    )
    def test_invalid_coordinates(self, latitude, longitude):
        """Test out-of-range and non-finite coordinates."""
        with pytest.raises(InvalidInputError):
            GeoPoint(latitude, longitude)

    def test_invalid_input_is_value_error(self):
        """Test InvalidInputError can be caught as ValueError."""
        with pytest.raises(ValueError, match="latitude"):
            GeoPoint(100, 0)

    def test_frozen(self):
        """Test points are immutable."""
        point = GeoPoint(1, 2)
        with pytest.raises(AttributeError):
            point.latitude = 3

    def test_dict_round_trip(self):
        """Test to_dict and from_dict."""
        point = GeoPoint(48.8566, 2.3522)
        assert GeoPoint.from_dict(point.to_dict()) == point


# ==============================================================================
# Cell Id Tests
# ==============================================================================


class TestCellId:
    """Tests for leaf cell id generation."""

    def test_known_cell_id(self):
        """Test a cell id produced by other S2 implementations."""
        assert cell_id(GeoPoint(52.1, 2)) == 5177531549489041509

    def test_known_london_cell_id(self):
        """Test the London fixture value."""
        assert cell_id(GeoPoint(51.51, -0.13)) == 5221366118452580119

    def test_deterministic(self):
        """Test the same point always maps to the same id."""
        assert cell_id(GeoPoint(52.1, 2)) == cell_id(GeoPoint(52.1, 2))

    def test_different_points_differ(self):
        """Test nearby points get different ids."""
        assert cell_id(GeoPoint(52.1, 2)) != cell_id(GeoPoint(51.5, -0.1))

    def test_ids_are_signed_64_bit(self):
        """Test ids on the last faces are negative."""
        new_york = cell_id(GeoPoint(40.7, -74.0))
        assert new_york < 0
        assert INT64_MIN <= new_york <= INT64_MAX

    def test_poles(self):
        """Test the poles map to distinct ids."""
        north = cell_id(GeoPoint(90, 0))
        south = cell_id(GeoPoint(-90, 0))
        assert north != south

    def test_antimeridian(self):
        """Test points either side of the antimeridian."""
        east = cell_id(GeoPoint(0, 179.9))
        west = cell_id(GeoPoint(0, -179.9))
        assert east != west

    def test_matches_s2sphere(self):
        """Test the signed id reinterprets the s2sphere id."""
        lat_lng = s2sphere.LatLng.from_degrees(40.7, -74.0)
        unsigned = s2sphere.CellId.from_lat_lng(lat_lng).id()
        assert to_unsigned(cell_id(GeoPoint(40.7, -74.0))) == unsigned


class TestSignedConversion:
    """Tests for signed/unsigned reinterpretation."""

    def test_to_signed(self):
        """Test values above INT64_MAX wrap to negative."""
        assert to_signed(2 ** 64 - 1) == -1
        assert to_signed(2 ** 63) == INT64_MIN
        assert to_signed(INT64_MAX) == INT64_MAX
        assert to_signed(5) == 5

    def test_to_unsigned(self):
        """Test negative values wrap to unsigned."""
        assert to_unsigned(-1) == 2 ** 64 - 1
        assert to_unsigned(INT64_MIN) == 2 ** 63
        assert to_unsigned(5) == 5

    def test_round_trip(self):
        """Test conversions are inverse."""
        for value in (0, 1, INT64_MAX, INT64_MIN, -12345):
            assert to_signed(to_unsigned(value)) == value


class TestCellRange:
    """Tests for leaf descendant ranges."""

    def test_leaf_range_is_itself(self):
        """Test a leaf cell spans only its own id."""
        leaf = cell_id(GeoPoint(52.1, 2))
        assert cell_range(leaf) == (leaf, leaf)

    def test_face_zero(self):
        """Test the range of the first face cell."""
        face = s2sphere.CellId.from_face_pos_level(0, 0, 0).id()
        assert cell_range(face) == (1, 2 ** 61 - 1)

    def test_negative_face(self):
        """Test ranges of cells on the last face are negative."""
        face = to_signed(s2sphere.CellId.from_face_pos_level(5, 0, 0).id())
        range_min, range_max = cell_range(face)
        assert range_min < range_max < 0
        assert range_min <= face <= range_max

    def test_range_contains_leaf(self):
        """Test a parent cell range contains its leaves."""
        lat_lng = s2sphere.LatLng.from_degrees(51.51, -0.13)
        parent = to_signed(s2sphere.CellId.from_lat_lng(lat_lng).parent(10).id())
        range_min, range_max = cell_range(parent)
        assert range_min <= cell_id(GeoPoint(51.51, -0.13)) <= range_max


# ==============================================================================
# Partition Key Tests
# ==============================================================================


class TestPartitionKey:
    """Tests for partition key derivation."""

    def test_length_six(self):
        """Test the first six digits are kept."""
        assert partition_key(5177531549489041509, 6) == 517753

    @pytest.mark.parametrize("length,expected", [(1, 5), (3, 517), (5, 51775), (6, 517753)])
    def test_lengths(self, length, expected):
        """Test different key lengths."""
        assert partition_key(5177531549489041509, length) == expected

    def test_from_points(self):
        """Test keys of generated ids."""
        assert partition_key(cell_id(GeoPoint(52.1, 2.0)), 6) == 517753
        assert partition_key(cell_id(GeoPoint(51.5, -0.1)), 6) == 486390
        assert partition_key(cell_id(GeoPoint(51.51, -0.13)), 3) == 522

    def test_negative_keeps_sign(self):
        """Test negative ids keep the sign and the requested digit count."""
        assert partition_key(-1234567890123456789, 6) == -123456
        assert partition_key(-1234567890123456789, 1) == -1

    def test_negative_generated_id(self):
        """Test the key of a point on a negative face."""
        key = partition_key(cell_id(GeoPoint(40.7, -74.0)), 6)
        assert key < 0
        assert len(str(abs(key))) == 6

    def test_short_ids_unchanged(self):
        """Test ids not longer than the key are returned as is."""
        assert partition_key(12, 5) == 12
        assert partition_key(-12, 5) == -12
        assert partition_key(-1, 1) == -1
        assert partition_key(0, 3) == 0

    @pytest.mark.parametrize("length", [0, -1])
    def test_invalid_length(self, length):
        """Test non-positive lengths are rejected."""
        with pytest.raises(InvalidInputError, match="hash key length"):
            partition_key(5177531549489041509, length)

    def test_key_is_prefix(self):
        """Test the key renders as a prefix of the id."""
        for value in (5177531549489041509, -8915399413440323103, 123):
            for length in range(1, 8):
                key = partition_key(value, length)
                assert str(value).startswith(str(key))
