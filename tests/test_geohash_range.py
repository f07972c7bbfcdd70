"""
Tests for geohash ranges: partition ceilings, splitting and merging.
"""

import pytest
import s2sphere

from geoindex.exceptions import InvalidInputError
from geoindex.model.geohash_range import GeohashRange, partition_ceiling
from geoindex.s2.cells import partition_key, to_signed


def assert_valid_split(original, parts, length):
    """Check union, contiguity and single-partition confinement."""
    assert parts[0].range_min == original.range_min
    assert parts[-1].range_max == original.range_max
    for previous, current in zip(parts, parts[1:]):
        assert current.range_min == previous.range_max + 1
    for part in parts:
        assert partition_key(part.range_min, length) == partition_key(part.range_max, length)
        assert part.is_partition_confined(length)


# ==============================================================================
# Partition Ceiling Tests
# ==============================================================================


class TestPartitionCeiling:
    """Tests for the end of a partition group."""

    def test_positive(self):
        """Test the trailing digits become nines."""
        assert partition_ceiling(5177, 2) == 5199
        assert partition_ceiling(5100, 2) == 5199
        assert partition_ceiling(5199, 2) == 5199

    def test_negative(self):
        """Test the trailing digits become zeros for negative ids."""
        assert partition_ceiling(-5177, 2) == -5100
        assert partition_ceiling(-5100, 2) == -5100

    def test_short_values(self):
        """Test values not longer than the key form their own group."""
        assert partition_ceiling(12, 2) == 12
        assert partition_ceiling(9, 2) == 9
        assert partition_ceiling(-1, 2) == -1
        assert partition_ceiling(0, 2) == 0

    def test_ceiling_shares_key(self):
        """Test the ceiling and its successor straddle a boundary."""
        for value in (5177531549489041509, -8915399413440323103, 123456, -99):
            ceiling = partition_ceiling(value, 3)
            assert partition_key(ceiling, 3) == partition_key(value, 3)
            assert partition_key(ceiling + 1, 3) != partition_key(value, 3)

    def test_invalid_length(self):
        """Test non-positive lengths are rejected."""
        with pytest.raises(InvalidInputError):
            partition_ceiling(5177, 0)


# ==============================================================================
# GeohashRange Tests
# ==============================================================================


class TestGeohashRange:
    """Tests for GeohashRange basics."""

    def test_valid_range(self):
        """Test construction and size."""
        r = GeohashRange(10, 20)
        assert r.size == 11
        assert 10 in r
        assert 20 in r
        assert 21 not in r

    def test_invalid_range(self):
        """Test range_min above range_max is rejected."""
        with pytest.raises(InvalidInputError, match="range_min must be <= range_max"):
            GeohashRange(20, 10)

    def test_from_cell(self):
        """Test expansion of a cell to its leaf range."""
        lat_lng = s2sphere.LatLng.from_degrees(51.51, -0.13)
        cell = s2sphere.CellId.from_lat_lng(lat_lng).parent(12)
        r = GeohashRange.from_cell(to_signed(cell.id()))
        assert r.range_min == to_signed(cell.range_min().id())
        assert r.range_max == to_signed(cell.range_max().id())

    def test_to_dict(self):
        """Test dictionary form."""
        assert GeohashRange(1, 2).to_dict() == {"range_min": 1, "range_max": 2}


class TestSplit:
    """Tests for splitting at partition key boundaries."""

    def test_no_split_needed(self):
        """Test a confined range is returned unchanged."""
        r = GeohashRange(5177531549489041509, 5177531549489041600)
        assert r.split(6) == [r]

    def test_split_at_boundary(self):
        """Test a range crossing 51 -> 52 splits in two."""
        r = GeohashRange(5150, 5249)
        assert r.split(2) == [GeohashRange(5150, 5199), GeohashRange(5200, 5249)]

    def test_split_full_ids(self):
        """Test the 51 -> 52 boundary on full length ids."""
        r = GeohashRange(5190000000000000000, 5210000000000000000)
        parts = r.split(2)
        assert parts == [
            GeohashRange(5190000000000000000, 5199999999999999999),
            GeohashRange(5200000000000000000, 5210000000000000000),
        ]

    def test_split_many_partitions(self):
        """Test a range spanning several partitions."""
        r = GeohashRange(5150, 5549)
        parts = r.split(2)
        assert len(parts) == 5
        assert_valid_split(r, parts, 2)

    def test_split_negative(self):
        """Test negative ranges split on mirrored boundaries."""
        r = GeohashRange(-5249, -5150)
        assert r.split(2) == [GeohashRange(-5249, -5200), GeohashRange(-5199, -5150)]

    def test_split_at_zero(self):
        """Test a range crossing zero splits at the sign change."""
        r = GeohashRange(-25, 30)
        parts = r.split(1)
        assert_valid_split(r, parts, 1)
        assert GeohashRange(-9, -9) in parts
        assert any(p.range_max == -1 for p in parts)
        assert any(p.range_min == 0 for p in parts)

    def test_split_digit_count_change(self):
        """Test a change in digit count is a boundary."""
        r = GeohashRange(95, 105)
        parts = r.split(2)
        assert_valid_split(r, parts, 2)
        assert GeohashRange(100, 105) in parts

    def test_minus_one(self):
        """Test the single id -1."""
        assert GeohashRange(-1, -1).split(2) == [GeohashRange(-1, -1)]

    def test_split_face_cell(self):
        """Test a whole face cell."""
        face = s2sphere.CellId.from_face_pos_level(0, 0, 0).id()
        r = GeohashRange.from_cell(face)
        parts = r.split(2)
        assert_valid_split(r, parts, 2)
        # 1..9, then 90 keys for each digit count 2..18, then keys 10..23
        assert len(parts) == 9 + 90 * 17 + 14

    def test_split_negative_face_cell(self):
        """Test a whole face cell on a negative face."""
        face = to_signed(s2sphere.CellId.from_face_pos_level(5, 0, 0).id())
        r = GeohashRange.from_cell(face)
        parts = r.split(3)
        assert_valid_split(r, parts, 3)
        assert all(p.range_max < 0 for p in parts)

    def test_split_idempotent(self):
        """Test splitting a split part is a no-op."""
        r = GeohashRange(-5249, 5549)
        for part in r.split(2):
            assert part.split(2) == [part]


# ==============================================================================
# Merge Tests
# ==============================================================================


class TestTryMerge:
    """Tests for merging nearly adjacent ranges."""

    def test_merge_small_gap(self):
        """Test ranges within the threshold merge."""
        assert GeohashRange(10, 20).try_merge(GeohashRange(22, 30), 2) == GeohashRange(10, 30)

    def test_merge_adjacent(self):
        """Test touching ranges merge."""
        assert GeohashRange(10, 20).try_merge(GeohashRange(21, 30), 2) == GeohashRange(10, 30)

    def test_merge_reverse_order(self):
        """Test the other range may come first."""
        assert GeohashRange(22, 30).try_merge(GeohashRange(10, 20), 2) == GeohashRange(10, 30)

    def test_gap_too_large(self):
        """Test ranges beyond the threshold stay apart."""
        assert GeohashRange(10, 20).try_merge(GeohashRange(23, 30), 2) is None

    def test_overlap_not_merged(self):
        """Test overlapping ranges are not merged."""
        assert GeohashRange(10, 20).try_merge(GeohashRange(15, 30), 2) is None
        assert GeohashRange(10, 20).try_merge(GeohashRange(20, 30), 2) is None
