"""
Covering of a query region.

Holds the coarse cells produced by the region coverer for one query and
turns them into partition-confined GeohashRanges.
"""

from typing import Iterable, List

from geoindex.model.geohash_range import GeohashRange


class Covering:
    """Cells covering one query region."""

    def __init__(self, cell_ids: Iterable[int]):
        self._cell_ids = tuple(cell_ids)

    @property
    def cell_ids(self) -> tuple:
        return self._cell_ids

    def get_geohash_ranges(self, hash_key_length: int) -> List[GeohashRange]:
        """
        Expand every cell to its leaf range and split it by partition.

        Args:
            hash_key_length: Partition key length in digits

        Returns:
            Ranges in cell order, each confined to one partition
        """
        ranges = []
        for cell in self._cell_ids:
            ranges.extend(GeohashRange.from_cell(cell).split(hash_key_length))
        return ranges

    def cell_count(self) -> int:
        """Number of covering cells."""
        return len(self._cell_ids)

    def __len__(self) -> int:
        return len(self._cell_ids)

    def __repr__(self) -> str:
        return f"Covering(cells={len(self._cell_ids)})"
