"""
Contiguous ranges of leaf cell ids.

A GeohashRange is the unit of work for the query orchestrator: one range
scan against one partition. Ranges derived from covering cells can cross
partition key boundaries and must be split first, since a scan is scoped
to exactly one partition key.

Partition groups are contiguous runs of ids that share a partition key.
For non-negative ids with more digits than the key length they look like
``[51000..., 51999...]``; for negative ids the run is mirrored
(``[-51999..., -51000...]``). Ids whose decimal rendering is not longer
than the key are a group of their own, so a change in digit count is a
boundary as well.
"""

from dataclasses import dataclass
from typing import List, Optional

from geoindex.exceptions import InvalidInputError
from geoindex.s2.cells import cell_range, partition_key


def partition_ceiling(value: int, length: int) -> int:
    """
    Find the end of the partition group containing a value.

    Args:
        value: Signed cell id
        length: Partition key length in digits

    Returns:
        The largest id ``w >= value`` such that every id in ``[value, w]``
        has the same partition key as ``value``
    """
    if length <= 0:
        raise InvalidInputError(
            "hash key length must be positive", {"hash_key_length": length}
        )

    digits = str(abs(value))
    tail = len(digits) - length
    if tail <= 0:
        return value

    prefix = digits[:length]
    if value < 0:
        return -int(prefix + "0" * tail)
    return int(prefix + "9" * tail)


@dataclass(frozen=True)
class GeohashRange:
    """
    Inclusive range of signed leaf cell ids.

    Attributes:
        range_min: Lowest cell id in the range
        range_max: Highest cell id in the range
    """

    range_min: int
    range_max: int

    def __post_init__(self):
        """Validate bounds."""
        if self.range_min > self.range_max:
            raise InvalidInputError(
                "range_min must be <= range_max",
                {"range_min": self.range_min, "range_max": self.range_max},
            )

    @classmethod
    def from_cell(cls, cell: int) -> "GeohashRange":
        """Create the range of leaf descendants of a cell."""
        return cls(*cell_range(cell))

    def __contains__(self, cell: int) -> bool:
        return self.range_min <= cell <= self.range_max

    @property
    def size(self) -> int:
        """Number of ids in the range."""
        return self.range_max - self.range_min + 1

    def partition_key(self, length: int) -> int:
        """Partition key of the lower bound."""
        return partition_key(self.range_min, length)

    def is_partition_confined(self, length: int) -> bool:
        """Check whether every id in the range shares one partition key."""
        return partition_ceiling(self.range_min, length) >= self.range_max

    def split(self, length: int) -> List["GeohashRange"]:
        """
        Split the range at partition key boundaries.

        Args:
            length: Partition key length in digits

        Returns:
            Ascending, gap-free, non-overlapping ranges whose union is this
            range. Returns ``[self]`` when no split is needed.
        """
        if self.is_partition_confined(length):
            return [self]

        # Negative and non-negative ids render with different lengths,
        # so the sign change is always a boundary
        if self.range_min < 0 <= self.range_max:
            return (
                GeohashRange(self.range_min, -1).split(length)
                + GeohashRange(0, self.range_max).split(length)
            )

        ranges = []
        lower = self.range_min
        while lower <= self.range_max:
            upper = min(partition_ceiling(lower, length), self.range_max)
            ranges.append(GeohashRange(lower, upper))
            lower = upper + 1
        return ranges

    def try_merge(self, other: "GeohashRange", threshold: int) -> Optional["GeohashRange"]:
        """
        Coalesce with a neighbouring range separated by a small gap.

        Args:
            other: Range to merge with
            threshold: Largest gap (difference between bounds) to bridge

        Returns:
            Merged range, or None if the ranges overlap, touch the wrong
            way round or are too far apart
        """
        gap = other.range_min - self.range_max
        if 0 < gap <= threshold:
            return GeohashRange(self.range_min, other.range_max)

        gap = self.range_min - other.range_max
        if 0 < gap <= threshold:
            return GeohashRange(other.range_min, self.range_max)

        return None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"range_min": self.range_min, "range_max": self.range_max}
