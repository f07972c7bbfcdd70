"""
Query planning.

Turns a bounding region into the list of range scans to issue: cover the
region, expand and split the covering cells into partition-confined
geohash ranges, and optionally coalesce ranges separated by tiny gaps to
cut the number of scans.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import s2sphere

from geoindex.model.covering import Covering
from geoindex.model.geohash_range import GeohashRange
from geoindex.s2.cells import partition_key

logger = logging.getLogger(__name__)


@dataclass
class QueryPlan:
    """
    Range scans planned for one query.

    Attributes:
        region: Bounding region that was covered
        covering: Covering cells of the region
        ranges: Partition-confined ranges to scan, ascending and disjoint
        hash_key_length: Partition key length used for splitting
        split_range_count: Number of ranges before merging
    """

    region: Optional[s2sphere.LatLngRect]
    covering: Covering
    ranges: List[GeohashRange] = field(default_factory=list)
    hash_key_length: int = 2
    split_range_count: int = 0

    def partition_key_of(self, geohash_range: GeohashRange) -> int:
        """Partition key a range is scanned in."""
        return partition_key(geohash_range.range_min, self.hash_key_length)

    @property
    def scan_count(self) -> int:
        return len(self.ranges)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "cell_count": self.covering.cell_count(),
            "split_range_count": self.split_range_count,
            "scan_count": self.scan_count,
            "hash_key_length": self.hash_key_length,
            "ranges": [
                dict(r.to_dict(), hash_key=self.partition_key_of(r)) for r in self.ranges
            ],
        }


def merge_ranges(
    ranges: Sequence[GeohashRange],
    threshold: int,
    hash_key_length: int,
) -> List[GeohashRange]:
    """
    Coalesce nearly adjacent ranges within the same partition.

    Ranges are sorted and each one is merged into its predecessor when the
    gap between them is at most ``threshold`` and the merged range still
    lies in a single partition. Overlapping ranges are never merged, so
    the output stays disjoint when the input is.

    Args:
        ranges: Partition-confined ranges
        threshold: Largest gap to bridge
        hash_key_length: Partition key length in digits

    Returns:
        Ascending list of ranges
    """
    merged: List[GeohashRange] = []
    for current in sorted(ranges, key=lambda r: (r.range_min, r.range_max)):
        if merged:
            combined = merged[-1].try_merge(current, threshold)
            if combined is not None and combined.is_partition_confined(hash_key_length):
                merged[-1] = combined
                continue
        merged.append(current)
    return merged


def build_plan(
    region: Optional[s2sphere.LatLngRect],
    coverer: Any,
    hash_key_length: int,
    merge: bool = True,
    merge_threshold: int = 2,
) -> QueryPlan:
    """
    Plan the range scans for a region.

    Args:
        region: Bounding region
        coverer: Object with ``cover(region) -> list of cell ids``
        hash_key_length: Partition key length in digits
        merge: Coalesce nearly adjacent ranges
        merge_threshold: Largest gap to bridge when merging

    Returns:
        QueryPlan
    """
    covering = Covering(coverer.cover(region) if region is not None else [])
    ranges = covering.get_geohash_ranges(hash_key_length)
    split_count = len(ranges)

    if merge:
        ranges = merge_ranges(ranges, merge_threshold, hash_key_length)

    logger.debug(
        f"Planned {len(ranges)} range scans from {covering.cell_count()} cells "
        f"({split_count} ranges before merging)"
    )
    return QueryPlan(
        region=region,
        covering=covering,
        ranges=ranges,
        hash_key_length=hash_key_length,
        split_range_count=split_count,
    )
