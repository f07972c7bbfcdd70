"""
S2 curve adapters.

Cell id and partition key derivation, bounding regions for rectangle and
radius queries, and the region covering capability.
"""

from geoindex.s2.cells import (
    cell_id,
    cell_range,
    partition_key,
    to_signed,
    to_unsigned,
)
from geoindex.s2.coverer import CoveringParameters, RegionCoverer
from geoindex.s2.regions import (
    EARTH_RADIUS_METERS,
    bounding_rect_for_radius,
    rect_from_corners,
)

__all__ = [
    "cell_id",
    "cell_range",
    "partition_key",
    "to_signed",
    "to_unsigned",
    "CoveringParameters",
    "RegionCoverer",
    "EARTH_RADIUS_METERS",
    "bounding_rect_for_radius",
    "rect_from_corners",
]
