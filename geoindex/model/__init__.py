"""
Value types for the geospatial index.

Points and request types, geohash ranges and coverings.
"""

from geoindex.model.covering import Covering
from geoindex.model.geohash_range import GeohashRange, partition_ceiling
from geoindex.model.point import (
    DeletePointInput,
    GeoPoint,
    GetPointInput,
    PutPointInput,
    QueryRadiusInput,
    QueryRectangleInput,
    UpdatePointInput,
)

__all__ = [
    "Covering",
    "GeohashRange",
    "partition_ceiling",
    "DeletePointInput",
    "GeoPoint",
    "GetPointInput",
    "PutPointInput",
    "QueryRadiusInput",
    "QueryRectangleInput",
    "UpdatePointInput",
]
