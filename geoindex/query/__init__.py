"""
Query planning, execution and exact-geometry filtering.
"""

from geoindex.query.filters import (
    decode_point,
    dedupe_records,
    encode_point,
    filter_by_radius,
    filter_by_rectangle,
    haversine_distance,
)
from geoindex.query.manager import GeoDataManager
from geoindex.query.planner import QueryPlan, build_plan, merge_ranges

__all__ = [
    "decode_point",
    "dedupe_records",
    "encode_point",
    "filter_by_radius",
    "filter_by_rectangle",
    "haversine_distance",
    "GeoDataManager",
    "QueryPlan",
    "build_plan",
    "merge_ranges",
]
