"""
Geospatial Point Index on DynamoDB.

Stores points in a key-value table keyed by S2 cell id and answers
rectangle and radius queries with a small number of range scans.

Components:
- S2 adapters for cell ids, partition keys and region coverings
- Geohash ranges and query planning
- Concurrent paginated range scans with exact-geometry filtering
- DynamoDB and in-memory store backends

Example usage:
    from geoindex import (
        GeoDataManager,
        GeoDataManagerConfiguration,
        GeoPoint,
        QueryRectangleInput,
    )

    config = GeoDataManagerConfiguration(table_name="capitals")
    manager = GeoDataManager(config)

    records = manager.query_rectangle(QueryRectangleInput(
        min_point=GeoPoint(51.0, -1.0),
        max_point=GeoPoint(52.0, 0.5),
    ))
"""

from geoindex.config import GeoDataManagerConfiguration, load_config
from geoindex.exceptions import (
    ConfigurationError,
    GeoIndexError,
    InvalidInputError,
    ProtectedAttributeError,
)
from geoindex.model import (
    Covering,
    DeletePointInput,
    GeoPoint,
    GeohashRange,
    GetPointInput,
    PutPointInput,
    QueryRadiusInput,
    QueryRectangleInput,
    UpdatePointInput,
)
from geoindex.query import GeoDataManager, QueryPlan
from geoindex.s2 import CoveringParameters, RegionCoverer

__version__ = "1.0.0"

__all__ = [
    "GeoDataManagerConfiguration",
    "load_config",
    "ConfigurationError",
    "GeoIndexError",
    "InvalidInputError",
    "ProtectedAttributeError",
    "Covering",
    "DeletePointInput",
    "GeoPoint",
    "GeohashRange",
    "GetPointInput",
    "PutPointInput",
    "QueryRadiusInput",
    "QueryRectangleInput",
    "UpdatePointInput",
    "GeoDataManager",
    "QueryPlan",
    "CoveringParameters",
    "RegionCoverer",
]
