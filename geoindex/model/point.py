"""
Point and request types for geospatial index operations.

GeoPoint is the only geometry callers construct directly. The request
dataclasses mirror the store operations: each carries the point used to
derive the partition key and geohash, the caller supplied range key value
and optional overrides passed through to the underlying store request.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from geoindex.exceptions import InvalidInputError


@dataclass(frozen=True)
class GeoPoint:
    """
    Geographic point in decimal degrees.

    Attributes:
        latitude: Latitude (-90 to 90)
        longitude: Longitude (-180 to 180)
    """

    latitude: float
    longitude: float

    def __post_init__(self):
        """Validate coordinates."""
        for name, value, limit in (
            ("latitude", self.latitude, 90.0),
            ("longitude", self.longitude, 180.0),
        ):
            if value is None or not math.isfinite(float(value)):
                raise InvalidInputError(
                    f"{name} must be a finite number", {name: value}
                )
            if abs(float(value)) > limit:
                raise InvalidInputError(
                    f"{name} must be within [-{limit:g}, {limit:g}]",
                    {name: value},
                )

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeoPoint":
        """Create from dictionary."""
        return cls(latitude=float(data["latitude"]), longitude=float(data["longitude"]))


@dataclass
class QueryRectangleInput:
    """
    Rectangle query request.

    Attributes:
        min_point: South-west corner
        max_point: North-east corner. A longitude smaller than the
            min_point longitude denotes a rectangle across the antimeridian.
        query_overrides: Extra parameters merged into every range scan
    """

    min_point: Optional[GeoPoint]
    max_point: Optional[GeoPoint]
    query_overrides: Dict[str, Any] = field(default_factory=dict)


@dataclass
class QueryRadiusInput:
    """
    Radius query request.

    Attributes:
        center_point: Circle center
        radius_in_meter: Circle radius in meters, must be positive
        query_overrides: Extra parameters merged into every range scan
    """

    center_point: Optional[GeoPoint]
    radius_in_meter: float
    query_overrides: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PutPointInput:
    """Single point write request."""

    range_key_value: Any
    geo_point: GeoPoint
    item: Dict[str, Any] = field(default_factory=dict)
    put_item_overrides: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GetPointInput:
    """Single point fetch request."""

    range_key_value: Any
    geo_point: GeoPoint
    get_item_overrides: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UpdatePointInput:
    """
    Single point update request.

    ``update_item`` holds the store update parameters (``UpdateExpression``,
    ``ExpressionAttributeNames``, ``ExpressionAttributeValues`` or the
    legacy ``AttributeUpdates`` mapping). The key is filled in from the
    point and range key value.
    """

    range_key_value: Any
    geo_point: GeoPoint
    update_item: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DeletePointInput:
    """Single point delete request."""

    range_key_value: Any
    geo_point: GeoPoint
    delete_item_overrides: Dict[str, Any] = field(default_factory=dict)
