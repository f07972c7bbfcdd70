"""
Bounding regions for rectangle and radius queries.

Both query shapes are converted to an S2 latitude/longitude rectangle in
radians. The radius conversion is a local linear approximation: the number
of meters in one degree is measured at the center and used to turn the
radius into degree half-extents. It is not guaranteed to contain the whole
circle; exactness comes from the filter applied to the scanned records.
"""

import logging
import math
from typing import TYPE_CHECKING, Optional

import s2sphere

from geoindex.exceptions import InvalidInputError

if TYPE_CHECKING:
    from geoindex.model.point import GeoPoint

logger = logging.getLogger(__name__)

EARTH_RADIUS_METERS = 6371000.0


def _lat_lng(latitude: float, longitude: float) -> s2sphere.LatLng:
    return s2sphere.LatLng.from_degrees(latitude, longitude)


def _wrap_longitude(longitude: float) -> float:
    """Wrap a longitude in degrees into [-180, 180)."""
    return ((longitude + 180.0) % 360.0) - 180.0


def rect_from_corners(
    min_point: Optional["GeoPoint"],
    max_point: Optional["GeoPoint"],
) -> Optional[s2sphere.LatLngRect]:
    """
    Build a rectangle from its south-west and north-east corners.

    Args:
        min_point: South-west corner
        max_point: North-east corner

    Returns:
        LatLngRect, or None if either corner is missing

    Raises:
        InvalidInputError: If the south edge is north of the north edge
    """
    if min_point is None or max_point is None:
        return None

    if min_point.latitude > max_point.latitude:
        raise InvalidInputError(
            "min_point latitude must be <= max_point latitude",
            {
                "min_latitude": min_point.latitude,
                "max_latitude": max_point.latitude,
            },
        )

    min_lat_lng = _lat_lng(min_point.latitude, min_point.longitude)
    max_lat_lng = _lat_lng(max_point.latitude, max_point.longitude)

    lat_interval = s2sphere.LineInterval(
        min_lat_lng.lat().radians, max_lat_lng.lat().radians
    )
    # lo > hi means the rectangle crosses the antimeridian
    lng_interval = s2sphere.SphereInterval(
        min_lat_lng.lng().radians, max_lat_lng.lng().radians
    )
    return s2sphere.LatLngRect(lat_interval, lng_interval)


def meters_per_degree(center: "GeoPoint") -> tuple:
    """
    Measure the length of one degree of latitude and longitude at a point.

    The reference point is taken one degree towards the equator (latitude)
    and towards the prime meridian (longitude) so it always stays on the
    sphere.

    Args:
        center: Point to measure at

    Returns:
        (meters per degree latitude, meters per degree longitude)
    """
    center_lat_lng = _lat_lng(center.latitude, center.longitude)

    lat_reference_unit = -1.0 if center.latitude > 0.0 else 1.0
    lat_reference = _lat_lng(center.latitude + lat_reference_unit, center.longitude)

    lng_reference_unit = -1.0 if center.longitude > 0.0 else 1.0
    lng_reference = _lat_lng(center.latitude, center.longitude + lng_reference_unit)

    lat_meters = center_lat_lng.get_distance(lat_reference).radians * EARTH_RADIUS_METERS
    lng_meters = center_lat_lng.get_distance(lng_reference).radians * EARTH_RADIUS_METERS
    return lat_meters, lng_meters


def bounding_rect_for_radius(
    center: Optional["GeoPoint"],
    radius_meters: float,
) -> s2sphere.LatLngRect:
    """
    Approximate the bounding rectangle of a circle.

    Args:
        center: Circle center
        radius_meters: Circle radius in meters

    Returns:
        LatLngRect around the circle. Latitude is clamped to the poles;
        the longitude interval wraps across the antimeridian and becomes
        full when the circle reaches a pole.

    Raises:
        InvalidInputError: If the center is missing or the radius is not positive
    """
    if center is None:
        raise InvalidInputError("center point is required for a radius query")
    if radius_meters is None or not radius_meters > 0:
        raise InvalidInputError(
            "radius must be positive", {"radius_in_meter": radius_meters}
        )

    lat_meters, lng_meters = meters_per_degree(center)
    lat_for_radius = radius_meters / lat_meters
    # Longitude degrees shrink to nothing at the poles
    lng_for_radius = radius_meters / lng_meters if lng_meters > 0 else math.inf

    south = center.latitude - lat_for_radius
    north = center.latitude + lat_for_radius
    reaches_pole = south <= -90.0 or north >= 90.0
    south = max(south, -90.0)
    north = min(north, 90.0)

    lat_interval = s2sphere.LineInterval(
        math.radians(south), math.radians(north)
    )

    if reaches_pole or lng_for_radius >= 180.0:
        lng_interval = s2sphere.SphereInterval(-math.pi, math.pi)
    else:
        west = _wrap_longitude(center.longitude - lng_for_radius)
        east = _wrap_longitude(center.longitude + lng_for_radius)
        lng_interval = s2sphere.SphereInterval(math.radians(west), math.radians(east))

    logger.debug(
        f"Radius {radius_meters}m at ({center.latitude}, {center.longitude}) "
        f"-> +/-{lat_for_radius:.6f} deg lat, +/-{lng_for_radius:.6f} deg lng"
    )
    return s2sphere.LatLngRect(lat_interval, lng_interval)
