"""
Point payload codec and exact-geometry filters.

Range scans return every record whose curve position falls inside the
covering, which is a superset of the query shape. These filters decode the
stored point of each record and keep only true matches: inclusive
point-in-rectangle for rectangle queries and great-circle distance for
radius queries.
"""

import json
import logging
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from geoindex.model.point import GeoPoint
from geoindex.s2.regions import EARTH_RADIUS_METERS

logger = logging.getLogger(__name__)

# Absorbs floating point noise for points placed exactly on the circle
DISTANCE_TOLERANCE_METERS = 1e-6


def encode_point(
    point: GeoPoint,
    point_type: str = "Point",
    longitude_first: bool = True,
) -> str:
    """
    Serialize a point as a GeoJSON-style string.

    Args:
        point: Point to serialize
        point_type: Value of the "type" member
        longitude_first: Write [lon, lat] (GeoJSON order) instead of [lat, lon]

    Returns:
        Compact JSON string
    """
    if longitude_first:
        coordinates = [point.longitude, point.latitude]
    else:
        coordinates = [point.latitude, point.longitude]
    return json.dumps(
        {"type": point_type, "coordinates": coordinates},
        separators=(",", ":"),
    )


def decode_point(payload: Any, longitude_first: bool = True) -> Tuple[float, float]:
    """
    Read (latitude, longitude) from a stored point payload.

    Args:
        payload: JSON string or already decoded mapping
        longitude_first: Coordinates are stored as [lon, lat]

    Returns:
        (latitude, longitude) in degrees

    Raises:
        ValueError: If the payload is not a point with two coordinates
    """
    if isinstance(payload, (str, bytes)):
        payload = json.loads(payload)
    if not isinstance(payload, dict):
        raise ValueError(f"Point payload must be an object, got {type(payload).__name__}")

    coordinates = payload.get("coordinates")
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
        raise ValueError(f"Point payload needs two coordinates, got {coordinates!r}")

    first, second = (float(c) for c in coordinates)
    if longitude_first:
        return second, first
    return first, second


def _decode_records(
    records: Sequence[Dict[str, Any]],
    attribute_name: str,
    longitude_first: bool,
) -> Tuple[List[Dict[str, Any]], np.ndarray, np.ndarray]:
    """Decode payloads, dropping records without a usable point."""
    kept = []
    latitudes = []
    longitudes = []
    for record in records:
        try:
            lat, lng = decode_point(record.get(attribute_name), longitude_first)
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping record with invalid {attribute_name}: {e}")
            continue
        kept.append(record)
        latitudes.append(lat)
        longitudes.append(lng)
    return kept, np.asarray(latitudes, dtype=float), np.asarray(longitudes, dtype=float)


def haversine_distance(
    lat1: float,
    lng1: float,
    lat2: np.ndarray,
    lng2: np.ndarray,
    radius: float = EARTH_RADIUS_METERS,
) -> np.ndarray:
    """
    Great-circle distance in meters from one point to many.

    Args:
        lat1: Origin latitude in degrees
        lng1: Origin longitude in degrees
        lat2: Target latitudes in degrees
        lng2: Target longitudes in degrees
        radius: Sphere radius in meters

    Returns:
        Distances in meters
    """
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = np.radians(np.asarray(lng2) - lng1)

    h = np.sin(d_phi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2.0) ** 2
    return 2.0 * radius * np.arcsin(np.sqrt(np.clip(h, 0.0, 1.0)))


def filter_by_radius(
    records: Sequence[Dict[str, Any]],
    center: GeoPoint,
    radius_meters: float,
    attribute_name: str = "geoJson",
    longitude_first: bool = True,
) -> List[Dict[str, Any]]:
    """
    Keep records within a great-circle distance of a center point.

    Args:
        records: Scanned records
        center: Circle center
        radius_meters: Circle radius; points at exactly this distance match
        attribute_name: Attribute holding the point payload
        longitude_first: Coordinate order of the payload

    Returns:
        Matching records in input order
    """
    kept, latitudes, longitudes = _decode_records(records, attribute_name, longitude_first)
    if not kept:
        return []

    distances = haversine_distance(center.latitude, center.longitude, latitudes, longitudes)
    mask = distances <= radius_meters + DISTANCE_TOLERANCE_METERS
    return [record for record, inside in zip(kept, mask) if inside]


def filter_by_rectangle(
    records: Sequence[Dict[str, Any]],
    min_point: GeoPoint,
    max_point: GeoPoint,
    attribute_name: str = "geoJson",
    longitude_first: bool = True,
) -> List[Dict[str, Any]]:
    """
    Keep records inside a latitude/longitude rectangle, bounds inclusive.

    A min_point longitude greater than the max_point longitude selects the
    band across the antimeridian.

    Args:
        records: Scanned records
        min_point: South-west corner
        max_point: North-east corner
        attribute_name: Attribute holding the point payload
        longitude_first: Coordinate order of the payload

    Returns:
        Matching records in input order
    """
    kept, latitudes, longitudes = _decode_records(records, attribute_name, longitude_first)
    if not kept:
        return []

    west, east = min_point.longitude, max_point.longitude
    lat_ok = (latitudes >= min_point.latitude) & (latitudes <= max_point.latitude)
    if west <= east:
        lng_ok = (longitudes >= west) & (longitudes <= east)
    else:
        lng_ok = (longitudes >= west) | (longitudes <= east)

    return [record for record, inside in zip(kept, lat_ok & lng_ok) if inside]


def dedupe_records(
    records: Sequence[Dict[str, Any]],
    hash_key_attribute: str,
    range_key_attribute: str,
) -> List[Dict[str, Any]]:
    """
    Drop repeated records, identified by (hash key, range key).

    Args:
        records: Records possibly containing duplicates
        hash_key_attribute: Partition key attribute name
        range_key_attribute: Sort key attribute name

    Returns:
        First occurrence of each record, in input order
    """
    seen = set()
    unique = []
    for record in records:
        key = (record.get(hash_key_attribute), record.get(range_key_attribute))
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique
