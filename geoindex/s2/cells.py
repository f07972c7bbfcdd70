"""
Point indexing on the S2 curve.

Maps points to leaf-level S2 cell ids and derives the partition key used
as the store hash key. Cell ids are handled as signed 64-bit integers so
that ids on faces 4 and 5 (unsigned values >= 2**63) are negative; the
decimal rendering of a negative id carries a leading sign, which the
partition key derivation has to compensate for.
"""

from typing import TYPE_CHECKING, Tuple

import s2sphere

from geoindex.exceptions import InvalidInputError

if TYPE_CHECKING:
    from geoindex.model.point import GeoPoint

UINT64_RANGE = 1 << 64
INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def to_signed(cell_id: int) -> int:
    """Reinterpret an unsigned 64-bit cell id as two's complement."""
    if cell_id > INT64_MAX:
        return cell_id - UINT64_RANGE
    return cell_id


def to_unsigned(cell_id: int) -> int:
    """Reinterpret a signed 64-bit cell id as unsigned."""
    if cell_id < 0:
        return cell_id + UINT64_RANGE
    return cell_id


def cell_id(point: "GeoPoint") -> int:
    """
    Compute the leaf-level cell id of a point.

    Args:
        point: Point to index

    Returns:
        Signed 64-bit cell id
    """
    lat_lng = s2sphere.LatLng.from_degrees(point.latitude, point.longitude)
    return to_signed(s2sphere.CellId.from_lat_lng(lat_lng).id())


def cell_range(cell: int) -> Tuple[int, int]:
    """
    Get the leaf descendant bounds of a cell.

    Args:
        cell: Signed cell id at any level

    Returns:
        (min leaf id, max leaf id), both signed
    """
    s2_cell = s2sphere.CellId(to_unsigned(cell))
    return to_signed(s2_cell.range_min().id()), to_signed(s2_cell.range_max().id())


def partition_key(cell: int, length: int) -> int:
    """
    Derive the partition key of a cell id.

    The key is the first ``length`` characters of the decimal rendering of
    the id, keeping its sign. Negative ids use one extra character for the
    sign so that the key always holds ``length`` digits.

    Args:
        cell: Signed cell id
        length: Number of leading digits to keep

    Returns:
        Partition key with the same sign as ``cell``

    Raises:
        InvalidInputError: If length is not positive
    """
    if length <= 0:
        raise InvalidInputError(
            "hash key length must be positive", {"hash_key_length": length}
        )

    if cell < 0:
        # Counteract "-" at the beginning of the rendered id
        length += 1

    dropped = len(str(cell)) - length
    if dropped <= 0:
        return cell

    denominator = 10 ** dropped
    if cell < 0:
        return -(-cell // denominator)
    return cell // denominator
