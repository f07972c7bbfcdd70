"""
Exceptions for the geospatial index.

Provides a small hierarchy separating caller input errors from protected
attribute violations. Errors raised by the underlying store client are not
wrapped and propagate to the caller unchanged.
"""


class GeoIndexError(Exception):
    """
    Base exception for geospatial index failures.

    Attributes:
        message: Human-readable error description
        details: Additional context about the failure
    """

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class InvalidInputError(GeoIndexError, ValueError):
    """
    Request is not resolvable and was rejected before any store I/O.

    Raised for missing corner or center points, non-positive radii,
    out-of-range coordinates, invalid partition key lengths and
    malformed geohash ranges.
    """


class ConfigurationError(GeoIndexError):
    """
    Configuration could not be loaded or is inconsistent.

    Attributes:
        source: Where the configuration came from (file path or "environment")
    """

    def __init__(self, message: str, source: str = None):
        super().__init__(message, {"source": source} if source else None)
        self.source = source


class ProtectedAttributeError(GeoIndexError):
    """
    An update tried to modify a derived attribute.

    The geohash and point payload attributes are generated on write and
    must never change afterwards, otherwise the item would be stored under
    the wrong partition and curve position.

    Attributes:
        attribute_name: Configured name of the protected attribute
        alias: Expression attribute name placeholder used to reference it
    """

    def __init__(self, attribute_name: str, alias: str = None):
        message = f"Cannot update protected attribute: {attribute_name}"
        if alias:
            message = f"{message} (referenced as {alias})"
        message = (
            f"{message}. This attribute is auto-generated from the point "
            f"coordinates and cannot be modified"
        )
        super().__init__(message)
        self.attribute_name = attribute_name
        self.alias = alias
