"""
Store backend interface.

The query engine needs a store that supports equality on a partition key
plus an ordered range scan on a secondary index within that partition,
and paginates results with opaque continuation keys. Single item calls
take the fully built item or key; the manager adds the derived attributes
before calling the backend.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from geoindex.config import GeoDataManagerConfiguration
from geoindex.model.geohash_range import GeohashRange

logger = logging.getLogger(__name__)

# Items per batch write request
BATCH_WRITE_LIMIT = 25


@dataclass
class ScanPage:
    """
    One page of a range scan.

    Attributes:
        items: Records on this page
        last_evaluated_key: Continuation key; None when the scan is complete
        consumed_capacity: Capacity reported by the store, if any
    """

    items: List[Dict[str, Any]] = field(default_factory=list)
    last_evaluated_key: Optional[Dict[str, Any]] = None
    consumed_capacity: Optional[Dict[str, Any]] = None

    @property
    def has_more(self) -> bool:
        return self.last_evaluated_key is not None


class GeoStoreBackend(ABC):
    """
    Abstract base class for store backends.

    Errors raised by implementations are propagated unchanged to callers.
    """

    def __init__(self, config: GeoDataManagerConfiguration):
        """
        Initialize store backend.

        Args:
            config: Table configuration
        """
        self.config = config

    @abstractmethod
    def query_page(
        self,
        hash_key: int,
        geohash_range: GeohashRange,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> ScanPage:
        """
        Fetch one page of records in a partition between two geohashes.

        Args:
            hash_key: Partition key value
            geohash_range: Inclusive geohash bounds
            exclusive_start_key: Continuation key from the previous page
            overrides: Extra request parameters, applied last

        Returns:
            ScanPage
        """
        pass

    @abstractmethod
    def put_item(
        self,
        item: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Write a complete item, replacing any existing one."""
        pass

    @abstractmethod
    def get_item(
        self,
        key: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Fetch an item by key. The response holds it under "Item" if found."""
        pass

    @abstractmethod
    def update_item(
        self,
        key: Dict[str, Any],
        update: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Apply update parameters to the item with the given key."""
        pass

    @abstractmethod
    def delete_item(
        self,
        key: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Delete the item with the given key."""
        pass

    @abstractmethod
    def batch_write(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Write up to BATCH_WRITE_LIMIT items in one request.

        Returns:
            Response holding "UnprocessedItems" (empty when all were written)
        """
        pass
