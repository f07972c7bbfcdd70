"""
In-memory store backend.

Keeps items in a dictionary keyed by (hash key, range key) and serves
range scans in geohash order with real pagination, so the query engine's
continuation handling is exercised without a database. Intended for
tests and small local experiments.
"""

import copy
import logging
import re
import threading
from typing import Any, Dict, List, Optional, Tuple

from geoindex.config import GeoDataManagerConfiguration
from geoindex.exceptions import InvalidInputError
from geoindex.model.geohash_range import GeohashRange
from geoindex.storage.base import BATCH_WRITE_LIMIT, GeoStoreBackend, ScanPage

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

_CLAUSE = re.compile(r"\b(SET|REMOVE|ADD|DELETE)\b", re.IGNORECASE)


class MemoryGeoStore(GeoStoreBackend):
    """
    Dictionary backed store with paginated range scans.

    Attributes:
        query_count: Number of query_page calls served
    """

    def __init__(self, config: GeoDataManagerConfiguration):
        """Initialize memory store."""
        super().__init__(config)
        self._items: Dict[Tuple[Any, Any], Dict[str, Any]] = {}
        self._lock = threading.Lock()
        self.query_count = 0
        self.page_size = config.page_size or DEFAULT_PAGE_SIZE
        logger.info(
            f"Initialized memory store for table {config.table_name} "
            f"(page_size={self.page_size})"
        )

    def _key_of(self, item: Dict[str, Any]) -> Tuple[Any, Any]:
        hash_name = self.config.hash_key_attribute_name
        range_name = self.config.range_key_attribute_name
        if hash_name not in item or range_name not in item:
            raise KeyError(f"Item must contain {hash_name} and {range_name}")
        return item[hash_name], item[range_name]

    def _sort_key(self, item: Dict[str, Any]) -> tuple:
        return (
            item[self.config.geohash_attribute_name],
            str(item[self.config.range_key_attribute_name]),
        )

    def __len__(self) -> int:
        return len(self._items)

    def query_page(
        self,
        hash_key: int,
        geohash_range: GeohashRange,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> ScanPage:
        """Fetch one page of records in a partition between two geohashes."""
        overrides = overrides or {}
        limit = overrides.get("Limit", self.page_size)
        if limit < 1:
            raise InvalidInputError("Limit must be at least 1", {"Limit": limit})
        geohash_name = self.config.geohash_attribute_name
        hash_name = self.config.hash_key_attribute_name

        with self._lock:
            self.query_count += 1
            matches = sorted(
                (
                    item
                    for (item_hash, _), item in self._items.items()
                    if item_hash == hash_key
                    and item.get(geohash_name) is not None
                    and item[geohash_name] in geohash_range
                ),
                key=self._sort_key,
            )

            if exclusive_start_key is not None:
                start = self._sort_key(exclusive_start_key)
                matches = [m for m in matches if self._sort_key(m) > start]

            page = [copy.deepcopy(item) for item in matches[:limit]]

        last_evaluated_key = None
        if len(matches) > limit:
            last = page[-1]
            last_evaluated_key = {
                hash_name: last[hash_name],
                self.config.range_key_attribute_name: last[
                    self.config.range_key_attribute_name
                ],
                geohash_name: last[geohash_name],
            }

        return ScanPage(items=page, last_evaluated_key=last_evaluated_key)

    def put_item(
        self,
        item: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Write a complete item, replacing any existing one."""
        key = self._key_of(item)
        with self._lock:
            self._items[key] = copy.deepcopy(item)
        return {}

    def get_item(
        self,
        key: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Fetch an item by key."""
        with self._lock:
            item = self._items.get(self._key_of(key))
            if item is None:
                return {}
            return {"Item": copy.deepcopy(item)}

    def update_item(
        self,
        key: Dict[str, Any],
        update: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Apply update parameters to an item, creating it if missing.

        Supports AttributeUpdates (PUT, DELETE) and the SET and REMOVE
        clauses of update expressions with plain value assignments.
        """
        item_key = self._key_of(key)
        with self._lock:
            item = self._items.setdefault(item_key, copy.deepcopy(key))

            for name, change in (update.get("AttributeUpdates") or {}).items():
                action = change.get("Action", "PUT")
                if action == "PUT":
                    item[name] = copy.deepcopy(change["Value"])
                elif action == "DELETE":
                    item.pop(name, None)
                else:
                    raise ValueError(f"Unsupported AttributeUpdates action: {action}")

            expression = update.get("UpdateExpression")
            if expression:
                self._apply_expression(
                    item,
                    expression,
                    update.get("ExpressionAttributeNames") or {},
                    update.get("ExpressionAttributeValues") or {},
                )

            return {"Attributes": copy.deepcopy(item)}

    def _apply_expression(
        self,
        item: Dict[str, Any],
        expression: str,
        names: Dict[str, str],
        values: Dict[str, Any],
    ) -> None:
        parts = _CLAUSE.split(expression)
        # parts: [prefix, clause, body, clause, body, ...]
        for clause, body in zip(parts[1::2], parts[2::2]):
            clause = clause.upper()
            for action in filter(None, (a.strip() for a in body.split(","))):
                if clause == "SET":
                    target, _, value = (s.strip() for s in action.partition("="))
                    if value not in values:
                        raise ValueError(f"Unsupported SET action: {action}")
                    item[names.get(target, target)] = copy.deepcopy(values[value])
                elif clause == "REMOVE":
                    item.pop(names.get(action, action), None)
                else:
                    raise ValueError(f"Unsupported update clause: {clause}")

    def delete_item(
        self,
        key: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Delete the item with the given key."""
        with self._lock:
            removed = self._items.pop(self._key_of(key), None)
        if removed is not None and (overrides or {}).get("ReturnValues") == "ALL_OLD":
            return {"Attributes": removed}
        return {}

    def batch_write(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Write up to BATCH_WRITE_LIMIT items."""
        if len(items) > BATCH_WRITE_LIMIT:
            raise ValueError(
                f"Batch write accepts at most {BATCH_WRITE_LIMIT} items, got {len(items)}"
            )
        for item in items:
            self.put_item(item)
        return {"UnprocessedItems": {}}
