"""
Geospatial query orchestration.

GeoDataManager is the entry point for one geo table. Writes derive the
geohash, partition key and point payload from the supplied point. Queries
run the full pipeline:

1. Plan: bounding region -> covering -> partition-confined ranges
2. Merge nearly adjacent ranges (optional)
3. Fan out one paginated range scan per range on a thread pool
4. Union and deduplicate the scanned records
5. Keep only records that truly lie inside the query shape

Any failing range scan fails the whole query; the remaining scans are
abandoned and the store error is raised unchanged.

Example usage:
    config = GeoDataManagerConfiguration(table_name="capitals")
    manager = GeoDataManager(config)

    manager.put_point(PutPointInput(
        range_key_value="50",
        geo_point=GeoPoint(51.51, -0.13),
        item={"country": "United Kingdom", "capital": "London"},
    ))

    records = manager.query_radius(QueryRadiusInput(
        center_point=GeoPoint(52.22573, 0.149593),
        radius_in_meter=100000,
    ))
"""

import concurrent.futures
import logging
import threading
import time
from typing import Any, Dict, List, Optional, Sequence

from geoindex.config import GeoDataManagerConfiguration
from geoindex.exceptions import InvalidInputError
from geoindex.model.geohash_range import GeohashRange
from geoindex.model.point import (
    DeletePointInput,
    GeoPoint,
    GetPointInput,
    PutPointInput,
    QueryRadiusInput,
    QueryRectangleInput,
    UpdatePointInput,
)
from geoindex.query.filters import (
    dedupe_records,
    encode_point,
    filter_by_radius,
    filter_by_rectangle,
)
from geoindex.query.planner import QueryPlan, build_plan
from geoindex.s2.cells import cell_id, partition_key
from geoindex.s2.coverer import RegionCoverer
from geoindex.s2.regions import bounding_rect_for_radius, rect_from_corners
from geoindex.storage.base import BATCH_WRITE_LIMIT, GeoStoreBackend
from geoindex.storage.dynamodb import create_geo_store
from geoindex.storage.protection import check_update

logger = logging.getLogger(__name__)

# Request parameters owned by the pagination loop
_RESERVED_QUERY_PARAMETERS = ("ExclusiveStartKey",)


class GeoDataManager:
    """
    Geo table manager: point writes and rectangle/radius queries.

    Attributes:
        config: Table configuration
        store: Store backend
        coverer: Region coverer (any object with ``cover(region)``)
    """

    def __init__(
        self,
        config: GeoDataManagerConfiguration,
        store: Optional[GeoStoreBackend] = None,
        coverer: Any = None,
    ):
        self.config = config
        self.store = store if store is not None else create_geo_store(config)
        self.coverer = coverer if coverer is not None else RegionCoverer(config.covering)

    # =========================================================================
    # Point writes and reads
    # =========================================================================

    def _key_for(self, point: GeoPoint, range_key_value: Any) -> Dict[str, Any]:
        """Primary key of the item stored for a point."""
        hash_key = partition_key(cell_id(point), self.config.hash_key_length)
        return {
            self.config.hash_key_attribute_name: hash_key,
            self.config.range_key_attribute_name: range_key_value,
        }

    def _build_item(self, put_input: PutPointInput) -> Dict[str, Any]:
        """Complete item with key, geohash and point payload."""
        geohash = cell_id(put_input.geo_point)
        item = dict(put_input.item)
        item[self.config.hash_key_attribute_name] = partition_key(
            geohash, self.config.hash_key_length
        )
        item[self.config.range_key_attribute_name] = put_input.range_key_value
        item[self.config.geohash_attribute_name] = geohash
        item[self.config.geojson_attribute_name] = encode_point(
            put_input.geo_point,
            point_type=self.config.geojson_point_type,
            longitude_first=self.config.longitude_first,
        )
        return item

    def put_point(self, put_input: PutPointInput) -> Dict[str, Any]:
        """
        Write a point, replacing any item with the same key.

        Args:
            put_input: Point, range key value, extra attributes and overrides

        Returns:
            Store response
        """
        item = self._build_item(put_input)
        logger.debug(
            f"Putting point {put_input.range_key_value} "
            f"in partition {item[self.config.hash_key_attribute_name]}"
        )
        return self.store.put_item(item, put_input.put_item_overrides)

    def batch_write_points(self, put_inputs: Sequence[PutPointInput]) -> List[Dict[str, Any]]:
        """
        Write many points, BATCH_WRITE_LIMIT per store request.

        Unprocessed items are reported in the responses, not retried.

        Args:
            put_inputs: Points to write

        Returns:
            One store response per batch
        """
        items = [self._build_item(put_input) for put_input in put_inputs]
        responses = []
        for start in range(0, len(items), BATCH_WRITE_LIMIT):
            batch = items[start : start + BATCH_WRITE_LIMIT]
            responses.append(self.store.batch_write(batch))
        logger.info(f"Wrote {len(items)} points in {len(responses)} batches")
        return responses

    def get_point(self, get_input: GetPointInput) -> Dict[str, Any]:
        """
        Fetch the item stored for a point and range key value.

        Returns:
            Store response; the item is under "Item" when it exists
        """
        key = self._key_for(get_input.geo_point, get_input.range_key_value)
        return self.store.get_item(key, get_input.get_item_overrides)

    def update_point(self, update_input: UpdatePointInput) -> Dict[str, Any]:
        """
        Update attributes of the item stored for a point.

        Raises:
            ProtectedAttributeError: If the update touches the geohash or
                point payload attribute. Raised before the store is called.
        """
        check_update(
            update_input.update_item,
            (self.config.geohash_attribute_name, self.config.geojson_attribute_name),
        )
        key = self._key_for(update_input.geo_point, update_input.range_key_value)
        return self.store.update_item(key, update_input.update_item)

    def delete_point(self, delete_input: DeletePointInput) -> Dict[str, Any]:
        """Delete the item stored for a point and range key value."""
        key = self._key_for(delete_input.geo_point, delete_input.range_key_value)
        return self.store.delete_item(key, delete_input.delete_item_overrides)

    # =========================================================================
    # Query planning
    # =========================================================================

    def _plan(self, region) -> QueryPlan:
        return build_plan(
            region,
            self.coverer,
            self.config.hash_key_length,
            merge=self.config.merge_ranges,
            merge_threshold=self.config.merge_threshold,
        )

    def plan_rectangle(self, query_input: QueryRectangleInput) -> QueryPlan:
        """
        Plan the range scans of a rectangle query.

        Raises:
            InvalidInputError: If a corner is missing
        """
        region = rect_from_corners(query_input.min_point, query_input.max_point)
        if region is None:
            raise InvalidInputError(
                "rectangle query requires both min_point and max_point"
            )
        return self._plan(region)

    def plan_radius(self, query_input: QueryRadiusInput) -> QueryPlan:
        """
        Plan the range scans of a radius query.

        Raises:
            InvalidInputError: If the center is missing or the radius is not positive
        """
        region = bounding_rect_for_radius(
            query_input.center_point, query_input.radius_in_meter
        )
        return self._plan(region)

    # =========================================================================
    # Queries
    # =========================================================================

    def query_rectangle(self, query_input: QueryRectangleInput) -> List[Dict[str, Any]]:
        """
        Find records inside a rectangle, bounds inclusive.

        Args:
            query_input: Corners and optional scan overrides

        Returns:
            Matching records
        """
        plan = self.plan_rectangle(query_input)
        records = self._run(plan, query_input.query_overrides)
        result = filter_by_rectangle(
            records,
            query_input.min_point,
            query_input.max_point,
            attribute_name=self.config.geojson_attribute_name,
            longitude_first=self.config.longitude_first,
        )
        logger.info(
            f"Rectangle query: {len(result)} of {len(records)} scanned records "
            f"matched ({plan.covering.cell_count()} cells, {plan.scan_count} scans)"
        )
        return result

    def query_radius(self, query_input: QueryRadiusInput) -> List[Dict[str, Any]]:
        """
        Find records within a distance of a center point.

        Args:
            query_input: Center, radius in meters and optional scan overrides

        Returns:
            Matching records
        """
        plan = self.plan_radius(query_input)
        records = self._run(plan, query_input.query_overrides)
        result = filter_by_radius(
            records,
            query_input.center_point,
            query_input.radius_in_meter,
            attribute_name=self.config.geojson_attribute_name,
            longitude_first=self.config.longitude_first,
        )
        logger.info(
            f"Radius query: {len(result)} of {len(records)} scanned records "
            f"matched ({plan.covering.cell_count()} cells, {plan.scan_count} scans)"
        )
        return result

    def _run(self, plan: QueryPlan, overrides: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Scan all planned ranges and return the deduplicated records."""
        records = self.dispatch_queries(plan, overrides)
        return dedupe_records(
            records,
            self.config.hash_key_attribute_name,
            self.config.range_key_attribute_name,
        )

    def dispatch_queries(
        self,
        plan: QueryPlan,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Run every planned range scan concurrently.

        Results are collected by the calling thread as scans finish. The
        first failure cancels queued scans, tells running scans to stop
        before their next page and is re-raised.

        Args:
            plan: Query plan
            overrides: Extra scan request parameters

        Returns:
            Records from all ranges, in completion order
        """
        if not plan.ranges:
            return []

        overrides = dict(overrides or {})
        for name in _RESERVED_QUERY_PARAMETERS:
            if name in overrides:
                logger.warning(f"Ignoring query override {name}; pagination sets it")
                overrides.pop(name)

        cancelled = threading.Event()
        records: List[Dict[str, Any]] = []
        start_time = time.time()
        max_workers = min(self.config.max_workers, len(plan.ranges))
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=max_workers)

        try:
            futures = {
                executor.submit(
                    self.query_range,
                    plan.partition_key_of(geohash_range),
                    geohash_range,
                    overrides,
                    cancelled,
                ): geohash_range
                for geohash_range in plan.ranges
            }

            for future in concurrent.futures.as_completed(futures):
                geohash_range = futures[future]
                try:
                    records.extend(future.result())
                except Exception as e:
                    logger.error(
                        f"Range scan {geohash_range.range_min}..{geohash_range.range_max} "
                        f"failed, abandoning query: {e}"
                    )
                    cancelled.set()
                    raise
        finally:
            executor.shutdown(wait=not cancelled.is_set(), cancel_futures=True)

        logger.debug(
            f"Scanned {len(plan.ranges)} ranges, {len(records)} records "
            f"in {time.time() - start_time:.3f}s"
        )
        return records

    def query_range(
        self,
        hash_key: int,
        geohash_range: GeohashRange,
        overrides: Optional[Dict[str, Any]] = None,
        cancelled: Optional[threading.Event] = None,
    ) -> List[Dict[str, Any]]:
        """
        Scan one range, following continuation keys to the last page.

        Args:
            hash_key: Partition key of the range
            geohash_range: Range to scan
            overrides: Extra scan request parameters
            cancelled: Set when the query was abandoned

        Returns:
            Records of the range; incomplete only if cancelled
        """
        items: List[Dict[str, Any]] = []
        start_key = None
        pages = 0

        while True:
            if cancelled is not None and cancelled.is_set():
                logger.debug(
                    f"Scan of {geohash_range.range_min}..{geohash_range.range_max} "
                    f"cancelled after {pages} pages"
                )
                return items

            page = self.store.query_page(
                hash_key,
                geohash_range,
                exclusive_start_key=start_key,
                overrides=overrides,
            )
            pages += 1
            items.extend(page.items)

            if not page.has_more:
                break
            start_key = page.last_evaluated_key

        logger.debug(
            f"Range {geohash_range.range_min}..{geohash_range.range_max} "
            f"(hash key {hash_key}): {len(items)} records in {pages} pages"
        )
        return items
