"""
DynamoDB store backend.

Uses the boto3 resource API, so items are plain Python values with
numbers as Decimal. Range scans run against the geohash secondary index
with a key condition of partition key equality and geohash BETWEEN.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from boto3.dynamodb.types import TypeSerializer
from botocore.config import Config as BotoConfig

from geoindex.config import GeoDataManagerConfiguration
from geoindex.model.geohash_range import GeohashRange
from geoindex.storage.base import BATCH_WRITE_LIMIT, GeoStoreBackend, ScanPage
from geoindex.storage.memory import MemoryGeoStore

logger = logging.getLogger(__name__)


def to_dynamo_value(value: Any) -> Any:
    """Convert floats (also nested) to Decimal for the resource API."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo_value(v) for v in value]
    return value


class DynamoDBGeoStore(GeoStoreBackend):
    """
    DynamoDB table backend.

    Works against AWS or DynamoDB Local (via endpoint_url). Retries are
    left to botocore's retry configuration.
    """

    def __init__(
        self,
        config: GeoDataManagerConfiguration,
        table: Any = None,
        resource: Any = None,
    ):
        """
        Initialize DynamoDB store.

        Args:
            config: Table configuration
            table: Existing boto3 Table object to use
            resource: Existing boto3 DynamoDB service resource to use
        """
        super().__init__(config)
        self._resource = resource
        self._table = table
        if self._table is None:
            if self._resource is None:
                self._init_resource()
            self._table = self._resource.Table(config.table_name)
        logger.info(
            f"Initialized DynamoDB store for table {config.table_name} "
            f"(index={config.geohash_index_name})"
        )

    def _init_resource(self):
        """Initialize boto3 DynamoDB resource."""
        boto_config = BotoConfig(
            retries={"max_attempts": 3},
            connect_timeout=30,
            read_timeout=30,
            max_pool_connections=max(10, self.config.max_workers),
        )

        kwargs = {"config": boto_config}

        if self.config.endpoint_url:
            kwargs["endpoint_url"] = self.config.endpoint_url

        if self.config.region:
            kwargs["region_name"] = self.config.region

        if self.config.credentials:
            kwargs["aws_access_key_id"] = self.config.credentials.get("access_key_id")
            kwargs["aws_secret_access_key"] = self.config.credentials.get(
                "secret_access_key"
            )

        self._resource = boto3.resource("dynamodb", **kwargs)

    @property
    def table(self) -> Any:
        return self._table

    def query_page(
        self,
        hash_key: int,
        geohash_range: GeohashRange,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> ScanPage:
        """Fetch one page of records in a partition between two geohashes."""
        key_condition = Key(self.config.hash_key_attribute_name).eq(hash_key) & Key(
            self.config.geohash_attribute_name
        ).between(geohash_range.range_min, geohash_range.range_max)

        params = {
            "KeyConditionExpression": key_condition,
            "IndexName": self.config.geohash_index_name,
            "ConsistentRead": self.config.consistent_read,
            "ReturnConsumedCapacity": "TOTAL",
        }
        if exclusive_start_key:
            params["ExclusiveStartKey"] = exclusive_start_key
        params.update(overrides or {})
        if "ExpressionAttributeValues" in params:
            params["ExpressionAttributeValues"] = to_dynamo_value(
                params["ExpressionAttributeValues"]
            )

        response = self._table.query(**params)
        return ScanPage(
            items=response.get("Items", []),
            last_evaluated_key=response.get("LastEvaluatedKey"),
            consumed_capacity=response.get("ConsumedCapacity"),
        )

    def put_item(
        self,
        item: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Write a complete item."""
        params = dict(overrides or {})
        params["Item"] = to_dynamo_value(item)
        return self._table.put_item(**params)

    def get_item(
        self,
        key: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Fetch an item by key."""
        params = dict(overrides or {})
        params["Key"] = to_dynamo_value(key)
        return self._table.get_item(**params)

    def update_item(
        self,
        key: Dict[str, Any],
        update: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Apply update parameters to an item."""
        params = dict(update)
        params["Key"] = to_dynamo_value(key)
        for name in ("AttributeUpdates", "ExpressionAttributeValues"):
            if name in params:
                params[name] = to_dynamo_value(params[name])
        return self._table.update_item(**params)

    def delete_item(
        self,
        key: Dict[str, Any],
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Delete an item by key."""
        params = dict(overrides or {})
        params["Key"] = to_dynamo_value(key)
        return self._table.delete_item(**params)

    def batch_write(self, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Write up to BATCH_WRITE_LIMIT items in one request."""
        if len(items) > BATCH_WRITE_LIMIT:
            raise ValueError(
                f"Batch write accepts at most {BATCH_WRITE_LIMIT} items, got {len(items)}"
            )
        serializer = TypeSerializer()
        request_items = {
            self.config.table_name: [
                {
                    "PutRequest": {
                        "Item": {
                            name: serializer.serialize(value)
                            for name, value in to_dynamo_value(item).items()
                        }
                    }
                }
                for item in items
            ]
        }
        response = self._table.meta.client.batch_write_item(RequestItems=request_items)
        unprocessed = response.get("UnprocessedItems") or {}
        if unprocessed:
            logger.warning(
                f"Batch write left {len(unprocessed.get(self.config.table_name, []))} "
                f"unprocessed items"
            )
        return response


def create_geo_store(config: GeoDataManagerConfiguration) -> GeoStoreBackend:
    """
    Factory function to create the configured store backend.

    Args:
        config: Table configuration

    Returns:
        GeoStoreBackend instance

    Raises:
        ValueError: If store type is not supported
    """
    if config.store_type == "dynamodb":
        return DynamoDBGeoStore(config)
    elif config.store_type == "memory":
        return MemoryGeoStore(config)
    else:
        raise ValueError(f"Unsupported store type: {config.store_type}")
