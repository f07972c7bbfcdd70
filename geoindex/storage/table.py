"""
Table provisioning helpers.

Builds the create-table request matching the key layout the query engine
expects: numeric partition key, string sort key, and a local secondary
index that orders each partition by geohash.
"""

import copy
import logging
from typing import Any, Dict, Optional

from geoindex.config import GeoDataManagerConfiguration

logger = logging.getLogger(__name__)

DEFAULT_THROUGHPUT = {"ReadCapacityUnits": 10, "WriteCapacityUnits": 5}


def create_table_request(
    config: GeoDataManagerConfiguration,
    throughput: Optional[Dict[str, int]] = None,
) -> Dict[str, Any]:
    """
    Build a CreateTable request for a geo table.

    Args:
        config: Table configuration
        throughput: Provisioned throughput; defaults to 10 reads / 5 writes

    Returns:
        Request parameters, ready to be adjusted and passed to create_table
    """
    hash_key = config.hash_key_attribute_name
    return {
        "TableName": config.table_name,
        "ProvisionedThroughput": copy.deepcopy(throughput or DEFAULT_THROUGHPUT),
        "KeySchema": [
            {"KeyType": "HASH", "AttributeName": hash_key},
            {"KeyType": "RANGE", "AttributeName": config.range_key_attribute_name},
        ],
        "AttributeDefinitions": [
            {"AttributeName": hash_key, "AttributeType": "N"},
            {"AttributeName": config.range_key_attribute_name, "AttributeType": "S"},
            {"AttributeName": config.geohash_attribute_name, "AttributeType": "N"},
        ],
        "LocalSecondaryIndexes": [
            {
                "IndexName": config.geohash_index_name,
                "KeySchema": [
                    {"KeyType": "HASH", "AttributeName": hash_key},
                    {
                        "KeyType": "RANGE",
                        "AttributeName": config.geohash_attribute_name,
                    },
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    }


def create_table(
    config: GeoDataManagerConfiguration,
    client: Any,
    throughput: Optional[Dict[str, int]] = None,
    wait: bool = True,
) -> Dict[str, Any]:
    """
    Create a geo table and optionally wait until it exists.

    Args:
        config: Table configuration
        client: boto3 DynamoDB client
        throughput: Provisioned throughput
        wait: Block until the table is active

    Returns:
        CreateTable response
    """
    request = create_table_request(config, throughput)
    response = client.create_table(**request)
    logger.info(f"Creating table {config.table_name}")

    if wait:
        client.get_waiter("table_exists").wait(TableName=config.table_name)
        logger.info(f"Table {config.table_name} is active")

    return response
