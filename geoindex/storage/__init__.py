"""
Store backends for the geospatial index.

Components:
- GeoStoreBackend interface with paginated range scans
- DynamoDB backend (boto3) and an in-memory backend
- Protected attribute checks applied before updates
- Create-table request builder
"""

from geoindex.storage.base import BATCH_WRITE_LIMIT, GeoStoreBackend, ScanPage
from geoindex.storage.dynamodb import DynamoDBGeoStore, create_geo_store
from geoindex.storage.memory import MemoryGeoStore
from geoindex.storage.protection import check_update, find_protected_reference
from geoindex.storage.table import create_table, create_table_request

__all__ = [
    "BATCH_WRITE_LIMIT",
    "GeoStoreBackend",
    "ScanPage",
    "DynamoDBGeoStore",
    "create_geo_store",
    "MemoryGeoStore",
    "check_update",
    "find_protected_reference",
    "create_table",
    "create_table_request",
]
