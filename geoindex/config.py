"""
Configuration for the geospatial index.

One GeoDataManagerConfiguration describes one table: attribute names, the
partition key length, the point payload format and the query tuning knobs.
The same configuration must be used for writes and queries, since the
partition key length and coordinate order decide where points are stored
and how they are read back.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from geoindex.exceptions import ConfigurationError, InvalidInputError
from geoindex.s2.coverer import CoveringParameters

logger = logging.getLogger(__name__)

MERGE_THRESHOLD = 2

STORE_TYPES = ("dynamodb", "memory")

ENV_PREFIX = "GEOINDEX_"

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class GeoDataManagerConfiguration:
    """
    Complete configuration for a geo table.

    Attributes:
        table_name: Name of the table
        consistent_read: Use strongly consistent reads for queries
        hash_key_attribute_name: Partition key attribute
        range_key_attribute_name: Sort key attribute (caller supplied values)
        geohash_attribute_name: Attribute holding the leaf cell id
        geojson_attribute_name: Attribute holding the serialized point
        geohash_index_name: Secondary index ordered by the geohash attribute
        hash_key_length: Number of leading cell id digits in the partition key
        longitude_first: Store coordinates as [lon, lat] (GeoJSON order).
            Use False for [lat, lon] data written by older clients. Must
            match the data already in the table.
        geojson_point_type: Value of the "type" member of written points.
            Only used on writes.
        merge_ranges: Coalesce nearly adjacent ranges before scanning
        merge_threshold: Largest gap between ranges that is coalesced
        max_workers: Concurrent range scans per query
        covering: Region covering parameters
        store_type: Store backend ("dynamodb" or "memory")
        region: AWS region
        endpoint_url: Custom endpoint (DynamoDB Local)
        credentials: Access key configuration
        page_size: Page size of the memory store
    """

    table_name: str
    consistent_read: bool = False
    hash_key_attribute_name: str = "hashKey"
    range_key_attribute_name: str = "rangeKey"
    geohash_attribute_name: str = "geohash"
    geojson_attribute_name: str = "geoJson"
    geohash_index_name: str = "geohash-index"
    hash_key_length: int = 2
    longitude_first: bool = True
    geojson_point_type: str = "Point"
    merge_ranges: bool = True
    merge_threshold: int = MERGE_THRESHOLD
    max_workers: int = 10
    covering: CoveringParameters = field(default_factory=CoveringParameters)
    store_type: str = "dynamodb"
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    credentials: Optional[Dict[str, str]] = None
    page_size: Optional[int] = None

    def __post_init__(self):
        """Validate configuration."""
        if not self.table_name:
            raise InvalidInputError("table_name is required")
        if self.hash_key_length < 1:
            raise InvalidInputError(
                f"hash_key_length must be >= 1, got {self.hash_key_length}"
            )
        if self.merge_threshold < 0:
            raise InvalidInputError(
                f"merge_threshold must be >= 0, got {self.merge_threshold}"
            )
        if self.max_workers < 1:
            raise InvalidInputError(
                f"max_workers must be >= 1, got {self.max_workers}"
            )
        if self.store_type not in STORE_TYPES:
            raise InvalidInputError(
                f"store_type must be one of {', '.join(STORE_TYPES)}, "
                f"got {self.store_type}"
            )
        if self.page_size is not None and self.page_size < 1:
            raise InvalidInputError(f"page_size must be >= 1, got {self.page_size}")

        protected = {
            self.geohash_attribute_name.lower(),
            self.geojson_attribute_name.lower(),
        }
        keys = {
            self.hash_key_attribute_name.lower(),
            self.range_key_attribute_name.lower(),
        }
        if len(protected) != 2 or protected & keys:
            raise InvalidInputError(
                "geohash, geoJson, hash key and range key attributes must be distinct"
            )

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "GeoDataManagerConfiguration":
        """
        Create configuration from dictionary.

        Args:
            config_dict: Configuration dictionary. The optional "covering"
                entry holds CoveringParameters fields.

        Returns:
            GeoDataManagerConfiguration instance
        """
        values = dict(config_dict)
        covering = CoveringParameters(**values.pop("covering", None) or {})

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(unknown)}"
            )

        return cls(covering=covering, **values)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "GeoDataManagerConfiguration":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            GeoDataManagerConfiguration instance
        """
        path = Path(yaml_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {yaml_path}")

        with open(path, "r") as f:
            try:
                config_dict = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML: {e}", source=str(path)) from e

        # Extract geoindex section if present
        if "geoindex" in config_dict:
            config_dict = config_dict["geoindex"]

        return cls.from_dict(config_dict)

    @classmethod
    def from_environment(
        cls,
        base: Optional["GeoDataManagerConfiguration"] = None,
    ) -> "GeoDataManagerConfiguration":
        """
        Apply environment variable overrides.

        Environment variables:
        - GEOINDEX_TABLE_NAME
        - GEOINDEX_HASH_KEY_LENGTH
        - GEOINDEX_CONSISTENT_READ
        - GEOINDEX_LONGITUDE_FIRST
        - GEOINDEX_MAX_WORKERS
        - GEOINDEX_MAX_CELLS
        - GEOINDEX_STORE_TYPE
        - GEOINDEX_REGION
        - GEOINDEX_ENDPOINT_URL

        Args:
            base: Configuration to start from. Without it GEOINDEX_TABLE_NAME
                is required.

        Returns:
            GeoDataManagerConfiguration instance
        """
        values = base.to_dict() if base else {}
        env = os.environ

        if env.get(f"{ENV_PREFIX}TABLE_NAME"):
            values["table_name"] = env[f"{ENV_PREFIX}TABLE_NAME"]
        if not values.get("table_name"):
            raise ConfigurationError(
                f"{ENV_PREFIX}TABLE_NAME is not set", source="environment"
            )

        for name in ("store_type", "region", "endpoint_url"):
            if env.get(f"{ENV_PREFIX}{name.upper()}"):
                values[name] = env[f"{ENV_PREFIX}{name.upper()}"]

        for name in ("consistent_read", "longitude_first"):
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                flag = raw.strip().lower()
                if flag in TRUE_VALUES:
                    values[name] = True
                elif flag in FALSE_VALUES:
                    values[name] = False
                else:
                    raise ConfigurationError(
                        f"{ENV_PREFIX}{name.upper()} must be a boolean, got {raw!r}",
                        source="environment",
                    )

        for name in ("hash_key_length", "max_workers"):
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                try:
                    values[name] = int(raw)
                except ValueError:
                    raise ConfigurationError(
                        f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}",
                        source="environment",
                    )

        raw = env.get(f"{ENV_PREFIX}MAX_CELLS")
        if raw:
            try:
                values.setdefault("covering", {})["max_cells"] = int(raw)
            except ValueError:
                raise ConfigurationError(
                    f"{ENV_PREFIX}MAX_CELLS must be an integer, got {raw!r}",
                    source="environment",
                )

        return cls.from_dict(values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "table_name": self.table_name,
            "consistent_read": self.consistent_read,
            "hash_key_attribute_name": self.hash_key_attribute_name,
            "range_key_attribute_name": self.range_key_attribute_name,
            "geohash_attribute_name": self.geohash_attribute_name,
            "geojson_attribute_name": self.geojson_attribute_name,
            "geohash_index_name": self.geohash_index_name,
            "hash_key_length": self.hash_key_length,
            "longitude_first": self.longitude_first,
            "geojson_point_type": self.geojson_point_type,
            "merge_ranges": self.merge_ranges,
            "merge_threshold": self.merge_threshold,
            "max_workers": self.max_workers,
            "covering": self.covering.to_dict(),
            "store_type": self.store_type,
            "region": self.region,
            "endpoint_url": self.endpoint_url,
            "credentials": self.credentials,
            "page_size": self.page_size,
        }


def load_config(
    yaml_path: Optional[str] = None,
    use_environment: bool = True,
) -> GeoDataManagerConfiguration:
    """
    Load configuration with fallbacks.

    Attempts to load configuration in order:
    1. From specified YAML path (if provided)
    2. From default config paths
    3. Environment variable overrides on top of whichever was found

    Args:
        yaml_path: Optional explicit path to YAML config
        use_environment: Whether to apply environment variable overrides

    Returns:
        GeoDataManagerConfiguration instance

    Raises:
        FileNotFoundError: If an explicit yaml_path does not exist
        ConfigurationError: If no table name can be determined
    """
    config = None

    if yaml_path:
        config = GeoDataManagerConfiguration.from_yaml(yaml_path)

    if config is None:
        default_paths = [
            Path("geoindex.yaml"),
            Path("config/geoindex.yaml"),
            Path.home() / ".geoindex" / "config.yaml",
        ]
        for path in default_paths:
            if path.exists():
                config = GeoDataManagerConfiguration.from_yaml(str(path))
                logger.debug(f"Loaded config from {path}")
                break

    if use_environment:
        return GeoDataManagerConfiguration.from_environment(base=config)

    if config is None:
        raise ConfigurationError("No configuration file found and environment disabled")
    return config
