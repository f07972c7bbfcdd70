"""
Pytest configuration and fixtures for geoindex tests.

Markers:
    @pytest.mark.slow - Tests that take longer to run
    @pytest.mark.cli - Command-line interface tests

Usage:
    pytest -m "not slow"         # Skip slow tests
    pytest -m cli                # Run only CLI tests
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from geoindex.config import GeoDataManagerConfiguration
from geoindex.model.point import GeoPoint, PutPointInput
from geoindex.query.manager import GeoDataManager
from geoindex.storage.memory import MemoryGeoStore


CAPITALS = [
    {"country": "United Kingdom", "capital": "London", "latitude": 51.51, "longitude": -0.13},
    {"country": "France", "capital": "Paris", "latitude": 48.8566, "longitude": 2.3522},
    {"country": "Belgium", "capital": "Brussels", "latitude": 50.85, "longitude": 4.35},
    {"country": "Netherlands", "capital": "Amsterdam", "latitude": 52.37, "longitude": 4.89},
    {"country": "Ireland", "capital": "Dublin", "latitude": 53.35, "longitude": -6.26},
]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: Slow-running tests")
    config.addinivalue_line("markers", "cli: Command-line interface tests")


def pytest_collection_modifyitems(config, items):
    """Auto-apply markers based on test file names."""
    for item in items:
        if "cli" in item.fspath.basename:
            item.add_marker(pytest.mark.cli)


@pytest.fixture
def memory_config():
    """Configuration for an in-memory table with tiny pages."""
    return GeoDataManagerConfiguration(
        table_name="test-capitals",
        store_type="memory",
        hash_key_length=3,
        consistent_read=True,
        page_size=1,
    )


@pytest.fixture
def memory_store(memory_config):
    """Empty in-memory store."""
    return MemoryGeoStore(memory_config)


@pytest.fixture
def manager(memory_config, memory_store):
    """Manager backed by the in-memory store."""
    return GeoDataManager(memory_config, store=memory_store)


@pytest.fixture
def capitals():
    """Sample capital cities."""
    return [dict(c) for c in CAPITALS]


@pytest.fixture
def loaded_manager(manager, capitals):
    """Manager whose table holds the sample capitals."""
    for index, capital in enumerate(capitals):
        manager.put_point(
            PutPointInput(
                range_key_value=str(index),
                geo_point=GeoPoint(capital["latitude"], capital["longitude"]),
                item={"country": capital["country"], "capital": capital["capital"]},
            )
        )
    return manager
