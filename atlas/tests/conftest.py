"""
Atlas Test Configuration

Fixtures shared by all test modules.
"""

import pytest

from atlas.config import AtlasSettings
from atlas.graph.store import GraphStore
from atlas.tests.fixtures import FIXTURE_DATA_DIR, chain_graph, load_market_graph


@pytest.fixture(scope="session")
def market_data():
    """The on-disk fixture dataset, loaded once."""
    return load_market_graph()


@pytest.fixture
def market_store(market_data):
    return GraphStore(market_data)


@pytest.fixture
def chain_store():
    """A -> B -> C with a disconnected Z."""
    return GraphStore(chain_graph())


@pytest.fixture
def settings():
    """Settings pointing at the fixture dataset, isolated from the environment."""
    return AtlasSettings(data_dir=FIXTURE_DATA_DIR, _env_file=None)
