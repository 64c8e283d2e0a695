"""공용 테스트 픽스처"""

import pytest

from helpers import MutableClock
from websearch.models.config import SearchConfig
from websearch.storage.cache import SearchCache
from websearch.storage.database import CacheDatabase


@pytest.fixture
def clock():
    return MutableClock()


@pytest.fixture
def database():
    db = CacheDatabase(":memory:").open()
    yield db
    db.close()


@pytest.fixture
def cache(database, clock):
    return SearchCache(database, SearchConfig(db_path=":memory:"), clock=clock)
