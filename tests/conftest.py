import copy

import pytest

from content_mapper.engine import MappingEngine
from content_mapper.models import SAMPLE_DATA, WritePolicy
from content_mapper.session import ModelSession
from content_mapper.store import ContentStore

FEED = {
    "data": [
        {"feed": {"id": 1, "url": "u1"}},
        {"feed": {"id": 2, "url": "u2"}},
    ]
}


@pytest.fixture
def feed():
    return copy.deepcopy(FEED)


@pytest.fixture
def sample():
    return copy.deepcopy(SAMPLE_DATA)


@pytest.fixture
def store():
    return ContentStore()


@pytest.fixture
def policy():
    return WritePolicy()


@pytest.fixture
def engine(store, policy):
    return MappingEngine(store, policy)


@pytest.fixture
def session():
    with ModelSession() as active:
        yield active
