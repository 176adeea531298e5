import os

os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")

from datetime import datetime, timezone
from fnmatch import fnmatchcase

import pytest
from fastapi.testclient import TestClient
from redis import ConnectionError as RedisConnectionError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from cache import LookupCache, get_lookup_cache
from dependencies import get_session
from main import app
from services.category_service import CategoryService
from services.editor import TopicEditor
from services.tag_service import TagService
from services.topic_service import TopicService


class InMemoryRedis:
    """Just enough of the redis client API for LookupCache"""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, time, value):
        self.store[key] = value
        return True

    def delete(self, *keys):
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    def scan_iter(self, match=None):
        return [key for key in list(self.store) if match is None or fnmatchcase(key, match)]

    def ping(self):
        return True

    def close(self):
        pass


class UnavailableRedis:
    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise RedisConnectionError("Connection refused")
        return fail


@pytest.fixture(scope="session")
def test_db_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

@pytest.fixture
def db_session(test_db_engine):
    SQLModel.metadata.create_all(test_db_engine)
    with Session(test_db_engine) as session:
        yield session
    SQLModel.metadata.drop_all(test_db_engine)

@pytest.fixture
def redis_client():
    return InMemoryRedis()

@pytest.fixture
def cache(redis_client):
    return LookupCache(redis_client, prefix="test")

@pytest.fixture
def tag_service(db_session, cache):
    return TagService(db_session, cache)

@pytest.fixture
def category_service(db_session, cache):
    return CategoryService(db_session, cache)

@pytest.fixture
def topic_service(db_session, cache):
    return TopicService(db_session, cache)

@pytest.fixture
def editor(topic_service, category_service):
    return TopicEditor(topic_service, category_service)

@pytest.fixture
def categories(category_service):
    """Ids of two sample categories: (python, web)"""
    return category_service.add("Python"), category_service.add("Web", "Frontend and backend")

@pytest.fixture
def client(db_session, cache):
    app.dependency_overrides[get_session] = lambda: db_session
    app.dependency_overrides[get_lookup_cache] = lambda: cache
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def day(n, hour=12):
    """A fixed date in January 2024, for ordering topics"""
    return datetime(2024, 1, n, hour, tzinfo=timezone.utc)
