import itertools
from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.settings import Settings
from app.storage.mongo_store import TaskStore

ALLOWED_ORIGIN = "https://tasks.example.com"
TOKEN = "s3cret-token"


def make_settings(**overrides) -> Settings:
    values = {
        "MONGO_URI": "mongodb://localhost:27017/todo_test",
        "ALLOWED_ORIGINS": f"{ALLOWED_ORIGIN},http://localhost:3000",
        "API_TOKEN": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def ticking_clock(step_seconds: int = 1):
    """Clock that moves forward on every call, so timestamps are strictly ordered."""
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    counter = itertools.count()
    return lambda: start + timedelta(seconds=next(counter) * step_seconds)


@pytest.fixture
def collection():
    coll = mongomock.MongoClient().todo_test.tasks
    coll.drop()
    return coll


@pytest.fixture
def store(collection):
    return TaskStore(collection, clock=ticking_clock())


@pytest.fixture
def client(store):
    app = create_app(make_settings(), store=store)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_client(store):
    app = create_app(make_settings(API_TOKEN=TOKEN), store=store)
    with TestClient(app) as c:
        yield c
