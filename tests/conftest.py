import os

# Settings() is built at import time; give it what it needs before anything imports authserver
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RATE_AUTH_PER_MIN", "1000")
os.environ.pop("NODE_ENV", None)
os.environ.pop("FRONTEND_URL", None)

import copy  # noqa: E402
import logging  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from pymongo.errors import DuplicateKeyError  # noqa: E402

from authserver.config import Settings  # noqa: E402
from authserver.main import create_app  # noqa: E402
from authserver.utils.logging import RequestIdFilter, logger  # noqa: E402


class FakeUsers:
    """Just enough of an AsyncIOMotorCollection for the users queries."""

    def __init__(self):
        self.docs = {}

    async def find_one(self, query, projection=None):
        for doc in self.docs.values():
            if all(doc.get(k) == v for k, v in query.items()):
                found = copy.deepcopy(doc)
                for field, keep in (projection or {}).items():
                    if not keep:
                        found.pop(field, None)
                return found
        return None

    async def insert_one(self, doc):
        if doc["_id"] in self.docs or any(d["email"] == doc["email"] for d in self.docs.values()):
            raise DuplicateKeyError("E11000 duplicate key error")
        self.docs[doc["_id"]] = copy.deepcopy(doc)

    async def create_index(self, *args, **kwargs):
        return kwargs.get("name")


class FakeDB:
    def __init__(self):
        self.users = FakeUsers()


@pytest.fixture
def make_client():
    """Build an app with its own settings and an in-memory users collection."""

    def _make(db=True, **overrides):
        settings = Settings(JWT_SECRET="test-secret", **overrides)
        app = create_app(settings)
        if db:
            app.state.db = FakeDB()
        # CORS rejections and downstream errors must come back as 500s, not raise
        return TestClient(app, raise_server_exceptions=False)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def fake_db():
    return FakeDB()


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def log_records():
    """Records emitted on the app logger (it does not propagate, so caplog sees nothing)."""
    handler = _ListHandler()
    handler.addFilter(RequestIdFilter())
    logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)
