"""Shared pytest fixtures."""

import copy
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any
from uuid import UUID

import pytest

from blogsmith.config import Config
from blogsmith.core.core import Services
from blogsmith.core.modules.user.models import User
from blogsmith.core.modules.workflow.coalescer import SessionCoalescer


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: int = 0) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance_minutes(self, minutes: float) -> None:
        self.now += int(minutes * 60_000)


class FakeCursor:
    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = documents

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._documents = sorted(self._documents, key=lambda d: d[key], reverse=direction < 0)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._documents = self._documents[count:]
        return self

    def limit(self, count: int) -> "FakeCursor":
        if count:
            self._documents = self._documents[:count]
        return self

    async def _iterate(self):
        for document in self._documents:
            yield document

    def __aiter__(self):
        return self._iterate()


class FakeCollection:
    """In-memory stand-in for an async Mongo collection; queries match on equality only."""

    def __init__(self) -> None:
        self.documents: list[dict[str, Any]] = []

    async def create_index(self, *args: Any, **kwargs: Any) -> str:
        return "index"

    async def insert_one(self, document: dict[str, Any]) -> SimpleNamespace:
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        document = self._first(query)
        return copy.deepcopy(document) if document is not None else None

    def find(self, query: dict[str, Any] | None = None) -> FakeCursor:
        return FakeCursor([copy.deepcopy(d) for d in self.documents if self._matches(d, query or {})])

    async def count_documents(self, query: dict[str, Any]) -> int:
        return sum(1 for d in self.documents if self._matches(d, query))

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> None:
        document = self._first(query)
        if document is not None:
            self._apply(document, update)

    async def find_one_and_update(
        self, query: dict[str, Any], update: dict[str, Any], return_document: Any = None
    ) -> dict[str, Any] | None:
        document = self._first(query)
        if document is None:
            return None
        self._apply(document, update)
        return copy.deepcopy(document)

    async def delete_one(self, query: dict[str, Any]) -> None:
        document = self._first(query)
        if document is not None:
            self.documents.remove(document)

    def _first(self, query: dict[str, Any]) -> dict[str, Any] | None:
        return next((d for d in self.documents if self._matches(d, query)), None)

    @staticmethod
    def _matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
        return all(document.get(key) == value for key, value in query.items())

    @staticmethod
    def _apply(document: dict[str, Any], update: dict[str, Any]) -> None:
        for key, value in update.get("$set", {}).items():
            document[key] = value
        for key, value in update.get("$inc", {}).items():
            document[key] = document.get(key, 0) + value


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def clock():
    """Clock starting at a fixed epoch millisecond."""
    return FakeClock(start=1_700_000_000_000)


@pytest.fixture
def config():
    """Config that does not depend on the environment."""
    return Config(
        _env_file=None,
        database_url="mongodb://localhost:27017/blogsmith_test",
        session_secret_key="test-secret",
        llm_api_key="test-llm-key",
        rephrasy_api_key="test-rephrasy-key",
    )


@pytest.fixture
def core(config, clock):
    """All services wired together over an in-memory database."""
    database = FakeDatabase()
    services = Services(database)  # type: ignore[arg-type]
    services.workflow.coalescer = SessionCoalescer(clock=clock)
    core = SimpleNamespace(config=config, database=database, services=services)
    services.set_core(core)  # type: ignore[arg-type]
    return core


@pytest.fixture
def mock_user():
    """Create an approved, non-admin user for testing."""
    return User(
        id=UUID("87654321-4321-8765-4321-876543218765"),
        email="writer@example.com",
        password_hash="$2b$12$hashed_password_here",
        full_name="Test Writer",
        is_approved=True,
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
    )
