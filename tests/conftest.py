"""Shared pytest fixtures."""

from datetime import UTC, datetime
from functools import partial
from types import SimpleNamespace
from typing import Any

import pytest

from harborops.config import Config
from harborops.core.modules.filter.query_builder import FieldIndex
from harborops.core.modules.filter.service import FilterService
from harborops.core.modules.preset.service import FilterPresetService
from harborops.core.modules.resource.registry import get_resource
from harborops.core.modules.resource.service import ResourceService


def _field_value(document: dict[str, Any], field: str) -> Any:
    return document.get(field)


def _matches_operators(value: Any, operators: dict[str, Any]) -> bool:
    for operator, operand in operators.items():
        match operator:
            case "$eq" if value != operand:
                return False
            case "$ne" if value == operand:
                return False
            case "$in" if value not in operand:
                return False
    return True


def _matches(document: dict[str, Any], query: dict[str, Any]) -> bool:
    """Subset of MongoDB matching: equality, $eq, $ne, $in, $and and $or."""
    for key, expected in query.items():
        if key == "$or":
            if not any(_matches(document, clause) for clause in expected):
                return False
        elif key == "$and":
            if not all(_matches(document, clause) for clause in expected):
                return False
        elif isinstance(expected, dict) and expected and all(name.startswith("$") for name in expected):
            if not _matches_operators(document.get(key), expected):
                return False
        elif document.get(key) != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, documents: list[dict[str, Any]]) -> None:
        self._documents = documents

    def sort(self, key: str | list[tuple[str, int]], direction: int = 1) -> "FakeCursor":
        spec = key if isinstance(key, list) else [(key, direction)]
        for field, field_direction in reversed(spec):
            self._documents.sort(key=partial(_field_value, field=field), reverse=field_direction < 0)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._documents = self._documents[count:]
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._documents = self._documents[:count]
        return self

    async def to_list(self) -> list[dict[str, Any]]:
        return list(self._documents)

    def __aiter__(self) -> "FakeCursor":
        self._iterator = iter(self._documents)
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return next(self._iterator)
        except StopIteration:
            raise StopAsyncIteration from None


class FakeCollection:
    """In-memory stand-in for an async pymongo collection."""

    def __init__(self) -> None:
        self.documents: list[dict[str, Any]] = []
        self.indexes: list[Any] = []
        self.find_calls = 0

    def find(self, query: dict[str, Any]) -> FakeCursor:
        self.find_calls += 1
        return FakeCursor([dict(doc) for doc in self.documents if _matches(doc, query)])

    async def count_documents(self, query: dict[str, Any]) -> int:
        return sum(1 for doc in self.documents if _matches(doc, query))

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self.documents:
            if _matches(doc, query):
                return dict(doc)
        return None

    async def insert_one(self, document: dict[str, Any]) -> None:
        self.documents.append(dict(document))

    async def replace_one(self, query: dict[str, Any], document: dict[str, Any]) -> None:
        for index, doc in enumerate(self.documents):
            if _matches(doc, query):
                self.documents[index] = dict(document)
                return

    async def delete_one(self, query: dict[str, Any]) -> None:
        self.documents = [doc for doc in self.documents if not _matches(doc, query)]

    async def create_index(self, keys: Any) -> None:
        self.indexes.append(keys)


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


@pytest.fixture
def now():
    """Fixed moment for relative dates: Wednesday 2025-01-15 13:45 UTC."""
    return datetime(2025, 1, 15, 13, 45, 30, tzinfo=UTC)


@pytest.fixture
def task_fields() -> FieldIndex:
    return get_resource("tasks").field_index


@pytest.fixture
def server_fields() -> FieldIndex:
    return get_resource("servers").field_index


@pytest.fixture
def config():
    return Config(database_url="mongodb://localhost:27017/harborops_test")


@pytest.fixture
def fake_database():
    return FakeDatabase()


@pytest.fixture
def preset_service(fake_database, config):
    """Preset service wired to an in-memory collection and a real filter service."""
    service = FilterPresetService(fake_database)
    filter_service = FilterService(fake_database)
    core = SimpleNamespace(config=config, services=SimpleNamespace(filter=filter_service, preset=service))
    service.set_core(core)
    filter_service.set_core(core)
    return service


@pytest.fixture
def resource_service(fake_database, config):
    """Resource listing service over in-memory collections."""
    service = ResourceService(fake_database)
    filter_service = FilterService(fake_database)
    core = SimpleNamespace(config=config, services=SimpleNamespace(filter=filter_service, resource=service))
    service.set_core(core)
    filter_service.set_core(core)
    return service
