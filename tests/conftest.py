"""Shared fixtures for the storage tests."""

import pytest

from booktracker.storage.base import StorageBackend
from booktracker.storage.dynamodb import DynamoDBBackend
from booktracker.storage.memory import InMemoryBackend
from booktracker.storage.repository import BookRepository
from helpers import TABLE_NAME, FakeDynamoDBClient


@pytest.fixture
def fake_client() -> FakeDynamoDBClient:
    return FakeDynamoDBClient()


@pytest.fixture(params=["memory", "dynamodb"])
def backend(request: pytest.FixtureRequest) -> StorageBackend:
    if request.param == "memory":
        return InMemoryBackend()
    return DynamoDBBackend(FakeDynamoDBClient(), TABLE_NAME)


@pytest.fixture
def repository(backend: StorageBackend) -> BookRepository:
    return BookRepository(backend)
