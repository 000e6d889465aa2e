"""
Pytest configuration and shared fixtures.
"""

import itertools
from typing import Any, Dict

import pytest

from portability.job_manager import JobManager
from portability.logger import reset_logger
from portability.storage import InMemoryKeyValueStore


class SequentialIdProvider:
    """Predictable ids: id-1, id-2, ..."""

    def __init__(self):
        self._counter = itertools.count(1)
        self.issued = []

    def create_id(self) -> str:
        new_id = f"id-{next(self._counter)}"
        self.issued.append(new_id)
        return new_id


class PrefixTokenManager:
    """Token derived from the id so tests can predict it."""

    def create_new_token(self, job_id: str) -> str:
        return f"token-for-{job_id}"


class FailingStore(InMemoryKeyValueStore):
    """Store whose writes fail like an unreachable disk."""

    def put(self, key, data):
        raise OSError("disk unavailable")


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def id_provider() -> SequentialIdProvider:
    return SequentialIdProvider()


@pytest.fixture
def token_manager() -> PrefixTokenManager:
    return PrefixTokenManager()


@pytest.fixture
def manager(store, id_provider, token_manager) -> JobManager:
    return JobManager(store, id_provider, token_manager)


@pytest.fixture
def failing_manager(id_provider) -> JobManager:
    return JobManager(FailingStore(), id_provider, PrefixTokenManager())


@pytest.fixture
def full_job_data() -> Dict[str, Any]:
    """Stored mapping with every field set."""
    return {
        "UUID": "id-42",
        "TOKEN": "token-42",
        "DATA_TYPE": "PHOTOS",
        "EXPORT_SERVICE": "flickr",
        "EXPORT_ACCOUNT": "alice@flickr",
        "EXPORT_INITIAL_AUTH_DATA": {"request_token": "abc"},
        "EXPORT_AUTH_DATA": {"access_token": "xyz", "secret": "s3"},
        "IMPORT_SERVICE": "google",
        "IMPORT_ACCOUNT": "alice@gmail.com",
        "IMPORT_INITIAL_AUTH_DATA": {"code": "123"},
        "IMPORT_AUTH_DATA": {"refresh_token": "r-1"},
    }


@pytest.fixture(autouse=True)
def fresh_logger():
    """Each test gets its own global logger."""
    reset_logger()
    yield
    reset_logger()
