"""Pytest configuration and fixtures."""

from typing import Optional

import pytest
import pytest_asyncio

from imaginify_store.caching.revalidation import RevalidationService
from imaginify_store.config import DatabaseConfig
from imaginify_store.database.connection import ConnectionManager

from .fakes import FakeClientFactory


TEST_MONGODB_URL = "mongodb://localhost:27017"


def make_settings(url: Optional[str] = TEST_MONGODB_URL) -> DatabaseConfig:
    return DatabaseConfig(_env_file=None, MONGODB_URL=url)


@pytest.fixture
def settings():
    """Database settings pointing at a test endpoint."""
    return make_settings()


@pytest.fixture
def client_factory():
    """Client factory that succeeds after a short delay."""
    return FakeClientFactory(delay=0.01)


@pytest.fixture
def manager(settings, client_factory):
    """Connection manager backed by the in-memory client."""
    return ConnectionManager(settings, client_factory=client_factory)


@pytest_asyncio.fixture
async def db(manager):
    """The in-memory database behind ``manager``."""
    return await manager.acquire()


@pytest.fixture
def revalidator():
    """A fresh revalidation service per test."""
    return RevalidationService()
