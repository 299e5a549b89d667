"""Integration tests against a live MongoDB.

Run with ``MONGODB_TEST_URL=mongodb://localhost:27017 pytest -m integration``.
"""

import os
import uuid

import pytest

from imaginify_store.actions import create_user, delete_user, get_user_by_id, update_credits
from imaginify_store.caching.revalidation import RevalidationService
from imaginify_store.config import DatabaseConfig
from imaginify_store.database.connection import ConnectionManager
from imaginify_store.database.init import DatabaseInitializer

MONGODB_TEST_URL = os.getenv("MONGODB_TEST_URL")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not MONGODB_TEST_URL, reason="MONGODB_TEST_URL not set"),
]


@pytest.mark.asyncio
async def test_user_lifecycle_against_live_database():
    """Create, spend credits, delete, all against a real server."""
    settings = DatabaseConfig(_env_file=None, MONGODB_URL=MONGODB_TEST_URL, MONGODB_DATABASE="imaginify_test")
    manager = ConnectionManager(settings)
    clerk_id = f"it-{uuid.uuid4().hex[:8]}"
    
    try:
        await DatabaseInitializer(manager).initialize_all()
        
        created = await create_user(manager, {"clerkId": clerk_id, "email": f"{clerk_id}@example.com"})
        assert created.ok
        
        spent = await update_credits(manager, clerk_id, -3)
        assert spent.value["creditBalance"] == 7
        
        deleted = await delete_user(manager, clerk_id, RevalidationService())
        assert deleted.ok
        
        missing = await get_user_by_id(manager, clerk_id)
        assert not missing.ok
    finally:
        await manager.close()
