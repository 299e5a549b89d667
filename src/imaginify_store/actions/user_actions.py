"""Data-access actions for user records.

Every action acquires the database handle from the ``ConnectionManager`` it
is given and returns an ``ActionResult``; lookups are by the external
``clerkId`` identifier.
"""

from typing import Any, Dict, Optional, Union

from pymongo import ReturnDocument

from .result import coerce_params, data_action, serialize
from ..caching.revalidation import RevalidationService, revalidation_service
from ..core.constants import ROOT_PATH, USERS_COLLECTION
from ..database.connection import ConnectionManager
from ..database.schema import CreateUserParams, UpdateUserParams, UserRecord
from ..exceptions import NotFoundError
from ..logging import get_logger

logger = get_logger(__name__)


# CREATE
@data_action
async def create_user(
    manager: ConnectionManager,
    user: Union[CreateUserParams, Dict[str, Any]]
) -> Optional[Dict[str, Any]]:
    """Insert a new user and return it."""
    params = coerce_params(CreateUserParams, user)
    db = await manager.acquire()

    document = params.to_document()
    result = await db[USERS_COLLECTION].insert_one(document)
    document["_id"] = result.inserted_id

    logger.info("User created", clerk_id=params.clerk_id)
    return serialize(UserRecord, document)


# READ
@data_action
async def get_user_by_id(manager: ConnectionManager, user_id: str) -> Optional[Dict[str, Any]]:
    """Find a user by external identifier."""
    db = await manager.acquire()

    user = await db[USERS_COLLECTION].find_one({"clerkId": user_id})
    if not user:
        raise NotFoundError("User not found", {"clerk_id": user_id})

    return serialize(UserRecord, user)


# UPDATE
@data_action
async def update_user(
    manager: ConnectionManager,
    clerk_id: str,
    user: Union[UpdateUserParams, Dict[str, Any]]
) -> Optional[Dict[str, Any]]:
    """Replace the given profile fields and return the updated user."""
    params = coerce_params(UpdateUserParams, user)
    db = await manager.acquire()

    changes = params.to_update()
    if changes:
        updated_user = await db[USERS_COLLECTION].find_one_and_update(
            {"clerkId": clerk_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
    else:
        updated_user = await db[USERS_COLLECTION].find_one({"clerkId": clerk_id})

    if not updated_user:
        raise NotFoundError("User update failed", {"clerk_id": clerk_id})

    logger.info("User updated", clerk_id=clerk_id, fields=sorted(changes))
    return serialize(UserRecord, updated_user)


# DELETE
@data_action
async def delete_user(
    manager: ConnectionManager,
    clerk_id: str,
    revalidator: Optional[RevalidationService] = None
) -> Optional[Dict[str, Any]]:
    """Delete a user and ask the web layer to regenerate the home page.

    Returns the deleted user, or ``None`` if it vanished between lookup and delete.
    """
    db = await manager.acquire()
    users = db[USERS_COLLECTION]

    user_to_delete = await users.find_one({"clerkId": clerk_id})
    if not user_to_delete:
        raise NotFoundError("User not found", {"clerk_id": clerk_id})

    deleted_user = await users.find_one_and_delete({"_id": user_to_delete["_id"]})
    (revalidator or revalidation_service).revalidate_path(ROOT_PATH)

    logger.info("User deleted", clerk_id=clerk_id)
    return serialize(UserRecord, deleted_user)


# USE CREDITS
@data_action
async def update_credits(manager: ConnectionManager, clerk_id: str, credit_fee: int) -> Optional[Dict[str, Any]]:
    """Atomically add ``credit_fee`` (negative to spend) to a user's balance."""
    db = await manager.acquire()

    updated_user_credits = await db[USERS_COLLECTION].find_one_and_update(
        {"clerkId": clerk_id},
        {"$inc": {"creditBalance": credit_fee}},
        return_document=ReturnDocument.AFTER,
    )
    if not updated_user_credits:
        raise NotFoundError("User credits update failed", {"clerk_id": clerk_id})

    return serialize(UserRecord, updated_user_credits)
