"""Data-access actions for payment transactions."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pymongo import ReturnDocument

from .result import coerce_params, data_action, serialize, to_object_id
from ..core.constants import TRANSACTIONS_COLLECTION, USERS_COLLECTION
from ..database.connection import ConnectionManager
from ..database.schema import CreateTransactionParams, TransactionRecord
from ..exceptions import NotFoundError
from ..logging import get_logger

logger = get_logger(__name__)


@data_action
async def create_transaction(
    manager: ConnectionManager,
    transaction: Union[CreateTransactionParams, Dict[str, Any]]
) -> Optional[Dict[str, Any]]:
    """Record a completed payment and credit the buyer."""
    params = coerce_params(CreateTransactionParams, transaction)
    buyer_id = to_object_id(params.buyer_id, "buyer_id")
    db = await manager.acquire()

    if not await db[USERS_COLLECTION].find_one({"_id": buyer_id}, {"_id": 1}):
        raise NotFoundError("Buyer not found", {"buyer_id": params.buyer_id})

    document = params.to_document()
    document.pop("buyerId", None)
    document.update({"buyer": buyer_id, "createdAt": datetime.now(timezone.utc)})
    result = await db[TRANSACTIONS_COLLECTION].insert_one(document)
    document["_id"] = result.inserted_id

    if params.credits:
        buyer = await db[USERS_COLLECTION].find_one_and_update(
            {"_id": buyer_id},
            {"$inc": {"creditBalance": params.credits}},
            return_document=ReturnDocument.AFTER,
        )
        if not buyer:
            # Buyer removed after the check
            await db[TRANSACTIONS_COLLECTION].delete_one({"_id": result.inserted_id})
            raise NotFoundError("User credits update failed", {"buyer_id": params.buyer_id})

    logger.info("Transaction recorded", stripe_id=params.stripe_id, credits=params.credits)
    return serialize(TransactionRecord, document)


@data_action
async def get_transactions_by_buyer(manager: ConnectionManager, buyer_id: str) -> List[Dict[str, Any]]:
    """All transactions for a buyer, newest first."""
    object_id = to_object_id(buyer_id, "buyer_id")
    db = await manager.acquire()

    cursor = db[TRANSACTIONS_COLLECTION].find({"buyer": object_id}).sort("createdAt", -1)
    return [serialize(TransactionRecord, doc) for doc in await cursor.to_list(length=None)]
