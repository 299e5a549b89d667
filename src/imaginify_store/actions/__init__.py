"""Data-access actions over users, images and transactions."""

from .image_actions import (
    add_image,
    delete_image,
    get_all_images,
    get_image_by_id,
    get_user_images,
    update_image,
)
from .result import ActionResult, handle_error
from .transaction_actions import create_transaction, get_transactions_by_buyer
from .user_actions import create_user, delete_user, get_user_by_id, update_credits, update_user

__all__ = [
    "ActionResult",
    "handle_error",
    "create_user",
    "get_user_by_id",
    "update_user",
    "delete_user",
    "update_credits",
    "add_image",
    "update_image",
    "delete_image",
    "get_image_by_id",
    "get_all_images",
    "get_user_images",
    "create_transaction",
    "get_transactions_by_buyer",
]
