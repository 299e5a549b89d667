"""MongoDB connection lifecycle, record schemas and collection bootstrap."""

from .connection import ConnectionManager
from .init import DatabaseInitializer
from .schema import (
    AddImageParams,
    CreateTransactionParams,
    CreateUserParams,
    ImageRecord,
    TransactionRecord,
    UpdateImageParams,
    UpdateUserParams,
    UserRecord,
)

__all__ = [
    "ConnectionManager",
    "DatabaseInitializer",
    "AddImageParams",
    "CreateTransactionParams",
    "CreateUserParams",
    "ImageRecord",
    "TransactionRecord",
    "UpdateImageParams",
    "UpdateUserParams",
    "UserRecord",
]
