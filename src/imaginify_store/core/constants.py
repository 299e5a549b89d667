"""System-wide constants and configuration values."""

from typing import Final

# Database Constants
DATABASE_NAME: Final[str] = "imaginify"
USERS_COLLECTION: Final[str] = "users"
IMAGES_COLLECTION: Final[str] = "images"
TRANSACTIONS_COLLECTION: Final[str] = "transactions"

# Timeout Constants (in milliseconds)
DEFAULT_CONNECT_TIMEOUT_MS: Final[int] = 10000
DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 10000

# User Defaults
DEFAULT_PLAN_ID: Final[int] = 1
DEFAULT_CREDIT_BALANCE: Final[int] = 10

# Pagination Constants
DEFAULT_PAGE_SIZE: Final[int] = 9

# Revalidation
ROOT_PATH: Final[str] = "/"
REVALIDATION_HISTORY_LIMIT: Final[int] = 100
