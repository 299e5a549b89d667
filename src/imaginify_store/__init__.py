"""Persistence layer for the Imaginify image-transformation app."""

__version__ = "0.1.0"

# Import main components
from .config import Config
from .database import ConnectionManager, DatabaseInitializer
from .logging import get_logger

__all__ = [
    "Config",
    "ConnectionManager",
    "DatabaseInitializer",
    "get_logger",
]
