"""Custom exceptions for the Imaginify persistence layer."""

from typing import Any, Dict, Optional


class ImaginifyError(Exception):
    """Base exception for persistence-layer errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """Initialize with message, optional details, and cause."""
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause
        
        # Set the cause for proper exception chaining
        if cause is not None:
            self.__cause__ = cause
        
    def __str__(self) -> str:
        """String representation with details."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message
    
    @classmethod
    def from_exception(cls, message: str, cause: Exception, details: Optional[Dict[str, Any]] = None):
        """Create exception with proper chaining from another exception."""
        return cls(message, details, cause)


class ConfigurationError(ImaginifyError):
    """Exception raised for configuration-related errors."""
    pass


class DatabaseError(ImaginifyError):
    """Exception raised for database-related errors."""
    pass


class DatabaseConnectionError(DatabaseError):
    """Exception raised when a connection attempt is rejected."""
    pass


class DatabaseQueryError(DatabaseError):
    """Exception raised for database query errors."""
    pass


class NotFoundError(ImaginifyError):
    """Exception raised when no record matches a lookup."""
    pass


class ActionError(ImaginifyError):
    """Exception raised when a data-access action cannot proceed."""
    pass
