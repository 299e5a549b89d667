"""Configuration management for the Imaginify persistence layer."""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.constants import (
    DATABASE_NAME,
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
)


class DatabaseConfig(BaseSettings):
    """Database configuration settings."""
    
    # MongoDB Configuration
    mongodb_url: Optional[str] = Field(default=None, alias="MONGODB_URL")
    mongodb_database: str = Field(default=DATABASE_NAME, alias="MONGODB_DATABASE")
    connect_timeout_ms: int = Field(
        default=DEFAULT_CONNECT_TIMEOUT_MS, alias="MONGODB_CONNECT_TIMEOUT_MS", gt=0
    )
    server_selection_timeout_ms: int = Field(
        default=DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
        alias="MONGODB_SERVER_SELECTION_TIMEOUT_MS",
        gt=0
    )
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True
    )
    
    @field_validator('mongodb_url')
    @classmethod
    def strip_mongodb_url(cls, v):
        """Treat a blank endpoint the same as a missing one."""
        if v is not None and not v.strip():
            return None
        return v


class AppConfig(BaseSettings):
    """Application configuration settings."""
    
    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    
    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )


class Config:
    """Main configuration class."""
    
    def __init__(self) -> None:
        self.database = DatabaseConfig()
        self.app = AppConfig()
    
    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment and .env file."""
        return cls()


# Global configuration instance
config = Config.load()
