"""
Configuration module for the User Management service.

This module uses Pydantic Settings to load and validate environment variables
from a .env file. It provides type-safe, validated configuration with clear
error messages if values are invalid.

Architecture:
    - Each domain (database, user policy, api) has its own config class
    - All config classes inherit from BaseSettings for automatic env var loading
    - Nested configs are initialized in AppConfig.__init__ to ensure .env is loaded first
    - A global `settings` instance provides singleton access throughout the app

Usage:
    ```python
    from user_management.config import settings

    db_url = settings.database.url
    max_age = settings.user_policy.max_age_years
    page_size = settings.api.default_page_size
    ```
"""

from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load .env file from project root
project_root: Path = Path(__file__).parent.parent
env_path: Path = project_root / ".env"
if env_path.exists():
    load_dotenv(env_path)


class DatabaseConfig(BaseSettings):
    """
    Database configuration.

    Attributes:
        url: SQLAlchemy connection string, e.g.
            postgresql://[user]:[password]@[host]:[port]/[database]
        echo: Enable SQLAlchemy query logging (useful for debugging)
        pool_size: Number of connections kept in the pool
        max_overflow: Connections allowed beyond pool_size
        pool_recycle: Seconds after which a pooled connection is recycled
        pool_timeout: Seconds to wait for a connection from the pool
    """

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="", case_sensitive=True, populate_by_name=True
    )

    url: str = Field(
        default="sqlite:///./user_management.db",
        alias="DATABASE_URL",
        description="Database connection string",
    )
    echo: bool = Field(default=False, alias="DATABASE_ECHO", description="SQLAlchemy echo mode")
    pool_size: int = Field(default=5, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(default=10, alias="DATABASE_MAX_OVERFLOW")
    pool_recycle: int = Field(default=3600, alias="DATABASE_POOL_RECYCLE")
    pool_timeout: int = Field(default=30, alias="DATABASE_POOL_TIMEOUT")

    @field_validator("pool_size", "pool_recycle", "pool_timeout")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """
        Validate that pool settings are positive integers.

        Raises:
            ValueError: If value is not positive
        """
        if v <= 0:
            raise ValueError("Value must be a positive integer")
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")


class UserPolicyConfig(BaseSettings):
    """
    Business rules applied to user records.

    Attributes:
        max_age_years: Oldest accepted birth date, in years before today
        audit_actor: Name written to created_by/updated_by stamps
    """

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="", case_sensitive=True, populate_by_name=True
    )

    max_age_years: int = Field(
        default=100,
        alias="USER_MAX_AGE_YEARS",
        description="Maximum accepted age in years",
    )
    audit_actor: str = Field(
        default="SYSTEM",
        alias="USER_AUDIT_ACTOR",
        description="Actor recorded in audit stamps",
    )

    @field_validator("max_age_years")
    @classmethod
    def validate_max_age(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Maximum age must be a positive integer")
        return v


class ApiConfig(BaseSettings):
    """
    HTTP API configuration.

    Attributes:
        host: Interface the server binds to
        port: Port the server listens on (default: 8000)
        default_page_size: Page size used when max_records is omitted
        log_level: Root logging level for the service
    """

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="", case_sensitive=True, populate_by_name=True
    )

    host: str = Field(default="0.0.0.0", alias="API_HOST")
    port: int = Field(default=8000, alias="API_PORT")
    default_page_size: int = Field(default=5, alias="API_DEFAULT_PAGE_SIZE")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """
        Validate port is in valid range (1-65535).

        Raises:
            ValueError: If port is outside valid range
        """
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("default_page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Page size must be at least 1")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return str(v).strip().upper()


class AppConfig(BaseSettings):
    """
    Main application configuration.

    This class aggregates all domain-specific configurations into a single
    settings object. Each nested config is a separate BaseSettings instance
    so it can read its own environment variables, while tests can pass
    replacement configs as keyword arguments.

    Attributes:
        database: Database connection configuration
        user_policy: Business rules for user records
        api: HTTP API configuration
    """

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=str(env_path) if env_path.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    database: DatabaseConfig
    user_policy: UserPolicyConfig
    api: ApiConfig

    def __init__(self, **kwargs: Any) -> None:
        """
        Initialize configuration with proper environment variable loading.

        Args:
            **kwargs: Optional keyword arguments to override nested configs.
                     Useful for testing with mock configurations.
        """
        if env_path.exists():
            load_dotenv(env_path)
        else:
            load_dotenv()

        if "database" not in kwargs:
            kwargs["database"] = DatabaseConfig()
        if "user_policy" not in kwargs:
            kwargs["user_policy"] = UserPolicyConfig()
        if "api" not in kwargs:
            kwargs["api"] = ApiConfig()

        super().__init__(**kwargs)


# Global settings instance (singleton pattern)
# Import this in other modules: `from user_management.config import settings`
settings: AppConfig = AppConfig()
