"""
Configuration loader for the user directory service.

Loads configuration from config.yaml and environment variables using pydantic-settings.
Supports store/cache/session/server/security sections.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreProvider(str, Enum):
    """Supported durable user store backends."""

    POSTGRES = "postgres"
    MEMORY = "memory"


class CacheProvider(str, Enum):
    """Supported key-value backends for the user cache and session store."""

    REDIS = "redis"
    MEMORY = "memory"


class StoreConfig(BaseModel):
    """
    Durable store configuration.

    Note: the connection URL should NOT be stored here.
    Use the DATABASE_URL environment variable.
    """

    provider: StoreProvider = Field(
        default=StoreProvider.POSTGRES,
        description="User store backend to use",
    )
    min_connections: int = Field(
        default=1,
        ge=1,
        description="Minimum size of the database connection pool",
    )
    max_connections: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum size of the database connection pool",
    )
    init_schema: bool = Field(
        default=True,
        description="Create the users table on startup if it does not exist",
    )


class CacheConfig(BaseModel):
    """
    User snapshot cache configuration.

    The same backend also hosts the session store.

    Example config.yaml:
        cache:
          provider: redis
          user_ttl_seconds: 3600
          key_prefix: "api-user:"
    """

    provider: CacheProvider = Field(
        default=CacheProvider.REDIS,
        description="Key-value backend for user cache and sessions",
    )
    user_ttl_seconds: int = Field(
        default=3600,
        gt=0,
        description="TTL in seconds for cached user snapshots",
    )
    key_prefix: str = Field(
        default="api-user:",
        min_length=1,
        description="Key namespace for cached user snapshots",
    )


class SessionConfig(BaseModel):
    """Login session configuration."""

    expire_seconds: int = Field(
        default=86400,
        gt=0,
        description="Absolute session lifetime in seconds",
    )
    key_prefix: str = Field(
        default="api-session:",
        min_length=1,
        description="Key namespace for session records",
    )
    header_name: str = Field(
        default="X-Session-Id",
        min_length=1,
        description="Request header carrying the session token",
    )


class ServerConfig(BaseModel):
    """Request handling configuration."""

    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Deadline applied to store/cache calls made on behalf of one request",
    )


class SecurityConfig(BaseModel):
    """Password hashing configuration."""

    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=16,
        description="bcrypt cost factor (log2 rounds)",
    )


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and config.yaml.

    Values passed explicitly (from config.yaml) take precedence over
    environment variables, which take precedence over defaults.

    Secrets (loaded from .env only - NEVER commit to git):
        - DATABASE_URL: PostgreSQL connection URL
        - REDIS_URL: Redis connection URL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(
        default="User Directory Service",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Debug mode",
        alias="APP_DEBUG",
    )

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug_bool(cls, v):
        """Handle empty string as False for boolean debug field."""
        if v == "" or v is None:
            return False
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "on")
        return v

    # Connection URLs (from .env)
    database_url: str = Field(
        default="",
        description="PostgreSQL connection URL",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )

    # Configuration sections (from config.yaml)
    store: StoreConfig = Field(
        default_factory=StoreConfig,
        description="Durable store configuration",
    )
    cache: CacheConfig = Field(
        default_factory=CacheConfig,
        description="User cache configuration",
    )
    session: SessionConfig = Field(
        default_factory=SessionConfig,
        description="Session configuration",
    )
    server: ServerConfig = Field(
        default_factory=ServerConfig,
        description="Request handling configuration",
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig,
        description="Password hashing configuration",
    )

    def get_database_url(self) -> str:
        """
        Get the database URL required by the postgres store.

        Returns:
            The configured database URL.

        Raises:
            ValueError: If no database URL is configured.
        """
        if not self.database_url:
            raise ValueError(
                "No database URL configured for store provider 'postgres'. "
                "Set the DATABASE_URL environment variable."
            )
        return self.database_url

    @classmethod
    def from_yaml(cls, config_path: Path | str | None = None) -> "Settings":
        """
        Load settings from a YAML configuration file.

        Args:
            config_path: Path to config.yaml file. If None, looks for config.yaml
                        in the current directory and project root.

        Returns:
            Settings instance with values from YAML merged with env vars.
        """
        config_data: dict = {}

        if config_path is None:
            search_paths = [
                Path.cwd() / "config.yaml",
                Path(__file__).parent.parent.parent / "config.yaml",
            ]
            for path in search_paths:
                if path.exists():
                    config_path = path
                    break

        if config_path is not None:
            config_path = Path(config_path)
            if config_path.exists():
                with open(config_path, encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}

        return cls(**config_data)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings.from_yaml()
