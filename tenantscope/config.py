"""
Application Configuration

Centralized configuration management using Pydantic settings.
Loads from environment variables with fallback to .env file.
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Note: We use lru_cache on get_settings() so configuration is loaded
    once per process. Tests that need different values must call
    get_settings.cache_clear().
    """

    # Database settings
    DATABASE_URL: str = "sqlite:///./tenantscope.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40

    # Token settings (tokens are issued by the auth provider, we only verify)
    SECRET_KEY: str = "dev-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Application settings
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Tenant scoping
    # Attribute on every tenant-scoped model that holds the owning tenant.
    # Process-wide, read once at startup.
    TENANT_FIELD_NAME: str = "tenant_id"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only instantiate settings once.
    This is efficient but means settings are immutable at runtime.
    """
    return Settings()
