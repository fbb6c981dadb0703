"""Application configuration."""
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.
    
    Environment variables take precedence over .env file.
    This makes it compatible with Docker (uses env vars) and 
    local development (uses .env file).
    """
    
    APP_NAME: str = "RugTrack"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # Database
    DATABASE_URL: str = "sqlite:///./rugtrack.db"
    
    # Legacy JSON snapshot used by the bulk migration
    MIGRATION_SOURCE: str = "data/orders.json"
    
    CORS_ORIGINS: List[str] = ["*"]
    
    model_config = SettingsConfigDict(
        # Only load .env file if it exists (for local dev)
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
