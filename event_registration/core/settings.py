"""
Configuration & Environment Management for the Event Registration service
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings

logger = logging.getLogger(__name__)


class DatabaseSettings(PydanticBaseSettings):
    """Database configuration settings"""

    DB_URL: str = "sqlite+aiosqlite:///./event_registration.db"
    DB_ECHO: bool = False

    # Connection Pool Settings (ignored for SQLite)
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 30
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True

    # Connection Timeouts
    DB_COMMAND_TIMEOUT: int = 60
    DB_STATEMENT_TIMEOUT: str = "60s"
    DB_LOCK_TIMEOUT: str = "30s"
    DB_SQLITE_TIMEOUT: float = 20.0

    # Create missing tables at startup; production deployments run alembic.
    DB_CREATE_TABLES: bool = True

    @property
    def database_url(self) -> str:
        """Database URL with the async driver for the configured backend"""
        url = self.DB_URL
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite:///"):
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return url

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
    }


class MonitoringSettings(PydanticBaseSettings):
    """Monitoring and observability settings"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    LOG_FILE: Optional[str] = None

    ENABLE_PROMETHEUS: bool = True
    PROMETHEUS_PATH: str = "/metrics"
    HEALTH_CHECK_PATH: str = "/health"

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in {"json", "console"}:
            raise ValueError(f"Unsupported log format: {v}")
        return v

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
    }


class Settings(PydanticBaseSettings):
    """Main application settings"""

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    VERSION: str = "1.0.0"

    # API Configuration
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Event Registration API"

    # CORS Configuration, comma-separated origins
    BACKEND_CORS_ORIGINS: str = "*"

    @property
    def cors_origins(self) -> List[str]:
        return [i.strip() for i in self.BACKEND_CORS_ORIGINS.split(",") if i.strip()]

    # Component Settings
    database: DatabaseSettings = DatabaseSettings()
    monitoring: MonitoringSettings = MonitoringSettings()

    model_config = {
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
