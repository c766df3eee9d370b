"""
Application settings (Pydantic Settings).
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

from app.core.constants import DEFAULT_DB_PORT, DEFAULT_POOL_SIZE, DEFAULT_POOL_TIMEOUT

# .env next to backend/ (parent of app/)
_env_path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    # Seed for the active connection config: DB_HOST, DB_PORT, DB_USER, DB_PASSWORD, DB_NAME
    db_host: str = "localhost"
    db_port: int = DEFAULT_DB_PORT
    db_user: str = "root"
    db_password: str = ""
    db_name: str = ""
    db_pool_size: int = DEFAULT_POOL_SIZE
    db_pool_timeout: int = DEFAULT_POOL_TIMEOUT  # seconds a request waits for a free pooled connection
    # Extra CORS origins, comma-separated (e.g. https://viewer.example.com)
    cors_origins: str = ""
    log_level: str = "INFO"

    class Config:
        env_file = _env_path
        extra = "ignore"

    @field_validator("db_port", mode="before")
    @classmethod
    def coerce_port(cls, v):
        return coerce_port(v)

    @field_validator("db_pool_size", mode="before")
    @classmethod
    def coerce_pool_size(cls, v):
        return _positive_int(v, DEFAULT_POOL_SIZE)

    @field_validator("db_pool_timeout", mode="before")
    @classmethod
    def coerce_pool_timeout(cls, v):
        return _positive_int(v, DEFAULT_POOL_TIMEOUT)

    @field_validator("db_host", "db_user", "db_name", mode="after")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return (v or "").strip()


def _positive_int(value, default: int) -> int:
    try:
        v = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return v if v > 0 else default


def coerce_port(value) -> int:
    """Port as an int; missing, non-numeric or out-of-range values fall back to 3306."""
    try:
        port = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_DB_PORT
    if not 0 < port < 65536:
        return DEFAULT_DB_PORT
    return port


settings = Settings()
