# config.py - environment driven settings for the expense dashboard
import os
import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./expenses.db"

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


class Settings(BaseModel):
    database_url: str = DEFAULT_DATABASE_URL
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: List[str] = DEFAULT_CORS_ORIGINS
    seed_demo_data: bool = True
    static_dir: str = "static"
    log_level: str = "INFO"


def to_async_url(url: str) -> str:
    """Point a plain Postgres/SQLite URL at its async driver"""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Build settings from the environment (and a .env file if present)"""
    load_dotenv()

    database_url = os.getenv("DATABASE_URL_ASYNC")
    if not database_url:
        plain_url = os.getenv("DATABASE_URL")
        if plain_url:
            database_url = to_async_url(plain_url)
        else:
            logger.warning(f"⚠️ DATABASE_URL not set, falling back to {DEFAULT_DATABASE_URL}")
            database_url = DEFAULT_DATABASE_URL

    origins = os.getenv("CORS_ORIGINS")
    cors_origins = [o.strip() for o in origins.split(",") if o.strip()] if origins else DEFAULT_CORS_ORIGINS

    return Settings(
        database_url=database_url,
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=int(os.getenv("API_PORT", 8000)),
        cors_origins=cors_origins,
        seed_demo_data=_flag(os.getenv("SEED_DEMO_DATA"), True),
        static_dir=os.getenv("STATIC_DIR", "static"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
