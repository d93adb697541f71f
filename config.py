"""
Settings

Read from environment variables; a local .env file is loaded first.
"""
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    database_url: str
    database_name: str
    port: int
    shipping_flat_rate_cents: int
    venmo_username: str
    order_number_prefix: str
    admin_access_token: str
    cors_origins: List[str]
    log_level: str


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def load_settings() -> Settings:
    load_dotenv()

    shipping = _int_env("SHIPPING_FLAT_RATE_CENTS", 1000)
    if shipping < 0:
        raise ValueError("SHIPPING_FLAT_RATE_CENTS must not be negative")

    origins = os.getenv("CORS_ORIGINS", "*")
    settings = Settings(
        database_url=os.getenv("DATABASE_URL", ""),
        database_name=os.getenv("DATABASE_NAME", ""),
        port=_int_env("PORT", 8000),
        shipping_flat_rate_cents=shipping,
        venmo_username=os.getenv("VENMO_USERNAME", "EVOQWELL"),
        order_number_prefix=os.getenv("ORDER_NUMBER_PREFIX", "EVOQ"),
        admin_access_token=os.getenv("ADMIN_ACCESS_TOKEN", ""),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )

    missing = [
        key for key in ("DATABASE_URL", "VENMO_USERNAME", "ADMIN_ACCESS_TOKEN")
        if not os.getenv(key)
    ]
    if missing:
        logger.warning(
            "Missing environment variables: %s. Set them before deploying.",
            ", ".join(missing),
        )
    if not settings.admin_access_token:
        logger.warning("ADMIN_ACCESS_TOKEN is not set. Admin endpoints will reject all requests.")
    return settings


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
