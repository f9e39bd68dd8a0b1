"""Runtime configuration sourced from the environment."""

from __future__ import annotations

import logging
import os
import sys
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from invoicing.utils.constants import ORDER_STATUS_NOT_FULFILLED

SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"


@dataclass(frozen=True)
class StoreSettings:
    database_url: Optional[str]
    default_items_per_page: int
    default_sort_field: str
    not_fulfilled_order_status_key: uuid.UUID
    cache_max_entries: int
    log_level: str


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest."""
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


def _database_url_from_env() -> Optional[str]:
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    components = {
        "POSTGRES_USER": os.getenv("POSTGRES_USER"),
        "POSTGRES_PASSWORD": os.getenv("POSTGRES_PASSWORD"),
        "POSTGRES_HOST": os.getenv("POSTGRES_HOST"),
        "POSTGRES_PORT": os.getenv("POSTGRES_PORT"),
        "POSTGRES_DB": os.getenv("POSTGRES_DB"),
    }
    if not any(components.values()):
        return None
    missing = [name for name, value in components.items() if not value]
    if missing:
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")
    return (
        f"postgresql://{components['POSTGRES_USER']}:{components['POSTGRES_PASSWORD']}"
        f"@{components['POSTGRES_HOST']}:{components['POSTGRES_PORT']}/{components['POSTGRES_DB']}"
    )


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _uuid_from_env(name: str, default: uuid.UUID) -> uuid.UUID:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return uuid.UUID(raw.strip())
    except ValueError:
        return default


@lru_cache(maxsize=None)
def get_settings() -> StoreSettings:
    """Return the cached settings sourced from the environment."""
    return StoreSettings(
        database_url=_database_url_from_env(),
        default_items_per_page=_int_from_env("INVOICE_DEFAULT_PAGE_SIZE", 25),
        default_sort_field=os.getenv("INVOICE_DEFAULT_SORT_FIELD", "invoiceNumber").strip() or "invoiceNumber",
        not_fulfilled_order_status_key=_uuid_from_env(
            "INVOICE_NOT_FULFILLED_STATUS_KEY", ORDER_STATUS_NOT_FULFILLED
        ),
        cache_max_entries=_int_from_env("INVOICE_CACHE_MAX_ENTRIES", 1000),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def resolve_database_url(settings: Optional[StoreSettings] = None) -> str:
    """Return the configured database URL, or in-memory SQLite under pytest.

    Raises ValueError outside of tests when nothing is configured.
    """
    settings = settings or get_settings()
    if settings.database_url:
        return settings.database_url
    if _is_pytest_runtime():
        return SQLITE_MEMORY_URL
    raise ValueError("No database configured: set DATABASE_URL or the POSTGRES_* variables")


def configure_logging(settings: Optional[StoreSettings] = None) -> int:
    """Apply LOG_LEVEL to the root logger and return the numeric level."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level)
    logging.getLogger("invoicing").setLevel(level)
    return level


def refresh_settings_cache() -> None:
    """Invalidate cached settings (useful for tests)."""
    get_settings.cache_clear()
