"""
Process-wide configuration read from environment variables.

A `.env` file next to the process is loaded once on import.
"""

from __future__ import annotations

import os
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from dotenv import load_dotenv

load_dotenv()

API_PREFIX = "/yoga-studio-management-api/v1"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = os.environ.get("DB_CONN_STRING", "").strip() or os.environ.get("DATABASE_URL", "").strip()
    if not url:
        raise RuntimeError("DB_CONN_STRING is not set.")
    return _sanitize_database_url(url)


def database_name() -> str | None:
    """
    Optional override for the database named in the DSN.
    """
    return os.environ.get("DB_NAME", "").strip() or None


def pool_min_size() -> int:
    return max(_env_int("DB_POOL_MIN", 1), 1)


def pool_max_size() -> int:
    return max(_env_int("DB_POOL_MAX", 5), pool_min_size())


def link_transactions() -> bool:
    """
    When true, a class write and its back-reference updates share one transaction.
    """
    return _env_bool("LINK_TRANSACTIONS", False)


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
