"""
Connection pool lifecycle and the store dependency.

`main.py` opens the pool in its lifespan, wraps it in a `DocumentStore` and
keeps that on `app.state.store`. Routers receive it through `get_store`, so
nothing in the feature packages touches a module-level handle.
"""

from __future__ import annotations

import logging

import asyncpg
from fastapi import Request

from . import settings
from .store import DocumentStore

logger = logging.getLogger(__name__)


async def create_pool() -> asyncpg.Pool:
    kwargs = {}
    name = settings.database_name()
    if name:
        kwargs["database"] = name

    pool = await asyncpg.create_pool(
        dsn=settings.database_url(),
        min_size=settings.pool_min_size(),
        max_size=settings.pool_max_size(),
        command_timeout=30,
        **kwargs,
    )
    logger.info("db_pool_ready database=%s", name or "<from dsn>")
    return pool


async def open_store() -> tuple[asyncpg.Pool, DocumentStore]:
    pool = await create_pool()
    store = DocumentStore(pool)
    await store.ensure_collections()
    return pool, store


def get_store(request: Request) -> DocumentStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Document store is not initialized. Open it on startup.")
    return store
