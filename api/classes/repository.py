"""
Class persistence.
"""

from __future__ import annotations

from typing import Any

from core.filters import FilterExpression
from core.identifiers import DocumentId
from core.store import CLASSES, DocumentStore, UpdateResult


async def list_classes(
    store: DocumentStore,
    where: FilterExpression,
    *,
    skip: int = 0,
    limit: int = 0,
) -> list[dict[str, Any]]:
    # Insertion order; classes have no name to sort by.
    return await store.find(CLASSES, where, skip=skip, limit=limit)


async def get_class(store: DocumentStore, class_id: DocumentId) -> dict[str, Any] | None:
    return await store.find_one(CLASSES, class_id)


async def insert_class(store: DocumentStore, document: dict[str, Any]) -> DocumentId:
    return await store.insert_one(CLASSES, document)


async def replace_class(store: DocumentStore, class_id: DocumentId, document: dict[str, Any]) -> UpdateResult:
    return await store.replace_one(CLASSES, class_id, document)


async def update_class(store: DocumentStore, class_id: DocumentId, fields: dict[str, Any]) -> UpdateResult:
    return await store.set_fields(CLASSES, class_id, fields)


async def delete_class(store: DocumentStore, class_id: DocumentId) -> int:
    return await store.delete_one(CLASSES, class_id)
