"""
Class location persistence.
"""

from __future__ import annotations

from typing import Any

from core.filters import FieldType, FilterExpression, equals
from core.identifiers import DocumentId
from core.store import CLASS_LOCATIONS, CLASSES, DocumentStore, UpdateResult


async def list_class_locations(
    store: DocumentStore,
    where: FilterExpression,
    *,
    skip: int = 0,
    limit: int = 0,
) -> list[dict[str, Any]]:
    return await store.find(CLASS_LOCATIONS, where, sort="name", skip=skip, limit=limit, include_id=False)


async def get_class_location(store: DocumentStore, location_id: DocumentId) -> dict[str, Any] | None:
    return await store.find_one(CLASS_LOCATIONS, location_id)


async def list_classes_at_location(store: DocumentStore, location_id: DocumentId) -> list[dict[str, Any]]:
    return await store.find(CLASSES, equals("classLocationId", FieldType.REFERENCE, location_id))


async def insert_class_location(store: DocumentStore, document: dict[str, Any]) -> DocumentId:
    return await store.insert_one(CLASS_LOCATIONS, document)


async def replace_class_location(store: DocumentStore, location_id: DocumentId, document: dict[str, Any]) -> UpdateResult:
    return await store.replace_one(CLASS_LOCATIONS, location_id, document)


async def update_class_location(store: DocumentStore, location_id: DocumentId, fields: dict[str, Any]) -> UpdateResult:
    return await store.set_fields(CLASS_LOCATIONS, location_id, fields)


async def delete_class_location(store: DocumentStore, location_id: DocumentId) -> int:
    return await store.delete_one(CLASS_LOCATIONS, location_id)
