"""
Instructor persistence.
"""

from __future__ import annotations

from typing import Any

from core.filters import FieldType, FilterExpression, equals
from core.identifiers import DocumentId
from core.store import CLASSES, INSTRUCTORS, DocumentStore, UpdateResult


async def list_instructors(
    store: DocumentStore,
    where: FilterExpression,
    *,
    skip: int = 0,
    limit: int = 0,
) -> list[dict[str, Any]]:
    # Listing is alphabetical and leaves out the id.
    return await store.find(INSTRUCTORS, where, sort="name", skip=skip, limit=limit, include_id=False)


async def get_instructor(store: DocumentStore, instructor_id: DocumentId) -> dict[str, Any] | None:
    return await store.find_one(INSTRUCTORS, instructor_id)


async def list_classes_for_instructor(store: DocumentStore, instructor_id: DocumentId) -> list[dict[str, Any]]:
    return await store.find(CLASSES, equals("instructorId", FieldType.REFERENCE, instructor_id))


async def insert_instructor(store: DocumentStore, document: dict[str, Any]) -> DocumentId:
    return await store.insert_one(INSTRUCTORS, document)


async def replace_instructor(store: DocumentStore, instructor_id: DocumentId, document: dict[str, Any]) -> UpdateResult:
    return await store.replace_one(INSTRUCTORS, instructor_id, document)


async def update_instructor(store: DocumentStore, instructor_id: DocumentId, fields: dict[str, Any]) -> UpdateResult:
    return await store.set_fields(INSTRUCTORS, instructor_id, fields)


async def delete_instructor(store: DocumentStore, instructor_id: DocumentId) -> int:
    return await store.delete_one(INSTRUCTORS, instructor_id)
