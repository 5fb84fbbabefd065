"""
Instructor business logic.
"""

from __future__ import annotations

import logging
from typing import Any

from core.errors import NotFound
from core.filters import parse_filter
from core.identifiers import DocumentId, parse_id
from core.store import DocumentStore, UpdateResult
from core.validation import page_window, validate

from . import repository, schemas

logger = logging.getLogger(__name__)


def _update_message(instructor_id: DocumentId, result: UpdateResult) -> str:
    if result.modified > 0:
        return f"Successfully updated instructor with id {instructor_id}"
    return f"No changes made to instructor with id {instructor_id}"


async def list_instructors(
    store: DocumentStore,
    *,
    filter_json: str | None = None,
    page: int = 1,
    page_size: int = 0,
) -> list[dict[str, Any]]:
    where = parse_filter(filter_json, schemas.FILTER_FIELDS)
    skip, limit = page_window(page, page_size)
    return await repository.list_instructors(store, where, skip=skip, limit=limit)


async def get_instructor(store: DocumentStore, raw_id: str) -> dict[str, Any]:
    """
    Return the instructor together with the classes that reference it.
    """
    instructor_id = parse_id(raw_id, label="instructor id", status_code=404)
    instructor = await repository.get_instructor(store, instructor_id)
    if instructor is None:
        raise NotFound(f"Unable to find matching document with id: {raw_id}")

    classes = await repository.list_classes_for_instructor(store, instructor_id)
    return {"instructor": instructor, "classes": classes}


async def create_instructor(store: DocumentStore, payload: Any) -> DocumentId:
    document = validate(schemas.InstructorPayload, payload)
    # Back-references are owned by class create/delete.
    document["classIds"] = []
    instructor_id = await repository.insert_instructor(store, document)
    logger.info("instructor_created id=%s", instructor_id)
    return instructor_id


async def replace_instructor(store: DocumentStore, raw_id: str, payload: Any) -> str:
    instructor_id = parse_id(raw_id, label="instructor id")
    document = validate(schemas.InstructorPayload, payload)
    result = await repository.replace_instructor(store, instructor_id, document)
    return _update_message(instructor_id, result)


async def patch_instructor(store: DocumentStore, raw_id: str, payload: Any) -> str:
    instructor_id = parse_id(raw_id, label="instructor id")
    fields = schemas.PATCHABLE.validate(payload)
    result = await repository.update_instructor(store, instructor_id, fields)
    return _update_message(instructor_id, result)


async def delete_instructor(store: DocumentStore, raw_id: str) -> str:
    """
    Delete an instructor. Classes that reference it are left untouched.
    """
    instructor_id = parse_id(raw_id, label="instructor id")
    deleted = await repository.delete_instructor(store, instructor_id)
    if not deleted:
        raise NotFound(f"No instructor found with id {instructor_id}")
    logger.info("instructor_deleted id=%s", instructor_id)
    return f"Successfully removed instructor with id {instructor_id}"
