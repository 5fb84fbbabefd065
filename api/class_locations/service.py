"""
Class location business logic.
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


def _update_message(location_id: DocumentId, result: UpdateResult) -> str:
    if result.modified > 0:
        return f"Successfully updated class location with id {location_id}"
    return f"No changes made to class location with id {location_id}"


async def list_class_locations(
    store: DocumentStore,
    *,
    filter_json: str | None = None,
    page: int = 1,
    page_size: int = 0,
) -> list[dict[str, Any]]:
    where = parse_filter(filter_json, schemas.FILTER_FIELDS)
    skip, limit = page_window(page, page_size)
    return await repository.list_class_locations(store, where, skip=skip, limit=limit)


async def get_class_location(store: DocumentStore, raw_id: str) -> dict[str, Any]:
    location_id = parse_id(raw_id, label="class location id", status_code=404)
    location = await repository.get_class_location(store, location_id)
    if location is None:
        raise NotFound(f"Unable to find matching document with id: {raw_id}")

    classes = await repository.list_classes_at_location(store, location_id)
    return {"classLocation": location, "classes": classes}


async def create_class_location(store: DocumentStore, payload: Any) -> DocumentId:
    document = validate(schemas.ClassLocationPayload, payload)
    document["classIDs"] = []
    location_id = await repository.insert_class_location(store, document)
    logger.info("class_location_created id=%s", location_id)
    return location_id


async def replace_class_location(store: DocumentStore, raw_id: str, payload: Any) -> str:
    location_id = parse_id(raw_id, label="class location id")
    document = validate(schemas.ClassLocationPayload, payload)
    result = await repository.replace_class_location(store, location_id, document)
    return _update_message(location_id, result)


async def patch_class_location(store: DocumentStore, raw_id: str, payload: Any) -> str:
    location_id = parse_id(raw_id, label="class location id")
    fields = schemas.PATCHABLE.validate(payload)
    result = await repository.update_class_location(store, location_id, fields)
    return _update_message(location_id, result)


async def delete_class_location(store: DocumentStore, raw_id: str) -> str:
    """
    Delete a class location. Classes held there keep their (now dangling)
    `classLocationId`.
    """
    location_id = parse_id(raw_id, label="class location id")
    deleted = await repository.delete_class_location(store, location_id)
    if not deleted:
        raise NotFound(f"No class location found with id {location_id}")
    logger.info("class_location_deleted id=%s", location_id)
    return f"Successfully removed class location with id {location_id}"
