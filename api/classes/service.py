"""
Class business logic.

Create flow:
1) Validate the payload
2) Check that the instructor and the class location exist
3) Insert the class
4) Add the class id to both parents' back-reference arrays

Delete runs the same links in reverse. With LINK_TRANSACTIONS enabled,
steps 3-4 (and the delete equivalents) share one store transaction;
otherwise each write stands alone and link failures are only logged.
Reference existence is checked on create only, not on PUT or PATCH.
"""

from __future__ import annotations

import logging
from typing import Any

from core import settings
from core.errors import NotFound
from core.filters import parse_filter
from core.identifiers import DocumentId, parse_id
from core.references import require_reference
from core.store import CLASS_LOCATIONS, INSTRUCTORS, DocumentStore, UpdateResult
from core.validation import page_window, validate

from . import links, repository, schemas

logger = logging.getLogger(__name__)


def _update_message(class_id: DocumentId, result: UpdateResult) -> str:
    if result.modified > 0:
        return f"Successfully updated class with id {class_id}"
    return f"No changes made to class with id {class_id}"


def _use_transactions(transactional: bool | None) -> bool:
    return settings.link_transactions() if transactional is None else transactional


async def list_classes(
    store: DocumentStore,
    *,
    filter_json: str | None = None,
    page: int = 1,
    page_size: int = 0,
) -> list[dict[str, Any]]:
    where = parse_filter(filter_json, schemas.FILTER_FIELDS)
    skip, limit = page_window(page, page_size)
    return await repository.list_classes(store, where, skip=skip, limit=limit)


async def get_class(store: DocumentStore, raw_id: str) -> dict[str, Any]:
    class_id = parse_id(raw_id, label="class id", status_code=404)
    found = await repository.get_class(store, class_id)
    if found is None:
        raise NotFound(f"Class not found with id: {raw_id}")
    return found


async def create_class(store: DocumentStore, payload: Any, *, transactional: bool | None = None) -> DocumentId:
    document = validate(schemas.ClassPayload, payload)

    instructor_id = await require_reference(store, INSTRUCTORS, document["instructorId"], label="instructor")
    location_id = await require_reference(store, CLASS_LOCATIONS, document["classLocationId"], label="class location")

    if _use_transactions(transactional):
        async with store.transaction() as tx:
            class_id = await repository.insert_class(tx, document)
            await links.link_class(tx, links.ClassLinks(class_id, instructor_id, location_id), strict=True)
    else:
        class_id = await repository.insert_class(store, document)
        await links.link_class(store, links.ClassLinks(class_id, instructor_id, location_id))

    logger.info(
        "class_created id=%s instructor_id=%s class_location_id=%s",
        class_id,
        instructor_id,
        location_id,
    )
    return class_id


async def replace_class(store: DocumentStore, raw_id: str, payload: Any) -> str:
    class_id = parse_id(raw_id, label="class id")
    document = validate(schemas.ClassPayload, payload)
    result = await repository.replace_class(store, class_id, document)
    return _update_message(class_id, result)


async def patch_class(store: DocumentStore, raw_id: str, payload: Any) -> str:
    """
    Merge arbitrary top-level fields into a class. Unlike instructors and
    class locations there is no allow-list and no value validation here.
    """
    class_id = parse_id(raw_id, label="class id")
    fields = schemas.select_patch(payload)
    result = await repository.update_class(store, class_id, fields)
    return _update_message(class_id, result)


async def delete_class(store: DocumentStore, raw_id: str, *, transactional: bool | None = None) -> str:
    class_id = parse_id(raw_id, label="class id")

    existing = await repository.get_class(store, class_id)
    if existing is None:
        raise NotFound(f"No class found with id {class_id}")
    class_links = links.ClassLinks.from_document(class_id, existing)

    if _use_transactions(transactional):
        async with store.transaction() as tx:
            if not await repository.delete_class(tx, class_id):
                raise NotFound(f"No class found with id {class_id}")
            await links.unlink_class(tx, class_links, strict=True)
    else:
        if not await repository.delete_class(store, class_id):
            raise NotFound(f"No class found with id {class_id}")
        await links.unlink_class(store, class_links)

    logger.info("class_deleted id=%s", class_id)
    return f"Successfully removed class with id {class_id}"
