"""
Back-reference maintenance between classes and their parents.

Every class id is mirrored in two arrays:
- `instructors.classIds` of the class's instructor
- `class_locations.classIDs` of the class's location

Both updates are idempotent (add-if-absent / remove-all), so replaying them
after a partial failure is safe.

In best-effort mode a failed or unmatched parent update is logged and
skipped; the caller's response only reflects the class write itself. In
strict mode (used inside a store transaction) failures propagate so the
transaction rolls back, and linking to a parent that no longer exists raises
`ReferenceNotFound`. Unlinking from a missing parent is never an error:
parent deletes do not cascade, so dangling references are expected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from core.errors import ReferenceNotFound, StorageFailure
from core.identifiers import DocumentId, is_valid_id, parse_id
from core.store import CLASS_LOCATIONS, INSTRUCTORS, DocumentStore, UpdateResult

INSTRUCTOR_LINK_FIELD = "classIds"
LOCATION_LINK_FIELD = "classIDs"

_PARENT_LABELS = {INSTRUCTORS: "instructor", CLASS_LOCATIONS: "class location"}

logger = logging.getLogger(__name__)

ArrayUpdate = Callable[[str, DocumentId, str, str], Awaitable[UpdateResult]]


@dataclass(frozen=True)
class ClassLinks:
    class_id: DocumentId
    instructor_id: DocumentId | None
    location_id: DocumentId | None

    @classmethod
    def from_document(cls, class_id: DocumentId, document: dict[str, Any]) -> ClassLinks:
        """
        Read parent ids from a stored class. PATCH does not validate values,
        so a stored reference may be unusable; that side is then skipped.
        """
        return cls(
            class_id=class_id,
            instructor_id=_stored_id(document.get("instructorId")),
            location_id=_stored_id(document.get("classLocationId")),
        )


def _stored_id(value: Any) -> DocumentId | None:
    return parse_id(value) if is_valid_id(value) else None


async def link_class(store: DocumentStore, links: ClassLinks, *, strict: bool = False) -> None:
    for collection, parent_id, field in (
        (INSTRUCTORS, links.instructor_id, INSTRUCTOR_LINK_FIELD),
        (CLASS_LOCATIONS, links.location_id, LOCATION_LINK_FIELD),
    ):
        await _update_parent(
            store.add_to_array, collection, parent_id, field, links, strict=strict, require_parent=strict
        )


async def unlink_class(store: DocumentStore, links: ClassLinks, *, strict: bool = False) -> None:
    await _update_parent(store.remove_from_array, INSTRUCTORS, links.instructor_id, INSTRUCTOR_LINK_FIELD, links, strict=strict)
    await _update_parent(store.remove_from_array, CLASS_LOCATIONS, links.location_id, LOCATION_LINK_FIELD, links, strict=strict)


async def _update_parent(
    update: ArrayUpdate,
    collection: str,
    parent_id: DocumentId | None,
    field: str,
    links: ClassLinks,
    *,
    strict: bool,
    require_parent: bool = False,
) -> None:
    action = update.__name__
    if parent_id is None:
        logger.warning(
            "class_link_skipped action=%s collection=%s class_id=%s reason=unusable_parent_id",
            action,
            collection,
            links.class_id,
        )
        return

    try:
        result = await update(collection, parent_id, field, links.class_id.value)
    except StorageFailure:
        if strict:
            raise
        logger.exception(
            "class_link_failed action=%s collection=%s parent_id=%s class_id=%s",
            action,
            collection,
            parent_id,
            links.class_id,
        )
        return

    if result.matched == 0:
        if require_parent:
            label = _PARENT_LABELS[collection]
            raise ReferenceNotFound(f"No {label} found with {label} id {parent_id}")
        logger.warning(
            "class_link_parent_missing action=%s collection=%s parent_id=%s class_id=%s",
            action,
            collection,
            parent_id,
            links.class_id,
        )
