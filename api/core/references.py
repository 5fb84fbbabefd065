"""
Foreign-reference checks for writes that embed another entity's id.
"""

from __future__ import annotations

from typing import Any

from .errors import ReferenceNotFound
from .identifiers import DocumentId, parse_id
from .store import DocumentStore


async def require_reference(store: DocumentStore, collection: str, raw_id: Any, *, label: str) -> DocumentId:
    """
    Parse `raw_id` and make sure a document with that id exists in `collection`.

    Raises `MalformedIdentifier` for a bad id and `ReferenceNotFound` when the
    target is missing.
    """
    ref_id = parse_id(raw_id, label=f"{label} id")
    if not await store.exists(collection, ref_id):
        raise ReferenceNotFound(f"No {label} found with {label} id {ref_id}")
    return ref_id
