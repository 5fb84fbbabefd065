"""
Class API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response, status

from core.db import get_store
from core.store import DocumentStore
from core.validation import int_param

from . import service

router = APIRouter()


@router.get("/classes")
async def list_classes(
    filter: str | None = Query(default=None),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    store: DocumentStore = Depends(get_store),
) -> list[dict]:
    return await service.list_classes(
        store,
        filter_json=filter,
        page=int_param(page, 1),
        page_size=int_param(page_size, 0),
    )


@router.get("/classes/{class_id}")
async def get_class(
    class_id: str,
    store: DocumentStore = Depends(get_store),
) -> dict:
    return await service.get_class(store, class_id)


@router.post("/classes", status_code=status.HTTP_201_CREATED)
async def create_class(
    response: Response,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> dict:
    """
    Create a class and add its id to the instructor and class location it
    references. Both references must exist.
    """
    class_id = await service.create_class(store, payload)
    response.headers["Location"] = str(class_id)
    return {"message": f"Created a new class with id {class_id}", "id": str(class_id)}


@router.put("/classes/{class_id}")
async def replace_class(
    class_id: str,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return {"message": await service.replace_class(store, class_id, payload)}


@router.patch("/classes/{class_id}")
async def patch_class(
    class_id: str,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return {"message": await service.patch_class(store, class_id, payload)}


@router.delete("/classes/{class_id}", status_code=status.HTTP_202_ACCEPTED)
async def delete_class(
    class_id: str,
    store: DocumentStore = Depends(get_store),
) -> dict:
    """
    Delete a class and remove its id from both parents.
    """
    return {"message": await service.delete_class(store, class_id)}
