"""
Class location API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response, status

from core.db import get_store
from core.store import DocumentStore
from core.validation import int_param

from . import service

router = APIRouter()


@router.get("/classlocations")
async def list_class_locations(
    filter: str | None = Query(default=None),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    store: DocumentStore = Depends(get_store),
) -> list[dict]:
    return await service.list_class_locations(
        store,
        filter_json=filter,
        page=int_param(page, 1),
        page_size=int_param(page_size, 0),
    )


@router.get("/classlocations/{location_id}")
async def get_class_location(
    location_id: str,
    store: DocumentStore = Depends(get_store),
) -> dict:
    return await service.get_class_location(store, location_id)


@router.post("/classlocations", status_code=status.HTTP_201_CREATED)
async def create_class_location(
    response: Response,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> dict:
    location_id = await service.create_class_location(store, payload)
    response.headers["Location"] = str(location_id)
    return {"message": f"Created a new class location with id {location_id}", "id": str(location_id)}


@router.put("/classlocations/{location_id}")
async def replace_class_location(
    location_id: str,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return {"message": await service.replace_class_location(store, location_id, payload)}


@router.patch("/classlocations/{location_id}")
async def patch_class_location(
    location_id: str,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return {"message": await service.patch_class_location(store, location_id, payload)}


@router.delete("/classlocations/{location_id}", status_code=status.HTTP_202_ACCEPTED)
async def delete_class_location(
    location_id: str,
    store: DocumentStore = Depends(get_store),
) -> dict:
    return {"message": await service.delete_class_location(store, location_id)}
