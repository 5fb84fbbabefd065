"""
Instructor API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Response, status

from core.db import get_store
from core.store import DocumentStore
from core.validation import int_param

from . import service

router = APIRouter()


@router.get("/instructors")
async def list_instructors(
    filter: str | None = Query(default=None),
    page: str | None = Query(default=None),
    page_size: str | None = Query(default=None, alias="pageSize"),
    store: DocumentStore = Depends(get_store),
) -> list[dict]:
    return await service.list_instructors(
        store,
        filter_json=filter,
        page=int_param(page, 1),
        page_size=int_param(page_size, 0),
    )


@router.get("/instructors/{instructor_id}")
async def get_instructor(
    instructor_id: str,
    store: DocumentStore = Depends(get_store),
) -> dict:
    return await service.get_instructor(store, instructor_id)


@router.post("/instructors", status_code=status.HTTP_201_CREATED)
async def create_instructor(
    response: Response,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> dict:
    instructor_id = await service.create_instructor(store, payload)
    response.headers["Location"] = str(instructor_id)
    return {"message": f"Created a new instructor with id {instructor_id}", "id": str(instructor_id)}


@router.put("/instructors/{instructor_id}")
async def replace_instructor(
    instructor_id: str,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return {"message": await service.replace_instructor(store, instructor_id, payload)}


@router.patch("/instructors/{instructor_id}")
async def patch_instructor(
    instructor_id: str,
    payload: Any = Body(...),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return {"message": await service.patch_instructor(store, instructor_id, payload)}


@router.delete("/instructors/{instructor_id}", status_code=status.HTTP_202_ACCEPTED)
async def delete_instructor(
    instructor_id: str,
    store: DocumentStore = Depends(get_store),
) -> dict:
    return {"message": await service.delete_instructor(store, instructor_id)}
