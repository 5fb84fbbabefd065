import copy
import re
from contextlib import asynccontextmanager
from datetime import date
from typing import Any

import pytest
from fastapi.testclient import TestClient

from core.errors import StorageFailure
from core.filters import ID_FIELD, ISO_DATE_PREFIX, FieldType, FilterExpression, Op
from core.identifiers import DocumentId, new_id
from core.settings import API_PREFIX
from core.store import COLLECTIONS, UpdateResult

_LIST_TYPES = {FieldType.STRING_LIST, FieldType.REFERENCE_LIST}


def _date_text(value: Any) -> str | None:
    if isinstance(value, str) and re.match(ISO_DATE_PREFIX, value):
        return value[:10]
    return None


def _plain(value: Any) -> Any:
    if isinstance(value, DocumentId):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    return value


def _matches(where: FilterExpression | None, doc_id: str, doc: dict[str, Any]) -> bool:
    for cond in (where.conditions if where else ()):
        actual = doc_id if cond.field == ID_FIELD else doc.get(cond.field)
        expected = _plain(cond.value)
        if cond.field_type is FieldType.DATE:
            actual = _date_text(actual)

        if cond.field_type in _LIST_TYPES:
            items = actual or []
            if cond.op is Op.IN:
                ok = any(v in items for v in expected)
            elif cond.op is Op.NE:
                ok = expected not in items
            else:
                ok = expected in items
        elif cond.op is Op.IN:
            ok = actual in expected
        elif cond.op is Op.NE:
            ok = actual != expected
        elif cond.op is Op.EQ:
            ok = actual == expected
        elif actual is None:
            ok = False
        elif cond.op is Op.GT:
            ok = actual > expected
        elif cond.op is Op.GTE:
            ok = actual >= expected
        elif cond.op is Op.LT:
            ok = actual < expected
        else:
            ok = actual <= expected

        if not ok:
            return False
    return True


class MemoryStore:
    """
    In-memory stand-in for `core.store.DocumentStore`.

    `failing` holds (method, collection) pairs that raise `StorageFailure`.
    Transactions snapshot every collection and restore it on error.
    """

    def __init__(self):
        self.collections: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in COLLECTIONS}
        self.failing: set[tuple[str, str]] = set()
        self.transactions = 0

    def _check(self, method: str, collection: str) -> dict[str, dict[str, Any]]:
        if (method, collection) in self.failing:
            raise StorageFailure(f"Injected failure in {method} on {collection}.")
        return self.collections[collection]

    def doc(self, collection: str, doc_id: Any) -> dict[str, Any] | None:
        return self.collections[collection].get(str(doc_id))

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        snapshot = copy.deepcopy(self.collections)
        try:
            yield self
        except BaseException:
            self.collections = snapshot
            raise

    async def find(self, collection, where=None, *, sort=None, skip=0, limit=0, include_id=True):
        docs = [
            {"_id": doc_id, **copy.deepcopy(doc)}
            for doc_id, doc in self._check("find", collection).items()
            if _matches(where, doc_id, doc)
        ]
        if sort:
            docs.sort(key=lambda d: str(d.get(sort, "")))
        docs = docs[skip:] if skip else docs
        docs = docs[:limit] if limit else docs
        if not include_id:
            for d in docs:
                d.pop("_id")
        return docs

    async def find_one(self, collection, doc_id):
        doc = self._check("find_one", collection).get(doc_id.value)
        return {"_id": doc_id.value, **copy.deepcopy(doc)} if doc is not None else None

    async def exists(self, collection, doc_id):
        return doc_id.value in self._check("exists", collection)

    async def insert_one(self, collection, document):
        doc_id = new_id()
        self._check("insert_one", collection)[doc_id.value] = copy.deepcopy(document)
        return doc_id

    async def _update(self, method, collection, doc_id, change):
        docs = self._check(method, collection)
        old = docs.get(doc_id.value)
        if old is None:
            return UpdateResult(matched=0, modified=0)
        new = change(copy.deepcopy(old))
        if new == old:
            return UpdateResult(matched=1, modified=0)
        docs[doc_id.value] = new
        return UpdateResult(matched=1, modified=1)

    async def replace_one(self, collection, doc_id, document):
        return await self._update("replace_one", collection, doc_id, lambda _: copy.deepcopy(document))

    async def set_fields(self, collection, doc_id, fields):
        return await self._update("set_fields", collection, doc_id, lambda old: {**old, **copy.deepcopy(fields)})

    async def add_to_array(self, collection, doc_id, field, value):
        def change(old):
            items = list(old.get(field) or [])
            if value not in items:
                items.append(value)
            return {**old, field: items}

        return await self._update("add_to_array", collection, doc_id, change)

    async def remove_from_array(self, collection, doc_id, field, value):
        def change(old):
            if value not in (old.get(field) or []):
                return old
            return {**old, field: [v for v in old[field] if v != value]}

        return await self._update("remove_from_array", collection, doc_id, change)

    async def delete_one(self, collection, doc_id):
        docs = self._check("delete_one", collection)
        return 1 if docs.pop(doc_id.value, None) is not None else 0


def instructor_payload(**overrides) -> dict[str, Any]:
    payload = {
        "name": "Maya Patel",
        "yogaSpecialities": ["Hatha", "Yin"],
        "email": "maya@lotusstudio.com",
    }
    payload.update(overrides)
    return payload


def location_payload(**overrides) -> dict[str, Any]:
    payload = {
        "name": "Riverside Studio",
        "maxCapacity": 20,
        "location": "12 River Road, Dublin",
        "classFormats": ["Location", "Both"],
    }
    payload.update(overrides)
    return payload


def class_payload(instructor_id: str, location_id: str, **overrides) -> dict[str, Any]:
    payload = {
        "instructorId": instructor_id,
        "classLocationId": location_id,
        "description": "Slow morning flow for all bodies",
        "date": "2025-03-01",
        "startTime": "09:00",
        "endTime": "10:15",
        "level": ["Beginner"],
        "type": ["Vinyasa"],
        "category": ["Flexibility", "Balance"],
        "classFormat": "Both",
        "spacesAvailable": 12,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def client(store):
    from main import create_app

    with TestClient(create_app(store=store)) as test_client:
        yield test_client


@pytest.fixture
def api():
    return API_PREFIX


@pytest.fixture
def make_instructor(client, api):
    def make(**overrides) -> str:
        res = client.post(f"{api}/instructors", json=instructor_payload(**overrides))
        assert res.status_code == 201, res.text
        return res.json()["id"]

    return make


@pytest.fixture
def make_location(client, api):
    def make(**overrides) -> str:
        res = client.post(f"{api}/classlocations", json=location_payload(**overrides))
        assert res.status_code == 201, res.text
        return res.json()["id"]

    return make


@pytest.fixture
def make_class(client, api):
    def make(instructor_id: str, location_id: str, **overrides) -> str:
        res = client.post(f"{api}/classes", json=class_payload(instructor_id, location_id, **overrides))
        assert res.status_code == 201, res.text
        return res.json()["id"]

    return make
