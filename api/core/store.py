"""
JSON document store on top of Postgres (asyncpg).

Each collection is a table `(id text, seq bigserial, doc jsonb)`:
- `id` is the 24-hex document id (see `core.identifiers`)
- `seq` keeps insertion order, used as the default sort
- `doc` holds the document body without its id

Documents leave the store as plain dicts with the id under `_id`.
Update operations report `UpdateResult(matched, modified)`, so callers can
tell "no such document" apart from "nothing changed".
"""

from __future__ import annotations

import functools
import json
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator

import asyncpg

from .errors import StorageFailure
from .filters import FilterExpression, compile_filter
from .identifiers import DocumentId, new_id

INSTRUCTORS = "instructors"
CLASS_LOCATIONS = "class_locations"
CLASSES = "classes"
COLLECTIONS = (INSTRUCTORS, CLASS_LOCATIONS, CLASSES)


@dataclass(frozen=True)
class UpdateResult:
    matched: int
    modified: int


def _table(collection: str) -> str:
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection}")
    return f'"{collection}"'


def _json_arg(value: dict[str, Any]) -> str:
    """
    asyncpg does not automatically encode Python dicts for jsonb parameters.
    We pass JSON as a string and cast to jsonb in SQL.
    """
    return json.dumps(value, ensure_ascii=True)


def _row_to_document(row: asyncpg.Record, *, include_id: bool = True) -> dict[str, Any]:
    body = json.loads(row["doc"]) if isinstance(row["doc"], str) else dict(row["doc"])
    body.pop("_id", None)
    if not include_id:
        return body
    return {"_id": row["id"], **body}


def _storage_call(func):
    @functools.wraps(func)
    async def wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
            raise StorageFailure(f"Document store error during {func.__name__}.") from exc

    return wrapper


class DocumentStore:
    """
    Collection-level reads and writes. Bound either to a pool (each call
    borrows a connection) or to one connection inside a transaction.
    """

    def __init__(self, executor: asyncpg.Pool | asyncpg.Connection):
        self._executor = executor

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[DocumentStore]:
        try:
            if isinstance(self._executor, asyncpg.Pool):
                async with self._executor.acquire() as conn:  # type: asyncpg.Connection
                    async with conn.transaction():
                        yield DocumentStore(conn)
            else:
                # Already inside a transaction: nest as a savepoint.
                async with self._executor.transaction():
                    yield DocumentStore(self._executor)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
            raise StorageFailure("Document store transaction failed.") from exc

    @_storage_call
    async def ensure_collections(self) -> None:
        for collection in COLLECTIONS:
            table = _table(collection)
            await self._executor.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {table} (
                  id text PRIMARY KEY,
                  seq bigserial NOT NULL,
                  doc jsonb NOT NULL DEFAULT '{{}}'::jsonb
                )
                """
            )
            await self._executor.execute(
                f'CREATE INDEX IF NOT EXISTS "{collection}_doc_gin" ON {table} USING gin (doc jsonb_path_ops)'
            )

    @_storage_call
    async def find(
        self,
        collection: str,
        where: FilterExpression | None = None,
        *,
        sort: str | None = None,
        skip: int = 0,
        limit: int = 0,
        include_id: bool = True,
    ) -> list[dict[str, Any]]:
        """
        Return matching documents. `limit=0` means no limit.
        """
        clause, args = compile_filter(where or FilterExpression())
        sql = f"SELECT id, doc FROM {_table(collection)}"
        if clause:
            sql += f" WHERE {clause}"
        if sort:
            # Byte-order name sort, independent of the database locale.
            sql += f" ORDER BY (doc ->> '{sort}') COLLATE \"C\" ASC, seq ASC"
        else:
            sql += " ORDER BY seq ASC"
        if limit > 0:
            args.append(limit)
            sql += f" LIMIT ${len(args)}"
        if skip > 0:
            args.append(skip)
            sql += f" OFFSET ${len(args)}"

        rows = await self._executor.fetch(sql, *args)
        return [_row_to_document(r, include_id=include_id) for r in rows]

    @_storage_call
    async def find_one(self, collection: str, doc_id: DocumentId) -> dict[str, Any] | None:
        row = await self._executor.fetchrow(
            f"SELECT id, doc FROM {_table(collection)} WHERE id = $1",
            doc_id.value,
        )
        return _row_to_document(row) if row is not None else None

    @_storage_call
    async def exists(self, collection: str, doc_id: DocumentId) -> bool:
        row = await self._executor.fetchrow(
            f"SELECT 1 AS ok FROM {_table(collection)} WHERE id = $1 LIMIT 1",
            doc_id.value,
        )
        return row is not None

    @_storage_call
    async def insert_one(self, collection: str, document: dict[str, Any]) -> DocumentId:
        doc_id = new_id()
        row = await self._executor.fetchrow(
            f"INSERT INTO {_table(collection)} (id, doc) VALUES ($1, $2::jsonb) RETURNING id",
            doc_id.value,
            _json_arg(document),
        )
        if row is None:
            raise StorageFailure(f"Failed to insert into {collection}.")
        return doc_id

    async def replace_one(self, collection: str, doc_id: DocumentId, document: dict[str, Any]) -> UpdateResult:
        return await self._update(collection, doc_id, "$2::jsonb", _json_arg(document))

    async def set_fields(self, collection: str, doc_id: DocumentId, fields: dict[str, Any]) -> UpdateResult:
        """
        Merge top-level fields into the document (other fields are kept).
        """
        return await self._update(collection, doc_id, "doc || $2::jsonb", _json_arg(fields))

    async def add_to_array(self, collection: str, doc_id: DocumentId, field: str, value: str) -> UpdateResult:
        """
        Append `value` to the array `field` unless it is already there.
        """
        return await self._update(
            collection,
            doc_id,
            """
            CASE
              WHEN COALESCE(doc -> $2::text, '[]'::jsonb) @> jsonb_build_array($3::text) THEN doc
              ELSE jsonb_set(
                doc,
                ARRAY[$2::text],
                COALESCE(doc -> $2::text, '[]'::jsonb) || jsonb_build_array($3::text)
              )
            END
            """,
            field,
            value,
        )

    async def remove_from_array(self, collection: str, doc_id: DocumentId, field: str, value: str) -> UpdateResult:
        """
        Remove every occurrence of `value` from the array `field`.
        """
        return await self._update(
            collection,
            doc_id,
            """
            CASE
              WHEN COALESCE(doc -> $2::text, '[]'::jsonb) @> jsonb_build_array($3::text) THEN jsonb_set(
                doc,
                ARRAY[$2::text],
                COALESCE(
                  (
                    SELECT jsonb_agg(elem.value)
                    FROM jsonb_array_elements(doc -> $2::text) AS elem(value)
                    WHERE elem.value <> to_jsonb($3::text)
                  ),
                  '[]'::jsonb
                )
              )
              ELSE doc
            END
            """,
            field,
            value,
        )

    @_storage_call
    async def _update(self, collection: str, doc_id: DocumentId, new_doc_sql: str, *args: Any) -> UpdateResult:
        table = _table(collection)
        row = await self._executor.fetchrow(
            f"""
            WITH target AS (
              SELECT id FROM {table} WHERE id = $1
            ),
            updated AS (
              UPDATE {table}
              SET doc = ({new_doc_sql})
              WHERE id = $1
                AND ({new_doc_sql}) IS DISTINCT FROM doc
              RETURNING id
            )
            SELECT
              (SELECT count(*) FROM target) AS matched,
              (SELECT count(*) FROM updated) AS modified
            """,
            doc_id.value,
            *args,
        )
        if row is None:
            return UpdateResult(matched=0, modified=0)
        return UpdateResult(matched=int(row["matched"]), modified=int(row["modified"]))

    @_storage_call
    async def delete_one(self, collection: str, doc_id: DocumentId) -> int:
        row = await self._executor.fetchrow(
            f"DELETE FROM {_table(collection)} WHERE id = $1 RETURNING id",
            doc_id.value,
        )
        return 1 if row is not None else 0
