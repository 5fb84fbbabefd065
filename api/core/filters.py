"""
Typed filter expressions for list endpoints.

Clients send `?filter=<json>`. The JSON is parsed into a `FilterExpression`
checked against the entity's field types before anything reaches the store:

    {"name": "Ada"}                                   equality
    {"maxCapacity": {"$gte": 10}}                     comparison
    {"date": {"from": "2025-01-01", "to": "2025-01-31"}}  range aliases
    {"level": "Beginner"}                             list field contains value
    {"instructorId": "65f0c2...", "_id": {"$in": [...]}}

`compile_filter` renders an expression as a SQL fragment over the `doc`
JSONB column with asyncpg positional arguments ($1, $2, ...).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Mapping

from .errors import InvalidFilter, MalformedIdentifier
from .identifiers import DocumentId, parse_id
from .validation import parse_iso_date

ID_FIELD = "_id"

# Stored dates are compared as their leading YYYY-MM-DD text; values that do
# not start that way (class PATCH is unvalidated) never match a date condition.
ISO_DATE_PREFIX = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}"


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    DATE = "date"
    REFERENCE = "reference"
    STRING_LIST = "string_list"
    REFERENCE_LIST = "reference_list"


class Op(str, Enum):
    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"


_OP_ALIASES = {"from": Op.GTE, "to": Op.LTE}
_RANGE_OPS = {Op.GT, Op.GTE, Op.LT, Op.LTE}
_LIST_TYPES = {FieldType.STRING_LIST, FieldType.REFERENCE_LIST}
_SQL_COMPARATORS = {
    Op.EQ: "=",
    Op.GT: ">",
    Op.GTE: ">=",
    Op.LT: "<",
    Op.LTE: "<=",
}


@dataclass(frozen=True)
class Condition:
    field: str
    field_type: FieldType
    op: Op
    value: Any


@dataclass(frozen=True)
class FilterExpression:
    conditions: tuple[Condition, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return bool(self.conditions)

    def and_(self, *conditions: Condition) -> FilterExpression:
        return FilterExpression(self.conditions + tuple(conditions))


def equals(field_name: str, field_type: FieldType, value: Any) -> FilterExpression:
    return FilterExpression((Condition(field_name, field_type, Op.EQ, value),))


def parse_filter(raw: str | None, fields: Mapping[str, FieldType]) -> FilterExpression:
    if raw is None or not raw.strip():
        return FilterExpression()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidFilter(f"Filter is not valid JSON: {exc.msg}.") from exc
    return build_filter(data, fields)


def build_filter(data: Any, fields: Mapping[str, FieldType]) -> FilterExpression:
    if not isinstance(data, dict):
        raise InvalidFilter("Filter must be a JSON object.")

    conditions: list[Condition] = []
    for name, criteria in data.items():
        field_type = FieldType.REFERENCE if name == ID_FIELD else fields.get(name)
        if field_type is None:
            raise InvalidFilter(f"Unknown filter field '{name}'.")

        if isinstance(criteria, dict):
            if not criteria:
                raise InvalidFilter(f"Empty operator object for '{name}'.")
            pairs = list(criteria.items())
        else:
            pairs = [(Op.EQ.value, criteria)]

        for op_name, raw_value in pairs:
            op = _parse_op(name, op_name)
            if op in _RANGE_OPS and field_type in _LIST_TYPES | {FieldType.REFERENCE}:
                raise InvalidFilter(f"Operator '{op_name}' is not supported on '{name}'.")
            conditions.append(Condition(name, field_type, op, _convert(name, field_type, op, raw_value)))

    return FilterExpression(tuple(conditions))


def _parse_op(name: str, op_name: Any) -> Op:
    if op_name in _OP_ALIASES:
        return _OP_ALIASES[op_name]
    try:
        return Op(op_name)
    except ValueError:
        raise InvalidFilter(f"Unknown operator '{op_name}' for '{name}'.") from None


def _convert(name: str, field_type: FieldType, op: Op, raw: Any) -> Any:
    if op is Op.IN:
        if not isinstance(raw, list) or not raw:
            raise InvalidFilter(f"'$in' for '{name}' needs a non-empty list.")
        return tuple(_convert_scalar(name, field_type, item) for item in raw)
    return _convert_scalar(name, field_type, raw)


def _convert_scalar(name: str, field_type: FieldType, raw: Any) -> Any:
    if field_type in (FieldType.STRING, FieldType.STRING_LIST):
        if not isinstance(raw, str):
            raise InvalidFilter(f"'{name}' expects a string.")
        return raw

    if field_type is FieldType.NUMBER:
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise InvalidFilter(f"'{name}' expects a number.")
        return raw

    if field_type is FieldType.INTEGER:
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise InvalidFilter(f"'{name}' expects an integer.")
        return raw

    if field_type is FieldType.DATE:
        return _parse_date(name, raw)

    try:
        return parse_id(raw, label=name)
    except MalformedIdentifier as exc:
        raise InvalidFilter(f"'{name}' expects a valid id, got {raw!r}.") from exc


def _parse_date(name: str, raw: Any) -> date:
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise InvalidFilter(f"'{name}' expects an ISO date string, got {raw!r}.") from None


def _json_value(value: Any) -> Any:
    if isinstance(value, DocumentId):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


def compile_filter(expr: FilterExpression, *, start: int = 1) -> tuple[str, list[Any]]:
    """
    Render `expr` as a SQL boolean expression plus its positional arguments.

    Field names are inlined; they only ever come from the per-entity field
    maps, never from client input that bypassed `build_filter`.
    """
    clauses: list[str] = []
    args: list[Any] = []

    def bind(value: Any) -> str:
        args.append(value)
        return f"${start + len(args) - 1}"

    for cond in expr.conditions:
        clauses.append(_compile_condition(cond, bind))

    return " AND ".join(clauses), args


def _compile_condition(cond: Condition, bind) -> str:
    if cond.field == ID_FIELD:
        if cond.op is Op.IN:
            return f"id = ANY({bind([v.value for v in cond.value])}::text[])"
        if cond.op is Op.NE:
            return f"id <> {bind(cond.value.value)}"
        return f"id = {bind(cond.value.value)}"

    key = cond.field.replace("'", "''")
    column = f"doc -> '{key}'"

    if cond.field_type in _LIST_TYPES:
        if cond.op is Op.IN:
            return f"({column}) ?| {bind([_json_value(v) for v in cond.value])}::text[]"
        contains = f"COALESCE({column}, '[]'::jsonb) @> {bind(json.dumps([_json_value(cond.value)]))}::jsonb"
        return f"NOT ({contains})" if cond.op is Op.NE else contains

    if cond.field_type is FieldType.DATE:
        text = f"(doc ->> '{key}')"
        date_column = f"(CASE WHEN {text} ~ '{ISO_DATE_PREFIX}' THEN left({text}, 10) END) COLLATE \"C\""
        if cond.op is Op.IN:
            return f"{date_column} = ANY({bind([d.isoformat() for d in cond.value])}::text[])"
        if cond.op is Op.NE:
            return f"{date_column} IS DISTINCT FROM {bind(cond.value.isoformat())}::text"
        return f"{date_column} {_SQL_COMPARATORS[cond.op]} {bind(cond.value.isoformat())}::text"

    if cond.op is Op.IN:
        return f"{bind(json.dumps([_json_value(v) for v in cond.value]))}::jsonb @> ({column})"
    if cond.op is Op.NE:
        return f"({column}) IS DISTINCT FROM {bind(json.dumps(_json_value(cond.value)))}::jsonb"
    return f"({column}) {_SQL_COMPARATORS[cond.op]} {bind(json.dumps(_json_value(cond.value)))}::jsonb"
