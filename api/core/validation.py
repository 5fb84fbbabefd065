"""
Validation engine shared by all entities.

Entity rules live in each package's pydantic models; this module runs them
and turns pydantic's errors into the API's multi-error report. Every
violated rule is reported, never only the first one.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Annotated, Any, Mapping

from pydantic import AfterValidator, BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import NoValidFields, ValidationError
from .identifiers import is_valid_id

TIME_PATTERN = r"^(0[0-9]|1[0-9]|2[0-3]):[0-5][0-9]$"


def _check_id(value: str) -> str:
    if not is_valid_id(value):
        raise ValueError("must be a 24-character hex id")
    return value.lower()


IdString = Annotated[str, AfterValidator(_check_id)]


def parse_iso_date(value: Any) -> dt.date:
    """
    Date part of an ISO 8601 date or datetime string. Raises `ValueError`
    for anything else, including numbers.
    """
    if not isinstance(value, str):
        raise ValueError("must be an ISO 8601 date string")
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError("must be an ISO 8601 date string") from None


def _error_entries(exc: PydanticValidationError, *, prefix: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    for err in exc.errors(include_url=False):
        loc = prefix + tuple(err.get("loc", ()))
        entries.append(
            {
                "field": ".".join(str(part) for part in loc) or "body",
                "message": str(err.get("msg", "")),
                "type": str(err.get("type", "")),
            }
        )
    return entries


def _require_object(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValidationError(
            [{"field": "body", "message": "Payload must be a JSON object.", "type": "dict_type"}]
        )
    return payload


def validate(model: type[BaseModel], payload: Any) -> dict[str, Any]:
    """
    Validate `payload` against `model` and return the normalized JSON document.
    """
    try:
        validated = model.model_validate(_require_object(payload))
    except PydanticValidationError as exc:
        raise ValidationError(_error_entries(exc)) from None
    return validated.model_dump(mode="json", exclude_none=True)


@dataclass(frozen=True)
class PatchableFields:
    """
    Fields a PATCH may touch, each with the validator for its value.
    """

    validators: Mapping[str, TypeAdapter]

    @classmethod
    def from_types(cls, **field_types: Any) -> PatchableFields:
        return cls({name: TypeAdapter(tp) for name, tp in field_types.items()})

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self.validators)

    def select(self, payload: Any) -> dict[str, Any]:
        return {k: v for k, v in _require_object(payload).items() if k in self.validators}

    def validate(self, payload: Any) -> dict[str, Any]:
        selected = self.select(payload)
        if not selected:
            raise NoValidFields()

        cleaned: dict[str, Any] = {}
        errors: list[dict[str, Any]] = []
        for name, value in selected.items():
            adapter = self.validators[name]
            try:
                cleaned[name] = adapter.dump_python(adapter.validate_python(value), mode="json")
            except PydanticValidationError as exc:
                errors.extend(_error_entries(exc, prefix=(name,)))

        if errors:
            raise ValidationError(errors)
        return cleaned


def page_window(page: int, page_size: int) -> tuple[int, int]:
    """
    Return (skip, limit) for 1-based paging. A page size of 0 means
    "everything": no skip and no limit.
    """
    if page_size <= 0:
        return 0, 0
    page = max(page, 1)
    return (page - 1) * page_size, page_size


def int_param(raw: str | None, default: int) -> int:
    """
    Lenient query-string integer: anything unparsable, and zero, fall back
    to `default`.
    """
    try:
        value = int((raw or "").strip())
    except ValueError:
        return default
    return value or default
