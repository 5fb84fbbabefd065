"""
Class document rules.
"""

from __future__ import annotations

import datetime as dt
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationInfo, field_validator

from core.enums import ClassCategory, ClassFormat, ClassLevel, YogaSpeciality
from core.errors import NoValidFields
from core.filters import ID_FIELD, FieldType
from core.validation import TIME_PATTERN, IdString, parse_iso_date

TimeOfDay = Annotated[str, Field(pattern=TIME_PATTERN)]
# ISO date or datetime text only; a datetime keeps its date part.
ClassDate = Annotated[dt.date, BeforeValidator(parse_iso_date)]


class ClassPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    instructorId: IdString
    description: Annotated[str, Field(min_length=10)]
    classLocationId: IdString
    date: ClassDate
    startTime: TimeOfDay
    endTime: TimeOfDay
    level: Annotated[list[ClassLevel], Field(min_length=1)]
    type: Annotated[list[YogaSpeciality], Field(min_length=1)]
    category: Annotated[list[ClassCategory], Field(min_length=1)]
    classFormat: ClassFormat
    spacesAvailable: Annotated[int, Field(ge=0, strict=True)]

    @field_validator("endTime")
    @classmethod
    def _end_after_start(cls, value: str, info: ValidationInfo) -> str:
        # Zero-padded HH:MM strings order the same way the times do.
        start = info.data.get("startTime")
        if start is not None and start >= value:
            raise ValueError("End time must be after start time")
        return value


def select_patch(payload: Any) -> dict[str, Any]:
    """
    Class PATCH takes any top-level field as-is; only the id is protected.
    """
    if not isinstance(payload, dict):
        raise NoValidFields("Patch payload must be a JSON object.")
    fields = {k: v for k, v in payload.items() if k != ID_FIELD}
    if not fields:
        raise NoValidFields()
    return fields


FILTER_FIELDS = {
    "instructorId": FieldType.REFERENCE,
    "classLocationId": FieldType.REFERENCE,
    "description": FieldType.STRING,
    "date": FieldType.DATE,
    "startTime": FieldType.STRING,
    "endTime": FieldType.STRING,
    "level": FieldType.STRING_LIST,
    "type": FieldType.STRING_LIST,
    "category": FieldType.STRING_LIST,
    "classFormat": FieldType.STRING,
    "spacesAvailable": FieldType.INTEGER,
}
