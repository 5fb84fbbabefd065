"""
Class location document rules.

The back-reference array is spelled `classIDs` here (instructors use
`classIds`); stored documents depend on both spellings.
"""

from __future__ import annotations

from typing import Annotated, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from core.enums import ClassFormat
from core.filters import FieldType
from core.validation import IdString, PatchableFields

MIN_CAPACITY = 5


def _check_capacity(value: int | float) -> int | float:
    if value < MIN_CAPACITY:
        raise ValueError(f"must be at least {MIN_CAPACITY}")
    return value


Name = Annotated[str, Field(min_length=3)]
MaxCapacity = Annotated[Union[int, float], AfterValidator(_check_capacity)]
Location = Annotated[str, Field(min_length=5)]
ClassFormats = Annotated[list[ClassFormat], Field(min_length=1)]


class ClassLocationPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Name
    maxCapacity: MaxCapacity
    location: Location
    classFormats: ClassFormats
    classIDs: list[IdString] | None = None


PATCHABLE = PatchableFields.from_types(
    name=Name,
    maxCapacity=MaxCapacity,
    location=Location,
    classFormats=ClassFormats,
    classIDs=list[IdString],
)

FILTER_FIELDS = {
    "name": FieldType.STRING,
    "maxCapacity": FieldType.NUMBER,
    "location": FieldType.STRING,
    "classFormats": FieldType.STRING_LIST,
    "classIDs": FieldType.REFERENCE_LIST,
}
