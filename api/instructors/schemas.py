"""
Instructor document rules.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from core.enums import YogaSpeciality
from core.filters import FieldType
from core.validation import IdString, PatchableFields

Name = Annotated[str, Field(min_length=3)]
Specialities = Annotated[list[YogaSpeciality], Field(min_length=1)]


class InstructorPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Name
    yogaSpecialities: Specialities
    email: EmailStr
    classIds: list[IdString] | None = None


PATCHABLE = PatchableFields.from_types(
    name=Name,
    yogaSpecialities=Specialities,
    email=EmailStr,
    classIds=list[IdString],
)

FILTER_FIELDS = {
    "name": FieldType.STRING,
    "yogaSpecialities": FieldType.STRING_LIST,
    "email": FieldType.STRING,
    "classIds": FieldType.REFERENCE_LIST,
}
