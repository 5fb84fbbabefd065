"""
Document identifiers.

External ids are 24 hex characters (the ObjectId shape clients already
use). Inside the API an id travels as a `DocumentId`, so a raw request
string can never be mistaken for a checked reference.
"""

from __future__ import annotations

import os
import re
import struct
import time
from dataclasses import dataclass
from typing import Any

from .errors import MalformedIdentifier

_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


@dataclass(frozen=True)
class DocumentId:
    value: str

    def __str__(self) -> str:
        return self.value


def is_valid_id(raw: Any) -> bool:
    return isinstance(raw, str) and _ID_PATTERN.match(raw) is not None


def parse_id(raw: Any, *, label: str = "id", status_code: int | None = None) -> DocumentId:
    if isinstance(raw, DocumentId):
        return raw
    if not is_valid_id(raw):
        raise MalformedIdentifier(raw, label=label, status_code=status_code)
    return DocumentId(raw.lower())


def new_id() -> DocumentId:
    """
    4-byte big-endian unix timestamp followed by 8 random bytes.
    """
    head = struct.pack(">I", int(time.time()) & 0xFFFFFFFF)
    return DocumentId((head + os.urandom(8)).hex())
