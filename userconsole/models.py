"""Wire models for records exchanged with the user-records service."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecordPayload(BaseModel):
    """Client-editable fields sent on create and update."""

    name: str = ""
    email: str = ""
    age: int = 0


def _parse_timestamp(value: Any) -> Any:
    """Turn the service's timestamp shapes into ``datetime`` where possible.

    ISO strings and Firestore-style ``{"_seconds", "_nanoseconds"}`` objects
    are converted; anything else is kept as received.
    """
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, Mapping):
        seconds = value.get("_seconds", value.get("seconds"))
        nanos = value.get("_nanoseconds", value.get("nanoseconds")) or 0
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            return value
        if isinstance(nanos, bool) or not isinstance(nanos, (int, float)):
            nanos = 0
        try:
            return datetime.fromtimestamp(seconds + nanos / 1_000_000_000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


class Record(BaseModel):
    """A user record as cached by the console.

    ``id`` and ``created_at`` are assigned by the remote service. The timestamp
    is opaque to the console: recognised shapes become ``datetime``, others are
    carried through untouched.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    id: Optional[str] = None
    name: str = ""
    email: str = ""
    age: int = 0
    created_at: Optional[Any] = Field(default=None, alias="createdAt")

    @field_validator("name", "email", mode="before")
    @classmethod
    def _blank_when_missing(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("age", mode="before")
    @classmethod
    def _lenient_age(cls, value: object) -> int:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0
        if math.isnan(number) or math.isinf(number):
            return 0
        return int(number)

    @field_validator("created_at", mode="before")
    @classmethod
    def _normalise_created_at(cls, value: object) -> Any:
        return _parse_timestamp(value)

    @property
    def has_id(self) -> bool:
        return bool(self.id)

    @property
    def created_datetime(self) -> Optional[datetime]:
        return self.created_at if isinstance(self.created_at, datetime) else None

    def to_payload(self) -> RecordPayload:
        return RecordPayload(name=self.name, email=self.email, age=self.age)


__all__ = ["Record", "RecordPayload"]
