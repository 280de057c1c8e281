"""Draft editing for the create/edit record form."""

from __future__ import annotations

import inspect
import re
from typing import Awaitable, Dict, Optional, Protocol, Union

from .models import Record, RecordPayload
from .state import SessionState


_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")

FORM_FIELDS = ("name", "email", "age")


class FormHandlers(Protocol):
    def on_submit(self, payload: RecordPayload) -> Union[Awaitable[None], None]: ...

    def on_cancel(self) -> None: ...


def coerce_age(value: object) -> int:
    """Read the leading integer of ``value``; anything unparsable becomes 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else 0
    match = _LEADING_INTEGER.match(str(value or ""))
    if match is None:
        return 0
    return int(match.group(1))


class RecordForm:
    """Hold a local draft of a record's editable fields."""

    def __init__(
        self,
        handlers: FormHandlers,
        state: SessionState,
        *,
        record: Optional[Record] = None,
    ) -> None:
        self._handlers = handlers
        self._state = state
        self._record = record
        self._draft: Dict[str, object] = {
            "name": record.name if record and record.name else "",
            "email": record.email if record and record.email else "",
            "age": record.age if record and record.age else 0,
        }

    @property
    def record(self) -> Optional[Record]:
        return self._record

    @property
    def is_edit(self) -> bool:
        return self._record is not None

    @property
    def disabled(self) -> bool:
        return self._state.is_submitting

    @property
    def title(self) -> str:
        return "Edit User" if self.is_edit else "Create New User"

    @property
    def submit_label(self) -> str:
        if self.disabled:
            return "Saving..."
        return "Update User" if self.is_edit else "Create User"

    @property
    def draft(self) -> Dict[str, object]:
        return dict(self._draft)

    def set_field(self, name: str, value: object) -> None:
        if name not in FORM_FIELDS:
            raise KeyError(f"Unknown form field '{name}'")
        if name == "age":
            self._draft["age"] = coerce_age(value)
        else:
            self._draft[name] = "" if value is None else str(value)

    def update(self, values: Dict[str, object]) -> None:
        for name in FORM_FIELDS:
            if name in values:
                self.set_field(name, values[name])

    def payload(self) -> RecordPayload:
        return RecordPayload(
            name=str(self._draft["name"]),
            email=str(self._draft["email"]),
            age=coerce_age(self._draft["age"]),
        )

    async def submit(self) -> bool:
        """Emit the draft to ``on_submit``; returns ``False`` while disabled."""
        if self.disabled:
            return False
        result = self._handlers.on_submit(self.payload())
        if inspect.isawaitable(result):
            await result
        return True

    def cancel(self) -> bool:
        if self.disabled:
            return False
        self._handlers.on_cancel()
        return True


__all__ = ["FORM_FIELDS", "FormHandlers", "RecordForm", "coerce_age"]
