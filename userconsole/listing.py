"""Presentation of the canonical record list."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, List, Literal, Optional, Protocol, Union

from .models import Record
from .state import SessionState


ListMode = Literal["loading", "empty", "rows"]


class ListHandlers(Protocol):
    def on_edit(self, record: Record) -> None: ...

    def on_delete(self, record: Record) -> Union[Awaitable[None], None]: ...


@dataclass(frozen=True)
class RecordRow:
    record: Record
    can_delete: bool

    @property
    def created_label(self) -> str:
        created = self.record.created_at
        if isinstance(created, datetime):
            return created.strftime("%Y-%m-%d %H:%M")
        if isinstance(created, str):
            return created
        return ""


@dataclass(frozen=True)
class ListRendering:
    mode: ListMode
    rows: List[RecordRow]
    count: int


class RecordListView:
    """Render loading, empty or row states and forward row intents."""

    def __init__(self, handlers: ListHandlers, state: SessionState) -> None:
        self._handlers = handlers
        self._state = state

    def render(self) -> ListRendering:
        records = list(self._state.records)
        if self._state.is_list_loading:
            return ListRendering(mode="loading", rows=[], count=len(records))
        if not records:
            return ListRendering(mode="empty", rows=[], count=0)
        rows = [RecordRow(record=record, can_delete=record.has_id) for record in records]
        return ListRendering(mode="rows", rows=rows, count=len(rows))

    def find(self, record_id: str) -> Optional[Record]:
        for record in self._state.records:
            if record.id == record_id:
                return record
        return None

    def edit(self, record: Record) -> None:
        self._handlers.on_edit(record)

    async def delete(self, record: Record) -> bool:
        if not record.has_id:
            return False
        result = self._handlers.on_delete(record)
        if inspect.isawaitable(result):
            await result
        return True


__all__ = ["ListHandlers", "ListMode", "ListRendering", "RecordListView", "RecordRow"]
