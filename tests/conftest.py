from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from userconsole.models import Record, RecordPayload
from userconsole.transport import TransportError


class FakeRecordService:
    """In-memory stand-in for :class:`RecordTransport`."""

    def __init__(self, records: Optional[List[Record]] = None) -> None:
        self.records: Dict[str, Record] = {}
        for record in records or []:
            self.records[record.id or ""] = record
        self.calls: List[tuple] = []
        self.failing: Set[str] = set()
        self.closed = False
        self._next_id = 1

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failing:
            raise TransportError(operation, 500)

    async def list_all(self) -> List[Record]:
        self.calls.append(("list",))
        self._maybe_fail("list")
        return list(self.records.values())

    async def get_by_id(self, record_id: str) -> Record:
        self.calls.append(("get", record_id))
        self._maybe_fail("get")
        try:
            return self.records[record_id]
        except KeyError:
            raise TransportError("get", 404) from None

    async def create(self, payload: RecordPayload) -> Record:
        self.calls.append(("create", payload.model_dump()))
        self._maybe_fail("create")
        record_id = f"u{self._next_id}"
        self._next_id += 1
        record = Record(
            id=record_id,
            name=payload.name,
            email=payload.email,
            age=payload.age,
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )
        self.records[record_id] = record
        return record

    async def update(self, record_id: str, payload: RecordPayload) -> Record:
        self.calls.append(("update", record_id, payload.model_dump()))
        self._maybe_fail("update")
        if record_id not in self.records:
            raise TransportError("update", 404)
        record = self.records[record_id].model_copy(update=payload.model_dump())
        self.records[record_id] = record
        return record

    async def delete(self, record_id: str) -> None:
        self.calls.append(("delete", record_id))
        self._maybe_fail("delete")
        if self.records.pop(record_id, None) is None:
            raise TransportError("delete", 404)

    async def aclose(self) -> None:
        self.closed = True

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def service() -> FakeRecordService:
    return FakeRecordService(
        [
            Record(id="a1", name="Alice", email="alice@example.com", age=31),
            Record(id="b2", name="Bob", email="bob@example.com", age=45),
        ]
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
