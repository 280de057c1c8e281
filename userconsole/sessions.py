"""In-memory registry of dashboard sessions for the web console."""

from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from .controller import DashboardController


@dataclass
class _SessionRecord:
    controller: DashboardController
    expires_at: datetime


class DashboardSessionManager:
    """Create, resolve, and discard per-browser dashboard controllers."""

    def __init__(
        self,
        factory: Callable[[], DashboardController],
        *,
        ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self._factory = factory
        self._ttl = ttl
        self._sessions: Dict[str, _SessionRecord] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create(self) -> tuple[str, DashboardController]:
        token = secrets.token_urlsafe(32)
        controller = self._factory()
        record = _SessionRecord(controller=controller, expires_at=self._now() + self._ttl)
        with self._lock:
            self._sessions[token] = record
        return token, controller

    def resolve(self, token: Optional[str]) -> Optional[DashboardController]:
        if not token:
            return None
        now = self._now()
        with self._lock:
            record = self._sessions.get(token)
            if record is None:
                return None
            if record.expires_at <= now:
                self._sessions.pop(token, None)
                return None
            record.expires_at = now + self._ttl
            return record.controller

    def discard(self, token: Optional[str]) -> Optional[DashboardController]:
        if not token:
            return None
        with self._lock:
            record = self._sessions.pop(token, None)
        return record.controller if record else None

    def expire_idle(self) -> List[DashboardController]:
        now = self._now()
        with self._lock:
            expired = [token for token, record in self._sessions.items() if record.expires_at <= now]
            return [self._sessions.pop(token).controller for token in expired]

    def drain(self) -> List[DashboardController]:
        with self._lock:
            controllers = [record.controller for record in self._sessions.values()]
            self._sessions.clear()
        return controllers

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)


__all__ = ["DashboardSessionManager"]
