"""Transient user-facing notifications for the dashboard."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Literal, Optional


NotificationKind = Literal["success", "error", "info"]

DEFAULT_DELAY_SECONDS = 5.0


@dataclass(frozen=True)
class Notification:
    """A single message shown to the operator until it expires."""

    kind: NotificationKind
    message: str
    posted_at: float
    expires_at: float

    def to_dict(self, *, now: float) -> Dict[str, object]:
        return {
            "kind": self.kind,
            "message": self.message,
            "expires_in": max(0.0, round(self.expires_at - now, 3)),
        }


class NotificationCenter:
    """Hold at most one notification; a newer one supersedes the current one.

    Expiry is evaluated against ``clock`` whenever the notification is read, so
    the timer of a superseded notification never clears its replacement.
    """

    def __init__(
        self,
        *,
        delay: float = DEFAULT_DELAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if delay <= 0:
            raise ValueError("Notification delay must be greater than zero")
        self._delay = delay
        self._clock = clock
        self._current: Optional[Notification] = None

    @property
    def delay(self) -> float:
        return self._delay

    def post(self, kind: NotificationKind, message: str) -> Notification:
        now = self._clock()
        notification = Notification(
            kind=kind,
            message=message,
            posted_at=now,
            expires_at=now + self._delay,
        )
        self._current = notification
        return notification

    def current(self) -> Optional[Notification]:
        notification = self._current
        if notification is None:
            return None
        if notification.expires_at <= self._clock():
            self._current = None
            return None
        return notification

    def dismiss(self) -> None:
        self._current = None

    def snapshot(self) -> Optional[Dict[str, object]]:
        notification = self.current()
        if notification is None:
            return None
        return notification.to_dict(now=self._clock())


__all__ = ["DEFAULT_DELAY_SECONDS", "Notification", "NotificationCenter", "NotificationKind"]
