"""Dashboard controller: the owner of the canonical record list.

The controller mediates between operator intents (open a form, submit, edit,
delete) and the remote record service. After every successful mutation the
list is fetched again in full; it is never patched locally, so the rendered
rows always mirror the last completed fetch.
"""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Union

from .form import RecordForm
from .listing import RecordListView
from .models import Record, RecordPayload
from .notifications import Notification, NotificationCenter, NotificationKind
from .state import DashboardMode, SessionState
from .transport import RecordTransport, TransportError


logger = logging.getLogger("userconsole.controller")

ConfirmGate = Callable[[Record], Union[Awaitable[bool], bool]]

MESSAGES: Dict[str, str] = {
    "fetch_failed": "Failed to fetch users",
    "create_ok": "User created successfully!",
    "create_failed": "Failed to create user",
    "update_ok": "User updated successfully!",
    "update_failed": "Failed to update user",
    "delete_ok": "User deleted successfully!",
    "delete_failed": "Failed to delete user",
}


def _refuse(_record: Record) -> bool:
    return False


class DashboardController:
    """Orchestrate record operations for a single dashboard session."""

    def __init__(
        self,
        transport: RecordTransport,
        *,
        notifications: Optional[NotificationCenter] = None,
        confirm_delete: Optional[ConfirmGate] = None,
        owns_transport: bool = False,
    ) -> None:
        self._transport = transport
        self._owns_transport = owns_transport
        self._confirm_delete = confirm_delete or _refuse
        self.notifications = notifications or NotificationCenter()
        self.state = SessionState()
        self.form: Optional[RecordForm] = None
        self.list_view = RecordListView(self, self.state)
        self._fetch_generation = 0
        self._mounted = False

    @property
    def mode(self) -> DashboardMode:
        return self.state.mode

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def notification(self) -> Optional[Notification]:
        return self.notifications.current()

    async def mount(self) -> None:
        self._mounted = True
        await self.refresh()

    async def unmount(self) -> None:
        self._mounted = False
        self._close_form()
        self.notifications.dismiss()
        self.state.records = []
        if self._owns_transport:
            await self._transport.aclose()

    async def refresh(self) -> bool:
        """Replace the canonical list with a fresh fetch.

        Only the most recently started fetch may update the list or clear the
        loading flag; results of earlier fetches that settle later are dropped.
        """
        self._fetch_generation += 1
        generation = self._fetch_generation
        self.state.is_list_loading = True
        try:
            records = await self._transport.list_all()
        except TransportError as exc:
            logger.warning("Error fetching users: %s", exc)
            if generation == self._fetch_generation:
                self._notify("error", MESSAGES["fetch_failed"])
            return False
        finally:
            if generation == self._fetch_generation:
                self.state.is_list_loading = False

        if generation != self._fetch_generation:
            logger.debug("Discarding superseded list fetch %s", generation)
            return False

        self.state.records = self._identified(records)
        return True

    def open_create(self) -> bool:
        if self.state.is_submitting or self.state.is_form_open:
            return False
        self.state.editing_record = None
        self.state.is_form_open = True
        self.form = RecordForm(self, self.state)
        return True

    def begin_edit(self, record: Record) -> bool:
        if self.state.is_submitting:
            return False
        self.state.editing_record = record
        self.state.is_form_open = True
        self.form = RecordForm(self, self.state, record=record)
        return True

    def cancel_form(self) -> None:
        self._close_form()

    async def submit_form(self, payload: RecordPayload) -> bool:
        if not self.state.is_form_open or self.state.is_submitting:
            return False

        target = self.state.editing_record
        if target is None:
            return await self._mutate(
                "create",
                lambda: self._transport.create(payload),
                close_form=True,
            )

        if not target.id:
            return False
        record_id = target.id
        return await self._mutate(
            "update",
            lambda: self._transport.update(record_id, payload),
            close_form=True,
        )

    async def delete_record(self, record: Record, confirm: Optional[ConfirmGate] = None) -> bool:
        """Delete ``record`` once the confirmation gate answers ``True``."""
        if not record.id:
            return False

        gate = confirm or self._confirm_delete
        answer = gate(record)
        if inspect.isawaitable(answer):
            answer = await answer
        if answer is not True:
            logger.info("Deletion of user %s was not confirmed", record.id)
            return False

        record_id = record.id
        return await self._mutate(
            "delete",
            lambda: self._transport.delete(record_id),
            close_form=False,
        )

    # Handlers consumed by the form and the list view.

    def on_submit(self, payload: RecordPayload) -> Awaitable[bool]:
        return self.submit_form(payload)

    def on_cancel(self) -> None:
        self.cancel_form()

    def on_edit(self, record: Record) -> None:
        self.begin_edit(record)

    def on_delete(self, record: Record) -> Awaitable[bool]:
        return self.delete_record(record)

    async def _mutate(
        self,
        action: str,
        call: Callable[[], Awaitable[object]],
        *,
        close_form: bool,
    ) -> bool:
        if close_form:
            self.state.is_submitting = True
        try:
            await call()
        except TransportError as exc:
            logger.warning("Error during %s of user: %s", action, exc)
            self._notify("error", MESSAGES[f"{action}_failed"])
            return False
        finally:
            if close_form:
                self.state.is_submitting = False

        logger.info("User %s succeeded", action)
        if close_form:
            self._close_form()
        self._notify("success", MESSAGES[f"{action}_ok"])
        await self.refresh()
        return True

    def _close_form(self) -> None:
        self.state.is_form_open = False
        self.state.editing_record = None
        self.form = None

    def _notify(self, kind: NotificationKind, message: str) -> None:
        self.notifications.post(kind, message)

    @staticmethod
    def _identified(records: List[Record]) -> List[Record]:
        kept = [record for record in records if record.has_id]
        dropped = len(records) - len(kept)
        if dropped:
            logger.warning("Ignoring %s user record(s) returned without an id", dropped)
        return kept


__all__ = ["ConfirmGate", "DashboardController", "MESSAGES"]
