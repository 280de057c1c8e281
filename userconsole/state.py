"""Session state shared by the dashboard controller and its views."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .models import Record


class DashboardMode(str, Enum):
    IDLE = "idle"
    FORM_CREATE = "form_create"
    FORM_EDIT = "form_edit"


@dataclass
class SessionState:
    """Mutable UI state for one dashboard activation."""

    records: List[Record] = field(default_factory=list)
    is_list_loading: bool = False
    is_form_open: bool = False
    editing_record: Optional[Record] = None
    is_submitting: bool = False

    @property
    def mode(self) -> DashboardMode:
        if not self.is_form_open:
            return DashboardMode.IDLE
        if self.editing_record is not None:
            return DashboardMode.FORM_EDIT
        return DashboardMode.FORM_CREATE


__all__ = ["DashboardMode", "SessionState"]
