"""Core utilities for the user management console."""

from __future__ import annotations

from typing import Any

from .config import ConsoleSettings, load_settings
from .transport import RecordTransport, TransportError


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the console web application."""

    from .web import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "ConsoleSettings",
    "RecordTransport",
    "TransportError",
    "create_app",
    "load_settings",
]
