"""Configuration management for the user console."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import timedelta
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml


DEFAULT_ENDPOINTS: Dict[str, str] = {
    "list": "https://getusers-eljsamlcia-uc.a.run.app",
    "get": "https://getuserbyid-eljsamlcia-uc.a.run.app",
    "create": "https://createuser-eljsamlcia-uc.a.run.app",
    "update": "https://updateuser-eljsamlcia-uc.a.run.app",
    "delete": "https://deleteuser-eljsamlcia-uc.a.run.app",
}

ENDPOINT_ENV_VARS: Dict[str, str] = {
    "list": "USER_CONSOLE_GET_USERS_URL",
    "get": "USER_CONSOLE_GET_USER_BY_ID_URL",
    "create": "USER_CONSOLE_CREATE_USER_URL",
    "update": "USER_CONSOLE_UPDATE_USER_URL",
    "delete": "USER_CONSOLE_DELETE_USER_URL",
}

DEFAULT_NOTIFICATION_SECONDS = 5.0
DEFAULT_SESSION_TTL_MINUTES = 60


@dataclass(frozen=True)
class ServiceEndpoints:
    """Addresses of the five remote user-record operations."""

    list_url: str
    get_url: str
    create_url: str
    update_url: str
    delete_url: str

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "ServiceEndpoints":
        """Create a :class:`ServiceEndpoints` from a mapping keyed by operation."""
        unknown = set(data.keys()) - DEFAULT_ENDPOINTS.keys()
        if unknown:
            raise ValueError(f"Unknown endpoint keys: {', '.join(sorted(unknown))}")

        resolved: Dict[str, str] = {}
        for key, fallback in DEFAULT_ENDPOINTS.items():
            value = data.get(key)
            cleaned = str(value).strip() if value is not None else ""
            resolved[key] = cleaned or fallback

        return ServiceEndpoints(
            list_url=resolved["list"],
            get_url=resolved["get"],
            create_url=resolved["create"],
            update_url=resolved["update"],
            delete_url=resolved["delete"],
        )


@dataclass(frozen=True)
class ConsoleSettings:
    """Runtime settings for the console and its transport."""

    endpoints: ServiceEndpoints
    timeout: Optional[float] = None
    notification_seconds: float = DEFAULT_NOTIFICATION_SECONDS
    session_secret: Optional[str] = None
    session_ttl: timedelta = timedelta(minutes=DEFAULT_SESSION_TTL_MINUTES)

    def with_session_secret(self, secret: Optional[str]) -> "ConsoleSettings":
        return replace(self, session_secret=secret)


def _parse_optional_float(value: object, *, field: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.strip().lower()
        if cleaned in {"", "none", "off"}:
            return None
        value = cleaned
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field} must be a number, got {value!r}") from exc
    if number <= 0:
        raise ValueError(f"{field} must be greater than zero")
    return number


def load_config_file(config_path: Path) -> Dict[str, object]:
    """Load raw console configuration from a YAML file."""
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Console configuration file must contain a mapping at the top level")

    endpoints = raw.get("endpoints", {})
    if endpoints is None:
        endpoints = {}
    if not isinstance(endpoints, dict):
        raise ValueError("The 'endpoints' key must map operation names to URLs")
    raw["endpoints"] = endpoints
    return raw


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the optional YAML configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "console.yaml").resolve(strict=False)
    return candidate


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    *,
    config_path: Optional[Path] = None,
) -> ConsoleSettings:
    """Resolve settings from the environment, the YAML file and the fallbacks.

    Environment variables win over the file, and the file wins over the
    built-in fallback URLs. A missing file is not an error.
    """
    if env is None:
        env = os.environ

    path = config_path or resolve_config_path(env.get("USER_CONSOLE_CONFIG"))
    file_data: Dict[str, object] = {}
    if path.exists():
        file_data = load_config_file(path)

    endpoint_data: Dict[str, object] = dict(file_data.get("endpoints", {}))  # type: ignore[arg-type]
    for key, variable in ENDPOINT_ENV_VARS.items():
        value = env.get(variable)
        if value and value.strip():
            endpoint_data[key] = value.strip()

    timeout_raw = env.get("USER_CONSOLE_HTTP_TIMEOUT", file_data.get("timeout"))
    timeout = _parse_optional_float(timeout_raw, field="HTTP timeout")

    notification_raw = env.get(
        "USER_CONSOLE_NOTIFICATION_SECONDS",
        file_data.get("notification_seconds"),
    )
    notification_seconds = _parse_optional_float(notification_raw, field="Notification delay")

    ttl_raw = env.get("USER_CONSOLE_SESSION_TTL_MINUTES", file_data.get("session_ttl_minutes"))
    ttl_minutes = _parse_optional_float(ttl_raw, field="Session TTL")

    secret = env.get("USER_CONSOLE_SESSION_SECRET") or None

    return ConsoleSettings(
        endpoints=ServiceEndpoints.from_dict(endpoint_data),
        timeout=timeout,
        notification_seconds=notification_seconds or DEFAULT_NOTIFICATION_SECONDS,
        session_secret=secret,
        session_ttl=timedelta(minutes=ttl_minutes or DEFAULT_SESSION_TTL_MINUTES),
    )


__all__ = [
    "ConsoleSettings",
    "DEFAULT_ENDPOINTS",
    "ENDPOINT_ENV_VARS",
    "ServiceEndpoints",
    "load_config_file",
    "load_settings",
    "resolve_config_path",
]
