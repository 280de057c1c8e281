"""HTTP transport for the remote user-records service."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from .config import ServiceEndpoints
from .models import Record, RecordPayload


logger = logging.getLogger("userconsole.transport")

_RECORD_LIST = TypeAdapter(List[Record])


class TransportError(Exception):
    """Raised when a remote record operation does not succeed.

    Network failures, undecodable bodies and non-2xx responses all surface as
    this single error kind; ``status`` is ``None`` when no response arrived.
    """

    kind = "HttpFailure"

    def __init__(self, operation: str, status: Optional[int] = None, message: str | None = None) -> None:
        self.operation = operation
        self.status = status
        if message is None:
            if status is None:
                message = f"{operation} request failed"
            else:
                message = f"{operation} request failed with status {status}"
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


def _normalize_url(url: str, *, operation: str) -> str:
    cleaned = (url or "").strip()
    if not cleaned:
        raise ValueError(f"Endpoint URL for '{operation}' must not be empty")
    return cleaned


def _serialize_payload(payload: RecordPayload | Mapping[str, Any]) -> dict:
    if isinstance(payload, RecordPayload):
        return payload.model_dump()
    return {key: value for key, value in payload.items() if key not in {"id", "createdAt", "created_at"}}


class RecordTransport:
    """Issue one HTTP request per record operation."""

    def __init__(
        self,
        endpoints: ServiceEndpoints,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._endpoints = ServiceEndpoints(
            list_url=_normalize_url(endpoints.list_url, operation="list"),
            get_url=_normalize_url(endpoints.get_url, operation="get"),
            create_url=_normalize_url(endpoints.create_url, operation="create"),
            update_url=_normalize_url(endpoints.update_url, operation="update"),
            delete_url=_normalize_url(endpoints.delete_url, operation="delete"),
        )
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def endpoints(self) -> ServiceEndpoints:
        return self._endpoints

    async def __aenter__(self) -> "RecordTransport":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def list_all(self) -> List[Record]:
        response = await self._send("list", "GET", self._endpoints.list_url)
        data = self._decode("list", response)
        try:
            return _RECORD_LIST.validate_python(data)
        except ValidationError as exc:
            raise self._fail("list", response.status_code, "list response was not a sequence of records") from exc

    async def get_by_id(self, record_id: str) -> Record:
        response = await self._send(
            "get",
            "GET",
            self._endpoints.get_url,
            params={"id": record_id},
        )
        return self._parse_record("get", response)

    async def create(self, payload: RecordPayload | Mapping[str, Any]) -> Record:
        response = await self._send(
            "create",
            "POST",
            self._endpoints.create_url,
            json=_serialize_payload(payload),
        )
        return self._parse_record("create", response)

    async def update(self, record_id: str, payload: RecordPayload | Mapping[str, Any]) -> Record:
        response = await self._send(
            "update",
            "PUT",
            self._endpoints.update_url,
            params={"id": record_id},
            json=_serialize_payload(payload),
        )
        return self._parse_record("update", response)

    async def delete(self, record_id: str) -> None:
        await self._send(
            "delete",
            "DELETE",
            self._endpoints.delete_url,
            params={"id": record_id},
        )

    async def _send(self, operation: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed before a response arrived: %s", method, url, exc)
            raise TransportError(operation, None, f"{operation} request failed: {exc}") from exc

        if not response.is_success:
            raise self._fail(operation, response.status_code)
        return response

    def _decode(self, operation: str, response: httpx.Response) -> object:
        try:
            return response.json()
        except ValueError as exc:
            raise self._fail(operation, response.status_code, f"{operation} response was not valid JSON") from exc

    def _parse_record(self, operation: str, response: httpx.Response) -> Record:
        data = self._decode(operation, response)
        try:
            return Record.model_validate(data)
        except ValidationError as exc:
            raise self._fail(operation, response.status_code, f"{operation} response was not a record") from exc

    def _fail(self, operation: str, status: int, message: str | None = None) -> TransportError:
        error = TransportError(operation, status, message)
        logger.warning("Record service %s", error)
        return error


__all__ = ["RecordTransport", "TransportError"]
