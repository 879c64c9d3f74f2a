"""Thin async client for the remote rental backend.

Every backend response is wrapped in an envelope::

    {"success": true, "message": "...", "data": ..., "meta": ..., "request_id": "..."}

Failures come back as ``success: false`` or a non-2xx status with an
``error`` object. Both, as well as transport problems, surface as ``ApiError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
import orjson
from pydantic import ValidationError

from app.rental.adapters.dto import ApiEnvelope

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Something went wrong while processing the request."


class ApiError(Exception):
    def __init__(
        self,
        message: str,
        *,
        status: int,
        code: str | None = None,
        details: Any = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details
        self.request_id = request_id


@dataclass
class ApiResult:
    data: Any = None
    message: str | None = None
    meta: Any = None
    request_id: str | None = None


def error_message(error: BaseException, fallback: str = DEFAULT_ERROR_MESSAGE) -> str:
    if isinstance(error, ApiError):
        return error.message
    return str(error) or fallback


def _to_api_error(status: int, envelope: ApiEnvelope) -> ApiError:
    error = envelope.error
    message = (error and error.message) or envelope.message or f"Request failed with status {status}"
    return ApiError(
        message,
        status=status,
        code=error.code if error else None,
        details=error.details if error else None,
        request_id=envelope.request_id,
    )


def _decode(response: httpx.Response) -> ApiEnvelope | None:
    try:
        return ApiEnvelope.model_validate(orjson.loads(response.content))
    except (orjson.JSONDecodeError, ValidationError):
        return None


class ApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> ApiResult:
        logger.debug("%s %s params=%s", method.upper(), path, params)
        headers = {"Content-Type": "application/json"} if json is not None else None
        try:
            response = await self._client.request(
                method,
                path.lstrip("/"),
                params={k: v for k, v in (params or {}).items() if v is not None},
                content=orjson.dumps(json) if json is not None else None,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise ApiError(str(e) or e.__class__.__name__, status=0, details=e) from e

        envelope = _decode(response)
        if response.is_error:
            if envelope is None:
                raise ApiError(f"HTTP {response.status_code}", status=response.status_code)
            raise _to_api_error(response.status_code, envelope)
        if envelope is None:
            raise ApiError("Invalid response from the backend", status=0)
        if not envelope.success:
            raise _to_api_error(400, envelope)
        return ApiResult(
            data=envelope.data,
            message=envelope.message,
            meta=envelope.meta,
            request_id=envelope.request_id,
        )

    async def fetch_data(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        result = await self.request(method, path, params=params, json=json)
        if result.data is None:
            raise ApiError("Response data is empty", status=500)
        return result.data
