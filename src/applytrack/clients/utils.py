"""HTTP call helpers shared by the typed clients.

Every request goes through ``_call``, which logs it and turns httpx failures
and non-2xx responses into the RemoteStoreError hierarchy. Successful bodies
are decoded and validated with ``validate_response``, so malformed data
surfaces as InvalidResponseError. Nothing here retries.
"""

from typing import Any, Optional, Type, TypeVar, Union

import httpx
from httpx import AsyncClient, Response
from loguru import logger
from pydantic import BaseModel, TypeAdapter, ValidationError

from applytrack.errors import (
    BackendServerError,
    BackendValidationError,
    InvalidResponseError,
    RemoteStoreError,
    TransportError,
)
from applytrack.schemas.response import StatusResponse


def resolve_error_detail(response: Response) -> str:
    """Pull a human readable message out of an error response.

    FastAPI style backends put it under ``detail``, which may be a string or a
    list of validation errors.
    """
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    if isinstance(data, dict) and "detail" in data:
        detail = data["detail"]
        if isinstance(detail, list):
            messages = [
                str(item.get("msg", item)) if isinstance(item, dict) else str(item)
                for item in detail
            ]
            return "; ".join(messages)
        return str(detail)
    return response.text or response.reason_phrase


async def _call(
    client: AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,
) -> Response:
    logger.debug(f"Calling {method} {url}")
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        logger.warning(f"Request timed out: {method} {url}")
        raise TransportError(
            f"Request timed out: {method} {url}", method=method, url=url
        ) from e
    except httpx.TransportError as e:
        logger.warning(f"Request failed: {method} {url}: {e}")
        raise TransportError(
            f"Could not reach backend: {e}", method=method, url=url
        ) from e

    if response.is_success:
        return response

    detail = resolve_error_detail(response)
    status_code = response.status_code
    logger.warning(f"{method} {url} returned {status_code}: {detail}")

    error_class: type[RemoteStoreError]
    if 400 <= status_code < 500:
        error_class = BackendValidationError
    elif status_code >= 500:
        error_class = BackendServerError
    else:  # pragma: no cover
        error_class = RemoteStoreError

    raise error_class(
        detail,
        status_code=status_code,
        detail=detail,
        method=method,
        url=url,
    )


async def call_get(
    client: AsyncClient,
    url: str,
    *,
    params: Optional[dict[str, Any]] = None,
    **kwargs: Any,
) -> Response:
    return await _call(client, "GET", url, params=params, **kwargs)


async def call_post(
    client: AsyncClient,
    url: str,
    *,
    json: Optional[Any] = None,
    params: Optional[dict[str, Any]] = None,
    **kwargs: Any,
) -> Response:
    return await _call(client, "POST", url, json=json, params=params, **kwargs)


async def call_patch(
    client: AsyncClient,
    url: str,
    *,
    json: Optional[Any] = None,
    **kwargs: Any,
) -> Response:
    return await _call(client, "PATCH", url, json=json, **kwargs)


async def call_delete(
    client: AsyncClient,
    url: str,
    *,
    params: Optional[dict[str, Any]] = None,
    **kwargs: Any,
) -> Response:
    return await _call(client, "DELETE", url, params=params, **kwargs)


def parse_status(response: Response) -> dict[str, Any]:
    """Return the JSON body of an acknowledgement, tolerating empty bodies."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {"result": data}


M = TypeVar("M", bound=BaseModel)


def _request_of(response: Response) -> tuple[str, str]:
    request = response.request
    return request.method, str(request.url)


def read_json(response: Response) -> Any:
    """Decode a successful response body.

    Raises:
        InvalidResponseError: If the body is not JSON
    """
    try:
        return response.json()
    except ValueError as e:
        method, url = _request_of(response)
        logger.warning(f"{method} {url} returned a body that is not JSON")
        raise InvalidResponseError(
            f"Unexpected response from backend for {method} {url}: body is not JSON",
            status_code=response.status_code,
            method=method,
            url=url,
        ) from e


def _validate(response: Response, schema: Union[Type[M], TypeAdapter], data: Any) -> Any:
    try:
        if isinstance(schema, TypeAdapter):
            return schema.validate_python(data)
        return schema.model_validate(data)
    except ValidationError as e:
        method, url = _request_of(response)
        logger.warning(f"{method} {url} returned unexpected data: {e}")
        raise InvalidResponseError(
            f"Unexpected response from backend for {method} {url}: "
            f"{e.error_count()} invalid field(s)",
            status_code=response.status_code,
            detail=str(e),
            method=method,
            url=url,
        ) from e


def validate_response(response: Response, schema: Union[Type[M], TypeAdapter]) -> Any:
    """Decode a response body and validate it against a model or a TypeAdapter.

    Raises:
        InvalidResponseError: If the body is not JSON or does not match ``schema``
    """
    return _validate(response, schema, read_json(response))


def validate_status(response: Response) -> StatusResponse:
    """Validate the acknowledgement of a mutating endpoint."""
    return _validate(response, StatusResponse, parse_status(response))
