"""
Single chokepoint for calls to the MyOnlineMart service.

`Gateway.request` builds the URL, attaches the bearer token, encodes the JSON
body, and classifies the response into a `Result`: a decoded value on 2xx, or
one of the `api.errors` types. It never raises for remote failures.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar

import httpx

from api.errors import (
    ApiError,
    DecodingError,
    InvalidRequest,
    InvalidResponse,
    ServerError,
)
from api.models import ErrorPayload
from utils.config import API_BASE_URL, HTTP_TIMEOUT
from utils.logger import get_logger

_logger = get_logger(__name__)

T = TypeVar("T")

NO_CONTENT = 204
FALLBACK_SERVER_MESSAGE = "Request failed."


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either `value` (success) or `error` (failure), never both."""

    value: Optional[T] = None
    error: Optional[ApiError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ApiError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


class Gateway:
    """
    Stateless HTTP gateway. Holds only its base URL, timeout and (for tests)
    an httpx transport; every call opens its own AsyncClient, so instances are
    safe to share between concurrent callers.
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        timeout: float = HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def build_url(self, path: str, query: Optional[Mapping[str, Any]] = None) -> httpx.URL:
        """Base + path + query. Raises InvalidRequest when the result is not a usable http(s) URL."""
        try:
            url = httpx.URL(f"{self.base_url}/{path.lstrip('/')}")
            if query:
                url = url.copy_merge_params({k: str(v) for k, v in query.items()})
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise InvalidRequest(f"Invalid service URL: {e}")
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidRequest(f"Invalid service URL: {url}")
        return url

    async def request(
        self,
        path: str,
        method: str = "GET",
        token: Optional[str] = None,
        query: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        decode: Optional[Callable[[Any], T]] = None,
    ) -> Result[T]:
        """
        Perform one call.

        Args:
            path: endpoint path, e.g. "/api/buyer/orders".
            method: HTTP method.
            token: bearer token; omitted from the request when None.
            query: query parameters.
            body: JSON-serializable request body; nothing is sent when None.
            decode: maps the decoded JSON to the expected type. None means an
                empty response is expected.

        Returns:
            Result: the decoded value or the classified error.
        """
        try:
            url = self.build_url(path, query)
        except InvalidRequest as e:
            _logger.error(f"{method} {path}: {e}")
            return Result.failure(e)

        headers: Dict[str, str] = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        content = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            content = json.dumps(body).encode("utf-8")

        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                response = await client.request(
                    method, url, headers=headers, content=content
                )
        except httpx.TransportError as e:
            _logger.warning(f"{method} {path}: transport failure: {e!r}")
            return Result.failure(InvalidResponse(f"Network error: {e}"))
        except httpx.RequestError as e:
            # undecodable content encoding, redirect loops
            _logger.warning(f"{method} {path}: unreadable response: {e!r}")
            return Result.failure(InvalidResponse(f"Unreadable response: {e}"))

        elapsed = (time.perf_counter() - started) * 1000
        _logger.debug(f"{method} {path} -> {response.status_code} ({elapsed:.0f} ms)")

        if 200 <= response.status_code < 300:
            return self._decode_success(response, decode)
        return Result.failure(self._classify_failure(response))

    @staticmethod
    def _decode_success(response: httpx.Response, decode) -> Result:
        if decode is None:
            return Result.success(None)
        if response.status_code == NO_CONTENT or not response.content:
            return Result.failure(
                DecodingError("Expected a response body, got none", raw=response.content)
            )
        try:
            payload = response.json()
        except ValueError:
            return Result.failure(
                DecodingError("Response body is not valid JSON", raw=response.text)
            )
        try:
            return Result.success(decode(payload))
        except DecodingError as e:
            _logger.warning(f"Could not decode {response.request.url.path}: {e}")
            return Result.failure(e)
        except (KeyError, TypeError, ValueError) as e:
            _logger.warning(f"Could not decode {response.request.url.path}: {e}")
            return Result.failure(DecodingError(str(e), raw=payload))

    @staticmethod
    def _classify_failure(response: httpx.Response) -> ServerError:
        try:
            payload = ErrorPayload.from_json(response.json())
        except (ValueError, DecodingError):
            _logger.info(f"HTTP {response.status_code} without a readable error body")
            return ServerError(FALLBACK_SERVER_MESSAGE, response.status_code)
        _logger.info(f"HTTP {response.status_code}: {payload.error}: {payload.message}")
        return ServerError(payload.message, response.status_code, payload.details)
