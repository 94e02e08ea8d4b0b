"""Executor - Sends requests and captures responses.

The Executor is the transport behind Hyperdrive: it sends an HTTPRequest with
httpx and returns the HTTPResponse together with the raw body. Connection
problems are raised as RequestError; any HTTP status is a response.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from hyperdrive.models import ClientConfig, HTTPRequest, HTTPResponse

logger = logging.getLogger(__name__)


class ExecutorError(Exception):
    """Base class for executor errors."""


class RequestError(ExecutorError):
    """Raised when a request fails (connection error, timeout, etc.)."""


def _sanitize_header_value(value: str) -> str:
    """Replace non-ASCII characters in a header value with '?'.

    HTTP headers must contain only ASCII characters per RFC 7230; transition
    attributes and configured headers may not.
    """
    return value.encode('ascii', errors='replace').decode('ascii')


def _request_kwargs(request: HTTPRequest) -> dict[str, Any]:
    """Build kwargs for httpx client.request()."""
    headers = {key: _sanitize_header_value(value) for key, value in request.headers.items()}
    return {
        "method": request.method,
        "url": request.url,
        "headers": headers if headers else None,
        "content": request.body,
    }


def _convert_error(request: HTTPRequest, e: Exception) -> RequestError:
    target = f"{request.method} {request.url}"
    if isinstance(e, httpx.TimeoutException):
        return RequestError(f"{target} request timeout: {e}")
    if isinstance(e, httpx.ConnectError):
        return RequestError(f"{target} connection error: {e}")
    if isinstance(e, UnicodeEncodeError):
        return RequestError(
            f"{target} encoding error: non-ASCII characters in request "
            f"(header key or URL). Character: {e.object[e.start:e.end]!r} "
            f"at position {e.start}. HTTP requires ASCII for these fields."
        )
    return RequestError(f"{target} request error: {e}")


def _convert_response(
    response: httpx.Response,
    elapsed_ms: float,
) -> tuple[HTTPResponse, bytes | None]:
    """Convert an httpx Response to (HTTPResponse, body).

    The effective URL is the one after redirects. An empty body is None.
    """
    # Headers - lowercase keys, list values
    headers: dict[str, list[str]] = {}
    for key, value in response.headers.multi_items():
        headers.setdefault(key.lower(), []).append(value)

    http_version = getattr(response, "http_version", None) or "1.1"

    http_response = HTTPResponse(
        url=str(response.url),
        status_code=response.status_code,
        headers=headers,
        elapsed_ms=elapsed_ms,
        http_version=http_version,
    )
    return http_response, response.content or None


class Executor:
    """Executes requests with a synchronous httpx client.

    Usage:
        with Executor(config) as executor:
            response, body = executor.execute(request)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            config: Client configuration. Defaults to ClientConfig().
            transport: Optional httpx transport (e.g. httpx.MockTransport).
        """
        self._config = config or ClientConfig()
        kwargs = self._config.client_kwargs()
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.Client(**kwargs)

    def __enter__(self) -> "Executor":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def execute(self, request: HTTPRequest) -> tuple[HTTPResponse, bytes | None]:
        """Send a request.

        Args:
            request: The request to send.

        Returns:
            Tuple of (response, body). body is None when the response is empty.

        Raises:
            RequestError: If the request fails due to connection/timeout.
        """
        logger.debug("Sending %s %s", request.method, request.url)
        try:
            start_time = time.perf_counter()
            http_response = self._client.request(**_request_kwargs(request))
            elapsed_ms = (time.perf_counter() - start_time) * 1000
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            raise _convert_error(request, e) from e

        return _convert_response(http_response, elapsed_ms)


class AsyncExecutor:
    """Executes requests with an asynchronous httpx client.

    Usage:
        async with AsyncExecutor(config) as executor:
            response, body = await executor.execute(request)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        kwargs = self._config.client_kwargs()
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**kwargs)

    async def __aenter__(self) -> "AsyncExecutor":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def execute(self, request: HTTPRequest) -> tuple[HTTPResponse, bytes | None]:
        """Send a request. See Executor.execute."""
        logger.debug("Sending %s %s", request.method, request.url)
        try:
            start_time = time.perf_counter()
            http_response = await self._client.request(**_request_kwargs(request))
            elapsed_ms = (time.perf_counter() - start_time) * 1000
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            raise _convert_error(request, e) from e

        return _convert_response(http_response, elapsed_ms)
