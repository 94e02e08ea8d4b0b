"""Hyperdrive - A hypermedia API client.

Enter an API at its root URI, then follow the transitions of the returned
representors. Every call returns a Result: Success(Representor) or Failure.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from hyperdrive.deserializers import ContentTypeDeserializer, Deserializer
from hyperdrive.encoders import AttributeEncoder
from hyperdrive.executor import AsyncExecutor, Executor, ExecutorError
from hyperdrive.models import ClientConfig, HTTPRequest, HTTPResponse, Representor, Transition
from hyperdrive.request_builder import apply_transition, construct_request
from hyperdrive.response import construct_response
from hyperdrive.results import Failure, RequestResult, Result, Success

logger = logging.getLogger(__name__)


class _HyperdriveBase:
    """Request construction and response interpretation shared by both clients.

    The construct_* methods are hooks: subclasses may override them to add
    headers, change encodings or post-process representors.
    """

    def __init__(
        self,
        deserializer: Deserializer | None = None,
        encoder: AttributeEncoder | None = None,
    ) -> None:
        self._deserializer: Deserializer = deserializer or ContentTypeDeserializer()
        self._encoder = encoder or AttributeEncoder()

    def construct_request(
        self,
        uri: str,
        parameters: Mapping[str, Any] | None = None,
    ) -> RequestResult:
        """Construct a request from a URI and parameters."""
        return construct_request(uri, parameters)

    def construct_transition_request(
        self,
        transition: Transition,
        parameters: Mapping[str, Any] | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> RequestResult:
        """Construct a request from a transition, parameters and attributes."""
        return self.construct_request(transition.uri, parameters).flat_map(
            lambda request: apply_transition(request, transition, attributes, self._encoder)
        )

    def construct_response(
        self,
        request: HTTPRequest,
        response: HTTPResponse,
        body: bytes | None,
    ) -> Representor:
        return construct_response(request, response, body, self._deserializer)

    def _build(
        self,
        target: str | Transition,
        parameters: Mapping[str, Any] | None,
        attributes: Mapping[str, Any] | None,
    ) -> RequestResult:
        if isinstance(target, Transition):
            return self.construct_transition_request(target, parameters, attributes)
        if attributes is not None:
            raise TypeError("attributes can only be sent when following a Transition")
        return self.construct_request(target, parameters)


class Hyperdrive(_HyperdriveBase):
    """Synchronous hypermedia API client.

    Usage:
        with Hyperdrive(deserializer=my_deserializer) as hyperdrive:
            result = hyperdrive.enter("https://api.example.com/")
            if result.is_success:
                root = result.value
                result = hyperdrive.request(root.transitions["orders"])
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        deserializer: Deserializer | None = None,
        encoder: AttributeEncoder | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: HTTP client configuration.
            deserializer: Turns response bodies into representors.
            encoder: Encodes transition attributes into request bodies.
            transport: Optional httpx transport (e.g. httpx.MockTransport).
        """
        super().__init__(deserializer, encoder)
        self._executor = Executor(config, transport=transport)

    def __enter__(self) -> "Hyperdrive":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._executor.close()

    def enter(self, uri: str) -> Result:
        """Enter a hypermedia API given the root URI."""
        return self.request(uri)

    def request(
        self,
        target: str | Transition,
        parameters: Mapping[str, Any] | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> Result:
        """Perform a request to a URI, or follow a transition.

        Args:
            target: URI template or Transition.
            parameters: URI template variables.
            attributes: Request body fields (transitions only).

        Returns:
            Success(Representor), or Failure if the request could not be built
            or sent.
        """
        result = self._build(target, parameters, attributes)
        if isinstance(result, Failure):
            return result
        return self.perform(result.value)

    def perform(self, request: HTTPRequest) -> Result:
        """Send an already constructed request."""
        try:
            response, body = self._executor.execute(request)
        except ExecutorError as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            return Failure(e)

        return Success(self.construct_response(request, response, body))


class AsyncHyperdrive(_HyperdriveBase):
    """Asynchronous hypermedia API client.

    Same API as Hyperdrive, with coroutines. Each awaited call resolves to
    exactly one Result on the caller's event loop.

    Usage:
        async with AsyncHyperdrive(deserializer=my_deserializer) as hyperdrive:
            result = await hyperdrive.enter("https://api.example.com/")
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        deserializer: Deserializer | None = None,
        encoder: AttributeEncoder | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(deserializer, encoder)
        self._executor = AsyncExecutor(config, transport=transport)

    async def __aenter__(self) -> "AsyncHyperdrive":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._executor.aclose()

    async def enter(self, uri: str) -> Result:
        """Enter a hypermedia API given the root URI."""
        return await self.request(uri)

    async def request(
        self,
        target: str | Transition,
        parameters: Mapping[str, Any] | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> Result:
        """Perform a request to a URI, or follow a transition."""
        result = self._build(target, parameters, attributes)
        if isinstance(result, Failure):
            return result
        return await self.perform(result.value)

    async def perform(self, request: HTTPRequest) -> Result:
        """Send an already constructed request."""
        try:
            response, body = await self._executor.execute(request)
        except ExecutorError as e:
            logger.debug("%s %s failed: %s", request.method, request.url, e)
            return Failure(e)

        return Success(self.construct_response(request, response, body))
