"""Pytest configuration and fixtures for hyperdrive tests.

This file provides:
- Factories for transitions, representors and responses
- A JSON deserializer reading a simple representor document format
- Fixtures building clients on top of httpx.MockTransport
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from hyperdrive.deserializers import ContentTypeDeserializer
from hyperdrive.models import HTTPResponse, Representor, Transition

REPRESENTOR_CONTENT_TYPE = "application/vnd.test.representor+json"


def make_transition(uri: str, method: str = "GET", **kwargs: Any) -> Transition:
    """Create a Transition with sensible defaults."""
    return Transition(uri=uri, method=method, **kwargs)


def make_response(
    url: str = "http://api.example.com/",
    status_code: int = 200,
    content_type: str | None = REPRESENTOR_CONTENT_TYPE,
) -> HTTPResponse:
    """Create an HTTPResponse for interpreter tests."""
    headers = {"content-type": [content_type]} if content_type else {}
    return HTTPResponse(url=url, status_code=status_code, headers=headers)


def parse_test_representor(body: bytes) -> Representor:
    """Parse the test document format: a JSON dump of Representor."""
    return Representor.model_validate(json.loads(body))


def representor_body(representor: Representor) -> bytes:
    return representor.model_dump_json().encode("utf-8")


def mock_transport(
    routes: dict[str, tuple[int, bytes]],
    seen: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Transport answering URL -> (status, body) with the test content type.

    Every received request is appended to seen when given.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        status, body = routes.get(str(request.url), (404, b""))
        headers = {"content-type": REPRESENTOR_CONTENT_TYPE} if body else {}
        return httpx.Response(status, content=body, headers=headers)

    return httpx.MockTransport(handler)


@pytest.fixture
def test_deserializer() -> ContentTypeDeserializer:
    return ContentTypeDeserializer({REPRESENTOR_CONTENT_TYPE: parse_test_representor})


@pytest.fixture
def transition_factory() -> Callable[..., Transition]:
    return make_transition


@pytest.fixture
def response_factory() -> Callable[..., HTTPResponse]:
    return make_response


@pytest.fixture
def nested_representor() -> Representor:
    """Root with relative transitions and embedded resources three levels deep."""
    level3 = Representor(
        transitions={"self": make_transition("/x")},
        attributes={"depth": 3},
    )
    level2 = Representor(
        transitions={"self": make_transition("items/2")},
        representors={"children": [level3]},
    )
    level1 = Representor(
        transitions={"self": make_transition("/items/1")},
        representors={"children": [level2]},
    )
    return Representor(
        transitions={
            "self": make_transition("/"),
            "create": make_transition(
                "/items",
                method="POST",
                suggested_content_types=["application/json"],
            ),
        },
        representors={"items": [level1, Representor(attributes={"id": 9})]},
        attributes={"title": "Root"},
        metadata={"source": "test"},
    )
