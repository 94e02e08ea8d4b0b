"""Response Interpreter - Turns a received response into a Representor."""

from __future__ import annotations

import logging

from hyperdrive.deserializers import Deserializer
from hyperdrive.models import HTTPRequest, HTTPResponse, Representor
from hyperdrive.rewriter import absolute_representor

logger = logging.getLogger(__name__)


def construct_response(
    request: HTTPRequest,
    response: HTTPResponse,
    body: bytes | None,
    deserializer: Deserializer,
) -> Representor:
    """Deserialize a response body and make all of its URIs absolute.

    A missing body, or one the deserializer cannot read, is not an error: the
    response may legitimately carry no hypermedia content. In those cases the
    empty Representor is returned so that traversal can continue.

    Args:
        request: The request that produced the response.
        response: The response, whose URL is the base for relative URIs.
        body: Raw response body, or None.
        deserializer: Callable turning (response, body) into a Representor.

    Returns:
        The rewritten representor tree, or Representor() if there was none.
    """
    if not body:
        return Representor()

    try:
        representor = deserializer(response, body)
    except Exception as e:
        # Unreadable documents degrade to an empty one
        logger.debug(
            "Deserializing %s response to %s %s failed: %s",
            response.content_type, request.method, request.url, e,
        )
        return Representor()

    if representor is None:
        return Representor()

    return absolute_representor(response.url, representor)
