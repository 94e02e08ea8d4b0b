"""Request Builder - Turns URIs and transitions into outbound requests.

Errors are returned as Failure values instead of raised: building a request
from a transition is a chain of steps, and a Failure from any step is returned
unchanged without running the rest (no partially built request escapes).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

import uritemplate

from hyperdrive.encoders import AttributeEncoder
from hyperdrive.models import HTTPRequest, Transition
from hyperdrive.results import (
    ERROR_DOMAIN,
    Failure,
    HyperdriveError,
    RequestResult,
    Success,
)
from hyperdrive.uri import is_valid_uri

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/vnd.siren+json; application/hal+json"
INVALID_URI_MESSAGE = "Creating URI from given URI failed"

_DEFAULT_ENCODER = AttributeEncoder()


def _template_value(value: Any) -> str | int | float:
    """Text form of one template value; booleans, null and nested values as compact JSON."""
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _template_variable(value: Any) -> Any:
    # List items and mapping values are expanded by the template engine one
    # level deep; anything nested below that is sent as JSON.
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_template_value(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _template_value(item) for key, item in value.items()}
    return _template_value(value)


def expand_uri(template: str, parameters: Mapping[str, Any]) -> str:
    """Expand an RFC 6570 URI template. Undefined variables expand to nothing.

    Booleans expand to ``true``/``false`` and nested lists or mappings to
    their JSON text, the same forms the attribute encoders produce.

    Raises:
        ValueError: If the template contains a malformed expression.
    """
    variables = {name: _template_variable(value) for name, value in parameters.items()}
    return uritemplate.expand(template, variables)


def construct_request(
    uri: str,
    parameters: Mapping[str, Any] | None = None,
) -> RequestResult:
    """Construct a GET request from a URI template and parameters.

    Args:
        uri: URI template, expanded with parameters.
        parameters: Template variables. None is treated as no variables.

    Returns:
        Success(HTTPRequest) with the hypermedia Accept header set, or
        Failure(HyperdriveError) with code 0 if the template cannot be
        expanded or the expanded URI is malformed.
    """
    try:
        expanded = expand_uri(uri, parameters or {})
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("Expanding URI template %r failed: %s", uri, e)
        return Failure(HyperdriveError(ERROR_DOMAIN, 0, INVALID_URI_MESSAGE))

    if not is_valid_uri(expanded):
        logger.debug("Expanded URI %r from template %r is not a valid URI", expanded, uri)
        return Failure(HyperdriveError(ERROR_DOMAIN, 0, INVALID_URI_MESSAGE))

    return Success(HTTPRequest(url=expanded, headers={"Accept": ACCEPT_HEADER}))


def apply_transition(
    request: HTTPRequest,
    transition: Transition,
    attributes: Mapping[str, Any] | None = None,
    encoder: AttributeEncoder | None = None,
) -> RequestResult:
    """Set the transition's method and encoded attributes on a built request.

    When attributes are given they are encoded according to the transition's
    suggested content types; an encoder producing nothing leaves the request
    without a body.
    """
    encoder = encoder or _DEFAULT_ENCODER
    update: dict[str, Any] = {"method": transition.method}

    if attributes is not None:
        suggested = transition.suggested_content_types
        body = encoder.encode(attributes, suggested)
        update["body"] = body
        if body is not None:
            update["headers"] = {
                **request.headers,
                "Content-Type": encoder.content_type_for(suggested),
            }
        else:
            logger.debug("Attributes for %s %s produced no body", transition.method, request.url)

    return Success(request.model_copy(update=update))


def construct_transition_request(
    transition: Transition,
    parameters: Mapping[str, Any] | None = None,
    attributes: Mapping[str, Any] | None = None,
    encoder: AttributeEncoder | None = None,
) -> RequestResult:
    """Construct the request that follows a transition.

    Args:
        transition: Transition to follow.
        parameters: URI template variables.
        attributes: Request body fields. None sends no body.
        encoder: Attribute encoder (defaults to the JSON/XML registry).

    Returns:
        Success(HTTPRequest), or the Failure from construct_request unchanged.
    """
    return construct_request(transition.uri, parameters).flat_map(
        lambda request: apply_transition(request, transition, attributes, encoder)
    )
