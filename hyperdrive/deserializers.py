"""Deserializers - Turn response bodies into representor trees.

Hyperdrive does not parse hypermedia formats itself. A deserializer is any
callable taking (response, body) and returning a Representor, or None when the
body is not in a format it understands. ContentTypeDeserializer dispatches to
per-format parsers by the response's media type.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Mapping, Protocol

from hyperdrive.models import HTTPResponse, Representor

logger = logging.getLogger(__name__)

BodyParser = Callable[[bytes], Representor | None]


class Deserializer(Protocol):
    def __call__(self, response: HTTPResponse, body: bytes) -> Representor | None: ...


class ContentTypeDeserializer:
    """Dispatches a body to the parser registered for its content type.

    Usage:
        deserializer = ContentTypeDeserializer({
            "application/hal+json": parse_hal,
            "application/vnd.siren+json": parse_siren,
        })
        representor = deserializer(response, body)
    """

    def __init__(self, parsers: Mapping[str, BodyParser] | None = None) -> None:
        self._parsers: Mapping[str, BodyParser] = MappingProxyType(
            {content_type.lower(): parser for content_type, parser in (parsers or {}).items()}
        )

    @property
    def content_types(self) -> list[str]:
        return list(self._parsers)

    def __call__(self, response: HTTPResponse, body: bytes) -> Representor | None:
        content_type = response.content_type
        if content_type is None:
            logger.debug("Response from %s has no content type", response.url)
            return None

        parser = self._parsers.get(content_type)
        if parser is None:
            logger.debug("No parser registered for %s (from %s)", content_type, response.url)
            return None

        return parser(body)
