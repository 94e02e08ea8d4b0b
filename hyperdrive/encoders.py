"""Attribute encoders - serialize transition attributes into a request body.

The encoder for a request is chosen from the transition's suggested content
types: the first one with a registered encoder wins, otherwise JSON is used.
Encoders fail soft and return None ("no body") instead of raising.
"""

from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from hyperdrive.xml_body import dict_to_xml

logger = logging.getLogger(__name__)

Encoder = Callable[[Mapping[str, Any]], bytes | None]

JSON_CONTENT_TYPE = "application/json"


def encode_json(attributes: Mapping[str, Any]) -> bytes | None:
    """Compact UTF-8 JSON, or None if the attributes are not JSON serializable."""
    try:
        return json.dumps(
            dict(attributes), separators=(",", ":"), ensure_ascii=False, allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        logger.debug("JSON encoding of attributes failed: %s", e)
        return None


def encode_xml(attributes: Mapping[str, Any]) -> bytes | None:
    """XML document rooted at the single top-level attribute, or None."""
    try:
        return dict_to_xml(attributes)
    except (TypeError, ValueError) as e:
        logger.debug("XML encoding of attributes failed: %s", e)
        return None


DEFAULT_ENCODERS: Mapping[str, Encoder] = MappingProxyType({
    JSON_CONTENT_TYPE: encode_json,
    "application/xml": encode_xml,
    "text/xml": encode_xml,
})


class AttributeEncoder:
    """Selects and runs an encoder based on suggested content types.

    The registry is copied into a read-only mapping at construction, so an
    encoder can be shared between threads and clients.

    Usage:
        encoder = AttributeEncoder()
        body = encoder.encode({"title": "Hello"}, ["application/json"])
    """

    def __init__(
        self,
        encoders: Mapping[str, Encoder] = DEFAULT_ENCODERS,
        default_content_type: str = JSON_CONTENT_TYPE,
        default_encoder: Encoder = encode_json,
    ) -> None:
        self._encoders: Mapping[str, Encoder] = MappingProxyType(dict(encoders))
        self._default_content_type = default_content_type
        self._default_encoder = default_encoder

    @property
    def encoders(self) -> Mapping[str, Encoder]:
        return self._encoders

    def select(self, suggested_content_types: Sequence[str]) -> tuple[str, Encoder]:
        """Return (content type, encoder) for the first registered suggestion."""
        for content_type in suggested_content_types:
            encoder = self._encoders.get(content_type)
            if encoder is not None:
                return content_type, encoder
        return self._default_content_type, self._default_encoder

    def content_type_for(self, suggested_content_types: Sequence[str]) -> str:
        return self.select(suggested_content_types)[0]

    def encode(
        self,
        attributes: Mapping[str, Any],
        suggested_content_types: Sequence[str],
    ) -> bytes | None:
        """Encode attributes for a transition.

        When the selected encoder produces nothing, the result is None and no
        other encoder is tried: an encoder returning None means "send no body".

        Args:
            attributes: Attribute name -> value.
            suggested_content_types: Content types in order of preference.

        Returns:
            Encoded body, or None.
        """
        _, encoder = self.select(suggested_content_types)
        return encoder(attributes)
