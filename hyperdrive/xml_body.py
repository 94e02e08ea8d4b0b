"""Dict-to-XML conversion for transition attribute payloads.

Used by the XML attribute encoder when a transition prefers application/xml or
text/xml. Element names are taken directly from attribute names; namespaces
and XML attributes are not supported.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Any, Mapping

# Unprefixed XML name (NCName), ASCII start character
_ELEMENT_NAME = re.compile(r"^[A-Za-z_][\w.\-]*\Z")


def dict_to_xml(data: Mapping[str, Any]) -> bytes:
    """Convert an attribute mapping to XML bytes.

    The mapping must have exactly one top-level key, which becomes the root
    element name. Nested mappings become child elements, lists become repeated
    sibling elements with the same tag, ``None`` becomes an empty element and
    booleans are written as ``true``/``false`` to match their JSON form.

    Args:
        data: Mapping with exactly one top-level key (the root element name).

    Returns:
        UTF-8 encoded XML bytes with an XML declaration.

    Raises:
        ValueError: If *data* does not have exactly one top-level key, or a
            key is not a valid element name.
    """
    if not isinstance(data, Mapping) or len(data) != 1:
        raise ValueError(
            f"dict_to_xml expects a mapping with exactly one top-level key "
            f"(the root element), got {type(data).__name__} with "
            f"{len(data) if isinstance(data, Mapping) else 'N/A'} keys"
        )

    root_tag, root_value = next(iter(data.items()))
    if isinstance(root_value, list):
        raise ValueError(f"Root element '{root_tag}' cannot be a list")

    root_element = _to_element(root_tag, root_value)
    return ET.tostring(root_element, encoding="utf-8", xml_declaration=True)


def _to_element(tag: str, value: Any) -> ET.Element:
    """Build an element for tag; lists are expanded by the caller."""
    if not isinstance(tag, str) or not _ELEMENT_NAME.match(tag):
        raise ValueError(f"Invalid XML element name: {tag!r}")

    element = ET.Element(tag)

    if value is None:
        pass
    elif isinstance(value, Mapping):
        for key, child_value in value.items():
            if isinstance(child_value, list):
                for item in child_value:
                    element.append(_to_element(key, item))
            else:
                element.append(_to_element(key, child_value))
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    elif isinstance(value, list):
        # Nested list inside a list: wrap each item
        for item in value:
            element.append(_to_element("item", item))
    else:
        element.text = str(value)

    return element
