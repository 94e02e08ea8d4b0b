"""URI validation and resolution against a base URL."""

from __future__ import annotations

import logging
import re

import httpx

logger = logging.getLogger(__name__)

# Characters allowed in a URI reference (RFC 3986 unreserved + reserved + '%').
# Anything else (whitespace, braces of an unexpanded template, ...) means the
# string is not a URI yet.
_URI_CHARACTERS = re.compile(r"^[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+$")

_TEMPLATE_EXPRESSION = re.compile(r"\{[^{}]*\}")


def is_valid_uri(value: str) -> bool:
    """Return True if value is a syntactically valid (absolute or relative) URI."""
    if not value or not _URI_CHARACTERS.match(value):
        return False
    try:
        httpx.URL(value)
    except (httpx.InvalidURL, TypeError, ValueError):
        return False
    return True


def _placeholder_prefix(*texts: str) -> str:
    """Placeholder stem that occurs in none of texts."""
    prefix = "hdxpr"
    while any(prefix in text for text in texts):
        prefix += "x"
    return prefix


def absolute_uri(base_url: str | httpx.URL | None, uri: str) -> str:
    """Resolve uri against base_url.

    URI templates are resolved with their expressions kept intact, so
    "/orders{?page}" becomes "http://host/orders{?page}". A template starting
    with an expression cannot be told apart from an absolute URI and is kept.

    Never fails: without a base, or when uri cannot be parsed or resolved,
    the original string is returned unchanged.

    Args:
        base_url: URL the document containing uri was fetched from.
        uri: Absolute or relative URI, or URI template.

    Returns:
        The absolute form of uri, or uri itself.
    """
    if base_url is None or uri.startswith("{"):
        return uri

    expressions = _TEMPLATE_EXPRESSION.findall(uri)
    prefix = _placeholder_prefix(uri.lower(), str(base_url).lower())
    placeholders = [f"{prefix}{index}z" for index in range(len(expressions))]
    literal = uri
    for expression, placeholder in zip(expressions, placeholders):
        literal = literal.replace(expression, placeholder, 1)

    if not is_valid_uri(literal):
        return uri

    try:
        resolved = str(httpx.URL(base_url).join(literal))
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        logger.debug("Leaving %r unresolved against %r: %s", uri, str(base_url), e)
        return uri

    for expression, placeholder in zip(expressions, placeholders):
        if placeholder not in resolved:
            # Removed by dot-segment normalization; the template can't be restored
            return uri
        resolved = resolved.replace(placeholder, expression, 1)

    return resolved
