"""Rewrites every transition URI of a representor tree to its absolute form."""

from __future__ import annotations

import httpx

from hyperdrive.models import Representor, Transition
from hyperdrive.uri import absolute_uri


def absolute_transition(base_url: str | httpx.URL | None, transition: Transition) -> Transition:
    """Copy of transition with its URI resolved against base_url."""
    return transition.model_copy(update={"uri": absolute_uri(base_url, transition.uri)})


def absolute_representor(base_url: str | httpx.URL | None, representor: Representor) -> Representor:
    """Build a new tree in which all transition URIs are absolute.

    Embedded representors are resolved against the same base_url as the root:
    every link in a document is relative to where the document was fetched
    from, not to the embedded resource it appears in. Attributes and metadata
    are carried over unchanged. The input tree is not modified.

    Args:
        base_url: URL the document was fetched from. None leaves URIs as they are.
        representor: Root of the tree to rewrite.

    Returns:
        A new Representor.
    """
    transitions = {
        name: absolute_transition(base_url, transition)
        for name, transition in representor.transitions.items()
    }

    representors = {
        relation: [absolute_representor(base_url, embedded) for embedded in embedded_list]
        for relation, embedded_list in representor.representors.items()
    }

    return Representor(
        transitions=transitions,
        representors=representors,
        attributes=representor.attributes,
        metadata=representor.metadata,
    )
