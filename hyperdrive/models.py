"""Internal data models for hyperdrive.

All models use Pydantic v2 and are frozen: traversal and rewriting build new
instances rather than mutating existing ones.
"""

from __future__ import annotations

import ssl
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, JsonValue, field_validator


# =============================================================================
# Hypermedia Models
# =============================================================================


class AttributeDescriptor(BaseModel):
    """Value and default value of a transition attribute or parameter.

    Both are opaque to the client and only passed through.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    value: JsonValue = Field(default=None, description="Current value")
    default_value: JsonValue = Field(default=None, description="Default value")


class Transition(BaseModel):
    """One possible state change advertised by a Representor."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    uri: str = Field(description="URI template, may be relative")
    method: str = Field(default="GET", description="HTTP method to follow the transition with")
    suggested_content_types: list[str] = Field(
        default_factory=list, description="Request body content types, most preferred first"
    )
    attributes: dict[str, AttributeDescriptor] = Field(
        default_factory=dict, description="Expected request body fields"
    )
    parameters: dict[str, AttributeDescriptor] = Field(
        default_factory=dict, description="URI template variables"
    )


class Representor(BaseModel):
    """One hypermedia resource state.

    A Representor without transitions and embedded representors is a valid
    terminal node; Representor() is the empty document returned whenever a
    body could not be deserialized.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    transitions: dict[str, Transition] = Field(
        default_factory=dict, description="Transition name -> Transition"
    )
    representors: dict[str, list[Representor]] = Field(
        default_factory=dict, description="Relation -> ordered embedded representors"
    )
    attributes: dict[str, JsonValue] = Field(
        default_factory=dict, description="Resource state (not interpreted)"
    )
    metadata: dict[str, str] = Field(default_factory=dict, description="Auxiliary key/value pairs")

    @property
    def is_empty(self) -> bool:
        return not self.transitions and not self.representors


# =============================================================================
# Core HTTP Models
# =============================================================================


class HTTPRequest(BaseModel):
    """An outbound request built from a URI or a transition."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    method: str = Field(default="GET", description="HTTP method (GET, POST, etc.)")
    url: str = Field(description="Expanded URI")
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers")
    body: bytes | None = Field(default=None, description="Encoded request body")


class HTTPResponse(BaseModel):
    """A response received from the transport.

    Header keys are lowercase. Header values are arrays for repeated headers.
    The body is carried separately so that "no body" stays distinguishable.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = Field(description="Effective URI the response was fetched from")
    status_code: int = Field(description="HTTP status code")
    headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Response headers (lowercase keys, array values)"
    )
    elapsed_ms: float = Field(default=0.0, description="Response time in milliseconds")
    http_version: str = Field(default="1.1", description="Protocol version")

    @property
    def content_type(self) -> str | None:
        """Media type of the response without parameters, lowercased."""
        values = self.headers.get("content-type")
        if not values:
            return None
        media_type = values[0].split(";", 1)[0].strip().lower()
        return media_type or None


# =============================================================================
# Runtime Configuration Models
# =============================================================================


class ClientConfig(BaseModel):
    """Configuration for the HTTP client behind Hyperdrive."""

    model_config = ConfigDict(extra="forbid")

    base_url: str | None = Field(
        default=None, description="Base URL that relative request URIs are sent against"
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers to include (supports ${ENV_VAR} substitution)",
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify server certificates")
    ca_bundle: str | None = Field(default=None, description="Path to a CA bundle")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    def client_kwargs(self) -> dict[str, Any]:
        """Build kwargs shared by httpx.Client and httpx.AsyncClient."""
        kwargs: dict[str, Any] = {
            "headers": self.headers,
            "timeout": self.timeout,
            "follow_redirects": self.follow_redirects,
        }
        if self.base_url:
            kwargs["base_url"] = self.base_url

        if self.ca_bundle:
            kwargs["verify"] = ssl.create_default_context(cafile=self.ca_bundle)
        elif not self.verify_ssl:
            kwargs["verify"] = False
        # else: use httpx default (True)

        return kwargs
