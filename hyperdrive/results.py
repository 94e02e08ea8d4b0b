"""Result types returned by the client instead of raising.

A result is either Success(value) or Failure(error). flat_map chains steps
that may fail; a Failure short-circuits every later step and is returned
unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

from hyperdrive.models import HTTPRequest, HTTPResponse, Representor

T = TypeVar("T")
U = TypeVar("U")

ERROR_DOMAIN = "Hyperdrive"


class HyperdriveError(Exception):
    """An error raised by the client itself, identified by domain and code."""

    def __init__(self, domain: str, code: int, message: str) -> None:
        super().__init__(message)
        self.domain = domain
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"HyperdriveError(domain={self.domain!r}, code={self.code}, message={self.message!r})"


@dataclass(frozen=True)
class Success(Generic[T]):
    """The operation succeeded and produced a value."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    def flat_map(self, transform: Callable[[T], Success[U] | Failure]) -> Success[U] | Failure:
        return transform(self.value)

    def map(self, transform: Callable[[T], U]) -> Success[U]:
        return Success(transform(self.value))


@dataclass(frozen=True)
class Failure:
    """The operation failed with an error."""

    error: BaseException

    @property
    def is_success(self) -> bool:
        return False

    def flat_map(self, transform: Callable[[object], object]) -> Failure:
        return self

    def map(self, transform: Callable[[object], object]) -> Failure:
        return self


Result = Union[Success[Representor], Failure]
RequestResult = Union[Success[HTTPRequest], Failure]
ResponseResult = Union[Success[HTTPResponse], Failure]
