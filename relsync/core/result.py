"""Explicit success/failure values.

Every call that talks to a release provider can fail for ordinary reasons
(missing tag, rejected upload, network outage). Instead of raising, those
calls return ``Ok(value)`` or ``Err(error)`` and the caller decides.

Usage:
    def fetch(tag: str) -> Result[RemoteRelease, ReleaseError]:
        ...

    match fetch("v1.2.0"):
        case Ok(release):
            print(release.html_url)
        case Err(error):
            print(error.message)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeGuard, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Apply ``f`` to the contained value."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result.

    Attributes:
        error: The error payload.
    """

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> None:
        """Raise, since there is no value.

        Raises:
            ValueError: Always.
        """
        raise ValueError(f"called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Err[E]:
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]


def is_ok[T, E](result: Result[T, E]) -> TypeGuard[Ok[T]]:
    """Narrow ``result`` to ``Ok`` for type checkers."""
    return isinstance(result, Ok)


def is_err[T, E](result: Result[T, E]) -> TypeGuard[Err[E]]:
    """Narrow ``result`` to ``Err`` for type checkers."""
    return isinstance(result, Err)
