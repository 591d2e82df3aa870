"""Result type for explicit error handling.

Every call that reaches an external tool (git, npm, the filesystem) returns
a Result instead of raising, so release steps can decide per call whether a
failure is fatal or only worth a warning.

Usage:
    match repo.current_branch():
        case Ok(branch):
            console.print(f"branch: {branch}")
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful result carrying a value."""

    value: T

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Transform the carried value."""
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed result carrying an error payload."""

    error: E

    def map(self, f: Callable[..., object]) -> Err[E]:
        """Return self unchanged; there is no value to transform."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
