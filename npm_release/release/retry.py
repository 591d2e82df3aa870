"""Bounded retry with a fixed delay."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from time import sleep as _sleep
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RetryOutcome(Generic[T]):
    """Last value produced and how many attempts it took.

    `accepted` is False when every attempt was rejected.
    """

    value: T
    attempts: int
    accepted: bool


def retry_until(
    action: Callable[[], T],
    accept: Callable[[T], bool],
    *,
    attempts: int,
    delay_seconds: float,
    sleep: Callable[[float], None] = _sleep,
    on_retry: Callable[[int, T], None] | None = None,
) -> RetryOutcome[T]:
    """Call `action` until `accept` approves its value or attempts run out.

    Waits `delay_seconds` between attempts (never after the last one).
    `on_retry(attempt, value)` is called before each wait.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be >= 1 (got {attempts})")

    attempt = 1
    while True:
        value = action()
        if accept(value):
            return RetryOutcome(value=value, attempts=attempt, accepted=True)
        if attempt >= attempts:
            return RetryOutcome(value=value, attempts=attempt, accepted=False)
        if on_retry is not None:
            on_retry(attempt, value)
        sleep(delay_seconds)
        attempt += 1
