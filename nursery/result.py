"""Result type for explicit success/failure handling.

Decoding a persisted session or a raw feed payload can legitimately fail,
and the caller is expected to fall back to a fresh default rather than
crash. Those operations return a Result instead of raising:

    result = SessionClock.try_from_record(record)
    if result.is_ok():
        session = result.unwrap()
    else:
        logger.warning("Discarding session: %s", result.error)
        session = SessionClock.new(session_id, species, now=clock.now())

    # Or, more compactly
    session = result.unwrap_or_else(lambda: SessionClock.new(...))

Pattern matching works too:

    match result:
        case Ok(value):
            ...
        case Err(error):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")  # Success value type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transformed value type
F = TypeVar("F")  # Transformed error type


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful operation result."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the success value."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_or_else(self, f: Callable[[], T]) -> T:
        return self.value

    @property
    def error(self) -> None:
        """Ok has no error, returns None."""
        return None

    def map(self, f: Callable[[T], U]) -> "Ok[U]":
        """Transform the success value.

        Example:
            Ok(0.5).map(lambda pct: pct * 100)  # Ok(50.0)
        """
        return Ok(f(self.value))

    def map_err(self, f: Callable[[E], F]) -> "Ok[T]":
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Generic[E]):
    """A failed operation result carrying an error description."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raises ValueError since Err has no success value.

        Don't call this without checking is_ok() first!
        """
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_or_else(self, f: Callable[[], T]) -> T:
        """Compute and return the fallback value since this is an error."""
        return f()

    @property
    def value(self) -> None:
        """Err has no value, returns None."""
        return None

    def map(self, f: Callable[[T], U]) -> "Err[E]":
        return self

    def map_err(self, f: Callable[[E], F]) -> "Err[F]":
        """Transform the error.

        Example:
            Err("bad record").map_err(lambda e: f"session 7: {e}")
        """
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[E]]
