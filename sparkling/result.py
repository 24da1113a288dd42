"""Ok/Err results for operations whose failure is an ordinary outcome.

Parsing a model response and attempting a state transition both fail in
normal operation. They return a ``Result`` so the caller decides what the
failure means instead of catching exceptions::

    parsed = parse_reasoning_response(text)
    if parsed.is_err():
        return InferenceResult.failure(parsed.error)
    proposal = parsed.unwrap()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def error(self) -> None:
        return None

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def value(self) -> None:
        return None

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        """Raise ``ValueError``; an Err carries no value."""
        raise ValueError(f"unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable) -> Err[E]:
        return self


Result = Union[Ok[T], Err[E]]
