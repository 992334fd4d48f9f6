"""Ok/Err values for steps whose failure is expected and must be branched on.

Token acquisition returns `Result[str, ErrorTrace]` instead of raising, so the
gateway can turn a missing credential into an envelope without try/except.

    >>> Ok("token").map(str.upper).unwrap()
    'TOKEN'
    >>> match Err("no credentials"):
    ...     case Err(reason): print(reason)
    no credentials
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, NoReturn, TypeAlias, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise RuntimeError(f"unwrap_err() called on {self!r}")

    def unwrap_or(self, default: object) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def map_err(self, f: Callable[[Any], Any]) -> Ok[T]:
        return self

    def flat_map(self, f: Callable[[T], Result[U, Any]]) -> Result[U, Any]:
        return f(self.value)

    def match(self, *, ok: Callable[[T], U], err: Callable[[Any], U]) -> U:
        return ok(self.value)

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise RuntimeError(f"unwrap() called on {self!r}")

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default: U) -> U:
        return default

    def map(self, f: Callable[[Any], Any]) -> Err[E]:
        return self

    def map_err(self, f: Callable[[E], U]) -> Err[U]:
        return Err(f(self.error))

    def flat_map(self, f: Callable[[Any], Any]) -> Err[E]:
        return self

    def match(self, *, ok: Callable[[Any], U], err: Callable[[E], U]) -> U:
        return err(self.error)

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result: TypeAlias = Union[Ok[T], Err[E]]
