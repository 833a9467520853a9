"""Result type used to carry failures across layers without exceptions.

Every fallible step of a reconciliation run (config loading, version
resolution, forge calls) returns ``Ok(value)`` or ``Err(error)``. Callers
narrow with ``isinstance`` and bail out on the first ``Err``:

    version = resolve_version(root, ["rust"])
    if isinstance(version, Err):
        return version
    print(version.value.version)

Pattern matching works as well:

    match load_config(path):
        case Ok(config):
            ...
        case Err(error):
            ...
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful outcome holding ``value``."""

    value: T

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        """Transform the held value."""
        return Ok(f(self.value))

    def map_err(self, f: Callable[[E], F]) -> Ok[T]:
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed outcome holding ``error``."""

    error: E

    def map(self, f: Callable[[T], U]) -> Err[E]:
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        """Transform the held error, e.g. from a transport error to a domain error."""
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[E]
