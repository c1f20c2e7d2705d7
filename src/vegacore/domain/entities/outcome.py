"""Explicit result type for operations that never raise past their boundary.

``Ok`` carries a value, ``Empty`` means "nothing found or failed" and
``Cancelled`` means the caller no longer wants the result. Callers can
tell the two "no result" cases apart without a try/except.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Empty:
    reason: str = ""


@dataclass(frozen=True)
class Cancelled:
    pass


Outcome = Union[Ok[T], Empty, Cancelled]


def unwrap_or(outcome: Outcome[T], default: T) -> T:
    """Return the ``Ok`` value or *default* for ``Empty``/``Cancelled``."""
    if isinstance(outcome, Ok):
        return outcome.value
    return default
