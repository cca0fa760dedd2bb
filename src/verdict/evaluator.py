"""Boundary between the batch runner and whatever executes a call expression."""

from __future__ import annotations

import io
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Protocol, Union

from .types import CvValue


@dataclass(frozen=True)
class EvalError:
    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> EvalError:
        return cls(type(exc).__name__, str(exc))

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


@dataclass(frozen=True)
class EvalOk:
    value: CvValue


@dataclass(frozen=True)
class EvalFailure:
    error: EvalError


EvalOutcome = Union[EvalOk, EvalFailure]


class Evaluator(Protocol):
    """Executes one call expression, once, and reports its value or fault.

    Implementations catch every fault raised by the call and return it as an
    EvalFailure; nothing propagates to the caller.
    """

    def evaluate(self, call: str) -> EvalOutcome:
        ...


@contextmanager
def capture_output() -> Iterator[io.StringIO]:
    """Redirect sys.stdout into a buffer; the previous stream is restored on every exit."""
    buffer = io.StringIO()
    previous = sys.stdout
    sys.stdout = buffer
    try:
        yield buffer
    finally:
        sys.stdout = previous
