from __future__ import annotations

import math

from .types import (
    CvValue,
    CvNull,
    CvBool,
    CvInt,
    CvFloat,
    CvStr,
    CvSeq,
    CvTuple,
    CvMap,
    CvSet,
    CvTagged,
    VerdictTypeError,
)


def normalize_key(value: CvValue) -> str:
    """String form of a mapping key, spelled the way Python's str() spells the native key.

    Literal dict keys and native dict keys both pass through here, so
    ``{1: "a"}`` written in an expectation and ``{1: "a"}`` returned by a
    submission end up with the same key ``"1"``.
    """
    match value:
        case CvStr(value=s):
            return s
        case _:
            return py_repr(value)


def py_repr(value: CvValue) -> str:
    match value:
        case CvNull():
            return "None"
        case CvBool(value=b):
            return "True" if b else "False"
        case CvInt(text=t):
            return t
        case CvFloat(value=f):
            if math.isnan(f):
                return "nan"
            if math.isinf(f):
                return "inf" if f > 0 else "-inf"
            return repr(f)
        case CvStr(value=s):
            return repr(s)
        case CvSeq(items=items):
            return "[" + ", ".join(py_repr(x) for x in items) + "]"
        case CvTuple(items=items):
            if len(items) == 1:
                return f"({py_repr(items[0])},)"
            return "(" + ", ".join(py_repr(x) for x in items) + ")"
        case CvMap(entries=entries):
            return "{" + ", ".join(f"{k!r}: {py_repr(v)}" for k, v in entries) + "}"
        case CvSet(items=items):
            if not items:
                return "set()"
            return "{" + ", ".join(py_repr(x) for x in items) + "}"
        case CvTagged(name=name, inner=CvSet(items=())):
            return f"{name}()"
        case CvTagged(name=name, inner=inner):
            return f"{name}({py_repr(inner)})"
        case _:
            raise VerdictTypeError(f"Unexpected value type {type(value).__name__}")


def render(value: CvValue) -> str:
    """Human-readable literal text of a value, as used in logs and the REPL."""
    return py_repr(value)
