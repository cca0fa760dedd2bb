"""Lossless wire encoding of canonical values.

Plain JSON objects never carry user mappings; every non-JSON-native kind is
wrapped as ``{"__type__": <marker>, "value": <payload>}`` so that
``convert.convert`` can read the wire form back without ambiguity.
"""

from __future__ import annotations

import json
import math
from typing import Any, Dict, List, Union

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

WireValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

TYPE_KEY = "__type__"
VALUE_KEY = "value"

# Largest integer every JSON consumer (IEEE doubles included) reads back exactly.
MAX_SAFE_INTEGER = 2 ** 53 - 1

NAN_SENTINEL = "NaN"
POS_INF_SENTINEL = "Infinity"
NEG_INF_SENTINEL = "-Infinity"


def _marker(name: str, payload: WireValue) -> Dict[str, Any]:
    return {TYPE_KEY: name, VALUE_KEY: payload}


def _float_payload(f: float) -> Union[float, str]:
    if math.isnan(f):
        return NAN_SENTINEL
    if math.isinf(f):
        return POS_INF_SENTINEL if f > 0 else NEG_INF_SENTINEL
    return f


_SAFE_DIGITS = str(MAX_SAFE_INTEGER)


def _int_payload(value: CvInt) -> Union[int, str]:
    digits = value.text.lstrip("-")
    if len(digits) < len(_SAFE_DIGITS) or (len(digits) == len(_SAFE_DIGITS) and digits <= _SAFE_DIGITS):
        return int(value.text)
    return value.text


def serialize(value: CvValue) -> WireValue:
    match value:
        case CvNull():
            return None
        case CvBool(value=b):
            return b
        case CvInt():
            return _marker("int", _int_payload(value))
        case CvFloat(value=f):
            return _marker("float", _float_payload(f))
        case CvStr(value=s):
            return s
        case CvSeq(items=items):
            return [serialize(x) for x in items]
        case CvTuple(items=items):
            return _marker("tuple", [serialize(x) for x in items])
        case CvMap(entries=entries):
            return _marker("dict", {k: serialize(v) for k, v in entries})
        case CvSet(items=items):
            encoded = [serialize(x) for x in items]
            return _marker("set", sorted(encoded, key=canonical_key))
        case CvTagged(name=name, inner=inner):
            return _marker(name, serialize(inner))
        case _:
            raise VerdictTypeError(f"Cannot serialize {type(value).__name__}")


def canonical_key(wire: WireValue) -> str:
    """Stable sort key for an already-serialized element."""
    return json.dumps(wire, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def dumps(value: CvValue) -> str:
    """Compact JSON text of a value's wire form."""
    return json.dumps(serialize(value), separators=(",", ":"), ensure_ascii=False, allow_nan=False)
