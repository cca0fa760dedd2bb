from __future__ import annotations

from collections import Counter, OrderedDict, defaultdict, deque
from typing import Any

from ..types import (
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
    UnsupportedTypeError,
)
from ..utils import normalize_key


def from_native(obj: Any) -> CvValue:
    """Canonical value of a CPython value returned by a submission.

    Subclasses are checked before their bases (bool before int, the
    collections mappings before dict). Anything without a canonical kind
    raises UnsupportedTypeError rather than being stringified.
    """
    try:
        return _from_native(obj)
    except RecursionError:
        raise UnsupportedTypeError(
            "Value is nested too deeply (or contains itself)", type(obj).__name__
        ) from None


def _map(obj: Any) -> CvMap:
    return CvMap(tuple((normalize_key(_from_native(k)), _from_native(v)) for k, v in obj.items()))


def _from_native(obj: Any) -> CvValue:
    if obj is None:
        return CvNull()

    if isinstance(obj, bool):
        return CvBool(obj)

    if isinstance(obj, int):
        return CvInt.of(int(obj))

    if isinstance(obj, float):
        return CvFloat(float(obj))

    if isinstance(obj, str):
        return CvStr(str(obj))

    # Counter, OrderedDict and defaultdict are dicts; test them first.
    if isinstance(obj, Counter):
        return CvTagged("Counter", _map(obj))

    if isinstance(obj, OrderedDict):
        return CvTagged("OrderedDict", _map(obj))

    if isinstance(obj, defaultdict):
        return CvTagged("defaultdict", _map(obj))

    if isinstance(obj, dict):
        return _map(obj)

    if isinstance(obj, deque):
        return CvTagged("deque", CvSeq(tuple(_from_native(x) for x in obj)))

    if isinstance(obj, list):
        return CvSeq(tuple(_from_native(x) for x in obj))

    # namedtuples land here too
    if isinstance(obj, tuple):
        return CvTuple(tuple(_from_native(x) for x in obj))

    if isinstance(obj, frozenset):
        return CvTagged("frozenset", CvSet(tuple(_from_native(x) for x in obj)))

    if isinstance(obj, set):
        return CvSet(tuple(_from_native(x) for x in obj))

    type_name = type(obj).__name__
    raise UnsupportedTypeError(f"Cannot represent a value of type '{type_name}'", type_name)
