"""Decoded JSON (plain or wire-marked) to canonical values."""

from __future__ import annotations

import json
import math
from typing import Any, Dict, Optional

from .serialize import (
    NAN_SENTINEL,
    NEG_INF_SENTINEL,
    POS_INF_SENTINEL,
    TYPE_KEY,
    VALUE_KEY,
)
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
    WireFormatError,
)

_FLOAT_SENTINELS = {
    NAN_SENTINEL: math.nan,
    POS_INF_SENTINEL: math.inf,
    NEG_INF_SENTINEL: -math.inf,
}

# Older runners emitted tagged containers flat ({"__type__": "Counter", "value": {...}}).
# A flat list payload for these names is read as a set rather than a sequence.
_FLAT_SET_TAGS = frozenset({"frozenset"})


def convert(obj: Any, *, strict: bool = False) -> CvValue:
    return _convert(obj, strict, "$")


def decode(text: str) -> CvValue:
    """Strictly read a wire document produced by serialize.dumps()."""
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        raise WireFormatError(f"Invalid JSON: {exc.msg}") from None
    except (ValueError, RecursionError) as exc:
        raise WireFormatError(f"Invalid JSON: {exc}") from None
    return convert(obj, strict=True)


def _convert(obj: Any, strict: bool, path: str) -> CvValue:
    if obj is None:
        return CvNull()

    if isinstance(obj, bool):
        return CvBool(obj)

    if isinstance(obj, int):
        return CvInt.of(obj)

    if isinstance(obj, float):
        return CvFloat(obj)

    if isinstance(obj, str):
        return CvStr(obj)

    if isinstance(obj, (list, tuple)):
        return CvSeq(tuple(_convert(x, strict, f"{path}[{i}]") for i, x in enumerate(obj)))

    if isinstance(obj, dict):
        if _is_marker(obj):
            try:
                return _convert_marker(obj, strict, path)
            except WireFormatError:
                if strict:
                    raise
        return _plain_map(obj, strict, path)

    raise WireFormatError(f"Unsupported JSON value of type {type(obj).__name__}", path)


def _is_marker(obj: Dict[str, Any]) -> bool:
    if TYPE_KEY not in obj or not isinstance(obj[TYPE_KEY], str):
        return False
    keys = set(obj.keys())
    return keys == {TYPE_KEY, VALUE_KEY} or keys == {TYPE_KEY}


def _plain_map(obj: Dict[str, Any], strict: bool, path: str) -> CvMap:
    return CvMap(tuple((str(k), _convert(v, strict, f"{path}[{k!r}]")) for k, v in obj.items()))


def _convert_marker(obj: Dict[str, Any], strict: bool, path: str) -> CvValue:
    name = obj[TYPE_KEY]

    if name == "undefined":
        return CvNull()

    if VALUE_KEY not in obj:
        raise WireFormatError(f"Marker '{name}' has no value", path)

    payload = obj[VALUE_KEY]
    inner_path = f"{path}.value"

    match name:
        case "int":
            return _int_from_payload(payload, inner_path)
        case "float":
            return _float_from_payload(payload, inner_path)
        case "tuple":
            items = _expect_list(payload, name, inner_path)
            return CvTuple(tuple(_convert(x, strict, f"{inner_path}[{i}]") for i, x in enumerate(items)))
        case "set":
            items = _expect_list(payload, name, inner_path)
            return CvSet(tuple(_convert(x, strict, f"{inner_path}[{i}]") for i, x in enumerate(items)))
        case "dict":
            if not isinstance(payload, dict):
                raise WireFormatError("Marker 'dict' expects an object", inner_path)
            return _plain_map(payload, strict, inner_path)

    return CvTagged(name, _tagged_inner(name, payload, strict, inner_path))


def _tagged_inner(name: str, payload: Any, strict: bool, path: str) -> CvValue:
    if isinstance(payload, dict) and not _is_marker(payload):
        return _plain_map(payload, strict, path)

    if isinstance(payload, list) and name in _FLAT_SET_TAGS:
        return CvSet(tuple(_convert(x, strict, f"{path}[{i}]") for i, x in enumerate(payload)))

    return _convert(payload, strict, path)


def _expect_list(payload: Any, name: str, path: str) -> list:
    if not isinstance(payload, list):
        raise WireFormatError(f"Marker '{name}' expects an array", path)
    return payload


def _int_from_payload(payload: Any, path: str) -> CvInt:
    if isinstance(payload, bool):
        raise WireFormatError("Marker 'int' cannot hold a boolean", path)

    if isinstance(payload, int):
        return CvInt.of(payload)

    if isinstance(payload, float) and payload.is_integer():
        return CvInt.of(int(payload))

    if isinstance(payload, str):
        try:
            return CvInt(payload)
        except ValueError:
            pass

    raise WireFormatError(f"Invalid int payload {payload!r}", path)


def _float_from_payload(payload: Any, path: str) -> CvFloat:
    if isinstance(payload, bool):
        raise WireFormatError("Marker 'float' cannot hold a boolean", path)

    if isinstance(payload, (int, float)):
        try:
            return CvFloat(float(payload))
        except OverflowError:
            raise WireFormatError("Float payload out of range", path) from None

    if isinstance(payload, str):
        sentinel: Optional[float] = _FLOAT_SENTINELS.get(payload)
        if sentinel is not None:
            return CvFloat(sentinel)
        try:
            return CvFloat(float(payload))
        except ValueError:
            pass

    raise WireFormatError(f"Invalid float payload {payload!r}", path)
