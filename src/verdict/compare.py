from __future__ import annotations

import math
from typing import Callable, Hashable, Optional

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
    kind_name,
)

FloatEq = Callable[[float, float], bool]


def value_key(value: CvValue) -> Hashable:
    """Hashable key with value_key(a) == value_key(b) exactly when equals(a, b)."""
    match value:
        case CvNull():
            return ("null",)
        case CvBool(value=b):
            return ("bool", b)
        case CvInt(text=t):
            return ("int", t)
        case CvFloat(value=f):
            if math.isnan(f):
                return ("float", "nan")
            # -0.0 and 0.0 compare and hash equal
            return ("float", f)
        case CvStr(value=s):
            return ("str", s)
        case CvSeq(items=items):
            return ("list", tuple(value_key(x) for x in items))
        case CvTuple(items=items):
            return ("tuple", tuple(value_key(x) for x in items))
        case CvMap(entries=entries):
            return ("dict", frozenset((k, value_key(v)) for k, v in entries))
        case CvSet(items=items):
            return ("set", frozenset(value_key(x) for x in items))
        case CvTagged(name=name, inner=inner):
            return ("tagged", name, value_key(inner))
        case _:
            raise VerdictTypeError(f"Unexpected value type {type(value).__name__}")


def _exact_float_eq(a: float, b: float) -> bool:
    if math.isnan(a) or math.isnan(b):
        return math.isnan(a) and math.isnan(b)
    return a == b


def _deep_equals(lhs: CvValue, rhs: CvValue, float_eq: FloatEq) -> bool:
    match (lhs, rhs):
        case (CvNull(), CvNull()):
            return True
        case (CvBool(value=a), CvBool(value=b)):
            return a == b
        case (CvInt(text=a), CvInt(text=b)):
            return a == b
        case (CvFloat(value=a), CvFloat(value=b)):
            return float_eq(a, b)
        case (CvStr(value=a), CvStr(value=b)):
            return a == b
        case (CvSeq(items=items_a), CvSeq(items=items_b)) | (CvTuple(items=items_a), CvTuple(items=items_b)):
            return len(items_a) == len(items_b) and all(
                _deep_equals(a, b, float_eq) for a, b in zip(items_a, items_b)
            )
        case (CvMap() as map_a, CvMap() as map_b):
            slots_a = dict(map_a.entries)
            slots_b = dict(map_b.entries)
            return slots_a.keys() == slots_b.keys() and all(
                _deep_equals(slots_a[k], slots_b[k], float_eq) for k in slots_a
            )
        case (CvSet(items=items_a), CvSet(items=items_b)):
            return _sets_equal(items_a, items_b, float_eq)
        case (CvTagged(name=name_a, inner=inner_a), CvTagged(name=name_b, inner=inner_b)):
            return name_a == name_b and _deep_equals(inner_a, inner_b, float_eq)
        case _:
            # Int vs Float, Seq vs Tuple, Tagged vs untagged, Null vs anything
            return False


def _sets_equal(items_a: tuple, items_b: tuple, float_eq: FloatEq) -> bool:
    if len(items_a) != len(items_b):
        return False

    if float_eq is _exact_float_eq:
        return frozenset(value_key(x) for x in items_a) == frozenset(value_key(x) for x in items_b)

    # Tolerant float equality is not transitive, so match elements pairwise.
    unmatched = list(items_b)
    for a in items_a:
        for idx, b in enumerate(unmatched):
            if _deep_equals(a, b, float_eq):
                del unmatched[idx]
                break
        else:
            return False
    return not unmatched


def equals(lhs: CvValue, rhs: CvValue) -> bool:
    return _deep_equals(lhs, rhs, _exact_float_eq)


def equals_within(lhs: CvValue, rhs: CvValue, *, rel_tol: float = 0.0, abs_tol: float = 0.0) -> bool:
    """Like equals(), but Float/Float pairs use math.isclose with the given tolerances.

    Opt-in only: runtimes that cannot reproduce exact binary floats may wrap
    their comparisons with this. Int/Float pairs stay unequal.
    """
    if rel_tol < 0 or abs_tol < 0:
        raise ValueError("tolerances must be non-negative")

    def float_eq(a: float, b: float) -> bool:
        if math.isnan(a) or math.isnan(b):
            return math.isnan(a) and math.isnan(b)
        return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)

    return _deep_equals(lhs, rhs, float_eq)


def explain(lhs: CvValue, rhs: CvValue, path: str = "$") -> Optional[str]:
    """Describe the first mismatch between two values, or None when they are equal."""
    if equals(lhs, rhs):
        return None

    if type(lhs) is not type(rhs):
        return f"{path}: {kind_name(lhs)} {lhs!r} != {kind_name(rhs)} {rhs!r}"

    match (lhs, rhs):
        case (CvSeq(items=items_a), CvSeq(items=items_b)) | (CvTuple(items=items_a), CvTuple(items=items_b)):
            if len(items_a) != len(items_b):
                return f"{path}: length {len(items_a)} != {len(items_b)}"
            for idx, (a, b) in enumerate(zip(items_a, items_b)):
                found = explain(a, b, f"{path}[{idx}]")
                if found is not None:
                    return found
        case (CvMap() as map_a, CvMap() as map_b):
            keys_a = set(map_a.keys())
            keys_b = set(map_b.keys())
            if keys_a != keys_b:
                missing = sorted(keys_b - keys_a)
                extra = sorted(keys_a - keys_b)
                bits = []
                if missing:
                    bits.append("missing " + ", ".join(repr(k) for k in missing))
                if extra:
                    bits.append("unexpected " + ", ".join(repr(k) for k in extra))
                return f"{path}: keys differ ({'; '.join(bits)})"
            for key, a in map_a.entries:
                b = map_b.get(key)
                if b is None:
                    continue
                found = explain(a, b, f"{path}[{key!r}]")
                if found is not None:
                    return found
        case (CvSet(items=items_a), CvSet(items=items_b)):
            if len(items_a) != len(items_b):
                return f"{path}: set size {len(items_a)} != {len(items_b)}"
            return f"{path}: set elements differ"
        case (CvTagged(name=name_a, inner=inner_a), CvTagged(name=name_b, inner=inner_b)):
            if name_a != name_b:
                return f"{path}: {name_a} != {name_b}"
            return explain(inner_a, inner_b, path)

    return f"{path}: {kind_name(lhs)} {lhs!r} != {kind_name(rhs)} {rhs!r}"
