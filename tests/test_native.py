from __future__ import annotations

import math
from collections import Counter, OrderedDict, defaultdict, deque, namedtuple
from decimal import Decimal

import pytest

from tests.support.harness import (
    FALSE,
    NAN,
    NULL,
    TRUE,
    assert_cv_equal,
    cvmap,
    cvmap_of,
    cvset,
    f,
    i,
    s,
    seq,
    tagged,
    tup,
)
from verdict.eval.native import from_native
from verdict.types import CvBool, CvInt, UnsupportedTypeError

Point = namedtuple("Point", "x y")


@pytest.mark.parametrize(
    "obj, expected",
    [
        pytest.param(None, NULL, id="none"),
        pytest.param(True, TRUE, id="true"),
        pytest.param(False, FALSE, id="false"),
        pytest.param(10**30, i(10**30), id="big-int"),
        pytest.param(1.5, f(1.5), id="float"),
        pytest.param(math.nan, NAN, id="nan"),
        pytest.param("text", s("text"), id="str"),
        pytest.param([1, "a"], seq(i(1), s("a")), id="list"),
        pytest.param((1, 2), tup(i(1), i(2)), id="tuple"),
        pytest.param(Point(1, 2), tup(i(1), i(2)), id="namedtuple"),
        pytest.param({"a": 1}, cvmap(a=i(1)), id="dict"),
        pytest.param({1: "x", (2, 3): "y", None: "z"}, cvmap_of(("1", s("x")), ("(2, 3)", s("y")), ("None", s("z"))), id="dict-key-coercion"),
        pytest.param({3, 1}, cvset(i(1), i(3)), id="set"),
        pytest.param(frozenset({1, 2}), tagged("frozenset", cvset(i(1), i(2))), id="frozenset"),
        pytest.param(Counter("aab"), tagged("Counter", cvmap(a=i(2), b=i(1))), id="counter"),
        pytest.param(OrderedDict([("x", 1)]), tagged("OrderedDict", cvmap(x=i(1))), id="ordereddict"),
        pytest.param(defaultdict(list, {"k": [1]}), tagged("defaultdict", cvmap(k=seq(i(1)))), id="defaultdict"),
        pytest.param(deque([1, 2]), tagged("deque", seq(i(1), i(2))), id="deque"),
        pytest.param([{"a": (1,)}], seq(cvmap(a=tup(i(1)))), id="nested"),
    ],
)
def test_from_native(obj: object, expected: object) -> None:
    assert_cv_equal(from_native(obj), expected)


def test_bool_is_not_an_int() -> None:
    assert isinstance(from_native(True), CvBool)
    assert isinstance(from_native(1), CvInt)


def test_native_keys_match_literal_keys() -> None:
    from verdict.expected import parse

    assert_cv_equal(from_native({1: "a", 2.5: "b"}), parse("{1: 'a', 2.5: 'b'}"))


@pytest.mark.parametrize(
    "obj, type_name",
    [
        pytest.param(Decimal("1.5"), "Decimal", id="decimal"),
        pytest.param(object(), "object", id="object"),
        pytest.param(b"raw", "bytes", id="bytes"),
        pytest.param([1, {2: complex(1, 1)}], "complex", id="nested-complex"),
    ],
)
def test_unsupported_types_raise(obj: object, type_name: str) -> None:
    with pytest.raises(UnsupportedTypeError) as exc_info:
        from_native(obj)
    assert exc_info.value.type_name == type_name


def test_self_referencing_value_raises() -> None:
    loop: list = []
    loop.append(loop)

    with pytest.raises(UnsupportedTypeError):
        from_native(loop)


@pytest.mark.parametrize(
    "sign",
    [pytest.param(1, id="positive"), pytest.param(-1, id="negative")],
)
def test_int_past_string_conversion_limit(sign: int) -> None:
    value = from_native(sign * 10 ** 5000)
    assert value == CvInt(("-" if sign < 0 else "") + "1" + "0" * 5000)
    assert value.as_int() == sign * 10 ** 5000
