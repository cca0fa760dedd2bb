from __future__ import annotations

import pytest

from tests.support.harness import (
    INF,
    NAN,
    NULL,
    TRUE,
    cvmap,
    cvset,
    f,
    i,
    s,
    seq,
    tagged,
    tup,
)
from verdict.types import CvInt, CvMap, int_to_text, text_to_int
from verdict.utils import normalize_key, py_repr


@pytest.mark.parametrize(
    "value, expected",
    [
        pytest.param(NULL, "None", id="null"),
        pytest.param(TRUE, "True", id="bool"),
        pytest.param(i(10**20), "100000000000000000000", id="big-int"),
        pytest.param(f(1.5), "1.5", id="float"),
        pytest.param(NAN, "nan", id="nan"),
        pytest.param(INF, "inf", id="inf"),
        pytest.param(s("a'b"), '"a\'b"', id="str-quotes"),
        pytest.param(seq(i(1), s("x")), "[1, 'x']", id="list"),
        pytest.param(tup(i(1)), "(1,)", id="single-tuple"),
        pytest.param(tup(), "()", id="empty-tuple"),
        pytest.param(cvset(), "set()", id="empty-set"),
        pytest.param(cvmap(a=i(1)), "{'a': 1}", id="dict"),
        pytest.param(tagged("frozenset", cvset()), "frozenset()", id="empty-frozenset"),
        pytest.param(tagged("deque", seq(i(1))), "deque([1])", id="deque"),
        pytest.param(tagged("Counter", CvMap(())), "Counter({})", id="empty-counter"),
    ],
)
def test_py_repr(value, expected: str) -> None:
    assert py_repr(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        pytest.param(s("k"), "k", id="str-unquoted"),
        pytest.param(i(1), "1", id="int"),
        pytest.param(f(2.0), "2.0", id="float"),
        pytest.param(TRUE, "True", id="bool"),
        pytest.param(NULL, "None", id="none"),
        pytest.param(tup(i(1), s("a")), "(1, 'a')", id="tuple"),
    ],
)
def test_normalize_key(value, expected: str) -> None:
    assert normalize_key(value) == expected


@pytest.mark.parametrize(
    "n",
    [
        pytest.param(10 ** 1000 - 1, id="widest-single-chunk"),
        pytest.param(10 ** 1000, id="first-two-chunk"),
        pytest.param(-(10 ** 2000) - 7, id="negative-with-zero-padded-chunks"),
        pytest.param(3 ** 20000, id="past-str-digit-limit"),
    ],
)
def test_int_text_conversion_across_chunk_boundaries(n: int) -> None:
    text = int_to_text(n)
    assert text_to_int(text) == n
    assert CvInt.of(n).text == text
    digits = text.lstrip("-")
    assert digits.isdigit() and not digits.startswith("0")
    assert text.startswith("-") == (n < 0)


def test_negated_keeps_zero_unsigned() -> None:
    assert CvInt("0").negated() == CvInt("0")
    assert CvInt("-12").negated() == CvInt("12")
