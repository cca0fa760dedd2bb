from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from tests.support.harness import assert_cv_equal
from verdict.compare import equals, value_key
from verdict.convert import convert, decode
from verdict.expected import parse
from verdict.serialize import dumps, serialize
from verdict.types import (
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
)

# ---------- strategies ----------

scalars = st.one_of(
    st.just(CvNull()),
    st.booleans().map(CvBool),
    st.integers().map(CvInt.of),
    st.integers(min_value=4301, max_value=4400).map(lambda width: CvInt("9" * width)),
    st.floats(allow_nan=True, allow_infinity=True).map(CvFloat),
    st.text(max_size=12).map(CvStr),
)

hashable_elements = st.one_of(
    st.integers(min_value=-(2**80), max_value=2**80).map(CvInt.of),
    st.text(max_size=6).map(CvStr),
    st.floats(allow_nan=True).map(CvFloat),
)


def _containers(children: st.SearchStrategy) -> st.SearchStrategy:
    items = st.lists(children, max_size=4).map(tuple)
    entries = st.lists(st.tuples(st.text(max_size=6), children), max_size=4).map(tuple)
    return st.one_of(
        items.map(CvSeq),
        items.map(CvTuple),
        entries.map(CvMap),
        items.map(CvSet),
        st.lists(hashable_elements, max_size=4).map(lambda xs: CvTagged("frozenset", CvSet(tuple(xs)))),
        st.lists(st.tuples(st.text(max_size=4), st.integers(0, 9).map(CvInt.of)), max_size=3).map(
            lambda pairs: CvTagged("Counter", CvMap(tuple(pairs)))
        ),
        entries.map(lambda e: CvTagged("OrderedDict", CvMap(e))),
        entries.map(lambda e: CvTagged("defaultdict", CvMap(e))),
        items.map(lambda xs: CvTagged("deque", CvSeq(xs))),
    )


values = st.recursive(scalars, _containers, max_leaves=20)


# ---------- properties ----------

@settings(max_examples=200)
@given(values)
def test_parse_of_dumps_round_trips(value) -> None:
    assert_cv_equal(parse(dumps(value)), value)


@settings(max_examples=200)
@given(values)
def test_strict_decode_round_trips(value) -> None:
    assert_cv_equal(decode(dumps(value)), value)


@given(values)
def test_convert_of_serialize_round_trips(value) -> None:
    assert_cv_equal(convert(serialize(value)), value)


@given(values)
def test_equals_is_reflexive(value) -> None:
    assert equals(value, value)


@given(values, values)
def test_value_key_agrees_with_equals(lhs, rhs) -> None:
    assert equals(lhs, rhs) == (value_key(lhs) == value_key(rhs))


@given(st.lists(hashable_elements, max_size=6, unique_by=value_key))
def test_set_serialization_ignores_member_order(items) -> None:
    assert dumps(CvSet(tuple(items))) == dumps(CvSet(tuple(reversed(items))))
