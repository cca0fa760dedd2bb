"""Turn a parsed literal tree into a canonical value.

Constructor calls (``frozenset({1, 2})``, ``Counter("aab")``,
``list(range(3))``...) are resolved here through a fixed table; any other
name is rejected so that unknown text falls back to a plain string.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

from lark import Token, Transformer, Tree, v_args
from lark.exceptions import VisitError

from .lexer_rd import LexError, decode_string
from .tree import Node, is_token, token_kind
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
    LiteralError,
    VerdictError,
    is_cv_value,
)
from .utils import normalize_key

MAX_POWER_EXPONENT = 1000
MAX_POWER_BITS = 200_000
MAX_RANGE_LENGTH = 100_000

_BARE_NAMES: Dict[str, CvValue] = {
    "inf": CvFloat(math.inf),
    "nan": CvFloat(math.nan),
}

_DEFAULT_FACTORIES = frozenset({"int", "float", "str", "list", "dict", "set", "tuple", "bool", "None"})


@dataclass(frozen=True)
class _Range:
    """range(...) result; only valid as the argument of an iterable constructor."""
    items: Tuple[CvValue, ...]


def _value(node: Any) -> CvValue:
    if is_token(node) and token_kind(node) == "NAME":
        bare = _BARE_NAMES.get(str(node.value))
        if bare is None:
            raise LiteralError(f"Unknown name '{node.value}'")
        return bare

    if isinstance(node, _Range):
        raise LiteralError("range() is only allowed inside list(), tuple(), set() or deque()")

    if not is_cv_value(node):
        raise LiteralError(f"Unexpected literal node {node!r}")
    return node


def _iter_items(node: Any) -> Tuple[CvValue, ...]:
    """Elements produced by iterating a value the way Python would."""
    if isinstance(node, _Range):
        return node.items

    value = _value(node)
    match value:
        case CvSeq(items=items) | CvTuple(items=items) | CvSet(items=items):
            return items
        case CvStr(value=s):
            return tuple(CvStr(ch) for ch in s)
        case CvMap(entries=entries):
            return tuple(CvStr(k) for k, _ in entries)
        case CvTagged(inner=inner):
            return _iter_items(inner)
    raise LiteralError(f"{value!r} is not iterable")


def _pairs(node: Any) -> Tuple[Tuple[str, CvValue], ...]:
    value = _value(node)
    if isinstance(value, CvMap):
        return value.entries
    if isinstance(value, CvTagged) and isinstance(value.inner, CvMap):
        return value.inner.entries

    pairs: List[Tuple[str, CvValue]] = []
    for item in _iter_items(value):
        if not isinstance(item, (CvSeq, CvTuple)) or len(item.items) != 2:
            raise LiteralError(f"Expected a key/value pair, got {item!r}")
        key, val = item.items
        pairs.append((normalize_key(key), val))
    return tuple(pairs)


def _arity(name: str, args: List[Any], *allowed: int) -> None:
    if len(args) not in allowed:
        expected = " or ".join(str(n) for n in allowed)
        raise LiteralError(f"{name}() takes {expected} argument(s), got {len(args)}")


# ---------- constructor table ----------

Constructor = Callable[[List[Any]], Any]

def _ctor_frozenset(args: List[Any]) -> CvValue:
    _arity("frozenset", args, 0, 1)
    return CvTagged("frozenset", CvSet(_iter_items(args[0]) if args else ()))

def _ctor_counter(args: List[Any]) -> CvValue:
    _arity("Counter", args, 0, 1)
    if not args:
        return CvTagged("Counter", CvMap(()))

    value = args[0]
    if not isinstance(value, _Range) and isinstance(_value(value), CvMap):
        return CvTagged("Counter", _value(value))

    counts: Dict[str, int] = {}
    for item in _iter_items(value):
        key = normalize_key(item)
        counts[key] = counts.get(key, 0) + 1
    return CvTagged("Counter", CvMap(tuple((k, CvInt.of(n)) for k, n in counts.items())))

def _ctor_ordered_dict(args: List[Any]) -> CvValue:
    _arity("OrderedDict", args, 0, 1)
    return CvTagged("OrderedDict", CvMap(_pairs(args[0]) if args else ()))

def _ctor_deque(args: List[Any]) -> CvValue:
    _arity("deque", args, 0, 1)
    return CvTagged("deque", CvSeq(_iter_items(args[0]) if args else ()))

def _ctor_defaultdict(args: List[Any]) -> CvValue:
    _arity("defaultdict", args, 0, 1, 2)
    if args:
        factory = args[0]
        name = str(factory.value) if is_token(factory) else None
        if isinstance(factory, CvNull):
            name = "None"
        if name not in _DEFAULT_FACTORIES:
            raise LiteralError(f"Unsupported defaultdict factory {factory!r}")
    return CvTagged("defaultdict", CvMap(_pairs(args[1]) if len(args) == 2 else ()))

def _ctor_set(args: List[Any]) -> CvValue:
    _arity("set", args, 0, 1)
    return CvSet(_iter_items(args[0]) if args else ())

def _ctor_tuple(args: List[Any]) -> CvValue:
    _arity("tuple", args, 0, 1)
    return CvTuple(_iter_items(args[0]) if args else ())

def _ctor_list(args: List[Any]) -> CvValue:
    _arity("list", args, 0, 1)
    return CvSeq(_iter_items(args[0]) if args else ())

def _ctor_dict(args: List[Any]) -> CvValue:
    _arity("dict", args, 0, 1)
    return CvMap(_pairs(args[0]) if args else ())

def _ctor_range(args: List[Any]) -> _Range:
    _arity("range", args, 1, 2, 3)
    bounds = []
    for arg in args:
        value = _value(arg)
        if not isinstance(value, CvInt):
            raise LiteralError("range() arguments must be integers")
        bounds.append(value.as_int())

    r = range(*bounds)
    if len(r) > MAX_RANGE_LENGTH:
        raise LiteralError(f"range() longer than {MAX_RANGE_LENGTH} elements")
    return _Range(tuple(CvInt.of(n) for n in r))

def _ctor_float(args: List[Any]) -> CvValue:
    _arity("float", args, 0, 1)
    if not args:
        return CvFloat(0.0)

    value = _value(args[0])
    match value:
        case CvFloat():
            return value
        case CvInt():
            try:
                return CvFloat(float(value.as_int()))
            except OverflowError:
                raise LiteralError("int too large to convert to float") from None
        case CvStr(value=s):
            try:
                return CvFloat(float(s))
            except ValueError:
                raise LiteralError(f"could not convert string to float: {s!r}") from None
    raise LiteralError(f"float() argument must be a string or a number, not {value!r}")

def _ctor_int(args: List[Any]) -> CvValue:
    _arity("int", args, 0, 1)
    if not args:
        return CvInt("0")

    value = _value(args[0])
    match value:
        case CvInt():
            return value
        case CvFloat(value=f) if math.isfinite(f):
            return CvInt.of(int(f))
        case CvStr(value=s):
            try:
                return CvInt(s.replace("_", ""))
            except ValueError:
                raise LiteralError(f"invalid literal for int(): {s!r}") from None
    raise LiteralError(f"int() argument must be a string or a finite number, not {value!r}")

CONSTRUCTORS: Dict[str, Constructor] = {
    "frozenset": _ctor_frozenset,
    "Counter": _ctor_counter,
    "OrderedDict": _ctor_ordered_dict,
    "deque": _ctor_deque,
    "defaultdict": _ctor_defaultdict,
    "set": _ctor_set,
    "tuple": _ctor_tuple,
    "list": _ctor_list,
    "dict": _ctor_dict,
    "range": _ctor_range,
    "float": _ctor_float,
    "int": _ctor_int,
}


# ---------- tree -> value ----------

def int_power(base: int, exponent: int) -> int:
    """base ** exponent, refusing exponents outside 0..MAX_POWER_EXPONENT and oversized results."""
    if not 0 <= exponent <= MAX_POWER_EXPONENT:
        raise LiteralError(f"Exponent must be within 0..{MAX_POWER_EXPONENT}")
    if abs(base).bit_length() * exponent > MAX_POWER_BITS:
        raise LiteralError(f"Power result exceeds {MAX_POWER_BITS} bits")
    return base ** exponent


def _number(text: str) -> CvValue:
    cleaned = text.replace("_", "")

    try:
        if cleaned[:2].lower() in ("0x", "0o", "0b"):
            return CvInt.of(int(cleaned, 0))
        if any(ch in cleaned for ch in ".eE"):
            return CvFloat(float(cleaned))
        return CvInt(cleaned)
    except ValueError:
        raise LiteralError(f"Malformed number {text!r}") from None


def _negate(value: CvValue) -> CvValue:
    match value:
        case CvInt():
            return value.negated()
        case CvFloat(value=f):
            return CvFloat(-f)
    raise LiteralError(f"Bad operand for unary minus: {value!r}")


class LiteralBuilder(Transformer):
    """Bottom-up: tokens become Cv values, trees become containers."""

    # ---- tokens ----
    def NUMBER(self, tok: Token) -> CvValue:
        return _number(str(tok.value))

    def STRING(self, tok: Token) -> CvValue:
        try:
            return CvStr(decode_string(str(tok.value)))
        except LexError as exc:
            raise LiteralError(str(exc)) from None

    def TRUE(self, _tok: Token) -> CvValue:
        return CvBool(True)

    def FALSE(self, _tok: Token) -> CvValue:
        return CvBool(False)

    def NULL(self, _tok: Token) -> CvValue:
        return CvNull()

    def NAN(self, _tok: Token) -> CvValue:
        return CvFloat(math.nan)

    def INFINITY(self, _tok: Token) -> CvValue:
        return CvFloat(math.inf)

    # ---- containers ----
    def literal(self, c: List[Any]) -> CvValue:
        return _value(c[0])

    def seq(self, c: List[Any]) -> CvValue:
        return CvSeq(tuple(_value(x) for x in c))

    def tuple(self, c: List[Any]) -> CvValue:
        return CvTuple(tuple(_value(x) for x in c))

    def set(self, c: List[Any]) -> CvValue:
        return CvSet(tuple(_value(x) for x in c))

    def dict(self, c: List[Tuple[str, CvValue]]) -> CvValue:
        return CvMap(tuple(c))

    @v_args(inline=True)
    def pair(self, key: Any, value: Any) -> Tuple[str, CvValue]:
        return normalize_key(_value(key)), _value(value)

    # ---- operators ----
    @v_args(inline=True)
    def neg(self, operand: Any) -> CvValue:
        return _negate(_value(operand))

    @v_args(inline=True)
    def pos(self, operand: Any) -> CvValue:
        value = _value(operand)
        if not isinstance(value, (CvInt, CvFloat)):
            raise LiteralError(f"Bad operand for unary plus: {value!r}")
        return value

    @v_args(inline=True)
    def power(self, base: Any, exponent: Any) -> CvValue:
        b = _value(base)
        e = _value(exponent)
        if not isinstance(b, CvInt) or not isinstance(e, CvInt):
            raise LiteralError("Only integer powers are supported")

        return CvInt.of(int_power(b.as_int(), e.as_int()))

    # ---- calls ----
    def args(self, c: List[Any]) -> List[Any]:
        return list(c)

    @v_args(inline=True)
    def call(self, name: Token, args: List[Any]) -> Any:
        ctor = CONSTRUCTORS.get(str(name.value))
        if ctor is None:
            raise LiteralError(f"Unknown constructor '{name.value}'")
        return ctor(args)


def build(node: Node) -> CvValue:
    """Canonical value of a literal tree; raises LiteralError on anything unsupported."""
    try:
        result = LiteralBuilder().transform(Tree("literal", [node]))
    except VisitError as exc:
        orig = exc.orig_exc
        if isinstance(orig, (VerdictError, ValueError, ArithmeticError, RecursionError)):
            raise LiteralError(str(orig)) from None
        raise

    return _value(result)
