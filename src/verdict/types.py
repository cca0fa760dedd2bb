from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard

# ---------- Value Model (canonical Cv* kinds) ----------

_INT_TEXT_RE = re.compile(r"^[+-]?[0-9]+$")

# Decimal digits converted per step; stays under CPython's int<->str digit limit.
_DIGIT_CHUNK = 1000
_CHUNK_BASE = 10 ** _DIGIT_CHUNK


def int_to_text(n: int) -> str:
    """Decimal text of *n* at any size."""
    if -_CHUNK_BASE < n < _CHUNK_BASE:
        return str(n)

    sign = "-" if n < 0 else ""
    n = abs(n)
    chunks: List[str] = []
    while n >= _CHUNK_BASE:
        n, low = divmod(n, _CHUNK_BASE)
        chunks.append(f"{low:0{_DIGIT_CHUNK}d}")
    chunks.append(str(n))
    return sign + "".join(reversed(chunks))


def text_to_int(text: str) -> int:
    """Inverse of int_to_text for normalized decimal text."""
    sign = -1 if text.startswith("-") else 1
    digits = text.lstrip("+-")
    if len(digits) <= _DIGIT_CHUNK:
        return sign * int(digits)

    head = len(digits) % _DIGIT_CHUNK or _DIGIT_CHUNK
    n = int(digits[:head])
    for start in range(head, len(digits), _DIGIT_CHUNK):
        n = n * _CHUNK_BASE + int(digits[start:start + _DIGIT_CHUNK])
    return sign * n

@dataclass(frozen=True)
class CvNull:
    def __repr__(self) -> str:
        return "null"

@dataclass(frozen=True)
class CvBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(frozen=True)
class CvInt:
    """Arbitrary-precision integer kept as normalized decimal text."""
    text: str

    def __post_init__(self) -> None:
        raw = str(self.text).strip()
        if not _INT_TEXT_RE.match(raw):
            raise ValueError(f"Not an integer literal: {self.text!r}")

        sign = ""
        if raw[0] in "+-":
            sign = "-" if raw[0] == "-" else ""
            raw = raw[1:]

        digits = raw.lstrip("0") or "0"
        if digits == "0":
            sign = ""
        object.__setattr__(self, "text", sign + digits)

    @classmethod
    def of(cls, n: int) -> CvInt:
        return cls(int_to_text(n))

    def as_int(self) -> int:
        return text_to_int(self.text)

    def negated(self) -> CvInt:
        if self.text == "0":
            return self
        return CvInt(self.text[1:] if self.text.startswith("-") else "-" + self.text)

    def __repr__(self) -> str:
        return self.text

@dataclass(frozen=True)
class CvFloat:
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    @property
    def is_nan(self) -> bool:
        return math.isnan(self.value)

    def __repr__(self) -> str:
        v = self.value
        if math.isnan(v):
            return "NaN"
        if math.isinf(v):
            return "Infinity" if v > 0 else "-Infinity"
        return repr(v)

@dataclass(frozen=True)
class CvStr:
    value: str
    def __repr__(self) -> str:
        return repr(self.value)

@dataclass(frozen=True)
class CvSeq:
    items: Tuple['CvValue', ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator['CvValue']:
        return iter(self.items)

    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(frozen=True)
class CvTuple:
    items: Tuple['CvValue', ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator['CvValue']:
        return iter(self.items)

    def __repr__(self) -> str:
        if len(self.items) == 1:
            return f"({self.items[0]!r},)"
        return "(" + ", ".join(repr(x) for x in self.items) + ")"

@dataclass(frozen=True)
class CvMap:
    """String-keyed mapping. A repeated key keeps its first slot and takes the last value."""
    entries: Tuple[Tuple[str, 'CvValue'], ...]

    def __post_init__(self) -> None:
        slots: dict[str, CvValue] = {}

        for key, value in self.entries:
            if not isinstance(key, str):
                raise VerdictTypeError(f"Mapping key must be a string, got {type(key).__name__}")
            slots[key] = value

        object.__setattr__(self, "entries", tuple(slots.items()))

    def keys(self) -> List[str]:
        return [k for k, _ in self.entries]

    def get(self, key: str) -> Optional['CvValue']:
        for k, v in self.entries:
            if k == key:
                return v
        return None

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        pairs = [f"{k!r}: {v!r}" for k, v in self.entries]
        return "{" + ", ".join(pairs) + "}"

@dataclass(frozen=True)
class CvSet:
    """Unordered collection; equal elements collapse to the first occurrence."""
    items: Tuple['CvValue', ...]

    def __post_init__(self) -> None:
        from .compare import value_key

        seen: set = set()
        unique: List[CvValue] = []

        for item in self.items:
            key = value_key(item)
            if key in seen:
                continue
            seen.add(key)
            unique.append(item)

        object.__setattr__(self, "items", tuple(unique))

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator['CvValue']:
        return iter(self.items)

    def __repr__(self) -> str:
        if not self.items:
            return "set()"
        return "{" + ", ".join(repr(x) for x in self.items) + "}"

@dataclass(frozen=True)
class CvTagged:
    """Language-specific container (Counter, deque, ...) wrapped around a plain kind."""
    name: str
    inner: 'CvValue'

    def __repr__(self) -> str:
        return f"{self.name}({self.inner!r})"

CvValue: TypeAlias = (
    CvNull
    | CvBool
    | CvInt
    | CvFloat
    | CvStr
    | CvSeq
    | CvTuple
    | CvMap
    | CvSet
    | CvTagged
)

_CV_VALUE_TYPES: Tuple[type, ...] = (
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

_KIND_NAMES = {
    CvNull: "null",
    CvBool: "bool",
    CvInt: "int",
    CvFloat: "float",
    CvStr: "str",
    CvSeq: "list",
    CvTuple: "tuple",
    CvMap: "dict",
    CvSet: "set",
}

def is_cv_value(value: object) -> TypeGuard[CvValue]:
    return isinstance(value, _CV_VALUE_TYPES)

def kind_name(value: CvValue) -> str:
    if isinstance(value, CvTagged):
        return value.name
    name = _KIND_NAMES.get(type(value))
    if name is None:
        raise VerdictTypeError(f"Unexpected value type {type(value).__name__}")
    return name

# ---------- Exceptions (keep Verdict* canonical) ----------

class VerdictError(Exception):
    pass

class VerdictTypeError(VerdictError):
    pass

class UnsupportedTypeError(VerdictError):
    def __init__(self, message: str, type_name: Optional[str] = None):
        super().__init__(message)
        self.type_name = type_name

class WireFormatError(VerdictError):
    def __init__(self, message: str, path: str = "$"):
        super().__init__(f"{message} (at {path})")
        self.path = path

class CaseFormatError(VerdictError):
    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message if index is None else f"Test case {index}: {message}")
        self.index = index

class LiteralError(VerdictError):
    pass
