"""Expected-value text to canonical value.

Test expectations arrive as free-form text written for whichever runtime
the exercise targets: JSON, Python reprs, JavaScript keywords, C++ brace
initializers. ``parse`` tries each reading in a fixed order and keeps the
first that succeeds; text no reading accepts stays a plain string.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Callable, List, Optional

from .convert import convert
from .lexer_rd import LexError
from .literals import CONSTRUCTORS, build, int_power
from .parser_rd import ParseError, parse_literal
from .types import CvValue, CvNull, CvBool, CvInt, CvFloat, CvStr, LiteralError, VerdictError

log = logging.getLogger(__name__)

_KEYWORDS = {
    "true": CvBool(True),
    "True": CvBool(True),
    "false": CvBool(False),
    "False": CvBool(False),
    "null": CvNull(),
    "None": CvNull(),
    "undefined": CvNull(),
    "NaN": CvFloat(math.nan),
    "Infinity": CvFloat(math.inf),
    "-Infinity": CvFloat(-math.inf),
}

_CONSTRUCTOR_RE = re.compile(r"^([A-Za-z_]\w*)\s*\(")
_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_DECIMAL_RE = re.compile(r"^[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+|[0-9]+)(?:[eE][+-]?[0-9]+)?$")
_POWER_RE = re.compile(r"^([+-]?)([0-9]+)\s*\*\*\s*\+?([0-9]+)$")

Step = Callable[[str], Optional[CvValue]]


def parse(text: Any, *, brace_aggregates: bool = True) -> CvValue:
    """Canonical value of an expectation. Never raises; unreadable text stays a CvStr."""
    if not isinstance(text, str):
        try:
            return convert(text)
        except (VerdictError, ValueError, ArithmeticError, RecursionError) as exc:
            log.debug("Structured expectation not convertible (%s); keeping its text", exc)
            return CvStr(str(text))

    source = text.strip()
    steps: List[Step] = [_from_json, _from_keyword, _from_constructor]
    if brace_aggregates:
        steps.append(_from_brace_aggregate)
    steps += [_from_number, _from_literal]

    for step in steps:
        value = step(source)
        if value is not None:
            return value

    log.debug("Expectation %r matched no literal form; comparing as a string", text)
    return CvStr(text)


# ---------- steps ----------

def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _strict_json(source: str) -> Optional[CvValue]:
    try:
        obj = json.loads(source, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return None

    try:
        return convert(obj)
    except (VerdictError, ValueError, ArithmeticError, RecursionError):
        return None


def _from_json(source: str) -> Optional[CvValue]:
    return _strict_json(source)


def _from_keyword(source: str) -> Optional[CvValue]:
    return _KEYWORDS.get(source)


def _from_constructor(source: str) -> Optional[CvValue]:
    m = _CONSTRUCTOR_RE.match(source)
    if not m or m.group(1) not in CONSTRUCTORS or not source.endswith(")"):
        return None
    return _literal(source)


def _from_brace_aggregate(source: str) -> Optional[CvValue]:
    if not (source.startswith("{") and source.endswith("}")):
        return None
    return _strict_json(rewrite_braces(source))


def _from_number(source: str) -> Optional[CvValue]:
    if _INT_RE.match(source):
        return CvInt(source)

    if _DECIMAL_RE.match(source):
        return CvFloat(float(source))

    m = _POWER_RE.match(source)
    if m:
        sign, base, exponent = m.groups()
        try:
            n = int_power(CvInt(base).as_int(), CvInt(exponent).as_int())
        except LiteralError as exc:
            log.debug("Power %r rejected: %s", source, exc)
            return None
        value = CvInt.of(n)
        return value.negated() if sign == "-" else value

    return None


def _from_literal(source: str) -> Optional[CvValue]:
    return _literal(source)


def _literal(source: str) -> Optional[CvValue]:
    try:
        return build(parse_literal(source))
    except (LexError, ParseError, LiteralError, RecursionError) as exc:
        log.debug("Literal reading of %r failed: %s", source, exc)
        return None


# ---------- brace aggregates ----------

def rewrite_braces(source: str) -> str:
    """Swap { } for [ ] outside double-quoted strings."""
    out: List[str] = []
    in_string = False
    escaped = False

    for ch in source:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            out.append(ch)
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
        elif ch == "{":
            out.append("[")
        elif ch == "}":
            out.append("]")
        else:
            out.append(ch)

    return "".join(out)
