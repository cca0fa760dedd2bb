"""Run test calls against a Python submission inside the current interpreter."""

from __future__ import annotations

import builtins
import logging
from typing import Any, Dict

from ..evaluator import EvalError, EvalFailure, EvalOk, EvalOutcome, capture_output
from ..types import UnsupportedTypeError
from .native import from_native

log = logging.getLogger(__name__)

# Names exercises routinely use without importing them. Imported into every
# submission namespace before the submission itself runs.
PRELUDE = """\
import math
import sys
from collections import Counter, defaultdict, deque, OrderedDict, namedtuple, ChainMap
from itertools import (permutations, combinations, combinations_with_replacement, product,
                       chain, groupby, accumulate, starmap, takewhile, dropwhile, filterfalse,
                       islice, cycle, repeat, zip_longest)
from functools import reduce, partial, lru_cache, cmp_to_key
from operator import add, sub, mul, truediv, floordiv, mod, neg, itemgetter, attrgetter
from heapq import heappush, heappop, heapify, nlargest, nsmallest, heappushpop, heapreplace
from bisect import bisect_left, bisect_right, insort_left, insort_right
from copy import copy, deepcopy
from string import ascii_lowercase, ascii_uppercase, ascii_letters, digits, punctuation
from re import match, search, findall, sub as re_sub, split as re_split, compile as re_compile
from statistics import mean, median, mode, stdev, variance
from decimal import Decimal
from fractions import Fraction
from typing import List, Dict, Set, Tuple, Optional, Union, Any, Callable
"""


def make_namespace(name: str = "solution") -> Dict[str, Any]:
    namespace: Dict[str, Any] = {"__name__": name, "__builtins__": builtins}
    exec(compile(PRELUDE, "<prelude>", "exec"), namespace)
    return namespace


def load_submission(source: str, name: str = "solution") -> Dict[str, Any]:
    """Execute submission source in a fresh prelude namespace and return that namespace.

    Output printed while the module body runs is discarded. Errors raised by
    the module body (including SyntaxError) propagate to the caller.
    """
    namespace = make_namespace(name)
    code = compile(source, f"<{name}>", "exec")

    with capture_output() as out:
        exec(code, namespace)

    printed = out.getvalue()
    if printed:
        log.debug("Submission %s printed %d characters while loading", name, len(printed))
    return namespace


class PythonEvaluator:
    """Evaluator for call expressions such as ``add(1, 2)`` against a loaded namespace."""

    def __init__(self, namespace: Dict[str, Any]):
        self.namespace = namespace

    def evaluate(self, call: str) -> EvalOutcome:
        try:
            with capture_output():
                result = eval(call, self.namespace)
        except (Exception, SystemExit) as exc:
            error = EvalError.from_exception(exc)
            log.warning("Call %r failed: %s", call, error)
            return EvalFailure(error)

        try:
            return EvalOk(from_native(result))
        except UnsupportedTypeError as exc:
            error = EvalError("UnsupportedTypeError", str(exc))
        except Exception as exc:
            error = EvalError.from_exception(exc)

        log.warning("Call %r returned an unsupported value: %s", call, error)
        return EvalFailure(error)
