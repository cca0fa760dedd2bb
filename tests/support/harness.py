from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from verdict.compare import equals, explain
from verdict.eval.python_host import PythonEvaluator, load_submission
from verdict.evaluator import EvalError, EvalFailure, EvalOk, EvalOutcome
from verdict.runner import TestCase, run_batch
from verdict.types import (
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
)

# ---------- terse value builders ----------

NULL = CvNull()
TRUE = CvBool(True)
FALSE = CvBool(False)
NAN = CvFloat(math.nan)
INF = CvFloat(math.inf)
NEG_INF = CvFloat(-math.inf)


def i(n: Union[int, str]) -> CvInt:
    return CvInt(str(n))


def f(x: float) -> CvFloat:
    return CvFloat(x)


def s(text: str) -> CvStr:
    return CvStr(text)


def seq(*items: CvValue) -> CvSeq:
    return CvSeq(items)


def tup(*items: CvValue) -> CvTuple:
    return CvTuple(items)


def cvset(*items: CvValue) -> CvSet:
    return CvSet(items)


def cvmap(**entries: CvValue) -> CvMap:
    return CvMap(tuple(entries.items()))


def cvmap_of(*pairs: tuple) -> CvMap:
    return CvMap(tuple(pairs))


def tagged(name: str, inner: CvValue) -> CvTagged:
    return CvTagged(name, inner)


def assert_cv_equal(actual: CvValue, expected: CvValue) -> None:
    """Canonical equality with the first mismatch in the failure message."""
    assert equals(actual, expected), f"{actual!r} != {expected!r} ({explain(actual, expected)})"


# ---------- evaluators ----------

@dataclass
class ScriptedEvaluator:
    """Returns pre-baked outcomes keyed by call text and records every call it sees."""

    outcomes: Dict[str, EvalOutcome]
    calls: List[str] = field(default_factory=list)

    def evaluate(self, call: str) -> EvalOutcome:
        self.calls.append(call)
        outcome = self.outcomes.get(call)
        if outcome is None:
            return EvalFailure(EvalError("NameError", f"name '{call}' is not defined"))
        return outcome


def ok(value: CvValue) -> EvalOk:
    return EvalOk(value)


def fail(kind: str, message: str) -> EvalFailure:
    return EvalFailure(EvalError(kind, message))


def python_evaluator(source: str, name: str = "solution") -> PythonEvaluator:
    return PythonEvaluator(load_submission(source, name))


def run_python_cases(
    source: str,
    cases: Sequence[tuple],
    *,
    include_expected: bool = False,
) -> List[dict]:
    """Run (call, expected) pairs against a Python submission and return the records."""
    batch = [TestCase(call=call, expected=expected) for call, expected in cases]
    return run_batch(batch, python_evaluator(source), include_expected=include_expected)


def passed_flags(records: Sequence[dict]) -> List[Optional[bool]]:
    return [record.get("passed") for record in records]
