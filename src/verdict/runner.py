from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .compare import equals, equals_within, explain
from .config import Settings, configure_logging
from .evaluator import EvalError, EvalFailure, Evaluator
from .expected import parse
from .serialize import serialize
from .types import CaseFormatError, CvValue, VerdictError

log = logging.getLogger(__name__)

Comparator = Callable[[CvValue, CvValue], bool]
Record = Dict[str, Any]

# ============================================================================
# Test cases
# ============================================================================

@dataclass(frozen=True)
class TestCase:
    __test__ = False  # not a pytest class

    call: str
    expected: Any = None

    @classmethod
    def from_json(cls, obj: Any, index: Optional[int] = None) -> TestCase:
        if not isinstance(obj, dict):
            raise CaseFormatError(f"expected an object, got {type(obj).__name__}", index)

        call = obj.get("call")
        if not isinstance(call, str):
            raise CaseFormatError("'call' must be a string", index)

        # A missing expectation reads as null, same as an explicit null.
        return cls(call=call, expected=obj.get("expected"))


def load_cases(text: str) -> List[TestCase]:
    """Read the JSON array of {"call", "expected"} objects."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CaseFormatError(f"Invalid JSON at line {exc.lineno}, col {exc.colno}: {exc.msg}") from None

    if not isinstance(data, list):
        raise CaseFormatError(f"Test cases must be a JSON array, got {type(data).__name__}")

    return [TestCase.from_json(obj, i) for i, obj in enumerate(data)]

# ============================================================================
# Per-case lifecycle
# ============================================================================

class CaseState(Enum):
    PENDING = "pending"
    EVALUATING = "evaluating"
    EVALUATED = "evaluated"
    EVAL_FAILED = "eval_failed"
    COMPARED = "compared"
    SERIALIZED = "serialized"
    REPORTED = "reported"


_TRANSITIONS = {
    CaseState.PENDING: {CaseState.EVALUATING},
    CaseState.EVALUATING: {CaseState.EVALUATED, CaseState.EVAL_FAILED},
    CaseState.EVALUATED: {CaseState.COMPARED, CaseState.REPORTED},
    CaseState.EVAL_FAILED: {CaseState.REPORTED},
    CaseState.COMPARED: {CaseState.SERIALIZED, CaseState.REPORTED},
    CaseState.SERIALIZED: {CaseState.REPORTED},
    CaseState.REPORTED: set(),
}


@dataclass
class CaseRun:
    index: int
    case: TestCase
    state: CaseState = CaseState.PENDING
    history: List[CaseState] = field(default_factory=list)

    def advance(self, new: CaseState) -> None:
        if new not in _TRANSITIONS[self.state]:
            raise VerdictError(f"Test case {self.index}: illegal transition {self.state.name} -> {new.name}")
        self.history.append(self.state)
        self.state = new


def _error_record(index: int, error: EvalError) -> Record:
    return {"index": index, "actual": None, "passed": False, "error": str(error)}


def run_case(
    run: CaseRun,
    evaluator: Evaluator,
    *,
    include_expected: bool = False,
    compare: Comparator = equals,
    brace_aggregates: bool = True,
) -> Record:
    """Drive one case to REPORTED and return its record. Never raises for case faults."""
    run.advance(CaseState.EVALUATING)
    outcome = evaluator.evaluate(run.case.call)

    if isinstance(outcome, EvalFailure):
        run.advance(CaseState.EVAL_FAILED)
        run.advance(CaseState.REPORTED)
        return _error_record(run.index, outcome.error)

    run.advance(CaseState.EVALUATED)
    actual = outcome.value

    try:
        expected = parse(run.case.expected, brace_aggregates=brace_aggregates)
        passed = compare(actual, expected)
        run.advance(CaseState.COMPARED)

        if not passed and log.isEnabledFor(logging.DEBUG):
            log.debug("Test case %d mismatch: %s", run.index, explain(actual, expected))

        record: Record = {"index": run.index, "actual": serialize(actual), "passed": passed, "error": None}
        if include_expected:
            record["expected_serialized"] = serialize(expected)
        run.advance(CaseState.SERIALIZED)
    except Exception as exc:
        error = EvalError.from_exception(exc)
        log.warning("Test case %d could not be reported: %s", run.index, error)
        run.advance(CaseState.REPORTED)
        return _error_record(run.index, error)

    run.advance(CaseState.REPORTED)
    return record


def run_batch(
    cases: Sequence[TestCase],
    evaluator: Evaluator,
    *,
    include_expected: bool = False,
    compare: Comparator = equals,
    brace_aggregates: bool = True,
) -> List[Record]:
    """Evaluate every case in order; one record per case, ordered by index."""
    log.info("Running %d test case(s)", len(cases))
    results: List[Record] = []

    for index, case in enumerate(cases):
        run = CaseRun(index=index, case=case)
        results.append(run_case(
            run,
            evaluator,
            include_expected=include_expected,
            compare=compare,
            brace_aggregates=brace_aggregates,
        ))

    passed, total = summarize(results)
    log.info("Finished: %d/%d passed", passed, total)
    return results


def summarize(results: Iterable[Record]) -> Tuple[int, int]:
    passed = 0
    total = 0
    for record in results:
        total += 1
        if record.get("passed") is True:
            passed += 1
    return passed, total


def comparator_for(settings: Settings) -> Comparator:
    if not settings.uses_tolerance:
        return equals
    return partial(
        equals_within,
        rel_tol=settings.float_rel_tol or 0.0,
        abs_tol=settings.float_abs_tol or 0.0,
    )

# ============================================================================
# Command line
# ============================================================================

USAGE = "usage: verdict-run [--include-expected] [--no-brace] SUBMISSION [CASES|-]"


def _fail(message: str) -> SystemExit:
    print(f"verdict-run: {message}", file=sys.stderr)
    return SystemExit(2)


def _read_cases_text(arg: Optional[str]) -> str:
    """None or "-" reads stdin; anything else is a path."""
    if arg is None or arg == "-":
        return sys.stdin.read()

    path = Path(arg)
    if not path.exists():
        raise _fail(f"no such file: {arg}")
    return path.read_text(encoding="utf-8")


def main(argv: Optional[List[str]] = None) -> None:
    from .eval.python_host import PythonEvaluator, load_submission

    settings = Settings.from_env()
    include_expected = settings.include_expected
    brace_aggregates = settings.brace_aggregates
    positional: List[str] = []

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--include-expected":
            include_expected = True
            continue

        if token == "--no-brace":
            brace_aggregates = False
            continue

        if token in ("-h", "--help"):
            print(USAGE)
            return

        if token.startswith("--"):
            raise _fail(f"unknown option {token}\n{USAGE}")

        positional.append(token)

    if not 1 <= len(positional) <= 2:
        raise _fail(USAGE)

    configure_logging(settings.log_level)

    submission = Path(positional[0])
    if not submission.exists():
        raise _fail(f"no such file: {submission}")

    try:
        cases = load_cases(_read_cases_text(positional[1] if len(positional) > 1 else None))
    except CaseFormatError as exc:
        raise _fail(str(exc)) from None

    try:
        namespace = load_submission(submission.read_text(encoding="utf-8"), submission.stem)
    except (Exception, SystemExit) as exc:
        raise _fail(f"could not load submission: {EvalError.from_exception(exc)}") from None

    results = run_batch(
        cases,
        PythonEvaluator(namespace),
        include_expected=include_expected,
        compare=comparator_for(settings),
        brace_aggregates=brace_aggregates,
    )
    print(json.dumps(results, allow_nan=False))

if __name__ == "__main__":
    main()
