from __future__ import annotations

import sys

import pytest

from tests.support.harness import assert_cv_equal, i, python_evaluator, seq, tagged, cvmap
from verdict.eval.python_host import load_submission, make_namespace
from verdict.evaluator import EvalError, EvalFailure, EvalOk, capture_output


def test_prelude_exposes_common_stdlib_names() -> None:
    namespace = make_namespace()
    for name in ("Counter", "deque", "heappush", "bisect_left", "reduce", "permutations", "math", "List"):
        assert name in namespace


def test_load_submission_defines_functions_and_swallows_prints(capsys: pytest.CaptureFixture[str]) -> None:
    namespace = load_submission("print('loading')\ndef add(a, b):\n    return a + b\n")

    assert callable(namespace["add"])
    assert capsys.readouterr().out == ""


def test_load_submission_propagates_syntax_errors() -> None:
    with pytest.raises(SyntaxError):
        load_submission("def broken(:\n    pass\n")


def test_evaluate_returns_canonical_value() -> None:
    evaluator = python_evaluator("def add(a, b):\n    return a + b\n")

    outcome = evaluator.evaluate("add(1, 2)")
    assert isinstance(outcome, EvalOk)
    assert_cv_equal(outcome.value, i(3))


def test_evaluate_uses_prelude_names() -> None:
    evaluator = python_evaluator("def count(xs):\n    return Counter(xs)\n")

    outcome = evaluator.evaluate("count('aab')")
    assert isinstance(outcome, EvalOk)
    assert_cv_equal(outcome.value, tagged("Counter", cvmap(a=i(2), b=i(1))))


@pytest.mark.parametrize(
    "source, call, expected",
    [
        pytest.param("def f():\n    return 1 / 0\n", "f()", EvalError("ZeroDivisionError", "division by zero"), id="exception"),
        pytest.param("def f():\n    raise ValueError('bad input')\n", "f()", EvalError("ValueError", "bad input"), id="value-error"),
        pytest.param("", "missing()", EvalError("NameError", "name 'missing' is not defined"), id="name-error"),
        pytest.param("def f():\n    return object()\n", "f()", None, id="unsupported-return"),
        pytest.param("import sys\ndef f():\n    sys.exit(3)\n", "f()", EvalError("SystemExit", "3"), id="system-exit"),
        pytest.param(
            "class Loud(dict):\n    def items(self):\n        raise RuntimeError('no items')\ndef f():\n    return Loud(a=1)\n",
            "f()",
            EvalError("RuntimeError", "no items"),
            id="conversion-fault",
        ),
    ],
)
def test_evaluate_converts_faults(source: str, call: str, expected: object) -> None:
    outcome = python_evaluator(source).evaluate(call)

    assert isinstance(outcome, EvalFailure)
    if expected is None:
        assert outcome.error.kind == "UnsupportedTypeError"
        assert "object" in outcome.error.message
        return
    assert outcome.error == expected


def test_evaluate_captures_call_output(capsys: pytest.CaptureFixture[str]) -> None:
    evaluator = python_evaluator("def noisy():\n    print('debug')\n    return [1]\n")

    outcome = evaluator.evaluate("noisy()")
    assert isinstance(outcome, EvalOk)
    assert_cv_equal(outcome.value, seq(i(1)))
    assert capsys.readouterr().out == ""


def test_capture_output_restores_stdout_on_error() -> None:
    original = sys.stdout
    with pytest.raises(RuntimeError):
        with capture_output() as buffer:
            print("inside")
            raise RuntimeError("boom")

    assert sys.stdout is original
    assert buffer.getvalue() == "inside\n"


def test_eval_error_renders_kind_and_message() -> None:
    assert str(EvalError("TypeError", "bad operand")) == "TypeError: bad operand"


def test_evaluate_returns_ints_past_string_conversion_limit() -> None:
    outcome = python_evaluator("def big():\n    return 10 ** 5000\n").evaluate("big()")

    assert isinstance(outcome, EvalOk)
    assert outcome.value.text == "1" + "0" * 5000
