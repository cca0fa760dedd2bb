"""Environment-driven settings for the command line and the REPL."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_INCLUDE_EXPECTED = "VERDICT_INCLUDE_EXPECTED"
ENV_BRACE_AGGREGATES = "VERDICT_BRACE_AGGREGATES"
ENV_FLOAT_REL_TOL = "VERDICT_FLOAT_REL_TOL"
ENV_FLOAT_ABS_TOL = "VERDICT_FLOAT_ABS_TOL"
ENV_LOG_LEVEL = "VERDICT_LOG_LEVEL"
ENV_DEBUG_PY_TRACE = "VERDICT_DEBUG_PY_TRACE"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default

    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return default


def _tolerance(env: Mapping[str, str], name: str) -> Optional[float]:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None

    try:
        value = float(raw)
    except ValueError:
        return None

    # nan and negative tolerances are meaningless; treat them as unset
    if not value >= 0.0:
        return None
    return value


def _log_level(env: Mapping[str, str]) -> int:
    raw = (env.get(ENV_LOG_LEVEL) or "").strip()
    if raw.isdigit():
        return int(raw)

    level = logging.getLevelName(raw.upper()) if raw else None
    return level if isinstance(level, int) else logging.WARNING


@dataclass(frozen=True)
class Settings:
    include_expected: bool = False
    brace_aggregates: bool = True
    float_rel_tol: Optional[float] = None
    float_abs_tol: Optional[float] = None
    log_level: int = logging.WARNING
    debug_py_trace: bool = False

    @property
    def uses_tolerance(self) -> bool:
        return self.float_rel_tol is not None or self.float_abs_tol is not None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Settings:
        """Read settings from the environment; unparsable values keep their defaults."""
        if env is None:
            env = os.environ

        return cls(
            include_expected=_flag(env, ENV_INCLUDE_EXPECTED, False),
            brace_aggregates=_flag(env, ENV_BRACE_AGGREGATES, True),
            float_rel_tol=_tolerance(env, ENV_FLOAT_REL_TOL),
            float_abs_tol=_tolerance(env, ENV_FLOAT_ABS_TOL),
            log_level=_log_level(env),
            debug_py_trace=_flag(env, ENV_DEBUG_PY_TRACE, False),
        )


def debug_py_trace_enabled() -> bool:
    return _flag(os.environ, ENV_DEBUG_PY_TRACE, False)


def configure_logging(level: int = logging.WARNING) -> logging.Handler:
    """Attach one stderr handler to the package logger. stdout stays free for reports."""
    logger = logging.getLogger("verdict")
    for handler in list(logger.handlers):
        if getattr(handler, "_verdict_cli", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._verdict_cli = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler
