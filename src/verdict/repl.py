"""Interactive inspector for expectation literals, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from dataclasses import dataclass

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .compare import equals, explain
from .config import ENV_DEBUG_PY_TRACE, Settings, debug_py_trace_enabled
from .expected import parse
from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError, parse_literal
from .repl_highlight import LiteralHighlighter
from .serialize import dumps
from .token_types import TT
from .tree import pretty
from .types import VerdictError, kind_name
from .utils import render

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/brace": ("Toggle brace-aggregate reading of {...}", "[on|off]"),
    "/clear": ("Clear the terminal screen", ""),
    "/compare": ("Compare two expectations", "A ;; B"),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/tree": ("Show the literal parse tree", "TEXT"),
}

_COMPARE_SEP = ";;"

_DEPTH_OPEN = {TT.LPAR, TT.LSQB, TT.LBRACE}
_DEPTH_CLOSE = {TT.RPAR, TT.RSQB, TT.RBRACE}

_ON = ("on", "1", "true", "yes")
_OFF = ("off", "0", "false", "no")


@dataclass
class ReplState:
    brace_aggregates: bool = True


def _is_open(text: str) -> bool:
    """Return True if *text* has unclosed brackets, so Enter continues the input."""
    try:
        tokens = tokenize(text)
    except LexError:
        return False

    depth = 0
    for tok in tokens:
        if tok.type in _DEPTH_OPEN:
            depth += 1
        elif tok.type in _DEPTH_CLOSE:
            depth = max(depth - 1, 0)
    return depth > 0


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=f"{hint}  {desc}" if hint else desc,
                )


def describe_text(text: str, state: ReplState) -> str:
    """Canonical rendering, kind and wire JSON of one expectation."""
    value = parse(text, brace_aggregates=state.brace_aggregates)
    return f"{render(value)}\n  kind: {kind_name(value)}\n  wire: {dumps(value)}"


def compare_texts(arg: str, state: ReplState) -> str:
    if _COMPARE_SEP not in arg:
        return f"Usage: /compare A {_COMPARE_SEP} B"

    left_text, right_text = arg.split(_COMPARE_SEP, 1)
    left = parse(left_text, brace_aggregates=state.brace_aggregates)
    right = parse(right_text, brace_aggregates=state.brace_aggregates)

    if equals(left, right):
        return "equal"
    return f"not equal: {explain(left, right)}"


def _toggle(arg: str, current: bool) -> bool | None:
    if arg.lower() in _ON:
        return True
    if arg.lower() in _OFF:
        return False
    if arg == "":
        return not current
    return None


def handle_slash(line: str, state: ReplState) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/brace":
        new = _toggle(arg, state.brace_aggregates)
        if new is None:
            print("Usage: /brace [on|off]", file=sys.stderr)
            return True
        state.brace_aggregates = new
        print(f"Brace aggregates: {'on' if new else 'off'}")
        return True

    if cmd == "/compare":
        print(compare_texts(arg, state))
        return True

    if cmd == "/tree":
        try:
            print(pretty(parse_literal(arg)))
        except (LexError, ParseError) as exc:
            print(f"Not a literal: {exc}", file=sys.stderr)
        return True

    if cmd == "/py-traceback":
        new = _toggle(arg, debug_py_trace_enabled())
        if new is None:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True
        if new:
            os.environ[ENV_DEBUG_PY_TRACE] = "1"
        else:
            os.environ.pop(ENV_DEBUG_PY_TRACE, None)
        print(f"Python traceback: {'on' if new else 'off'}")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def repl() -> None:
    """Interactive read-parse-print loop with prompt_toolkit."""
    settings = Settings.from_env()
    state = ReplState(brace_aggregates=settings.brace_aggregates)
    if settings.debug_py_trace:
        os.environ[ENV_DEBUG_PY_TRACE] = "1"

    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        # Unclosed brackets continue onto the next line.
        if not buf.text.startswith("/") and _is_open(buf.text):
            buf.insert_text("\n")
            return
        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=LiteralHighlighter(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("verdict repl: type an expected value, Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        try:
            if handle_slash(text, state):
                continue
            print(describe_text(text, state))
        except VerdictError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            if debug_py_trace_enabled():
                print("\nPython traceback:", file=sys.stderr)
                print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")
