"""prompt_toolkit lexer for live highlighting of literal input in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as LiteralLexer, LexError
from .literals import CONSTRUCTORS
from .token_types import TT, Tok

# Map highlight groups => prompt_toolkit style strings.
GROUP_STYLE = {
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "error": "bold ansired",
}

_TT_GROUP = {
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NULL: "constant",
    TT.NAN: "constant",
    TT.INFINITY: "constant",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.POW: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LSQB: "punctuation",
    TT.RSQB: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.COMMA: "punctuation",
    TT.COLON: "punctuation",
}


def _is_constructor(tokens: list[Tok], idx: int) -> bool:
    tok = tokens[idx]
    if tok.value not in CONSTRUCTORS or idx + 1 >= len(tokens):
        return False
    return tokens[idx + 1].type == TT.LPAR


def highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = LiteralLexer(text).tokenize()
    except LexError:
        # Unterminated strings and stray characters are common mid-typing.
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type == TT.EOF:
            continue

        tok_text = str(tok.value) if tok.value is not None else ""
        if not tok_text:
            continue

        idx = text.find(tok_text, pos)
        if idx < 0:
            continue

        # Unstyled gap before token.
        if idx > pos:
            result.append(("", text[pos:idx]))

        group = _TT_GROUP.get(tok.type, "")
        if tok.type == TT.IDENT and _is_constructor(tokens, i):
            group = "function"
        result.append((GROUP_STYLE.get(group, ""), tok_text))
        pos = idx + len(tok_text)

    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class LiteralHighlighter(Lexer):
    """prompt_toolkit Lexer that highlights expectation literals using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
