"""
Lexer for expected-value literals

Tokenizes the literal subset shared by Python, JSON and JavaScript test
expectations: numbers, quoted strings, identifiers, keyword constants and
aggregate punctuation.

Features:
- Single-pass tokenization
- Position tracking (line, column)
- Single- and double-quoted strings with backslash escapes
- Python number forms (underscores, 0x/0o/0b prefixes, exponents)
"""

from typing import List
import re

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """Literal lexer. Whitespace, including newlines, only separates tokens."""

    # Keyword mapping (case-sensitive, both JSON/JS and Python spellings)
    KEYWORDS = {
        'true': TT.TRUE,
        'True': TT.TRUE,
        'false': TT.FALSE,
        'False': TT.FALSE,
        'null': TT.NULL,
        'None': TT.NULL,
        'undefined': TT.NULL,
        'NaN': TT.NAN,
        'Infinity': TT.INFINITY,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        ('**', TT.POW),
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        (',', TT.COMMA),
        (':', TT.COLON),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.emit(TT.EOF, None, self.line, self.column)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        ch = self.peek()

        if ch in (' ', '\t', '\r'):
            self.advance()
            return

        if ch == '\n':
            self.advance()
            self.line += 1
            self.column = 1
            return

        if ch in ('"', "'"):
            self.scan_string()
            return

        if ch.isdigit() or (ch == '.' and self.peek(1).isdigit()):
            self.scan_number()
            return

        if ch.isalpha() or ch == '_':
            self.scan_identifier()
            return

        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self):
        """Scan string literal: "..." or '...' (value keeps quotes and escapes)"""
        line, column = self.line, self.column
        quote = self.advance()
        value = quote

        while self.pos < len(self.source) and self.peek() != quote:
            if self.peek() == '\n':
                raise LexError(f"Unterminated string at line {line}", line, column)
            if self.peek() == '\\':
                value += self.advance()
                if self.pos < len(self.source):
                    value += self.advance()
            else:
                value += self.advance()

        if self.pos >= len(self.source):
            raise LexError(f"Unterminated string at line {line}", line, column)

        value += self.advance()  # Closing quote
        self.emit(TT.STRING, value, line, column)

    def scan_number(self):
        """Scan number literal (kept as source text)"""
        line, column = self.line, self.column
        value = ''

        if self.peek() == '0' and self.peek(1) in ('x', 'X', 'o', 'O', 'b', 'B'):
            value += self.advance(2)
            while self.peek().isalnum() or self.peek() == '_':
                value += self.advance()
            self.emit(TT.NUMBER, value, line, column)
            return

        # Integer part
        while self.peek().isdigit() or (self.peek() == '_' and self.peek(1).isdigit()):
            value += self.advance()

        # Decimal part; a bare trailing dot ("1.") is a float too
        if self.peek() == '.':
            value += self.advance()
            while self.peek().isdigit() or (self.peek() == '_' and self.peek(1).isdigit()):
                value += self.advance()

        # Scientific notation
        if self.peek() in ('e', 'E'):
            sign = 1 if self.peek(1) in ('+', '-') else 0
            if self.peek(1 + sign).isdigit():
                value += self.advance(1 + sign)
                while self.peek().isdigit():
                    value += self.advance()

        if self.peek().isalpha() or self.peek() == '_':
            raise LexError(f"Malformed number at line {line}, col {column}", line, column)

        self.emit(TT.NUMBER, value, line, column)

    def scan_identifier(self):
        """Scan identifier or keyword"""
        line, column = self.line, self.column
        value = ''

        while self.peek().isalnum() or self.peek() == '_':
            value += self.advance()

        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value, line, column)

    def scan_operator(self):
        """Scan operators and punctuation"""
        line, column = self.line, self.column

        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str, line, column)
                return

        ch = self.peek()
        raise LexError(f"Unexpected character '{ch}' at line {line}, col {column}", line, column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = self.source[self.pos:self.pos + n]
        self.pos += n
        self.column += n
        return result

    def emit(self, token_type: TT, value, line: int, column: int):
        """Emit a token"""
        self.tokens.append(Tok(type=token_type, value=value, line=line, column=column))

class LexError(Exception):
    """Lexical analysis error"""
    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.line = line
        self.column = column

# ============================================================================
# String literal decoding
# ============================================================================

_SIMPLE_ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    'b': '\b',
    'f': '\f',
    'v': '\v',
    'a': '\a',
    '0': '\0',
    '\\': '\\',
    "'": "'",
    '"': '"',
    '/': '/',
    '\n': '',
}

_HEX_ESCAPES = {'x': 2, 'u': 4, 'U': 8}
_HEX_RE = re.compile(r'^[0-9a-fA-F]+$')


def decode_string(raw: str) -> str:
    """Decode a quoted STRING token (Python/JSON escapes) into its text."""
    if len(raw) < 2 or raw[0] != raw[-1] or raw[0] not in ('"', "'"):
        raise LexError(f"Not a quoted string: {raw!r}")

    body = raw[1:-1]
    out: List[str] = []
    i = 0

    while i < len(body):
        ch = body[i]
        if ch != '\\' or i + 1 >= len(body):
            out.append(ch)
            i += 1
            continue

        esc = body[i + 1]
        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
            i += 2
            continue

        width = _HEX_ESCAPES.get(esc)
        digits = body[i + 2:i + 2 + width] if width else ''
        if width and len(digits) == width and _HEX_RE.match(digits):
            out.append(chr(int(digits, 16)))
            i += 2 + width
            continue

        # Unknown escapes keep their backslash, as Python does
        out.append(ch)
        i += 1

    text = ''.join(out)
    # Re-pair JSON-style surrogate escapes such as \ud83d\ude00
    try:
        return text.encode('utf-16', 'surrogatepass').decode('utf-16')
    except UnicodeDecodeError:
        return text

# ============================================================================
# Convenience
# ============================================================================

def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Lexer(source).tokenize()
