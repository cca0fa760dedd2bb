"""
Recursive Descent Parser for expected-value literals

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent over the literal grammar below
- AST: Lark Tree/Token nodes, consumed by literals.LiteralBuilder

Grammar (lowest to highest):
    value    := unary
    unary    := ('-' | '+') unary | power
    power    := atom ('**' unary)?
    atom     := NUMBER | STRING | keyword | NAME
              | NAME '(' [value (',' value)* [',']] ')'
              | '[' [value (',' value)* [',']] ']'
              | '(' ')' | '(' value ')' | '(' value ',' [value (',' value)* [',']] ')'
              | '{' '}' | '{' pair (',' pair)* [','] '}' | '{' value (',' value)* [','] '}'
    pair     := value ':' value
"""

from typing import List, Optional
from lark import Tree, Token

from .token_types import TT, Tok

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else None
        self.column = token.column if token else None
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )

_KEYWORD_TOKENS = {
    TT.TRUE: 'TRUE',
    TT.FALSE: 'FALSE',
    TT.NULL: 'NULL',
    TT.NAN: 'NAN',
    TT.INFINITY: 'INFINITY',
}

class Parser:
    """Recursive descent parser for one literal value."""

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 0, 0)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return Tok(TT.EOF, None, 0, 0)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current = self.tokens[self.pos]
        else:
            self.current = Tok(TT.EOF, None, 0, 0)
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name}, got {self.current.type.name}"
            raise ParseError(msg, self.current)
        return self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree | Token:
        """Parse a complete literal; trailing tokens are an error"""
        node = self.parse_value()

        if not self.check(TT.EOF):
            raise ParseError("Unexpected tokens after literal", self.current)
        return node

    def parse_value(self) -> Tree | Token:
        return self.parse_unary()

    def parse_unary(self) -> Tree | Token:
        if self.check(TT.MINUS, TT.PLUS):
            op = self.advance()
            operand = self.parse_unary()
            return Tree('neg' if op.type == TT.MINUS else 'pos', [operand])
        return self.parse_power()

    def parse_power(self) -> Tree | Token:
        base = self.parse_atom()

        if self.match(TT.POW):
            exponent = self.parse_unary()
            return Tree('power', [base, exponent])
        return base

    # ========================================================================
    # Atoms
    # ========================================================================

    def parse_atom(self) -> Tree | Token:
        tok = self.current

        if self.check(TT.NUMBER):
            self.advance()
            return self._token('NUMBER', tok)

        if self.check(TT.STRING):
            self.advance()
            return self._token('STRING', tok)

        kind = _KEYWORD_TOKENS.get(tok.type)
        if kind is not None:
            self.advance()
            return self._token(kind, tok)

        if self.check(TT.IDENT):
            self.advance()
            name = self._token('NAME', tok)
            if self.match(TT.LPAR):
                args = self.parse_items(TT.RPAR)
                return Tree('call', [name, Tree('args', args)])
            return name

        if self.match(TT.LSQB):
            return Tree('seq', self.parse_items(TT.RSQB))

        if self.match(TT.LPAR):
            return self.parse_paren()

        if self.match(TT.LBRACE):
            return self.parse_brace()

        raise ParseError(f"Unexpected token in literal: {tok.type.name}", tok)

    def parse_items(self, closer: TT) -> List[Tree | Token]:
        """Comma-separated values up to closer (consumed); trailing comma allowed"""
        items: List[Tree | Token] = []

        while not self.check(closer):
            items.append(self.parse_value())
            if not self.match(TT.COMMA):
                break

        self.expect(closer)
        return items

    def parse_paren(self) -> Tree | Token:
        """Empty tuple, grouped value, or tuple (a trailing comma makes a 1-tuple)"""
        if self.match(TT.RPAR):
            return Tree('tuple', [])

        first = self.parse_value()
        if self.match(TT.RPAR):
            return first

        self.expect(TT.COMMA)
        items = [first] + self.parse_items(TT.RPAR)
        return Tree('tuple', items)

    def parse_brace(self) -> Tree:
        """Empty dict, dict of pairs, or set"""
        if self.match(TT.RBRACE):
            return Tree('dict', [])

        first = self.parse_value()

        if self.match(TT.COLON):
            pairs = [Tree('pair', [first, self.parse_value()])]
            while self.match(TT.COMMA):
                if self.check(TT.RBRACE):
                    break
                key = self.parse_value()
                self.expect(TT.COLON)
                pairs.append(Tree('pair', [key, self.parse_value()]))
            self.expect(TT.RBRACE)
            return Tree('dict', pairs)

        items = [first]
        if self.match(TT.COMMA):
            items.extend(self.parse_items(TT.RBRACE))
        else:
            self.expect(TT.RBRACE)
        return Tree('set', items)

    @staticmethod
    def _token(kind: str, tok: Tok) -> Token:
        return Token(kind, tok.value, line=tok.line, column=tok.column)

# ============================================================================
# Entry point
# ============================================================================

def parse_literal(source: str) -> Tree | Token:
    """
    Parse one literal to a Lark-compatible tree.

    Raises LexError or ParseError when the source is not a literal.
    """
    from .lexer_rd import tokenize

    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse()
