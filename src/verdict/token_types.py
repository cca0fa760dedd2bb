"""
Token Types for the expected-value literal parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types for the literal grammar"""

    # Literals
    NUMBER = auto()
    STRING = auto()
    IDENT = auto()

    # Keyword literals
    TRUE = auto()
    FALSE = auto()
    NULL = auto()
    NAN = auto()
    INFINITY = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    POW = auto()

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LSQB = auto()
    RSQB = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    COLON = auto()

    # Special
    EOF = auto()


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    value: Any
    line: int = 0
    column: int = 0

    def __repr__(self):
        return f"Tok({self.type.name}, {self.value!r}, {self.line}:{self.column})"
