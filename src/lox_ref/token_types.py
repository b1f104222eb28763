"""
Token Types for Lox

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - mirrors grammar terminals"""

    # Punctuation
    LPAR = auto()
    RPAR = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    DOT = auto()
    SEMI = auto()

    # Arithmetic
    MINUS = auto()
    PLUS = auto()
    SLASH = auto()
    STAR = auto()

    # One or two character operators
    NEG = auto()  # !
    NEQ = auto()  # !=
    ASSIGN = auto()  # =
    EQ = auto()  # ==
    GT = auto()
    GTE = auto()
    LT = auto()
    LTE = auto()

    # Literals
    IDENT = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()
    BREAK = auto()

    # Special
    EOF = auto()


@dataclass(frozen=True)
class Tok:
    """Token with position info"""

    type: TT
    lexeme: str
    line: int = 1
    literal: Any = None

    def __repr__(self):
        if self.literal is None:
            return f"Tok({self.type.name}, {self.lexeme!r}, {self.line})"
        return f"Tok({self.type.name}, {self.lexeme!r}, {self.line}, {self.literal!r})"
