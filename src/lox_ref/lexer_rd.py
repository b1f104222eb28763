"""
Lexer for Lox - Recursive Descent Parser

Tokenizes Lox source code into a stream of tokens.

Features:
- Single-pass tokenization with one character of lookahead
- Line tracking (strings may span lines)
- Report-and-continue error handling: a bad character or an unterminated
  string is recorded and reported, never raised
"""

import sys
from typing import Callable, List, Optional

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

DIGITS = frozenset("0123456789")


class LexError(Exception):
    """Lexical diagnostic (recorded on the lexer, not raised)"""

    def __init__(self, message: str, line: int, column: int):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"[line {line}] Error: {message}")


def report_to_stderr(err: LexError) -> None:
    print(str(err), file=sys.stderr)


class Lexer:
    """
    Lox lexer.

    Scans left to right keeping `start` at the beginning of the current
    lexeme and `pos` one past the last consumed character.
    """

    # Keyword mapping
    KEYWORDS = {
        'and': TT.AND,
        'class': TT.CLASS,
        'else': TT.ELSE,
        'false': TT.FALSE,
        'for': TT.FOR,
        'fun': TT.FUN,
        'if': TT.IF,
        'nil': TT.NIL,
        'or': TT.OR,
        'print': TT.PRINT,
        'return': TT.RETURN,
        'super': TT.SUPER,
        'this': TT.THIS,
        'true': TT.TRUE,
        'var': TT.VAR,
        'while': TT.WHILE,
        'break': TT.BREAK,
    }

    SINGLE_CHAR = {
        '(': TT.LPAR,
        ')': TT.RPAR,
        '{': TT.LBRACE,
        '}': TT.RBRACE,
        ',': TT.COMMA,
        '.': TT.DOT,
        '-': TT.MINUS,
        '+': TT.PLUS,
        ';': TT.SEMI,
        '*': TT.STAR,
    }

    # first char -> (type if followed by '=', type otherwise)
    WITH_EQUALS = {
        '!': (TT.NEQ, TT.NEG),
        '=': (TT.EQ, TT.ASSIGN),
        '<': (TT.LTE, TT.LT),
        '>': (TT.GTE, TT.GT),
    }

    def __init__(self, source: str, report: Optional[Callable[[LexError], None]] = report_to_stderr):
        self.source = source
        self.start = 0
        self.pos = 0
        self.line = 1
        self.line_start = 0
        self.tokens: List[Tok] = []
        self.errors: List[LexError] = []
        self.report = report

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while not self.at_end():
            self.start = self.pos
            self.scan_token()

        self.tokens.append(Tok(TT.EOF, '', self.line))
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        ch = self.advance()

        if ch in self.SINGLE_CHAR:
            self.emit(self.SINGLE_CHAR[ch])
            return

        if ch in self.WITH_EQUALS:
            paired, single = self.WITH_EQUALS[ch]
            self.emit(paired if self.match('=') else single)
            return

        if ch == '/':
            if self.match('/'):
                self.skip_comment()
            else:
                self.emit(TT.SLASH)
            return

        if ch in (' ', '\r', '\t'):
            return

        if ch == '\n':
            self.newline()
            return

        if ch == '"':
            self.scan_string()
            return

        if ch in DIGITS:
            self.scan_number()
            return

        if is_ident_start(ch):
            self.scan_identifier()
            return

        self.error(f"Unexpected character '{ch}'.")

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_string(self):
        """Scan string literal: "..." (may span lines, no escapes)"""
        start_line = self.line
        start_col = self.column_of(self.start)

        while not self.at_end() and self.peek() != '"':
            if self.advance() == '\n':
                self.newline()

        if self.at_end():
            self.error("Unterminated string.", line=start_line, column=start_col)
            return

        self.advance()  # Closing quote
        value = self.source[self.start + 1:self.pos - 1]
        self.emit(TT.STRING, value, line=start_line)

    def scan_number(self):
        """Scan number literal: digits ('.' digits)?"""
        while self.peek() in DIGITS:
            self.advance()

        # Decimal part needs a digit after the dot
        if self.peek() == '.' and self.peek(1) in DIGITS:
            self.advance()
            while self.peek() in DIGITS:
                self.advance()

        self.emit(TT.NUMBER, float(self.lexeme()))

    def scan_identifier(self):
        """Scan identifier or keyword"""
        while is_ident_part(self.peek()):
            self.advance()

        text = self.lexeme()
        token_type = self.KEYWORDS.get(text, TT.IDENT)

        if token_type is TT.IDENT:
            self.emit(TT.IDENT, text)
        else:
            self.emit(token_type)

    def skip_comment(self):
        """Skip comment until end of line"""
        while not self.at_end() and self.peek() != '\n':
            self.advance()

    # ========================================================================
    # Utilities
    # ========================================================================

    def at_end(self) -> bool:
        return self.pos >= len(self.source)

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self) -> str:
        """Consume one character and return it"""
        ch = self.source[self.pos]
        self.pos += 1
        return ch

    def match(self, expected: str) -> bool:
        """Consume the next character only if it is `expected`"""
        if self.peek() != expected:
            return False
        self.pos += 1
        return True

    def newline(self):
        self.line += 1
        self.line_start = self.pos

    def lexeme(self) -> str:
        return self.source[self.start:self.pos]

    def column_of(self, offset: int) -> int:
        return offset - self.line_start + 1

    def emit(self, token_type: TT, literal=None, line: Optional[int] = None):
        """Emit a token"""
        tok = Tok(
            type=token_type,
            lexeme=self.lexeme(),
            line=self.line if line is None else line,
            literal=literal,
        )
        self.tokens.append(tok)

    def error(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        err = LexError(
            message,
            self.line if line is None else line,
            self.column_of(self.start) if column is None else column,
        )
        self.errors.append(err)
        if self.report is not None:
            self.report(err)


def is_ident_start(ch: str) -> bool:
    return ch == '_' or ('a' <= ch <= 'z') or ('A' <= ch <= 'Z')


def is_ident_part(ch: str) -> bool:
    return is_ident_start(ch) or ch in DIGITS


def tokenize(source: str, report: Optional[Callable[[LexError], None]] = report_to_stderr) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, report=report)
    return lexer.tokenize()
