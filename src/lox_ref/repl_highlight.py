"""prompt_toolkit lexer for live Lox syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as LoxScanner
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "reserved": "ansired",
}

# Token type → highlight group.
_TT_GROUP = {
    TT.IF: "keyword",
    TT.ELSE: "keyword",
    TT.WHILE: "keyword",
    TT.FOR: "keyword",
    TT.FUN: "keyword",
    TT.VAR: "keyword",
    TT.PRINT: "keyword",
    TT.BREAK: "keyword",
    TT.AND: "keyword",
    TT.OR: "keyword",
    # reserved words with no statement form
    TT.RETURN: "reserved",
    TT.CLASS: "reserved",
    TT.SUPER: "reserved",
    TT.THIS: "reserved",
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NIL: "constant",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.STAR: "operator",
    TT.SLASH: "operator",
    TT.EQ: "operator",
    TT.NEQ: "operator",
    TT.LT: "operator",
    TT.LTE: "operator",
    TT.GT: "operator",
    TT.GTE: "operator",
    TT.NEG: "operator",
    TT.ASSIGN: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.DOT: "punctuation",
    TT.COMMA: "punctuation",
    TT.SEMI: "punctuation",
}


def _gap(text: str) -> StyleAndTextTuples:
    """Unstyled text between tokens; a `//` starts a comment to end of line."""
    idx = text.find("//")
    if idx < 0:
        return [("", text)]

    spans: StyleAndTextTuples = []
    if idx > 0:
        spans.append(("", text[:idx]))
    spans.append((GROUP_STYLE["comment"], text[idx:]))
    return spans


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    tokens: list[Tok] = LoxScanner(text, report=None).tokenize()
    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type == TT.EOF or not tok.lexeme:
            continue

        # Find actual position of this lexeme in the line from pos onwards.
        idx = text.find(tok.lexeme, pos)
        if idx < 0:
            continue

        if idx > pos:
            result.extend(_gap(text[pos:idx]))

        group = _TT_GROUP.get(tok.type, "")
        if tok.type == TT.IDENT and i > 0 and tokens[i - 1].type == TT.FUN:
            group = "function"
        result.append((GROUP_STYLE.get(group, ""), tok.lexeme))
        pos = idx + len(tok.lexeme)

    # Trailing text (comments, unterminated strings, stray characters).
    if pos < len(text):
        result.extend(_gap(text[pos:]))

    return result if result else [("", text)]


class LoxLexer(Lexer):
    """prompt_toolkit Lexer that highlights Lox source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights lazily per line.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
