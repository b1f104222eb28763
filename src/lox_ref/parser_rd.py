"""
Recursive Descent Parser for Lox

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent for statements, precedence climbing with an
  iterative left fold for binary operators
- AST: lark Trees labelled as documented in tree.py

Statement-level errors are recorded and the parser resynchronizes at the
next statement boundary, so one pass reports every syntax error. The first
one is raised at the end with the complete list attached.
"""

from typing import Callable, List, Optional

from lark import Token, Tree

from . import tree as ast
from .lexer_rd import LexError, report_to_stderr, tokenize
from .token_types import TT, Tok
from .types import LoxBool, LoxNil, LoxNumber, LoxString

MAX_ARGS = 255
NESTING_MESSAGE = "Expression nests too deeply."

# Tokens that begin a statement; synchronize() stops in front of them.
STATEMENT_START = frozenset({
    TT.CLASS, TT.FUN, TT.VAR, TT.FOR, TT.IF, TT.WHILE, TT.PRINT, TT.RETURN, TT.BREAK,
})

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else None
        self.errors: List['ParseError'] = [self]

        if token is None:
            text = message
        elif token.type == TT.EOF:
            text = f"[line {token.line}] Error at end: {message}"
        else:
            text = f"[line {token.line}] Error at '{token.lexeme}': {message}"
        super().__init__(text)


class Parser:
    """
    Recursive descent parser for Lox.

    Expression precedence (lowest to highest):
    1. assignment (=, right associative)
    2. or
    3. and
    4. equality (==, !=)
    5. comparison (>, >=, <, <=)
    6. term (+, -)
    7. factor (*, /)
    8. unary (!, -)
    9. call (f(...)(...))
    10. primary (literals, identifiers, parens)
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens if tokens else [Tok(TT.EOF, '', 1)]
        self.pos = 0
        self.errors: List[ParseError] = []

    # ========================================================================
    # Token Navigation
    # ========================================================================

    @property
    def current(self) -> Tok:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[idx]

    def previous(self) -> Tok:
        return self.tokens[self.pos - 1]

    def at_end(self) -> bool:
        return self.current.type == TT.EOF

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        if not self.at_end():
            self.pos += 1
        return self.previous()

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: str) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            raise ParseError(message, self.current)
        return self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Tree]:
        """Parse entire program"""
        program: List[Tree] = []

        while not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                program.append(stmt)

        if self.errors:
            first = self.errors[0]
            first.errors = list(self.errors)
            raise first

        return program

    def parse_expression(self) -> Tree:
        """Parse a single expression that must span the whole input"""
        try:
            expr = self.expression()
        except RecursionError:
            raise ParseError(NESTING_MESSAGE, self.current) from None
        if not self.at_end():
            raise ParseError("Expect end of expression.", self.current)
        return expr

    def synchronize(self) -> None:
        """Skip tokens until the next statement boundary"""
        self.advance()

        while not self.at_end():
            if self.previous().type == TT.SEMI:
                return
            if self.current.type in STATEMENT_START:
                return
            self.advance()

    # ========================================================================
    # Statements
    # ========================================================================

    def declaration(self) -> Optional[Tree]:
        """declaration := varDecl | funDecl | statement"""
        try:
            if self.match(TT.VAR):
                return self.parse_var_decl()
            if self.match(TT.FUN):
                return self.parse_fun_decl()
            return self.parse_statement()
        except ParseError as err:
            self.errors.append(err)
            self.synchronize()
            return None
        except RecursionError:
            self.errors.append(ParseError(NESTING_MESSAGE, self.current))
            self.synchronize()
            return None

    def parse_var_decl(self) -> Tree:
        """varDecl := 'var' IDENT '=' expression ';'"""
        name = self.expect(TT.IDENT, "Expect variable name.")
        self.expect(TT.ASSIGN, "Expect '=' after variable name.")
        initializer = self.expression()
        self.expect(TT.SEMI, "Expect ';' after variable declaration.")
        return ast.vardecl(ast.leaf(name), initializer)

    def parse_fun_decl(self) -> Tree:
        """funDecl := 'fun' IDENT '(' params? ')' block"""
        name = self.expect(TT.IDENT, "Expect function name.")
        self.expect(TT.LPAR, "Expect '(' after function name.")
        params: List[Token] = []

        if not self.check(TT.RPAR):
            while True:
                if len(params) >= MAX_ARGS:
                    raise ParseError(f"Can't have more than {MAX_ARGS} parameters.", self.current)
                params.append(ast.leaf(self.expect(TT.IDENT, "Expect parameter name.")))
                if not self.match(TT.COMMA):
                    break

        self.expect(TT.RPAR, "Expect ')' after parameters.")
        self.expect(TT.LBRACE, "Expect '{' before function body.")
        body = self.parse_block()
        return ast.fundecl(ast.leaf(name), params, body)

    def parse_statement(self) -> Tree:
        """
        Parse a single statement.

        statement := ifStmt | whileStmt | forStmt | printStmt | breakStmt
                   | block | exprStmt
        """
        if self.match(TT.IF):
            return self.parse_if_stmt()
        if self.match(TT.WHILE):
            return self.parse_while_stmt()
        if self.match(TT.FOR):
            return self.parse_for_stmt()
        if self.match(TT.PRINT):
            return self.parse_print_stmt()
        if self.match(TT.BREAK):
            return self.parse_break_stmt()
        if self.match(TT.LBRACE):
            return self.parse_block()
        if self.check(TT.RETURN):
            raise ParseError("'return' is not supported; functions yield nil.", self.current)

        return self.parse_expr_stmt()

    def parse_if_stmt(self) -> Tree:
        """ifStmt := 'if' '(' expression ')' statement ('else' statement)?"""
        self.expect(TT.LPAR, "Expect '(' after 'if'.")
        cond = self.expression()
        self.expect(TT.RPAR, "Expect ')' after if condition.")

        then_branch = self.parse_statement()
        else_branch = None
        if self.match(TT.ELSE):
            else_branch = self.parse_statement()

        return ast.ifstmt(cond, then_branch, else_branch)

    def parse_while_stmt(self) -> Tree:
        """whileStmt := 'while' '(' expression ')' statement"""
        self.expect(TT.LPAR, "Expect '(' after 'while'.")
        cond = self.expression()
        self.expect(TT.RPAR, "Expect ')' after condition.")
        body = self.parse_statement()
        return ast.whilestmt(cond, body)

    def parse_for_stmt(self) -> Tree:
        """
        forStmt := 'for' '(' (varDecl | exprStmt | ';') expression? ';' expression? ')' statement

        Desugared here into:
            { initializer; while (cond) { body; increment; } }
        A missing condition becomes a literal true.
        """
        self.expect(TT.LPAR, "Expect '(' after 'for'.")

        initializer: Optional[Tree]
        if self.match(TT.SEMI):
            initializer = None
        elif self.match(TT.VAR):
            initializer = self.parse_var_decl()
        else:
            initializer = self.parse_expr_stmt()

        cond = None
        if not self.check(TT.SEMI):
            cond = self.expression()
        self.expect(TT.SEMI, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TT.RPAR):
            increment = self.expression()
        self.expect(TT.RPAR, "Expect ')' after for clauses.")

        body = self.parse_statement()

        if increment is not None:
            body = ast.block([body, ast.exprstmt(increment)])
        if cond is None:
            cond = ast.literal(LoxBool(True))

        loop = ast.whilestmt(cond, body)
        return ast.block([initializer, loop] if initializer is not None else [loop])

    def parse_print_stmt(self) -> Tree:
        value = self.expression()
        self.expect(TT.SEMI, "Expect ';' after value.")
        return ast.printstmt(value)

    def parse_break_stmt(self) -> Tree:
        keyword = self.previous()
        self.expect(TT.SEMI, "Expect ';' after 'break'.")
        return ast.breakstmt(ast.leaf(keyword))

    def parse_block(self) -> Tree:
        """block := '{' declaration* '}' (opening brace already consumed)"""
        statements: List[Tree] = []

        while not self.check(TT.RBRACE) and not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.expect(TT.RBRACE, "Expect '}' after block.")
        return ast.block(statements)

    def parse_expr_stmt(self) -> Tree:
        expr = self.expression()
        self.expect(TT.SEMI, "Expect ';' after expression.")
        return ast.exprstmt(expr)

    # ========================================================================
    # Expressions
    # ========================================================================

    def expression(self) -> Tree:
        return self.parse_assignment()

    def parse_assignment(self) -> Tree:
        """
        assignment := logic_or ('=' assignment)?

        The target is validated after the left side has been parsed.
        """
        expr = self.parse_or()

        if self.match(TT.ASSIGN):
            equals = self.previous()
            value = self.parse_assignment()

            if ast.tree_label(expr) == 'variable':
                return ast.assign(expr.children[0], value)

            raise ParseError("Invalid assignment target.", equals)

        return expr

    def _left_fold(self, operand: Callable[[], Tree], ops: tuple, build: Callable[[Tree, Token, Tree], Tree]) -> Tree:
        expr = operand()

        while self.match(*ops):
            op = ast.leaf(self.previous())
            right = operand()
            expr = build(expr, op, right)

        return expr

    def parse_or(self) -> Tree:
        return self._left_fold(self.parse_and, (TT.OR,), ast.logical)

    def parse_and(self) -> Tree:
        return self._left_fold(self.parse_equality, (TT.AND,), ast.logical)

    def parse_equality(self) -> Tree:
        return self._left_fold(self.parse_comparison, (TT.NEQ, TT.EQ), ast.binary)

    def parse_comparison(self) -> Tree:
        return self._left_fold(self.parse_term, (TT.GT, TT.GTE, TT.LT, TT.LTE), ast.binary)

    def parse_term(self) -> Tree:
        return self._left_fold(self.parse_factor, (TT.MINUS, TT.PLUS), ast.binary)

    def parse_factor(self) -> Tree:
        return self._left_fold(self.parse_unary, (TT.SLASH, TT.STAR), ast.binary)

    def parse_unary(self) -> Tree:
        """unary := ('!' | '-') unary | call"""
        if self.match(TT.NEG, TT.MINUS):
            op = ast.leaf(self.previous())
            return ast.unary(op, self.parse_unary())

        return self.parse_call()

    def parse_call(self) -> Tree:
        """call := primary ('(' arguments? ')')*"""
        expr = self.parse_primary()

        while self.match(TT.LPAR):
            expr = self.finish_call(expr)

        return expr

    def finish_call(self, callee: Tree) -> Tree:
        args: List[Tree] = []

        if not self.check(TT.RPAR):
            while True:
                if len(args) >= MAX_ARGS:
                    raise ParseError(f"Can't have more than {MAX_ARGS} arguments.", self.current)
                args.append(self.expression())
                if not self.match(TT.COMMA):
                    break

        paren = self.expect(TT.RPAR, "Expect ')' after arguments.")
        return ast.call(callee, ast.leaf(paren), args)

    def parse_primary(self) -> Tree:
        """primary := NUMBER | STRING | 'true' | 'false' | 'nil' | IDENT | '(' expression ')'"""
        tok = self.current

        match tok.type:
            case TT.FALSE:
                self.advance()
                return ast.literal(LoxBool(False))
            case TT.TRUE:
                self.advance()
                return ast.literal(LoxBool(True))
            case TT.NIL:
                self.advance()
                return ast.literal(LoxNil())
            case TT.NUMBER:
                self.advance()
                return ast.literal(LoxNumber(tok.literal))
            case TT.STRING:
                self.advance()
                return ast.literal(LoxString(tok.literal))
            case TT.IDENT:
                self.advance()
                return ast.variable(ast.leaf(tok))
            case TT.LPAR:
                self.advance()
                inner = self.expression()
                self.expect(TT.RPAR, "Expect ')' after expression.")
                return ast.grouping(inner)
            case _:
                raise ParseError("Expect expression.", tok)


def parse_source(source: str, report: Optional[Callable[[LexError], None]] = report_to_stderr) -> List[Tree]:
    """Scan and parse a complete program"""
    return Parser(tokenize(source, report=report)).parse()


def parse_expression_source(source: str, report: Optional[Callable[[LexError], None]] = report_to_stderr) -> Tree:
    """Scan and parse a single expression"""
    return Parser(tokenize(source, report=report)).parse_expression()
