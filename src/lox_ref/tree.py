"""Shared helpers for building and inspecting the lark Tree/Token AST.

Every statement and expression is a ``lark.Tree`` whose ``data`` is one of
the labels in ``EXPR_LABELS`` / ``STMT_LABELS``. Operators and names are
``lark.Token`` leaves so their source line travels with the node.
"""
from __future__ import annotations
from typing import Any, Iterable, List, Optional
from typing_extensions import TypeAlias, TypeGuard

from lark import Token, Tree

from .token_types import Tok

Node: TypeAlias = Tree | Token

EXPR_LABELS = frozenset({
    'literal', 'variable', 'assign', 'unary', 'binary', 'logical', 'grouping', 'call',
})
STMT_LABELS = frozenset({
    'exprstmt', 'printstmt', 'vardecl', 'block', 'ifstmt', 'whilestmt', 'fundecl', 'breakstmt',
})

# ---------------- Construction ----------------

def leaf(tok: Tok) -> Token:
    """Lift a scanner token into a lark Token, keeping its line."""
    return Token(tok.type.name, tok.lexeme, line=tok.line)

def literal(value: Any) -> Tree:
    return Tree('literal', [value])

def variable(name: Token) -> Tree:
    return Tree('variable', [name])

def assign(name: Token, value: Tree) -> Tree:
    return Tree('assign', [name, value])

def unary(op: Token, operand: Tree) -> Tree:
    return Tree('unary', [op, operand])

def binary(left: Tree, op: Token, right: Tree) -> Tree:
    return Tree('binary', [left, op, right])

def logical(left: Tree, op: Token, right: Tree) -> Tree:
    return Tree('logical', [left, op, right])

def grouping(inner: Tree) -> Tree:
    return Tree('grouping', [inner])

def call(callee: Tree, paren: Token, args: List[Tree]) -> Tree:
    return Tree('call', [callee, paren, *args])

def exprstmt(expr: Tree) -> Tree:
    return Tree('exprstmt', [expr])

def printstmt(expr: Tree) -> Tree:
    return Tree('printstmt', [expr])

def vardecl(name: Token, initializer: Tree) -> Tree:
    return Tree('vardecl', [name, initializer])

def block(statements: List[Tree]) -> Tree:
    return Tree('block', list(statements))

def ifstmt(cond: Tree, then_branch: Tree, else_branch: Optional[Tree] = None) -> Tree:
    children = [cond, then_branch]
    if else_branch is not None:
        children.append(else_branch)
    return Tree('ifstmt', children)

def whilestmt(cond: Tree, body: Tree) -> Tree:
    return Tree('whilestmt', [cond, body])

def fundecl(name: Token, params: List[Token], body: Tree) -> Tree:
    return Tree('fundecl', [name, Tree('params', list(params)), body])

def breakstmt(keyword: Token) -> Tree:
    return Tree('breakstmt', [keyword])

# ---------------- Inspection ----------------

def is_tree(node: Any) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Any) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Any) -> Optional[str]:
    return node.data if is_tree(node) else None

def tree_children(node: Any) -> List[Any]:
    if not is_tree(node):
        return []

    return list(node.children)

def token_line(node: Any) -> Optional[int]:
    """Line of the first token found under ``node`` (depth-first)."""
    if is_token(node):
        return getattr(node, 'line', None)

    for child in tree_children(node):
        line = token_line(child)
        if line is not None:
            return line

    return None

def count_labels(node: Any, labels: Iterable[str]) -> int:
    lookup = set(labels)
    own = 1 if tree_label(node) in lookup else 0
    return own + sum(count_labels(ch, lookup) for ch in tree_children(node))

def render_tree(node: Any) -> str:
    """Parenthesized prefix rendering, e.g. ``(+ 1 (* 2 3))``."""
    if is_token(node):
        return str(node.value)

    if not is_tree(node):
        return repr(node)

    ch = node.children

    match node.data:
        case 'literal':
            return repr(ch[0])
        case 'variable':
            return str(ch[0])
        case 'assign':
            return f"(= {ch[0]} {render_tree(ch[1])})"
        case 'unary':
            return f"({ch[0]} {render_tree(ch[1])})"
        case 'binary' | 'logical':
            return f"({ch[1]} {render_tree(ch[0])} {render_tree(ch[2])})"
        case 'grouping':
            return f"(group {render_tree(ch[0])})"
        case 'call':
            parts = [render_tree(c) for c in [ch[0], *ch[2:]]]
            return "(call " + " ".join(parts) + ")"
        case 'params':
            return "(" + " ".join(str(p) for p in ch) + ")"
        case 'breakstmt':
            return "(break)"
        case label:
            parts = [render_tree(c) for c in ch]
            return "(" + " ".join([label, *parts]) + ")"
