from __future__ import annotations

from typing import Callable, Optional

from lark import Tree

from .runtime import (
    Frame,
    LoxRuntimeError,
    LoxValue,
    global_frame,
    is_lox_value,
)
from .tree import Node, is_token, token_line

from .eval.blocks import (
    eval_block,
    eval_break_stmt,
    eval_expr_stmt,
    eval_print_stmt,
    eval_var_decl,
    exec_outside_loop,
)
from .eval.expr import eval_binary, eval_logical, eval_unary
from .eval.fn import eval_call, eval_fun_decl
from .eval.loops import eval_if_stmt, eval_while_stmt

EvalFunc = Callable[[Node, Frame], LoxValue]


def _maybe_attach_location(exc: LoxRuntimeError, node: Node) -> None:
    if exc.line is not None:
        return

    exc.line = token_line(node)

# ---------------- Public API ----------------

def eval_expr(ast: Node, frame: Optional[Frame] = None) -> LoxValue:
    """Evaluate one expression (or statement) tree, raising on any error."""
    if frame is None:
        frame = global_frame()

    try:
        return eval_node(ast, frame)
    except RecursionError:
        raise _stack_overflow(ast) from None

def execute(stmt: Tree, frame: Frame) -> LoxValue:
    """Execute one top-level statement; a break escaping it is an error."""
    try:
        return exec_outside_loop(stmt, frame, eval_node)
    except RecursionError:
        raise _stack_overflow(stmt) from None

def _stack_overflow(node: Node) -> LoxRuntimeError:
    # unbounded Lox recursion exhausts the Python stack first
    err = LoxRuntimeError("Stack overflow.")
    err.line = token_line(node)
    return err

# ---------------- Core evaluator ----------------

def eval_node(n: Node, frame: Frame) -> LoxValue:
    try:
        return _eval_node_inner(n, frame)
    except LoxRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, frame: Frame) -> LoxValue:
    if is_token(n):
        raise LoxRuntimeError(f"Unhandled token {n.type}:{n.value}")

    d = n.data
    ch = n.children

    match d:
        # expressions
        case 'literal':
            value = ch[0]
            if not is_lox_value(value):
                raise LoxRuntimeError(f"Malformed literal {value!r}")
            return value
        case 'variable':
            return frame.get(str(ch[0]))
        case 'assign':
            name, value_node = ch
            value = eval_node(value_node, frame)
            frame.set(str(name), value)
            return value
        case 'unary':
            return eval_unary(ch, frame, eval_node)
        case 'binary':
            return eval_binary(ch, frame, eval_node)
        case 'logical':
            return eval_logical(ch, frame, eval_node)
        case 'grouping':
            return eval_node(ch[0], frame)
        case 'call':
            return eval_call(n, frame, eval_node)
        # statements
        case 'exprstmt':
            return eval_expr_stmt(n, frame, eval_node)
        case 'printstmt':
            return eval_print_stmt(n, frame, eval_node)
        case 'vardecl':
            return eval_var_decl(n, frame, eval_node)
        case 'block':
            return eval_block(n, frame, eval_node)
        case 'ifstmt':
            return eval_if_stmt(n, frame, eval_node)
        case 'whilestmt':
            return eval_while_stmt(n, frame, eval_node)
        case 'fundecl':
            return eval_fun_decl(n, frame)
        case 'breakstmt':
            return eval_break_stmt(n, frame)
        case _:
            raise LoxRuntimeError(f"Unknown node: {d}")
