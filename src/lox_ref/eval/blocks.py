from __future__ import annotations

from typing import Any, List

from lark import Tree

from ..types import Frame, LoxBreakSignal, LoxNil, LoxRuntimeError, LoxValue
from .common import EvalFunc, stringify

def exec_statements(statements: List[Any], frame: Frame, eval_func: EvalFunc) -> LoxValue:
    """Run statements in order in `frame`; the first error (or break) propagates."""
    for stmt in statements:
        eval_func(stmt, frame)

    return LoxNil()

def eval_block(n: Tree, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    return exec_statements(n.children, frame.enclosed(), eval_func)

def eval_expr_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    eval_func(n.children[0], frame)
    return LoxNil()

def eval_print_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    value = eval_func(n.children[0], frame)
    print(stringify(value))
    return LoxNil()

def eval_var_decl(n: Tree, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    name_tok, init_node = n.children
    frame.define(str(name_tok), eval_func(init_node, frame))
    return LoxNil()

def eval_break_stmt(_n: Tree, _frame: Frame) -> LoxValue:
    raise LoxBreakSignal()

def exec_outside_loop(stmt: Any, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    """Execute where no loop can intercept a break; a stray break becomes an error."""
    try:
        return eval_func(stmt, frame)
    except LoxBreakSignal:
        raise LoxRuntimeError("'break' outside of a loop.") from None
