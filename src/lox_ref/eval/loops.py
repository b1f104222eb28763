from __future__ import annotations

from lark import Tree

from ..types import Frame, LoxBreakSignal, LoxNil, LoxRuntimeError, LoxValue
from .common import EvalFunc
from .helpers import is_truthy as _is_truthy

def eval_if_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    children = n.children
    if len(children) not in (2, 3):
        raise LoxRuntimeError("Malformed if statement")

    cond_node, then_node = children[0], children[1]
    else_node = children[2] if len(children) == 3 else None

    if _is_truthy(eval_func(cond_node, frame)):
        eval_func(then_node, frame)
    elif else_node is not None:
        eval_func(else_node, frame)

    return LoxNil()

def eval_while_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    cond_node, body_node = n.children

    while _is_truthy(eval_func(cond_node, frame)):
        try:
            eval_func(body_node, frame)
        except LoxBreakSignal:
            break

    return LoxNil()
