from __future__ import annotations

from typing import Any, List

from lark import Tree

from ..types import (
    Frame,
    LoxArityError,
    LoxFn,
    LoxNative,
    LoxNil,
    LoxRuntimeError,
    LoxTypeError,
    LoxValue,
    is_callable,
    kind_name,
)
from ..tree import is_token, tree_children, tree_label
from .blocks import exec_outside_loop, exec_statements
from .common import EvalFunc

def extract_param_names(params_node: Any) -> List[str]:
    if tree_label(params_node) != 'params':
        raise LoxRuntimeError("Malformed parameter list")

    names: List[str] = []

    for p in tree_children(params_node):
        if not is_token(p):
            raise LoxRuntimeError(f"Unsupported parameter node: {p}")
        names.append(str(p))

    return names

def eval_fun_decl(n: Tree, frame: Frame) -> LoxValue:
    name_tok, params_node, body_node = n.children
    params = extract_param_names(params_node)
    closure = frame if frame.scoping == "lexical" else None

    frame.define(str(name_tok), LoxFn(name=str(name_tok), params=params, body=body_node, closure=closure))
    return LoxNil()

def eval_call(n: Tree, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    callee_node, _paren, *arg_nodes = n.children
    callee = eval_func(callee_node, frame)

    if not is_callable(callee):
        raise LoxTypeError(f"Can only call functions, got {kind_name(callee)}.")

    if len(arg_nodes) != callee.arity:
        raise LoxArityError(callee.arity, len(arg_nodes))

    # arguments evaluate left to right in the caller's frame
    args = [eval_func(arg, frame) for arg in arg_nodes]
    return call_value(callee, args, frame, eval_func)

def call_value(cal: LoxValue, args: List[LoxValue], frame: Frame, eval_func: EvalFunc) -> LoxValue:
    """Invoke an already arity-checked callable with evaluated arguments."""
    match cal:
        case LoxNative(fn=fn):
            return fn(frame, args)
        case LoxFn():
            return call_loxfn(cal, args, frame, eval_func)
        case _:
            raise LoxTypeError(f"Can only call functions, got {kind_name(cal)}.")

def call_loxfn(fn: LoxFn, args: List[LoxValue], caller_frame: Frame, eval_func: EvalFunc) -> LoxValue:
    """
    Call semantics:
    - one fresh frame per call; its parent is the caller's frame, or the
      defining frame when the function was declared under lexical scoping
    - parameters are bound with define in that frame and the body's
      statements run directly in it
    - the result is always nil
    """
    parent = fn.closure if fn.closure is not None else caller_frame
    callee_frame = parent.enclosed()

    for name, val in zip(fn.params, args):
        callee_frame.define(name, val)

    exec_outside_loop(
        fn.body,
        callee_frame,
        lambda body, f: exec_statements(body.children, f, eval_func),
    )

    return LoxNil()
