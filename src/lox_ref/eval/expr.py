from __future__ import annotations

import math
from typing import List

from ..types import (
    Frame,
    LoxBool,
    LoxNumber,
    LoxString,
    LoxTypeError,
    LoxValue,
    LoxRuntimeError,
    kind_name,
)
from ..utils import lox_equals
from .common import EvalFunc, op_text, stringify
from .helpers import is_truthy

NUMERIC_OPS = {'-', '*', '/'}
COMPARE_OPS = {'>', '>=', '<', '<='}
EQUALITY_OPS = {'==', '!='}

def eval_unary(children: List, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    op_node, rhs_node = children
    op = op_text(op_node)
    rhs = eval_func(rhs_node, frame)

    match op:
        case '-':
            if not isinstance(rhs, LoxNumber):
                raise LoxTypeError(f"Operand of '-' must be a number, got {kind_name(rhs)}.")
            return LoxNumber(-rhs.value)
        case '!':
            if not isinstance(rhs, (LoxBool, LoxNumber, LoxString)):
                raise LoxTypeError(f"Operand of '!' must be a boolean, number or string, got {kind_name(rhs)}.")
            return LoxBool(not is_truthy(rhs))
        case _:
            raise LoxRuntimeError(f"Unsupported unary op {op!r}")

def eval_binary(children: List, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    lhs_node, op_node, rhs_node = children
    lhs = eval_func(lhs_node, frame)
    rhs = eval_func(rhs_node, frame)
    return apply_binary_operator(op_text(op_node), lhs, rhs)

def apply_binary_operator(op: str, lhs: LoxValue, rhs: LoxValue) -> LoxValue:
    if op == '+':
        match (lhs, rhs):
            case (LoxNumber(value=a), LoxNumber(value=b)):
                return LoxNumber(a + b)
            case (LoxString(value=a), LoxString(value=b)):
                return LoxString(a + b)
            case (LoxString(value=a), LoxNumber()):
                return LoxString(a + stringify(rhs))
        raise _operand_error(op, "two numbers or two strings", lhs, rhs)

    if op in NUMERIC_OPS or op in COMPARE_OPS:
        if not (isinstance(lhs, LoxNumber) and isinstance(rhs, LoxNumber)):
            raise _operand_error(op, "numbers", lhs, rhs)
        a, b = lhs.value, rhs.value

        match op:
            case '-':
                return LoxNumber(a - b)
            case '*':
                return LoxNumber(a * b)
            case '/':
                return LoxNumber(_divide(a, b))
            case '>':
                return LoxBool(a > b)
            case '>=':
                return LoxBool(a >= b)
            case '<':
                return LoxBool(a < b)
            case '<=':
                return LoxBool(a <= b)

    if op in EQUALITY_OPS:
        same = lox_equals(lhs, rhs)
        if same is None:
            raise _operand_error(op, "of the same type (number, string or boolean)", lhs, rhs)
        return LoxBool(same if op == '==' else not same)

    raise LoxRuntimeError(f"Unknown operator {op!r}")

def eval_logical(children: List, frame: Frame, eval_func: EvalFunc) -> LoxValue:
    """`and`/`or` short-circuit and always yield a boolean."""
    lhs_node, op_node, rhs_node = children
    lhs = eval_func(lhs_node, frame)

    if op_text(op_node) == 'and':
        if not is_truthy(lhs):
            return LoxBool(False)
    elif is_truthy(lhs):
        return LoxBool(True)

    return LoxBool(is_truthy(eval_func(rhs_node, frame)))

def _divide(a: float, b: float) -> float:
    # IEEE-754 semantics: x/0 is +-inf, 0/0 is nan
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b

def _operand_error(op: str, wanted: str, lhs: LoxValue, rhs: LoxValue) -> LoxTypeError:
    return LoxTypeError(f"Operands of '{op}' must be {wanted}, got {kind_name(lhs)} and {kind_name(rhs)}.")
