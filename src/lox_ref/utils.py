from __future__ import annotations

import os as _os
from typing import Optional

from .types import LoxBool, LoxNumber, LoxString, LoxValue

SCOPING_MODES = ("dynamic", "lexical")


def lox_equals(lhs: LoxValue, rhs: LoxValue) -> Optional[bool]:
    """Same-variant equality; None when the operands are not comparable."""
    match (lhs, rhs):
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return a == b
        case (LoxString(value=a), LoxString(value=b)):
            return a == b
        case (LoxBool(value=a), LoxBool(value=b)):
            return a == b
        case _:
            return None


def debug_py_trace_enabled() -> bool:
    """LOX_DEBUG_PY_TRACE=1 appends Python tracebacks to runtime error reports."""
    return _os.environ.get("LOX_DEBUG_PY_TRACE", "").lower() in ("1", "true", "yes", "on")


def default_scoping() -> str:
    """Call-frame parent policy from LOX_SCOPING; unknown values fall back to dynamic."""
    mode = _os.environ.get("LOX_SCOPING", "dynamic").strip().lower()
    return mode if mode in SCOPING_MODES else "dynamic"
