from __future__ import annotations

import importlib
from typing import Optional

from .types import (
    Builtins,
    Frame,
    LoxArityError,
    LoxBool,
    LoxBreakSignal,
    LoxFn,
    LoxNameError,
    LoxNative,
    LoxNil,
    LoxNumber,
    LoxRuntimeError,
    LoxString,
    LoxTypeError,
    LoxValue,
    NativeFn,
    is_lox_value,
)
from .utils import default_scoping

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_native hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("lox_ref.stdlib")
    _STDLIB_INITIALIZED = True

def register_native(name: str, *, arity: int = 0):
    def dec(fn: NativeFn):
        Builtins.globals[name] = LoxNative(name=name, fn=fn, arity=arity)
        return fn

    return dec

def global_frame(scoping: Optional[str] = None) -> Frame:
    """Fresh root frame with every registered native bound (clock, ...)."""
    init_stdlib()
    return Frame(scoping=scoping if scoping is not None else default_scoping())

__all__ = [
    "Frame",
    "LoxArityError",
    "LoxBool",
    "LoxBreakSignal",
    "LoxFn",
    "LoxNameError",
    "LoxNative",
    "LoxNil",
    "LoxNumber",
    "LoxRuntimeError",
    "LoxString",
    "LoxTypeError",
    "LoxValue",
    "global_frame",
    "init_stdlib",
    "is_lox_value",
    "register_native",
]
