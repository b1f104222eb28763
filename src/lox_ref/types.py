from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard
from .tree import Node

# ---------- Value Model ----------

@dataclass
class LoxNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass
class LoxNumber:
    value: float
    def __repr__(self) -> str:
        v = self.value
        return str(int(v)) if v.is_integer() else str(v)

@dataclass
class LoxString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class LoxBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(eq=False)
class LoxFn:
    name: str
    params: List[str]
    body: Node                      # block tree
    closure: Optional['Frame'] = None  # defining frame, only used under lexical scoping

    @property
    def arity(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        return f"<fn {self.name}>"

NativeFn = Callable[['Frame', List['LoxValue']], 'LoxValue']

@dataclass(eq=False)
class LoxNative:
    name: str
    fn: NativeFn
    arity: int = 0

    def __repr__(self) -> str:
        return f"<native fn {self.name}>"

LoxValue: TypeAlias = (
    LoxNil
    | LoxNumber
    | LoxString
    | LoxBool
    | LoxFn
    | LoxNative
)

LoxCallable: TypeAlias = LoxFn | LoxNative

class Frame:
    """One level of the scope chain. Parents are shared, never owned."""

    def __init__(self, parent: Optional['Frame'] = None, scoping: Optional[str] = None):
        self.parent = parent
        self.vars: Dict[str, LoxValue] = {}
        self.scoping: str

        if parent is None and Builtins.globals:
            for name, native in Builtins.globals.items():
                self.vars[name] = native

        if scoping is not None:
            self.scoping = scoping
        elif parent is not None:
            self.scoping = parent.scoping
        else:
            self.scoping = "dynamic"

    def define(self, name: str, val: LoxValue) -> None:
        self.vars[name] = val

    def get(self, name: str) -> LoxValue:
        frame: Optional[Frame] = self

        while frame is not None:
            if name in frame.vars:
                return frame.vars[name]
            frame = frame.parent

        raise LoxNameError(name)

    def set(self, name: str, val: LoxValue) -> None:
        frame: Optional[Frame] = self

        while frame is not None:
            if name in frame.vars:
                frame.vars[name] = val
                return
            frame = frame.parent

        raise LoxNameError(name)

    def enclosed(self) -> 'Frame':
        return Frame(parent=self)

    def depth(self) -> int:
        n = 0
        frame = self.parent

        while frame is not None:
            n += 1
            frame = frame.parent

        return n

# ---------- Exceptions ----------

class LoxRuntimeError(Exception):
    line: Optional[int]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.line = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        return f"{self.message} [line {self.line}]"

class LoxTypeError(LoxRuntimeError):
    pass

class LoxArityError(LoxRuntimeError):
    def __init__(self, expected: int, got: int):
        super().__init__(f"Expected {expected} arguments but got {got}.")
        self.expected = expected
        self.got = got

class LoxNameError(LoxRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Undefined variable '{name}'.")
        self.name = name

class LoxBreakSignal(Exception):
    """Internal control flow for `break`; only a loop may consume it."""

_LOX_VALUE_TYPES: Tuple[type, ...] = (
    LoxNil,
    LoxNumber,
    LoxString,
    LoxBool,
    LoxFn,
    LoxNative,
)

def is_lox_value(value: object) -> TypeGuard[LoxValue]:
    return isinstance(value, _LOX_VALUE_TYPES)

def is_callable(value: LoxValue) -> TypeGuard[LoxCallable]:
    return isinstance(value, (LoxFn, LoxNative))

def kind_name(value: LoxValue) -> str:
    match value:
        case LoxNil():
            return "nil"
        case LoxNumber():
            return "number"
        case LoxString():
            return "string"
        case LoxBool():
            return "boolean"
        case LoxFn() | LoxNative():
            return "function"
        case _:
            return type(value).__name__

class Builtins:
    globals: Dict[str, LoxNative] = {}
