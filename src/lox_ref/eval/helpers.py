from __future__ import annotations

from ..types import LoxBool, LoxNil, LoxNumber, LoxString, LoxValue

def is_truthy(val: LoxValue) -> bool:
    match val:
        case LoxBool(value=b):
            return b
        case LoxNil():
            return False
        case LoxNumber(value=num):
            return num != 0
        case LoxString(value=s):
            return bool(s)
        case _:
            # callables
            return True
