"""Native functions bound in every root frame, registered via runtime.register_native."""

from __future__ import annotations

import time
from typing import List

from .runtime import register_native, LoxNumber, LoxValue

@register_native("clock", arity=0)
def std_clock(_frame, _args: List[LoxValue]) -> LoxNumber:
    """Seconds since the Unix epoch as a float."""
    return LoxNumber(time.time())
