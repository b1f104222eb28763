from __future__ import annotations

from typing import Any, Callable

from ..types import Frame, LoxString, LoxValue

EvalFunc = Callable[[Any, Frame], LoxValue]

def stringify(value: LoxValue) -> str:
    """Textual form used by `print` and string concatenation."""
    if isinstance(value, LoxString):
        return value.value

    return repr(value)

def op_text(node: Any) -> str:
    return str(getattr(node, "value", node))
