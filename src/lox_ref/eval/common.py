from __future__ import annotations

from typing import Tuple

from ..token_types import Tok
from ..types import (
    LoxBool,
    LoxNil,
    LoxNumber,
    LoxRuntimeError,
    LoxString,
    LoxValue,
    format_number,
)

def stringify(value: LoxValue) -> str:
    """Render a value the way `print` shows it."""
    match value:
        case LoxNil():
            return "nil"
        case LoxBool(value=b):
            return "true" if b else "false"
        case LoxNumber(value=num):
            return format_number(num)
        case LoxString(value=s):
            return s
        case _:
            return repr(value)

def expect_number(op: Tok, operand: LoxValue) -> float:
    if isinstance(operand, LoxNumber):
        return operand.value

    raise LoxRuntimeError(op, "Operand must be a number.")

def expect_numbers(op: Tok, left: LoxValue, right: LoxValue) -> Tuple[float, float]:
    if isinstance(left, LoxNumber) and isinstance(right, LoxNumber):
        return left.value, right.value

    raise LoxRuntimeError(op, "Operands must be numbers.")
