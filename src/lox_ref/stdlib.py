"""Native globals registered into every session's global frame."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from .runtime import register_global, register_stdlib
from .types import LoxNumber, LoxValue

if TYPE_CHECKING:
    from .evaluator import Interpreter

@register_stdlib("clock", arity=0)
def std_clock(interp: Interpreter, args: List[LoxValue]) -> LoxNumber:
    return LoxNumber(float(interp.clock()))

# Host state slots read and written by embedding code.
register_global("current_state", LoxNumber(0.0))
register_global("last_state", LoxNumber(0.0))
