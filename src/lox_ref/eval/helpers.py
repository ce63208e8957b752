from __future__ import annotations

import math

from ..types import LoxBool, LoxNil, LoxNumber, LoxString, LoxValue

def is_truthy(val: LoxValue) -> bool:
    match val:
        case LoxBool(value=b):
            return b
        case LoxNil():
            return False
        case _:
            return True

def lox_equals(lhs: LoxValue, rhs: LoxValue) -> bool:
    match (lhs, rhs):
        case (LoxNil(), LoxNil()):
            return True
        case (LoxBool(value=a), LoxBool(value=b)):
            return a == b
        case (LoxNumber(value=a), LoxNumber(value=b)):
            # nan equals itself, matching boxed-double equality
            return a == b or (math.isnan(a) and math.isnan(b))
        case (LoxString(value=a), LoxString(value=b)):
            return a == b
        case _:
            # callables and instances: identity
            return lhs is rhs
