from __future__ import annotations

import math
import operator
from typing import Callable, Dict

from ..token_types import TT, Tok
from ..tree import Binary, Expr, Logical, Unary
from ..types import LoxBool, LoxNumber, LoxRuntimeError, LoxString, LoxValue
from .common import expect_number, expect_numbers, stringify
from .helpers import is_truthy, lox_equals

EvalFunc = Callable[[Expr], LoxValue]

_ARITH: Dict[TT, Callable[[float, float], float]] = {
    TT.MINUS: operator.sub,
    TT.STAR: operator.mul,
}

_COMPARE: Dict[TT, Callable[[float, float], bool]] = {
    TT.GREATER: operator.gt,
    TT.GREATER_EQUAL: operator.ge,
    TT.LESS: operator.lt,
    TT.LESS_EQUAL: operator.le,
}

def eval_unary(node: Unary, eval_func: EvalFunc) -> LoxValue:
    right = eval_func(node.right)

    match node.operator.type:
        case TT.BANG:
            return LoxBool(not is_truthy(right))
        case TT.MINUS:
            return LoxNumber(-expect_number(node.operator, right))

    raise LoxRuntimeError(node.operator, f"Unsupported unary operator '{node.operator.lexeme}'.")

def eval_binary(node: Binary, eval_func: EvalFunc) -> LoxValue:
    left = eval_func(node.left)
    right = eval_func(node.right)
    op = node.operator

    match op.type:
        case TT.EQUAL_EQUAL:
            return LoxBool(lox_equals(left, right))
        case TT.BANG_EQUAL:
            return LoxBool(not lox_equals(left, right))
        case TT.PLUS:
            return _add(op, left, right)
        case TT.SLASH:
            lhs, rhs = expect_numbers(op, left, right)
            return LoxNumber(_divide(lhs, rhs))

    arith = _ARITH.get(op.type)
    if arith is not None:
        lhs, rhs = expect_numbers(op, left, right)
        return LoxNumber(arith(lhs, rhs))

    compare = _COMPARE.get(op.type)
    if compare is not None:
        lhs, rhs = expect_numbers(op, left, right)
        return LoxBool(compare(lhs, rhs))

    raise LoxRuntimeError(op, f"Unsupported binary operator '{op.lexeme}'.")

def eval_logical(node: Logical, eval_func: EvalFunc) -> LoxValue:
    left = eval_func(node.left)

    if node.operator.type == TT.OR:
        if is_truthy(left):
            return left
    elif not is_truthy(left):
        return left

    return eval_func(node.right)

def _add(op: Tok, left: LoxValue, right: LoxValue) -> LoxValue:
    match (left, right):
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return LoxNumber(a + b)
        case (LoxString(), LoxString() | LoxNumber()) | (LoxNumber(), LoxString()):
            return LoxString(stringify(left) + stringify(right))

    raise LoxRuntimeError(op, "Operands must be numbers or strings.")

def _divide(lhs: float, rhs: float) -> float:
    """IEEE division; Python raises on a zero divisor."""
    if rhs != 0:
        return lhs / rhs

    if lhs == 0 or math.isnan(lhs):
        return math.nan

    return math.copysign(math.inf, lhs) * math.copysign(1.0, rhs)
