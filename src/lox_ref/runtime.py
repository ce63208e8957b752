from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, List

from .token_types import Tok
from .types import (
    LoxNil, LoxBool, LoxNumber, LoxString,
    NativeFunction, NativeFn, LoxFunction, LoxClass, LoxInstance,
    LoxValue, LoxCallable, Environment, ReturnCompletion, Completion,
    LoxError, LoxRuntimeError, Reporter,
    Builtins, NIL, is_callable, from_literal, format_number,
)

if TYPE_CHECKING:
    from .evaluator import Interpreter

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib module (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module(".stdlib", __package__)
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str, *, arity: int):
    def dec(fn: NativeFn):
        Builtins.stdlib_functions[name] = NativeFunction(name=name, arity=arity, fn=fn)
        return fn

    return dec

def register_global(name: str, value: LoxValue) -> None:
    Builtins.seeded_globals[name] = value

def call_value(callee: LoxValue, args: List[LoxValue], paren: Tok, interp: 'Interpreter') -> LoxValue:
    """
    Call semantics shared by every callable kind:
    - non-callables are rejected
    - arity must match exactly; the body never runs on a mismatch
    """
    if not is_callable(callee):
        raise LoxRuntimeError(paren, "Can only call functions and classes.")

    if len(args) != callee.arity:
        raise LoxRuntimeError(paren, f"Expected {callee.arity} arguments but got {len(args)}.")

    match callee:
        case NativeFunction(fn=fn):
            return fn(interp, args)
        case LoxFunction():
            return call_loxfn(callee, args, interp)
        case LoxClass():
            return instantiate(callee, args, interp)

    raise LoxRuntimeError(paren, "Can only call functions and classes.")

def call_loxfn(fn: LoxFunction, args: List[LoxValue], interp: 'Interpreter') -> LoxValue:
    callee_env = Environment(fn.closure)

    for param, val in zip(fn.declaration.params, args):
        callee_env.define(param.lexeme, val)

    completion = interp.execute_block(fn.declaration.body, callee_env)

    if fn.is_initializer:
        return fn.closure.get_at(0, "this", fn.declaration.name)

    if completion is None:
        return NIL

    return completion.value

def instantiate(klass: LoxClass, args: List[LoxValue], interp: 'Interpreter') -> LoxInstance:
    instance = LoxInstance(klass)

    init = klass.find_method("init")
    if init is not None:
        call_loxfn(init.bind(instance), args, interp)

    return instance
