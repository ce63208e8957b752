from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

from ..tree import Class, Function
from ..types import NIL, Environment, LoxClass, LoxFunction, LoxRuntimeError

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def eval_fn_def(stmt: Function, interp: Interpreter) -> None:
    fn_value = LoxFunction(stmt, interp.environment, is_initializer=False)
    interp.environment.define(stmt.name.lexeme, fn_value)

def eval_class_def(stmt: Class, interp: Interpreter) -> None:
    superclass: Optional[LoxClass] = None

    if stmt.superclass is not None:
        value = interp.evaluate(stmt.superclass)
        if not isinstance(value, LoxClass):
            raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")
        superclass = value

    # Name exists (as nil) while methods are built so they can refer to it.
    interp.environment.define(stmt.name.lexeme, NIL)

    method_env = interp.environment
    if superclass is not None:
        method_env = Environment(interp.environment)
        method_env.define("super", superclass)

    methods: Dict[str, LoxFunction] = {}

    for method in stmt.methods:
        name = method.name.lexeme
        methods[name] = LoxFunction(method, method_env, is_initializer=(name == "init"))

    klass = LoxClass(stmt.name.lexeme, superclass, methods)
    interp.environment.assign(stmt.name, klass)
