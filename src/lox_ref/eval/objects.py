from __future__ import annotations

from typing import TYPE_CHECKING

from ..tree import Get, Set, Super
from ..types import LoxClass, LoxInstance, LoxRuntimeError, LoxValue

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def eval_get(node: Get, interp: Interpreter) -> LoxValue:
    obj = interp.evaluate(node.object)

    if isinstance(obj, LoxInstance):
        return obj.get(node.name)

    raise LoxRuntimeError(node.name, "Only instances have properties.")

def eval_set(node: Set, interp: Interpreter) -> LoxValue:
    obj = interp.evaluate(node.object)

    if not isinstance(obj, LoxInstance):
        raise LoxRuntimeError(node.name, "Only instances have fields.")

    value = interp.evaluate(node.value)
    obj.set(node.name, value)
    return value

def eval_super(node: Super, interp: Interpreter) -> LoxValue:
    """Look the method up on the superclass of the lexically enclosing class.

    The `super` frame sits at the resolved distance and the `this` frame one
    hop closer (see Resolver._class and eval_class_def).
    """
    distance = interp.locals.get(node)
    if distance is None:
        raise LoxRuntimeError(node.keyword, "Can't use 'super' outside of a subclass method.")

    superclass = interp.environment.get_at(distance, "super", node.keyword)
    if not isinstance(superclass, LoxClass):
        raise LoxRuntimeError(node.keyword, "Superclass must be a class.")

    instance = interp.environment.get_at(distance - 1, "this", node.keyword)
    if not isinstance(instance, LoxInstance):
        raise LoxRuntimeError(node.keyword, "'this' is not an instance.")

    method = superclass.find_method(node.method.lexeme)
    if method is None:
        raise LoxRuntimeError(node.method, f"Undefined property '{node.method.lexeme}'.")

    return method.bind(instance)
