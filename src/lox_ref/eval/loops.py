from __future__ import annotations

from typing import TYPE_CHECKING

from ..tree import If, While
from ..types import Completion
from .helpers import is_truthy

if TYPE_CHECKING:
    from ..evaluator import Interpreter

def eval_if_stmt(stmt: If, interp: Interpreter) -> Completion:
    if is_truthy(interp.evaluate(stmt.condition)):
        return interp.execute(stmt.then_branch)

    if stmt.else_branch is not None:
        return interp.execute(stmt.else_branch)

    return None

def eval_while_stmt(stmt: While, interp: Interpreter) -> Completion:
    while is_truthy(interp.evaluate(stmt.condition)):
        completion = interp.execute(stmt.body)
        if completion is not None:
            return completion

    return None
