from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional

from . import tree as ast
from .runtime import (
    Builtins,
    Completion,
    Environment,
    LoxError,
    LoxRuntimeError,
    LoxValue,
    NIL,
    Reporter,
    ReturnCompletion,
    call_value,
    from_literal,
    init_stdlib,
)
from .token_types import Tok

from .eval.common import stringify
from .eval.expr import eval_binary, eval_logical, eval_unary
from .eval.fn import eval_class_def, eval_fn_def
from .eval.loops import eval_if_stmt, eval_while_stmt
from .eval.objects import eval_get, eval_set, eval_super


class Interpreter:
    """
    Tree-walking evaluator.

    Owns all session state: the global frame, the active frame pointer and
    the resolver's side tables (node identity => distance). A single instance
    is reused across REPL lines so globals persist.
    """

    def __init__(self, reporter: Optional[Reporter]=None, clock: Optional[Callable[[], float]]=None):
        init_stdlib()

        if reporter is None:
            from .utils import ConsoleReporter  # local import to avoid cycle
            reporter = ConsoleReporter()

        self.reporter = reporter
        self.clock: Callable[[], float] = clock or time.time
        self.globals = Environment()
        self.environment = self.globals
        self.locals: Dict[ast.Expr, int] = {}
        self.constants: Dict[ast.Expr, int] = {}

        for name, fn in Builtins.stdlib_functions.items():
            self.globals.define(name, fn)

        for name, val in Builtins.seeded_globals.items():
            self.globals.define(name, val)

    # ---------------- Resolver hooks ----------------

    def resolve(self, expr: ast.Expr, depth: int) -> None:
        self.locals[expr] = depth

    def resolve_constant(self, expr: ast.Expr, depth: int) -> None:
        self.constants[expr] = depth

    # ---------------- Public API ----------------

    def interpret(self, statements: List[ast.Stmt]) -> Optional[LoxRuntimeError]:
        """Run top-level statements; report and return the runtime error that stopped them."""
        try:
            for stmt in statements:
                self.execute(stmt)
        except LoxRuntimeError as e:
            self._recover()
            self.reporter.runtime_error(e.message, e.line)
            return e
        except RecursionError as e:
            self._recover()
            err = LoxRuntimeError(None, "Stack overflow.")
            err.__cause__ = e
            self.reporter.runtime_error(err.message, None)
            return err

        return None

    def _recover(self) -> None:
        # execute_block restores frames on unwind; this guards against a
        # failure between frame swaps.
        self.environment = self.globals

    # ---------------- Statements ----------------

    def execute(self, stmt: ast.Stmt) -> Completion:
        handler = _STMT_DISPATCH.get(type(stmt))
        if handler is None:
            raise LoxError(f"Unsupported statement {type(stmt).__name__}")
        return handler(self, stmt)

    def execute_block(self, statements: List[ast.Stmt], env: Environment) -> Completion:
        previous = self.environment

        try:
            self.environment = env

            for stmt in statements:
                completion = self.execute(stmt)
                if completion is not None:
                    return completion
        finally:
            self.environment = previous

        return None

    def _block(self, stmt: ast.Block) -> Completion:
        return self.execute_block(stmt.statements, Environment(self.environment))

    def _class(self, stmt: ast.Class) -> Completion:
        eval_class_def(stmt, self)
        return None

    def _expression(self, stmt: ast.Expression) -> Completion:
        self.evaluate(stmt.expression)
        return None

    def _function(self, stmt: ast.Function) -> Completion:
        eval_fn_def(stmt, self)
        return None

    def _if(self, stmt: ast.If) -> Completion:
        return eval_if_stmt(stmt, self)

    def _print(self, stmt: ast.Print) -> Completion:
        value = self.evaluate(stmt.expression)
        self.reporter.output(stringify(value))
        return None

    def _return(self, stmt: ast.Return) -> Completion:
        value = NIL if stmt.value is None else self.evaluate(stmt.value)
        return ReturnCompletion(value)

    def _var(self, stmt: ast.Var) -> Completion:
        value = NIL if stmt.initializer is None else self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value)
        return None

    def _const(self, stmt: ast.Const) -> Completion:
        value = NIL if stmt.initializer is None else self.evaluate(stmt.initializer)
        self.environment.define(stmt.name.lexeme, value, constant=True)
        return None

    def _while(self, stmt: ast.While) -> Completion:
        return eval_while_stmt(stmt, self)

    # ---------------- Expressions ----------------

    def evaluate(self, expr: ast.Expr) -> LoxValue:
        handler = _EXPR_DISPATCH.get(type(expr))
        if handler is None:
            raise LoxError(f"Unsupported expression {type(expr).__name__}")
        return handler(self, expr)

    def _literal(self, expr: ast.Literal) -> LoxValue:
        return from_literal(expr.value)

    def _grouping(self, expr: ast.Grouping) -> LoxValue:
        return self.evaluate(expr.expression)

    def _unary(self, expr: ast.Unary) -> LoxValue:
        return eval_unary(expr, self.evaluate)

    def _binary(self, expr: ast.Binary) -> LoxValue:
        return eval_binary(expr, self.evaluate)

    def _logical(self, expr: ast.Logical) -> LoxValue:
        return eval_logical(expr, self.evaluate)

    def _variable(self, expr: ast.Variable | ast.ConstRef) -> LoxValue:
        return self.look_up_variable(expr.name, expr)

    def _this(self, expr: ast.This) -> LoxValue:
        return self.look_up_variable(expr.keyword, expr)

    def _assign(self, expr: ast.Assign) -> LoxValue:
        if self.is_constant(expr):
            raise LoxRuntimeError(expr.name, "You cannot assign a value to a constant.")

        value = self.evaluate(expr.value)

        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name, value)
        else:
            self.globals.assign(expr.name, value)

        return value

    def _call(self, expr: ast.Call) -> LoxValue:
        callee = self.evaluate(expr.callee)
        args = [self.evaluate(arg) for arg in expr.arguments]
        return call_value(callee, args, expr.paren, self)

    def _get(self, expr: ast.Get) -> LoxValue:
        return eval_get(expr, self)

    def _set(self, expr: ast.Set) -> LoxValue:
        return eval_set(expr, self)

    def _super(self, expr: ast.Super) -> LoxValue:
        return eval_super(expr, self)

    # ---------------- Lookup ----------------

    def look_up_variable(self, name: Tok, expr: ast.Expr) -> LoxValue:
        distance = self.locals.get(expr)

        if distance is not None:
            return self.environment.get_at(distance, name.lexeme, name)

        return self.globals.get(name)

    def is_constant(self, expr: ast.Assign) -> bool:
        if expr in self.constants:
            return True

        if expr in self.locals:
            return False

        return self.globals.is_constant(expr.name.lexeme)


_STMT_DISPATCH: Dict[type, Callable[[Interpreter, ast.Stmt], Completion]] = {
    ast.Block: Interpreter._block,
    ast.Class: Interpreter._class,
    ast.Expression: Interpreter._expression,
    ast.Function: Interpreter._function,
    ast.If: Interpreter._if,
    ast.Print: Interpreter._print,
    ast.Return: Interpreter._return,
    ast.Var: Interpreter._var,
    ast.Const: Interpreter._const,
    ast.While: Interpreter._while,
}

_EXPR_DISPATCH: Dict[type, Callable[[Interpreter, ast.Expr], LoxValue]] = {
    ast.Literal: Interpreter._literal,
    ast.Grouping: Interpreter._grouping,
    ast.Unary: Interpreter._unary,
    ast.Binary: Interpreter._binary,
    ast.Logical: Interpreter._logical,
    ast.Variable: Interpreter._variable,
    ast.ConstRef: Interpreter._variable,
    ast.Assign: Interpreter._assign,
    ast.Call: Interpreter._call,
    ast.Get: Interpreter._get,
    ast.Set: Interpreter._set,
    ast.This: Interpreter._this,
    ast.Super: Interpreter._super,
}
