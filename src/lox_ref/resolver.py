"""
Static scope resolution for Lox.

Walks the AST once, tracking lexical scopes, and tells the interpreter how
many frames separate each local variable reference from its declaration.
Names never found in a local scope are left unresolved and looked up in the
global frame at runtime.

Also rejects scope-illegal programs: `this`/`super` outside a class,
`return` misuse, duplicate locals, self-referencing initializers and
constants without a value.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING, Dict, List, Optional, Set

from . import tree as ast
from .parser_rd import error_location
from .token_types import Tok
from .types import LoxError, Reporter

if TYPE_CHECKING:
    from .evaluator import Interpreter


class ResolveError(LoxError):
    """Resolution error tied to the offending token"""
    def __init__(self, message: str, token: Tok):
        self.message = message
        self.token = token
        self.line = token.line
        super().__init__(f"[line {token.line}] Error{error_location(token)}: {message}")


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Scope:
    """One lexical scope: name => defined flag, plus names bound by `const`."""
    __slots__ = ('names', 'constants')

    def __init__(self):
        self.names: Dict[str, bool] = {}
        self.constants: Set[str] = set()


class Resolver:
    def __init__(self, interpreter: Interpreter, reporter: Optional[Reporter] = None):
        self.interpreter = interpreter
        self.reporter = reporter
        self.scopes: List[Scope] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE
        self.errors: List[ResolveError] = []

    # ========================================================================
    # Entry points
    # ========================================================================

    def resolve(self, statements: List[ast.Stmt]) -> None:
        for stmt in statements:
            self.resolve_stmt(stmt)

    def resolve_stmt(self, stmt: ast.Stmt) -> None:
        handler = _STMT_DISPATCH.get(type(stmt))
        if handler is None:
            raise LoxError(f"Resolver has no rule for {type(stmt).__name__}")
        handler(self, stmt)

    def resolve_expr(self, expr: ast.Expr) -> None:
        handler = _EXPR_DISPATCH.get(type(expr))
        if handler is None:
            raise LoxError(f"Resolver has no rule for {type(expr).__name__}")
        handler(self, expr)

    # ========================================================================
    # Statements
    # ========================================================================

    def _block(self, stmt: ast.Block) -> None:
        self.begin_scope()
        self.resolve(stmt.statements)
        self.end_scope()

    def _class(self, stmt: ast.Class) -> None:
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        superclass = stmt.superclass
        if superclass is not None:
            if superclass.name.lexeme == stmt.name.lexeme:
                self.error(superclass.name, "A class can't inherit from itself.")

            self.current_class = ClassType.SUBCLASS
            self.resolve_expr(superclass)

            self.begin_scope()
            self.scopes[-1].names["super"] = True

        self.begin_scope()
        self.scopes[-1].names["this"] = True

        for method in stmt.methods:
            kind = FunctionType.METHOD
            if method.name.lexeme == "init":
                kind = FunctionType.INITIALIZER
            self.resolve_function(method, kind)

        self.end_scope()

        if superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def _expression(self, stmt: ast.Expression) -> None:
        self.resolve_expr(stmt.expression)

    def _function(self, stmt: ast.Function) -> None:
        # Defined before the body so the function can recurse.
        self.declare(stmt.name)
        self.define(stmt.name)
        self.resolve_function(stmt, FunctionType.FUNCTION)

    def _if(self, stmt: ast.If) -> None:
        self.resolve_expr(stmt.condition)
        self.resolve_stmt(stmt.then_branch)
        if stmt.else_branch is not None:
            self.resolve_stmt(stmt.else_branch)

    def _print(self, stmt: ast.Print) -> None:
        self.resolve_expr(stmt.expression)

    def _return(self, stmt: ast.Return) -> None:
        if self.current_function == FunctionType.NONE:
            self.error(stmt.keyword, "Can't return from top-level code.")

        if stmt.value is None:
            return

        if self.current_function == FunctionType.INITIALIZER:
            self.error(stmt.keyword, "Can't return a value from an initializer.")

        self.resolve_expr(stmt.value)

    def _var(self, stmt: ast.Var) -> None:
        self.declare(stmt.name)
        if stmt.initializer is not None:
            self.resolve_expr(stmt.initializer)
        self.define(stmt.name)

    def _const(self, stmt: ast.Const) -> None:
        self.declare(stmt.name)

        if stmt.initializer is None:
            self.error(stmt.name, "Constant missing initializer.")
        else:
            self.resolve_expr(stmt.initializer)

        self.define(stmt.name)
        if self.scopes:
            self.scopes[-1].constants.add(stmt.name.lexeme)

    def _while(self, stmt: ast.While) -> None:
        self.resolve_expr(stmt.condition)
        self.resolve_stmt(stmt.body)

    # ========================================================================
    # Expressions
    # ========================================================================

    def _variable(self, expr: ast.Variable | ast.ConstRef) -> None:
        if self.scopes and self.scopes[-1].names.get(expr.name.lexeme) is False:
            self.error(expr.name, "Can't read local variable in its own initializer.")

        self.resolve_local(expr, expr.name.lexeme)

    def _assign(self, expr: ast.Assign) -> None:
        self.resolve_expr(expr.value)
        depth = self.resolve_local(expr, expr.name.lexeme)

        if depth is not None:
            scope = self.scopes[len(self.scopes) - 1 - depth]
            if expr.name.lexeme in scope.constants:
                self.interpreter.resolve_constant(expr, depth)

    def _binary(self, expr: ast.Binary | ast.Logical) -> None:
        self.resolve_expr(expr.left)
        self.resolve_expr(expr.right)

    def _call(self, expr: ast.Call) -> None:
        self.resolve_expr(expr.callee)
        for argument in expr.arguments:
            self.resolve_expr(argument)

    def _get(self, expr: ast.Get) -> None:
        # Property names are dynamic; only the object is resolved.
        self.resolve_expr(expr.object)

    def _set(self, expr: ast.Set) -> None:
        self.resolve_expr(expr.value)
        self.resolve_expr(expr.object)

    def _grouping(self, expr: ast.Grouping) -> None:
        self.resolve_expr(expr.expression)

    def _literal(self, expr: ast.Literal) -> None:
        pass

    def _unary(self, expr: ast.Unary) -> None:
        self.resolve_expr(expr.right)

    def _super(self, expr: ast.Super) -> None:
        if self.current_class == ClassType.NONE:
            self.error(expr.keyword, "Can't use 'super' outside of a class.")
        elif self.current_class != ClassType.SUBCLASS:
            self.error(expr.keyword, "Can't use 'super' in a class with no superclass.")

        self.resolve_local(expr, "super")

    def _this(self, expr: ast.This) -> None:
        if self.current_class == ClassType.NONE:
            self.error(expr.keyword, "Can't use 'this' outside of a class.")
            return

        self.resolve_local(expr, "this")

    # ========================================================================
    # Scope helpers
    # ========================================================================

    def resolve_function(self, function: ast.Function, kind: FunctionType) -> None:
        enclosing_function = self.current_function
        self.current_function = kind

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    def begin_scope(self) -> None:
        self.scopes.append(Scope())

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Tok) -> None:
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope.names:
            self.error(name, "Already a variable with this name in this scope.")

        scope.names[name.lexeme] = False
        scope.constants.discard(name.lexeme)

    def define(self, name: Tok) -> None:
        if not self.scopes:
            return
        self.scopes[-1].names[name.lexeme] = True

    def resolve_local(self, expr: ast.Expr, name: str) -> Optional[int]:
        """Record the distance to the innermost scope declaring `name`"""
        for i in range(len(self.scopes) - 1, -1, -1):
            if name in self.scopes[i].names:
                depth = len(self.scopes) - 1 - i
                self.interpreter.resolve(expr, depth)
                return depth

        return None

    def error(self, token: Tok, message: str) -> None:
        err = ResolveError(message, token)
        self.errors.append(err)

        if self.reporter is not None:
            self.reporter.error(token.line, error_location(token), message)


_STMT_DISPATCH = {
    ast.Block: Resolver._block,
    ast.Class: Resolver._class,
    ast.Expression: Resolver._expression,
    ast.Function: Resolver._function,
    ast.If: Resolver._if,
    ast.Print: Resolver._print,
    ast.Return: Resolver._return,
    ast.Var: Resolver._var,
    ast.Const: Resolver._const,
    ast.While: Resolver._while,
}

_EXPR_DISPATCH = {
    ast.Variable: Resolver._variable,
    ast.ConstRef: Resolver._variable,
    ast.Assign: Resolver._assign,
    ast.Binary: Resolver._binary,
    ast.Logical: Resolver._binary,
    ast.Call: Resolver._call,
    ast.Get: Resolver._get,
    ast.Set: Resolver._set,
    ast.Grouping: Resolver._grouping,
    ast.Literal: Resolver._literal,
    ast.Unary: Resolver._unary,
    ast.Super: Resolver._super,
    ast.This: Resolver._this,
}
