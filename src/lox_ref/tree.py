"""AST node classes produced by the parser and walked by the resolver and evaluator.

Nodes compare and hash by identity: the resolver keys its distance table on
the node object, so two identical expressions at different positions stay
distinct.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union
from typing_extensions import TypeAlias

from .token_types import Tok

LiteralValue: TypeAlias = Union[None, bool, float, str]


class Expr:
    """Base class for expression nodes."""
    __slots__ = ()


class Stmt:
    """Base class for statement nodes."""
    __slots__ = ()


# ---------- Expressions ----------

@dataclass(eq=False)
class Literal(Expr):
    value: LiteralValue

@dataclass(eq=False)
class Grouping(Expr):
    expression: Expr

@dataclass(eq=False)
class Unary(Expr):
    operator: Tok
    right: Expr

@dataclass(eq=False)
class Binary(Expr):
    left: Expr
    operator: Tok
    right: Expr

@dataclass(eq=False)
class Logical(Expr):
    left: Expr
    operator: Tok
    right: Expr

@dataclass(eq=False)
class Variable(Expr):
    name: Tok

@dataclass(eq=False)
class Assign(Expr):
    name: Tok
    value: Expr

@dataclass(eq=False)
class Call(Expr):
    callee: Expr
    paren: Tok
    arguments: List[Expr] = field(default_factory=list)

@dataclass(eq=False)
class Get(Expr):
    object: Expr
    name: Tok

@dataclass(eq=False)
class Set(Expr):
    object: Expr
    name: Tok
    value: Expr

@dataclass(eq=False)
class This(Expr):
    keyword: Tok

@dataclass(eq=False)
class Super(Expr):
    keyword: Tok
    method: Tok

@dataclass(eq=False)
class ConstRef(Expr):
    """Read of a name known to be bound by `const`."""
    name: Tok


# ---------- Statements ----------

@dataclass(eq=False)
class Block(Stmt):
    statements: List[Stmt]

@dataclass(eq=False)
class Function(Stmt):
    name: Tok
    params: List[Tok]
    body: List[Stmt]

@dataclass(eq=False)
class Class(Stmt):
    name: Tok
    superclass: Optional[Variable]
    methods: List[Function]

@dataclass(eq=False)
class Expression(Stmt):
    expression: Expr

@dataclass(eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None

@dataclass(eq=False)
class Print(Stmt):
    expression: Expr

@dataclass(eq=False)
class Return(Stmt):
    keyword: Tok
    value: Optional[Expr] = None

@dataclass(eq=False)
class Var(Stmt):
    name: Tok
    initializer: Optional[Expr] = None

@dataclass(eq=False)
class Const(Stmt):
    name: Tok
    initializer: Optional[Expr]

@dataclass(eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt


Node: TypeAlias = Union[Expr, Stmt]


def sexpr(node: Union[Node, List[Stmt], None]) -> str:
    """Render a node as a parenthesized prefix form.

    Used to compare trees structurally (tests, grammar cross-check) without
    giving nodes value equality.
    """
    if node is None:
        return "nil"

    if isinstance(node, list):
        return " ".join(sexpr(n) for n in node)

    match node:
        case Literal(value=v):
            return _literal_text(v)
        case Grouping(expression=e):
            return f"(group {sexpr(e)})"
        case Unary(operator=op, right=r):
            return f"({op.lexeme} {sexpr(r)})"
        case Binary(left=l, operator=op, right=r) | Logical(left=l, operator=op, right=r):
            return f"({op.lexeme} {sexpr(l)} {sexpr(r)})"
        case Variable(name=n) | ConstRef(name=n):
            return n.lexeme
        case Assign(name=n, value=v):
            return f"(= {n.lexeme} {sexpr(v)})"
        case Call(callee=c, arguments=args):
            inner = " ".join([sexpr(c)] + [sexpr(a) for a in args])
            return f"(call {inner})"
        case Get(object=o, name=n):
            return f"(. {sexpr(o)} {n.lexeme})"
        case Set(object=o, name=n, value=v):
            return f"(.= {sexpr(o)} {n.lexeme} {sexpr(v)})"
        case This():
            return "this"
        case Super(method=m):
            return f"(super {m.lexeme})"
        case Block(statements=stmts):
            return f"(block {sexpr(stmts)})" if stmts else "(block)"
        case Function(name=n, params=ps, body=body):
            params = " ".join(p.lexeme for p in ps)
            return " ".join([f"(fun {n.lexeme} ({params})"] + [sexpr(s) for s in body]) + ")"
        case Class(name=n, superclass=sup, methods=ms):
            head = f"(class {n.lexeme}" + (f" < {sup.name.lexeme}" if sup else "")
            return " ".join([head] + [sexpr(m) for m in ms]) + ")"
        case Expression(expression=e):
            return f"(; {sexpr(e)})"
        case If(condition=c, then_branch=t, else_branch=e):
            tail = f" {sexpr(e)}" if e is not None else ""
            return f"(if {sexpr(c)} {sexpr(t)}{tail})"
        case Print(expression=e):
            return f"(print {sexpr(e)})"
        case Return(value=v):
            return "(return)" if v is None else f"(return {sexpr(v)})"
        case Var(name=n, initializer=i):
            return f"(var {n.lexeme})" if i is None else f"(var {n.lexeme} {sexpr(i)})"
        case Const(name=n, initializer=i):
            return f"(const {n.lexeme})" if i is None else f"(const {n.lexeme} {sexpr(i)})"
        case While(condition=c, body=b):
            return f"(while {sexpr(c)} {sexpr(b)})"

    raise TypeError(f"Unknown node type {type(node).__name__}")


def _literal_text(value: LiteralValue) -> str:
    if value is None:
        return "nil"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return f'"{value}"'
