from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Set, Union
from typing_extensions import Protocol, TypeAlias, TypeGuard

from .token_types import Tok

if TYPE_CHECKING:
    from .evaluator import Interpreter
    from .tree import Function

# ---------- Value Model ----------

@dataclass
class LoxNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass
class LoxBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class LoxNumber:
    value: float
    def __repr__(self) -> str:
        return format_number(self.value)

@dataclass
class LoxString:
    value: str
    def __repr__(self) -> str:
        return self.value

NativeFn = Callable[['Interpreter', List['LoxValue']], 'LoxValue']

@dataclass(eq=False)
class NativeFunction:
    name: str
    arity: int
    fn: NativeFn
    def __repr__(self) -> str:
        return "<native fn>"

@dataclass(eq=False)
class LoxFunction:
    declaration: 'Function'        # AST node, shared with the tree
    closure: 'Environment'         # Closure frame, shared
    is_initializer: bool = False

    @property
    def arity(self) -> int:
        return len(self.declaration.params)

    def bind(self, instance: 'LoxInstance') -> 'LoxFunction':
        """Return a new function whose closure defines `this`."""
        env = Environment(self.closure)
        env.define("this", instance)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def __repr__(self) -> str:
        return f"<fn {self.declaration.name.lexeme}>"

@dataclass(eq=False)
class LoxClass:
    name: str
    superclass: Optional['LoxClass']
    methods: Dict[str, LoxFunction] = field(default_factory=dict)

    def find_method(self, name: str) -> Optional[LoxFunction]:
        klass: Optional[LoxClass] = self

        while klass is not None:
            method = klass.methods.get(name)
            if method is not None:
                return method
            klass = klass.superclass

        return None

    @property
    def arity(self) -> int:
        init = self.find_method("init")
        return 0 if init is None else init.arity

    def __repr__(self) -> str:
        return self.name

@dataclass(eq=False)
class LoxInstance:
    klass: LoxClass
    fields: Dict[str, 'LoxValue'] = field(default_factory=dict)

    def get(self, name: Tok) -> 'LoxValue':
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name: Tok, value: 'LoxValue') -> None:
        self.fields[name.lexeme] = value

    def __repr__(self) -> str:
        return f"{self.klass.name} instance"

LoxCallable: TypeAlias = NativeFunction | LoxFunction | LoxClass

LoxValue: TypeAlias = (
    LoxNil
    | LoxBool
    | LoxNumber
    | LoxString
    | NativeFunction
    | LoxFunction
    | LoxClass
    | LoxInstance
)

NIL = LoxNil()

def format_number(v: float) -> str:
    if math.isnan(v):
        return "nan"
    if math.isinf(v):
        return "inf" if v > 0 else "-inf"
    s = repr(v)
    # Large magnitudes keep repr's exponent form (1e+24).
    return s[:-2] if s.endswith(".0") else s

def is_callable(value: LoxValue) -> TypeGuard[LoxCallable]:
    return isinstance(value, (NativeFunction, LoxFunction, LoxClass))

# ---------- Control flow ----------

@dataclass
class ReturnCompletion:
    """Result of executing a `return`; propagated by blocks and loops up to the call."""
    value: LoxValue

Completion: TypeAlias = Optional[ReturnCompletion]

# ---------- Environment ----------

class Environment:
    def __init__(self, enclosing: Optional['Environment']=None):
        self.enclosing = enclosing
        self.values: Dict[str, LoxValue] = {}
        self.constants: Set[str] = set()

    def define(self, name: str, val: LoxValue, constant: bool=False) -> None:
        self.values[name] = val

        if constant:
            self.constants.add(name)
        else:
            self.constants.discard(name)

    def get(self, name: Tok) -> LoxValue:
        env: Optional[Environment] = self

        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Tok, val: LoxValue) -> None:
        env: Optional[Environment] = self

        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = val
                return
            env = env.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def is_constant(self, name: str) -> bool:
        return name in self.constants

    def ancestor(self, distance: int) -> 'Environment':
        env = self

        for _ in range(distance):
            if env.enclosing is None:
                raise LoxError(f"Environment chain shorter than resolved distance {distance}")
            env = env.enclosing

        return env

    def get_at(self, distance: int, name: str, where: Optional[Tok]=None) -> LoxValue:
        values = self.ancestor(distance).values

        if name not in values:
            raise LoxRuntimeError(where, f"Undefined variable '{name}'.")

        return values[name]

    def assign_at(self, distance: int, name: Tok, val: LoxValue) -> None:
        values = self.ancestor(distance).values

        if name.lexeme not in values:
            raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

        values[name.lexeme] = val

    def __repr__(self) -> str:
        names = ", ".join(self.values)
        if self.enclosing is None:
            return f"<env {names}>"
        return f"<env {names}> -> {self.enclosing!r}"

# ---------- Host callbacks ----------

class Reporter(Protocol):
    def error(self, line: int, where: str, message: str) -> None: ...
    def runtime_error(self, message: str, line: Optional[int]) -> None: ...
    def output(self, text: str) -> None: ...

# ---------- Exceptions ----------

class LoxError(Exception):
    """Base for every error raised by the interpreter pipeline."""

class LoxRuntimeError(LoxError):
    def __init__(self, token: Optional[Tok], message: str):
        super().__init__(message)
        self.token = token
        self.message = message

    @property
    def line(self) -> Optional[int]:
        return None if self.token is None else self.token.line

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line})"

def from_literal(value: Union[None, bool, float, str]) -> LoxValue:
    """Lift an AST literal payload into a runtime value."""
    if value is None:
        return NIL
    if isinstance(value, bool):
        return LoxBool(value)
    if isinstance(value, float):
        return LoxNumber(value)
    if isinstance(value, str):
        return LoxString(value)
    raise LoxError(f"Unexpected literal type {type(value).__name__}")

class Builtins:
    stdlib_functions: Dict[str, NativeFunction] = {}
    seeded_globals: Dict[str, LoxValue] = {}
