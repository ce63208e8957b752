"""
Token Types for Lox

Shared between scanner, parser and the REPL highlighter to avoid circular
dependencies.
"""

from typing import Optional, Union
from dataclasses import dataclass
from enum import Enum, auto


class TT(Enum):
    """Token Types - mirrors grammar terminals"""

    # Single-character punctuation
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    SLASH = auto()
    STAR = auto()

    # One or two character operators
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()
    CONST = auto()

    EOF = auto()


Literal = Optional[Union[float, str]]


@dataclass(frozen=True)
class Tok:
    """Token with its lexeme, literal payload and source line"""

    type: TT
    lexeme: str
    literal: Literal = None
    line: int = 1

    def __repr__(self):
        if self.literal is None:
            return f"Tok({self.type.name}, {self.lexeme!r}, {self.line})"
        return f"Tok({self.type.name}, {self.lexeme!r}, {self.literal!r}, {self.line})"
