"""prompt_toolkit lexer for live Lox syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as LoxScanner
from .token_types import TT

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_KEYWORDS = {
    TT.AND, TT.CLASS, TT.ELSE, TT.FOR, TT.FUN, TT.IF, TT.OR, TT.PRINT,
    TT.RETURN, TT.SUPER, TT.THIS, TT.VAR, TT.WHILE, TT.CONST,
}

_OPERATORS = {
    TT.MINUS, TT.PLUS, TT.SLASH, TT.STAR, TT.BANG, TT.BANG_EQUAL, TT.EQUAL,
    TT.EQUAL_EQUAL, TT.GREATER, TT.GREATER_EQUAL, TT.LESS, TT.LESS_EQUAL,
}


def token_group(tt: TT) -> str:
    """Token type → highlight group."""
    if tt in _KEYWORDS:
        return "keyword"
    if tt in (TT.TRUE, TT.FALSE):
        return "boolean"
    if tt == TT.NIL:
        return "constant"
    if tt == TT.NUMBER:
        return "number"
    if tt == TT.STRING:
        return "string"
    if tt == TT.IDENTIFIER:
        return "identifier"
    if tt in _OPERATORS:
        return "operator"
    return "punctuation"


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    # No reporter: scan errors in half-typed input are ignored here.
    tokens = LoxScanner(text).tokenize()

    result: StyleAndTextTuples = []
    pos = 0

    for tok in tokens:
        if tok.type == TT.EOF or not tok.lexeme:
            continue

        # Find actual position of this token in the line from pos onwards.
        idx = text.find(tok.lexeme, pos)
        if idx < 0:
            continue

        # Unstyled gap before token.
        if idx > pos:
            result.append(("", text[pos:idx]))

        style = GROUP_STYLE.get(token_group(tok.type), "")
        result.append((style, tok.lexeme))
        pos = idx + len(tok.lexeme)

    # Trailing text: whitespace, an unterminated string, or a `//` comment.
    if pos < len(text):
        tail = text[pos:]
        comment_at = tail.find("//")
        if comment_at >= 0:
            if comment_at > 0:
                result.append(("", tail[:comment_at]))
            result.append((GROUP_STYLE["comment"], tail[comment_at:]))
        else:
            result.append(("", tail))

    return result if result else [("", text)]


class LoxLexer(Lexer):
    """prompt_toolkit Lexer that highlights Lox source using the RD scanner."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
