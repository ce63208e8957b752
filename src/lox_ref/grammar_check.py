"""
grammar_check.py: cross-check the recursive-descent parser against grammar.lark.

Both parsers must accept the same programs and build the same tree for each
(compared via `tree.sexpr`). The Lark side builds real AST nodes through a
Transformer, including the `for` desugaring, so the rendered forms line up.

Usage:
    python -m lox_ref.grammar_check                # built-in sample corpus
    python -m lox_ref.grammar_check a.lox b.lox    # specific files
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError

from . import tree as ast
from .lexer_rd import Lexer
from .parser_rd import MAX_ARGS, Parser
from .token_types import TT, Tok

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")


class GrammarCheckError(Exception):
    """Tree shape the recursive-descent parser would reject."""


@lru_cache(maxsize=1)
def make_parser() -> Lark:
    return Lark(
        GRAMMAR_PATH.read_text(encoding="utf-8"),
        parser="lalr",
        lexer="basic",
        start="start",
        maybe_placeholders=True,
    )


# ---------------------------------------------------------------------------
# Lark tree -> AST
# ---------------------------------------------------------------------------

def _tok(token: Token, tt: Optional[TT]=None) -> Tok:
    kind = tt if tt is not None else TT[token.type]
    return Tok(kind, str(token), None, token.line or 0)

def _synthetic(tt: TT, lexeme: str) -> Tok:
    return Tok(tt, lexeme, None, 0)

def _ident(token: Token) -> Tok:
    return _tok(token, TT.IDENTIFIER)


class ToAst(Transformer):
    """Build the same nodes parser_rd builds from the Lark parse tree."""

    def start(self, c):
        return list(c)

    # ---- declarations ----

    def class_decl(self, c):
        name, superclass, *methods = c
        sup = ast.Variable(_ident(superclass)) if superclass is not None else None
        return ast.Class(_ident(name), sup, methods)

    def fun_decl(self, c):
        return c[0]

    def function(self, c):
        name, params, *body = c
        return ast.Function(_ident(name), params or [], body)

    def parameters(self, c):
        if len(c) > MAX_ARGS:
            raise GrammarCheckError(f"Can't have more than {MAX_ARGS} parameters.")
        return [_ident(p) for p in c]

    def const_decl(self, c):
        return ast.Const(_ident(c[0]), c[1])

    def var_decl(self, c):
        return ast.Var(_ident(c[0]), c[1])

    # ---- statements ----

    def expr_stmt(self, c):
        return ast.Expression(c[0])

    def empty_init(self, c):
        return None

    def for_stmt(self, c):
        initializer, condition, increment, body = c

        if increment is not None:
            body = ast.Block([body, ast.Expression(increment)])

        if condition is None:
            condition = ast.Literal(True)
        body = ast.While(condition, body)

        if initializer is not None:
            body = ast.Block([initializer, body])

        return body

    def if_stmt(self, c):
        return ast.If(c[0], c[1], c[2])

    def print_stmt(self, c):
        return ast.Print(c[0])

    def return_stmt(self, c):
        return ast.Return(_tok(c[0]), c[1])

    def while_stmt(self, c):
        return ast.While(c[0], c[1])

    def block(self, c):
        return ast.Block(list(c))

    # ---- expressions ----

    def assign(self, c):
        target, value = c

        match target:
            case ast.Variable(name=name):
                return ast.Assign(name, value)
            case ast.Get(object=obj, name=name):
                return ast.Set(obj, name, value)

        raise GrammarCheckError("Invalid assignment target.")

    def logical(self, c):
        left, op, right = c
        return ast.Logical(left, _tok(op), right)

    def binary(self, c):
        left, op, right = c
        return ast.Binary(left, _tok(op), right)

    def unary(self, c):
        op, right = c
        return ast.Unary(_tok(op), right)

    def call(self, c):
        callee, args = c
        return ast.Call(callee, _synthetic(TT.RIGHT_PAREN, ")"), args or [])

    def arguments(self, c):
        if len(c) > MAX_ARGS:
            raise GrammarCheckError(f"Can't have more than {MAX_ARGS} arguments.")
        return list(c)

    def get(self, c):
        obj, name = c
        return ast.Get(obj, _ident(name))

    def true(self, c):
        return ast.Literal(True)

    def false(self, c):
        return ast.Literal(False)

    def nil(self, c):
        return ast.Literal(None)

    def this(self, c):
        return ast.This(_synthetic(TT.THIS, "this"))

    def number(self, c):
        return ast.Literal(float(c[0]))

    def string(self, c):
        return ast.Literal(str(c[0])[1:-1])

    def super_get(self, c):
        return ast.Super(_synthetic(TT.SUPER, "super"), _ident(c[0]))

    def variable(self, c):
        return ast.Variable(_ident(c[0]))

    def grouping(self, c):
        return ast.Grouping(c[0])


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

def lark_sexpr(source: str) -> Optional[str]:
    """Render the Lark-side tree, or None when the grammar rejects the source."""
    try:
        parsed = make_parser().parse(source)
        statements = ToAst().transform(parsed)
    except LarkError:
        # Transformer errors arrive wrapped in VisitError, a LarkError.
        return None

    return ast.sexpr(statements)

def rd_sexpr(source: str) -> Optional[str]:
    """Render the recursive-descent tree, or None when any error was reported."""
    lexer = Lexer(source)
    tokens = lexer.tokenize()
    parser = Parser(tokens)
    statements = parser.parse()

    if lexer.errors or parser.errors:
        return None

    return ast.sexpr(statements)

def check(source: str) -> Tuple[bool, str]:
    """Compare both parsers on `source`; returns (agree, detail)."""
    rd = rd_sexpr(source)
    lk = lark_sexpr(source)

    if rd is None and lk is None:
        return True, "both reject"
    if rd is None:
        return False, f"rd rejects, lark accepts: {lk}"
    if lk is None:
        return False, f"lark rejects, rd accepts: {rd}"
    if rd != lk:
        return False, f"tree mismatch:\n  rd:   {rd}\n  lark: {lk}"

    return True, rd


@dataclass(frozen=True)
class Case:
    """Named source sample for the cross-check."""
    name: str
    code: str


SAMPLES: List[Case] = [
    Case("empty", ""),
    Case("print-arith", "print 1 + 2 * 3 - 4 / 5;"),
    Case("grouping", "print (1 + 2) * 3;"),
    Case("unary-chain", "print !!true; print -(-1);"),
    Case("comparison", "print 1 < 2 == 3 >= 4;"),
    Case("logical", "print nil or false and true;"),
    Case("strings", 'var s = "multi\nline"; print s + "!";'),
    Case("comments", "// leading\nvar a = 1; // trailing\nprint a;"),
    Case("decimal", "print 12.5; print 3;"),
    Case("assign-chain", "var a; var b; a = b = 3;"),
    Case("const", "const limit = 10; print limit;"),
    Case("const-no-init", "const limit;"),
    Case("block", "{ var a = 1; { print a; } }"),
    Case("if-else", "if (a) print 1; else if (b) print 2; else print 3;"),
    Case("dangling-else", "if (a) if (b) print 1; else print 2;"),
    Case("while", "var i = 0; while (i < 3) i = i + 1;"),
    Case("for-full", "for (var i = 0; i < 3; i = i + 1) print i;"),
    Case("for-empty", "for (;;) print 1;"),
    Case("for-expr-init", "var i; for (i = 0; i < 2;) { print i; i = i + 1; }"),
    Case("fun", "fun add(a, b) { return a + b; } print add(1, 2);"),
    Case("fun-bare-return", "fun f() { return; }"),
    Case("closure", "fun make() { var n = 0; fun inc() { n = n + 1; return n; } return inc; }"),
    Case("curried-call", "f(1)(2)(3);"),
    Case(
        "class",
        "class A { init(x) { this.x = x; } get() { return this.x; } } print A(1).get();",
    ),
    Case("inherit", "class B < A { get() { return super.get() + 1; } }"),
    Case("set-chain", "a.b.c = 1;"),
    Case("keyword-prefix", "var classy = 1; var orchid = 2; print classy + orchid;"),
    # Rejections both sides must agree on.
    Case("invalid-target", "a + b = c;"),
    Case("invalid-group-target", "(a) = 1;"),
    Case("missing-semicolon", "print 1"),
    Case("unterminated-string", 'print "oops;'),
    Case("bad-char", "print 1 # 2;"),
    Case("super-no-dot", "class B < A { m() { super; } }"),
    Case("trailing-comma", "f(1, );"),
    Case("keyword-as-name", "var and = 1;"),
]


def run(cases: Sequence[Case]) -> Tuple[str, int]:
    """Check every case; returns the textual report and the failure count."""
    lines: List[str] = []
    failures = 0

    for case in cases:
        ok, detail = check(case.code)
        status = "PASS" if ok else "FAIL"
        if not ok:
            failures += 1
            lines.append(f"[{status}] {case.name}: {detail}")
        else:
            lines.append(f"[{status}] {case.name}")

    lines.append(f"\n{len(cases) - failures}/{len(cases)} cases agree")
    return "\n".join(lines), failures

def main(argv: Optional[List[str]]=None) -> int:
    ap = argparse.ArgumentParser(description="Cross-check parser_rd against grammar.lark")
    ap.add_argument("sources", nargs="*", help="Lox files to check (defaults to the built-in samples)")
    args = ap.parse_args(argv)

    cases: List[Case]
    if args.sources:
        cases = [Case(path, Path(path).read_text(encoding="utf-8")) for path in args.sources]
    else:
        cases = SAMPLES

    report, failures = run(cases)
    print(report)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
