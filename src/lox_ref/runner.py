from __future__ import annotations

import sys
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from . import tree as ast
from .evaluator import Interpreter
from .lexer_rd import Lexer
from .parser_rd import Parser
from .resolver import Resolver
from .types import Reporter
from .utils import ConsoleReporter, debug_py_trace_enabled, print_py_trace

# sysexits.h
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70

USAGE = "Usage: lox-ref [script]"

NESTING_TOO_DEEP = "Expression nesting too deep."

# Each Lox call costs roughly a dozen Python frames.
RECURSION_LIMIT = 10000


class Status(Enum):
    OK = "ok"
    COMPILE_ERROR = "compile_error"
    RUNTIME_ERROR = "runtime_error"


class Session:
    """
    One interpreter session: a persistent Interpreter (globals survive across
    runs) plus the error flags of the most recent run.
    """

    def __init__(self, reporter: Optional[Reporter]=None, clock: Optional[Callable[[], float]]=None):
        self.reporter: Reporter = reporter or ConsoleReporter()
        self.interpreter = Interpreter(self.reporter, clock=clock)
        self.had_error = False
        self.had_runtime_error = False

    def compile(self, source: str) -> Optional[List[ast.Stmt]]:
        """Scan, parse and resolve; None when any compile-time error was reported."""
        self.had_error = False

        lexer = Lexer(source, self.reporter)
        tokens = lexer.tokenize()

        # Scan errors still let the parser run so its errors get reported too.
        parser = Parser(tokens, self.reporter)
        try:
            statements = parser.parse()
        except RecursionError:
            parser.error(parser.peek(), NESTING_TOO_DEEP)
            statements = []

        if lexer.errors or parser.errors:
            self.had_error = True
            return None

        resolver = Resolver(self.interpreter, self.reporter)
        try:
            resolver.resolve(statements)
        except RecursionError:
            resolver.error(tokens[-1], NESTING_TOO_DEEP)

        if resolver.errors:
            self.had_error = True
            return None

        return statements

    def run(self, source: str) -> Status:
        self.had_runtime_error = False

        statements = self.compile(source)
        if statements is None:
            return Status.COMPILE_ERROR

        err = self.interpreter.interpret(statements)
        if err is not None:
            self.had_runtime_error = True
            if debug_py_trace_enabled():
                print_py_trace(err)
            return Status.RUNTIME_ERROR

        return Status.OK


def run(src: str, session: Optional[Session]=None) -> Status:
    if session is None:
        session = Session()

    return session.run(src)


def run_file(path: str, session: Optional[Session]=None) -> int:
    try:
        source = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        print(f"Could not read '{path}': {exc.strerror}", file=sys.stderr)
        return EX_NOINPUT

    status = run(source, session)

    if status is Status.COMPILE_ERROR:
        return EX_DATAERR
    if status is Status.RUNTIME_ERROR:
        return EX_SOFTWARE

    return 0


def main(argv: Optional[List[str]]=None) -> int:
    args = sys.argv[1:] if argv is None else argv

    if len(args) > 1:
        print(USAGE)
        return EX_USAGE

    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    if len(args) == 1:
        return run_file(args[0])

    from .repl import repl  # prompt_toolkit is only needed interactively
    repl()
    return 0


if __name__ == "__main__":
    sys.exit(main())
