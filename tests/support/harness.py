from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

BASE_DIR = Path(__file__).resolve().parent.parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))
if str(SRC_DIR) not in sys.path:
    sys.path.append(str(SRC_DIR))

from lox_ref import tree as ast
from lox_ref.evaluator import Interpreter
from lox_ref.lexer_rd import LexError, Lexer
from lox_ref.parser_rd import ParseError, Parser
from lox_ref.resolver import ResolveError, Resolver
from lox_ref.runner import Session, Status
from lox_ref.token_types import TT, Tok
from lox_ref.types import LoxRuntimeError

# (kind, message): kind is "compile" or "runtime".
ErrorExpectation = Optional[Tuple[str, str]]

KEYWORDS = Lexer.KEYWORDS


@dataclass
class RecordingReporter:
    """Reporter that keeps everything in memory instead of writing streams."""

    output_lines: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    runtime_errors: List[Tuple[str, Optional[int]]] = field(default_factory=list)

    def error(self, line: int, where: str, message: str) -> None:
        self.errors.append(f"[line {line}] Error{where}: {message}")

    def runtime_error(self, message: str, line: Optional[int]) -> None:
        self.runtime_errors.append((message, line))

    def output(self, text: str) -> None:
        self.output_lines.append(text)

    def clear(self) -> None:
        self.output_lines.clear()
        self.errors.clear()
        self.runtime_errors.clear()


@dataclass(frozen=True)
class RunResult:
    """Outcome of one program run through a recording session."""

    status: Status
    output: List[str]
    errors: List[str]
    runtime_errors: List[Tuple[str, Optional[int]]]


def make_session(clock: Optional[Callable[[], float]]=None) -> Tuple[Session, RecordingReporter]:
    reporter = RecordingReporter()
    return Session(reporter, clock=clock), reporter


def run_program(source: str, session: Optional[Session]=None) -> RunResult:
    """Run `source` and capture what it printed and reported."""
    if session is None:
        session, _ = make_session()

    reporter = session.reporter
    assert isinstance(reporter, RecordingReporter)
    reporter.clear()

    status = session.run(source)

    return RunResult(
        status=status,
        output=list(reporter.output_lines),
        errors=list(reporter.errors),
        runtime_errors=list(reporter.runtime_errors),
    )


def run_runtime_case(
    source: str,
    expected_output: Optional[List[str]],
    expected_error: ErrorExpectation,
) -> None:
    """Execute one scenario: check printed lines, then the expected error if any."""
    result = run_program(source)

    if expected_output is not None:
        assert result.output == expected_output, f"expected {expected_output!r}, got {result.output!r}"

    if expected_error is None:
        assert result.status is Status.OK, f"unexpected errors: {result.errors} {result.runtime_errors}"
        return

    kind, message = expected_error
    match kind:
        case "compile":
            assert result.status is Status.COMPILE_ERROR, f"expected compile error, got {result.status}"
            assert any(message in err for err in result.errors), f"{message!r} not in {result.errors!r}"
        case "runtime":
            assert result.status is Status.RUNTIME_ERROR, f"expected runtime error, got {result.status}"
            messages = [msg for msg, _ in result.runtime_errors]
            assert message in messages, f"{message!r} not in {messages!r}"
        case _:
            raise AssertionError(f"unknown error kind {kind}")


def scan(source: str) -> Tuple[List[Tok], List[LexError]]:
    lexer = Lexer(source)
    tokens = lexer.tokenize()
    return tokens, lexer.errors


def token_types(source: str) -> List[TT]:
    tokens, _ = scan(source)
    return [tok.type for tok in tokens]


def parse_program(source: str) -> Tuple[List[ast.Stmt], RecordingReporter]:
    reporter = RecordingReporter()
    lexer = Lexer(source, reporter)
    parser = Parser(lexer.tokenize(), reporter)
    return parser.parse(), reporter


def parse_sexpr(source: str) -> str:
    """Parse and render as prefix forms; fails the test on any parse error."""
    statements, reporter = parse_program(source)
    assert not reporter.errors, f"unexpected parse errors: {reporter.errors}"
    return ast.sexpr(statements)


def resolve_program(source: str) -> Tuple[Interpreter, List[ast.Stmt], RecordingReporter]:
    statements, reporter = parse_program(source)
    assert not reporter.errors, f"unexpected parse errors: {reporter.errors}"

    interpreter = Interpreter(reporter)
    Resolver(interpreter, reporter).resolve(statements)
    return interpreter, statements, reporter


__all__ = [
    "ErrorExpectation",
    "Interpreter",
    "KEYWORDS",
    "LexError",
    "LoxRuntimeError",
    "ParseError",
    "RecordingReporter",
    "ResolveError",
    "Resolver",
    "RunResult",
    "Session",
    "Status",
    "TT",
    "make_session",
    "parse_program",
    "parse_sexpr",
    "resolve_program",
    "run_program",
    "run_runtime_case",
    "scan",
    "token_types",
]
