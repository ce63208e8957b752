from __future__ import annotations

import os
from typing import Iterator, List, Optional

import pytest
from prompt_toolkit.document import Document

from lox_ref.repl import handle_slash, repl
from lox_ref.repl_highlight import GROUP_STYLE, LoxLexer, _highlight_line, token_group
from lox_ref.runner import Session
from lox_ref.token_types import TT
from lox_ref.utils import DEBUG_PY_TRACE_ENV, ConsoleReporter


def _reader(lines: List[Optional[str]]):
    it: Iterator[Optional[str]] = iter(lines)
    return lambda: next(it)


def test_repl_runs_lines_against_one_session(capsys: pytest.CaptureFixture[str]) -> None:
    lines = [
        "var a = 1;",
        "print a + 1;",
        "print nope;",
        "print a;",
        "",
        "print 99;",
    ]
    repl(Session(ConsoleReporter()), _reader(lines))

    captured = capsys.readouterr()
    # The empty line ends the loop before `print 99;`.
    assert captured.out == "2\n1\n"
    assert captured.err == "Undefined variable 'nope'.\n[line 1]\n"


def test_repl_compile_error_does_not_end_loop(capsys: pytest.CaptureFixture[str]) -> None:
    repl(Session(ConsoleReporter()), _reader(["print ;", "print 2;", None]))

    captured = capsys.readouterr()
    assert captured.out == "2\n\n"
    assert "Expect expression." in captured.err


def test_repl_reset_drops_globals(capsys: pytest.CaptureFixture[str]) -> None:
    repl(Session(ConsoleReporter()), _reader(["var a = 1;", "/reset", "print a;", None]))

    captured = capsys.readouterr()
    assert "Environment reset." in captured.out
    assert "Undefined variable 'a'." in captured.err


def test_py_traceback_command(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    # Registers the variable with monkeypatch so teardown restores it.
    monkeypatch.setenv(DEBUG_PY_TRACE_ENV, "0")
    box = [Session(ConsoleReporter())]

    assert handle_slash("/py-traceback on", box)
    assert os.environ[DEBUG_PY_TRACE_ENV] == "1"

    assert handle_slash("/py-traceback", box)
    assert DEBUG_PY_TRACE_ENV not in os.environ

    assert handle_slash("/py-traceback maybe", box)
    assert "Usage: /py-traceback [on|off]" in capsys.readouterr().err


def test_unknown_slash_command(capsys: pytest.CaptureFixture[str]) -> None:
    box = [Session(ConsoleReporter())]

    assert handle_slash("/nope", box)
    assert "Unknown command: /nope" in capsys.readouterr().err
    assert not handle_slash("print 1;", box)


HIGHLIGHT_CASES = [
    pytest.param(TT.VAR, "keyword", id="keyword"),
    pytest.param(TT.TRUE, "boolean", id="boolean"),
    pytest.param(TT.NIL, "constant", id="nil"),
    pytest.param(TT.NUMBER, "number", id="number"),
    pytest.param(TT.STRING, "string", id="string"),
    pytest.param(TT.IDENTIFIER, "identifier", id="identifier"),
    pytest.param(TT.EQUAL_EQUAL, "operator", id="operator"),
    pytest.param(TT.SEMICOLON, "punctuation", id="punctuation"),
]


@pytest.mark.parametrize("tt, group", HIGHLIGHT_CASES)
def test_token_groups(tt: TT, group: str) -> None:
    assert token_group(tt) == group


def test_highlight_covers_whole_line() -> None:
    line = 'var greeting = "hi"; // say hello'
    fragments = _highlight_line(line)

    assert "".join(text for _, text in fragments) == line
    assert fragments[0] == (GROUP_STYLE["keyword"], "var")
    assert (GROUP_STYLE["string"], '"hi"') in fragments
    assert fragments[-1] == (GROUP_STYLE["comment"], "// say hello")


def test_highlight_tolerates_unterminated_string() -> None:
    line = 'print "open'
    fragments = _highlight_line(line)

    assert "".join(text for _, text in fragments) == line
    assert fragments[0] == (GROUP_STYLE["keyword"], "print")


def test_lexer_lines_are_cached() -> None:
    get_line = LoxLexer().lex_document(Document("print 1;\nclass A {}"))

    assert get_line(1)[0] == (GROUP_STYLE["keyword"], "class")
    assert get_line(1) is get_line(1)
    assert get_line(5) == [("", "")]
