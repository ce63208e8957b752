"""Interactive REPL for Lox, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
from typing import Callable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.shortcuts import clear

from .repl_highlight import LoxLexer
from .runner import Session
from .utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled

PROMPT = "> "

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on runtime errors", "[on|off]"),
    "/reset": ("Reset the global environment", ""),
}


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _set_py_traceback(arg: str) -> bool:
    """Apply a /py-traceback argument; False when the argument is not recognised."""
    arg = arg.lower()

    if arg in ("on", "1", "true", "yes"):
        os.environ[DEBUG_PY_TRACE_ENV] = "1"
    elif arg in ("off", "0", "false", "no"):
        os.environ.pop(DEBUG_PY_TRACE_ENV, None)
    elif arg == "":
        # Toggle.
        if debug_py_trace_enabled():
            os.environ.pop(DEBUG_PY_TRACE_ENV, None)
        else:
            os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        return False

    return True


def handle_slash(line: str, session_box: list[Session]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if not _set_py_traceback(arg):
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        old = session_box[0]
        session_box[0] = Session(old.reporter, clock=old.interpreter.clock)
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _make_reader() -> Callable[[], Optional[str]]:
    """Line source: prompt_toolkit on a terminal, plain stdin otherwise.

    Returns None at end of input.
    """
    if not sys.stdin.isatty():
        def read_plain() -> Optional[str]:
            print(PROMPT, end="", flush=True)
            line = sys.stdin.readline()
            if not line:
                return None
            return line.rstrip("\n")

        return read_plain

    prompt_session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=LoxLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
    )

    def read_tty() -> Optional[str]:
        while True:
            try:
                return prompt_session.prompt(PROMPT)
            except EOFError:
                return None
            except KeyboardInterrupt:
                print("KeyboardInterrupt")

    return read_tty


def repl(session: Optional[Session]=None, read_line: Optional[Callable[[], Optional[str]]]=None) -> None:
    """Read-eval-print loop over one persistent session.

    Each line is compiled and run on its own; globals carry over and errors
    only abandon the current line. End of input or an empty line exits.
    """
    session_box: list[Session] = [session or Session()]
    reader = read_line or _make_reader()

    while True:
        text = reader()
        if text is None:
            print()
            break

        text = _normalize(text)
        if not text.strip():
            break

        if handle_slash(text, session_box):
            continue

        session_box[0].run(text)
