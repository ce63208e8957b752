from __future__ import annotations

import os as _os
import sys
import traceback
from typing import Optional, TextIO

DEBUG_PY_TRACE_ENV = "LOX_DEBUG_PY_TRACE"


def debug_py_trace_enabled() -> bool:
    """Check whether runtime errors should also dump the Python traceback."""
    return _os.environ.get(DEBUG_PY_TRACE_ENV, "").lower() in ("1", "true", "yes", "on")


def print_py_trace(exc: BaseException, file: Optional[TextIO]=None) -> None:
    stream = sys.stderr if file is None else file
    print("\nPython traceback:", file=stream)
    print("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), file=stream, end="")


class ConsoleReporter:
    """Default host sinks: program output to stdout, diagnostics to stderr.

    Streams are looked up on each call so pytest's capsys and REPL
    redirection see the output.
    """

    def __init__(self, out: Optional[TextIO]=None, err: Optional[TextIO]=None):
        self._out = out
        self._err = err

    @property
    def out(self) -> TextIO:
        return sys.stdout if self._out is None else self._out

    @property
    def err(self) -> TextIO:
        return sys.stderr if self._err is None else self._err

    def error(self, line: int, where: str, message: str) -> None:
        print(f"[line {line}] Error{where}: {message}", file=self.err)

    def runtime_error(self, message: str, line: Optional[int]) -> None:
        if line is None:
            print(message, file=self.err)
            return

        print(f"{message}\n[line {line}]", file=self.err)

    def output(self, text: str) -> None:
        print(text, file=self.out)
