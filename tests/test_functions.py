from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import make_session, run_program, run_runtime_case, Status

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            fun add(a, b) { return a + b; }
            print add(1, 2);
            """
        ),
        ["3"],
        None,
        id="call-returns",
    ),
    pytest.param(
        dedent(
            """\
            fun noReturn() {}
            print noReturn();
            fun bareReturn() { return; }
            print bareReturn();
            """
        ),
        ["nil", "nil"],
        None,
        id="implicit-nil",
    ),
    pytest.param(
        dedent(
            """\
            fun f() {}
            print f;
            print clock;
            """
        ),
        ["<fn f>", "<native fn>"],
        None,
        id="stringify-callables",
    ),
    pytest.param(
        dedent(
            """\
            fun fib(n) {
              if (n < 2) return n;
              return fib(n - 1) + fib(n - 2);
            }
            print fib(15);
            """
        ),
        ["610"],
        None,
        id="recursion",
    ),
    pytest.param(
        dedent(
            """\
            fun first(n) {
              while (true) {
                for (var i = 0; ; i = i + 1) {
                  if (i == n) return i;
                }
              }
            }
            print first(4);
            """
        ),
        ["4"],
        None,
        id="return-unwinds-loops",
    ),
    pytest.param(
        dedent(
            """\
            fun makeCounter() {
              var i = 0;
              fun count() {
                i = i + 1;
                return i;
              }
              return count;
            }
            var a = makeCounter();
            var b = makeCounter();
            print a();
            print a();
            print a();
            print b();
            """
        ),
        ["1", "2", "3", "1"],
        None,
        id="independent-counters",
    ),
    pytest.param(
        dedent(
            """\
            var get;
            var set;
            fun pair() {
              var shared = "start";
              fun g() { return shared; }
              fun s(v) { shared = v; }
              get = g;
              set = s;
            }
            pair();
            set("changed");
            print get();
            """
        ),
        ["changed"],
        None,
        id="closures-share-frame",
    ),
    pytest.param(
        dedent(
            """\
            fun adder(x) {
              fun inner(y) { return x + y; }
              return inner;
            }
            print adder(2)(3);
            """
        ),
        ["5"],
        None,
        id="curried",
    ),
    pytest.param(
        dedent(
            """\
            fun f(a, b) { print "body ran"; }
            f(1);
            """
        ),
        [],
        ("runtime", "Expected 2 arguments but got 1."),
        id="arity-mismatch-skips-body",
    ),
    pytest.param("clock(1);", [], ("runtime", "Expected 0 arguments but got 1."), id="native-arity"),
    pytest.param('"str"();', [], ("runtime", "Can only call functions and classes."), id="call-string"),
    pytest.param("nil();", [], ("runtime", "Can only call functions and classes."), id="call-nil"),
    pytest.param(
        dedent(
            """\
            fun side() { print "arg evaluated"; return 1; }
            var notFn = 3;
            notFn(side());
            """
        ),
        ["arg evaluated"],
        ("runtime", "Can only call functions and classes."),
        id="args-evaluated-before-callee-check",
    ),
    pytest.param(
        "print current_state; print last_state;",
        ["0", "0"],
        None,
        id="host-state-globals",
    ),
]


@pytest.mark.parametrize("source, expected_output, expected_error", SCENARIOS)
def test_functions(source: str, expected_output, expected_error) -> None:
    run_runtime_case(source, expected_output, expected_error)


def test_clock_uses_injected_source() -> None:
    session, _ = make_session(clock=lambda: 42.5)
    result = run_program("print clock();", session)

    assert result.output == ["42.5"]


def test_clock_default_is_wall_time() -> None:
    result = run_program("var t = clock(); print t > 0;")
    assert result.output == ["true"]


def test_runaway_recursion_is_a_runtime_error() -> None:
    session, reporter = make_session()
    result = run_program("fun down() { down(); } down();", session)

    assert result.status is Status.RUNTIME_ERROR
    assert result.runtime_errors == [("Stack overflow.", None)]

    # The session survives and globals are still usable.
    after = run_program("print down;", session)
    assert after.output == ["<fn down>"]
