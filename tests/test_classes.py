from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import run_runtime_case

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            class Point {}
            print Point;
            print Point();
            """
        ),
        ["Point", "Point instance"],
        None,
        id="stringify-class-and-instance",
    ),
    pytest.param(
        dedent(
            """\
            class Point {
              init(x, y) {
                this.x = x;
                this.y = y;
              }
              sum() { return this.x + this.y; }
            }
            var p = Point(1, 2);
            print p.x;
            print p.sum();
            """
        ),
        ["1", "3"],
        None,
        id="init-and-method",
    ),
    pytest.param(
        dedent(
            """\
            class Box {}
            var b = Box();
            b.value = "stored";
            print b.value;
            b.value = "replaced";
            print b.value;
            """
        ),
        ["stored", "replaced"],
        None,
        id="fields-set-and-get",
    ),
    pytest.param(
        dedent(
            """\
            class A {
              m() { return "method"; }
            }
            var a = A();
            a.m = "field";
            print a.m;
            """
        ),
        ["field"],
        None,
        id="field-shadows-method",
    ),
    pytest.param(
        dedent(
            """\
            class Person {
              init(name) { this.name = name; }
              greet() { print "hi " + this.name; }
            }
            var greet = Person("ann").greet;
            greet();
            """
        ),
        ["hi ann"],
        None,
        id="bound-method-keeps-this",
    ),
    pytest.param(
        dedent(
            """\
            class A {
              init() { this.n = 1; return; }
            }
            var a = A();
            print a.init();
            print a.n;
            """
        ),
        ["A instance", "1"],
        None,
        id="init-returns-this",
    ),
    pytest.param(
        dedent(
            """\
            class Counter {
              init() { this.count = 0; }
              bump() { this.count = this.count + 1; return this; }
            }
            print Counter().bump().bump().count;
            """
        ),
        ["2"],
        None,
        id="method-chaining",
    ),
    pytest.param(
        dedent(
            """\
            class A {
              hello() { print "A hello"; }
            }
            class B < A {}
            B().hello();
            """
        ),
        ["A hello"],
        None,
        id="inherited-method",
    ),
    pytest.param(
        dedent(
            """\
            class Base {
              init(x) { this.x = x; }
            }
            class Derived < Base {}
            print Derived(7).x;
            """
        ),
        ["7"],
        None,
        id="inherited-initializer",
    ),
    pytest.param(
        dedent(
            """\
            class A {
              method() { print "A method"; }
            }
            class B < A {
              method() { print "B method"; }
              test() { super.method(); }
            }
            class C < B {}
            C().test();
            """
        ),
        ["A method"],
        None,
        id="super-is-static",
    ),
    pytest.param(
        dedent(
            """\
            class A {
              say() { return "A"; }
            }
            class B < A {
              say() { return "B>" + super.say(); }
            }
            class C < B {
              say() { return "C>" + super.say(); }
            }
            print C().say();
            """
        ),
        ["C>B>A"],
        None,
        id="super-chain-three-levels",
    ),
    pytest.param(
        dedent(
            """\
            class A {
              init(v) { this.v = v; }
            }
            class B < A {
              init(v) { super.init(v * 2); }
            }
            print B(5).v;
            """
        ),
        ["10"],
        None,
        id="super-init",
    ),
    pytest.param(
        dedent(
            """\
            class Node {
              init(next) { this.next = next; }
              depth() {
                if (this.next == nil) return 1;
                return 1 + this.next.depth();
              }
            }
            print Node(Node(Node(nil))).depth();
            """
        ),
        ["3"],
        None,
        id="class-refers-to-itself",
    ),
    pytest.param(
        "class A {} A(1);",
        [],
        ("runtime", "Expected 0 arguments but got 1."),
        id="no-init-takes-no-args",
    ),
    pytest.param(
        "class A { init(a) {} } A();",
        [],
        ("runtime", "Expected 1 arguments but got 0."),
        id="init-arity",
    ),
    pytest.param(
        "class A {} print A().missing;",
        [],
        ("runtime", "Undefined property 'missing'."),
        id="undefined-property",
    ),
    pytest.param(
        "var x = 1; print x.y;",
        [],
        ("runtime", "Only instances have properties."),
        id="get-on-number",
    ),
    pytest.param(
        'var s = "str"; s.y = 1;',
        [],
        ("runtime", "Only instances have fields."),
        id="set-on-string",
    ),
    pytest.param(
        "var NotClass = 1; class A < NotClass {}",
        [],
        ("runtime", "Superclass must be a class."),
        id="superclass-not-class",
    ),
    pytest.param(
        dedent(
            """\
            class A {}
            class B < A {
              m() { return super.missing(); }
            }
            B().m();
            """
        ),
        [],
        ("runtime", "Undefined property 'missing'."),
        id="super-missing-method",
    ),
]


@pytest.mark.parametrize("source, expected_output, expected_error", SCENARIOS)
def test_classes(source: str, expected_output, expected_error) -> None:
    run_runtime_case(source, expected_output, expected_error)
