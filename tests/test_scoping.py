from __future__ import annotations

from textwrap import dedent

import pytest

from lox_ref.runner import run_source
from tests.support.harness import (
    Frame,
    LoxNameError,
    LoxNumber,
    global_frame,
    run_runtime_case,
    run_strict,
)

SCENARIOS = [
    pytest.param(
        "var a = 1; var result = a;",
        ("number", 1),
        None,
        id="global-read",
    ),
    pytest.param(
        "var a = 1; var a = 2; var result = a;",
        ("number", 2),
        None,
        id="redeclare-overwrites",
    ),
    pytest.param(
        "var result = 1; { var result = 2; }",
        ("number", 1),
        None,
        id="block-shadow-not-visible-after",
    ),
    pytest.param(
        "var result = 1; { result = 2; }",
        ("number", 2),
        None,
        id="assign-reaches-outer",
    ),
    pytest.param(
        "var result = 0; { { { result = result + 3; } } }",
        ("number", 3),
        None,
        id="assign-through-nested-blocks",
    ),
    pytest.param(
        "var a = 1; var result = 0; { var a = a + 1; result = a; }",
        ("number", 2),
        None,
        id="shadow-initializer-sees-outer",
    ),
    pytest.param(
        "var result = x;",
        None,
        LoxNameError,
        id="read-undefined",
    ),
    pytest.param(
        "x = 1;",
        None,
        LoxNameError,
        id="assign-undefined",
    ),
    pytest.param(
        "{ var inner = 1; } var result = inner;",
        None,
        LoxNameError,
        id="block-local-gone",
    ),
    pytest.param(
        "var a = 1; var result = (a = 5) + 1;",
        ("number", 6),
        None,
        id="assignment-yields-value",
    ),
    pytest.param(
        "var result = clock;",
        ("function", "clock"),
        None,
        id="native-in-root",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_scoping(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_shadowing_prints_inner_then_outer(capsys: pytest.CaptureFixture[str]) -> None:
    run_source("var a = 1; { var a = 2; print a; } print a;")
    assert capsys.readouterr().out == "2\n1\n"


def test_undefined_variable_message() -> None:
    with pytest.raises(LoxNameError) as excinfo:
        run_strict("print missing;")

    assert excinfo.value.message == "Undefined variable 'missing'."
    assert excinfo.value.name == "missing"
    assert excinfo.value.line == 1


def test_frame_chain_lookup() -> None:
    root = Frame()
    child = root.enclosed()
    grandchild = child.enclosed()

    root.define("a", LoxNumber(1.0))
    child.define("b", LoxNumber(2.0))

    assert grandchild.get("a") == LoxNumber(1.0)
    assert grandchild.get("b") == LoxNumber(2.0)
    assert grandchild.depth() == 2

    grandchild.set("a", LoxNumber(9.0))
    assert root.get("a") == LoxNumber(9.0)

    with pytest.raises(LoxNameError):
        root.get("b")
    with pytest.raises(LoxNameError):
        grandchild.set("zzz", LoxNumber(0.0))


def test_define_shadows_without_touching_parent() -> None:
    root = Frame()
    child = root.enclosed()

    root.define("x", LoxNumber(1.0))
    child.define("x", LoxNumber(2.0))

    assert child.get("x") == LoxNumber(2.0)
    assert root.get("x") == LoxNumber(1.0)


def test_root_frames_are_independent() -> None:
    first = run_strict("var a = 1;")
    second = global_frame()

    assert first.get("a") == LoxNumber(1.0)
    with pytest.raises(LoxNameError):
        second.get("a")


def test_child_frames_inherit_scoping() -> None:
    root = global_frame("lexical")
    assert root.enclosed().enclosed().scoping == "lexical"
    assert global_frame().scoping == "dynamic"


def test_scoping_env_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOX_SCOPING", "lexical")
    assert global_frame().scoping == "lexical"

    monkeypatch.setenv("LOX_SCOPING", "bogus")
    assert global_frame().scoping == "dynamic"


DYNAMIC_VS_LEXICAL = dedent(
    """\
    var x = "global";
    fun show() { print x; }
    fun caller() {
        var x = "caller";
        show();
    }
    caller();
    """
)


def test_dynamic_scoping_sees_caller_locals(capsys: pytest.CaptureFixture[str]) -> None:
    run_source(DYNAMIC_VS_LEXICAL, scoping="dynamic")
    assert capsys.readouterr().out == "caller\n"


def test_lexical_scoping_sees_definition_site(capsys: pytest.CaptureFixture[str]) -> None:
    run_source(DYNAMIC_VS_LEXICAL, scoping="lexical")
    assert capsys.readouterr().out == "global\n"


def test_dynamic_callee_can_assign_caller_local(capsys: pytest.CaptureFixture[str]) -> None:
    source = dedent(
        """\
        fun bump() { n = n + 1; }
        fun outer() {
            var n = 10;
            bump();
            print n;
        }
        outer();
        """
    )
    run_source(source)
    assert capsys.readouterr().out == "11\n"


def test_lexical_closure_keeps_defining_block(capsys: pytest.CaptureFixture[str]) -> None:
    source = dedent(
        """\
        var f = nil;
        {
            var secret = "kept";
            fun reveal() { print secret; }
            f = reveal;
        }
        f();
        """
    )
    run_source(source, scoping="lexical")
    assert capsys.readouterr().out == "kept\n"


def test_dynamic_call_outside_defining_block_fails() -> None:
    source = dedent(
        """\
        var f = nil;
        {
            var secret = "kept";
            fun reveal() { print secret; }
            f = reveal;
        }
        f();
        """
    )
    with pytest.raises(LoxNameError):
        run_strict(source, scoping="dynamic")
