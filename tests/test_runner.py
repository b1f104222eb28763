from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from lox_ref.runner import (
    EXIT_DATAERR,
    EXIT_SOFTWARE,
    EXIT_USAGE,
    main,
    repl_eval,
    run,
    run_file,
    scan_and_parse,
)
from tests.support.harness import (
    LoxNameError,
    LoxNil,
    LoxNumber,
    ParseError,
    global_frame,
)

SCOPING_PROBE = dedent(
    """\
    var x = "global";
    fun show() { print x; }
    fun caller() { var x = "caller"; show(); }
    caller();
    """
)


def _script(tmp_path: Path, source: str) -> str:
    path = tmp_path / "script.lox"
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_scan_and_parse_returns_statements() -> None:
    program = scan_and_parse("var a = 1; print a;")
    assert [stmt.data for stmt in program] == ["vardecl", "printstmt"]


def test_scan_and_parse_raises_with_all_errors() -> None:
    with pytest.raises(ParseError) as excinfo:
        scan_and_parse("var;\nprint;\n")
    assert len(excinfo.value.errors) == 2


def test_run_returns_root_frame() -> None:
    frame = run(scan_and_parse("var a = 1; var b = a + 1;"))
    assert frame.get("b") == LoxNumber(2.0)


def test_run_reuses_given_frame() -> None:
    frame = global_frame()
    run(scan_and_parse("var a = 1;"), frame=frame)
    run(scan_and_parse("a = a + 41;"), frame=frame)
    assert frame.get("a") == LoxNumber(42.0)


def test_run_file_success(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _script(tmp_path, "for (var i = 0; i < 3; i = i + 1) print i;")

    assert run_file(path) == 0
    assert capsys.readouterr().out == "0\n1\n2\n"


def test_run_file_parse_error_runs_nothing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _script(tmp_path, 'print "first";\nvar = 2;\nprint 3\n')

    assert run_file(path) == EXIT_DATAERR
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[line 2] Error at '=': Expect variable name." in captured.err
    assert "[line 4] Error at end: Expect ';' after value." in captured.err


def test_run_file_runtime_error_keeps_going(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _script(tmp_path, "print 1;\nprint nope;\nprint 3;\n")

    assert run_file(path) == EXIT_SOFTWARE
    captured = capsys.readouterr()
    assert captured.out == "1\n3\n"
    assert "Undefined variable 'nope'. [line 2]" in captured.err


def test_run_file_lex_error_is_reported_not_fatal(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _script(tmp_path, "print 1; @\nprint 2;\n")

    assert run_file(path) == 0
    captured = capsys.readouterr()
    assert captured.out == "1\n2\n"
    assert "[line 1] Error: Unexpected character '@'." in captured.err


def test_main_runs_script(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main([_script(tmp_path, 'print "hi";')])
    assert capsys.readouterr().out == "hi\n"


@pytest.mark.parametrize(
    "flags, expected",
    [
        pytest.param([], "caller\n", id="default-dynamic"),
        pytest.param(["--dynamic"], "caller\n", id="flag-dynamic"),
        pytest.param(["--lexical"], "global\n", id="flag-lexical"),
        pytest.param(["--scoping=lexical"], "global\n", id="flag-scoping-eq"),
    ],
)
def test_main_scoping_flags(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    flags: list,
    expected: str,
) -> None:
    main([*flags, _script(tmp_path, SCOPING_PROBE)])
    assert capsys.readouterr().out == expected


def test_main_env_scoping(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("LOX_SCOPING", "lexical")
    main([_script(tmp_path, SCOPING_PROBE)])
    assert capsys.readouterr().out == "global\n"


def test_main_exit_codes(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([_script(tmp_path, "print ;")])
    assert excinfo.value.code == EXIT_DATAERR

    with pytest.raises(SystemExit) as excinfo:
        main([_script(tmp_path, "nil();")])
    assert excinfo.value.code == EXIT_SOFTWARE


def test_main_usage_error(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["one.lox", "two.lox"])

    assert excinfo.value.code == EXIT_USAGE
    assert "Usage:" in capsys.readouterr().err


def test_main_rejects_unknown_scoping() -> None:
    with pytest.raises(SystemExit):
        main(["--scoping=static", "x.lox"])


def test_main_without_script_starts_repl(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = {}

    def fake_repl(scoping=None):
        seen["scoping"] = scoping

    import lox_ref.repl

    monkeypatch.setattr(lox_ref.repl, "repl", fake_repl)
    main(["--lexical"])
    assert seen == {"scoping": "lexical"}


def test_repl_eval_statement_keeps_state(capsys: pytest.CaptureFixture[str]) -> None:
    frame = global_frame()

    value, is_stmt = repl_eval("var a = 2;", frame)
    assert is_stmt and isinstance(value, LoxNil)

    value, is_stmt = repl_eval("print a * 3;", frame)
    assert is_stmt
    assert capsys.readouterr().out == "6\n"


def test_repl_eval_bare_expression() -> None:
    frame = global_frame()
    repl_eval("var a = 2;", frame)

    value, is_stmt = repl_eval("a + 1", frame)
    assert not is_stmt
    assert value == LoxNumber(3.0)


def test_repl_eval_bare_expression_raises_runtime_errors() -> None:
    with pytest.raises(LoxNameError):
        repl_eval("missing + 1", global_frame())


def test_repl_eval_reports_program_error_when_not_expression() -> None:
    with pytest.raises(ParseError) as excinfo:
        repl_eval("var = 1;", global_frame())
    assert excinfo.value.message == "Expect variable name."
