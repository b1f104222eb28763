from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from lark import Tree

from .evaluator import eval_expr, execute
from .parser_rd import ParseError, parse_expression_source, parse_source
from .runtime import Frame, LoxNil, LoxRuntimeError, LoxValue, global_frame
from .utils import SCOPING_MODES, debug_py_trace_enabled

EXIT_USAGE = 64
EXIT_DATAERR = 65
EXIT_SOFTWARE = 70

ErrorHook = Callable[[LoxRuntimeError], None]

def report_runtime_error(exc: LoxRuntimeError) -> None:
    print(f"RuntimeError: {exc}", file=sys.stderr)

    if debug_py_trace_enabled() and exc.__traceback__ is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def report_parse_error(exc: ParseError) -> None:
    for err in exc.errors:
        print(str(err), file=sys.stderr)

# ---------------- Core entry points ----------------

def scan_and_parse(source: str) -> List[Tree]:
    """Source text -> program. Lexical errors are reported; parse errors raise."""
    return parse_source(source)

def run(
    program: List[Tree],
    frame: Optional[Frame] = None,
    scoping: Optional[str] = None,
    on_error: ErrorHook = report_runtime_error,
) -> Frame:
    """
    Execute a program statement by statement against one root frame.

    A runtime error aborts only the statement that raised it; it is handed
    to `on_error` and execution resumes with the next top-level statement.
    """
    if frame is None:
        frame = global_frame(scoping)

    for stmt in program:
        try:
            execute(stmt, frame)
        except LoxRuntimeError as exc:
            on_error(exc)

    return frame

def run_source(
    source: str,
    frame: Optional[Frame] = None,
    scoping: Optional[str] = None,
    on_error: ErrorHook = report_runtime_error,
) -> Frame:
    return run(scan_and_parse(source), frame=frame, scoping=scoping, on_error=on_error)

def repl_eval(text: str, frame: Frame) -> Tuple[LoxValue, bool]:
    """
    Evaluate one unit of interactive input.

    Returns (value, is_statement). Input that is not a valid program but is
    a bare expression (no trailing ';') is evaluated and its value returned.
    """
    try:
        program = scan_and_parse(text)
    except ParseError as exc:
        try:
            expr = parse_expression_source(text, report=None)
        except ParseError:
            raise exc from None
        return eval_expr(expr, frame), False

    run(program, frame=frame)
    return LoxNil(), True

# ---------------- CLI ----------------

def run_file(path: str, scoping: Optional[str] = None) -> int:
    source = Path(path).read_text(encoding="utf-8") if path != "-" else sys.stdin.read()
    return _run_text(source, scoping)

def _run_text(source: str, scoping: Optional[str]) -> int:
    try:
        program = scan_and_parse(source)
    except ParseError as exc:
        report_parse_error(exc)
        return EXIT_DATAERR

    failures: List[LoxRuntimeError] = []

    def on_error(exc: LoxRuntimeError) -> None:
        failures.append(exc)
        report_runtime_error(exc)

    run(program, scoping=scoping, on_error=on_error)
    return EXIT_SOFTWARE if failures else 0

def main(argv: Optional[List[str]] = None) -> None:
    scoping: Optional[str] = None
    arg = None
    it = iter(sys.argv[1:] if argv is None else argv)

    for token in it:
        if token.startswith("--") and token[2:] in SCOPING_MODES:
            scoping = token[2:]
            continue

        if token.startswith("--scoping="):
            scoping = token.split("=", 1)[1]
            if scoping not in SCOPING_MODES:
                raise SystemExit(f"Unknown scoping mode: {scoping}")
            continue

        if arg is None:
            arg = token
        else:
            print("Usage: lox-ref [--lexical|--dynamic] [script]", file=sys.stderr)
            raise SystemExit(EXIT_USAGE)

    if arg is None:
        from .repl import repl  # prompt_toolkit is only needed interactively
        repl(scoping=scoping)
        return

    code = run_file(arg, scoping=scoping)
    if code:
        raise SystemExit(code)

if __name__ == "__main__":
    main()
