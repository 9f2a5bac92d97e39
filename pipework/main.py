from __future__ import annotations

import argparse
import json
import sys
from types import GeneratorType
from typing import Any, Sequence

from . import Context, ParseError, visualize
from .engine.resolve import run_sync


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        value = json.loads(args.input) if args.input is not None else None
    except json.JSONDecodeError as exc:
        print(f"[input error] {exc}", file=sys.stderr)
        return 2

    context = Context()
    if args.expression:
        return _run_once(context, args.expression, value, debug=args.debug)
    _interactive(context, value, debug=args.debug)
    return 0


def _run_once(context: Context, expression: str, value: Any, *, debug: bool) -> int:
    engine = context.engine
    try:
        if debug:
            print(visualize(engine.parse(context, expression)))
        result = run_sync(engine.evaluate(context, expression, value))
    except ParseError as exc:
        print(f"[parse error] {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # noqa: BLE001
        print(f"[execution error] {exc}", file=sys.stderr)
        return 1

    print(_dumps(result))
    return 0


def _interactive(context: Context, value: Any, *, debug: bool) -> None:
    engine = context.engine
    print("pipework interactive mode. Each result feeds the next line. Type 'exit' or Ctrl-D to quit.")

    while True:
        try:
            expression = input("pipework> ").strip()
        except EOFError:
            print()
            break

        if not expression:
            continue
        if expression.lower() in {"exit", "quit"}:
            break

        try:
            if debug:
                print("Functor tree:")
                print(visualize(engine.parse(context, expression)))
            value = run_sync(engine.evaluate(context, expression, value))
        except ParseError as exc:
            print(f"[parse error] {exc}")
            continue
        except Exception as exc:  # noqa: BLE001
            print(f"[execution error] {exc}")
            continue

        print(_dumps(value))


def _jsonable(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, GeneratorType):
        return list(value)
    return repr(value)


def _dumps(value: Any) -> str:
    return json.dumps(value, indent=2, default=_jsonable)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pipework",
        description="Apply pipework expressions such as 'map upper | join -' to JSON input.",
    )
    parser.add_argument(
        "expression",
        nargs="?",
        default=None,
        help="Expression to evaluate; omit to start the interactive shell.",
    )
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="JSON value fed to the first step.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print the parsed functor tree before evaluating.",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    sys.exit(main())
