from __future__ import annotations

import asyncio
import json
from functools import partial
from typing import Any, Callable, Dict, List

from .accessors import get, omit, pick
from .containers import reduce_
from .functors import always, identity
from .logic import eq, gt, gte, lt, lte
from .resolve import then
from .transducers import Transducer, transform


def get_default_steps() -> Dict[str, Callable[..., Callable[..., Any]]]:
    return {
        "identity": lambda: identity,
        "const": always,
        "upper": lambda: str.upper,
        "lower": lambda: str.lower,
        "strip": lambda: str.strip,
        "title": lambda: str.title,
        "split": _split,
        "join": _join,
        "len": lambda: len,
        "sum": lambda: reduce_(lambda acc, item: acc + item, 0),
        "sorted": lambda: sorted,
        "reverse": lambda: _reverse,
        "unique": lambda: lambda value: list(dict.fromkeys(value)),
        "take": lambda count: transform(Transducer.take(count), []),
        "keys": lambda: lambda value: list(value.keys()),
        "values": lambda: lambda value: list(value.values()),
        "int": lambda: int,
        "float": lambda: float,
        "str": lambda: str,
        "add": lambda operand: lambda value: value + operand,
        "sub": lambda operand: lambda value: value - operand,
        "mul": lambda operand: lambda value: value * operand,
        "get": get,
        "pick": lambda *keys: pick(keys),
        "omit": lambda *keys: omit(keys),
        "eq": lambda operand: eq(identity, operand),
        "gt": lambda operand: gt(identity, operand),
        "lt": lambda operand: lt(identity, operand),
        "gte": lambda operand: gte(identity, operand),
        "lte": lambda operand: lte(identity, operand),
        "dumps": lambda: json.dumps,
        "loads": lambda: json.loads,
        "sleep": _sleep,
    }


def get_default_system_funcs() -> Dict[str, Callable[..., Any]]:
    return {
        "history": history_command,
        "steps": steps_command,
        "run": run_command,
    }


def _split(separator: str | None = None) -> Callable[[str], List[str]]:
    def split(value: str) -> List[str]:
        return value.split(separator)

    return split


def _join(separator: str = "") -> Callable[[Any], str]:
    def join(value: Any) -> str:
        return separator.join(str(item) for item in value)

    return join


def _reverse(value: Any) -> Any:
    if isinstance(value, (str, list, tuple)):
        return value[::-1]
    return list(reversed(list(value)))


def _sleep(seconds: float) -> Callable[[Any], Any]:
    """Asynchronous identity that resolves after ``seconds``."""

    async def sleep(value: Any) -> Any:
        await asyncio.sleep(seconds)
        return value

    return sleep


def history_command(value: Any, context, *_: str) -> List[str]:
    return context.history


def steps_command(value: Any, context, *_: str) -> List[str]:
    return sorted(context.steps)


def run_command(value: Any, context, *expressions: str) -> Any:
    """Run stored expressions one after another, threading the value through them."""
    if not expressions:
        raise ValueError("run requires at least one expression.")

    result = value
    for expression in expressions:
        result = then(result, partial(context.engine.evaluate, context, expression))
    return result
