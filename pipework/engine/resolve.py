from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Iterable, List


def is_awaitable(value: Any) -> bool:
    return inspect.isawaitable(value)


def then(value: Any, callback: Callable[[Any], Any]) -> Any:
    """
    Apply ``callback`` to ``value`` now, or once ``value`` resolves if it is awaitable.
    """
    if not is_awaitable(value):
        return callback(value)
    return _then_async(value, callback)


async def _then_async(value: Awaitable[Any], callback: Callable[[Any], Any]) -> Any:
    result = callback(await value)
    if is_awaitable(result):
        result = await result
    return result


async def resolve(value: Any) -> Any:
    if is_awaitable(value):
        return await value
    return value


def has_awaitable(values: Iterable[Any]) -> bool:
    return any(is_awaitable(value) for value in values)


async def gather_mixed(values: List[Any]) -> List[Any]:
    """Await every awaitable in ``values`` concurrently, keeping positions."""
    pending = [(index, value) for index, value in enumerate(values) if is_awaitable(value)]
    if not pending:
        return list(values)
    results = await asyncio.gather(*(value for _, value in pending))
    resolved = list(values)
    for (index, _), result in zip(pending, results):
        resolved[index] = result
    return resolved


def run_sync(value: Any) -> Any:
    """Drive an awaitable to completion on a fresh event loop; plain values pass through."""
    if not is_awaitable(value):
        return value
    return asyncio.run(resolve(value))
