from __future__ import annotations

import array
import asyncio
from collections.abc import AsyncIterable, Iterable, Iterator, Mapping
from types import GeneratorType
from typing import Any, AsyncIterator, Callable, List, Tuple

from ..config import get_settings
from .functors import Functor, UnsupportedTypeError, _require_callable, describe
from .resolve import gather_mixed, has_awaitable, is_awaitable, resolve, then

MISSING = object()

Builder = Callable[[List[Any]], Any]

_SPLICEABLE = (list, tuple, set, frozenset, GeneratorType)


class Reduced:
    """Wraps an accumulator to stop a fold early."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Reduced({self.value!r})"


def unreduced(value: Any) -> Any:
    return value.value if isinstance(value, Reduced) else value


def container_kind(value: Any) -> str:
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, str):
        return "str"
    if isinstance(value, (bytes, bytearray)):
        return "bytes"
    if isinstance(value, array.array):
        return "array"
    if isinstance(value, (set, frozenset)):
        return "set"
    if isinstance(value, list):
        return "list"
    if isinstance(value, tuple):
        return "tuple"
    if isinstance(value, AsyncIterable):
        return "async"
    if isinstance(value, Iterator):
        return "iterator"
    if isinstance(value, Iterable):
        return "iterable"
    raise UnsupportedTypeError(f"Cannot iterate over a value of type {type(value).__name__}.")


def rebuild(kind: str, original: Any, items: List[Any]) -> Any:
    """Build a container of the same kind as ``original`` from ``items``."""
    if kind == "list" or kind == "iterable" or kind == "iterator":
        return list(items)
    if kind == "tuple":
        return tuple(items)
    if kind == "str":
        return "".join(str(item) for item in items)
    if kind == "bytes":
        return bytearray(items) if isinstance(original, bytearray) else bytes(items)
    if kind == "array":
        return array.array(original.typecode, items)
    if kind == "set":
        return frozenset(items) if isinstance(original, frozenset) else set(items)
    raise UnsupportedTypeError(f"Cannot rebuild a container of kind {kind!r}.")


def eager_items(value: Any, kind: str) -> Tuple[List[Any], Builder]:
    if kind == "mapping":
        keys = list(value.keys())
        return [value[key] for key in keys], lambda results: dict(zip(keys, results))
    return list(value), lambda results: rebuild(kind, value, results)


def collect(results: List[Any], build: Builder) -> Any:
    if has_awaitable(results):
        return then(gather_mixed(results), build)
    return build(results)


def _discard(awaitable: Any) -> None:
    close = getattr(awaitable, "close", None)
    if close is not None:
        close()


def fold(reducer: Callable[[Any, Any], Any], acc: Any, items: Iterable[Any]) -> Any:
    """
    Left fold that stays synchronous until the reducer returns an awaitable.

    A ``Reduced`` accumulator is returned as-is, still wrapped, so nested folds
    can propagate early termination.
    """
    iterator = iter(items)
    if is_awaitable(acc):
        return _fold_async(reducer, acc, iterator)
    if isinstance(acc, Reduced):
        return acc
    for item in iterator:
        acc = reducer(acc, item)
        if is_awaitable(acc):
            return _fold_async(reducer, acc, iterator)
        if isinstance(acc, Reduced):
            return acc
    return acc


async def _fold_async(reducer: Callable[[Any, Any], Any], pending: Any, iterator: Iterator[Any]) -> Any:
    acc = await pending
    if isinstance(acc, Reduced):
        return acc
    for item in iterator:
        acc = await resolve(reducer(acc, item))
        if isinstance(acc, Reduced):
            return acc
    return acc


class Map(Functor):
    """Applies a mapper to every item of a container, keeping the container type."""

    label = "map"

    def __init__(self, mapper: Callable[[Any], Any]) -> None:
        self.mapper = _require_callable(self.__class__.__name__, mapper)
        super().__init__(f"{self.label}({describe(mapper)})")

    @property
    def functors(self) -> List[Callable[..., Any]]:
        return [self.mapper]

    def execute(self, value: Any, *_: Any) -> Any:
        kind = container_kind(value)
        if kind == "async":
            return self._map_async_iter(value)
        if kind == "iterator":
            return self._map_iter(value)
        items, build = eager_items(value, kind)
        return self._apply(items, build)

    def _apply(self, items: List[Any], build: Builder) -> Any:
        return collect([self.mapper(item) for item in items], build)

    def _map_iter(self, iterator: Iterator[Any]) -> Iterator[Any]:
        for item in iterator:
            result = self.mapper(item)
            if is_awaitable(result):
                _discard(result)
                raise UnsupportedTypeError(
                    f"{self.name} returned an awaitable while mapping a synchronous iterator."
                )
            yield result

    async def _map_async_iter(self, iterable: AsyncIterable) -> AsyncIterator[Any]:
        async for item in iterable:
            yield await resolve(self.mapper(item))


class MapSeries(Map):
    """Map that waits for each result before calling the mapper on the next item."""

    label = "map_series"

    def _apply(self, items: List[Any], build: Builder) -> Any:
        results: List[Any] = []
        for index, item in enumerate(items):
            result = self.mapper(item)
            if is_awaitable(result):
                return self._resume(items, index + 1, result, results, build)
            results.append(result)
        return build(results)

    async def _resume(
        self,
        items: List[Any],
        index: int,
        pending: Any,
        results: List[Any],
        build: Builder,
    ) -> Any:
        results.append(await pending)
        for item in items[index:]:
            results.append(await resolve(self.mapper(item)))
        return build(results)


class MapPool(Map):
    """Map with at most ``concurrency`` mapper calls in flight; always returns an awaitable."""

    label = "map_pool"

    def __init__(self, concurrency: int | None, mapper: Callable[[Any], Any]) -> None:
        if concurrency is None:
            concurrency = get_settings().default_concurrency
        if concurrency < 1:
            raise ValueError(f"MapPool concurrency must be at least 1, got {concurrency}.")
        self.concurrency = concurrency
        super().__init__(mapper)
        self.name = f"map_pool({concurrency}, {describe(mapper)})"

    def execute(self, value: Any, *_: Any) -> Any:
        kind = container_kind(value)
        if kind == "async":
            return self._pool_async_iter(value)
        if kind == "iterator":
            return self._pool(list(value), list)
        items, build = eager_items(value, kind)
        return self._pool(items, build)

    async def _pool_async_iter(self, iterable: AsyncIterable) -> List[Any]:
        items = [item async for item in iterable]
        return await self._pool(items, list)

    async def _pool(self, items: List[Any], build: Builder) -> Any:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(item: Any) -> Any:
            async with semaphore:
                return await resolve(self.mapper(item))

        results = await asyncio.gather(*(run(item) for item in items))
        return build(list(results))


class Filter(Functor):
    """Keeps the items of a container for which the predicate is truthy."""

    def __init__(self, predicate: Callable[[Any], Any]) -> None:
        self.predicate = _require_callable("Filter", predicate)
        super().__init__(f"filter({describe(predicate)})")

    @property
    def functors(self) -> List[Callable[..., Any]]:
        return [self.predicate]

    def execute(self, value: Any, *_: Any) -> Any:
        kind = container_kind(value)
        if kind == "async":
            return self._filter_async_iter(value)
        if kind == "iterator":
            return self._filter_iter(value)
        if kind == "mapping":
            pairs = list(value.items())
            verdicts = [self.predicate(item) for _, item in pairs]
            return collect(verdicts, lambda checked: {k: v for (k, v), ok in zip(pairs, checked) if ok})
        items = list(value)
        verdicts = [self.predicate(item) for item in items]
        return collect(
            verdicts,
            lambda checked: rebuild(kind, value, [item for item, ok in zip(items, checked) if ok]),
        )

    def _filter_iter(self, iterator: Iterator[Any]) -> Iterator[Any]:
        for item in iterator:
            verdict = self.predicate(item)
            if is_awaitable(verdict):
                _discard(verdict)
                raise UnsupportedTypeError(
                    f"{self.name} returned an awaitable while filtering a synchronous iterator."
                )
            if verdict:
                yield item

    async def _filter_async_iter(self, iterable: AsyncIterable) -> AsyncIterator[Any]:
        async for item in iterable:
            if await resolve(self.predicate(item)):
                yield item


def _splice(results: List[Any]) -> List[Any]:
    flattened: List[Any] = []
    for result in results:
        if isinstance(result, _SPLICEABLE):
            flattened.extend(result)
        else:
            flattened.append(result)
    return flattened


class FlatMap(Functor):
    """Maps every item and flattens list-like results one level."""

    def __init__(self, mapper: Callable[[Any], Any]) -> None:
        self.mapper = _require_callable("FlatMap", mapper)
        super().__init__(f"flat_map({describe(mapper)})")

    @property
    def functors(self) -> List[Callable[..., Any]]:
        return [self.mapper]

    def execute(self, value: Any, *_: Any) -> Any:
        kind = container_kind(value)
        if kind in ("mapping", "bytes", "array"):
            raise UnsupportedTypeError(f"flat_map does not support {type(value).__name__} input.")
        if kind == "async":
            return self._flat_map_async_iter(value)
        if kind == "iterator":
            return self._flat_map_iter(value)
        results = [self.mapper(item) for item in value]
        return collect(results, lambda resolved: rebuild(kind, value, _splice(resolved)))

    def _flat_map_iter(self, iterator: Iterator[Any]) -> Iterator[Any]:
        for item in iterator:
            result = self.mapper(item)
            if is_awaitable(result):
                _discard(result)
                raise UnsupportedTypeError(
                    f"{self.name} returned an awaitable while mapping a synchronous iterator."
                )
            if isinstance(result, _SPLICEABLE):
                yield from result
            else:
                yield result

    async def _flat_map_async_iter(self, iterable: AsyncIterable) -> AsyncIterator[Any]:
        async for item in iterable:
            result = await resolve(self.mapper(item))
            if isinstance(result, AsyncIterable):
                async for inner in result:
                    yield inner
            elif isinstance(result, _SPLICEABLE):
                for inner in result:
                    yield inner
            else:
                yield result


def _values(collection: Any) -> Iterable[Any]:
    kind = container_kind(collection)
    if kind == "mapping":
        return collection.values()
    return collection


class Reduce(Functor):
    """Folds a collection into a single value with an awaitable-aware reducer."""

    def __init__(self, reducer: Callable[[Any, Any], Any], init: Any = MISSING) -> None:
        self.reducer = _require_callable("Reduce", reducer)
        self.init = init
        super().__init__(f"reduce({describe(reducer)})")

    @property
    def functors(self) -> List[Callable[..., Any]]:
        return [self.reducer]

    def execute(self, collection: Any, *_: Any) -> Any:
        if container_kind(collection) == "async":
            return self._reduce_async_iter(collection)

        iterator = iter(_values(collection))
        if self.init is MISSING:
            try:
                acc = next(iterator)
            except StopIteration:
                raise TypeError(f"{self.name} of empty collection with no initial value.") from None
        elif callable(self.init):
            acc = self.init(collection)
        else:
            acc = self.init
        return then(fold(self.reducer, acc, iterator), unreduced)

    async def _reduce_async_iter(self, iterable: AsyncIterable) -> Any:
        iterator = iterable.__aiter__()
        if self.init is MISSING:
            try:
                acc = await iterator.__anext__()
            except StopAsyncIteration:
                raise TypeError(f"{self.name} of empty collection with no initial value.") from None
        elif callable(self.init):
            acc = await resolve(self.init(iterable))
        else:
            acc = self.init

        if not isinstance(acc, Reduced):
            async for item in iterator:
                acc = await resolve(self.reducer(acc, item))
                if isinstance(acc, Reduced):
                    break
        return unreduced(acc)


class _Quantifier(Functor):
    label = ""
    short_circuit_on = True

    def __init__(self, predicate: Callable[[Any], Any]) -> None:
        self.predicate = _require_callable(self.__class__.__name__, predicate)
        super().__init__(f"{self.label}({describe(predicate)})")

    @property
    def functors(self) -> List[Callable[..., Any]]:
        return [self.predicate]

    def execute(self, collection: Any, *_: Any) -> Any:
        if container_kind(collection) == "async":
            return self._check_async_iter(collection)
        iterator = iter(_values(collection))
        pending: List[Any] = []
        for item in iterator:
            verdict = self.predicate(item)
            if is_awaitable(verdict):
                pending.append(verdict)
            elif bool(verdict) is self.short_circuit_on:
                for awaitable in pending:
                    _discard(awaitable)
                return self.short_circuit_on
        if pending:
            return then(gather_mixed(pending), self._settle)
        return not self.short_circuit_on

    def _settle(self, verdicts: List[Any]) -> bool:
        if any(bool(verdict) is self.short_circuit_on for verdict in verdicts):
            return self.short_circuit_on
        return not self.short_circuit_on

    async def _check_async_iter(self, iterable: AsyncIterable) -> bool:
        async for item in iterable:
            if bool(await resolve(self.predicate(item))) is self.short_circuit_on:
                return self.short_circuit_on
        return not self.short_circuit_on


class Some(_Quantifier):
    """True when the predicate holds for at least one item."""

    label = "some"
    short_circuit_on = True


class Every(_Quantifier):
    """True when the predicate holds for every item."""

    label = "every"
    short_circuit_on = False


def map_(mapper: Callable[[Any], Any]) -> Map:
    return Map(mapper)


def map_series(mapper: Callable[[Any], Any]) -> MapSeries:
    return MapSeries(mapper)


def map_pool(concurrency: int | None, mapper: Callable[[Any], Any]) -> MapPool:
    return MapPool(concurrency, mapper)


def filter_(predicate: Callable[[Any], Any]) -> Filter:
    return Filter(predicate)


def flat_map(mapper: Callable[[Any], Any]) -> FlatMap:
    return FlatMap(mapper)


def reduce_(reducer: Callable[[Any, Any], Any], init: Any = MISSING) -> Reduce:
    return Reduce(reducer, init)


def some(predicate: Callable[[Any], Any]) -> Some:
    return Some(predicate)


def every(predicate: Callable[[Any], Any]) -> Every:
    return Every(predicate)

