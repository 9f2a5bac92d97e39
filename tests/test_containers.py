from __future__ import annotations

import asyncio
import inspect
import operator
from array import array
from collections import OrderedDict, deque

import pytest

from pipework import (
    Reduced,
    UnsupportedTypeError,
    every,
    filter_,
    flat_map,
    map_,
    map_pool,
    map_series,
    reduce_,
    some,
)
from pipework.config import get_settings
from pipework.engine.resolve import run_sync


def double(value):
    return value * 2


def is_odd(value):
    return value % 2 == 1


async def async_double(value):
    await asyncio.sleep(0)
    return value * 2


async def async_is_odd(value):
    await asyncio.sleep(0)
    return value % 2 == 1


async def numbers(count=3):
    for number in range(count):
        await asyncio.sleep(0)
        yield number


async def drain(async_iterable):
    return [item async for item in async_iterable]


def test_map_keeps_container_type():
    assert map_(double)([1, 2, 3]) == [2, 4, 6]
    assert map_(double)((1, 2)) == (2, 4)
    assert map_(str.upper)("abc") == "ABC"
    assert map_(double)({1, 2}) == {2, 4}
    frozen = map_(double)(frozenset({1}))
    assert isinstance(frozen, frozenset) and frozen == frozenset({2})
    assert map_(double)({"a": 1, "b": 2}) == {"a": 2, "b": 4}
    assert map_(double)(OrderedDict(a=1)) == {"a": 2}
    assert map_(double)(range(3)) == [0, 2, 4]
    assert map_(double)(deque([1])) == [2]


def test_map_over_bytes_and_typed_arrays():
    assert map_(lambda b: b + 1)(b"abc") == b"bcd"
    shifted = map_(lambda b: b + 1)(bytearray(b"a"))
    assert isinstance(shifted, bytearray) and shifted == bytearray(b"b")
    typed = map_(double)(array("i", [1, 2]))
    assert typed == array("i", [2, 4])
    assert typed.typecode == "i"


def test_map_over_string_joins_results():
    assert map_(ord)("ab") == "9798"


def test_map_over_generator_is_lazy():
    seen = []

    def record(value):
        seen.append(value)
        return value * 2

    mapped = map_(record)(iter([1, 2, 3]))
    assert seen == []
    assert next(mapped) == 2
    assert seen == [1]
    assert list(mapped) == [4, 6]


def test_map_resolves_async_mapper():
    result = map_(async_double)([1, 2, 3])
    assert inspect.isawaitable(result)
    assert run_sync(result) == [2, 4, 6]
    assert run_sync(map_(async_double)({"a": 1})) == {"a": 2}
    assert run_sync(map_(async_double)((1,))) == (2,)


def test_map_over_async_iterator():
    assert asyncio.run(drain(map_(async_double)(numbers()))) == [0, 2, 4]


def test_map_rejects_non_containers():
    with pytest.raises(UnsupportedTypeError):
        map_(double)(5)
    assert issubclass(UnsupportedTypeError, TypeError)


def test_map_series_waits_between_items():
    events = []

    async def record(value):
        events.append(("start", value))
        await asyncio.sleep(0)
        events.append(("end", value))
        return value

    assert run_sync(map_series(record)([1, 2])) == [1, 2]
    assert events == [("start", 1), ("end", 1), ("start", 2), ("end", 2)]
    assert map_series(double)([1, 2]) == [2, 4]


def test_map_pool_limits_concurrency():
    active = [0]
    peak = [0]

    async def track(value):
        active[0] += 1
        peak[0] = max(peak[0], active[0])
        await asyncio.sleep(0.01)
        active[0] -= 1
        return value * 10

    assert run_sync(map_pool(2, track)([1, 2, 3, 4, 5])) == [10, 20, 30, 40, 50]
    assert peak[0] == 2


def test_map_pool_always_returns_awaitable():
    result = map_pool(2, double)({"a": 1})
    assert inspect.isawaitable(result)
    assert run_sync(result) == {"a": 2}
    assert asyncio.run(map_pool(1, double)(numbers())) == [0, 2, 4]


def test_map_pool_concurrency_validation_and_default():
    with pytest.raises(ValueError):
        map_pool(0, double)
    assert map_pool(None, double).concurrency == get_settings().default_concurrency


def test_filter_keeps_container_type():
    assert filter_(is_odd)([1, 2, 3]) == [1, 3]
    assert filter_(is_odd)((1, 2, 3)) == (1, 3)
    assert filter_(is_odd)({1, 2, 3}) == {1, 3}
    assert filter_(str.isalpha)("a1b2") == "ab"
    assert filter_(lambda byte: byte != 0x20)(b"a b") == b"ab"
    assert filter_(lambda value: value > 1)({"a": 1, "b": 2}) == {"b": 2}


def test_filter_with_async_predicate():
    assert run_sync(filter_(async_is_odd)([1, 2, 3])) == [1, 3]
    assert run_sync(filter_(async_is_odd)({"a": 1, "b": 2})) == {"a": 1}


def test_filter_iterators():
    assert list(filter_(is_odd)(iter(range(5)))) == [1, 3]
    assert asyncio.run(drain(filter_(async_is_odd)(numbers()))) == [1]


def test_filter_sync_iterator_cannot_await_predicate():
    filtered = filter_(async_is_odd)(iter([1]))
    with pytest.raises(UnsupportedTypeError):
        next(filtered)


def test_map_sync_iterator_cannot_await_mapper():
    mapped = map_(async_double)(value for value in [1, 2])
    with pytest.raises(UnsupportedTypeError):
        list(mapped)


def test_flat_map_splices_one_level():
    assert flat_map(lambda x: [x, x])([1, 2]) == [1, 1, 2, 2]
    assert flat_map(lambda x: x)([[1], 2, (3, 4), [[5]]]) == [1, 2, 3, 4, [5]]
    assert flat_map(lambda ch: ch * 2)("ab") == "aabb"
    assert list(flat_map(lambda x: [x] * x)(iter([1, 2]))) == [1, 2, 2]


def test_flat_map_async():
    async def pair(value):
        return [value, value]

    assert run_sync(flat_map(pair)([1, 2])) == [1, 1, 2, 2]
    assert asyncio.run(drain(flat_map(pair)(numbers(2)))) == [0, 0, 1, 1]


def test_flat_map_rejects_mappings():
    with pytest.raises(UnsupportedTypeError):
        flat_map(lambda x: [x])({"a": 1})


def test_reduce_folds_collections():
    assert reduce_(operator.add)([1, 2, 3]) == 6
    assert reduce_(operator.add, 10)([1, 2, 3]) == 16
    assert reduce_(operator.add)({"a": 1, "b": 2}) == 3
    assert reduce_(operator.add, "")("abc") == "abc"
    assert reduce_(operator.add, 0)([]) == 0


def test_reduce_callable_init_receives_collection():
    collect = reduce_(lambda acc, item: acc + [item], lambda items: [len(items)])
    assert collect([5, 6]) == [2, 5, 6]


def test_reduce_empty_without_init_raises():
    with pytest.raises(TypeError):
        reduce_(operator.add)([])


def test_reduce_async_reducer_and_source():
    async def add(acc, item):
        await asyncio.sleep(0)
        return acc + item

    assert run_sync(reduce_(add, 0)([1, 2, 3])) == 6
    assert asyncio.run(reduce_(operator.add, 0)(numbers())) == 3
    assert asyncio.run(reduce_(operator.add)(numbers(4))) == 6


def test_reduce_stops_on_reduced():
    seen = []

    def add_until_three(acc, item):
        seen.append(item)
        if item >= 3:
            return Reduced(acc)
        return acc + item

    assert reduce_(add_until_three, 0)(iter([1, 2, 3, 4, 5])) == 3
    assert seen == [1, 2, 3]


def test_some_and_every():
    assert some(is_odd)([2, 3]) is True
    assert some(is_odd)([2, 4]) is False
    assert some(is_odd)([]) is False
    assert every(is_odd)([1, 3]) is True
    assert every(is_odd)([1, 2]) is False
    assert every(is_odd)([]) is True
    assert every(is_odd)({"a": 1, "b": 3}) is True


def test_some_short_circuits_sync_predicates():
    calls = []

    def check(value):
        calls.append(value)
        return value > 1

    assert some(check)([1, 2, 3]) is True
    assert calls == [1, 2]


def test_quantifiers_with_async_predicates():
    assert run_sync(some(async_is_odd)([2, 3])) is True
    assert run_sync(every(async_is_odd)([1, 2])) is False
    assert asyncio.run(some(async_is_odd)(numbers())) is True
