from __future__ import annotations

import asyncio

import pytest

from pipework import (
    UnsupportedTypeError,
    and_,
    eq,
    get,
    gt,
    gte,
    identity,
    lt,
    lte,
    not_,
    omit,
    or_,
    pick,
)
from pipework.engine.accessors import parse_path
from pipework.engine.resolve import run_sync

USER = {"name": "Ada", "roles": [{"id": 1}, {"id": 2}], "meta": None}


def is_odd(value):
    return value % 2 == 1


async def async_is_odd(value):
    await asyncio.sleep(0)
    return value % 2 == 1


async def async_double(value):
    await asyncio.sleep(0)
    return value * 2


def test_parse_path():
    assert parse_path("a.b[0].c") == ["a", "b", 0, "c"]
    assert parse_path(["a", 1]) == ["a", 1]
    assert parse_path(3) == [3]


def test_get_walks_mappings_sequences_and_attributes():
    assert get("name")(USER) == "Ada"
    assert get("roles[1].id")(USER) == 2
    assert get("roles.0.id")(USER) == 1
    assert get(["roles", 0, "id"])(USER) == 1
    assert get("real")(complex(1, 2)) == 1.0


def test_get_defaults():
    assert get("missing", "n/a")(USER) == "n/a"
    assert get("meta.x", 0)(USER) == 0
    assert get("roles[5].id")(USER) is None
    assert get("missing", lambda value: len(value))(USER) == 3


def test_pick_and_omit():
    assert pick(["name", "absent"])(USER) == {"name": "Ada"}
    assert omit(["roles", "meta"])(USER) == {"name": "Ada"}
    with pytest.raises(UnsupportedTypeError):
        pick(["a"])([1, 2])
    with pytest.raises(UnsupportedTypeError):
        omit(["a"])("abc")


def test_and_or_not():
    in_range = and_([lambda n: n > 0, lambda n: n < 10])
    assert in_range(5) is True
    assert in_range(15) is False
    assert or_([lambda n: n < 0, is_odd])(3) is True
    assert or_([lambda n: n < 0, is_odd])(4) is False
    assert not_(is_odd)(2) is True


def test_and_short_circuits():
    calls = []
    check = and_([
        lambda value: calls.append("first") or False,
        lambda value: calls.append("second") or True,
    ])
    assert check(1) is False
    assert calls == ["first"]


def test_logic_with_async_predicates():
    assert run_sync(and_([async_is_odd, lambda n: n > 2])(3)) is True
    assert run_sync(and_([async_is_odd, lambda n: n > 5])(3)) is False
    assert run_sync(or_([async_is_odd, lambda n: n > 5])(2)) is False
    assert run_sync(not_(async_is_odd)(2)) is True


def test_junctions_require_predicates_and_accept_literals():
    with pytest.raises(ValueError):
        and_([])
    assert and_([True, identity])(1) is True
    assert or_([False, identity])(0) is False


def test_comparisons_resolve_functions_and_literals():
    assert eq(get("a"), 1)({"a": 1}) is True
    assert gt(identity, 3)(5) is True
    assert lt(1, identity)(0) is False
    assert gte(identity, 5)(5) is True
    assert lte(identity, 4)(5) is False
    assert eq(get("a"), 1).name == "(get(a) == 1)"


def test_comparison_with_async_operand():
    assert run_sync(eq(async_double, 4)(2)) is True
