"""
Transducers: reducer-to-reducer transformations fused into a single fold.

A reducer is ``(acc, item) -> acc`` and may return an awaitable. ``transform``
runs a transducer over a collection once, concatenating into an accumulator,
so a chain of ``map``/``filter``/``flat_map`` steps never materializes the
intermediate collections.
"""

from __future__ import annotations

import array
from collections.abc import Mapping
from typing import Any, Callable, Tuple

from .containers import _SPLICEABLE, Reduce, Reduced, fold
from .functors import Functor, UnsupportedTypeError, _require_callable, describe
from .resolve import then

Reducer = Callable[[Any, Any], Any]


class Transducer:
    """A named reducer transformation; build them with the static constructors."""

    def __init__(self, name: str, wrap: Callable[[Reducer], Reducer]) -> None:
        self.name = name
        self._wrap = wrap

    def __call__(self, reducer: Reducer) -> Reducer:
        return self._wrap(reducer)

    def __repr__(self) -> str:
        return f"<Transducer {self.name}>"

    @staticmethod
    def map(mapper: Callable[[Any], Any]) -> "Transducer":
        _require_callable("Transducer.map", mapper)

        def wrap(reducer: Reducer) -> Reducer:
            def mapping_reducer(acc: Any, item: Any) -> Any:
                return then(mapper(item), lambda mapped: reducer(acc, mapped))

            return mapping_reducer

        return Transducer(f"map({describe(mapper)})", wrap)

    @staticmethod
    def filter(predicate: Callable[[Any], Any]) -> "Transducer":
        _require_callable("Transducer.filter", predicate)

        def wrap(reducer: Reducer) -> Reducer:
            def filtering_reducer(acc: Any, item: Any) -> Any:
                return then(predicate(item), lambda ok: reducer(acc, item) if ok else acc)

            return filtering_reducer

        return Transducer(f"filter({describe(predicate)})", wrap)

    @staticmethod
    def flat_map(mapper: Callable[[Any], Any]) -> "Transducer":
        _require_callable("Transducer.flat_map", mapper)

        def wrap(reducer: Reducer) -> Reducer:
            def flat_mapping_reducer(acc: Any, item: Any) -> Any:
                def splice(result: Any) -> Any:
                    items = result if isinstance(result, _SPLICEABLE) else (result,)
                    return fold(reducer, acc, items)

                return then(mapper(item), splice)

            return flat_mapping_reducer

        return Transducer(f"flat_map({describe(mapper)})", wrap)

    @staticmethod
    def tap(func: Callable[[Any], Any]) -> "Transducer":
        _require_callable("Transducer.tap", func)

        def wrap(reducer: Reducer) -> Reducer:
            def tapping_reducer(acc: Any, item: Any) -> Any:
                return then(func(item), lambda _: reducer(acc, item))

            return tapping_reducer

        return Transducer(f"tap({describe(func)})", wrap)

    @staticmethod
    def take(count: int) -> "Transducer":
        if count < 0:
            raise ValueError(f"Transducer.take requires a non-negative count, got {count}.")

        def wrap(reducer: Reducer) -> Reducer:
            remaining = count

            def taking_reducer(acc: Any, item: Any) -> Any:
                nonlocal remaining
                if remaining <= 0:
                    return Reduced(acc)
                remaining -= 1
                result = reducer(acc, item)
                if remaining > 0:
                    return result
                return then(result, lambda value: value if isinstance(value, Reduced) else Reduced(value))

            return taking_reducer

        return Transducer(f"take({count})", wrap)

    @staticmethod
    def pipe(*transducers: Callable[[Reducer], Reducer]) -> "Transducer":
        """Chain transducers so items flow through them left to right."""
        if not transducers:
            raise ValueError("Transducer.pipe requires at least one transducer.")

        def wrap(reducer: Reducer) -> Reducer:
            for transducer in reversed(transducers):
                reducer = transducer(reducer)
            return reducer

        return Transducer(" | ".join(describe(t) for t in transducers), wrap)


def _list_append(acc: list, item: Any) -> list:
    acc.append(item)
    return acc


def _bytes_extend(acc: bytearray, item: Any) -> bytearray:
    if isinstance(item, int):
        acc.append(item)
    else:
        acc.extend(item)
    return acc


def _set_add(acc: set, item: Any) -> set:
    acc.add(item)
    return acc


def _dict_assign(acc: dict, item: Any) -> dict:
    try:
        key, value = item
    except (TypeError, ValueError):
        raise UnsupportedTypeError(
            f"transform into a mapping needs (key, value) pairs, got {item!r}."
        ) from None
    acc[key] = value
    return acc


def _concatenator(seed: Any) -> Tuple[Any, Reducer, Callable[[Any], Any]]:
    """Accumulator copy, concatenating reducer and finisher for an ``init`` value."""
    if seed is None:
        return None, lambda acc, item: None, lambda acc: None
    if isinstance(seed, str):
        return seed, lambda acc, item: acc + str(item), lambda acc: acc
    if isinstance(seed, (bytes, bytearray)):
        finish = (lambda acc: acc) if isinstance(seed, bytearray) else bytes
        return bytearray(seed), _bytes_extend, finish
    if isinstance(seed, array.array):
        return array.array(seed.typecode, seed), _list_append, lambda acc: acc
    if isinstance(seed, list):
        return list(seed), _list_append, lambda acc: acc
    if isinstance(seed, tuple):
        return list(seed), _list_append, tuple
    if isinstance(seed, (set, frozenset)):
        finish = frozenset if isinstance(seed, frozenset) else (lambda acc: acc)
        return set(seed), _set_add, finish
    if isinstance(seed, Mapping):
        return dict(seed), _dict_assign, lambda acc: acc
    if callable(getattr(seed, "write", None)):
        return seed, lambda acc, item: then(acc.write(item), lambda _: acc), lambda acc: acc
    raise UnsupportedTypeError(f"Cannot transform into a value of type {type(seed).__name__}.")


class Transform(Functor):
    """Folds a collection through a transducer into a fresh copy of ``init``."""

    def __init__(self, transducer: Callable[[Reducer], Reducer], init: Any) -> None:
        self.transducer = _require_callable("Transform", transducer)
        self.init = init
        super().__init__(f"transform({describe(transducer)})")

    def execute(self, collection: Any, *_: Any) -> Any:
        seed = self.init(collection) if callable(self.init) else self.init
        return then(seed, lambda resolved: self._run(collection, resolved))

    def _run(self, collection: Any, seed: Any) -> Any:
        acc, concat, finish = _concatenator(seed)
        folded = Reduce(self.transducer(concat), _Seed(acc))(collection)
        return then(folded, finish)


class _Seed:
    """Keeps a callable accumulator from being treated as an ``init`` factory."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __call__(self, _collection: Any) -> Any:
        return self.value


def transform(transducer: Callable[[Reducer], Reducer], init: Any) -> Transform:
    return Transform(transducer, init)
