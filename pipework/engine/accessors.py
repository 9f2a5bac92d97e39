from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Iterable, List

from .functors import Functor, UnsupportedTypeError

_PATH_TOKEN = re.compile(r"[^.\[\]]+|\[(-?\d+)\]")
_MISSING = object()


def parse_path(path: Any) -> List[Any]:
    """
    Split ``"a.b[0].c"`` into ``["a", "b", 0, "c"]``.

    Lists and tuples are taken as already-split paths; any other non-string
    value is a single key.
    """
    if isinstance(path, (list, tuple)):
        return list(path)
    if not isinstance(path, str):
        return [path]
    keys: List[Any] = []
    for match in _PATH_TOKEN.finditer(path):
        index = match.group(1)
        keys.append(int(index) if index is not None else match.group(0))
    return keys


def _lookup(value: Any, key: Any) -> Any:
    if isinstance(value, Mapping):
        return value.get(key, _MISSING)
    if isinstance(value, Sequence) and not isinstance(value, str):
        if isinstance(key, str) and key.lstrip("-").isdigit():
            key = int(key)
        if isinstance(key, int):
            try:
                return value[key]
            except IndexError:
                return _MISSING
        return _MISSING
    if isinstance(key, str):
        return getattr(value, key, _MISSING)
    return _MISSING


class Get(Functor):
    """Reads a nested property, falling back to a default (or default factory)."""

    def __init__(self, path: Any, default: Any = None) -> None:
        self.path = parse_path(path)
        self.default = default
        super().__init__(f"get({'.'.join(str(key) for key in self.path)})")

    def execute(self, value: Any, *_: Any) -> Any:
        current = value
        for key in self.path:
            if current is None:
                current = _MISSING
                break
            current = _lookup(current, key)
            if current is _MISSING:
                break
        if current is _MISSING:
            return self.default(value) if callable(self.default) else self.default
        return current


class Pick(Functor):
    """New dict holding only the listed keys that are present."""

    def __init__(self, keys: Iterable[Any]) -> None:
        self.keys = list(keys)
        super().__init__(f"pick({', '.join(str(key) for key in self.keys)})")

    def execute(self, value: Any, *_: Any) -> Dict[Any, Any]:
        if not isinstance(value, Mapping):
            raise UnsupportedTypeError(f"pick expects a mapping, got {type(value).__name__}.")
        return {key: value[key] for key in self.keys if key in value}


class Omit(Functor):
    """New dict without the listed keys."""

    def __init__(self, keys: Iterable[Any]) -> None:
        self.keys = list(keys)
        super().__init__(f"omit({', '.join(str(key) for key in self.keys)})")

    def execute(self, value: Any, *_: Any) -> Dict[Any, Any]:
        if not isinstance(value, Mapping):
            raise UnsupportedTypeError(f"omit expects a mapping, got {type(value).__name__}.")
        excluded = set(self.keys)
        return {key: item for key, item in value.items() if key not in excluded}


def get(path: Any, default: Any = None) -> Get:
    return Get(path, default)


def pick(keys: Iterable[Any]) -> Pick:
    return Pick(keys)


def omit(keys: Iterable[Any]) -> Omit:
    return Omit(keys)

