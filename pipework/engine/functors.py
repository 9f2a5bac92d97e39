from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Sequence

from ..logger import logger
from .resolve import gather_mixed, has_awaitable, is_awaitable, then

log = logger.getChild("functors")


class PipeworkError(RuntimeError):
    """Base class for errors raised by pipework itself."""


class UnsupportedTypeError(PipeworkError, TypeError):
    """Raised when a combinator receives a value it cannot operate on."""


def describe(func: Any) -> str:
    """Readable name for a functor or plain callable."""
    if isinstance(func, Functor):
        return func.name
    label = getattr(func, "name", None)
    if isinstance(label, str):
        return label
    name = getattr(func, "__name__", None) or getattr(func, "__qualname__", None)
    if name:
        return name
    return repr(func)


def _require_callable(owner: str, func: Any) -> Callable[..., Any]:
    if not callable(func):
        raise ValueError(f"{owner} expected a callable, got {type(func).__name__}.")
    return func


class Functor(ABC):
    """Base class for composable, awaitable-aware functions."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __call__(self, *args: Any) -> Any:
        return self.execute(*args)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"

    @abstractmethod
    def execute(self, *args: Any) -> Any:
        """Apply the functor; returns an awaitable only when something awaited."""


class Pipe(Functor):
    """Functor that feeds each function's result into the next one."""

    def __init__(self, functors: Sequence[Callable[..., Any]], *, name: str | None = None) -> None:
        if not functors:
            raise ValueError("Pipe requires at least one function.")
        self.functors = [_require_callable("Pipe", f) for f in functors]
        super().__init__(name or f"pipe({' | '.join(describe(f) for f in self.functors)})")

    def execute(self, *args: Any) -> Any:
        result = self.functors[0](*args)
        for index in range(1, len(self.functors)):
            if is_awaitable(result):
                return self._resume(result, index)
            result = self.functors[index](result)
        return result

    async def _resume(self, pending: Any, index: int) -> Any:
        result = await pending
        for functor in self.functors[index:]:
            result = functor(result)
            if is_awaitable(result):
                result = await result
        return result


class Compose(Pipe):
    """Pipe with the functions listed last-to-first."""

    def __init__(self, functors: Sequence[Callable[..., Any]]) -> None:
        ordered = list(reversed(list(functors)))
        super().__init__(
            ordered,
            name=f"compose({', '.join(describe(f) for f in functors)})",
        )


class Tap(Functor):
    """Calls a function for its side effect and returns the first argument."""

    def __init__(self, func: Callable[..., Any]) -> None:
        self.func = _require_callable("Tap", func)
        super().__init__(f"tap({describe(func)})")

    def execute(self, *args: Any) -> Any:
        value = args[0] if args else None
        return then(self.func(*args), lambda _: value)


class All(Functor):
    """Calls every function with the same arguments; awaitables run concurrently."""

    def __init__(self, functors: Sequence[Callable[..., Any]] | Mapping[str, Callable[..., Any]]) -> None:
        if isinstance(functors, Mapping):
            self.keys: List[Any] | None = list(functors.keys())
            self.functors = [_require_callable("All", f) for f in functors.values()]
            label = ", ".join(f"{key}: {describe(f)}" for key, f in zip(self.keys, self.functors))
            super().__init__(f"all({{{label}}})")
        else:
            self.keys = None
            self.functors = [_require_callable("All", f) for f in functors]
            super().__init__(f"all({', '.join(describe(f) for f in self.functors)})")

    def execute(self, *args: Any) -> Any:
        results = [functor(*args) for functor in self.functors]
        if has_awaitable(results):
            return then(gather_mixed(results), self._shape)
        return self._shape(results)

    def _shape(self, results: List[Any]) -> List[Any] | Dict[Any, Any]:
        if self.keys is None:
            return results
        return dict(zip(self.keys, results))


class AllSeries(All):
    """Like All, but each function starts after the previous result resolved."""

    def __init__(self, functors: Sequence[Callable[..., Any]] | Mapping[str, Callable[..., Any]]) -> None:
        super().__init__(functors)
        self.name = self.name.replace("all(", "all_series(", 1)

    def execute(self, *args: Any) -> Any:
        results: List[Any] = []
        for index, functor in enumerate(self.functors):
            result = functor(*args)
            if is_awaitable(result):
                return self._resume(args, results, result, index + 1)
            results.append(result)
        return self._shape(results)

    async def _resume(self, args: tuple, results: List[Any], pending: Any, index: int) -> Any:
        results.append(await pending)
        for functor in self.functors[index:]:
            result = functor(*args)
            if is_awaitable(result):
                result = await result
            results.append(result)
        return self._shape(results)


class Assign(Functor):
    """Merges the results of named functions into a copy of the input mapping."""

    def __init__(self, functors: Mapping[str, Callable[..., Any]]) -> None:
        if not isinstance(functors, Mapping):
            raise ValueError("Assign requires a mapping of names to functions.")
        self.all = All(functors)
        super().__init__(f"assign({self.all.name[4:-1]})")

    @property
    def functors(self) -> List[Callable[..., Any]]:
        return self.all.functors

    def execute(self, *args: Any) -> Any:
        value = args[0] if args else None
        if not isinstance(value, Mapping):
            raise UnsupportedTypeError(
                f"assign expects a mapping input, got {type(value).__name__}."
            )
        return then(self.all(*args), lambda computed: {**value, **computed})


class SwitchCase(Functor):
    """Evaluates predicates in order and runs the function paired with the first truthy one."""

    def __init__(self, cases: Sequence[Callable[..., Any]]) -> None:
        if len(cases) < 3 or len(cases) % 2 == 0:
            raise ValueError(
                "SwitchCase requires predicate/function pairs followed by a default function."
            )
        checked = [_require_callable("SwitchCase", case) for case in cases]
        self.predicates = checked[:-1:2]
        self.branches = checked[1:-1:2]
        self.default = checked[-1]
        super().__init__(f"switch_case({', '.join(describe(c) for c in checked)})")

    @property
    def functors(self) -> List[Callable[..., Any]]:
        cases: List[Callable[..., Any]] = []
        for predicate, branch in zip(self.predicates, self.branches):
            cases.extend((predicate, branch))
        return [*cases, self.default]

    def execute(self, *args: Any) -> Any:
        for index, predicate in enumerate(self.predicates):
            matched = predicate(*args)
            if is_awaitable(matched):
                return self._resume(args, matched, index)
            if matched:
                return self.branches[index](*args)
        return self.default(*args)

    async def _resume(self, args: tuple, pending: Any, index: int) -> Any:
        matched = await pending
        while not matched:
            index += 1
            if index >= len(self.predicates):
                branch = self.default
                break
            matched = self.predicates[index](*args)
            if is_awaitable(matched):
                matched = await matched
        else:
            branch = self.branches[index]
        result = branch(*args)
        if is_awaitable(result):
            result = await result
        return result


class TryCatch(Functor):
    """Runs a tryer; on failure hands the error and the original arguments to a catcher."""

    def __init__(self, tryer: Callable[..., Any], catcher: Callable[..., Any]) -> None:
        self.tryer = _require_callable("TryCatch", tryer)
        self.catcher = _require_callable("TryCatch", catcher)
        super().__init__(f"try_catch({describe(tryer)}, {describe(catcher)})")

    @property
    def functors(self) -> List[Callable[..., Any]]:
        return [self.tryer, self.catcher]

    def execute(self, *args: Any) -> Any:
        try:
            result = self.tryer(*args)
        except Exception as exc:
            return self._catch(exc, args)
        if is_awaitable(result):
            return self._await_tryer(result, args)
        return result

    async def _await_tryer(self, pending: Any, args: tuple) -> Any:
        try:
            return await pending
        except Exception as exc:
            result = self._catch(exc, args)
            if is_awaitable(result):
                result = await result
            return result

    def _catch(self, exc: Exception, args: tuple) -> Any:
        log.debug("%s caught %s: %s", self.name, type(exc).__name__, exc)
        return self.catcher(exc, *args)


class Thunk(Functor):
    """Zero-argument functor that calls a function with preset arguments."""

    def __init__(self, func: Callable[..., Any], *args: Any) -> None:
        self.func = _require_callable("Thunk", func)
        self.args = args
        super().__init__(f"thunk({describe(func)})")

    def execute(self, *_: Any) -> Any:
        return self.func(*self.args)


def pipe(*funcs: Callable[..., Any]) -> Pipe:
    return Pipe(funcs)


def compose(*funcs: Callable[..., Any]) -> Compose:
    return Compose(funcs)


def tap(func: Callable[..., Any]) -> Tap:
    return Tap(func)


def all_(funcs: Sequence[Callable[..., Any]] | Mapping[str, Callable[..., Any]]) -> All:
    return All(funcs)


def all_series(funcs: Sequence[Callable[..., Any]] | Mapping[str, Callable[..., Any]]) -> AllSeries:
    return AllSeries(funcs)


def assign(funcs: Mapping[str, Callable[..., Any]]) -> Assign:
    return Assign(funcs)


def switch_case(cases: Sequence[Callable[..., Any]]) -> SwitchCase:
    return SwitchCase(cases)


def try_catch(tryer: Callable[..., Any], catcher: Callable[..., Any]) -> TryCatch:
    return TryCatch(tryer, catcher)


def thunkify(func: Callable[..., Any], *args: Any) -> Thunk:
    return Thunk(func, *args)


def always(value: Any) -> Callable[..., Any]:
    def _always(*_: Any) -> Any:
        return value

    return _always


def identity(value: Any) -> Any:
    return value


def noop(*_: Any) -> None:
    return None
