from __future__ import annotations

import operator
from typing import Any, Callable, List, Sequence

from .functors import Functor, describe
from .resolve import gather_mixed, has_awaitable, is_awaitable, resolve, then


def _operand(operand: Any, args: tuple) -> Any:
    # callables are resolved against the input, anything else is a literal
    return operand(*args) if callable(operand) else operand


def _label(operand: Any) -> str:
    return describe(operand) if callable(operand) else repr(operand)


class _Junction(Functor):
    label = ""
    stop_on = False

    def __init__(self, predicates: Sequence[Any]) -> None:
        if not predicates:
            raise ValueError(f"{self.label} requires at least one predicate.")
        self.predicates = list(predicates)
        super().__init__(f"{self.label}({', '.join(_label(p) for p in self.predicates)})")

    @property
    def functors(self) -> List[Callable[..., Any]]:
        return [p for p in self.predicates if callable(p)]

    def execute(self, *args: Any) -> Any:
        for index, predicate in enumerate(self.predicates):
            verdict = _operand(predicate, args)
            if is_awaitable(verdict):
                return self._resume(args, verdict, index + 1)
            if bool(verdict) is self.stop_on:
                return self.stop_on
        return not self.stop_on

    async def _resume(self, args: tuple, pending: Any, index: int) -> bool:
        if bool(await pending) is self.stop_on:
            return self.stop_on
        for predicate in self.predicates[index:]:
            if bool(await resolve(_operand(predicate, args))) is self.stop_on:
                return self.stop_on
        return not self.stop_on


class And(_Junction):
    """True when every predicate holds; stops at the first falsy one."""

    label = "and"
    stop_on = False


class Or(_Junction):
    """True when any predicate holds; stops at the first truthy one."""

    label = "or"
    stop_on = True


class Not(Functor):
    def __init__(self, predicate: Any) -> None:
        self.predicate = predicate
        super().__init__(f"not({_label(predicate)})")

    def execute(self, *args: Any) -> Any:
        return then(_operand(self.predicate, args), lambda verdict: not verdict)


class Comparison(Functor):
    """Compares two operands, each either a literal or a function of the input."""

    def __init__(self, symbol: str, compare: Callable[[Any, Any], bool], left: Any, right: Any) -> None:
        self.compare = compare
        self.left = left
        self.right = right
        super().__init__(f"({_label(left)} {symbol} {_label(right)})")

    def execute(self, *args: Any) -> Any:
        operands = [_operand(self.left, args), _operand(self.right, args)]
        if has_awaitable(operands):
            return then(gather_mixed(operands), lambda pair: self.compare(*pair))
        return self.compare(*operands)


def and_(predicates: Sequence[Any]) -> And:
    return And(predicates)


def or_(predicates: Sequence[Any]) -> Or:
    return Or(predicates)


def not_(predicate: Any) -> Not:
    return Not(predicate)


def eq(left: Any, right: Any) -> Comparison:
    return Comparison("==", operator.eq, left, right)


def gt(left: Any, right: Any) -> Comparison:
    return Comparison(">", operator.gt, left, right)


def lt(left: Any, right: Any) -> Comparison:
    return Comparison("<", operator.lt, left, right)


def gte(left: Any, right: Any) -> Comparison:
    return Comparison(">=", operator.ge, left, right)


def lte(left: Any, right: Any) -> Comparison:
    return Comparison("<=", operator.le, left, right)
