from __future__ import annotations

from typing import Any, List

from .engine.accessors import Get
from .engine.containers import MISSING, MapPool, Reduce
from .engine.functors import Functor, describe
from .engine.parser import SystemFunctor
from .engine.transducers import Transform


def visualize(functor: Any) -> str:
    """
    Produce a human-readable tree representation of a functor hierarchy.
    """
    lines: List[str] = []
    _render(functor, lines, 0)
    return "\n".join(lines)


def _render(functor: Any, lines: List[str], depth: int) -> None:
    indent = "  " * depth
    lines.append(f"{indent}{_describe_functor(functor)}")

    for child in getattr(functor, "functors", None) or []:
        _render(child, lines, depth + 1)


def _describe_functor(functor: Any) -> str:
    if not isinstance(functor, Functor):
        return f"{describe(functor)} (function)"

    base = f"{functor.name} ({functor.__class__.__name__})"
    details: List[str] = []

    if isinstance(functor, MapPool):
        details.append(f"concurrency={functor.concurrency}")
    elif isinstance(functor, Reduce) and functor.init is not MISSING:
        details.append(f"init={functor.init!r}")
    elif isinstance(functor, Transform):
        details.append(f"init={functor.init!r}")
    elif isinstance(functor, Get):
        details.append(f"path={functor.path}")
    elif isinstance(functor, SystemFunctor):
        details.append("system")
        if functor.args:
            details.append(f"args={functor.args}")

    if not details:
        return base

    return f"{base} [{' | '.join(details)}]"
