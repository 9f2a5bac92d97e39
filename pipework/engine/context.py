from __future__ import annotations

from collections import deque
from typing import Any, Callable, Dict, List, Mapping, TYPE_CHECKING

from ..config import get_settings

if TYPE_CHECKING:
    from .engine import Engine


StepFactory = Callable[..., Callable[..., Any]]
SystemFunc = Callable[..., Any]


class Context:
    """Holds expression runtime state such as registered steps, history, and system commands."""

    def __init__(
        self,
        *,
        steps: Mapping[str, StepFactory] | None = None,
        system_funcs: Mapping[str, SystemFunc] | None = None,
        history_limit: int | None = None,
        engine: "Engine" | None = None,
    ) -> None:
        from .builtins import get_default_steps, get_default_system_funcs

        self.steps: Dict[str, StepFactory] = get_default_steps()
        self.steps.update(steps or {})
        self.system_funcs: Dict[str, SystemFunc] = get_default_system_funcs()
        self.system_funcs.update(system_funcs or {})

        limit = history_limit if history_limit is not None else get_settings().history_limit
        self._history: deque[str] = deque(maxlen=limit)
        if engine is None:
            from .engine import Engine as EngineClass

            engine = EngineClass()
        self.engine = engine

    @property
    def history(self) -> List[str]:
        return list(self._history)

    def register(self, name: str, factory: StepFactory) -> None:
        """Expose ``factory`` to expressions under ``name``; it is called with the step's arguments."""
        if not name or name.startswith(":"):
            raise ValueError(f"Invalid step name: {name!r}.")
        self.steps[name] = factory

    def record_history(self, expression: str) -> None:
        self._history.append(expression.strip())
