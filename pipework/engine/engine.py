from __future__ import annotations

from functools import partial
from typing import Any, Callable, TYPE_CHECKING

from ..logger import logger
from .functors import describe
from .parser import SystemFunctor, parse
from .resolve import is_awaitable, resolve, run_sync, then

if TYPE_CHECKING:
    from .context import Context

log = logger.getChild("engine")


class Engine:
    """Expression engine that parses pipelines and applies them to a value."""

    def run(self, context: "Context", expression: str, value: Any = None) -> Any:
        """Evaluate ``expression`` against ``value``, blocking until any awaitable resolves."""
        try:
            return run_sync(self.evaluate(context, expression, value))
        except Exception as exc:
            log.error("Expression %r failed: %s", expression, exc)
            raise

    async def run_async(self, context: "Context", expression: str, value: Any = None) -> Any:
        return await resolve(self.evaluate(context, expression, value))

    def evaluate(self, context: "Context", expression: str, value: Any = None) -> Any:
        """Parse and apply ``expression``; the result may be awaitable."""
        step = self.parse(context, expression)
        result = self.execute(context, step, value)
        if isinstance(step, SystemFunctor):
            return result
        return then(result, partial(self._remember, context, expression))

    def _remember(self, context: "Context", expression: str, result: Any) -> Any:
        context.record_history(expression)
        return result

    def parse(self, context: "Context", expression: str) -> Callable[..., Any]:
        step = parse(expression, context)
        log.debug("Parsed %r into %s", expression, describe(step))
        return step

    def execute(self, context: "Context", step: Callable[..., Any], value: Any = None) -> Any:
        result = step(value)
        if is_awaitable(result):
            log.debug("%s returned an awaitable", describe(step))
        return result
