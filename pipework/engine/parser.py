from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, List, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .context import Context
from .containers import every, filter_, flat_map, map_, map_pool, map_series, some
from .functors import All, Functor, Pipe, tap

OPERATORS = "|(),"

# steps whose first argument is itself a step
NESTED_STEPS: dict[str, Callable[[Callable[..., Any]], Functor]] = {
    "map": map_,
    "map_series": map_series,
    "filter": filter_,
    "flat_map": flat_map,
    "tap": tap,
    "some": some,
    "every": every,
}


class ParseError(ValueError):
    """Raised when parsing an expression string fails."""


@dataclass(frozen=True)
class Token:
    text: str
    quoted: bool = False

    @property
    def operator(self) -> str | None:
        if not self.quoted and self.text in OPERATORS:
            return self.text
        return None


class SystemFunctor(Functor):
    """Functor that delegates to a context-registered system command."""

    def __init__(self, name: str, context: "Context", args: Sequence[Any] = ()) -> None:
        super().__init__(f":{name}")
        self.command = name
        self.context = context
        self.args = list(args)

    def execute(self, value: Any = None, *_: Any) -> Any:
        handler = self.context.system_funcs[self.command]
        return handler(value, self.context, *self.args)


def parse(expression: str, context: "Context") -> Functor | Callable[..., Any]:
    tokens = tokenize(expression)
    if not tokens:
        raise ParseError("Empty expression.")
    parser = _Parser(tokens, context)
    result = parser.parse_expression()
    parser.expect_end()
    return result


def tokenize(expression: str) -> List[Token]:
    tokens: List[Token] = []
    current: List[str] = []
    quote: str | None = None
    escaped = False

    def flush() -> None:
        if current:
            tokens.append(Token("".join(current)))
            current.clear()

    for ch in expression:
        if quote:
            if escaped:
                current.append(ch)
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                tokens.append(Token("".join(current), quoted=True))
                current.clear()
                quote = None
            else:
                current.append(ch)
            continue

        if ch in ("'", '"'):
            flush()
            quote = ch
            continue

        if ch.isspace():
            flush()
            continue

        if ch in OPERATORS:
            flush()
            tokens.append(Token(ch))
        else:
            current.append(ch)

    if quote:
        raise ParseError("Unterminated quote in expression.")

    flush()
    return tokens


def decode_argument(text: str) -> Any:
    """JSON literal when the text is one, the raw string otherwise."""
    try:
        return json.loads(text)
    except ValueError:
        return text


@dataclass
class _Parser:
    tokens: Sequence[Token]
    context: "Context"
    pos: int = 0

    def parse_expression(self) -> Functor | Callable[..., Any]:
        return self._parse_parallel()

    def expect_end(self) -> None:
        if self.pos != len(self.tokens):
            raise ParseError(f"Unexpected token: {self.tokens[self.pos].text!r}")

    def _parse_parallel(self) -> Functor | Callable[..., Any]:
        steps = [self._parse_sequential()]
        while self._peek() == ",":
            self._consume(",")
            steps.append(self._parse_sequential())
        if len(steps) == 1:
            return steps[0]
        return All(steps)

    def _parse_sequential(self) -> Functor | Callable[..., Any]:
        steps = [self._parse_block()]
        while self._peek() == "|":
            self._consume("|")
            steps.append(self._parse_block())
        if len(steps) == 1:
            return steps[0]
        return Pipe(steps)

    def _parse_block(self) -> Functor | Callable[..., Any]:
        token = self._peek()
        if token == "(":
            self._consume("(")
            step = self._parse_parallel()
            self._consume(")")
            return step
        if token in {")", "|", ",", None}:
            raise ParseError("Unexpected block boundary.")
        return self._parse_step()

    def _parse_step(self) -> Functor | Callable[..., Any]:
        name = self._consume_word()
        args: List[str] = []
        while True:
            token = self._peek()
            if token is None or token in {"|", ",", ")"}:
                break
            if token == "(":
                raise ParseError(f"Unexpected token '{token}' in step arguments.")
            args.append(self._consume_word())
        return self._create_step(name, args)

    def _create_step(self, name: str, args: Sequence[str]) -> Functor | Callable[..., Any]:
        if name.startswith(":"):
            return self._create_system_functor(name, args)
        if name == "map_pool":
            if len(args) < 2:
                raise ParseError("map_pool needs a concurrency and a step.")
            concurrency = decode_argument(args[0])
            if not isinstance(concurrency, int):
                raise ParseError(f"map_pool concurrency must be an integer, got {args[0]!r}.")
            return map_pool(concurrency, self._create_step(args[1], args[2:]))
        if name in NESTED_STEPS:
            if not args:
                raise ParseError(f"'{name}' needs a step to apply.")
            return NESTED_STEPS[name](self._create_step(args[0], args[1:]))

        factory = self.context.steps.get(name)
        if factory is None:
            raise ParseError(f"Unknown step '{name}'.")
        decoded = [decode_argument(arg) for arg in args]
        try:
            return factory(*decoded)
        except (TypeError, ValueError) as exc:
            raise ParseError(f"Invalid arguments for '{name}': {exc}") from exc

    def _create_system_functor(self, raw_name: str, args: Sequence[str]) -> Functor:
        if raw_name == ":":
            raise ParseError("System command name is missing.")
        command_name = raw_name[1:]
        if command_name not in self.context.system_funcs:
            raise ParseError(f"Unknown system command '{command_name}'.")
        return SystemFunctor(command_name, self.context, args)

    def _peek(self) -> str | None:
        """Operator under the cursor, "" for a word, None at the end."""
        if self.pos >= len(self.tokens):
            return None
        return self.tokens[self.pos].operator or ""

    def _consume(self, expected: str) -> None:
        token = self._peek()
        if token != expected:
            found = self.tokens[self.pos].text if token is not None else "end of input"
            raise ParseError(f"Expected '{expected}' but found '{found}'.")
        self.pos += 1

    def _consume_word(self) -> str:
        if self.pos >= len(self.tokens):
            raise ParseError("Unexpected end of input.")
        token = self.tokens[self.pos]
        if token.operator:
            raise ParseError(f"Unexpected token '{token.text}'.")
        self.pos += 1
        return token.text
