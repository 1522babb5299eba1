## loxi — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Any, Callable

from .errors import LoxError, LoxParseError
from .lexer import scan, TokenSequence
from .parser import Parser
from .resolver import Resolver
from .interpreter import Interpreter
from .callables import NativeFunction
from .formatting import stringify
from . import syntax as S


class Runtime:
    """Minimal runtime facade focused on embedding and extension.

    Lexical and parse errors are all passed to `on_error` as they are found, then the first one is
    raised; a program with any of them is never resolved or run.  Runtime errors are only raised.
    """

    def __init__(self, verbosity: int = 0, stats: dict | None = None,
                 on_error: Callable[[LoxError], None] | None = None):
        self.interpreter = Interpreter(verbosity=verbosity, stats=stats)
        self.on_error = on_error

    def _report(self, errors: list[LoxError]) -> None:
        if not errors: return
        if self.on_error is not None:
            for exc in errors:
                self.on_error(exc)
        raise errors[0]

    # Front-end ───────────────────────────────────────────────────────────────────────────────
    def tokenize(self, source: str) -> TokenSequence:
        return scan(source)

    def parse(self, source: str) -> list[S.Stmt]:
        tokens = scan(source)
        self._report(tokens.errors)
        parser = Parser(tokens)
        statements = parser.parse()
        self._report(parser.errors)
        return statements

    def parse_expression(self, source: str) -> S.Expr:
        tokens = scan(source)
        self._report(tokens.errors)
        try:
            return Parser(tokens).single_expression()
        except LoxParseError as exc:
            self._report([exc])

    def resolve(self, statements: list[S.Stmt]) -> None:
        existing = set(self.interpreter.locals)
        try:
            Resolver(self.interpreter).resolve_statements(statements)
        except LoxParseError as exc:
            for slot in self.interpreter.locals.keys() - existing:
                del self.interpreter.locals[slot]
            self._report([exc])

    # Execution ───────────────────────────────────────────────────────────────────────────────
    def evaluate(self, source: str) -> Any:
        return self.interpreter.evaluate(self.parse_expression(source))

    def run(self, source: str) -> Any:
        """Execute a program, returning the value of its final statement if that is a bare expression."""
        statements = self.parse(source)
        self.resolve(statements)

        if statements and isinstance(last := statements[-1], S.Expression):
            self.interpreter.interpret(statements[:-1])
            return self.interpreter.evaluate(last.expression)
        self.interpreter.interpret(statements)
        return None

    # Registration ────────────────────────────────────────────────────────────────────────────
    def register_native(self, name: str, arity: int, fn: Callable[..., Any]) -> None:
        self.interpreter.define_global(name, NativeFunction(name, arity, fn))

    def define(self, name: str, value: Any) -> None:
        self.interpreter.define_global(name, value)

    # Introspection ───────────────────────────────────────────────────────────────────────────
    def get_global(self, name: str) -> Any:
        return self.interpreter.globals.values[name]

    def stringify(self, value: Any) -> str:
        return stringify(value)
