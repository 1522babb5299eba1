## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Any

from .tokens import Token
from .errors import LoxRuntimeError


class Environment:
    """One scope instance at run time, chained to its enclosing scope.

    Instances are shared by reference between call frames and closures, so a write through any
    holder is seen by all of them.
    """

    __slots__ = ('enclosing', 'values')

    def __init__(self, enclosing: 'Environment | None' = None):
        self.enclosing = enclosing
        self.values: dict[str, Any] = {}

    def define(self, name: str, value: Any) -> None:
        self.values[name] = value

    def get(self, name: Token) -> Any:
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise _undefined(name)

    def assign(self, name: Token, value: Any) -> None:
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise _undefined(name)

    def ancestor(self, distance: int) -> 'Environment | None':
        env = self
        for _ in range(distance):
            if env is None: break
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: Token) -> Any:
        if (env := self.ancestor(distance)) is None or name.lexeme not in env.values:
            raise _undefined(name)
        return env.values[name.lexeme]

    def assign_at(self, distance: int, name: Token, value: Any) -> None:
        if (env := self.ancestor(distance)) is None or name.lexeme not in env.values:
            raise _undefined(name)
        env.values[name.lexeme] = value

    def __repr__(self):
        return f"<Environment names={sorted(self.values)} enclosing={self.enclosing is not None}>"


def _undefined(name: Token) -> LoxRuntimeError:
    return LoxRuntimeError(f"Undefined variable '{name.lexeme}'.", line=name.line, token=name)
