## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from abc import ABC, abstractmethod
from typing import Any, Callable

from .environment import Environment
from .tokens import Token
from . import syntax as S


class ControlFlow(Exception):
    """Non-error unwinding out of nested statement execution."""
    pass

class ReturnSignal(ControlFlow):
    def __init__(self, value: Any):
        super().__init__()
        self.value = value


class LoxCallable(ABC):
    name: str

    @abstractmethod
    def arity(self) -> int: ...

    @abstractmethod
    def call(self, interpreter, arguments: list[Any]) -> Any: ...


class LoxFunction(LoxCallable):
    """User-defined function or lambda, paired with the environment that was active when it was created."""

    def __init__(self, name: str, params: tuple[Token, ...], body: tuple[S.Stmt, ...], closure: Environment):
        self.name = name
        self.params = params
        self.body = body
        self.closure = closure

    @classmethod
    def from_declaration(cls, decl: S.Function, closure: Environment) -> 'LoxFunction':
        return cls(decl.name.lexeme, decl.params, decl.body, closure)

    @classmethod
    def from_lambda(cls, expr: S.Lambda, closure: Environment) -> 'LoxFunction':
        return cls("<lambda>", expr.params, expr.body, closure)

    def arity(self) -> int:
        return len(self.params)

    def call(self, interpreter, arguments: list[Any]) -> Any:
        environment = Environment(self.closure)
        for param, argument in zip(self.params, arguments, strict=True):
            environment.define(param.lexeme, argument)

        try:
            interpreter.execute_block(self.body, Environment(environment))
        except ReturnSignal as signal:
            return signal.value
        return None

    def __str__(self):
        return f"<fn {self.name}>"

    __repr__ = __str__


class NativeFunction(LoxCallable):
    """Host function exposed to scripts; receives the already evaluated arguments positionally."""

    def __init__(self, name: str, arity: int, fn: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self.fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter, arguments: list[Any]) -> Any:
        return self.fn(*arguments)

    def __str__(self):
        return f"<native fn {self.name}>"

    __repr__ = __str__
