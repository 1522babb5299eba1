## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from enum import Enum, auto
from typing import Iterable

from .tokens import Token
from .errors import LoxResolveError
from . import syntax as S


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    LAMBDA = auto()


class Resolver:
    """Static pass computing, for each local variable reference, how many scopes out it was declared.

    Each scope maps a name to False while its initializer is being resolved and True once defined.
    Names not found in any scope are left unresolved and become global lookups at run time.
    The first error aborts the pass with a `LoxResolveError`.
    """

    def __init__(self, interpreter):
        self.interpreter = interpreter
        self.scopes: list[dict[str, bool]] = []
        self.current_function = FunctionType.NONE

    def resolve_statements(self, statements: Iterable[S.Stmt]) -> None:
        for stmt in statements:
            self._resolve_stmt(stmt)

    def _resolve_stmt(self, stmt: S.Stmt) -> None:
        match stmt:
            case S.Block(statements):
                self.scopes.append({})
                try:
                    self.resolve_statements(statements)
                finally:
                    self.scopes.pop()
            case S.Var(name, initializer):
                self._declare(name)
                if initializer is not None:
                    self._resolve_expr(initializer)
                self._define(name)
            case S.Function(name, params, body):
                self._declare(name)
                self._define(name)
                self._resolve_function(params, body, FunctionType.FUNCTION)
            case S.Expression(expression) | S.Print(expression):
                self._resolve_expr(expression)
            case S.If(condition, then_branch, else_branch):
                self._resolve_expr(condition)
                self._resolve_stmt(then_branch)
                if else_branch is not None:
                    self._resolve_stmt(else_branch)
            case S.While(condition, body):
                self._resolve_expr(condition)
                self._resolve_stmt(body)
            case S.Return(keyword, value):
                if self.current_function == FunctionType.NONE:
                    raise _error(keyword, "Can't return from top-level code.")
                if value is not None:
                    self._resolve_expr(value)
            case _:
                raise NotImplementedError(f"Cannot resolve {type(stmt).__name__}.")

    def _resolve_expr(self, expr: S.Expr) -> None:
        match expr:
            case S.Variable(name):
                if self.scopes and self.scopes[-1].get(name.lexeme) is False:
                    raise _error(name, "Can't read local variable in its own initializer.")
                self._resolve_local(expr, name)
            case S.Assign(name, value):
                self._resolve_expr(value)
                self._resolve_local(expr, name)
            case S.Binary(left, _, right) | S.LogicOr(left, right) | S.LogicAnd(left, right):
                self._resolve_expr(left)
                self._resolve_expr(right)
            case S.Unary(_, inner) | S.Grouping(inner):
                self._resolve_expr(inner)
            case S.Call(callee, _, arguments):
                self._resolve_expr(callee)
                for argument in arguments:
                    self._resolve_expr(argument)
            case S.Lambda(_, params, body):
                self._resolve_function(params, body, FunctionType.LAMBDA)
            case S.Literal():
                pass
            case _:
                raise NotImplementedError(f"Cannot resolve {type(expr).__name__}.")

    def _resolve_function(self, params: tuple[Token, ...], body: tuple[S.Stmt, ...], kind: FunctionType) -> None:
        # Parameters get their own scope; the body is resolved as a nested block, so its locals may shadow them.
        enclosing, self.current_function = self.current_function, kind
        self.scopes.append({})
        try:
            for param in params:
                self._declare(param)
                self._define(param)
            self._resolve_stmt(S.Block(body))
        finally:
            self.scopes.pop()
            self.current_function = enclosing

    def _resolve_local(self, expr: S.Variable | S.Assign, name: Token) -> None:
        for index in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[index]:
                self.interpreter.resolve(expr, len(self.scopes) - 1 - index)
                return

    def _declare(self, name: Token) -> None:
        if not self.scopes: return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            raise _error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def _define(self, name: Token) -> None:
        if not self.scopes: return
        self.scopes[-1][name.lexeme] = True


def _error(token: Token, message: str) -> LoxResolveError:
    return LoxResolveError(f"Error at '{token.lexeme}': {message}", line=token.line, token=token)
