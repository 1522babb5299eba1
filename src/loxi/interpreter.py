## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import math
import weakref
from typing import Any, Iterable

from .tokens import Token, TokenType as T, Nil
from .errors import LoxRuntimeError
from .environment import Environment
from .callables import LoxCallable, LoxFunction, NativeFunction, ReturnSignal
from .builtins import load_builtins
from .formatting import stringify, show_step
from . import syntax as S


def is_truthy(value: Any) -> bool:
    if value is None: return False
    if isinstance(value, bool): return value
    return True

def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def is_equal(a: Any, b: Any) -> bool:
    # Same variant only; `bool` and `int` are distinct variants even though Python relates them.
    if type(a) is not type(b): return False
    if isinstance(a, LoxCallable): return a is b
    return a == b


def _error(token: Token, message: str) -> LoxRuntimeError:
    where = "end" if token.type == T.EOF else f"'{token.lexeme}'"
    return LoxRuntimeError(f"Error at {where}: {message}", line=token.line, token=token)

def _as_number(operator: Token, value: Any) -> int | float:
    if not is_number(value):
        raise _error(operator, f"Operand must be a number for {operator.lexeme}")
    return value

def _divide(a: float, b: float) -> float:
    if b != 0: return a / b
    # IEEE-754 semantics instead of the host's ZeroDivisionError.
    if a == 0 or math.isnan(a): return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


_ARITHMETIC = {
    T.MINUS: lambda a, b: a - b,
    T.STAR: lambda a, b: a * b,
}
_COMPARISON = {
    T.GREATER: lambda a, b: a > b,
    T.GREATER_EQUAL: lambda a, b: a >= b,
    T.LESS: lambda a, b: a < b,
    T.LESS_EQUAL: lambda a, b: a <= b,
}


class Interpreter:
    """Tree-walking evaluator over the current environment chain.

    Variable references the resolver annotated (see `resolve`) are read at a fixed distance from the
    current environment; everything else is looked up in `globals`.
    """

    def __init__(self, verbosity: int = 0, stats: dict | None = None):
        self.globals = Environment()
        self.environment = self.globals
        self.locals: dict[int, int] = {}
        self.verbosity = verbosity
        self.stats = stats
        self.steps = 0

        for name, native in load_builtins().items():
            self.globals.define(name, native)

    def define_global(self, name: str, value: Any) -> None:
        self.globals.define(name, value)

    # Resolution side table ───────────────────────────────────────────────────────────────────
    def resolve(self, expr: S.Variable | S.Assign, depth: int) -> None:
        assert expr.slot not in self.locals, f"Reference `{expr.name.lexeme}` was already resolved."
        self.locals[expr.slot] = depth
        # Entries live as long as their node; closures keep the nodes of their bodies alive.
        weakref.finalize(expr, self.locals.pop, expr.slot, None)

    def resolution(self, expr: S.Variable | S.Assign) -> int | None:
        return self.locals.get(expr.slot)

    # Statements ──────────────────────────────────────────────────────────────────────────────
    def interpret(self, statements: Iterable[S.Stmt]) -> None:
        """Run a whole program; a `LoxRuntimeError` stops it and propagates to the caller."""
        try:
            for stmt in statements:
                self.execute(stmt, top_level=True)
        finally:
            if self.stats is not None:
                self.stats['steps'] = self.stats.get('steps', 0) + self.steps
                self.steps = 0

    def execute(self, stmt: S.Stmt, top_level: bool = False) -> None:
        if self.verbosity == 2 or (self.verbosity == 1 and top_level):
            show_step(self.steps, stmt)
        self.steps += 1

        match stmt:
            case S.Expression(expression):
                self.evaluate(expression)
            case S.Print(expression):
                print(stringify(self.evaluate(expression)))
            case S.Var(name, initializer):
                value = None if initializer is None else self.evaluate(initializer)
                self.environment.define(name.lexeme, value)
            case S.Block(statements):
                self.execute_block(statements, Environment(self.environment))
            case S.If(condition, then_branch, else_branch):
                if is_truthy(self.evaluate(condition)):
                    self.execute(then_branch)
                elif else_branch is not None:
                    self.execute(else_branch)
            case S.While(condition, body):
                while is_truthy(self.evaluate(condition)):
                    self.execute(body)
            case S.Function(name):
                self.environment.define(name.lexeme, LoxFunction.from_declaration(stmt, self.environment))
            case S.Return(_, value):
                raise ReturnSignal(None if value is None else self.evaluate(value))
            case _:
                raise NotImplementedError(f"Cannot execute {type(stmt).__name__}.")

    def execute_block(self, statements: Iterable[S.Stmt], environment: Environment) -> None:
        previous = self.environment
        self.environment = environment
        try:
            for stmt in statements:
                self.execute(stmt)
        finally:
            self.environment = previous

    # Expressions ─────────────────────────────────────────────────────────────────────────────
    def evaluate(self, expr: S.Expr) -> Any:
        match expr:
            case S.Literal(token):
                return self._literal(token)
            case S.Grouping(inner):
                return self.evaluate(inner)
            case S.Unary(operator, right):
                return self._unary(operator, self.evaluate(right))
            case S.Binary(left, operator, right):
                left_value, right_value = self.evaluate(left), self.evaluate(right)
                try:
                    return self._binary(operator, left_value, right_value)
                except OverflowError:
                    # Integers are unbounded, but promoting one to floating can still overflow.
                    raise _error(operator, "Numeric result out of range.") from None
            case S.Variable(name):
                return self._lookup(expr, name)
            case S.Assign(name, value_expr):
                value = self.evaluate(value_expr)
                if (distance := self.resolution(expr)) is None:
                    self.globals.assign(name, value)
                else:
                    self.environment.assign_at(distance, name, value)
                return value
            case S.LogicOr(left, right):
                value = self.evaluate(left)
                return value if is_truthy(value) else self.evaluate(right)
            case S.LogicAnd(left, right):
                value = self.evaluate(left)
                return value if not is_truthy(value) else self.evaluate(right)
            case S.Call(callee, paren, arguments):
                return self._call(self.evaluate(callee), paren, arguments)
            case S.Lambda():
                return LoxFunction.from_lambda(expr, self.environment)
        raise NotImplementedError(f"Cannot evaluate {type(expr).__name__}.")

    def _lookup(self, expr: S.Variable, name: Token) -> Any:
        if (distance := self.resolution(expr)) is None:
            return self.globals.get(name)
        return self.environment.get_at(distance, name)

    def _literal(self, token: Token) -> Any:
        literal = token.literal
        if isinstance(literal, Nil): return None
        return literal

    def _unary(self, operator: Token, right: Any) -> Any:
        match operator.type:
            case T.BANG:
                return not is_truthy(right)
            case T.MINUS:
                if not is_number(right):
                    raise _error(operator, "Operand must be a number for unary '-'")
                return -right
        raise _error(operator, f"Unsupported unary operator: {operator.type}")

    def _binary(self, operator: Token, left: Any, right: Any) -> Any:
        match operator.type:
            case T.EQUAL_EQUAL:
                return is_equal(left, right)
            case T.BANG_EQUAL:
                return not is_equal(left, right)
            case T.PLUS:
                if isinstance(left, str) and isinstance(right, str):
                    return left + right
                if not (is_number(left) and is_number(right)):
                    raise _error(operator, "Operands must be two numbers or two strings for '+'")
                return left + right
            case T.MINUS | T.STAR:
                if not (is_number(left) and is_number(right)):
                    raise _error(operator, f"Operands must be two numbers for '{operator.lexeme}'")
                return _ARITHMETIC[operator.type](left, right)
            case T.SLASH:
                if not (is_number(left) and is_number(right)):
                    raise _error(operator, "Operands must be two numbers for '/'")
                return _divide(float(left), float(right))
            case T.GREATER | T.GREATER_EQUAL | T.LESS | T.LESS_EQUAL:
                return _COMPARISON[operator.type](_as_number(operator, left), _as_number(operator, right))
        raise _error(operator, f"Unsupported binary operator: {operator.type}")

    def _call(self, callee: Any, paren: Token, arguments: tuple[S.Expr, ...]) -> Any:
        if not isinstance(callee, LoxCallable):
            raise _error(paren, "Can only call functions and classes.")

        values = [self.evaluate(argument) for argument in arguments]
        if len(values) != callee.arity():
            raise _error(paren, f"Expected {callee.arity()} arguments but got {len(values)}.")

        if isinstance(callee, NativeFunction):
            try:
                return callee.call(self, values)
            except LoxRuntimeError:
                raise
            except Exception as exc:
                raise _error(paren, f"Native function `{callee.name}` failed: {exc}") from exc
        try:
            return callee.call(self, values)
        except RecursionError:
            raise _error(paren, "Stack overflow.") from None
