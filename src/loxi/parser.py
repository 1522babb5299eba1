## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Callable, Sequence

from .tokens import Token, TokenType as T, STATEMENT_STARTS
from .errors import LoxParseError, LoxIncompleteParse
from . import syntax as S


MAX_ARGUMENTS = 255

_EQUALITY = (T.BANG_EQUAL, T.EQUAL_EQUAL)
_COMPARISON = (T.GREATER, T.GREATER_EQUAL, T.LESS, T.LESS_EQUAL)
_TERM = (T.MINUS, T.PLUS)
_FACTOR = (T.SLASH, T.STAR)
_UNARY = (T.BANG, T.MINUS)
_LITERALS = (T.NUMBER, T.STRING, T.TRUE, T.FALSE, T.NIL)


class Parser:
    """Recursive-descent parser, one method per precedence level from `assignment` down to `primary`.

    `parse()` recovers from errors at statement boundaries and keeps going, so that every independent
    syntax error is reported; they are collected in `errors` and also passed to `on_error` if given.
    `expression()` has no statement context to recover to, so the first error is raised.
    """

    def __init__(self, tokens: Sequence[Token], on_error: Callable[[LoxParseError], None] | None = None):
        self.tokens = list(tokens)
        self.current = 0
        self.on_error = on_error
        self.errors: list[LoxParseError] = []

    @property
    def had_error(self) -> bool:
        return len(self.errors) > 0

    # Entry points ────────────────────────────────────────────────────────────────────────────
    def parse(self) -> list[S.Stmt]:
        statements = []
        while not self._at_end():
            if (stmt := self._declaration()) is not None:
                statements.append(stmt)
        return statements

    def expression(self) -> S.Expr:
        return self._assignment()

    def single_expression(self) -> S.Expr:
        """Parse input holding one expression, optionally closed by `;`, and nothing after it."""
        expr = self.expression()
        self._match(T.SEMICOLON)
        if not self._at_end():
            raise self._error(self._peek(), "Expect end of expression.")
        return expr

    # Statements ──────────────────────────────────────────────────────────────────────────────
    def _declaration(self) -> S.Stmt | None:
        try:
            if self._check(T.VAR):
                return self._var_declaration()
            if self._check(T.FUN) and self._check_next(T.IDENTIFIER):
                self._advance()
                return self._function("function")
            return self._statement()
        except LoxParseError as exc:
            self._report(exc)
            self._synchronize()
            return None

    def _var_declaration(self) -> S.Var:
        self._advance()
        name = self._consume(T.IDENTIFIER, "Expect variable name.")
        initializer = self.expression() if self._match(T.EQUAL) else None
        self._consume(T.SEMICOLON, "Expect ';' after variable declaration.")
        return S.Var(name, initializer)

    def _function(self, kind: str) -> S.Function:
        name = self._consume(T.IDENTIFIER, f"Expect {kind} name.")
        self._consume(T.LEFT_PAREN, f"Expect '(' after {kind} name.")
        params = self._parameters()
        self._consume(T.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return S.Function(name, params, self._block())

    def _parameters(self) -> tuple[Token, ...]:
        params = []
        if not self._check(T.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    self._report(self._error(self._peek(), f"Can't have more than {MAX_ARGUMENTS} parameters."))
                params.append(self._consume(T.IDENTIFIER, "Expect parameter name."))
                if not self._match(T.COMMA): break
        self._consume(T.RIGHT_PAREN, "Expect ')' after parameters.")
        return tuple(params)

    def _statement(self) -> S.Stmt:
        if self._match(T.PRINT): return self._print_statement()
        if self._match(T.LEFT_BRACE): return S.Block(self._block())
        if self._match(T.IF): return self._if_statement()
        if self._match(T.WHILE): return self._while_statement()
        if self._match(T.FOR): return self._for_statement()
        if self._check(T.RETURN): return self._return_statement()
        return self._expression_statement()

    def _print_statement(self) -> S.Print:
        value = self.expression()
        self._consume(T.SEMICOLON, "Expect ';' after value.")
        return S.Print(value)

    def _return_statement(self) -> S.Return:
        keyword = self._advance()
        value = None if self._check(T.SEMICOLON) else self.expression()
        self._consume(T.SEMICOLON, "Expect ';' after return value.")
        return S.Return(keyword, value)

    def _expression_statement(self) -> S.Expression:
        expr = self.expression()
        self._consume(T.SEMICOLON, "Expect ';' after expression.")
        return S.Expression(expr)

    def _block(self) -> tuple[S.Stmt, ...]:
        statements = []
        while not self._check(T.RIGHT_BRACE) and not self._at_end():
            if (stmt := self._declaration()) is not None:
                statements.append(stmt)
        self._consume(T.RIGHT_BRACE, "Expect '}' after block.")
        return tuple(statements)

    def _if_statement(self) -> S.If:
        self._consume(T.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self._consume(T.RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self._statement()
        else_branch = self._statement() if self._match(T.ELSE) else None
        return S.If(condition, then_branch, else_branch)

    def _while_statement(self) -> S.While:
        self._consume(T.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self._consume(T.RIGHT_PAREN, "Expect ')' after while condition.")
        return S.While(condition, self._statement())

    def _for_statement(self) -> S.Stmt:
        """No `for` node exists: the loop is rewritten into `{ init; while (cond) { body; incr; } }`."""
        for_token = self._previous()
        self._consume(T.LEFT_PAREN, "Expect '(' after 'for'.")

        if self._match(T.SEMICOLON):
            initializer = None
        elif self._check(T.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        if self._check(T.SEMICOLON):
            condition = S.Literal(Token(T.TRUE, "true", True, for_token.line))
        else:
            condition = self.expression()
        self._consume(T.SEMICOLON, "Expect ';' after loop condition.")

        increment = None if self._check(T.RIGHT_PAREN) else self.expression()
        self._consume(T.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self._statement()
        if increment is not None:
            body = S.Block((body, S.Expression(increment)))
        loop = S.While(condition, body)
        return S.Block((initializer, loop)) if initializer is not None else loop

    # Expressions ─────────────────────────────────────────────────────────────────────────────
    def _assignment(self) -> S.Expr:
        expr = self._logic_or()

        if self._check(T.EQUAL):
            equals = self._advance()
            value = self._assignment()
            if isinstance(expr, S.Variable):
                return S.Assign(expr.name, value)
            raise self._error(equals, "Invalid assignment target.")

        return expr

    def _logic_or(self) -> S.Expr:
        expr = self._logic_and()
        while self._match(T.OR):
            expr = S.LogicOr(expr, self._logic_and())
        return expr

    def _logic_and(self) -> S.Expr:
        expr = self._equality()
        while self._match(T.AND):
            expr = S.LogicAnd(expr, self._equality())
        return expr

    def _equality(self) -> S.Expr:
        return self._binary(self._comparison, _EQUALITY)

    def _comparison(self) -> S.Expr:
        return self._binary(self._term, _COMPARISON)

    def _term(self) -> S.Expr:
        return self._binary(self._factor, _TERM)

    def _factor(self) -> S.Expr:
        return self._binary(self._unary, _FACTOR)

    def _binary(self, operand: Callable[[], S.Expr], operators: tuple[T, ...]) -> S.Expr:
        # Left-associative: each new operator folds everything parsed so far into its left side.
        expr = operand()
        while self._check(*operators):
            operator = self._advance()
            expr = S.Binary(expr, operator, operand())
        return expr

    def _unary(self) -> S.Expr:
        if self._check(*_UNARY):
            operator = self._advance()
            return S.Unary(operator, self._unary())
        return self._call()

    def _call(self) -> S.Expr:
        expr = self._primary()
        while self._match(T.LEFT_PAREN):
            expr = self._finish_call(expr)
        return expr

    def _finish_call(self, callee: S.Expr) -> S.Call:
        arguments = []
        if not self._check(T.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGUMENTS:
                    self._report(self._error(self._peek(), f"Can't have more than {MAX_ARGUMENTS} arguments."))
                arguments.append(self.expression())
                if not self._match(T.COMMA): break
        paren = self._consume(T.RIGHT_PAREN, "Expect ')' after arguments.")
        return S.Call(callee, paren, tuple(arguments))

    def _primary(self) -> S.Expr:
        if self._check(*_LITERALS):
            return S.Literal(self._advance())
        if self._check(T.IDENTIFIER):
            return S.Variable(self._advance())
        if self._match(T.LEFT_PAREN):
            expr = self.expression()
            self._consume(T.RIGHT_PAREN, "Expect ')' after expression.")
            return S.Grouping(expr)
        if self._check(T.FUN):
            keyword = self._advance()
            self._consume(T.LEFT_PAREN, "Expect '(' after 'fun'.")
            params = self._parameters()
            self._consume(T.LEFT_BRACE, "Expect '{' before lambda body.")
            return S.Lambda(keyword, params, self._block())
        raise self._error(self._peek(), "Expect expression.")

    # Error handling ──────────────────────────────────────────────────────────────────────────
    def _error(self, token: Token, message: str) -> LoxParseError:
        if token.type == T.EOF:
            return LoxIncompleteParse(f"Error at end: {message}", line=token.line, token=token)
        return LoxParseError(f"Error at '{token.lexeme}': {message}", line=token.line, token=token)

    def _report(self, exc: LoxParseError) -> None:
        self.errors.append(exc)
        if self.on_error is not None:
            self.on_error(exc)

    def _synchronize(self) -> None:
        """Discard tokens until just after a semicolon, or just before a statement keyword."""
        self._advance()
        while not self._at_end():
            if self._previous().type == T.SEMICOLON: return
            if self._peek().type in STATEMENT_STARTS: return
            self._advance()

    # Cursor helpers ──────────────────────────────────────────────────────────────────────────
    def _peek(self) -> Token:
        return self.tokens[self.current]

    def _previous(self) -> Token:
        return self.tokens[self.current - 1]

    def _at_end(self) -> bool:
        return self._peek().type == T.EOF

    def _advance(self) -> Token:
        if not self._at_end():
            self.current += 1
        return self._previous()

    def _check(self, *types: T) -> bool:
        return self._peek().type in types

    def _check_next(self, type_: T) -> bool:
        if self._at_end(): return False
        return self.tokens[self.current + 1].type == type_

    def _match(self, type_: T) -> bool:
        if not self._check(type_): return False
        self._advance()
        return True

    def _consume(self, type_: T, message: str) -> Token:
        if self._check(type_):
            return self._advance()
        raise self._error(self._peek(), message)
