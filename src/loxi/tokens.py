## loxi — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from enum import Enum, auto
from dataclasses import dataclass


class TokenType(Enum):
    # Single-character tokens.
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    SLASH = auto()
    STAR = auto()
    # One or two character tokens.
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()
    # Literals.
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    # Keywords.
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    EOF = auto()

    def __str__(self):
        return self.name


KEYWORDS: dict[str, TokenType] = {
    'and': TokenType.AND, 'class': TokenType.CLASS, 'else': TokenType.ELSE,
    'false': TokenType.FALSE, 'for': TokenType.FOR, 'fun': TokenType.FUN,
    'if': TokenType.IF, 'nil': TokenType.NIL, 'or': TokenType.OR,
    'print': TokenType.PRINT, 'return': TokenType.RETURN, 'super': TokenType.SUPER,
    'this': TokenType.THIS, 'true': TokenType.TRUE, 'var': TokenType.VAR,
    'while': TokenType.WHILE,
}

# Keywords that can only begin a statement; the parser resynchronizes on these.
STATEMENT_STARTS = frozenset({
    TokenType.CLASS, TokenType.FUN, TokenType.VAR, TokenType.FOR,
    TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
})


class Nil:
    """Literal payload for the `nil` keyword, distinct from a token having no literal at all."""
    __slots__ = ()

    def __repr__(self): return "nil"
    def __str__(self): return "nil"

NIL = Nil()


def format_literal(literal) -> str:
    """Display a literal payload; integral numbers keep one decimal place, as in `123.0`."""
    if isinstance(literal, bool): return str(literal).lower()
    if isinstance(literal, int): return f"{literal}.0"
    if isinstance(literal, float):
        return f"{literal:.1f}" if literal.is_integer() else repr(literal)
    return str(literal)


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    literal: int | float | str | bool | Nil | None
    line: int

    def __str__(self):
        literal = "null" if self.literal is None else format_literal(self.literal)
        return f"{self.type} {self.lexeme} {literal}"
