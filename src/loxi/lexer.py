## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import string
from dataclasses import dataclass, field

from .tokens import Token, TokenType as T, KEYWORDS, NIL
from .errors import LoxLexicalError


_SINGLE = {
    '(': T.LEFT_PAREN, ')': T.RIGHT_PAREN, '{': T.LEFT_BRACE, '}': T.RIGHT_BRACE,
    ',': T.COMMA, '.': T.DOT, '-': T.MINUS, '+': T.PLUS, ';': T.SEMICOLON, '*': T.STAR,
}
# Operators that become a two-character token when followed by `=`.
_WITH_EQUAL = {
    '!': (T.BANG, T.BANG_EQUAL), '=': (T.EQUAL, T.EQUAL_EQUAL),
    '<': (T.LESS, T.LESS_EQUAL), '>': (T.GREATER, T.GREATER_EQUAL),
}
_KEYWORD_LITERALS = {T.TRUE: True, T.FALSE: False, T.NIL: NIL}

_DIGITS = frozenset(string.digits)
_ALPHA = frozenset(string.ascii_letters + '_')
_ALNUM = _ALPHA | _DIGITS


@dataclass
class TokenSequence:
    tokens: list[Token]
    errors: list[LoxLexicalError] = field(default_factory=list)

    @property
    def had_error(self) -> bool:
        return len(self.errors) > 0

    def __iter__(self):
        return iter(self.tokens)

    def __len__(self):
        return len(self.tokens)

    def __getitem__(self, index):
        return self.tokens[index]


class Lexer:
    """Single pass scanner; errors are recorded and scanning always runs to the end of input."""

    def __init__(self, source: str):
        self.source = source
        self.start = 0
        self.current = 0
        self.line = 1
        self.tokens: list[Token] = []
        self.errors: list[LoxLexicalError] = []
        self._unterminated: list[LoxLexicalError] = []

    def scan_tokens(self) -> TokenSequence:
        while not self._at_end():
            self.start = self.current
            self._scan_token()

        self.tokens.append(Token(T.EOF, "", None, self.line))
        return TokenSequence(self.tokens, self.errors + self._unterminated)

    def _scan_token(self) -> None:
        c = self._advance()
        if c in _SINGLE:
            self._add_token(_SINGLE[c])
        elif c in _WITH_EQUAL:
            single, double = _WITH_EQUAL[c]
            self._add_token(double if self._match('=') else single)
        elif c == '/':
            if self._match('/'):
                while self._peek() not in ('\n', ''):
                    self.current += 1
            else:
                self._add_token(T.SLASH)
        elif c == '\n':
            self.line += 1
        elif c.isspace():
            pass
        elif c == '"':
            self._string()
        elif c in _DIGITS:
            self._number()
        elif c in _ALPHA:
            self._identifier()
        else:
            self.errors.append(LoxLexicalError(f"Unexpected character: {c}", line=self.line))

    def _string(self) -> None:
        while self._peek() not in ('"', ''):
            if self._peek() == '\n':
                self.line += 1
            self.current += 1

        if self._at_end():
            self._unterminated.append(LoxLexicalError("Unterminated string.", line=self.line))
            return

        self.current += 1  # Closing quote.
        self._add_token(T.STRING, self.source[self.start + 1:self.current - 1])

    def _number(self) -> None:
        while self._peek() in _DIGITS:
            self.current += 1
        # Only one fractional part, and it needs a digit after the dot.
        if self._peek() == '.' and self._peek_next() in _DIGITS:
            self.current += 1
            while self._peek() in _DIGITS:
                self.current += 1
        text = self.source[self.start:self.current]
        # The lexeme decides the kind: no dot means an exact, unbounded integer.
        self._add_token(T.NUMBER, float(text) if '.' in text else int(text))

    def _identifier(self) -> None:
        while self._peek() in _ALNUM:
            self.current += 1
        kind = KEYWORDS.get(self.source[self.start:self.current], T.IDENTIFIER)
        self._add_token(kind, _KEYWORD_LITERALS.get(kind))

    # Cursor helpers ──────────────────────────────────────────────────────────────────────────
    def _at_end(self) -> bool:
        return self.current >= len(self.source)

    def _advance(self) -> str:
        c = self.source[self.current]
        self.current += 1
        return c

    def _match(self, expected: str) -> bool:
        if self._peek() != expected: return False
        self.current += 1
        return True

    def _peek(self) -> str:
        return self.source[self.current] if self.current < len(self.source) else ''

    def _peek_next(self) -> str:
        return self.source[self.current + 1] if self.current + 1 < len(self.source) else ''

    def _add_token(self, kind: T, literal=None) -> None:
        lexeme = self.source[self.start:self.current]
        self.tokens.append(Token(kind, lexeme, literal, self.line))


def scan(source: str) -> TokenSequence:
    return Lexer(source).scan_tokens()
