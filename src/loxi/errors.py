## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘


class LoxError(Exception):
    kind = "Lox"

    def __init__(self, message: str = "", *, line: int = 0, token=None):
        """Base class for all Lox-raised errors, tagged with the source line."""
        super().__init__(message)
        self.message: str = message
        self.line: int = line
        self.token = token

    def __str__(self):
        return f"[line {self.line}] {self.kind}Error: {self.message}"


class LoxLexicalError(LoxError):
    """Unexpected character or unterminated string, recorded while scanning."""
    kind = "Lexical"

class LoxParseError(LoxError, SyntaxError):
    kind = "Parse"

class LoxIncompleteParse(LoxParseError):
    """Parsing ran into the end of input; more source could still complete it."""
    pass

class LoxResolveError(LoxParseError):
    """Static scope errors; reported with the same shape as parse errors."""
    pass

class LoxRuntimeError(LoxError, RuntimeError):
    kind = "Runtime"
