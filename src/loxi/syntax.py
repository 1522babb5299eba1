## loxi — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# Expression and statement trees produced by the parser.  Nodes are frozen once built; the
# resolver records binding distances in a side table keyed by each reference's `slot`.
#

import itertools
from dataclasses import dataclass, field

from .tokens import Token


_slots = itertools.count()

def _next_slot() -> int:
    return next(_slots)


class Expr:
    __slots__ = ()

class Stmt:
    __slots__ = ()


## EXPRESSIONS
@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr

@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    right: Expr

@dataclass(frozen=True)
class Literal(Expr):
    token: Token

@dataclass(frozen=True)
class Grouping(Expr):
    inner: Expr

@dataclass(frozen=True)
class Variable(Expr):
    name: Token
    slot: int = field(default_factory=_next_slot, compare=False)

@dataclass(frozen=True)
class Assign(Expr):
    name: Token
    value: Expr
    slot: int = field(default_factory=_next_slot, compare=False)

@dataclass(frozen=True)
class LogicOr(Expr):
    left: Expr
    right: Expr

@dataclass(frozen=True)
class LogicAnd(Expr):
    left: Expr
    right: Expr

@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    paren: Token
    arguments: tuple[Expr, ...]

@dataclass(frozen=True)
class Lambda(Expr):
    keyword: Token
    params: tuple[Token, ...]
    body: tuple[Stmt, ...]


## STATEMENTS
@dataclass(frozen=True)
class Expression(Stmt):
    expression: Expr

@dataclass(frozen=True)
class Print(Stmt):
    expression: Expr

@dataclass(frozen=True)
class Var(Stmt):
    name: Token
    initializer: Expr | None = None

@dataclass(frozen=True)
class Block(Stmt):
    statements: tuple[Stmt, ...]

@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None = None

@dataclass(frozen=True)
class While(Stmt):
    condition: Expr
    body: Stmt

@dataclass(frozen=True)
class Function(Stmt):
    name: Token
    params: tuple[Token, ...]
    body: tuple[Stmt, ...]

@dataclass(frozen=True)
class Return(Stmt):
    keyword: Token
    value: Expr | None = None
