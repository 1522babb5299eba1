## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import math

from .tokens import format_literal
from . import syntax as S


def stringify(value) -> str:
    if value is None: return "nil"
    if isinstance(value, bool): return str(value).lower()
    if isinstance(value, float):
        if math.isnan(value): return "NaN"
        if math.isinf(value): return "inf" if value > 0 else "-inf"
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def write_without_ansi(write_fn):
    """Wrapper function that strips ANSI codes before calling the original writer."""
    ansi_re = re.compile(r'\033\[[0-9;]*m')
    return lambda text: write_fn(ansi_re.sub('', text))


def format_node(node) -> str:
    """Canonical parenthesized form of an expression or statement, e.g. `(+ 1.0 (group 2.0))`."""
    match node:
        case S.Binary(left, operator, right):
            return _parens(operator.lexeme, left, right)
        case S.Unary(operator, right):
            return _parens(operator.lexeme, right)
        case S.Literal(token):
            return format_literal(token.literal)
        case S.Grouping(inner):
            return _parens("group", inner)
        case S.Variable(name):
            return name.lexeme
        case S.Assign(name, value):
            return _parens(f"= {name.lexeme}", value)
        case S.LogicOr(left, right):
            return _parens("or", left, right)
        case S.LogicAnd(left, right):
            return _parens("and", left, right)
        case S.Call(callee, _, arguments):
            return _parens("call", callee, *arguments)
        case S.Lambda(_, params, body):
            return _parens(f"fun ({' '.join(p.lexeme for p in params)})", *body)

        case S.Expression(expression):
            return _parens(";", expression)
        case S.Print(expression):
            return _parens("print", expression)
        case S.Var(name, initializer):
            return _parens(f"var {name.lexeme}", *([initializer] if initializer else []))
        case S.Block(statements):
            return _parens("block", *statements)
        case S.If(condition, then_branch, else_branch):
            return _parens("if", condition, then_branch, *([else_branch] if else_branch else []))
        case S.While(condition, body):
            return _parens("while", condition, body)
        case S.Function(name, params, body):
            return _parens(f"fun {name.lexeme}({' '.join(p.lexeme for p in params)})", *body)
        case S.Return(_, value):
            return _parens("return", *([value] if value else []))
    raise NotImplementedError(f"Cannot format node of type {type(node).__name__}.")

def _parens(head: str, *parts) -> str:
    return "(" + " ".join([head, *(format_node(p) for p in parts)]) + ")"


def format_source_context(filename: str, source: str, line: int) -> str:
    """Render the lines around `line` with the offending one highlighted, for error banners."""
    lines = source.splitlines()
    result = [f"\033[97m  File \"{filename}\", line {line}\033[0m"]
    for i in range(max(0, line - 3), min(len(lines), line + 2)):
        color = '\033[97m' if i + 1 == line else '\033[90m'
        result.append(f"{color}{i+1:>5} |\033[0m {lines[i]}")
    return '\n'.join(result) + '\n'


def show_step(step: int, stmt: S.Stmt, width=72):
    text = format_node(stmt)
    if len(text) > width:
        text = text[:width-2] + ' …'
    print(f"\033[90m{step:>3} :\033[0m  {text}")
