## loxi — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import pytest

from loxi.environment import Environment
from loxi.tokens import Token, TokenType as T
from loxi.errors import LoxRuntimeError


def _name(lexeme: str, line: int = 1) -> Token:
    return Token(T.IDENTIFIER, lexeme, None, line)


def test_define_then_get():
    env = Environment()
    env.define("a", 1)
    assert env.get(_name("a")) == 1


def test_redefinition_overwrites():
    env = Environment()
    env.define("a", 1)
    env.define("a", "two")
    assert env.get(_name("a")) == "two"


def test_get_walks_enclosing_chain():
    outer = Environment()
    outer.define("a", 1)
    inner = Environment(Environment(outer))
    assert inner.get(_name("a")) == 1


def test_get_undefined_raises_with_line():
    with pytest.raises(LoxRuntimeError) as exc:
        Environment().get(_name("missing", line=4))
    assert str(exc.value) == "[line 4] RuntimeError: Undefined variable 'missing'."


def test_assign_updates_nearest_binding_only():
    outer = Environment()
    outer.define("a", 1)
    inner = Environment(outer)
    inner.assign(_name("a"), 2)
    assert outer.values == {"a": 2}
    assert inner.values == {}


def test_assign_never_creates_binding():
    env = Environment()
    with pytest.raises(LoxRuntimeError):
        env.assign(_name("a"), 1)
    assert "a" not in env.values


def test_ancestor_distances():
    root = Environment()
    child = Environment(root)
    grandchild = Environment(child)
    assert grandchild.ancestor(0) is grandchild
    assert grandchild.ancestor(2) is root
    assert grandchild.ancestor(3) is None


def test_get_at_reads_only_the_exact_scope():
    root = Environment()
    root.define("a", "root")
    child = Environment(root)
    child.define("a", "child")
    assert child.get_at(0, _name("a")) == "child"
    assert child.get_at(1, _name("a")) == "root"

    other = Environment(root)
    with pytest.raises(LoxRuntimeError):
        other.get_at(0, _name("a"))


def test_assign_at_writes_the_exact_scope():
    root = Environment()
    root.define("a", 1)
    child = Environment(root)
    child.define("a", 2)
    child.assign_at(1, _name("a"), 3)
    assert root.values["a"] == 3 and child.values["a"] == 2


def test_out_of_range_distance_is_undefined():
    with pytest.raises(LoxRuntimeError):
        Environment().get_at(5, _name("a"))


def test_shared_environment_is_seen_by_all_holders():
    shared = Environment()
    shared.define("n", 0)
    first, second = Environment(shared), Environment(shared)
    first.assign(_name("n"), 10)
    assert second.get(_name("n")) == 10
