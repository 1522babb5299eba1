## loxi — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import gc
import math

import pytest

from loxi.runtime import Runtime
from loxi.errors import LoxRuntimeError, LoxResolveError
from loxi.callables import LoxFunction
from loxi.interpreter import is_truthy, is_equal


def _output(source: str, capsys) -> list[str]:
    Runtime().run(source)
    return capsys.readouterr().out.splitlines()


def _eval(source: str):
    return Runtime().evaluate(source)


def test_integer_arithmetic_stays_integer():
    value = _eval("6 * 7")
    assert value == 42 and isinstance(value, int)
    assert _eval("2 - 5") == -3


def test_division_always_produces_float():
    value = _eval("20 / 4")
    assert value == 5.0 and isinstance(value, float)


def test_mixed_arithmetic_promotes_to_float():
    value = _eval("1 + 1.5")
    assert value == 2.5 and isinstance(value, float)


def test_division_by_zero_follows_ieee():
    assert _eval("1 / 0") == math.inf
    assert _eval("-1 / 0") == -math.inf
    assert math.isnan(_eval("0 / 0"))


def test_string_concatenation():
    assert _eval('"foo" + "bar"') == "foobar"


def test_string_plus_number_is_runtime_error():
    with pytest.raises(LoxRuntimeError) as exc:
        _eval('"a" + 1')
    assert "Operands must be two numbers or two strings" in exc.value.message


def test_unary_operators():
    assert _eval("-(3)") == -3
    assert _eval("!nil") is True
    assert _eval("!0") is False
    with pytest.raises(LoxRuntimeError):
        _eval('-"x"')


def test_comparisons_require_numbers():
    assert _eval("1 < 2.5") is True
    assert _eval("3 >= 3") is True
    with pytest.raises(LoxRuntimeError):
        _eval('"a" < "b"')


def test_equality_is_same_variant_only():
    assert _eval("7 == 7") is True
    assert _eval('"7" == 7') is False
    assert _eval("nil == nil") is True
    assert _eval("true != 1") is True
    assert _eval("1 == 1.0") is False


def test_truthiness():
    assert not is_truthy(None) and not is_truthy(False)
    assert is_truthy(0) and is_truthy("") and is_truthy(0.0)
    assert not is_equal(True, 1)


def test_logical_operators_short_circuit_and_return_operand(capsys):
    lines = _output("""
        fun loud(x) { print x; return x; }
        print nil or "yes";
        print false and loud(1);
        print loud(2) or loud(3);
    """, capsys)
    assert lines == ["yes", "false", "2", "2"]


def test_print_formats_values(capsys):
    lines = _output('print 1; print 2.5; print "s"; print nil; print true; print 10 / 4; print 20 / 4;', capsys)
    assert lines == ["1", "2.5", "s", "nil", "true", "2.5", "5"]


def test_print_formats_callables(capsys):
    lines = _output("fun f() {} print f; print clock; print fun () {};", capsys)
    assert lines == ["<fn f>", "<native fn clock>", "<fn <lambda>>"]


def test_add_function_end_to_end(capsys):
    assert _output("fun add(x, y) { return x + y; } print add(2, 3);", capsys) == ["5"]


def test_function_without_return_yields_nil(capsys):
    assert _output("fun f() { 1; } print f();", capsys) == ["nil"]
    assert _output("fun g() { return; } print g();", capsys) == ["nil"]


def test_recursion(capsys):
    source = "fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); } print fib(15);"
    assert _output(source, capsys) == ["610"]


def test_counter_closure_keeps_private_state(capsys):
    lines = _output("""
        fun makeCounter() {
            var i = 0;
            fun count() { i = i + 1; print i; }
            return count;
        }
        var a = makeCounter();
        var b = makeCounter();
        a(); a(); b();
    """, capsys)
    assert lines == ["1", "2", "1"]


def test_closure_observes_later_mutation(capsys):
    lines = _output("""
        {
            var x = "before";
            fun show() { print x; }
            x = "after";
            show();
        }
    """, capsys)
    assert lines == ["after"]


def test_static_scope_ignores_later_shadowing(capsys):
    lines = _output("""
        var a = "global";
        {
            fun showA() { print a; }
            showA();
            var a = "block";
            showA();
        }
    """, capsys)
    assert lines == ["global", "global"]


def test_blocks_shadow_and_restore(capsys):
    lines = _output('var a = 1; { var a = 2; print a; } print a;', capsys)
    assert lines == ["2", "1"]


def test_block_environment_is_restored_after_error(capsys):
    rt = Runtime()
    with pytest.raises(LoxRuntimeError):
        rt.run('var a = "outer"; { var a = "inner"; nope; }')
    assert rt.interpreter.environment is rt.interpreter.globals
    rt.run("print a;")
    assert capsys.readouterr().out.splitlines() == ["outer"]


def test_for_loop_matches_while_loop(capsys):
    for_lines = _output("for (var i = 0; i < 3; i = i + 1) print i;", capsys)
    while_lines = _output("{ var i = 0; while (i < 3) { print i; i = i + 1; } }", capsys)
    assert for_lines == while_lines == ["0", "1", "2"]


def test_if_else(capsys):
    assert _output('if (0) print "zero"; else print "no";', capsys) == ["zero"]
    assert _output('if (nil) print "yes"; else print "no";', capsys) == ["no"]


def test_lambda_captures_current_environment(capsys):
    lines = _output("""
        fun adder(n) { return fun (x) { return x + n; }; }
        var add2 = adder(2);
        print add2(40);
    """, capsys)
    assert lines == ["42"]


def test_return_unwinds_nested_loops(capsys):
    source = "fun f() { while (true) { for (;;) { return 7; } } } print f();"
    assert _output(source, capsys) == ["7"]


def test_calling_non_callable_is_error():
    with pytest.raises(LoxRuntimeError) as exc:
        Runtime().run('"text"();')
    assert exc.value.message == "Error at ')': Can only call functions and classes."


def test_arity_mismatch_names_expected_and_actual():
    with pytest.raises(LoxRuntimeError) as exc:
        Runtime().run("fun f(a) {} f(1, 2);")
    assert str(exc.value) == "[line 1] RuntimeError: Error at ')': Expected 1 arguments but got 2."


def test_undefined_variable_is_runtime_error():
    with pytest.raises(LoxRuntimeError) as exc:
        Runtime().run("print nope;")
    assert exc.value.message == "Undefined variable 'nope'."


def test_assignment_to_undefined_global_is_error():
    with pytest.raises(LoxRuntimeError):
        Runtime().run("nope = 1;")


def test_assignment_returns_value(capsys):
    assert _output("var a; var b; a = b = 3; print a; print b;", capsys) == ["3", "3"]


def test_runtime_error_reports_line(capsys):
    with pytest.raises(LoxRuntimeError) as exc:
        Runtime().run('print 1;\nprint 2;\nprint -"x";')
    assert exc.value.line == 3
    assert capsys.readouterr().out.splitlines() == ["1", "2"]


def test_resolution_errors_prevent_execution(capsys):
    with pytest.raises(LoxResolveError):
        Runtime().run('print "ran"; { var a = a; }')
    assert capsys.readouterr().out == ""


def test_deep_recursion_is_reported_as_stack_overflow():
    with pytest.raises(LoxRuntimeError) as exc:
        Runtime().run("fun f() { f(); } f();")
    assert "Stack overflow." in exc.value.message


def test_functions_are_values():
    rt = Runtime()
    rt.run("fun twice(f, x) { return f(f(x)); } fun inc(n) { return n + 1; } var r = twice(inc, 1);")
    assert rt.get_global("r") == 3
    assert isinstance(rt.get_global("twice"), LoxFunction)


def test_verbose_trace_shows_top_level_steps(capsys):
    rt = Runtime(verbosity=1)
    rt.run("var a = 1; { print a; }")
    out = capsys.readouterr().out
    assert "(var a 1.0)" in out
    assert "(block (print a))" in out


def test_stats_count_steps():
    stats = {}
    Runtime(stats=stats).run("var a = 1; print a;")
    assert stats['steps'] == 2


def test_body_local_shadows_parameter(capsys):
    assert _output("fun f(a) { var a = 1; print a; } f(0);", capsys) == ["1"]


def test_body_reads_parameters_and_closure_together(capsys):
    lines = _output("""
        fun outer(n) {
            var base = n * 10;
            fun inner(k) { var total = base + k; base = total; return total; }
            return inner;
        }
        var f = outer(1);
        print f(2);
        print f(3);
    """, capsys)
    assert lines == ["12", "15"]


def test_integer_literals_are_exact(capsys):
    lines = _output("print 12345678901234567891; print 12345678901234567891 + 1;", capsys)
    assert lines == ["12345678901234567891", "12345678901234567892"]


def test_large_integer_comparisons_are_exact():
    assert _eval("9007199254740993 > 9007199254740992") is True
    assert _eval("9007199254740993 == 9007199254740992") is False


def test_float_promotion_overflow_is_runtime_error():
    big = "1" + "0" * 400
    with pytest.raises(LoxRuntimeError) as exc:
        _eval(f"{big} / 3")
    assert exc.value.message == "Error at '/': Numeric result out of range."


def test_resolution_entries_are_released_with_their_program():
    rt = Runtime()
    rt.run("{ var a = 1; a = a + 1; }")
    gc.collect()
    assert rt.interpreter.locals == {}


def test_resolution_entries_survive_in_closures(capsys):
    rt = Runtime()
    rt.run("fun keep(x) { var y = x; return y; }")
    gc.collect()
    assert len(rt.interpreter.locals) == 2
    rt.run("print keep(4);")
    assert capsys.readouterr().out == "4\n"


def test_failed_resolution_leaves_no_entries():
    rt = Runtime()
    with pytest.raises(LoxResolveError):
        rt.run("{ var b = 1; print b; var c = c; }")
    assert rt.interpreter.locals == {}
