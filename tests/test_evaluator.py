"""Tests for the asteval-backed evaluator."""

import math

import numpy as np
import pytest

from ploteq.evaluator import Evaluator, to_python_syntax


class TestToPythonSyntax:
    def test_caret_is_power(self):
        assert to_python_syntax("x^2+y^3") == "x**2+y**3"

    def test_untouched_without_caret(self):
        assert to_python_syntax("sin(x)*2") == "sin(x)*2"


class TestEvaluate:
    def test_simple_binding(self):
        ev = Evaluator("x*y+0*x*y")
        assert ev.evaluate({"x": 2.0, "y": 3.0}) == 6.0

    def test_bindings_change_between_calls(self):
        ev = Evaluator("x^2")
        assert ev.evaluate({"x": 3.0}) == 9.0
        assert ev.evaluate({"x": -4.0}) == 16.0

    def test_library_functions_available(self):
        ev = Evaluator("sin(x)+0*x")
        assert ev.evaluate({"x": 1.0}) == pytest.approx(math.sin(1.0))

    def test_constants_available(self):
        ev = Evaluator("pi*x")
        assert ev.evaluate({"x": 2.0}) == pytest.approx(2 * math.pi)

    def test_division_by_zero_is_infinite(self):
        ev = Evaluator("1/x")
        assert ev.evaluate({"x": 0.0}) == math.inf

    def test_negative_division_by_zero(self):
        ev = Evaluator("-1/x")
        assert ev.evaluate({"x": 0.0}) == -math.inf

    def test_invalid_operation_is_nan(self):
        ev = Evaluator("sqrt(x)")
        assert math.isnan(ev.evaluate({"x": -1.0}))

    def test_zero_over_zero_is_nan(self):
        ev = Evaluator("x/x")
        assert math.isnan(ev.evaluate({"x": 0.0}))

    def test_unknown_name_is_nan(self):
        ev = Evaluator("x+A")
        assert math.isnan(ev.evaluate({"x": 1.0}))

    def test_constant_overrides(self):
        ev = Evaluator("a*x", constants={"a": 4.0})
        assert ev.evaluate({"x": 2.0}) == 8.0

    def test_seeded_random(self):
        a = Evaluator("random(x)", rng=np.random.default_rng(11))
        b = Evaluator("random(x)", rng=np.random.default_rng(11))
        assert a.evaluate({"x": 10.0}) == b.evaluate({"x": 10.0})

    def test_rng_swap(self):
        ev = Evaluator("random(1)+0*x")
        ev.rng = np.random.default_rng(3)
        first = ev.evaluate({"x": 0.0})
        ev.rng = np.random.default_rng(3)
        assert ev.evaluate({"x": 0.0}) == first


class TestSyntaxErrors:
    def test_valid_expression(self):
        assert Evaluator("sin(x)+0*x").syntax_errors() == []

    def test_unbalanced_parentheses(self):
        assert Evaluator("sin(x+0*x").syntax_errors()

    def test_dangling_operator(self):
        assert Evaluator("x*+0*x*").syntax_errors()

    def test_assignment_is_not_an_expression(self):
        assert Evaluator("x=2+0*x").syntax_errors()

    def test_parse_does_not_need_bindings(self):
        assert Evaluator("q*x+0*x").syntax_errors() == []


class TestUnknownNames:
    def test_variables_functions_and_constants_are_known(self):
        ev = Evaluator("sin(x)*pi+e^y+randint(1, 6)+0*x*y")
        assert ev.unknown_names(["x", "y"]) == []

    def test_uppercase_name_is_unknown(self):
        assert Evaluator("Q*x+0*x").unknown_names(["x"]) == ["Q"]

    def test_unbound_variable_is_unknown(self):
        assert Evaluator("x*y+0*x").unknown_names(["x"]) == ["y"]

    def test_extra_constants_are_known(self):
        ev = Evaluator("k*x+0*x", constants={"k": 2.0})
        assert ev.unknown_names(["x"]) == []

    def test_names_are_sorted_and_unique(self):
        assert Evaluator("Sin(B)+A*B+0*x").unknown_names(["x"]) == ["A", "B", "Sin"]

    def test_unparseable_expression_has_none(self):
        assert Evaluator("Q*(x").unknown_names(["x"]) == []
