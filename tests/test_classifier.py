"""Tests for coordinate-system and variable-role classification."""

import pytest

from ploteq.classifier import (
    Classification,
    binder_forms,
    canonicalize,
    classify,
    contains_allowed,
    contains_disallowed,
    detect_coordinate_system,
    right_hand_side,
)
from ploteq.coordinates import CoordinateSystem, VariablesUsed
from ploteq.errors import (
    ClassificationError,
    ConfigurationError,
    EmptyExpressionError,
    InvalidBinderFormError,
    InvalidExpressionError,
    InvalidVariablesError,
    UnsupportedDimensionError,
)


class TestHelpers:
    def test_right_hand_side(self):
        assert right_hand_side("y=sin(x)") == "sin(x)"
        assert right_hand_side("sin(x)") == "sin(x)"
        assert right_hand_side("y=x=2") == "x=2"

    def test_contains_allowed_ignores_function_names(self):
        assert contains_allowed("y=sin(x)", ("x", "y", "z", "w"))
        assert not contains_allowed("y=sin(2)", ("x", "y", "z", "w"))

    def test_empty_rhs_has_nothing_allowed(self):
        assert not contains_allowed("y=", ("x",))
        assert contains_disallowed("y=", ("x",))

    def test_contains_disallowed(self):
        assert contains_disallowed("y=x+q", ("x", "y", "z", "w"))
        assert not contains_disallowed("y=x+Q", ("x", "y", "z", "w"))

    def test_binder_forms_curve(self):
        assert binder_forms(CoordinateSystem.CARTESIAN, VariablesUsed.ONE) == (
            "y=",
            "f(x)=",
            "y(x)=",
        )

    def test_binder_forms_surface_accept_both_orders(self):
        forms = binder_forms(CoordinateSystem.CARTESIAN, VariablesUsed.ONE_TWO)
        assert set(forms) == {"z=", "f(x,y)=", "f(y,x)=", "z(x,y)=", "z(y,x)="}

    def test_canonicalize(self):
        assert canonicalize("z=x*y", ("x", "y")) == "x*y+0*x*y"
        assert canonicalize("sin(x)", ("x",)) == "sin(x)+0*x"


class TestCartesianCurves:
    def test_y_of_x(self):
        result = classify("y=sin(x)", 2)
        assert isinstance(result, Classification)
        assert result.coordinate_system is CoordinateSystem.CARTESIAN
        assert result.variables_used is VariablesUsed.ONE
        assert result.independent_vars == ("x",)
        assert result.canonical_expression == "sin(x)+0*x"
        assert result.is_curve

    def test_x_of_y(self):
        result = classify("x=y^2", 2)
        assert result.variables_used is VariablesUsed.TWO
        assert result.independent_vars == ("y",)

    def test_function_binder(self):
        assert classify("f(x)=x^2", 2).variables_used is VariablesUsed.ONE
        assert classify("y(x)=x^2", 2).variables_used is VariablesUsed.ONE

    def test_no_binder(self):
        result = classify("x^2", 2)
        assert result.variables_used is VariablesUsed.ONE
        assert result.canonical_expression == "x^2+0*x"

    @pytest.mark.parametrize("expression", ["y=sin(z)", "y=x*w", "y=x+z"])
    def test_rejects_third_and_fourth_variables(self, expression):
        with pytest.raises(InvalidVariablesError):
            classify(expression, 2)

    def test_whitespace_ignored(self):
        result = classify("  y = sin( x ) ", 2)
        assert result.expression == "y=sin(x)"
        assert result.variables_used is VariablesUsed.ONE


class TestCartesianSurfaces:
    def test_z_of_x_y(self):
        result = classify("z=x*y", 3)
        assert result.coordinate_system is CoordinateSystem.CARTESIAN
        assert result.variables_used is VariablesUsed.ONE_TWO
        assert result.independent_vars == ("x", "y")
        assert result.canonical_expression == "x*y+0*x*y"
        assert not result.is_curve

    def test_x_of_y_z(self):
        result = classify("x=y*z", 3)
        assert result.variables_used is VariablesUsed.TWO_THREE
        assert result.independent_vars == ("y", "z")

    def test_y_of_z_x(self):
        result = classify("y=z*x", 3)
        assert result.variables_used is VariablesUsed.ONE_THREE
        assert result.independent_vars == ("x", "z")

    def test_function_binder_either_order(self):
        assert classify("f(y,z)=y+z", 3).variables_used is VariablesUsed.TWO_THREE
        assert classify("x(z,y)=y+z", 3).variables_used is VariablesUsed.TWO_THREE

    def test_no_binder_picks_by_variables(self):
        assert classify("y*z", 3).variables_used is VariablesUsed.TWO_THREE
        assert classify("x*y", 3).variables_used is VariablesUsed.ONE_TWO

    def test_single_variable_surface_takes_first_rule(self):
        # Only x is named; the first inferable rule, ONE_TWO, wins
        result = classify("z=sin(x)", 3)
        assert result.variables_used is VariablesUsed.ONE_TWO
        assert result.canonical_expression == "sin(x)+0*x*y"

    def test_mismatched_binder_for_variables(self):
        with pytest.raises(InvalidVariablesError):
            classify("z=y*z", 3)


class TestSphericalAndCylindrical:
    def test_r_of_theta_curve(self):
        result = classify("r=theta", 2)
        assert result.coordinate_system is CoordinateSystem.SPHERICAL
        assert result.variables_used is VariablesUsed.ONE
        assert result.independent_vars == ("theta",)

    def test_r_of_theta_surface_prefers_spherical_rule(self):
        result = classify("r=theta", 3)
        assert result.coordinate_system is CoordinateSystem.SPHERICAL
        assert result.variables_used is VariablesUsed.ONE_THREE
        assert result.independent_vars == ("theta", "phi")

    def test_r_of_phi_surface(self):
        result = classify("r=phi", 3)
        assert result.variables_used is VariablesUsed.ONE_THREE
        assert result.independent_vars == ("theta", "phi")

    def test_r_of_theta_and_phi(self):
        result = classify("r=sin(theta)*cos(phi)", 3)
        assert result.coordinate_system is CoordinateSystem.SPHERICAL
        assert result.variables_used is VariablesUsed.ONE_THREE

    def test_cylindrical_z_of_r(self):
        result = classify("z=r", 3)
        assert result.coordinate_system is CoordinateSystem.CYLINDRICAL
        assert result.variables_used is VariablesUsed.ONE_TWO
        assert result.independent_vars == ("theta", "r")

    def test_cartesian_wins_ties(self):
        # z belongs to both Cartesian and cylindrical sets
        assert detect_coordinate_system("x=z") is CoordinateSystem.CARTESIAN


class TestFailures:
    def test_empty(self):
        with pytest.raises(EmptyExpressionError):
            classify("", 2)

    def test_whitespace_only(self):
        with pytest.raises(EmptyExpressionError):
            classify("   ", 3)

    def test_constant_has_no_variables(self):
        with pytest.raises(InvalidVariablesError):
            classify("y=5", 2)

    def test_unknown_identifier(self):
        with pytest.raises(InvalidVariablesError):
            classify("y=x+q", 2)

    def test_unaccepted_binder(self):
        with pytest.raises(InvalidBinderFormError, match="Left-hand side"):
            classify("q=x", 2)

    def test_binder_error_is_a_variables_error(self):
        assert issubclass(InvalidBinderFormError, InvalidVariablesError)

    @pytest.mark.parametrize("dimension", [1, 4])
    def test_unsupported_dimension(self, dimension):
        with pytest.raises(UnsupportedDimensionError):
            classify("y=x", dimension)

    @pytest.mark.parametrize("resolution", [0, 1, 999, 1000])
    def test_points_per_curve_out_of_range(self, resolution):
        with pytest.raises(ConfigurationError, match="points_per_curve"):
            classify("y=x", 2, points_per_curve=resolution)

    def test_curves_per_surface_out_of_range(self):
        with pytest.raises(ConfigurationError, match="curves_per_surface"):
            classify("z=x*y", 3, curves_per_surface=1)

    @pytest.mark.parametrize("resolution", [2, 998])
    def test_resolution_limits_accepted(self, resolution):
        result = classify("y=x", 2, points_per_curve=resolution, curves_per_surface=resolution)
        assert result.variables_used is VariablesUsed.ONE

    def test_syntax_error(self):
        with pytest.raises(InvalidExpressionError):
            classify("y=sin(x", 2)

    @pytest.mark.parametrize(
        "expression, dimension", [("y=Q*x", 2), ("y=2*PI*x", 2), ("z=x*Y", 3)]
    )
    def test_unknown_name(self, expression, dimension):
        with pytest.raises(InvalidExpressionError, match="unknown name"):
            classify(expression, dimension)

    def test_all_failures_are_classification_errors(self):
        for exc in (
            EmptyExpressionError,
            InvalidVariablesError,
            UnsupportedDimensionError,
            ConfigurationError,
            InvalidExpressionError,
        ):
            assert issubclass(exc, ClassificationError)


class TestLogging:
    def test_decision_logged(self, caplog):
        with caplog.at_level("INFO", logger="ploteq.classifier"):
            classify("z=x*y", 3)
        assert "ONE_TWO" in caplog.text
        assert "CARTESIAN" in caplog.text
