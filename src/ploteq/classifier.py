"""Infer coordinate system and independent variables from expression text.

Classification is a pure function of the text, the dimension and the
sampling resolution. It runs in three stages:

1. Coordinate-system detection: the first of Cartesian, Spherical and
   Cylindrical whose variable names account for every identifier on the
   right-hand side and whose binder forms accept the left-hand side.
2. Role detection: an ordered table of rules, first match wins, decides which
   variables are independent.
3. Rewrite: the right-hand side gets ``+0*<independent vars>`` appended so
   every independent variable is referenced, and the result is syntax-checked.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from itertools import permutations

from ploteq.coordinates import (
    DEPENDENT_SLOT,
    DETECTION_ORDER,
    INDEPENDENT_SLOTS,
    VARIABLE_SETS,
    CoordinateSystem,
    VariablesUsed,
)
from ploteq.errors import (
    ConfigurationError,
    EmptyExpressionError,
    InvalidBinderFormError,
    InvalidExpressionError,
    InvalidVariablesError,
    UnsupportedDimensionError,
)
from ploteq.evaluator import Evaluator
from ploteq.functions import strip_function_names
from ploteq.models import DEFAULT_RESOLUTION, MAX_RESOLUTION, MIN_RESOLUTION

logger = logging.getLogger(__name__)

SUPPORTED_DIMENSIONS: frozenset[int] = frozenset({2, 3})

_WHITESPACE = re.compile(r"\s+")
_LOWERCASE = re.compile(r"[a-z]")


@dataclass(frozen=True)
class Classification:
    expression: str
    dimension: int
    coordinate_system: CoordinateSystem
    variables_used: VariablesUsed
    independent_vars: tuple[str, ...]
    canonical_expression: str

    @property
    def is_curve(self) -> bool:
        return len(self.independent_vars) == 1


@dataclass(frozen=True)
class RoleRule:
    """One row of the role decision table.

    ``presence`` names the slots whose variables make the role plausible;
    ``allowed`` the slots that may appear on the right-hand side. An
    ``inferable`` rule is also plausible when the right-hand side names no
    variable outside ``allowed``.
    """

    role: VariablesUsed
    presence: tuple[int, ...]
    allowed: tuple[int, ...]
    inferable: bool = False
    systems: frozenset[CoordinateSystem] | None = None


ROLE_RULES: dict[int, tuple[RoleRule, ...]] = {
    2: (
        RoleRule(VariablesUsed.ONE, presence=(0,), allowed=(0,)),
        RoleRule(VariablesUsed.TWO, presence=(1,), allowed=(1,)),
    ),
    3: (
        RoleRule(
            VariablesUsed.ONE_THREE,
            presence=(0,),
            allowed=(0,),
            systems=frozenset({CoordinateSystem.SPHERICAL}),
        ),
        RoleRule(
            VariablesUsed.TWO_THREE,
            presence=(1,),
            allowed=(1,),
            systems=frozenset({CoordinateSystem.SPHERICAL}),
        ),
        RoleRule(VariablesUsed.ONE_TWO, presence=(0, 1), allowed=(0, 1), inferable=True),
        RoleRule(VariablesUsed.ONE_THREE, presence=(2, 0), allowed=(2, 0), inferable=True),
        RoleRule(VariablesUsed.TWO_THREE, presence=(1, 2), allowed=(1, 2), inferable=True),
    ),
}


def right_hand_side(expression: str) -> str:
    """Text after the first ``=``, or the whole text when there is none."""
    _, sep, rhs = expression.partition("=")
    return rhs if sep else expression


def contains_allowed(expression: str, names: tuple[str, ...] | list[str]) -> bool:
    """True when the stripped right-hand side names at least one of ``names``."""
    rhs = strip_function_names(right_hand_side(expression))
    if not rhs:
        return False
    return any(name in rhs for name in names)


def contains_disallowed(expression: str, names: tuple[str, ...] | list[str]) -> bool:
    """True when the stripped right-hand side has letters outside ``names``."""
    rhs = strip_function_names(right_hand_side(expression))
    if not rhs:
        return True
    for name in names:
        rhs = rhs.replace(name, "")
    return _LOWERCASE.search(rhs) is not None


def binder_forms(system: CoordinateSystem, role: VariablesUsed) -> tuple[str, ...]:
    """Accepted left-hand-side prefixes for a role, e.g. ``y=``, ``f(x)=``, ``y(x)=``."""
    names = VARIABLE_SETS[system]
    dependent = names[DEPENDENT_SLOT[role]]
    args = [",".join(p) for p in permutations(names[s] for s in INDEPENDENT_SLOTS[role])]
    return (
        f"{dependent}=",
        *(f"f({a})=" for a in args),
        *(f"{dependent}({a})=" for a in args),
    )


def binder_accepted(expression: str, system: CoordinateSystem, role: VariablesUsed) -> bool:
    if "=" not in expression:
        return True
    return expression.startswith(binder_forms(system, role))


def detect_coordinate_system(expression: str) -> CoordinateSystem:
    """Return the first coordinate system that explains the expression."""
    variables_matched = False
    for system in DETECTION_ORDER:
        names = VARIABLE_SETS[system]
        if not contains_allowed(expression, names) or contains_disallowed(expression, names):
            continue
        variables_matched = True
        if any(binder_accepted(expression, system, role) for role in INDEPENDENT_SLOTS):
            return system

    if variables_matched:
        lhs = expression.partition("=")[0]
        raise InvalidBinderFormError(f"Left-hand side {lhs!r} is not an accepted binder form")
    raise InvalidVariablesError(f"No coordinate system matches the variables of {expression!r}")


def _rule_matches(
    rule: RoleRule,
    expression: str,
    system: CoordinateSystem,
    names: tuple[str, ...],
) -> bool:
    if rule.systems is not None and system not in rule.systems:
        return False
    allowed = [names[s] for s in rule.allowed]
    if contains_disallowed(expression, allowed):
        return False
    present = any(names[s] in expression for s in rule.presence) or any(
        contains_allowed(expression, [names[s]]) for s in rule.presence
    )
    if not present and not rule.inferable:
        return False
    return binder_accepted(expression, system, rule.role)


def detect_role(expression: str, system: CoordinateSystem, dimension: int) -> VariablesUsed:
    """Walk the decision table for ``dimension`` and return the first matching role."""
    rules = ROLE_RULES.get(dimension)
    if rules is None:
        raise UnsupportedDimensionError(f"Unsupported dimension: {dimension}")
    names = VARIABLE_SETS[system][:3]
    for rule in rules:
        if _rule_matches(rule, expression, system, names):
            return rule.role
    raise InvalidVariablesError(
        f"No {dimension}D variable role of the {system.name.lower()} system matches {expression!r}"
    )


def canonicalize(expression: str, independent_vars: list[str] | tuple[str, ...]) -> str:
    """Drop the binder and reference every independent variable."""
    return right_hand_side(expression) + "+0*" + "*".join(independent_vars)


def _check_resolution(name: str, value: int) -> None:
    if not MIN_RESOLUTION <= value <= MAX_RESOLUTION:
        raise ConfigurationError(
            f"{name} must be between {MIN_RESOLUTION} and {MAX_RESOLUTION}, got {value}"
        )


def classify(
    expression: str,
    dimension: int,
    points_per_curve: int = DEFAULT_RESOLUTION,
    curves_per_surface: int = DEFAULT_RESOLUTION,
) -> Classification:
    """Classify an expression for a plot of the given dimension.

    Args:
        expression: Equation text such as ``"z=sin(x)+sin(y)"``.
        dimension: 2 for curves, 3 for surfaces.
        points_per_curve: Samples along each curve, minus one.
        curves_per_surface: Curves per surface, minus one.

    Returns:
        The accepted Classification.

    Raises:
        ClassificationError: A subclass naming the failure.
    """
    _check_resolution("points_per_curve", points_per_curve)
    _check_resolution("curves_per_surface", curves_per_surface)
    if dimension not in SUPPORTED_DIMENSIONS:
        raise UnsupportedDimensionError(f"Unsupported dimension: {dimension}")

    text = _WHITESPACE.sub("", expression)
    if not text:
        raise EmptyExpressionError("Expression is empty")

    system = detect_coordinate_system(text)
    role = detect_role(text, system, dimension)
    names = VARIABLE_SETS[system]
    independent = tuple(names[s] for s in INDEPENDENT_SLOTS[role])
    canonical = canonicalize(text, independent)

    evaluator = Evaluator(canonical)
    errors = evaluator.syntax_errors()
    if errors:
        raise InvalidExpressionError(f"Invalid expression {expression!r}: {'; '.join(errors)}")
    unknown = evaluator.unknown_names(independent)
    if unknown:
        raise InvalidExpressionError(
            f"Invalid expression {expression!r}: unknown name(s) {', '.join(unknown)}"
        )

    logger.info(
        f"Classified {text!r} as {dimension}D {system.name} {role.name} "
        f"with independent vars {list(independent)}: {canonical!r}"
    )
    return Classification(
        expression=text,
        dimension=dimension,
        coordinate_system=system,
        variables_used=role,
        independent_vars=independent,
        canonical_expression=canonical,
    )
