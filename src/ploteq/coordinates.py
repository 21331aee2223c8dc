"""Coordinate systems, their variable names and conversion to Cartesian points."""

from __future__ import annotations

import math
from enum import Enum

from ploteq.geometry import Point


class CoordinateSystem(Enum):
    CARTESIAN = "cartesian"
    SPHERICAL = "spherical"
    CYLINDRICAL = "cylindrical"
    CONICAL = "conical"  # reserved, never selected by the classifier


class VariablesUsed(Enum):
    """Which variables of a coordinate system are independent."""

    NONE = "none"
    ONE = "one"
    TWO = "two"
    ONE_TWO = "one_two"
    ONE_THREE = "one_three"
    TWO_THREE = "two_three"


# Four names per system; the fourth is reserved for 4D plots.
VARIABLE_SETS: dict[CoordinateSystem, tuple[str, str, str, str]] = {
    CoordinateSystem.CARTESIAN: ("x", "y", "z", "w"),
    CoordinateSystem.SPHERICAL: ("theta", "r", "phi", "s"),
    CoordinateSystem.CYLINDRICAL: ("theta", "r", "z", "s"),
}

# Detection order; the first accepted system wins.
DETECTION_ORDER: tuple[CoordinateSystem, ...] = (
    CoordinateSystem.CARTESIAN,
    CoordinateSystem.SPHERICAL,
    CoordinateSystem.CYLINDRICAL,
)

INDEPENDENT_SLOTS: dict[VariablesUsed, tuple[int, ...]] = {
    VariablesUsed.ONE: (0,),
    VariablesUsed.TWO: (1,),
    VariablesUsed.ONE_TWO: (0, 1),
    VariablesUsed.ONE_THREE: (0, 2),
    VariablesUsed.TWO_THREE: (1, 2),
}

DEPENDENT_SLOT: dict[VariablesUsed, int] = {
    VariablesUsed.ONE: 1,
    VariablesUsed.TWO: 0,
    VariablesUsed.ONE_TWO: 2,
    VariablesUsed.ONE_THREE: 1,
    VariablesUsed.TWO_THREE: 0,
}


def independent_names(system: CoordinateSystem, role: VariablesUsed) -> list[str]:
    names = VARIABLE_SETS[system]
    return [names[slot] for slot in INDEPENDENT_SLOTS[role]]


def dependent_name(system: CoordinateSystem, role: VariablesUsed) -> str:
    return VARIABLE_SETS[system][DEPENDENT_SLOT[role]]


def _cartesian(x: float, y: float, z: float) -> Point:
    return Point(x, y, z)


def _spherical(theta: float, r: float, phi: float) -> Point:
    return Point(
        r * math.sin(phi) * math.cos(theta),
        r * math.sin(phi) * math.sin(theta),
        r * math.cos(phi),
    )


def _cylindrical(theta: float, r: float, z: float) -> Point:
    return Point(r * math.cos(theta), r * math.sin(theta), z)


_CONVERTERS = {
    CoordinateSystem.CARTESIAN: _cartesian,
    CoordinateSystem.SPHERICAL: _spherical,
    CoordinateSystem.CYLINDRICAL: _cylindrical,
}


def to_point(system: CoordinateSystem, slots: tuple[float, float, float]) -> Point:
    """Convert values given in the system's variable order to a Cartesian point."""
    converter = _CONVERTERS.get(system)
    if converter is None:
        raise ValueError(f"No point conversion for coordinate system {system.name}")
    return converter(*slots)
