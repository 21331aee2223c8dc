"""User-facing equation: classification, generation and sliders."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Mapping, Sequence

from ploteq.classifier import Classification, classify
from ploteq.coordinates import CoordinateSystem, VariablesUsed
from ploteq.errors import ClassificationError
from ploteq.functions import uses_random
from ploteq.geometry import QuadMesh, TriangleMesh, Wireframe
from ploteq.mesh import quad_mesh_from_wireframe, triangle_mesh_from_wireframe
from ploteq.models import DEFAULT_RESOLUTION, Bounds, PlotSpec
from ploteq.sampler import sample
from ploteq.warning_policy import WarningPolicy, emit_warning

logger = logging.getLogger(__name__)


@dataclass
class GeneratedPlot:
    """Geometry produced by one ``Equation.generate`` call."""

    dimension: int
    wireframe: Wireframe
    quad_mesh: QuadMesh | None = None
    triangle_mesh: TriangleMesh | None = None

    @property
    def is_surface(self) -> bool:
        return self.triangle_mesh is not None


class Equation:
    """An expression with its bounds and sampling options.

    Classification happens on construction. A failure does not raise: the
    equation is marked unsuccessful, ``error`` holds the reason and
    ``generate`` returns None.
    """

    def __init__(
        self,
        expression: str,
        bounds: Sequence[Bounds],
        points_per_curve: int = DEFAULT_RESOLUTION,
        curves_per_surface: int = DEFAULT_RESOLUTION,
        *,
        wrap_points: bool = False,
        wrap_curves: bool = False,
        max_values: Mapping[str, Bounds] | None = None,
        seed: int | None = None,
        workers: int = 1,
        warning_policy: WarningPolicy | None = None,
    ) -> None:
        self.expression = expression
        self.bounds: tuple[Bounds, ...] = tuple(bounds)
        self.points_per_curve = points_per_curve
        self.curves_per_surface = curves_per_surface
        self.wrap_points = wrap_points
        self.wrap_curves = wrap_curves
        self.max_values = dict(max_values or {})
        self.seed = seed
        self.workers = workers
        self.warning_policy = warning_policy
        self.sliders: dict[str, float] = {}

        self.classification: Classification | None = None
        self.error: ClassificationError | None = None
        try:
            self.classification = classify(
                expression, self.dimension, points_per_curve, curves_per_surface
            )
        except ClassificationError as e:
            self.error = e
            logger.warning(f"Invalid equation {expression!r}: {e}")

    @classmethod
    def from_spec(
        cls, spec: PlotSpec, *, warning_policy: WarningPolicy | None = None
    ) -> Equation:
        equation = cls(
            spec.expression,
            spec.bounds,
            spec.points_per_curve,
            spec.curves_per_surface,
            wrap_points=spec.wrap_points,
            wrap_curves=spec.wrap_curves,
            max_values=spec.max_values,
            seed=spec.seed,
            workers=spec.workers,
            warning_policy=warning_policy,
        )
        for name, value in spec.sliders.items():
            equation.add_slider(name, value)
        return equation

    @property
    def successful(self) -> bool:
        return self.classification is not None

    @property
    def dimension(self) -> int:
        return len(self.bounds) + 1

    @property
    def coordinate_system(self) -> CoordinateSystem | None:
        return self.classification.coordinate_system if self.classification else None

    @property
    def variables_used(self) -> VariablesUsed:
        return self.classification.variables_used if self.classification else VariablesUsed.NONE

    @property
    def vars(self) -> tuple[str, ...]:
        return self.classification.independent_vars if self.classification else ()

    def is_2d(self) -> bool:
        return self.dimension == 2

    def is_3d(self) -> bool:
        return self.dimension == 3

    def generate(self, cancel: threading.Event | None = None) -> GeneratedPlot | None:
        """Sample the equation; surfaces also get quad and triangle meshes."""
        if self.classification is None:
            logger.error("Unable to generate equation.")
            return None

        canonical = self.classification.canonical_expression
        if self.seed is None and uses_random(canonical):
            emit_warning(
                "W03",
                f"{self.expression!r} uses random functions without a seed; "
                "output is not reproducible",
                policy=self.warning_policy,
            )

        wireframe = sample(
            canonical,
            self.classification.coordinate_system,
            self.classification.independent_vars,
            self.bounds,
            self.points_per_curve,
            self.curves_per_surface,
            wrap_points=self.wrap_points,
            wrap_curves=self.wrap_curves,
            max_values=self.max_values,
            seed=self.seed,
            workers=self.workers,
            cancel=cancel,
            warning_policy=self.warning_policy,
        )
        plot = GeneratedPlot(dimension=self.dimension, wireframe=wireframe)
        if not self.classification.is_curve:
            plot.quad_mesh = quad_mesh_from_wireframe(wireframe)
            plot.triangle_mesh = triangle_mesh_from_wireframe(wireframe)
        logger.info(
            f"Generated {self.dimension}D plot of {self.expression!r}: "
            f"{len(wireframe.u_curves)} u-curves, {len(wireframe.v_curves)} v-curves"
        )
        return plot

    def add_slider(self, name: str, value: float) -> None:
        if name in self.sliders:
            raise ValueError(f"Slider {name!r} already exists")
        self.sliders[name] = value

    def remove_slider(self, name: str) -> None:
        if name not in self.sliders:
            raise KeyError(name)
        del self.sliders[name]

    def change_slider(self, name: str, value: float) -> None:
        if name not in self.sliders:
            raise KeyError(name)
        self.sliders[name] = value

    def update_slider(self, name: str, increment: float) -> None:
        """Move a slider by ``increment``."""
        if name not in self.sliders:
            raise KeyError(name)
        self.sliders[name] += increment

    def __str__(self) -> str:
        system = self.coordinate_system.name if self.coordinate_system else "INVALID"
        return f'{self.dimension}D {system} Equation:\n\t"{self.expression}"\n'

    def __repr__(self) -> str:
        return f"Equation({self.expression!r}, dimension={self.dimension}, successful={self.successful})"
