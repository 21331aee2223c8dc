"""Walk the bounds of the independent variables and build the curve network."""

from __future__ import annotations

import logging
import math
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Sequence

import numpy as np

from ploteq.coordinates import VARIABLE_SETS, CoordinateSystem, to_point
from ploteq.errors import SamplingCancelledError, SamplingError
from ploteq.evaluator import Evaluator
from ploteq.geometry import BREAK, Point, Vertex, Wireframe
from ploteq.models import AXES, Bounds
from ploteq.warning_policy import WarningPolicy, emit_warning
from ploteq.wireframe import WireframeBuilder

logger = logging.getLogger(__name__)

FLOAT_MAX = sys.float_info.max
MAX_DECIMALS = 15

# Second bound supplied for curves, which have one independent variable.
_CURVE_SECONDARY: dict[CoordinateSystem, Bounds] = {
    CoordinateSystem.SPHERICAL: Bounds(min=math.pi / 2, max=2.0),
}
_DEFAULT_CURVE_SECONDARY = Bounds(min=0.0, max=0.0)


def decimal_count(value: float) -> int:
    """Number of fractional digits in the shortest repr of ``value``, capped at 15."""
    if not math.isfinite(value):
        return 0
    exponent = Decimal(repr(float(value))).normalize().as_tuple().exponent
    if not isinstance(exponent, int) or exponent >= 0:
        return 0
    return min(-exponent, MAX_DECIMALS)


def axis_values(bounds: Bounds, steps: int) -> list[float]:
    """Sample positions from ``bounds.min`` to ``bounds.max`` inclusive.

    Positions are computed by index, ``min + k * step``, and rounded to the
    precision of ``step`` and ``bounds.min``. The last one is ``bounds.max``
    itself, so a non-empty axis always has ``steps + 1`` samples. A zero-width
    axis, or ``steps == 0``, gives the single sample ``bounds.min``; reversed
    bounds give none.
    """
    if bounds.min > bounds.max or steps < 0 or not math.isfinite(bounds.width):
        return []
    if steps == 0 or bounds.width == 0:
        return [bounds.min]

    step = bounds.width / steps
    digits = max(decimal_count(step), decimal_count(bounds.min))
    values = [round(bounds.min + k * step, digits) for k in range(steps)]
    values.append(bounds.max)
    return values


@dataclass
class _RowResult:
    vertices: list[Vertex]
    filled: int = 0
    clamped: int = 0


@dataclass(frozen=True)
class _SamplePlan:
    expression: str
    system: CoordinateSystem
    independent_vars: tuple[str, ...]
    primary_values: list[float]
    primary_slot: int
    secondary_slot: int
    result_slot: int
    is_curve: bool
    limits: tuple[Bounds, Bounds, Bounds]
    seed: int | None


def _slot_layout(
    system: CoordinateSystem, independent_vars: Sequence[str]
) -> tuple[int, int, int]:
    names = VARIABLE_SETS[system][:3]
    try:
        primary = names.index(independent_vars[0])
        secondary = names.index(independent_vars[1]) if len(independent_vars) > 1 else 2
    except ValueError as e:
        raise SamplingError(
            f"Independent variables {list(independent_vars)} do not belong to the "
            f"{system.name.lower()} system"
        ) from e
    (result,) = {0, 1, 2} - {primary, secondary}
    return primary, secondary, result


def _resolve_limits(max_values: Mapping[str, Bounds] | None) -> tuple[Bounds, Bounds, Bounds]:
    max_values = max_values or {}
    unknown = set(max_values) - set(AXES)
    if unknown:
        raise SamplingError(f"Unknown max_values axes: {sorted(unknown)}")
    default = Bounds(min=-FLOAT_MAX, max=FLOAT_MAX)
    return tuple(max_values.get(axis, default) for axis in AXES)


def _row_rng(seed: int | None, row: int) -> np.random.Generator:
    if seed is None:
        return np.random.default_rng()
    return np.random.default_rng([seed, row])


def _sample_row(
    plan: _SamplePlan, evaluator: Evaluator, row: int, secondary_value: float
) -> _RowResult:
    evaluator.rng = _row_rng(plan.seed, row)
    result = _RowResult(vertices=[])
    bindings: dict[str, float] = {}
    if not plan.is_curve:
        bindings[plan.independent_vars[1]] = secondary_value

    for primary_value in plan.primary_values:
        bindings[plan.independent_vars[0]] = primary_value
        value = evaluator.evaluate(bindings)

        if not math.isfinite(value):
            if plan.is_curve:
                result.vertices.append(BREAK)
                continue
            if math.isnan(value):
                value = 0.0
            else:
                value = FLOAT_MAX if value > 0 else -FLOAT_MAX
            result.filled += 1

        slots = [0.0, 0.0, 0.0]
        slots[plan.primary_slot] = primary_value
        slots[plan.secondary_slot] = secondary_value
        slots[plan.result_slot] = value
        point = to_point(plan.system, tuple(slots))

        clamped = Point(*(limit.clamp(c) for limit, c in zip(plan.limits, point.as_tuple())))
        if clamped != point:
            result.clamped += 1
        result.vertices.append(clamped)
    return result


def sample(
    canonical_expression: str,
    coordinate_system: CoordinateSystem,
    independent_vars: Sequence[str],
    bounds: Sequence[Bounds],
    points_per_curve: int,
    curves_per_surface: int,
    *,
    wrap_points: bool = False,
    wrap_curves: bool = False,
    max_values: Mapping[str, Bounds] | None = None,
    seed: int | None = None,
    workers: int = 1,
    cancel: threading.Event | None = None,
    warning_policy: WarningPolicy | None = None,
) -> Wireframe:
    """Evaluate a classified expression over its bounds.

    Args:
        canonical_expression: Rewritten expression from the classifier.
        coordinate_system: System used to convert samples to points.
        independent_vars: One name for curves, two for surfaces.
        bounds: One Bounds per independent variable.
        points_per_curve: Steps along the primary variable.
        curves_per_surface: Steps along the secondary variable.
        wrap_points: Close each curve by repeating its first point.
        wrap_curves: Close a surface by repeating its first curve.
        max_values: Per-axis clamp limits keyed by "X", "Y", "Z".
        seed: Seed for random functions; rows draw from independent streams.
        workers: Threads evaluating rows; 1 evaluates in the calling thread.
        cancel: Event checked before each row.
        warning_policy: Policy for W01/W02 diagnostics.

    Returns:
        A Wireframe with u-curves (and v-curves for surfaces).
    """
    if len(independent_vars) not in (1, 2):
        raise SamplingError(f"Expected 1 or 2 independent variables, got {len(independent_vars)}")
    if len(bounds) < len(independent_vars):
        raise SamplingError(
            f"Expected {len(independent_vars)} bounds, got {len(bounds)}"
        )
    if workers < 1:
        raise SamplingError(f"workers must be at least 1, got {workers}")

    is_curve = len(independent_vars) == 1
    primary_bounds = bounds[0]
    if is_curve:
        # one outer iteration at the synthetic bound's minimum
        secondary_bounds = _CURVE_SECONDARY.get(coordinate_system, _DEFAULT_CURVE_SECONDARY)
        curve_steps = 0
    else:
        secondary_bounds = bounds[1]
        curve_steps = curves_per_surface

    primary_slot, secondary_slot, result_slot = _slot_layout(coordinate_system, independent_vars)
    plan = _SamplePlan(
        expression=canonical_expression,
        system=coordinate_system,
        independent_vars=tuple(independent_vars),
        primary_values=axis_values(primary_bounds, points_per_curve),
        primary_slot=primary_slot,
        secondary_slot=secondary_slot,
        result_slot=result_slot,
        is_curve=is_curve,
        limits=_resolve_limits(max_values),
        seed=seed,
    )
    secondary_values = axis_values(secondary_bounds, curve_steps)
    logger.debug(
        f"Sampling {canonical_expression!r}: {len(secondary_values)} rows x "
        f"{len(plan.primary_values)} points, workers={workers}"
    )

    if workers == 1:
        rows = _sample_sequential(plan, secondary_values, cancel)
    else:
        rows = _sample_parallel(plan, secondary_values, workers, cancel)

    builder = WireframeBuilder(wrap_points=wrap_points, wrap_curves=wrap_curves and not is_curve)
    filled = clamped = 0
    for row in rows:
        builder.add_curve(row.vertices)
        filled += row.filled
        clamped += row.clamped

    if filled:
        emit_warning(
            "W01",
            f"{filled} non-finite surface sample(s) of {canonical_expression!r} were "
            "replaced by finite values",
            count=filled,
            policy=warning_policy,
        )
    if clamped:
        emit_warning(
            "W02",
            f"{clamped} sample(s) of {canonical_expression!r} were clamped to max_values",
            count=clamped,
            policy=warning_policy,
        )

    return builder.build(derive_v=not is_curve)


def _check_cancel(cancel: threading.Event | None, row: int) -> None:
    if cancel is not None and cancel.is_set():
        raise SamplingCancelledError(f"Sampling cancelled before row {row}")


def _sample_sequential(
    plan: _SamplePlan, secondary_values: list[float], cancel: threading.Event | None
) -> list[_RowResult]:
    evaluator = Evaluator(plan.expression)
    rows = []
    for row, secondary_value in enumerate(secondary_values):
        _check_cancel(cancel, row)
        rows.append(_sample_row(plan, evaluator, row, secondary_value))
    return rows


def _sample_parallel(
    plan: _SamplePlan,
    secondary_values: list[float],
    workers: int,
    cancel: threading.Event | None,
) -> list[_RowResult]:
    local = threading.local()

    def run(row: int) -> _RowResult:
        _check_cancel(cancel, row)
        evaluator = getattr(local, "evaluator", None)
        if evaluator is None:
            evaluator = local.evaluator = Evaluator(plan.expression)
        return _sample_row(plan, evaluator, row, secondary_values[row])

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ploteq-row") as pool:
        return list(pool.map(run, range(len(secondary_values))))
