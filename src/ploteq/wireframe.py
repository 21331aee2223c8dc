"""Assemble sampled rows into a dual u/v curve network."""

from __future__ import annotations

from typing import Iterable

from ploteq.geometry import Polyline, Vertex, Wireframe, is_break


def wrap_polyline(polyline: Polyline) -> None:
    """Close a polyline by repeating its first point.

    Break markers are never repeated; a polyline starting with one is closed
    on its first real point, and one without points is left alone.
    """
    first = next((v for v in polyline if not is_break(v)), None)
    if first is not None:
        polyline.append(first)


class WireframeBuilder:
    """Collects u-curves row by row, then wraps and derives v-curves."""

    def __init__(self, *, wrap_points: bool = False, wrap_curves: bool = False) -> None:
        self.wrap_points = wrap_points
        self.wrap_curves = wrap_curves
        self._u_curves: list[Polyline] = []

    def __len__(self) -> int:
        return len(self._u_curves)

    def add_curve(self, vertices: Iterable[Vertex]) -> Polyline:
        polyline = Polyline(list(vertices))
        if self.wrap_points:
            wrap_polyline(polyline)
        self._u_curves.append(polyline)
        return polyline

    def build(self, *, derive_v: bool = True) -> Wireframe:
        u_curves = list(self._u_curves)
        if self.wrap_curves and u_curves:
            u_curves.append(u_curves[0].copy())
        wireframe = Wireframe(u_curves=u_curves)
        if derive_v:
            wireframe.make_v_from_u()
        return wireframe
