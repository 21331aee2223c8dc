"""Value types for sampled points, curve networks and mesh cells."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, Union

import numpy as np

from ploteq.errors import TopologyError


@dataclass(frozen=True)
class Point:
    """A 3D coordinate."""

    x: float
    y: float
    z: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Point:
        return Point(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Point:
        return Point(self.x / scalar, self.y / scalar, self.z / scalar)

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class Break:
    """Marks a discontinuity inside a polyline."""

    _instance: Break | None = None

    def __new__(cls) -> Break:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "BREAK"


BREAK = Break()

Vertex = Union[Point, Break]


def is_break(vertex: Vertex) -> bool:
    return vertex is BREAK


@dataclass(frozen=True)
class Line:
    start: Point
    end: Point

    def midpoint(self) -> Point:
        return (self.start + self.end) / 2

    def length(self) -> float:
        return (self.end - self.start).magnitude()


@dataclass
class Polyline:
    """Ordered vertices of one curve; may contain ``BREAK`` markers."""

    vertices: list[Vertex] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.vertices)

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self.vertices)

    def __getitem__(self, index: int) -> Vertex:
        return self.vertices[index]

    def append(self, vertex: Vertex) -> None:
        self.vertices.append(vertex)

    def copy(self) -> Polyline:
        return Polyline(list(self.vertices))

    def points(self) -> list[Point]:
        """Vertices with break markers dropped."""
        return [v for v in self.vertices if not is_break(v)]

    def segments(self) -> list[list[Point]]:
        """Split at break markers, keeping runs of two or more points."""
        runs: list[list[Point]] = []
        current: list[Point] = []
        for vertex in self.vertices:
            if is_break(vertex):
                if len(current) > 1:
                    runs.append(current)
                current = []
            else:
                current.append(vertex)
        if len(current) > 1:
            runs.append(current)
        return runs

    def to_lines(self) -> list[Line]:
        return [
            Line(run[k], run[k + 1]) for run in self.segments() for k in range(len(run) - 1)
        ]


def transpose(polylines: list[Polyline]) -> list[Polyline]:
    """Swap rows and columns of a rectangular polyline grid.

    ``transpose(rows)[j][i] == rows[i][j]``. Raises ``TopologyError`` when
    the rows differ in length.
    """
    if not polylines:
        return []
    width = len(polylines[0])
    for i, row in enumerate(polylines):
        if len(row) != width:
            raise TopologyError(
                f"Cannot transpose ragged curves: row {i} has {len(row)} vertices, expected {width}"
            )
    return [Polyline([row[j] for row in polylines]) for j in range(width)]


@dataclass
class Wireframe:
    """Dual curve network: u-curves are sampled rows, v-curves their columns."""

    u_curves: list[Polyline] = field(default_factory=list)
    v_curves: list[Polyline] = field(default_factory=list)

    def make_v_from_u(self) -> None:
        self.v_curves = transpose(self.u_curves)

    def make_u_from_v(self) -> None:
        self.u_curves = transpose(self.v_curves)

    def rows(self) -> list[Polyline]:
        """The grid rows used for meshing: u-curves, else v-curves."""
        return self.u_curves if self.u_curves else self.v_curves

    def to_points(self) -> list[Point]:
        return [p for curve in self.u_curves for p in curve.points()]

    def to_lines(self) -> list[Line]:
        return [line for curve in self.u_curves + self.v_curves for line in curve.to_lines()]

    def to_grid(self) -> np.ndarray:
        """Return the rows as a ``(rows, cols, 3)`` array; breaks become NaN."""
        rows = self.rows()
        if not rows:
            return np.zeros((0, 0, 3), dtype=np.float64)
        transpose(rows)  # validates shape
        grid = np.full((len(rows), len(rows[0]), 3), np.nan, dtype=np.float64)
        for i, row in enumerate(rows):
            for j, vertex in enumerate(row):
                if not is_break(vertex):
                    grid[i, j] = vertex.as_tuple()
        return grid

    @classmethod
    def from_grid(cls, grid: np.ndarray) -> Wireframe:
        """Build a wireframe from a ``(rows, cols, 3)`` array; vertices containing NaN become breaks."""
        grid = np.asarray(grid, dtype=np.float64)
        if grid.ndim != 3 or grid.shape[2] != 3:
            raise TopologyError(f"Grid must have shape (rows, cols, 3), got {grid.shape}")
        u_curves = []
        for row in grid:
            vertices: list[Vertex] = []
            for xyz in row:
                if np.isnan(xyz).any():
                    vertices.append(BREAK)
                else:
                    vertices.append(Point(float(xyz[0]), float(xyz[1]), float(xyz[2])))
            u_curves.append(Polyline(vertices))
        wireframe = cls(u_curves=u_curves)
        wireframe.make_v_from_u()
        return wireframe


@dataclass(frozen=True)
class Triangle:
    a: Point
    b: Point
    c: Point

    @property
    def vertices(self) -> tuple[Point, Point, Point]:
        return (self.a, self.b, self.c)

    def __getitem__(self, index: int) -> Point:
        return self.vertices[index]


@dataclass(frozen=True)
class Quad:
    a: Point
    b: Point
    c: Point
    d: Point

    @property
    def vertices(self) -> tuple[Point, Point, Point, Point]:
        return (self.a, self.b, self.c, self.d)

    def __getitem__(self, index: int) -> Point:
        return self.vertices[index]


@dataclass
class TriangleMesh:
    triangles: list[Triangle] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self.triangles)

    def __getitem__(self, index: int) -> Triangle:
        return self.triangles[index]


@dataclass
class QuadMesh:
    quads: list[Quad] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.quads)

    def __iter__(self) -> Iterator[Quad]:
        return iter(self.quads)

    def __getitem__(self, index: int) -> Quad:
        return self.quads[index]
