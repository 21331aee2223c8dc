"""Mesh topology derived from a wireframe grid."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from ploteq.errors import TopologyError
from ploteq.geometry import (
    Polyline,
    Quad,
    QuadMesh,
    Triangle,
    TriangleMesh,
    Wireframe,
    is_break,
    transpose,
)


@dataclass
class MeshData:
    """Flat indexed triangle mesh."""

    positions: np.ndarray  # (N, 3) float64
    normals: np.ndarray  # (N, 3) float64
    indices: np.ndarray  # (M,) uint32

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3


def _grid_rows(wireframe: Wireframe) -> list[Polyline]:
    rows = wireframe.rows()
    transpose(rows)  # rejects ragged rows
    return rows


def _cells(rows: list[Polyline]):
    """Yield (a, b, c, d) for every 2x2 block of adjacent grid vertices."""
    for i in range(1, len(rows)):
        for j in range(1, len(rows[i])):
            cell = (rows[i - 1][j - 1], rows[i][j - 1], rows[i][j], rows[i - 1][j])
            if any(is_break(v) for v in cell):
                raise TopologyError(f"Cannot mesh across a curve break at row {i}, column {j}")
            yield cell


def quad_mesh_from_wireframe(wireframe: Wireframe) -> QuadMesh:
    return QuadMesh([Quad(a, b, c, d) for a, b, c, d in _cells(_grid_rows(wireframe))])


def triangle_mesh_from_wireframe(wireframe: Wireframe) -> TriangleMesh:
    """Split every grid cell along its a-c diagonal into (a, b, c) and (a, c, d)."""
    triangles: list[Triangle] = []
    for a, b, c, d in _cells(_grid_rows(wireframe)):
        triangles.append(Triangle(a, b, c))
        triangles.append(Triangle(a, c, d))
    return TriangleMesh(triangles)


def triangle_mesh_from_quad_mesh(quads: QuadMesh) -> TriangleMesh:
    triangles: list[Triangle] = []
    for quad in quads:
        triangles.append(Triangle(quad.a, quad.b, quad.c))
        triangles.append(Triangle(quad.a, quad.c, quad.d))
    return TriangleMesh(triangles)


def quad_mesh_from_triangle_mesh(triangles: TriangleMesh) -> QuadMesh:
    """Pair consecutive triangles (a, b, c), (a, c, d) back into quads."""
    if len(triangles) % 2:
        raise TopologyError(f"Cannot pair an odd number of triangles ({len(triangles)})")
    quads: list[Quad] = []
    for k in range(0, len(triangles), 2):
        first, second = triangles[k], triangles[k + 1]
        if first.a != second.a or first.c != second.b:
            raise TopologyError(f"Triangles {k} and {k + 1} do not share an a-c diagonal")
        quads.append(Quad(first.a, first.b, first.c, second.c))
    return QuadMesh(quads)


def _vertex_normals(positions: np.ndarray, indices: np.ndarray) -> np.ndarray:
    normals = np.zeros_like(positions)
    if len(indices) == 0:
        normals[:, 2] = 1.0
        return normals
    faces = indices.reshape(-1, 3)
    with np.errstate(all="ignore"):
        v0, v1, v2 = (positions[faces[:, k]] for k in range(3))
        face_normals = np.cross(v1 - v0, v2 - v0)
        face_normals[~np.isfinite(face_normals).all(axis=1)] = 0.0
        for k in range(3):
            np.add.at(normals, faces[:, k], face_normals)
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        valid = (lengths[:, 0] > 0) & np.isfinite(lengths[:, 0])
        normals[valid] /= lengths[valid]
    normals[~valid] = (0.0, 0.0, 1.0)
    return normals


def mesh_data(wireframe: Wireframe) -> MeshData:
    """Index the wireframe grid as a triangle mesh with vertex normals.

    Triangles follow the same diagonal as ``triangle_mesh_from_wireframe``.
    """
    rows = _grid_rows(wireframe)
    n_rows = len(rows)
    n_cols = len(rows[0]) if rows else 0

    positions = np.zeros((n_rows * n_cols, 3), dtype=np.float64)
    for i, row in enumerate(rows):
        for j, vertex in enumerate(row):
            if is_break(vertex):
                raise TopologyError(f"Cannot mesh a curve break at row {i}, column {j}")
            positions[i * n_cols + j] = vertex.as_tuple()

    indices = []
    for i in range(1, n_rows):
        for j in range(1, n_cols):
            a = (i - 1) * n_cols + (j - 1)
            b = i * n_cols + (j - 1)
            c = i * n_cols + j
            d = (i - 1) * n_cols + j
            indices.extend([a, b, c, a, c, d])

    index_array = np.array(indices, dtype=np.uint32)
    return MeshData(
        positions=positions,
        normals=_vertex_normals(positions, index_array),
        indices=index_array,
    )


def cell_count(wireframe: Wireframe) -> int:
    """Quads a wireframe yields: (rows - 1) * (cols - 1)."""
    rows = wireframe.rows()
    if len(rows) < 2:
        return 0
    return (len(rows) - 1) * (len(rows[0]) - 1)
