"""glTF/GLB assembly via pygltflib."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import pygltflib

from ploteq.equation import GeneratedPlot
from ploteq.errors import ExportError
from ploteq.geometry import Point, Polyline
from ploteq.mesh import mesh_data

logger = logging.getLogger(__name__)

# glTF primitive modes
MODE_LINE_STRIP = 3
MODE_TRIANGLES = 4

_FLOAT32_MAX = float(np.finfo(np.float32).max)


def export_gltf(plot: GeneratedPlot, output_path: Path, *, name: str = "plot") -> None:
    """Export a generated plot to a GLB file.

    Surfaces become an indexed triangle mesh plus u and v line strips;
    curves become one line strip per unbroken segment.
    """
    try:
        gltf = build_gltf(plot, name=name)
        output_path.write_bytes(b"".join(gltf.save_to_bytes()))
    except Exception as e:
        if isinstance(e, ExportError):
            raise
        raise ExportError(f"Failed to export glTF: {e}") from e
    logger.info(f"Wrote {output_path}")


def build_gltf(plot: GeneratedPlot, *, name: str = "plot") -> pygltflib.GLTF2:
    """Build the complete glTF2 structure for a generated plot."""
    gltf = pygltflib.GLTF2(
        scene=0,
        scenes=[pygltflib.Scene(nodes=[])],
        nodes=[],
        meshes=[],
        accessors=[],
        bufferViews=[],
        buffers=[],
    )
    blob_data = bytearray()
    scene_nodes: list[int] = []

    if plot.is_surface:
        _add_surface_mesh(gltf, blob_data, scene_nodes, plot, name)
        _add_curve_mesh(gltf, blob_data, scene_nodes, plot.wireframe.u_curves, f"{name}_u")
        _add_curve_mesh(gltf, blob_data, scene_nodes, plot.wireframe.v_curves, f"{name}_v")
    else:
        _add_curve_mesh(gltf, blob_data, scene_nodes, plot.wireframe.u_curves, name)

    if not scene_nodes:
        raise ExportError("Plot has no drawable geometry")

    gltf.scenes[0].nodes = scene_nodes
    gltf.buffers = [pygltflib.Buffer(byteLength=len(blob_data))]
    gltf.set_binary_blob(bytes(blob_data))
    return gltf


def _to_float32(positions: np.ndarray) -> np.ndarray:
    return np.clip(positions, -_FLOAT32_MAX, _FLOAT32_MAX).astype(np.float32)


def _add_node(gltf: pygltflib.GLTF2, scene_nodes: list[int], mesh_idx: int, name: str) -> None:
    node_idx = len(gltf.nodes)
    gltf.nodes.append(pygltflib.Node(name=name, mesh=mesh_idx))
    scene_nodes.append(node_idx)


def _add_surface_mesh(
    gltf: pygltflib.GLTF2,
    blob_data: bytearray,
    scene_nodes: list[int],
    plot: GeneratedPlot,
    name: str,
) -> None:
    md = mesh_data(plot.wireframe)
    if len(md.indices) == 0:
        logger.warning(f"Surface {name!r} has no cells; exporting curves only")
        return

    pos_acc = _write_buffer_view_and_accessor(
        gltf,
        blob_data,
        _to_float32(md.positions),
        pygltflib.FLOAT,
        pygltflib.VEC3,
        pygltflib.ARRAY_BUFFER,
        include_min_max=True,
    )
    norm_acc = _write_buffer_view_and_accessor(
        gltf,
        blob_data,
        md.normals.astype(np.float32),
        pygltflib.FLOAT,
        pygltflib.VEC3,
        pygltflib.ARRAY_BUFFER,
    )
    idx_acc = _write_buffer_view_and_accessor(
        gltf,
        blob_data,
        md.indices.astype(np.uint32),
        pygltflib.UNSIGNED_INT,
        pygltflib.SCALAR,
        pygltflib.ELEMENT_ARRAY_BUFFER,
    )

    mesh_idx = len(gltf.meshes)
    gltf.meshes.append(
        pygltflib.Mesh(
            name=name,
            primitives=[
                pygltflib.Primitive(
                    attributes=pygltflib.Attributes(POSITION=pos_acc, NORMAL=norm_acc),
                    indices=idx_acc,
                    mode=MODE_TRIANGLES,
                )
            ],
        )
    )
    _add_node(gltf, scene_nodes, mesh_idx, name)


def _add_curve_mesh(
    gltf: pygltflib.GLTF2,
    blob_data: bytearray,
    scene_nodes: list[int],
    curves: list[Polyline],
    name: str,
) -> None:
    primitives = []
    for curve in curves:
        for segment in curve.segments():
            positions = _to_float32(_segment_array(segment))
            pos_acc = _write_buffer_view_and_accessor(
                gltf,
                blob_data,
                positions,
                pygltflib.FLOAT,
                pygltflib.VEC3,
                pygltflib.ARRAY_BUFFER,
                include_min_max=True,
            )
            primitives.append(
                pygltflib.Primitive(
                    attributes=pygltflib.Attributes(POSITION=pos_acc),
                    mode=MODE_LINE_STRIP,
                )
            )

    if not primitives:
        return
    mesh_idx = len(gltf.meshes)
    gltf.meshes.append(pygltflib.Mesh(name=name, primitives=primitives))
    _add_node(gltf, scene_nodes, mesh_idx, name)


def _segment_array(segment: list[Point]) -> np.ndarray:
    return np.array([p.as_tuple() for p in segment], dtype=np.float64)


def _write_buffer_view_and_accessor(
    gltf: pygltflib.GLTF2,
    blob_data: bytearray,
    data_array: np.ndarray,
    component_type: int,
    accessor_type: str,
    target: int | None = None,
    *,
    include_min_max: bool = False,
) -> int:
    """Write a buffer view and accessor, returning the accessor index."""
    # Keep every view 4-byte aligned
    blob_data.extend(b"\x00" * ((4 - len(blob_data) % 4) % 4))
    offset = len(blob_data)
    data_bytes = data_array.tobytes()
    blob_data.extend(data_bytes)

    bv_idx = len(gltf.bufferViews)
    bv = pygltflib.BufferView(
        buffer=0,
        byteOffset=offset,
        byteLength=len(data_bytes),
    )
    if target is not None:
        bv.target = target
    gltf.bufferViews.append(bv)

    acc_kwargs: dict = {
        "bufferView": bv_idx,
        "byteOffset": 0,
        "componentType": component_type,
        "count": len(data_array),
        "type": accessor_type,
    }
    if include_min_max:
        acc_kwargs["min"] = data_array.min(axis=0).tolist()
        acc_kwargs["max"] = data_array.max(axis=0).tolist()

    acc_idx = len(gltf.accessors)
    gltf.accessors.append(pygltflib.Accessor(**acc_kwargs))
    return acc_idx
