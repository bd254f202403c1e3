"""Placement helpers that drop generated threads into a scene.

The emitters build a mesh with the matching generator, move it according to
``anchor``/``spin``/``orient``/``position``, add it to an optional
:class:`MeshGroup` and hand back a pyvista ``PolyData`` for preview or export.
"""

from __future__ import annotations

from typing import Literal, Sequence

import numpy as np

from threadform.mesh import Mesh, analyze_mesh, mesh_to_pyvista, rotation_matrix, translation_matrix
from threadform.modeling.group import MeshGroup
from threadform.modeling.nuts import generic_threaded_nut
from threadform.modeling.sweep import thread_helix
from threadform.modeling.threading import generic_threaded_rod

Anchor = Literal["center", "bottom", "top"]
_UP = np.array([0.0, 0.0, 1.0])


def orientation_matrix(direction: Sequence[float]) -> np.ndarray:
    """Rotation taking +z onto ``direction``."""

    target = np.asarray(direction, dtype=float).reshape(3)
    target_norm = np.linalg.norm(target)
    if target_norm == 0:
        raise ValueError("Direction vector must be non-zero.")
    target = target / target_norm
    if np.allclose(target, _UP):
        return np.eye(4)
    axis = np.cross(_UP, target)
    axis_norm = np.linalg.norm(axis)
    if axis_norm == 0:
        # opposite direction; rotate 180 around X
        return rotation_matrix((1.0, 0.0, 0.0), 180.0)
    angle_deg = np.degrees(np.arccos(np.clip(np.dot(_UP, target), -1.0, 1.0)))
    return rotation_matrix(axis / axis_norm, angle_deg)


def _anchor_offset(anchor: str, length: float) -> float:
    if anchor == "center":
        return 0.0
    if anchor == "bottom":
        return length / 2.0
    if anchor == "top":
        return -length / 2.0
    raise ValueError(f"Unknown anchor '{anchor}'. Expected 'center', 'bottom' or 'top'.")


def place_mesh(
    mesh: Mesh,
    anchor: Anchor = "center",
    spin: float = 0.0,
    orient: Sequence[float] = (0.0, 0.0, 1.0),
    position: Sequence[float] = (0.0, 0.0, 0.0),
    length: float | None = None,
) -> Mesh:
    """Return a placed copy of an axis-aligned part centered on z=0.

    ``length`` is the nominal extent used by the anchor; it defaults to the
    ``length`` metadata, then to the z extent of the bounds.
    """

    if length is None:
        length = mesh.metadata.get("length")
    if length is None:
        _, _, _, _, zmin, zmax = mesh.bounds
        length = zmax - zmin
    matrix = (
        translation_matrix(position)
        @ orientation_matrix(orient)
        @ rotation_matrix((0.0, 0.0, 1.0), spin)
        @ translation_matrix((0.0, 0.0, _anchor_offset(anchor, float(length))))
    )
    placed = mesh.transform(matrix, inplace=False)
    placed.metadata["placement"] = {
        "anchor": anchor,
        "spin": float(spin),
        "orient": tuple(float(v) for v in orient),
        "position": tuple(float(v) for v in position),
    }
    analyze_mesh(placed)
    return placed


def _emit(
    mesh: Mesh,
    anchor: Anchor,
    spin: float,
    orient: Sequence[float],
    position: Sequence[float],
    scene: MeshGroup | None,
):
    placed = place_mesh(mesh, anchor=anchor, spin=spin, orient=orient, position=position)
    if scene is not None:
        scene.add(placed)
    return mesh_to_pyvista(placed)


def emit_threaded_rod(
    *args,
    anchor: Anchor = "center",
    spin: float = 0.0,
    orient: Sequence[float] = (0.0, 0.0, 1.0),
    position: Sequence[float] = (0.0, 0.0, 0.0),
    scene: MeshGroup | None = None,
    **kwargs,
):
    """Build a rod with :func:`generic_threaded_rod` and place it."""

    return _emit(generic_threaded_rod(*args, **kwargs), anchor, spin, orient, position, scene)


def emit_threaded_nut(
    *args,
    anchor: Anchor = "center",
    spin: float = 0.0,
    orient: Sequence[float] = (0.0, 0.0, 1.0),
    position: Sequence[float] = (0.0, 0.0, 0.0),
    scene: MeshGroup | None = None,
    **kwargs,
):
    return _emit(generic_threaded_nut(*args, **kwargs), anchor, spin, orient, position, scene)


def emit_thread_helix(
    *args,
    anchor: Anchor = "center",
    spin: float = 0.0,
    orient: Sequence[float] = (0.0, 0.0, 1.0),
    position: Sequence[float] = (0.0, 0.0, 0.0),
    scene: MeshGroup | None = None,
    **kwargs,
):
    return _emit(thread_helix(*args, **kwargs), anchor, spin, orient, position, scene)


__all__ = [
    "emit_thread_helix",
    "emit_threaded_nut",
    "emit_threaded_rod",
    "orientation_matrix",
    "place_mesh",
]
