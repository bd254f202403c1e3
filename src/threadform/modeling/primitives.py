from __future__ import annotations

from typing import Sequence

import numpy as np

from threadform.mesh import Mesh, flip_faces, signed_volume, triangulate_faces

_AXIS_EPSILON = 1e-12


def _ring_points(radius: float, z: float, angles: np.ndarray) -> np.ndarray:
    return np.column_stack(
        [
            radius * np.cos(angles),
            radius * np.sin(angles),
            np.full_like(angles, z),
        ]
    )


def _orient_outward(mesh: Mesh) -> Mesh:
    if signed_volume(mesh) < 0:
        flip_faces(mesh)
    return mesh


def make_revolved(
    points_rz: Sequence[Sequence[float]],
    sides: int,
    *,
    phase_deg: float = 0.0,
) -> Mesh:
    """Revolve a closed (radius, z) polygon about the z axis.

    Points on the axis collapse to a single vertex so the result stays a closed
    manifold.
    """

    profile = np.asarray(points_rz, dtype=float)
    if profile.ndim != 2 or profile.shape[1] != 2 or profile.shape[0] < 3:
        raise ValueError("make_revolved requires at least 3 (radius, z) points.")
    if np.any(profile[:, 0] < -_AXIS_EPSILON):
        raise ValueError("Revolved profile radii must be non-negative.")
    if sides < 3:
        raise ValueError("sides must be >= 3.")

    angles = np.deg2rad(phase_deg) + np.linspace(0.0, 2.0 * np.pi, sides, endpoint=False)
    points = []
    rings = []
    offset = 0
    for radius, z in profile:
        if radius <= _AXIS_EPSILON:
            points.append(np.array([[0.0, 0.0, z]]))
            rings.append(np.full(sides, offset, dtype=int))
            offset += 1
        else:
            points.append(_ring_points(radius, z, angles))
            rings.append(offset + np.arange(sides, dtype=int))
            offset += sides

    faces = []
    for i in range(len(rings)):
        lower = rings[i]
        upper = rings[(i + 1) % len(rings)]
        a = lower
        b = np.roll(lower, -1)
        c = np.roll(upper, -1)
        d = upper
        faces.append(np.column_stack([a, b, c]))
        faces.append(np.column_stack([a, c, d]))
    tris = np.vstack(faces)
    keep = (tris[:, 0] != tris[:, 1]) & (tris[:, 1] != tris[:, 2]) & (tris[:, 0] != tris[:, 2])
    mesh = Mesh(vertices=np.vstack(points), faces=tris[keep])
    return _orient_outward(mesh)


def make_ngon_prism(
    sides: int,
    circumradius: float,
    height: float,
    *,
    rotation_deg: float = 0.0,
) -> Mesh:
    """Regular prism centered on the origin with its axis along z."""

    if sides < 3:
        raise ValueError("sides must be >= 3.")
    if circumradius <= 0 or height <= 0:
        raise ValueError("circumradius and height must be positive.")

    angles = np.deg2rad(rotation_deg) + np.linspace(0.0, 2.0 * np.pi, sides, endpoint=False)
    bottom = _ring_points(circumradius, -height / 2.0, angles)
    top = _ring_points(circumradius, height / 2.0, angles)
    bottom_idx = np.arange(sides)
    top_idx = bottom_idx + sides

    faces = []
    for i in range(sides):
        j = (i + 1) % sides
        faces.append([bottom_idx[i], bottom_idx[j], top_idx[j]])
        faces.append([bottom_idx[i], top_idx[j], top_idx[i]])
    caps = triangulate_faces([bottom_idx[::-1].tolist(), top_idx.tolist()])
    mesh = Mesh(vertices=np.vstack([bottom, top]), faces=np.vstack([np.asarray(faces), caps]))
    return _orient_outward(mesh)


def make_cylinder(radius: float, height: float, sides: int, *, center_z: float = 0.0) -> Mesh:
    half = height / 2.0
    return make_revolved(
        [(0.0, center_z - half), (radius, center_z - half), (radius, center_z + half), (0.0, center_z + half)],
        sides,
    )


__all__ = ["make_cylinder", "make_ngon_prism", "make_revolved"]
