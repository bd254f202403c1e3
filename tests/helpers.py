from __future__ import annotations

import numpy as np
import pyvista as pv

from threadform.mesh import Mesh
from threadform.mesh_quality import MeshQuality

# Coarse tessellation keeps boolean-heavy tests fast.
FAST = MeshQuality(facets=24)


def is_watertight(mesh: pv.DataSet) -> tuple[bool, int]:
    edges = mesh.extract_feature_edges(boundary_edges=True, feature_edges=False, non_manifold_edges=True, manifold_edges=False)
    open_edges = edges.n_cells
    return open_edges == 0, open_edges


def rotate_z(points: np.ndarray, angle_deg: float) -> np.ndarray:
    angle = np.deg2rad(angle_deg)
    c, s = np.cos(angle), np.sin(angle)
    rot = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    return points @ rot.T


def same_point_set(a: np.ndarray, b: np.ndarray, tol: float = 1e-6) -> bool:
    """Order-independent comparison of two small vertex arrays."""
    if a.shape != b.shape:
        return False
    dist = np.linalg.norm(a[:, np.newaxis, :] - b[np.newaxis, :, :], axis=2)
    return bool(dist.min(axis=1).max() <= tol and dist.min(axis=0).max() <= tol)


def radial_extent(mesh: Mesh) -> tuple[float, float]:
    radii = np.linalg.norm(mesh.vertices[:, :2], axis=1)
    return float(radii.min()), float(radii.max())


def radii_near_z(mesh: Mesh, z: float, tol: float) -> np.ndarray:
    mask = np.abs(mesh.vertices[:, 2] - z) <= tol
    return np.linalg.norm(mesh.vertices[mask, :2], axis=1)
