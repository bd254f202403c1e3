from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np


@dataclass
class MeshAnalysis:
    n_vertices: int
    n_faces: int
    degenerate_faces: int
    boundary_edges: int
    nonmanifold_edges: int
    misoriented_edges: int
    invalid_vertices: int

    @property
    def is_manifold(self) -> bool:
        return self.nonmanifold_edges == 0

    @property
    def is_watertight(self) -> bool:
        return self.is_manifold and self.boundary_edges == 0

    @property
    def is_consistently_oriented(self) -> bool:
        return self.misoriented_edges == 0

    @property
    def has_degenerate_faces(self) -> bool:
        return self.degenerate_faces > 0

    @property
    def has_invalid_vertices(self) -> bool:
        return self.invalid_vertices > 0

    def issues(self) -> list[str]:
        checks = (
            (self.invalid_vertices, "invalid vertices (NaN/inf)"),
            (self.boundary_edges, "boundary edges (not watertight)"),
            (self.nonmanifold_edges, "non-manifold edges"),
            (self.misoriented_edges, "edges with inconsistent winding"),
        )
        return [f"{count} {label}" for count, label in checks if count > 0]


def translation_matrix(offset: Sequence[float]) -> np.ndarray:
    mat = np.eye(4)
    mat[:3, 3] = np.asarray(offset, dtype=float).reshape(3)
    return mat


def rotation_matrix(
    axis: Sequence[float],
    angle_deg: float,
    origin: Sequence[float] = (0.0, 0.0, 0.0),
) -> np.ndarray:
    """Homogeneous rotation of ``angle_deg`` about ``axis`` through ``origin``."""

    axis_vec = np.asarray(axis, dtype=float).reshape(3)
    norm = np.linalg.norm(axis_vec)
    if norm == 0:
        raise ValueError("Rotation axis must be non-zero.")
    k = axis_vec / norm
    cross = np.array([[0.0, -k[2], k[1]], [k[2], 0.0, -k[0]], [-k[1], k[0], 0.0]])
    angle = np.deg2rad(angle_deg)
    mat = np.eye(4)
    mat[:3, :3] = np.eye(3) + np.sin(angle) * cross + (1.0 - np.cos(angle)) * (cross @ cross)
    center = np.asarray(origin, dtype=float).reshape(3)
    return translation_matrix(center) @ mat @ translation_matrix(-center)


def mirror_matrix(normal: Sequence[float]) -> np.ndarray:
    """Reflection across the plane through the origin with the given normal."""

    normal_vec = np.asarray(normal, dtype=float).reshape(3)
    norm = np.linalg.norm(normal_vec)
    if norm == 0:
        raise ValueError("Mirror normal must be non-zero.")
    n = normal_vec / norm
    mat = np.eye(4)
    mat[:3, :3] -= 2.0 * np.outer(n, n)
    return mat


@dataclass
class Mesh:
    """Indexed triangle mesh; faces wind counter-clockwise seen from outside."""

    vertices: np.ndarray
    faces: np.ndarray
    color: tuple[float, float, float, float] | None = None
    metadata: dict[str, object] = field(default_factory=dict)
    analysis: MeshAnalysis | None = None

    def __post_init__(self) -> None:
        self.vertices = np.array(self.vertices, dtype=float).reshape(-1, 3)
        self.faces = np.array(self.faces, dtype=int).reshape(-1, 3)
        self.color = as_rgba(self.color)

    def copy(self) -> "Mesh":
        # metadata is copied one level deep; nested values stay shared
        return Mesh(self.vertices, self.faces, self.color, dict(self.metadata), self.analysis)

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    @property
    def bounds(self) -> tuple[float, float, float, float, float, float]:
        """(xmin, xmax, ymin, ymax, zmin, zmax), pyvista order."""

        if self.n_vertices == 0:
            return (0.0,) * 6
        lo = self.vertices.min(axis=0)
        hi = self.vertices.max(axis=0)
        return tuple(float(v) for v in np.column_stack([lo, hi]).ravel())

    @property
    def volume(self) -> float:
        return signed_volume(self)

    def transform(self, matrix: np.ndarray, inplace: bool = True) -> "Mesh":
        """Apply a 4x4 affine matrix; reflections keep the surface outward."""

        matrix = np.asarray(matrix, dtype=float)
        mesh = self if inplace else self.copy()
        mesh.vertices = mesh.vertices @ matrix[:3, :3].T + matrix[:3, 3]
        if np.linalg.det(matrix[:3, :3]) < 0:
            flip_faces(mesh)
        return mesh

    def translate(self, offset: Sequence[float], inplace: bool = True) -> "Mesh":
        mesh = self if inplace else self.copy()
        mesh.vertices = mesh.vertices + np.asarray(offset, dtype=float).reshape(3)
        return mesh

    def rotate_vector(
        self,
        axis: Sequence[float],
        angle_deg: float,
        point: Sequence[float] = (0.0, 0.0, 0.0),
        inplace: bool = True,
    ) -> "Mesh":
        return self.transform(rotation_matrix(axis, angle_deg, point), inplace=inplace)


def as_rgba(color: Sequence[float] | None) -> tuple[float, float, float, float] | None:
    if color is None:
        return None
    values = tuple(float(c) for c in color)
    if len(values) == 3:
        values += (1.0,)
    if len(values) != 4:
        raise ValueError("color must have 3 (RGB) or 4 (RGBA) components.")
    return values


def triangulate_faces(face_list: Iterable[Sequence[int]]) -> np.ndarray:
    """Fan-triangulate index loops from their first vertex (convex loops only)."""

    fans = [
        np.column_stack([np.full(len(loop) - 2, loop[0]), loop[1:-1], loop[2:]])
        for loop in (np.asarray(face, dtype=int) for face in face_list)
        if len(loop) >= 3
    ]
    if not fans:
        return np.zeros((0, 3), dtype=int)
    return np.vstack(fans)


def combine_meshes(meshes: Iterable[Mesh]) -> Mesh:
    """Concatenate meshes without merging vertices; the first color wins."""

    parts = list(meshes)
    if not parts:
        raise ValueError("combine_meshes requires at least one mesh.")
    offsets = np.cumsum([0] + [part.n_vertices for part in parts[:-1]])
    color = next((part.color for part in parts if part.color is not None), None)
    return Mesh(
        vertices=np.vstack([part.vertices for part in parts]),
        faces=np.vstack([part.faces + offset for part, offset in zip(parts, offsets)]),
        color=color,
    )


def signed_volume(mesh: Mesh) -> float:
    """Volume enclosed by the surface; negative when the winding points inward."""

    if mesh.n_faces == 0:
        return 0.0
    v0, v1, v2 = (mesh.vertices[mesh.faces[:, i]] for i in range(3))
    return float(np.einsum("ij,ij->i", v0, np.cross(v1, v2)).sum() / 6.0)


def flip_faces(mesh: Mesh) -> Mesh:
    mesh.faces = mesh.faces[:, ::-1].copy()
    return mesh


def mirror_mesh(mesh: Mesh, axis: int = 1) -> Mesh:
    """Reflect across the plane normal to `axis`, keeping the surface outward."""

    normal = np.zeros(3)
    normal[axis] = 1.0
    return mesh.transform(mirror_matrix(normal), inplace=False)


def analyze_mesh(mesh: Mesh, area_epsilon: float = 1e-12) -> MeshAnalysis:
    """Count topology defects and cache the result on ``mesh.analysis``."""

    faces = mesh.faces
    degenerate = boundary = nonmanifold = misoriented = 0
    if len(faces):
        v0, v1, v2 = (mesh.vertices[faces[:, i]] for i in range(3))
        areas = 0.5 * np.linalg.norm(np.cross(v1 - v0, v2 - v0), axis=1)
        degenerate = int(np.count_nonzero(areas <= area_epsilon))

        directed = faces[:, [0, 1, 1, 2, 2, 0]].reshape(-1, 2)
        _, uses = np.unique(np.sort(directed, axis=1), axis=0, return_counts=True)
        boundary = int(np.count_nonzero(uses == 1))
        nonmanifold = int(np.count_nonzero(uses > 2))
        # a shared edge must be walked once in each direction
        _, same_way = np.unique(directed, axis=0, return_counts=True)
        misoriented = int(np.count_nonzero(same_way > 1))

    analysis = MeshAnalysis(
        n_vertices=mesh.n_vertices,
        n_faces=mesh.n_faces,
        degenerate_faces=degenerate,
        boundary_edges=boundary,
        nonmanifold_edges=nonmanifold,
        misoriented_edges=misoriented,
        invalid_vertices=int(np.count_nonzero(~np.isfinite(mesh.vertices))),
    )
    mesh.analysis = analysis
    return analysis


def mesh_to_pyvista(mesh: Mesh):
    import pyvista as pv

    if mesh.n_faces == 0:
        return pv.PolyData(mesh.vertices, deep=True)
    cells = np.column_stack([np.full(mesh.n_faces, 3), mesh.faces]).astype(np.int64).ravel()
    poly = pv.PolyData(mesh.vertices, cells, deep=True)
    if mesh.color is not None:
        poly.field_data["threadform_color"] = np.asarray(mesh.color, dtype=float)
    return poly
