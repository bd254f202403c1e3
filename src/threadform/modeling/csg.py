from __future__ import annotations

from typing import Iterable

import numpy as np
from manifold3d import Error, Manifold, Mesh as ManifoldMesh

from threadform.mesh import Mesh, analyze_mesh


class BooleanOperationError(ValueError):
    """Raised when an operand or a result is not a valid closed solid."""


def _manifold_from_mesh(mesh: Mesh) -> Manifold:
    vertices = np.ascontiguousarray(mesh.vertices, dtype=np.float32)
    faces = np.ascontiguousarray(mesh.faces, dtype=np.uint32)
    manifold = Manifold(ManifoldMesh(vert_properties=vertices, tri_verts=faces))
    status = manifold.status()
    if status != Error.NoError:
        raise BooleanOperationError(f"Mesh is not a closed manifold solid ({status}).")
    return manifold


def _mesh_from_manifold(manifold: Manifold, color=None) -> Mesh:
    status = manifold.status()
    if status != Error.NoError:
        raise BooleanOperationError(f"Boolean operation failed ({status}).")
    out = manifold.to_mesh()
    vertices = np.asarray(out.vert_properties, dtype=float)[:, :3]
    faces = np.asarray(out.tri_verts, dtype=int).reshape(-1, 3)
    mesh = Mesh(vertices, faces, color=color)
    analyze_mesh(mesh)
    return mesh


def _operands(meshes: Iterable[Mesh], name: str) -> list[Mesh]:
    items = list(meshes)
    if not items:
        raise ValueError(f"{name} requires at least one mesh.")
    return items


def boolean_union(meshes: Iterable[Mesh]) -> Mesh:
    items = _operands(meshes, "boolean_union")
    result = _manifold_from_mesh(items[0])
    for mesh in items[1:]:
        result = result + _manifold_from_mesh(mesh)
    return _mesh_from_manifold(result, color=items[0].color)


def boolean_difference(base: Mesh, cutters: Iterable[Mesh]) -> Mesh:
    result = _manifold_from_mesh(base)
    for cutter in cutters:
        result = result - _manifold_from_mesh(cutter)
    return _mesh_from_manifold(result, color=base.color)


def boolean_intersection(meshes: Iterable[Mesh]) -> Mesh:
    items = _operands(meshes, "boolean_intersection")
    result = _manifold_from_mesh(items[0])
    for mesh in items[1:]:
        result = result ^ _manifold_from_mesh(mesh)
    return _mesh_from_manifold(result, color=items[0].color)


__all__ = ["BooleanOperationError", "boolean_difference", "boolean_intersection", "boolean_union"]
