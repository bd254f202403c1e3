from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

import numpy as np

from threadform.mesh import Mesh, combine_meshes, mirror_matrix, rotation_matrix, translation_matrix


@dataclass
class MeshGroup:
    """Scene collection: meshes sharing one pending transform.

    Each call composes onto what came before, so ``translate`` then ``rotate``
    swings the translated parts about the origin.
    """

    meshes: List[Mesh] = field(default_factory=list)
    _transform: np.ndarray = field(default_factory=lambda: np.eye(4))

    def _apply(self, matrix: np.ndarray) -> "MeshGroup":
        self._transform = matrix @ self._transform
        return self

    def add(self, mesh: Mesh) -> "MeshGroup":
        self.meshes.append(mesh)
        return self

    def translate(self, offset: Sequence[float]) -> "MeshGroup":
        return self._apply(translation_matrix(offset))

    def rotate(
        self,
        axis: Sequence[float],
        angle_deg: float,
        origin: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> "MeshGroup":
        return self._apply(rotation_matrix(axis, angle_deg, origin))

    def mirror(self, normal: Sequence[float]) -> "MeshGroup":
        return self._apply(mirror_matrix(normal))

    def to_meshes(self) -> list[Mesh]:
        """Transformed copies; the stored meshes are left untouched."""

        return [mesh.transform(self._transform, inplace=False) for mesh in self.meshes]

    def to_mesh(self) -> Mesh:
        return combine_meshes(self.to_meshes())


def group(meshes: Iterable[Mesh]) -> MeshGroup:
    return MeshGroup(meshes=list(meshes))


__all__ = ["MeshGroup", "group"]
