"""Group example: a bolt-and-nut scene placed with anchors, moved as one.

Run with:
  python docs/examples/groups/group_example.py
"""
from __future__ import annotations

from threadform.modeling import (
    MeshGroup,
    MeshQuality,
    emit_thread_helix,
    emit_threaded_nut,
    emit_threaded_rod,
    iso_profile,
)

QUALITY = MeshQuality(facets=32)


def build():
    scene = MeshGroup()
    emit_threaded_rod(iso_profile(), 1.5, 10.0, 30.0, bevel=True, quality=QUALITY, anchor="bottom", scene=scene)
    emit_threaded_nut(
        iso_profile(), 1.5, 17.0, 10.0, 8.0, quality=QUALITY, anchor="bottom", position=(0.0, 0.0, 12.0), scene=scene
    )
    emit_thread_helix(
        20.0, 3.0, turns=3.0, taper=60.0, color=(1.0, 0.48, 0.09), quality=QUALITY,
        orient=(1.0, 0.0, 0.0), position=(30.0, 0.0, 10.0), scene=scene,
    )
    scene.rotate(axis=(0, 0, 1), angle_deg=30)
    return scene


if __name__ == "__main__":
    import pyvista as pv

    from threadform.mesh import mesh_to_pyvista

    pv.plot(mesh_to_pyvista(build().to_mesh()))
