from __future__ import annotations

import math

import numpy as np
import pytest
import pyvista as pv

from threadform.mesh import analyze_mesh
from threadform.modeling import (
    MeshGroup,
    emit_thread_helix,
    emit_threaded_nut,
    emit_threaded_rod,
    generic_threaded_nut,
    group,
    iso_profile,
    make_ngon_prism,
    place_mesh,
)
from threadform.modeling.scene import orientation_matrix
from tests.helpers import FAST, is_watertight

ISO = iso_profile()


@pytest.fixture(scope="module")
def nut():
    return generic_threaded_nut(ISO, 1.5, 17.0, 10.0, 8.0, quality=FAST)


def _center(mesh) -> np.ndarray:
    xmin, xmax, ymin, ymax, zmin, zmax = mesh.bounds
    return np.array([(xmin + xmax) / 2.0, (ymin + ymax) / 2.0, (zmin + zmax) / 2.0])


def test_anchor_bottom_and_top(nut) -> None:
    bottom = place_mesh(nut, anchor="bottom")
    top = place_mesh(nut, anchor="top")
    assert bottom.bounds[4] == pytest.approx(0.0, abs=1e-3)
    assert bottom.bounds[5] == pytest.approx(8.0, abs=1e-3)
    assert top.bounds[5] == pytest.approx(0.0, abs=1e-3)
    assert nut.bounds[4] == pytest.approx(-4.0, abs=1e-3)


def test_orient_along_x(nut) -> None:
    placed = place_mesh(nut, orient=(1.0, 0.0, 0.0))
    xmin, xmax, _, _, zmin, zmax = placed.bounds
    assert xmax == pytest.approx(4.0, abs=1e-3)
    assert xmin == pytest.approx(-4.0, abs=1e-3)
    assert zmax - zmin == pytest.approx(2.0 * 17.0 / math.sqrt(3.0), abs=1e-3)


def test_orient_down_flips_anchor(nut) -> None:
    placed = place_mesh(nut, anchor="bottom", orient=(0.0, 0.0, -1.0))
    assert placed.bounds[5] == pytest.approx(0.0, abs=1e-3)
    assert placed.bounds[4] == pytest.approx(-8.0, abs=1e-3)
    assert placed.volume == pytest.approx(nut.volume, rel=1e-6)


def test_spin_turns_corners_to_flats(nut) -> None:
    plain = generic_threaded_nut(ISO, 1.5, 17.0, 10.0, 8.0, bevel=False, quality=FAST)
    assert plain.bounds[1] == pytest.approx(17.0 / math.sqrt(3.0), abs=1e-3)
    spun = place_mesh(plain, spin=30.0)
    assert spun.bounds[1] == pytest.approx(8.5, abs=1e-3)


def test_position_and_metadata(nut) -> None:
    placed = place_mesh(nut, position=(10.0, -2.0, 3.0), anchor="bottom")
    center = _center(placed)
    assert center[2] == pytest.approx(3.0 + 4.0, abs=1e-3)
    assert placed.metadata["placement"] == {
        "anchor": "bottom",
        "spin": 0.0,
        "orient": (0.0, 0.0, 1.0),
        "position": (10.0, -2.0, 3.0),
    }
    assert "placement" not in nut.metadata
    assert analyze_mesh(placed).is_watertight


def test_length_falls_back_to_bounds() -> None:
    prism = make_ngon_prism(4, 1.0, 2.0)
    assert place_mesh(prism, anchor="bottom").bounds[4] == pytest.approx(0.0)
    assert place_mesh(prism, anchor="bottom", length=10.0).bounds[4] == pytest.approx(4.0)


def test_bad_placement_arguments() -> None:
    prism = make_ngon_prism(4, 1.0, 2.0)
    with pytest.raises(ValueError):
        place_mesh(prism, anchor="middle")
    with pytest.raises(ValueError):
        orientation_matrix((0.0, 0.0, 0.0))


def test_emit_threaded_rod_into_scene() -> None:
    scene = MeshGroup()
    poly = emit_threaded_rod(ISO, 2.0, 10.0, 20.0, quality=FAST, anchor="bottom", scene=scene)
    assert isinstance(poly, pv.PolyData)
    assert len(scene.meshes) == 1
    placed = scene.meshes[0]
    assert poly.n_cells == placed.n_faces
    assert placed.metadata["placement"]["anchor"] == "bottom"
    assert placed.metadata["length"] == pytest.approx(20.0)
    ok, open_edges = is_watertight(poly)
    assert ok, open_edges


def test_emit_nut_and_helix() -> None:
    nut_poly = emit_threaded_nut(ISO, 1.5, 17.0, 10.0, 8.0, quality=FAST, position=(20.0, 0.0, 0.0))
    helix_poly = emit_thread_helix(10.0, 2.0, quality=FAST, anchor="top")
    assert is_watertight(nut_poly)[0]
    assert is_watertight(helix_poly)[0]
    assert nut_poly.bounds[0] > 10.0
    # top anchor sits on the helix end, the last tooth root overhangs it
    assert helix_poly.bounds[5] == pytest.approx(0.5 + math.tan(math.radians(15.0)) / 2.0, abs=1e-6)


def test_group_transforms_compose_in_call_order() -> None:
    box = make_ngon_prism(4, 1.0, 1.0)
    grp = group([box]).translate((1.0, 0.0, 0.0)).rotate((0.0, 0.0, 1.0), 90.0)
    moved = grp.to_meshes()[0]
    np.testing.assert_allclose(_center(moved), (0.0, 1.0, 0.0), atol=1e-9)
    np.testing.assert_allclose(_center(box), (0.0, 0.0, 0.0), atol=1e-9)


def test_group_mirror_and_merge() -> None:
    a = make_ngon_prism(4, 1.0, 1.0).translate((3.0, 0.0, 0.0))
    b = make_ngon_prism(4, 1.0, 1.0).translate((0.0, 3.0, 0.0))
    grp = MeshGroup().add(a).add(b).mirror((1.0, 0.0, 0.0))
    merged = grp.to_mesh()
    assert merged.bounds[0] == pytest.approx(-4.0)
    assert merged.volume == pytest.approx(a.volume + b.volume)
    assert analyze_mesh(merged).is_consistently_oriented
