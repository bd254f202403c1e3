from __future__ import annotations

import math

import numpy as np
import pytest

from threadform.mesh import (
    Mesh,
    analyze_mesh,
    as_rgba,
    combine_meshes,
    flip_faces,
    mesh_to_pyvista,
    mirror_mesh,
    signed_volume,
    triangulate_faces,
)
from threadform.mesh_quality import MeshQuality, round_up_to_multiple, segments
from threadform.modeling import make_cylinder, make_ngon_prism, make_revolved
from tests.helpers import is_watertight


def _box() -> Mesh:
    # 4-gon with circumradius 1: a square of side sqrt(2)
    return make_ngon_prism(4, 1.0, 1.0)


def test_prism_is_closed_and_outward() -> None:
    box = _box()
    analysis = analyze_mesh(box)
    assert analysis.is_watertight
    assert analysis.is_consistently_oriented
    assert not analysis.has_degenerate_faces
    assert analysis.issues() == []
    assert box.volume == pytest.approx(2.0)


def test_flip_faces_negates_volume() -> None:
    box = _box()
    flip_faces(box)
    assert signed_volume(box) == pytest.approx(-2.0)


def test_open_mesh_is_reported() -> None:
    box = _box()
    box.faces = box.faces[1:]
    analysis = analyze_mesh(box)
    assert not analysis.is_watertight
    assert analysis.boundary_edges == 3
    assert any("boundary" in issue for issue in analysis.issues())
    assert box.analysis is analysis


def test_misoriented_face_is_reported() -> None:
    box = _box()
    box.faces[0] = box.faces[0][::-1]
    analysis = analyze_mesh(box)
    assert analysis.is_watertight
    assert not analysis.is_consistently_oriented


def test_invalid_vertices_are_reported() -> None:
    box = _box()
    box.vertices[0, 0] = np.nan
    assert analyze_mesh(box).has_invalid_vertices


def test_mirror_keeps_volume_positive() -> None:
    prism = make_ngon_prism(3, 1.0, 2.0)
    prism.translate((0.0, 2.0, 0.0))
    mirrored = mirror_mesh(prism, axis=1)
    assert mirrored.bounds[3] == pytest.approx(-prism.bounds[2])
    assert mirrored.volume == pytest.approx(prism.volume)
    assert prism.bounds[2] > 0


def test_reflecting_transform_flips_winding() -> None:
    box = _box()
    reflect = np.diag([-1.0, 1.0, 1.0, 1.0])
    moved = box.transform(reflect, inplace=False)
    assert moved.volume == pytest.approx(2.0)
    assert box.volume == pytest.approx(2.0)
    assert analyze_mesh(moved).is_consistently_oriented


def test_rotate_vector_about_point() -> None:
    box = _box().translate((1.0, 0.0, 0.0))
    box.rotate_vector((0.0, 0.0, 1.0), 180.0, point=(1.0, 0.0, 0.0))
    assert box.bounds[0] == pytest.approx(0.0, abs=1e-9)
    assert box.bounds[1] == pytest.approx(2.0)
    with pytest.raises(ValueError):
        box.rotate_vector((0.0, 0.0, 0.0), 10.0)


def test_combine_meshes_offsets_faces() -> None:
    a = _box()
    b = _box().translate((5.0, 0.0, 0.0))
    b.color = as_rgba((1.0, 0.0, 0.0))
    combined = combine_meshes([a, b])
    assert combined.n_vertices == a.n_vertices + b.n_vertices
    assert combined.faces.max() == combined.n_vertices - 1
    assert combined.color == (1.0, 0.0, 0.0, 1.0)
    assert combined.volume == pytest.approx(4.0)
    with pytest.raises(ValueError):
        combine_meshes([])


def test_triangulate_faces_fans() -> None:
    tris = triangulate_faces([[0, 1, 2, 3], [4, 5]])
    assert tris.tolist() == [[0, 1, 2], [0, 2, 3]]
    assert triangulate_faces([]).shape == (0, 3)


def test_as_rgba() -> None:
    assert as_rgba(None) is None
    assert as_rgba((0.1, 0.2, 0.3, 0.4)) == (0.1, 0.2, 0.3, 0.4)
    with pytest.raises(ValueError):
        as_rgba((1.0, 2.0))


def test_revolved_cylinder_volume() -> None:
    cylinder = make_cylinder(1.0, 2.0, 64)
    polygon_area = 64 / 2.0 * math.sin(2.0 * math.pi / 64)
    assert cylinder.volume == pytest.approx(polygon_area * 2.0)
    assert analyze_mesh(cylinder).is_watertight


def test_revolved_ring_without_axis_points() -> None:
    ring = make_revolved([(1.0, 0.0), (2.0, 0.0), (2.0, 1.0), (1.0, 1.0)], 32)
    assert analyze_mesh(ring).is_watertight
    assert ring.volume > 0


def test_revolved_rejects_bad_profiles() -> None:
    with pytest.raises(ValueError):
        make_revolved([(0.0, 0.0), (1.0, 0.0)], 16)
    with pytest.raises(ValueError):
        make_revolved([(-1.0, 0.0), (1.0, 0.0), (1.0, 1.0)], 16)
    with pytest.raises(ValueError):
        make_revolved([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)], 2)


def test_segments_follow_quality() -> None:
    assert segments(5.0) == 16
    assert segments(100.0) == 30
    assert segments(0.01) == 5
    assert segments(5.0, MeshQuality(facets=7)) == 7
    assert round_up_to_multiple(18, 4) == 20
    assert round_up_to_multiple(16, 4) == 16


@pytest.mark.parametrize(
    "kwargs",
    [{"facets": 2}, {"facet_angle": 0.0}, {"facet_size": -1.0}, {"max_triangles": 0}],
)
def test_mesh_quality_validation(kwargs) -> None:
    with pytest.raises(ValueError):
        MeshQuality(**kwargs)


def test_mesh_to_pyvista() -> None:
    box = _box()
    box.color = as_rgba((0.2, 0.4, 0.6))
    poly = mesh_to_pyvista(box)
    assert poly.n_cells == box.n_faces
    assert poly.n_points == box.n_vertices
    ok, open_edges = is_watertight(poly)
    assert ok, open_edges
    np.testing.assert_allclose(poly.field_data["threadform_color"], [0.2, 0.4, 0.6, 1.0])
