from __future__ import annotations

import warnings

import numpy as np

from threadform.io.stl import write_stl
from threadform.mesh import Mesh
from threadform.modeling import make_ngon_prism


def test_binary_stl_layout(tmp_path) -> None:
    prism = make_ngon_prism(6, 2.0, 3.0)
    path = tmp_path / "prism.stl"
    write_stl(prism, path)
    data = path.read_bytes()
    assert data[:21] == b"threadform binary STL"
    assert len(data) == 84 + 50 * prism.n_faces
    assert int(np.frombuffer(data[80:84], dtype="<u4")[0]) == prism.n_faces

    first = np.frombuffer(data[84:134], dtype="<f4", count=12)
    normal, corners = first[:3], first[3:].reshape(3, 3)
    np.testing.assert_allclose(corners, prism.vertices[prism.faces[0]], atol=1e-6)
    assert abs(float(np.linalg.norm(normal)) - 1.0) < 1e-6


def test_ascii_stl(tmp_path) -> None:
    prism = make_ngon_prism(4, 1.0, 1.0)
    path = tmp_path / "box.stl"
    write_stl(prism, path, ascii=True, name="box")
    text = path.read_text()
    assert text.startswith("solid box\n")
    assert text.rstrip().endswith("endsolid box")
    assert text.count("facet normal") == prism.n_faces
    assert text.count("vertex ") == 3 * prism.n_faces


def test_degenerate_face_gets_zero_normal(tmp_path) -> None:
    mesh = Mesh(
        vertices=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (2.0, 0.0, 0.0), (0.0, 1.0, 0.0)],
        faces=[(0, 1, 2), (0, 1, 3)],
    )
    path = tmp_path / "sliver.stl"
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        write_stl(mesh, path)
    data = path.read_bytes()
    records = [np.frombuffer(data[84 + 50 * i : 84 + 50 * i + 12], dtype="<f4") for i in range(2)]
    np.testing.assert_array_equal(records[0], np.zeros(3, dtype=np.float32))
    np.testing.assert_allclose(records[1], (0.0, 0.0, 1.0), atol=1e-7)
