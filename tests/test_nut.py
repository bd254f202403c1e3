from __future__ import annotations

import math

import numpy as np
import pytest

from threadform.mesh import analyze_mesh
from threadform.modeling import (
    InvalidThreadSpec,
    ThreadGeometryError,
    UnsupportedThreadConfig,
    generic_threaded_nut,
    iso_profile,
    make_nut_spec,
    make_ngon_prism,
)
from tests.helpers import FAST, radial_extent, radii_near_z

ISO = iso_profile()


def _hex_nut(**kwargs):
    args = {"profile": ISO, "pitch": 1.5, "nut_width": 17.0, "d": 10.0, "height": 8.0, "quality": FAST}
    args.update(kwargs)
    return generic_threaded_nut(**args)


def test_hex_nut_is_closed_solid() -> None:
    nut = _hex_nut()
    analysis = analyze_mesh(nut)
    assert analysis.is_watertight
    assert nut.volume > 0
    assert nut.metadata["threaded"] is True
    assert nut.metadata["shape"] == "hex"


def test_hex_nut_bounds() -> None:
    nut = _hex_nut()
    xmin, xmax, ymin, ymax, zmin, zmax = nut.bounds
    assert xmax == pytest.approx(17.0 / math.sqrt(3.0), abs=1e-3)
    assert ymax == pytest.approx(8.5, abs=1e-3)
    assert ymin == pytest.approx(-8.5, abs=1e-3)
    assert zmax == pytest.approx(4.0, abs=1e-3)
    assert zmin == pytest.approx(-4.0, abs=1e-3)


def test_hex_nut_bevels_by_default() -> None:
    nut = _hex_nut()
    assert radii_near_z(nut, 4.0, 1e-3).max() <= 8.5 + 1e-3
    square_edged = _hex_nut(bevel=False)
    assert radii_near_z(square_edged, 4.0, 1e-3).max() == pytest.approx(17.0 / math.sqrt(3.0), abs=1e-3)
    assert square_edged.volume > nut.volume


def test_per_end_outer_bevel() -> None:
    nut = _hex_nut(bevel2=False)
    assert radii_near_z(nut, -4.0, 1e-3).max() <= 8.5 + 1e-3
    assert radii_near_z(nut, 4.0, 1e-3).max() == pytest.approx(17.0 / math.sqrt(3.0), abs=1e-3)


def test_square_nut_is_axis_aligned_and_unbeveled() -> None:
    nut = _hex_nut(shape="square", nut_width=16.0)
    xmin, xmax, ymin, ymax, _, _ = nut.bounds
    assert xmax == pytest.approx(8.0, abs=1e-3)
    assert ymax == pytest.approx(8.0, abs=1e-3)
    assert radii_near_z(nut, 4.0, 1e-3).max() == pytest.approx(8.0 * math.sqrt(2.0), abs=1e-3)
    assert analyze_mesh(nut).is_watertight


def test_square_nut_bevel_on_request() -> None:
    nut = _hex_nut(shape="square", nut_width=16.0, bevel=True)
    assert radii_near_z(nut, 4.0, 1e-3).max() <= 8.0 + 1e-3


def test_plain_bore_when_pitch_is_zero() -> None:
    nut = _hex_nut(pitch=0)
    sides = FAST.facets
    bore = 5.0 / math.cos(math.pi / sides)
    # Face-plane cuts land on chords between the bore facets.
    assert 5.0 - 1e-3 <= radial_extent(nut)[0] <= bore + 1e-3
    assert nut.metadata["threaded"] is False
    assert analyze_mesh(nut).is_watertight


def test_threaded_bore_cuts_deeper_than_root() -> None:
    threaded = _hex_nut()
    plain = _hex_nut(pitch=0)
    assert radial_extent(threaded)[0] < radial_extent(plain)[0]
    depth = -ISO[0][1] * 1.5
    assert radial_extent(threaded)[0] > 5.0 - depth - 0.5


def test_plain_bore_inner_chamfer() -> None:
    nut = _hex_nut(pitch=0, inner_bevel=True)
    bore = 5.0 / math.cos(math.pi / FAST.facets)
    chamfer = min(10.0 / 8.0, 8.0 / 4.0)
    entry = bore + chamfer
    for face in (4.0, -4.0):
        smallest = radii_near_z(nut, face, 1e-3).min()
        assert entry * math.cos(math.pi / FAST.facets) - 1e-3 <= smallest <= entry + 1e-3


def test_nut_clearance_from_config(isolated_config) -> None:
    isolated_config.write_text('{"slop": 0.25}\n')
    nut = _hex_nut(pitch=0)
    bore = 5.0 / math.cos(math.pi / FAST.facets) + 0.25
    assert bore * math.cos(math.pi / FAST.facets) - 1e-3 <= radial_extent(nut)[0] <= bore + 1e-3


def test_left_handed_nut_is_closed() -> None:
    nut = _hex_nut(left_handed=True)
    assert analyze_mesh(nut).is_watertight
    assert nut.volume > 0


def test_nut_volume_below_prism() -> None:
    nut = _hex_nut(bevel=False)
    prism = make_ngon_prism(6, 17.0 / math.sqrt(3.0), 8.0)
    assert 0 < nut.volume < prism.volume


def test_nut_spec_defaults() -> None:
    spec = make_nut_spec(ISO, 1.5, 17.0, 10.0, 8.0)
    assert spec.outer_ends.end1.bevel and spec.outer_ends.end2.bevel
    assert spec.thread.internal
    assert spec.thread.length == pytest.approx(8.0)
    assert spec.thread.ends.end1.higbee.enabled
    assert not spec.thread.ends.end1.bevel
    square = make_nut_spec(ISO, 1.5, 17.0, 10.0, 8.0, shape="square")
    assert not square.outer_ends.any_bevel


def test_unknown_shape_rejected() -> None:
    with pytest.raises(UnsupportedThreadConfig):
        _hex_nut(shape="round")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"pitch": -1.0},
        {"nut_width": 0.0},
        {"height": -2.0},
        {"height": None},
        {"bevel_angle": 95.0},
        {"d": None},
    ],
)
def test_invalid_nut_arguments(kwargs) -> None:
    with pytest.raises(InvalidThreadSpec):
        _hex_nut(**kwargs)


def test_bore_wider_than_nut_is_geometry_error() -> None:
    with pytest.raises(ThreadGeometryError):
        _hex_nut(nut_width=9.0)


def test_nut_metadata_carries_bore_details() -> None:
    nut = _hex_nut()
    assert nut.metadata["bore_metadata"]["kind"] == "internal"
    assert np.isfinite(nut.metadata["bore_metadata"]["thread_depth"])
