from __future__ import annotations

import math
import numbers
from typing import Sequence

from threadform._config import get_slop
from threadform.mesh import Mesh, analyze_mesh, as_rgba
from threadform.mesh_quality import MeshQuality, segments
from threadform.modeling._thread_types import (
    HigbeeLike,
    InvalidThreadSpec,
    NutSpec,
    ThreadEnds,
    ThreadGeometryError,
    ThreadSpec,
    UnsupportedThreadConfig,
    require_bool,
    require_positive,
    require_starts,
    resolve_diameters,
)
from threadform.modeling.csg import boolean_difference, boolean_intersection
from threadform.modeling.primitives import make_ngon_prism, make_revolved
from threadform.modeling.threading import build_thread, make_thread_spec

_SHAPES = {"hex": (6, math.sqrt(3.0), 0.0), "square": (4, math.sqrt(2.0), 45.0)}
_BORE_OVERSHOOT = 0.5


def _prism_geometry(shape: str) -> tuple[int, float, float]:
    try:
        return _SHAPES[shape]
    except KeyError:
        raise UnsupportedThreadConfig(f"Unsupported nut shape '{shape}'. Expected 'hex' or 'square'.") from None


def _outer_chamfer(spec: NutSpec, circumradius: float, sides: int) -> Mesh:
    """Revolved solid whose intersection with the prism bevels the chosen faces.

    On a beveled face the cone starts at the flat-to-flat radius and widens at
    ``bevel_angle`` from the face plane until it clears the prism corners.
    """

    slope = math.tan(math.radians(spec.bevel_angle))
    inner = spec.nut_width / 2.0
    outer = circumradius * 1.05
    rise = (outer - inner) * slope
    if 2.0 * rise >= spec.height:
        raise ThreadGeometryError("Outer bevel does not fit in the nut height.")
    margin = 0.05 * spec.nut_width * slope
    half = spec.height / 2.0

    points: list[tuple[float, float]] = [(0.0, -half - margin)]
    if spec.outer_ends.end1.bevel:
        points += [(inner - margin / slope, -half - margin), (outer, -half + rise)]
    else:
        points.append((outer, -half - margin))
    if spec.outer_ends.end2.bevel:
        points += [(outer, half - rise), (inner - margin / slope, half + margin)]
    else:
        points.append((outer, half + margin))
    points.append((0.0, half + margin))
    return make_revolved(points, sides)


def _plain_bore(spec: NutSpec, quality: MeshQuality) -> Mesh:
    """Unthreaded bore with optional 45 degree entry chamfers."""

    thread = spec.thread
    sides = segments(max(thread.r1, thread.r2), quality)
    scale = 1.0 / math.cos(math.pi / sides)
    r_bottom = thread.r1 * scale + thread.clearance
    r_top = thread.r2 * scale + thread.clearance
    chamfer = min(min(thread.d1, thread.d2) / 8.0, spec.height / 4.0)
    half = spec.height / 2.0
    low = -half - _BORE_OVERSHOOT
    high = half + _BORE_OVERSHOOT

    points: list[tuple[float, float]] = [(0.0, low)]
    if thread.ends.end1.bevel:
        points += [(r_bottom + chamfer + _BORE_OVERSHOOT, low), (r_bottom, -half + chamfer)]
    else:
        points.append((r_bottom, low))
    if thread.ends.end2.bevel:
        points += [(r_top, half - chamfer), (r_top + chamfer + _BORE_OVERSHOOT, high)]
    else:
        points.append((r_top, high))
    points.append((0.0, high))
    return make_revolved(points, sides)


def make_nut_spec(
    profile: Sequence[Sequence[float]],
    pitch: float,
    nut_width: float,
    d: float | None = None,
    height: float | None = None,
    *,
    d1: float | None = None,
    d2: float | None = None,
    shape: str = "hex",
    starts: int = 1,
    left_handed: bool = False,
    bevel: bool | None = None,
    bevel1: bool | None = None,
    bevel2: bool | None = None,
    bevel_angle: float = 30.0,
    inner_bevel: bool | None = None,
    inner_bevel1: bool | None = None,
    inner_bevel2: bool | None = None,
    higbee: HigbeeLike = None,
    higbee1: HigbeeLike = None,
    higbee2: HigbeeLike = None,
    clearance: float | None = None,
) -> NutSpec:
    """Validate nut arguments; a ``pitch`` of 0 describes a plain bore."""

    _prism_geometry(shape)
    nut_width = require_positive(nut_width, "nut_width")
    height = require_positive(height, "height")
    if isinstance(pitch, bool) or not isinstance(pitch, numbers.Real) or not 0.0 <= pitch < math.inf:
        raise InvalidThreadSpec("pitch must be a non-negative number.")
    if isinstance(bevel_angle, bool) or not isinstance(bevel_angle, numbers.Real) or not 0.0 < bevel_angle < 90.0:
        raise InvalidThreadSpec("bevel_angle must be between 0 and 90 degrees.")

    outer_ends = ThreadEnds.resolve(bevel=bevel, bevel1=bevel1, bevel2=bevel2, default_bevel=shape == "hex")

    if pitch == 0:
        bottom, top = resolve_diameters(d, d1, d2)
        require_starts(starts)
        require_bool(left_handed, "left_handed")
        if clearance is None:
            clearance = get_slop()
        elif isinstance(clearance, bool) or not isinstance(clearance, numbers.Real) or not 0.0 <= clearance < math.inf:
            raise InvalidThreadSpec("clearance must be a non-negative number.")
        thread = ThreadSpec(
            profile=(),
            pitch=0.0,
            length=height,
            d1=bottom,
            d2=top,
            internal=True,
            clearance=float(clearance),
            ends=ThreadEnds.resolve(bevel=inner_bevel, bevel1=inner_bevel1, bevel2=inner_bevel2),
        )
    else:
        thread = make_thread_spec(
            profile,
            pitch,
            d,
            height,
            d1=d1,
            d2=d2,
            starts=starts,
            left_handed=left_handed,
            internal=True,
            bevel=inner_bevel,
            bevel1=inner_bevel1,
            bevel2=inner_bevel2,
            higbee=higbee,
            higbee1=higbee1,
            higbee2=higbee2,
            clearance=clearance,
        )

    if max(thread.d1, thread.d2) >= nut_width:
        raise ThreadGeometryError("Bore diameter must be smaller than the nut width.")
    return NutSpec(
        nut_width=nut_width,
        height=height,
        shape=shape,
        thread=thread,
        outer_ends=outer_ends,
        bevel_angle=float(bevel_angle),
    )


def build_nut(spec: NutSpec, quality: MeshQuality = MeshQuality(), color=None) -> Mesh:
    prism_sides, width_ratio, rotation = _prism_geometry(spec.shape)
    circumradius = spec.nut_width / width_ratio
    body = make_ngon_prism(prism_sides, circumradius, spec.height, rotation_deg=rotation)
    if spec.outer_ends.any_bevel:
        chamfer = _outer_chamfer(spec, circumradius, segments(circumradius, quality))
        body = boolean_intersection([body, chamfer])

    if spec.thread.pitch == 0:
        bore = _plain_bore(spec, quality)
    else:
        bore = build_thread(spec.thread, quality=quality)
    nut = boolean_difference(body, [bore])

    nut.color = as_rgba(color)
    nut.metadata.update(
        {
            "kind": "nut",
            "shape": spec.shape,
            "nut_width": spec.nut_width,
            "height": spec.height,
            "length": spec.height,
            "threaded": spec.thread.pitch > 0,
            "bore_metadata": dict(bore.metadata),
        }
    )
    analyze_mesh(nut)
    return nut


def generic_threaded_nut(
    profile: Sequence[Sequence[float]],
    pitch: float,
    nut_width: float,
    d: float | None = None,
    height: float | None = None,
    *,
    d1: float | None = None,
    d2: float | None = None,
    shape: str = "hex",
    starts: int = 1,
    left_handed: bool = False,
    bevel: bool | None = None,
    bevel1: bool | None = None,
    bevel2: bool | None = None,
    bevel_angle: float = 30.0,
    inner_bevel: bool | None = None,
    inner_bevel1: bool | None = None,
    inner_bevel2: bool | None = None,
    higbee: HigbeeLike = None,
    higbee1: HigbeeLike = None,
    higbee2: HigbeeLike = None,
    clearance: float | None = None,
    quality: MeshQuality = MeshQuality(),
    color: Sequence[float] | None = None,
) -> Mesh:
    """Hex or square nut centered on z=0 with a threaded (or plain) bore.

    ``d`` is the mating rod diameter; the bore is cut with the configured slop
    unless ``clearance`` is given. Outer bevels default on for hex nuts and off
    for square ones. A ``pitch`` of 0 cuts a plain cylindrical bore.
    """

    spec = make_nut_spec(
        profile,
        pitch,
        nut_width,
        d,
        height,
        d1=d1,
        d2=d2,
        shape=shape,
        starts=starts,
        left_handed=left_handed,
        bevel=bevel,
        bevel1=bevel1,
        bevel2=bevel2,
        bevel_angle=bevel_angle,
        inner_bevel=inner_bevel,
        inner_bevel1=inner_bevel1,
        inner_bevel2=inner_bevel2,
        higbee=higbee,
        higbee1=higbee1,
        higbee2=higbee2,
        clearance=clearance,
    )
    return build_nut(spec, quality=quality, color=color)


__all__ = ["build_nut", "generic_threaded_nut", "make_nut_spec"]
