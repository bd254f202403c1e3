from __future__ import annotations

import numpy as np

from threadform.mesh import Mesh
from threadform.modeling.csg import boolean_difference, boolean_union
from threadform.modeling.primitives import make_revolved
from threadform.modeling._thread_types import ThreadSpec


def closing_fans(bottom_rings: np.ndarray, top_rings: np.ndarray, apex_bottom: int, apex_top: int) -> np.ndarray:
    """Fan triangles closing both open ends of the stitched grid.

    Each row of ``bottom_rings``/``top_rings`` is one start's open end, ordered
    upward along the thread.
    """

    fans = []
    for rings, apex, flip in ((bottom_rings, apex_bottom, False), (top_rings, apex_top, True)):
        first = rings[:, :-1].ravel()
        second = rings[:, 1:].ravel()
        apexes = np.full(first.shape, apex, dtype=int)
        if flip:
            first, second = second, first
        fans.append(np.column_stack([apexes, first, second]))
    return np.vstack(fans)


def _end_radius(spec: ThreadSpec, end: int) -> float:
    return spec.r1 if end == 1 else spec.r2


def bevel_cutter(spec: ThreadSpec, depth: float, end: int, sides: int) -> Mesh:
    """Revolved cutter that squares off an external end at its face and chamfers it at 45 degrees.

    Everything past the face goes, so a beveled end ends exactly at the nominal length.
    """

    inner = _end_radius(spec, end) - depth
    outer = _end_radius(spec, end) + spec.pitch
    rise = outer - inner
    face = -spec.length / 2.0 if end == 1 else spec.length / 2.0
    inward = 1.0 if end == 1 else -1.0
    beyond = face - inward * (4.0 * spec.pitch + depth)
    return make_revolved(
        [(0.0, face), (inner, face), (outer, face + inward * rise), (outer, beyond), (0.0, beyond)],
        sides,
    )


def bevel_fill(spec: ThreadSpec, depth: float, end: int, sides: int) -> Mesh:
    """Revolved cone added to an internal mask so the cut bore gets a chamfer."""

    radius = _end_radius(spec, end)
    face = -spec.length / 2.0 if end == 1 else spec.length / 2.0
    inward = 1.0 if end == 1 else -1.0
    outside = face - inward * spec.pitch
    inside = face + inward * 2.0 * depth
    return make_revolved(
        [
            (0.0, outside),
            (radius + depth, outside),
            (radius + depth, face),
            (radius - depth, inside),
            (0.0, inside),
        ],
        sides,
    )


def apply_bevels(mesh: Mesh, spec: ThreadSpec, depth: float, sides: int) -> Mesh:
    ends = [end for end, modifier in ((1, spec.ends.end1), (2, spec.ends.end2)) if modifier.bevel]
    if not ends:
        return mesh
    if spec.internal:
        return boolean_union([mesh, *(bevel_fill(spec, depth, end, sides) for end in ends)])
    return boolean_difference(mesh, [bevel_cutter(spec, depth, end, sides) for end in ends])
