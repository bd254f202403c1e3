from __future__ import annotations

import math
import numbers
from typing import Sequence

import numpy as np

from threadform.mesh import Mesh, analyze_mesh, as_rgba, combine_meshes, flip_faces, mirror_mesh, signed_volume
from threadform.mesh_quality import MeshQuality, segments
from threadform.modeling._thread_types import (
    InvalidThreadSpec,
    MeshBudgetExceeded,
    ThreadGeometryError,
    UnsupportedThreadConfig,
    require_bool,
    require_positive,
    require_starts,
    resolve_diameters,
)
from threadform.validation import ValidationError, validate_tooth_polygon

DEFAULT_FLANK_ANGLE = 15.0
# End sections keep a sliver of tooth so the caps stay non-degenerate.
_MIN_TAPER_SCALE = 1e-3


def trapezoid_tooth(pitch: float, depth: float, flank_angle: float) -> np.ndarray:
    """Tooth section (axial, radial) standing on the base line, in model units."""

    run = depth * math.tan(math.radians(flank_angle)) / 2.0
    crest = pitch / 4.0 - run
    root = pitch / 4.0 + run
    if crest < 0.0:
        raise ThreadGeometryError(
            f"Flank angle {flank_angle:g} is too wide for depth {depth:g}: the flanks cross below the crest."
        )
    if root > pitch / 2.0 + 1e-12:
        raise ThreadGeometryError(
            f"Flank angle {flank_angle:g} at depth {depth:g} makes the tooth root wider than the pitch."
        )
    if crest <= 1e-12:
        return np.array([(-root, 0.0), (root, 0.0), (0.0, depth)], dtype=float)
    return np.array([(-root, 0.0), (root, 0.0), (crest, depth), (-crest, depth)], dtype=float)


def _taper_scale(phi: np.ndarray, total: float, taper1: float, taper2: float) -> np.ndarray:
    scale = np.ones_like(phi)
    if taper1 > 0:
        scale = np.minimum(scale, phi / taper1)
    if taper2 > 0:
        scale = np.minimum(scale, (total - phi) / taper2)
    return np.clip(scale, _MIN_TAPER_SCALE, 1.0)


def sweep_helix(
    tooth: np.ndarray,
    r1: float,
    r2: float,
    lead: float,
    turns: float,
    steps: int,
    *,
    taper1: float = 0.0,
    taper2: float = 0.0,
) -> Mesh:
    """Sweep a closed axial section once around a helix, capped at both ends.

    The section's first coordinate runs along z and its second outward from the
    helix radius, which goes linearly from ``r1`` to ``r2``. Tapers (degrees)
    shrink the radial height toward zero at the ends.
    """

    total = 360.0 * turns
    height = lead * turns
    phi = np.linspace(0.0, total, steps + 1)
    frac = phi / total
    base_radius = r1 + (r2 - r1) * frac
    center_z = -height / 2.0 + lead * phi / 360.0
    scale = _taper_scale(phi, total, taper1, taper2)

    radius = base_radius[:, np.newaxis] + scale[:, np.newaxis] * tooth[np.newaxis, :, 1]
    if np.any(radius <= 0.0):
        raise ThreadGeometryError("Thread teeth reach the helix axis.")
    z = center_z[:, np.newaxis] + tooth[np.newaxis, :, 0]
    angles = np.deg2rad(phi)[:, np.newaxis]
    vertices = np.stack([radius * np.cos(angles), radius * np.sin(angles), z], axis=-1).reshape(-1, 3)

    n = tooth.shape[0]
    ring = np.arange(n)
    nxt = np.roll(ring, -1)
    a = (np.arange(steps)[:, np.newaxis] * n + ring).ravel()
    b = (np.arange(steps)[:, np.newaxis] * n + nxt).ravel()
    c = b + n
    d = a + n
    sides = np.vstack([np.column_stack([a, b, c]), np.column_stack([a, c, d])])

    first = ring[::-1]
    last = steps * n + ring
    caps = np.vstack(
        [
            np.column_stack([np.full(n - 2, first[0]), first[1:-1], first[2:]]),
            np.column_stack([np.full(n - 2, last[0]), last[1:-1], last[2:]]),
        ]
    )
    mesh = Mesh(vertices=vertices, faces=np.vstack([sides, caps]))
    if signed_volume(mesh) < 0:
        flip_faces(mesh)
    return mesh


def _tooth_section(
    pitch: float,
    thread_depth: float | None,
    flank_angle: float | None,
    profile: Sequence[Sequence[float]] | None,
) -> np.ndarray:
    if profile is not None:
        if thread_depth is not None or flank_angle is not None:
            raise UnsupportedThreadConfig("Give either profile or thread_depth/flank_angle, not both.")
        try:
            return validate_tooth_polygon(profile) * pitch
        except ValidationError as exc:
            raise InvalidThreadSpec(str(exc)) from exc

    depth = pitch / 2.0 if thread_depth is None else require_positive(thread_depth, "thread_depth")
    angle = DEFAULT_FLANK_ANGLE if flank_angle is None else flank_angle
    if isinstance(angle, bool) or not isinstance(angle, numbers.Real) or not 0.0 <= angle < 90.0:
        raise InvalidThreadSpec("flank_angle must be in [0, 90) degrees.")
    return trapezoid_tooth(pitch, depth, float(angle))


def _taper_degrees(value: float | None, name: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not 0.0 <= value < math.inf:
        raise InvalidThreadSpec(f"{name} must be a non-negative number of degrees.")
    return float(value)


def thread_helix(
    d: float | None = None,
    pitch: float | None = None,
    *,
    thread_depth: float | None = None,
    flank_angle: float | None = None,
    profile: Sequence[Sequence[float]] | None = None,
    starts: int = 1,
    turns: float = 2.0,
    left_handed: bool = False,
    internal: bool = False,
    d1: float | None = None,
    d2: float | None = None,
    taper: float | None = None,
    taper1: float | None = None,
    taper2: float | None = None,
    quality: MeshQuality = MeshQuality(),
    color: Sequence[float] | None = None,
) -> Mesh:
    """Helical thread teeth alone, centered on z=0, to union onto a core.

    ``d`` is the base diameter the teeth stand on; internal teeth point inward.
    Without ``profile`` the tooth is a symmetric trapezoid from ``thread_depth``
    (default half the pitch) and ``flank_angle`` (default 15 degrees). A
    ``profile`` is a closed polygon in pitch units with y measured outward from
    the base. ``taper`` values are degrees of helix over which the tooth height
    ramps up from zero.
    """

    pitch = require_positive(pitch, "pitch")
    turns = require_positive(turns, "turns")
    starts = require_starts(starts)
    left_handed = require_bool(left_handed, "left_handed")
    internal = require_bool(internal, "internal")
    r1, r2 = (value / 2.0 for value in resolve_diameters(d, d1, d2))
    tooth = _tooth_section(pitch, thread_depth, flank_angle, profile)
    depth = float(tooth[:, 1].max() - min(tooth[:, 1].min(), 0.0))
    base_taper = _taper_degrees(taper, "taper")
    end1_taper = base_taper if taper1 is None else _taper_degrees(taper1, "taper1")
    end2_taper = base_taper if taper2 is None else _taper_degrees(taper2, "taper2")
    if end1_taper + end2_taper > 360.0 * turns:
        raise ThreadGeometryError("Tapers are longer than the helix.")

    if internal:
        tooth = tooth * (1.0, -1.0)
        if depth >= min(r1, r2):
            raise ThreadGeometryError("Internal thread depth must be smaller than the base radius.")

    steps = max(3, math.ceil(turns * segments(max(r1, r2) + depth, quality)))
    n = tooth.shape[0]
    predicted_faces = starts * (2 * steps * n + 2 * (n - 2))
    if quality.max_triangles is not None and predicted_faces > quality.max_triangles:
        raise MeshBudgetExceeded(f"Predicted face count {predicted_faces} exceeds budget {quality.max_triangles}.")

    lead = pitch * starts
    single = sweep_helix(tooth, r1, r2, lead, turns, steps, taper1=end1_taper, taper2=end2_taper)
    parts = [single.rotate_vector((0.0, 0.0, 1.0), 360.0 * s / starts, inplace=False) for s in range(starts)]
    mesh = combine_meshes(parts) if starts > 1 else single
    if left_handed:
        mesh = mirror_mesh(mesh, axis=1)

    mesh.color = as_rgba(color)
    mesh.metadata.update(
        {
            "kind": "helix",
            "starts": starts,
            "turns": turns,
            "length": lead * turns,
            "thread_depth": depth,
            "steps": steps,
            "left_handed": left_handed,
            "internal": internal,
        }
    )
    analyze_mesh(mesh)
    return mesh


__all__ = ["DEFAULT_FLANK_ANGLE", "sweep_helix", "thread_helix", "trapezoid_tooth"]
