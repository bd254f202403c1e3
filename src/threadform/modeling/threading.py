from __future__ import annotations

import math
import numbers
from dataclasses import replace
from typing import Literal, Sequence

import numpy as np

from threadform._config import get_slop
from threadform.mesh import Mesh, analyze_mesh, as_rgba, mirror_mesh
from threadform.mesh_quality import MeshQuality, round_up_to_multiple, segments
from threadform.modeling._helix_grid import (
    HelixGrid,
    build_helix_grid,
    check_depth,
    higbee_offsets,
    is_symmetric_profile,
    normalize_profile,
    period_range,
    sector_points,
    thread_depth,
)
from threadform.modeling._thread_caps import apply_bevels, closing_fans
from threadform.modeling._thread_types import (
    Higbee,
    HigbeeLike,
    InvalidThreadSpec,
    MeshBudgetExceeded,
    ThreadEnds,
    ThreadGeometryError,
    ThreadingError,
    ThreadMeshEstimate,
    ThreadSpec,
    UnsupportedThreadConfig,
    as_profile_tuple,
    require_bool,
    require_positive,
    require_starts,
    resolve_diameters,
)

SplitStyle = Literal["convex", "concave"]


def make_thread_spec(
    profile: Sequence[Sequence[float]],
    pitch: float,
    d: float | None = None,
    length: float | None = None,
    *,
    d1: float | None = None,
    d2: float | None = None,
    starts: int = 1,
    left_handed: bool = False,
    internal: bool = False,
    bevel: bool | None = None,
    bevel1: bool | None = None,
    bevel2: bool | None = None,
    higbee: HigbeeLike = None,
    higbee1: HigbeeLike = None,
    higbee2: HigbeeLike = None,
    clearance: float | None = None,
) -> ThreadSpec:
    """Validate loose arguments and build an immutable ThreadSpec."""

    pitch = require_positive(pitch, "pitch")
    length = require_positive(length, "length")
    bottom, top = resolve_diameters(d, d1, d2)
    starts = require_starts(starts)
    left_handed = require_bool(left_handed, "left_handed")
    internal = require_bool(internal, "internal")
    points = normalize_profile(profile, internal=False)
    ends = ThreadEnds.resolve(
        bevel=bevel,
        bevel1=bevel1,
        bevel2=bevel2,
        higbee=higbee,
        higbee1=higbee1,
        higbee2=higbee2,
        internal=internal,
    )
    if clearance is None:
        clearance = get_slop() if internal else 0.0
    elif isinstance(clearance, bool) or not isinstance(clearance, numbers.Real) or not 0.0 <= clearance < math.inf:
        raise InvalidThreadSpec("clearance must be a non-negative number.")
    return ThreadSpec(
        profile=as_profile_tuple(points),
        pitch=pitch,
        length=length,
        d1=bottom,
        d2=top,
        starts=starts,
        left_handed=left_handed,
        internal=internal,
        clearance=float(clearance),
        ends=ends,
    )


def resolve_sides(spec: ThreadSpec, quality: MeshQuality = MeshQuality()) -> int:
    """Circular facet count, rounded up so every start gets the same columns."""

    return round_up_to_multiple(segments(max(spec.r1, spec.r2), quality), spec.starts)


def working_spec(spec: ThreadSpec, sides: int) -> ThreadSpec:
    """Inflate internal radii so the faceted mask cuts at least the true bore."""

    if not spec.internal:
        return spec
    scale = 1.0 / math.cos(math.pi / sides)
    return replace(
        spec,
        d1=2.0 * (spec.r1 * scale + spec.clearance),
        d2=2.0 * (spec.r2 * scale + spec.clearance),
    )


def estimate_mesh_cost(spec: ThreadSpec, quality: MeshQuality = MeshQuality()) -> ThreadMeshEstimate:
    """Predict mesh cost before generation (bevel booleans not included)."""

    profile = normalize_profile(spec.profile, spec.internal)
    sides = resolve_sides(spec, quality)
    higbee = higbee_offsets(
        profile,
        spec.starts,
        spec.ends,
        internal=spec.internal,
        asymmetric=not is_symmetric_profile(np.asarray(spec.profile)),
    )
    periods = int(period_range(spec, higbee).size)
    m = int(profile.shape[0])
    rows = periods * m
    return ThreadMeshEstimate(
        predicted_vertices=sides * rows + spec.starts * m + 2,
        predicted_faces=2 * rows * sides + 2 * m * spec.starts,
        sides=sides,
        periods=periods,
        profile_points=m,
    )


def _split_quads(
    vertices: np.ndarray,
    quads: tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray],
    style: SplitStyle,
) -> np.ndarray:
    a, b, c, d = quads
    va = vertices[a]
    bulge = np.einsum("ij,ij->i", np.cross(vertices[b] - va, vertices[c] - va), vertices[d] - va)
    # With d above the a-b-c plane the a-c diagonal would fold inward.
    use_bd = bulge > 0.0 if style == "convex" else bulge < 0.0
    first = np.where(use_bd[:, np.newaxis], np.column_stack([a, b, d]), np.column_stack([a, b, c]))
    second = np.where(use_bd[:, np.newaxis], np.column_stack([b, c, d]), np.column_stack([a, c, d]))
    tris = np.vstack([first, second])
    keep = (tris[:, 0] != tris[:, 1]) & (tris[:, 1] != tris[:, 2]) & (tris[:, 0] != tris[:, 2])
    return tris[keep]


def assemble_thread_mesh(grid: HelixGrid, style: SplitStyle = "convex") -> Mesh:
    """Stitch the sector grid of every start into one closed, outward-facing mesh.

    Seam vertices are shared by index: the closing column of each sector reuses
    column 0 of the next sector and only contributes its extra top period.
    """

    starts, columns, rows, m = grid.starts, grid.columns, grid.rows, grid.profile_points
    main = np.concatenate([sector_points(grid, s, slice(0, columns)).reshape(-1, 3) for s in range(starts)])
    top = np.concatenate(
        [sector_points(grid, s, slice(columns, columns + 1), slice(rows - m, rows)).reshape(-1, 3) for s in range(starts)]
    )
    apexes = np.array([[0.0, 0.0, grid.apex_z[0]], [0.0, 0.0, grid.apex_z[1]]])
    vertices = np.vstack([main, top, apexes])

    main_idx = np.arange(main.shape[0]).reshape(starts, columns, rows)
    top_idx = main.shape[0] + np.arange(top.shape[0]).reshape(starts, m)
    apex_bottom = main.shape[0] + top.shape[0]
    apex_top = apex_bottom + 1
    following = np.roll(np.arange(starts), -1)

    cols = np.empty((starts, columns + 1, rows + 2), dtype=int)
    cols[:, :, 0] = apex_bottom
    cols[:, :, -1] = apex_top
    cols[:, :columns, 1:-1] = main_idx
    cols[:, columns, 1 : rows - m + 1] = main_idx[following, 0, m:]
    cols[:, columns, rows - m + 1 : rows + 1] = top_idx

    left = cols[:, :-1].reshape(-1, rows + 2)
    right = cols[:, 1:].reshape(-1, rows + 2)
    quads = (left[:, :-1].ravel(), right[:, :-1].ravel(), right[:, 1:].ravel(), left[:, 1:].ravel())
    side_faces = _split_quads(vertices, quads, style)

    bottom_rings = main_idx[:, 0, : m + 1]
    top_rings = np.column_stack([main_idx[following, 0, rows - 1], top_idx])
    cap_faces = closing_fans(bottom_rings, top_rings, apex_bottom, apex_top)
    return Mesh(vertices=vertices, faces=np.vstack([side_faces, cap_faces]))


def build_thread(spec: ThreadSpec, quality: MeshQuality = MeshQuality(), color=None) -> Mesh:
    """Generate the rod or internal-thread mask described by a ThreadSpec."""

    profile = normalize_profile(spec.profile, spec.internal)
    depth = thread_depth(profile, spec.pitch)
    check_depth(depth, spec.r1, spec.r2)

    estimate = estimate_mesh_cost(spec, quality)
    if quality.max_triangles is not None and estimate.predicted_faces > quality.max_triangles:
        raise MeshBudgetExceeded(
            f"Predicted face count {estimate.predicted_faces} exceeds budget {quality.max_triangles}."
        )

    sides = estimate.sides
    work = working_spec(spec, sides)
    check_depth(depth, work.r1, work.r2)
    higbee = higbee_offsets(
        profile,
        spec.starts,
        spec.ends,
        internal=spec.internal,
        asymmetric=not is_symmetric_profile(np.asarray(spec.profile)),
    )
    grid = build_helix_grid(profile, work, sides, higbee)
    mesh = assemble_thread_mesh(grid, style="concave" if spec.internal else "convex")
    if spec.left_handed:
        mesh = mirror_mesh(mesh, axis=1)
    mesh = apply_bevels(mesh, work, depth, sides)

    mesh.color = as_rgba(color)
    mesh.metadata.update(
        {
            "kind": "internal" if spec.internal else "external",
            "sides": sides,
            "starts": spec.starts,
            "thread_depth": depth,
            "working_radii": (work.r1, work.r2),
            "higbee_angles": higbee,
            "length": spec.length,
            "left_handed": spec.left_handed,
        }
    )
    analyze_mesh(mesh)
    return mesh


def generic_threaded_rod(
    profile: Sequence[Sequence[float]],
    pitch: float,
    d: float | None = None,
    length: float | None = None,
    *,
    d1: float | None = None,
    d2: float | None = None,
    starts: int = 1,
    left_handed: bool = False,
    internal: bool = False,
    bevel: bool | None = None,
    bevel1: bool | None = None,
    bevel2: bool | None = None,
    higbee: HigbeeLike = None,
    higbee1: HigbeeLike = None,
    higbee2: HigbeeLike = None,
    clearance: float | None = None,
    quality: MeshQuality = MeshQuality(),
    color: Sequence[float] | None = None,
) -> Mesh:
    """Sweep a one-period profile into a closed threaded rod, centered on z=0.

    The sweep covers the rod length plus extra periods at both ends, so the
    solid is longer than ``length``; intersect it with a slab, or subtract it,
    to get exact faces. With ``internal=True`` the result is a mask whose
    subtraction cuts the thread at diameter ``d`` plus ``clearance`` (the
    configured slop when omitted).
    """

    spec = make_thread_spec(
        profile,
        pitch,
        d,
        length,
        d1=d1,
        d2=d2,
        starts=starts,
        left_handed=left_handed,
        internal=internal,
        bevel=bevel,
        bevel1=bevel1,
        bevel2=bevel2,
        higbee=higbee,
        higbee1=higbee1,
        higbee2=higbee2,
        clearance=clearance,
    )
    return build_thread(spec, quality=quality, color=color)


__all__ = [
    "Higbee",
    "InvalidThreadSpec",
    "MeshBudgetExceeded",
    "ThreadEnds",
    "ThreadGeometryError",
    "ThreadMeshEstimate",
    "ThreadSpec",
    "ThreadingError",
    "UnsupportedThreadConfig",
    "assemble_thread_mesh",
    "build_thread",
    "estimate_mesh_cost",
    "generic_threaded_rod",
    "make_thread_spec",
    "resolve_sides",
    "working_spec",
]
