from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from threadform.printability import warn_higbee_overlap
from threadform.validation import ValidationError, validate_thread_profile
from threadform.modeling._thread_types import (
    EndModifier,
    InvalidThreadSpec,
    ThreadEnds,
    ThreadGeometryError,
    ThreadSpec,
)

HIGBEE_DISABLED = -math.inf
INTERNAL_ASYMMETRIC_HIGBEE = 270.0


@dataclass(frozen=True)
class HelixGrid:
    """Swept points of one start sector.

    ``rho`` and ``z`` have shape (columns + 1, rows); column ``columns`` is the
    closing column, which equals column 0 of the next sector one period higher.
    """

    rho: np.ndarray
    z: np.ndarray
    theta: np.ndarray
    starts: int
    profile_points: int
    periods: int
    apex_z: tuple[float, float]

    @property
    def columns(self) -> int:
        return int(self.theta.shape[0] - 1)

    @property
    def rows(self) -> int:
        return int(self.rho.shape[1])

    @property
    def sides(self) -> int:
        return self.columns * self.starts


def normalize_profile(profile: Sequence[Sequence[float]], internal: bool) -> np.ndarray:
    """Validate a profile and, for internal threads, swap its halves.

    Internal threads move the ``x >= 0`` half back half a period and the
    ``x < 0`` half forward, giving the complementary period of the same form.
    """

    try:
        points = validate_thread_profile(profile)
    except ValidationError as exc:
        raise InvalidThreadSpec(str(exc)) from exc
    if not internal:
        return points

    right = points[points[:, 0] >= 0.0] - (0.5, 0.0)
    left = points[points[:, 0] < 0.0] + (0.5, 0.0)
    return np.vstack([right, left])


def is_symmetric_profile(profile: np.ndarray, atol: float = 1e-9) -> bool:
    pts = np.asarray(profile, dtype=float)
    mirrored = pts * (-1.0, 1.0)
    a = pts[np.lexsort((pts[:, 1], pts[:, 0]))]
    b = mirrored[np.lexsort((mirrored[:, 1], mirrored[:, 0]))]
    return a.shape == b.shape and bool(np.allclose(a, b, atol=atol))


def thread_depth(profile: np.ndarray, pitch: float) -> float:
    return float(-np.min(profile[:, 1]) * pitch)


def check_depth(depth: float, r1: float, r2: float) -> None:
    if not depth < min(r1, r2):
        raise ThreadGeometryError(
            f"Thread depth {depth:.4f} must be less than both working radii ({r1:.4f}, {r2:.4f})."
        )


def standard_higbee_offset(edge_extent: float, starts: int) -> float:
    return (180.0 + (0.25 - edge_extent) * 360.0) / starts


def higbee_offsets(
    profile: np.ndarray,
    starts: int,
    ends: ThreadEnds,
    *,
    internal: bool = False,
    asymmetric: bool = False,
) -> tuple[float, float]:
    """Angles (degrees along the helix) flattened at the bottom and top ends."""

    extents = (0.5 + float(profile[:, 0].min()), 0.5 - float(profile[:, 0].max()))
    extra = INTERNAL_ASYMMETRIC_HIGBEE if internal and asymmetric else 0.0
    return tuple(
        _end_offset(end, extent, starts, extra) for end, extent in zip((ends.end1, ends.end2), extents)
    )


def _end_offset(end: EndModifier, edge_extent: float, starts: int, extra: float) -> float:
    higbee = end.higbee
    if not higbee.enabled:
        return HIGBEE_DISABLED
    base = standard_higbee_offset(edge_extent, starts) + extra
    return base + (higbee.angle if higbee.mode == "offset" else 0.0)


def period_range(spec: ThreadSpec, higbee: tuple[float, float]) -> np.ndarray:
    threads = math.ceil(spec.length / spec.pitch) + 2
    extra1 = 1 if spec.internal and higbee[0] == HIGBEE_DISABLED else 0
    extra2 = 1 if spec.internal and higbee[1] == HIGBEE_DISABLED else 0
    first = -threads / 2.0 - extra1
    return first + np.arange(threads + extra1 + extra2, dtype=float)


def build_helix_grid(
    profile: np.ndarray,
    spec: ThreadSpec,
    sides: int,
    higbee: tuple[float, float],
) -> HelixGrid:
    """Sweep the normalized profile through one start sector.

    ``spec.d1``/``spec.d2`` are the working diameters, already inflated for
    internal threads.
    """

    starts = spec.starts
    pitch = spec.pitch
    if sides % starts:
        raise InvalidThreadSpec("sides must be a multiple of starts.")
    columns = sides // starts
    periods = period_range(spec, higbee)
    xs = profile[:, 0]
    ys = profile[:, 1]
    flat = ys.max() if spec.internal else ys.min()

    theta_deg = np.arange(columns + 1, dtype=float) * 360.0 / sides
    shift = theta_deg / 360.0 * starts * pitch

    twist = 360.0 * spec.length / (pitch * starts)
    if np.isfinite(higbee[0]) and np.isfinite(higbee[1]):
        warn_higbee_overlap(twist, higbee[0], higbee[1])
    # Angle of every period instance along the unwound helix, (columns + 1, periods).
    tang = periods[np.newaxis, :] * 360.0 / starts + theta_deg[:, np.newaxis]
    flattened = (tang < -twist / 2.0 + higbee[0]) | (tang > twist / 2.0 - higbee[1])

    y_eff = np.where(flattened[:, :, np.newaxis], flat, ys[np.newaxis, np.newaxis, :])
    z = (periods[np.newaxis, :, np.newaxis] + xs[np.newaxis, np.newaxis, :]) * pitch
    z = z + shift[:, np.newaxis, np.newaxis]
    r_mean = (spec.r1 + spec.r2) / 2.0
    slope = (spec.r2 - spec.r1) / spec.length
    rho = r_mean + slope * z + y_eff * pitch

    rows = periods.size * xs.size
    rho = rho.reshape(columns + 1, rows)
    z = z.reshape(columns + 1, rows)
    if rho.min() <= 0.0:
        raise ThreadGeometryError("Taper collapses the thread core through the axis within the swept length.")

    apex_bottom = float((periods[0] + xs[0]) * pitch)
    apex_top = float((periods[-1] + 1.0 + xs[-1]) * pitch)
    return HelixGrid(
        rho=rho,
        z=z,
        theta=np.deg2rad(theta_deg),
        starts=starts,
        profile_points=int(xs.size),
        periods=int(periods.size),
        apex_z=(apex_bottom, apex_top),
    )


def sector_points(grid: HelixGrid, sector: int, column_slice: slice, row_slice: slice = slice(None)) -> np.ndarray:
    """Cartesian points of a block of columns rotated into the given start sector."""

    phase = 2.0 * np.pi * sector / grid.starts
    theta = grid.theta[column_slice][:, np.newaxis] + phase
    rho = grid.rho[column_slice, row_slice]
    z = grid.z[column_slice, row_slice]
    return np.stack([rho * np.cos(theta), rho * np.sin(theta), z], axis=-1)
