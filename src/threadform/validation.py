from __future__ import annotations

from typing import Sequence

import numpy as np


class ValidationError(ValueError):
    """Raised when validation constraints are violated."""


def validate_thread_profile(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Check a one-period thread profile and return it as an (N, 2) float array.

    x is the position along the axis in pitch units, confined to [-0.5, 0.5] and
    non-decreasing; y is the radial offset from the reference diameter. The gap
    to the next period is implied, so the profile must not repeat its own start
    point one period later.
    """

    try:
        arr = np.asarray(points, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Profile must be a sequence of (x, y) points.") from exc
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValidationError("Profile points must be Nx2 points.")
    if arr.shape[0] < 2:
        raise ValidationError("Profile needs at least 2 points.")
    if np.any(~np.isfinite(arr)):
        raise ValidationError("Profile points contain invalid values.")

    xs = arr[:, 0]
    if np.any(xs < -0.5 - 1e-9) or np.any(xs > 0.5 + 1e-9):
        raise ValidationError("Profile x values must be in [-0.5, 0.5].")
    if np.any(np.diff(xs) < -1e-12):
        raise ValidationError("Profile x values must be non-decreasing.")

    first = arr[0]
    last = arr[-1]
    if np.allclose(first, last, atol=1e-9) or np.allclose(last, first + (1.0, 0.0), atol=1e-9):
        raise ValidationError("Profile must not repeat its start point; the gap segment is implied.")

    if np.isclose(arr[:, 1].max(), arr[:, 1].min(), atol=1e-9):
        raise ValidationError("Profile must vary between root and crest.")
    return np.clip(arr, (-0.5, -np.inf), (0.5, np.inf))


def validate_tooth_polygon(points: Sequence[Sequence[float]]) -> np.ndarray:
    """Check a closed tooth cross-section (x along the axis, y radial)."""

    try:
        arr = np.asarray(points, dtype=float)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Tooth profile must be a sequence of (x, y) points.") from exc
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValidationError("Tooth profile points must be Nx2 points.")
    if arr.shape[0] > 3 and np.allclose(arr[0], arr[-1]):
        arr = arr[:-1]
    if arr.shape[0] < 3:
        raise ValidationError("Tooth profile needs at least 3 points.")
    if np.any(~np.isfinite(arr)):
        raise ValidationError("Tooth profile contains invalid values.")
    x = arr[:, 0]
    y = arr[:, 1]
    area = 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1)))
    if abs(area) <= 1e-12:
        raise ValidationError("Tooth profile encloses no area.")
    if np.any(np.abs(x) > 0.5 + 1e-9):
        raise ValidationError("Tooth profile x values must be in [-0.5, 0.5].")
    return arr
