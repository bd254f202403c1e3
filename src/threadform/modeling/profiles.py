"""Thread profile presets and standard size tables.

Profiles are one thread period in pitch units: x in [-0.5, 0.5] along the axis,
y radial with 0 at the nominal diameter and negative toward the root.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction

import numpy as np

from threadform.modeling._thread_types import (
    InvalidThreadSpec,
    ThreadGeometryError,
    UnsupportedThreadConfig,
    require_positive,
)

ProfilePoints = tuple[tuple[float, float], ...]


@dataclass(frozen=True)
class StandardThread:
    """A resolved standard thread: nominal (top) diameter, pitch and profile."""

    designation: str
    diameter: float
    pitch: float
    profile: ProfilePoints
    taper_per_length: float = 0.0

    def diameters(self, length: float) -> tuple[float, float]:
        """Bottom and top diameters for a rod of ``length`` ending at the nominal size."""

        return self.diameter - self.taper_per_length * length, self.diameter


@dataclass(frozen=True)
class PipeThread(StandardThread):
    length: float = 0.0


_METRIC_COARSE: dict[float, float] = {
    1.0: 0.25,
    1.6: 0.35,
    2.0: 0.40,
    2.5: 0.45,
    3.0: 0.50,
    4.0: 0.70,
    5.0: 0.80,
    6.0: 1.00,
    8.0: 1.25,
    10.0: 1.50,
    12.0: 1.75,
    14.0: 2.00,
    16.0: 2.00,
    20.0: 2.50,
    24.0: 3.00,
    30.0: 3.50,
}

# Outside diameter (in), threads per inch, hand-tight engagement L2 (in).
_NPT_TABLE: dict[str, tuple[float, float, float]] = {
    "1/16": (0.3125, 27.0, 0.2611),
    "1/8": (0.405, 27.0, 0.2639),
    "1/4": (0.540, 18.0, 0.4018),
    "3/8": (0.675, 18.0, 0.4078),
    "1/2": (0.840, 14.0, 0.5337),
    "3/4": (1.050, 14.0, 0.5457),
    "1": (1.315, 11.5, 0.6828),
    "1-1/4": (1.660, 11.5, 0.7068),
    "1-1/2": (1.900, 11.5, 0.7235),
    "2": (2.375, 11.5, 0.7565),
}
NPT_TAPER = 1.0 / 16.0


def iso_profile() -> ProfilePoints:
    """60 degree ISO/UTS basic form: p/8 crest flat, p/4 root flat."""

    depth = 5.0 / 16.0 * math.sqrt(3.0)
    return ((-6.0 / 16.0, -depth), (-1.0 / 16.0, 0.0), (1.0 / 16.0, 0.0), (6.0 / 16.0, -depth))


def trapezoidal_profile(thread_angle: float = 30.0, depth: float = 0.5) -> ProfilePoints:
    """Symmetric trapezoid with half the pitch of tooth width at mid-depth.

    ``depth`` is in pitch units. Raises ThreadGeometryError when the flanks
    cross at the crest or meet the neighbouring tooth at the root.
    """

    depth = require_positive(depth, "depth")
    if not 0.0 <= thread_angle < 180.0:
        raise InvalidThreadSpec("thread_angle must be in [0, 180) degrees.")
    run = depth * math.tan(math.radians(thread_angle / 2.0)) / 2.0
    crest = 0.25 - run
    root = 0.25 + run
    if crest < -1e-12 or root > 0.5 + 1e-12:
        raise ThreadGeometryError(
            f"A {thread_angle:g} degree flank at depth {depth:g} pitch does not fit in one period."
        )
    if crest <= 1e-12:
        return ((-root, -depth), (0.0, 0.0), (root, -depth))
    return ((-root, -depth), (-crest, 0.0), (crest, 0.0), (root, -depth))


def acme_profile(depth: float = 0.5) -> ProfilePoints:
    return trapezoidal_profile(29.0, depth)


def square_profile(depth: float = 0.5) -> ProfilePoints:
    return trapezoidal_profile(0.0, depth)


def buttress_profile() -> ProfilePoints:
    """Asymmetric form with a steep trailing (load) flank."""

    return ((-7.0 / 16.0, -0.75), (3.0 / 16.0, 0.0), (5.0 / 16.0, 0.0), (6.0 / 16.0, -0.75))


def ball_screw_profile(
    ball_diameter: float,
    pitch: float,
    ball_arc: float = 120.0,
    samples: int = 12,
) -> ProfilePoints:
    """Circular groove that seats a ball over ``ball_arc`` degrees."""

    radius = require_positive(ball_diameter, "ball_diameter") / 2.0 / require_positive(pitch, "pitch")
    if not 0.0 < ball_arc < 180.0:
        raise InvalidThreadSpec("ball_arc must be in (0, 180) degrees.")
    if samples < 3:
        raise InvalidThreadSpec("samples must be >= 3.")
    half = math.radians(ball_arc / 2.0)
    if radius * math.sin(half) >= 0.5:
        raise ThreadGeometryError("Ball groove is wider than one pitch.")
    phis = np.linspace(-half, half, samples)
    xs = radius * np.sin(phis)
    ys = radius * math.cos(half) - radius * np.cos(phis)
    return tuple((float(x), float(y)) for x, y in zip(xs, ys))


def npt_thread(size: str, length: float | None = None) -> PipeThread:
    """NPT pipe thread in millimeters; ``length`` defaults to the L2 engagement."""

    key = size.strip().strip('"').replace(" ", "-")
    entry = _NPT_TABLE.get(key)
    if entry is None:
        raise UnsupportedThreadConfig(
            f"Unsupported NPT size '{size}'. Known sizes: {', '.join(_NPT_TABLE)}"
        )
    outside, tpi, engagement = entry
    thread_length = engagement * 25.4 if length is None else require_positive(length, "length")
    return PipeThread(
        designation=f'{key}" NPT',
        diameter=outside * 25.4,
        pitch=25.4 / tpi,
        profile=trapezoidal_profile(60.0, 0.8),
        taper_per_length=NPT_TAPER,
        length=thread_length,
    )


def lookup_standard_thread(
    family: str,
    designation: str | None = None,
    *,
    diameter: float | None = None,
    pitch: float | None = None,
    tpi: float | None = None,
) -> StandardThread:
    """Resolve common standards tables and shorthand designations."""

    family_key = family.strip().lower()
    if family_key in {"iso", "metric", "m"}:
        major, resolved_pitch = _resolve_metric_designation(designation, diameter, pitch)
        label = designation or f"M{major:g}x{resolved_pitch:g}"
        return StandardThread(label, major, resolved_pitch, iso_profile())

    if family_key in {"unified", "unc", "unf", "unef", "uts"}:
        major, resolved_tpi = _resolve_unified_designation(designation, diameter, tpi)
        label = designation or f"{major / 25.4:g}-{resolved_tpi:g}"
        return StandardThread(label, major, 25.4 / resolved_tpi, iso_profile())

    if family_key in {"acme", "trapezoidal", "tr", "square"}:
        major, resolved_pitch = _resolve_trapezoidal_designation(designation, diameter, pitch)
        if family_key == "acme":
            profile = acme_profile()
        elif family_key == "square":
            profile = square_profile()
        else:
            profile = trapezoidal_profile()
        label = designation or f"Tr{major:g}x{resolved_pitch:g}"
        return StandardThread(label, major, resolved_pitch, profile)

    if family_key in {"pipe", "npt"}:
        if not designation:
            raise InvalidThreadSpec("NPT lookup requires a size designation such as '1/4'.")
        return npt_thread(designation)

    raise UnsupportedThreadConfig(f"Unsupported thread family '{family}'.")


def _coarse_pitch(major: float, designation: str | None) -> float:
    coarse = _METRIC_COARSE.get(round(major, 1))
    if coarse is None:
        raise UnsupportedThreadConfig(
            f"No coarse pitch table entry for metric size {designation or major}; give the pitch explicitly."
        )
    return coarse


def _resolve_metric_designation(
    designation: str | None,
    diameter: float | None,
    pitch: float | None,
) -> tuple[float, float]:
    if designation:
        token = designation.strip().lower().replace(" ", "")
        if not token.startswith("m"):
            raise InvalidThreadSpec("Metric designation must look like 'M6x1'.")
        payload = token[1:]
        try:
            if "x" in payload:
                d_str, p_str = payload.split("x", 1)
                return require_positive(float(d_str), "diameter"), require_positive(float(p_str), "pitch")
            major = require_positive(float(payload), "diameter")
        except ValueError as exc:
            raise InvalidThreadSpec(f"Cannot parse metric designation '{designation}'.") from exc
        return major, _coarse_pitch(major, designation)

    if diameter is None:
        raise InvalidThreadSpec("Metric lookup requires designation or diameter.")
    major = require_positive(diameter, "diameter")
    if pitch is not None:
        return major, require_positive(pitch, "pitch")
    return major, _coarse_pitch(major, None)


def _resolve_unified_designation(
    designation: str | None,
    diameter: float | None,
    tpi: float | None,
) -> tuple[float, float]:
    if designation:
        token = designation.strip().lower().replace(" ", "")
        if "-" not in token:
            raise InvalidThreadSpec("Unified designation must look like '1/4-20'.")
        d_token, tpi_token = token.rsplit("-", 1)
        try:
            major = _parse_fractional_inch(d_token) * 25.4
            return require_positive(major, "diameter"), require_positive(float(tpi_token), "tpi")
        except (ValueError, ZeroDivisionError) as exc:
            raise InvalidThreadSpec(f"Cannot parse unified designation '{designation}'.") from exc

    if diameter is None or tpi is None:
        raise InvalidThreadSpec("Unified lookup requires designation or both diameter and tpi.")
    return require_positive(diameter, "diameter"), require_positive(tpi, "tpi")


def _resolve_trapezoidal_designation(
    designation: str | None,
    diameter: float | None,
    pitch: float | None,
) -> tuple[float, float]:
    if designation:
        token = designation.strip().lower().replace(" ", "")
        if token.startswith("tr"):
            token = token[2:]
        if "x" not in token:
            raise InvalidThreadSpec("Trapezoidal designation must look like 'Tr10x2'.")
        d_str, p_str = token.split("x", 1)
        try:
            return require_positive(float(d_str), "diameter"), require_positive(float(p_str), "pitch")
        except ValueError as exc:
            raise InvalidThreadSpec(f"Cannot parse trapezoidal designation '{designation}'.") from exc

    if diameter is None or pitch is None:
        raise InvalidThreadSpec("Trapezoidal/ACME lookup requires diameter and pitch.")
    return require_positive(diameter, "diameter"), require_positive(pitch, "pitch")


def _parse_fractional_inch(token: str) -> float:
    token = token.strip().lower()
    if "-" in token:
        whole, frac = token.split("-", 1)
        return float(whole) + float(Fraction(frac))
    if "/" in token:
        return float(Fraction(token))
    return float(token)


__all__ = [
    "PipeThread",
    "StandardThread",
    "acme_profile",
    "ball_screw_profile",
    "buttress_profile",
    "iso_profile",
    "lookup_standard_thread",
    "npt_thread",
    "square_profile",
    "trapezoidal_profile",
]
