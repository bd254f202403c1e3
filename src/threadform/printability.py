from __future__ import annotations

import warnings


def warn_min_feature(name: str, value: float, nozzle_diameter: float) -> None:
    if nozzle_diameter <= 0:
        return
    if value < nozzle_diameter:
        warnings.warn(
            f"{name} {value:.3f}mm is below nozzle diameter {nozzle_diameter:.3f}mm.",
            RuntimeWarning,
        )


def warn_higbee_overlap(twist: float, angle1: float, angle2: float) -> None:
    """Warn when blunt-start truncation at both ends leaves no full tooth."""

    if -twist / 2.0 + angle1 >= twist / 2.0 - angle2:
        warnings.warn(
            f"Higbee truncation ({angle1:.1f} + {angle2:.1f} degrees) covers the whole "
            f"{twist:.1f} degree thread; no full-depth tooth remains.",
            RuntimeWarning,
        )
