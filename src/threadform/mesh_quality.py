from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class MeshQuality:
    """Controls circular tessellation density and runtime cost."""

    facets: int | None = None
    facet_angle: float = 12.0
    facet_size: float = 2.0
    max_triangles: int | None = 400_000

    def __post_init__(self) -> None:
        if self.facets is not None and (isinstance(self.facets, bool) or int(self.facets) < 3):
            raise ValueError("facets must be an integer >= 3 when provided.")
        if self.facet_angle <= 0 or self.facet_size <= 0:
            raise ValueError("facet_angle and facet_size must be positive.")
        if self.max_triangles is not None and self.max_triangles <= 0:
            raise ValueError("max_triangles must be positive when provided.")


def segments(radius: float, quality: MeshQuality = MeshQuality()) -> int:
    """Number of facets used to approximate a circle of the given radius."""

    if quality.facets is not None:
        return int(quality.facets)
    by_angle = 360.0 / quality.facet_angle
    by_size = 2.0 * math.pi * max(radius, 0.0) / quality.facet_size
    return int(max(5, math.ceil(min(by_angle, by_size))))


def round_up_to_multiple(value: int, step: int) -> int:
    return int(math.ceil(value / step) * step)
