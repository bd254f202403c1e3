"""Hex nuts (right and left handed) next to the rod they fit."""

from threadform.modeling import (
    MeshQuality,
    generic_threaded_nut,
    generic_threaded_rod,
    group,
    lookup_standard_thread,
)

QUALITY = MeshQuality(facets=24)


def build():
    m6 = lookup_standard_thread("metric", "M6x1")
    rod = generic_threaded_rod(m6.profile, m6.pitch, m6.diameter, 12.0, bevel=True, quality=QUALITY)
    nut = generic_threaded_nut(m6.profile, m6.pitch, 10.0, m6.diameter, 5.0, quality=QUALITY)
    left_nut = generic_threaded_nut(
        m6.profile, m6.pitch, 10.0, m6.diameter, 5.0, left_handed=True, inner_bevel=True, quality=QUALITY
    )

    rod.translate((-10.0, 0.0, 0.0))
    left_nut.translate((10.0, 0.0, 0.0))
    return group([rod, nut, left_nut])
