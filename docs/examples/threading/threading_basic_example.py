"""External rod and matching internal-thread mask for an M8x1.25 thread."""

from threadform.modeling import MeshQuality, generic_threaded_rod, group, lookup_standard_thread

QUALITY = MeshQuality(facets=32)


def build():
    m8 = lookup_standard_thread("metric", "M8x1.25")
    male = generic_threaded_rod(m8.profile, m8.pitch, m8.diameter, 14.0, bevel=True, quality=QUALITY)
    female_cutter = generic_threaded_rod(
        m8.profile, m8.pitch, m8.diameter, 14.0, internal=True, clearance=0.2, quality=QUALITY
    )

    male.translate((-8.0, 0.0, 0.0))
    female_cutter.translate((8.0, 0.0, 0.0))
    return group([male, female_cutter])
