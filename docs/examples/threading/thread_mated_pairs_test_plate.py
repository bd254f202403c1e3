"""Thread mating test plate with one male/female pair per thread profile.

Print this model to check engagement across thread families. Each pair has
an external rod standing on a keyed disk and a round coupler with the matching
internal thread. The key marker's side count tells the pairs apart.
"""

from threadform.modeling import (
    MeshQuality,
    boolean_difference,
    boolean_intersection,
    boolean_union,
    buttress_profile,
    generic_threaded_rod,
    group,
    lookup_standard_thread,
    make_cylinder,
    make_ngon_prism,
    square_profile,
)

QUALITY = MeshQuality(facets=48)
LENGTH = 12.0
FIT = 0.2
PAIR_X = 26.0
CELL_X = 60.0
CELL_Y = 34.0


def _key_marker(x: float, outer_radius: float, sides: int, height: float):
    radius = max(1.6, outer_radius * 0.12)
    marker = make_ngon_prism(sides, radius, height)
    return marker.translate((x + outer_radius + radius * 0.7, 0.0, height / 2.0))


def _make_rod(profile, pitch: float, diameter: float, key_sides: int):
    rod = generic_threaded_rod(profile, pitch, diameter, LENGTH, bevel2=True, quality=QUALITY)
    # Trim the sweep overhang and sink the rod into a 2 mm base disk.
    rod = boolean_intersection([rod, make_cylinder(diameter, LENGTH, 16)])
    rod.translate((0.0, 0.0, 1.9 + LENGTH / 2.0))
    knob_radius = max(8.0, diameter * 1.3)
    knob = make_cylinder(knob_radius, 2.0, 96, center_z=1.0)
    notch = _key_marker(0.0, knob_radius - 2.5, key_sides, 3.0).translate((0.0, 0.0, -0.5))
    knob = boolean_difference(knob, [notch])
    return boolean_union([rod, knob])


def _make_coupler(profile, pitch: float, diameter: float, key_sides: int):
    outer = max(diameter * 2.2, diameter + 8.0) / 2.0
    height = LENGTH * 0.75
    body = make_cylinder(outer, height, 96, center_z=height / 2.0)
    cutter = generic_threaded_rod(
        profile, pitch, diameter, height, internal=True, bevel=True, clearance=FIT, quality=QUALITY
    )
    cutter.translate((0.0, 0.0, height / 2.0))
    coupler = boolean_difference(body, [cutter])
    return boolean_union([coupler, _key_marker(0.0, outer, key_sides, 3.0)])


def build():
    m8 = lookup_standard_thread("metric", "M8x1.25")
    unc = lookup_standard_thread("unified", "5/16-18")
    acme = lookup_standard_thread("acme", diameter=10.0, pitch=2.0)
    tr = lookup_standard_thread("trapezoidal", "Tr10x2")
    pairs = [
        (m8.profile, m8.pitch, m8.diameter, 3),
        (unc.profile, unc.pitch, unc.diameter, 4),
        (acme.profile, acme.pitch, acme.diameter, 5),
        (tr.profile, tr.pitch, tr.diameter, 6),
        (square_profile(), 2.0, 10.0, 7),
        (buttress_profile(), 2.0, 10.0, 8),
    ]

    meshes = []
    for idx, (profile, pitch, diameter, sides) in enumerate(pairs):
        x = (idx % 3) * CELL_X
        y = (idx // 3) * CELL_Y
        rod = _make_rod(profile, pitch, diameter, sides)
        coupler = _make_coupler(profile, pitch, diameter, sides)
        meshes.append(rod.translate((x, y, 0.0)))
        meshes.append(coupler.translate((x + PAIR_X, y, 0.0)))
    return group(meshes)
