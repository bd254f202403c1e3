"""Thread modeling: rods, internal-thread masks, nuts and helical teeth."""

from __future__ import annotations

from threadform.mesh_quality import MeshQuality

from ._thread_types import (
    EndModifier,
    Higbee,
    InvalidThreadSpec,
    MeshBudgetExceeded,
    NutSpec,
    ThreadEnds,
    ThreadGeometryError,
    ThreadingError,
    ThreadMeshEstimate,
    ThreadSpec,
    UnsupportedThreadConfig,
)
from .csg import BooleanOperationError, boolean_difference, boolean_intersection, boolean_union
from .group import MeshGroup, group
from .nuts import generic_threaded_nut, make_nut_spec
from .primitives import make_cylinder, make_ngon_prism, make_revolved
from .profiles import (
    PipeThread,
    StandardThread,
    acme_profile,
    ball_screw_profile,
    buttress_profile,
    iso_profile,
    lookup_standard_thread,
    npt_thread,
    square_profile,
    trapezoidal_profile,
)
from .scene import emit_thread_helix, emit_threaded_nut, emit_threaded_rod, place_mesh
from .sweep import sweep_helix, thread_helix
from .threading import estimate_mesh_cost, generic_threaded_rod, make_thread_spec

__all__ = [
    "BooleanOperationError",
    "EndModifier",
    "Higbee",
    "InvalidThreadSpec",
    "MeshBudgetExceeded",
    "MeshGroup",
    "MeshQuality",
    "NutSpec",
    "PipeThread",
    "StandardThread",
    "ThreadEnds",
    "ThreadGeometryError",
    "ThreadMeshEstimate",
    "ThreadSpec",
    "ThreadingError",
    "UnsupportedThreadConfig",
    "acme_profile",
    "ball_screw_profile",
    "boolean_difference",
    "boolean_intersection",
    "boolean_union",
    "buttress_profile",
    "emit_thread_helix",
    "emit_threaded_nut",
    "emit_threaded_rod",
    "estimate_mesh_cost",
    "generic_threaded_nut",
    "generic_threaded_rod",
    "group",
    "iso_profile",
    "lookup_standard_thread",
    "make_cylinder",
    "make_ngon_prism",
    "make_nut_spec",
    "make_revolved",
    "make_thread_spec",
    "npt_thread",
    "place_mesh",
    "square_profile",
    "sweep_helix",
    "thread_helix",
    "trapezoidal_profile",
]
