"""threadform – parametric helical thread meshes."""

from __future__ import annotations

from .mesh import Mesh, MeshAnalysis, analyze_mesh
from .mesh_quality import MeshQuality
from .modeling import (
    Higbee,
    InvalidThreadSpec,
    MeshBudgetExceeded,
    ThreadGeometryError,
    ThreadingError,
    UnsupportedThreadConfig,
    emit_thread_helix,
    emit_threaded_nut,
    emit_threaded_rod,
    generic_threaded_nut,
    generic_threaded_rod,
    thread_helix,
)

__all__ = [
    "Higbee",
    "InvalidThreadSpec",
    "Mesh",
    "MeshAnalysis",
    "MeshBudgetExceeded",
    "MeshQuality",
    "ThreadGeometryError",
    "ThreadingError",
    "UnsupportedThreadConfig",
    "__version__",
    "analyze_mesh",
    "emit_thread_helix",
    "emit_threaded_nut",
    "emit_threaded_rod",
    "generic_threaded_nut",
    "generic_threaded_rod",
    "thread_helix",
]

__version__ = "0.1.0"
