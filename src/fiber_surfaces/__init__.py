"""Fiber Surfaces: bands of fibers swept over arcs of the base sphere."""

from .build import (
    FiberSurface,
    sweep_bands,
    build_fiber_surface,
    build_fiber_surface_at_phi,
    build_default_surfaces,
    build_fiber_surfaces,
)

__all__ = [
    "FiberSurface",
    "sweep_bands",
    "build_fiber_surface",
    "build_fiber_surface_at_phi",
    "build_default_surfaces",
    "build_fiber_surfaces",
]
