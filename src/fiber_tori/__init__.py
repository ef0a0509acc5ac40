"""Fiber Tori: one flat ring per base point, for coarse fast previews."""

from .build import circle_points, latitude_points, build_fiber_tori

__all__ = ["circle_points", "latitude_points", "build_fiber_tori"]
