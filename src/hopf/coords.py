"""
Coordinate utilities for points on the 2-sphere.

Spherical convention (used by every sweep in this project):
    (r, theta, phi) → (r sinφ cosθ, r sinφ sinθ, r cosφ)

theta is the azimuth in the x/y plane, phi is measured from +z.
"""

import numpy as np
from typing import Sequence, Union
import logging

logger = logging.getLogger(__name__)

PointLike = Union[Sequence[float], np.ndarray]


def as_sphere_point(point: PointLike) -> np.ndarray:
    """
    Convert a point on S² to a float64 (3,) array.

    The point is NOT normalized. Callers are expected to pass unit vectors;
    off-sphere input is logged at DEBUG and used as given.

    Raises:
        ValueError: If the input is not a 3-vector.
    """
    p = np.asarray(point, dtype=np.float64)
    if p.shape != (3,):
        raise ValueError(f"Sphere point must be a 3-vector, got shape {p.shape}")

    norm_sq = float(p @ p)
    if abs(norm_sq - 1.0) > 1e-6:
        logger.debug(f"Point {p.tolist()} is off the unit sphere (|p|^2={norm_sq:.6f})")
    return p


def normalize_point(point: PointLike) -> np.ndarray:
    """Project a non-zero 3-vector onto the unit sphere."""
    p = as_sphere_point(point)
    norm = np.linalg.norm(p)
    if norm < 1e-12:
        raise ValueError("Cannot normalize the zero vector")
    return p / norm


def spherical_to_cartesian(r: float, theta: float, phi: float) -> np.ndarray:
    return np.array([
        r * np.sin(phi) * np.cos(theta),
        r * np.sin(phi) * np.sin(theta),
        r * np.cos(phi)
    ])


def arc_points(
    theta: float,
    phi0: float,
    phi1: float,
    steps: int
) -> np.ndarray:
    """
    Sample a meridian arc of constant theta.

    Samples phi0 + (i/steps) * (phi1 - phi0) for i in [0, steps), so the
    end angle phi1 itself is not included.

    Returns:
        (steps, 3) array of unit vectors
    """
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")

    phis = phi0 + (np.arange(steps) / steps) * (phi1 - phi0)
    return np.array([spherical_to_cartesian(1.0, theta, phi) for phi in phis])


def parallel_points(
    phi: float,
    theta0: float,
    theta1: float,
    steps: int
) -> np.ndarray:
    """Sample an arc of constant phi, same endpoint rule as arc_points."""
    if steps < 1:
        raise ValueError(f"steps must be >= 1, got {steps}")

    thetas = theta0 + (np.arange(steps) / steps) * (theta1 - theta0)
    return np.array([spherical_to_cartesian(1.0, theta, phi) for theta in thetas])
