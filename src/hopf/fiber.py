"""
Fiber projection.

For a base point p on S², the Hopf fiber over p is a great circle in S³.
It is parametrized by an angle theta and projected stereographically into R³:

    alpha = sqrt((1 + y) / 2)
    beta  = sqrt((1 - y) / 2)
    angle_sum = atan2(-x, z)

    phi  = angle_sum - theta
    proj = scale / (1 - alpha * sin(theta))
    q    = (-beta cos(phi), alpha cos(theta), -beta sin(phi)) * proj

Singularity:
    1 - alpha * sin(theta) vanishes only for alpha == 1 (base point (0, 1, 0))
    at theta == 90°. That sample lies at infinity. How it is reported is
    controlled by SingularityPolicy.
"""

import numpy as np
from typing import List, Tuple
import logging

from .config import SingularityPolicy
from .coords import PointLike, as_sphere_point

logger = logging.getLogger(__name__)


class SingularFiberError(ValueError):
    """A fiber sample was projected to infinity."""


def hopf_parameters(point: PointLike) -> Tuple[float, float, float]:
    """
    Return (alpha, beta, angle_sum) for a base point.

    alpha and beta are the moduli of the two complex coordinates of any
    point on the fiber; angle_sum is the sum of their arguments.
    """
    p = as_sphere_point(point)
    x, y, z = p

    # Clamp only against rounding outside [-1, 1]; no geometry is changed.
    alpha = np.sqrt(max(0.0, (1.0 + y) / 2.0))
    beta = np.sqrt(max(0.0, (1.0 - y) / 2.0))
    angle_sum = np.arctan2(-x, z)

    return float(alpha), float(beta), float(angle_sum)


def sample_fiber(
    point: PointLike,
    thetas: np.ndarray,
    scale: float = 0.5,
    policy: SingularityPolicy = SingularityPolicy.PROPAGATE
) -> np.ndarray:
    """
    Evaluate the projected fiber over point at the given angles.

    This is the single implementation of the projection; every other
    function in this module and the torus approximation call it.

    Args:
        point: Base point on S²
        thetas: Fiber angles in radians
        scale: Projection scale (0.5 puts the equator fibers near unit size)
        policy: Singularity policy

    Returns:
        (len(thetas), 3) float64 array

    Raises:
        SingularFiberError: If policy is RAISE and a sample is not finite
    """
    alpha, beta, angle_sum = hopf_parameters(point)
    thetas = np.asarray(thetas, dtype=np.float64)

    phis = angle_sum - thetas

    with np.errstate(divide='ignore', invalid='ignore'):
        proj = scale / (1.0 - alpha * np.sin(thetas))
        b = -beta * np.cos(phis)
        c = alpha * np.cos(thetas)
        d = -beta * np.sin(phis)
        samples = np.column_stack([b * proj, c * proj, d * proj])

    if not np.all(np.isfinite(samples)):
        bad = np.flatnonzero(~np.all(np.isfinite(samples), axis=1))
        if policy == SingularityPolicy.RAISE:
            raise SingularFiberError(
                f"Fiber over {np.asarray(point).tolist()} is singular at "
                f"theta={thetas[bad[0]]:.6f} ({len(bad)} non-finite samples)"
            )
        logger.debug(f"Fiber has {len(bad)} non-finite samples (policy={policy.value})")

    return samples


def fiber_points(
    point: PointLike,
    divisions: int = 250,
    scale: float = 0.5,
    policy: SingularityPolicy = SingularityPolicy.PROPAGATE
) -> np.ndarray:
    """
    Discretize the fiber over point into divisions+1 samples.

    theta runs over 2π i / divisions for i in [0, divisions]. The last
    sample is the first one repeated, so the polyline closes exactly.

    Returns:
        (divisions + 1, 3) float64 array
    """
    if divisions < 1:
        raise ValueError(f"divisions must be >= 1, got {divisions}")

    thetas = 2 * np.pi * np.arange(divisions + 1) / divisions
    points = sample_fiber(point, thetas, scale=scale, policy=policy)
    points[-1] = points[0]
    return points


def fiber_buffer(
    point: PointLike,
    divisions: int = 256,
    scale: float = 0.5,
    policy: SingularityPolicy = SingularityPolicy.PROPAGATE
) -> np.ndarray:
    """
    Fiber samples as a flat float32 buffer (x0, y0, z0, x1, ...).

    Ready for direct upload as a line position attribute.
    """
    return fiber_points(point, divisions, scale, policy).astype(np.float32).ravel()


def fiber_vertices(
    point: PointLike,
    divisions: int = 250,
    scale: float = 0.5,
    policy: SingularityPolicy = SingularityPolicy.PROPAGATE
) -> List[np.ndarray]:
    """Fiber samples as a list of (3,) points, for band building."""
    return list(fiber_points(point, divisions, scale, policy))
