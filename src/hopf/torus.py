"""
Flat-ring approximation of a projected fiber.

A projected fiber is a circle in R³ (stereographic projection maps circles
to circles), so three samples determine it. The ring is fitted through the
samples at theta = 90°, -90° and 0°:

- center: midpoint of the ±90° samples (they are diametrically opposite)
- radius: distance from center to the -90° sample
- orientation: unit normal of the plane through all three samples

Rendering it as a thin torus is cheaper than a fine line strip and reads as
a solid ring under lighting.
"""

import math
import numpy as np
from dataclasses import dataclass
import logging

import trimesh

from .config import SingularityPolicy
from .coords import PointLike
from .fiber import sample_fiber

logger = logging.getLogger(__name__)

TUBE_RADIUS = 0.02

_ANCHOR_THETAS = np.array([np.pi / 2, -np.pi / 2, 0.0])


@dataclass
class TorusApprox:
    """Ring fitted to one fiber."""
    center: np.ndarray  # (3,)
    radius: float
    orientation: np.ndarray  # (3,) unit ring normal
    tube_radius: float = TUBE_RADIUS

    def segments(self, min_segments: int = 16, per_unit: int = 64) -> int:
        """Ring tessellation: large rings get proportionally more segments."""
        return max(min_segments, int(math.ceil(self.radius * per_unit)))

    def rotation(self) -> np.ndarray:
        """
        4x4 transform taking a ring around +Z at the origin onto this ring.
        """
        transform = trimesh.geometry.align_vectors([0.0, 0.0, 1.0], self.orientation)
        transform[:3, 3] = self.center
        return transform

    def to_dict(self):
        return {
            "center": self.center.tolist(),
            "radius": float(self.radius),
            "orientation": self.orientation.tolist(),
            "tube_radius": self.tube_radius
        }


def torus_approx(
    point: PointLike,
    scale: float = 0.5,
    tube_radius: float = TUBE_RADIUS,
    policy: SingularityPolicy = SingularityPolicy.PROPAGATE
) -> TorusApprox:
    """
    Fit a flat ring to the fiber over point.

    Args:
        point: Base point on S²
        scale: Projection scale, must match the fiber it stands in for
        tube_radius: Tube radius of the rendered torus
        policy: Singularity policy for the anchor samples

    Returns:
        TorusApprox. For the base point (0, 1, 0) the 90° anchor lies at
        infinity and, under PROPAGATE, center/radius are not finite.
    """
    left, right, other = sample_fiber(point, _ANCHOR_THETAS, scale=scale, policy=policy)

    with np.errstate(invalid='ignore'):
        center = (left + right) / 2.0

        right = right - center
        other = other - center

        normal = np.cross(other, right)
        length = np.linalg.norm(normal)
        if length > 0:
            normal = normal / length
        else:
            logger.warning(f"Degenerate ring over {np.asarray(point).tolist()}: anchors are collinear")

    radius = float(np.linalg.norm(right))

    logger.debug(f"Torus over {np.asarray(point).tolist()}: center={center.tolist()}, radius={radius:.4f}")

    return TorusApprox(
        center=center,
        radius=radius,
        orientation=normal,
        tube_radius=tube_radius
    )
