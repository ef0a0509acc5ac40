"""
Fiber Tori: flat rings over selected base points

Each base point is selected and committed through the scene state, exactly
as an interactive viewer would do it, and the committed rings are assembled
into a scene.

Algorithm:
1. Generate base points (arc of constant theta, or a circle of latitude)
2. For each point: update() the selection, then add_point()
3. Hide the selection so only committed rings remain
4. Build ring meshes (segments scale with ring radius)
"""

import numpy as np
from typing import Optional, Sequence, Tuple
import logging

import trimesh

from hopf.config import Config, MeshMetadata
from hopf.coords import PointLike, arc_points
from hopf.mesh_ops import compute_mesh_stats
from hopf.scene import SceneState, add_point, build_scenes, update

logger = logging.getLogger(__name__)


def circle_points(
    theta: float,
    phi0: float = 0.0,
    phi1: float = np.pi,
    steps: int = 100
) -> np.ndarray:
    """Base points along the meridian arc theta = const."""
    return arc_points(theta, phi0, phi1, steps)


def latitude_points(y: float, count: int = 32, start: int = 0) -> np.ndarray:
    """
    Base points on the circle of latitude at height y.

    Points are (r cos t, y, r sin t) with r = sqrt(1 - y²) and
    t = 2π i / count for i in [start, count).
    """
    if not -1.0 <= y <= 1.0:
        raise ValueError(f"Latitude height must be in [-1, 1], got {y}")
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")

    r = np.sqrt(1.0 - y * y)
    t = 2 * np.pi * np.arange(start, count) / count
    return np.column_stack([r * np.cos(t), np.full(len(t), y), r * np.sin(t)])


def build_fiber_tori(
    points: Sequence[PointLike],
    config: Optional[Config] = None,
    state: Optional[SceneState] = None
) -> Tuple["trimesh.Scene", MeshMetadata]:
    """
    Build rings over the given base points.

    Args:
        points: Base points on S²
        config: Configuration (uses defaults if None)
        state: Existing scene state to add to (a fresh one if None)

    Returns:
        Tuple of (scene, metadata)

    Raises:
        ValueError: If a ring is not finite (base point (0, 1, 0))
    """
    config = config or Config()
    state = state or SceneState(config=config)

    logger.info("=" * 60)
    logger.info(f"Fiber Tori ({len(points)} base points)")
    logger.info("=" * 60)

    for point in points:
        update(state, point)
        add_point(state)

    update(state, None)

    main, _ = build_scenes(state)

    stats = compute_mesh_stats(main)
    radii = [a.torus.radius for a in state.added]
    metadata = MeshMetadata(
        module="tori",
        n_triangles=stats["n_faces"],
        n_vertices=stats["n_vertices"],
        bounds=stats["bounds"],
        generation_params={
            "n_points": len(state.added),
            "tube_radius": config.tube_radius,
            "tube_sections": config.tube_sections,
            "min_ring_radius": float(min(radii)) if radii else None,
            "max_ring_radius": float(max(radii)) if radii else None,
            "rings": [a.torus.to_dict() for a in state.added]
        }
    )

    logger.info(f"Result: {metadata.n_vertices} vertices, {metadata.n_triangles} triangles")
    return main, metadata
