"""
Fiber Surfaces: ribbons of fibers over arcs of S²

Sweep an arc on the base sphere, take the fiber over each sample, and join
consecutive fibers with band meshes. Over a great-circle arc the fibers
fill out a twisted surface; each arc gives one surface.

Algorithm:
1. Sample base points along an arc (constant theta or constant phi)
2. Compute the fiber over each base point (same divisions for all, so
   sample i of every fiber has the same fiber angle)
3. Build one band between each pair of consecutive fibers
4. Optionally close the sweep with a band from the last fiber to the first
5. Assemble a scene with one double-sided material per band
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import logging

import trimesh

from hopf.band import BandMesh, build_band
from hopf.color import Color, index_to_color, point_to_color
from hopf.config import Config, MeshMetadata
from hopf.coords import arc_points, parallel_points
from hopf.fiber import fiber_points
from hopf.mesh_ops import BAND_EMISSIVE, compute_mesh_stats, merge_meshes, paint_mesh

logger = logging.getLogger(__name__)

# theta = π t and phi0 = -π o for each (t, o) pair of the default sweep
DEFAULT_THETAS = (0.0, 1 / 8, 2 / 8, 3 / 8)
DEFAULT_OFFSETS = (0.0, 1 / 8, 2 / 8, 3 / 8)
DEFAULT_STEPS = 40


@dataclass
class FiberSurface:
    """Bands swept by fibers over one arc of base points."""
    base_points: np.ndarray  # (steps, 3)
    bands: List[BandMesh]
    band_colors: List[Color]
    color: Color
    params: dict = field(default_factory=dict)

    @property
    def n_vertices(self) -> int:
        return sum(b.n_vertices for b in self.bands)

    @property
    def n_faces(self) -> int:
        return sum(b.n_faces for b in self.bands)

    def to_mesh(self) -> "trimesh.Trimesh":
        """All bands as one mesh in the surface color."""
        mesh = merge_meshes([band.to_trimesh() for band in self.bands])
        return paint_mesh(mesh, self.color, emissive=BAND_EMISSIVE)

    def add_to_scene(self, scene: "trimesh.Scene", name: str = "surface") -> None:
        """Add one painted mesh per band to scene."""
        for j, (band, color) in enumerate(zip(self.bands, self.band_colors)):
            mesh = paint_mesh(band.to_trimesh(), color, emissive=BAND_EMISSIVE)
            scene.add_geometry(mesh, geom_name=f"{name}_band_{j}")


def sweep_bands(
    base_points: np.ndarray,
    config: Config,
    wrap: bool = False,
    closed: bool = False
) -> List[BandMesh]:
    """
    Build bands between the fibers over consecutive base points.

    Args:
        base_points: (n, 3) base points, n >= 2
        config: Fiber resolution and singularity policy
        wrap: Also join the last fiber back to the first
        closed: Close each band along the fiber direction

    Returns:
        n - 1 bands, or n when wrap is set
    """
    if len(base_points) < 2:
        raise ValueError(f"A sweep needs at least 2 base points, got {len(base_points)}")

    fibers = [
        fiber_points(
            p,
            config.band_divisions,
            config.projection_scale,
            config.singularity_policy
        )
        for p in base_points
    ]

    n_bands = len(fibers) if wrap else len(fibers) - 1
    bands = []
    for i in range(n_bands):
        fiber0 = fibers[i]
        fiber1 = fibers[(i + 1) % len(fibers)]
        bands.append(build_band(fiber0, fiber1, closed=closed))

    logger.debug(f"Swept {len(fibers)} fibers into {len(bands)} bands")
    return bands


def build_fiber_surface(
    theta: float,
    phi0: float,
    phi1: float,
    color: Color,
    steps: int = 100,
    config: Optional[Config] = None,
    wrap: Optional[bool] = None,
    closed: Optional[bool] = None
) -> FiberSurface:
    """
    Surface of fibers over the meridian arc theta = const, phi in [phi0, phi1).

    Args:
        theta: Azimuth of the arc
        phi0: Start polar angle
        phi1: End polar angle (excluded)
        color: Color for every band
        steps: Number of base points
        config: Configuration (uses defaults if None)
        wrap: Join last fiber to first (default: config.wrap_sweep)
        closed: Close bands along the fiber (default: config.closed_band)

    Returns:
        FiberSurface
    """
    config = config or Config()
    wrap = config.wrap_sweep if wrap is None else wrap
    closed = config.closed_band if closed is None else closed

    base_points = arc_points(theta, phi0, phi1, steps)
    bands = sweep_bands(base_points, config, wrap=wrap, closed=closed)

    return FiberSurface(
        base_points=base_points,
        bands=bands,
        band_colors=[color] * len(bands),
        color=color,
        params={
            "kind": "meridian",
            "theta": theta,
            "phi0": phi0,
            "phi1": phi1,
            "steps": steps,
            "wrap": wrap,
            "closed": closed
        }
    )


def build_fiber_surface_at_phi(
    phi: float,
    theta0: float,
    theta1: float,
    steps: int = 100,
    config: Optional[Config] = None,
    wrap: Optional[bool] = None,
    closed: Optional[bool] = None
) -> FiberSurface:
    """
    Surface of fibers over the arc phi = const, theta in [theta0, theta1).

    Each band takes the color of its first base point, so the surface
    shows a gradient along the sweep.
    """
    config = config or Config()
    wrap = config.wrap_sweep if wrap is None else wrap
    closed = config.closed_band if closed is None else closed

    base_points = parallel_points(phi, theta0, theta1, steps)
    bands = sweep_bands(base_points, config, wrap=wrap, closed=closed)
    band_colors = [point_to_color(base_points[i]) for i in range(len(bands))]

    return FiberSurface(
        base_points=base_points,
        bands=bands,
        band_colors=band_colors,
        color=band_colors[0],
        params={
            "kind": "parallel",
            "phi": phi,
            "theta0": theta0,
            "theta1": theta1,
            "steps": steps,
            "wrap": wrap,
            "closed": closed
        }
    )


def build_default_surfaces(
    config: Optional[Config] = None,
    thetas: Sequence[float] = DEFAULT_THETAS,
    offsets: Sequence[float] = DEFAULT_OFFSETS,
    steps: int = DEFAULT_STEPS
) -> List[FiberSurface]:
    """
    Half-turn meridian sweeps, rotated and offset together.

    Surface i sweeps theta = π thetas[i], phi from -π offsets[i] over a
    half turn, colored index_to_color(i, n).
    """
    if len(thetas) != len(offsets):
        raise ValueError(f"Got {len(thetas)} thetas but {len(offsets)} offsets")

    config = config or Config()
    surfaces = []
    for i, (t, o) in enumerate(zip(thetas, offsets)):
        theta = np.pi * t
        phi0 = -np.pi * o
        phi1 = -np.pi * o + np.pi
        color = index_to_color(i, len(offsets))

        logger.info(f"Surface {i}: theta={theta:.4f}, phi=[{phi0:.4f}, {phi1:.4f}), {steps} steps")
        surfaces.append(build_fiber_surface(theta, phi0, phi1, color, steps=steps, config=config))

    return surfaces


def build_fiber_surfaces(
    config: Optional[Config] = None,
    thetas: Sequence[float] = DEFAULT_THETAS,
    offsets: Sequence[float] = DEFAULT_OFFSETS,
    steps: int = DEFAULT_STEPS
) -> Tuple["trimesh.Scene", MeshMetadata]:
    """
    Build the fiber surfaces scene.

    Args:
        config: Configuration (uses defaults if None)
        thetas: Arc azimuths as fractions of π
        offsets: Arc start angles as fractions of π
        steps: Base points per arc

    Returns:
        Tuple of (scene, metadata)
    """
    config = config or Config()

    logger.info("=" * 60)
    logger.info("Fiber Surfaces")
    logger.info("=" * 60)

    surfaces = build_default_surfaces(config, thetas, offsets, steps)

    scene = trimesh.Scene()
    for i, surface in enumerate(surfaces):
        surface.add_to_scene(scene, name=f"surface_{i}")

    stats = compute_mesh_stats(scene)
    metadata = MeshMetadata(
        module="surfaces",
        n_triangles=stats["n_faces"],
        n_vertices=stats["n_vertices"],
        bounds=stats["bounds"],
        generation_params={
            "thetas": list(thetas),
            "offsets": list(offsets),
            "steps": steps,
            "band_divisions": config.band_divisions,
            "wrap": config.wrap_sweep,
            "closed": config.closed_band,
            "surfaces": [s.params for s in surfaces]
        }
    )

    logger.info(f"Result: {metadata.n_vertices} vertices, {metadata.n_triangles} triangles")
    return scene, metadata
