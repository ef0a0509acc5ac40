"""
Scene state for interactive fiber selection.

Two views are maintained:
- main: the fiber over the selected point, plus tori over added points
  and any fiber surfaces
- inset: the base sphere S² with axes, markers for the selected and added
  points, and the arcs swept by surfaces

All state lives in a SceneState passed to update()/add_point(); nothing is
kept at module level. Recomputation is synchronous: update() replaces the
fiber buffer wholesale.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, TYPE_CHECKING
import logging

import trimesh

from .config import Config
from .color import Color, point_to_color
from .coords import PointLike, as_sphere_point
from .fiber import fiber_buffer
from .mesh_ops import (
    create_point_marker,
    create_polyline,
    create_ring_mesh,
    create_segments,
    paint_mesh,
)
from .torus import TorusApprox, torus_approx

if TYPE_CHECKING:
    from fiber_surfaces.build import FiberSurface

logger = logging.getLogger(__name__)

DEFAULT_POINT = (1.0, 0.0, 0.0)

SPHERE_COLOR = Color(0.0, 0.0, 0x44 / 255)
AXES_COLOR = Color(0.0, 0.0, 0x88 / 255)
AXES_LENGTH = 0.5


@dataclass
class AddedPoint:
    """A base point committed to the scene together with its ring."""
    point: np.ndarray
    color: Color
    torus: TorusApprox


@dataclass
class InsetLine:
    """Polyline drawn on the base sphere."""
    points: np.ndarray
    color: Color


@dataclass
class SceneState:
    """
    Everything the renderer needs to draw both views.

    The fiber buffer always holds the last fiber computed; `visible` says
    whether it (and the selection marker) should be drawn.
    """
    config: Config = field(default_factory=Config)
    point: Optional[np.ndarray] = None
    visible: bool = False
    color: Optional[Color] = None
    fiber: Optional[np.ndarray] = None
    added: List[AddedPoint] = field(default_factory=list)
    inset_lines: List[InsetLine] = field(default_factory=list)
    surfaces: List["FiberSurface"] = field(default_factory=list)

    @classmethod
    def initial(cls, config: Optional[Config] = None) -> "SceneState":
        """State with the fiber over (1, 0, 0) loaded but hidden."""
        config = config or Config()
        state = cls(config=config)
        state.fiber = fiber_buffer(
            DEFAULT_POINT,
            config.line_divisions,
            config.projection_scale,
            config.singularity_policy
        )
        return state


def update(state: SceneState, point: Optional[PointLike]) -> SceneState:
    """
    Select a base point, or clear the selection with None.

    Args:
        state: Scene state (modified in place)
        point: Point on S², or None to hide the selection

    Returns:
        The same state, for chaining
    """
    if point is None:
        state.visible = False
        return state

    p = as_sphere_point(point)
    config = state.config

    # compute before assigning so a rejected point leaves the state intact
    fiber = fiber_buffer(
        p,
        config.line_divisions,
        config.projection_scale,
        config.singularity_policy
    )

    state.point = p
    state.color = point_to_color(p)
    state.fiber = fiber
    state.visible = True
    return state


def add_point(state: SceneState) -> Optional[AddedPoint]:
    """
    Commit the selected point: keep its marker and add its ring.

    Does nothing while the selection is hidden.

    Returns:
        The added point, or None
    """
    if not state.visible:
        return None

    config = state.config
    torus = torus_approx(
        state.point,
        scale=config.projection_scale,
        tube_radius=config.tube_radius,
        policy=config.singularity_policy
    )
    added = AddedPoint(point=state.point.copy(), color=state.color, torus=torus)
    state.added.append(added)

    logger.debug(f"Added point {added.point.tolist()} (ring radius {torus.radius:.4f})")
    return added


def add_inset_line(state: SceneState, points: np.ndarray, color: Color) -> None:
    state.inset_lines.append(InsetLine(points=np.asarray(points, dtype=np.float64), color=color))


def add_surface(state: SceneState, surface: "FiberSurface") -> None:
    """Add a fiber surface and the arc of base points it sweeps."""
    state.surfaces.append(surface)
    add_inset_line(state, surface.base_points, surface.color)


def build_scenes(state: SceneState) -> Tuple["trimesh.Scene", "trimesh.Scene"]:
    """
    Assemble renderer-ready scenes from the state.

    Returns:
        (main, inset) scenes
    """
    config = state.config
    main = trimesh.Scene()
    inset = trimesh.Scene()

    # Main view
    if state.visible and state.fiber is not None:
        main.add_geometry(
            create_polyline(state.fiber.reshape(-1, 3), state.color),
            geom_name="fiber"
        )

    for i, added in enumerate(state.added):
        ring = create_ring_mesh(
            added.torus,
            segments=added.torus.segments(config.min_ring_segments, config.ring_segments_per_unit),
            tube_sections=config.tube_sections
        )
        main.add_geometry(paint_mesh(ring, added.color), geom_name=f"torus_{i}")

    for i, surface in enumerate(state.surfaces):
        surface.add_to_scene(main, name=f"surface_{i}")

    # Inset view
    sphere = trimesh.creation.uv_sphere(radius=1.0, count=[64, 32])
    inset.add_geometry(paint_mesh(sphere, SPHERE_COLOR, alpha=0.6), geom_name="sphere")

    axes = np.array([
        [[0.0, 0.0, 0.0], [AXES_LENGTH, 0.0, 0.0]],
        [[0.0, 0.0, 0.0], [0.0, AXES_LENGTH, 0.0]],
        [[0.0, 0.0, 0.0], [0.0, 0.0, AXES_LENGTH]],
    ])
    inset.add_geometry(create_segments(axes, AXES_COLOR), geom_name="axes")

    if state.visible:
        marker = create_point_marker(state.point, config.point_radius)
        inset.add_geometry(paint_mesh(marker, state.color), geom_name="selected_point")

    for i, added in enumerate(state.added):
        marker = create_point_marker(added.point, config.point_radius)
        inset.add_geometry(paint_mesh(marker, added.color), geom_name=f"point_{i}")

    for i, line in enumerate(state.inset_lines):
        if len(line.points) >= 2:
            inset.add_geometry(create_polyline(line.points, line.color), geom_name=f"inset_line_{i}")

    logger.info(f"Built scenes: main={len(main.geometry)} geometries, inset={len(inset.geometry)} geometries")
    return main, inset
