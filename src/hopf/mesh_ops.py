"""
Mesh operation utilities.

Common mesh operations: ring (torus) meshes, markers, polylines,
materials, statistics.
"""

import numpy as np
from typing import Dict, Any, Optional, Union
import logging

import trimesh
from trimesh.path.entities import Line
from trimesh.visual.material import PBRMaterial

from .color import Color
from .torus import TorusApprox

logger = logging.getLogger(__name__)

# Slight self-illumination so bands stay visible from behind.
BAND_EMISSIVE = (0x22 / 255, 0x22 / 255, 0x22 / 255)


def ensure_finite(vertices: np.ndarray, what: str = "mesh") -> np.ndarray:
    """
    Reject vertex data containing inf or nan.

    Raises:
        ValueError: If any coordinate is not finite
    """
    vertices = np.asarray(vertices, dtype=np.float64)
    if not np.all(np.isfinite(vertices)):
        n_bad = int(np.count_nonzero(~np.all(np.isfinite(vertices), axis=-1)))
        raise ValueError(f"{what} has {n_bad} non-finite vertices and cannot be exported")
    return vertices


def compute_mesh_stats(mesh: Union["trimesh.Trimesh", "trimesh.Scene"]) -> Dict[str, Any]:
    """
    Compute mesh statistics.

    Scenes are summarized over their triangle meshes; polylines only
    contribute to the bounds.

    Args:
        mesh: Trimesh mesh or Scene

    Returns:
        Dictionary of mesh statistics
    """
    if isinstance(mesh, trimesh.Scene):
        meshes = [g for g in mesh.dump() if isinstance(g, trimesh.Trimesh)]
        n_vertices = sum(len(m.vertices) for m in meshes)
        n_faces = sum(len(m.faces) for m in meshes)
        is_watertight = bool(meshes) and all(m.is_watertight for m in meshes)
        n_geometries = len(mesh.geometry)
    else:
        n_vertices = len(mesh.vertices)
        n_faces = len(mesh.faces)
        is_watertight = mesh.is_watertight
        n_geometries = 1

    bounds = mesh.bounds
    if bounds is None:
        return {
            "n_vertices": n_vertices,
            "n_faces": n_faces,
            "n_geometries": n_geometries,
            "bounds": None,
            "extents": None,
            "max_extent": 0.0,
            "is_watertight": is_watertight
        }

    extents = bounds[1] - bounds[0]

    return {
        "n_vertices": n_vertices,
        "n_faces": n_faces,
        "n_geometries": n_geometries,
        "bounds": {
            "min": bounds[0].tolist(),
            "max": bounds[1].tolist()
        },
        "extents": extents.tolist(),
        "max_extent": float(max(extents)),
        "is_watertight": is_watertight
    }


def paint_mesh(
    mesh: "trimesh.Trimesh",
    color: Color,
    alpha: float = 1.0,
    emissive: Optional[tuple] = None
) -> "trimesh.Trimesh":
    """
    Give a mesh a single double-sided PBR material.

    Args:
        mesh: Mesh to paint (modified in place)
        color: Base color
        alpha: Opacity; below 1.0 the material blends
        emissive: Optional RGB emissive factor in 0-1 range

    Returns:
        The same mesh, for chaining
    """
    material = PBRMaterial(
        baseColorFactor=color.rgba8(alpha),
        metallicFactor=0.1,
        roughnessFactor=0.8,
        emissiveFactor=list(emissive) if emissive is not None else None,
        alphaMode="BLEND" if alpha < 1.0 else "OPAQUE",
        doubleSided=True
    )
    mesh.visual = trimesh.visual.TextureVisuals(material=material)
    return mesh


def merge_meshes(meshes: list) -> "trimesh.Trimesh":
    """
    Merge multiple meshes into one.

    Args:
        meshes: List of trimesh meshes

    Returns:
        Combined mesh
    """
    if not meshes:
        return trimesh.Trimesh()

    if len(meshes) == 1:
        return meshes[0].copy()

    combined = trimesh.util.concatenate(meshes)
    logger.debug(f"Merged {len(meshes)} meshes: {len(combined.vertices)} verts, {len(combined.faces)} faces")

    return combined


def create_ring_mesh(
    torus: TorusApprox,
    segments: Optional[int] = None,
    tube_sections: int = 8
) -> "trimesh.Trimesh":
    """
    Create the torus surface for a fitted ring.

    The torus is built around +Z at the origin, then rotated onto the
    ring normal and moved to the ring center.

    Args:
        torus: Fitted ring
        segments: Segments around the ring (default: torus.segments())
        tube_sections: Segments around the tube

    Returns:
        Watertight torus mesh
    """
    ensure_finite(np.append(torus.center, torus.radius), "torus")

    if segments is None:
        segments = torus.segments()
    R = torus.radius
    r = torus.tube_radius

    ring = trimesh.creation.torus(
        major_radius=R,
        minor_radius=r,
        major_sections=segments,
        minor_sections=tube_sections,
        transform=torus.rotation()
    )

    logger.debug(f"Ring mesh: R={R:.4f}, {segments}x{tube_sections}, {len(ring.faces)} faces")
    return ring


def create_point_marker(
    point: np.ndarray,
    radius: float = 0.02,
    count: tuple = (32, 16)
) -> "trimesh.Trimesh":
    """Small UV sphere centered on a base point."""
    marker = trimesh.creation.uv_sphere(radius=radius, count=list(count))
    marker.apply_translation(np.asarray(point, dtype=np.float64))
    return marker


def create_polyline(
    points: np.ndarray,
    color: Optional[Color] = None,
    closed: bool = False
) -> "trimesh.path.Path3D":
    """
    Polyline through points as a single Path3D line entity.

    Raises:
        ValueError: If points contain inf or nan
    """
    points = ensure_finite(points, "polyline")
    if len(points) < 2:
        raise ValueError(f"A polyline needs at least 2 points, got {len(points)}")

    indices = np.arange(len(points))
    if closed:
        indices = np.append(indices, 0)

    entity = Line(points=indices, color=color.rgba8() if color is not None else None)
    return trimesh.path.Path3D(entities=[entity], vertices=points)


def create_segments(
    segments: np.ndarray,
    color: Optional[Color] = None
) -> "trimesh.path.Path3D":
    """Disjoint line segments from an (n, 2, 3) array."""
    segments = np.asarray(segments, dtype=np.float64)
    vertices = segments.reshape(-1, 3)
    rgba = color.rgba8() if color is not None else None
    entities = [
        Line(points=np.array([2 * i, 2 * i + 1]), color=rgba)
        for i in range(len(segments))
    ]
    return trimesh.path.Path3D(entities=entities, vertices=vertices)
