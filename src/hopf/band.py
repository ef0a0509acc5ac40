"""
Band mesh builder.

A band is the ruled surface between two curves sampled with the same
parametrization: sample i of curve A is joined to sample i of curve B.

Vertex layout: curve A occupies [0, m), curve B occupies [m, 2m).
Each quad between samples i and i+1 is split into two triangles:

    i+1 ---- i+m+1
     |     /   |
     |   /     |
     i ------ i+m
"""

import numpy as np
from dataclasses import dataclass
from typing import Sequence, Union
import logging

import trimesh

logger = logging.getLogger(__name__)

CurveLike = Union[np.ndarray, Sequence[Sequence[float]]]


@dataclass
class BandMesh:
    """Indexed triangle strip between two curves."""
    vertices: np.ndarray  # (2m, 3) float64
    faces: np.ndarray  # (k, 3) int64

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_faces(self) -> int:
        return len(self.faces)

    def to_trimesh(self) -> "trimesh.Trimesh":
        """
        Convert to trimesh without processing.

        process=False keeps the duplicated seam vertex of closed fibers,
        so face indices stay valid.
        """
        return trimesh.Trimesh(vertices=self.vertices, faces=self.faces, process=False)


def strip_faces(m: int, closed: bool = False) -> np.ndarray:
    """
    Face indices for a strip between two m-point curves.

    Args:
        m: Points per curve
        closed: Also join sample m-1 back to sample 0

    Returns:
        (2(m-1), 3) array, or (2m, 3) when closed
    """
    i = np.arange(m - 1)
    first = np.column_stack([i, i + m, i + m + 1])
    second = np.column_stack([i, i + m + 1, i + 1])

    # interleave so faces of one quad are adjacent
    faces = np.empty((2 * (m - 1), 3), dtype=np.int64)
    faces[0::2] = first
    faces[1::2] = second

    if closed:
        last = m - 1
        closing = np.array([
            [last, last + m, m],
            [last, m, 0]
        ], dtype=np.int64)
        faces = np.vstack([faces, closing])

    return faces


def build_band(
    curve_a: CurveLike,
    curve_b: CurveLike,
    closed: bool = False
) -> BandMesh:
    """
    Build the triangle strip between two equal-length curves.

    Args:
        curve_a: m points
        curve_b: m points, aligned sample-for-sample with curve_a
        closed: Add the quad between the last and first samples

    Returns:
        BandMesh with 2m vertices and 2(m-1) faces (2m when closed)

    Raises:
        ValueError: On mismatched lengths, non-3D points, or a closed
            band with fewer than 3 points per curve
    """
    a = np.asarray(curve_a, dtype=np.float64)
    b = np.asarray(curve_b, dtype=np.float64)

    if a.ndim != 2 or a.shape[1] != 3 or b.ndim != 2 or b.shape[1] != 3:
        raise ValueError(f"Curves must be (m, 3) arrays, got {a.shape} and {b.shape}")

    if len(a) != len(b):
        raise ValueError(f"Curves must have equal point counts, got {len(a)} and {len(b)}")

    m = len(a)
    if m < 1:
        raise ValueError("Curves must contain at least one point")
    if closed and m < 3:
        raise ValueError(f"A closed band needs at least 3 points per curve, got {m}")

    vertices = np.vstack([a, b])
    faces = strip_faces(m, closed=closed)

    return BandMesh(vertices=vertices, faces=faces)
