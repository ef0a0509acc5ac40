"""
Data I/O utilities.

Saves meshes and scenes as GLB with a JSON metadata sidecar, and raw
fiber buffers as .npy files.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple, Union
import numpy as np

import trimesh

from .config import MeshMetadata

logger = logging.getLogger(__name__)


def save_mesh(
    mesh: Union["trimesh.Trimesh", "trimesh.Scene"],
    path: Path,
    metadata: MeshMetadata
) -> Path:
    """
    Save mesh or scene to GLB file with metadata sidecar.

    Args:
        mesh: Trimesh mesh or Scene
        path: Output path (should end in .glb)
        metadata: MeshMetadata object (will be saved as .json sidecar)

    Returns:
        Path to the GLB file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    mesh.export(str(path))
    logger.info(f"Saved mesh: {path} ({metadata.n_vertices} verts, {metadata.n_triangles} tris)")

    meta_path = path.with_suffix('.json')
    metadata.save(meta_path)
    logger.info(f"Saved metadata: {meta_path}")

    return path


def load_mesh(path: Path) -> Tuple[Union["trimesh.Trimesh", "trimesh.Scene"], Optional[MeshMetadata]]:
    """
    Load mesh and its metadata sidecar.

    Args:
        path: Path to mesh file

    Returns:
        Tuple of (mesh, metadata) - metadata may be None if not found
    """
    path = Path(path)
    mesh = trimesh.load(str(path))

    meta_path = path.with_suffix('.json')
    metadata = None
    if meta_path.exists():
        with open(meta_path) as f:
            metadata = MeshMetadata.from_dict(json.load(f))

    return mesh, metadata


def save_buffer(path: Path, buffer: np.ndarray) -> Path:
    """
    Save a flat float32 position buffer.

    The file holds exactly the array a renderer would upload, so a
    viewer can read it without knowing about fibers.
    """
    path = Path(path).with_suffix('.npy')
    path.parent.mkdir(parents=True, exist_ok=True)

    buffer = np.asarray(buffer, dtype=np.float32).ravel()
    if len(buffer) % 3 != 0:
        raise ValueError(f"Position buffer length must be a multiple of 3, got {len(buffer)}")

    np.save(path, buffer)
    logger.info(f"Saved buffer: {path} ({len(buffer) // 3} points)")
    return path


def load_buffer(path: Path) -> np.ndarray:
    """Load a flat float32 position buffer saved by save_buffer."""
    return np.load(Path(path).with_suffix('.npy'))
