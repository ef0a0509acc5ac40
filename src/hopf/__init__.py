"""
Hopf fibration geometry shared by all mesh modules.

Coordinate Model:
- Base points: unit vectors on S² (not normalized for you)
- Fibers: circles in R³, stereographic projection of S³ with scale 0.5
- Buffers handed to renderers are plain numpy arrays
"""

__version__ = "1.0.0"

from .config import Config, MeshMetadata, SingularityPolicy
from .coords import as_sphere_point, normalize_point, spherical_to_cartesian, arc_points, parallel_points
from .fiber import SingularFiberError, hopf_parameters, sample_fiber, fiber_points, fiber_buffer, fiber_vertices
from .torus import TorusApprox, torus_approx
from .color import Color, point_to_color, index_to_color
from .band import BandMesh, build_band, strip_faces
from .mesh_ops import compute_mesh_stats, create_ring_mesh, ensure_finite, merge_meshes, paint_mesh
from .io import save_mesh, load_mesh, save_buffer, load_buffer
from .scene import SceneState, update, add_point, add_inset_line, add_surface, build_scenes
from .gltf_exporter import GLTFExporter

__all__ = [
    'Config', 'MeshMetadata', 'SingularityPolicy',
    'as_sphere_point', 'normalize_point', 'spherical_to_cartesian', 'arc_points', 'parallel_points',
    'SingularFiberError', 'hopf_parameters', 'sample_fiber', 'fiber_points', 'fiber_buffer', 'fiber_vertices',
    'TorusApprox', 'torus_approx',
    'Color', 'point_to_color', 'index_to_color',
    'BandMesh', 'build_band', 'strip_faces',
    'compute_mesh_stats', 'create_ring_mesh', 'ensure_finite', 'merge_meshes', 'paint_mesh',
    'save_mesh', 'load_mesh', 'save_buffer', 'load_buffer',
    'SceneState', 'update', 'add_point', 'add_inset_line', 'add_surface', 'build_scenes',
    'GLTFExporter',
]
