"""
Configuration and constants for Hopf fibration mesh generation.

Coordinate Model:
- Base points live on the unit sphere S² (x, y, z)
- Fibers are projected from S³ into R³ with scale 0.5
- Output units are the projection's own units (the unit sphere has radius 1)
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import json
from pathlib import Path


class SingularityPolicy(Enum):
    """
    What to do when a fiber sample hits the projection's pole.

    PROPAGATE (default): return IEEE inf/nan coordinates
        - The point (0, 1, 0) at theta = 90° maps to infinity
        - Callers decide whether to skip or clip the sample

    RAISE: fail fast with SingularFiberError
        - Opt-in (CLI: --policy raise) for callers that want the error at
          the point of projection. Exporters reject non-finite vertices
          under either policy (mesh_ops.ensure_finite)
    """
    PROPAGATE = "propagate"
    RAISE = "raise"


@dataclass
class MeshMetadata:
    """
    Metadata written as a JSON sidecar next to every exported mesh.
    """
    module: str  # surfaces, tori or fiber
    n_triangles: int
    n_vertices: int
    bounds: Optional[Dict[str, Any]] = None
    generation_params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module": self.module,
            "n_triangles": self.n_triangles,
            "n_vertices": self.n_vertices,
            "bounds": self.bounds,
            "generation_params": self.generation_params
        }

    def save(self, path: Path) -> None:
        """Save metadata to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeshMetadata":
        return cls(**data)


@dataclass
class Config:
    """
    Global configuration for fiber, band and torus generation.

    Line buffers and band meshes use different default resolutions:
    a fiber drawn as a line is cheap, a band doubles the vertex count.
    """

    # Fiber sampling
    line_divisions: int = 256
    band_divisions: int = 250
    projection_scale: float = 0.5

    # Torus approximation
    tube_radius: float = 0.02
    tube_sections: int = 8
    min_ring_segments: int = 16
    ring_segments_per_unit: int = 64

    # Sweep driver
    sweep_steps: int = 100
    wrap_sweep: bool = False
    closed_band: bool = False

    # Inset markers
    point_radius: float = 0.02

    singularity_policy: SingularityPolicy = SingularityPolicy.PROPAGATE

    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    def get_output_path(self, module: str) -> Path:
        """Get mesh output directory for a module."""
        return self.output_dir / module / "meshes"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line_divisions": self.line_divisions,
            "band_divisions": self.band_divisions,
            "projection_scale": self.projection_scale,
            "tube_radius": self.tube_radius,
            "tube_sections": self.tube_sections,
            "min_ring_segments": self.min_ring_segments,
            "ring_segments_per_unit": self.ring_segments_per_unit,
            "sweep_steps": self.sweep_steps,
            "wrap_sweep": self.wrap_sweep,
            "closed_band": self.closed_band,
            "point_radius": self.point_radius,
            "singularity_policy": self.singularity_policy.value,
            "output_dir": str(self.output_dir)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        data = dict(data)
        data["singularity_policy"] = SingularityPolicy(data.get("singularity_policy", "propagate"))
        data["output_dir"] = Path(data.get("output_dir", "outputs"))
        return cls(**data)

    @classmethod
    def from_json(cls, path: Path) -> "Config":
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
