"""
glTF/GLB Export Module

Writes fiber line strips and band meshes to GLB with pygltflib for
Three.js visualization. trimesh covers full scenes (see io.save_mesh);
this module covers what trimesh does not: LINE_STRIP primitives with a
per-line material color, taken straight from flat position buffers.
"""

import logging
from typing import Dict, Any, List, Optional, Sequence
from pathlib import Path
import numpy as np

from pygltflib import (
    GLTF2, Scene, Node, Mesh as GLTFMesh, Primitive, Attributes, Accessor, BufferView, Buffer,
    Material, PbrMetallicRoughness,
    ARRAY_BUFFER, ELEMENT_ARRAY_BUFFER, FLOAT, UNSIGNED_INT, LINE_STRIP, TRIANGLES
)

from .band import BandMesh
from .color import Color
from .mesh_ops import ensure_finite

logger = logging.getLogger(__name__)


class GLTFExporter:
    """
    Exports fiber buffers and bands to glTF/GLB format.

    Each exported item becomes its own node, mesh and material so a viewer
    can recolor or hide fibers individually.
    """

    def __init__(self, embed_metadata: bool = True):
        """
        Initialize exporter.

        Args:
            embed_metadata: Whether to embed metadata in glTF extras
        """
        self.embed_metadata = embed_metadata

    def _new_document(self) -> GLTF2:
        return GLTF2(
            scene=0,
            scenes=[Scene(nodes=[])],
            nodes=[],
            meshes=[],
            materials=[],
            accessors=[],
            bufferViews=[],
            buffers=[]
        )

    def _append_blob(
        self,
        gltf: GLTF2,
        blobs: List[bytes],
        data: bytes,
        target: int
    ) -> int:
        """Append a 4-byte aligned buffer view, returning its index."""
        offset = sum(len(b) for b in blobs)
        blobs.append(data + b'\x00' * (-len(data) % 4))
        gltf.bufferViews.append(BufferView(
            buffer=0,
            byteOffset=offset,
            byteLength=len(data),
            target=target
        ))
        return len(gltf.bufferViews) - 1

    def _append_material(self, gltf: GLTF2, color: Color, alpha: float = 1.0) -> int:
        gltf.materials.append(Material(
            pbrMetallicRoughness=PbrMetallicRoughness(
                baseColorFactor=list(color.rgba(alpha)),
                metallicFactor=0.1,
                roughnessFactor=0.8
            ),
            alphaMode="BLEND" if alpha < 1.0 else "OPAQUE",
            doubleSided=True
        ))
        return len(gltf.materials) - 1

    def _append_positions(self, gltf: GLTF2, blobs: List[bytes], positions: np.ndarray) -> int:
        positions = ensure_finite(positions.reshape(-1, 3), "buffer").astype(np.float32)
        view = self._append_blob(gltf, blobs, positions.tobytes(), ARRAY_BUFFER)
        gltf.accessors.append(Accessor(
            bufferView=view,
            componentType=FLOAT,
            count=len(positions),
            type="VEC3",
            max=positions.max(axis=0).tolist(),
            min=positions.min(axis=0).tolist()
        ))
        return len(gltf.accessors) - 1

    def _append_node(self, gltf: GLTF2, primitive: Primitive, name: str) -> None:
        gltf.meshes.append(GLTFMesh(name=name, primitives=[primitive]))
        gltf.nodes.append(Node(name=name, mesh=len(gltf.meshes) - 1))
        gltf.scenes[0].nodes.append(len(gltf.nodes) - 1)

    def _save(
        self,
        gltf: GLTF2,
        blobs: List[bytes],
        output_path: Path,
        metadata: Optional[Dict[str, Any]]
    ) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        blob = b"".join(blobs)
        gltf.buffers.append(Buffer(byteLength=len(blob)))

        if self.embed_metadata and metadata:
            gltf.extras = metadata

        gltf.set_binary_blob(blob)
        gltf.save(str(output_path))
        return output_path

    def export_lines(
        self,
        buffers: Sequence[np.ndarray],
        colors: Sequence[Color],
        output_path: Path,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Path:
        """
        Export flat position buffers as LINE_STRIP primitives.

        Args:
            buffers: Flat float buffers (x0, y0, z0, ...), e.g. from fiber_buffer
            colors: One color per buffer
            output_path: Output file path (.glb)
            metadata: Optional metadata dictionary to embed

        Returns:
            Path to exported file

        Raises:
            ValueError: On count mismatch or non-finite positions
        """
        if len(buffers) != len(colors):
            raise ValueError(f"Got {len(buffers)} buffers but {len(colors)} colors")

        gltf = self._new_document()
        blobs: List[bytes] = []

        for i, (buffer, color) in enumerate(zip(buffers, colors)):
            positions = np.asarray(buffer, dtype=np.float64)
            accessor = self._append_positions(gltf, blobs, positions)
            material = self._append_material(gltf, color)
            self._append_node(
                gltf,
                Primitive(attributes=Attributes(POSITION=accessor), material=material, mode=LINE_STRIP),
                name=f"fiber_{i}"
            )

        path = self._save(gltf, blobs, output_path, metadata)
        logger.info(f"Exported {len(buffers)} fiber lines to {path}")
        return path

    def export_mesh(
        self,
        band: BandMesh,
        color: Color,
        output_path: Path,
        metadata: Optional[Dict[str, Any]] = None,
        alpha: float = 1.0
    ) -> Path:
        """
        Export one band as an indexed, double-sided triangle mesh.

        Args:
            band: Band mesh
            color: Base color
            output_path: Output file path (.glb)
            metadata: Optional metadata dictionary to embed
            alpha: Opacity

        Returns:
            Path to exported file
        """
        gltf = self._new_document()
        blobs: List[bytes] = []

        accessor = self._append_positions(gltf, blobs, band.vertices)

        indices = band.faces.astype(np.uint32).ravel()
        view = self._append_blob(gltf, blobs, indices.tobytes(), ELEMENT_ARRAY_BUFFER)
        gltf.accessors.append(Accessor(
            bufferView=view,
            componentType=UNSIGNED_INT,
            count=len(indices),
            type="SCALAR"
        ))
        index_accessor = len(gltf.accessors) - 1

        material = self._append_material(gltf, color, alpha)
        self._append_node(
            gltf,
            Primitive(
                attributes=Attributes(POSITION=accessor),
                indices=index_accessor,
                material=material,
                mode=TRIANGLES
            ),
            name="band"
        )

        path = self._save(gltf, blobs, output_path, metadata)
        logger.info(f"Exported band ({band.n_vertices} verts, {band.n_faces} tris) to {path}")
        return path
