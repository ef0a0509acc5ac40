#!/usr/bin/env python3
"""
Hopf Fibration Meshes - Orchestrator

Build the requested mesh modules and write GLB files for a Three.js viewer.

Usage:
    python src/run_all.py --modules surfaces tori fiber
    python src/run_all.py --modules fiber --point 0 0 1 --output outputs
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from datetime import datetime

import numpy as np

from hopf.config import Config, MeshMetadata, SingularityPolicy
from hopf.coords import as_sphere_point
from hopf.gltf_exporter import GLTFExporter
from hopf.io import save_buffer, save_mesh
from hopf.mesh_ops import compute_mesh_stats
from hopf.scene import SceneState, build_scenes, update

logger = logging.getLogger(__name__)

# Rings per circle of latitude in the tori module
RING_COUNT = 32


def run_module_surfaces(config: Config, steps: Optional[int] = None) -> dict:
    """Run Fiber Surfaces."""
    from fiber_surfaces.build import DEFAULT_STEPS, build_fiber_surfaces

    scene, metadata = build_fiber_surfaces(config, steps=DEFAULT_STEPS if steps is None else steps)

    output_path = config.get_output_path("surfaces") / "fiber_surfaces.glb"
    save_mesh(scene, output_path, metadata)

    return metadata.to_dict()


def run_module_tori(config: Config, steps: Optional[int] = None) -> dict:
    """Run Fiber Tori over the equator and the circle of latitude y = -√3/2."""
    from fiber_tori.build import build_fiber_tori, latitude_points

    count = RING_COUNT if steps is None else steps
    points = np.vstack([
        latitude_points(0.0, count),
        latitude_points(-np.sqrt(3) / 2, count)
    ])
    scene, metadata = build_fiber_tori(points, config)

    output_path = config.get_output_path("tori") / "fiber_tori.glb"
    save_mesh(scene, output_path, metadata)

    return metadata.to_dict()


def run_module_fiber(config: Config, point: List[float]) -> dict:
    """Run single fiber: line buffer, line GLB, and both scene views."""
    p = as_sphere_point(point)

    state = SceneState(config=config)
    update(state, p)
    main, inset = build_scenes(state)

    mesh_dir = config.get_output_path("fiber")

    save_buffer(mesh_dir.parent / "buffers" / "fiber", state.fiber)

    exporter = GLTFExporter()
    exporter.export_lines(
        [state.fiber],
        [state.color],
        mesh_dir / "fiber_line.glb",
        metadata={"point": p.tolist(), "color": state.color.hex}
    )

    params = {
        "point": p.tolist(),
        "color": state.color.hex,
        "line_divisions": config.line_divisions
    }

    main_stats = compute_mesh_stats(main)
    save_mesh(main, mesh_dir / "main.glb", MeshMetadata(
        module="fiber",
        n_triangles=main_stats["n_faces"],
        n_vertices=main_stats["n_vertices"],
        bounds=main_stats["bounds"],
        generation_params=params
    ))

    inset_stats = compute_mesh_stats(inset)
    inset_metadata = MeshMetadata(
        module="fiber",
        n_triangles=inset_stats["n_faces"],
        n_vertices=inset_stats["n_vertices"],
        bounds=inset_stats["bounds"],
        generation_params=params
    )
    save_mesh(inset, mesh_dir / "inset.glb", inset_metadata)

    return inset_metadata.to_dict()


def run_all(
    modules: List[str],
    config: Config,
    point: List[float],
    steps: Optional[int] = None
) -> dict:
    """
    Run specified modules.

    Args:
        modules: Module names (surfaces, tori, fiber)
        config: Configuration (output goes under config.output_dir)
        point: Base point for the fiber module
        steps: Sweep steps override

    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "config": config.to_dict(),
        "modules": {},
        "errors": []
    }

    module_runners = {
        'surfaces': lambda: run_module_surfaces(config, steps),
        'tori': lambda: run_module_tori(config, steps),
        'fiber': lambda: run_module_fiber(config, point)
    }

    for module in modules:
        module = module.lower()
        if module not in module_runners:
            logger.warning(f"Unknown module: {module}")
            summary["errors"].append({"module": module, "error": "unknown module"})
            continue

        logger.info(f"\n--- Module {module} ---")
        try:
            result = module_runners[module]()
            summary["modules"][module] = {
                "status": "success",
                "metadata": result
            }
        except ValueError as e:
            logger.error(f"Module {module} failed: {e}")
            summary["modules"][module] = {
                "status": "error",
                "error": str(e)
            }
            summary["errors"].append({
                "module": module,
                "error": str(e)
            })

    return summary


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Hopf Fibration Meshes - Build fiber, torus and surface meshes"
    )
    parser.add_argument(
        "--modules", "-m",
        nargs="+",
        default=["surfaces", "tori", "fiber"],
        help="Modules to run (surfaces, tori, fiber)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON config file"
    )
    parser.add_argument(
        "--point", "-p",
        nargs=3,
        type=float,
        default=[1.0, 0.0, 0.0],
        metavar=("X", "Y", "Z"),
        help="Base point for the fiber module"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output directory"
    )
    parser.add_argument(
        "--steps", "-s",
        type=int,
        default=None,
        help="Base points per sweep"
    )
    parser.add_argument(
        "--divisions", "-d",
        type=int,
        default=None,
        help="Fiber divisions for bands and lines"
    )
    parser.add_argument(
        "--wrap",
        action="store_true",
        help="Join the last fiber of each sweep back to the first"
    )
    parser.add_argument(
        "--closed",
        action="store_true",
        help="Close each band along the fiber direction"
    )
    parser.add_argument(
        "--policy",
        choices=[p.value for p in SingularityPolicy],
        default=None,
        help="Singularity policy"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    # Build config
    config = Config.from_json(args.config) if args.config else Config()
    if args.output:
        config.output_dir = args.output
    if args.divisions is not None:
        config.line_divisions = args.divisions
        config.band_divisions = args.divisions
    if args.wrap:
        config.wrap_sweep = True
    if args.closed:
        config.closed_band = True
    if args.policy:
        config.singularity_policy = SingularityPolicy(args.policy)

    output_dir = config.output_dir

    logger.info(f"Running modules {args.modules}")
    logger.info(f"Singularity policy: {config.singularity_policy.value}")
    logger.info(f"Output: {output_dir}")

    summary = run_all(
        modules=args.modules,
        config=config,
        point=args.point,
        steps=args.steps
    )

    # Save summary
    summary_path = output_dir / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)

    logger.info(f"\nSummary saved to: {summary_path}")

    n_success = sum(1 for m in summary["modules"].values() if m.get("status") == "success")
    n_errors = len(summary["errors"])

    logger.info(f"\n{'='*60}")
    logger.info(f"COMPLETE: {n_success} successful, {n_errors} errors")
    logger.info(f"{'='*60}")

    if n_errors > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
