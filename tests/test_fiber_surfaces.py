"""
Tests for Fiber Surfaces

Tests cover:
- Band sweep counts (open, wrapped, closed)
- Meridian and parallel surfaces
- Default surface set
- Full build pipeline
- Adding surfaces to a scene state
"""

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fiber_surfaces.build import (
    DEFAULT_THETAS,
    sweep_bands,
    build_fiber_surface,
    build_fiber_surface_at_phi,
    build_default_surfaces,
    build_fiber_surfaces,
)
from hopf.color import index_to_color
from hopf.config import Config, SingularityPolicy
from hopf.coords import arc_points
from hopf.fiber import SingularFiberError
from hopf.scene import SceneState, add_surface, build_scenes


# ============== Fixtures ==============

@pytest.fixture
def small_config():
    """Low-res config for fast testing."""
    return Config(band_divisions=8, line_divisions=8)


@pytest.fixture
def base_points():
    return arc_points(0.0, 0.0, np.pi, 4)


# ============== Sweep Tests ==============

class TestSweepBands:
    """Test bands between consecutive fibers."""

    def test_open_sweep(self, base_points, small_config):
        bands = sweep_bands(base_points, small_config)

        assert len(bands) == 3
        for band in bands:
            assert band.n_vertices == 18
            assert band.n_faces == 16

    def test_wrapped_sweep(self, base_points, small_config):
        bands = sweep_bands(base_points, small_config, wrap=True)

        assert len(bands) == 4
        np.testing.assert_array_equal(bands[-1].vertices[9:], bands[0].vertices[:9])

    def test_closed_bands(self, base_points, small_config):
        bands = sweep_bands(base_points, small_config, closed=True)

        assert all(band.n_faces == 18 for band in bands)

    def test_consecutive_bands_share_a_fiber(self, base_points, small_config):
        bands = sweep_bands(base_points, small_config)

        for first, second in zip(bands, bands[1:]):
            np.testing.assert_array_equal(first.vertices[9:], second.vertices[:9])

    def test_needs_two_points(self, small_config):
        with pytest.raises(ValueError):
            sweep_bands(np.array([[1.0, 0.0, 0.0]]), small_config)

    def test_singular_point_with_raise_policy(self):
        config = Config(band_divisions=4, singularity_policy=SingularityPolicy.RAISE)
        points = np.array([[0.0, 0.0, 1.0], [0.0, 1.0, 0.0]])

        with pytest.raises(SingularFiberError):
            sweep_bands(points, config)


# ============== Surface Tests ==============

class TestFiberSurface:
    """Test single surfaces."""

    def test_meridian_surface(self, small_config):
        color = index_to_color(0, 1)
        surface = build_fiber_surface(0.0, 0.0, np.pi, color, steps=4, config=small_config)

        assert surface.base_points.shape == (4, 3)
        assert len(surface.bands) == 3
        assert surface.band_colors == [color] * 3
        assert surface.n_vertices == 54
        assert surface.n_faces == 48
        assert surface.params["kind"] == "meridian"
        assert surface.params["wrap"] is False
        assert surface.params["closed"] is False

    def test_config_defaults_for_wrap_and_closed(self):
        config = Config(band_divisions=8, wrap_sweep=True, closed_band=True)
        surface = build_fiber_surface(0.0, 0.0, np.pi, index_to_color(0, 1), steps=4, config=config)

        assert len(surface.bands) == 4
        assert surface.bands[0].n_faces == 18

        surface = build_fiber_surface(
            0.0, 0.0, np.pi, index_to_color(0, 1), steps=4, config=config, wrap=False, closed=False
        )
        assert len(surface.bands) == 3
        assert surface.bands[0].n_faces == 16

    def test_parallel_surface(self, small_config):
        surface = build_fiber_surface_at_phi(np.pi / 3, 0.0, np.pi, steps=4, config=small_config)

        assert len(surface.bands) == 3
        assert surface.params["kind"] == "parallel"
        assert len(set(c.hex for c in surface.band_colors)) == 3
        assert surface.color == surface.band_colors[0]

    def test_to_mesh(self, small_config):
        surface = build_fiber_surface(0.0, 0.0, np.pi, index_to_color(0, 1), steps=4, config=small_config)
        mesh = surface.to_mesh()

        assert len(mesh.faces) == surface.n_faces
        assert mesh.visual.material.doubleSided

    def test_surface_is_finite_away_from_pole(self, small_config):
        surface = build_fiber_surface(np.pi / 8, -np.pi / 8, 7 * np.pi / 8, index_to_color(1, 4),
                                      steps=10, config=small_config)

        for band in surface.bands:
            assert np.all(np.isfinite(band.vertices))


# ============== Default Surfaces Tests ==============

class TestDefaultSurfaces:
    """Test the default sweep set and scene build."""

    def test_default_surfaces(self, small_config):
        surfaces = build_default_surfaces(small_config, steps=4)

        assert len(surfaces) == len(DEFAULT_THETAS)
        assert [s.color for s in surfaces] == [index_to_color(i, 4) for i in range(4)]
        assert surfaces[1].params["phi0"] == pytest.approx(-np.pi / 8)
        assert surfaces[1].params["phi1"] == pytest.approx(7 * np.pi / 8)

    def test_mismatched_thetas_offsets(self, small_config):
        with pytest.raises(ValueError):
            build_default_surfaces(small_config, thetas=(0.0, 0.5), offsets=(0.0,))

    def test_build_fiber_surfaces(self, small_config):
        scene, metadata = build_fiber_surfaces(small_config, steps=4)

        assert len(scene.geometry) == 12
        assert metadata.module == "surfaces"
        assert metadata.n_vertices == 216
        assert metadata.n_triangles == 192
        assert len(metadata.generation_params["surfaces"]) == 4
        assert "surface_0_band_0" in scene.geometry

    def test_add_surface_to_state(self, small_config):
        state = SceneState.initial(small_config)
        surface = build_fiber_surface(0.0, 0.0, np.pi, index_to_color(0, 1), steps=4, config=small_config)
        add_surface(state, surface)

        main, inset = build_scenes(state)

        assert {"surface_0_band_0", "surface_0_band_1", "surface_0_band_2"} <= set(main.geometry)
        assert "inset_line_0" in inset.geometry


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
