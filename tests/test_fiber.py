"""
Tests for fiber projection

Tests cover:
- Hopf parameters
- Sample counts and closure
- Hand-computed reference samples
- Flat buffer and vertex list shapes
- Symmetry of the fiber over (0, 0, 1)
- Singularity policy at and near the pole
"""

import warnings

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hopf.config import SingularityPolicy
from hopf.fiber import (
    SingularFiberError,
    hopf_parameters,
    sample_fiber,
    fiber_points,
    fiber_buffer,
    fiber_vertices,
)

SQRT_HALF = np.sqrt(0.5)


# ============== Fixtures ==============

@pytest.fixture
def random_points():
    """Unit vectors away from the pole (0, 1, 0)."""
    rng = np.random.default_rng(42)
    points = rng.normal(size=(20, 3))
    points /= np.linalg.norm(points, axis=1, keepdims=True)
    return points[points[:, 1] < 0.95]


# ============== Hopf Parameters Tests ==============

class TestHopfParameters:
    """Test alpha, beta, angle_sum."""

    def test_reference_point(self):
        alpha, beta, angle_sum = hopf_parameters((1.0, 0.0, 0.0))

        assert alpha == pytest.approx(SQRT_HALF)
        assert beta == pytest.approx(SQRT_HALF)
        assert angle_sum == pytest.approx(-np.pi / 2)

    def test_poles(self):
        assert hopf_parameters((0.0, 1.0, 0.0))[:2] == pytest.approx((1.0, 0.0))
        assert hopf_parameters((0.0, -1.0, 0.0))[:2] == pytest.approx((0.0, 1.0))

    def test_alpha_beta_unit(self, random_points):
        """alpha² + beta² = 1 for every base point."""
        for p in random_points:
            alpha, beta, _ = hopf_parameters(p)
            assert alpha ** 2 + beta ** 2 == pytest.approx(1.0)

    def test_rejects_non_vector(self):
        with pytest.raises(ValueError):
            hopf_parameters((1.0, 0.0))
        with pytest.raises(ValueError):
            hopf_parameters(np.zeros((2, 3)))


# ============== Fiber Points Tests ==============

class TestFiberPoints:
    """Test discretized fibers."""

    @pytest.mark.parametrize("divisions", [3, 4, 8, 250])
    def test_sample_count(self, random_points, divisions):
        for p in random_points:
            points = fiber_points(p, divisions)
            assert points.shape == (divisions + 1, 3)

    @pytest.mark.parametrize("divisions", [3, 7, 256])
    def test_curve_is_closed(self, random_points, divisions):
        for p in random_points:
            points = fiber_points(p, divisions)
            np.testing.assert_array_equal(points[0], points[-1])

    def test_reference_samples(self):
        """(1, 0, 0) with 4 divisions, checked against the formula by hand."""
        points = fiber_points((1.0, 0.0, 0.0), divisions=4)

        # theta = 0: proj = 0.5, point = (0, alpha, beta) / 2
        np.testing.assert_allclose(points[0], [0.0, SQRT_HALF / 2, SQRT_HALF / 2], atol=1e-12)

        # theta = 90°: proj = 0.5 / (1 - alpha), point = (beta proj, 0, 0)
        np.testing.assert_allclose(points[1], [(1 + np.sqrt(2)) / 2, 0.0, 0.0], atol=1e-12)

        # theta = 180°: proj = 0.5, point = (0, -alpha, -beta) / 2
        np.testing.assert_allclose(points[2], [0.0, -SQRT_HALF / 2, -SQRT_HALF / 2], atol=1e-12)

    def test_scale(self):
        p = (0.6, 0.0, 0.8)
        np.testing.assert_allclose(
            fiber_points(p, 16, scale=1.0),
            2 * fiber_points(p, 16, scale=0.5)
        )

    def test_deterministic(self, random_points):
        """Same input, bit-identical output."""
        for p in random_points:
            np.testing.assert_array_equal(fiber_points(p, 64), fiber_points(p, 64))
            np.testing.assert_array_equal(fiber_buffer(p, 64), fiber_buffer(p, 64))

    def test_symmetric_about_y0(self):
        """Over (0, 0, 1), sample i mirrors sample 4 - i across the plane y = 0."""
        points = fiber_points((0.0, 0.0, 1.0), divisions=8)

        for i in range(8):
            j = (4 - i) % 8
            assert points[i, 1] == pytest.approx(-points[j, 1], abs=1e-12)
            assert points[i, 0] == pytest.approx(-points[j, 0], abs=1e-12)
            assert points[i, 2] == pytest.approx(points[j, 2], abs=1e-12)

        assert points[:8, 1].sum() == pytest.approx(0.0, abs=1e-12)

    @pytest.mark.parametrize("divisions", [0, -1])
    def test_rejects_bad_divisions(self, divisions):
        with pytest.raises(ValueError):
            fiber_points((1.0, 0.0, 0.0), divisions)

    def test_distinct_points_give_distinct_fibers(self):
        a = fiber_points((1.0, 0.0, 0.0), 16)
        b = fiber_points((0.0, 0.0, 1.0), 16)
        assert not np.allclose(a, b)


# ============== Output Shape Tests ==============

class TestOutputShapes:
    """Flat buffer and vertex list come from the same samples."""

    def test_buffer_layout(self):
        p = (0.0, 0.6, 0.8)
        buffer = fiber_buffer(p, 256)

        assert buffer.dtype == np.float32
        assert buffer.shape == (3 * 257,)
        np.testing.assert_array_equal(buffer, fiber_points(p, 256).astype(np.float32).ravel())

    def test_vertices_match_points(self):
        p = (0.0, 0.6, 0.8)
        vertices = fiber_vertices(p, 10)
        points = fiber_points(p, 10)

        assert len(vertices) == 11
        for v, q in zip(vertices, points):
            assert v.shape == (3,)
            np.testing.assert_array_equal(v, q)


# ============== Singularity Tests ==============

class TestSingularity:
    """The base point (0, 1, 0) sends theta = 90° to infinity."""

    def test_propagate_returns_non_finite(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            points = fiber_points((0.0, 1.0, 0.0), divisions=4)

        finite = np.all(np.isfinite(points), axis=1)
        assert not finite[1]
        assert finite[0] and finite[2] and finite[3]

    def test_raise_policy(self):
        with pytest.raises(SingularFiberError):
            fiber_points((0.0, 1.0, 0.0), divisions=4, policy=SingularityPolicy.RAISE)

    def test_singular_error_is_value_error(self):
        assert issubclass(SingularFiberError, ValueError)

    def test_sample_fiber_at_pole_angle(self):
        with pytest.raises(SingularFiberError):
            sample_fiber((0.0, 1.0, 0.0), [np.pi / 2], policy=SingularityPolicy.RAISE)

    def test_near_pole_is_finite_but_large(self):
        y = 1.0 - 1e-9
        p = (np.sqrt(1.0 - y * y), y, 0.0)

        points = fiber_points(p, divisions=4, policy=SingularityPolicy.RAISE)

        assert np.all(np.isfinite(points))
        assert np.abs(points).max() > 1e3

    def test_pole_without_exact_angle_is_finite(self):
        """With 6 divisions no sample lands on theta = 90°."""
        points = fiber_points((0.0, 1.0, 0.0), divisions=6, policy=SingularityPolicy.RAISE)
        assert np.all(np.isfinite(points))

    def test_opposite_pole_is_flat_circle(self):
        """Over (0, -1, 0) the fiber is the circle of radius 0.5 in y = 0."""
        points = fiber_points((0.0, -1.0, 0.0), divisions=32)

        np.testing.assert_allclose(points[:, 1], 0.0, atol=1e-12)
        np.testing.assert_allclose(np.linalg.norm(points, axis=1), 0.5)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
