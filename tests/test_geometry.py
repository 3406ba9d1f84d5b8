"""
Tests for petal ring geometry.

These tests verify the superformula, the mandala fold and the ring builder:
sample counts, closure, finite non-negative radii and determinism.
"""

import math

import numpy as np
import pytest

from bloom import geometry
from bloom.config import TAU, TRAIT_RANGES, ShapeConfig, TraitSet
from bloom.synthesizer import normalize_traits, synthesize


def make_traits(**overrides: float) -> TraitSet:
    """Default traits with selected overrides."""
    return normalize_traits({**TraitSet.defaults()._asdict(), **overrides})


def extreme_traits(use_max: bool) -> TraitSet:
    """Every trait at its range minimum or maximum."""
    return TraitSet(**{name: (r.max if use_max else r.min) for name, r in TRAIT_RANGES.items()})


class TestSuperformula:
    """Tests for the raw superformula."""

    def test_circle(self) -> None:
        """m=4, n1=n2=n3=2 is the unit circle."""
        phi = np.linspace(0, TAU, 50)
        r = geometry.superformula(phi, m=4, n1=2, n2=2, n3=2)
        assert np.allclose(r, 1.0)

    def test_zero_n1_is_degenerate(self) -> None:
        """An undefined exponent gives zero radius, not an exception."""
        r = geometry.superformula(np.array([0.0, 1.0]), m=6, n1=0.0, n2=2, n3=2)
        assert np.array_equal(r, np.zeros(2))

    def test_overflow_replaced_by_zero(self) -> None:
        """Intermediate overflow never propagates inf or NaN."""
        phi = np.linspace(0, TAU, 200)
        r = geometry.superformula(phi, m=12, n1=0.5, n2=10, n3=10, a=1e-40)
        assert np.all(np.isfinite(r))
        assert np.all(r >= 0)


class TestMandalaFold:
    """Tests for the kaleidoscope fold."""

    def test_zero_depth_identity(self) -> None:
        """Depth 0 leaves angles unchanged."""
        phi = np.linspace(0, TAU, 37, endpoint=False)
        assert np.allclose(geometry.mandala_fold(phi, symmetry=6, depth=0.0), phi)

    def test_full_depth_snaps_to_midpoints(self) -> None:
        """Depth 1 maps every angle in a sector to the sector midpoint."""
        width = TAU / 6
        phi = np.array([0.01, 0.2, width - 0.01])
        folded = geometry.mandala_fold(phi, symmetry=6, depth=1.0)
        assert np.allclose(folded, width / 2)

    def test_partial_depth_between(self) -> None:
        """Intermediate depth moves halfway toward the midpoint."""
        width = TAU / 4
        folded = geometry.mandala_fold(np.array([0.0]), symmetry=4, depth=0.5)
        assert math.isclose(folded[0], width / 4, abs_tol=1e-12)


class TestSampleCount:
    """Tests for the per-ring sample count."""

    def test_default_traits(self) -> None:
        """Defaults sit inside the band."""
        n = geometry.sample_count(TraitSet.defaults())
        assert 120 <= n <= 360

    def test_band_edges(self) -> None:
        """Minimum traits give the minimum count; maximum give the maximum."""
        assert geometry.sample_count(extreme_traits(False)) == 120
        assert geometry.sample_count(extreme_traits(True)) == 360

    def test_custom_band(self) -> None:
        """Shape config controls the band."""
        shape = ShapeConfig(min_segments=16, max_segments=16)
        assert geometry.sample_count(TraitSet.defaults(), shape) == 16


class TestBuildRings:
    """Tests for ring construction."""

    def test_shapes(self) -> None:
        """Both rings have N points in 2D."""
        rings = geometry.build_rings(TraitSet.defaults())
        n = geometry.sample_count(TraitSet.defaults())
        assert rings.outer.shape == (n, 2)
        assert rings.inner.shape == (n, 2)
        assert rings.sample_count == n

    def test_implicit_closure(self) -> None:
        """The first point is not repeated at the end."""
        rings = geometry.build_rings(TraitSet.defaults())
        assert not np.allclose(rings.outer[0], rings.outer[-1])

    def test_radii_normalized(self) -> None:
        """Radii are finite, non-negative and peak at 1."""
        rings = geometry.build_rings(TraitSet.defaults())
        assert np.all(np.isfinite(rings.radii))
        assert np.all(rings.radii >= 0)
        assert math.isclose(float(np.max(rings.radii)), 1.0, abs_tol=1e-12)

    def test_points_match_radii(self) -> None:
        """Outer point distances equal the stored radii."""
        rings = geometry.build_rings(make_traits(radial_twist=0.4))
        assert np.allclose(np.hypot(rings.outer[:, 0], rings.outer[:, 1]), rings.radii)

    def test_inner_ring_scaled(self) -> None:
        """Inner ring is the outer ring times the inner scale."""
        traits = TraitSet.defaults()
        rings = geometry.build_rings(traits)
        # 0.32 + 0.22 - 0.25 * 0.15
        assert math.isclose(rings.inner_scale, 0.5025, abs_tol=1e-12)
        assert np.allclose(rings.inner, rings.outer * 0.5025)

    def test_inner_scale_clamped(self) -> None:
        """Inner scale stays inside its band."""
        small = geometry.inner_ring_scale(make_traits(core_radius=0.15, inner_void=0.45))
        large = geometry.inner_ring_scale(make_traits(core_radius=0.5, inner_void=0.0))
        assert small == pytest.approx(0.28)
        assert 0.28 <= large <= 0.72

    def test_deterministic(self) -> None:
        """Identical traits give identical arrays."""
        traits = synthesize((64.0, -128.0, 256.0))
        a = geometry.build_rings(traits)
        b = geometry.build_rings(traits)
        assert np.array_equal(a.outer, b.outer)
        assert np.array_equal(a.inner, b.inner)

    def test_read_only(self) -> None:
        """Ring arrays cannot be mutated by consumers."""
        rings = geometry.build_rings(TraitSet.defaults())
        assert not rings.outer.flags.writeable
        with pytest.raises(ValueError):
            rings.outer[0, 0] = 5.0

    def test_extreme_traits_finite(self) -> None:
        """Range extremes still produce finite, bounded rings."""
        for use_max in (False, True):
            rings = geometry.build_rings(extreme_traits(use_max))
            assert np.all(np.isfinite(rings.outer))
            assert np.all(rings.radii >= 0)
            assert float(np.max(rings.radii)) <= 1.0 + 1e-12

    def test_synthesized_traits_finite(self) -> None:
        """Rings of arbitrary coordinates are well formed."""
        rng = np.random.default_rng(11)
        for coord in rng.uniform(-500, 500, size=(20, 3)):
            rings = geometry.build_rings(synthesize(coord))
            assert rings.sample_count >= 120
            assert np.all(np.isfinite(rings.radii))
            assert np.all(rings.radii >= 0)
