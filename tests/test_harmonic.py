"""
Tests for the harmonic signal primitive.

These tests verify the three-term sine sums are rescaled into [0, 1],
vectorize correctly, and that the seven-point blur behaves.
"""

import math

import jax.numpy as jnp
import numpy as np

from bloom import harmonic
from bloom.config import COLOR_SEEDS, TRAIT_SEEDS, HarmonicSeed
from bloom.harmonic import HarmonicTable


def make_table(**seeds: HarmonicSeed) -> HarmonicTable:
    """Create a table from keyword seeds."""
    return HarmonicTable.from_seeds(seeds)


class TestHarmonicTable:
    """Tests for building tables from seeds."""

    def test_keeps_seed_order(self) -> None:
        """Names follow the mapping order."""
        table = HarmonicTable.from_seeds(TRAIT_SEEDS)
        assert table.names == tuple(TRAIT_SEEDS)
        assert len(table) == len(TRAIT_SEEDS)

    def test_index_lookup(self) -> None:
        """index() finds a signal by name."""
        table = HarmonicTable.from_seeds(COLOR_SEEDS)
        assert table.index("hue_primary") == 0
        assert table.names[table.index("sharpness")] == "sharpness"


class TestComputeSignal:
    """Tests for single-coordinate evaluation."""

    def test_zero_phase_at_origin_is_midpoint(self) -> None:
        """sin(0) sums to 0, which rescales to 0.5."""
        table = make_table(a=HarmonicSeed(freq=(1.0, 1.0, 1.0), phase=(0.0, 0.0, 0.0)))
        result = harmonic.compute_signal(table, (0.0, 0.0, 0.0))
        assert jnp.isclose(result[0], 0.5, atol=1e-5)

    def test_quarter_phase_saturates(self) -> None:
        """All three terms at sin(pi/2) give the maximum."""
        half_pi = math.pi / 2
        table = make_table(a=HarmonicSeed(freq=(1.0, 1.0, 1.0), phase=(half_pi,) * 3))
        result = harmonic.compute_signal(table, (0.0, 0.0, 0.0))
        assert jnp.isclose(result[0], 1.0, atol=1e-5)

    def test_coordinate_normalized_by_cube(self) -> None:
        """A coordinate of L*pi/2 on x reaches sin(pi/2) for unit frequency."""
        table = make_table(a=HarmonicSeed(freq=(1.0, 0.0, 0.0), phase=(0.0, 0.0, 0.0)))
        result = harmonic.compute_signal(table, (1000.0 * math.pi / 2, 0.0, 0.0), cube_size=1000.0)
        # (1 + 0 + 0 + 3) / 6
        assert jnp.isclose(result[0], 4.0 / 6.0, atol=1e-5)

    def test_shape_and_bounds(self) -> None:
        """One value per signal, all in [0, 1]."""
        table = HarmonicTable.from_seeds(TRAIT_SEEDS)
        rng = np.random.default_rng(3)
        for coord in rng.uniform(-500, 500, size=(25, 3)):
            result = harmonic.compute_signal(table, coord)
            assert result.shape == (len(table),)
            assert float(jnp.min(result)) >= 0.0
            assert float(jnp.max(result)) <= 1.0

    def test_deterministic(self) -> None:
        """Same coordinate, same signals."""
        table = HarmonicTable.from_seeds(COLOR_SEEDS)
        a = harmonic.compute_signal(table, (12.5, -40.0, 300.0))
        b = harmonic.compute_signal(table, (12.5, -40.0, 300.0))
        assert jnp.array_equal(a, b)


class TestComputeSignalBatch:
    """Tests for vectorized evaluation."""

    def test_matches_single(self) -> None:
        """Batch rows agree with single evaluations."""
        table = HarmonicTable.from_seeds(TRAIT_SEEDS)
        coords = np.array([[0.0, 0.0, 0.0], [100.0, -250.0, 430.0], [-480.0, 12.0, 7.0]])
        batch = harmonic.compute_signal_batch(table, coords)
        assert batch.shape == (3, len(table))
        for row, coord in zip(batch, coords):
            assert jnp.allclose(row, harmonic.compute_signal(table, coord), atol=1e-6)


class TestSmoothedSignal:
    """Tests for the seven-point blur."""

    def test_full_center_weight_is_unblurred(self) -> None:
        """center_weight = 1 ignores the offsets."""
        table = HarmonicTable.from_seeds(COLOR_SEEDS)
        coord = (150.0, 20.0, -75.0)
        smoothed = harmonic.smoothed_signal(table, coord, radius=20.0, center_weight=1.0)
        assert jnp.allclose(smoothed, harmonic.compute_signal(table, coord), atol=1e-6)

    def test_zero_radius_is_unblurred(self) -> None:
        """Offsets of zero length sample the center seven times."""
        table = HarmonicTable.from_seeds(COLOR_SEEDS)
        coord = (-310.0, 45.0, 260.0)
        smoothed = harmonic.smoothed_signal(table, coord, radius=0.0, center_weight=0.44)
        assert jnp.allclose(smoothed, harmonic.compute_signal(table, coord), atol=1e-5)

    def test_bounded(self) -> None:
        """Blurred values stay in [0, 1]."""
        table = HarmonicTable.from_seeds(COLOR_SEEDS)
        smoothed = harmonic.smoothed_signal(table, (499.0, -499.0, 0.0), radius=20.0, center_weight=0.44)
        assert float(jnp.min(smoothed)) >= 0.0
        assert float(jnp.max(smoothed)) <= 1.0
