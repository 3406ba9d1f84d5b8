"""
Harmonic signal generation over the embedding cube.

Every trait and every color signal is a three-term harmonic sum over a
coordinate normalized by the cube size L:

    raw(x, y, z) = sin(f0 * x/L + p0) + sin(f1 * y/L + p1) + sin(f2 * z/L + p2)

The sum lives in [-3, 3] and is rescaled to [0, 1]. A HarmonicTable bundles
the constants of many signals so they are evaluated in one vectorized call.
The shape synthesizer and the color resolver each instantiate their own table.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

import jax
import jax.numpy as jnp
from jax import Array

from bloom.config import CUBE_SIZE, HarmonicSeed


@dataclass(frozen=True)
class HarmonicTable:
    """Named harmonic seeds, evaluated together."""

    names: tuple[str, ...]
    freq: tuple[tuple[float, float, float], ...]
    phase: tuple[tuple[float, float, float], ...]

    @classmethod
    def from_seeds(cls, seeds: Mapping[str, HarmonicSeed]) -> "HarmonicTable":
        """Build a table from a name -> seed mapping, keeping its order."""
        names = tuple(seeds)
        return cls(
            names=names,
            freq=tuple(tuple(seeds[n].freq) for n in names),
            phase=tuple(tuple(seeds[n].phase) for n in names),
        )

    def __len__(self) -> int:
        return len(self.names)

    def index(self, name: str) -> int:
        return self.names.index(name)


def compute_signal(
    table: HarmonicTable,
    coordinate: Sequence[float] | Array,
    cube_size: float = CUBE_SIZE,
) -> Array:
    """
    Evaluate every signal of a table at one coordinate.

    signal = clip((raw + 3) / 6, 0, 1)

    Args:
        table: Harmonic constants, one row per signal
        coordinate: (x, y, z) in embedding units
        cube_size: Side length L used to normalize the coordinate

    Returns:
        Array of shape (len(table),) with values in [0, 1]. Non-finite
        coordinates propagate NaN; callers decide the fallback.
    """
    freq = jnp.asarray(table.freq, dtype=jnp.float32)
    phase = jnp.asarray(table.phase, dtype=jnp.float32)
    p = jnp.asarray(coordinate, dtype=jnp.float32) / cube_size

    raw = jnp.sum(jnp.sin(freq * p + phase), axis=-1)
    return jnp.clip((raw + 3.0) / 6.0, 0.0, 1.0)


def compute_signal_batch(
    table: HarmonicTable,
    coordinates: Sequence[Sequence[float]] | Array,
    cube_size: float = CUBE_SIZE,
) -> Array:
    """
    Evaluate a table at many coordinates.

    This is more efficient than calling compute_signal repeatedly
    as it vectorizes over the coordinate axis.

    Args:
        table: Harmonic constants
        coordinates: Array-like of shape (n, 3)
        cube_size: Side length L

    Returns:
        Array of shape (n, len(table))
    """
    coords = jnp.asarray(coordinates, dtype=jnp.float32).reshape(-1, 3)
    return jax.vmap(lambda c: compute_signal(table, c, cube_size))(coords)


def smoothed_signal(
    table: HarmonicTable,
    coordinate: Sequence[float] | Array,
    radius: float,
    center_weight: float,
    cube_size: float = CUBE_SIZE,
) -> Array:
    """
    Evaluate a table with a seven-point spatial blur.

    The center sample carries center_weight; the six axis-offset samples at
    distance radius (in embedding units) share the remainder equally. This
    removes banding between nearby coordinates.

    Returns:
        Array of shape (len(table),) with values in [0, 1]
    """
    center = jnp.asarray(coordinate, dtype=jnp.float32).reshape(3)
    offsets = radius * jnp.concatenate([jnp.eye(3), -jnp.eye(3)], axis=0)
    samples = jnp.concatenate([center[None, :], center[None, :] + offsets], axis=0)

    values = compute_signal_batch(table, samples, cube_size)
    offset_weight = (1.0 - center_weight) / 6.0
    weights = jnp.concatenate(
        [jnp.array([center_weight]), jnp.full((6,), offset_weight)]
    ).astype(jnp.float32)
    return jnp.clip(weights @ values, 0.0, 1.0)
