"""
Trait synthesis: coordinate -> TraitSet.

Each trait is one harmonic signal from TRAIT_SEEDS mapped linearly into its
configured range:

    value = min + signal * (max - min)

Integer traits are rounded and then re-clamped. No randomness is involved, so
the same coordinate always yields the same traits.
"""

import math
from collections.abc import Mapping, Sequence

import numpy as np
from jax import Array

from bloom.config import (
    CUBE_SIZE,
    INTEGER_TRAITS,
    TAU,
    TRAIT_DEFAULTS,
    TRAIT_NAMES,
    TRAIT_RANGES,
    TRAIT_SEEDS,
    TraitSet,
)
from bloom.harmonic import HarmonicTable, compute_signal, compute_signal_batch

TRAIT_TABLE = HarmonicTable.from_seeds({name: TRAIT_SEEDS[name] for name in TRAIT_NAMES})

_MINS = np.array([TRAIT_RANGES[n].min for n in TRAIT_NAMES], dtype=np.float64)
_SPANS = np.array([TRAIT_RANGES[n].span for n in TRAIT_NAMES], dtype=np.float64)


def _signals_to_traits(signals: np.ndarray) -> TraitSet:
    """Map one row of [0, 1] signals into trait ranges."""
    raw = _MINS + signals.astype(np.float64) * _SPANS
    values = {}
    for i, name in enumerate(TRAIT_NAMES):
        bounds = TRAIT_RANGES[name]
        value = float(raw[i])
        if not math.isfinite(value):
            value = bounds.min
        if name in INTEGER_TRAITS:
            value = float(round(value))
        values[name] = bounds.clamp(value)
    return TraitSet(**values)


def synthesize(
    coordinate: Sequence[float] | Array,
    cube_size: float = CUBE_SIZE,
) -> TraitSet:
    """
    Derive the trait set of a coordinate.

    Args:
        coordinate: (x, y, z) inside the embedding cube
        cube_size: Side length L of the cube

    Returns:
        TraitSet with every value inside its configured range
    """
    signals = np.asarray(compute_signal(TRAIT_TABLE, coordinate, cube_size))
    return _signals_to_traits(signals)


def synthesize_batch(
    coordinates: Sequence[Sequence[float]] | Array,
    cube_size: float = CUBE_SIZE,
) -> list[TraitSet]:
    """Derive trait sets for a whole star field in one vectorized pass."""
    signals = np.asarray(compute_signal_batch(TRAIT_TABLE, coordinates, cube_size))
    return [_signals_to_traits(row) for row in signals]


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# Older stores kept traits under camelCase keys (petalCount, coreRadius, ...)
LEGACY_TRAIT_KEYS: dict[str, str] = {
    name: _camel_case(name) for name in TRAIT_NAMES if _camel_case(name) != name
}


def normalize_traits(params: Mapping[str, object] | TraitSet | None = None) -> TraitSet:
    """
    Rebuild a valid TraitSet from a partial or untrusted mapping.

    Missing or non-numeric entries take TRAIT_DEFAULTS; non-finite numbers fall
    back to the range minimum; rot is wrapped into [0, 2*pi); integer traits
    are rounded and re-clamped. camelCase keys are read when the snake_case
    key is absent. Unknown keys are ignored.
    """
    if params is None:
        params = {}
    elif isinstance(params, TraitSet):
        params = params._asdict()

    values = {}
    for name in TRAIT_NAMES:
        bounds = TRAIT_RANGES[name]
        if name in params:
            raw = params[name]
        else:
            raw = params.get(LEGACY_TRAIT_KEYS.get(name, name), TRAIT_DEFAULTS[name])
        if isinstance(raw, bool) or not isinstance(raw, (int, float, np.number)):
            raw = TRAIT_DEFAULTS[name]
        value = float(raw)

        if name == "rot" and math.isfinite(value):
            value = value % TAU
        if name in INTEGER_TRAITS and math.isfinite(value):
            value = float(round(value))
        values[name] = bounds.clamp(value)
    return TraitSet(**values)
