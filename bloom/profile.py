"""
Render profiles and the bounded cache that memoizes them.

A RenderProfile is everything a renderer needs to draw one flower: the two
rings, an 8-entry palette derived from the base color, and scalar sizes for
the core, halo and stroke. Building one is the expensive step of the
pipeline, so profiles are cached on (color, traits).

The cache is an explicit object handed to callers; there is no module-level
instance.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from bloom.color import canonical_hex, shift_color
from bloom.config import PROFILE_CACHE_CAPACITY, ShapeConfig, TraitSet
from bloom.geometry import FlowerRings, build_rings
from bloom.synthesizer import normalize_traits

logger = logging.getLogger(__name__)

RingBuilder = Callable[[TraitSet, ShapeConfig], FlowerRings]


class PaletteEntry(NamedTuple):
    """HSL perturbation applied to the base color (hue turns, s/l factors)."""

    shift_h: float
    mult_s: float
    mult_l: float


PALETTE_SHIFTS: dict[str, PaletteEntry] = {
    "outer": PaletteEntry(-0.03, 0.95, 1.15),
    "outer_glow": PaletteEntry(0.0, 1.05, 1.3),
    "inner": PaletteEntry(0.08, 0.9, 0.82),
    "inner_glow": PaletteEntry(0.18, 1.1, 1.05),
    "core": PaletteEntry(-0.12, 1.05, 0.92),
    "core_glow": PaletteEntry(-0.06, 1.4, 1.35),
    "edge": PaletteEntry(-0.03, 1.2, 1.05),
    "line": PaletteEntry(0.0, 1.15, 0.95),
}


class FlowerPalette(NamedTuple):
    outer: str
    outer_glow: str
    inner: str
    inner_glow: str
    core: str
    core_glow: str
    edge: str
    line: str


def build_palette(color: str) -> FlowerPalette:
    """Derive the eight layer colors of a flower from its base color."""
    return FlowerPalette(
        **{
            name: shift_color(color, entry.shift_h, entry.mult_s, entry.mult_l)
            for name, entry in PALETTE_SHIFTS.items()
        }
    )


@dataclass(frozen=True, eq=False)
class RenderProfile:
    """Cached geometry and styling of one flower."""

    color: str
    traits: TraitSet
    outer_points: np.ndarray  # (N, 2), read-only
    inner_points: np.ndarray  # (N, 2), read-only
    radii: np.ndarray  # (N,), read-only
    palette: FlowerPalette
    core_radius: float
    halo_radius: float
    stroke_weight: float

    @property
    def sample_count(self) -> int:
        return len(self.radii)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def profile_key(traits: TraitSet, color: str) -> str:
    """Canonical cache key: canonical hex color plus traits serialized in field order."""
    return canonical_hex(color) + "|" + json.dumps(list(traits), separators=(",", ":"))


def build_profile(
    traits: TraitSet,
    color: str,
    shape: ShapeConfig = ShapeConfig(),
    builder: RingBuilder = build_rings,
) -> RenderProfile:
    """
    Build a render profile without caching.

    core = clamp(core_radius * core_base_scale, 0.08, 1)
    halo = clamp(core * glow_spread * (0.55 + 0.9 * core_glow), 0.08, 2.8)
    stroke = clamp(outline_weight * line_smoothing_scale, 0.7, 4)
    """
    rings = builder(traits, shape)
    core = _clamp(traits.core_radius * shape.core_base_scale, 0.08, 1.0)
    halo = _clamp(core * shape.glow_spread * (0.55 + 0.9 * traits.core_glow), 0.08, 2.8)
    stroke = _clamp(traits.outline_weight * shape.line_smoothing_scale, 0.7, 4.0)

    return RenderProfile(
        color=color,
        traits=traits,
        outer_points=rings.outer,
        inner_points=rings.inner,
        radii=rings.radii,
        palette=build_palette(color),
        core_radius=core,
        halo_radius=halo,
        stroke_weight=stroke,
    )


class ProfileCache:
    """
    Bounded memo of render profiles keyed on (color, traits).

    Entries are evicted oldest-inserted first once the cache holds more than
    `capacity` profiles. Hits do not refresh an entry's position.

    Example:
        >>> cache = ProfileCache(capacity=4)
        >>> a = cache.get(TraitSet.defaults(), "#ff8800")
        >>> cache.get(TraitSet.defaults(), "#FF8800") is a
        True
    """

    def __init__(
        self,
        capacity: int = PROFILE_CACHE_CAPACITY,
        builder: RingBuilder = build_rings,
        shape: ShapeConfig = ShapeConfig(),
    ) -> None:
        if capacity <= 0:
            raise ValueError("Cache capacity must be positive")
        self.capacity = capacity
        self.builder = builder
        self.shape = shape
        self._entries: dict[str, RenderProfile] = {}
        self.build_count = 0
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item: tuple[TraitSet, str]) -> bool:
        traits, color = item
        return profile_key(normalize_traits(traits), color) in self._entries

    def get(self, traits: TraitSet, color: object) -> RenderProfile:
        """
        Return the profile for (traits, color), building it on a miss.

        Traits are normalized first, so equivalent trait mappings share an
        entry. Colors are canonicalized ("#ABC" and "#aabbcc" share an entry)
        and malformed colors fall back to white.
        """
        traits = normalize_traits(traits)
        color = canonical_hex(color)
        key = profile_key(traits, color)

        cached = self._entries.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        profile = build_profile(traits, color, self.shape, self.builder)
        self.build_count += 1
        self._entries[key] = profile

        while len(self._entries) > self.capacity:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Evicted profile %s", oldest.split("|", 1)[0])

        return profile

    get_profile = get

    def clear(self) -> None:
        """Drop every entry; counters are kept."""
        self._entries.clear()
