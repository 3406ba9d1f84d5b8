"""
Configuration and type definitions for the flower generator.

This module defines all constants, trait tables and configuration for
turning a semantic coordinate into a flower and planting it in the garden.

Trait Vector:
    m, n1, n2, n3: Superformula symmetry and exponents
    rot: Base rotation of the silhouette
    petal_*: Petal wave count, stretch, crest and spread
    core_*, rim_width, outline_weight: Core disc and stroke styling
    symmetry, mandala_depth: Kaleidoscope folding
    ring_bands, radial_twist, inner_void: Ring structure
    fractal_intensity, sector_warp, ring_contrast, depth_echo: Detail layers

Every trait is bounded by TRAIT_RANGES. Integer traits are whole numbers.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple

TAU = 2.0 * math.pi

# Side length of the embedding cube, centred on the origin
CUBE_SIZE = 1000.0

# Maximum number of cached render profiles
PROFILE_CACHE_CAPACITY = 180


class TraitRange(NamedTuple):
    """Closed interval a trait value must lie in."""

    min: float
    max: float

    @property
    def span(self) -> float:
        return self.max - self.min

    def clamp(self, value: float) -> float:
        """Clamp into the range; non-finite values fall back to the minimum."""
        if not math.isfinite(value):
            return self.min
        return max(self.min, min(self.max, value))

    def fraction(self, value: float) -> float:
        """Position of value inside the range, in [0, 1]."""
        if self.span <= 0:
            return 0.0
        return max(0.0, min(1.0, (value - self.min) / self.span))


TRAIT_RANGES: dict[str, TraitRange] = {
    "m": TraitRange(2.0, 12.0),
    "n1": TraitRange(0.5, 10.0),
    "n2": TraitRange(0.5, 10.0),
    "n3": TraitRange(0.5, 10.0),
    "rot": TraitRange(0.0, TAU),
    "petal_count": TraitRange(3.0, 12.0),
    "petal_stretch": TraitRange(0.4, 1.6),
    "petal_crest": TraitRange(0.2, 1.8),
    "petal_spread": TraitRange(0.6, 1.4),
    "core_radius": TraitRange(0.15, 0.5),
    "core_glow": TraitRange(0.1, 1.0),
    "rim_width": TraitRange(0.2, 0.9),
    "outline_weight": TraitRange(0.8, 2.2),
    "symmetry": TraitRange(3.0, 12.0),
    "mandala_depth": TraitRange(0.0, 0.9),
    "ring_bands": TraitRange(1.0, 6.0),
    "radial_twist": TraitRange(-0.6, 0.6),
    "inner_void": TraitRange(0.0, 0.45),
    "fractal_intensity": TraitRange(0.0, 0.35),
    "sector_warp": TraitRange(0.0, 0.3),
    "ring_contrast": TraitRange(0.6, 1.4),
    "depth_echo": TraitRange(0.0, 0.25),
}

# Traits that are rounded to whole numbers after mapping
INTEGER_TRAITS = frozenset({"m", "petal_count", "symmetry", "ring_bands"})

# Values used when a stored flower is missing a trait
TRAIT_DEFAULTS: dict[str, float] = {
    "m": 6.0,
    "n1": 2.0,
    "n2": 2.0,
    "n3": 2.0,
    "rot": 0.0,
    "petal_count": 7.0,
    "petal_stretch": 1.0,
    "petal_crest": 1.0,
    "petal_spread": 1.0,
    "core_radius": 0.32,
    "core_glow": 0.4,
    "rim_width": 0.45,
    "outline_weight": 1.3,
    "symmetry": 6.0,
    "mandala_depth": 0.3,
    "ring_bands": 3.0,
    "radial_twist": 0.0,
    "inner_void": 0.15,
    "fractal_intensity": 0.1,
    "sector_warp": 0.1,
    "ring_contrast": 1.0,
    "depth_echo": 0.08,
}


class TraitSet(NamedTuple):
    """
    Complete set of shape traits for one flower.

    Derived deterministically from a coordinate (see bloom.synthesizer) and
    carried alongside every planted instance. Field order is the canonical
    serialization order used for cache keys.
    """

    m: float  # Superformula rotational symmetry
    n1: float  # Superformula outer exponent
    n2: float  # Superformula cosine exponent
    n3: float  # Superformula sine exponent
    rot: float  # Base rotation (radians)
    petal_count: float  # Petal wave frequency
    petal_stretch: float  # Petal wave amplitude
    petal_crest: float  # Crest wave amplitude
    petal_spread: float  # Petal wave frequency scale
    core_radius: float  # Core disc size
    core_glow: float  # Halo spread around the core
    rim_width: float  # Rim thickness of the rendered quad
    outline_weight: float  # Stroke weight multiplier
    symmetry: float  # Mandala sector count
    mandala_depth: float  # 0 = no fold, 1 = snapped to sector midpoints
    ring_bands: float  # Ring wobble frequency
    radial_twist: float  # Angular bend proportional to radius
    inner_void: float  # Compression between petals
    fractal_intensity: float  # Amplitude of the octave wave
    sector_warp: float  # Per-sector pulse amplitude
    ring_contrast: float  # Band contrast multiplier
    depth_echo: float  # Fine ripple amplitude

    @classmethod
    def defaults(cls) -> "TraitSet":
        """Trait set built from TRAIT_DEFAULTS."""
        return cls(**TRAIT_DEFAULTS)

    def is_valid(self) -> bool:
        """Check that every trait is finite, in range, and whole where required."""
        for name, value in self._asdict().items():
            bounds = TRAIT_RANGES[name]
            if not math.isfinite(value):
                return False
            if value < bounds.min or value > bounds.max:
                return False
            if name in INTEGER_TRAITS and value != round(value):
                return False
        return True


TRAIT_NAMES: tuple[str, ...] = TraitSet._fields


@dataclass(frozen=True)
class HarmonicSeed:
    """
    Constants of one three-term harmonic signal.

    signal(x, y, z) = sin(f0·x + p0) + sin(f1·y + p1) + sin(f2·z + p2)

    over coordinates normalized by the cube size.
    """

    freq: tuple[float, float, float]
    phase: tuple[float, float, float]

    def __post_init__(self) -> None:
        if len(self.freq) != 3 or len(self.phase) != 3:
            raise ValueError("Harmonic seeds need exactly three terms")


# Per-trait signal constants. Distinct frequencies and phases keep traits
# decorrelated.
TRAIT_SEEDS: dict[str, HarmonicSeed] = {
    "m": HarmonicSeed(freq=(1.3, 2.7, 3.1), phase=(0.1, 0.5, 0.8)),
    "n1": HarmonicSeed(freq=(2.1, 1.4, 4.2), phase=(0.3, 0.2, 0.9)),
    "n2": HarmonicSeed(freq=(1.7, 3.3, 1.1), phase=(0.7, 0.4, 0.2)),
    "n3": HarmonicSeed(freq=(3.9, 2.5, 1.9), phase=(0.5, 0.8, 0.1)),
    "rot": HarmonicSeed(freq=(0.8, 4.1, 2.3), phase=(0.2, 0.6, 0.4)),
    "petal_count": HarmonicSeed(freq=(2.3, 1.9, 3.7), phase=(0.4, 0.9, 0.3)),
    "petal_stretch": HarmonicSeed(freq=(2.9, 1.1, 2.4), phase=(0.8, 0.3, 1.2)),
    "petal_crest": HarmonicSeed(freq=(1.5, 3.8, 1.3), phase=(0.2, 1.0, 0.7)),
    "petal_spread": HarmonicSeed(freq=(3.6, 2.2, 1.4), phase=(0.9, 0.1, 0.5)),
    "core_radius": HarmonicSeed(freq=(1.8, 2.6, 3.3), phase=(0.35, 0.75, 0.15)),
    "core_glow": HarmonicSeed(freq=(2.5, 1.7, 3.9), phase=(1.2, 0.45, 0.85)),
    "rim_width": HarmonicSeed(freq=(1.1, 3.1, 2.7), phase=(0.65, 0.25, 1.05)),
    "outline_weight": HarmonicSeed(freq=(3.4, 1.4, 1.9), phase=(0.15, 0.95, 0.55)),
    "symmetry": HarmonicSeed(freq=(3.1, 1.6, 2.2), phase=(1.1, 0.2, 0.6)),
    "mandala_depth": HarmonicSeed(freq=(2.1, 3.5, 1.6), phase=(0.55, 1.15, 0.35)),
    "ring_bands": HarmonicSeed(freq=(1.2, 3.4, 2.8), phase=(0.6, 1.3, 0.5)),
    "radial_twist": HarmonicSeed(freq=(1.4, 2.3, 3.6), phase=(0.85, 0.05, 0.95)),
    "inner_void": HarmonicSeed(freq=(3.2, 1.8, 2.5), phase=(0.25, 0.65, 1.25)),
    "fractal_intensity": HarmonicSeed(freq=(1.9, 2.9, 1.2), phase=(1.05, 0.35, 0.75)),
    "sector_warp": HarmonicSeed(freq=(2.7, 1.3, 3.4), phase=(0.45, 1.25, 0.15)),
    "ring_contrast": HarmonicSeed(freq=(1.6, 3.7, 2.1), phase=(0.95, 0.55, 0.05)),
    "depth_echo": HarmonicSeed(freq=(3.8, 2.0, 1.7), phase=(0.05, 0.85, 1.15)),
}

# Signals feeding the color resolver. Never shared with TRAIT_SEEDS so that
# shape and color vary independently across the space.
COLOR_SEEDS: dict[str, HarmonicSeed] = {
    "hue_primary": HarmonicSeed(freq=(1.7, 2.9, 1.3), phase=(0.3, 1.4, 0.9)),
    "hue_secondary": HarmonicSeed(freq=(3.3, 1.5, 2.6), phase=(1.0, 0.2, 0.6)),
    "hue_detail": HarmonicSeed(freq=(5.1, 4.3, 6.2), phase=(0.7, 0.9, 0.1)),
    "saturation": HarmonicSeed(freq=(2.2, 1.8, 3.1), phase=(0.4, 0.8, 1.2)),
    "glow": HarmonicSeed(freq=(1.3, 3.6, 2.4), phase=(0.9, 0.3, 0.5)),
    "luminance": HarmonicSeed(freq=(2.6, 1.2, 1.9), phase=(0.1, 1.1, 0.7)),
    "contrast": HarmonicSeed(freq=(3.9, 2.7, 1.5), phase=(0.6, 0.4, 1.3)),
    "chroma": HarmonicSeed(freq=(1.1, 2.1, 3.4), phase=(1.2, 0.6, 0.2)),
    "warmth": HarmonicSeed(freq=(2.8, 3.2, 1.6), phase=(0.5, 1.0, 0.8)),
    "sharpness": HarmonicSeed(freq=(1.9, 1.4, 2.9), phase=(0.8, 0.5, 1.1)),
}


@dataclass(frozen=True)
class ShapeConfig:
    """Constants of the petal geometry builder and render profile."""

    # Sample-count band for one ring
    min_segments: int = 120
    max_segments: int = 360

    # Inner ring scale = clamp(core_radius + offset - void_weight * inner_void)
    inner_scale_min: float = 0.28
    inner_scale_max: float = 0.72
    inner_scale_offset: float = 0.22
    inner_void_weight: float = 0.25

    # Modulation amplitudes
    petal_amplitude: float = 0.22
    crest_amplitude: float = 0.09
    band_amplitude: float = 0.08

    # Profile scalars
    core_base_scale: float = 0.42
    glow_spread: float = 2.2
    line_smoothing_scale: float = 1.0

    def __post_init__(self) -> None:
        if self.min_segments < 3:
            raise ValueError("A ring needs at least three samples")
        if self.max_segments < self.min_segments:
            raise ValueError("max_segments must be >= min_segments")
        if not 0 < self.inner_scale_min <= self.inner_scale_max:
            raise ValueError("Invalid inner scale band")


@dataclass(frozen=True)
class ColorConfig:
    """
    Constants of the perceptual color resolver.

    Signal weights sum to one so the hue wave and the visibility gate stay
    inside [0, 1].
    """

    # Spatial smoothing: center + six axis offsets
    smoothing_radius: float = 0.02  # Fraction of the cube size
    center_weight: float = 0.44

    # Hue wave weights (primary, secondary, detail)
    hue_weights: tuple[float, float, float] = (0.6, 0.3, 0.1)
    hue_spread: float = 3.0  # Hue wave turns per unit signal
    warmth_shift: float = 0.15

    # Visibility gate weights (saturation, glow, luminance, contrast)
    gate_weights: tuple[float, float, float, float] = (0.3, 0.2, 0.35, 0.15)

    # Directional anchor kernel
    sharpness_min: float = 2.5
    sharpness_span: float = 3.5
    chroma_min: float = 0.55
    chroma_span: float = 0.6

    # Saturation retargeting
    saturation_floor: float = 0.05
    saturation_min_gain: float = 0.75
    saturation_gain_span: float = 0.5

    # Luminance target = luminance_min + luminance_span * gate
    luminance_min: float = 0.08
    luminance_span: float = 0.54
    bisection_steps: int = 16

    def __post_init__(self) -> None:
        if not math.isclose(sum(self.hue_weights), 1.0, abs_tol=1e-9):
            raise ValueError("Hue weights must sum to 1")
        if not math.isclose(sum(self.gate_weights), 1.0, abs_tol=1e-9):
            raise ValueError("Gate weights must sum to 1")
        if not 0 < self.center_weight <= 1:
            raise ValueError("Center weight must be in (0, 1]")
        if self.bisection_steps <= 0:
            raise ValueError("Bisection needs at least one step")

    @property
    def offset_weight(self) -> float:
        """Weight of each of the six offset samples."""
        return (1.0 - self.center_weight) / 6.0


@dataclass(frozen=True)
class GardenConfig:
    """
    Garden plane, placement search and lifecycle constants.

    Times are in seconds, distances in garden units.
    """

    # Plane
    size: float = 1000.0
    scroll_speed: float = 5.0

    # Flower bodies
    footprint_radius: float = 34.0
    min_separation: float = 68.0
    flower_search_radius: float = 68.0
    flower_ring_multipliers: tuple[float, ...] = (1.0, 1.2, 1.4, 1.75, 2.1)
    edge_margin: float = 24.0

    # Labels
    label_search_radius: float = 44.0
    label_ring_multipliers: tuple[float, ...] = (0.9, 1.1, 1.35, 1.6, 1.9)
    label_margin: float = 12.0
    label_char_width: float = 3.75
    label_padding: float = 6.0
    label_radius_min: float = 12.0
    label_radius_max: float = 64.0

    # Angular samples per ring (both searches)
    angular_samples: int = 12

    # Lifecycle
    growth_duration: float = 90.0
    base_life_span: float = 6 * 3600.0
    life_span_jitter: tuple[float, float] = (0.7, 1.3)
    base_withering: float = 45 * 60.0
    withering_jitter: tuple[float, float] = (0.6, 1.4)

    # Plantings allowed per session (None = unlimited)
    seed_limit: int | None = 3

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError("Garden size must be positive")
        if self.angular_samples <= 0:
            raise ValueError("Angular samples must be positive")
        if not self.flower_ring_multipliers or not self.label_ring_multipliers:
            raise ValueError("Ring multiplier sequences must not be empty")
        if 2 * self.edge_margin >= self.size:
            raise ValueError("Edge margin leaves no plantable area")
        if self.growth_duration <= 0:
            raise ValueError("Growth duration must be positive")

    @classmethod
    def unlimited(cls) -> "GardenConfig":
        """A garden without a per-session planting budget."""
        return cls(seed_limit=None)

    @classmethod
    def fast(cls) -> "GardenConfig":
        """Short-lived flowers, handy for demos."""
        return cls(
            growth_duration=2.0,
            base_life_span=60.0,
            base_withering=15.0,
            seed_limit=None,
        )
