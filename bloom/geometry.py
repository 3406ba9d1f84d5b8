"""
Petal geometry: TraitSet -> two closed polygon rings.

The silhouette is a generalized superformula

    r(phi) = (|cos(m*phi/4)|^n2 + |sin(m*phi/4)|^n3)^(-1/n1)

multiplied by layered modulations, in order:

1. Petal stretch / crest sinusoids
2. Mandala fold (angle pulled toward its symmetry-sector midpoint)
3. Sector-warp pulse
4. Ring-band wobble
5. Fractal wave
6. Inner-void compression
7. Ring-contrast multiplier
8. Depth-echo ripple

Rings are closed implicitly: the first point is not repeated at the end.
Everything is vectorized numpy, so identical traits give identical arrays.
"""

import math
from typing import NamedTuple

import numpy as np

from bloom.config import TAU, TRAIT_RANGES, ShapeConfig, TraitSet


class FlowerRings(NamedTuple):
    """Outer petal silhouette and inner core silhouette, each (N, 2)."""

    outer: np.ndarray
    inner: np.ndarray
    radii: np.ndarray  # Normalized outer radii, max 1
    angles: np.ndarray  # Output angle of each point (radians)
    inner_scale: float

    @property
    def sample_count(self) -> int:
        return len(self.radii)


def superformula(
    phi: np.ndarray | float,
    m: float,
    n1: float,
    n2: float,
    n3: float,
    a: float = 1.0,
    b: float = 1.0,
) -> np.ndarray:
    """
    Superformula radius at angle(s) phi.

    Non-finite or non-positive intermediate values give a zero radius
    (a degenerate point) instead of propagating inf/NaN.
    """
    phi = np.asarray(phi, dtype=np.float64)
    if n1 == 0 or not math.isfinite(n1):
        return np.zeros_like(phi)
    with np.errstate(all="ignore"):
        t1 = np.abs(np.cos(m * phi / 4.0) / a) ** n2
        t2 = np.abs(np.sin(m * phi / 4.0) / b) ** n3
        base = t1 + t2
        r = np.power(base, -1.0 / n1)
    bad = ~np.isfinite(base) | (base <= 0) | ~np.isfinite(r)
    return np.where(bad, 0.0, r)


def mandala_fold(phi: np.ndarray, symmetry: float, depth: float) -> np.ndarray:
    """
    Blend each angle toward the midpoint of its rotational-symmetry sector.

    depth = 0 leaves angles untouched; depth = 1 snaps every angle in a
    sector onto its midpoint, repeating the sector like a kaleidoscope.
    """
    sectors = max(1.0, float(symmetry))
    width = TAU / sectors
    mid = (np.floor(phi / width) + 0.5) * width
    return phi + (mid - phi) * min(1.0, max(0.0, depth))


def sample_count(traits: TraitSet, shape: ShapeConfig = ShapeConfig()) -> int:
    """
    Number of samples per ring.

    Blends the normalized petal-symmetry (m) and petal-count traits so busier
    flowers get more points, inside [min_segments, max_segments].
    """
    t_m = TRAIT_RANGES["m"].fraction(traits.m)
    t_petal = TRAIT_RANGES["petal_count"].fraction(traits.petal_count)
    t = 0.5 * (t_m + t_petal)
    count = round(shape.min_segments + (shape.max_segments - shape.min_segments) * t)
    return int(min(shape.max_segments, max(shape.min_segments, count)))


def inner_ring_scale(traits: TraitSet, shape: ShapeConfig = ShapeConfig()) -> float:
    """Overall scale of the inner ring relative to the outer one."""
    scale = (
        traits.core_radius
        + shape.inner_scale_offset
        - shape.inner_void_weight * traits.inner_void
    )
    return min(shape.inner_scale_max, max(shape.inner_scale_min, scale))


def modulated_radii(
    traits: TraitSet, phi: np.ndarray, shape: ShapeConfig = ShapeConfig()
) -> tuple[np.ndarray, np.ndarray]:
    """
    Radius of the outer silhouette at each sample angle.

    Returns:
        (radius, theta): unnormalized radii and the folded angles they were
        evaluated at
    """
    t = traits

    # 1. Petal waves on the raw sample angle
    petal = np.sin(phi * t.petal_count * t.petal_spread * 0.55 + t.rot)
    crest = np.cos(phi * (t.m / 2.0 + t.petal_count * 0.13) + 2.0 * t.rot)
    wave = (
        1.0
        + shape.petal_amplitude * t.petal_stretch * petal
        + shape.crest_amplitude * t.petal_crest * crest
    )

    # 2. Everything after the fold sees the folded angle
    theta = mandala_fold(phi, t.symmetry, t.mandala_depth)
    radius = superformula(theta + t.rot, t.m, t.n1, t.n2, t.n3) * wave

    # 3. Sector warp pulse, one bump per sector
    radius = radius * (1.0 + t.sector_warp * np.cos(t.symmetry * theta))

    # 4. Ring-band wobble
    radius = radius * (
        1.0 + shape.band_amplitude * np.sin(0.5 * t.ring_bands * t.symmetry * theta)
    )

    # 5. Three-octave fractal wave at petal frequency
    fractal = sum(
        0.5**octave * np.sin(2.0**octave * t.petal_count * theta)
        for octave in (1, 2, 3)
    )
    radius = radius * (1.0 + t.fractal_intensity * fractal)

    # 6. Inner void pinches the valleys between petals
    radius = radius * (1.0 - t.inner_void * 0.5 * (1.0 - np.cos(t.petal_count * theta)))

    # 7. Ring contrast
    radius = radius * (1.0 + (t.ring_contrast - 1.0) * np.cos(t.ring_bands * theta))

    # 8. Depth echo
    radius = radius * (1.0 + t.depth_echo * np.sin(3.0 * t.petal_count * theta + t.rot))

    return radius, theta


def build_rings(traits: TraitSet, shape: ShapeConfig = ShapeConfig()) -> FlowerRings:
    """
    Build the outer and inner rings of a flower.

    Args:
        traits: Valid trait set (see bloom.synthesizer.normalize_traits)
        shape: Geometry constants

    Returns:
        FlowerRings with read-only point arrays. Radii are finite, >= 0 and
        normalized so the widest point of the outer ring sits at radius 1.
    """
    n = sample_count(traits, shape)
    phi = TAU * np.arange(n, dtype=np.float64) / n

    radius, theta = modulated_radii(traits, phi, shape)
    radius = np.nan_to_num(radius, nan=0.0, posinf=0.0, neginf=0.0)
    radius = np.maximum(radius, 0.0)

    peak = float(np.max(radius)) if n else 0.0
    if peak > 0 and math.isfinite(peak):
        radius = radius / peak

    angles = theta + traits.rot + traits.radial_twist * radius
    outer = np.column_stack([radius * np.cos(angles), radius * np.sin(angles)])

    scale = inner_ring_scale(traits, shape)
    inner = outer * scale

    for arr in (outer, inner, radius, angles):
        arr.setflags(write=False)

    return FlowerRings(
        outer=outer,
        inner=inner,
        radii=radius,
        angles=angles,
        inner_scale=scale,
    )
