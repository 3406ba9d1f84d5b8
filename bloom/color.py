"""
Perceptual color resolution: coordinate -> "#rrggbb".

Pipeline:
1. Ten smoothed harmonic signals (COLOR_SEEDS) at the coordinate
2. Hue wave and visibility gate from fixed signal weights
3. Directional blend of CIELAB hue anchors with an exponential kernel
4. Lab -> linear RGB, hue/saturation extraction
5. Lightness bisection until relative luminance matches the gate target
6. Linear RGB -> sRGB hex

Step 5 gives every flower the brightness its gate asks for regardless of
hue, which plain HSL lightness does not.
"""

import colorsys
import logging
import math
from collections.abc import Sequence
from typing import NamedTuple

import numpy as np
from jax import Array

from bloom.config import COLOR_SEEDS, CUBE_SIZE, TAU, ColorConfig
from bloom.harmonic import HarmonicTable, smoothed_signal

logger = logging.getLogger(__name__)

COLOR_TABLE = HarmonicTable.from_seeds(COLOR_SEEDS)

# Rec. 709 / sRGB relative luminance weights
LUMINANCE_WEIGHTS = np.array([0.2126, 0.7152, 0.0722])

# D65 reference white
_XN, _YN, _ZN = 0.95047, 1.0, 1.08883
_LAB_EPSILON = 0.008856
_LAB_KAPPA = 903.3

# XYZ (D65) -> linear sRGB
_XYZ_TO_RGB = np.array(
    [
        [3.2404542, -1.5371385, -0.4985314],
        [-0.9692660, 1.8760108, 0.0415560],
        [0.0556434, -0.2040259, 1.0572252],
    ]
)

FALLBACK_COLOR = "#ffffff"


class HueAnchor(NamedTuple):
    """Reference color in CIELAB; its (a, b) direction is its hue direction."""

    name: str
    lab: tuple[float, float, float]
    bias: float


HUE_ANCHORS: tuple[HueAnchor, ...] = (
    HueAnchor("rose", (62.0, 58.0, 12.0), 1.0),
    HueAnchor("amber", (76.0, 16.0, 64.0), 0.95),
    HueAnchor("leaf", (70.0, -46.0, 44.0), 0.85),
    HueAnchor("teal", (68.0, -38.0, -12.0), 0.9),
    HueAnchor("azure", (58.0, 4.0, -50.0), 1.0),
    HueAnchor("violet", (50.0, 44.0, -44.0), 0.95),
)

_ANCHOR_LAB = np.array([a.lab for a in HUE_ANCHORS], dtype=np.float64)
_ANCHOR_BIAS = np.array([a.bias for a in HUE_ANCHORS], dtype=np.float64)
_ANCHOR_DIR = _ANCHOR_LAB[:, 1:] / np.linalg.norm(_ANCHOR_LAB[:, 1:], axis=1, keepdims=True)


class ColorResolution(NamedTuple):
    """Final color plus the intermediate values that produced it."""

    hex: str
    hue_wave: float
    gate: float
    target_luminance: float
    luminance: float  # Achieved before 8-bit quantization
    lightness: float  # HLS lightness found by bisection
    lab: tuple[float, float, float]  # Blended anchor color
    weights: tuple[float, ...]  # Convex anchor weights


# =============================================================================
# CONVERSIONS
# =============================================================================


def srgb_to_linear(c: np.ndarray | float) -> np.ndarray:
    """Decode sRGB channel values in [0, 1] to linear light."""
    c = np.asarray(c, dtype=np.float64)
    return np.where(c > 0.04045, ((c + 0.055) / 1.055) ** 2.4, c / 12.92)


def linear_to_srgb(c: np.ndarray | float) -> np.ndarray:
    """Encode linear channel values in [0, 1] to sRGB."""
    c = np.clip(np.asarray(c, dtype=np.float64), 0.0, 1.0)
    return np.where(c > 0.0031308, 1.055 * c ** (1 / 2.4) - 0.055, c * 12.92)


def lab_to_linear_rgb(lab: Sequence[float] | np.ndarray) -> np.ndarray:
    """Convert one CIELAB color (D65) to unclipped linear RGB."""
    L, a, b = (float(v) for v in lab)
    fy = (L + 16.0) / 116.0
    fx = a / 500.0 + fy
    fz = fy - b / 200.0

    x = fx**3 if fx**3 > _LAB_EPSILON else (116.0 * fx - 16.0) / _LAB_KAPPA
    y = ((L + 16.0) / 116.0) ** 3 if L > _LAB_KAPPA * _LAB_EPSILON else L / _LAB_KAPPA
    z = fz**3 if fz**3 > _LAB_EPSILON else (116.0 * fz - 16.0) / _LAB_KAPPA

    xyz = np.array([x * _XN, y * _YN, z * _ZN])
    return _XYZ_TO_RGB @ xyz


def relative_luminance(rgb_linear: Sequence[float] | np.ndarray) -> float:
    """Relative luminance of a linear RGB color."""
    return float(LUMINANCE_WEIGHTS @ np.asarray(rgb_linear, dtype=np.float64))


def parse_hex(color: str) -> tuple[int, int, int] | None:
    """Parse "#rgb" or "#rrggbb" into 8-bit channels; None if malformed."""
    if not isinstance(color, str):
        return None
    color = color.strip().lower()
    if not color.startswith("#"):
        return None
    color = color[1:]
    if len(color) == 3:
        color = color[0] * 2 + color[1] * 2 + color[2] * 2
    if len(color) != 6:
        return None
    try:
        return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)
    except ValueError:
        return None


def is_hex_color(color: object) -> bool:
    return isinstance(color, str) and parse_hex(color) is not None


def canonical_hex(color: object) -> str:
    """Lower-case "#rrggbb" form of a color; malformed input gives FALLBACK_COLOR."""
    rgb = parse_hex(color) if isinstance(color, str) else None
    if rgb is None:
        logger.debug("Unparseable color %r, using %s", color, FALLBACK_COLOR)
        return FALLBACK_COLOR
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def hex_to_linear(color: str) -> np.ndarray:
    """Decode a hex color into linear RGB in [0, 1]."""
    rgb = parse_hex(color)
    if rgb is None:
        raise ValueError(f"Not a hex color: {color!r}")
    return srgb_to_linear(np.array(rgb, dtype=np.float64) / 255.0)


def srgb_to_hex(rgb: Sequence[float] | np.ndarray) -> str:
    """Encode sRGB channels in [0, 1] as "#rrggbb"."""
    ints = np.round(np.clip(np.asarray(rgb, dtype=np.float64), 0.0, 1.0) * 255.0)
    r, g, b = (int(v) for v in ints)
    return f"#{r:02x}{g:02x}{b:02x}"


def linear_to_hex(rgb_linear: Sequence[float] | np.ndarray) -> str:
    return srgb_to_hex(linear_to_srgb(rgb_linear))


# =============================================================================
# LUMINANCE MATCHING
# =============================================================================


def match_luminance(
    hue: float, saturation: float, target: float, steps: int = 16
) -> tuple[np.ndarray, float]:
    """
    Find the HLS lightness whose linear RGB has the target luminance.

    Every RGB channel is non-decreasing in HLS lightness for a fixed hue and
    saturation, so luminance is monotonic in lightness and bisection over
    [0, 1] converges.

    Args:
        hue: HLS hue in [0, 1)
        saturation: HLS saturation in [0, 1]
        target: Target relative luminance in [0, 1]
        steps: Number of bisection steps (fixed, so results are reproducible)

    Returns:
        (linear_rgb, lightness)
    """
    target = min(1.0, max(0.0, target))
    lo, hi = 0.0, 1.0
    for _ in range(steps):
        mid = 0.5 * (lo + hi)
        if relative_luminance(colorsys.hls_to_rgb(hue, mid, saturation)) < target:
            lo = mid
        else:
            hi = mid
    lightness = 0.5 * (lo + hi)
    return np.array(colorsys.hls_to_rgb(hue, lightness, saturation)), lightness


# =============================================================================
# RESOLVER
# =============================================================================


def blend_anchors(direction: np.ndarray, sharpness: float) -> tuple[np.ndarray, np.ndarray]:
    """
    Convex combination of the hue anchors around a unit (a, b) direction.

    weight_i = bias_i * exp(sharpness * dot(direction, anchor_dir_i))

    Returns:
        (lab, weights)
    """
    logits = sharpness * (_ANCHOR_DIR @ direction)
    # Shifting by the max keeps exp finite; the shift cancels on normalization
    weights = _ANCHOR_BIAS * np.exp(logits - np.max(logits))
    weights = weights / np.sum(weights)
    return weights @ _ANCHOR_LAB, weights


def resolve_color_details(
    coordinate: Sequence[float] | Array,
    config: ColorConfig = ColorConfig(),
    cube_size: float = CUBE_SIZE,
) -> ColorResolution:
    """
    Resolve the display color of a coordinate, keeping intermediate values.

    Args:
        coordinate: (x, y, z) inside the embedding cube
        config: Resolver constants
        cube_size: Side length L of the cube

    Returns:
        ColorResolution
    """
    raw = np.asarray(
        smoothed_signal(
            COLOR_TABLE,
            coordinate,
            radius=config.smoothing_radius * cube_size,
            center_weight=config.center_weight,
            cube_size=cube_size,
        ),
        dtype=np.float64,
    )
    raw = np.where(np.isfinite(raw), raw, 0.5)
    sig = dict(zip(COLOR_TABLE.names, raw))

    hw = config.hue_weights
    hue_wave = hw[0] * sig["hue_primary"] + hw[1] * sig["hue_secondary"] + hw[2] * sig["hue_detail"]

    gw = config.gate_weights
    gate = (
        gw[0] * sig["saturation"]
        + gw[1] * sig["glow"]
        + gw[2] * sig["luminance"]
        + gw[3] * sig["contrast"]
    )
    gate = min(1.0, max(0.0, float(gate)))

    turn = (hue_wave * config.hue_spread + config.warmth_shift * (sig["warmth"] - 0.5)) % 1.0
    theta = TAU * turn
    direction = np.array([math.cos(theta), math.sin(theta)])

    sharpness = config.sharpness_min + config.sharpness_span * sig["sharpness"]
    lab, weights = blend_anchors(direction, sharpness)
    chroma = config.chroma_min + config.chroma_span * sig["chroma"]
    lab = np.array([lab[0], lab[1] * chroma, lab[2] * chroma])

    rgb = np.clip(lab_to_linear_rgb(lab), 0.0, 1.0)
    hue, _, saturation = colorsys.rgb_to_hls(*rgb)
    gain = config.saturation_min_gain + config.saturation_gain_span * sig["saturation"]
    saturation = min(1.0, max(config.saturation_floor, saturation * gain))

    target = config.luminance_min + config.luminance_span * gate
    matched, lightness = match_luminance(hue, saturation, target, config.bisection_steps)

    return ColorResolution(
        hex=linear_to_hex(matched),
        hue_wave=float(hue_wave),
        gate=gate,
        target_luminance=float(target),
        luminance=relative_luminance(matched),
        lightness=float(lightness),
        lab=(float(lab[0]), float(lab[1]), float(lab[2])),
        weights=tuple(float(w) for w in weights),
    )


def resolve_color(
    coordinate: Sequence[float] | Array,
    config: ColorConfig = ColorConfig(),
    cube_size: float = CUBE_SIZE,
) -> str:
    """Resolve the "#rrggbb" display color of a coordinate."""
    return resolve_color_details(coordinate, config, cube_size).hex


# =============================================================================
# PALETTE HELPERS
# =============================================================================


def shift_color(base: str, shift_h: float, mult_s: float = 1.0, mult_l: float = 1.0) -> str:
    """
    Perturb a color in HSL space.

    Hue is rotated by shift_h turns; saturation and lightness are scaled and
    clamped to [0.05, 1] and [0.04, 0.95].
    """
    rgb = parse_hex(base)
    if rgb is None:
        logger.debug("Unparseable base color %r, using %s", base, FALLBACK_COLOR)
        rgb = parse_hex(FALLBACK_COLOR)
    h, l, s = colorsys.rgb_to_hls(*(c / 255.0 for c in rgb))
    s = min(1.0, max(0.05, s * mult_s))
    l = min(0.95, max(0.04, l * mult_l))
    h = (h + shift_h) % 1.0
    return srgb_to_hex(colorsys.hls_to_rgb(h, l, s))


def dim_color(color: str, factor: float) -> str:
    """Scale a color's linear intensity by factor in [0, 1]."""
    rgb = parse_hex(color)
    if rgb is None:
        rgb = parse_hex(FALLBACK_COLOR)
    factor = min(1.0, max(0.0, factor))
    linear = srgb_to_linear(np.array(rgb, dtype=np.float64) / 255.0)
    return linear_to_hex(linear * factor)
