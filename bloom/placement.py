"""
Collision-avoiding placement of flowers and their labels.

Both searches walk concentric rings around a candidate point: a fixed
sequence of radius multipliers, a fixed number of angular samples per ring,
and a start angle hashed from the candidate position so repeated plantings
near the same spot fan out the same way every time.

Everything here is a pure function of the candidate and an immutable
sequence of already-placed instances. When every ring sample fails, the
first ring sample is clamped into bounds and returned flagged as a fallback;
placement never fails outright.
"""

import math
from collections.abc import Iterator, Sequence
from typing import NamedTuple, Protocol

from bloom.config import TAU, GardenConfig


class Footprint(Protocol):
    """What placement needs to know about an already-placed instance."""

    x: float
    y: float
    label_offset: tuple[float, float]
    label_radius: float


class Placement(NamedTuple):
    x: float
    y: float
    fallback: bool
    attempts: int  # Ring samples tested


class LabelPlacement(NamedTuple):
    dx: float  # Offset of the label centre from the flower centre
    dy: float
    radius: float
    fallback: bool


def start_angle(x: float, y: float) -> float:
    """
    Deterministic pseudo-random angle in [0, 2*pi) for a position.

    Uses the classic fract(sin(dot) * 43758.5453) hash. Non-finite positions
    start at 0.
    """
    if not (math.isfinite(x) and math.isfinite(y)):
        return 0.0
    h = math.sin(x * 12.9898 + y * 78.233) * 43758.5453
    return (h - math.floor(h)) * TAU


def ring_candidates(
    x: float,
    y: float,
    base_radius: float,
    multipliers: Sequence[float],
    samples: int,
) -> Iterator[tuple[float, float]]:
    """Yield ring sample points around (x, y), innermost ring first."""
    start = start_angle(x, y)
    for multiplier in multipliers:
        r = base_radius * multiplier
        for k in range(samples):
            a = start + TAU * k / samples
            yield x + r * math.cos(a), y + r * math.sin(a)


def _in_bounds(x: float, y: float, margin: float, size: float) -> bool:
    return margin <= x <= size - margin and margin <= y <= size - margin


def _clamp_into(value: float, margin: float, size: float) -> float:
    return min(size - margin, max(margin, value))


def _far_enough(x: float, y: float, ox: float, oy: float, distance: float) -> bool:
    dx = x - ox
    dy = y - oy
    return dx * dx + dy * dy >= distance * distance


def _finite_candidate(x: float, y: float, size: float) -> tuple[float, float]:
    """Replace a non-finite coordinate by the plane centre."""
    x = x if math.isfinite(x) else size / 2.0
    y = y if math.isfinite(y) else size / 2.0
    return x, y


def label_radius(word: str, config: GardenConfig = GardenConfig()) -> float:
    """Estimated label footprint radius from text length."""
    r = len(word) * config.label_char_width + config.label_padding
    return min(config.label_radius_max, max(config.label_radius_min, r))


def place_flower(
    x: float,
    y: float,
    existing: Sequence[Footprint],
    config: GardenConfig = GardenConfig(),
) -> Placement:
    """
    Resolve a non-overlapping position for a new flower.

    Args:
        x, y: Candidate position on the plane
        existing: Already-placed instances, in discovery order
        config: Plane size, search rings and separation

    Returns:
        Placement. Non-finite coordinates are replaced by the plane centre.
        With no existing instances the candidate is accepted unchanged.
        Otherwise the first ring sample inside the edge margin, at least
        min_separation from every existing centre and clear of every
        existing label wins.
    """
    x, y = _finite_candidate(x, y, config.size)
    if not existing:
        return Placement(x, y, fallback=False, attempts=0)

    attempts = 0
    first = None
    for cx, cy in ring_candidates(
        x, y, config.flower_search_radius, config.flower_ring_multipliers, config.angular_samples
    ):
        attempts += 1
        if first is None:
            first = (cx, cy)
        if not _in_bounds(cx, cy, config.edge_margin, config.size):
            continue
        if all(
            _far_enough(cx, cy, e.x, e.y, config.min_separation)
            and _far_enough(
                cx,
                cy,
                e.x + e.label_offset[0],
                e.y + e.label_offset[1],
                config.footprint_radius + e.label_radius,
            )
            for e in existing
        ):
            return Placement(cx, cy, fallback=False, attempts=attempts)

    fx = _clamp_into(first[0], config.edge_margin, config.size)
    fy = _clamp_into(first[1], config.edge_margin, config.size)
    return Placement(fx, fy, fallback=True, attempts=attempts)


def place_label(
    x: float,
    y: float,
    word: str,
    existing: Sequence[Footprint],
    config: GardenConfig = GardenConfig(),
) -> LabelPlacement:
    """
    Resolve a label offset around an already-placed flower at (x, y).

    A label position is accepted when it is inside the label margin, clear of
    every other flower body and clear of every other label.
    """
    x, y = _finite_candidate(x, y, config.size)
    radius = label_radius(word, config)
    first = None
    for lx, ly in ring_candidates(
        x, y, config.label_search_radius, config.label_ring_multipliers, config.angular_samples
    ):
        if first is None:
            first = (lx, ly)
        if not _in_bounds(lx, ly, config.label_margin, config.size):
            continue
        clear = True
        for e in existing:
            if not _far_enough(lx, ly, e.x, e.y, radius + config.footprint_radius):
                clear = False
                break
            ox = e.x + e.label_offset[0]
            oy = e.y + e.label_offset[1]
            if not _far_enough(lx, ly, ox, oy, radius + e.label_radius):
                clear = False
                break
        if clear:
            return LabelPlacement(lx - x, ly - y, radius, fallback=False)

    fx = _clamp_into(first[0], config.label_margin, config.size)
    fy = _clamp_into(first[1], config.label_margin, config.size)
    return LabelPlacement(fx - x, fy - y, radius, fallback=True)
