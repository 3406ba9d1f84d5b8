"""
Time-based lifecycle of a planted flower.

State machine per instance, driven by age = now - planted_at:

    PLANTED -> GROWING -> MATURE -> WITHERING -> REMOVED

- growth = clamp01(age / growth_duration)
- vitality is 1 until wither_start = life_span - withering_duration, then
  falls linearly to exactly 0 at age = life_span
- the instance is removed once age >= life_span

Every query takes an explicit `now` (or age); nothing here reads a clock.
"""

from enum import Enum
from typing import NamedTuple, Protocol

import numpy as np

from bloom.color import dim_color
from bloom.config import GardenConfig


class LifeStage(Enum):
    PLANTED = "planted"
    GROWING = "growing"
    MATURE = "mature"
    WITHERING = "withering"
    REMOVED = "removed"


class Lifespan(Protocol):
    planted_at: float
    life_span: float
    withering_duration: float
    color: str


class RenderHints(NamedTuple):
    """Per-frame drawing parameters of one instance."""

    growth: float
    vitality: float
    scale: float  # Group scale, 0.25 at planting up to 1
    alpha: float  # Overall opacity
    wither_overlay: float  # Opacity of the dried-out overlay
    color: str  # Base color dimmed by vitality
    stage: LifeStage


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def growth(age: float, growth_duration: float = GardenConfig.growth_duration) -> float:
    """Fraction of the growth animation completed; non-decreasing, saturates at 1."""
    if growth_duration <= 0:
        return 1.0 if age >= 0 else 0.0
    return _clamp01(age / growth_duration)


def vitality(age: float, life_span: float, withering_duration: float) -> float:
    """
    Remaining vitality in [0, 1].

    Non-increasing in age and exactly 0 from age = life_span onwards.
    """
    if age >= life_span:
        return 0.0
    if withering_duration <= 0:
        return 1.0
    wither_start = life_span - withering_duration
    if age <= wither_start:
        return 1.0
    return _clamp01((life_span - age) / withering_duration)


def stage(
    age: float,
    life_span: float,
    withering_duration: float,
    growth_duration: float = GardenConfig.growth_duration,
) -> LifeStage:
    """Lifecycle stage at a given age."""
    if age >= life_span:
        return LifeStage.REMOVED
    if age > life_span - withering_duration:
        return LifeStage.WITHERING
    if age <= 0:
        return LifeStage.PLANTED
    if growth(age, growth_duration) < 1.0:
        return LifeStage.GROWING
    return LifeStage.MATURE


def age_of(instance: Lifespan, now: float) -> float:
    return now - instance.planted_at


def is_expired(instance: Lifespan, now: float) -> bool:
    """True once the instance has outlived its life span."""
    return age_of(instance, now) >= instance.life_span


def draw_life_span(
    rng: np.random.Generator, config: GardenConfig = GardenConfig()
) -> tuple[float, float]:
    """
    Draw a (life_span, withering_duration) pair for a new planting.

    Both are the configured base scaled by a uniform jitter factor, drawn
    once at planting and then frozen. Withering never exceeds the life span.
    """
    life_span = config.base_life_span * float(rng.uniform(*config.life_span_jitter))
    withering = config.base_withering * float(rng.uniform(*config.withering_jitter))
    return life_span, min(withering, life_span)


def render_hints(
    instance: Lifespan, now: float, config: GardenConfig = GardenConfig()
) -> RenderHints:
    """
    Compute the drawing parameters of an instance at time `now`.

    scale   = 0.25 + 0.75 * growth
    alpha   = (0.35 + 0.65 * growth) * (0.25 + 0.75 * vitality)
    overlay = min(1, 1.15 * (1 - vitality))
    """
    age = age_of(instance, now)
    g = growth(age, config.growth_duration)
    v = vitality(age, instance.life_span, instance.withering_duration)
    return RenderHints(
        growth=g,
        vitality=v,
        scale=0.25 + 0.75 * g,
        alpha=(0.35 + 0.65 * g) * (0.25 + 0.75 * v),
        wither_overlay=min(1.0, 1.15 * (1.0 - v)),
        color=dim_color(instance.color, v),
        stage=stage(age, instance.life_span, instance.withering_duration, config.growth_duration),
    )
