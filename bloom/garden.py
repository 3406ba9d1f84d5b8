"""
Garden state: the ordered collection of planted flowers and the view position.

The Garden is a single-writer object. `plant` and `prune` mutate the
instance list and are expected to be called from one logical thread (the
per-frame loop of the caller); no locking is done here.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from bloom.config import GardenConfig, TraitSet
from bloom.lifecycle import RenderHints, draw_life_span, is_expired, render_hints
from bloom.placement import place_flower, place_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlantedInstance:
    """One planting event. Frozen once placed."""

    id: str
    x: float
    y: float
    color: str
    traits: TraitSet
    word: str
    planted_at: float  # Epoch seconds
    life_span: float  # Seconds
    withering_duration: float  # Seconds
    label_offset: tuple[float, float] = (0.0, 0.0)
    label_radius: float = 0.0
    placement_fallback: bool = False
    label_fallback: bool = False


class Garden:
    """
    Live flowers on a square plane of side config.size.

    Example:
        >>> garden = Garden(rng=np.random.default_rng(0))
        >>> inst = garden.plant("dawn", "#e07a5f", TraitSet.defaults(), now=0.0, x=500, y=500)
        >>> garden.seeds_remaining
        2
    """

    def __init__(
        self,
        config: GardenConfig = GardenConfig(),
        rng: np.random.Generator | None = None,
        instances: Iterable[PlantedInstance] = (),
    ) -> None:
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng()
        self._instances: list[PlantedInstance] = list(instances)
        self.camera = (config.size / 2.0, config.size / 2.0)
        self.planted_count = 0

    def __len__(self) -> int:
        return len(self._instances)

    @property
    def instances(self) -> tuple[PlantedInstance, ...]:
        return tuple(self._instances)

    @property
    def seeds_remaining(self) -> int | None:
        """Plantings left this session; None when unlimited."""
        if self.config.seed_limit is None:
            return None
        return max(0, self.config.seed_limit - self.planted_count)

    def live(self, now: float) -> list[PlantedInstance]:
        return [inst for inst in self._instances if not is_expired(inst, now)]

    def replace(self, instances: Iterable[PlantedInstance]) -> None:
        """Swap the whole collection, e.g. after the store changed externally."""
        self._instances = list(instances)

    def plant(
        self,
        word: str,
        color: str,
        traits: TraitSet,
        now: float,
        x: float | None = None,
        y: float | None = None,
        instance_id: str | None = None,
    ) -> PlantedInstance | None:
        """
        Place and record a new flower.

        Without a candidate position one is drawn uniformly inside the edge
        margin. Only instances still alive at `now` are considered for
        collisions. Returns None once the session's seed budget is spent.
        """
        remaining = self.seeds_remaining
        if remaining is not None and remaining <= 0:
            logger.info("No seeds left, not planting %r", word)
            return None

        cfg = self.config
        if x is None or y is None:
            x = float(self.rng.uniform(cfg.edge_margin, cfg.size - cfg.edge_margin))
            y = float(self.rng.uniform(cfg.edge_margin, cfg.size - cfg.edge_margin))
        x = min(cfg.size, max(0.0, float(x)))
        y = min(cfg.size, max(0.0, float(y)))

        existing = self.live(now)
        spot = place_flower(x, y, existing, cfg)
        label = place_label(spot.x, spot.y, word, existing, cfg)
        if spot.fallback or label.fallback:
            logger.debug(
                "Fallback placement for %r (flower=%s, label=%s)",
                word,
                spot.fallback,
                label.fallback,
            )

        life_span, withering = draw_life_span(self.rng, cfg)
        instance = PlantedInstance(
            id=instance_id or uuid.uuid4().hex,
            x=spot.x,
            y=spot.y,
            color=color,
            traits=traits,
            word=word,
            planted_at=float(now),
            life_span=life_span,
            withering_duration=withering,
            label_offset=(label.dx, label.dy),
            label_radius=label.radius,
            placement_fallback=spot.fallback,
            label_fallback=label.fallback,
        )
        self._instances.append(instance)
        self.planted_count += 1
        logger.debug("Planted %r at (%.1f, %.1f)", word, spot.x, spot.y)
        return instance

    def prune(self, now: float) -> list[PlantedInstance]:
        """Drop expired instances and return them."""
        kept, removed = [], []
        for inst in self._instances:
            (removed if is_expired(inst, now) else kept).append(inst)
        self._instances = kept
        if removed:
            logger.debug("Pruned %d expired flower(s)", len(removed))
        return removed

    def snapshot(self, now: float) -> list[tuple[PlantedInstance, RenderHints]]:
        """Live instances paired with their render hints at `now`."""
        return [(inst, render_hints(inst, now, self.config)) for inst in self.live(now)]

    def pan(self, dx: float, dy: float) -> tuple[float, float]:
        """Move the view position, clamped to the plane."""
        size = self.config.size
        cx = min(size, max(0.0, self.camera[0] + dx))
        cy = min(size, max(0.0, self.camera[1] + dy))
        self.camera = (cx, cy)
        return self.camera
