"""
Bloom - Words to Flowers Demo

Walks the whole pipeline for a handful of labeled coordinates:
1. synthesize - coordinate -> 22 shape traits
2. resolve_color - coordinate -> luminance-matched hex color
3. ProfileCache - traits + color -> rings, palette, sizes
4. Garden - ring-search placement, then growth and withering over time

Usage:
    python main.py [stars.json] [--out garden.png]
"""

import argparse
import logging

import numpy as np

from bloom import (
    Garden,
    GardenConfig,
    ProfileCache,
    StarRecord,
    parse_star_records,
    select_star,
)
from bloom.records import load_star_file
from bloom.visualization import save_flower, save_garden

DEMO_STARS = [
    {"id": 1, "word": "river", "x": 120.0, "y": -45.0, "z": 300.0},
    {"id": 2, "word": "ember", "x": -220.0, "y": 310.0, "z": -80.0},
    {"id": 3, "word": "lantern", "x": 40.0, "y": 40.0, "z": 40.0},
    {"id": 4, "word": "moss", "x": -400.0, "y": -120.0, "z": 210.0},
    {"id": 5, "word": "comet", "x": 330.0, "y": 260.0, "z": -390.0},
]


def load_stars(path: str | None) -> list[StarRecord]:
    if path:
        stars = load_star_file(path)
        if stars:
            return stars
        print(f"No usable stars in {path}, using built-in words")
    return parse_star_records(DEMO_STARS)


def main() -> None:
    parser = argparse.ArgumentParser(description="Plant flowers from word coordinates")
    parser.add_argument("stars", nargs="?", help="JSON list of {id, word, x, y, z}")
    parser.add_argument("--out", default="garden.png", help="Garden preview path")
    parser.add_argument("--flower-out", default="flower.png", help="Single flower preview path")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("\n" + "=" * 60)
    print("  BLOOM: Procedural Flowers from Words")
    print("=" * 60)

    stars = load_stars(args.stars)
    cache = ProfileCache()
    garden = Garden(GardenConfig.fast(), rng=np.random.default_rng(args.seed))

    print(f"\nPlanting {len(stars)} flower(s)...")
    now = 0.0
    for star in stars:
        selection = select_star(star, cache)
        t = selection.traits
        print(f"\n  {selection.word!r} at {star.coordinate}")
        print(f"    color={selection.color}  m={t.m:.0f}  petals={t.petal_count:.0f}  "
              f"symmetry={t.symmetry:.0f}  bands={t.ring_bands:.0f}")
        print(f"    samples={selection.profile.sample_count}  "
              f"core={selection.profile.core_radius:.3f}  halo={selection.profile.halo_radius:.3f}")

        inst = garden.plant(selection.word, selection.color, selection.traits, now=now)
        print(f"    planted at ({inst.x:.1f}, {inst.y:.1f})"
              f"{' [fallback]' if inst.placement_fallback else ''}"
              f"{' [label fallback]' if inst.label_fallback else ''}  "
              f"life={inst.life_span:.1f}s  withering={inst.withering_duration:.1f}s")
        now += 0.5

    # Re-requesting a profile is a cache hit
    select_star(stars[0], cache)
    print(f"\nProfile cache: {len(cache)} entries, {cache.build_count} builds, "
          f"{cache.hits} hits")

    print("\nLifecycle:")
    for t in (0.0, 1.0, 3.0, 40.0, 70.0, 90.0):
        states = ", ".join(
            f"{inst.word}:{hints.stage.value}({hints.vitality:.2f})"
            for inst, hints in garden.snapshot(t)
        )
        print(f"  t={t:5.1f}s  {states or '(empty)'}")

    first = select_star(stars[0], cache)
    save_flower(args.flower_out, first.profile)
    save_garden(args.out, garden, now=5.0, cache=cache)

    removed = garden.prune(now=120.0)
    print(f"\nPruned {len(removed)} flower(s); {len(garden)} left")

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
