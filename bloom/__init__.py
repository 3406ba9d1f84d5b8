"""
Bloom Flower Module

Deterministic procedural flowers from points in a semantic embedding space,
planted into a garden where they grow, wither and are removed.

Modules:
    config: Constants, trait tables and configuration
    harmonic: Harmonic signal primitive shared by shape and color
    synthesizer: Coordinate -> trait set
    geometry: Superformula rings with mandala folding
    color: Perceptual color resolver (CIELAB anchors, luminance bisection)
    profile: Render profiles and their bounded cache
    placement: Ring-search placement of flowers and labels
    lifecycle: Growth, vitality and render hints over time
    garden: Garden state manager
    records: Star input and persisted flower records
    visualization: Matplotlib previews
"""

from bloom.color import (
    ColorResolution,
    hex_to_linear,
    relative_luminance,
    resolve_color,
    resolve_color_details,
    shift_color,
)
from bloom.config import (
    CUBE_SIZE,
    TRAIT_RANGES,
    ColorConfig,
    GardenConfig,
    ShapeConfig,
    TraitSet,
)
from bloom.garden import Garden, PlantedInstance
from bloom.geometry import FlowerRings, build_rings, superformula
from bloom.harmonic import HarmonicTable, compute_signal, compute_signal_batch
from bloom.lifecycle import (
    LifeStage,
    RenderHints,
    draw_life_span,
    growth,
    is_expired,
    render_hints,
    stage,
    vitality,
)
from bloom.placement import LabelPlacement, Placement, place_flower, place_label
from bloom.profile import FlowerPalette, ProfileCache, RenderProfile
from bloom.records import (
    StarRecord,
    StarSelection,
    instance_to_record,
    load_garden_file,
    parse_star_records,
    sanitize_record,
    sanitize_records,
    save_garden_file,
    select_star,
)
from bloom.synthesizer import normalize_traits, synthesize, synthesize_batch
from bloom.visualization import render_flower, render_garden, save_flower, save_garden

__all__ = [
    # Config
    "CUBE_SIZE",
    "TRAIT_RANGES",
    "ColorConfig",
    "GardenConfig",
    "ShapeConfig",
    "TraitSet",
    # Signals and traits
    "HarmonicTable",
    "compute_signal",
    "compute_signal_batch",
    "normalize_traits",
    "synthesize",
    "synthesize_batch",
    # Geometry
    "FlowerRings",
    "build_rings",
    "superformula",
    # Color
    "ColorResolution",
    "hex_to_linear",
    "relative_luminance",
    "resolve_color",
    "resolve_color_details",
    "shift_color",
    # Profiles
    "FlowerPalette",
    "ProfileCache",
    "RenderProfile",
    # Placement and lifecycle
    "LabelPlacement",
    "Placement",
    "place_flower",
    "place_label",
    "LifeStage",
    "RenderHints",
    "draw_life_span",
    "growth",
    "is_expired",
    "render_hints",
    "stage",
    "vitality",
    # Garden
    "Garden",
    "PlantedInstance",
    # Records
    "StarRecord",
    "StarSelection",
    "instance_to_record",
    "load_garden_file",
    "parse_star_records",
    "sanitize_record",
    "sanitize_records",
    "save_garden_file",
    "select_star",
    # Rendering
    "render_flower",
    "render_garden",
    "save_flower",
    "save_garden",
]
