"""
Record shapes exchanged with the outside world.

Inbound: labeled star coordinates ({id, word, x, y, z}) from the embedding
pipeline. Outbound and back: persisted planted flowers.

Malformed data is repaired or skipped here and logged; nothing in this
module raises on bad input. Older stores used camelCase keys and
millisecond durations (params, plantedAt, timestamp, lifeSpanMs,
witheringMs); those are converted on load.
"""

import json
import logging
import math
import uuid
from collections.abc import Mapping
from pathlib import Path
from typing import Any, NamedTuple

from pydantic import BaseModel, Field, ValidationError

from bloom.color import FALLBACK_COLOR, is_hex_color, resolve_color
from bloom.config import CUBE_SIZE, ColorConfig, GardenConfig, TraitSet
from bloom.garden import PlantedInstance
from bloom.placement import label_radius
from bloom.profile import ProfileCache, RenderProfile
from bloom.synthesizer import normalize_traits, synthesize

logger = logging.getLogger(__name__)

# Timestamps above this are taken to be epoch milliseconds
_MS_TIMESTAMP_THRESHOLD = 1e11

#
# Schemata
#


class StarRecord(BaseModel):
    """One labeled coordinate from the embedding pipeline."""

    id: int = Field(description="Producer-assigned identifier (not checked for uniqueness)")
    word: str = Field(description="Label text")
    x: float = Field(allow_inf_nan=False, description="Embedding x")
    y: float = Field(allow_inf_nan=False, description="Embedding y")
    z: float = Field(allow_inf_nan=False, description="Embedding z")

    @property
    def coordinate(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


class PlantedRecord(BaseModel):
    """Persisted shape of a planted flower."""

    id: str = Field(description="Instance identifier")
    x: float = Field(description="Plane x")
    y: float = Field(description="Plane y")
    color: str = Field(description="Base color, #rrggbb")
    word: str = Field(default="", description="Label text")
    traits: dict[str, float] = Field(description="Shape traits by name")
    planted_at: float = Field(description="Planting time, epoch seconds")
    life_span: float = Field(description="Life span in seconds")
    withering_duration: float = Field(description="Withering phase in seconds")
    label_offset: tuple[float, float] = Field(default=(0.0, 0.0), description="Label offset")
    label_radius: float = Field(default=0.0, description="Label footprint radius")
    placement_fallback: bool = Field(default=False, description="Placed by fallback")
    label_fallback: bool = Field(default=False, description="Label placed by fallback")


class StarSelection(NamedTuple):
    """What the renderer receives when a star is picked."""

    word: str
    color: str
    traits: TraitSet
    profile: RenderProfile


#
# Stars
#


def _clamp_to_cube(value: float, cube_size: float) -> float:
    half = cube_size / 2.0
    return max(-half, min(half, value))


def parse_star_records(data: Any, cube_size: float = CUBE_SIZE) -> list[StarRecord]:
    """
    Validate a list of star records.

    Entries that are not objects or fail validation are skipped with a
    warning. Coordinates are clamped into the embedding cube.
    """
    if not isinstance(data, list):
        logger.warning("Star data is not a list (%s), ignoring", type(data).__name__)
        return []

    stars = []
    for i, item in enumerate(data):
        if not isinstance(item, Mapping):
            logger.warning("Skipping star #%d: not an object", i)
            continue
        try:
            star = StarRecord.model_validate(dict(item))
        except ValidationError as exc:
            logger.warning("Skipping star #%d: %d invalid field(s)", i, exc.error_count())
            continue
        stars.append(
            star.model_copy(
                update={
                    "x": _clamp_to_cube(star.x, cube_size),
                    "y": _clamp_to_cube(star.y, cube_size),
                    "z": _clamp_to_cube(star.z, cube_size),
                }
            )
        )
    return stars


def load_star_file(path: str | Path, cube_size: float = CUBE_SIZE) -> list[StarRecord]:
    """Read and validate a JSON star file; unreadable files give []."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not read stars from %s: %s", path, exc)
        return []
    return parse_star_records(data, cube_size)


def select_star(
    star: StarRecord,
    cache: ProfileCache,
    color_config: ColorConfig = ColorConfig(),
    cube_size: float = CUBE_SIZE,
) -> StarSelection:
    """Synthesize traits and color for a star and fetch its render profile."""
    traits = synthesize(star.coordinate, cube_size)
    color = resolve_color(star.coordinate, color_config, cube_size)
    return StarSelection(
        word=star.word,
        color=color,
        traits=traits,
        profile=cache.get(traits, color),
    )


#
# Planted flowers
#


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _first_number(raw: Mapping, *keys: str) -> tuple[float | None, str | None]:
    for key in keys:
        value = _number(raw.get(key))
        if value is not None:
            return value, key
    return None, None


def instance_to_record(instance: PlantedInstance) -> dict[str, Any]:
    """Serialize a planted instance to a JSON-ready dict."""
    return PlantedRecord(
        id=instance.id,
        x=instance.x,
        y=instance.y,
        color=instance.color,
        word=instance.word,
        traits=instance.traits._asdict(),
        planted_at=instance.planted_at,
        life_span=instance.life_span,
        withering_duration=instance.withering_duration,
        label_offset=instance.label_offset,
        label_radius=instance.label_radius,
        placement_fallback=instance.placement_fallback,
        label_fallback=instance.label_fallback,
    ).model_dump(mode="json")


def sanitize_record(
    raw: Any, now: float, config: GardenConfig = GardenConfig()
) -> PlantedInstance | None:
    """
    Repair one persisted record.

    Returns None only when the entry is not an object. Otherwise every field
    is defaulted or clamped:
    - position clamped to the plane (missing -> plane centre)
    - color must be a hex color (else white)
    - traits normalized (legacy "params" accepted)
    - planted_at from planted_at/plantedAt/timestamp, ms converted; missing -> now
    - durations in seconds, or legacy *Ms keys; missing -> configured base
    """
    if not isinstance(raw, Mapping):
        logger.warning("Dropping stored flower: not an object")
        return None

    size = config.size
    record_id = raw.get("id")
    record_id = str(record_id) if record_id not in (None, "") else uuid.uuid4().hex

    x = _number(raw.get("x"))
    y = _number(raw.get("y"))
    if x is None or y is None:
        logger.debug("Flower %s has no position, centring it", record_id)
    x = min(size, max(0.0, size / 2.0 if x is None else x))
    y = min(size, max(0.0, size / 2.0 if y is None else y))

    color = raw.get("color")
    if not is_hex_color(color):
        logger.debug("Flower %s has invalid color %r", record_id, color)
        color = FALLBACK_COLOR
    color = color.lower()

    params = raw.get("traits", raw.get("params"))
    traits = normalize_traits(params if isinstance(params, Mapping) else None)

    word = raw.get("word")
    word = word if isinstance(word, str) else ""

    planted_at, _ = _first_number(raw, "planted_at", "plantedAt", "timestamp")
    if planted_at is None:
        planted_at = float(now)
    elif planted_at > _MS_TIMESTAMP_THRESHOLD:
        planted_at /= 1000.0

    life_span, key = _first_number(raw, "life_span", "lifeSpanMs")
    if key == "lifeSpanMs":
        life_span /= 1000.0
    if life_span is None or life_span <= 0:
        life_span = config.base_life_span

    withering, key = _first_number(raw, "withering_duration", "witheringMs")
    if key == "witheringMs":
        withering /= 1000.0
    if withering is None or withering < 0:
        withering = config.base_withering
    withering = min(withering, life_span)

    offset = raw.get("label_offset")
    if (
        isinstance(offset, (list, tuple))
        and len(offset) == 2
        and all(_number(v) is not None for v in offset)
    ):
        label_offset = (float(offset[0]), float(offset[1]))
    else:
        label_offset = (0.0, 0.0)

    radius = _number(raw.get("label_radius"))
    if radius is None or radius <= 0:
        radius = label_radius(word, config)

    return PlantedInstance(
        id=record_id,
        x=x,
        y=y,
        color=color,
        traits=traits,
        word=word,
        planted_at=planted_at,
        life_span=life_span,
        withering_duration=withering,
        label_offset=label_offset,
        label_radius=radius,
        placement_fallback=raw.get("placement_fallback") is True,
        label_fallback=raw.get("label_fallback") is True,
    )


def sanitize_records(
    data: Any, now: float, config: GardenConfig = GardenConfig()
) -> list[PlantedInstance]:
    """Repair a list of persisted records, dropping unusable entries."""
    if not isinstance(data, list):
        logger.warning("Stored garden is not a list (%s), starting empty", type(data).__name__)
        return []
    instances = []
    for raw in data:
        instance = sanitize_record(raw, now, config)
        if instance is not None:
            instances.append(instance)
    return instances


def load_garden_file(
    path: str | Path, now: float, config: GardenConfig = GardenConfig()
) -> list[PlantedInstance]:
    """
    Load persisted flowers from a JSON file.

    A missing, unreadable or malformed file yields an empty garden.
    """
    path = Path(path)
    if not path.exists():
        logger.debug("No stored garden at %s", path)
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Could not load garden from %s: %s", path, exc)
        return []
    return sanitize_records(data, now, config)


def save_garden_file(path: str | Path, instances: list[PlantedInstance]) -> bool:
    """Write flowers to a JSON file. Returns False (and logs) on failure."""
    try:
        payload = [instance_to_record(inst) for inst in instances]
        Path(path).write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Could not save garden to %s: %s", path, exc)
        return False
    return True
