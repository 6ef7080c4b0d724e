"""Biome classification: height bands to colors, height and moisture to labels."""

import bisect
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from ..biomes import Biome
from ..config import ClassificationConfig
from ..exceptions import ConfigurationError
from ..types import Color

DEEP_WATER: Color = (10, 30, 50)
SHALLOW_WATER: Color = (20, 50, 70)
WET_BEACH: Color = (194, 178, 128)
DRY_BEACH: Color = (210, 185, 140)
DRY_GRASS: Color = (30, 70, 30)
LUSH_GRASS: Color = (50, 100, 30)
FOREST: Color = (80, 120, 60)
ROCK_LOW: Color = (100, 100, 100)
ROCK_HIGH: Color = (160, 160, 160)
SNOW: Color = (240, 240, 240)

DENSE_FOREST: Color = (30, 70, 30)
DRIER_FOREST: Color = (40, 70, 30)
MIXED_FOREST: Color = (60, 90, 40)

# Fields are float32; every threshold is compared at that precision
DEEP_WATER_MAX = np.float32(0.1)
PLAINS_MAX = np.float32(0.35)
FOREST_MAX = np.float32(0.6)
HILLS_MAX = np.float32(0.75)
LUSH_MOISTURE = np.float32(0.75)
DENSE_MOISTURE = np.float32(0.65)
DRY_MOISTURE = np.float32(0.4)


@dataclass(frozen=True)
class BiomeBand:
    """Half-open height range [lower, upper) mapped to a color ramp.

    The blend factor is ((h - ramp_start) / ramp_width) * blend_strength,
    clamped to [0, 1] after the multiplication. Constant bands use the
    same color at both ends.
    """

    name: str
    lower: float
    upper: float
    start_color: Color
    end_color: Color
    ramp_start: float = 0.0
    ramp_width: float = 1.0
    blend_strength: float = 1.0
    moisture_tinted: bool = False

    def blend_factor(self, height: float) -> float:
        factor = (height - self.ramp_start) / self.ramp_width * self.blend_strength
        return min(max(factor, 0.0), 1.0)

    def color(self, height: float) -> Color:
        factor = self.blend_factor(height)
        return (
            interpolate_channel(self.start_color[0], self.end_color[0], factor),
            interpolate_channel(self.start_color[1], self.end_color[1], factor),
            interpolate_channel(self.start_color[2], self.end_color[2], factor),
        )


def interpolate_channel(start: int, end: int, factor: float) -> int:
    """Linear interpolation of one channel, truncated and kept in 0..255."""
    value = int(start + (end - start) * factor)
    return min(max(value, 0), 255)


def build_bands(config: ClassificationConfig | None = None) -> list[BiomeBand]:
    """Build the ordered band table for a classification config."""
    config = config or ClassificationConfig()
    strength = config.blend_strength
    t = config.transition_range

    # The grass ramps are capped by the start of the mountain bands at 0.70
    dry_upper = min(0.5 + t, 0.70)
    lush_upper = min(0.60 + t, 0.70)

    bands = [
        BiomeBand(
            "water", float("-inf"), 0.35, DEEP_WATER, SHALLOW_WATER,
            ramp_start=0.25, ramp_width=0.35 - 0.25,
        ),
        BiomeBand("wet_beach", 0.35, 0.38, WET_BEACH, WET_BEACH),
        BiomeBand("dry_beach", 0.38, 0.40, DRY_BEACH, DRY_BEACH),
        BiomeBand(
            "dry_grass", 0.40, dry_upper, DRY_GRASS, LUSH_GRASS,
            ramp_start=0.5 - t, ramp_width=2 * t, blend_strength=strength,
        ),
        BiomeBand(
            "lush_grass", dry_upper, lush_upper, LUSH_GRASS, FOREST,
            ramp_start=0.60 - t, ramp_width=2 * t, blend_strength=strength,
        ),
        BiomeBand("forest", lush_upper, 0.70, FOREST, FOREST, moisture_tinted=True),
        BiomeBand(
            "forest_rock", 0.70, 0.85, FOREST, ROCK_LOW,
            ramp_start=0.70, ramp_width=0.85 - 0.70, blend_strength=strength,
        ),
        BiomeBand(
            "rock", 0.85, 0.95, ROCK_LOW, ROCK_HIGH,
            ramp_start=0.85, ramp_width=0.95 - 0.85, blend_strength=strength,
        ),
        BiomeBand(
            "snow", 0.95, float("inf"), ROCK_HIGH, SNOW,
            ramp_start=0.95, ramp_width=1.0 - 0.95, blend_strength=strength,
        ),
    ]
    validate_bands(bands)
    return bands


def validate_bands(bands: Sequence[BiomeBand]) -> None:
    """Check that bands are contiguous, increasing and cover [0, 1].

    Raises:
        ConfigurationError: If the table has gaps, overlaps or empty bands.
    """
    if not bands:
        raise ConfigurationError("Band table is empty")
    if bands[0].lower > 0.0 or bands[-1].upper <= 1.0:
        raise ConfigurationError("Band table must cover heights 0 to 1")
    for prev, band in zip(bands, bands[1:]):
        if band.lower != prev.upper:
            raise ConfigurationError(
                f"Band {band.name} starts at {band.lower}, expected {prev.upper}"
            )
    for band in bands:
        if not band.lower < band.upper:
            raise ConfigurationError(f"Band {band.name} is empty")
        if band.ramp_width <= 0:
            raise ConfigurationError(f"Band {band.name} has no ramp width")


def forest_color(moisture: float) -> Color:
    """Forest tint by moisture: dense when wet, drier when dry, else mixed."""
    m = np.float32(moisture)
    if m > DENSE_MOISTURE:
        return DENSE_FOREST
    if m < DRY_MOISTURE:
        return DRIER_FOREST
    return MIXED_FOREST


def band_uppers(bands: Sequence[BiomeBand]) -> NDArray[np.float32]:
    """Upper bounds of the band table at field precision."""
    return np.array([band.upper for band in bands], dtype=np.float32)


def find_band(bands: Sequence[BiomeBand], height: float) -> BiomeBand:
    """Return the band containing height; an upper bound belongs to the next band.

    The lookup is done in float32, so a float32 cell stored at a threshold
    lands in the band above it.
    """
    uppers = list(band_uppers(bands))
    index = min(bisect.bisect_right(uppers, np.float32(height)), len(bands) - 1)
    return bands[index]


def biome_color(
    height: float,
    moisture: float = 0.5,
    temperature: float = 0.5,
    bands: Sequence[BiomeBand] | None = None,
    config: ClassificationConfig | None = None,
) -> Color:
    """Classify a single cell into an RGB color.

    Temperature is accepted for future rules but does not affect any band.
    Height is rounded to float32 first, matching the stored fields.
    """
    config = config or ClassificationConfig()
    bands = bands if bands is not None else build_bands(config)
    h = float(np.float32(height))
    band = find_band(bands, h)
    if band.moisture_tinted and config.moisture_tint:
        return forest_color(moisture)
    return band.color(h)


def classify_colors(
    height: NDArray[np.floating],
    moisture: NDArray[np.floating],
    temperature: NDArray[np.floating],
    config: ClassificationConfig | None = None,
    bands: Sequence[BiomeBand] | None = None,
) -> NDArray[np.uint8]:
    """Classify every cell into an RGB color.

    Gives the same colors as biome_color applied cell by cell.

    Args:
        height: Height field.
        moisture: Moisture field, same shape.
        temperature: Temperature field, same shape (unused by current bands).
        config: Classification configuration.
        bands: Optional prebuilt band table.

    Returns:
        Array of shape height.shape + (3,) with dtype uint8.
    """
    config = config or ClassificationConfig()
    bands = bands if bands is not None else build_bands(config)

    h32 = np.asarray(height, dtype=np.float32)
    index = np.minimum(
        np.searchsorted(band_uppers(bands), h32, side="right"), len(bands) - 1
    )
    h = h32.astype(np.float64)

    ramp_start = np.array([band.ramp_start for band in bands])[index]
    ramp_width = np.array([band.ramp_width for band in bands])[index]
    strength = np.array([band.blend_strength for band in bands])[index]
    start = np.array([band.start_color for band in bands], dtype=np.float64)[index]
    end = np.array([band.end_color for band in bands], dtype=np.float64)[index]

    factor = np.clip((h - ramp_start) / ramp_width * strength, 0.0, 1.0)
    colors = np.trunc(start + (end - start) * factor[..., np.newaxis])
    colors = np.clip(colors, 0, 255).astype(np.uint8)

    if config.moisture_tint:
        tinted = np.array([band.moisture_tinted for band in bands])[index]
        m = np.asarray(moisture, dtype=np.float32)
        colors[tinted & (m > DENSE_MOISTURE)] = DENSE_FOREST
        colors[tinted & (m < DRY_MOISTURE)] = DRIER_FOREST
        colors[tinted & (m >= DRY_MOISTURE) & (m <= DENSE_MOISTURE)] = MIXED_FOREST

    return colors


def classify_biome(height: float, moisture: float) -> Biome:
    """Label a single cell by height, with moisture splitting plains and forest."""
    h, m = np.float32(height), np.float32(moisture)
    if h < DEEP_WATER_MAX:
        return Biome.DEEP_WATER
    if h < PLAINS_MAX:
        return Biome.LUSH_PLAINS if m > LUSH_MOISTURE else Biome.DRY_PLAINS
    if h < FOREST_MAX:
        return Biome.DENSE_FOREST if m > DENSE_MOISTURE else Biome.DRIER_FOREST
    if h < HILLS_MAX:
        return Biome.HILLS
    return Biome.MOUNTAINS


def classify_biomes(
    height: NDArray[np.floating],
    moisture: NDArray[np.floating],
) -> NDArray[np.uint8]:
    """Label every cell, returning a grid of Biome codes."""
    h = np.asarray(height, dtype=np.float32)
    m = np.asarray(moisture, dtype=np.float32)
    conditions = [
        h < DEEP_WATER_MAX,
        (h < PLAINS_MAX) & (m > LUSH_MOISTURE),
        h < PLAINS_MAX,
        (h < FOREST_MAX) & (m > DENSE_MOISTURE),
        h < FOREST_MAX,
        h < HILLS_MAX,
    ]
    choices = [
        Biome.DEEP_WATER.code,
        Biome.LUSH_PLAINS.code,
        Biome.DRY_PLAINS.code,
        Biome.DENSE_FOREST.code,
        Biome.DRIER_FOREST.code,
        Biome.HILLS.code,
    ]
    return np.select(conditions, choices, default=Biome.MOUNTAINS.code).astype(np.uint8)
