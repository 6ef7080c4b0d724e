"""Procedural terrain synthesis package.

This package builds height, moisture and temperature fields from layered
OpenSimplex noise, classifies cells into biome colors and labels, and
stamps settlements onto the color grid.
"""

from .classification import biome_color, classify_biomes, classify_colors
from .generator import (
    generate_and_save_world,
    generate_world,
    place_settlements_on,
    synthesize,
)
from .noise import NoiseField
from .persistence import load_snapshot, save_snapshot
from .settlements import place_settlements, stamp_settlement

__all__ = [
    "NoiseField",
    "biome_color",
    "classify_biomes",
    "classify_colors",
    "generate_and_save_world",
    "generate_world",
    "load_snapshot",
    "place_settlements",
    "place_settlements_on",
    "save_snapshot",
    "stamp_settlement",
    "synthesize",
]
